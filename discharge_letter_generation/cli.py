"""
Discharge Letter CLI

Command-line front end for the discharge letter pipeline. Fills a
LetterSession from a JSON form file and/or flags, uploads attachments,
and prints (or writes) the generated letter.

Usage:
    discharge-letter --form form.json --attach opreport=op.pdf --language en
    discharge-letter --first-name Anna --last-name Muster --diagnosis "..." --dry-run

Exit Codes:
    0 → letter generated (or dry run printed)
    1 → generation or configuration error
    2 → invalid input (form file, flags, attachments)

Author: Shubham Singh
Date: October 2026
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger

from discharge_letter_generation.core.constants import LOG_FORMAT
from discharge_letter_generation.core.enums import AttachmentCategory, DoctorPosition
from discharge_letter_generation.core.exceptions import (
    AttachmentError,
    ConfigurationError,
    DischargeLetterError,
)
from discharge_letter_generation.core.models import ClinicalRecord, GenerationConfig, PatientRecord
from discharge_letter_generation.pipeline import DischargeLetterPipeline
from discharge_letter_generation.session import LetterSession

EXIT_OK = 0
EXIT_GENERATION_ERROR = 1
EXIT_INPUT_ERROR = 2

PATIENT_FLAGS = ("first_name", "last_name", "date_of_birth", "admission_date", "discharge_date")
CLINICAL_FLAGS = (
    "diagnosis",
    "anamnesis",
    "findings",
    "operation",
    "clinical_course",
    "medication",
    "recommendations",
)

EPILOG = """
Examples:
  Dry run from a form file (no API key needed):
    discharge-letter --form form.json --dry-run

  English letter for the patient, with an OP report and a post-op image:
    discharge-letter --form form.json --language en --audience patient \\
        --attach opreport=op_bericht.docx --attach postop=wound.jpg --output letter.txt

Attachment categories:
  opreport, letter, lab, medplan, microbio, preop (image), postop (image)

Requirements:
  - GEMINI_API_KEY (or OPENAI_API_KEY with LLM_PROVIDER=openai) in the
    environment or a .env file
"""


# =============================================================================
# STAGE 1: ARGUMENT PARSING
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="discharge-letter",
        description="Generate a hospital discharge letter from form data and attachments.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )

    # ---- 1.1 Form input ----
    parser.add_argument("--form", type=Path, help="JSON file with patient/clinical/config objects")

    patient = parser.add_argument_group("patient")
    for name in PATIENT_FLAGS:
        patient.add_argument(f"--{name.replace('_', '-')}", dest=name)

    clinical = parser.add_argument_group("clinical")
    for name in CLINICAL_FLAGS:
        clinical.add_argument(f"--{name.replace('_', '-')}", dest=name)

    # ---- 1.2 Generation options ----
    options = parser.add_argument_group("generation")
    options.add_argument("--language", choices=["de", "en"])
    options.add_argument("--audience", choices=["doctor", "patient"])
    options.add_argument(
        "--standard-course",
        action="store_true",
        default=None,
        help="Narrate an uncomplicated standard clinical course",
    )
    options.add_argument("--doctor-name")
    options.add_argument(
        "--doctor-position", help=f"Free text, e.g. {', '.join(DoctorPosition.suggestions())}"
    )

    # ---- 1.3 Attachments and output ----
    parser.add_argument(
        "--attach",
        action="append",
        default=[],
        metavar="CATEGORY=PATH",
        help="Attach a file; repeatable, the last one wins per category",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the composed request instead of calling the model",
    )
    parser.add_argument("--output", type=Path, help="Write the letter to this file")
    parser.add_argument("--env-file", help="Path to .env file")
    parser.add_argument("--log-level", help="Log level (default from LOG_LEVEL or INFO)")
    parser.add_argument("--log-file", type=Path, help="Also write logs to this file")
    return parser


def parse_attachments(values: List[str]) -> Dict[AttachmentCategory, Path]:
    """
    Parse repeated CATEGORY=PATH values.

    Raises:
        ValueError: On a malformed value or unknown category
    """
    attachments: Dict[AttachmentCategory, Path] = {}
    for value in values:
        category_name, sep, path = value.partition("=")
        if not sep or not path:
            raise ValueError(f"Expected CATEGORY=PATH, got: {value}")
        category = AttachmentCategory.from_string(category_name.strip())
        # Last one wins, and moves to the end like an upload would
        attachments.pop(category, None)
        attachments[category] = Path(path)
    return attachments


# =============================================================================
# STAGE 2: FORM ASSEMBLY
# =============================================================================


def load_form(path: Optional[Path]) -> dict:
    """Read the JSON form file; a missing path means an empty form."""
    if path is None:
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError("Form file must contain a JSON object")
    return data


def fill_session(session: LetterSession, form: dict, args: argparse.Namespace) -> None:
    """Apply form file values first, then flags on top."""
    if form.get("patient"):
        session.update_patient(**PatientRecord.from_dict(form["patient"]).to_dict())
    if form.get("clinical"):
        session.update_clinical(**ClinicalRecord.from_dict(form["clinical"]).to_dict())
    if form.get("config"):
        session.update_config(**_config_changes(form["config"]))

    patient_flags = {k: getattr(args, k) for k in PATIENT_FLAGS if getattr(args, k) is not None}
    clinical_flags = {k: getattr(args, k) for k in CLINICAL_FLAGS if getattr(args, k) is not None}
    session.update_patient(**patient_flags)
    session.update_clinical(**clinical_flags)

    config_flags = {
        "target_language": args.language,
        "audience": args.audience,
        "use_standard_course": args.standard_course,
        "doctor_name": args.doctor_name,
        "doctor_position": args.doctor_position,
    }
    session.update_config(**{k: v for k, v in config_flags.items() if v is not None})


def _config_changes(data: dict) -> dict:
    # Only keys actually present in the file override session defaults
    parsed = GenerationConfig.from_dict(data).to_dict()
    present = {
        "target_language": ("target_language", "language"),
        "audience": ("audience",),
        "use_standard_course": ("use_standard_course", "useStandardCourse"),
        "doctor_name": ("doctor_name", "doctorName"),
        "doctor_position": ("doctor_position", "doctorPosition"),
    }
    return {
        field: parsed[field]
        for field, keys in present.items()
        if any(key in data for key in keys)
    }


# =============================================================================
# STAGE 3: MAIN
# =============================================================================


def configure_logging(level: str, log_file: Optional[Path] = None) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)
    if log_file:
        logger.add(log_file, level="DEBUG", format=LOG_FORMAT, rotation="10 MB")


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI; returns the process exit code."""
    args = build_parser().parse_args(argv)

    # ---- 3.1 Configuration ----
    try:
        pipeline = DischargeLetterPipeline.from_environment(env_file=args.env_file)
    except ConfigurationError as e:
        print(f"[FAIL] {e}", file=sys.stderr)
        return EXIT_GENERATION_ERROR
    configure_logging((args.log_level or pipeline.config.log_level).upper(), args.log_file)

    # ---- 3.2 Form input ----
    session = LetterSession(pipeline)
    try:
        fill_session(session, load_form(args.form), args)
        attachments = parse_attachments(args.attach)
        if attachments:
            asyncio.run(session.upload_files(attachments))
    except (ValueError, TypeError, OSError, AttachmentError) as e:
        print(f"[FAIL] Invalid input: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    # ---- 3.3 Dry run ----
    if args.dry_run:
        try:
            request = pipeline.compose_request(
                session.patient, session.clinical, session.config, session.attachments
            )
        except DischargeLetterError as e:
            print(f"[FAIL] {e}", file=sys.stderr)
            return EXIT_GENERATION_ERROR
        print("=" * 80)
        print("SYSTEM INSTRUCTION")
        print("=" * 80)
        print(request.system_instruction)
        print("=" * 80)
        print("PROMPT")
        print("=" * 80)
        print(request.full_text)
        print(f"\n[binary parts: {request.binary_part_count}]")
        return EXIT_OK

    # ---- 3.4 Generate ----
    letter = asyncio.run(session.generate())
    if letter is None:
        print(f"[FAIL] {session.error}", file=sys.stderr)
        return EXIT_GENERATION_ERROR

    if args.output:
        args.output.write_text(letter, encoding="utf-8")
        print(f"[OK] Letter written to: {args.output}", file=sys.stderr)
    else:
        print(letter)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
