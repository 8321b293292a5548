"""
Instruction Templates - Discharge Letter Prompts

This module holds the fixed system instruction template and the small,
pure functions that produce each conditional instruction block. Every
function is keyed by explicit inputs and returns text; none of them
branch inside a larger string builder.

Template Functions:
    language_label()            → "GERMAN (Deutsch)" / "ENGLISH"
    validation_instruction()    → cross-check vs. trust-the-documents block
    audience_instruction()      → bracket explanations vs. clinical terms
    standard_course_directive() → qualitative course narrative directive
    clinical_course_text()      → course text with directive / placeholder
    field_or_marker()           → "Not provided" for blank clinical fields
    signatory_block()           → name + position with translation request

Author: Shubham Singh
Date: October 2026
"""

from discharge_letter_generation.core.constants import (
    CLINICAL_COURSE_PLACEHOLDER,
    EMPTY_DEMOGRAPHIC,
    NOT_PROVIDED,
)
from discharge_letter_generation.core.enums import Audience, TargetLanguage
from discharge_letter_generation.core.models import PatientRecord


# =============================================================================
# STAGE 1: SYSTEM INSTRUCTION TEMPLATE
# =============================================================================
# Placeholders: {{language}}, {{audience}}, {{dischargeDate}}.
# Every occurrence is substituted by PromptBuilder.substitute_placeholders().

SYSTEM_INSTRUCTION = """You are an AI assistant that generates professional medical discharge letters (Arztbriefe).

MANDATORY LETTER HEAD:
You MUST start every letter exactly with this header (regardless of language):

Kaggle University Clinic
AI-Street
99999 Surgery

Discharge Date: {{dischargeDate}}

---

STRICT FORMATTING RULES (NO MARKDOWN):
- DO NOT use Markdown syntax (no asterisks, no hashes, no italics).
- HEADINGS: Write section headings in UPPERCASE followed by a colon or newline.
- LISTS: Use simple hyphens (-) for bullet points.
- NO BOLDING.

LANGUAGE ENFORCEMENT (CRITICAL):
- OUTPUT LANGUAGE: {{language}}
- You MUST write the ENTIRE letter in {{language}}.
- If the input is German but target is English, you MUST TRANSLATE everything.
- If the input is English but target is German, you MUST TRANSLATE everything.
- SIGNATORY TITLE: You MUST translate the Doctor's Position to match the target language (e.g. "Facharzt" -> "Specialist", "Oberarzt" -> "Senior Physician").

AUDIENCE ADAPTATION rules (current audience: {{audience}}):
1. If Audience = "patient" (Laienverständlich):
   - You MUST explain every medical term or complex concept immediately in brackets.
   - Example: "Appendektomie (Entfernung des Blinddarms)" or "Hypertension (high blood pressure)".
   - Use simple sentence structures.
2. If Audience = "doctor":
   - Use standard medical terminology without explanations.

DATA HANDLING & LOGIC RULES:

1. NO HALLUCINATIONS / NO INVENTED NUMBERS:
   - NEVER invent specific lab values, dates, or vital signs if they are not in the input.
   - IF DATA IS MISSING: Use qualitative, general formulations.
     - Bad: "CRP was 5.2 mg/dl." (If 5.2 was not provided)
     - Good: "Inflammatory markers were within normal limits." or "Lab values showed no significant abnormalities."
   - If you cannot verify a fact, omit it or state "Not documented".

2. CHRONOLOGICAL SEPARATION:
   - History (Anamnesis): Use the "Previous Letter" (Vorbrief).
   - Clinical Course (Verlauf): events of the CURRENT hospitalization ONLY.

3. LAB VALUES:
   - Summarize trends. Do not list raw data unless specifically asked.

4. MEDICATION:
   - Separate Admission vs. Discharge Medication.
   - Interaction Check: Mark severe interactions in the Discharge Medication list.

5. RECOMMENDATIONS:
   - ONLY include recommendations relevant to the CURRENT stay.

6. DOCUMENT VALIDATION (SAFETY CHECK):
   - IF Patient Demographics are provided in the input form: COMPARE Name/DOB in documents vs. Input. If they clearly contradict, IGNORE the document.
   - IF Patient Demographics are NOT provided (empty): TRUST THE DOCUMENTS and extract patient details from them.

STRUCTURE:
[No Heading] Salutation / Greeting
DIAGNOSEN / DIAGNOSES
ANAMNESE / HISTORY
AUFNAHMEBEFUND / ADMISSION FINDINGS
OPERATION / PROCEDURES
POSTOPERATIVER VERLAUF / CLINICAL COURSE
ENTLASSUNGSSTATUS / STATUS AT DISCHARGE
VORMEDIKATION / ADMISSION MEDICATION
MEDIKATION BEI ENTLASSUNG / DISCHARGE MEDICATION
EMPFEHLUNGEN / RECOMMENDATIONS
[Closing Sentence]
[Signatory Name]
[Signatory Position (Translated)]
DISCLAIMER

DISCLAIMER TEXT:
- DE: "Hinweis: Dieser Arztbrief wurde mit Unterstützung eines KI-gestützten Dokumentationssystems erstellt und ersetzt nicht die ärztliche Beurteilung."
- EN: "Note: This discharge letter was generated with the support of an AI-based documentation system and does not replace medical judgment."
"""


# =============================================================================
# STAGE 2: INSTRUCTION BLOCKS
# =============================================================================

CROSS_CHECK_HEADING = "CRITICAL VALIDATION:"
TRUST_DOCUMENTS_HEADING = "VALIDATION: Patient demographics were not provided"

PATIENT_AUDIENCE_INSTRUCTION = "If PATIENT: Explain ALL technical terms in brackets."
DOCTOR_AUDIENCE_INSTRUCTION = "Use standard medical terminology without explanations."

STANDARD_COURSE_HEADING = "[INSTRUCTION]: The user requested a STANDARD CLINICAL COURSE"


def language_label(language: TargetLanguage) -> str:
    """Human-readable label of the target language."""
    return language.label


def validation_instruction(patient: PatientRecord) -> str:
    """
    Choose the document validation block.

    With any identity field filled, the model must cross-check every
    document against the literal form values and ignore contradicting
    documents. Without identity, it extracts the identity from the documents.
    """
    if patient.has_identity:
        return (
            f"{CROSS_CHECK_HEADING}\n"
            f"- You MUST check the Patient Name and Date of Birth in each document.\n"
            f'- COMPARE with Form Data: "{patient.full_name}", DOB: {patient.date_of_birth}.\n'
            f"- IF a document contains a Name or DOB that CLEARLY CONTRADICTS the Form Data, "
            f"IGNORE that document.\n"
            f"- IF it matches OR is ambiguous/missing in the doc, USE IT."
        )
    return (
        f"{TRUST_DOCUMENTS_HEADING} in the input form. "
        f"TRUST THE DOCUMENTS and extract patient details from them."
    )


def audience_instruction(audience: Audience) -> str:
    """Vocabulary rule for the chosen audience."""
    if audience is Audience.PATIENT:
        return PATIENT_AUDIENCE_INSTRUCTION
    return DOCTOR_AUDIENCE_INSTRUCTION


def standard_course_directive(target_label: str) -> str:
    """
    Directive requesting a qualitative, complication-free course narrative.

    Contains no numbers of its own; the narrative must be derived from the
    diagnosis and operation fields already supplied.
    """
    return (
        f"{STANDARD_COURSE_HEADING} (complications-free).\n"
        f"- Write this section in {target_label}.\n"
        f'- Use QUALITATIVE descriptions (e.g. "pain was well controlled", '
        f'"wound healing primary", "mobilization successful").\n'
        f"- DO NOT invent specific numbers, dates, or lab values.\n"
        f"- Fill in the narrative based on the Diagnosis and Operation provided."
    )


def clinical_course_text(clinical_course: str, use_standard_course: bool, target_label: str) -> str:
    """
    Clinical course section content.

    Standard course requested: existing text (if any) followed by the
    directive. Otherwise: the text, or a summarize-from-attachments
    placeholder when it is blank.
    """
    course = (clinical_course or "").strip()
    if use_standard_course:
        directive = standard_course_directive(target_label)
        return f"{course}\n\n{directive}" if course else directive
    return course or CLINICAL_COURSE_PLACEHOLDER


def field_or_marker(value: str) -> str:
    """Clinical field value, or the explicit "Not provided" marker."""
    value = (value or "").strip()
    return value or NOT_PROVIDED


def demographic_or_marker(value: str) -> str:
    """Demographic field value, or "[Empty]"."""
    value = (value or "").strip()
    return value or EMPTY_DEMOGRAPHIC


def signatory_block(doctor_name: str, doctor_position: str, target_label: str) -> str:
    """Signatory lines; the position is translated by the model, not here."""
    return (
        f"Doctor: {field_or_marker(doctor_name)}\n"
        f"Position (Input): {(doctor_position or '').strip()} "
        f"(Please translate this to {target_label})"
    )
