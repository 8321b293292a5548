"""
Prompt Builder - Discharge Letter Requests

This module composes the complete request sent to the model from the form
state and the normalized attachment segments. Requests are designed to:
    1. Produce the letter in the chosen language for the chosen audience
    2. Never receive ambiguous blank context ("Not provided" instead)
    3. Cross-check documents against form identity when it is given

Why Separate Prompt Builder:
    1. Single Responsibility: prompt construction separate from the API call
    2. Testability: no network I/O, fully deterministic given its inputs
    3. Maintainability: template text lives in templates.py

Pipeline Position:
    Session → AttachmentNormalizer → [PromptBuilder] → LLM Client
                                      ^^^^^^^^^^^^^^^
                                      You are here

Author: Shubham Singh
Date: October 2026
"""

from dataclasses import replace
from typing import Iterable, Optional

from discharge_letter_generation.core.constants import (
    AUDIENCE_PLACEHOLDER,
    DISCHARGE_DATE_PLACEHOLDER,
    LANGUAGE_PLACEHOLDER,
    MISSING_DISCHARGE_DATE,
    PLACEHOLDER_PATTERN,
)
from discharge_letter_generation.core.enums import Audience, TargetLanguage
from discharge_letter_generation.core.exceptions import PromptError
from discharge_letter_generation.core.models import (
    ClinicalRecord,
    ComposedRequest,
    ContentPart,
    GenerationConfig,
    PatientRecord,
)
from discharge_letter_generation.generation.templates import (
    SYSTEM_INSTRUCTION,
    audience_instruction,
    clinical_course_text,
    demographic_or_marker,
    field_or_marker,
    language_label,
    signatory_block,
    validation_instruction,
)


# =============================================================================
# STAGE 1: PROMPT TEMPLATE
# =============================================================================
# The leading text part of every request. Attachment segments follow it.

LETTER_PROMPT_TEMPLATE = """
PLEASE GENERATE A DISCHARGE LETTER BASED ON THE FOLLOWING INFORMATION.

*** CRITICAL INSTRUCTIONS ***
1. LANGUAGE: The output must be strictly in: {language}.
   - If input is German, TRANSLATE to {language}.
   - If input is English, TRANSLATE to {language}.
2. AUDIENCE: Target audience is: {audience}.
   - {audience_instruction}
3. DATA FIDELITY:
   - DO NOT INVENT NUMBERS. Use "General/Qualitative Formulations" if data is missing.
   - Example: "Lab values showed no significant abnormalities" instead of inventing "CRP 3.0".
4. SIGNATORY:
   - Translate the Doctor's Position to {language} (e.g. "Facharzt" -> "Specialist", "Oberarzt" -> "Senior Physician").

{validation_instruction}

DATA MERGING INSTRUCTIONS:
1. Comorbidities: Extract pre-existing conditions from "Previous Letters" (Vorbriefe).
2. Clinical Course: STRICTLY SEPARATE current events from past history. Only describe the current stay in "Verlauf".
3. Labs: Integrate lab trends into the "Verlauf".
4. Medication: Separate "Admission Medication" (from history) and "Discharge Medication".
5. Recommendations: ONLY for the current stay.

--- SIGNATORY ---
{signatory}

--- PATIENT DEMOGRAPHICS (Form Input) ---
First Name: {first_name}
Last Name: {last_name}
Birthdate: {date_of_birth}
Admission Date: {admission_date}
Discharge Date: {discharge_date}

--- CLINICAL INFORMATION ---
Diagnosis:
{diagnosis}

Anamnesis (History):
{anamnesis}

Findings (Physical, Lab, etc.):
{findings}

Operation / Procedures:
{operation}

Clinical Course:
{clinical_course}

Medication:
{medication}

Recommendations / Follow-up:
{recommendations}

--- ATTACHED DOCUMENTS & IMAGES ---
The following files are attached. Please extract relevant information from VALID documents to supplement the text fields above.
"""


# =============================================================================
# STAGE 2: PLACEHOLDER SUBSTITUTION
# =============================================================================


def contains_placeholders(text: str) -> bool:
    """Whether any template placeholder token remains in the text."""
    return PLACEHOLDER_PATTERN.search(text) is not None


def _strip_placeholders(value: str) -> str:
    # Repeat: removing one token can join its neighbours into a new one
    while PLACEHOLDER_PATTERN.search(value):
        value = PLACEHOLDER_PATTERN.sub("", value)
    return value


def _strip_part(part: ContentPart) -> ContentPart:
    # Word text and file names are user content too
    if part.is_text:
        return replace(part, text=_strip_placeholders(part.text))
    if part.file_name:
        return replace(part, file_name=_strip_placeholders(part.file_name))
    return part


# =============================================================================
# STAGE 3: PROMPT BUILDER CLASS
# =============================================================================


class PromptBuilder:
    """
    Composes the system instruction and ordered content parts.

    What it does:
        Takes patient demographics, clinical fields, generation options and
        normalized attachment segments, and produces a ComposedRequest.

    Why it exists:
        1. Centralizes prompt logic for maintainability
        2. Enables testing prompts without making LLM calls
        3. Keeps conditional instruction blocks in small template functions

    Example:
        >>> builder = PromptBuilder()
        >>> request = builder.compose(patient, clinical, GenerationConfig(), parts)
        >>> request.parts[0].text  # structured prompt
    """

    def __init__(self, system_template: Optional[str] = None):
        """
        Args:
            system_template: Override for the system instruction template
        """
        self._system_template = system_template or SYSTEM_INSTRUCTION

    # =========================================================================
    # STAGE 3.1: SYSTEM INSTRUCTION
    # =========================================================================

    @staticmethod
    def substitute_placeholders(
        template: str, language: TargetLanguage, audience: Audience, discharge_date: str
    ) -> str:
        """
        Replace every occurrence of each placeholder token.

        Placeholder tokens are removed from the substituted values first, so
        no token can survive substitution and re-running it is a no-op.

        Args:
            template: Text containing {{language}}, {{audience}}, {{dischargeDate}}
            language: Target language (substituted as its label)
            audience: Audience (substituted as its value)
            discharge_date: Date string; blank becomes a fill-in line

        Returns:
            Text without placeholder tokens
        """
        date_value = _strip_placeholders((discharge_date or "").strip()) or MISSING_DISCHARGE_DATE

        text = template.replace(LANGUAGE_PLACEHOLDER, language_label(language))
        text = text.replace(AUDIENCE_PLACEHOLDER, audience.value)
        text = text.replace(DISCHARGE_DATE_PLACEHOLDER, date_value)
        return text

    def build_system_instruction(self, patient: PatientRecord, config: GenerationConfig) -> str:
        """
        Substitute the system instruction template.

        Raises:
            PromptError: If a placeholder token survived substitution
        """
        instruction = self.substitute_placeholders(
            self._system_template,
            language=config.target_language,
            audience=config.audience,
            discharge_date=patient.discharge_date,
        )
        if contains_placeholders(instruction):
            raise PromptError(
                "Unresolved placeholder in system instruction",
                context={"placeholder": PLACEHOLDER_PATTERN.search(instruction).group(0)},
            )
        return instruction

    # =========================================================================
    # STAGE 3.2: STRUCTURED PROMPT
    # =========================================================================

    def build_prompt_text(
        self, patient: PatientRecord, clinical: ClinicalRecord, config: GenerationConfig
    ) -> str:
        """
        Build the structured prompt: instructions, demographics, clinical fields.

        STAGE 3.2.1: Resolve language label and conditional blocks
        STAGE 3.2.2: Fill the prompt template

        The template has no placeholder tokens of its own; any token typed
        into a form field is removed from the result.
        """
        # =====================================================================
        # STAGE 3.2.1: CONDITIONAL BLOCKS
        # =====================================================================
        target_label = language_label(config.target_language)
        course = clinical_course_text(
            clinical.clinical_course, config.use_standard_course, target_label
        )

        # =====================================================================
        # STAGE 3.2.2: FILL TEMPLATE
        # =====================================================================
        prompt = LETTER_PROMPT_TEMPLATE.format(
            language=target_label,
            audience=config.audience.value.upper(),
            audience_instruction=audience_instruction(config.audience),
            validation_instruction=validation_instruction(patient),
            signatory=signatory_block(config.doctor_name, config.doctor_position, target_label),
            first_name=demographic_or_marker(patient.first_name),
            last_name=demographic_or_marker(patient.last_name),
            date_of_birth=demographic_or_marker(patient.date_of_birth),
            admission_date=demographic_or_marker(patient.admission_date),
            discharge_date=demographic_or_marker(patient.discharge_date),
            diagnosis=field_or_marker(clinical.diagnosis),
            anamnesis=field_or_marker(clinical.anamnesis),
            findings=field_or_marker(clinical.findings),
            operation=field_or_marker(clinical.operation),
            clinical_course=course,
            medication=field_or_marker(clinical.medication),
            recommendations=field_or_marker(clinical.recommendations),
        )
        return _strip_placeholders(prompt)

    # =========================================================================
    # STAGE 3.3: FULL REQUEST
    # =========================================================================

    def compose(
        self,
        patient: PatientRecord,
        clinical: ClinicalRecord,
        config: GenerationConfig,
        attachment_parts: Iterable[ContentPart] = (),
    ) -> ComposedRequest:
        """
        Compose the full request.

        Returns:
            ComposedRequest with one leading prompt part followed by the
            attachment parts in their normalized order. Placeholder tokens
            are removed from attachment text and file names.
        """
        parts = [ContentPart.from_text(self.build_prompt_text(patient, clinical, config))]
        parts.extend(_strip_part(part) for part in attachment_parts)

        return ComposedRequest(
            system_instruction=self.build_system_instruction(patient, config),
            parts=parts,
        )
