"""
Enumerations for Discharge Letter Generation

This module defines the enumeration types used throughout the discharge
letter pipeline. Enums provide:
    1. Type safety for categorical form values
    2. IDE autocomplete support
    3. Clear domain semantics

Enumeration Categories:
    TargetLanguage      → Output language of the letter
    Audience            → Vocabulary mode (clinical vs. plain language)
    AttachmentCategory  → Document/image role of an uploaded file
    DoctorPosition      → Suggested signatory positions (not enforced)

Author: Shubham Singh
Date: October 2026
"""

from enum import Enum
from typing import Tuple


# =============================================================================
# STAGE 1: TARGET LANGUAGE ENUMERATION
# =============================================================================


class TargetLanguage(str, Enum):
    """
    Language the discharge letter must be written in.

    The model is instructed to translate all input into this language,
    regardless of the language the form was filled in.
    """

    DE = "de"
    EN = "en"

    @property
    def label(self) -> str:
        """Human-readable label substituted into the instruction template."""
        return "GERMAN (Deutsch)" if self is TargetLanguage.DE else "ENGLISH"

    @classmethod
    def from_string(cls, value: str) -> "TargetLanguage":
        """
        Convert string to TargetLanguage with case-insensitive matching.

        Raises:
            ValueError: If string doesn't match any language
        """
        normalized = value.strip().lower()
        for language in cls:
            if language.value == normalized or language.name.lower() == normalized:
                return language
        raise ValueError(f"Unknown language: '{value}'. Valid languages: {[lang.value for lang in cls]}")


# =============================================================================
# STAGE 2: AUDIENCE ENUMERATION
# =============================================================================


class Audience(str, Enum):
    """
    Reader of the discharge letter.

    DOCTOR:  standard medical terminology, no explanations
    PATIENT: plain language, every technical term explained in brackets
    """

    DOCTOR = "doctor"
    PATIENT = "patient"

    @classmethod
    def from_string(cls, value: str) -> "Audience":
        """Convert string to Audience with case-insensitive matching."""
        normalized = value.strip().lower()
        for audience in cls:
            if audience.value == normalized:
                return audience
        raise ValueError(f"Unknown audience: '{value}'. Valid audiences: {[a.value for a in cls]}")


# =============================================================================
# STAGE 3: ATTACHMENT CATEGORY ENUMERATION
# =============================================================================
# Each category is a fixed slot in the form: at most one file per category.

IMAGE_ONLY_ACCEPT: Tuple[str, ...] = ("image/*",)

DOCUMENT_ACCEPT: Tuple[str, ...] = (
    "image/*",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)


class AttachmentCategory(str, Enum):
    """
    Semantic role of an uploaded attachment.

    What it does:
        Tags each uploaded file with the role it plays in the letter
        (previous letter, lab report, pre-op image, ...), so the model
        knows how to use it.

    Why it exists:
        1. The prompt labels every attachment with its category
        2. The session keys attachments by category (one per slot)
        3. Pre-/post-op slots only accept images

    When to use:
        - When uploading a file into the session
        - When rendering attachment labels in the prompt
    """

    OPREPORT = "opreport"
    """Operative report (PDF, Word or image)."""

    LETTER = "letter"
    """Previous letter (Vorbrief) - source for history and comorbidities."""

    LAB = "lab"
    """Laboratory report."""

    MEDPLAN = "medplan"
    """Medication plan."""

    MICROBIO = "microbio"
    """Microbiology findings."""

    PREOP = "preop"
    """Pre-operative image."""

    POSTOP = "postop"
    """Post-operative image."""

    @property
    def label(self) -> str:
        """Display label for the upload slot."""
        return _CATEGORY_LABELS[self]

    @property
    def accepted_types(self) -> Tuple[str, ...]:
        """MIME patterns accepted for this slot."""
        if self in (AttachmentCategory.PREOP, AttachmentCategory.POSTOP):
            return IMAGE_ONLY_ACCEPT
        return DOCUMENT_ACCEPT

    @classmethod
    def from_string(cls, value: str) -> "AttachmentCategory":
        """Convert string to AttachmentCategory with case-insensitive matching."""
        normalized = value.strip().lower().replace("-", "").replace("_", "")
        for category in cls:
            if category.value == normalized:
                return category
        raise ValueError(
            f"Unknown attachment category: '{value}'. "
            f"Valid categories: {[c.value for c in cls]}"
        )


_CATEGORY_LABELS = {
    AttachmentCategory.OPREPORT: "OP Report (PDF/Word/Img)",
    AttachmentCategory.LETTER: "Previous Letter",
    AttachmentCategory.LAB: "Lab Report",
    AttachmentCategory.MEDPLAN: "Medication Plan",
    AttachmentCategory.MICROBIO: "Microbiology",
    AttachmentCategory.PREOP: "Pre-op Image",
    AttachmentCategory.POSTOP: "Post-op Image",
}


# =============================================================================
# STAGE 4: DOCTOR POSITION ENUMERATION
# =============================================================================


class DoctorPosition(str, Enum):
    """
    Suggested signatory positions.

    The position field on GenerationConfig is free text; these values only
    populate suggestions. Translation into the target language is left to
    the model.
    """

    RESIDENT = "Resident"
    SPECIALIST = "Specialist"
    SENIOR_PHYSICIAN = "Senior Physician"
    CHIEF_PHYSICIAN = "Chief Physician"

    @property
    def german_title(self) -> str:
        """German title shown next to the suggestion."""
        return {
            DoctorPosition.RESIDENT: "Assistenzarzt",
            DoctorPosition.SPECIALIST: "Facharzt",
            DoctorPosition.SENIOR_PHYSICIAN: "Oberarzt",
            DoctorPosition.CHIEF_PHYSICIAN: "Chefarzt",
        }[self]

    @classmethod
    def suggestions(cls) -> list:
        """Return "<English> (<German>)" suggestion strings."""
        return [f"{position.value} ({position.german_title})" for position in cls]
