"""
Domain Models for Discharge Letter Generation

This module defines the core data structures used throughout the discharge
letter pipeline. All state is transient and owned by one form session;
nothing here is persisted.

Model Hierarchy:
    PatientRecord     → Demographics entered in the form
    ClinicalRecord    → Free-text clinical fields
    GenerationConfig  → Language, audience, standard course, signatory
    Attachment        → Uploaded file as base64 data URL with category
    ContentPart       → One text or binary segment of the request
    ComposedRequest   → System instruction + ordered content parts

Usage:
    from discharge_letter_generation.core.models import PatientRecord

    patient = PatientRecord(first_name="Anna", last_name="Muster")
    patient.has_identity  # True

Author: Shubham Singh
Date: October 2026
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional

from discharge_letter_generation.core.constants import WORD_MIME_TYPES
from discharge_letter_generation.core.enums import (
    Audience,
    AttachmentCategory,
    TargetLanguage,
)


def _is_blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


_TRUE_STRINGS = ("true", "1", "yes", "on")
_FALSE_STRINGS = ("false", "0", "no", "off", "")


def _parse_flag(value: Any) -> bool:
    """Parse a boolean form value; JSON forms may send "true"/"false" as strings."""
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_STRINGS:
            return True
        if normalized in _FALSE_STRINGS:
            return False
        raise ValueError(f"Not a boolean value: {value!r}")
    return bool(value)


# =============================================================================
# STAGE 1: PATIENT RECORD
# =============================================================================


@dataclass(frozen=True)
class PatientRecord:
    """
    Patient demographics entered in the form.

    All fields are optional strings; dates come from a date picker and are
    not validated further.

    Attributes:
        first_name: Patient first name
        last_name: Patient last name
        date_of_birth: Birthdate as entered (e.g., "1980-01-01")
        admission_date: Admission date as entered
        discharge_date: Discharge date as entered (appears in the letterhead)
    """

    first_name: str = ""
    last_name: str = ""
    date_of_birth: str = ""
    admission_date: str = ""
    discharge_date: str = ""

    @property
    def has_identity(self) -> bool:
        """
        Whether any identity field was filled in.

        Only name and birthdate count; admission/discharge dates do not
        identify the patient.
        """
        # Whitespace-only values count as empty, so "   " selects the
        # trust-the-documents branch rather than cross-checking.
        return not (
            _is_blank(self.first_name)
            and _is_blank(self.last_name)
            and _is_blank(self.date_of_birth)
        )

    @property
    def full_name(self) -> str:
        """First and last name joined by a space."""
        return f"{self.first_name} {self.last_name}"

    def updated(self, **changes: str) -> "PatientRecord":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PatientRecord":
        """Create from dictionary; accepts the form's camelCase keys too."""
        return cls(
            first_name=data.get("first_name", data.get("firstName", "")) or "",
            last_name=data.get("last_name", data.get("lastName", "")) or "",
            date_of_birth=data.get("date_of_birth", data.get("dob", "")) or "",
            admission_date=data.get("admission_date", data.get("admissionDate", "")) or "",
            discharge_date=data.get("discharge_date", data.get("dischargeDate", "")) or "",
        )


# =============================================================================
# STAGE 2: CLINICAL RECORD
# =============================================================================


@dataclass(frozen=True)
class ClinicalRecord:
    """
    Free-text clinical fields of the form, each independently optional.

    Attributes:
        diagnosis: Diagnoses for the current stay
        anamnesis: History
        findings: Physical, lab and imaging findings
        operation: Operation / procedures
        clinical_course: Course of the current stay
        medication: Medication
        recommendations: Recommendations / follow-up
    """

    diagnosis: str = ""
    anamnesis: str = ""
    findings: str = ""
    operation: str = ""
    clinical_course: str = ""
    medication: str = ""
    recommendations: str = ""

    @property
    def is_empty(self) -> bool:
        """Whether every clinical field is blank."""
        return all(_is_blank(getattr(self, f.name)) for f in fields(self))

    def updated(self, **changes: str) -> "ClinicalRecord":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClinicalRecord":
        """Create from dictionary; accepts `clinicalCourse` as an alias."""
        return cls(
            diagnosis=data.get("diagnosis", "") or "",
            anamnesis=data.get("anamnesis", "") or "",
            findings=data.get("findings", "") or "",
            operation=data.get("operation", "") or "",
            clinical_course=data.get("clinical_course", data.get("clinicalCourse", "")) or "",
            medication=data.get("medication", "") or "",
            recommendations=data.get("recommendations", "") or "",
        )


# =============================================================================
# STAGE 3: GENERATION CONFIG
# =============================================================================


@dataclass(frozen=True)
class GenerationConfig:
    """
    Per-letter generation options chosen in the form.

    What it does:
        Controls output language, vocabulary, whether a standard
        (complication-free) clinical course should be narrated, and who
        signs the letter.

    Attributes:
        target_language: Output language (defaults to German)
        audience: Doctor (clinical terms) or patient (plain language)
        use_standard_course: Request a qualitative, uneventful course narrative
        doctor_name: Signatory name, passed through literally
        doctor_position: Signatory position, free text; the model translates it
    """

    target_language: TargetLanguage = TargetLanguage.DE
    audience: Audience = Audience.DOCTOR
    use_standard_course: bool = False
    doctor_name: str = ""
    doctor_position: str = ""

    def __post_init__(self):
        # Accept the plain form values ("en", "patient", "false") as well
        if not isinstance(self.target_language, TargetLanguage):
            object.__setattr__(
                self, "target_language", TargetLanguage.from_string(self.target_language)
            )
        if not isinstance(self.audience, Audience):
            object.__setattr__(self, "audience", Audience.from_string(self.audience))
        if not isinstance(self.use_standard_course, bool):
            object.__setattr__(
                self, "use_standard_course", _parse_flag(self.use_standard_course)
            )

    def updated(self, **changes: Any) -> "GenerationConfig":
        """Return a copy with the given fields replaced (strings coerced to enums)."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "target_language": self.target_language.value,
            "audience": self.audience.value,
            "use_standard_course": self.use_standard_course,
            "doctor_name": self.doctor_name,
            "doctor_position": self.doctor_position,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GenerationConfig":
        """Create from dictionary; missing language/audience fall back to defaults."""
        language = data.get("target_language", data.get("language"))
        audience = data.get("audience")
        return cls(
            target_language=TargetLanguage.from_string(language) if language else TargetLanguage.DE,
            audience=Audience.from_string(audience) if audience else Audience.DOCTOR,
            use_standard_course=_parse_flag(
                data.get("use_standard_course", data.get("useStandardCourse", False))
            ),
            doctor_name=data.get("doctor_name", data.get("doctorName", "")) or "",
            doctor_position=data.get("doctor_position", data.get("doctorPosition", "")) or "",
        )


# =============================================================================
# STAGE 4: ATTACHMENT
# =============================================================================


@dataclass(frozen=True)
class Attachment:
    """
    An uploaded file, encoded as a base64 data URL.

    Attributes:
        file_name: Original file name (used in prompt labels)
        data_url: Full data URL, e.g. "data:image/png;base64,iVBOR..."
        mime_type: Declared MIME type of the file
        category: Role of the file in the letter
    """

    file_name: str
    data_url: str
    mime_type: str
    category: AttachmentCategory

    @property
    def base64_payload(self) -> str:
        """The base64 payload with the data-URL prefix removed."""
        if "," in self.data_url:
            return self.data_url.split(",", 1)[1]
        return self.data_url

    @property
    def is_word_document(self) -> bool:
        """Legacy (.doc) or modern (.docx) Word document."""
        return self.mime_type in WORD_MIME_TYPES

    def __repr__(self) -> str:
        # Keep payloads out of logs and tracebacks
        return (
            f"Attachment(file_name={self.file_name!r}, mime_type={self.mime_type!r}, "
            f"category={self.category.value!r})"
        )


# =============================================================================
# STAGE 5: REQUEST MODELS
# =============================================================================


@dataclass(frozen=True)
class ContentPart:
    """
    One segment of the request content: either text or binary.

    Text parts carry `text`. Binary parts carry `data` (base64 without the
    data-URL prefix), `mime_type` and the originating `file_name`.
    """

    text: Optional[str] = None
    data: Optional[str] = None
    mime_type: Optional[str] = None
    file_name: Optional[str] = None

    @property
    def is_text(self) -> bool:
        return self.text is not None

    @property
    def is_binary(self) -> bool:
        return self.data is not None

    @property
    def data_url(self) -> str:
        """Rebuild a data URL for providers that expect one."""
        return f"data:{self.mime_type};base64,{self.data}"

    @classmethod
    def from_text(cls, text: str) -> "ContentPart":
        return cls(text=text)

    @classmethod
    def from_binary(cls, data: str, mime_type: str, file_name: Optional[str] = None) -> "ContentPart":
        return cls(data=data, mime_type=mime_type, file_name=file_name)

    def __repr__(self) -> str:
        if self.is_text:
            return f"ContentPart(text={len(self.text)} chars)"
        return f"ContentPart(binary={self.mime_type!r}, {len(self.data or '')} b64 chars)"


@dataclass(frozen=True)
class ComposedRequest:
    """
    Everything sent to the model for one generation call.

    Attributes:
        system_instruction: Fully substituted instruction template
        parts: Leading prompt text part followed by attachment parts
    """

    system_instruction: str
    parts: List[ContentPart] = field(default_factory=list)

    @property
    def prompt_text(self) -> str:
        """Text of the leading structured prompt part."""
        if self.parts and self.parts[0].is_text:
            return self.parts[0].text
        return ""

    @property
    def binary_part_count(self) -> int:
        return sum(1 for part in self.parts if part.is_binary)

    @property
    def full_text(self) -> str:
        """All text parts concatenated (binary parts skipped)."""
        return "".join(part.text for part in self.parts if part.is_text)
