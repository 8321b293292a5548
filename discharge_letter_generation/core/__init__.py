"""
Core Layer - Domain Models, Enums, and Configuration

This layer contains PURE, side-effect-free components that form the foundation
of the discharge letter system.

Submodules:
    models.py     → Data structures (PatientRecord, ClinicalRecord, Attachment, ...)
    enums.py      → Enumerations (TargetLanguage, Audience, AttachmentCategory)
    config.py     → Configuration dataclass
    constants.py  → MIME types, placeholders, markers, log format
    exceptions.py → Domain-specific exceptions

Dependency Rule:
    This layer depends on NOTHING else in the package.
    All other layers may depend on this layer.

Author: Shubham Singh
Date: October 2026
"""

from discharge_letter_generation.core.models import (
    PatientRecord,
    ClinicalRecord,
    GenerationConfig,
    Attachment,
    ContentPart,
    ComposedRequest,
)
from discharge_letter_generation.core.enums import (
    TargetLanguage,
    Audience,
    AttachmentCategory,
    DoctorPosition,
)
from discharge_letter_generation.core.config import PipelineConfiguration
from discharge_letter_generation.core.exceptions import (
    DischargeLetterError,
    ConfigurationError,
    AttachmentError,
    UnsupportedAttachmentError,
    AttachmentExtractionError,
    GenerationError,
    GenerationInProgressError,
    PromptError,
    LLMError,
)

__all__ = [
    # Models
    "PatientRecord",
    "ClinicalRecord",
    "GenerationConfig",
    "Attachment",
    "ContentPart",
    "ComposedRequest",
    # Enums
    "TargetLanguage",
    "Audience",
    "AttachmentCategory",
    "DoctorPosition",
    # Configuration
    "PipelineConfiguration",
    # Exceptions
    "DischargeLetterError",
    "ConfigurationError",
    "AttachmentError",
    "UnsupportedAttachmentError",
    "AttachmentExtractionError",
    "GenerationError",
    "GenerationInProgressError",
    "PromptError",
    "LLMError",
]
