"""
Discharge Letter Generation Module

Generates hospital discharge letters from structured form input and
uploaded clinical documents with a single multimodal LLM call.

Architecture Overview:
    discharge_letter_generation/
    ├── core/           → Domain models, enums, configuration (Layer 0 - Pure)
    ├── attachments/    → File loading and normalization (Layer 1 - Infrastructure)
    ├── generation/     → Prompt composition (Layer 2 - Business Logic)
    ├── clients/        → LLM client abstractions (Layer 3 - Infrastructure)
    ├── pipeline.py     → Main orchestrator (Layer 4 - Public API)
    ├── session.py      → Form state owner (Layer 5 - Public API)
    └── cli.py          → Command-line front end

Quick Start:
    from discharge_letter_generation import DischargeLetterPipeline, LetterSession

    session = LetterSession(DischargeLetterPipeline.from_environment())
    session.update_patient(first_name="Anna", last_name="Muster")
    letter = asyncio.run(session.generate())

Author: Shubham Singh
Date: October 2026
"""

__version__ = "1.0.0"
__author__ = "Shubham Singh"

# =============================================================================
# PUBLIC API EXPORTS
# =============================================================================

# Main Entry Points
from discharge_letter_generation.pipeline import DischargeLetterPipeline
from discharge_letter_generation.session import LetterSession

# Core Models
from discharge_letter_generation.core.models import (
    PatientRecord,
    ClinicalRecord,
    GenerationConfig,
    Attachment,
    ComposedRequest,
)

# Enums
from discharge_letter_generation.core.enums import (
    TargetLanguage,
    Audience,
    AttachmentCategory,
    DoctorPosition,
)

# Configuration
from discharge_letter_generation.core.config import PipelineConfiguration

# Exceptions
from discharge_letter_generation.core.exceptions import (
    DischargeLetterError,
    ConfigurationError,
    GenerationError,
)

__all__ = [
    # Main Entry Points (use these!)
    "DischargeLetterPipeline",
    "LetterSession",
    # Core Models
    "PatientRecord",
    "ClinicalRecord",
    "GenerationConfig",
    "Attachment",
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
    "GenerationError",
]
