"""
Constants for Discharge Letter Generation

This module defines constant values used throughout the discharge letter
pipeline. Constants are:
    1. Centralized for easy modification
    2. Type-hinted for IDE support
    3. Documented with usage context

Constant Categories:
    MIME TYPES         → Word/PDF/image types and the upload allowlist
    PLACEHOLDERS       → Template tokens substituted into the instruction
    MARKERS            → Strings used for missing or empty form values
    LOGGING            → loguru format string

Author: Shubham Singh
Date: October 2026
"""

import re
from typing import Dict, Tuple


# =============================================================================
# STAGE 1: MIME TYPES
# =============================================================================

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC_MIME_TYPE = "application/msword"
PDF_MIME_TYPE = "application/pdf"

WORD_MIME_TYPES: Tuple[str, ...] = (DOCX_MIME_TYPE, DOC_MIME_TYPE)

# Extensions the platform mimetypes table may not know about.
EXTENSION_MIME_TYPES: Dict[str, str] = {
    ".docx": DOCX_MIME_TYPE,
    ".doc": DOC_MIME_TYPE,
    ".pdf": PDF_MIME_TYPE,
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".heic": "image/heic",
    ".heif": "image/heif",
    ".bmp": "image/bmp",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
}


# =============================================================================
# STAGE 2: TEMPLATE PLACEHOLDERS
# =============================================================================
# Exact tokens in SYSTEM_INSTRUCTION. None may remain after substitution.

LANGUAGE_PLACEHOLDER = "{{language}}"
AUDIENCE_PLACEHOLDER = "{{audience}}"
DISCHARGE_DATE_PLACEHOLDER = "{{dischargeDate}}"

PLACEHOLDER_PATTERN = re.compile(r"\{\{(?:language|audience|dischargeDate)\}\}")


# =============================================================================
# STAGE 3: MISSING VALUE MARKERS
# =============================================================================

NOT_PROVIDED = "Not provided"
EMPTY_DEMOGRAPHIC = "[Empty]"
MISSING_DISCHARGE_DATE = "Date: _____________"
CLINICAL_COURSE_PLACEHOLDER = (
    "Not provided. If information is available in attached documents, summarize it here."
)


# =============================================================================
# STAGE 4: GENERATION
# =============================================================================

NO_RESPONSE_FALLBACK = "No response generated."


# =============================================================================
# STAGE 5: LOGGING CONFIGURATION
# =============================================================================
# Standard log format for consistent logging across modules.

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
