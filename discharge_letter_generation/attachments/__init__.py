"""
Attachments Layer - File Loading and Normalization

Submodules:
    loader.py     → Files to Attachment (data URL, MIME allowlist)
    normalizer.py → Attachment to content parts (Word text / binary)

Dependency Rule:
    This layer depends on: core
    This layer is used by: pipeline, session

Author: Shubham Singh
Date: October 2026
"""

from discharge_letter_generation.attachments.loader import (
    attachment_from_bytes,
    encode_data_url,
    is_accepted,
    read_attachment,
    resolve_mime_type,
)
from discharge_letter_generation.attachments.normalizer import (
    AttachmentNormalizer,
    extract_word_text,
)

__all__ = [
    "AttachmentNormalizer",
    "attachment_from_bytes",
    "encode_data_url",
    "extract_word_text",
    "is_accepted",
    "read_attachment",
    "resolve_mime_type",
]
