"""
Attachment Loader - File Input Boundary

Reads uploaded files into Attachment objects: the raw bytes become a base64
data URL with the declared MIME type, tagged with the upload category.

Upload Rules:
    - Any image type, PDF, and legacy/modern Word documents are accepted
    - Pre-op/post-op slots accept images only
    - Anything else raises UnsupportedAttachmentError

Reads are asynchronous and independent: each result lands in its own
category slot, so no ordering between concurrent reads is needed.

Author: Shubham Singh
Date: October 2026
"""

import asyncio
import base64
import mimetypes
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from discharge_letter_generation.core.constants import EXTENSION_MIME_TYPES
from discharge_letter_generation.core.enums import AttachmentCategory
from discharge_letter_generation.core.exceptions import UnsupportedAttachmentError
from discharge_letter_generation.core.models import Attachment


# =============================================================================
# STAGE 1: MIME HANDLING
# =============================================================================


def resolve_mime_type(file_name: str) -> Optional[str]:
    """
    Guess the MIME type of a file from its extension.

    The explicit extension table wins over the platform mimetypes database,
    which is missing Office types on some systems.
    """
    suffix = Path(file_name).suffix.lower()
    if suffix in EXTENSION_MIME_TYPES:
        return EXTENSION_MIME_TYPES[suffix]
    guessed, _ = mimetypes.guess_type(file_name)
    return guessed


def is_accepted(mime_type: Optional[str], category: AttachmentCategory) -> bool:
    """Check a MIME type against the category's accept list."""
    if not mime_type:
        return False
    mime_type = mime_type.lower()
    for pattern in category.accepted_types:
        if pattern.endswith("/*"):
            if mime_type.startswith(pattern[:-1]):
                return True
        elif mime_type == pattern:
            return True
    return False


def encode_data_url(raw: bytes, mime_type: str) -> str:
    """Encode raw bytes as a `data:<mime>;base64,<payload>` URL."""
    payload = base64.b64encode(raw).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


# =============================================================================
# STAGE 2: ATTACHMENT CONSTRUCTION
# =============================================================================


def attachment_from_bytes(
    file_name: str,
    raw: bytes,
    category: AttachmentCategory,
    mime_type: Optional[str] = None,
) -> Attachment:
    """
    Build an Attachment from in-memory file content.

    Args:
        file_name: Original file name
        raw: File content
        category: Upload slot
        mime_type: Declared MIME type (guessed from the name if omitted)

    Returns:
        Attachment carrying the full data URL

    Raises:
        UnsupportedAttachmentError: If the type is not accepted for the slot
    """
    mime_type = mime_type or resolve_mime_type(file_name)
    if not is_accepted(mime_type, category):
        raise UnsupportedAttachmentError(file_name, category.value, mime_type)

    return Attachment(
        file_name=file_name,
        data_url=encode_data_url(raw, mime_type),
        mime_type=mime_type,
        category=category,
    )


async def read_attachment(
    path: Union[str, Path],
    category: AttachmentCategory,
    mime_type: Optional[str] = None,
) -> Attachment:
    """
    Read a file from disk into an Attachment without blocking the event loop.

    The type check runs before the read, so rejected files are never loaded.

    Raises:
        UnsupportedAttachmentError: If the type is not accepted for the slot
        OSError: If the file cannot be read
    """
    path = Path(path)
    mime_type = mime_type or resolve_mime_type(path.name)
    if not is_accepted(mime_type, category):
        raise UnsupportedAttachmentError(path.name, category.value, mime_type)

    raw = await asyncio.to_thread(path.read_bytes)
    logger.debug(f"Read attachment | Category: {category.value} | Size: {len(raw)} bytes")
    return attachment_from_bytes(path.name, raw, category, mime_type)
