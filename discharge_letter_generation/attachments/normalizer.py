"""
Attachment Normalizer - Attachments to Content Parts

This module converts uploaded attachments into the content segments sent to
the model:

    Word documents (.doc / .docx)
        → base64 decoded, plain text extracted, ONE labeled text segment
    Images, PDFs
        → label text segment + binary segment (stripped base64, MIME type)

PDFs and images are forwarded uninterpreted; the model reads them natively.
No OCR and no local PDF text extraction happen here.

Failure Policy:
    A Word document that cannot be parsed is NOT fatal. The normalizer
    emits a notice segment in its place and continues with the remaining
    attachments.

Pipeline Position:
    Session → [AttachmentNormalizer] → PromptBuilder → LLM Client
               ^^^^^^^^^^^^^^^^^^^^^^
               You are here

Author: Shubham Singh
Date: October 2026
"""

import base64
import binascii
import io
from typing import Iterable, List

from docx import Document
from loguru import logger

from discharge_letter_generation.core.exceptions import AttachmentExtractionError
from discharge_letter_generation.core.models import Attachment, ContentPart


# =============================================================================
# STAGE 1: SEGMENT LABELS
# =============================================================================


def attachment_label(attachment: Attachment) -> str:
    """Label segment placed in front of a binary attachment."""
    return (
        f"\n[ATTACHMENT: {attachment.category.value.upper()} - "
        f"Filename: {attachment.file_name}]\n"
    )


def extracted_text_segment(attachment: Attachment, text: str) -> str:
    """Text segment carrying the extracted content of a Word document."""
    return (
        f"\n[ATTACHMENT: {attachment.category.value.upper()} - "
        f"Filename: {attachment.file_name} (Text Extracted from Word Doc)]\n"
        f"{text}\n"
    )


def extraction_failed_segment(attachment: Attachment) -> str:
    """Notice segment emitted in place of an unreadable Word document."""
    return (
        f"\n[ERROR: Could not parse Word document: {attachment.file_name} "
        f"({attachment.category.value.upper()}). Ensure it is a valid .docx file.]\n"
    )


# =============================================================================
# STAGE 2: WORD TEXT EXTRACTION
# =============================================================================


def extract_word_text(attachment: Attachment) -> str:
    """
    Extract plain text from a Word attachment.

    Paragraphs come first, then table rows (cells joined by tabs), mirroring
    what a raw-text export of the document would contain.

    Raises:
        AttachmentExtractionError: If the payload is not valid base64 or the
            document structure cannot be read (legacy binary .doc included)
    """
    try:
        raw = base64.b64decode(attachment.base64_payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise AttachmentExtractionError(
            attachment.file_name, attachment.category.value, f"invalid base64 payload: {e}"
        ) from e

    try:
        document = Document(io.BytesIO(raw))
    except Exception as e:
        raise AttachmentExtractionError(
            attachment.file_name, attachment.category.value, str(e) or type(e).__name__
        ) from e

    lines = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            lines.append("\t".join(cell.text for cell in row.cells))

    return "\n".join(lines).strip()


# =============================================================================
# STAGE 3: NORMALIZER CLASS
# =============================================================================


class AttachmentNormalizer:
    """
    Converts attachments into ordered content segments.

    What it does:
        Produces the segments for each attachment in the caller's order,
        emitting each attachment's segments contiguously.

    Why it exists:
        1. Heterogeneous inputs (images, PDFs, Word) need one request format
        2. Word documents are not consumable by the model as binary
        3. Extraction failures must degrade, not abort generation

    Example:
        >>> normalizer = AttachmentNormalizer()
        >>> parts = normalizer.normalize_all([op_report, lab_report])
    """

    def __init__(self):
        self._extracted_count = 0
        self._failed_count = 0
        self._binary_count = 0

    # =========================================================================
    # STAGE 3.1: PUBLIC API
    # =========================================================================

    def normalize(self, attachment: Attachment) -> List[ContentPart]:
        """
        Produce the content segments for one attachment.

        Returns:
            One text segment for Word documents (extracted text or failure
            notice); label + binary segments otherwise
        """
        if attachment.is_word_document:
            try:
                text = extract_word_text(attachment)
            except AttachmentExtractionError as e:
                self._failed_count += 1
                logger.warning(
                    f"Failed to parse Word document | "
                    f"Category: {attachment.category.value} | Reason: {e.reason}"
                )
                return [ContentPart.from_text(extraction_failed_segment(attachment))]

            self._extracted_count += 1
            logger.debug(
                f"Extracted Word text | Category: {attachment.category.value} | "
                f"Length: {len(text)} chars"
            )
            return [ContentPart.from_text(extracted_text_segment(attachment, text))]

        self._binary_count += 1
        return [
            ContentPart.from_text(attachment_label(attachment)),
            ContentPart.from_binary(
                data=attachment.base64_payload,
                mime_type=attachment.mime_type,
                file_name=attachment.file_name,
            ),
        ]

    def normalize_all(self, attachments: Iterable[Attachment]) -> List[ContentPart]:
        """Normalize attachments in order, concatenating their segments."""
        parts: List[ContentPart] = []
        count = 0
        for attachment in attachments:
            parts.extend(self.normalize(attachment))
            count += 1

        if count:
            logger.info(f"Normalized {count} attachment(s) into {len(parts)} segment(s)")
        return parts

    # =========================================================================
    # STAGE 3.2: STATISTICS
    # =========================================================================

    @property
    def extracted_count(self) -> int:
        """Word documents whose text was extracted."""
        return self._extracted_count

    @property
    def failed_count(self) -> int:
        """Word documents that could not be parsed."""
        return self._failed_count

    @property
    def binary_count(self) -> int:
        """Attachments forwarded as binary parts."""
        return self._binary_count
