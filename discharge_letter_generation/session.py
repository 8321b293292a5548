"""
Letter Session - Form State Owner

This module holds the state of one discharge letter form: demographics,
clinical fields, generation options, one attachment per category, and the
outcome of the last generation attempt.

Pipeline Position:
    [LetterSession] → DischargeLetterPipeline → LLM Client
     ^^^^^^^^^^^^^
     You are here

Concurrency:
    One generation in flight at a time, gated by the is_generating flag.
    File reads for several categories may run concurrently; each writes its
    own category key. There is no cancellation.

Author: Shubham Singh
Date: October 2026
"""

import asyncio
from dataclasses import fields
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from loguru import logger

from discharge_letter_generation.attachments import read_attachment
from discharge_letter_generation.core.enums import AttachmentCategory
from discharge_letter_generation.core.exceptions import (
    DischargeLetterError,
    GenerationInProgressError,
)
from discharge_letter_generation.core.models import (
    Attachment,
    ClinicalRecord,
    GenerationConfig,
    PatientRecord,
)
from discharge_letter_generation.pipeline import DischargeLetterPipeline


def _check_fields(record_type: type, changes: Mapping[str, object]) -> None:
    known = {f.name for f in fields(record_type)}
    unknown = sorted(set(changes) - known)
    if unknown:
        raise ValueError(f"Unknown {record_type.__name__} field(s): {', '.join(unknown)}")


# =============================================================================
# STAGE 1: SESSION CLASS
# =============================================================================


class LetterSession:
    """
    Mutable state of one discharge letter form.

    What it does:
        Collects form input field by field, keeps at most one attachment per
        category, and runs one generation at a time through the pipeline.

    Why it exists:
        1. Records stay immutable; the session swaps in updated copies
        2. Category uniqueness is enforced in one place
        3. The busy flag and error slot live next to the state they guard

    Example:
        >>> session = LetterSession(pipeline)
        >>> session.update_patient(first_name="Anna", last_name="Muster")
        >>> await session.upload_file("op.pdf", AttachmentCategory.OPREPORT)
        >>> letter = await session.generate()
    """

    def __init__(self, pipeline: DischargeLetterPipeline):
        """
        Args:
            pipeline: Pipeline used for generation; its configuration
                supplies the default language and audience
        """
        self._pipeline = pipeline
        self.reset()

    # =========================================================================
    # STAGE 2: FORM FIELDS
    # =========================================================================

    def update_patient(self, **changes: str) -> PatientRecord:
        """Replace demographic fields. Unknown names raise ValueError."""
        _check_fields(PatientRecord, changes)
        self._patient = self._patient.updated(**changes)
        return self._patient

    def update_clinical(self, **changes: str) -> ClinicalRecord:
        """Replace clinical fields. Unknown names raise ValueError."""
        _check_fields(ClinicalRecord, changes)
        self._clinical = self._clinical.updated(**changes)
        return self._clinical

    def update_config(self, **changes: object) -> GenerationConfig:
        """Replace generation options. Unknown names raise ValueError."""
        _check_fields(GenerationConfig, changes)
        self._config = self._config.updated(**changes)
        return self._config

    # =========================================================================
    # STAGE 3: ATTACHMENTS
    # =========================================================================

    def add_attachment(self, attachment: Attachment) -> None:
        """
        Store an attachment in its category slot.

        An occupied slot is replaced: the old entry is removed and the new
        one appended, so it moves to the end of the upload order.
        """
        replaced = self._attachments.pop(attachment.category, None)
        self._attachments[attachment.category] = attachment
        logger.info(
            f"Attachment stored | Category: {attachment.category.value} | "
            f"Replaced: {replaced is not None}"
        )

    async def upload_file(
        self,
        path: Union[str, Path],
        category: AttachmentCategory,
        mime_type: Optional[str] = None,
    ) -> Attachment:
        """
        Read a file and store it in the category slot.

        Raises:
            UnsupportedAttachmentError: If the file type is not accepted
            OSError: If the file cannot be read
        """
        attachment = await read_attachment(path, category, mime_type)
        self.add_attachment(attachment)
        return attachment

    async def upload_files(
        self, files: Mapping[AttachmentCategory, Union[str, Path]]
    ) -> List[Attachment]:
        """
        Read several files concurrently, one per category.

        Reads run in parallel; the results are stored in mapping order. If
        any read fails nothing is stored.
        """
        loaded = await asyncio.gather(
            *(read_attachment(path, category) for category, path in files.items())
        )
        for attachment in loaded:
            self.add_attachment(attachment)
        return list(loaded)

    def remove_attachment(self, category: AttachmentCategory) -> Optional[Attachment]:
        """Clear a category slot; returns the removed attachment, if any."""
        return self._attachments.pop(category, None)

    def get_attachment(self, category: AttachmentCategory) -> Optional[Attachment]:
        return self._attachments.get(category)

    @property
    def attachments(self) -> List[Attachment]:
        """Attachments in upload order."""
        return list(self._attachments.values())

    # =========================================================================
    # STAGE 4: GENERATION
    # =========================================================================

    async def generate(self) -> Optional[str]:
        """
        Generate the letter from the current form state.

        STAGE 4.1: Refuse re-submission while busy
        STAGE 4.2: Clear the previous error, set the busy flag
        STAGE 4.3: Run the pipeline off the event loop
        STAGE 4.4: Store the letter, or the error message

        Returns:
            The letter text, or None if the attempt failed (see `error`)

        Raises:
            GenerationInProgressError: If a generation is already running
        """
        if self._is_generating:
            raise GenerationInProgressError()

        self._error = None
        self._is_generating = True
        try:
            letter = await asyncio.to_thread(
                self._pipeline.generate_letter,
                self._patient,
                self._clinical,
                self._config,
                self.attachments,
            )
        except DischargeLetterError as e:
            logger.error(f"Generation attempt failed | {type(e).__name__}: {e.message}")
            self._error = e.message
            return None
        finally:
            self._is_generating = False

        self._letter = letter
        return letter

    # =========================================================================
    # STAGE 5: RESET
    # =========================================================================

    def reset(self) -> None:
        """Clear the form back to its initial state."""
        defaults = self._pipeline.config
        self._patient = PatientRecord()
        self._clinical = ClinicalRecord()
        self._config = GenerationConfig(
            target_language=defaults.default_language,
            audience=defaults.default_audience,
        )
        self._attachments: Dict[AttachmentCategory, Attachment] = {}
        self._letter: Optional[str] = None
        self._error: Optional[str] = None
        self._is_generating = False

    # =========================================================================
    # STAGE 6: PROPERTIES
    # =========================================================================

    @property
    def patient(self) -> PatientRecord:
        return self._patient

    @property
    def clinical(self) -> ClinicalRecord:
        return self._clinical

    @property
    def config(self) -> GenerationConfig:
        return self._config

    @property
    def letter(self) -> Optional[str]:
        """Text of the last successful generation."""
        return self._letter

    @property
    def error(self) -> Optional[str]:
        """Message of the last failed attempt; cleared when a new one starts."""
        return self._error

    @property
    def is_generating(self) -> bool:
        return self._is_generating
