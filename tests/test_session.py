"""Tests for LetterSession form state."""
import asyncio
import threading

import pytest

from discharge_letter_generation.attachments import attachment_from_bytes
from discharge_letter_generation.core.config import PipelineConfiguration
from discharge_letter_generation.core.enums import Audience, AttachmentCategory, TargetLanguage
from discharge_letter_generation.core.exceptions import (
    GenerationInProgressError,
    LLMError,
    UnsupportedAttachmentError,
)
from discharge_letter_generation.pipeline import DischargeLetterPipeline
from discharge_letter_generation.session import LetterSession


@pytest.fixture
def session(config, fake_client):
    return LetterSession(DischargeLetterPipeline(config, client=fake_client))


class TestFormFields:
    """Tests for field updates."""

    def test_defaults_are_explicit(self, session):
        """Test that a new session defaults to German for doctors."""
        assert session.config.target_language is TargetLanguage.DE
        assert session.config.audience is Audience.DOCTOR
        assert session.config.use_standard_course is False

    def test_defaults_follow_configuration(self, fake_client):
        """Test that configured defaults are applied."""
        config = PipelineConfiguration(
            gemini_api_key="k",
            default_language=TargetLanguage.EN,
            default_audience=Audience.PATIENT,
        )
        session = LetterSession(DischargeLetterPipeline(config, client=fake_client))

        assert session.config.target_language is TargetLanguage.EN
        assert session.config.audience is Audience.PATIENT

    def test_update_fields(self, session):
        """Test that updates replace only the given fields."""
        session.update_patient(first_name="Anna")
        session.update_patient(last_name="Muster")
        session.update_clinical(diagnosis="Appendicitis")
        session.update_config(target_language="en", use_standard_course=True)

        assert session.patient.full_name == "Anna Muster"
        assert session.clinical.diagnosis == "Appendicitis"
        assert session.config.target_language is TargetLanguage.EN
        assert session.config.use_standard_course is True

    def test_unknown_field_rejected(self, session):
        """Test that unknown field names raise ValueError."""
        with pytest.raises(ValueError, match="shoe_size"):
            session.update_patient(shoe_size="42")
        with pytest.raises(ValueError):
            session.update_config(language="en")

    def test_reset(self, session, image_attachment):
        """Test that reset clears the form."""
        session.update_patient(first_name="Anna")
        session.add_attachment(image_attachment)

        session.reset()

        assert session.patient.first_name == ""
        assert session.attachments == []
        assert session.letter is None
        assert session.error is None


class TestAttachments:
    """Tests for category-keyed attachments."""

    def test_same_category_replaces(self, session, png_bytes):
        """Test that a second upload replaces the first one."""
        first = attachment_from_bytes("a.png", png_bytes, AttachmentCategory.PREOP)
        second = attachment_from_bytes("b.png", png_bytes, AttachmentCategory.PREOP)

        session.add_attachment(first)
        session.add_attachment(second)

        assert session.attachments == [second]
        assert session.get_attachment(AttachmentCategory.PREOP) is second

    def test_replacement_moves_to_end(self, session, png_bytes, pdf_attachment):
        """Test remove-then-add ordering."""
        session.add_attachment(attachment_from_bytes("a.png", png_bytes, AttachmentCategory.PREOP))
        session.add_attachment(pdf_attachment)
        replacement = attachment_from_bytes("b.png", png_bytes, AttachmentCategory.PREOP)
        session.add_attachment(replacement)

        assert session.attachments == [pdf_attachment, replacement]

    def test_one_segment_group_per_category(self, session, fake_client, png_bytes):
        """Test that only the replacing attachment reaches the request."""
        session.add_attachment(attachment_from_bytes("a.png", png_bytes, AttachmentCategory.POSTOP))
        session.add_attachment(attachment_from_bytes("b.png", png_bytes, AttachmentCategory.POSTOP))

        asyncio.run(session.generate())

        request = fake_client.requests[0]
        labels = [p.text for p in request.parts[1:] if p.is_text]
        assert labels == ["\n[ATTACHMENT: POSTOP - Filename: b.png]\n"]
        assert request.binary_part_count == 1

    def test_remove_attachment(self, session, image_attachment):
        """Test that a slot can be cleared."""
        session.add_attachment(image_attachment)

        assert session.remove_attachment(AttachmentCategory.POSTOP) is image_attachment
        assert session.remove_attachment(AttachmentCategory.POSTOP) is None
        assert session.attachments == []

    def test_upload_files_concurrently(self, session, tmp_path, png_bytes, pdf_bytes):
        """Test that several files are read and stored in mapping order."""
        (tmp_path / "op.pdf").write_bytes(pdf_bytes)
        (tmp_path / "wound.png").write_bytes(png_bytes)

        asyncio.run(
            session.upload_files(
                {
                    AttachmentCategory.OPREPORT: tmp_path / "op.pdf",
                    AttachmentCategory.POSTOP: tmp_path / "wound.png",
                }
            )
        )

        assert [a.file_name for a in session.attachments] == ["op.pdf", "wound.png"]

    def test_upload_rejects_wrong_type(self, session, tmp_path, pdf_bytes):
        """Test that image-only slots refuse a PDF."""
        path = tmp_path / "op.pdf"
        path.write_bytes(pdf_bytes)

        with pytest.raises(UnsupportedAttachmentError):
            asyncio.run(session.upload_file(path, AttachmentCategory.PREOP))
        assert session.attachments == []


class TestGenerate:
    """Tests for the generation lifecycle."""

    def test_success_stores_letter(self, session):
        """Test that a successful attempt stores the letter."""
        session.update_patient(first_name="Anna", last_name="Muster")

        letter = asyncio.run(session.generate())

        assert letter == "LETTER"
        assert session.letter == "LETTER"
        assert session.error is None
        assert session.is_generating is False

    def test_missing_key_sets_error(self, fake_client):
        """Test that a configuration error becomes the current error."""
        session = LetterSession(
            DischargeLetterPipeline(PipelineConfiguration(), client=fake_client)
        )

        assert asyncio.run(session.generate()) is None
        assert session.error == "API Key is missing."
        assert fake_client.requests == []
        assert session.is_generating is False

    def test_error_cleared_on_next_attempt(self, session, fake_client):
        """Test that the previous error is cleared when a new attempt starts."""
        fake_client.error = LLMError("Service unavailable", provider="fake")
        asyncio.run(session.generate())
        assert session.error == "Service unavailable"

        fake_client.error = None
        asyncio.run(session.generate())

        assert session.error is None
        assert session.letter == "LETTER"

    def test_failed_attempt_keeps_previous_letter(self, session, fake_client):
        """Test that a failure does not erase the last letter."""
        asyncio.run(session.generate())
        fake_client.error = LLMError("boom", provider="fake")

        asyncio.run(session.generate())

        assert session.letter == "LETTER"
        assert session.error == "boom"

    def test_resubmission_while_busy_rejected(self, config):
        """Test that a second generate() during a call is refused."""
        started = threading.Event()
        release = threading.Event()

        class BlockingClient:
            model_name = "blocking"
            provider_name = "fake"

            def generate(self, request):
                started.set()
                release.wait(timeout=5)
                return "DONE"

        session = LetterSession(DischargeLetterPipeline(config, client=BlockingClient()))

        async def scenario():
            first = asyncio.create_task(session.generate())
            await asyncio.to_thread(started.wait, 5)
            assert session.is_generating is True
            with pytest.raises(GenerationInProgressError):
                await session.generate()
            release.set()
            return await first

        assert asyncio.run(scenario()) == "DONE"
        assert session.is_generating is False
