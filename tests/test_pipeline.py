"""Tests for DischargeLetterPipeline orchestration."""
from unittest.mock import MagicMock

import pytest

from discharge_letter_generation.core.config import PipelineConfiguration
from discharge_letter_generation.core.constants import NO_RESPONSE_FALLBACK
from discharge_letter_generation.core.enums import Audience, TargetLanguage
from discharge_letter_generation.core.exceptions import (
    ConfigurationError,
    GenerationError,
    LLMError,
)
from discharge_letter_generation.core.models import ClinicalRecord, GenerationConfig
from discharge_letter_generation.generation import contains_placeholders
from discharge_letter_generation.pipeline import DischargeLetterPipeline


class TestComposeRequest:
    """Tests for request composition without network I/O."""

    def test_dry_run_without_credentials(self, anna, appendicitis, pdf_attachment):
        """Test that requests can be composed without an API key."""
        pipeline = DischargeLetterPipeline(PipelineConfiguration())

        request = pipeline.compose_request(anna, appendicitis, GenerationConfig(), [pdf_attachment])

        assert "Anna Muster" in request.prompt_text
        assert request.binary_part_count == 1
        assert len(request.parts) == 3

    def test_broken_word_document_does_not_abort(
        self, anna, appendicitis, broken_word_attachment, image_attachment
    ):
        """Test that extraction failures degrade into a notice segment."""
        pipeline = DischargeLetterPipeline(PipelineConfiguration())

        request = pipeline.compose_request(
            anna, appendicitis, GenerationConfig(), [broken_word_attachment, image_attachment]
        )

        assert "[ERROR: Could not parse Word document: vorbrief.docx" in request.parts[1].text
        assert request.parts[-1].mime_type == "image/png"

    def test_tokens_in_word_document_are_removed(self, anna, tokenized_word_attachment):
        """Test that template tokens inside uploaded Word text are not sent."""
        pipeline = DischargeLetterPipeline(PipelineConfiguration())

        request = pipeline.compose_request(
            anna, ClinicalRecord(), GenerationConfig(), [tokenized_word_attachment]
        )

        assert "Befund  und " in request.parts[1].text
        assert "Filename: befund .docx" in request.parts[1].text
        assert not contains_placeholders(request.full_text)


class TestGenerateLetter:
    """Tests for generate_letter."""

    def test_returns_client_text_verbatim(self, config, fake_client, anna, appendicitis):
        """Test that the model output is returned unchanged."""
        fake_client.response = "  Sehr geehrte Kollegen,\n...  "
        pipeline = DischargeLetterPipeline(config, client=fake_client)

        letter = pipeline.generate_letter(anna, appendicitis, GenerationConfig())

        assert letter == "  Sehr geehrte Kollegen,\n...  "
        assert len(fake_client.requests) == 1
        assert pipeline.letters_generated == 1

    def test_request_carries_language_and_audience(self, config, fake_client, anna):
        """Test that options flow into the composed request."""
        pipeline = DischargeLetterPipeline(config, client=fake_client)
        options = GenerationConfig(target_language=TargetLanguage.EN, audience=Audience.PATIENT)

        pipeline.generate_letter(anna, ClinicalRecord(), options)

        request = fake_client.requests[0]
        assert "OUTPUT LANGUAGE: ENGLISH" in request.system_instruction
        assert "Target audience is: PATIENT." in request.prompt_text

    def test_missing_key_fails_before_client_call(self, fake_client, anna, appendicitis):
        """Test that a missing credential raises before any call."""
        pipeline = DischargeLetterPipeline(PipelineConfiguration(), client=fake_client)

        with pytest.raises(ConfigurationError) as exc_info:
            pipeline.generate_letter(anna, appendicitis, GenerationConfig())

        assert exc_info.value.message == "API Key is missing."
        assert fake_client.requests == []
        assert pipeline.letters_failed == 1

    def test_missing_key_does_not_create_client(self, anna, appendicitis, monkeypatch):
        """Test that no SDK client is built without a key."""
        factory = MagicMock()
        monkeypatch.setattr(DischargeLetterPipeline, "_create_llm_client", factory)
        pipeline = DischargeLetterPipeline(PipelineConfiguration())

        with pytest.raises(ConfigurationError):
            pipeline.generate_letter(anna, appendicitis, GenerationConfig())

        factory.assert_not_called()

    def test_llm_error_propagates(self, config, make_client, anna, appendicitis):
        """Test that client errors surface as GenerationError."""
        client = make_client(error=LLMError("Quota exceeded", provider="fake"))
        pipeline = DischargeLetterPipeline(config, client=client)

        with pytest.raises(GenerationError) as exc_info:
            pipeline.generate_letter(anna, appendicitis, GenerationConfig())

        assert exc_info.value.message == "Quota exceeded"
        assert pipeline.letters_failed == 1

    def test_unexpected_error_wrapped(self, config, make_client, anna, appendicitis):
        """Test that foreign exceptions are wrapped with their message."""
        client = make_client(error=ConnectionError("network unreachable"))
        pipeline = DischargeLetterPipeline(config, client=client)

        with pytest.raises(LLMError) as exc_info:
            pipeline.generate_letter(anna, appendicitis, GenerationConfig())

        assert exc_info.value.message == "network unreachable"
        assert isinstance(exc_info.value.original_error, ConnectionError)

    def test_no_retry_on_failure(self, config, make_client, anna, appendicitis):
        """Test that a failed call is attempted exactly once."""
        client = make_client(error=LLMError("boom", provider="fake"))
        pipeline = DischargeLetterPipeline(config, client=client)

        with pytest.raises(LLMError):
            pipeline.generate_letter(anna, appendicitis, GenerationConfig())

        assert len(client.requests) == 1


class TestClientFactory:
    """Tests for lazy client creation."""

    def test_gemini_client_created_on_first_use(self, monkeypatch):
        """Test that the configured provider's client is built lazily."""
        created = MagicMock(return_value="gemini-client")
        monkeypatch.setattr("discharge_letter_generation.pipeline.GeminiClient", created)
        pipeline = DischargeLetterPipeline(PipelineConfiguration(gemini_api_key="k"))

        created.assert_not_called()
        assert pipeline.client == "gemini-client"
        assert pipeline.client == "gemini-client"
        created.assert_called_once_with(api_key="k", model_name="gemini-2.5-flash", temperature=0.2)

    def test_openai_client_selected(self, monkeypatch):
        """Test that LLM_PROVIDER=openai builds the OpenAI client."""
        created = MagicMock(return_value="openai-client")
        monkeypatch.setattr("discharge_letter_generation.pipeline.OpenAIClient", created)
        config = PipelineConfiguration(openai_api_key="sk", llm_provider="openai")

        assert DischargeLetterPipeline(config).client == "openai-client"
        created.assert_called_once_with(api_key="sk", model_name="gpt-4o", temperature=0.2)

    def test_empty_response_falls_back(self, config, make_client, anna, appendicitis):
        """Test that the fallback text from the client is passed through."""
        pipeline = DischargeLetterPipeline(config, client=make_client(response=NO_RESPONSE_FALLBACK))
        assert pipeline.generate_letter(anna, appendicitis, GenerationConfig()) == (
            NO_RESPONSE_FALLBACK
        )
