"""Tests for LLM clients with the provider SDKs patched out."""
import base64
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from discharge_letter_generation.clients import BaseLLMClient, GeminiClient, OpenAIClient
from discharge_letter_generation.core.constants import NO_RESPONSE_FALLBACK
from discharge_letter_generation.core.exceptions import (
    LLMContentFilteredError,
    LLMError,
    LLMRateLimitError,
)
from discharge_letter_generation.core.models import ComposedRequest, ContentPart


@pytest.fixture
def request_with_image(png_bytes):
    return ComposedRequest(
        system_instruction="SYSTEM",
        parts=[
            ContentPart.from_text("PROMPT"),
            ContentPart.from_text("\n[ATTACHMENT: POSTOP - Filename: wound.png]\n"),
            ContentPart.from_binary(
                base64.b64encode(png_bytes).decode("ascii"), "image/png", "wound.png"
            ),
        ],
    )


class StubClient(BaseLLMClient):
    """Minimal concrete client returning a canned value."""

    def __init__(self, result=None, error=None):
        super().__init__(api_key="k", model_name="stub")
        self.result = result
        self.error = error

    def _call_api(self, request):
        if self.error:
            raise self.error
        return self.result

    @property
    def provider_name(self):
        return "stub"


class TestBaseLLMClient:
    """Tests for shared call handling."""

    def test_text_returned(self, request_with_image):
        """Test that text is returned and counted."""
        client = StubClient(result="Letter")
        assert client.generate(request_with_image) == "Letter"
        assert client.total_calls == 1

    @pytest.mark.parametrize("empty", [None, ""])
    def test_empty_response_fallback(self, request_with_image, empty):
        """Test that empty responses become the fallback string."""
        assert StubClient(result=empty).generate(request_with_image) == NO_RESPONSE_FALLBACK

    def test_foreign_error_wrapped_verbatim(self, request_with_image):
        """Test that unexpected errors keep their message."""
        client = StubClient(error=RuntimeError("socket closed"))

        with pytest.raises(LLMError) as exc_info:
            client.generate(request_with_image)

        assert exc_info.value.message == "socket closed"
        assert client.failed_calls == 1
        assert client.success_rate == 0.0

    def test_error_without_message_gets_default(self, request_with_image):
        """Test the generic message for errors without text."""
        with pytest.raises(LLMError) as exc_info:
            StubClient(error=RuntimeError()).generate(request_with_image)
        assert exc_info.value.message == "Failed to generate discharge letter."


class TestGeminiClient:
    """Tests for GeminiClient with google.generativeai patched."""

    @pytest.fixture
    def genai(self, monkeypatch):
        module = pytest.importorskip("google.generativeai")
        monkeypatch.setattr(module, "configure", MagicMock())
        model_cls = MagicMock()
        monkeypatch.setattr(module, "GenerativeModel", model_cls)
        return SimpleNamespace(configure=module.configure, model_cls=model_cls)

    @staticmethod
    def response(text="Letter", block_reason=None):
        return SimpleNamespace(
            text=text,
            prompt_feedback=SimpleNamespace(block_reason=block_reason),
            candidates=[],
        )

    def test_configures_sdk_with_key(self, genai):
        """Test that the API key is handed to the SDK."""
        GeminiClient(api_key="secret")
        genai.configure.assert_called_once_with(api_key="secret")

    def test_request_mapping(self, genai, request_with_image, png_bytes):
        """Test that instruction, parts and temperature are sent in order."""
        genai.model_cls.return_value.generate_content.return_value = self.response()
        client = GeminiClient(api_key="k", model_name="gemini-2.5-flash", temperature=0.2)

        assert client.generate(request_with_image) == "Letter"

        model_kwargs = genai.model_cls.call_args.kwargs
        assert model_kwargs["model_name"] == "gemini-2.5-flash"
        assert model_kwargs["system_instruction"] == "SYSTEM"

        contents = genai.model_cls.return_value.generate_content.call_args.args[0]
        assert contents[:2] == ["PROMPT", "\n[ATTACHMENT: POSTOP - Filename: wound.png]\n"]
        assert contents[2] == {"mime_type": "image/png", "data": png_bytes}
        call_kwargs = genai.model_cls.return_value.generate_content.call_args.kwargs
        assert call_kwargs["generation_config"] == {"temperature": 0.2}

    def test_blocked_prompt(self, genai, request_with_image):
        """Test that a blocked prompt raises LLMContentFilteredError."""
        genai.model_cls.return_value.generate_content.return_value = self.response(
            text=None, block_reason="SAFETY"
        )
        with pytest.raises(LLMContentFilteredError):
            GeminiClient(api_key="k").generate(request_with_image)

    def test_quota_error(self, genai, request_with_image):
        """Test that quota errors are classified as rate limits."""
        genai.model_cls.return_value.generate_content.side_effect = Exception(
            "429 Resource has been exhausted (e.g. check quota)."
        )
        with pytest.raises(LLMRateLimitError) as exc_info:
            GeminiClient(api_key="k").generate(request_with_image)
        assert "quota" in exc_info.value.message

    def test_generic_error_message_kept(self, genai, request_with_image):
        """Test that other SDK errors keep their message."""
        genai.model_cls.return_value.generate_content.side_effect = Exception("400 API key not valid")
        with pytest.raises(LLMError) as exc_info:
            GeminiClient(api_key="k").generate(request_with_image)
        assert exc_info.value.message == "400 API key not valid"

    def test_text_from_candidates(self):
        """Test fallback to candidate parts when .text is unavailable."""

        class NoText:
            @property
            def text(self):
                raise ValueError("no text parts")

            candidates = [
                SimpleNamespace(
                    content=SimpleNamespace(parts=[SimpleNamespace(text="A"), SimpleNamespace(text="B")])
                )
            ]

        assert GeminiClient._extract_text(NoText()) == "AB"

    def test_empty_response_fallback(self, genai, request_with_image):
        """Test that an empty response yields the fallback string."""
        genai.model_cls.return_value.generate_content.return_value = self.response(text="")
        assert GeminiClient(api_key="k").generate(request_with_image) == NO_RESPONSE_FALLBACK


class TestOpenAIClient:
    """Tests for OpenAIClient message mapping."""

    def test_build_messages(self, request_with_image):
        """Test that images become image_url parts after the text parts."""
        messages = OpenAIClient.build_messages(request_with_image)

        assert messages[0] == {"role": "system", "content": "SYSTEM"}
        content = messages[1]["content"]
        assert content[0] == {"type": "text", "text": "PROMPT"}
        assert content[2]["type"] == "image_url"
        assert content[2]["image_url"]["url"].startswith("data:image/png;base64,")

    def test_pdf_sent_as_file(self):
        """Test that PDFs are sent as file parts."""
        request = ComposedRequest(
            system_instruction="S",
            parts=[ContentPart.from_binary("JVBERg==", "application/pdf", "labor.pdf")],
        )
        part = OpenAIClient.build_messages(request)[1]["content"][0]

        assert part == {
            "type": "file",
            "file": {"filename": "labor.pdf", "file_data": "data:application/pdf;base64,JVBERg=="},
        }

    def test_call_uses_chat_completions(self, monkeypatch, request_with_image):
        """Test a full call against a patched OpenAI SDK client."""
        openai = pytest.importorskip("openai")
        sdk = MagicMock()
        sdk.chat.completions.create.return_value = SimpleNamespace(
            choices=[
                SimpleNamespace(finish_reason="stop", message=SimpleNamespace(content="Letter"))
            ]
        )
        monkeypatch.setattr(openai, "OpenAI", MagicMock(return_value=sdk))

        client = OpenAIClient(api_key="sk", model_name="gpt-4o")

        assert client.generate(request_with_image) == "Letter"
        kwargs = sdk.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["temperature"] == 0.2
