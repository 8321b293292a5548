"""
OpenAI Client - OpenAI API Implementation

This module provides the concrete implementation of LLMClient for
OpenAI's chat completions API (gpt-4o and other vision-capable models).

Request Mapping:
    system_instruction → system message
    text part          → {"type": "text"}
    image part         → {"type": "image_url"} with a data URL
    other binary part  → {"type": "file"} with file_data (e.g. PDFs)

Author: Shubham Singh
Date: October 2026
"""

from typing import Any, Dict, List, Optional

from loguru import logger

from discharge_letter_generation.clients.llm_client import BaseLLMClient
from discharge_letter_generation.core.exceptions import (
    LLMError,
    LLMRateLimitError,
    LLMContentFilteredError,
)
from discharge_letter_generation.core.models import ComposedRequest


# =============================================================================
# STAGE 1: OPENAI CLIENT IMPLEMENTATION
# =============================================================================


class OpenAIClient(BaseLLMClient):
    """
    OpenAI API client for discharge letter generation.

    What it does:
        Sends the composed request to a vision-capable OpenAI model as a
        system message plus one multi-part user message.

    When to use:
        - When LLM_PROVIDER=openai
        - Alternative to Gemini

    Example:
        >>> client = OpenAIClient(api_key="...", model_name="gpt-4o")
        >>> text = client.generate(request)
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = "gpt-4o",
        temperature: float = 0.2,
        max_tokens: int = 4096,
    ):
        """
        Initialize OpenAI client.

        Args:
            api_key: OpenAI API key
            model_name: Model to use (default: gpt-4o)
            temperature: Sampling temperature
            max_tokens: Output token limit
        """
        super().__init__(api_key=api_key, model_name=model_name, temperature=temperature)
        self._max_tokens = max_tokens

        self._client = None
        self._initialize_client()

        logger.info(f"OpenAIClient initialized | Model: {model_name}")

    def _initialize_client(self) -> None:
        """
        Initialize the OpenAI client.

        Lazy import to avoid requiring openai at module load.
        """
        try:
            from openai import OpenAI

            self._client = OpenAI(api_key=self._api_key)

        except ImportError:
            raise LLMError(
                "openai package not installed. Install with: pip install openai",
                provider="openai",
            )
        except Exception as e:
            raise LLMError(
                f"Failed to initialize OpenAI client: {e}", provider="openai", original_error=e
            )

    # =========================================================================
    # STAGE 2: REQUEST MAPPING
    # =========================================================================

    @staticmethod
    def build_messages(request: ComposedRequest) -> List[Dict[str, Any]]:
        """Map the request to chat messages, preserving part order."""
        content: List[Dict[str, Any]] = []
        for part in request.parts:
            if part.is_text:
                content.append({"type": "text", "text": part.text})
            elif part.mime_type and part.mime_type.startswith("image/"):
                content.append({"type": "image_url", "image_url": {"url": part.data_url}})
            else:
                content.append(
                    {
                        "type": "file",
                        "file": {
                            "filename": part.file_name or "attachment",
                            "file_data": part.data_url,
                        },
                    }
                )

        return [
            {"role": "system", "content": request.system_instruction},
            {"role": "user", "content": content},
        ]

    # =========================================================================
    # STAGE 3: API CALL IMPLEMENTATION
    # =========================================================================

    def _call_api(self, request: ComposedRequest) -> Optional[str]:
        """
        Make the actual OpenAI API call.

        Raises:
            LLMError: If API call fails
            LLMRateLimitError: If rate limited
            LLMContentFilteredError: If content was filtered
        """
        try:
            response = self._client.chat.completions.create(
                model=self._model_name,
                messages=self.build_messages(request),
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )

            if response.choices:
                choice = response.choices[0]
                if choice.finish_reason == "content_filter":
                    raise LLMContentFilteredError(provider="openai", reason="content_filter")
                return choice.message.content
            return None

        except LLMError:
            raise

        except Exception as e:
            error_str = str(e).lower()

            if "rate" in error_str or "quota" in error_str or "429" in error_str:
                raise LLMRateLimitError(provider="openai", original_error=e)

            if "content_filter" in error_str or "policy" in error_str:
                raise LLMContentFilteredError(provider="openai", reason=str(e))

            raise LLMError(
                str(e) or "Failed to generate discharge letter.",
                provider="openai",
                original_error=e,
            )

    # =========================================================================
    # STAGE 4: PROPERTIES
    # =========================================================================

    @property
    def provider_name(self) -> str:
        """Return provider name."""
        return "openai"
