"""
Gemini Client - Google Gemini API Implementation

This module provides the concrete implementation of LLMClient for
Google's Gemini API (gemini-2.5-flash, gemini-2.5-pro, etc.)

Request Mapping:
    system_instruction → GenerativeModel(system_instruction=...)
    text part          → plain string
    binary part        → inline blob {"mime_type", "data": decoded bytes}
    temperature        → generation_config

Author: Shubham Singh
Date: October 2026
"""

import base64
from typing import Any, List, Optional

from loguru import logger

from discharge_letter_generation.clients.llm_client import BaseLLMClient
from discharge_letter_generation.core.exceptions import (
    LLMError,
    LLMRateLimitError,
    LLMContentFilteredError,
)
from discharge_letter_generation.core.models import ComposedRequest


# Permissive thresholds: clinical text trips the default filters.
SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_NONE"},
]


# =============================================================================
# STAGE 1: GEMINI CLIENT IMPLEMENTATION
# =============================================================================


class GeminiClient(BaseLLMClient):
    """
    Google Gemini API client for discharge letter generation.

    What it does:
        Sends the composed request to Gemini via the google-generativeai
        library, with text and inline binary parts in one user turn.

    Why it exists:
        1. Encapsulates Gemini-specific API logic
        2. Handles Gemini's safety settings
        3. Translates Gemini errors to domain exceptions

    Example:
        >>> client = GeminiClient(api_key="...", model_name="gemini-2.5-flash")
        >>> text = client.generate(request)
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-2.5-flash",
        temperature: float = 0.2,
    ):
        """
        Initialize Gemini client.

        STAGE 1.1: Initialize base class
        STAGE 1.2: Configure Gemini SDK

        Args:
            api_key: Google API key (Gemini)
            model_name: Model to use (default: gemini-2.5-flash)
            temperature: Sampling temperature
        """
        # =====================================================================
        # STAGE 1.1: INITIALIZE BASE CLASS
        # =====================================================================
        super().__init__(api_key=api_key, model_name=model_name, temperature=temperature)

        # =====================================================================
        # STAGE 1.2: CONFIGURE GEMINI SDK
        # =====================================================================
        self._genai = None
        self._initialize_client()

        logger.info(f"GeminiClient initialized | Model: {model_name}")

    def _initialize_client(self) -> None:
        """
        Configure the Gemini SDK with the API key.

        Lazy import to avoid requiring google-generativeai at module load.
        The model itself is created per request, because the system
        instruction changes with every letter.
        """
        try:
            import google.generativeai as genai

            genai.configure(api_key=self._api_key)
            self._genai = genai

        except ImportError:
            raise LLMError(
                "google-generativeai package not installed. "
                "Install with: pip install google-generativeai",
                provider="gemini",
            )
        except Exception as e:
            raise LLMError(
                f"Failed to initialize Gemini client: {e}", provider="gemini", original_error=e
            )

    # =========================================================================
    # STAGE 2: REQUEST MAPPING
    # =========================================================================

    @staticmethod
    def build_contents(request: ComposedRequest) -> List[Any]:
        """Map content parts to Gemini content items, preserving order."""
        contents: List[Any] = []
        for part in request.parts:
            if part.is_binary:
                contents.append(
                    {"mime_type": part.mime_type, "data": base64.b64decode(part.data)}
                )
            else:
                contents.append(part.text)
        return contents

    # =========================================================================
    # STAGE 3: API CALL IMPLEMENTATION
    # =========================================================================

    def _call_api(self, request: ComposedRequest) -> Optional[str]:
        """
        Make the actual Gemini API call.

        Returns:
            Generated text, or None for an empty response

        Raises:
            LLMError: If API call fails
            LLMRateLimitError: If rate limited or out of quota
            LLMContentFilteredError: If the prompt was blocked
        """
        try:
            model = self._genai.GenerativeModel(
                model_name=self._model_name,
                system_instruction=request.system_instruction,
                safety_settings=SAFETY_SETTINGS,
            )
            response = model.generate_content(
                self.build_contents(request),
                generation_config={"temperature": self._temperature},
            )

            # Check for blocked content
            feedback = getattr(response, "prompt_feedback", None)
            if feedback is not None and getattr(feedback, "block_reason", None):
                raise LLMContentFilteredError(provider="gemini", reason=str(feedback.block_reason))

            return self._extract_text(response)

        except LLMError:
            # Re-raise our own exceptions
            raise

        except Exception as e:
            error_str = str(e).lower()

            # Check for rate limiting
            if "rate" in error_str or "quota" in error_str or "429" in error_str:
                raise LLMRateLimitError(provider="gemini", original_error=e)

            # Generic error, message kept verbatim
            raise LLMError(
                str(e) or "Failed to generate discharge letter.",
                provider="gemini",
                original_error=e,
            )

    @staticmethod
    def _extract_text(response: Any) -> Optional[str]:
        """
        Pull the text out of a response.

        `response.text` raises ValueError when there are no text parts,
        so fall back to joining candidate parts.
        """
        try:
            text = response.text
        except ValueError:
            text = None
        if text:
            return text

        candidates = getattr(response, "candidates", None)
        if candidates:
            content = getattr(candidates[0], "content", None)
            if content and getattr(content, "parts", None):
                joined = "".join(getattr(p, "text", "") or "" for p in content.parts)
                return joined or None
        return None

    # =========================================================================
    # STAGE 4: PROPERTIES
    # =========================================================================

    @property
    def provider_name(self) -> str:
        """Return provider name."""
        return "gemini"
