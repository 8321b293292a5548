"""
Letter Model Clients - Shared Contract

Every provider client accepts one ComposedRequest and returns the letter
text. The base class holds the call handling they share: one attempt,
error wrapping, the empty-response fallback and call metrics.

Layers:
    - LLMClientProtocol: what the pipeline depends on
    - BaseLLMClient: call handling shared by providers
    - GeminiClient / OpenAIClient: request translation per SDK

Call Policy:
    One best-effort call per user-initiated generation. No retry, no
    backoff, no caching, no streaming. A failed call surfaces as
    LLMError carrying the underlying message.

Author: Shubham Singh
Date: October 2026
"""

from abc import ABC, abstractmethod
from typing import Optional, Protocol, runtime_checkable

from loguru import logger

from discharge_letter_generation.core.constants import NO_RESPONSE_FALLBACK
from discharge_letter_generation.core.exceptions import LLMError
from discharge_letter_generation.core.models import ComposedRequest


# =============================================================================
# STAGE 1: LLM CLIENT PROTOCOL
# =============================================================================
# The pipeline only sees this interface; tests pass fakes that match it.


@runtime_checkable
class LLMClientProtocol(Protocol):
    """
    Structural interface for anything that can write a discharge letter.

    What it does:
        Lets the pipeline accept a provider client or a test double
        without either inheriting from BaseLLMClient.

    Required Methods:
        generate(request) → Generate letter text from a composed request
    """

    def generate(self, request: ComposedRequest) -> str:
        """
        Generate text from a composed request.

        Args:
            request: System instruction plus ordered content parts

        Returns:
            Generated text string

        Raises:
            LLMError: If generation fails
        """
        ...

    @property
    def model_name(self) -> str:
        """Model identifier sent with each request."""
        ...

    @property
    def provider_name(self) -> str:
        """Short provider key, e.g. 'gemini'."""
        ...


# =============================================================================
# STAGE 2: BASE LLM CLIENT (ABSTRACT)
# =============================================================================


class BaseLLMClient(ABC):
    """
    Shared call handling for provider clients.

    What it does:
        Runs the single provider call, turns unexpected SDK failures into
        LLMError and substitutes the fallback text for an empty answer.
        Subclasses only translate the request for their SDK.

    Subclass hooks:
        - _call_api(request): Actual API call, returns text or None
        - provider_name: short provider key used in logs and errors

    Handled here:
        - Fixed low temperature
        - Wrapping of unexpected errors into LLMError (message kept verbatim)
        - Fallback text for empty responses
        - Logging and metrics
    """

    def __init__(self, api_key: str, model_name: str, temperature: float = 0.2):
        """
        Store credentials and model settings.

        Args:
            api_key: Provider credential
            model_name: Model identifier
            temperature: Sampling temperature (kept low for factual output)
        """
        # =====================================================================
        # STAGE 2.1: STORE CONFIGURATION
        # =====================================================================
        self._api_key = api_key
        self._model_name = model_name
        self._temperature = temperature

        # =====================================================================
        # STAGE 2.2: TRACKING STATE
        # =====================================================================
        self._total_calls = 0
        self._failed_calls = 0

    # =========================================================================
    # STAGE 3: PUBLIC API
    # =========================================================================

    def generate(self, request: ComposedRequest) -> str:
        """
        Generate letter text with a single API call.

        Algorithm:
            1. Call API once
            2. Wrap any failure into LLMError
            3. Replace an empty response with the fallback text
            4. Track metrics

        Args:
            request: Composed request

        Returns:
            Generated text, verbatim, or the fallback string if empty

        Raises:
            LLMError: If the call fails
        """
        logger.info(
            f"Calling {self.provider_name} | Model: {self._model_name} | "
            f"Parts: {len(request.parts)} | Binary: {request.binary_part_count}"
        )

        try:
            text = self._call_api(request)
        except LLMError:
            self._failed_calls += 1
            raise
        except Exception as e:
            self._failed_calls += 1
            logger.error(f"Unexpected error in {self.provider_name} call: {e}")
            raise LLMError(
                str(e) or "Failed to generate discharge letter.",
                provider=self.provider_name,
                original_error=e,
            ) from e

        self._total_calls += 1

        if not text:
            logger.warning(f"{self.provider_name} returned an empty response")
            return NO_RESPONSE_FALLBACK

        logger.info(f"Received response | Length: {len(text)} chars")
        return text

    # =========================================================================
    # STAGE 4: ABSTRACT METHODS
    # =========================================================================

    @abstractmethod
    def _call_api(self, request: ComposedRequest) -> Optional[str]:
        """
        Send the request through the provider SDK.

        Returns:
            Generated text, or None when the response carries no text

        Raises:
            LLMError: If the provider rejects the request
        """
        ...

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Short provider key used in logs and errors."""
        ...

    # =========================================================================
    # STAGE 5: COMMON IMPLEMENTATION
    # =========================================================================

    @property
    def model_name(self) -> str:
        """Model identifier."""
        return self._model_name

    @property
    def temperature(self) -> float:
        """Return the sampling temperature."""
        return self._temperature

    # =========================================================================
    # STAGE 6: METRICS
    # =========================================================================

    @property
    def total_calls(self) -> int:
        """Calls that returned a response."""
        return self._total_calls

    @property
    def failed_calls(self) -> int:
        """Calls that raised."""
        return self._failed_calls

    @property
    def success_rate(self) -> float:
        """Share of calls that returned a response, in percent."""
        total = self._total_calls + self._failed_calls
        if total == 0:
            return 100.0
        return (self._total_calls / total) * 100
