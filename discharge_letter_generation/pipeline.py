"""
Discharge Letter Generation Pipeline - Main Orchestrator

This is the PUBLIC API entry point for the discharge letter system. It
coordinates the attachment, generation and client layers into a simple,
easy-to-use interface.

Architecture Diagram:
    ┌─────────────────────────────────────────────────────────────────────┐
    │                      DischargeLetterPipeline                        │
    │                         (This Orchestrator)                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   ┌─────────────┐    ┌───────────────┐    ┌─────────────────────┐   │
    │   │ Normalizer  │ →  │ PromptBuilder │ →  │ LLM Client (1 call) │   │
    │   └─────────────┘    └───────────────┘    └─────────────────────┘   │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

Why Single Entry Point:
    1. Simple API: Callers hand over the form state and get a letter back
    2. Encapsulation: Normalization and composition hidden behind facade
    3. Testability: Every component can be overridden

Usage:
    from discharge_letter_generation import DischargeLetterPipeline

    pipeline = DischargeLetterPipeline.from_environment()
    letter = pipeline.generate_letter(patient, clinical, GenerationConfig(), attachments)

Author: Shubham Singh
Date: October 2026
"""

from typing import Iterable, Optional

from loguru import logger

from discharge_letter_generation.attachments import AttachmentNormalizer
from discharge_letter_generation.clients import GeminiClient, LLMClientProtocol, OpenAIClient
from discharge_letter_generation.core.config import PipelineConfiguration
from discharge_letter_generation.core.exceptions import (
    ConfigurationError,
    GenerationError,
    LLMError,
)
from discharge_letter_generation.core.models import (
    Attachment,
    ClinicalRecord,
    ComposedRequest,
    GenerationConfig,
    PatientRecord,
)
from discharge_letter_generation.generation import PromptBuilder


# =============================================================================
# STAGE 1: PIPELINE CLASS
# =============================================================================


class DischargeLetterPipeline:
    """
    Main orchestrator for discharge letter generation.

    What it does:
        Turns one form state (demographics, clinical fields, options,
        attachments) into one generated letter with a single model call.

    How it works:
        STAGE 1: Store configuration and components (client created lazily)
        STAGE 2: On generate_letter():
            2.1 Check the credential (fails before any network I/O)
            2.2 Normalize attachments into content parts
            2.3 Compose system instruction + ordered parts
            2.4 Call the model once, return its text verbatim

    Example:
        >>> pipeline = DischargeLetterPipeline.from_environment()
        >>> request = pipeline.compose_request(patient, clinical, GenerationConfig())
        >>> print(request.system_instruction[:80])
    """

    def __init__(
        self,
        config: PipelineConfiguration,
        client: Optional[LLMClientProtocol] = None,
        normalizer: Optional[AttachmentNormalizer] = None,
        builder: Optional[PromptBuilder] = None,
    ):
        """
        Initialize pipeline with configuration and optional component overrides.

        Args:
            config: Pipeline configuration
            client: Optional LLM client override (for testing)
            normalizer: Optional attachment normalizer override
            builder: Optional prompt builder override
        """
        # =====================================================================
        # STAGE 1.1: STORE CONFIGURATION
        # =====================================================================
        self._config = config

        # =====================================================================
        # STAGE 1.2: COMPONENTS
        # =====================================================================
        self._client = client
        self._normalizer = normalizer or AttachmentNormalizer()
        self._builder = builder or PromptBuilder()

        # =====================================================================
        # STAGE 1.3: TRACKING STATE
        # =====================================================================
        self._letters_generated = 0
        self._letters_failed = 0

        logger.info(
            f"DischargeLetterPipeline initialized | "
            f"Provider: {config.llm_provider} | "
            f"Model: {config.active_model} | "
            f"Credentials: {'yes' if config.has_credentials else 'no'}"
        )

    # =========================================================================
    # STAGE 2: REQUEST COMPOSITION
    # =========================================================================

    def compose_request(
        self,
        patient: PatientRecord,
        clinical: ClinicalRecord,
        generation_config: GenerationConfig,
        attachments: Iterable[Attachment] = (),
    ) -> ComposedRequest:
        """
        Normalize attachments and compose the request. No network I/O.

        Word documents that cannot be parsed become an inline error segment;
        they never abort composition.
        """
        parts = self._normalizer.normalize_all(attachments)
        return self._builder.compose(patient, clinical, generation_config, parts)

    # =========================================================================
    # STAGE 3: MAIN GENERATION API
    # =========================================================================

    def generate_letter(
        self,
        patient: PatientRecord,
        clinical: ClinicalRecord,
        generation_config: GenerationConfig,
        attachments: Iterable[Attachment] = (),
    ) -> str:
        """
        Generate a discharge letter.

        Args:
            patient: Demographics from the form
            clinical: Clinical free-text fields
            generation_config: Language, audience and signatory options
            attachments: Uploaded files, in upload order

        Returns:
            The model's text verbatim (or the fallback for an empty response)

        Raises:
            ConfigurationError: If no API key is configured (before any call)
            GenerationError: If composition or the model call fails
        """
        # =====================================================================
        # STAGE 3.1: CREDENTIAL CHECK
        # =====================================================================
        try:
            self._config.require_api_key()
        except ConfigurationError:
            self._letters_failed += 1
            raise

        # =====================================================================
        # STAGE 3.2: COMPOSE
        # =====================================================================
        request = self.compose_request(patient, clinical, generation_config, attachments)

        logger.info(
            f"Generating discharge letter | "
            f"Language: {generation_config.target_language.value} | "
            f"Audience: {generation_config.audience.value} | "
            f"Parts: {len(request.parts)}"
        )

        # =====================================================================
        # STAGE 3.3: SINGLE MODEL CALL
        # =====================================================================
        try:
            letter = self.client.generate(request)
        except (GenerationError, ConfigurationError):
            self._letters_failed += 1
            raise
        except Exception as e:
            self._letters_failed += 1
            logger.error(f"Discharge letter generation failed: {e}")
            raise LLMError(
                str(e) or "Failed to generate discharge letter.",
                provider=self._config.llm_provider,
                original_error=e,
            ) from e

        self._letters_generated += 1
        logger.info(f"Discharge letter generated | Length: {len(letter)} chars")
        return letter

    # =========================================================================
    # STAGE 4: FACTORY METHODS
    # =========================================================================

    @classmethod
    def from_environment(cls, env_file: Optional[str] = None) -> "DischargeLetterPipeline":
        """
        Create pipeline from environment configuration.

        The credential is not required here; it is checked on each
        generation attempt, so dry runs work without a key.

        Args:
            env_file: Path to .env file (optional)

        Returns:
            Configured DischargeLetterPipeline
        """
        config = PipelineConfiguration.from_environment(env_file=env_file)
        return cls(config)

    # =========================================================================
    # STAGE 5: PRIVATE HELPERS
    # =========================================================================

    def _create_llm_client(self, config: PipelineConfiguration) -> LLMClientProtocol:
        """Create LLM client from configuration."""
        api_key = config.require_api_key()
        if config.llm_provider == "openai":
            return OpenAIClient(
                api_key=api_key,
                model_name=config.openai_model,
                temperature=config.temperature,
            )
        return GeminiClient(
            api_key=api_key,
            model_name=config.gemini_model,
            temperature=config.temperature,
        )

    # =========================================================================
    # STAGE 6: PROPERTIES
    # =========================================================================

    @property
    def client(self) -> LLMClientProtocol:
        """The LLM client, created on first use."""
        if self._client is None:
            self._client = self._create_llm_client(self._config)
        return self._client

    @property
    def config(self) -> PipelineConfiguration:
        """Get pipeline configuration."""
        return self._config

    @property
    def builder(self) -> PromptBuilder:
        """Get the prompt builder."""
        return self._builder

    @property
    def letters_generated(self) -> int:
        """Number of letters generated successfully."""
        return self._letters_generated

    @property
    def letters_failed(self) -> int:
        """Failed generation attempts, including missing-credential failures."""
        return self._letters_failed
