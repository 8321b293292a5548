"""
Configuration for Discharge Letter Generation Pipeline

This module defines the configuration dataclass used to initialize the
discharge letter pipeline. Configuration is:
    1. Loaded from environment variables (with .env support)
    2. Read once at startup
    3. Checked for a credential on every generation attempt

Configuration Hierarchy:
    PipelineConfiguration (main config)
    ├── LLM Settings (API keys, model names, temperature)
    ├── Form Defaults (language, audience)
    └── Logging Settings (level)

Usage:
    from discharge_letter_generation.core.config import PipelineConfiguration

    # Load from environment
    config = PipelineConfiguration.from_environment()

    # Explicit values, e.g. in tests
    config = PipelineConfiguration(gemini_api_key="your-key")

Author: Shubham Singh
Date: October 2026
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from discharge_letter_generation.core.enums import Audience, TargetLanguage
from discharge_letter_generation.core.exceptions import ConfigurationError


# =============================================================================
# STAGE 1: DEFAULT VALUES
# =============================================================================
# Every field below falls back to one of these when the env var is unset.


class ConfigDefaults:
    """Default configuration values."""

    # -------------------------------------------------------------------------
    # 1.1 LLM Provider Defaults
    # -------------------------------------------------------------------------
    DEFAULT_LLM_PROVIDER = "gemini"
    DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
    DEFAULT_OPENAI_MODEL = "gpt-4o"
    DEFAULT_TEMPERATURE = 0.2  # low: factual consistency over creativity

    # -------------------------------------------------------------------------
    # 1.2 Form Defaults
    # -------------------------------------------------------------------------
    DEFAULT_LANGUAGE = TargetLanguage.DE
    DEFAULT_AUDIENCE = Audience.DOCTOR

    # -------------------------------------------------------------------------
    # 1.3 Logging Defaults
    # -------------------------------------------------------------------------
    DEFAULT_LOG_LEVEL = "INFO"


SUPPORTED_PROVIDERS = ("gemini", "openai")


# =============================================================================
# STAGE 2: CONFIGURATION DATACLASS
# =============================================================================


@dataclass
class PipelineConfiguration:
    """
    Configuration for the discharge letter pipeline.

    What it does:
        Encapsulates the API credential, model choice, sampling temperature
        and form defaults needed to run the pipeline.

    Why it exists:
        The CLI and LetterSession read defaults from one place, and tests
        build it directly without touching the environment.

    Credential Policy:
        A missing credential does not prevent building the pipeline (requests
        can still be composed for a dry run). Every generation attempt calls
        require_api_key(), which fails with ConfigurationError before any
        network call.

    Example:
        >>> config = PipelineConfiguration.from_environment()
        >>> config.gemini_model
        'gemini-2.5-flash'
    """

    # -------------------------------------------------------------------------
    # 2.1 LLM Provider Configuration
    # -------------------------------------------------------------------------
    gemini_api_key: Optional[str] = None
    """Gemini credential (GEMINI_API_KEY, then GOOGLE_API_KEY, then API_KEY)."""

    gemini_model: str = ConfigDefaults.DEFAULT_GEMINI_MODEL
    """Gemini model name (e.g., 'gemini-2.5-flash', 'gemini-2.5-pro')."""

    openai_api_key: Optional[str] = None
    """OpenAI API key. Required if using OpenAI provider."""

    openai_model: str = ConfigDefaults.DEFAULT_OPENAI_MODEL
    """OpenAI model name (e.g., 'gpt-4o')."""

    llm_provider: str = ConfigDefaults.DEFAULT_LLM_PROVIDER
    """Which LLM provider to use: 'gemini' or 'openai'."""

    temperature: float = ConfigDefaults.DEFAULT_TEMPERATURE
    """Sampling temperature; kept low for deterministic, factual output."""

    # -------------------------------------------------------------------------
    # 2.2 Form Defaults
    # -------------------------------------------------------------------------
    default_language: TargetLanguage = ConfigDefaults.DEFAULT_LANGUAGE
    """Language preselected for new sessions."""

    default_audience: Audience = ConfigDefaults.DEFAULT_AUDIENCE
    """Audience preselected for new sessions."""

    # -------------------------------------------------------------------------
    # 2.3 Logging Configuration
    # -------------------------------------------------------------------------
    log_level: str = ConfigDefaults.DEFAULT_LOG_LEVEL
    """Minimum loguru level for the CLI sink."""

    # -------------------------------------------------------------------------
    # 2.4 Validation Methods
    # -------------------------------------------------------------------------

    @property
    def active_model(self) -> str:
        """Model name for the configured provider."""
        return self.gemini_model if self.llm_provider == "gemini" else self.openai_model

    @property
    def has_credentials(self) -> bool:
        """Whether an API key is configured for the active provider."""
        if self.llm_provider == "openai":
            return bool(self.openai_api_key)
        return bool(self.gemini_api_key)

    def require_api_key(self) -> str:
        """
        Return the API key of the active provider.

        Raises:
            ConfigurationError: If the provider is unsupported or no key is set
        """
        if self.llm_provider not in SUPPORTED_PROVIDERS:
            raise ConfigurationError(
                f"Unsupported LLM provider: {self.llm_provider}",
                context={"supported": list(SUPPORTED_PROVIDERS)},
            )

        key = self.openai_api_key if self.llm_provider == "openai" else self.gemini_api_key
        if not key:
            setting = "OPENAI_API_KEY" if self.llm_provider == "openai" else "GEMINI_API_KEY"
            raise ConfigurationError(
                "API Key is missing.",
                context={"setting": setting, "provider": self.llm_provider},
            )
        return key

    def validate(self) -> None:
        """
        Validate configuration parameters.

        Checks:
            1. Provider is supported and its API key is configured
            2. Temperature is in the provider-accepted range

        Raises:
            ConfigurationError: If configuration is invalid
        """
        self.require_api_key()

        if not (0.0 <= self.temperature <= 2.0):
            raise ConfigurationError(
                f"Temperature must be 0.0-2.0, got {self.temperature}",
                context={"temperature": self.temperature},
            )

    # -------------------------------------------------------------------------
    # 2.5 Factory Methods
    # -------------------------------------------------------------------------

    @classmethod
    def from_environment(
        cls, env_file: Optional[str] = None, validate_on_load: bool = False
    ) -> "PipelineConfiguration":
        """
        Load configuration from environment variables.

        STAGE 1: Load .env file (if specified or found)
        STAGE 2: Read environment variables
        STAGE 3: Convert to typed configuration
        STAGE 4: Validate configuration (optional)

        Args:
            env_file: Path to .env file (optional, auto-detected if not provided)
            validate_on_load: Whether to validate after loading. Off by default:
                the credential is only mandatory for generation attempts.

        Returns:
            Configured PipelineConfiguration instance

        Raises:
            ConfigurationError: If a setting cannot be parsed, or validation fails
        """
        # STAGE 1: Load .env file
        if env_file:
            load_dotenv(env_file)
        else:
            possible_locations = [
                Path.cwd() / ".env",
                Path(__file__).parent.parent.parent / ".env",
            ]
            for location in possible_locations:
                if location.exists():
                    load_dotenv(location)
                    break

        # STAGE 2: Read environment variables
        gemini_key = (
            os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or os.getenv("API_KEY")
        )
        openai_key = os.getenv("OPENAI_API_KEY")

        llm_provider = os.getenv("LLM_PROVIDER", ConfigDefaults.DEFAULT_LLM_PROVIDER).lower()
        if not gemini_key and openai_key and "LLM_PROVIDER" not in os.environ:
            llm_provider = "openai"

        # STAGE 3: Create configuration
        try:
            config = cls(
                gemini_api_key=gemini_key,
                gemini_model=os.getenv("GEMINI_MODEL", ConfigDefaults.DEFAULT_GEMINI_MODEL),
                openai_api_key=openai_key,
                openai_model=os.getenv("OPENAI_MODEL", ConfigDefaults.DEFAULT_OPENAI_MODEL),
                llm_provider=llm_provider,
                temperature=float(os.getenv("TEMPERATURE", ConfigDefaults.DEFAULT_TEMPERATURE)),
                default_language=TargetLanguage.from_string(
                    os.getenv("DEFAULT_LANGUAGE", ConfigDefaults.DEFAULT_LANGUAGE.value)
                ),
                default_audience=Audience.from_string(
                    os.getenv("DEFAULT_AUDIENCE", ConfigDefaults.DEFAULT_AUDIENCE.value)
                ),
                log_level=os.getenv("LOG_LEVEL", ConfigDefaults.DEFAULT_LOG_LEVEL).upper(),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid configuration value: {e}") from e

        # STAGE 4: Validate
        if validate_on_load:
            config.validate()

        return config

    def to_dict(self) -> dict:
        """Convert configuration to dictionary (for logging/debugging)."""
        return {
            "llm_provider": self.llm_provider,
            "gemini_model": self.gemini_model,
            "openai_model": self.openai_model,
            "gemini_api_key": "***" if self.gemini_api_key else None,
            "openai_api_key": "***" if self.openai_api_key else None,
            "temperature": self.temperature,
            "default_language": self.default_language.value,
            "default_audience": self.default_audience.value,
            "log_level": self.log_level,
        }
