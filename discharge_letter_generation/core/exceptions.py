"""
Domain Exceptions for Discharge Letter Generation

This module defines all custom exceptions used throughout the discharge
letter pipeline. The session and CLI show `message` to the user as-is;
`context` is appended only in str() for logs.

Exception Hierarchy:
    DischargeLetterError (base)
    ├── ConfigurationError          → Missing credential / invalid settings
    ├── AttachmentError             → Attachment-related errors
    │   ├── UnsupportedAttachmentError
    │   └── AttachmentExtractionError   (non-fatal, degraded)
    └── GenerationError             → Letter generation failures
        ├── PromptError
        ├── GenerationInProgressError
        └── LLMError
            ├── LLMRateLimitError
            └── LLMContentFilteredError

Usage:
    from discharge_letter_generation.core.exceptions import GenerationError

    try:
        letter = pipeline.generate_letter(patient, clinical, config, attachments)
    except GenerationError as e:
        logger.error(f"Generation failed: {e.message}")

Author: Shubham Singh
Date: October 2026
"""

from typing import Optional


# =============================================================================
# STAGE 1: BASE EXCEPTION
# =============================================================================
# Everything raised on purpose by the package derives from here.


class DischargeLetterError(Exception):
    """
    Base exception for all discharge letter errors.

    What it does:
        Root of the package's error tree. LetterSession catches it to turn
        any failed attempt into the current error string.

    Attributes:
        message: Human-readable error description (surfaced to the user verbatim)
        context: Dictionary of additional context for debugging
    """

    def __init__(self, message: str, context: Optional[dict] = None):
        """
        Initialize with message and optional context.

        Args:
            message: Human-readable error description
            context: Additional debugging context (setting, file name, provider)
        """
        self.message = message
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format message with context for display."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{context_str}]"
        return self.message


# =============================================================================
# STAGE 2: CONFIGURATION ERRORS
# =============================================================================


class ConfigurationError(DischargeLetterError):
    """
    Error in pipeline configuration.

    When raised:
        - Missing API credential at generation time
        - Unsupported LLM provider
        - Out-of-range temperature

    Recoverable by fixing configuration and retrying.

    Example:
        >>> raise ConfigurationError(
        ...     "API key is missing.",
        ...     context={"setting": "GEMINI_API_KEY", "provider": "gemini"}
        ... )
    """

    pass


# =============================================================================
# STAGE 3: ATTACHMENT ERRORS
# =============================================================================


class AttachmentError(DischargeLetterError):
    """
    Base exception for attachment-related errors.

    Attributes:
        file_name: Name of the offending file
        category: Attachment category value
    """

    def __init__(self, message: str, file_name: str, category: str):
        self.file_name = file_name
        self.category = category
        super().__init__(message, context={"file_name": file_name, "category": category})


class UnsupportedAttachmentError(AttachmentError):
    """
    File type is outside the upload allowlist for its category.

    When raised:
        - A text file, spreadsheet or archive is uploaded
        - A PDF/Word file is uploaded into an image-only slot (pre-op/post-op)

    Attributes:
        mime_type: The rejected MIME type
    """

    def __init__(self, file_name: str, category: str, mime_type: Optional[str]):
        self.mime_type = mime_type
        super().__init__(
            f"Unsupported file type '{mime_type or 'unknown'}' for {file_name}",
            file_name=file_name,
            category=category,
        )


class AttachmentExtractionError(AttachmentError):
    """
    Word document could not be parsed.

    Non-fatal: the normalizer catches this and substitutes a placeholder
    notice, and generation proceeds with the remaining attachments.

    Attributes:
        reason: Why extraction failed
    """

    def __init__(self, file_name: str, category: str, reason: str):
        self.reason = reason
        super().__init__(
            f"Could not parse Word document {file_name}: {reason}",
            file_name=file_name,
            category=category,
        )


# =============================================================================
# STAGE 4: GENERATION ERRORS
# =============================================================================


class GenerationError(DischargeLetterError):
    """
    Base exception for letter generation errors.

    Fatal for the current attempt; the user may retry manually.
    """

    pass


class PromptError(GenerationError):
    """
    Error constructing the request before it is sent to the LLM.

    When raised:
        - Placeholder tokens remain after template substitution
    """

    pass


class GenerationInProgressError(GenerationError):
    """A generation was requested while another one is still in flight."""

    def __init__(self):
        super().__init__("A discharge letter is already being generated.")


class LLMError(GenerationError):
    """
    Error from LLM API call.

    What it does:
        Wraps errors from the underlying LLM API (Gemini, OpenAI) while
        keeping the original message as `message`, so it can be shown
        to the user verbatim.

    When raised:
        - Network failure
        - Quota exceeded
        - Malformed request rejected by the API

    Attributes:
        provider: The LLM provider (gemini, openai)
        original_error: The wrapped original exception
    """

    def __init__(self, message: str, provider: str, original_error: Optional[Exception] = None):
        self.provider = provider
        self.original_error = original_error
        super().__init__(
            message,
            context={
                "provider": provider,
                "original_error": type(original_error).__name__ if original_error else None,
            },
        )


class LLMRateLimitError(LLMError):
    """
    LLM API rate limit or quota exceeded.

    No automatic retry is performed; the message tells the user to try again.
    """

    def __init__(self, provider: str, original_error: Optional[Exception] = None):
        message = str(original_error) if original_error else f"Rate limit exceeded for {provider}"
        super().__init__(message, provider=provider, original_error=original_error)


class LLMContentFilteredError(LLMError):
    """LLM refused the request due to safety settings."""

    def __init__(self, provider: str, reason: Optional[str] = None):
        super().__init__(
            f"Content filtered by {provider} safety settings: {reason or 'unknown reason'}",
            provider=provider,
        )
        self.reason = reason
