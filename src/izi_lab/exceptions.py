"""Exception hierarchy for izi-lab."""

from __future__ import annotations

EXTRACTION_FAILED_MESSAGE = "Não foi possível processar o documento. Tente novamente."
MISSING_API_KEY_MESSAGE = "Chave de API não configurada."


class IziLabError(Exception):
    """Base exception for all izi-lab errors."""


class ConfigurationError(IziLabError):
    """Raised when the extraction service credential is missing or unusable."""

    def __init__(self, message: str = MISSING_API_KEY_MESSAGE) -> None:
        super().__init__(message)


class InputValidationError(IziLabError):
    """Raised when an upload violates the MIME type or size constraints."""

    def __init__(self, message: str, filename: str = "") -> None:
        super().__init__(message)
        self.filename = filename


class ExtractionError(IziLabError):
    """Raised when a batch cannot be extracted. Carries a user-facing message."""

    def __init__(self, message: str = EXTRACTION_FAILED_MESSAGE) -> None:
        super().__init__(message)


class InputNormalizationError(ExtractionError):
    """Raised when an input cannot be converted into request parts."""


class JSONParseError(ExtractionError):
    """LLM response could not be parsed as JSON or did not match the schema."""

    def __init__(self, message: str = EXTRACTION_FAILED_MESSAGE, raw_response: str = "") -> None:
        super().__init__(message)
        self.raw_response = raw_response


class NotFoundError(IziLabError):
    """Raised when a session or record id is unknown."""


class LLMClientError(IziLabError):
    """Raised when LLM API calls fail after exhausting retries."""


class RetryableError(LLMClientError):
    """Rate limits, timeouts, 5xx; retried with backoff."""


class NonRetryableError(LLMClientError):
    """Auth errors, 4xx (non-429), blocked or truncated replies; fail immediately."""


__all__ = [
    "EXTRACTION_FAILED_MESSAGE",
    "MISSING_API_KEY_MESSAGE",
    "IziLabError",
    "ConfigurationError",
    "InputValidationError",
    "ExtractionError",
    "InputNormalizationError",
    "JSONParseError",
    "NotFoundError",
    "LLMClientError",
    "RetryableError",
    "NonRetryableError",
]
