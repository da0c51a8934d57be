"""
Custom Exceptions for StudyHub.

Routers map these onto HTTP status codes:
- UploadError subclasses -> 400
- LLMRateLimitError -> 429
- other GenerationError subclasses -> 502
"""

from typing import Iterable


class StudyHubError(Exception):
    """Base exception for all StudyHub errors."""
    pass


# =============================================================================
# Upload Exceptions
# =============================================================================

class UploadError(StudyHubError):
    """An uploaded file was rejected or could not be read."""
    pass


class UnsupportedFileTypeError(UploadError):

    def __init__(self, mimetype: str, allowed: Iterable[str] = ()):
        self.mimetype = mimetype
        self.allowed = list(allowed)
        super().__init__(
            f"Unsupported file type: {mimetype or 'unknown'}. "
            f"Upload one of: {', '.join(self.allowed) or 'none configured'}"
        )


class FileTooLargeError(UploadError):

    def __init__(self, size: int, max_size: int):
        self.size = size
        self.max_size = max_size
        super().__init__(f"Upload of {size} bytes is over the {max_size}-byte limit")


class TextExtractionError(UploadError):
    """The file matched its declared type but no text could be read from it."""

    def __init__(self, filename: str, mimetype: str):
        self.filename = filename
        self.mimetype = mimetype
        super().__init__(f"Could not read text from {filename} as {mimetype}")


# =============================================================================
# Content Generation Exceptions
# =============================================================================

class GenerationError(StudyHubError):
    """Raised when a summary, quiz or flashcard set cannot be generated."""
    pass


class LLMRateLimitError(GenerationError):
    """The model provider throttled the request."""

    def __init__(self):
        super().__init__("Model provider is rate limiting requests")


class LLMResponseParseError(GenerationError):
    """Model output did not have the requested shape."""

    def __init__(self, expected: str = "JSON document"):
        self.expected = expected
        super().__init__(f"Model output is not a valid {expected}")


# =============================================================================
# Authentication Exceptions
# =============================================================================

class AuthenticationError(StudyHubError):
    """Base exception for authentication errors."""
    pass


class InvalidTokenError(AuthenticationError):
    """Raised when a bearer token fails verification or lacks a subject."""

    def __init__(self, reason: str = None):
        self.reason = reason
        msg = "Invalid authentication token"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


# =============================================================================
# Configuration Exceptions
# =============================================================================

class ConfigurationError(StudyHubError):
    """A setting needed by the selected backend is missing or unusable."""

    def __init__(self, setting: str, reason: str):
        self.setting = setting
        super().__init__(f"{setting}: {reason}")
