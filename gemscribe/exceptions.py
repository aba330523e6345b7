"""
gemscribe.exceptions - Custom exception classes.

All gemscribe-specific exceptions inherit from GemscribeError.
"""

from __future__ import annotations


class GemscribeError(Exception):
    """Base exception for all gemscribe errors."""

    pass


class ConfigError(GemscribeError):
    """Configuration loading or validation error."""

    pass


class InputError(GemscribeError):
    """Caller supplied an unusable input (missing file, empty credential)."""

    pass


class MediaNotFoundError(InputError):
    """Source media file does not exist."""

    def __init__(self, path: object) -> None:
        self.path = path
        super().__init__(f"Media file not found: {path}")


class MissingCredentialError(InputError):
    """No API key configured."""

    pass


class CredentialError(GemscribeError):
    """Credential store backend failure."""

    pass


class TransportError(GemscribeError):
    """Network or HTTP failure talking to the Gemini API.

    Carries the HTTP status code and raw response body when a response
    was received.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        if status_code is not None:
            message = f"{message} ({status_code}): {body}"
        super().__init__(message)


class UploadError(TransportError):
    """File upload failed."""

    pass


class GenerationError(TransportError):
    """Content generation request failed."""

    pass


class SchemaError(GemscribeError):
    """Response body did not match the expected schema."""

    def __init__(self, message: str, body: str | None = None) -> None:
        self.body = body
        super().__init__(f"{message} - Response: {body}")


class UploadSchemaError(UploadError, SchemaError):
    """Upload response did not parse into a file descriptor."""

    def __init__(self, message: str, body: str | None = None) -> None:
        self.status_code = None
        self.body = body
        GemscribeError.__init__(self, f"{message} - Response: {body}")


class ProcessingError(GemscribeError):
    """Remote file reached the FAILED state."""

    def __init__(self, file_name: str) -> None:
        self.file_name = file_name
        super().__init__(f"File processing failed: {file_name}")


class PollTimeoutError(GemscribeError):
    """Remote file never became ACTIVE within the poll budget."""

    def __init__(self, file_name: str, attempts: int) -> None:
        self.file_name = file_name
        self.attempts = attempts
        super().__init__(f"File processing timeout after {attempts} attempts: {file_name}")


class ContentError(GemscribeError):
    """Generation response held no usable content."""

    pass


class NoTextContentError(ContentError):
    """First candidate's first part is missing or not text."""

    pass
