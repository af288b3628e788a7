"""Error types shared by the services and the HTTP layer."""
from typing import Optional


class TrackerError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TransportError(TrackerError):
    """A spreadsheet read or script write failed (non-2xx or network error)."""

    status_code = 502

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.http_status = status_code
        self.body = body


class ExtractionFormatError(TrackerError):
    """The text interpreter returned empty or non-conforming output."""

    status_code = 422
    DEFAULT_MESSAGE = (
        "Could not interpret the workout text. "
        "Please review the text and try again."
    )

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.DEFAULT_MESSAGE)


class ValidationError(TrackerError):
    """Client-side input check failed; no network call was made."""

    status_code = 400


class ConfigurationRequiredError(TrackerError):
    """Spreadsheet settings are missing (first-run configuration)."""

    status_code = 409


class NotFoundError(TrackerError):
    status_code = 404
