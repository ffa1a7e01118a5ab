"""Custom exceptions for source adapters."""

from typing import Optional


class AdapterError(Exception):
    """Base exception for all adapter errors.

    Raised only when a whole source cannot be read (connection, HTTP status,
    unparseable body). The fetch coordinator catches it, records the failure
    against the source and carries on with the others.
    """

    def __init__(self, message: str, source: Optional[str] = None) -> None:
        super().__init__(message)
        self.source = source


class AdapterHTTPError(AdapterError):
    """HTTP request failed with a 4xx/5xx status or a connection error.

    ``status_code`` is 0 when no response was received at all.
    """

    def __init__(self, message: str, status_code: int, url: str, source: Optional[str] = None) -> None:
        super().__init__(message, source=source)
        self.status_code = status_code
        self.url = url

    @property
    def retryable(self) -> bool:
        return self.status_code == 0 or self.status_code >= 500 or self.status_code == 429


class AdapterTimeoutError(AdapterError):
    """HTTP request did not complete within the configured timeout."""

    def __init__(self, message: str, url: str, source: Optional[str] = None) -> None:
        super().__init__(message, source=source)
        self.url = url


class AdapterResponseError(AdapterError):
    """Response arrived but could not be parsed (invalid JSON, unexpected shape)."""


class AdapterConfigurationError(AdapterError):
    """Invalid adapter configuration (unknown source type, bad limits)."""
