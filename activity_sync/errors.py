"""Exception hierarchy shared by the sync pipeline."""

from __future__ import annotations


class SyncError(Exception):
    """Base class for every failure raised by activity-sync."""


class SourceConfigError(SyncError):
    """Raised when a source cannot be constructed from its configuration."""


class FetchError(SyncError):
    """Raised when an index or detail request fails."""

    def __init__(self, url: str, message: str, status_code: int | None = None) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(f"Fetch failed for {url}: {message}")


class ParseError(SyncError):
    """Raised when a response cannot be interpreted as the source's format."""


class DeliveryError(SyncError):
    """Raised when the sink rejects an event."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


__all__ = ["DeliveryError", "FetchError", "ParseError", "SourceConfigError", "SyncError"]
