"""Exception hierarchy for ytsr."""


class YtsrError(Exception):
    """Base exception for ytsr errors."""


class InvalidQueryError(YtsrError, ValueError):
    """Raised for a missing or malformed search query. Never retried."""


class TransportError(YtsrError):
    """Raised when an HTTP request returns an error status or unusable body."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class SearchError(YtsrError):
    """Raised when every search attempt failed to produce searchable data."""
