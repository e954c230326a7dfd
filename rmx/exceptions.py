"""Custom exceptions for the character catalog explorer."""

from typing import Any


class CatalogError(Exception):
    """Base exception for all catalog errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize catalog error.

        Args:
            message: Error message
            details: Additional error details

        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(CatalogError):
    """Raised when configuration is invalid or missing."""


class NotFoundError(CatalogError):
    """Raised when the remote reports no matching records (404).

    This is a regular outcome of a query, not a transport failure, and is never retried.
    """

    def __init__(self, message: str = "No matching records", details: dict[str, Any] | None = None) -> None:
        super().__init__(message, details)


class CharacterNotFoundError(NotFoundError):
    """Raised when a specific character identifier does not resolve."""

    def __init__(self, character_id: int) -> None:
        super().__init__(f"Character '{character_id}' not found", {"character_id": character_id})
        self.character_id = character_id


class TransportError(CatalogError):
    """Raised for network failures and non-success responses other than 404."""

    def __init__(
        self,
        status_code: int | None,
        message: str,
        response_text: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize transport error.

        Args:
            status_code: HTTP status code, or None when no response was received
            message: Error message
            response_text: Raw response text from API
            details: Additional error details

        """
        super().__init__(message, details)
        self.status_code = status_code
        self.response_text = response_text

    @property
    def is_transient(self) -> bool:
        """Whether the same request may succeed later.

        Connection failures, timeouts, rate limiting and server errors are transient;
        malformed payloads and other client errors are not.
        """
        if self.status_code is None:
            return True
        return self.status_code in (408, 429) or 500 <= self.status_code < 600


class RateLimitError(TransportError):
    """Raised when rate limit is exceeded (429)."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        response_text: str | None = None,
        retry_after: int | None = None,
    ) -> None:
        super().__init__(429, message, response_text)
        self.retry_after = retry_after


class RequestTimeoutError(TransportError):
    """Raised when a request times out."""

    def __init__(self, operation: str, timeout_seconds: float) -> None:
        message = f"Operation '{operation}' timed out after {timeout_seconds} seconds"
        super().__init__(None, message, details={"operation": operation, "timeout_seconds": timeout_seconds})
        self.operation = operation
        self.timeout_seconds = timeout_seconds


class ValidationError(CatalogError):
    """Raised when a requested transition is rejected locally."""

    def __init__(self, field: str, value: Any, message: str) -> None:
        super().__init__(message, {"field": field, "value": value})
        self.field = field
        self.value = value


class PageOutOfRangeError(ValidationError):
    """Raised when a page change targets a page outside the known range."""

    def __init__(self, page: int, total_pages: int | None) -> None:
        if total_pages is None:
            message = f"Cannot go to page {page}: no page count is known yet"
        else:
            message = f"Page {page} is outside the range 1-{total_pages}"
        super().__init__("page", page, message)
        self.page = page
        self.total_pages = total_pages
