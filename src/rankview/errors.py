"""
RankView Error Classification System.

This module provides the hierarchy of exceptions raised while driving a
cursor-based result stream and folding its batches into a session.

Error Categories:
-----------------
1. Retryable Errors: Transient failures of the query backend
   - Rate limiting (HTTP 429)
   - Service unavailable (HTTP 503)
   - Connection failures and timeouts

2. Permanent Errors: Failures that won't succeed on retry
   - Invalid request (HTTP 400), not found (HTTP 404)
   - Unknown or expired cursor
   - Configuration errors

3. Contract Violations: The backend sent a batch that cannot be merged
   - Move from an empty slot, rank out of range, duplicate destinations

Usage:
------
    from rankview.errors import MalformedBatchError, QueryError, is_retryable

    try:
        await session.ensure_page(2)
    except MalformedBatchError as e:
        logger.error(f"Backend broke the delta contract: {e}")
"""

from typing import Any


class RankViewError(Exception):
    """
    Base exception for all RankView errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error (optional)
        original_error: The underlying exception that caused this error (optional)
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def __str__(self) -> str:
        base = self.message
        if self.details:
            base += f" | Details: {self.details}"
        if self.original_error:
            base += f" | Caused by: {type(self.original_error).__name__}: {self.original_error}"
        return base

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "details": self.details,
            "original_error": str(self.original_error) if self.original_error else None
        }


# =============================================================================
# Transport / backend errors
# =============================================================================

class QueryError(RankViewError):
    """Raised when a request to the query backend fails.

    Every failure of the external query contract is a ``QueryError``. The
    fetch loop treats these as an aborted fill, not as a corrupt session.
    """
    pass


class RetryableError(QueryError):
    """
    Base class for query failures that may succeed on retry.

    Attributes:
        retry_after: Suggested wait time before retry (seconds), if known
    """

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        super().__init__(message, details, original_error)
        self.retry_after = retry_after


class RateLimitError(RetryableError):
    """Raised when the backend rate limits the client (HTTP 429)."""

    def __init__(
        self,
        message: str = "Query rate limit exceeded",
        retry_after: float | None = None,
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        super().__init__(message, retry_after, details, original_error)


class ServiceUnavailableError(RetryableError):
    """Raised when the backend is temporarily unavailable (HTTP 503)."""

    def __init__(
        self,
        message: str = "Query service temporarily unavailable",
        retry_after: float | None = None,
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        super().__init__(message, retry_after, details, original_error)


class ConnectionError(RetryableError):
    """Raised when the backend cannot be reached."""

    def __init__(
        self,
        message: str = "Failed to connect to query service",
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        super().__init__(message, retry_after=None, details=details, original_error=original_error)


class TransientError(RetryableError):
    """Generic retryable error for unclassified transient failures."""
    pass


class TimeoutError(RetryableError):
    """
    Raised when a query request exceeds its time limit.

    Attributes:
        timeout: The timeout value that was exceeded (seconds)
    """

    def __init__(
        self,
        message: str = "Query request timed out",
        timeout: float | None = None,
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        details = details or {}
        details["timeout"] = timeout
        super().__init__(message, retry_after=None, details=details, original_error=original_error)
        self.timeout = timeout


# =============================================================================
# Permanent Errors - Failures that won't succeed on retry
# =============================================================================

class PermanentError(RankViewError):
    """
    Base class for errors that will not succeed on retry.

    Retrying these is wasteful: the request, the cursor or the local
    configuration has to change first.
    """
    pass


class InvalidRequestError(QueryError, PermanentError):
    """Raised when the backend rejects the request parameters (HTTP 400)."""

    def __init__(
        self,
        message: str = "Invalid query request",
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        super().__init__(message, details, original_error)


class NotFoundError(QueryError, PermanentError):
    """Raised when the query endpoint is not found (HTTP 404)."""

    def __init__(
        self,
        message: str = "Query endpoint not found",
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        super().__init__(message, details, original_error)


class CursorNotFoundError(QueryError, PermanentError):
    """
    Raised when the backend does not know the cursor passed to it.

    Cursors expire after a period of inactivity; the only recovery is to
    rerun the query from the start in a fresh session.
    """

    def __init__(
        self,
        cursor: str,
        message: str = "Cursor id could not be found. Try rerunning the query from the start?",
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        details = details or {}
        details["cursor"] = cursor
        super().__init__(message, details, original_error)
        self.cursor = cursor


class ConfigurationError(PermanentError):
    """Raised when a client or session is configured with invalid values."""

    def __init__(
        self,
        message: str = "Configuration error",
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        super().__init__(message, details, original_error)


class MalformedBatchError(PermanentError):
    """
    Raised when a batch of rank changes cannot be merged.

    The merge is rejected as a whole: the session keeps the list it had
    before the batch, so no partially applied state is ever published.
    """
    pass


# =============================================================================
# Helper Functions
# =============================================================================

def is_retryable(error: Exception) -> bool:
    """
    Check if an error is retryable.

    Args:
        error: The exception to check

    Returns:
        True if the error is an instance of RetryableError
    """
    return isinstance(error, RetryableError)


def classify_http_error(status_code: int, message: str = "", headers: dict | None = None) -> RankViewError:
    """
    Classify an HTTP error from the query endpoint based on status code.

    Args:
        status_code: HTTP status code
        message: Error message from response
        headers: Response headers (used to extract Retry-After)

    Returns:
        Appropriate RankViewError subclass instance
    """
    headers = {k.lower(): v for k, v in (headers or {}).items()}
    retry_after = None

    if "retry-after" in headers:
        try:
            retry_after = float(headers["retry-after"])
        except (ValueError, TypeError):
            pass

    details = {"status_code": status_code}

    if status_code == 429:
        return RateLimitError(
            message=message or "Query rate limit exceeded",
            retry_after=retry_after,
            details=details
        )
    elif status_code == 400:
        return InvalidRequestError(
            message=message or "Invalid query request",
            details=details
        )
    elif status_code == 404:
        return NotFoundError(
            message=message or "Query endpoint not found",
            details=details
        )
    elif status_code == 410:
        return CursorNotFoundError(
            cursor=headers.get("x-cursor-id", ""),
            details=details
        )
    elif status_code == 503:
        return ServiceUnavailableError(
            message=message or "Query service temporarily unavailable",
            retry_after=retry_after,
            details=details
        )
    elif status_code >= 500:
        return TransientError(
            message=message or f"Server error (HTTP {status_code})",
            details=details
        )
    else:
        return QueryError(
            message=message or f"HTTP error {status_code}",
            details=details
        )


def wrap_exception(error: Exception, context: str = "") -> RankViewError:
    """
    Wrap a generic exception raised while querying in a RankViewError.

    Args:
        error: The original exception
        context: Additional context about where the error occurred

    Returns:
        RankViewError instance wrapping the original error
    """
    if isinstance(error, RankViewError):
        return error

    error_str = str(error).lower()
    error_type = type(error).__name__
    message = f"{context}: {error}" if context else str(error)

    if "timeout" in error_str or "timed out" in error_str or "Timeout" in error_type:
        return TimeoutError(message=message, original_error=error)

    if any(x in error_str for x in ["connection", "connect", "network", "dns"]) or "Connect" in error_type:
        return ConnectionError(message=message, original_error=error)

    # Unknown failures abort the fill without being retried
    return QueryError(message=message, original_error=error)
