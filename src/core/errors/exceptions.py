"""
Unified exception hierarchy for file transfers.

Provides typed exceptions with retry classification so the host (or a
caller wrapping the engine) can decide how to react to a failed item.
"""

import ssl

import aiohttp

# ErrorCategory lives in core.types so every module compares the same enum
from core.types import ErrorCategory

RETRYABLE_CATEGORIES = frozenset(
    {ErrorCategory.TRANSIENT, ErrorCategory.AUTH, ErrorCategory.UNKNOWN}
)


class TransferError(Exception):
    """
    Base exception for all transfer errors.

    Attributes:
        message: Human-readable description, shown to the host as-is
        category: Classification for retry decisions
        cause: Exception this one wraps, if any
        context: URLs, statuses and state at the time of failure
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(self, message: str, cause: Exception | None = None, context: dict | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.context = dict(context or {})

    @property
    def is_retryable(self) -> bool:
        return self.category in RETRYABLE_CATEGORIES

    def with_message(self, message: str) -> "TransferError":
        """Replace the message in place, keeping type, cause and context."""
        self.message = message
        self.args = (message,)
        return self

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Validation Errors (always raised)
# =============================================================================


class ValidationError(TransferError):
    """Request failed input validation (empty URL, unsupported method)."""

    category = ErrorCategory.PERMANENT


# =============================================================================
# Download Leg
# =============================================================================


class DownloadRequestFailed(TransferError):
    """Download request could not be dispatched (DNS, connection refused, TLS)."""

    category = ErrorCategory.TRANSIENT

    def __init__(
        self,
        download_url: str,
        reason: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        super().__init__(
            f"Download request failed: {reason}",
            cause=cause,
            context={"download_url": download_url, **(context or {})},
        )
        self.download_url = download_url


class DownloadFailed(TransferError):
    """Download responded with a non-2xx status."""

    def __init__(self, status_code: int, download_url: str, context: dict | None = None):
        super().__init__(
            f"Download failed with HTTP {status_code} from {download_url}. "
            "Please verify the download URL is accessible and returns a successful response.",
            context={"status_code": status_code, "download_url": download_url, **(context or {})},
        )
        self.status_code = status_code
        self.download_url = download_url
        self.category = classify_http_status(status_code)


# =============================================================================
# Upload Leg
# =============================================================================


class UploadFailed(TransferError):
    """Upload responded with a non-2xx status."""

    def __init__(
        self,
        status_code: int,
        upload_url: str,
        method: str,
        download_status: int | None = None,
        response_body: object = None,
    ):
        message = (
            f"Upload failed with HTTP {status_code} to {upload_url}. "
            "Please verify the upload URL is correct, authentication is valid, "
            f"and the endpoint accepts {method} requests."
        )
        if download_status is not None:
            message += f" (download status: HTTP {download_status})"
        super().__init__(
            message,
            context={
                "status_code": status_code,
                "upload_url": upload_url,
                "http_method": method,
                "download_status": download_status,
            },
        )
        self.status_code = status_code
        self.upload_url = upload_url
        self.method = method
        self.download_status = download_status
        self.response_body = response_body
        self.category = classify_http_status(status_code)


# =============================================================================
# Anything Else
# =============================================================================


class UnexpectedTransferError(TransferError):
    """Foreign exception raised while a transfer was in progress."""


# =============================================================================
# Classification
# =============================================================================

_STATUS_CATEGORIES = {
    302: ErrorCategory.AUTH,  # redirect to a login page
    401: ErrorCategory.AUTH,
    407: ErrorCategory.AUTH,
    408: ErrorCategory.TRANSIENT,
    429: ErrorCategory.TRANSIENT,
}

# Checked in order: certificate failures are connection errors too
_EXCEPTION_CATEGORIES = (
    (aiohttp.ClientConnectorCertificateError, ErrorCategory.PERMANENT),
    (ssl.SSLCertVerificationError, ErrorCategory.PERMANENT),
    (aiohttp.InvalidURL, ErrorCategory.PERMANENT),
    (aiohttp.ClientConnectionError, ErrorCategory.TRANSIENT),
    (aiohttp.ClientPayloadError, ErrorCategory.TRANSIENT),
    (ConnectionError, ErrorCategory.TRANSIENT),
    (TimeoutError, ErrorCategory.TRANSIENT),
)

_TRANSIENT_MARKERS = (
    "connection refused",
    "connection reset",
    "broken pipe",
    "name resolution",
    "network unreachable",
    "timed out",
)


def classify_http_status(status_code: int) -> ErrorCategory:
    """Classify an HTTP status; 2xx and unlisted 1xx/3xx give UNKNOWN."""
    if status_code in _STATUS_CATEGORIES:
        return _STATUS_CATEGORIES[status_code]
    if 400 <= status_code < 500:
        return ErrorCategory.PERMANENT
    if status_code >= 500:
        return ErrorCategory.TRANSIENT
    return ErrorCategory.UNKNOWN


def classify_exception(exc: Exception) -> ErrorCategory:
    """
    Classify an exception raised on either leg.

    TransferErrors keep their own category. aiohttp response errors are
    classified by status, transport errors by type, and anything else by
    a few well-known message fragments.
    """
    if isinstance(exc, TransferError):
        return exc.category
    if isinstance(exc, aiohttp.ClientResponseError):
        return classify_http_status(exc.status)

    for exc_type, category in _EXCEPTION_CATEGORIES:
        if isinstance(exc, exc_type):
            return category

    text = str(exc).lower()
    if any(marker in text for marker in _TRANSIENT_MARKERS):
        return ErrorCategory.TRANSIENT
    if "401" in text or "unauthorized" in text:
        return ErrorCategory.AUTH
    return ErrorCategory.UNKNOWN


def wrap_exception(
    exc: Exception,
    message: str | None = None,
    context: dict | None = None,
) -> TransferError:
    """Wrap a foreign exception in UnexpectedTransferError, preserving its category."""
    if isinstance(exc, TransferError):
        exc.context.update(context or {})
        return exc

    wrapped = UnexpectedTransferError(
        message or str(exc) or type(exc).__name__,
        cause=exc,
        context=context,
    )
    wrapped.category = classify_exception(exc)
    return wrapped


__all__ = [
    "ErrorCategory",
    "TransferError",
    "ValidationError",
    "DownloadRequestFailed",
    "DownloadFailed",
    "UploadFailed",
    "UnexpectedTransferError",
    "classify_http_status",
    "classify_exception",
    "wrap_exception",
]
