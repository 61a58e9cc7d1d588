"""
Error classification and exception hierarchy.

Provides:
- ErrorCategory enum for classifying errors
- TransferError hierarchy for typed exceptions
- Classification utilities for error handling
"""

from core.errors.exceptions import (
    DownloadFailed,
    DownloadRequestFailed,
    # Enums
    ErrorCategory,
    # Base classes
    TransferError,
    UnexpectedTransferError,
    UploadFailed,
    ValidationError,
    # Classification utilities
    classify_exception,
    classify_http_status,
    wrap_exception,
)

__all__ = [
    # Enums
    "ErrorCategory",
    # Base classes
    "TransferError",
    "ValidationError",
    # Transfer legs
    "DownloadRequestFailed",
    "DownloadFailed",
    "UploadFailed",
    "UnexpectedTransferError",
    # Classification utilities
    "classify_http_status",
    "classify_exception",
    "wrap_exception",
]
