"""
Core library: reusable, transfer-agnostic components.

Modules:
    logging     - Structured JSON logging with execution/item context
    errors      - Error classification and exception hierarchy
    http        - aiohttp session factory, raw download client, streaming upload helper
    utils       - JSON serialization helpers

Design Principles:
    - No knowledge of node parameters or result records
    - All modules are independently testable
    - Async-first where applicable
    - Type hints throughout
"""

from .types import (
    ErrorCategory,
    HelperResponse,
    RawHttpClient,
    RawResponse,
    RequestTarget,
    StreamingRequestHelper,
)

__version__ = "0.1.0"

__all__ = [
    "ErrorCategory",
    "HelperResponse",
    "RawHttpClient",
    "RawResponse",
    "RequestTarget",
    "StreamingRequestHelper",
]
