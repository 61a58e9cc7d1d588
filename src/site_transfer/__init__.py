"""
Site-to-site file transfer.

Streams a file from a download URL straight into an upload request, with
memory use bounded by the read chunk size rather than the file size.

Modules:
    models      - TransferRequest, header variants, TransferResult
    headers     - Header parsing, bearer token extraction, header resolution
    download    - Download leg (live response stream)
    relay       - Upload leg (download stream as request body)
    results     - Success/failure records and error messages
    engine      - TransferEngine tying the legs together
    parameters  - Node parameter schema and TransferRequest construction
    node        - Host-facing node and operations registry
"""

from site_transfer.engine import TransferEngine, validate_request
from site_transfer.headers import extract_bearer_token, parse_headers, resolve_headers
from site_transfer.models import (
    HttpMethod,
    StructuredHeaders,
    TextHeaders,
    TransferRequest,
    TransferResult,
)
from site_transfer.node import OPERATIONS, SiteToSiteFileTransfer, StaticExecutionContext

__all__ = [
    "HttpMethod",
    "OPERATIONS",
    "SiteToSiteFileTransfer",
    "StaticExecutionContext",
    "StructuredHeaders",
    "TextHeaders",
    "TransferEngine",
    "TransferRequest",
    "TransferResult",
    "extract_bearer_token",
    "parse_headers",
    "resolve_headers",
    "validate_request",
]
