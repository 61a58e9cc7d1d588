"""
Header resolution for both transfer legs.

Parsing is lenient by design of the parameter: anything that is not a JSON
object (or a mapping) of string/number values contributes no headers.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any, Optional
from urllib.parse import parse_qs, urlsplit

from core.http.streaming import parse_content_length
from site_transfer.models import (
    HeaderParam,
    ResolvedHeaders,
    StructuredHeaders,
    TextHeaders,
    TransferRequest,
    to_header_param,
)

logger = logging.getLogger(__name__)

DEFAULT_DOWNLOAD_HEADERS = {"Accept": "*/*"}
DEFAULT_UPLOAD_HEADERS = {"Content-Type": "application/octet-stream"}


def _header_string(value: Any) -> Optional[str]:
    """Decimal string form of a header value, or None if the value is not usable."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return None


def _filter_values(values: Mapping[Any, Any]) -> dict[str, str]:
    result: dict[str, str] = {}
    for key, value in values.items():
        text = _header_string(value)
        if text is not None:
            result[str(key)] = text
    return result


def parse_headers(param: HeaderParam | str | Mapping | None) -> dict[str, str]:
    """
    Parse a header parameter into a flat string mapping.

    Only string and number values survive; numbers are converted to their
    decimal string form. Never raises.

    Example:
        >>> parse_headers('{"X-Api-Key": "abc", "X-Retries": 3, "X-Debug": true}')
        {'X-Api-Key': 'abc', 'X-Retries': '3'}
    """
    param = to_header_param(param)

    if isinstance(param, TextHeaders):
        if not param.text:
            return {}
        try:
            parsed = json.loads(param.text)
        except ValueError:
            logger.debug("Ignoring header parameter that is not valid JSON")
            return {}
        if not isinstance(parsed, dict):
            return {}
        return _filter_values(parsed)

    if isinstance(param, StructuredHeaders):
        return _filter_values(param.values)

    return {}


def extract_bearer_token(upload_url: str) -> tuple[Optional[str], str]:
    """
    Extract a bearer token from the upload URL's query string.

    The URL is returned unchanged: some receivers expect the token to stay
    in the query string as well.

    Returns:
        Tuple of (token or None, upload_url)
    """
    try:
        parts = urlsplit(upload_url)
        if not parts.scheme or not parts.netloc:
            return None, upload_url
        values = parse_qs(parts.query, keep_blank_values=True).get("bearer")
    except ValueError:
        return None, upload_url

    if values and values[0]:
        return values[0], upload_url
    return None, upload_url


def resolve_headers(request: TransferRequest) -> ResolvedHeaders:
    """
    Build the final download and upload headers for a request.

    Merge order per leg: built-in defaults, then user headers, then derived
    values (Authorization from a bearer token, Content-Length from the
    request) which never replace a user-supplied key.
    """
    download = {**DEFAULT_DOWNLOAD_HEADERS, **parse_headers(request.download_headers)}
    upload = {**DEFAULT_UPLOAD_HEADERS, **parse_headers(request.upload_headers)}
    resolved = ResolvedHeaders(download=download, upload=upload)

    token, _ = extract_bearer_token(request.upload_url)
    if token and not resolved.has_upload_header("Authorization"):
        upload["Authorization"] = f"Bearer {token}"

    length = parse_content_length(request.content_length)
    if length is not None:
        for key in [k for k in upload if k.lower() == "content-length"]:
            del upload[key]
        upload["Content-Length"] = str(length)

    logger.debug(
        "Resolved transfer headers",
        extra={
            "has_bearer_token": token is not None,
            "content_length": length,
        },
    )
    return resolved


__all__ = [
    "DEFAULT_DOWNLOAD_HEADERS",
    "DEFAULT_UPLOAD_HEADERS",
    "extract_bearer_token",
    "parse_headers",
    "resolve_headers",
]
