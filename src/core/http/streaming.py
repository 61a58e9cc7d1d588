"""
Streaming download support with memory bounds.

Opens a download through the raw client and validates the status before a
single body byte is read. The returned response still owns the socket; its
body is iterated by whoever consumes it (normally the upload request).
"""

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

import aiohttp

from core.errors.exceptions import classify_exception, classify_http_status
from core.types import ErrorCategory, RawHttpClient, RawResponse, RequestTarget


@dataclass
class StreamDownloadResponse:
    """
    Validated streaming response.

    Attributes:
        status_code: HTTP status code (2xx)
        content_length: Size in bytes (from Content-Length header), if sent
        content_type: MIME type (from Content-Type header), if sent
        response: Raw response; its body has not been read yet
    """

    status_code: int
    content_length: Optional[int]
    content_type: Optional[str]
    response: RawResponse


@dataclass
class StreamDownloadError:
    """
    Error result from a failed streaming download.

    Attributes:
        status_code: HTTP status code if a response was received
        error_message: Error description
        error_category: Classification for retry decisions
        cause: Transport exception when no response was received
    """

    status_code: Optional[int]
    error_message: str
    error_category: ErrorCategory
    cause: Optional[Exception] = None


def header_value(headers: Mapping[str, str], name: str) -> Optional[str]:
    """Case-insensitive header lookup that works for plain dicts too."""
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


def parse_content_length(value: object) -> Optional[int]:
    """
    Parse a content length the way a leading-integer parse does.

    Accepts ints, floats and strings such as "1024", " 1024 " or "1024abc".
    Returns None for anything that does not yield a positive integer.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        length = value
    elif isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        length = int(value)
    elif isinstance(value, str):
        digits = value.strip()
        sign = ""
        if digits[:1] in ("+", "-"):
            sign, digits = digits[0], digits[1:]
        end = 0
        while end < len(digits) and digits[end].isdigit():
            end += 1
        if end == 0:
            return None
        length = int(sign + digits[:end])
    else:
        return None
    return length if length > 0 else None


async def open_download_stream(
    url: str,
    client: RawHttpClient,
    headers: Mapping[str, str],
) -> tuple[Optional[StreamDownloadResponse], Optional[StreamDownloadError]]:
    """
    Open a streaming GET and validate its status.

    On a non-2xx status the response is destroyed immediately, so the server
    cannot keep pushing bytes into socket buffers.

    Does NOT perform:
    - Header defaults or merging (caller's responsibility)
    - Retry logic (a single-pass stream cannot be replayed)
    - Body consumption (caller's responsibility)

    Args:
        url: URL to download
        client: Raw HTTP client (caller manages lifecycle)
        headers: Request headers, sent as given

    Returns:
        Tuple of (StreamDownloadResponse, None) on success
        or (None, StreamDownloadError) on failure

    Example:
        response, error = await open_download_stream(url, client, {"Accept": "*/*"})
        if error:
            print(f"Download failed: {error.error_message}")
        else:
            try:
                async for chunk in response.response.body:
                    sink.write(chunk)
            finally:
                response.response.release()
    """
    try:
        target = RequestTarget.from_url(url)
        response = await client.request(target, "GET", headers)

    except asyncio.TimeoutError as e:
        return None, StreamDownloadError(
            status_code=None,
            error_message="Download timeout",
            error_category=ErrorCategory.TRANSIENT,
            cause=e,
        )

    except aiohttp.ClientError as e:
        # Connection errors, DNS failures, etc.
        return None, StreamDownloadError(
            status_code=None,
            error_message=f"Connection error: {e}",
            error_category=ErrorCategory.TRANSIENT,
            cause=e,
        )

    except (OSError, ValueError) as e:
        # Bad URL, unsupported scheme, socket-level failures
        return None, StreamDownloadError(
            status_code=None,
            error_message=str(e),
            error_category=classify_exception(e),
            cause=e,
        )

    status = response.status or 0
    if status < 200 or status >= 300:
        response.destroy()
        return None, StreamDownloadError(
            status_code=status,
            error_message=f"HTTP {status}",
            error_category=classify_http_status(status),
        )

    return (
        StreamDownloadResponse(
            status_code=status,
            content_length=parse_content_length(header_value(response.headers, "Content-Length")),
            content_type=header_value(response.headers, "Content-Type"),
            response=response,
        ),
        None,
    )


__all__ = [
    "StreamDownloadResponse",
    "StreamDownloadError",
    "header_value",
    "open_download_stream",
    "parse_content_length",
]
