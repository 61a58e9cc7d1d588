"""
Core types and protocols used across modules.

This module provides base types, enums, and protocol definitions that are
shared across the core library to ensure consistency and type safety.
"""

from collections.abc import AsyncIterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol
from urllib.parse import urlsplit

DEFAULT_PORTS = {"http": 80, "https": 443}


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    Categories:
        TRANSIENT: Temporary failures that may succeed if the caller retries
                   (e.g., connection refused, 429/503 errors)
        AUTH: Authentication failures requiring new credentials
              (e.g., 401 errors, expired bearer tokens)
        PERMANENT: Failures that won't succeed on retry
                   (e.g., 404, empty URLs, unsupported methods)
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RequestTarget:
    """
    Connection target for the low-level client.

    Attributes:
        scheme: "http" or "https"
        hostname: Host to connect to
        port: TCP port (defaults to 443/80 from the scheme)
        path: Path plus query string
    """

    scheme: str
    hostname: str
    port: int
    path: str

    @classmethod
    def from_url(cls, url: str) -> "RequestTarget":
        """
        Split a URL into a request target.

        Raises:
            ValueError: If the URL has no host or a scheme other than http/https
        """
        parts = urlsplit(url)
        scheme = parts.scheme.lower()
        if scheme not in ("http", "https"):
            raise ValueError(f"Unsupported URL scheme: {parts.scheme or '(none)'}")
        if not parts.hostname:
            raise ValueError(f"Invalid URL: {url}")

        port = parts.port or DEFAULT_PORTS[scheme]
        path = parts.path or "/"
        if parts.query:
            path = f"{path}?{parts.query}"
        return cls(scheme=scheme, hostname=parts.hostname, port=port, path=path)

    @property
    def url(self) -> str:
        host = f"[{self.hostname}]" if ":" in self.hostname else self.hostname
        if self.port != DEFAULT_PORTS[self.scheme]:
            host = f"{host}:{self.port}"
        return f"{self.scheme}://{host}{self.path}"


class RawResponse(Protocol):
    """
    Response from the low-level client, available as soon as headers arrive.

    The body is a single-pass byte stream. It has not been read when the
    response is handed back, so callers can inspect status first.
    """

    status: int
    headers: Mapping[str, str]
    body: AsyncIterable[bytes]

    def destroy(self) -> None:
        """Abort the response and close its connection without reading the body."""
        ...

    def release(self) -> None:
        """Release the connection once the body has been consumed."""
        ...


class RawHttpClient(Protocol):
    """
    Protocol for the low-level HTTP client used on the download leg.

    Implementations must not buffer the response body.
    """

    async def request(
        self,
        target: RequestTarget,
        method: str,
        headers: Mapping[str, str],
    ) -> RawResponse:
        """
        Open a request and return once response headers are available.

        Raises:
            Exception: Transport errors (DNS, refused connection, TLS)
        """
        ...


@dataclass
class HelperResponse:
    """Completed response from the streaming request helper."""

    status_code: int
    headers: Mapping[str, str]
    body: Any


class StreamingRequestHelper(Protocol):
    """
    Protocol for the request helper used on the upload leg.

    The body may be a single-pass byte stream; implementations forward it
    incrementally rather than collecting it first.
    """

    async def request(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: AsyncIterable[bytes] | bytes | None = None,
    ) -> HelperResponse:
        ...


__all__ = [
    "ErrorCategory",
    "HelperResponse",
    "RawHttpClient",
    "RawResponse",
    "RequestTarget",
    "StreamingRequestHelper",
]
