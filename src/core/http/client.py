"""
Low-level HTTP client built on aiohttp.

Provides the session factory and the raw client used on the download leg.
The raw client hands back the response as soon as headers arrive; the body
stays on the socket until the caller iterates it.
"""

from collections.abc import AsyncIterable, Mapping

import aiohttp

from core.types import RequestTarget

# 256KB matches the read buffer the upload side drains per write
CHUNK_SIZE = 256 * 1024


def create_session(
    auto_decompress: bool = True,
    enable_ssl: bool = True,
    timeout_total: float | None = None,
    timeout_connect: float | None = None,
    timeout_sock_read: float | None = None,
    skip_auto_headers: tuple[str, ...] = (),
) -> aiohttp.ClientSession:
    """
    Create aiohttp ClientSession for a single transfer.

    Connections are not kept alive: each transfer owns its sockets and they
    are closed as soon as the response is released.

    Timeouts default to None (no limit) because large transfers can run for
    a long time. Callers that talk to endpoints which may hang should set
    timeout_connect and timeout_sock_read.

    Args:
        auto_decompress: Decode gzip/deflate bodies (default: True). The
            download leg disables this so bytes are relayed verbatim.
        enable_ssl: Enable SSL verification (default: True)
        timeout_total: Total time for the request in seconds (default: None)
        timeout_connect: Time to obtain a connection in seconds (default: None)
        timeout_sock_read: Max time between reads in seconds (default: None)
        skip_auto_headers: Default headers aiohttp should not add

    Returns:
        Configured aiohttp.ClientSession

    Note:
        Caller is responsible for session lifecycle management.
        Use async context manager for automatic cleanup:

        async with create_session() as session:
            client = AiohttpRawClient(session)
    """
    connector = aiohttp.TCPConnector(
        ssl=enable_ssl,
        force_close=True,
        enable_cleanup_closed=True,
    )

    timeout = aiohttp.ClientTimeout(
        total=timeout_total,
        connect=timeout_connect,
        sock_read=timeout_sock_read,
    )

    return aiohttp.ClientSession(
        connector=connector,
        timeout=timeout,
        auto_decompress=auto_decompress,
        skip_auto_headers=skip_auto_headers or None,
    )


class AiohttpRawResponse:
    """
    Download response whose body has not been read yet.

    ``body`` iterates the socket in ``chunk_size`` pieces and can only be
    consumed once.
    """

    def __init__(self, response: aiohttp.ClientResponse, chunk_size: int = CHUNK_SIZE):
        self._response = response
        self.status = response.status
        self.headers: Mapping[str, str] = response.headers
        self.body: AsyncIterable[bytes] = response.content.iter_chunked(chunk_size)

    def destroy(self) -> None:
        """Close the connection without draining the body."""
        self._response.close()

    def release(self) -> None:
        """Release the connection after the body was consumed."""
        self._response.release()


class AiohttpRawClient:
    """
    RawHttpClient implementation over an aiohttp session.

    Does NOT perform:
    - Status validation (caller's responsibility)
    - Retry logic (not supported for single-pass streams)
    - Session lifecycle management (caller's responsibility)
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        chunk_size: int = CHUNK_SIZE,
        allow_redirects: bool = False,
    ):
        self._session = session
        self._chunk_size = chunk_size
        self._allow_redirects = allow_redirects

    async def request(
        self,
        target: RequestTarget,
        method: str,
        headers: Mapping[str, str],
    ) -> AiohttpRawResponse:
        response = await self._session.request(
            method,
            target.url,
            headers=dict(headers),
            allow_redirects=self._allow_redirects,
        )
        return AiohttpRawResponse(response, chunk_size=self._chunk_size)


__all__ = [
    "CHUNK_SIZE",
    "AiohttpRawClient",
    "AiohttpRawResponse",
    "create_session",
]
