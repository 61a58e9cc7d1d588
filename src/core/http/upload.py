"""
Streaming request helper for the upload leg.

aiohttp sends an async-iterable body chunk by chunk and awaits the socket
drain between chunks, so the producer is paused whenever the destination
reads slower than the source delivers.
"""

import logging
from collections.abc import AsyncIterable, Mapping

import aiohttp

from core.types import HelperResponse

logger = logging.getLogger(__name__)


def decode_body(raw: bytes, charset: str | None) -> str | bytes:
    """Decode a response body as text, or return the bytes if it is not text."""
    try:
        return raw.decode(charset or "utf-8")
    except (UnicodeDecodeError, LookupError):
        return raw


class AiohttpStreamingHelper:
    """
    StreamingRequestHelper implementation over an aiohttp session.

    The request body is passed to aiohttp untouched. The response body is
    read in full, since it is the destination's (small) acknowledgement,
    not the transferred file.
    """

    def __init__(self, session: aiohttp.ClientSession):
        self._session = session

    async def request(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: AsyncIterable[bytes] | bytes | None = None,
    ) -> HelperResponse:
        async with self._session.request(
            method,
            url,
            headers=dict(headers),
            data=body,
        ) as response:
            raw = await response.read()
            logger.debug(
                "Upload response received",
                extra={"status_code": response.status, "content_length": len(raw)},
            )
            return HelperResponse(
                status_code=response.status,
                headers=dict(response.headers),
                body=decode_body(raw, response.charset),
            )


__all__ = ["AiohttpStreamingHelper", "decode_body"]
