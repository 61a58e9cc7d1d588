"""
Async HTTP transport for streaming transfers.

Provides:
    - create_session: aiohttp session factory (no keep-alive, optional timeouts)
    - AiohttpRawClient: low-level client whose responses expose a live body
    - open_download_stream: status-validated streaming GET
    - AiohttpStreamingHelper: request helper that streams an async-iterable body

Example usage:
    from core.http import AiohttpRawClient, create_session, open_download_stream

    async with create_session(auto_decompress=False) as session:
        client = AiohttpRawClient(session)
        response, error = await open_download_stream(url, client, {"Accept": "*/*"})
"""

from core.http.client import CHUNK_SIZE, AiohttpRawClient, AiohttpRawResponse, create_session
from core.http.streaming import (
    StreamDownloadError,
    StreamDownloadResponse,
    header_value,
    open_download_stream,
    parse_content_length,
)
from core.http.upload import AiohttpStreamingHelper, decode_body

__all__ = [
    # Client
    "CHUNK_SIZE",
    "AiohttpRawClient",
    "AiohttpRawResponse",
    "create_session",
    # Streaming
    "open_download_stream",
    "StreamDownloadResponse",
    "StreamDownloadError",
    "header_value",
    "parse_content_length",
    # Upload
    "AiohttpStreamingHelper",
    "decode_body",
]
