"""
Download leg: open the source as a live stream.

The response is validated as soon as headers arrive. Failures are returned
as error values; the engine decides whether they are raised.
"""

import logging

from core.errors.exceptions import DownloadFailed, DownloadRequestFailed, TransferError
from core.http.streaming import open_download_stream, parse_content_length
from core.types import RawHttpClient
from site_transfer.models import DownloadOutcome, ResolvedHeaders, TransferRequest

logger = logging.getLogger(__name__)


class DownloadInitiator:
    """
    Opens the download through the low-level client.

    The low-level client is used instead of a higher-level helper because
    the body must remain on the socket until the upload pulls it.
    """

    def __init__(self, client: RawHttpClient):
        self._client = client

    async def open(
        self,
        request: TransferRequest,
        headers: ResolvedHeaders,
    ) -> tuple[DownloadOutcome | None, TransferError | None]:
        """
        Open the download and propagate its length to the upload headers.

        Side effect: when an effective content length is known and the
        upload headers carry no Content-Length yet, it is added to
        ``headers.upload``.

        Returns:
            Tuple of (DownloadOutcome, None) on success
            or (None, DownloadFailed | DownloadRequestFailed) on failure
        """
        response, error = await open_download_stream(
            request.download_url,
            self._client,
            headers.download,
        )

        if error:
            if error.status_code is not None:
                logger.warning(
                    "Download returned non-2xx status",
                    extra={
                        "download_url": request.download_url,
                        "download_status": error.status_code,
                        "error_category": error.error_category.value,
                    },
                )
                return None, DownloadFailed(error.status_code, request.download_url)

            logger.warning(
                "Download request could not be sent",
                extra={
                    "download_url": request.download_url,
                    "error_message": error.error_message,
                    "error_category": error.error_category.value,
                },
            )
            failure = DownloadRequestFailed(
                request.download_url,
                reason=error.error_message,
                cause=error.cause,
            )
            failure.category = error.error_category
            return None, failure

        content_length = parse_content_length(request.content_length)
        if content_length is None:
            content_length = response.content_length
        if content_length is not None and not headers.has_upload_header("Content-Length"):
            headers.upload["Content-Length"] = str(content_length)

        logger.debug(
            "Download stream opened",
            extra={
                "download_url": request.download_url,
                "download_status": response.status_code,
                "content_length": content_length,
                "content_type": response.content_type,
            },
        )

        raw = response.response
        return (
            DownloadOutcome(
                status_code=response.status_code,
                headers=raw.headers,
                body_stream=raw.body,
                content_length=content_length,
                response=raw,
            ),
            None,
        )


__all__ = ["DownloadInitiator"]
