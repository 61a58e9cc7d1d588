"""
Upload leg: send the live download body as the request body.

The body stream is handed to the streaming helper untouched. Backpressure
comes from the helper awaiting the socket drain between chunks, so at most
a few chunks are resident regardless of file size.
"""

import logging

from core.errors.exceptions import TransferError, UploadFailed
from core.types import HelperResponse, StreamingRequestHelper
from site_transfer.models import DownloadOutcome, ResolvedHeaders, TransferRequest

logger = logging.getLogger(__name__)


class Relay:
    """Issues the upload request whose body is the download stream."""

    def __init__(self, helper: StreamingRequestHelper):
        self._helper = helper

    async def upload(
        self,
        request: TransferRequest,
        headers: ResolvedHeaders,
        outcome: DownloadOutcome,
    ) -> tuple[HelperResponse | None, TransferError | None]:
        """
        Relay the download body to the upload URL.

        Transport failures propagate; a non-2xx response is returned as an
        UploadFailed value carrying both statuses.
        """
        logger.debug(
            "Starting upload",
            extra={
                "upload_url": request.upload_url,
                "http_method": request.method.value,
                "content_length": outcome.content_length,
            },
        )

        response = await self._helper.request(
            request.method.value,
            request.upload_url,
            headers.upload,
            body=outcome.body_stream,
        )

        if response.status_code < 200 or response.status_code >= 300:
            logger.warning(
                "Upload returned non-2xx status",
                extra={
                    "upload_url": request.upload_url,
                    "upload_status": response.status_code,
                    "download_status": outcome.status_code,
                },
            )
            return response, UploadFailed(
                response.status_code,
                request.upload_url,
                request.method.value,
                download_status=outcome.status_code,
                response_body=response.body,
            )

        return response, None


__all__ = ["Relay"]
