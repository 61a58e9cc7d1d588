"""
Transfer engine: one download streamed into one upload.

Flow per item:
    resolve_headers -> DownloadInitiator.open -> Relay.upload -> build_success

The download body is attached to the upload request as soon as the download
status is known, so bytes move socket to socket under the upload's
backpressure. Memory use is bounded by the chunk size, not the file size.

Expected failures (non-2xx on either leg, request dispatch errors) travel as
values and become exceptions only in build_failure, when the request asks
for it. Validation failures always raise.
"""

import logging
from contextlib import AsyncExitStack
from dataclasses import dataclass
from typing import Optional

from config import TransferConfig, get_config
from core.errors.exceptions import TransferError, ValidationError, wrap_exception
from core.http.client import AiohttpRawClient, create_session
from core.http.upload import AiohttpStreamingHelper
from core.logging import log_operation
from core.types import HelperResponse, RawHttpClient, StreamingRequestHelper
from site_transfer.download import DownloadInitiator
from site_transfer.headers import resolve_headers
from site_transfer.models import (
    DownloadOutcome,
    HttpMethod,
    ResolvedHeaders,
    TransferRequest,
    TransferResult,
    TransferState,
)
from site_transfer.relay import Relay
from site_transfer.results import build_failure, build_success

logger = logging.getLogger(__name__)


def validate_request(request: TransferRequest) -> None:
    """
    Check the input shape of a request.

    Raises:
        ValidationError: Empty download/upload URL or unsupported method.
            Raised regardless of throw_on_error.
    """
    if not request.download_url or not request.download_url.strip():
        raise ValidationError("Download URL is required and cannot be empty")
    if not request.upload_url or not request.upload_url.strip():
        raise ValidationError("Upload URL is required and cannot be empty")
    if not isinstance(request.method, HttpMethod):
        raise ValidationError(f"Unsupported upload method: {request.method}. Expected POST or PUT")


@dataclass
class _Attempt:
    """Mutable bookkeeping for one execute() call."""

    state: TransferState = TransferState.VALIDATING
    outcome: Optional[DownloadOutcome] = None
    uploaded: bool = False

    @property
    def download_status(self) -> Optional[int]:
        return self.outcome.status_code if self.outcome else None

    def close(self) -> None:
        """Release the download connection; abort it unless the upload consumed it."""
        if self.outcome is None:
            return
        if self.uploaded:
            self.outcome.release()
        else:
            self.outcome.destroy()


class TransferEngine:
    """
    Runs single-item transfers.

    Clients may be injected; when they are not, each execute() call opens its
    own aiohttp sessions (one per leg) and closes them before returning.

    Usage:
        engine = TransferEngine()
        result = await engine.execute(
            TransferRequest(download_url="https://d/file.zip", upload_url="https://u/upload")
        )
    """

    def __init__(
        self,
        raw_client: Optional[RawHttpClient] = None,
        upload_helper: Optional[StreamingRequestHelper] = None,
        config: Optional[TransferConfig] = None,
    ):
        self._raw_client = raw_client
        self._upload_helper = upload_helper
        self._config = config

    @property
    def config(self) -> TransferConfig:
        if self._config is None:
            self._config = get_config()
        return self._config

    async def execute(self, request: TransferRequest) -> TransferResult:
        """
        Transfer one file.

        Returns:
            TransferResult with success=True, or success=False when a
            transfer failure occurred and throw_on_error is off

        Raises:
            ValidationError: Always, for malformed input
            TransferError: Transfer failure when throw_on_error is on
        """
        validate_request(request)
        headers = resolve_headers(request)

        async with AsyncExitStack() as stack:
            raw_client = self._raw_client or await self._open_raw_client(stack)
            helper = self._upload_helper or await self._open_upload_helper(stack)

            with log_operation(
                logger,
                "transfer_file",
                level=logging.INFO,
                slow_threshold_ms=None,
                download_url=request.download_url,
                upload_url=request.upload_url,
                http_method=request.method.value,
            ) as op:
                result = await self._run(request, headers, raw_client, helper)
                op.add_context(
                    success=result.success,
                    download_status=result.download_status,
                    upload_status=result.upload_status,
                )
                return result

    async def _open_raw_client(self, stack: AsyncExitStack) -> AiohttpRawClient:
        config = self.config
        session = await stack.enter_async_context(
            create_session(
                auto_decompress=False,
                enable_ssl=config.verify_ssl,
                timeout_total=config.total_timeout_seconds,
                timeout_connect=config.connect_timeout_seconds,
                timeout_sock_read=config.read_timeout_seconds,
                skip_auto_headers=("Accept-Encoding",),
            )
        )
        return AiohttpRawClient(
            session,
            chunk_size=config.chunk_size,
            allow_redirects=config.allow_redirects,
        )

    async def _open_upload_helper(self, stack: AsyncExitStack) -> AiohttpStreamingHelper:
        config = self.config
        session = await stack.enter_async_context(
            create_session(
                enable_ssl=config.verify_ssl,
                timeout_total=config.total_timeout_seconds,
                timeout_connect=config.connect_timeout_seconds,
                timeout_sock_read=config.read_timeout_seconds,
            )
        )
        return AiohttpStreamingHelper(session)

    async def _run(
        self,
        request: TransferRequest,
        headers: ResolvedHeaders,
        raw_client: RawHttpClient,
        helper: StreamingRequestHelper,
    ) -> TransferResult:
        attempt = _Attempt()
        response: Optional[HelperResponse] = None
        error: Optional[TransferError] = None

        try:
            response, error = await self._transfer(request, headers, raw_client, helper, attempt)
        except Exception as e:
            error = wrap_exception(
                e,
                context={"state": attempt.state.value},
            )
        finally:
            attempt.close()

        if error is not None:
            logger.debug(
                "Transfer failed",
                extra={
                    "error_category": error.category.value,
                    "error_message": str(error),
                    "download_status": attempt.download_status,
                },
            )
            return build_failure(error, request, download_status=attempt.download_status)

        attempt.state = TransferState.SUCCEEDED
        return build_success(attempt.download_status, response)

    async def _transfer(
        self,
        request: TransferRequest,
        headers: ResolvedHeaders,
        raw_client: RawHttpClient,
        helper: StreamingRequestHelper,
        attempt: _Attempt,
    ) -> tuple[Optional[HelperResponse], Optional[TransferError]]:
        attempt.state = TransferState.DOWNLOADING
        outcome, error = await DownloadInitiator(raw_client).open(request, headers)
        if error:
            attempt.state = TransferState.DOWNLOAD_FAILED
            return None, error
        attempt.outcome = outcome

        attempt.state = TransferState.UPLOADING
        response, error = await Relay(helper).upload(request, headers, outcome)
        if error:
            attempt.state = TransferState.UPLOAD_FAILED
            return response, error

        attempt.uploaded = True
        return response, None


__all__ = ["TransferEngine", "validate_request"]
