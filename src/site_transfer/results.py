"""
Result records for the host.

Failures are either raised (with URL context folded into the message) or
turned into a TransferResult with success=False, depending on the request's
throw_on_error flag.
"""

import json
from typing import Any, Optional

from core.errors.exceptions import DownloadFailed, TransferError, UploadFailed
from core.types import HelperResponse
from site_transfer.models import TransferRequest, TransferResult

URL_MARKERS = ("Download URL", "Upload URL")


def parse_upload_body(body: Any) -> Any:
    """JSON-parse a textual upload response; anything else is returned as-is."""
    if isinstance(body, str):
        try:
            return json.loads(body)
        except ValueError:
            return body
    return body


def build_success(download_status: int, response: HelperResponse) -> TransferResult:
    return TransferResult(
        success=True,
        download_status=download_status,
        upload_status=response.status_code,
        upload_response=parse_upload_body(response.body),
    )


def describe_failure(error: Exception, request: TransferRequest) -> str:
    """
    Message for a failed transfer.

    Messages that already name one of the URLs are returned unchanged;
    everything else gets both URLs appended.
    """
    message = str(error)
    if any(marker in message for marker in URL_MARKERS):
        return message
    return (
        f"File transfer failed: {message}. "
        f"Download URL: {request.download_url}, Upload URL: {request.upload_url}"
    )


def build_failure(
    error: TransferError,
    request: TransferRequest,
    download_status: Optional[int] = None,
) -> TransferResult:
    """
    Raise the error or convert it into a failure record.

    Raises:
        TransferError: When request.throw_on_error is set (same type as
            ``error``, message from describe_failure)
    """
    message = describe_failure(error, request)

    if request.throw_on_error:
        raise error.with_message(message) from error.cause

    fields: dict[str, Any] = {
        "success": False,
        "error": message,
        "download_url": request.download_url,
        "upload_url": request.upload_url,
    }
    if download_status is not None:
        fields["download_status"] = download_status
    if isinstance(error, DownloadFailed):
        fields["download_status"] = error.status_code
    elif isinstance(error, UploadFailed):
        fields["upload_status"] = error.status_code
        if error.download_status is not None:
            fields["download_status"] = error.download_status
    return TransferResult(**fields)


__all__ = [
    "build_failure",
    "build_success",
    "describe_failure",
    "parse_upload_body",
]
