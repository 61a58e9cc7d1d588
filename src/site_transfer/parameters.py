"""
Node parameters and their mapping into a TransferRequest.

The host exposes parameters through a loosely typed accessor; everything
downstream works on the validated TransferRequest built here.
"""

from typing import Any, Protocol

from core.errors.exceptions import ValidationError
from core.http.streaming import parse_content_length
from site_transfer.models import HttpMethod, TransferRequest, to_header_param

TRANSFER_FILE_PROPERTIES: list[dict[str, Any]] = [
    {
        "displayName": "Download URL",
        "name": "downloadUrl",
        "type": "string",
        "default": "",
        "required": True,
        "description": "URL to download the file from",
        "placeholder": "https://example.com/file.zip",
    },
    {
        "displayName": "Upload URL",
        "name": "uploadUrl",
        "type": "string",
        "default": "",
        "required": True,
        "description": "URL to upload the file to",
        "placeholder": "https://upload.example.com/upload",
    },
    {
        "displayName": "Content Length",
        "name": "contentLength",
        "type": "number",
        "default": "",
        "required": False,
        "description": (
            "File size in bytes (optional, will be detected from download response "
            "if not provided)"
        ),
    },
    {
        "displayName": "HTTP Method",
        "name": "method",
        "type": "options",
        "options": [{"name": m.value, "value": m.value} for m in HttpMethod],
        "default": HttpMethod.POST.value,
        "description": "HTTP method to use for upload",
    },
    {
        "displayName": "Download Headers",
        "name": "downloadHeaders",
        "type": "json",
        "default": "{}",
        "required": False,
        "description": "Additional headers for the download request (JSON object)",
    },
    {
        "displayName": "Upload Headers",
        "name": "uploadHeaders",
        "type": "json",
        "default": "{}",
        "required": False,
        "description": (
            "Additional headers for the upload request (JSON object). Bearer tokens "
            "in upload URL query string are automatically extracted."
        ),
    },
    {
        "displayName": "Throw Error on Non-2xx Status Codes",
        "name": "throwOnError",
        "type": "boolean",
        "default": True,
        "description": (
            "Whether to throw an error and fail execution when the API returns a "
            "3xx, 4xx, or 5xx status code"
        ),
    },
]


class ExecutionContext(Protocol):
    """What the node needs from the host for one execution."""

    def get_input_data(self) -> list[dict[str, Any]]:
        ...

    def get_node_parameter(self, name: str, item_index: int, default: Any = None) -> Any:
        ...

    def continue_on_fail(self) -> bool:
        ...


def parse_method(value: Any) -> HttpMethod:
    """
    Convert the method parameter to HttpMethod.

    Raises:
        ValidationError: If the value is not POST or PUT
    """
    if isinstance(value, HttpMethod):
        return value
    try:
        return HttpMethod(str(value).strip().upper())
    except ValueError:
        raise ValidationError(
            f"Unsupported upload method: {value}. Expected POST or PUT"
        ) from None


def build_transfer_request(context: ExecutionContext, item_index: int) -> TransferRequest:
    """
    Read the node parameters for one item into a TransferRequest.

    Raises:
        ValidationError: Empty download/upload URL or unsupported method
    """
    download_url = context.get_node_parameter("downloadUrl", item_index) or ""
    upload_url = context.get_node_parameter("uploadUrl", item_index) or ""

    if not isinstance(download_url, str) or not download_url.strip():
        raise ValidationError("Download URL is required and cannot be empty")
    if not isinstance(upload_url, str) or not upload_url.strip():
        raise ValidationError("Upload URL is required and cannot be empty")

    return TransferRequest(
        download_url=download_url.strip(),
        upload_url=upload_url.strip(),
        method=parse_method(context.get_node_parameter("method", item_index, "POST")),
        content_length=parse_content_length(
            context.get_node_parameter("contentLength", item_index, "")
        ),
        download_headers=to_header_param(
            context.get_node_parameter("downloadHeaders", item_index, "{}")
        ),
        upload_headers=to_header_param(
            context.get_node_parameter("uploadHeaders", item_index, "{}")
        ),
        throw_on_error=bool(context.get_node_parameter("throwOnError", item_index, True)),
    )


__all__ = [
    "ExecutionContext",
    "TRANSFER_FILE_PROPERTIES",
    "build_transfer_request",
    "parse_method",
]
