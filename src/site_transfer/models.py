"""
Data models for a single site-to-site transfer.

Defines the typed values that flow through the engine:
- HeaderParam: tagged header parameter (TextHeaders | StructuredHeaders)
- TransferRequest: validated per-item input
- ResolvedHeaders: final headers for both legs
- DownloadOutcome: validated download response with its live body
- TransferResult: record handed back to the host
"""

from collections.abc import AsyncIterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from core.types import RawResponse


class HttpMethod(str, Enum):
    """Upload methods accepted by the destination."""

    POST = "POST"
    PUT = "PUT"


class TransferState(str, Enum):
    """Per-item lifecycle of a transfer."""

    VALIDATING = "validating"
    DOWNLOADING = "downloading"
    DOWNLOAD_FAILED = "download_failed"
    UPLOADING = "uploading"
    UPLOAD_FAILED = "upload_failed"
    SUCCEEDED = "succeeded"


@dataclass(frozen=True)
class TextHeaders:
    """Header parameter supplied as a JSON-encoded string."""

    text: str


@dataclass(frozen=True)
class StructuredHeaders:
    """Header parameter supplied as an already-parsed mapping."""

    values: Mapping[Any, Any] = field(default_factory=dict)


HeaderParam = TextHeaders | StructuredHeaders


def to_header_param(value: Any) -> HeaderParam:
    """
    Tag a raw header parameter from the host.

    Strings become TextHeaders, mappings become StructuredHeaders; anything
    else (None, numbers, lists) is treated as "no headers".
    """
    if isinstance(value, (TextHeaders, StructuredHeaders)):
        return value
    if isinstance(value, str):
        return TextHeaders(value)
    if isinstance(value, Mapping):
        return StructuredHeaders(value)
    return StructuredHeaders({})


@dataclass(frozen=True)
class TransferRequest:
    """
    Validated input for one item.

    Attributes:
        download_url: Source URL (non-empty after trimming)
        upload_url: Destination URL (non-empty after trimming)
        method: Upload method
        content_length: Explicit size in bytes; takes precedence over the
            download response's Content-Length
        download_headers: User headers for the download leg
        upload_headers: User headers for the upload leg
        throw_on_error: Raise on transfer failures instead of returning an
            error record
    """

    download_url: str
    upload_url: str
    method: HttpMethod = HttpMethod.POST
    content_length: Optional[int] = None
    download_headers: HeaderParam = field(default_factory=lambda: TextHeaders("{}"))
    upload_headers: HeaderParam = field(default_factory=lambda: TextHeaders("{}"))
    throw_on_error: bool = True


@dataclass
class ResolvedHeaders:
    """Final headers for both legs; keys keep the caller's casing."""

    download: dict[str, str]
    upload: dict[str, str]

    def has_upload_header(self, name: str) -> bool:
        lowered = name.lower()
        return any(key.lower() == lowered for key in self.upload)


@dataclass
class DownloadOutcome:
    """
    Validated download response.

    ``body_stream`` is the response body as received from the client. It is
    consumed exactly once, by the upload request, and cannot be restarted.

    Attributes:
        status_code: HTTP status (2xx)
        headers: Response headers
        body_stream: Single-pass byte stream
        content_length: Effective length (request value, else response header)
        response: Raw response that owns the connection
    """

    status_code: int
    headers: Mapping[str, str]
    body_stream: AsyncIterable[bytes]
    content_length: Optional[int]
    response: RawResponse

    def release(self) -> None:
        self.response.release()

    def destroy(self) -> None:
        self.response.destroy()


class TransferResult(BaseModel):
    """Record returned to the host for one item.

    Serialised with camelCase keys; fields that were never set are omitted.

    Example:
        >>> TransferResult(success=True, download_status=200, upload_status=201).to_json()
        {'success': True, 'downloadStatus': 200, 'uploadStatus': 201}
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(..., description="Whether both legs completed with 2xx")
    download_status: int | None = Field(default=None, alias="downloadStatus")
    upload_status: int | None = Field(default=None, alias="uploadStatus")
    upload_response: Any = Field(
        default=None,
        alias="uploadResponse",
        description="Upload response body, JSON-parsed when possible",
    )
    error: str | None = Field(default=None, description="Failure description")
    download_url: str | None = Field(default=None, alias="downloadUrl")
    upload_url: str | None = Field(default=None, alias="uploadUrl")

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


@dataclass
class NodeExecutionData:
    """One output item: the result record paired with its input item index."""

    json: dict[str, Any]
    paired_item: int

    def to_dict(self) -> dict[str, Any]:
        return {"json": self.json, "pairedItem": {"item": self.paired_item}}


__all__ = [
    "DownloadOutcome",
    "HeaderParam",
    "HttpMethod",
    "NodeExecutionData",
    "ResolvedHeaders",
    "StructuredHeaders",
    "TextHeaders",
    "TransferRequest",
    "TransferResult",
    "TransferState",
    "to_header_param",
]
