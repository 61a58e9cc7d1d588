"""
Tests for TransferEngine.

HTTP clients are injected as in-memory fakes; no sockets are opened.
"""

import aiohttp
import pytest

from core.errors.exceptions import (
    DownloadFailed,
    DownloadRequestFailed,
    ErrorCategory,
    UnexpectedTransferError,
    UploadFailed,
    ValidationError,
)
from fakes import FakeRawClient, FakeRawResponse, FakeUploadHelper
from site_transfer.engine import TransferEngine, validate_request
from site_transfer.models import HttpMethod, StructuredHeaders, TextHeaders, TransferRequest

DOWNLOAD_URL = "https://d/file.zip"
UPLOAD_URL = "https://u/upload"


def _request(**overrides) -> TransferRequest:
    values = {"download_url": DOWNLOAD_URL, "upload_url": UPLOAD_URL}
    values.update(overrides)
    return TransferRequest(**values)


def _engine(raw: FakeRawClient, helper: FakeUploadHelper) -> TransferEngine:
    return TransferEngine(raw_client=raw, upload_helper=helper)


class TestValidation:
    """Validation failures always raise."""

    @pytest.mark.parametrize("throw_on_error", [True, False])
    @pytest.mark.parametrize("url", ["", "   "])
    async def test_empty_download_url(self, fake_raw_client, fake_upload_helper, url, throw_on_error):
        engine = _engine(fake_raw_client, fake_upload_helper)

        with pytest.raises(ValidationError, match="Download URL"):
            await engine.execute(_request(download_url=url, throw_on_error=throw_on_error))

        assert fake_raw_client.calls == []
        assert fake_upload_helper.calls == []

    @pytest.mark.parametrize("throw_on_error", [True, False])
    async def test_empty_upload_url(self, fake_raw_client, fake_upload_helper, throw_on_error):
        engine = _engine(fake_raw_client, fake_upload_helper)

        with pytest.raises(ValidationError, match="Upload URL is required and cannot be empty"):
            await engine.execute(_request(upload_url="", throw_on_error=throw_on_error))

        assert fake_raw_client.calls == []

    def test_unsupported_method(self):
        with pytest.raises(ValidationError, match="Unsupported upload method"):
            validate_request(_request(method="PATCH"))


class TestSuccessfulTransfer:

    async def test_post_200_200(self, fake_raw_client, fake_upload_helper):
        result = await _engine(fake_raw_client, fake_upload_helper).execute(_request())

        assert result.to_json() == {
            "success": True,
            "downloadStatus": 200,
            "uploadStatus": 200,
            "uploadResponse": {"ok": True},
        }

    async def test_body_is_relayed_unmodified(self, fake_upload_helper):
        raw = FakeRawResponse(chunks=[b"part-1|", b"part-2|", b"part-3"])
        client = FakeRawClient(response=raw)

        await _engine(client, fake_upload_helper).execute(_request())

        assert fake_upload_helper.received == b"part-1|part-2|part-3"
        assert fake_upload_helper.calls[0]["body"] is raw.body

    async def test_download_request_shape(self, fake_raw_client, fake_upload_helper):
        await _engine(fake_raw_client, fake_upload_helper).execute(
            _request(download_headers=TextHeaders('{"X-Source-Key": "abc"}'))
        )

        target, method, headers = fake_raw_client.calls[0]
        assert method == "GET"
        assert (target.scheme, target.hostname, target.port, target.path) == (
            "https",
            "d",
            443,
            "/file.zip",
        )
        assert headers == {"Accept": "*/*", "X-Source-Key": "abc"}

    async def test_upload_request_shape(self, fake_raw_client, fake_upload_helper):
        await _engine(fake_raw_client, fake_upload_helper).execute(_request())

        call = fake_upload_helper.calls[0]
        assert call["method"] == "POST"
        assert call["url"] == UPLOAD_URL
        assert call["headers"] == {"Content-Type": "application/octet-stream"}

    async def test_put_method(self, fake_raw_client, fake_upload_helper):
        result = await _engine(fake_raw_client, fake_upload_helper).execute(
            _request(method=HttpMethod.PUT)
        )

        assert result.success is True
        assert fake_upload_helper.calls[0]["method"] == "PUT"

    async def test_bearer_token_sent_and_url_unchanged(self, fake_raw_client, fake_upload_helper):
        url = "https://u/upload?bearer=TOKEN&name=file.zip"

        await _engine(fake_raw_client, fake_upload_helper).execute(_request(upload_url=url))

        call = fake_upload_helper.calls[0]
        assert call["headers"]["Authorization"] == "Bearer TOKEN"
        assert call["url"] == url

    async def test_user_authorization_wins(self, fake_raw_client, fake_upload_helper):
        await _engine(fake_raw_client, fake_upload_helper).execute(
            _request(
                upload_url="https://u/upload?bearer=TOKEN",
                upload_headers=StructuredHeaders({"authorization": "Bearer mine"}),
            )
        )

        headers = fake_upload_helper.calls[0]["headers"]
        assert headers["authorization"] == "Bearer mine"
        assert "Authorization" not in headers

    async def test_content_length_from_download(self, fake_upload_helper):
        client = FakeRawClient(response=FakeRawResponse(headers={"Content-Length": "12"}))

        await _engine(client, fake_upload_helper).execute(_request())

        assert fake_upload_helper.calls[0]["headers"]["Content-Length"] == "12"

    async def test_request_content_length_wins(self, fake_upload_helper):
        client = FakeRawClient(response=FakeRawResponse(headers={"Content-Length": "12"}))

        await _engine(client, fake_upload_helper).execute(_request(content_length=1024))

        assert fake_upload_helper.calls[0]["headers"]["Content-Length"] == "1024"

    @pytest.mark.parametrize("content_length", [-5, -1, 0])
    async def test_invalid_request_content_length_ignored(self, fake_upload_helper, content_length):
        client = FakeRawClient(response=FakeRawResponse(headers={"Content-Length": "12"}))

        await _engine(client, fake_upload_helper).execute(_request(content_length=content_length))

        assert fake_upload_helper.calls[0]["headers"]["Content-Length"] == "12"

    async def test_negative_content_length_without_download_length(
        self, fake_raw_client, fake_upload_helper
    ):
        await _engine(fake_raw_client, fake_upload_helper).execute(_request(content_length=-5))

        assert fake_upload_helper.calls[0]["headers"] == {
            "Content-Type": "application/octet-stream"
        }

    async def test_user_content_length_header_not_replaced(self, fake_upload_helper):
        client = FakeRawClient(response=FakeRawResponse(headers={"Content-Length": "12"}))

        await _engine(client, fake_upload_helper).execute(
            _request(upload_headers=StructuredHeaders({"content-length": "12"}))
        )

        headers = fake_upload_helper.calls[0]["headers"]
        assert headers["content-length"] == "12"
        assert "Content-Length" not in headers

    async def test_no_content_length_when_unknown(self, fake_raw_client, fake_upload_helper):
        await _engine(fake_raw_client, fake_upload_helper).execute(_request())

        assert "Content-Length" not in fake_upload_helper.calls[0]["headers"]

    @pytest.mark.parametrize(
        "body, expected",
        [
            ('{"id": 7}', {"id": 7}),
            ("uploaded", "uploaded"),
            ("", ""),
            (b"\x00\x01", b"\x00\x01"),
            ({"already": "parsed"}, {"already": "parsed"}),
        ],
    )
    async def test_upload_response_parsing(self, fake_raw_client, body, expected):
        helper = FakeUploadHelper(status_code=201, body=body)

        result = await _engine(fake_raw_client, helper).execute(_request())

        assert result.upload_status == 201
        assert result.upload_response == expected

    async def test_download_response_released(self, fake_upload_helper):
        raw = FakeRawResponse()

        await _engine(FakeRawClient(response=raw), fake_upload_helper).execute(_request())

        assert raw.released is True
        assert raw.destroyed is False


class TestDownloadFailure:

    async def test_404_raises(self, fake_upload_helper):
        raw = FakeRawResponse(status=404)
        engine = _engine(FakeRawClient(response=raw), fake_upload_helper)

        with pytest.raises(DownloadFailed, match="404") as exc_info:
            await engine.execute(_request())

        message = str(exc_info.value)
        assert message.startswith("File transfer failed: Download failed with HTTP 404")
        assert message.endswith(f"Download URL: {DOWNLOAD_URL}, Upload URL: {UPLOAD_URL}")
        assert exc_info.value.category == ErrorCategory.PERMANENT
        assert raw.destroyed is True
        assert raw.consumed == 0
        assert fake_upload_helper.calls == []

    async def test_404_record_when_not_throwing(self, fake_upload_helper):
        raw = FakeRawResponse(status=404)
        engine = _engine(FakeRawClient(response=raw), fake_upload_helper)

        result = await engine.execute(_request(throw_on_error=False))

        record = result.to_json()
        assert record["success"] is False
        assert "404" in record["error"]
        assert record["downloadStatus"] == 404
        assert record["downloadUrl"] == DOWNLOAD_URL
        assert record["uploadUrl"] == UPLOAD_URL
        assert "uploadStatus" not in record
        assert raw.destroyed is True
        assert fake_upload_helper.calls == []

    async def test_redirect_is_a_failure(self, fake_upload_helper):
        client = FakeRawClient(response=FakeRawResponse(status=302))

        with pytest.raises(DownloadFailed, match="HTTP 302"):
            await _engine(client, fake_upload_helper).execute(_request())

    async def test_request_failure_raises(self, fake_upload_helper):
        client = FakeRawClient(error=aiohttp.ClientConnectionError("Cannot connect to host d:443"))

        with pytest.raises(DownloadRequestFailed) as exc_info:
            await _engine(client, fake_upload_helper).execute(_request())

        message = str(exc_info.value)
        assert message.startswith(
            "File transfer failed: Download request failed: Connection error: Cannot connect"
        )
        assert isinstance(exc_info.value.__cause__, aiohttp.ClientConnectionError)
        assert exc_info.value.is_retryable is True

    async def test_request_failure_record(self, fake_upload_helper):
        client = FakeRawClient(error=ConnectionRefusedError(111, "Connection refused"))

        result = await _engine(client, fake_upload_helper).execute(_request(throw_on_error=False))

        assert result.success is False
        assert "Download request failed" in result.error
        assert result.download_status is None
        assert "downloadStatus" not in result.to_json()

    async def test_unsupported_download_scheme(self, fake_raw_client, fake_upload_helper):
        result = await _engine(fake_raw_client, fake_upload_helper).execute(
            _request(download_url="ftp://d/file.zip", throw_on_error=False)
        )

        assert result.success is False
        assert "Unsupported URL scheme" in result.error
        assert fake_raw_client.calls == []


class TestUploadFailure:

    async def test_500_raises_with_both_statuses(self, fake_raw_client):
        helper = FakeUploadHelper(status_code=500, body="boom")

        with pytest.raises(UploadFailed) as exc_info:
            await _engine(fake_raw_client, helper).execute(_request(method=HttpMethod.PUT))

        message = str(exc_info.value)
        assert "Upload failed with HTTP 500 to https://u/upload" in message
        assert "accepts PUT requests" in message
        assert "(download status: HTTP 200)" in message
        assert exc_info.value.response_body == "boom"

    async def test_500_record_when_not_throwing(self, fake_raw_client):
        helper = FakeUploadHelper(status_code=500, body="boom")

        result = await _engine(fake_raw_client, helper).execute(_request(throw_on_error=False))

        record = result.to_json()
        assert record["success"] is False
        assert record["downloadStatus"] == 200
        assert record["uploadStatus"] == 500
        assert "500" in record["error"]
        assert record["uploadUrl"] == UPLOAD_URL

    async def test_failed_upload_destroys_download(self):
        raw = FakeRawResponse()
        helper = FakeUploadHelper(status_code=403)

        await _engine(FakeRawClient(response=raw), helper).execute(_request(throw_on_error=False))

        assert raw.destroyed is True
        assert raw.released is False

    async def test_transport_error_during_upload(self):
        raw = FakeRawResponse()
        helper = FakeUploadHelper(error=aiohttp.ServerDisconnectedError())

        with pytest.raises(UnexpectedTransferError) as exc_info:
            await _engine(FakeRawClient(response=raw), helper).execute(_request())

        assert str(exc_info.value).startswith("File transfer failed: ")
        assert exc_info.value.category == ErrorCategory.TRANSIENT
        assert exc_info.value.context["state"] == "uploading"
        assert isinstance(exc_info.value.__cause__, aiohttp.ServerDisconnectedError)
        assert raw.destroyed is True

    async def test_transport_error_record(self):
        helper = FakeUploadHelper(error=aiohttp.ServerDisconnectedError())

        result = await _engine(FakeRawClient(), helper).execute(_request(throw_on_error=False))

        record = result.to_json()
        assert record["success"] is False
        assert record["downloadStatus"] == 200
        assert "uploadStatus" not in record
