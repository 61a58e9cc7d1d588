"""Tests for JSON and console log formatters."""

import json
import logging
import sys

import pytest

from core.logging.context import clear_log_context, set_log_context
from core.logging.formatters import ConsoleFormatter, JSONFormatter, redact_secrets


def _make_record(
    msg="test message",
    level=logging.INFO,
    name="test.logger",
    exc_info=None,
    **extras,
):
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extras.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def clear_context():
    clear_log_context()
    yield
    clear_log_context()


class TestJSONFormatter:

    def test_formats_basic_json_with_required_fields(self):
        output = json.loads(JSONFormatter().format(_make_record()))

        assert output["level"] == "INFO"
        assert output["logger"] == "test.logger"
        assert output["message"] == "test message"
        assert output["ts"].endswith("Z")

    def test_includes_context(self):
        set_log_context(execution_id="x-1", node="Site to Site File Transfer", item_index=3)
        output = json.loads(JSONFormatter().format(_make_record()))

        assert output["execution_id"] == "x-1"
        assert output["node"] == "Site to Site File Transfer"
        assert output["item_index"] == "3"

    def test_omits_empty_context(self):
        output = json.loads(JSONFormatter().format(_make_record()))
        assert "execution_id" not in output
        assert "trace_id" not in output

    def test_extra_fields_are_whitelisted(self):
        record = _make_record(http_method="PUT", success=True, not_listed="x")
        output = json.loads(JSONFormatter().format(record))

        assert output["http_method"] == "PUT"
        assert output["success"] is True
        assert "not_listed" not in output

    def test_numeric_fields_are_coerced(self):
        record = _make_record(download_status="200", content_length="1024", item_index="2")
        output = json.loads(JSONFormatter().format(record))

        assert output["download_status"] == 200
        assert output["content_length"] == 1024
        assert output["item_index"] == 2

    def test_bad_numeric_value_becomes_null(self):
        output = json.loads(JSONFormatter().format(_make_record(upload_status="n/a")))
        assert output["upload_status"] is None

    def test_sanitizes_bearer_token_in_url_fields(self):
        record = _make_record(
            upload_url="https://u/upload?bearer=secret-token&name=a.zip",
            download_url="https://d/file.zip?sig=abc123",
        )
        output = json.loads(JSONFormatter().format(record))

        assert output["upload_url"] == "https://u/upload?bearer=[REDACTED]&name=a.zip"
        assert output["download_url"] == "https://d/file.zip?sig=[REDACTED]"

    def test_sanitizes_error_message(self):
        record = _make_record(error_message="failed for https://u/x?token=abc")
        output = json.loads(JSONFormatter().format(record))
        assert "abc" not in output["error_message"]

    def test_includes_source_location_for_debug(self):
        output = json.loads(JSONFormatter().format(_make_record(level=logging.DEBUG)))
        assert output["file"] == "test.py:42"

    def test_no_source_location_for_info(self):
        output = json.loads(JSONFormatter().format(_make_record()))
        assert "file" not in output

    def test_includes_exception(self):
        try:
            raise ValueError("upload to https://u/x?bearer=abc failed")
        except ValueError:
            record = _make_record(level=logging.ERROR, exc_info=sys.exc_info())

        output = json.loads(JSONFormatter().format(record))

        assert output["exception"]["type"] == "ValueError"
        assert "bearer=[REDACTED]" in output["exception"]["message"]
        assert "Traceback" in output["exception"]["stacktrace"]


class TestConsoleFormatter:

    @pytest.fixture
    def formatter(self):
        formatter = ConsoleFormatter()
        formatter._use_colors = False
        return formatter

    def test_basic_line(self, formatter):
        line = formatter.format(_make_record(msg="Upload complete"))
        assert " - INFO - Upload complete" in line

    def test_node_and_item_prefix(self, formatter):
        set_log_context(node="transfer", item_index=0)
        line = formatter.format(_make_record())
        assert "[transfer]" in line
        assert "[item:0]" in line

    def test_execution_tag_uses_suffix(self, formatter):
        set_log_context(execution_id="x-20260101-120000-abcd")
        line = formatter.format(_make_record())
        assert "[exec:000-abcd]" in line

    def test_redacts_message(self, formatter):
        line = formatter.format(_make_record(msg="POST https://u/up?bearer=abc"))
        assert "bearer=[REDACTED]" in line
        assert "abc" not in line

    def test_colors_when_enabled(self):
        formatter = ConsoleFormatter()
        formatter._use_colors = True
        line = formatter.format(_make_record(level=logging.WARNING))
        assert "\033[33mWARNING\033[0m" in line

    def test_appends_transfer_summary(self, formatter):
        line = formatter.format(
            _make_record(msg="transfer_file completed", download_status=200, upload_status=201)
        )
        assert line.endswith("transfer_file completed (download_status=200 upload_status=201)")


class TestRedactSecrets:

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("https://u/x?bearer=abc", "https://u/x?bearer=[REDACTED]"),
            ("https://u/x?a=1&Token=abc&b=2", "https://u/x?a=1&Token=[REDACTED]&b=2"),
            ("GET https://d/f?sig=xyz failed", "GET https://d/f?sig=[REDACTED] failed"),
            ("https://u/x?name=a.zip", "https://u/x?name=a.zip"),
        ],
    )
    def test_redacts_credentials(self, text, expected):
        assert redact_secrets(text) == expected
