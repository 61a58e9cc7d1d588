"""Log formatters for JSON and console output."""

import json
import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any, Callable, Optional

from core.logging.context import get_log_context
from core.utils.json_serializers import json_serializer

# Query parameters whose values must never reach a log line
SENSITIVE_PARAMS_PATTERN = re.compile(
    r"([?&])(bearer|sig|token|key|secret|password|auth)=[^&\s]*",
    re.IGNORECASE,
)


def redact_secrets(text: str) -> str:
    """Replace credential-like query parameter values with [REDACTED]."""
    return SENSITIVE_PARAMS_PATTERN.sub(r"\1\2=[REDACTED]", text)


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line, with log context and whitelisted extra fields.

    Every field in FIELDS is copied from the record when present. Fields
    with a converter are coerced to that type (a value that cannot be
    converted becomes null); fields in REDACTED_FIELDS have credentials
    stripped before they are written.
    """

    FIELDS: dict[str, Optional[Callable[[Any], Any]]] = {
        # Correlation
        "trace_id": None,
        "operation": None,
        "duration_ms": float,
        # Transfer legs
        "http_method": None,
        "download_url": None,
        "upload_url": None,
        "download_status": int,
        "upload_status": int,
        "status_code": int,
        "content_length": int,
        "content_type": None,
        "chunk_size": int,
        "has_bearer_token": None,
        "success": None,
        "state": None,
        # Items
        "item_index": int,
        "items_total": int,
        "items_failed": int,
        # Errors
        "error_category": None,
        "error_message": None,
        "error_type": None,
    }

    REDACTED_FIELDS = frozenset({"download_url", "upload_url", "error_message"})

    def _field_value(self, name: str, value: Any) -> Any:
        convert = self.FIELDS[name]
        if convert is not None:
            try:
                value = convert(value)
            except (TypeError, ValueError):
                return None
        if name in self.REDACTED_FIELDS and isinstance(value, str):
            return redact_secrets(value)
        return value

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": redact_secrets(record.getMessage()),
        }

        entry.update({k: v for k, v in get_log_context().items() if v})

        if record.levelno in (logging.DEBUG, logging.ERROR, logging.CRITICAL):
            entry["file"] = f"{record.filename}:{record.lineno}"

        for name in self.FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = self._field_value(name, value)

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": redact_secrets(str(exc_value)) if exc_value else None,
                "stacktrace": redact_secrets(self.formatException(record.exc_info)),
            }

        return json.dumps(entry, default=json_serializer, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable console lines with color-coded levels.

    Transfer statuses and durations are appended as key=value pairs so a
    terminal run shows the outcome of each leg. Colors are disabled when
    stdout is not a TTY.
    """

    COLORS = {
        logging.DEBUG: "\033[36m",  # Cyan
        logging.INFO: "\033[32m",  # Green
        logging.WARNING: "\033[33m",  # Yellow
        logging.ERROR: "\033[31m",  # Red
        logging.CRITICAL: "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    SUMMARY_FIELDS = ("download_status", "upload_status", "content_length", "duration_ms")

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._use_colors = sys.stdout.isatty()

    def _level(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelno) if self._use_colors else None
        if color:
            return f"{color}{record.levelname}{self.RESET}"
        return record.levelname

    def format(self, record: logging.LogRecord) -> str:
        context = get_log_context()

        parts = [datetime.now().strftime("%Y-%m-%d %H:%M:%S"), self._level(record)]
        if context["node"]:
            parts.append(f"[{context['node']}]")
        if context["item_index"]:
            parts.append(f"[item:{context['item_index']}]")
        line = " - ".join(parts) + " - "

        if context["execution_id"]:
            line += f"[exec:{context['execution_id'][-8:]}] "
        line += redact_secrets(record.getMessage())

        summary = [
            f"{name}={getattr(record, name)}"
            for name in self.SUMMARY_FIELDS
            if getattr(record, name, None) is not None
        ]
        if summary:
            line += f" ({' '.join(summary)})"

        if record.exc_info:
            line += "\n" + redact_secrets(self.formatException(record.exc_info))
        return line
