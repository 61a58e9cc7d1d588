"""Logging helpers that attach structured fields to a record."""

import logging
from typing import Any

from core.errors.exceptions import classify_exception

# Attributes every LogRecord already has; passing them in extra raises KeyError
_RESERVED_LOG_KEYS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

MAX_ERROR_MESSAGE_LENGTH = 500


def _extra(fields: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in fields.items() if k not in _RESERVED_LOG_KEYS}


def _error_category(exc: BaseException) -> str:
    category = getattr(exc, "category", None)
    if category is None and isinstance(exc, Exception):
        category = classify_exception(exc)
    return getattr(category, "value", str(category))


def log_with_context(
    logger: logging.Logger,
    level: int,
    msg: str,
    **kwargs: Any,
) -> None:
    """
    Log with structured fields.

    ``exc_info`` is passed through to the logger; every other keyword
    becomes an extra field unless it collides with a LogRecord attribute.

    Example:
        log_with_context(
            logger, logging.INFO, "Upload complete",
            upload_url=request.upload_url,
            upload_status=201,
        )
    """
    exc_info = kwargs.pop("exc_info", None)
    logger.log(level, msg, exc_info=exc_info, extra=_extra(kwargs))


def log_exception(
    logger: logging.Logger,
    exc: BaseException,
    msg: str,
    level: int = logging.ERROR,
    include_traceback: bool = True,
    **kwargs: Any,
) -> None:
    """
    Log an exception with its category and a bounded message.

    ``error_category`` comes from the exception's own category when it has
    one (all TransferError subclasses do), otherwise from
    classify_exception(). An explicit error_category keyword wins.

    Example:
        try:
            await relay.upload(...)
        except Exception as e:
            log_exception(logger, e, "Upload failed", upload_url=url)
    """
    kwargs.setdefault("error_category", _error_category(exc))

    error_msg = str(exc)
    if len(error_msg) > MAX_ERROR_MESSAGE_LENGTH:
        error_msg = error_msg[:MAX_ERROR_MESSAGE_LENGTH] + "..."
    kwargs["error_message"] = error_msg

    if include_traceback:
        logger.log(level, msg, exc_info=exc, extra=_extra(kwargs))
    else:
        logger.log(level, msg, extra=_extra(kwargs))


__all__ = ["log_with_context", "log_exception"]
