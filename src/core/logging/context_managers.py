"""Context managers that scope log context and time transfer operations."""

import logging
import time
from typing import Any, Dict, List, Optional

from core.logging.context import bind_log_context, unbind_log_context
from core.logging.utilities import log_exception, log_with_context


class LogContext:
    """
    Bind log context fields for the duration of a block.

    Fields passed as None keep their current value. On exit each field is
    reset to exactly what it was before, including when the block raises.

    Usage:
        with LogContext(node="Site to Site File Transfer", item_index=3):
            # All logs in this block will carry node and item_index
            await run_item()
    """

    def __init__(
        self,
        execution_id: Optional[str] = None,
        node: Optional[str] = None,
        item_index: Optional[int] = None,
        trace_id: Optional[str] = None,
    ):
        self.fields = {
            "execution_id": execution_id,
            "node": node,
            "item_index": item_index,
            "trace_id": trace_id,
        }
        self._tokens: List = []

    def __enter__(self) -> "LogContext":
        self._tokens = bind_log_context(**self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        unbind_log_context(self._tokens)
        self._tokens = []
        return False


def _to_level(level: int | str) -> int:
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        return resolved if isinstance(resolved, int) else logging.DEBUG
    return level


class OperationContext:
    """
    Times a block and logs a single line when it ends.

    A block that completes is logged at ``level``, raised to INFO when it
    took longer than ``slow_threshold_ms`` (None disables the promotion).
    A block that raises is logged at WARNING with its error category and
    no traceback; the exception still propagates.

    Fields given as keyword arguments, plus anything added with
    add_context(), become structured fields on that line.
    """

    def __init__(
        self,
        logger: logging.Logger,
        operation: str,
        level: int | str = logging.DEBUG,
        slow_threshold_ms: Optional[float] = 1000.0,
        **fields: Any,
    ):
        self.logger = logger
        self.operation = operation
        self.level = _to_level(level)
        self.slow_threshold_ms = slow_threshold_ms
        self.fields: Dict[str, Any] = {**fields, "operation": operation}
        self._started = 0.0

    @property
    def elapsed_ms(self) -> float:
        return round((time.perf_counter() - self._started) * 1000, 2)

    def add_context(self, **fields: Any) -> None:
        """Attach fields learned mid-operation (statuses, lengths)."""
        self.fields.update(fields)

    def __enter__(self) -> "OperationContext":
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration_ms = self.elapsed_ms

        if exc_val is not None:
            log_exception(
                self.logger,
                exc_val,
                f"{self.operation} failed",
                level=logging.WARNING,
                include_traceback=False,
                duration_ms=duration_ms,
                **self.fields,
            )
            return False

        level = self.level
        if self.slow_threshold_ms is not None and duration_ms > self.slow_threshold_ms:
            level = max(level, logging.INFO)

        log_with_context(
            self.logger,
            level,
            f"{self.operation} completed",
            duration_ms=duration_ms,
            **self.fields,
        )
        return False


def log_operation(
    logger: logging.Logger,
    operation: str,
    level: int | str = logging.DEBUG,
    slow_threshold_ms: Optional[float] = 1000.0,
    **fields: Any,
) -> OperationContext:
    """
    Shorthand for OperationContext.

    Example:
        with log_operation(logger, "transfer_file", upload_url=url) as op:
            result = await run()
            op.add_context(upload_status=result.upload_status)
    """
    return OperationContext(
        logger, operation, level=level, slow_threshold_ms=slow_threshold_ms, **fields
    )
