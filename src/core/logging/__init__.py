"""
Structured logging module.

Provides JSON logging with execution/item context propagation and
credential redaction for URLs that appear in log lines.
"""

from core.logging.context import (
    bind_log_context,
    clear_log_context,
    get_log_context,
    set_log_context,
    unbind_log_context,
)
from core.logging.context_managers import (
    LogContext,
    OperationContext,
    log_operation,
)
from core.logging.formatters import ConsoleFormatter, JSONFormatter, redact_secrets
from core.logging.setup import (
    generate_execution_id,
    get_log_file_path,
    get_logger,
    setup_logging,
)
from core.logging.utilities import log_exception, log_with_context

__all__ = [
    # Setup
    "setup_logging",
    "get_logger",
    "generate_execution_id",
    "get_log_file_path",
    # Formatters
    "JSONFormatter",
    "ConsoleFormatter",
    "redact_secrets",
    # Context
    "set_log_context",
    "get_log_context",
    "clear_log_context",
    "bind_log_context",
    "unbind_log_context",
    # Context Managers
    "LogContext",
    "OperationContext",
    "log_operation",
    # Utilities
    "log_with_context",
    "log_exception",
]
