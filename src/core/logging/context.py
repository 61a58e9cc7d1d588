"""
Context variables for structured logging.

Every log line carries the fields below when they are set. Values are held
in ContextVars so concurrent tasks never see each other's item context.
"""

from contextvars import ContextVar, Token
from typing import Any, Dict, List, Optional

CONTEXT_FIELDS = ("execution_id", "node", "item_index", "trace_id")

_vars: Dict[str, ContextVar[str]] = {
    name: ContextVar(name, default="") for name in CONTEXT_FIELDS
}


def bind_log_context(**fields: Any) -> List[Token]:
    """
    Set context fields and return the tokens needed to undo the change.

    None values are skipped; everything else is stored as a string.
    """
    tokens = []
    for name, value in fields.items():
        if value is not None:
            tokens.append(_vars[name].set(str(value)))
    return tokens


def unbind_log_context(tokens: List[Token]) -> None:
    """Restore the values that were current before bind_log_context()."""
    for token in reversed(tokens):
        token.var.reset(token)


def set_log_context(
    execution_id: Optional[str] = None,
    node: Optional[str] = None,
    item_index: Optional[int | str] = None,
    trace_id: Optional[str] = None,
) -> None:
    bind_log_context(
        execution_id=execution_id,
        node=node,
        item_index=item_index,
        trace_id=trace_id,
    )


def get_log_context() -> Dict[str, str]:
    return {name: var.get() for name, var in _vars.items()}


def clear_log_context() -> None:
    for var in _vars.values():
        var.set("")
