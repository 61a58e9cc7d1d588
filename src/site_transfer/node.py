"""
Host-facing node: runs the transfer operation once per input item.

Items are processed one after another. A failed item either stops the
execution (the exception propagates) or, when the host asks to continue on
failure, produces an {"error": message} record paired with that item.
"""

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional

from core.logging import LogContext, generate_execution_id, log_exception
from site_transfer.engine import TransferEngine
from site_transfer.models import NodeExecutionData
from site_transfer.parameters import (
    TRANSFER_FILE_PROPERTIES,
    ExecutionContext,
    build_transfer_request,
)

logger = logging.getLogger(__name__)

NODE_DISPLAY_NAME = "Site to Site File Transfer"


async def transfer_file(
    context: ExecutionContext,
    item_index: int,
    engine: TransferEngine,
) -> NodeExecutionData:
    """Execute the transferFile operation for one item."""
    request = build_transfer_request(context, item_index)
    result = await engine.execute(request)
    return NodeExecutionData(json=result.to_json(), paired_item=item_index)


@dataclass(frozen=True)
class Operation:
    """A node operation: its parameters and the coroutine that runs one item."""

    properties: list[dict[str, Any]]
    execute: Callable[[ExecutionContext, int, TransferEngine], Awaitable[NodeExecutionData]]


OPERATIONS: dict[str, Operation] = {
    "transferFile": Operation(properties=TRANSFER_FILE_PROPERTIES, execute=transfer_file),
}


class SiteToSiteFileTransfer:
    """Streams files from a download URL directly to an upload URL."""

    description: dict[str, Any] = {
        "displayName": NODE_DISPLAY_NAME,
        "name": "siteToSiteFileTransfer",
        "group": ["transform"],
        "version": 1,
        "description": (
            "Stream files from a download URL directly to an upload URL "
            "without loading into memory"
        ),
        "defaults": {"name": NODE_DISPLAY_NAME},
        "inputs": ["main"],
        "outputs": ["main"],
        "properties": [*OPERATIONS["transferFile"].properties],
    }

    def __init__(self, engine: Optional[TransferEngine] = None):
        self.engine = engine or TransferEngine()

    async def execute(self, context: ExecutionContext) -> list[NodeExecutionData]:
        """
        Run the transferFile operation for every input item.

        Raises:
            Exception: The first item failure, unless context.continue_on_fail()
        """
        items = context.get_input_data()
        operation = OPERATIONS["transferFile"]
        return_data: list[NodeExecutionData] = []
        execution_id = generate_execution_id()

        for item_index in range(len(items)):
            with LogContext(
                execution_id=execution_id,
                node=NODE_DISPLAY_NAME,
                item_index=item_index,
            ):
                try:
                    return_data.append(
                        await operation.execute(context, item_index, self.engine)
                    )
                except Exception as e:
                    if not context.continue_on_fail():
                        raise
                    log_exception(
                        logger,
                        e,
                        "Item failed, continuing",
                        level=logging.WARNING,
                        include_traceback=False,
                        item_index=item_index,
                    )
                    return_data.append(
                        NodeExecutionData(json={"error": str(e)}, paired_item=item_index)
                    )

        logger.info(
            "Node execution complete",
            extra={
                "items_total": len(items),
                "items_failed": sum(1 for d in return_data if "error" in d.json),
            },
        )
        return return_data


@dataclass
class StaticExecutionContext:
    """
    ExecutionContext over fixed values, for the CLI and tests.

    ``parameters`` holds one mapping per item; a single mapping is reused for
    every item.
    """

    items: Sequence[dict[str, Any]] = field(default_factory=lambda: [{}])
    parameters: Sequence[dict[str, Any]] | dict[str, Any] = field(default_factory=dict)
    continue_on_failure: bool = False

    def get_input_data(self) -> list[dict[str, Any]]:
        return list(self.items)

    def get_node_parameter(self, name: str, item_index: int, default: Any = None) -> Any:
        if isinstance(self.parameters, dict):
            values = self.parameters
        else:
            values = self.parameters[item_index]
        return values.get(name, default)

    def continue_on_fail(self) -> bool:
        return self.continue_on_failure


__all__ = [
    "OPERATIONS",
    "Operation",
    "SiteToSiteFileTransfer",
    "StaticExecutionContext",
    "transfer_file",
]
