# Copyright (c) 2024-2026 nickdsmith. All Rights Reserved.
# SPDX-License-Identifier: PROPRIETARY
#
# This file is proprietary and confidential. Unauthorized copying of this file,
# via any medium is strictly prohibited.

"""Shared JSON serialization for log lines and transfer results."""

import base64
import dataclasses
from datetime import date
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel


def _decode_body(data: bytes) -> str:
    """Upload responses may be binary; keep them printable."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return base64.b64encode(data).decode("ascii")


def _serialize_known_type(obj: Any) -> tuple[bool, Any]:
    """Try to serialize by known type. Returns (handled, result)."""
    if isinstance(obj, date):  # includes datetime
        return True, obj.isoformat()
    if isinstance(obj, Decimal):
        return True, float(obj)
    if isinstance(obj, Path):
        return True, str(obj)
    if isinstance(obj, (bytes, bytearray)):
        return True, _decode_body(bytes(obj))
    if isinstance(obj, Enum):
        return True, obj.value
    if isinstance(obj, BaseModel):
        return True, obj.model_dump(by_alias=True, exclude_unset=True)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return True, dataclasses.asdict(obj)
    return False, None


def json_serializer(obj: Any) -> Any:
    """
    ``default=`` hook for json.dumps.

    - datetime/date -> ISO 8601 string
    - Decimal -> float
    - Path -> string
    - bytes -> UTF-8 text, or base64 when the body is binary
    - Enum -> value
    - pydantic models -> camelCase dict, unset fields omitted
    - dataclasses -> dict
    - anything else -> str()
    """
    handled, result = _serialize_known_type(obj)
    return result if handled else str(obj)


__all__ = ["json_serializer"]
