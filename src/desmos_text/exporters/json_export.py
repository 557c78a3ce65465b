"""JSON export of the IR, for inspecting translation results."""

from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any

from desmos_text.models import Program


def export_json(program: Program, indent: int = 2) -> str:
    """Export a Program as a JSON string."""
    return json.dumps(program_to_json(program), indent=indent)


def program_to_json(program: Program) -> dict[str, Any]:
    """Export a Program as a JSON-serializable dictionary.

    Every node carries its class name under "type"; tagged nodes also carry
    their DEST keyword under "key". Absent optional fields are dropped.
    """
    return {"lines": [_to_json(line) for line in program.lines]}


def _to_json(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        data: dict[str, Any] = {"type": type(value).__name__}
        key = getattr(type(value), "key", None)
        if key is not None:
            data["key"] = key
        for f in fields(value):
            attr = getattr(value, f.name)
            if attr is not None:
                data[f.name] = _to_json(attr)
        return data
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_to_json(v) for v in value]
    return value
