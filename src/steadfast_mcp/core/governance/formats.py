"""Caller-selected response formats applied ahead of governance."""

from __future__ import annotations

from typing import Any, Dict, Union

from steadfast_mcp.core.governance.models import ResponseFormat

MINIMAL_ITEM_COUNT = 5

ESSENTIAL_FIELDS = ("name", "id", "key", "title", "status", "type", "count", "message")


def _essentials(item: Any) -> Any:
    if not isinstance(item, dict):
        return item
    minimal = {name: item[name] for name in ESSENTIAL_FIELDS if name in item}
    return minimal or item


def apply_format(data: Any, fmt: Union[ResponseFormat, str] = ResponseFormat.FULL) -> Any:
    """Reshape ``data`` for the requested format.

    ``minimal`` keeps the first five items (essential fields only for
    arrays); ``full`` and ``summary`` return the data unchanged, summary being
    enforced by the governor instead.
    """
    fmt = ResponseFormat(fmt)
    if fmt is not ResponseFormat.MINIMAL:
        return data

    if isinstance(data, (list, tuple)):
        shaped = [_essentials(item) for item in data[:MINIMAL_ITEM_COUNT]]
        if len(data) <= MINIMAL_ITEM_COUNT:
            return shaped
        return {
            "items": shaped,
            "total_count": len(data),
            "format": ResponseFormat.MINIMAL.value,
            "note": f"Showing first {MINIMAL_ITEM_COUNT} items with essential fields only",
        }

    if isinstance(data, dict) and isinstance(data.get("value"), list):
        shaped_dict: Dict[str, Any] = dict(data)
        shaped_dict["value"] = data["value"][:MINIMAL_ITEM_COUNT]
        shaped_dict["format"] = ResponseFormat.MINIMAL.value
        shaped_dict["note"] = f"Minimal format - showing first {MINIMAL_ITEM_COUNT} items"
        return shaped_dict

    return data
