"""
Helpers to convert DynamoDB wire-format attribute values into plain values.

Low-level scans return every attribute wrapped in a type tag, e.g.
``{"caption": {"S": "hello"}, "likes": {"N": "3"}}``. The helpers here
unwrap the tags we store (S, N, BOOL, M, L) and leave anything else as-is.
"""

from __future__ import annotations

from typing import Any


def _to_number(raw: str) -> int | float:
    try:
        return int(raw)
    except ValueError:
        return float(raw)


def decode_attribute(value: Any) -> Any:
    """Convert one tagged attribute value to a native Python value."""
    if not isinstance(value, dict):
        return value
    if "S" in value:
        return value["S"]
    if "N" in value:
        return _to_number(value["N"])
    if "BOOL" in value:
        return value["BOOL"]
    if "M" in value:
        return decode_item(value["M"])
    if "L" in value:
        return [decode_attribute(entry) for entry in value["L"]]
    # Unhandled tags (NULL, SS, B, ...) pass through untouched.
    return value


def decode_item(item: dict) -> dict:
    return {key: decode_attribute(value) for key, value in item.items()}


def convert_scan_response(items: Any) -> list[dict]:
    """
    Decode a list of raw scan items, preserving order.

    Anything that is not a list (including ``None`` when a scan returned no
    ``Items`` key) yields an empty list.
    """
    if not isinstance(items, list):
        return []
    return [decode_item(item) for item in items]
