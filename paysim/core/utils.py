"""
Utility functions for the simulator.

- Random id generation for resource identifiers
- Metadata string coercion
- Decoding of bracket-notation form bodies (``items[0][price]=...``)
- Unix timestamps and calendar interval arithmetic
"""

from datetime import datetime, timezone
import re
import secrets
import string
import time
from typing import Any, Iterable

from dateutil.relativedelta import relativedelta

_ID_ALPHABET = string.ascii_letters + string.digits
_BRACKET_SEGMENT = re.compile(r"\[([^\[\]]*)\]")


def generate_id(length: int = 14) -> str:
    """
    Generate a random alphanumeric identifier suffix.

    Args:
        length: Number of characters. Defaults to 14, the length the real API
            uses for most object ids.

    Returns:
        str: A random string such as ``"aZ3kP0qLx81mNb"``.
    """
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def now_timestamp() -> int:
    """Current Unix time in whole seconds."""
    return int(time.time())


def add_interval(timestamp: int, interval: str, count: int = 1) -> int:
    """
    Add a recurring billing interval to a Unix timestamp.

    Args:
        timestamp: Start of the period, in seconds.
        interval: One of ``day``, ``week``, ``month``, ``year``.
        count: Number of intervals to add.

    Returns:
        int: End of the period, in seconds.
    """
    start = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    deltas = {
        "day": relativedelta(days=count),
        "week": relativedelta(weeks=count),
        "month": relativedelta(months=count),
        "year": relativedelta(years=count),
    }
    if interval not in deltas:
        raise ValueError(f"Unknown interval: {interval}")
    return int((start + deltas[interval]).timestamp())


def stringify_metadata(metadata: Any) -> dict[str, str]:
    """
    Coerce metadata values to strings, the way the real API stores them.

    Keys whose value is ``None`` or an empty string are dropped (that is how
    clients unset a metadata key).
    """
    if not metadata or not isinstance(metadata, dict):
        return {}
    result: dict[str, str] = {}
    for key, value in metadata.items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            result[str(key)] = "true" if value else "false"
        else:
            result[str(key)] = str(value)
    return result


def _split_key(key: str) -> list[str]:
    bracket = key.find("[")
    if bracket <= 0:
        return [key]
    return [key[:bracket], *_BRACKET_SEGMENT.findall(key[bracket:])]


def _listify(node: Any) -> Any:
    if isinstance(node, dict):
        converted = {key: _listify(value) for key, value in node.items()}
        if converted and all(key.isdigit() for key in converted):
            return [converted[key] for key in sorted(converted, key=int)]
        return converted
    return node


def unflatten_form(items: Iterable[tuple[str, Any]]) -> dict[str, Any]:
    """
    Decode a bracket-notation form body into nested params.

    This is the inverse of the flattening client libraries perform before sending
    form-encoded requests.

    Example:
        [("items[0][price]", "price_1"), ("items[0][quantity]", "2"),
         ("expand[]", "customer"), ("metadata[order]", "6735")]
        ->
        {"items": [{"price": "price_1", "quantity": "2"}],
         "expand": ["customer"],
         "metadata": {"order": "6735"}}

    Args:
        items: ``(key, value)`` pairs in body order; repeated keys are allowed.

    Returns:
        dict[str, Any]: Nested params. Objects whose keys are all integer indices
        become lists ordered by index; ``[]`` appends.
    """
    result: dict[str, Any] = {}
    for key, value in items:
        segments = _split_key(key)
        node = result
        for position, segment in enumerate(segments):
            if segment == "":
                segment = str(len(node))
            if position == len(segments) - 1:
                node[segment] = value
                break
            child = node.get(segment)
            if not isinstance(child, dict):
                child = {}
                node[segment] = child
            node = child
    return {key: _listify(value) for key, value in result.items()}


__all__ = [
    "generate_id",
    "now_timestamp",
    "add_interval",
    "stringify_metadata",
    "unflatten_form",
]
