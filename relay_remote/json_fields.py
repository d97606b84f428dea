"""
Typed accessors for fields of decoded JSON objects.

Every getter defaults instead of failing: a missing key, a non-object
container or a value of the wrong JSON type all yield the default. This
keeps the engine tolerant of payloads from newer remotes.
"""

from __future__ import annotations

import math
from typing import Any


def get_int(obj: Any, key: str, default: int = -1) -> int:
    """Return ``obj[key]`` as an int if it is a JSON number.

    Floats are truncated toward zero. Booleans are not numbers here,
    and neither are non-finite floats (``NaN``/``Infinity``).
    """
    if not isinstance(obj, dict):
        return default
    value = obj.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if isinstance(value, float):
        if not math.isfinite(value):
            return default
        return int(value)
    return value


def get_str(obj: Any, key: str, default: str | None = None) -> str | None:
    """Return ``obj[key]`` if it is a JSON string."""
    if not isinstance(obj, dict):
        return default
    value = obj.get(key)
    return value if isinstance(value, str) else default


def get_bool(obj: Any, key: str) -> bool:
    """Return True only if ``obj[key]`` is the JSON literal ``true``."""
    if not isinstance(obj, dict):
        return False
    return obj.get(key) is True


def get_list(obj: Any, key: str) -> list[Any]:
    """Return ``obj[key]`` if it is a JSON array, else an empty list."""
    if not isinstance(obj, dict):
        return []
    value = obj.get(key)
    return value if isinstance(value, list) else []


def get_object(obj: Any, key: str) -> dict[str, Any] | None:
    """Return ``obj[key]`` if it is a JSON object."""
    if not isinstance(obj, dict):
        return None
    value = obj.get(key)
    return value if isinstance(value, dict) else None
