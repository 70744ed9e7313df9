"""Normalization helpers.

Centralizes sanity checks on already-decoded sample values so the track
operations can drop malformed samples without raising.
"""

from __future__ import annotations

import math
from enum import IntEnum
from typing import Any, TypeVar

TEnum = TypeVar("TEnum", bound=IntEnum)


def safe_float(value: Any) -> float | None:
    """Return *value* as a finite float, or ``None`` when it is not one."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.split(b"\x00", 1)[0].decode("utf-8", errors="replace")
    text = str(value)
    return text if text else None


def in_range(value: float | None, low: float, high: float) -> float | None:
    """Return *value* if it lies within ``[low, high]``, else ``None``."""
    if value is None:
        return None
    return value if low <= value <= high else None


def to_enum(enum_cls: type[TEnum], value: Any, default: TEnum | None = None) -> TEnum | None:
    """Decode *value* into *enum_cls*; *default* when it is not a number."""
    parsed = safe_int(value)
    if parsed is None:
        return default
    return enum_cls(parsed)


def angle360(value: float) -> float:
    """Wrap an angle in degrees into ``[0, 360)``. NaN and inf pass through."""
    if math.isnan(value) or math.isinf(value):
        return value
    wrapped = math.fmod(value, 360.0)
    if wrapped < 0.0:
        wrapped += 360.0
    # fmod of a tiny negative number can round up to exactly 360.
    if wrapped >= 360.0:
        wrapped -= 360.0
    return wrapped
