"""Normalization helpers.

Centralizes the zero-default numeric policy used by both channels: a
field that is missing or cannot be read as a finite number becomes a
defined default instead of an error.
"""

from __future__ import annotations

import math
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def float_or_default(value: Any, default: float = 0.0) -> float:
    """Return *value* as a float, or *default* when it is not numeric."""
    parsed = safe_float(value)
    if parsed is None:
        return default
    return parsed


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with ties going up (``2.5 -> 3``, ``-2.5 -> -2``).

    The builtin :func:`round` uses banker's rounding, which would move
    ``rpm`` and ``duration`` values off by one on exact ties.
    """
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    return int(round_half_up(value))
