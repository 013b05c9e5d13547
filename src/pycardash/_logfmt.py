"""Helpers for compact debug logging of raw frames.

Serial chunks and adapter responses are arbitrary bytes that may carry
control characters and run to any length.  This module renders them as
bounded, printable strings before they reach DEBUG logs.
"""

from __future__ import annotations

from typing import Any


def preview_for_log(value: Any, *, max_length: int = 80) -> str:
    """Return a printable, truncated representation of *value*."""
    if value is None:
        return "<none>"

    if isinstance(value, (bytes, bytearray)):
        text = bytes(value).decode("utf-8", errors="replace")
        size = f"<{len(value)}b> "
    else:
        text = str(value)
        size = ""

    escaped = text.encode("unicode_escape").decode("ascii")
    if len(escaped) > max_length:
        return f"{size}{escaped[:max_length]}…<truncated>"
    return f"{size}{escaped}"
