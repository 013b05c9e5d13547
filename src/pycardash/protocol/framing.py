"""Newline framing for the serial sensor stream."""

from __future__ import annotations


class LineFramer:
    """Accumulate raw chunks and split them into complete lines.

    Bytes are buffered undecoded, so a multi-byte UTF-8 character split
    across two chunks is decoded only once it is whole.  The trailing
    unterminated fragment stays buffered until its delimiter arrives; it
    is never returned as a line, and :meth:`reset` discards it.
    """

    def __init__(self, *, delimiter: bytes = b"\n", encoding: str = "utf-8") -> None:
        if not delimiter:
            raise ValueError("delimiter must not be empty")
        self._buffer = bytearray()
        self._delimiter = delimiter
        self._encoding = encoding

    @property
    def pending(self) -> bytes:
        """Bytes received after the last delimiter."""
        return bytes(self._buffer)

    def feed(self, chunk: bytes) -> list[str]:
        """Append *chunk* and return every line it completed, in order."""
        self._buffer.extend(chunk)

        last_idx = self._buffer.rfind(self._delimiter)
        if last_idx == -1:
            return []

        complete = bytes(self._buffer[:last_idx])
        del self._buffer[: last_idx + len(self._delimiter)]

        return [line.decode(self._encoding, errors="replace") for line in complete.split(self._delimiter)]

    def reset(self) -> None:
        self._buffer.clear()
