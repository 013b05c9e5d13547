"""OBD-II mode 01 command encoding and response decoding.

An ELM327-style adapter answers a query such as ``010D`` with text like
``"41 0D 32\\r\\n>"``: the mode-01 response marker ``41``, the echoed PID
byte, then the payload in hex.  Decoding never raises; an answer without
the marker decodes to ``0``.
"""

from __future__ import annotations

import re
from enum import StrEnum

from pycardash.normalize import round_int

COMMAND_TERMINATOR = "\r"
RESPONSE_MARKER = "41"

# CR, LF, any whitespace, and the ">" ready prompt
_NOISE_RE = re.compile(r"[\r\n\s>]")
_ANY_RESPONSE_RE = re.compile(r"41[0-9A-F]{2}([0-9A-F]+)")


class Pid(StrEnum):
    """Mode 01 parameter identifiers polled by the dashboard."""

    FUEL_LEVEL = "012F"
    ENGINE_TEMP = "0105"
    SPEED = "010D"
    RPM = "010C"

    @property
    def echo(self) -> str:
        """The PID byte the adapter echoes after the ``41`` marker."""
        return self.value[2:]

    def convert(self, value: int) -> int:
        """Convert a decoded raw value to this PID's physical unit."""
        return _CONVERSIONS[self](value)


def fuel_level_pct(value: int) -> int:
    return round_int(value / 255 * 100)


def engine_temp_c(value: int) -> int:
    return value - 40


def speed_kph(value: int) -> int:
    return value


def rpm(value: int) -> int:
    return round_int(value / 4)


_CONVERSIONS = {
    Pid.FUEL_LEVEL: fuel_level_pct,
    Pid.ENGINE_TEMP: engine_temp_c,
    Pid.SPEED: speed_kph,
    Pid.RPM: rpm,
}

#: Order in which one polling round queries the adapter.
POLL_SEQUENCE: tuple[Pid, ...] = (Pid.FUEL_LEVEL, Pid.ENGINE_TEMP, Pid.SPEED, Pid.RPM)


def encode_command(pid: Pid | str) -> bytes:
    """Encode a query command with its carriage-return terminator."""
    return f"{pid}{COMMAND_TERMINATOR}".encode("ascii")


def _echo_for(pid: Pid | str) -> str:
    text = str(pid).strip().upper()
    if len(text) < 2:
        raise ValueError(f"PID must have at least two hex digits, got {pid!r}")
    return text[-2:]


def decode_response(raw: bytes | str, pid: Pid | str | None = None) -> int:
    """Extract the unsigned hex payload from an adapter response.

    Parameters
    ----------
    raw
        Response as read from the adapter.
    pid
        Full command (``"012F"``) or bare echo (``"2F"``) that the
        response must answer.  ``None`` accepts any echoed PID.

    Returns
    -------
    int
        The payload value, or ``0`` when no ``41<PID>`` marker is found.
    """
    text = raw.decode("ascii", errors="replace") if isinstance(raw, (bytes, bytearray)) else raw
    cleaned = _NOISE_RE.sub("", text).upper()

    if pid is None:
        pattern = _ANY_RESPONSE_RE
    else:
        pattern = re.compile(RESPONSE_MARKER + re.escape(_echo_for(pid)) + r"([0-9A-F]+)")

    match = pattern.search(cleaned)
    if match is None:
        return 0
    return int(match.group(1), 16)


def decode_value(raw: bytes | str, pid: Pid) -> int:
    """Decode a response to *pid* and convert it to physical units."""
    return pid.convert(decode_response(raw, pid))
