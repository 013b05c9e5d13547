"""Wire-level framing and decoding for both telemetry channels."""

from pycardash.protocol.framing import LineFramer
from pycardash.protocol.obd import POLL_SEQUENCE, Pid, decode_response, decode_value, encode_command
from pycardash.protocol.sample import parse_sample

__all__ = [
    "LineFramer",
    "POLL_SEQUENCE",
    "Pid",
    "decode_response",
    "decode_value",
    "encode_command",
    "parse_sample",
]
