"""Transport sessions: connection lifecycle for each telemetry channel."""

from pycardash.sessions.diagnostic import DiagnosticSession
from pycardash.sessions.serial import SampleCallback, SerialSession

__all__ = ["DiagnosticSession", "SampleCallback", "SerialSession"]
