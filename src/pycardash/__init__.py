"""pycardash - Async acquisition of live vehicle telemetry for car dashboards."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pycardash")
except PackageNotFoundError:
    __version__ = "0+local"

from pycardash.client import CarDashClient
from pycardash.config import CarDashConfig, GattOptions, SerialOptions
from pycardash.exceptions import (
    CarDashConfigError,
    CarDashConnectionLostError,
    CarDashDeviceNotFoundError,
    CarDashError,
    CarDashNotConnectedError,
    CarDashTransportError,
    CarDashUnsupportedTransportError,
)
from pycardash.models import (
    ConnectionState,
    DiagnosticReading,
    PollerState,
    SensorSample,
    TripRecord,
    TripSample,
    TripState,
)
from pycardash.polling import DiagnosticPoller
from pycardash.protocol import LineFramer, Pid, decode_response, encode_command, parse_sample
from pycardash.sessions import DiagnosticSession, SerialSession
from pycardash.trip import TripAggregator

__all__ = [
    "__version__",
    "CarDashClient",
    "CarDashConfig",
    "CarDashConfigError",
    "CarDashConnectionLostError",
    "CarDashDeviceNotFoundError",
    "CarDashError",
    "CarDashNotConnectedError",
    "CarDashTransportError",
    "CarDashUnsupportedTransportError",
    "ConnectionState",
    "DiagnosticPoller",
    "DiagnosticReading",
    "DiagnosticSession",
    "GattOptions",
    "LineFramer",
    "Pid",
    "PollerState",
    "SensorSample",
    "SerialOptions",
    "SerialSession",
    "TripAggregator",
    "TripRecord",
    "TripSample",
    "TripState",
    "decode_response",
    "encode_command",
    "parse_sample",
]
