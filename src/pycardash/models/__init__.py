"""Data models for pycardash telemetry."""

from pycardash.models._base import CarDashBaseModel, ConnectionState, PollerState, TripState
from pycardash.models.diagnostic import DiagnosticReading
from pycardash.models.sample import SensorSample
from pycardash.models.trip import TripRecord, TripSample

__all__ = [
    "CarDashBaseModel",
    "ConnectionState",
    "DiagnosticReading",
    "PollerState",
    "SensorSample",
    "TripRecord",
    "TripSample",
    "TripState",
]
