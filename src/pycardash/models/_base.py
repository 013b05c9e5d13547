"""Base model and state enums shared by every pycardash model.

Telemetry models inherit from :class:`CarDashBaseModel` which provides:

* frozen instances, so a published reading can be shared between the
  cache, the trip aggregator and callbacks without copying;
* ``populate_by_name`` so models can be built either from wire keys
  (validation aliases) or from Python field names.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict


def utcnow() -> datetime:
    return datetime.now(UTC)


class CarDashBaseModel(BaseModel):
    """Base for telemetry models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )


class ConnectionState(StrEnum):
    """Lifecycle of one transport session."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class TripState(StrEnum):
    IDLE = "idle"
    RECORDING = "recording"


class PollerState(StrEnum):
    STOPPED = "stopped"
    RUNNING = "running"
