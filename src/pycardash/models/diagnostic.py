"""Composite OBD-II reading model."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from pycardash._constants import FULL_TANK_RANGE_KM
from pycardash.models._base import CarDashBaseModel, utcnow
from pycardash.normalize import round_int


class DiagnosticReading(CarDashBaseModel):
    """Result of one full round of diagnostic queries.

    Parameters
    ----------
    fuel_level_pct : int
        Fuel level in percent of the tank.
    engine_temp_c : int
        Coolant temperature in °C.
    speed_kph : int
        Vehicle speed in km/h.
    rpm : int
        Engine speed in revolutions per minute.
    range_km : int
        Estimated remaining range, derived from the fuel level.
    observed_at : datetime
        When the round completed (UTC).
    """

    fuel_level_pct: int = 0
    engine_temp_c: int = 0
    speed_kph: int = 0
    rpm: int = 0
    range_km: int = 0
    observed_at: datetime = Field(default_factory=utcnow)

    @classmethod
    def from_values(
        cls,
        *,
        fuel_level_pct: int,
        engine_temp_c: int,
        speed_kph: int,
        rpm: int,
        full_tank_range_km: float = FULL_TANK_RANGE_KM,
        observed_at: datetime | None = None,
    ) -> DiagnosticReading:
        """Build a reading and derive ``range_km`` from the fuel level."""
        range_km = round_int(fuel_level_pct / 100 * full_tank_range_km) if fuel_level_pct > 0 else 0
        values: dict[str, object] = {
            "fuel_level_pct": fuel_level_pct,
            "engine_temp_c": engine_temp_c,
            "speed_kph": speed_kph,
            "rpm": rpm,
            "range_km": range_km,
        }
        if observed_at is not None:
            values["observed_at"] = observed_at
        return cls.model_validate(values)
