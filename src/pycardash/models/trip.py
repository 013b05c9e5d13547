"""Trip sample and trip summary models."""

from __future__ import annotations

from datetime import datetime

from pycardash.models._base import CarDashBaseModel


class TripSample(CarDashBaseModel):
    """One chart point of the trip in progress."""

    time_label: str
    fuel_pct: int
    speed_kph: int
    temp_c: int


class TripRecord(CarDashBaseModel):
    """Summary of a finished trip.

    Parameters
    ----------
    timestamp : datetime
        When the trip was stopped.
    distance_km : float
        Integrated distance, rounded to one decimal.
    avg_speed_kph : int
        Mean speed over the retained sample ring.
    max_speed_kph : int
        Highest speed seen during the trip.
    fuel_used_l : float
        Litres consumed, from the fuel level drop and tank capacity.
        Negative when the tank was refilled during the trip.
    avg_consumption_l_per_100km : float
        ``fuel_used_l`` per 100 km, rounded to one decimal; ``0`` when no
        distance was covered.
    duration_min : int
        Trip duration in whole minutes.
    """

    timestamp: datetime
    distance_km: float
    avg_speed_kph: int
    max_speed_kph: int
    fuel_used_l: float
    avg_consumption_l_per_100km: float
    duration_min: int
