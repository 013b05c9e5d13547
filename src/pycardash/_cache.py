"""Latest-value cache consumed by the dashboard."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pycardash.models import DiagnosticReading, SensorSample


@dataclass
class LatestReadingCache:
    """Most recent reading of each channel.

    Readings and samples are frozen models, so the cache hands out the
    stored instances directly.
    """

    reading: DiagnosticReading | None = None
    sample: SensorSample | None = None

    def update_reading(self, reading: DiagnosticReading) -> None:
        self.reading = reading

    def update_sample(self, sample: SensorSample) -> None:
        self.sample = sample

    @property
    def fuel_level_pct(self) -> int:
        """Fuel level of the latest reading, ``0`` before the first one."""
        return self.reading.fuel_level_pct if self.reading is not None else 0

    def reading_age_seconds(self, now: datetime) -> float | None:
        if self.reading is None:
            return None
        return (now - self.reading.observed_at).total_seconds()

    def clear(self) -> None:
        self.reading = None
        self.sample = None
