"""Trip aggregation.

Reduces the stream of diagnostic readings received while a trip is
recording into a single :class:`~pycardash.models.TripRecord`.
Distance is integrated from speed, assuming one reading per polling
tick: ``distance += speed_kph * tick_seconds / 3600``.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from datetime import datetime

from pycardash._constants import FUEL_TANK_CAPACITY_L, POLL_INTERVAL, TRIP_HISTORY_LIMIT, TRIP_SAMPLE_LIMIT
from pycardash.models import DiagnosticReading, TripRecord, TripSample, TripState
from pycardash.normalize import round_half_up, round_int

_logger = logging.getLogger(__name__)

_SECONDS_PER_HOUR = 3600.0


def _localnow() -> datetime:
    return datetime.now().astimezone()


class TripAggregator:
    """Running statistics for the trip in progress plus finished-trip history.

    ``start``/``record``/``stop`` are plain synchronous calls; the
    aggregator never touches a transport.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = _localnow,
        tick_seconds: float = POLL_INTERVAL,
        tank_capacity_l: float = FUEL_TANK_CAPACITY_L,
        sample_limit: int = TRIP_SAMPLE_LIMIT,
        history_limit: int = TRIP_HISTORY_LIMIT,
    ) -> None:
        self._clock = clock
        self._tick_hours = tick_seconds / _SECONDS_PER_HOUR
        self._tank_capacity_l = tank_capacity_l
        self._samples: deque[TripSample] = deque(maxlen=sample_limit)
        self._history: deque[TripRecord] = deque(maxlen=history_limit)
        self._state = TripState.IDLE
        self._start_time: datetime | None = None
        self._start_fuel_pct = 0.0
        self._max_speed_kph = 0
        self._distance_km = 0.0

    @property
    def state(self) -> TripState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state == TripState.RECORDING

    @property
    def samples(self) -> list[TripSample]:
        """Live sample ring, oldest first."""
        return list(self._samples)

    @property
    def history(self) -> list[TripRecord]:
        """Finished trips, newest first."""
        return list(self._history)

    @property
    def distance_km(self) -> float:
        return self._distance_km

    @property
    def max_speed_kph(self) -> int:
        return self._max_speed_kph

    def start(self, current_fuel_pct: float) -> None:
        """Begin recording. Restarting while recording discards the running trip."""
        if self.is_recording:
            _logger.info("Trip restarted; discarding the running trip")
        self._samples.clear()
        self._start_time = self._clock()
        self._start_fuel_pct = current_fuel_pct
        self._max_speed_kph = 0
        self._distance_km = 0.0
        self._state = TripState.RECORDING
        _logger.info("Trip started fuel=%s%%", current_fuel_pct)

    def record(self, reading: DiagnosticReading) -> bool:
        """Fold one reading into the running trip; ignored while idle."""
        if not self.is_recording:
            return False
        self._samples.append(
            TripSample(
                time_label=self._clock().strftime("%H:%M:%S"),
                fuel_pct=reading.fuel_level_pct,
                speed_kph=reading.speed_kph,
                temp_c=reading.engine_temp_c,
            )
        )
        self._max_speed_kph = max(self._max_speed_kph, reading.speed_kph)
        self._distance_km += reading.speed_kph * self._tick_hours
        return True

    def stop(self, current_fuel_pct: float) -> TripRecord | None:
        """Finish the trip and prepend its record to the history.

        Returns ``None`` without touching the history when no trip is
        recording.
        """
        if not self.is_recording or self._start_time is None:
            return None

        now = self._clock()
        duration_min = round_int((now - self._start_time).total_seconds() / 60)
        fuel_used_l = (self._start_fuel_pct - current_fuel_pct) / 100 * self._tank_capacity_l
        speeds = [sample.speed_kph for sample in self._samples]
        avg_speed = round_int(sum(speeds) / len(speeds)) if speeds else 0
        distance = self._distance_km
        avg_consumption = fuel_used_l / distance * 100 if distance > 0 else 0.0

        record = TripRecord(
            timestamp=now,
            distance_km=round_half_up(distance, 1),
            avg_speed_kph=avg_speed,
            max_speed_kph=self._max_speed_kph,
            fuel_used_l=fuel_used_l,
            avg_consumption_l_per_100km=round_half_up(avg_consumption, 1),
            duration_min=duration_min,
        )
        self._history.appendleft(record)
        self._state = TripState.IDLE
        self._start_time = None
        _logger.info(
            "Trip stopped distance=%.1fkm duration=%smin fuel_used=%.2fL",
            record.distance_km,
            record.duration_min,
            record.fuel_used_l,
        )
        return record
