from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from pycardash.models import DiagnosticReading, TripState
from pycardash.trip import TripAggregator


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def _reading(speed: int, fuel: int = 50, temp: int = 90) -> DiagnosticReading:
    return DiagnosticReading.from_values(fuel_level_pct=fuel, engine_temp_c=temp, speed_kph=speed, rpm=2000)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 5, 1, 10, 0, 0))


@pytest.fixture
def trip(clock: FakeClock) -> TripAggregator:
    return TripAggregator(clock=clock, tick_seconds=2.0, tank_capacity_l=60.0)


def test_constant_speed_trip(trip: TripAggregator, clock: FakeClock) -> None:
    trip.start(50)
    for _ in range(10):
        clock.advance(2)
        assert trip.record(_reading(90)) is True

    assert trip.distance_km == pytest.approx(0.5)
    assert trip.max_speed_kph == 90

    record = trip.stop(50)
    assert record is not None
    assert record.distance_km == 0.5
    assert record.avg_speed_kph == 90
    assert record.max_speed_kph == 90
    assert record.fuel_used_l == 0
    assert record.avg_consumption_l_per_100km == 0
    assert record.timestamp == clock.now
    assert trip.state == TripState.IDLE


def test_fuel_consumption_and_duration(trip: TripAggregator, clock: FakeClock) -> None:
    trip.start(50)
    for _ in range(10):
        clock.advance(2)
        trip.record(_reading(90, fuel=48))
    clock.now = datetime(2024, 5, 1, 10, 12, 30)

    record = trip.stop(45)

    assert record is not None
    assert record.duration_min == 13
    assert record.fuel_used_l == pytest.approx(3.0)
    assert record.avg_consumption_l_per_100km == 600.0


def test_refuel_during_trip_gives_negative_usage(trip: TripAggregator, clock: FakeClock) -> None:
    trip.start(20)
    clock.advance(2)
    trip.record(_reading(36))

    record = trip.stop(80)
    assert record is not None
    assert record.fuel_used_l == pytest.approx(-36.0)
    assert record.distance_km == 0.0


def test_average_and_max_speed(trip: TripAggregator) -> None:
    trip.start(50)
    for speed in (10, 20, 35):
        trip.record(_reading(speed))

    record = trip.stop(50)
    assert record is not None
    assert record.avg_speed_kph == 22  # 21.67 rounds up
    assert record.max_speed_kph == 35


def test_trip_without_readings(trip: TripAggregator) -> None:
    trip.start(50)
    record = trip.stop(50)

    assert record is not None
    assert record.distance_km == 0.0
    assert record.avg_speed_kph == 0
    assert record.max_speed_kph == 0
    assert record.avg_consumption_l_per_100km == 0.0


def test_stop_without_start_is_a_noop(trip: TripAggregator) -> None:
    assert trip.stop(40) is None
    assert trip.history == []
    assert trip.state == TripState.IDLE


def test_readings_ignored_while_idle(trip: TripAggregator) -> None:
    assert trip.record(_reading(100)) is False
    assert trip.samples == []
    assert trip.distance_km == 0.0


def test_sample_ring_keeps_newest_in_order(trip: TripAggregator, clock: FakeClock) -> None:
    trip.start(50)
    for speed in range(40):
        clock.advance(1)
        trip.record(_reading(speed))

    samples = trip.samples
    assert len(samples) == 30
    assert [sample.speed_kph for sample in samples] == list(range(10, 40))
    assert samples[-1].time_label == "10:00:40"


def test_sample_fields(trip: TripAggregator, clock: FakeClock) -> None:
    trip.start(50)
    clock.advance(5)
    trip.record(_reading(42, fuel=49, temp=88))

    (sample,) = trip.samples
    assert sample.time_label == "10:00:05"
    assert sample.fuel_pct == 49
    assert sample.speed_kph == 42
    assert sample.temp_c == 88


def test_history_is_newest_first_and_bounded(trip: TripAggregator, clock: FakeClock) -> None:
    for index in range(11):
        trip.start(50)
        clock.advance(60)
        trip.record(_reading(index))
        trip.stop(50)

    history = trip.history
    assert len(history) == 10
    assert history[0].max_speed_kph == 10
    assert history[-1].max_speed_kph == 1


def test_restart_discards_running_trip(trip: TripAggregator) -> None:
    trip.start(50)
    trip.record(_reading(120))
    trip.start(40)

    assert trip.samples == []
    assert trip.max_speed_kph == 0
    assert trip.distance_km == 0.0
    record = trip.stop(40)
    assert record is not None
    assert record.fuel_used_l == 0
    assert trip.history == [record]


def test_start_clears_previous_samples(trip: TripAggregator) -> None:
    trip.start(50)
    trip.record(_reading(50))
    trip.stop(50)

    trip.start(50)
    assert trip.samples == []
    assert trip.is_recording
