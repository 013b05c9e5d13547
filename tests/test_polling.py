from __future__ import annotations

import asyncio

import pytest
import pytest_asyncio

from pycardash._cache import LatestReadingCache
from pycardash.models import DiagnosticReading, PollerState
from pycardash.polling import DiagnosticPoller
from pycardash.sessions import DiagnosticSession
from pycardash.trip import TripAggregator


async def _wait_for(predicate, timeout: float = 1.0) -> None:
    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.001)

    await asyncio.wait_for(_poll(), timeout)


@pytest_asyncio.fixture
async def session(gatt_adapter, record_sleep) -> DiagnosticSession:
    session = DiagnosticSession(gatt_adapter, sleep=record_sleep)
    assert await session.connect()
    return session


@pytest.mark.asyncio
async def test_ticks_feed_cache_trip_and_callback(session) -> None:
    cache = LatestReadingCache()
    trip = TripAggregator()
    trip.start(50)
    readings: list[DiagnosticReading] = []
    poller = DiagnosticPoller(session, interval=0.01, cache=cache, trip=trip, on_reading=readings.append)

    poller.start()
    assert poller.is_running
    await _wait_for(lambda: len(readings) >= 3)
    await poller.stop()

    assert poller.state == PollerState.STOPPED
    assert cache.reading == readings[-1]
    assert cache.fuel_level_pct == 50
    assert len(trip.samples) == len(readings)
    assert all(reading.speed_kph == 90 for reading in readings)


@pytest.mark.asyncio
async def test_first_tick_runs_immediately(session) -> None:
    readings: list[DiagnosticReading] = []
    poller = DiagnosticPoller(session, interval=60, on_reading=readings.append)

    poller.start()
    await _wait_for(lambda: len(readings) == 1)
    await poller.stop()


@pytest.mark.asyncio
async def test_lost_link_stops_polling_and_notifies(session, gatt_adapter) -> None:
    disconnects: list[None] = []
    readings: list[DiagnosticReading] = []
    poller = DiagnosticPoller(
        session,
        interval=0.01,
        on_reading=readings.append,
        on_disconnect=lambda: disconnects.append(None),
    )

    poller.start()
    await _wait_for(lambda: len(readings) >= 1)
    gatt_adapter.device.connected = False
    await _wait_for(lambda: not poller.is_running)

    assert disconnects == [None]
    count = len(readings)
    await asyncio.sleep(0.05)
    assert len(readings) == count
    await poller.stop()
    assert disconnects == [None]


@pytest.mark.asyncio
async def test_callback_failure_keeps_polling(session) -> None:
    calls: list[int] = []

    def _broken(_reading: DiagnosticReading) -> None:
        calls.append(1)
        raise RuntimeError("boom")

    poller = DiagnosticPoller(session, interval=0.01, on_reading=_broken)
    poller.start()
    await _wait_for(lambda: len(calls) >= 2)
    assert poller.is_running
    await poller.stop()


@pytest.mark.asyncio
async def test_poll_once_when_disconnected(session) -> None:
    cache = LatestReadingCache()
    poller = DiagnosticPoller(session, cache=cache)
    await session.disconnect()

    assert await poller.poll_once() is None
    assert cache.reading is None


@pytest.mark.asyncio
async def test_poll_once_publishes(session) -> None:
    cache = LatestReadingCache()
    poller = DiagnosticPoller(session, cache=cache)

    reading = await poller.poll_once()
    assert reading is not None
    assert reading.rpm == 750
    assert cache.reading is reading


@pytest.mark.asyncio
async def test_start_twice_and_stop_twice(session) -> None:
    poller = DiagnosticPoller(session, interval=0.01)

    poller.start()
    poller.start()
    await asyncio.sleep(0.02)
    await poller.stop()
    await poller.stop()
    assert not poller.is_running


@pytest.mark.asyncio
async def test_stop_before_start(session) -> None:
    poller = DiagnosticPoller(session)
    await poller.stop()
    assert poller.state == PollerState.STOPPED


@pytest.mark.asyncio
async def test_poll_once_during_loop_leaves_trip_alone(session) -> None:
    trip = TripAggregator()
    trip.start(50)
    readings: list[DiagnosticReading] = []
    poller = DiagnosticPoller(session, interval=3600, trip=trip, on_reading=readings.append)

    poller.start()
    await _wait_for(lambda: len(readings) == 1)
    reading = await poller.poll_once()

    assert reading is not None
    assert len(readings) == 2
    assert len(trip.samples) == 1
    assert trip.distance_km == pytest.approx(90 * 2 / 3600)
    await poller.stop()


@pytest.mark.asyncio
async def test_poll_once_without_loop_records_trip(session) -> None:
    trip = TripAggregator()
    trip.start(50)
    poller = DiagnosticPoller(session, trip=trip)

    await poller.poll_once()

    assert len(trip.samples) == 1
    assert trip.distance_km == pytest.approx(90 * 2 / 3600)


@pytest.mark.asyncio
async def test_failing_tick_stops_polling_and_notifies(session, monkeypatch: pytest.MonkeyPatch) -> None:
    async def _crash() -> DiagnosticReading:
        raise RuntimeError("adapter stack crashed")

    monkeypatch.setattr(session, "read_all", _crash)
    disconnects: list[None] = []
    poller = DiagnosticPoller(session, interval=0.01, on_disconnect=lambda: disconnects.append(None))

    poller.start()
    await _wait_for(lambda: not poller.is_running)

    assert poller.state == PollerState.STOPPED
    assert disconnects == [None]
    await poller.stop()
    assert disconnects == [None]
