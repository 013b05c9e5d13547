"""High-level async client wiring both telemetry channels together."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from datetime import datetime
from typing import Any

from pycardash._cache import LatestReadingCache
from pycardash._transport import GattAdapter, StreamPortFactory
from pycardash.adapters import BleakGattAdapter, PySerialPortFactory
from pycardash.config import CarDashConfig
from pycardash.models import DiagnosticReading, SensorSample, TripRecord, TripSample, TripState
from pycardash.polling import DiagnosticPoller
from pycardash.sessions import DiagnosticSession, SampleCallback, SerialSession
from pycardash.trip import TripAggregator

_logger = logging.getLogger(__name__)


class CarDashClient:
    """Async client for a car dashboard.

    Owns one serial sensor session, one OBD-II session with its poller,
    the latest-value cache and the trip aggregator.

    Usage::

        async with CarDashClient(CarDashConfig.from_env()) as client:
            if await client.connect_obd():
                client.start_trip()
                ...
                record = client.stop_trip()

    Transports default to the pyserial and bleak bindings; pass your own
    factory or adapter to use another platform.  A channel disabled in
    the config reports itself unsupported on connect.
    """

    def __init__(
        self,
        config: CarDashConfig | None = None,
        *,
        serial_factory: StreamPortFactory | None = None,
        gatt_adapter: GattAdapter | None = None,
        on_reading: Callable[[DiagnosticReading], None] | None = None,
        on_obd_disconnect: Callable[[], None] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config or CarDashConfig()

        if not self._config.serial_enabled:
            serial_factory = None
        elif serial_factory is None:
            serial_factory = PySerialPortFactory()
        if not self._config.obd_enabled:
            gatt_adapter = None
        elif gatt_adapter is None:
            gatt_adapter = BleakGattAdapter()

        self._cache = LatestReadingCache()
        trip_kwargs: dict[str, Any] = {
            "tick_seconds": self._config.poll_interval,
            "tank_capacity_l": self._config.fuel_tank_capacity_l,
            "sample_limit": self._config.trip_sample_limit,
            "history_limit": self._config.trip_history_limit,
        }
        if clock is not None:
            trip_kwargs["clock"] = clock
        self._trip = TripAggregator(**trip_kwargs)

        self._serial = SerialSession(
            serial_factory,
            self._config.serial,
            queue_size=self._config.sample_queue_size,
        )
        self._serial.register_sample_callback(self._cache.update_sample)

        self._obd = DiagnosticSession(
            gatt_adapter,
            self._config.gatt,
            full_tank_range_km=self._config.full_tank_range_km,
        )
        self._on_obd_disconnect_cb = on_obd_disconnect
        self._poller = DiagnosticPoller(
            self._obd,
            interval=self._config.poll_interval,
            cache=self._cache,
            trip=self._trip,
            on_reading=on_reading,
            on_disconnect=self._on_obd_lost,
        )

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> CarDashClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.disconnect_obd()
        await self.disconnect_serial()

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    @property
    def config(self) -> CarDashConfig:
        return self._config

    @property
    def serial(self) -> SerialSession:
        return self._serial

    @property
    def obd(self) -> DiagnosticSession:
        return self._obd

    @property
    def poller(self) -> DiagnosticPoller:
        return self._poller

    # ------------------------------------------------------------------
    # Serial channel
    # ------------------------------------------------------------------

    async def connect_serial(self) -> bool:
        return await self._serial.connect()

    async def disconnect_serial(self) -> None:
        await self._serial.disconnect()

    @property
    def is_serial_connected(self) -> bool:
        return self._serial.is_connected

    def register_sample_callback(self, callback: SampleCallback) -> Callable[[], None]:
        """Subscribe to parsed serial samples; returns an unsubscribe function."""
        return self._serial.register_sample_callback(callback)

    def samples(self) -> AsyncIterator[SensorSample]:
        """Iterate serial samples until the current serial connection ends."""
        return self._serial.samples()

    async def send_serial_command(self, command: str) -> None:
        await self._serial.send_command(command)

    # ------------------------------------------------------------------
    # Diagnostic channel
    # ------------------------------------------------------------------

    async def connect_obd(self) -> bool:
        """Connect to the OBD-II adapter and start polling on success."""
        connected = await self._obd.connect()
        if connected:
            self._poller.start()
        return connected

    async def disconnect_obd(self) -> None:
        await self._poller.stop()
        await self._obd.disconnect()

    @property
    def is_obd_connected(self) -> bool:
        return self._obd.is_connected

    async def poll_once(self) -> DiagnosticReading | None:
        """Run a single query round outside the polling loop."""
        return await self._poller.poll_once()

    def _on_obd_lost(self) -> None:
        _logger.info("OBD adapter disconnected: %s", self._obd.last_error or "link lost")
        if self._on_obd_disconnect_cb is not None:
            try:
                self._on_obd_disconnect_cb()
            except Exception:
                _logger.warning("on_obd_disconnect callback failed", exc_info=True)

    # ------------------------------------------------------------------
    # Trips
    # ------------------------------------------------------------------

    def start_trip(self) -> None:
        self._trip.start(self._cache.fuel_level_pct)

    def stop_trip(self) -> TripRecord | None:
        """Finish the running trip; ``None`` when no trip is recording."""
        return self._trip.stop(self._cache.fuel_level_pct)

    @property
    def trip_state(self) -> TripState:
        return self._trip.state

    @property
    def trip_samples(self) -> list[TripSample]:
        return self._trip.samples

    @property
    def trip_history(self) -> list[TripRecord]:
        return self._trip.history

    # ------------------------------------------------------------------
    # Cached values
    # ------------------------------------------------------------------

    @property
    def latest_reading(self) -> DiagnosticReading | None:
        return self._cache.reading

    @property
    def latest_sample(self) -> SensorSample | None:
        return self._cache.sample
