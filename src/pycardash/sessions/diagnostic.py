"""Request/response session for a BLE OBD-II adapter."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from pycardash._constants import FULL_TANK_RANGE_KM
from pycardash._logfmt import preview_for_log
from pycardash._transport import GattAdapter, GattCharacteristic, GattDevice
from pycardash.config import GattOptions
from pycardash.exceptions import (
    CarDashError,
    CarDashNotConnectedError,
    CarDashTransportError,
    CarDashUnsupportedTransportError,
)
from pycardash.models import ConnectionState, DiagnosticReading
from pycardash.protocol.obd import POLL_SEQUENCE, Pid, decode_value, encode_command

_logger = logging.getLogger(__name__)


class DiagnosticSession:
    """Owns the link to one OBD-II adapter and serializes its queries.

    The adapter handles one outstanding request at a time: every query
    writes a command, waits the settling delay, then reads the answer,
    and no other query may interleave.
    """

    def __init__(
        self,
        adapter: GattAdapter | None,
        options: GattOptions | None = None,
        *,
        full_tank_range_km: float = FULL_TANK_RANGE_KM,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._adapter = adapter
        self._options = options or GattOptions()
        self._full_tank_range_km = full_tank_range_km
        self._sleep = sleep
        self._device: GattDevice | None = None
        self._characteristic: GattCharacteristic | None = None
        self._state = ConnectionState.DISCONNECTED
        self._lock = asyncio.Lock()
        self.last_error: str | None = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def device_name(self) -> str | None:
        return self._device.name if self._device is not None else None

    @property
    def is_connected(self) -> bool:
        """Whether the adapter link is up right now.

        The radio link can drop at any time, so the live device state is
        consulted on every call instead of trusting the cached state.
        """
        device = self._device
        if device is None or self._characteristic is None:
            return False
        if not device.is_connected:
            if self._state == ConnectionState.CONNECTED:
                _logger.info("OBD adapter link dropped device=%s", device.name)
                self._state = ConnectionState.DISCONNECTED
            return False
        return self._state == ConnectionState.CONNECTED

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> bool:
        """Discover the adapter, open the link and resolve the characteristic.

        Returns ``False`` instead of raising on any failure; the reason is
        kept in :attr:`last_error`.
        """
        if self.is_connected:
            return True
        await self.disconnect()

        self._state = ConnectionState.CONNECTING
        device: GattDevice | None = None
        try:
            if self._adapter is None:
                raise CarDashUnsupportedTransportError("Bluetooth LE transport is not available", transport="ble")
            device = await self._adapter.discover(self._options.name_prefixes, self._options.scan_timeout)
            _logger.debug("OBD adapter found device=%s", device.name)
            await device.connect()
            characteristic = await device.resolve_characteristic(
                self._options.service_uuid,
                self._options.characteristic_uuid,
            )
        except (CarDashTransportError, OSError) as exc:
            self._state = ConnectionState.DISCONNECTED
            self.last_error = str(exc)
            _logger.warning("OBD connect failed: %s", exc)
            if device is not None:
                await self._close_device(device)
            return False

        self._device = device
        self._characteristic = characteristic
        self.last_error = None
        self._state = ConnectionState.CONNECTED
        _logger.info("OBD session connected device=%s", device.name)
        return True

    async def disconnect(self) -> None:
        """Close the link and drop cached handles. Safe to call repeatedly."""
        device = self._device
        self._device = None
        self._characteristic = None
        self._state = ConnectionState.DISCONNECTED
        if device is not None:
            await self._close_device(device)
            _logger.info("OBD session disconnected device=%s", device.name)

    @staticmethod
    async def _close_device(device: GattDevice) -> None:
        if not device.is_connected:
            return
        try:
            await device.disconnect()
        except (CarDashTransportError, OSError):
            _logger.debug("OBD adapter disconnect failed", exc_info=True)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def query(self, command: Pid | str) -> str:
        """Send one command and return the adapter's raw text answer.

        Raises
        ------
        CarDashNotConnectedError
            If no characteristic is resolved.
        CarDashTransportError
            If the write or read fails.
        """
        async with self._lock:
            characteristic = self._characteristic
            if characteristic is None:
                raise CarDashNotConnectedError("OBD session is not connected", transport="ble")
            await characteristic.write(encode_command(command))
            await self._sleep(self._options.settle_delay)
            raw = await characteristic.read()
        _logger.debug("OBD %s -> %s", command, preview_for_log(raw))
        return raw.decode("ascii", errors="replace")

    async def read_pid(self, pid: Pid) -> int:
        """Query *pid* and return its value in physical units, or ``0`` on failure."""
        try:
            response = await self.query(pid)
        except (CarDashError, OSError) as exc:
            _logger.warning("OBD query %s (%s) failed: %s", pid.name, pid.value, exc)
            return 0
        return decode_value(response, pid)

    async def get_fuel_level(self) -> int:
        return await self.read_pid(Pid.FUEL_LEVEL)

    async def get_engine_temp(self) -> int:
        return await self.read_pid(Pid.ENGINE_TEMP)

    async def get_speed(self) -> int:
        return await self.read_pid(Pid.SPEED)

    async def get_rpm(self) -> int:
        return await self.read_pid(Pid.RPM)

    async def read_all(self) -> DiagnosticReading:
        """Run one full query round and assemble a composite reading.

        The queries run strictly one after another in
        :data:`~pycardash.protocol.obd.POLL_SEQUENCE` order.
        """
        values: dict[Pid, int] = {}
        for pid in POLL_SEQUENCE:
            values[pid] = await self.read_pid(pid)
        return DiagnosticReading.from_values(
            fuel_level_pct=values[Pid.FUEL_LEVEL],
            engine_temp_c=values[Pid.ENGINE_TEMP],
            speed_kph=values[Pid.SPEED],
            rpm=values[Pid.RPM],
            full_tank_range_km=self._full_tank_range_km,
        )
