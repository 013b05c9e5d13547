from __future__ import annotations

import asyncio
from collections.abc import Sequence

import pytest

from pycardash.config import SerialOptions
from pycardash.exceptions import (
    CarDashConnectionLostError,
    CarDashDeviceNotFoundError,
    CarDashTransportError,
)

OBD_RESPONSES: dict[str, bytes] = {
    "012F": b"41 2F 80\r\n>",  # 128 -> 50 %
    "0105": b"41 05 6E\r\n>",  # 110 -> 70 °C
    "010D": b"41 0D 5A\r\n>",  # 90 km/h
    "010C": b"41 0C 0B B8\r\n>",  # 3000 -> 750 rpm
}


class FakeStreamPort:
    def __init__(self) -> None:
        self._incoming: asyncio.Queue[bytes | Exception] = asyncio.Queue()
        self.written: list[bytes] = []
        self.close_calls = 0
        self.closed = False
        self.close_gate: asyncio.Event | None = None

    def feed(self, data: bytes) -> None:
        self._incoming.put_nowait(data)

    def fail(self, exc: Exception | None = None) -> None:
        self._incoming.put_nowait(exc or CarDashConnectionLostError("device unplugged", transport="serial"))

    def end(self) -> None:
        self._incoming.put_nowait(b"")

    async def read(self) -> bytes:
        item = await self._incoming.get()
        if isinstance(item, Exception):
            raise item
        return item

    async def write(self, data: bytes) -> None:
        self.written.append(data)

    async def close(self) -> None:
        self.close_calls += 1
        if self.close_gate is not None:
            await self.close_gate.wait()
        self.closed = True


class FakeStreamFactory:
    def __init__(self) -> None:
        self.ports: list[FakeStreamPort] = []
        self.options: list[SerialOptions] = []
        self.error: Exception | None = None

    @property
    def port(self) -> FakeStreamPort:
        return self.ports[-1]

    async def open(self, options: SerialOptions) -> FakeStreamPort:
        self.options.append(options)
        if self.error is not None:
            raise self.error
        port = FakeStreamPort()
        self.ports.append(port)
        return port


class FakeCharacteristic:
    def __init__(self, device: FakeGattDevice) -> None:
        self._device = device
        self.responses: dict[str, bytes] = dict(OBD_RESPONSES)
        self.failing: set[str] = set()
        self.events: list[str] = []
        self._last_command = ""

    async def write(self, data: bytes) -> None:
        command = data.decode("ascii").rstrip("\r")
        self.events.append(f"write:{command}")
        if command in self.failing:
            raise CarDashConnectionLostError(f"write {command} failed", transport="ble")
        self._last_command = command

    async def read(self) -> bytes:
        self.events.append(f"read:{self._last_command}")
        return self.responses.get(self._last_command, b"NO DATA\r\n>")


class FakeGattDevice:
    def __init__(self, name: str = "OBDII-TEST") -> None:
        self._name = name
        self.connected = False
        self.characteristic = FakeCharacteristic(self)
        self.missing_characteristic = False
        self.connect_error: Exception | None = None
        self.disconnect_calls = 0
        self.resolved: list[tuple[str, str]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_connected(self) -> bool:
        return self.connected

    async def connect(self) -> None:
        if self.connect_error is not None:
            raise self.connect_error
        self.connected = True

    async def resolve_characteristic(self, service_uuid: str, characteristic_uuid: str) -> FakeCharacteristic:
        self.resolved.append((service_uuid, characteristic_uuid))
        if self.missing_characteristic:
            raise CarDashDeviceNotFoundError(f"no characteristic {characteristic_uuid}", transport="ble")
        return self.characteristic

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.connected = False


class FakeGattAdapter:
    def __init__(self) -> None:
        self.device = FakeGattDevice()
        self.error: CarDashTransportError | None = None
        self.discover_calls: list[tuple[tuple[str, ...], float]] = []

    async def discover(self, name_prefixes: Sequence[str], timeout: float) -> FakeGattDevice:
        self.discover_calls.append((tuple(name_prefixes), timeout))
        if self.error is not None:
            raise self.error
        return self.device


@pytest.fixture
def stream_factory() -> FakeStreamFactory:
    return FakeStreamFactory()


@pytest.fixture
def gatt_adapter() -> FakeGattAdapter:
    return FakeGattAdapter()


@pytest.fixture
def settle_delays() -> list[float]:
    return []


@pytest.fixture
def record_sleep(settle_delays: list[float]):
    """Stand-in for asyncio.sleep that records the requested delay."""

    async def _sleep(delay: float) -> None:
        settle_delays.append(delay)
        await asyncio.sleep(0)

    return _sleep
