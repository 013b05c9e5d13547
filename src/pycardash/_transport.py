"""Structural transport interfaces used by the sessions.

The physical serial port and BLE radio are supplied by the platform.
Sessions only depend on these protocols, which keeps the production
adapters (:mod:`pycardash.adapters`) swappable with test doubles.

Implementations report failures by raising
:class:`~pycardash.exceptions.CarDashTransportError` (or a subclass);
sessions also treat a bare :class:`OSError` as a transport failure.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from pycardash.config import SerialOptions


class StreamPort(Protocol):
    """An open byte stream, e.g. a serial port."""

    async def read(self) -> bytes:
        """Return the next available bytes, or ``b""`` at end of stream."""
        ...

    async def write(self, data: bytes) -> None:
        ...

    async def close(self) -> None:
        ...


class StreamPortFactory(Protocol):
    async def open(self, options: SerialOptions) -> StreamPort:
        ...


class GattCharacteristic(Protocol):
    """A resolved read/write characteristic."""

    async def write(self, data: bytes) -> None:
        ...

    async def read(self) -> bytes:
        ...


class GattDevice(Protocol):
    """A discovered BLE peripheral."""

    @property
    def name(self) -> str:
        ...

    @property
    def is_connected(self) -> bool:
        """Live link state, queried from the radio stack."""
        ...

    async def connect(self) -> None:
        ...

    async def resolve_characteristic(self, service_uuid: str, characteristic_uuid: str) -> GattCharacteristic:
        """Resolve a characteristic of a primary service.

        Raises :class:`~pycardash.exceptions.CarDashDeviceNotFoundError`
        when either identifier does not resolve.
        """
        ...

    async def disconnect(self) -> None:
        ...


class GattAdapter(Protocol):
    async def discover(self, name_prefixes: Sequence[str], timeout: float) -> GattDevice:
        """Find the first advertising device whose name starts with a prefix."""
        ...
