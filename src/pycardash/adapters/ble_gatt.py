"""bleak binding for BLE OBD-II adapters."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from bleak import BleakClient, BleakScanner
from bleak.backends.characteristic import BleakGATTCharacteristic
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData
from bleak.exc import BleakError

from pycardash.exceptions import CarDashConnectionLostError, CarDashDeviceNotFoundError, CarDashTransportError

_logger = logging.getLogger(__name__)


class BleakCharacteristic:
    """A resolved characteristic used for command writes and response reads."""

    def __init__(self, client: BleakClient, characteristic: BleakGATTCharacteristic) -> None:
        self._client = client
        self._characteristic = characteristic

    async def write(self, data: bytes) -> None:
        try:
            await self._client.write_gatt_char(self._characteristic, data, response=True)
        except BleakError as exc:
            raise CarDashConnectionLostError(f"GATT write failed: {exc}", transport="ble") from exc

    async def read(self) -> bytes:
        try:
            return bytes(await self._client.read_gatt_char(self._characteristic))
        except BleakError as exc:
            raise CarDashConnectionLostError(f"GATT read failed: {exc}", transport="ble") from exc


class BleakDevice:
    """A discovered peripheral wrapped in a :class:`bleak.BleakClient`."""

    def __init__(
        self,
        device: BLEDevice,
        *,
        client_factory: Callable[[BLEDevice], BleakClient] = BleakClient,
    ) -> None:
        self._device = device
        self._client = client_factory(device)

    @property
    def name(self) -> str:
        return str(self._device.name or self._device.address)

    @property
    def is_connected(self) -> bool:
        return bool(self._client.is_connected)

    async def connect(self) -> None:
        try:
            await self._client.connect()
        except (BleakError, TimeoutError) as exc:
            raise CarDashTransportError(f"Cannot connect to {self.name}: {exc}", transport="ble") from exc

    async def resolve_characteristic(self, service_uuid: str, characteristic_uuid: str) -> BleakCharacteristic:
        try:
            service = self._client.services.get_service(service_uuid)
            characteristic = service.get_characteristic(characteristic_uuid) if service is not None else None
        except BleakError as exc:
            # Raised before service discovery completed or for duplicate UUIDs.
            raise CarDashDeviceNotFoundError(
                f"Cannot resolve {characteristic_uuid} on {self.name}: {exc}",
                transport="ble",
            ) from exc
        if service is None:
            raise CarDashDeviceNotFoundError(f"{self.name} has no service {service_uuid}", transport="ble")
        if characteristic is None:
            raise CarDashDeviceNotFoundError(
                f"{self.name} has no characteristic {characteristic_uuid}",
                transport="ble",
            )
        return BleakCharacteristic(self._client, characteristic)

    async def disconnect(self) -> None:
        try:
            await self._client.disconnect()
        except BleakError as exc:
            raise CarDashTransportError(f"Disconnect from {self.name} failed: {exc}", transport="ble") from exc


class BleakGattAdapter:
    """Discover OBD-II adapters by advertised name prefix."""

    def __init__(self, *, client_factory: Callable[[BLEDevice], BleakClient] = BleakClient) -> None:
        self._client_factory = client_factory

    async def discover(self, name_prefixes: Sequence[str], timeout: float) -> BleakDevice:
        prefixes = tuple(name_prefixes)

        def _matches(device: BLEDevice, advertisement: AdvertisementData) -> bool:
            name = device.name or advertisement.local_name or ""
            return name.startswith(prefixes)

        try:
            device = await BleakScanner.find_device_by_filter(_matches, timeout=timeout)
        except BleakError as exc:
            raise CarDashTransportError(f"BLE scan failed: {exc}", transport="ble") from exc
        if device is None:
            raise CarDashDeviceNotFoundError(
                f"No BLE device named {', '.join(prefixes)}* found within {timeout}s",
                transport="ble",
            )
        _logger.debug("BLE device found name=%s address=%s", device.name, device.address)
        return BleakDevice(device, client_factory=self._client_factory)
