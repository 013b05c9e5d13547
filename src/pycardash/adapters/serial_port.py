"""pyserial binding for the serial sensor feed.

pyserial is blocking; every call runs in a worker thread through
:func:`asyncio.to_thread` so the event loop is never held up.  Any
pyserial URL works as a port, including ``loop://`` for local testing.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

import serial
from serial.tools import list_ports

from pycardash.config import SerialOptions
from pycardash.exceptions import CarDashConnectionLostError, CarDashDeviceNotFoundError, CarDashTransportError

_logger = logging.getLogger(__name__)


class PySerialPort:
    """An open pyserial port exposed as a :class:`~pycardash._transport.StreamPort`."""

    def __init__(self, port: serial.SerialBase) -> None:
        self._serial = port

    @property
    def name(self) -> str:
        return str(self._serial.name or self._serial.port)

    def _read_available(self) -> bytes:
        # Block for the first byte (up to the port timeout), then take
        # whatever else has already arrived.
        first = self._serial.read(1)
        if not first:
            return b""
        waiting = self._serial.in_waiting
        if waiting:
            return first + self._serial.read(waiting)
        return first

    async def read(self) -> bytes:
        while self._serial.is_open:
            try:
                data = await asyncio.to_thread(self._read_available)
            except serial.SerialException as exc:
                raise CarDashConnectionLostError(f"Read from {self.name} failed: {exc}", transport="serial") from exc
            if data:
                return data
        return b""

    async def write(self, data: bytes) -> None:
        try:
            await asyncio.to_thread(self._serial.write, data)
        except serial.SerialException as exc:
            raise CarDashConnectionLostError(f"Write to {self.name} failed: {exc}", transport="serial") from exc

    async def close(self) -> None:
        await asyncio.to_thread(self._serial.close)


class PySerialPortFactory:
    """Open serial ports by explicit path/URL or by USB vendor id."""

    @staticmethod
    def find_port(usb_vendor_ids: Iterable[int]) -> str:
        """Return the device path of the first port with an accepted vendor id."""
        accepted = set(usb_vendor_ids)
        for info in list_ports.comports():
            if info.vid is not None and info.vid in accepted:
                _logger.debug("Serial port match device=%s vid=0x%04X", info.device, info.vid)
                return str(info.device)
        raise CarDashDeviceNotFoundError(
            "No serial port with a supported USB vendor id "
            + ", ".join(f"0x{vid:04X}" for vid in sorted(accepted)),
            transport="serial",
        )

    async def open(self, options: SerialOptions) -> PySerialPort:
        port_url = options.port or self.find_port(options.usb_vendor_ids)
        try:
            port = await asyncio.to_thread(
                serial.serial_for_url,
                port_url,
                baudrate=options.baudrate,
                timeout=options.read_timeout,
            )
        except (serial.SerialException, ValueError) as exc:
            raise CarDashTransportError(f"Cannot open serial port {port_url}: {exc}", transport="serial") from exc
        _logger.debug("Serial port opened %s baudrate=%s", port_url, options.baudrate)
        return PySerialPort(port)
