"""Custom exception hierarchy for pycardash."""

from __future__ import annotations


class CarDashError(Exception):
    """Base exception for all pycardash errors."""


class CarDashConfigError(CarDashError):
    """Invalid or missing configuration."""


class CarDashTransportError(CarDashError):
    """Failure of the underlying serial port or BLE link."""

    def __init__(self, message: str, *, transport: str = "") -> None:
        self.transport = transport
        super().__init__(message)


class CarDashUnsupportedTransportError(CarDashTransportError):
    """The platform offers no implementation for the requested channel."""


class CarDashDeviceNotFoundError(CarDashTransportError):
    """No serial port or BLE adapter matched the configured filters.

    For the diagnostic channel this also covers a device that was found
    but does not expose the expected GATT service or characteristic.
    """


class CarDashConnectionLostError(CarDashTransportError):
    """The link dropped while it was in use."""


class CarDashNotConnectedError(CarDashTransportError):
    """An operation required an open session but none was available."""
