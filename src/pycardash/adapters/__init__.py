"""Default platform bindings for the transport interfaces."""

from pycardash.adapters.ble_gatt import BleakGattAdapter
from pycardash.adapters.serial_port import PySerialPortFactory

__all__ = ["BleakGattAdapter", "PySerialPortFactory"]
