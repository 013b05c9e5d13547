"""Client configuration for pycardash."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pycardash._constants import (
    DEFAULT_BAUDRATE,
    DEFAULT_NAME_PREFIXES,
    DEFAULT_USB_VENDOR_IDS,
    FUEL_TANK_CAPACITY_L,
    FULL_TANK_RANGE_KM,
    OBD_CHARACTERISTIC_UUID,
    OBD_SERVICE_UUID,
    POLL_INTERVAL,
    SAMPLE_QUEUE_SIZE,
    SETTLE_DELAY,
    TRIP_HISTORY_LIMIT,
    TRIP_SAMPLE_LIMIT,
)
from pycardash.exceptions import CarDashConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, kind: type[int] | type[float]) -> int | float:
    try:
        return kind(value)
    except ValueError as exc:
        raise CarDashConfigError(f"{env_key} must be a number, got {value!r}") from exc


def _env_list(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclasses.dataclass(frozen=True)
class SerialOptions:
    """How to locate and open the serial sensor feed.

    Parameters
    ----------
    port : str or None
        Device path or pyserial URL. When ``None`` the first port whose
        USB vendor id is in *usb_vendor_ids* is used.
    baudrate : int
        Line speed of the sensor board.
    usb_vendor_ids : tuple of int
        Vendor ids accepted during automatic port discovery.
    read_timeout : float
        Seconds a single blocking read may wait before re-checking
        whether the port is still open.
    """

    port: str | None = None
    baudrate: int = DEFAULT_BAUDRATE
    usb_vendor_ids: tuple[int, ...] = DEFAULT_USB_VENDOR_IDS
    read_timeout: float = 0.1


@dataclasses.dataclass(frozen=True)
class GattOptions:
    """How to discover and talk to a BLE OBD-II adapter."""

    name_prefixes: tuple[str, ...] = DEFAULT_NAME_PREFIXES
    service_uuid: str = OBD_SERVICE_UUID
    characteristic_uuid: str = OBD_CHARACTERISTIC_UUID
    scan_timeout: float = 10.0
    settle_delay: float = SETTLE_DELAY


@dataclasses.dataclass(frozen=True)
class CarDashConfig:
    """Client configuration.

    Parameters
    ----------
    serial : SerialOptions
        Serial sensor feed options.
    gatt : GattOptions
        BLE diagnostic adapter options.
    poll_interval : float
        Seconds between the starts of two diagnostic polling ticks.
        Also the integration step used for trip distance.
    fuel_tank_capacity_l : float
        Tank volume used to turn a fuel percentage drop into litres.
    full_tank_range_km : float
        Estimated range on a full tank; drives ``range_km``.
    trip_sample_limit : int
        Size of the live trip sample ring.
    trip_history_limit : int
        Number of finished trips kept in memory.
    sample_queue_size : int
        Per-subscriber buffer for :meth:`SerialSession.samples`.
    serial_enabled : bool
        When ``False`` the serial channel reports itself unsupported.
    obd_enabled : bool
        When ``False`` the diagnostic channel reports itself unsupported.
    """

    serial: SerialOptions = dataclasses.field(default_factory=SerialOptions)
    gatt: GattOptions = dataclasses.field(default_factory=GattOptions)
    poll_interval: float = POLL_INTERVAL
    fuel_tank_capacity_l: float = FUEL_TANK_CAPACITY_L
    full_tank_range_km: float = FULL_TANK_RANGE_KM
    trip_sample_limit: int = TRIP_SAMPLE_LIMIT
    trip_history_limit: int = TRIP_HISTORY_LIMIT
    sample_queue_size: int = SAMPLE_QUEUE_SIZE
    serial_enabled: bool = True
    obd_enabled: bool = True

    def __post_init__(self) -> None:
        if self.poll_interval <= 0:
            raise CarDashConfigError("poll_interval must be positive")
        if self.fuel_tank_capacity_l <= 0:
            raise CarDashConfigError("fuel_tank_capacity_l must be positive")
        if self.trip_sample_limit < 1 or self.trip_history_limit < 1:
            raise CarDashConfigError("trip limits must be at least 1")

    @classmethod
    def from_env(cls, **overrides: Any) -> CarDashConfig:
        """Create configuration from environment variables.

        Reads optional ``CARDASH_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        CarDashConfig
            Populated configuration.

        Raises
        ------
        CarDashConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ

        serial_kwargs: dict[str, Any] = {}
        port = env.get("CARDASH_SERIAL_PORT")
        if port:
            serial_kwargs["port"] = port
        baudrate = env.get("CARDASH_SERIAL_BAUDRATE")
        if baudrate is not None:
            serial_kwargs["baudrate"] = _env_number("CARDASH_SERIAL_BAUDRATE", baudrate, int)

        gatt_kwargs: dict[str, Any] = {}
        prefixes = env.get("CARDASH_OBD_NAME_PREFIXES")
        if prefixes is not None:
            gatt_kwargs["name_prefixes"] = _env_list(prefixes)
        _ENV_GATT_FLOATS = {
            "CARDASH_OBD_SCAN_TIMEOUT": "scan_timeout",
            "CARDASH_OBD_SETTLE_DELAY": "settle_delay",
        }
        for env_key, field_name in _ENV_GATT_FLOATS.items():
            val = env.get(env_key)
            if val is not None:
                gatt_kwargs[field_name] = _env_number(env_key, val, float)

        # Allow overriding nested options via a dict or an instance
        serial_overrides = overrides.pop("serial", None)
        if isinstance(serial_overrides, dict):
            serial_kwargs.update(serial_overrides)
        elif isinstance(serial_overrides, SerialOptions):
            serial_kwargs = dataclasses.asdict(serial_overrides)

        gatt_overrides = overrides.pop("gatt", None)
        if isinstance(gatt_overrides, dict):
            gatt_kwargs.update(gatt_overrides)
        elif isinstance(gatt_overrides, GattOptions):
            gatt_kwargs = dataclasses.asdict(gatt_overrides)

        config_kwargs: dict[str, Any] = {
            "serial": SerialOptions(**serial_kwargs),
            "gatt": GattOptions(**gatt_kwargs),
        }

        _ENV_CONFIG_FLOATS = {
            "CARDASH_POLL_INTERVAL": "poll_interval",
            "CARDASH_FUEL_TANK_CAPACITY_L": "fuel_tank_capacity_l",
            "CARDASH_FULL_TANK_RANGE_KM": "full_tank_range_km",
        }
        for env_key, field_name in _ENV_CONFIG_FLOATS.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, float)

        if "serial_enabled" not in overrides:
            config_kwargs["serial_enabled"] = _env_bool(env.get("CARDASH_SERIAL_ENABLED"), True)
        if "obd_enabled" not in overrides:
            config_kwargs["obd_enabled"] = _env_bool(env.get("CARDASH_OBD_ENABLED"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
