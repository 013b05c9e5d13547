"""Internal constants shared across the library."""

# ------------------------------------------------------------------
# Serial sensor feed
# ------------------------------------------------------------------

DEFAULT_BAUDRATE = 9600
ARDUINO_USB_VENDOR_ID = 0x2341
CH340_USB_VENDOR_ID = 0x1A86
DEFAULT_USB_VENDOR_IDS: tuple[int, ...] = (ARDUINO_USB_VENDOR_ID, CH340_USB_VENDOR_ID)

# ------------------------------------------------------------------
# BLE OBD-II adapters
# ------------------------------------------------------------------

DEFAULT_NAME_PREFIXES: tuple[str, ...] = ("OBD", "OBDII", "ELM327", "V-LINK", "Vgate")
OBD_SERVICE_UUID = "0000fff0-0000-1000-8000-00805f9b34fb"
OBD_CHARACTERISTIC_UUID = "0000fff1-0000-1000-8000-00805f9b34fb"

#: Pause between writing a command and reading its answer (seconds).
#: The adapter link is half-duplex at the application level.
SETTLE_DELAY = 0.1

# ------------------------------------------------------------------
# Polling and trip aggregation
# ------------------------------------------------------------------

POLL_INTERVAL = 2.0
FUEL_TANK_CAPACITY_L = 60.0
FULL_TANK_RANGE_KM = 600.0
TRIP_SAMPLE_LIMIT = 30
TRIP_HISTORY_LIMIT = 10
SAMPLE_QUEUE_SIZE = 100
