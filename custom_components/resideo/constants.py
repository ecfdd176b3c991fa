"""Constants and Enums for the Resideo integration."""

from __future__ import annotations

from enum import IntEnum, StrEnum

# Integration Domain
DOMAIN = "resideo"

# Supported Platforms
PLATFORMS = ["climate", "fan"]

# Honeywell Home API
API_BASE_URL = "https://api.honeywell.com/v2/devices"
TOKEN_URL = "https://api.honeywell.com/oauth2/token"

# Configuration keys
CONF_CONSUMER_KEY = "consumer_key"
CONF_CONSUMER_SECRET = "consumer_secret"
CONF_ACCESS_TOKEN = "access_token"
CONF_REFRESH_TOKEN = "refresh_token"
CONF_REFRESH_RATE = "refresh_rate"
CONF_LOGGING = "logging"
CONF_THERMOSTAT = "thermostat"
CONF_HIDE_FAN = "hide_fan"
CONF_SETPOINT_STATUS = "thermostat_setpoint_status"
CONF_DEVICES = "devices"
CONF_DEVICE_ID = "device_id"
CONF_LOCATION_ID = "location_id"

# Defaults
DEFAULT_REFRESH_RATE = 120  # seconds between polls
MIN_REFRESH_RATE = 30
DEFAULT_SETPOINT_STATUS = "PermanentHold"
SETPOINT_STATUSES = ["NoHold", "TemporaryHold", "PermanentHold"]

# Timing of the push pipelines
DEBOUNCE_DELAY = 0.1  # Coalesce rapid "set" calls into one request
DISPLAY_UNITS_CORRECTION_DELAY = 0.1

# Timeouts and retries for the transport client
DEFAULT_READ_TIMEOUT = 10
DEFAULT_WRITE_TIMEOUT = 30
MAX_RETRIES = 2

# Remote mode names, indexed by TargetHeatingCoolingState.
# Don't change the order of these!
HONEYWELL_MODES = ["Off", "Heat", "Cool", "Auto"]

# Emission order of the target states offered to the host
TARGET_STATE_EMISSION_ORDER = ["Cool", "Heat", "Off", "Auto"]

FAN_MODE_AUTO = "Auto"
FAN_MODE_ON = "On"
FAN_MODE_CIRCULATE = "Circulate"


class TargetHeatingCoolingState(IntEnum):
    """Requested heating/cooling mode."""

    OFF = 0
    HEAT = 1
    COOL = 2
    AUTO = 3


class CurrentHeatingCoolingState(IntEnum):
    """Mode the hardware reports it is actually running in."""

    OFF = 0
    HEAT = 1
    COOL = 2


class TemperatureDisplayUnits(IntEnum):
    """Display unit of the physical thermostat."""

    CELSIUS = 0
    FAHRENHEIT = 1


class TargetFanState(IntEnum):
    """Fan control mode."""

    MANUAL = 0
    AUTO = 1


class Active(IntEnum):
    """Fan active state."""

    INACTIVE = 0
    ACTIVE = 1


class LoggingMode(StrEnum):
    """Per-device logging modes."""

    STANDARD = "standard"
    DEBUG = "debug"
    NONE = "none"


class Characteristic(StrEnum):
    """Externally observable values published to the host."""

    TEMPERATURE_DISPLAY_UNITS = "TemperatureDisplayUnits"
    CURRENT_TEMPERATURE = "CurrentTemperature"
    CURRENT_RELATIVE_HUMIDITY = "CurrentRelativeHumidity"
    TARGET_TEMPERATURE = "TargetTemperature"
    HEATING_THRESHOLD_TEMPERATURE = "HeatingThresholdTemperature"
    COOLING_THRESHOLD_TEMPERATURE = "CoolingThresholdTemperature"
    TARGET_HEATING_COOLING_STATE = "TargetHeatingCoolingState"
    CURRENT_HEATING_COOLING_STATE = "CurrentHeatingCoolingState"
    ACTIVE = "Active"
    TARGET_FAN_STATE = "TargetFanState"


# Characteristics exposed by the thermostat service, in publish order
THERMOSTAT_CHARACTERISTICS: tuple[Characteristic, ...] = (
    Characteristic.TEMPERATURE_DISPLAY_UNITS,
    Characteristic.CURRENT_TEMPERATURE,
    Characteristic.CURRENT_RELATIVE_HUMIDITY,
    Characteristic.TARGET_TEMPERATURE,
    Characteristic.HEATING_THRESHOLD_TEMPERATURE,
    Characteristic.COOLING_THRESHOLD_TEMPERATURE,
    Characteristic.TARGET_HEATING_COOLING_STATE,
    Characteristic.CURRENT_HEATING_COOLING_STATE,
)

# Characteristics exposed by the fan service
FAN_CHARACTERISTICS: tuple[Characteristic, ...] = (
    Characteristic.TARGET_FAN_STATE,
    Characteristic.ACTIVE,
)
