"""Common fixtures for Resideo tests."""
import copy
from unittest.mock import AsyncMock, MagicMock

import pytest
from homeassistant.core import HomeAssistant

from custom_components.resideo.entity import ResideoAccessory
from custom_components.resideo.models import (
    FanChangeableValues,
    ThermostatDevice,
    ThermostatOptions,
)

CELSIUS_THERMOSTAT = {
    "deviceID": "LCC-00D02DB6B2C4",
    "name": "Living Room",
    "deviceClass": "Thermostat",
    "deviceModel": "T5-T6",
    "thermostatVersion": "02.00.19.33",
    "units": "Celsius",
    "indoorTemperature": 21.5,
    "indoorHumidity": 45,
    "allowedModes": ["Heat", "Off", "Cool", "Auto"],
    "minHeatSetpoint": 4.5,
    "maxHeatSetpoint": 32,
    "minCoolSetpoint": 10,
    "maxCoolSetpoint": 37,
    "changeableValues": {
        "mode": "Heat",
        "heatSetpoint": 20,
        "coolSetpoint": 24,
        "thermostatSetpointStatus": "PermanentHold",
    },
    "operationStatus": {"mode": "Heat", "fanRequest": False},
    "settings": {
        "fan": {
            "allowedModes": ["On", "Auto", "Circulate"],
            "changeableValues": {"mode": "Auto"},
        }
    },
}

FAHRENHEIT_THERMOSTAT = {
    "deviceID": "LCC-00D02DB6B2C5",
    "name": "Bedroom",
    "deviceClass": "Thermostat",
    "deviceModel": "Round",
    "units": "Fahrenheit",
    "indoorTemperature": 70,
    "indoorHumidity": 38,
    "allowedModes": ["Cool", "Heat", "Off"],
    "minHeatSetpoint": 40,
    "maxHeatSetpoint": 90,
    "minCoolSetpoint": 50,
    "maxCoolSetpoint": 99,
    "changeableValues": {
        "mode": "Cool",
        "heatSetpoint": 68,
        "coolSetpoint": 76,
    },
    "operationStatus": {"mode": "EquipmentOff"},
    "settings": {},
}


class RecordingPublisher:
    """Publisher that keeps every published (characteristic, value) pair."""

    def __init__(self):
        self.updates = []

    def update_characteristic(self, characteristic, value):
        self.updates.append((characteristic, value))

    def last(self, characteristic):
        for published, value in reversed(self.updates):
            if published == characteristic:
                return value
        raise KeyError(characteristic)

    def published(self, characteristic):
        return [value for published, value in self.updates if published == characteristic]


@pytest.fixture
def mock_hass():
    """Create a mock Home Assistant instance."""
    hass = MagicMock(spec=HomeAssistant)
    hass.data = {}
    hass.bus = MagicMock()
    hass.async_create_task = MagicMock()
    return hass


@pytest.fixture
def celsius_data():
    """Raw /thermostats payload of a Celsius device with a fan."""
    return copy.deepcopy(CELSIUS_THERMOSTAT)


@pytest.fixture
def fahrenheit_data():
    """Raw /thermostats payload of a Fahrenheit device without a fan."""
    return copy.deepcopy(FAHRENHEIT_THERMOSTAT)


@pytest.fixture
def celsius_device(celsius_data):
    return ThermostatDevice.from_api(celsius_data)


@pytest.fixture
def fahrenheit_device(fahrenheit_data):
    return ThermostatDevice.from_api(fahrenheit_data)


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def accessory():
    return ResideoAccessory("Living Room Thermostat")


@pytest.fixture
def options():
    """Options as built from a typical YAML configuration."""
    return ThermostatOptions(
        location_id="123456",
        refresh_rate=120,
        thermostat_setpoint_status="PermanentHold",
    )


@pytest.fixture
def mock_api(celsius_device):
    """Create a mock ResideoAPI instance that serves the Celsius device."""
    api = MagicMock()
    api.access_token = "access-token"
    api.async_get_thermostat = AsyncMock(return_value=celsius_device)
    api.async_get_fan = AsyncMock(return_value=FanChangeableValues(mode="Auto"))
    api.async_set_thermostat = AsyncMock(return_value=True)
    api.async_set_fan = AsyncMock(return_value=True)
    api.async_refresh_access_token = AsyncMock()
    api.close = AsyncMock()
    return api
