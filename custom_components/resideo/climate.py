"""Climate platform for the Resideo integration."""

import logging
from typing import Any

import voluptuous as vol
from homeassistant.components.climate import (
    ATTR_HVAC_MODE,
    ATTR_TARGET_TEMP_HIGH,
    ATTR_TARGET_TEMP_LOW,
    ClimateEntity,
    ClimateEntityFeature,
    HVACAction,
    HVACMode,
)
from homeassistant.const import ATTR_TEMPERATURE, UnitOfTemperature
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers import entity_platform
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.typing import ConfigType, DiscoveryInfoType

from .constants import (
    DOMAIN,
    THERMOSTAT_CHARACTERISTICS,
    Characteristic,
    CurrentHeatingCoolingState,
    TargetHeatingCoolingState,
    TemperatureDisplayUnits,
)
from .entity import ResideoAccessory, ResideoBaseEntity
from .sync_controller import ThermostatSyncController

_LOGGER = logging.getLogger(__name__)

SERVICE_SET_DISPLAY_UNITS = "set_temperature_display_units"
ATTR_DISPLAY_UNITS = "display_units"

HVAC_MODE_MAPPING = {
    TargetHeatingCoolingState.OFF: HVACMode.OFF,
    TargetHeatingCoolingState.HEAT: HVACMode.HEAT,
    TargetHeatingCoolingState.COOL: HVACMode.COOL,
    TargetHeatingCoolingState.AUTO: HVACMode.HEAT_COOL,
}

HVAC_MODE_REVERSE_MAPPING = {v: k for k, v in HVAC_MODE_MAPPING.items()}

HVAC_ACTION_MAPPING = {
    CurrentHeatingCoolingState.HEAT: HVACAction.HEATING,
    CurrentHeatingCoolingState.COOL: HVACAction.COOLING,
}

DISPLAY_UNITS_MAPPING = {
    TemperatureDisplayUnits.CELSIUS: "celsius",
    TemperatureDisplayUnits.FAHRENHEIT: "fahrenheit",
}

DISPLAY_UNITS_REVERSE_MAPPING = {v: k for k, v in DISPLAY_UNITS_MAPPING.items()}

# Mode restored by turn_on when no earlier mode is known
TURN_ON_PREFERENCE = (
    TargetHeatingCoolingState.AUTO,
    TargetHeatingCoolingState.HEAT,
    TargetHeatingCoolingState.COOL,
)


async def async_setup_platform(
    hass: HomeAssistant,
    config: ConfigType,
    async_add_entities: AddEntitiesCallback,
    discovery_info: DiscoveryInfoType | None = None,
) -> None:
    """Set up Resideo climate entities."""
    if discovery_info is None:
        return

    thermostats = hass.data[DOMAIN]["thermostats"]
    async_add_entities(
        [ResideoClimate(thermostat["controller"], thermostat["accessory"]) for thermostat in thermostats]
    )

    platform = entity_platform.async_get_current_platform()
    platform.async_register_entity_service(
        SERVICE_SET_DISPLAY_UNITS,
        {vol.Required(ATTR_DISPLAY_UNITS): vol.In(list(DISPLAY_UNITS_REVERSE_MAPPING))},
        "async_set_temperature_display_units",
    )


class ResideoClimate(ResideoBaseEntity, ClimateEntity):
    """Resideo thermostat entity."""

    _characteristics = THERMOSTAT_CHARACTERISTICS

    def __init__(self, controller: ThermostatSyncController, accessory: ResideoAccessory):
        """Initialize the climate entity."""
        super().__init__(controller, accessory)

        # Entity attributes
        self._attr_unique_id = f"{controller.device_id}_thermostat"
        self._attr_name = None  # Use device name
        self._attr_translation_key = "thermostat"

        # Temperatures are always normalized to Celsius, in half degrees
        self._attr_temperature_unit = UnitOfTemperature.CELSIUS
        self._attr_precision = 0.5
        self._attr_target_temperature_step = 0.5

        self._attr_hvac_modes = [HVAC_MODE_MAPPING[state] for state in controller.allowed_target_states]

        features = ClimateEntityFeature.TARGET_TEMPERATURE
        if TargetHeatingCoolingState.AUTO in controller.allowed_target_states:
            features |= ClimateEntityFeature.TARGET_TEMPERATURE_RANGE
        if TargetHeatingCoolingState.OFF in controller.allowed_target_states:
            features |= ClimateEntityFeature.TURN_OFF
            if len(controller.allowed_target_states) > 1:
                features |= ClimateEntityFeature.TURN_ON
        self._attr_supported_features = features

        self._last_on_state = next(
            (state for state in TURN_ON_PREFERENCE if state in controller.allowed_target_states), None
        )
        self._remember_on_state()

    def _remember_on_state(self) -> None:
        state = self._value(Characteristic.TARGET_HEATING_COOLING_STATE)
        if state is not None and state != TargetHeatingCoolingState.OFF:
            self._last_on_state = state

    @callback
    def _handle_characteristic_update(self, characteristic: Characteristic) -> None:
        if characteristic == Characteristic.TARGET_HEATING_COOLING_STATE:
            self._remember_on_state()
        super()._handle_characteristic_update(characteristic)

    @property
    def current_temperature(self) -> float | None:
        return self._value(Characteristic.CURRENT_TEMPERATURE)

    @property
    def current_humidity(self) -> float | None:
        return self._value(Characteristic.CURRENT_RELATIVE_HUMIDITY)

    @property
    def target_temperature(self) -> float | None:
        """Return the single setpoint; in heat/cool mode the range is used instead."""
        if self.hvac_mode == HVACMode.HEAT_COOL:
            return None
        return self._value(Characteristic.TARGET_TEMPERATURE)

    @property
    def target_temperature_low(self) -> float | None:
        return self._value(Characteristic.HEATING_THRESHOLD_TEMPERATURE)

    @property
    def target_temperature_high(self) -> float | None:
        return self._value(Characteristic.COOLING_THRESHOLD_TEMPERATURE)

    @property
    def hvac_mode(self) -> HVACMode | None:
        state = self._value(Characteristic.TARGET_HEATING_COOLING_STATE)
        if state is None:
            return None
        return HVAC_MODE_MAPPING.get(state)

    @property
    def hvac_action(self) -> HVACAction | None:
        """Return what the hardware is doing right now.

        The target mode can be Auto while the equipment is idle, heating or
        cooling, so this is driven by the operation status only.
        """
        state = self._value(Characteristic.CURRENT_HEATING_COOLING_STATE)
        if state is None:
            return None
        if state in HVAC_ACTION_MAPPING:
            return HVAC_ACTION_MAPPING[state]
        if self.hvac_mode == HVACMode.OFF:
            return HVACAction.OFF
        return HVACAction.IDLE

    @property
    def min_temp(self) -> float:
        bounds = self._controller.target_temperature_bounds()
        if bounds is None:
            return super().min_temp
        return bounds[0]

    @property
    def max_temp(self) -> float:
        bounds = self._controller.target_temperature_bounds()
        if bounds is None:
            return super().max_temp
        return bounds[1]

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        units = self._value(Characteristic.TEMPERATURE_DISPLAY_UNITS)
        return {ATTR_DISPLAY_UNITS: DISPLAY_UNITS_MAPPING.get(units)}

    async def async_set_hvac_mode(self, hvac_mode: HVACMode) -> None:
        """Set the target heating/cooling state."""
        if hvac_mode not in HVAC_MODE_REVERSE_MAPPING:
            _LOGGER.error("Unsupported HVAC mode: %s", hvac_mode)
            return

        self._set(
            Characteristic.TARGET_HEATING_COOLING_STATE,
            HVAC_MODE_REVERSE_MAPPING[hvac_mode],
            self._controller.set_target_heating_cooling_state,
        )

    async def async_turn_off(self) -> None:
        await self.async_set_hvac_mode(HVACMode.OFF)

    async def async_turn_on(self) -> None:
        """Restore the last mode other than off."""
        self._remember_on_state()
        if self._last_on_state is None:
            _LOGGER.error("No mode other than off is available")
            return
        await self.async_set_hvac_mode(HVAC_MODE_MAPPING[self._last_on_state])

    async def async_set_temperature(self, **kwargs: Any) -> None:
        """Set the target temperature and/or the heat/cool thresholds."""
        if (hvac_mode := kwargs.get(ATTR_HVAC_MODE)) is not None:
            await self.async_set_hvac_mode(hvac_mode)

        if (low := kwargs.get(ATTR_TARGET_TEMP_LOW)) is not None:
            self._set(
                Characteristic.HEATING_THRESHOLD_TEMPERATURE,
                low,
                self._controller.set_heating_threshold_temperature,
            )
        if (high := kwargs.get(ATTR_TARGET_TEMP_HIGH)) is not None:
            self._set(
                Characteristic.COOLING_THRESHOLD_TEMPERATURE,
                high,
                self._controller.set_cooling_threshold_temperature,
            )
        if (temperature := kwargs.get(ATTR_TEMPERATURE)) is not None:
            self._set(
                Characteristic.TARGET_TEMPERATURE,
                temperature,
                self._controller.set_target_temperature,
            )

    async def async_set_temperature_display_units(self, display_units: str) -> None:
        """Attempt to change the display unit; the device's unit is restored."""
        self._set(
            Characteristic.TEMPERATURE_DISPLAY_UNITS,
            DISPLAY_UNITS_REVERSE_MAPPING[display_units],
            self._controller.set_temperature_display_units,
        )
