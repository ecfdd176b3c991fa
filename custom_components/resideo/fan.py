import logging
from typing import Any

from homeassistant.components.fan import FanEntity, FanEntityFeature
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.typing import ConfigType, DiscoveryInfoType

from .constants import (
    DOMAIN,
    FAN_CHARACTERISTICS,
    Active,
    Characteristic,
    TargetFanState,
)
from .entity import ResideoAccessory, ResideoBaseEntity
from .sync_controller import ThermostatSyncController

_LOGGER = logging.getLogger(__name__)

PRESET_AUTO = "auto"
PRESET_MANUAL = "manual"

PRESET_MAPPING = {
    TargetFanState.AUTO: PRESET_AUTO,
    TargetFanState.MANUAL: PRESET_MANUAL,
}

PRESET_REVERSE_MAPPING = {v: k for k, v in PRESET_MAPPING.items()}


class ResideoFan(ResideoBaseEntity, FanEntity):
    """Fan of a Resideo thermostat.

    ``auto`` lets the thermostat run the fan with the equipment. In ``manual``
    the fan is either forced on or set to circulate.
    """

    _characteristics = FAN_CHARACTERISTICS

    def __init__(self, controller: ThermostatSyncController, accessory: ResideoAccessory):
        super().__init__(controller, accessory)

        self._attr_translation_key = "fan"
        self._attr_name = "Fan"
        self._attr_unique_id = f"{controller.device_id}_fan"

        self._attr_supported_features = (
            FanEntityFeature.PRESET_MODE | FanEntityFeature.TURN_ON | FanEntityFeature.TURN_OFF
        )
        self._attr_preset_modes = [PRESET_AUTO, PRESET_MANUAL]

    @property
    def is_on(self) -> bool | None:
        active = self._value(Characteristic.ACTIVE)
        if active is None:
            return None
        return active == Active.ACTIVE

    @property
    def preset_mode(self) -> str | None:
        return PRESET_MAPPING.get(self._value(Characteristic.TARGET_FAN_STATE))

    async def async_set_preset_mode(self, preset_mode: str) -> None:
        if preset_mode not in PRESET_REVERSE_MAPPING:
            _LOGGER.error("Unsupported fan preset: %s", preset_mode)
            return

        self._set(
            Characteristic.TARGET_FAN_STATE,
            PRESET_REVERSE_MAPPING[preset_mode],
            self._controller.set_target_fan_state,
        )

    async def async_turn_on(
        self,
        percentage: int | None = None,
        preset_mode: str | None = None,
        **kwargs: Any,
    ) -> None:
        if preset_mode is not None:
            await self.async_set_preset_mode(preset_mode)
        self._set(Characteristic.ACTIVE, Active.ACTIVE, self._controller.set_active)

    async def async_turn_off(self, **kwargs: Any) -> None:
        self._set(Characteristic.ACTIVE, Active.INACTIVE, self._controller.set_active)


async def async_setup_platform(
    hass: HomeAssistant,
    config: ConfigType,
    async_add_entities: AddEntitiesCallback,
    discovery_info: DiscoveryInfoType | None = None,
):
    if discovery_info is None:
        return

    entities = [
        ResideoFan(thermostat["controller"], thermostat["accessory"])
        for thermostat in hass.data[DOMAIN]["thermostats"]
        if thermostat["controller"].fan_enabled
    ]
    if not entities:
        _LOGGER.debug("No thermostat with a controllable fan")
        return

    async_add_entities(entities)
