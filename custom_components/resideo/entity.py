"""Accessory store and base entity for Resideo thermostats.

The sync controller publishes characteristics into a ``ResideoAccessory``;
climate and fan entities render whatever the accessory currently holds.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from homeassistant.core import callback
from homeassistant.helpers.device_registry import DeviceInfo

from .constants import DOMAIN, Characteristic

if TYPE_CHECKING:
    from .sync_controller import ThermostatSyncController

_LOGGER = logging.getLogger(__name__)

CharacteristicListener = Callable[[Characteristic], None]


class ResideoAccessory:
    """Last published value of every characteristic of one thermostat.

    A value that is an exception is the error marker: the characteristic is
    "not responding" until a real value is published again.
    """

    def __init__(self, name: str):
        self.name = name
        self._values: dict[Characteristic, Any] = {}
        self._listeners: list[CharacteristicListener] = []

    def update_characteristic(self, characteristic: Characteristic, value: Any) -> None:
        self._values[characteristic] = value
        for listener in list(self._listeners):
            listener(characteristic)

    def get(self, characteristic: Characteristic) -> Any:
        """Return the current value, or None when unknown or in error."""
        value = self._values.get(characteristic)
        if isinstance(value, Exception):
            return None
        return value

    def has_error(self, characteristics: Iterable[Characteristic]) -> bool:
        return any(isinstance(self._values.get(c), Exception) for c in characteristics)

    @callback
    def async_add_listener(self, listener: CharacteristicListener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        @callback
        def remove_listener() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove_listener


class ResideoBaseEntity:
    """Mixin providing common functionality for Resideo entities.

    Subclasses list the characteristics of their service in
    ``_characteristics``. Typical usage::

        class MyEntity(ResideoBaseEntity, ClimateEntity):
            ...
    """

    _attr_has_entity_name = True
    _attr_should_poll = False
    _characteristics: tuple[Characteristic, ...] = ()

    def __init__(self, controller: ThermostatSyncController, accessory: ResideoAccessory):
        self._controller = controller
        self._accessory = accessory
        device = controller.device
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, device.device_id)},
            name=device.display_name,
            manufacturer="Honeywell",
            model=device.device_model,
            serial_number=device.device_id,
            sw_version=device.thermostat_version,
        )

    async def async_added_to_hass(self) -> None:
        await super().async_added_to_hass()
        self.async_on_remove(self._accessory.async_add_listener(self._handle_characteristic_update))

    @callback
    def _handle_characteristic_update(self, characteristic: Characteristic) -> None:
        if characteristic in self._characteristics and self.hass is not None:
            self.async_write_ha_state()

    @property
    def available(self) -> bool:
        return not self._accessory.has_error(self._characteristics)

    def _value(self, characteristic: Characteristic) -> Any:
        return self._accessory.get(characteristic)

    def _set(self, characteristic: Characteristic, value: Any, handler: Callable[..., None]) -> None:
        """Store the host's new value, then hand it to the controller."""
        self._accessory.update_characteristic(characteristic, value)
        handler(value, self._on_set_complete)

    def _on_set_complete(self, error: Exception | None) -> None:
        if error is not None:
            _LOGGER.error("%s: set failed: %s", self._accessory.name, error)
