"""Synchronization engine for a Honeywell TCC thermostat.

One ``ThermostatSyncController`` exists per physical device. It owns the
remote device snapshot, the fan sub-resource and the characteristic state,
and runs three activities on the event loop:

- refresh ticks, which poll the device every ``refresh_rate`` seconds and
  are skipped while a thermostat push is in flight,
- the thermostat push pipeline, debounced, guarded by
  ``thermostat_update_in_progress``,
- the fan push pipeline, debounced, guarded by ``fan_update_in_progress``
  (only created when the fan is supported and not hidden).

Host "set" calls mutate the characteristic state immediately and return
before any network request is made.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import Any, Protocol

from .constants import (
    DEBOUNCE_DELAY,
    DISPLAY_UNITS_CORRECTION_DELAY,
    FAN_CHARACTERISTICS,
    THERMOSTAT_CHARACTERISTICS,
    Characteristic,
    TargetHeatingCoolingState,
)
from .conversions import (
    characteristics_to_fan_mode,
    compute_allowed_target_states,
    current_state_from_operation,
    display_units_from_remote,
    fan_mode_to_characteristics,
    mode_to_target_state,
    target_state_to_mode,
    to_normalized,
    to_remote,
)
from .debouncer import Debouncer
from .device_logging import DeviceLogger
from .infrastructure.errors import ResideoError
from .models import (
    CharacteristicState,
    FanChangeableValues,
    FanChangeRequest,
    ThermostatChangeRequest,
    ThermostatDevice,
    ThermostatOptions,
)

_LOGGER = logging.getLogger(__name__)

# Characteristic -> CharacteristicState field
_STATE_FIELDS: dict[Characteristic, str] = {
    Characteristic.TEMPERATURE_DISPLAY_UNITS: "temperature_display_units",
    Characteristic.CURRENT_TEMPERATURE: "current_temperature",
    Characteristic.CURRENT_RELATIVE_HUMIDITY: "current_relative_humidity",
    Characteristic.TARGET_TEMPERATURE: "target_temperature",
    Characteristic.HEATING_THRESHOLD_TEMPERATURE: "heating_threshold_temperature",
    Characteristic.COOLING_THRESHOLD_TEMPERATURE: "cooling_threshold_temperature",
    Characteristic.TARGET_HEATING_COOLING_STATE: "target_heating_cooling_state",
    Characteristic.CURRENT_HEATING_COOLING_STATE: "current_heating_cooling_state",
    Characteristic.ACTIVE: "active",
    Characteristic.TARGET_FAN_STATE: "target_fan_state",
}

SetCallback = Callable[[Exception | None], None]


class CharacteristicPublisher(Protocol):
    """Host side of the engine: receives every published value."""

    def update_characteristic(self, characteristic: Characteristic, value: Any) -> None:
        """Publish a value, or an exception as the error marker."""


class ThermostatTransport(Protocol):
    """Subset of the API client the engine depends on."""

    async def async_get_thermostat(self, device_id: str, location_id: str) -> ThermostatDevice: ...

    async def async_get_fan(self, device_id: str, location_id: str) -> FanChangeableValues: ...

    async def async_set_thermostat(
        self, device_id: str, location_id: str, request: ThermostatChangeRequest
    ) -> Any: ...

    async def async_set_fan(self, device_id: str, location_id: str, request: FanChangeRequest) -> Any: ...

    async def async_refresh_access_token(self) -> None: ...


class ThermostatSyncController:
    """Keeps one thermostat and its host characteristics in sync."""

    def __init__(
        self,
        api: ThermostatTransport,
        publisher: CharacteristicPublisher,
        device: ThermostatDevice,
        options: ThermostatOptions,
        debounce_delay: float = DEBOUNCE_DELAY,
    ):
        self._api = api
        self._publisher = publisher
        self.options = options
        self.location_id = options.location_id
        self.device = device
        self.device_fan: FanChangeableValues | None = None
        self.state = CharacteristicState()
        self.log = DeviceLogger(_LOGGER, device.display_name, options.logging)

        self.fan_enabled = device.has_fan and not options.hide_fan
        if device.has_fan:
            self.log.debug("Available FAN settings %s", device.settings.fan)

        # Fixed for the lifetime of the controller
        self.allowed_target_states = compute_allowed_target_states(device.allowed_modes)
        self.log.debug("Only Show These Modes: %s", [int(s) for s in self.allowed_target_states])

        self.thermostat_update_in_progress = False
        self.fan_update_in_progress = False
        self._thermostat_debouncer = Debouncer(
            self._async_flush_thermostat, debounce_delay, name=f"{device.device_id} thermostat"
        )
        self._fan_debouncer: Debouncer | None = None
        if self.fan_enabled:
            self._fan_debouncer = Debouncer(self._async_flush_fan, debounce_delay, name=f"{device.device_id} fan")

        self._refresh_task: asyncio.Task | None = None
        self._display_units_timer: asyncio.TimerHandle | None = None

        # Do initial device parse
        self.derive_characteristics()
        self.publish_characteristics()

    @property
    def device_id(self) -> str:
        return self.device.device_id

    @property
    def owned_characteristics(self) -> tuple[Characteristic, ...]:
        """Every characteristic this controller publishes."""
        if self.fan_enabled:
            return THERMOSTAT_CHARACTERISTICS + FAN_CHARACTERISTICS
        return THERMOSTAT_CHARACTERISTICS

    # ------------------------------------------------------------------
    # Unit helpers bound to the device's display unit
    # ------------------------------------------------------------------

    def _to_normalized(self, value: float | None) -> float | None:
        if value is None:
            return None
        return to_normalized(value, self.state.temperature_display_units)

    def _to_remote(self, value: float | None) -> float | None:
        if value is None:
            return None
        return to_remote(value, self.state.temperature_display_units)

    def _remote_setpoint_for(self, target_state: int | None) -> float | None:
        """Normalized remote setpoint matching a target mode (Heat -> heat, else cool)."""
        values = self.device.changeable_values
        if target_state == TargetHeatingCoolingState.HEAT:
            return self._to_normalized(values.heat_setpoint)
        return self._to_normalized(values.cool_setpoint)

    def target_temperature_bounds(self) -> tuple[float, float] | None:
        """Normalized (min, max) setpoint bounds for the device's current mode."""
        device = self.device
        mode = device.changeable_values.mode
        if mode == "Heat" and device.min_heat_setpoint is not None and device.max_heat_setpoint is not None:
            return self._to_normalized(device.min_heat_setpoint), self._to_normalized(device.max_heat_setpoint)
        if mode == "Cool" and device.min_cool_setpoint is not None and device.max_cool_setpoint is not None:
            return self._to_normalized(device.min_cool_setpoint), self._to_normalized(device.max_cool_setpoint)
        return None

    # ------------------------------------------------------------------
    # Snapshot -> characteristics
    # ------------------------------------------------------------------

    def derive_characteristics(self, fan_fetched: bool = False) -> None:
        """Recompute the characteristic state from the current snapshot."""
        device = self.device
        state = self.state
        values = device.changeable_values

        state.temperature_display_units = display_units_from_remote(device.units)
        if device.indoor_temperature is not None:
            state.current_temperature = self._to_normalized(device.indoor_temperature)
        state.current_relative_humidity = device.indoor_humidity

        # Devices report 0 for a setpoint that does not apply; keep the last one
        if values.heat_setpoint is not None and values.heat_setpoint > 0:
            state.heating_threshold_temperature = self._to_normalized(values.heat_setpoint)
        if values.cool_setpoint is not None and values.cool_setpoint > 0:
            state.cooling_threshold_temperature = self._to_normalized(values.cool_setpoint)

        target_state = mode_to_target_state(values.mode)
        if target_state is None:
            self.log.warning("Unsupported mode reported by device: %s", values.mode)
        else:
            state.target_heating_cooling_state = target_state

        state.current_heating_cooling_state = current_state_from_operation(device.operation_status.mode)
        self.log.debug("Device is Currently: %s", state.current_heating_cooling_state)

        target_temperature = self._remote_setpoint_for(state.target_heating_cooling_state)
        if target_temperature is not None:
            state.target_temperature = target_temperature

        if self.fan_enabled and fan_fetched and self.device_fan is not None:
            self.log.debug("Fan: %s", self.device_fan.mode)
            fan_state = fan_mode_to_characteristics(self.device_fan.mode)
            if fan_state is not None:
                state.target_fan_state, state.active = fan_state

    def characteristic_value(self, characteristic: Characteristic) -> Any:
        return getattr(self.state, _STATE_FIELDS[characteristic])

    def _publish(self, characteristic: Characteristic, value: Any) -> None:
        self._publisher.update_characteristic(characteristic, value)

    def publish_characteristics(self, characteristics: Iterable[Characteristic] | None = None) -> None:
        """Publish the current value of each characteristic to the host."""
        for characteristic in characteristics or self.owned_characteristics:
            self._publish(characteristic, self.characteristic_value(characteristic))

    def api_error(self, err: Exception, characteristics: Iterable[Characteristic] | None = None) -> None:
        """Publish the error marker to every owned characteristic."""
        for characteristic in characteristics or self.owned_characteristics:
            self._publish(characteristic, err)

    # ------------------------------------------------------------------
    # Refresh path
    # ------------------------------------------------------------------

    async def async_refresh(self) -> bool:
        """Fetch the device (and fan) and publish the derived characteristics.

        Returns:
            True if every fetch succeeded.
        """
        try:
            device = await self._api.async_get_thermostat(self.device_id, self.location_id)
        except ResideoError as err:
            await self._async_handle_api_failure(err, f"Failed to update status of {self.device.name}")
            return False

        self.device = device
        self.log.debug("Fetched update for %s from Honeywell API: %s", device.name, device.changeable_values)

        fan_error: ResideoError | None = None
        fan_fetched = False
        if self.fan_enabled:
            try:
                self.device_fan = await self._api.async_get_fan(self.device_id, self.location_id)
                fan_fetched = True
                self.log.debug("Fetched update for %s from Honeywell Fan API: %s", device.name, self.device_fan)
            except ResideoError as err:
                fan_error = err

        if self._thermostat_debouncer.has_pending_work():
            # Queued edits stay local; the next flush diffs against this snapshot
            self.log.debug("Thermostat changes queued, keeping local state")
        else:
            self.derive_characteristics(fan_fetched=fan_fetched)

        if fan_error is not None:
            # The device update stands; only the fan is reported as failing
            self.publish_characteristics(THERMOSTAT_CHARACTERISTICS)
            await self._async_handle_api_failure(
                fan_error, f"Failed to update fan status of {device.name}", FAN_CHARACTERISTICS
            )
            return False

        self.publish_characteristics()
        return True

    async def async_refresh_tick(self) -> bool:
        """Run one scheduled refresh unless a thermostat push is in flight.

        Never raises: a failure is logged and published as the error marker so
        the next tick still runs.
        """
        if self.thermostat_update_in_progress:
            self.log.debug("Thermostat update in progress, skipping refresh")
            return False
        try:
            await self.async_refresh()
        except Exception as err:
            self.log.exception("Unexpected error refreshing %s", self.device.name)
            self.api_error(err)
        return True

    async def _async_refresh_loop(self) -> None:
        while True:
            await asyncio.sleep(self.options.refresh_rate)
            await self.async_refresh_tick()

    async def _async_refresh_token(self) -> None:
        try:
            await self._api.async_refresh_access_token()
        except ResideoError as err:
            self.log.error("Failed to refresh access token: %s", err)

    async def _async_handle_api_failure(
        self,
        err: ResideoError,
        context: str,
        characteristics: Iterable[Characteristic] | None = None,
    ) -> None:
        self.log.error("%s: %s", context, err)
        await self._async_refresh_token()
        self.api_error(err, characteristics)

    # ------------------------------------------------------------------
    # Push path
    # ------------------------------------------------------------------

    def _thermostat_changed(self) -> bool:
        state = self.state
        values = self.device.changeable_values
        target_state = state.target_heating_cooling_state

        if target_state != mode_to_target_state(values.mode):
            return True
        if state.heating_threshold_temperature != self._to_normalized(values.heat_setpoint):
            return True
        if state.cooling_threshold_temperature != self._to_normalized(values.cool_setpoint):
            return True
        if target_state in (TargetHeatingCoolingState.HEAT, TargetHeatingCoolingState.COOL):
            return state.target_temperature != self._remote_setpoint_for(target_state)
        return False

    def build_change_request(self) -> ThermostatChangeRequest:
        """Build the thermostat write for the current characteristic state."""
        state = self.state
        target_state = state.target_heating_cooling_state

        if target_state == TargetHeatingCoolingState.HEAT:
            heat, cool = state.target_temperature, state.cooling_threshold_temperature
        elif target_state == TargetHeatingCoolingState.COOL:
            heat, cool = state.heating_threshold_temperature, state.target_temperature
        else:
            heat, cool = state.heating_threshold_temperature, state.cooling_threshold_temperature

        return ThermostatChangeRequest(
            mode=target_state_to_mode(target_state),
            thermostat_setpoint_status=self.options.thermostat_setpoint_status,
            heat_setpoint=self._to_remote(heat),
            cool_setpoint=self._to_remote(cool),
        )

    async def async_push_changes(self) -> bool:
        """Push pending thermostat changes, then refresh from the device.

        Returns:
            True if a request was sent.
        """
        state = self.state
        values = self.device.changeable_values
        self.log.debug(
            "Current Mode: %s, Changing Mode: %s, Current Heat: %s, Changing Heat: %s, "
            "Current Cool: %s, Changing Cool: %s",
            mode_to_target_state(values.mode),
            state.target_heating_cooling_state,
            self._to_normalized(values.heat_setpoint),
            state.heating_threshold_temperature,
            self._to_normalized(values.cool_setpoint),
            state.cooling_threshold_temperature,
        )

        if state.target_heating_cooling_state is None:
            self.log.warning("No target mode known, not sending changes")
            return False
        if not self._thermostat_changed():
            self.log.debug("No changes to send")
            return False

        request = self.build_change_request()
        self.log.info(
            "Sending request to Honeywell API. mode: %s, coolSetpoint: %s, heatSetpoint: %s, "
            "thermostatSetpointStatus: %s",
            request.mode,
            request.cool_setpoint,
            request.heat_setpoint,
            request.thermostat_setpoint_status,
        )
        self.log.debug("Payload: %s", request.to_api_payload())

        await self._api.async_set_thermostat(self.device_id, self.location_id, request)
        # The device may clamp or reject parts of the request
        await self.async_refresh()
        return True

    async def async_push_fan_changes(self) -> None:
        """Push the fan mode (always, no diff), then refresh from the device."""
        if self.fan_enabled:
            state = self.state
            self.log.debug("TargetFanState %s Active %s", state.target_fan_state, state.active)
            request = FanChangeRequest(mode=characteristics_to_fan_mode(state.target_fan_state, state.active))
            self.log.info("Sending request to Honeywell API. Fan Mode: %s", request.mode)

            await self._api.async_set_fan(self.device_id, self.location_id, request)
        await self.async_refresh()

    async def _async_flush_thermostat(self) -> None:
        try:
            await self.async_push_changes()
        except ResideoError as err:
            await self._async_handle_api_failure(err, f"Failed to push changes for {self.device.name}")
        finally:
            if not self._thermostat_debouncer.has_pending_work():
                self.thermostat_update_in_progress = False

    async def _async_flush_fan(self) -> None:
        try:
            await self.async_push_fan_changes()
        except ResideoError as err:
            await self._async_handle_api_failure(err, f"Failed to push fan changes for {self.device.name}")
        finally:
            if not self._fan_debouncer.has_pending_work():
                self.fan_update_in_progress = False

    def _queue_thermostat_update(self) -> None:
        self.thermostat_update_in_progress = True
        self._thermostat_debouncer.async_call()

    def _queue_fan_update(self) -> None:
        self.fan_update_in_progress = True
        self._fan_debouncer.async_call()

    async def async_wait_for_pushes(self) -> None:
        """Wait for the flushes that have already started."""
        await self._thermostat_debouncer.async_wait()
        if self._fan_debouncer is not None:
            await self._fan_debouncer.async_wait()

    # ------------------------------------------------------------------
    # Host "set" handlers
    # ------------------------------------------------------------------

    @staticmethod
    def _acknowledge(callback: SetCallback | None) -> None:
        if callback is not None:
            callback(None)

    def set_target_heating_cooling_state(self, value: int, callback: SetCallback | None = None) -> None:
        self.log.debug("Set TargetHeatingCoolingState: %s", value)
        self.state.target_heating_cooling_state = value

        # Keep the displayed target in line with the mode just chosen
        target_temperature = self._remote_setpoint_for(value)
        if target_temperature is not None:
            self.state.target_temperature = target_temperature
        self._publish(Characteristic.TARGET_TEMPERATURE, self.state.target_temperature)

        self._queue_thermostat_update()
        self._acknowledge(callback)

    def set_heating_threshold_temperature(self, value: float, callback: SetCallback | None = None) -> None:
        self.log.debug("Set HeatingThresholdTemperature: %s", value)
        self.state.heating_threshold_temperature = value
        self._queue_thermostat_update()
        self._acknowledge(callback)

    def set_cooling_threshold_temperature(self, value: float, callback: SetCallback | None = None) -> None:
        self.log.debug("Set CoolingThresholdTemperature: %s", value)
        self.state.cooling_threshold_temperature = value
        self._queue_thermostat_update()
        self._acknowledge(callback)

    def set_target_temperature(self, value: float, callback: SetCallback | None = None) -> None:
        self.log.debug("Set TargetTemperature: %s", value)
        self.state.target_temperature = value
        self._queue_thermostat_update()
        self._acknowledge(callback)

    def set_temperature_display_units(self, value: int, callback: SetCallback | None = None) -> None:
        """Reject a display-unit change by republishing the device's unit."""
        self.log.debug("Set TemperatureDisplayUnits: %s", value)
        self.log.warning("Changing the Hardware Display Units from Home Assistant is not supported.")

        if self._display_units_timer is not None:
            self._display_units_timer.cancel()
        self._display_units_timer = asyncio.get_running_loop().call_later(
            DISPLAY_UNITS_CORRECTION_DELAY, self._restore_display_units
        )
        self._acknowledge(callback)

    def _restore_display_units(self) -> None:
        self._display_units_timer = None
        self._publish(Characteristic.TEMPERATURE_DISPLAY_UNITS, self.state.temperature_display_units)

    def set_active(self, value: int, callback: SetCallback | None = None) -> None:
        self.log.debug("Set Active State: %s", value)
        if not self.fan_enabled:
            self.log.warning("Fan is not available, ignoring Active: %s", value)
        else:
            self.state.active = value
            self._queue_fan_update()
        self._acknowledge(callback)

    def set_target_fan_state(self, value: int, callback: SetCallback | None = None) -> None:
        self.log.debug("Set Target Fan State: %s", value)
        if not self.fan_enabled:
            self.log.warning("Fan is not available, ignoring Target Fan State: %s", value)
        else:
            self.state.target_fan_state = value
            self._queue_fan_update()
        self._acknowledge(callback)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def async_start(self) -> None:
        """Start the refresh loop. Must be called from the event loop."""
        if self._refresh_task is None:
            self._refresh_task = asyncio.get_running_loop().create_task(self._async_refresh_loop())

    async def async_stop(self) -> None:
        """Stop the refresh loop and drop any pending work."""
        self._thermostat_debouncer.async_cancel()
        if self._fan_debouncer is not None:
            self._fan_debouncer.async_cancel()
        if self._display_units_timer is not None:
            self._display_units_timer.cancel()
            self._display_units_timer = None
        if self._refresh_task is not None:
            self._refresh_task.cancel()
            try:
                await self._refresh_task
            except asyncio.CancelledError:
                pass
            self._refresh_task = None
