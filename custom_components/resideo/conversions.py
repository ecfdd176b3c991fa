"""Unit and mode translation between the Honeywell API and the host.

All functions are pure. Temperatures are Celsius-normalized locally and only
converted to the device's display unit at the network boundary.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from .constants import (
    FAN_MODE_AUTO,
    FAN_MODE_CIRCULATE,
    FAN_MODE_ON,
    HONEYWELL_MODES,
    TARGET_STATE_EMISSION_ORDER,
    Active,
    CurrentHeatingCoolingState,
    TargetFanState,
    TargetHeatingCoolingState,
    TemperatureDisplayUnits,
)


def _round_half_up(value: float) -> int:
    """Round like JavaScript's Math.round (ties go up)."""
    return math.floor(value + 0.5)


def to_normalized(value: float, display_units: int | None) -> float:
    """Convert a remote temperature to Celsius, to the nearest 0.5 degree.

    Example:
        >>> to_normalized(212, TemperatureDisplayUnits.FAHRENHEIT)
        100.0
    """
    if display_units == TemperatureDisplayUnits.CELSIUS:
        return value
    return _round_half_up((5 / 9) * (value - 32) * 2) / 2


def to_remote(value: float, display_units: int | None) -> float:
    """Convert a Celsius temperature to the remote unit, to the nearest degree.

    Example:
        >>> to_remote(0, TemperatureDisplayUnits.FAHRENHEIT)
        32
    """
    if display_units == TemperatureDisplayUnits.CELSIUS:
        return value
    return _round_half_up(value * 9 / 5 + 32)


def display_units_from_remote(units: str) -> TemperatureDisplayUnits:
    """Map the API's ``units`` field to the local display-unit enum."""
    if units == "Celsius":
        return TemperatureDisplayUnits.CELSIUS
    return TemperatureDisplayUnits.FAHRENHEIT


def mode_to_target_state(mode: str) -> TargetHeatingCoolingState | None:
    """Look up the target state for a remote mode name, None if unknown."""
    try:
        return TargetHeatingCoolingState(HONEYWELL_MODES.index(mode))
    except ValueError:
        return None


def target_state_to_mode(state: int) -> str:
    """Return the remote mode name for a target state."""
    return HONEYWELL_MODES[state]


def current_state_from_operation(mode: str | None) -> CurrentHeatingCoolingState:
    """Derive the current heating/cooling state from the operation status."""
    if mode == "Heat":
        return CurrentHeatingCoolingState.HEAT
    if mode == "Cool":
        return CurrentHeatingCoolingState.COOL
    return CurrentHeatingCoolingState.OFF


def compute_allowed_target_states(allowed_modes: Iterable[str]) -> list[TargetHeatingCoolingState]:
    """Return the target states the device supports, in host display order.

    The order is always Cool, Heat, Off, Auto, whatever order the device
    lists its modes in.

    Example:
        >>> compute_allowed_target_states(["Heat", "Off"])
        [<TargetHeatingCoolingState.HEAT: 1>, <TargetHeatingCoolingState.OFF: 0>]
    """
    allowed = set(allowed_modes)
    return [
        TargetHeatingCoolingState(HONEYWELL_MODES.index(mode))
        for mode in TARGET_STATE_EMISSION_ORDER
        if mode in allowed
    ]


def fan_mode_to_characteristics(mode: str) -> tuple[TargetFanState, Active] | None:
    """Map a remote fan mode to (target fan state, active)."""
    if mode == FAN_MODE_AUTO:
        return TargetFanState.AUTO, Active.INACTIVE
    if mode == FAN_MODE_ON:
        return TargetFanState.MANUAL, Active.ACTIVE
    if mode == FAN_MODE_CIRCULATE:
        return TargetFanState.MANUAL, Active.INACTIVE
    return None


def characteristics_to_fan_mode(target_fan_state: int, active: int) -> str:
    """Map (target fan state, active) back to a single remote fan mode."""
    if target_fan_state == TargetFanState.AUTO:
        return FAN_MODE_AUTO
    if active == Active.ACTIVE:
        return FAN_MODE_ON
    return FAN_MODE_CIRCULATE
