"""Tests for unit and mode translation."""
import pytest

from custom_components.resideo.constants import (
    Active,
    CurrentHeatingCoolingState,
    TargetFanState,
    TargetHeatingCoolingState,
    TemperatureDisplayUnits,
)
from custom_components.resideo.conversions import (
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

F = TemperatureDisplayUnits.FAHRENHEIT
C = TemperatureDisplayUnits.CELSIUS


class TestTemperatureConversion:
    """Test Fahrenheit/Celsius normalization."""

    @pytest.mark.parametrize(
        ("fahrenheit", "celsius"),
        [(32, 0), (212, 100), (68, 20), (70, 21), (76, 24.5), (73, 23)],
    )
    def test_to_normalized_fahrenheit(self, fahrenheit, celsius):
        """Test remote Fahrenheit values are rounded to half degrees."""
        assert to_normalized(fahrenheit, F) == celsius

    @pytest.mark.parametrize(
        ("celsius", "fahrenheit"),
        [(0, 32), (100, 212), (20, 68), (22, 72), (24.5, 76), (21.5, 71)],
    )
    def test_to_remote_fahrenheit(self, celsius, fahrenheit):
        """Test Celsius values are rounded to whole remote degrees."""
        assert to_remote(celsius, F) == fahrenheit

    def test_celsius_is_identity(self):
        """Test no conversion happens for Celsius devices."""
        assert to_normalized(21.5, C) == 21.5
        assert to_remote(21.5, C) == 21.5

    def test_half_values_round_up(self):
        """Test ties round towards positive infinity."""
        # 5/9 * (33 - 32) * 2 = 1.11 -> 1 -> 0.5
        assert to_normalized(33, F) == 0.5
        # 0.25 * 9/5 + 32 = 32.45 -> 32
        assert to_remote(0.25, F) == 32
        # -17.5 * 9/5 + 32 = 0.5 -> 1
        assert to_remote(-17.5, F) == 1

    def test_round_trip_within_one_degree(self):
        """Test every integer Fahrenheit value survives a round trip."""
        for fahrenheit in range(40, 100):
            assert abs(to_remote(to_normalized(fahrenheit, F), F) - fahrenheit) <= 1

    @pytest.mark.parametrize("fahrenheit", [quarter / 4 for quarter in range(-160, 480)])
    def test_normalized_round_trip_within_half_degree(self, fahrenheit):
        """Test normalizing, sending back and normalizing again moves at most one step."""
        normalized = to_normalized(fahrenheit, F)

        assert abs(to_normalized(to_remote(normalized, F), F) - normalized) <= 0.5


class TestModeTranslation:
    """Test mode and state mapping."""

    def test_display_units_from_remote(self):
        assert display_units_from_remote("Celsius") == C
        assert display_units_from_remote("Fahrenheit") == F

    @pytest.mark.parametrize(
        ("mode", "state"),
        [
            ("Off", TargetHeatingCoolingState.OFF),
            ("Heat", TargetHeatingCoolingState.HEAT),
            ("Cool", TargetHeatingCoolingState.COOL),
            ("Auto", TargetHeatingCoolingState.AUTO),
        ],
    )
    def test_mode_round_trip(self, mode, state):
        assert mode_to_target_state(mode) == state
        assert target_state_to_mode(state) == mode

    def test_unknown_mode(self):
        """Test an unknown remote mode has no target state."""
        assert mode_to_target_state("EmergencyHeat") is None

    def test_current_state_from_operation(self):
        assert current_state_from_operation("Heat") == CurrentHeatingCoolingState.HEAT
        assert current_state_from_operation("Cool") == CurrentHeatingCoolingState.COOL
        assert current_state_from_operation("EquipmentOff") == CurrentHeatingCoolingState.OFF
        assert current_state_from_operation(None) == CurrentHeatingCoolingState.OFF

    def test_allowed_target_states_order(self):
        """Test allowed states are emitted as Cool, Heat, Off, Auto."""
        assert compute_allowed_target_states(["Heat", "Off"]) == [
            TargetHeatingCoolingState.HEAT,
            TargetHeatingCoolingState.OFF,
        ]
        assert compute_allowed_target_states(["Auto", "Off", "Heat", "Cool"]) == [
            TargetHeatingCoolingState.COOL,
            TargetHeatingCoolingState.HEAT,
            TargetHeatingCoolingState.OFF,
            TargetHeatingCoolingState.AUTO,
        ]

    def test_allowed_target_states_ignores_unknown(self):
        assert compute_allowed_target_states(["EmergencyHeat", "Cool"]) == [TargetHeatingCoolingState.COOL]


class TestFanTranslation:
    """Test fan mode mapping."""

    @pytest.mark.parametrize(
        ("mode", "target", "active"),
        [
            ("Auto", TargetFanState.AUTO, Active.INACTIVE),
            ("On", TargetFanState.MANUAL, Active.ACTIVE),
            ("Circulate", TargetFanState.MANUAL, Active.INACTIVE),
        ],
    )
    def test_fan_mode_to_characteristics(self, mode, target, active):
        assert fan_mode_to_characteristics(mode) == (target, active)

    def test_unknown_fan_mode(self):
        assert fan_mode_to_characteristics("Follow Schedule") is None

    def test_characteristics_to_fan_mode(self):
        """Test Auto wins regardless of the active state."""
        assert characteristics_to_fan_mode(TargetFanState.AUTO, Active.ACTIVE) == "Auto"
        assert characteristics_to_fan_mode(TargetFanState.AUTO, Active.INACTIVE) == "Auto"
        assert characteristics_to_fan_mode(TargetFanState.MANUAL, Active.ACTIVE) == "On"
        assert characteristics_to_fan_mode(TargetFanState.MANUAL, Active.INACTIVE) == "Circulate"
