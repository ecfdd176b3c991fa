"""Data models for the Resideo integration.

This module provides Pydantic models for the Honeywell Home device resources,
the outgoing change requests, the local characteristic state and the static
per-device options.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from .constants import (
    DEFAULT_REFRESH_RATE,
    Active,
    LoggingMode,
    TargetFanState,
)
from .infrastructure.errors import ResideoValidationError


# Base model for all Resideo data models
class ResideoModel(BaseModel):
    """Base model for all Resideo data structures.

    Provides common configuration for all Pydantic models used in the
    Resideo integration.
    """

    model_config = {"validate_assignment": True, "populate_by_name": True}


class ChangeableValues(ResideoModel):
    """User-adjustable settings of a thermostat."""

    model_config = {"frozen": True, "extra": "allow"}

    mode: str = Field(..., description="Requested mode (Off, Heat, Cool, Auto)")
    heat_setpoint: float | None = Field(default=None, alias="heatSetpoint")
    cool_setpoint: float | None = Field(default=None, alias="coolSetpoint")
    thermostat_setpoint_status: str | None = Field(default=None, alias="thermostatSetpointStatus")


class OperationStatus(ResideoModel):
    """What the hardware is actually doing."""

    model_config = {"frozen": True, "extra": "allow"}

    mode: str = Field(default="Off", description="Operating mode (Off, Heat, Cool)")


class DeviceSettings(ResideoModel):
    """Capability settings of a thermostat."""

    model_config = {"frozen": True, "extra": "allow"}

    fan: dict[str, Any] | None = Field(default=None, description="Fan capability, present if supported")


class ThermostatDevice(ResideoModel):
    """Remote device snapshot returned by ``/thermostats/{deviceID}``.

    Replaced wholesale on every successful fetch. Temperatures and setpoints
    are in the device's own display unit.

    Example:
        >>> device = ThermostatDevice.from_api({
        ...     "deviceID": "TCC-1",
        ...     "units": "Fahrenheit",
        ...     "indoorTemperature": 70,
        ...     "changeableValues": {"mode": "Heat", "heatSetpoint": 68},
        ... })
        >>> device.changeable_values.heat_setpoint
        68.0
    """

    model_config = {"frozen": True, "extra": "allow"}

    device_id: str = Field(..., min_length=1, alias="deviceID")
    name: str = Field(default="Thermostat")
    device_class: str = Field(default="Thermostat", alias="deviceClass")
    device_model: str | None = Field(default=None, alias="deviceModel")
    thermostat_version: str | None = Field(default=None, alias="thermostatVersion")
    units: Literal["Celsius", "Fahrenheit"] = Field(default="Fahrenheit")
    indoor_temperature: float | None = Field(default=None, alias="indoorTemperature")
    indoor_humidity: float | None = Field(default=None, alias="indoorHumidity")
    allowed_modes: list[str] = Field(default_factory=list, alias="allowedModes")
    min_heat_setpoint: float | None = Field(default=None, alias="minHeatSetpoint")
    max_heat_setpoint: float | None = Field(default=None, alias="maxHeatSetpoint")
    min_cool_setpoint: float | None = Field(default=None, alias="minCoolSetpoint")
    max_cool_setpoint: float | None = Field(default=None, alias="maxCoolSetpoint")
    changeable_values: ChangeableValues = Field(..., alias="changeableValues")
    operation_status: OperationStatus = Field(default_factory=OperationStatus, alias="operationStatus")
    settings: DeviceSettings = Field(default_factory=DeviceSettings)

    @property
    def has_fan(self) -> bool:
        """Check if the device reports fan support."""
        return bool(self.settings.fan)

    @property
    def display_name(self) -> str:
        """Name shown for the accessory."""
        return f"{self.name} {self.device_class}"

    @classmethod
    def from_api(cls, response_data: dict) -> ThermostatDevice:
        """Build a snapshot from the raw API payload."""
        try:
            return cls.model_validate(response_data)
        except ValidationError as err:
            raise ResideoValidationError(f"Invalid thermostat payload: {err}") from err


class FanChangeableValues(ResideoModel):
    """Fan sub-resource returned by ``/thermostats/{deviceID}/fan``."""

    model_config = {"frozen": True, "extra": "allow"}

    mode: Literal["Auto", "On", "Circulate"] = Field(..., description="Fan mode")

    @classmethod
    def from_api(cls, response_data: dict) -> FanChangeableValues:
        """Build a fan sub-resource from the raw API payload."""
        try:
            return cls.model_validate(response_data)
        except ValidationError as err:
            raise ResideoValidationError(f"Invalid fan payload: {err}") from err


class ThermostatChangeRequest(ResideoModel):
    """Outgoing thermostat write, setpoints in the remote unit."""

    model_config = {"frozen": True}

    mode: str
    thermostat_setpoint_status: str | None = Field(default=None, alias="thermostatSetpointStatus")
    heat_setpoint: float | None = Field(default=None, alias="heatSetpoint")
    cool_setpoint: float | None = Field(default=None, alias="coolSetpoint")

    def to_api_payload(self) -> dict[str, Any]:
        """Convert to the JSON body expected by the API."""
        return self.model_dump(by_alias=True, exclude_none=True)


class FanChangeRequest(ResideoModel):
    """Outgoing fan write."""

    model_config = {"frozen": True}

    mode: Literal["Auto", "On", "Circulate"]

    def to_api_payload(self) -> dict[str, Any]:
        """Convert to the JSON body expected by the API."""
        return self.model_dump(by_alias=True)


class CharacteristicState(ResideoModel):
    """Local mirror of every value the host can observe.

    Temperatures are Celsius-normalized. ``None`` means the value is not
    known yet.
    """

    current_temperature: float | None = None
    target_temperature: float | None = None
    current_heating_cooling_state: int | None = None
    target_heating_cooling_state: int | None = None
    heating_threshold_temperature: float | None = None
    cooling_threshold_temperature: float | None = None
    current_relative_humidity: float | None = None
    temperature_display_units: int | None = None
    active: int = Active.INACTIVE
    target_fan_state: int = TargetFanState.MANUAL


class ThermostatOptions(ResideoModel):
    """Static configuration of one controller, read once at construction."""

    model_config = {"frozen": True}

    location_id: str = Field(..., min_length=1)
    refresh_rate: float = Field(default=DEFAULT_REFRESH_RATE, gt=0)
    hide_fan: bool = False
    thermostat_setpoint_status: str | None = None
    logging: LoggingMode = LoggingMode.STANDARD
