import logging
from datetime import datetime, timedelta

import voluptuous as vol
from homeassistant.const import EVENT_HOMEASSISTANT_STOP
from homeassistant.core import Event, HomeAssistant
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers import discovery
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.helpers.event import async_track_time_interval
from homeassistant.helpers.typing import ConfigType

from .constants import (
    CONF_ACCESS_TOKEN,
    CONF_CONSUMER_KEY,
    CONF_CONSUMER_SECRET,
    CONF_DEVICE_ID,
    CONF_DEVICES,
    CONF_HIDE_FAN,
    CONF_LOCATION_ID,
    CONF_LOGGING,
    CONF_REFRESH_RATE,
    CONF_REFRESH_TOKEN,
    CONF_SETPOINT_STATUS,
    CONF_THERMOSTAT,
    DEFAULT_REFRESH_RATE,
    DEFAULT_SETPOINT_STATUS,
    DOMAIN,
    MIN_REFRESH_RATE,
    PLATFORMS,
    SETPOINT_STATUSES,
    LoggingMode,
)
from .entity import ResideoAccessory
from .infrastructure.errors import ResideoError
from .models import ThermostatOptions
from .resideo_api import ResideoAPI
from .sync_controller import ThermostatSyncController

_LOGGER = logging.getLogger(__name__)

REFRESH_RATE_SCHEMA = vol.All(vol.Coerce(int), vol.Range(min=MIN_REFRESH_RATE))
LOGGING_SCHEMA = vol.In([mode.value for mode in LoggingMode])

THERMOSTAT_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_HIDE_FAN, default=False): cv.boolean,
        vol.Optional(CONF_SETPOINT_STATUS, default=DEFAULT_SETPOINT_STATUS): vol.In(SETPOINT_STATUSES),
    }
)

DEVICE_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_DEVICE_ID): cv.string,
        vol.Required(CONF_LOCATION_ID): cv.string,
        vol.Optional(CONF_REFRESH_RATE): REFRESH_RATE_SCHEMA,
        vol.Optional(CONF_LOGGING): LOGGING_SCHEMA,
    }
)

CONFIG_SCHEMA = vol.Schema(
    {
        DOMAIN: vol.Schema(
            {
                vol.Required(CONF_CONSUMER_KEY): cv.string,
                vol.Required(CONF_CONSUMER_SECRET): cv.string,
                vol.Optional(CONF_ACCESS_TOKEN): cv.string,
                vol.Required(CONF_REFRESH_TOKEN): cv.string,
                vol.Optional(CONF_REFRESH_RATE, default=DEFAULT_REFRESH_RATE): REFRESH_RATE_SCHEMA,
                vol.Optional(CONF_LOGGING, default=LoggingMode.STANDARD.value): LOGGING_SCHEMA,
                vol.Optional(CONF_THERMOSTAT, default={}): THERMOSTAT_SCHEMA,
                vol.Required(CONF_DEVICES): vol.All(cv.ensure_list, [DEVICE_SCHEMA]),
            }
        )
    },
    extra=vol.ALLOW_EXTRA,
)


def build_thermostat_options(conf: dict, device_conf: dict) -> ThermostatOptions:
    """Merge platform and per-device settings; the device entry wins."""
    thermostat_conf = conf.get(CONF_THERMOSTAT, {})
    return ThermostatOptions(
        location_id=device_conf[CONF_LOCATION_ID],
        refresh_rate=device_conf.get(CONF_REFRESH_RATE, conf.get(CONF_REFRESH_RATE, DEFAULT_REFRESH_RATE)),
        hide_fan=thermostat_conf.get(CONF_HIDE_FAN, False),
        thermostat_setpoint_status=thermostat_conf.get(CONF_SETPOINT_STATUS, DEFAULT_SETPOINT_STATUS),
        logging=device_conf.get(CONF_LOGGING, conf.get(CONF_LOGGING, LoggingMode.STANDARD)),
    )


def _async_track_refresh(hass: HomeAssistant, controller: ThermostatSyncController, refresh_rate: float):
    """Schedule the controller's refresh ticks on the Home Assistant clock."""

    async def _async_refresh(now: datetime) -> None:
        await controller.async_refresh_tick()

    return async_track_time_interval(
        hass,
        _async_refresh,
        timedelta(seconds=refresh_rate),
        name=f"{DOMAIN} refresh {controller.device_id}",
    )


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    if DOMAIN not in config:
        return True

    conf = config[DOMAIN]
    api = ResideoAPI(
        conf[CONF_CONSUMER_KEY],
        conf[CONF_CONSUMER_SECRET],
        access_token=conf.get(CONF_ACCESS_TOKEN),
        refresh_token=conf[CONF_REFRESH_TOKEN],
        session=async_get_clientsession(hass),
    )

    if not api.access_token:
        try:
            await api.async_refresh_access_token()
        except ResideoError as e:
            _LOGGER.error("Could not obtain an access token: %s", e)
            return False

    thermostats = []
    for device_conf in conf[CONF_DEVICES]:
        device_id = device_conf[CONF_DEVICE_ID]
        options = build_thermostat_options(conf, device_conf)
        try:
            device = await api.async_get_thermostat(device_id, options.location_id)
        except ResideoError as e:
            _LOGGER.error("Failed to load thermostat %s: %s", device_id, e)
            continue

        accessory = ResideoAccessory(device.display_name)
        controller = ThermostatSyncController(api, accessory, device, options)
        thermostats.append(
            {
                "controller": controller,
                "accessory": accessory,
                "cancel_refresh": _async_track_refresh(hass, controller, options.refresh_rate),
            }
        )
        _LOGGER.info("Adding thermostat %s (%s)", device.display_name, device_id)

    hass.data[DOMAIN] = {"api": api, "thermostats": thermostats}

    for platform in PLATFORMS:
        hass.async_create_task(discovery.async_load_platform(hass, platform, DOMAIN, {}, config))

    async def _async_shutdown(event: Event) -> None:
        for thermostat in thermostats:
            thermostat["cancel_refresh"]()
            await thermostat["controller"].async_stop()
        await api.close()

    hass.bus.async_listen_once(EVENT_HOMEASSISTANT_STOP, _async_shutdown)
    return True
