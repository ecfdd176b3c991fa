# resideo_api.py
import asyncio
import logging

import aiohttp

from .api_decorators import api_get, api_post
from .constants import (
    API_BASE_URL,
    DEFAULT_READ_TIMEOUT,
    DEFAULT_WRITE_TIMEOUT,
    MAX_RETRIES,
    TOKEN_URL,
)
from .infrastructure.errors import ResideoAuthError
from .models import (
    FanChangeableValues,
    FanChangeRequest,
    ThermostatChangeRequest,
    ThermostatDevice,
)

_LOGGER = logging.getLogger(__name__)


class ResideoAPI:
    """Async client for the Honeywell Home (Resideo) cloud API."""

    def __init__(
        self,
        consumer_key: str,
        consumer_secret: str,
        access_token: str | None = None,
        refresh_token: str | None = None,
        session: aiohttp.ClientSession | None = None,
        base_url: str = API_BASE_URL,
        read_timeout: int = DEFAULT_READ_TIMEOUT,
        write_timeout: int = DEFAULT_WRITE_TIMEOUT,
        max_retries: int = MAX_RETRIES,
    ):
        self.base_url = base_url.rstrip("/")
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout
        self.max_retries = max_retries
        self._access_token = access_token
        self._refresh_token = refresh_token
        self._session = session
        self._owns_session = session is None
        self._request_lock = asyncio.Lock()
        self._token_lock = asyncio.Lock()

    @property
    def access_token(self) -> str | None:
        return self._access_token

    @property
    def refresh_token(self) -> str | None:
        return self._refresh_token

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session.

        Note: Timeouts are set per-request, not on the session level,
        to allow different timeouts for read vs write operations.
        """
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self):
        """Close the aiohttp session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    def _auth_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        return headers

    def _build_params(self, location_id) -> dict[str, str]:
        return {"apikey": self.consumer_key, "locationId": str(location_id)}

    # --- Token Management ---

    async def async_refresh_access_token(self) -> None:
        """Exchange the refresh token for a new access token."""
        if not self._refresh_token:
            raise ResideoAuthError("No refresh token available")

        async with self._token_lock:
            session = await self._get_session()
            data = {
                "grant_type": "refresh_token",
                "refresh_token": self._refresh_token,
            }
            auth = aiohttp.BasicAuth(self.consumer_key, self.consumer_secret)
            timeout = aiohttp.ClientTimeout(total=self.read_timeout)
            try:
                async with session.post(TOKEN_URL, data=data, auth=auth, timeout=timeout) as resp:
                    if resp.status != 200:
                        text = await resp.text()
                        raise ResideoAuthError(f"Token refresh failed ({resp.status}): {text}")
                    result = await resp.json()
            except (TimeoutError, aiohttp.ClientError, ValueError) as err:
                raise ResideoAuthError(f"Token refresh failed: {err}") from err

            access_token = result.get("access_token") if isinstance(result, dict) else None
            if not isinstance(access_token, str) or not access_token:
                raise ResideoAuthError("Token response has no access token")

            self._access_token = access_token
            # Honeywell only rotates the refresh token occasionally
            self._refresh_token = result.get("refresh_token") or self._refresh_token
            _LOGGER.debug("Access token refreshed")

    # --- Generic transport ---

    @api_get("{path}")
    async def async_get(self, response_data, path: str, location_id: str):
        """GET a device resource relative to the base URL."""
        return response_data

    @api_post("{path}")
    async def async_post(self, path: str, payload: dict, location_id: str) -> dict:
        """POST a payload to a device resource relative to the base URL."""
        return payload

    # --- Thermostat endpoints ---

    @api_get("/thermostats/{device_id}")
    async def async_get_thermostat(self, response_data, device_id: str, location_id: str) -> ThermostatDevice:
        return ThermostatDevice.from_api(response_data)

    @api_get("/thermostats/{device_id}/fan")
    async def async_get_fan(self, response_data, device_id: str, location_id: str) -> FanChangeableValues:
        return FanChangeableValues.from_api(response_data)

    @api_post("/thermostats/{device_id}")
    async def async_set_thermostat(
        self, device_id: str, location_id: str, request: ThermostatChangeRequest
    ) -> dict:
        return request.to_api_payload()

    @api_post("/thermostats/{device_id}/fan")
    async def async_set_fan(self, device_id: str, location_id: str, request: FanChangeRequest) -> dict:
        return request.to_api_payload()
