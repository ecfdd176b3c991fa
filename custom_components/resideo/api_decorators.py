# api_decorators.py
"""Decorators for unified API method patterns.

These decorators provide a clean, consistent way to define API endpoints
by handling common patterns like locking, session management, bearer
authentication, query parameters and error translation.

Usage:
    @api_get("/thermostats/{device_id}")
    async def async_get_thermostat(self, response_data, device_id: str, location_id: str):
        return ThermostatDevice.from_api(response_data)

    @api_post("/thermostats/{device_id}/fan")
    async def async_set_fan(self, device_id: str, location_id: str, request: FanChangeRequest) -> dict:
        return request.to_api_payload()

Every decorated method takes a ``location_id`` argument, which is sent as the
``locationId`` query parameter together with the consumer key.
"""

import asyncio
import functools
import inspect
import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from .infrastructure.errors import (
    ResideoAPIError,
    ResideoConnectionError,
    ResideoTimeoutError,
)

_LOGGER = logging.getLogger(__name__)


def _bind_url_kwargs(func: Callable, skip: int, args: tuple, kwargs: dict) -> dict[str, Any]:
    """Bind positional arguments to their parameter names for URL formatting."""
    params = list(inspect.signature(func).parameters.keys())
    url_kwargs = dict(kwargs)
    for i, arg in enumerate(args):
        if i + skip < len(params):
            url_kwargs[params[i + skip]] = arg
    return url_kwargs


def _translate_error(err: Exception, method: str, url: str) -> Exception:
    """Map transport exceptions onto the integration's error hierarchy."""
    if isinstance(err, TimeoutError):
        return ResideoTimeoutError(f"{method} {url} timed out")
    if isinstance(err, aiohttp.ClientResponseError):
        return ResideoAPIError(f"{method} {url} failed ({err.status}): {err.message}")
    if isinstance(err, ValueError):
        return ResideoAPIError(f"{method} {url} returned an unreadable body: {err}")
    return ResideoConnectionError(f"{method} {url} failed: {err}")


def api_get(url_template: str):
    """Decorator for GET API endpoints.

    Handles:
    - Request locking
    - Session management
    - Bearer token and query parameters
    - Error translation to ResideoError subclasses

    Args:
        url_template: Path template relative to the API base URL, with
                      placeholders for any argument of the decorated method.

    The decorated function receives the parsed JSON response as its first
    argument after ``self``.
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            # Skip 'self' and 'response_data'
            url_kwargs = _bind_url_kwargs(func, 2, args, kwargs)
            url = self.base_url + url_template.format(**url_kwargs)
            params = self._build_params(url_kwargs["location_id"])

            try:
                async with self._request_lock:
                    timeout = aiohttp.ClientTimeout(total=self.read_timeout)
                    session = await self._get_session()
                    async with session.get(
                        url, params=params, headers=self._auth_headers(), timeout=timeout
                    ) as response:
                        response.raise_for_status()
                        data = await response.json()
            except (TimeoutError, aiohttp.ClientError, ValueError) as e:
                raise _translate_error(e, "GET", url) from e

            _LOGGER.debug("API GET %s returned data: %s", url, data)

            return await func(self, data, *args, **kwargs)

        return wrapper

    return decorator


def api_post(url_template: str):
    """Decorator for POST API endpoints.

    Handles:
    - Request locking
    - Session management
    - Bearer token and query parameters
    - Retry with exponential backoff on transient failures
    - Error translation to ResideoError subclasses

    The decorated function should build and return the payload dict.
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            # Skip 'self'
            url_kwargs = _bind_url_kwargs(func, 1, args, kwargs)
            url = self.base_url + url_template.format(**url_kwargs)
            params = self._build_params(url_kwargs["location_id"])

            payload = await func(self, *args, **kwargs)

            async with self._request_lock:
                last_exception = None
                for attempt in range(self.max_retries + 1):
                    try:
                        timeout = aiohttp.ClientTimeout(total=self.write_timeout)
                        session = await self._get_session()
                        _LOGGER.debug(
                            "POST attempt %d/%d, timeout=%ds, payload=%s",
                            attempt + 1,
                            self.max_retries + 1,
                            self.write_timeout,
                            payload,
                        )
                        async with session.post(
                            url, json=payload, params=params, headers=self._auth_headers(), timeout=timeout
                        ) as response:
                            response.raise_for_status()
                            _LOGGER.debug("Update OK status=%d", response.status)
                            return True

                    except aiohttp.ClientResponseError as e:
                        # The API rejected the request; retrying won't help
                        raise _translate_error(e, "POST", url) from e
                    except (TimeoutError, aiohttp.ClientError) as e:
                        last_exception = e
                        if attempt < self.max_retries:
                            wait_time = 2 ** (attempt + 1)
                            _LOGGER.warning(
                                "Update failed (attempt %d/%d), retrying in %ds: %s: %s",
                                attempt + 1,
                                self.max_retries + 1,
                                wait_time,
                                type(e).__name__,
                                e,
                            )
                            await asyncio.sleep(wait_time)

                _LOGGER.error(
                    "Update failed after %d attempts: %s",
                    self.max_retries + 1,
                    type(last_exception).__name__,
                )
                raise _translate_error(last_exception, "POST", url) from last_exception

        return wrapper

    return decorator
