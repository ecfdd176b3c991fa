"""Per-device logging for Resideo accessories."""

from __future__ import annotations

import logging
from typing import Any

from .constants import LoggingMode


class DeviceLogger(logging.LoggerAdapter):
    """Logger adapter that prefixes messages with the accessory name.

    The logging mode of the device decides what is emitted:

    - ``standard``: messages keep their level.
    - ``debug``: debug messages are raised to INFO and tagged ``[DEBUG]`` so
      they show up without changing the global log level.
    - ``none``: nothing is emitted for this device.
    """

    def __init__(self, logger: logging.Logger, accessory_name: str, mode: LoggingMode = LoggingMode.STANDARD):
        super().__init__(logger, {"accessory": accessory_name})
        self.mode = LoggingMode(mode)

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        return f"{self.extra['accessory']}: {msg}", kwargs

    def isEnabledFor(self, level: int) -> bool:
        if self.mode == LoggingMode.NONE:
            return False
        return super().isEnabledFor(level)

    def debug(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        if self.mode == LoggingMode.DEBUG:
            self.log(logging.INFO, f"[DEBUG] {msg}", *args, **kwargs)
        else:
            self.log(logging.DEBUG, msg, *args, **kwargs)
