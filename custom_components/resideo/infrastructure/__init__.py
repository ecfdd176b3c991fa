"""Infrastructure layer for the Resideo integration.

This package contains core infrastructure components:
- Error definitions
"""

from .errors import (
    ResideoAPIError,
    ResideoAuthError,
    ResideoConnectionError,
    ResideoError,
    ResideoTimeoutError,
    ResideoValidationError,
)

__all__ = [
    "ResideoError",
    "ResideoConnectionError",
    "ResideoAPIError",
    "ResideoTimeoutError",
    "ResideoAuthError",
    "ResideoValidationError",
]
