"""Custom exceptions for the Resideo integration."""


class ResideoError(Exception):
    """Base exception for Resideo."""


class ResideoConnectionError(ResideoError):
    """Raised when the Honeywell Home API cannot be reached."""


class ResideoAPIError(ResideoError):
    """Raised when the API returns an error."""


class ResideoTimeoutError(ResideoError):
    """Raised when request times out."""


class ResideoAuthError(ResideoError):
    """Raised when the access token cannot be obtained or refreshed."""


class ResideoValidationError(ResideoError):
    """Raised when a payload from the API fails validation."""
