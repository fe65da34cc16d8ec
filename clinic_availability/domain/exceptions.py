"""
Domain-specific exception hierarchy for the availability engine.
"""


class ClinicAvailabilityError(Exception):
    """Base class for all application-level errors."""


class FormatError(ClinicAvailabilityError):
    """Raised when a record does not match any recognised shape."""


class ConfigurationError(ClinicAvailabilityError, ValueError):
    """Raised when a schedule configuration value is invalid."""


class ScheduleNotFoundError(ClinicAvailabilityError):
    """Raised when no schedule document exists for a professional."""


class InvalidProfessionalIdError(ClinicAvailabilityError):
    """Raised when a professional id cannot be used as a storage key."""


class RangeTooLargeError(ClinicAvailabilityError):
    """Raised when a requested date range exceeds the configured bound."""
