"""Standardized exception hierarchy for the ride service."""

from typing import Any


class RideServiceError(Exception):
    """Base exception for all ride service errors."""

    code = "ride_service_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class PermanentError(RideServiceError):
    """Errors that will not succeed on retry."""

    code = "permanent_error"


class ValidationError(PermanentError):
    """Missing or malformed input."""

    code = "validation_error"


class NotFoundError(PermanentError):
    """Referenced ride, driver or payment does not exist."""

    code = "not_found"


class NoDriverAvailableError(NotFoundError):
    """No driver could be matched to the ride."""

    code = "no_driver_available"


class AuthorizationError(PermanentError):
    """Authenticated user does not own the resource."""

    code = "forbidden"


class InvalidStateError(PermanentError):
    """Operation is not legal in the ride's current status."""

    code = "invalid_state"


class DuplicateIdError(PermanentError):
    """A record with the same identifier already exists."""

    code = "duplicate_id"


class ConfigurationError(PermanentError):
    """Missing or invalid configuration."""

    code = "configuration_error"
