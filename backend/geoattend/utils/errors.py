"""Application error taxonomy.

Every error carries the HTTP status it maps to. Services raise these and the
handler registered in the application factory renders them with the standard
error envelope.
"""
import math
from typing import Optional


class APIError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = 400
    default_message = 'Bad request'

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code

    def __str__(self) -> str:
        return self.message


class ValidationError(APIError):
    """Missing or malformed input."""
    status_code = 400
    default_message = 'Invalid input'


class Unauthorized(APIError):
    status_code = 401
    default_message = 'Invalid credentials'


class Forbidden(APIError):
    status_code = 403
    default_message = 'Access denied'


class NotFound(APIError):
    status_code = 404
    default_message = 'Not found'


class Conflict(APIError):
    status_code = 409
    default_message = 'Resource already exists'


class AlreadyMarked(Conflict):
    default_message = 'Attendance already marked for this course today'


class InvalidOrExpiredCode(APIError):
    status_code = 400
    default_message = 'Invalid or expired attendance code'


class TooFarFromClass(APIError):
    """Student is outside the geofence around the issuing lecturer."""

    status_code = 403

    def __init__(self, distance: float, max_distance: float):
        self.distance = distance
        self.max_distance = max_distance
        if math.isfinite(distance):
            where = f"{round(distance)}m away"
        else:
            where = "location unavailable"
        super().__init__(
            f"You are too far from the class location ({where}). "
            f"Maximum allowed distance: {round(max_distance)}m"
        )


class InfrastructureError(APIError):
    status_code = 500
    default_message = 'An internal server error occurred'
