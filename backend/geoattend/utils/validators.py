"""Validation utilities for the application."""
import math
import re
from datetime import date, datetime
from typing import Any, Dict, Iterable, Optional

from geoattend.utils.errors import ValidationError

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


class Validator:
    """Validation helper class.

    Each ``require_*`` method raises :class:`ValidationError` on bad input and
    returns the cleaned value otherwise.
    """

    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format."""
        if not email:
            return False
        return bool(EMAIL_PATTERN.match(email))

    @staticmethod
    def require_object(data: Any) -> Dict[str, Any]:
        if data is None:
            raise ValidationError("Request body must be JSON")
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data

    @staticmethod
    def require_string(value: Any, field: str) -> str:
        if not isinstance(value, str):
            raise ValidationError(f"{field} must be a string")
        return value

    @staticmethod
    def require_fields(data: Optional[Dict], required_fields: Iterable[str]) -> Dict[str, Any]:
        """Reject the first field that is absent or blank."""
        Validator.require_object(data)

        for field in required_fields:
            value = data.get(field)
            if value is None or str(value).strip() == '':
                raise ValidationError(f"{field} is required")

        return data

    @staticmethod
    def require_email(email: str) -> str:
        if email is not None and not isinstance(email, str):
            raise ValidationError("Invalid email format")
        email = (email or '').strip().lower()
        if not Validator.validate_email(email):
            raise ValidationError("Invalid email format")
        return email

    @staticmethod
    def require_password(password: str) -> str:
        if not password:
            raise ValidationError("Password is required")
        Validator.require_string(password, 'password')
        if len(password) < 6:
            raise ValidationError("Password must be at least 6 characters long")
        if len(password) > 128:
            raise ValidationError("Password is too long")
        return password

    @staticmethod
    def require_coordinate(value: Any, field: str, limit: float) -> float:
        """Parse a latitude/longitude value, bounded by +/- ``limit`` degrees."""
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{field} must be a number")

        if not math.isfinite(number) or abs(number) > limit:
            raise ValidationError(f"{field} is out of range")

        return number

    @staticmethod
    def require_location(data: Dict, lat_field: str = 'lat', lon_field: str = 'lon') -> tuple:
        return (
            Validator.require_coordinate(data.get(lat_field), lat_field, 90.0),
            Validator.require_coordinate(data.get(lon_field), lon_field, 180.0),
        )

    @staticmethod
    def require_int(value: Any, field: str) -> int:
        try:
            return int(str(value).strip())
        except (TypeError, ValueError):
            raise ValidationError(f"{field} must be an integer")

    @staticmethod
    def require_date(value: str) -> date:
        try:
            return datetime.strptime(value, '%Y-%m-%d').date()
        except (TypeError, ValueError):
            raise ValidationError("Invalid date format. Use YYYY-MM-DD")
