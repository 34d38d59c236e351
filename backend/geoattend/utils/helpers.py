"""Helper functions for the application."""
from datetime import date, datetime, timezone
from typing import Any, Optional

from flask import jsonify


def utcnow() -> datetime:
    """Current instant as a naive UTC datetime, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat_utc(value: Optional[datetime]) -> Optional[str]:
    """Serialise a naive UTC datetime as ISO-8601 with a ``Z`` suffix."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec='seconds') + 'Z'


def isoformat_date(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    # SQLite returns DATE() results as plain strings
    return str(value)


def handle_error(error, status_code: int, detail: Optional[str] = None):
    """Handle application errors with consistent format."""
    body = {
        'error': True,
        'message': str(error),
        'status_code': status_code
    }
    if detail:
        body['detail'] = detail

    return jsonify(body), status_code


def success_response(data: Any = None, message: str = "Success", status_code: int = 200):
    """Return consistent success response."""
    response = {
        'error': False,
        'message': message
    }

    if data is not None:
        response['data'] = data

    return jsonify(response), status_code
