"""Custom decorators for authorization."""
from functools import wraps

from flask import current_app
from flask_jwt_extended import get_jwt, verify_jwt_in_request

from geoattend.utils.errors import Forbidden
from geoattend.utils.principal import ADMIN, LECTURER, STUDENT, principal_from_claims


def role_required(*roles):
    """Require a valid token whose role is one of ``roles``.

    The decorated view receives the caller's principal as its first argument.
    An empty ``roles`` accepts any authenticated user.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            verify_jwt_in_request()
            principal = principal_from_claims(get_jwt())

            if roles and principal.role not in roles:
                current_app.logger.warning(
                    'Access denied for %s %s on %s', principal.role, principal.id, f.__name__
                )
                raise Forbidden(f"Access denied: {' or '.join(r.title() + 's' for r in roles)} only")

            return f(principal, *args, **kwargs)
        return decorated_function
    return decorator


def login_required(f):
    """Decorator to require any authenticated user."""
    return role_required()(f)


def student_required(f):
    """Decorator to require student role."""
    return role_required(STUDENT)(f)


def lecturer_required(f):
    """Decorator to require lecturer role."""
    return role_required(LECTURER)(f)


def admin_required(f):
    """Decorator to require admin role."""
    return role_required(ADMIN)(f)
