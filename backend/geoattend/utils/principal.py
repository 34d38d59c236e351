"""Authenticated identities.

A principal is built once from the verified claim set of a request's token
and handed to the view function. Each variant only carries the fields its
role has.
"""
from dataclasses import dataclass
from typing import Mapping, Union

from geoattend.utils.errors import Unauthorized

STUDENT = 'student'
LECTURER = 'lecturer'
ADMIN = 'admin'


@dataclass(frozen=True)
class StudentPrincipal:
    id: int
    mat_no: str
    role: str = STUDENT


@dataclass(frozen=True)
class LecturerPrincipal:
    id: int
    email: str
    role: str = LECTURER


@dataclass(frozen=True)
class AdminPrincipal:
    id: int
    email: str
    role: str = ADMIN


Principal = Union[StudentPrincipal, LecturerPrincipal, AdminPrincipal]


def token_claims(principal: Principal) -> dict:
    """Additional claims stored in the access token for ``principal``."""
    if isinstance(principal, StudentPrincipal):
        return {'type': STUDENT, 'matNo': principal.mat_no}
    return {'type': principal.role, 'email': principal.email}


def principal_from_claims(claims: Mapping) -> Principal:
    """Build the principal for a decoded claim set."""
    try:
        user_id = int(claims['sub'])
    except (KeyError, TypeError, ValueError):
        raise Unauthorized("Invalid token")

    user_type = claims.get('type')
    if user_type == STUDENT and claims.get('matNo'):
        return StudentPrincipal(id=user_id, mat_no=claims['matNo'])
    if user_type == LECTURER and claims.get('email'):
        return LecturerPrincipal(id=user_id, email=claims['email'])
    if user_type == ADMIN and claims.get('email'):
        return AdminPrincipal(id=user_id, email=claims['email'])

    raise Unauthorized("Invalid token")
