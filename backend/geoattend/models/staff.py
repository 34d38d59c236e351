"""Password-authenticated staff accounts: lecturers and admins."""
from werkzeug.security import check_password_hash, generate_password_hash

from geoattend import db
from geoattend.models.base import BaseModel


class PasswordMixin:
    """Password hashing for staff accounts."""

    def set_password(self, password: str) -> None:
        """Set user password with hashing."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Check if provided password matches user's password."""
        return check_password_hash(self.password_hash, password)


class Lecturer(PasswordMixin, BaseModel):
    """Lecturer who owns courses and issues attendance codes."""

    __tablename__ = 'lecturers'

    staff_id = db.Column(db.String(50), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    phone = db.Column(db.String(20), nullable=True)
    password_hash = db.Column(db.String(255), nullable=False)

    courses = db.relationship('Course', backref='lecturer', lazy='dynamic')

    def to_dict(self, exclude: list = None) -> dict:
        exclude = (exclude or []) + ['password_hash']
        return super().to_dict(exclude=exclude)

    def __repr__(self) -> str:
        return f'<Lecturer {self.email}>'


class Admin(PasswordMixin, BaseModel):
    __tablename__ = 'admins'

    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    def to_dict(self, exclude: list = None) -> dict:
        exclude = (exclude or []) + ['password_hash']
        return super().to_dict(exclude=exclude)

    def __repr__(self) -> str:
        return f'<Admin {self.email}>'
