"""Short-lived, location-tagged attendance codes."""
from datetime import datetime

from geoattend import db
from geoattend.models.base import BaseModel


class AttendanceCode(BaseModel):
    """Code a lecturer hands out for students to redeem.

    ``code`` is not unique across time; only one row per code string may be
    unexpired at once, which issuance enforces.
    """

    __tablename__ = 'attendance_codes'
    __table_args__ = (
        db.Index('ix_attendance_codes_code_expires', 'code', 'expires_at'),
    )

    code = db.Column(db.String(16), nullable=False)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), nullable=False)
    lecturer_lat = db.Column(db.Float, nullable=False)
    lecturer_lon = db.Column(db.Float, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)

    def is_expired(self, now: datetime) -> bool:
        """A code is dead at and after its expiry instant."""
        return now >= self.expires_at

    def seconds_left(self, now: datetime) -> int:
        return int((self.expires_at - now).total_seconds())

    def __repr__(self) -> str:
        return f'<AttendanceCode {self.code}>'
