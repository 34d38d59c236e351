"""Attendance ledger."""
from geoattend import db
from geoattend.models.base import BaseModel


class AttendanceRecord(BaseModel):
    """One redemption: a student present in a course on a civil day.

    Records are append-only. ``attendance_date`` is the UTC calendar day of
    ``marked_at``; the unique constraint over it is what keeps concurrent
    redemptions from both landing.
    """

    __tablename__ = 'attendance_records'
    __table_args__ = (
        db.UniqueConstraint(
            'student_id', 'course_id', 'attendance_date', name='uq_attendance_student_course_day'
        ),
    )

    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=False, index=True)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), nullable=False, index=True)
    marked_at = db.Column(db.DateTime, nullable=False)
    attendance_date = db.Column(db.Date, nullable=False)

    # Distance from the issuing lecturer at redemption time
    distance_m = db.Column(db.Float, nullable=True)

    def __repr__(self):
        return f'<AttendanceRecord {self.student_id}-{self.course_id}-{self.attendance_date}>'
