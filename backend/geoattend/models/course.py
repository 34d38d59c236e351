"""Course model."""
from geoattend import db
from geoattend.models.base import BaseModel


class Course(BaseModel):
    """Course owned by a single lecturer."""

    __tablename__ = 'courses'
    __table_args__ = (
        db.UniqueConstraint('lecturer_id', 'course_code', name='uq_course_lecturer_code'),
    )

    course_code = db.Column(db.String(50), nullable=False)
    course_title = db.Column(db.String(255), nullable=False)
    lecturer_id = db.Column(db.Integer, db.ForeignKey('lecturers.id'), nullable=False, index=True)

    attendance_codes = db.relationship('AttendanceCode', backref='course', lazy='dynamic')
    attendance_records = db.relationship('AttendanceRecord', backref='course', lazy='dynamic')

    def __repr__(self) -> str:
        return f'<Course {self.course_code}>'
