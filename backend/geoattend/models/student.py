"""Student model, identified by matriculation number."""
from geoattend import db
from geoattend.models.base import BaseModel


class Student(BaseModel):
    """Student with the reference face image used at login."""

    __tablename__ = 'students'

    mat_no = db.Column(db.String(50), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    phone = db.Column(db.String(20), nullable=False)

    # Reference face image, base64 encoded
    face_scan = db.Column(db.Text, nullable=False)
    face_scan_mimetype = db.Column(db.String(50), nullable=False, default='image/jpeg')

    attendance_records = db.relationship('AttendanceRecord', backref='student', lazy='dynamic')

    @property
    def face_scan_data_uri(self) -> str:
        return f'data:{self.face_scan_mimetype};base64,{self.face_scan}'

    def to_dict(self, exclude: list = None) -> dict:
        """Convert to dictionary excluding the face image."""
        exclude = (exclude or []) + ['face_scan', 'face_scan_mimetype']
        return super().to_dict(exclude=exclude)

    def __repr__(self) -> str:
        return f'<Student {self.mat_no}>'
