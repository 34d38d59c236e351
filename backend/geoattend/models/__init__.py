"""Models package with all models."""
from .base import BaseModel
from .student import Student
from .staff import Admin, Lecturer
from .course import Course
from .attendance_code import AttendanceCode
from .attendance import AttendanceRecord

__all__ = [
    'BaseModel', 'Student', 'Lecturer', 'Admin',
    'Course', 'AttendanceCode', 'AttendanceRecord'
]
