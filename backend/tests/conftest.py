"""Shared fixtures."""
from datetime import datetime, timedelta

import pytest

from geoattend import create_app, db
from geoattend.models import Admin, Course, Lecturer, Student
from geoattend.services.auth_service import AuthService
from geoattend.utils.principal import AdminPrincipal, LecturerPrincipal, StudentPrincipal

PNG_B64 = 'iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII='

# A lecture hall in Lagos; one degree of latitude is ~111,195 m on the sphere used
CLASS_LAT, CLASS_LON = 6.5244, 3.3792
METERS_PER_DEGREE_LAT = 111195.0


def north_of(lat: float, meters: float) -> float:
    return lat + meters / METERS_PER_DEGREE_LAT


class FrozenClock:
    """Stand-in for ``utcnow`` that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def bearer(token: str) -> dict:
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def app():
    """Create test app."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 3, 2, 9, 0, 0))


@pytest.fixture
def lecturer(app):
    lecturer = Lecturer(
        staff_id='LEC-001',
        name='Dr. Test Lecturer',
        email='lecturer@example.com',
        phone='08000000001'
    )
    lecturer.set_password('password123')
    return lecturer.save()


@pytest.fixture
def other_lecturer(app):
    lecturer = Lecturer(
        staff_id='LEC-002',
        name='Dr. Someone Else',
        email='other@example.com',
        phone='08000000002'
    )
    lecturer.set_password('password456')
    return lecturer.save()


@pytest.fixture
def admin(app):
    admin = Admin(email='admin@example.com', name='Admin')
    admin.set_password('admin12345')
    return admin.save()


@pytest.fixture
def student(app):
    return Student(
        mat_no='U2021/0001',
        name='Ada Student',
        email='ada@example.com',
        phone='08010000001',
        face_scan=PNG_B64,
        face_scan_mimetype='image/png'
    ).save()


@pytest.fixture
def other_student(app):
    return Student(
        mat_no='U2021/0002',
        name='Bola Student',
        email='bola@example.com',
        phone='08010000002',
        face_scan=PNG_B64,
        face_scan_mimetype='image/png'
    ).save()


@pytest.fixture
def course(lecturer):
    return Course(course_code='CSC101', course_title='Intro to Computing', lecturer_id=lecturer.id).save()


@pytest.fixture
def lecturer_headers(lecturer):
    return bearer(AuthService.issue_token(LecturerPrincipal(id=lecturer.id, email=lecturer.email)))


@pytest.fixture
def other_lecturer_headers(other_lecturer):
    return bearer(AuthService.issue_token(LecturerPrincipal(id=other_lecturer.id, email=other_lecturer.email)))


@pytest.fixture
def student_headers(student):
    return bearer(AuthService.issue_token(StudentPrincipal(id=student.id, mat_no=student.mat_no)))


@pytest.fixture
def admin_headers(admin):
    return bearer(AuthService.issue_token(AdminPrincipal(id=admin.id, email=admin.email)))
