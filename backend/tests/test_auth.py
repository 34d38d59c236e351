"""Test authentication endpoints."""
import io
import json

import pytest

from geoattend.models import Lecturer, Student
from tests.conftest import PNG_B64, bearer


def student_form(**overrides):
    import base64

    form = {
        'userType': 'student',
        'name': 'New Student',
        'matNo': 'U2022/0100',
        'email': 'new.student@example.com',
        'phone': '08011112222',
        'faceScan': (io.BytesIO(base64.b64decode(PNG_B64)), 'face.png', 'image/png'),
    }
    form.update(overrides)
    return {k: v for k, v in form.items() if v is not None}


def lecturer_payload(**overrides):
    payload = {
        'userType': 'lecturer',
        'lecturer_id': 'LEC-100',
        'name': 'Dr. New Lecturer',
        'email': 'New.Lecturer@Example.com',
        'phone': '08033334444',
        'password': 'password123',
    }
    payload.update(overrides)
    return payload


def test_health_check(client):
    """Test health endpoints."""
    response = client.get('/api/health')
    assert response.status_code == 200
    assert json.loads(response.data)['status'] == 'ok'

    response = client.get('/api/health/db')
    assert response.status_code == 200
    assert json.loads(response.data)['database'] == 'connected'


# =================== REGISTRATION ===================

def test_register_student_success(client):
    response = client.post('/api/register', data=student_form(), content_type='multipart/form-data')

    assert response.status_code == 201
    data = json.loads(response.data)
    assert data['error'] is False
    assert data['data']['mat_no'] == 'U2022/0100'
    assert 'face_scan' not in data['data']

    student = Student.query.filter_by(mat_no='U2022/0100').one()
    assert student.face_scan == PNG_B64
    assert student.face_scan_mimetype == 'image/png'


def test_register_duplicate_mat_no_conflicts(client, student):
    response = client.post(
        '/api/register',
        data=student_form(matNo=student.mat_no),
        content_type='multipart/form-data'
    )

    assert response.status_code == 409
    assert Student.query.count() == 1


def test_register_duplicate_student_email_conflicts(client, student):
    response = client.post(
        '/api/register',
        data=student_form(email=student.email),
        content_type='multipart/form-data'
    )

    assert response.status_code == 409


def test_register_student_requires_face_scan(client):
    response = client.post('/api/register', data=student_form(faceScan=None), content_type='multipart/form-data')

    assert response.status_code == 400
    assert 'face scan' in json.loads(response.data)['message']


def test_register_student_rejects_non_image(client):
    form = student_form(faceScan=(io.BytesIO(b'not an image'), 'notes.txt', 'text/plain'))
    response = client.post('/api/register', data=form, content_type='multipart/form-data')

    assert response.status_code == 400
    assert json.loads(response.data)['message'] == 'Only image files are allowed'


def test_register_student_as_json_is_rejected(client):
    response = client.post('/api/register', json={'userType': 'student', 'matNo': 'X'})
    assert response.status_code == 400


def test_register_requires_user_type(client):
    response = client.post('/api/register', json={})

    assert response.status_code == 400
    assert json.loads(response.data)['message'] == 'userType is required'


def test_register_rejects_unknown_user_type(client):
    response = client.post('/api/register', json={'userType': 'janitor'})
    assert response.status_code == 400


def test_register_lecturer_success(client):
    response = client.post('/api/register', json=lecturer_payload())

    assert response.status_code == 201
    data = json.loads(response.data)
    assert data['data']['email'] == 'new.lecturer@example.com'
    assert 'password_hash' not in data['data']

    lecturer = Lecturer.query.filter_by(staff_id='LEC-100').one()
    assert lecturer.check_password('password123')


def test_dedicated_lecturer_route(client):
    response = client.post('/api/register/lecturer', json=lecturer_payload())
    assert response.status_code == 201


def test_register_lecturer_validation(client):
    # Missing fields
    response = client.post('/api/register/lecturer', json={'name': 'Only Name'})
    assert response.status_code == 400
    assert 'lecturer_id' in json.loads(response.data)['message']

    # Invalid email
    response = client.post('/api/register/lecturer', json=lecturer_payload(email='invalid-email'))
    assert response.status_code == 400

    # Short password
    response = client.post('/api/register/lecturer', json=lecturer_payload(password='123'))
    assert response.status_code == 400


def test_register_duplicate_lecturer_conflicts(client, lecturer):
    response = client.post('/api/register/lecturer', json=lecturer_payload(email=lecturer.email))
    assert response.status_code == 409

    response = client.post('/api/register/lecturer', json=lecturer_payload(lecturer_id=lecturer.staff_id))
    assert response.status_code == 409


# =================== LOGIN ===================

def test_lecturer_login_success(client, lecturer):
    response = client.post('/api/login', json={
        'userType': 'lecturer',
        'email': 'lecturer@example.com',
        'password': 'password123'
    })

    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['error'] is False
    assert 'token' in data['data']
    assert data['data']['user']['email'] == 'lecturer@example.com'
    assert 'password_hash' not in data['data']['user']


def test_lecturer_login_wrong_password(client, lecturer):
    response = client.post('/api/login', json={
        'userType': 'lecturer',
        'email': 'lecturer@example.com',
        'password': 'wrongpassword'
    })

    assert response.status_code == 401
    assert json.loads(response.data)['message'] == 'Invalid credentials'


def test_lecturer_login_unknown_email(client, lecturer):
    response = client.post('/api/login', json={
        'userType': 'lecturer',
        'email': 'nobody@example.com',
        'password': 'password123'
    })

    assert response.status_code == 404
    assert json.loads(response.data)['message'] == 'User not found'


def test_lecturer_login_missing_password(client, lecturer):
    response = client.post('/api/login', json={'userType': 'lecturer', 'email': 'lecturer@example.com'})
    assert response.status_code == 400


def test_lecturer_credentials_do_not_log_in_as_admin(client, lecturer):
    response = client.post('/api/login', json={
        'userType': 'admin',
        'email': 'lecturer@example.com',
        'password': 'password123'
    })
    assert response.status_code == 404


def test_admin_login_success(client, admin):
    response = client.post('/api/login', json={
        'userType': 'admin',
        'email': 'admin@example.com',
        'password': 'admin12345'
    })
    assert response.status_code == 200


def test_login_rejects_invalid_user_type(client):
    response = client.post('/api/login', json={'userType': 'guest'})
    assert response.status_code == 400


def test_student_login_returns_reference_face(client, student):
    response = client.post('/api/login', json={'userType': 'student', 'matNo': ' U2021/0001 '})

    assert response.status_code == 200
    data = json.loads(response.data)['data']
    assert data['faceScanData'] == f'data:image/png;base64,{PNG_B64}'
    assert data['user']['mat_no'] == 'U2021/0001'
    assert 'token' in data


def test_student_login_unknown_mat_no(client, student):
    response = client.post('/api/login', json={'userType': 'student', 'matNo': 'U0000/0000'})

    assert response.status_code == 404
    assert json.loads(response.data)['message'] == 'Student not found'


def test_student_login_requires_mat_no(client):
    response = client.post('/api/login', json={'userType': 'student'})
    assert response.status_code == 400


# =================== TOKENS & ROLES ===================

def test_get_current_user(client, lecturer):
    """Test get current user profile."""
    login_response = client.post('/api/login', json={
        'userType': 'lecturer',
        'email': 'lecturer@example.com',
        'password': 'password123'
    })
    token = json.loads(login_response.data)['data']['token']

    response = client.get('/api/me', headers=bearer(token))

    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['data']['email'] == 'lecturer@example.com'
    assert data['data']['userType'] == 'lecturer'


def test_student_token_from_login_is_usable(client, student):
    login_response = client.post('/api/login', json={'userType': 'student', 'matNo': student.mat_no})
    token = json.loads(login_response.data)['data']['token']

    response = client.get('/api/me', headers=bearer(token))

    assert response.status_code == 200
    assert json.loads(response.data)['data']['mat_no'] == student.mat_no


def test_protected_route_requires_token(client):
    response = client.get('/api/courses')

    assert response.status_code == 401
    assert json.loads(response.data)['message'] == 'Authorization token required'


def test_protected_route_rejects_bad_signature(client):
    response = client.get('/api/courses', headers=bearer('not.a.token'))
    assert response.status_code == 401


def test_wrong_role_is_forbidden(client, student_headers):
    response = client.get('/api/courses', headers=student_headers)

    assert response.status_code == 403
    assert json.loads(response.data)['message'] == 'Access denied: Lecturers only'


def test_lecturer_cannot_mark_attendance(client, lecturer_headers):
    response = client.post('/api/mark-attendance', json={'code': 'ABC123', 'lat': 1, 'lon': 1},
                           headers=lecturer_headers)
    assert response.status_code == 403


def test_unknown_route_and_method(client):
    assert client.get('/api/does-not-exist').status_code == 404
    assert client.get('/api/login').status_code == 405


# =================== FACE CHECK ===================

def test_verify_face_match(client, student_headers):
    response = client.post('/api/verify-face', json={'label': 'person 1', 'distance': 0.32},
                           headers=student_headers)

    assert response.status_code == 200
    data = json.loads(response.data)['data']
    assert data['verified'] is True
    assert data['similarity'] == 68.0


def test_verify_face_rejects_distance_at_threshold(client, student_headers):
    response = client.post('/api/verify-face', json={'label': 'person 1', 'distance': 0.5},
                           headers=student_headers)
    assert json.loads(response.data)['data']['verified'] is False


def test_verify_face_rejects_unknown_label(client, student_headers):
    response = client.post('/api/verify-face', json={'label': 'unknown', 'distance': 0.1},
                           headers=student_headers)
    assert json.loads(response.data)['data']['verified'] is False


def test_verify_face_requires_fields(client, student_headers):
    response = client.post('/api/verify-face', json={'label': 'person 1'}, headers=student_headers)
    assert response.status_code == 400


# =================== MALFORMED BODIES ===================

@pytest.mark.parametrize('body', [[1, 2], 'lecturer', 42])
def test_login_rejects_non_object_body(client, body):
    response = client.post('/api/login', json=body)

    assert response.status_code == 400
    assert json.loads(response.data)['message'] == 'Request body must be a JSON object'


def test_login_rejects_non_string_email(client, lecturer):
    response = client.post('/api/login', json={
        'userType': 'lecturer',
        'email': 123,
        'password': 'password123'
    })

    assert response.status_code == 400
    assert json.loads(response.data)['message'] == 'email must be a string'


def test_login_rejects_non_string_password(client, lecturer):
    response = client.post('/api/login', json={
        'userType': 'lecturer',
        'email': 'lecturer@example.com',
        'password': 12345678
    })

    assert response.status_code == 400
    assert json.loads(response.data)['message'] == 'password must be a string'


def test_student_login_rejects_non_string_mat_no(client, student):
    response = client.post('/api/login', json={'userType': 'student', 'matNo': 20210001})
    assert response.status_code == 400


def test_register_rejects_non_object_body(client):
    assert client.post('/api/register', json=['lecturer']).status_code == 400
    assert client.post('/api/register/lecturer', json=['lecturer']).status_code == 400


def test_register_lecturer_rejects_non_string_email(client):
    response = client.post('/api/register/lecturer', json=lecturer_payload(email=['a@b.com']))
    assert response.status_code == 400


def test_verify_face_rejects_non_object_body(client, student_headers):
    response = client.post('/api/verify-face', json='label distance', headers=student_headers)
    assert response.status_code == 400


@pytest.mark.parametrize('distance', ['nan', 'inf', '-inf'])
def test_verify_face_rejects_non_finite_distance(client, student_headers, distance):
    response = client.post('/api/verify-face', json={'label': 'person 1', 'distance': distance},
                           headers=student_headers)

    assert response.status_code == 400
    assert json.loads(response.data)['message'] == 'distance must be a finite number'
