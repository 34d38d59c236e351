"""Authentication service: registration, login and claim tokens."""
import base64
import math
import os
from typing import Dict, Optional

from flask import current_app
from flask_jwt_extended import create_access_token
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from geoattend.models.staff import Admin, Lecturer
from geoattend.models.student import Student
from geoattend.utils.errors import Conflict, NotFound, Unauthorized, ValidationError
from geoattend.utils.principal import (
    ADMIN, LECTURER, STUDENT, AdminPrincipal, LecturerPrincipal, Principal,
    StudentPrincipal, token_claims
)
from geoattend.utils.validators import Validator

USER_TYPES = (STUDENT, LECTURER, ADMIN)


class AuthService:
    """Identity store access for the three user kinds."""

    def __init__(self, session):
        self.session = session

    @staticmethod
    def issue_token(principal: Principal, expires_delta=None) -> str:
        """Sign a claim token for ``principal``."""
        kwargs = {}
        if expires_delta is not None:
            kwargs['expires_delta'] = expires_delta
        return create_access_token(
            identity=str(principal.id),
            additional_claims=token_claims(principal),
            **kwargs
        )

    # =================== LOGIN ===================

    def login(self, data: Optional[Dict]) -> Dict:
        """Dispatch a login request on ``userType``."""
        Validator.require_object(data)

        user_type = data.get('userType')
        if user_type not in USER_TYPES:
            raise ValidationError("Invalid user type")

        if user_type == STUDENT:
            return self.login_student(data.get('matNo'))
        return self.login_staff(user_type, data.get('email'), data.get('password'))

    def login_staff(self, user_type: str, email: str, password: str) -> Dict:
        """Email and password login for lecturers and admins."""
        Validator.require_fields({'email': email, 'password': password}, ['email', 'password'])
        Validator.require_string(email, 'email')
        Validator.require_string(password, 'password')

        model = Lecturer if user_type == LECTURER else Admin
        user = self.session.query(model).filter_by(email=email.strip().lower()).first()

        if user is None:
            current_app.logger.warning('Login failed: %s not found', user_type)
            raise NotFound("User not found")

        if not user.check_password(password):
            current_app.logger.warning('Login failed: invalid password for %s %s', user_type, user.id)
            raise Unauthorized("Invalid credentials")

        if user_type == LECTURER:
            principal = LecturerPrincipal(id=user.id, email=user.email)
        else:
            principal = AdminPrincipal(id=user.id, email=user.email)

        current_app.logger.info('Login successful: %s %s', user_type, user.id)
        return {
            'token': self.issue_token(principal),
            'user': dict(user.to_dict(), userType=user_type),
        }

    def login_student(self, mat_no: str) -> Dict:
        """Look up a student and hand back the reference face image.

        The face comparison itself runs on the client; the token is issued
        before any match is proven.
        """
        if mat_no is not None and not isinstance(mat_no, str):
            raise ValidationError("Matriculation number must be a string")
        mat_no = (mat_no or '').strip()
        if not mat_no:
            raise ValidationError("Matriculation number is required")

        student = self.session.query(Student).filter_by(mat_no=mat_no).first()
        if student is None:
            current_app.logger.warning('Student login failed: %s not found', mat_no)
            raise NotFound("Student not found")

        principal = StudentPrincipal(id=student.id, mat_no=student.mat_no)
        token = self.issue_token(principal, current_app.config.get('STUDENT_TOKEN_EXPIRES'))

        current_app.logger.info('Student %s retrieved for face verification', student.id)
        return {
            'token': token,
            'user': {
                'id': student.id,
                'name': student.name,
                'mat_no': student.mat_no,
                'userType': STUDENT,
            },
            'faceScanData': student.face_scan_data_uri,
        }

    @staticmethod
    def evaluate_face_match(label, distance) -> Dict:
        """Apply the face-match rule to a client-reported comparison."""
        threshold = current_app.config.get('FACE_MATCH_THRESHOLD', 0.5)
        expected_label = current_app.config.get('FACE_MATCH_LABEL', 'person 1')

        try:
            distance = float(distance)
        except (TypeError, ValueError):
            raise ValidationError("distance must be a number")
        if not math.isfinite(distance):
            raise ValidationError("distance must be a finite number")

        matched = label == expected_label and distance < threshold
        return {
            'verified': matched,
            'similarity': round((1 - distance) * 100, 2),
            'threshold': threshold,
        }

    # =================== REGISTRATION ===================

    def register_student(self, form: Dict, face_file) -> Student:
        """Register a student with a reference face image."""
        fields = ['name', 'matNo', 'email', 'phone']
        missing = [f for f in fields if not (form.get(f) or '').strip()]
        if missing or face_file is None or not face_file.filename:
            raise ValidationError("All fields and face scan are required for student registration")

        mat_no = form['matNo'].strip()
        email = Validator.require_email(form['email'])
        face_scan, mimetype = self._read_face_scan(face_file)

        existing = self.session.query(Student.id).filter(
            or_(Student.mat_no == mat_no, Student.email == email)
        ).first()
        if existing:
            raise Conflict("Student with this Matriculation No. or Email already exists")

        student = Student(
            mat_no=mat_no,
            name=form['name'].strip(),
            email=email,
            phone=form['phone'].strip(),
            face_scan=face_scan,
            face_scan_mimetype=mimetype,
        )
        self._insert(student, "Student with this Matriculation No. or Email already exists")

        current_app.logger.info('Student registered: %s', student.id)
        return student

    def _read_face_scan(self, face_file):
        allowed = current_app.config.get('ALLOWED_IMAGE_EXTENSIONS', {'jpeg', 'jpg', 'png', 'gif'})
        extension = os.path.splitext(face_file.filename)[1].lower().lstrip('.')
        mimetype = face_file.mimetype or ''

        if extension not in allowed or not mimetype.startswith('image/'):
            raise ValidationError("Only image files are allowed")

        content = face_file.read()
        if not content:
            raise ValidationError("Face scan image is empty")

        return base64.b64encode(content).decode('ascii'), mimetype

    def register_lecturer(self, data: Optional[Dict]) -> Lecturer:
        """Register a lecturer account."""
        Validator.require_object(data)

        fields = ['lecturer_id', 'name', 'email', 'phone', 'password']
        missing = [f for f in fields if not str(data.get(f) or '').strip()]
        if missing:
            raise ValidationError(f"All fields are required ({', '.join(missing)})")

        staff_id = str(data['lecturer_id']).strip()
        email = Validator.require_email(data['email'])
        password = Validator.require_password(str(data['password']).strip())

        existing = self.session.query(Lecturer.id).filter(
            or_(Lecturer.staff_id == staff_id, Lecturer.email == email)
        ).first()
        if existing:
            raise Conflict("Lecturer with this ID or Email already exists")

        lecturer = Lecturer(
            staff_id=staff_id,
            name=str(data['name']).strip(),
            email=email,
            phone=str(data['phone']).strip(),
        )
        lecturer.set_password(password)
        self._insert(lecturer, "Lecturer with this ID or Email already exists")

        current_app.logger.info('Lecturer registered: %s', lecturer.id)
        return lecturer

    def create_admin(self, email: str, name: str, password: str) -> Admin:
        email = Validator.require_email(email)
        if not (name or '').strip():
            raise ValidationError("name is required")

        if self.session.query(Admin.id).filter_by(email=email).first():
            raise Conflict("Admin with this Email already exists")

        admin = Admin(email=email, name=name.strip())
        admin.set_password(Validator.require_password(password))
        self._insert(admin, "Admin with this Email already exists")
        return admin

    def _insert(self, user, conflict_message: str) -> None:
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration
            self.session.rollback()
            raise Conflict(conflict_message)

    # =================== PROFILE ===================

    def get_profile(self, principal: Principal) -> Dict:
        model = {STUDENT: Student, LECTURER: Lecturer, ADMIN: Admin}[principal.role]
        user = model.get_by_id(principal.id)
        if user is None:
            raise NotFound("User not found")
        return dict(user.to_dict(), userType=principal.role)
