"""Authentication API: login, registration and profile."""
from flask import Blueprint, current_app, request

from geoattend import db, limiter
from geoattend.services.auth_service import AuthService
from geoattend.utils.decorators import login_required, student_required
from geoattend.utils.errors import ValidationError
from geoattend.utils.helpers import success_response
from geoattend.utils.principal import LECTURER, STUDENT
from geoattend.utils.validators import Validator

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/login", methods=["POST"])
@limiter.limit("10 per minute")
def login():
    """Login for students (matriculation number) and staff (email + password)."""
    result = AuthService(db.session).login(request.get_json(silent=True))

    message = "Login successful"
    if 'faceScanData' in result:
        message = "Student data retrieved for face verification"

    return success_response(data=result, message=message)


@auth_bp.route("/register", methods=["POST"])
@limiter.limit("20 per hour")
def register():
    """Register a student (multipart with face scan) or a lecturer."""
    is_multipart = request.mimetype == 'multipart/form-data'
    data = request.form if is_multipart else Validator.require_object(request.get_json(silent=True))

    user_type = data.get("userType")
    if not user_type:
        raise ValidationError("userType is required")

    service = AuthService(db.session)

    if user_type == STUDENT:
        if not is_multipart:
            raise ValidationError("Student registration must be multipart/form-data with a faceScan image")
        student = service.register_student(request.form, request.files.get("faceScan"))
        return success_response(
            data=student.to_dict(),
            message="Student registered successfully!",
            status_code=201
        )

    if user_type == LECTURER:
        lecturer = service.register_lecturer(data.to_dict() if is_multipart else data)
        return success_response(
            data=lecturer.to_dict(),
            message="Lecturer registered successfully!",
            status_code=201
        )

    raise ValidationError("Invalid user type")


@auth_bp.route("/register/lecturer", methods=["POST"])
@limiter.limit("20 per hour")
def register_lecturer():
    """Dedicated lecturer registration endpoint."""
    lecturer = AuthService(db.session).register_lecturer(request.get_json(silent=True))
    return success_response(
        data=lecturer.to_dict(),
        message="Lecturer registered successfully!",
        status_code=201
    )


@auth_bp.route("/verify-face", methods=["POST"])
@student_required
def verify_face(principal):
    """Evaluate a face comparison reported by the client.

    Advisory only: the result is logged and echoed back, it does not change
    what the caller's token allows.
    """
    data = Validator.require_object(request.get_json(silent=True))
    if 'label' not in data or 'distance' not in data:
        raise ValidationError("label and distance are required")

    result = AuthService.evaluate_face_match(data['label'], data['distance'])
    current_app.logger.info(
        'Client face check for student %s: verified=%s similarity=%s',
        principal.id, result['verified'], result['similarity']
    )

    message = "Face verified" if result['verified'] else "Face does not match"
    return success_response(data=result, message=message)


@auth_bp.route("/me", methods=["GET"])
@login_required
def get_current_user(principal):
    """Get current user profile."""
    return success_response(data=AuthService(db.session).get_profile(principal))
