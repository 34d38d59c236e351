"""Course API endpoints."""
from flask import Blueprint, request

from geoattend import db
from geoattend.services.course_service import CourseService
from geoattend.services.report_service import ReportService
from geoattend.utils.decorators import lecturer_required
from geoattend.utils.helpers import success_response

courses_bp = Blueprint('courses', __name__)


@courses_bp.route('', methods=['POST'])
@lecturer_required
def create_course(principal):
    """Create a course owned by the calling lecturer."""
    course = CourseService(db.session).create_course(principal.id, request.get_json(silent=True))
    return success_response(
        data=course.to_dict(),
        message='Course created successfully',
        status_code=201
    )


@courses_bp.route('', methods=['GET'])
@lecturer_required
def list_courses(principal):
    courses = CourseService(db.session).list_courses(principal.id)
    return success_response(data=[course.to_dict() for course in courses])


@courses_bp.route('/<int:course_id>/stats', methods=['GET'])
@lecturer_required
def course_stats(principal, course_id):
    """Per-course attendance statistics."""
    return success_response(data=ReportService(db.session).course_stats(principal.id, course_id))
