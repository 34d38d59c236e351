"""Attendance API endpoints: redemption and reports."""
from flask import Blueprint, request

from geoattend import db, limiter
from geoattend.services.redemption_service import RedemptionService
from geoattend.services.report_service import ReportService
from geoattend.utils.decorators import lecturer_required, student_required
from geoattend.utils.helpers import success_response
from geoattend.utils.validators import Validator

attendance_bp = Blueprint('attendance', __name__)


@attendance_bp.route('/mark-attendance', methods=['POST'])
@limiter.limit("30 per hour")
@student_required
def mark_attendance(principal):
    """Redeem an attendance code from the student's current position."""
    data = Validator.require_fields(request.get_json(silent=True), ['code', 'lat', 'lon'])
    lat, lon = Validator.require_location(data)

    result = RedemptionService(db.session).redeem(principal.id, data['code'], lat, lon)

    return success_response(
        data=result.to_dict(),
        message='Attendance marked successfully'
    )


@attendance_bp.route('/attendance/<int:course_id>', methods=['GET'])
@lecturer_required
def course_records(principal, course_id):
    """All attendance records for a course."""
    return success_response(data=ReportService(db.session).course_records(principal.id, course_id))


@attendance_bp.route('/attendance/<int:course_id>/sessions', methods=['GET'])
@lecturer_required
def course_sessions(principal, course_id):
    """Attendance grouped by day."""
    return success_response(data=ReportService(db.session).sessions(principal.id, course_id))


@attendance_bp.route('/attendance/<int:course_id>/date/<day>', methods=['GET'])
@lecturer_required
def session_attendees(principal, course_id, day):
    """Attendees of one session."""
    session_day = Validator.require_date(day)
    return success_response(
        data=ReportService(db.session).session_attendees(principal.id, course_id, session_day)
    )


@attendance_bp.route('/attendance/<int:course_id>/date/<day>/export', methods=['GET'])
@lecturer_required
def export_session(principal, course_id, day):
    """Download one session's attendees as CSV."""
    session_day = Validator.require_date(day)
    csv_data = ReportService(db.session).export_session_csv(principal.id, course_id, session_day)

    return csv_data, 200, {
        'Content-Type': 'text/csv; charset=utf-8',
        'Content-Disposition': f'attachment; filename=attendance_{course_id}_{session_day.isoformat()}.csv'
    }


@attendance_bp.route('/student/attendance', methods=['GET'])
@student_required
def my_attendance(principal):
    """The calling student's attendance history."""
    return success_response(data=ReportService(db.session).student_history(principal.id))
