"""Attendance code API endpoints."""
from flask import Blueprint, request

from geoattend import db, limiter
from geoattend.services.code_service import CodeService
from geoattend.services.report_service import ReportService
from geoattend.utils.decorators import lecturer_required
from geoattend.utils.helpers import isoformat_utc, success_response, utcnow
from geoattend.utils.validators import Validator

codes_bp = Blueprint('codes', __name__)


@codes_bp.route('/generate-code', methods=['POST'])
@limiter.limit("30 per hour")
@lecturer_required
def generate_code(principal):
    """Issue a 10-minute attendance code at the lecturer's position."""
    data = Validator.require_fields(request.get_json(silent=True), ['courseId', 'lat', 'lon'])
    course_id = Validator.require_int(data['courseId'], 'courseId')
    lat, lon = Validator.require_location(data)

    service = CodeService(db.session)
    attendance_code = service.issue_code(principal.id, course_id, lat, lon)

    return success_response(
        data=service.describe(attendance_code),
        message='Attendance code generated successfully'
    )


@codes_bp.route('/debug/codes', methods=['GET'])
@lecturer_required
def recent_codes(principal):
    """Codes of the caller's courses that are live or expired in the last two hours."""
    return success_response(data={
        'timestamp': isoformat_utc(utcnow()),
        'codes': ReportService(db.session).recent_codes(principal.id)
    })
