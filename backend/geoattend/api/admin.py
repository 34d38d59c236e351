"""Admin API endpoints."""
from flask import Blueprint

from geoattend import db
from geoattend.services.report_service import ReportService
from geoattend.utils.decorators import admin_required
from geoattend.utils.helpers import success_response

admin_bp = Blueprint('admin', __name__)


@admin_bp.route('/summary', methods=['GET'])
@admin_required
def summary(principal):
    """System-wide counts."""
    return success_response(data=ReportService(db.session).admin_summary())
