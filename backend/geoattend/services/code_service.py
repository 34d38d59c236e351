"""Attendance code issuance."""
import base64
import io
import secrets
import string
from datetime import timedelta
from typing import Callable, Dict

import qrcode
from flask import current_app

from geoattend.models.attendance_code import AttendanceCode
from geoattend.models.course import Course
from geoattend.utils.errors import InfrastructureError, NotFound
from geoattend.utils.helpers import isoformat_utc, utcnow

CODE_ALPHABET = string.ascii_uppercase + string.digits
MAX_DRAWS = 5


class CodeService:
    """Issues time-boxed codes tagged with the lecturer's position."""

    def __init__(self, session, clock: Callable = utcnow):
        self.session = session
        self.clock = clock

    @staticmethod
    def generate_code(length: int = 6) -> str:
        """Draw a random uppercase alphanumeric code."""
        return ''.join(secrets.choice(CODE_ALPHABET) for _ in range(length))

    @staticmethod
    def normalize(code) -> str:
        return str(code or '').strip().upper()

    @staticmethod
    def render_qr(code: str) -> str:
        """Render ``code`` as a PNG data URI."""
        qr = qrcode.QRCode(
            version=None,  # Auto-determine size
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(code)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffered = io.BytesIO()
        img.save(buffered, format="PNG")
        img_str = base64.b64encode(buffered.getvalue()).decode()

        return f"data:image/png;base64,{img_str}"

    def _draw_unused_code(self, now, length: int) -> str:
        """Draw a code no live row already uses."""
        for _ in range(MAX_DRAWS):
            code = self.generate_code(length)
            clash = self.session.query(AttendanceCode.id).filter(
                AttendanceCode.code == code,
                AttendanceCode.expires_at > now
            ).first()
            if clash is None:
                return code
            current_app.logger.info('Attendance code collision on %s, redrawing', code)

        raise InfrastructureError("Could not allocate an unused attendance code")

    def issue_code(self, lecturer_id: int, course_id: int, lat: float, lon: float) -> AttendanceCode:
        """Create a code for ``course_id`` valid for ``CODE_TTL_MINUTES``."""
        course = self.session.query(Course).filter_by(id=course_id, lecturer_id=lecturer_id).first()
        if course is None:
            raise NotFound("Course not found or access denied")

        now = self.clock()
        ttl = timedelta(minutes=current_app.config.get('CODE_TTL_MINUTES', 10))
        code = self._draw_unused_code(now, current_app.config.get('CODE_LENGTH', 6))

        attendance_code = AttendanceCode(
            code=code,
            course_id=course.id,
            lecturer_lat=lat,
            lecturer_lon=lon,
            expires_at=now + ttl,
            created_at=now,
        )
        self.session.add(attendance_code)
        try:
            self.session.commit()
        except Exception as e:
            self.session.rollback()
            current_app.logger.exception('Code generation failed for course %s', course_id)
            raise InfrastructureError("Database error during code generation") from e

        current_app.logger.info(
            'Attendance code %s issued for course %s, expires %s',
            code, course.id, isoformat_utc(attendance_code.expires_at)
        )
        return attendance_code

    def describe(self, attendance_code: AttendanceCode, with_qr: bool = True) -> Dict:
        """Client-facing view of an issued code."""
        now = self.clock()
        data = {
            'code': attendance_code.code,
            'courseId': attendance_code.course_id,
            'expiresAt': isoformat_utc(attendance_code.expires_at),
            'expiresIn': max(attendance_code.seconds_left(now), 0),
        }
        if with_qr:
            data['qrImage'] = self.render_qr(attendance_code.code)
        return data
