"""Attendance code redemption.

Redeeming a code runs four gates in order, each of which short-circuits:

1. lookup & expiry: a row with the normalised code and ``expires_at`` strictly
   after now (UTC);
2. geofence: haversine distance to the issuing lecturer within
   ``GEOFENCE_RADIUS_METERS``;
3. dedup: no record yet for (student, course, UTC civil day);
4. commit: insert the record.

Gates 3 and 4 are not atomic. Two racing redemptions can both pass the dedup
query; the unique constraint on the ledger rejects the second insert, which is
then reported the same way as a dedup hit.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from geoattend.models.attendance import AttendanceRecord
from geoattend.models.attendance_code import AttendanceCode
from geoattend.services.code_service import CodeService
from geoattend.services.gps_service import GPSService
from geoattend.utils.errors import (
    AlreadyMarked, InfrastructureError, InvalidOrExpiredCode, TooFarFromClass
)
from geoattend.utils.helpers import isoformat_utc, utcnow

DUPLICATE_MARK_MARKERS = (
    'uq_attendance_student_course_day',
    'attendance_records.student_id, attendance_records.course_id, attendance_records.attendance_date',
)


@dataclass
class RedemptionResult:
    record_id: int
    course_id: int
    distance: float
    marked_at: datetime

    def to_dict(self) -> dict:
        return {
            'attendanceId': self.record_id,
            'courseId': self.course_id,
            'distance': round(self.distance),
            'markedAt': isoformat_utc(self.marked_at),
        }


class RedemptionService:
    """Validates a presented code and appends to the attendance ledger."""

    def __init__(self, session, clock: Callable = utcnow):
        self.session = session
        self.clock = clock

    def find_live_code(self, code: str, now: datetime) -> Optional[AttendanceCode]:
        matches = self.session.query(AttendanceCode).filter(
            AttendanceCode.code == code,
            AttendanceCode.expires_at > now
        ).order_by(AttendanceCode.expires_at.desc(), AttendanceCode.id.desc()).all()

        if len(matches) > 1:
            current_app.logger.warning(
                'Code %s matches %d live rows, using the newest', code, len(matches)
            )
        return matches[0] if matches else None

    def explain_missing_code(self, code: str, now: datetime) -> str:
        """Human readable reason a code did not match; advisory only."""
        expired = self.session.query(AttendanceCode).filter(
            AttendanceCode.code == code,
            AttendanceCode.expires_at <= now
        ).order_by(AttendanceCode.expires_at.desc()).first()

        if expired is None:
            return 'Invalid attendance code. Please check the code and try again.'

        seconds_expired = int((now - expired.expires_at).total_seconds())
        minutes, seconds = divmod(seconds_expired, 60)
        return f'Attendance code expired {minutes} minutes and {seconds} seconds ago'

    def already_marked(self, student_id: int, course_id: int, now: datetime) -> bool:
        existing = self.session.query(AttendanceRecord.id).filter_by(
            student_id=student_id,
            course_id=course_id,
            attendance_date=now.date()
        ).first()
        return existing is not None

    @staticmethod
    def is_duplicate_mark(error: IntegrityError) -> bool:
        """Whether ``error`` came from the one-record-per-day constraint.

        PostgreSQL and MySQL name the constraint; SQLite lists its columns.
        """
        message = str(error.orig)
        return any(marker in message for marker in DUPLICATE_MARK_MARKERS)

    def redeem(
        self, student_id: int, presented_code, lat: Optional[float], lon: Optional[float]
    ) -> RedemptionResult:
        """Mark ``student_id`` present for the course the code belongs to."""
        logger = current_app.logger
        code = CodeService.normalize(presented_code)
        now = self.clock()

        # 1. lookup & expiry
        attendance_code = self.find_live_code(code, now) if code else None
        if attendance_code is None:
            logger.warning('Attendance failed for student %s: invalid or expired code %s', student_id, code)
            raise InvalidOrExpiredCode(self.explain_missing_code(code, now))

        # 2. geofence
        max_distance = current_app.config.get('GEOFENCE_RADIUS_METERS', 100)
        check = GPSService.verify_location(
            lat, lon, attendance_code.lecturer_lat, attendance_code.lecturer_lon, max_distance
        )
        if not check['is_inside']:
            logger.warning(
                'Attendance failed for student %s: %s m from class (max %s m)',
                student_id, check['distance'], max_distance
            )
            raise TooFarFromClass(check['distance'], max_distance)

        # 3. dedup
        course_id = attendance_code.course_id
        if self.already_marked(student_id, course_id, now):
            logger.warning('Attendance failed for student %s: already marked in course %s', student_id, course_id)
            raise AlreadyMarked()

        # 4. commit
        record = AttendanceRecord(
            student_id=student_id,
            course_id=course_id,
            marked_at=now,
            attendance_date=now.date(),
            distance_m=check['distance'],
            created_at=now,
        )
        self.session.add(record)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            if not self.is_duplicate_mark(e):
                logger.exception('Attendance insert violated a constraint for student %s', student_id)
                raise InfrastructureError("Database error during attendance marking") from e
            logger.warning('Concurrent redemption rejected for student %s in course %s', student_id, course_id)
            raise AlreadyMarked()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception('Attendance insert failed for student %s', student_id)
            raise InfrastructureError("Database error during attendance marking") from e

        logger.info(
            'Attendance marked: student %s, course %s, %d m',
            student_id, course_id, round(check['distance'])
        )
        return RedemptionResult(
            record_id=record.id,
            course_id=course_id,
            distance=check['distance'],
            marked_at=now,
        )
