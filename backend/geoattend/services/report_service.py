"""Read-only aggregations over the attendance ledger."""
import io
from datetime import date, timedelta
from typing import Callable, Dict, List

import pandas as pd
from sqlalchemy import distinct, func

from geoattend.models.attendance import AttendanceRecord
from geoattend.models.attendance_code import AttendanceCode
from geoattend.models.course import Course
from geoattend.models.staff import Lecturer
from geoattend.models.student import Student
from geoattend.services.course_service import CourseService
from geoattend.utils.helpers import isoformat_date, isoformat_utc, utcnow

RECENT_CODES_WINDOW = timedelta(hours=2)


class ReportService:
    """Reporting views. Lecturer-facing views are scoped to owned courses."""

    def __init__(self, session, clock: Callable = utcnow):
        self.session = session
        self.clock = clock
        self.courses = CourseService(session)

    @staticmethod
    def _course_info(course: Course) -> Dict:
        return {
            'id': course.id,
            'course_code': course.course_code,
            'course_title': course.course_title,
        }

    def _attendee_query(self, course: Course):
        return self.session.query(AttendanceRecord, Student).join(
            Student, AttendanceRecord.student_id == Student.id
        ).filter(AttendanceRecord.course_id == course.id)

    @staticmethod
    def _attendee_row(course: Course, record: AttendanceRecord, student: Student) -> Dict:
        return {
            'id': record.id,
            'marked_at': isoformat_utc(record.marked_at),
            'student_id': student.id,
            'student_name': student.name,
            'mat_no': student.mat_no,
            'course_id': course.id,
            'course_code': course.course_code,
            'course_title': course.course_title,
            'attendance_date': record.attendance_date.isoformat(),
            'attendance_time': record.marked_at.strftime('%H:%M:%S'),
        }

    def course_records(self, lecturer_id: int, course_id: int) -> List[Dict]:
        """Every record of a course, newest first."""
        course = self.courses.get_owned_course(lecturer_id, course_id)
        rows = self._attendee_query(course).order_by(AttendanceRecord.marked_at.desc()).all()
        return [self._attendee_row(course, record, student) for record, student in rows]

    def sessions(self, lecturer_id: int, course_id: int) -> List[Dict]:
        """Records grouped by civil day, newest day first."""
        course = self.courses.get_owned_course(lecturer_id, course_id)

        rows = self.session.query(
            AttendanceRecord.attendance_date,
            func.count(AttendanceRecord.id).label('total_students'),
            func.min(AttendanceRecord.marked_at).label('session_start'),
            func.max(AttendanceRecord.marked_at).label('session_end'),
        ).filter(
            AttendanceRecord.course_id == course.id
        ).group_by(
            AttendanceRecord.attendance_date
        ).order_by(
            AttendanceRecord.attendance_date.desc()
        ).all()

        return [
            {
                'attendance_date': isoformat_date(row.attendance_date),
                'total_students': row.total_students,
                'session_start': isoformat_utc(row.session_start),
                'session_end': isoformat_utc(row.session_end),
                'course_code': course.course_code,
                'course_title': course.course_title,
            }
            for row in rows
        ]

    def session_attendees(self, lecturer_id: int, course_id: int, day: date) -> List[Dict]:
        """Named attendees of one session, in arrival order."""
        course = self.courses.get_owned_course(lecturer_id, course_id)
        rows = self._attendee_query(course).filter(
            AttendanceRecord.attendance_date == day
        ).order_by(AttendanceRecord.marked_at.asc()).all()
        return [self._attendee_row(course, record, student) for record, student in rows]

    def export_session_csv(self, lecturer_id: int, course_id: int, day: date) -> str:
        """CSV of one session's attendees."""
        attendees = self.session_attendees(lecturer_id, course_id, day)

        df = pd.DataFrame(
            [
                {
                    'S/N': index,
                    'Name': row['student_name'],
                    'Matriculation No': row['mat_no'],
                    'Course': row['course_code'],
                    'Date': row['attendance_date'],
                    'Time (UTC)': row['attendance_time'],
                }
                for index, row in enumerate(attendees, start=1)
            ],
            columns=['S/N', 'Name', 'Matriculation No', 'Course', 'Date', 'Time (UTC)'],
        )

        output = io.StringIO()
        df.to_csv(output, index=False)
        return output.getvalue()

    def course_stats(self, lecturer_id: int, course_id: int) -> Dict:
        course = self.courses.get_owned_course(lecturer_id, course_id)

        stats = self.session.query(
            func.count(distinct(AttendanceRecord.student_id)).label('unique_students'),
            func.count(AttendanceRecord.id).label('total_attendance_records'),
            func.count(distinct(AttendanceRecord.attendance_date)).label('total_sessions'),
            func.min(AttendanceRecord.attendance_date).label('first_session'),
            func.max(AttendanceRecord.attendance_date).label('latest_session'),
        ).filter(AttendanceRecord.course_id == course.id).one()

        return {
            'course': self._course_info(course),
            'statistics': {
                'unique_students': stats.unique_students or 0,
                'total_attendance_records': stats.total_attendance_records or 0,
                'total_sessions': stats.total_sessions or 0,
                'first_session': isoformat_date(stats.first_session),
                'latest_session': isoformat_date(stats.latest_session),
            }
        }

    def student_history(self, student_id: int) -> List[Dict]:
        """A student's own records across courses, newest first."""
        rows = self.session.query(AttendanceRecord, Course).join(
            Course, AttendanceRecord.course_id == Course.id
        ).filter(
            AttendanceRecord.student_id == student_id
        ).order_by(AttendanceRecord.marked_at.desc()).all()

        return [
            {
                'id': record.id,
                'marked_at': isoformat_utc(record.marked_at),
                'course_id': course.id,
                'course_code': course.course_code,
                'course_title': course.course_title,
                'attendance_date': record.attendance_date.isoformat(),
                'attendance_time': record.marked_at.strftime('%H:%M:%S'),
            }
            for record, course in rows
        ]

    def recent_codes(self, lecturer_id: int) -> List[Dict]:
        """The lecturer's codes that are live or expired within the last two hours."""
        now = self.clock()
        codes = self.session.query(AttendanceCode).join(
            Course, AttendanceCode.course_id == Course.id
        ).filter(
            Course.lecturer_id == lecturer_id,
            AttendanceCode.expires_at > now - RECENT_CODES_WINDOW
        ).order_by(AttendanceCode.expires_at.desc()).all()

        return [
            {
                'code': code.code,
                'course_id': code.course_id,
                'expires_at': isoformat_utc(code.expires_at),
                'seconds_left': code.seconds_left(now),
                'is_expired': code.is_expired(now),
                'lecturer_lat': code.lecturer_lat,
                'lecturer_lon': code.lecturer_lon,
            }
            for code in codes
        ]

    def admin_summary(self) -> Dict:
        now = self.clock()
        return {
            'students': self.session.query(func.count(Student.id)).scalar(),
            'lecturers': self.session.query(func.count(Lecturer.id)).scalar(),
            'courses': self.session.query(func.count(Course.id)).scalar(),
            'attendance_records': self.session.query(func.count(AttendanceRecord.id)).scalar(),
            'live_codes': self.session.query(func.count(AttendanceCode.id)).filter(
                AttendanceCode.expires_at > now
            ).scalar(),
            'generated_at': isoformat_utc(now),
        }
