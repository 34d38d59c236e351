"""Course registry."""
from typing import List

from flask import current_app
from sqlalchemy.exc import IntegrityError

from geoattend.models.course import Course
from geoattend.utils.errors import Conflict, NotFound
from geoattend.utils.validators import Validator


class CourseService:
    """Lecturer-owned courses. Every lookup is scoped to the owner."""

    def __init__(self, session):
        self.session = session

    def create_course(self, lecturer_id: int, data) -> Course:
        Validator.require_fields(data, ['courseCode', 'courseTitle'])
        course_code = str(data['courseCode']).strip()

        existing = self.session.query(Course.id).filter_by(
            course_code=course_code, lecturer_id=lecturer_id
        ).first()
        if existing:
            raise Conflict("Course with this code already exists")

        course = Course(
            course_code=course_code,
            course_title=str(data['courseTitle']).strip(),
            lecturer_id=lecturer_id,
        )
        self.session.add(course)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise Conflict("Course with this code already exists")

        current_app.logger.info('Course %s created by lecturer %s', course_code, lecturer_id)
        return course

    def list_courses(self, lecturer_id: int) -> List[Course]:
        return self.session.query(Course).filter_by(
            lecturer_id=lecturer_id
        ).order_by(Course.course_code.asc()).all()

    def get_owned_course(self, lecturer_id: int, course_id: int) -> Course:
        """Fetch a course the lecturer owns, or raise 404."""
        course = self.session.query(Course).filter_by(id=course_id, lecturer_id=lecturer_id).first()
        if course is None:
            current_app.logger.warning('Course %s not accessible to lecturer %s', course_id, lecturer_id)
            raise NotFound("Course not found or access denied")
        return course
