"""Database seeding service for demo data."""
from typing import List

from geoattend.models.course import Course
from geoattend.models.staff import Lecturer
from geoattend.models.student import Student

# 1x1 transparent PNG used as a stand-in reference face
PLACEHOLDER_FACE = (
    'iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII='
)

DEMO_COURSES = [
    ('CSC101', 'Introduction to Computer Science'),
    ('CSC201', 'Data Structures'),
    ('MTH102', 'Elementary Mathematics II'),
]

DEMO_STUDENTS = [
    ('U2021/0001', 'Ada Okafor', 'ada.okafor@students.example.edu', '08010000001'),
    ('U2021/0002', 'Tunde Bello', 'tunde.bello@students.example.edu', '08010000002'),
    ('U2021/0003', 'Grace Eze', 'grace.eze@students.example.edu', '08010000003'),
]


class SeedService:
    """Service to seed database with demo data."""

    def __init__(self, session):
        self.session = session

    def seed_all(self) -> List[str]:
        """Seed all demo data and describe what was created."""
        lecturer = self.seed_lecturer()
        courses = self.seed_courses(lecturer)
        students = self.seed_students()
        self.session.commit()

        return [
            f'Lecturer: {lecturer.email} / lecturer123',
            f'Courses: {", ".join(c.course_code for c in courses)}',
            f'Students: {", ".join(s.mat_no for s in students)}',
        ]

    def seed_lecturer(self) -> Lecturer:
        lecturer = self.session.query(Lecturer).filter_by(email='lecturer@example.edu').first()
        if lecturer is None:
            lecturer = Lecturer(
                staff_id='LEC-001',
                name='Dr. Ngozi Adeyemi',
                email='lecturer@example.edu',
                phone='08000000000',
            )
            lecturer.set_password('lecturer123')
            self.session.add(lecturer)
            self.session.flush()  # Get lecturer.id
        return lecturer

    def seed_courses(self, lecturer: Lecturer) -> List[Course]:
        courses = []
        for code, title in DEMO_COURSES:
            course = self.session.query(Course).filter_by(
                course_code=code, lecturer_id=lecturer.id
            ).first()
            if course is None:
                course = Course(course_code=code, course_title=title, lecturer_id=lecturer.id)
                self.session.add(course)
            courses.append(course)
        return courses

    def seed_students(self) -> List[Student]:
        students = []
        for mat_no, name, email, phone in DEMO_STUDENTS:
            student = self.session.query(Student).filter_by(mat_no=mat_no).first()
            if student is None:
                student = Student(
                    mat_no=mat_no,
                    name=name,
                    email=email,
                    phone=phone,
                    face_scan=PLACEHOLDER_FACE,
                    face_scan_mimetype='image/png',
                )
                self.session.add(student)
            students.append(student)
        return students
