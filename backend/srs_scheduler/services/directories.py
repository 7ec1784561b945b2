from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from srs_scheduler.models.course import Course
from srs_scheduler.models.student import Student
from srs_scheduler.models.teacher import Teacher


@dataclass(frozen=True)
class StudentPlacement:
    class_name: str
    section: str


class StudentDirectory:
    def __init__(self, db: Session) -> None:
        self._db = db

    def find_by_id(self, student_id: str) -> StudentPlacement | None:
        student = self._db.get(Student, student_id)
        if student is None:
            return None
        return StudentPlacement(class_name=student.class_name, section=student.section)


class ClassDirectory:
    def __init__(self, db: Session) -> None:
        self._db = db

    def count_students(self, class_name: str, section: str) -> int:
        stmt = (
            select(func.count())
            .select_from(Student)
            .where(Student.class_name == class_name, Student.section == section)
        )
        return int(self._db.execute(stmt).scalar_one())


class TeacherDirectory:
    def __init__(self, db: Session) -> None:
        self._db = db

    def find_by_email(self, email: str) -> Teacher | None:
        stmt = select(Teacher).where(func.lower(Teacher.email) == email.strip().lower())
        return self._db.execute(stmt).scalar_one_or_none()

    def get_many(self, teacher_ids: Iterable[str]) -> dict[str, Teacher]:
        ids = set(teacher_ids)
        if not ids:
            return {}
        rows = self._db.execute(select(Teacher).where(Teacher.id.in_(ids))).scalars()
        return {teacher.id: teacher for teacher in rows}


class CourseDirectory:
    def __init__(self, db: Session) -> None:
        self._db = db

    def get_many(self, course_ids: Iterable[str]) -> dict[str, Course]:
        ids = set(course_ids)
        if not ids:
            return {}
        rows = self._db.execute(select(Course).where(Course.id.in_(ids))).scalars()
        return {course.id: course for course in rows}
