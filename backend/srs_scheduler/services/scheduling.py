"""Recurring weekly schedule engine.

Accepted entries never overlap per teacher, per class-section or per course
on the same day token. Conflict checking is a read-then-write sequence with
no locking of its own; callers needing strict exclusion under concurrent
writers must serialize creation themselves (e.g. a transaction with
row locks or an advisory lock keyed by the resource).
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import date

from sqlalchemy import and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from srs_scheduler.core.config import Settings, get_settings
from srs_scheduler.core.exceptions import (
    ResourceNotFoundError,
    ScheduleValidationError,
    StorageUnavailableError,
)
from srs_scheduler.models.course import Course
from srs_scheduler.models.schedule import DayKind, ScheduleEntry, ScheduleSession
from srs_scheduler.models.teacher import Teacher
from srs_scheduler.schemas.course import CourseOut
from srs_scheduler.schemas.schedule import (
    ScheduleConflict,
    ScheduleCreate,
    ScheduleCreateResult,
    ScheduleFilter,
    ScheduleListOut,
    ScheduleOut,
    ScheduleUpdate,
    SessionIn,
    SessionOut,
    TeacherLoadSummary,
)
from srs_scheduler.schemas.teacher import TeacherOut
from srs_scheduler.services.clock import DayToken, local_today, resolve_day_filter, weekday_name
from srs_scheduler.services.directories import (
    ClassDirectory,
    CourseDirectory,
    StudentDirectory,
    TeacherDirectory,
)
from srs_scheduler.services.schedule_store import ScheduleQuery, ScheduleStore

logger = logging.getLogger(__name__)


def _capitalize_first(value: str) -> str:
    return value[:1].upper() + value[1:]


class ScheduleService:
    def __init__(
        self,
        db: Session,
        *,
        store: ScheduleStore | None = None,
        students: StudentDirectory | None = None,
        classes: ClassDirectory | None = None,
        teachers: TeacherDirectory | None = None,
        courses: CourseDirectory | None = None,
        today: Callable[[], date] | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._store = store or ScheduleStore(db)
        self._students = students or StudentDirectory(db)
        self._classes = classes or ClassDirectory(db)
        self._teachers = teachers or TeacherDirectory(db)
        self._courses = courses or CourseDirectory(db)
        self._today = today or (lambda: local_today(self._settings.calendar_timezone))

    @contextmanager
    def _storage(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self._store.rollback()
            logger.exception("Schedule storage failed while trying to %s", action)
            raise StorageUnavailableError(action) from exc

    def create_schedule(self, payload: ScheduleCreate) -> ScheduleCreateResult:
        with self._storage("create a schedule"):
            found = self._find_conflict(payload)
            if found is not None:
                conflict, message = found
                logger.info(
                    "Rejected schedule for teacher %s, class %s-%s: %s",
                    payload.teacher_id,
                    payload.class_name,
                    payload.section,
                    message,
                )
                return ScheduleCreateResult(success=False, message=message, conflict=conflict)

            entry = ScheduleEntry(
                teacher_id=payload.teacher_id,
                course_id=payload.course_id,
                class_name=payload.class_name,
                section=payload.section,
                sessions=self._build_sessions(payload.days),
            )
            entry = self._store.insert(entry)
            stored = self._expand([entry])[0]

        logger.info("Created schedule %s with %d session(s)", stored.id, len(stored.days))
        return ScheduleCreateResult(success=True, message="Schedule created successfully.", schedule=stored)

    def _find_conflict(self, payload: ScheduleCreate) -> tuple[ScheduleConflict, str] | None:
        checks = (
            (
                "teacher",
                ScheduleEntry.teacher_id == payload.teacher_id,
                "Teacher conflict: Teacher already has a class on {day} between {start} and {end}",
            ),
            (
                "classroom",
                and_(ScheduleEntry.class_name == payload.class_name, ScheduleEntry.section == payload.section),
                "Classroom conflict: Class {class_name}-{section} already has a schedule on {day} "
                "between {start} and {end}",
            ),
            (
                "course",
                ScheduleEntry.course_id == payload.course_id,
                "Course conflict: This course already has a schedule on {day} between {start} and {end}",
            ),
        )
        for conflict_type, resource, template in checks:
            for session in payload.days:
                hit = self._store.find_overlapping(
                    resource,
                    day=session.day_token,
                    start_minute=session.start_minute,
                    end_minute=session.end_minute,
                )
                if hit is None:
                    continue
                existing_entry, existing_session = hit
                conflict = ScheduleConflict(
                    conflict_type=conflict_type,
                    date=session.date,
                    date_kind=session.kind,
                    start_time=existing_session.start_time,
                    end_time=existing_session.end_time,
                    schedule_id=existing_entry.id,
                )
                message = template.format(
                    day=session.date,
                    start=existing_session.start_time,
                    end=existing_session.end_time,
                    class_name=payload.class_name,
                    section=payload.section,
                )
                return conflict, message
        return None

    def find_all(self, filters: ScheduleFilter) -> ScheduleListOut:
        query = ScheduleQuery(class_name=filters.class_name, section=filters.section)
        if filters.date:
            query.days = [self._resolve_day(filters.date)]

        with self._storage("list schedules"):
            identity = (filters.email_or_teacher_id or "").strip()
            if "@" in identity:
                teacher = self._teachers.find_by_email(identity)
                if teacher is None:
                    return ScheduleListOut(data=[], total=0)
                query.teacher_id = teacher.id
            elif identity:
                query.teacher_id = identity

            total = self._store.count(query)

            # Course dropdowns want every match, unpaginated, with only the course expanded.
            if filters.course_lookup:
                entries = self._store.find(query)
                return ScheduleListOut(data=self._expand(entries, with_teacher=False), total=total)

            limit = min(filters.limit or self._settings.default_page_size, self._settings.max_page_size)
            entries = self._store.find(query, offset=(filters.page - 1) * limit, limit=limit)
            return ScheduleListOut(data=self._expand(entries), total=total, page=filters.page, limit=limit)

    def find_by_id(self, schedule_id: str) -> ScheduleOut:
        with self._storage("load a schedule"):
            entry = self._store.get(schedule_id)
            if entry is None:
                raise ResourceNotFoundError("Schedule", schedule_id)
            return self._expand([entry])[0]

    def find_by_student_and_date(self, student_id: str, raw_date: str) -> list[ScheduleOut]:
        with self._storage("load a student schedule"):
            placement = self._students.find_by_id(student_id)
            if placement is None:
                raise ResourceNotFoundError("Student", student_id)

            day = self._resolve_day(raw_date)
            views = self._store.find_for_class_on_day(
                placement.class_name, _capitalize_first(placement.section), day
            )
            teachers = self._teachers.get_many(view.entry.teacher_id for view in views)
            courses = self._courses.get_many(view.entry.course_id for view in views)

            results: list[ScheduleOut] = []
            for view in views:
                teacher = teachers.get(view.entry.teacher_id)
                course = courses.get(view.entry.course_id)
                if teacher is None or course is None:
                    logger.debug("Skipping schedule %s with unresolved teacher or course", view.entry.id)
                    continue
                results.append(self._to_out(view.entry, teacher=teacher, course=course, sessions=view.sessions))
            return results

    def teacher_load_summary(self, teacher_id: str) -> TeacherLoadSummary:
        try:
            entries = self._store.find(ScheduleQuery(teacher_id=teacher_id))
            class_sections = sorted({(entry.class_name, entry.section) for entry in entries})
            total_students = sum(
                self._classes.count_students(class_name, section) for class_name, section in class_sections
            )
            today = self._today()
            todays = [DayToken(DayKind.weekday, weekday_name(today)), DayToken(DayKind.date, today.isoformat())]
            today_classes = self._store.count(ScheduleQuery(teacher_id=teacher_id, days=todays))
        except Exception:
            logger.exception("Unable to compute load summary for teacher %s", teacher_id)
            self._store.rollback()
            return TeacherLoadSummary(success=False, total_students=0, today_classes=0)
        return TeacherLoadSummary(success=True, total_students=total_students, today_classes=today_classes)

    def update_schedule(self, schedule_id: str, patch: ScheduleUpdate) -> ScheduleOut:
        # Corrections are applied as given; the create-time conflict checks are not re-run here.
        with self._storage("update a schedule"):
            entry = self._store.get(schedule_id)
            if entry is None:
                raise ResourceNotFoundError("Schedule", schedule_id)

            changes = {
                key: value
                for key, value in patch.model_dump(exclude_unset=True, exclude={"days"}).items()
                if value is not None
            }
            if patch.days is not None:
                changes["sessions"] = self._build_sessions(patch.days)
            entry = self._store.update(entry, changes)
            updated = self._expand([entry])[0]

        logger.info("Updated schedule %s (%s)", schedule_id, ", ".join(sorted(changes)) or "no changes")
        return updated

    def remove_schedule(self, schedule_id: str) -> ScheduleOut:
        with self._storage("delete a schedule"):
            entry = self._store.get(schedule_id)
            if entry is None:
                raise ResourceNotFoundError("Schedule", schedule_id)
            removed = self._expand([entry])[0]
            self._store.delete(entry)

        logger.info("Deleted schedule %s", schedule_id)
        return removed

    def _resolve_day(self, raw: str) -> DayToken:
        try:
            return resolve_day_filter(raw, self._today())
        except ValueError as exc:
            raise ScheduleValidationError(str(exc), details={"date": raw}) from exc

    @staticmethod
    def _build_sessions(days: list[SessionIn]) -> list[ScheduleSession]:
        return [
            ScheduleSession(
                position=position,
                day_kind=session.kind,
                day=session.date,
                start_time=session.start_time,
                end_time=session.end_time,
                start_minute=session.start_minute,
                end_minute=session.end_minute,
            )
            for position, session in enumerate(days)
        ]

    def _expand(
        self,
        entries: list[ScheduleEntry],
        *,
        with_teacher: bool = True,
        with_course: bool = True,
    ) -> list[ScheduleOut]:
        teachers = self._teachers.get_many(e.teacher_id for e in entries) if with_teacher else {}
        courses = self._courses.get_many(e.course_id for e in entries) if with_course else {}
        return [
            self._to_out(entry, teacher=teachers.get(entry.teacher_id), course=courses.get(entry.course_id))
            for entry in entries
        ]

    @staticmethod
    def _to_out(
        entry: ScheduleEntry,
        *,
        teacher: Teacher | None,
        course: Course | None,
        sessions: list[ScheduleSession] | None = None,
    ) -> ScheduleOut:
        return ScheduleOut(
            id=entry.id,
            teacher_id=entry.teacher_id,
            course_id=entry.course_id,
            class_name=entry.class_name,
            section=entry.section,
            days=[
                SessionOut(kind=s.day_kind, date=s.day, start_time=s.start_time, end_time=s.end_time)
                for s in (entry.sessions if sessions is None else sessions)
            ],
            created_at=entry.created_at,
            teacher=TeacherOut.model_validate(teacher) if teacher is not None else None,
            course=CourseOut.model_validate(course) if course is not None else None,
        )
