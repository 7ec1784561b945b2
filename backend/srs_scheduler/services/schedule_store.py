from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy import ColumnElement, and_, func, or_, select
from sqlalchemy.orm import Session

from srs_scheduler.models.schedule import ScheduleEntry, ScheduleSession
from srs_scheduler.services.clock import DayToken


@dataclass
class ScheduleQuery:
    class_name: str | None = None
    section: str | None = None
    teacher_id: str | None = None
    days: list[DayToken] = field(default_factory=list)

    def clauses(self) -> list[ColumnElement[bool]]:
        conditions: list[ColumnElement[bool]] = []
        if self.class_name:
            conditions.append(ScheduleEntry.class_name == self.class_name)
        if self.section:
            conditions.append(ScheduleEntry.section == self.section)
        if self.teacher_id:
            conditions.append(ScheduleEntry.teacher_id == self.teacher_id)
        if self.days:
            # An entry matches when any of its sessions falls on any of the days.
            conditions.append(ScheduleEntry.sessions.any(or_(*(_on_day(day) for day in self.days))))
        return conditions


@dataclass
class DayView:
    """An entry together with only the sessions that fall on the queried day."""

    entry: ScheduleEntry
    sessions: list[ScheduleSession] = field(default_factory=list)


def _on_day(day: DayToken) -> ColumnElement[bool]:
    return and_(ScheduleSession.day_kind == day.kind, ScheduleSession.day == day.value)


class ScheduleStore:
    """SQLAlchemy-backed storage for schedule entries and their sessions.

    The store never commits on reads; ``insert``, ``update`` and ``delete``
    commit so that each accepted write is durable before the caller sees it.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def find(
        self,
        query: ScheduleQuery,
        *,
        offset: int | None = None,
        limit: int | None = None,
    ) -> list[ScheduleEntry]:
        stmt = select(ScheduleEntry).where(*query.clauses()).order_by(ScheduleEntry.created_at.desc())
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self._db.execute(stmt).scalars().all())

    def count(self, query: ScheduleQuery) -> int:
        stmt = select(func.count()).select_from(ScheduleEntry).where(*query.clauses())
        return int(self._db.execute(stmt).scalar_one())

    def get(self, schedule_id: str) -> ScheduleEntry | None:
        return self._db.get(ScheduleEntry, schedule_id)

    def find_overlapping(
        self,
        resource: ColumnElement[bool],
        *,
        day: DayToken,
        start_minute: int,
        end_minute: int,
    ) -> tuple[ScheduleEntry, ScheduleSession] | None:
        """Return the oldest session on ``day`` overlapping ``[start, end)`` for entries matching ``resource``."""
        stmt = (
            select(ScheduleEntry, ScheduleSession)
            .join(ScheduleSession, ScheduleSession.entry_id == ScheduleEntry.id)
            .where(
                resource,
                _on_day(day),
                ScheduleSession.start_minute < end_minute,
                ScheduleSession.end_minute > start_minute,
            )
            .order_by(ScheduleEntry.created_at.asc(), ScheduleSession.position.asc())
            .limit(1)
        )
        row = self._db.execute(stmt).first()
        if row is None:
            return None
        return row[0], row[1]

    def find_for_class_on_day(self, class_name: str, section: str, day: DayToken) -> list[DayView]:
        entries = self.find(ScheduleQuery(class_name=class_name, section=section, days=[day]))
        return [
            DayView(
                entry=entry,
                sessions=[s for s in entry.sessions if s.day_kind == day.kind and s.day == day.value],
            )
            for entry in entries
        ]

    def insert(self, entry: ScheduleEntry) -> ScheduleEntry:
        self._db.add(entry)
        self._db.commit()
        self._db.refresh(entry)
        return entry

    def update(self, entry: ScheduleEntry, changes: dict) -> ScheduleEntry:
        for key, value in changes.items():
            setattr(entry, key, value)
        self._db.commit()
        self._db.refresh(entry)
        return entry

    def delete(self, entry: ScheduleEntry) -> None:
        self._db.delete(entry)
        self._db.commit()

    def rollback(self) -> None:
        self._db.rollback()
