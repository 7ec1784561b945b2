import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from srs_scheduler.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DayKind(str, Enum):
    weekday = "weekday"
    date = "date"


class ScheduleEntry(Base):
    __tablename__ = "schedule_entries"
    __table_args__ = (Index("ix_schedule_entries_class_section", "class_name", "section"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    teacher_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    course_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    class_name: Mapped[str] = mapped_column(String(50), nullable=False)
    section: Mapped[str] = mapped_column(String(20), nullable=False)
    # Set in Python: listings order by recency and server clocks only resolve whole seconds on SQLite.
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=_utcnow)

    sessions: Mapped[list["ScheduleSession"]] = relationship(
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="ScheduleSession.position",
        lazy="selectin",
    )


class ScheduleSession(Base):
    __tablename__ = "schedule_sessions"
    __table_args__ = (Index("ix_schedule_sessions_day", "day_kind", "day", "start_minute", "end_minute"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entry_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("schedule_entries.id", ondelete="CASCADE"), index=True, nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    day_kind: Mapped[DayKind] = mapped_column(SAEnum(DayKind, name="day_kind"), nullable=False)
    day: Mapped[str] = mapped_column(String(20), nullable=False)
    start_time: Mapped[str] = mapped_column(String(10), nullable=False)
    end_time: Mapped[str] = mapped_column(String(10), nullable=False)
    start_minute: Mapped[int] = mapped_column(Integer, nullable=False)
    end_minute: Mapped[int] = mapped_column(Integer, nullable=False)

    entry: Mapped[ScheduleEntry] = relationship(back_populates="sessions")
