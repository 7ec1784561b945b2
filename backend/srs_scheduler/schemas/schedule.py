from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from srs_scheduler.models.schedule import DayKind
from srs_scheduler.schemas.course import CourseOut
from srs_scheduler.schemas.teacher import TeacherOut
from srs_scheduler.services.clock import (
    DayToken,
    intervals_overlap,
    make_day_token,
    parse_time_to_minutes,
)

ConflictType = Literal["teacher", "classroom", "course"]


class SessionIn(BaseModel):
    kind: DayKind = DayKind.weekday
    date: str = Field(min_length=1, max_length=20)
    start_time: str = Field(alias="startTime", min_length=1, max_length=10)
    end_time: str = Field(alias="endTime", min_length=1, max_length=10)

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def validate_session(self) -> "SessionIn":
        self.date = make_day_token(self.kind, self.date).value
        self.start_time = self.start_time.strip()
        self.end_time = self.end_time.strip()
        if self.end_minute <= self.start_minute:
            raise ValueError(f"endTime {self.end_time} must be after startTime {self.start_time}")
        return self

    @property
    def day_token(self) -> DayToken:
        return DayToken(self.kind, self.date)

    @property
    def start_minute(self) -> int:
        return parse_time_to_minutes(self.start_time)

    @property
    def end_minute(self) -> int:
        return parse_time_to_minutes(self.end_time)


def _reject_internal_overlap(days: list[SessionIn]) -> None:
    for index, first in enumerate(days):
        for second in days[index + 1:]:
            if first.day_token != second.day_token:
                continue
            if intervals_overlap(first.start_minute, first.end_minute, second.start_minute, second.end_minute):
                raise ValueError(
                    f"Sessions on {first.date} overlap: {first.start_time}-{first.end_time} "
                    f"and {second.start_time}-{second.end_time}"
                )


class ScheduleCreate(BaseModel):
    teacher_id: str = Field(alias="teacherId", min_length=1, max_length=36)
    course_id: str = Field(alias="courseId", min_length=1, max_length=36)
    class_name: str = Field(alias="className", min_length=1, max_length=50)
    section: str = Field(min_length=1, max_length=20)
    days: list[SessionIn] = Field(min_length=1, max_length=50)

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def validate_days(self) -> "ScheduleCreate":
        _reject_internal_overlap(self.days)
        return self


class ScheduleUpdate(BaseModel):
    teacher_id: str | None = Field(default=None, alias="teacherId", min_length=1, max_length=36)
    course_id: str | None = Field(default=None, alias="courseId", min_length=1, max_length=36)
    class_name: str | None = Field(default=None, alias="className", min_length=1, max_length=50)
    section: str | None = Field(default=None, min_length=1, max_length=20)
    days: list[SessionIn] | None = Field(default=None, min_length=1, max_length=50)

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def validate_days(self) -> "ScheduleUpdate":
        if self.days:
            _reject_internal_overlap(self.days)
        return self


class SessionOut(BaseModel):
    kind: DayKind
    date: str
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")

    model_config = {"populate_by_name": True}


class ScheduleOut(BaseModel):
    id: str
    teacher_id: str = Field(alias="teacherId")
    course_id: str = Field(alias="courseId")
    class_name: str = Field(alias="className")
    section: str
    days: list[SessionOut]
    created_at: datetime = Field(alias="createdAt")
    teacher: TeacherOut | None = None
    course: CourseOut | None = None

    model_config = {"populate_by_name": True}


class ScheduleListOut(BaseModel):
    data: list[ScheduleOut]
    total: int
    page: int | None = None
    limit: int | None = None


class ScheduleFilter(BaseModel):
    class_name: str | None = None
    section: str | None = None
    email_or_teacher_id: str | None = None
    date: str | None = None
    course_lookup: bool = False
    page: int = Field(default=1, ge=1)
    limit: int | None = Field(default=None, ge=1)


class ScheduleConflict(BaseModel):
    conflict_type: ConflictType = Field(alias="conflictType")
    date: str
    date_kind: DayKind = Field(alias="dateKind")
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    schedule_id: str = Field(alias="scheduleId")

    model_config = {"populate_by_name": True}


class ScheduleCreateResult(BaseModel):
    success: bool
    message: str
    conflict: ScheduleConflict | None = None
    schedule: ScheduleOut | None = None


class TeacherLoadSummary(BaseModel):
    success: bool
    total_students: int = Field(alias="totalStudents")
    today_classes: int = Field(alias="todayClasses")

    model_config = {"populate_by_name": True}
