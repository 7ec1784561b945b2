from fastapi import APIRouter, Depends, Query, Response, status

from srs_scheduler.api.deps import get_schedule_service
from srs_scheduler.schemas.schedule import (
    ScheduleCreate,
    ScheduleCreateResult,
    ScheduleFilter,
    ScheduleListOut,
    ScheduleOut,
    ScheduleUpdate,
    TeacherLoadSummary,
)
from srs_scheduler.services.scheduling import ScheduleService

router = APIRouter()


@router.post("/", response_model=ScheduleCreateResult, status_code=status.HTTP_201_CREATED)
def create_schedule(
    payload: ScheduleCreate,
    response: Response,
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleCreateResult:
    result = service.create_schedule(payload)
    if not result.success:
        response.status_code = status.HTTP_409_CONFLICT
    return result


@router.get("/", response_model=ScheduleListOut)
def list_schedules(
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    class_name: str | None = Query(default=None, alias="className"),
    section: str | None = None,
    email_or_teacher_id: str | None = Query(default=None, alias="emailOrTeacherId"),
    date: str | None = None,
    course_lookup: bool = Query(default=False, alias="courseLookup"),
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleListOut:
    filters = ScheduleFilter(
        class_name=class_name,
        section=section,
        email_or_teacher_id=email_or_teacher_id,
        date=date,
        course_lookup=course_lookup,
        page=page,
        limit=limit,
    )
    return service.find_all(filters)


@router.get("/student/{student_id}", response_model=list[ScheduleOut])
def list_student_schedules(
    student_id: str,
    date: str = "today",
    service: ScheduleService = Depends(get_schedule_service),
) -> list[ScheduleOut]:
    return service.find_by_student_and_date(student_id, date)


@router.get("/teacher/{teacher_id}/summary", response_model=TeacherLoadSummary)
def teacher_summary(
    teacher_id: str,
    service: ScheduleService = Depends(get_schedule_service),
) -> TeacherLoadSummary:
    return service.teacher_load_summary(teacher_id)


@router.get("/{schedule_id}", response_model=ScheduleOut)
def get_schedule(
    schedule_id: str,
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleOut:
    return service.find_by_id(schedule_id)


@router.patch("/{schedule_id}", response_model=ScheduleOut)
def update_schedule(
    schedule_id: str,
    payload: ScheduleUpdate,
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleOut:
    return service.update_schedule(schedule_id, payload)


@router.delete("/{schedule_id}", response_model=ScheduleOut)
def delete_schedule(
    schedule_id: str,
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleOut:
    return service.remove_schedule(schedule_id)
