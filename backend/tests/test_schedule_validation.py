import pytest
from pydantic import ValidationError

from srs_scheduler.schemas.schedule import ScheduleCreate, ScheduleUpdate


def payload(*days):
    return {
        "teacherId": "T",
        "courseId": "A",
        "className": "9",
        "section": "A",
        "days": list(days),
    }


def test_weekday_names_are_normalized():
    schedule = ScheduleCreate.model_validate(payload({"date": " monday ", "startTime": "9:00 am", "endTime": "10:00 AM"}))

    assert schedule.days[0].date == "Monday"
    assert schedule.days[0].start_minute == 540
    assert schedule.days[0].end_minute == 600


def test_calendar_dates_need_the_date_kind():
    schedule = ScheduleCreate.model_validate(
        payload({"kind": "date", "date": "2026-10-19", "startTime": "09:00", "endTime": "10:00"})
    )
    assert schedule.days[0].day_token.value == "2026-10-19"

    with pytest.raises(ValidationError, match="Invalid weekday"):
        ScheduleCreate.model_validate(payload({"date": "2026-10-19", "startTime": "09:00", "endTime": "10:00"}))


def test_empty_day_list_is_rejected():
    with pytest.raises(ValidationError):
        ScheduleCreate.model_validate(payload())


@pytest.mark.parametrize(
    ("start", "end"),
    [("9am", "10:00"), ("09:00", "25:00"), ("", "10:00")],
)
def test_malformed_times_are_rejected(start, end):
    with pytest.raises(ValidationError):
        ScheduleCreate.model_validate(payload({"date": "Monday", "startTime": start, "endTime": end}))


def test_end_must_follow_start():
    with pytest.raises(ValidationError, match="must be after"):
        ScheduleCreate.model_validate(payload({"date": "Monday", "startTime": "10:00", "endTime": "10:00"}))
    with pytest.raises(ValidationError, match="must be after"):
        ScheduleCreate.model_validate(payload({"date": "Monday", "startTime": "2:00 PM", "endTime": "11:00 AM"}))


def test_sessions_inside_one_entry_must_not_overlap():
    with pytest.raises(ValidationError, match="overlap"):
        ScheduleCreate.model_validate(
            payload(
                {"date": "Monday", "startTime": "09:00", "endTime": "10:00"},
                {"date": "Monday", "startTime": "09:30", "endTime": "10:30"},
            )
        )

    schedule = ScheduleCreate.model_validate(
        payload(
            {"date": "Monday", "startTime": "09:00", "endTime": "10:00"},
            {"date": "Monday", "startTime": "10:00", "endTime": "11:00"},
        )
    )
    assert len(schedule.days) == 2


def test_update_allows_partial_patches():
    patch = ScheduleUpdate.model_validate({"section": "B"})

    assert patch.model_dump(exclude_unset=True) == {"section": "B"}

    with pytest.raises(ValidationError):
        ScheduleUpdate.model_validate({"days": []})
