from srs_scheduler.models.course import Course  # noqa: F401
from srs_scheduler.models.schedule import DayKind, ScheduleEntry, ScheduleSession  # noqa: F401
from srs_scheduler.models.student import Student  # noqa: F401
from srs_scheduler.models.teacher import Teacher  # noqa: F401
