"""Time-of-day parsing, interval overlap and day-token resolution.

Session times arrive either as 12-hour clock strings (``"9:00 AM"``) or as
24-hour strings (``"14:30"``). Everything is compared as minutes since
midnight over half-open ``[start, end)`` intervals, so back-to-back sessions
never collide.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from srs_scheduler.core.exceptions import ConfigurationError
from srs_scheduler.models.schedule import DayKind

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
_WEEKDAY_LOOKUP = {name.lower(): name for name in WEEKDAYS}

RELATIVE_DAY_OFFSETS = {"yesterday": -1, "today": 0, "tomorrow": 1}

TWELVE_HOUR_PATTERN = re.compile(r"^(1[0-2]|0?[1-9]):([0-5]\d)\s*([AaPp][Mm])$")
TWENTY_FOUR_HOUR_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


@dataclass(frozen=True)
class DayToken:
    kind: DayKind
    value: str

    def __str__(self) -> str:
        return self.value


def parse_time_to_minutes(value: str) -> int:
    text = value.strip()
    match = TWELVE_HOUR_PATTERN.match(text)
    if match:
        hours, minutes, meridiem = int(match.group(1)), int(match.group(2)), match.group(3).upper()
        if meridiem == "PM" and hours != 12:
            hours += 12
        if meridiem == "AM" and hours == 12:
            hours = 0
        return hours * 60 + minutes

    match = TWENTY_FOUR_HOUR_PATTERN.match(text)
    if match:
        return int(match.group(1)) * 60 + int(match.group(2))

    raise ValueError(f"Invalid time {value!r}: expected 'H:MM AM|PM' or 'HH:MM'")


def intervals_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    return start1 < end2 and start2 < end1


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def normalize_weekday(value: str) -> str:
    name = _WEEKDAY_LOOKUP.get(value.strip().lower())
    if name is None:
        raise ValueError(f"Invalid weekday {value!r}")
    return name


def normalize_iso_date(value: str) -> str:
    try:
        return date.fromisoformat(value.strip()).isoformat()
    except ValueError as exc:
        raise ValueError(f"Invalid calendar date {value!r}: expected YYYY-MM-DD") from exc


def make_day_token(kind: DayKind, value: str) -> DayToken:
    if kind == DayKind.weekday:
        return DayToken(DayKind.weekday, normalize_weekday(value))
    return DayToken(DayKind.date, normalize_iso_date(value))


def resolve_day_filter(raw: str, today: date) -> DayToken:
    """Turn a query token into the day token sessions are matched against.

    ``today``/``tomorrow``/``yesterday`` become weekday names relative to
    ``today``; weekday names match case-insensitively; ISO dates match
    one-off sessions stored with a calendar date.
    """
    token = raw.strip().lower()
    if token in RELATIVE_DAY_OFFSETS:
        target = today + timedelta(days=RELATIVE_DAY_OFFSETS[token])
        return DayToken(DayKind.weekday, weekday_name(target))
    if token in _WEEKDAY_LOOKUP:
        return DayToken(DayKind.weekday, _WEEKDAY_LOOKUP[token])
    try:
        return DayToken(DayKind.date, normalize_iso_date(raw))
    except ValueError:
        raise ValueError(
            f"Invalid date filter {raw!r}: use today, tomorrow, yesterday, a weekday name or YYYY-MM-DD"
        ) from None


def local_today(timezone_name: str | None = None) -> date:
    if not timezone_name:
        return date.today()
    try:
        zone = ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown calendar timezone {timezone_name!r}") from exc
    return datetime.now(zone).date()
