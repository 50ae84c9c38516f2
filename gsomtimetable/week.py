"""
Weekly timetable view.

The site shows one teaching week at a time, Monday to Saturday, with the
current week determined in Moscow time.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Optional

from gsomtimetable.model import ScheduleEventInstance

MOSCOW_TZ = timezone(timedelta(hours=3), name="MSK")
TEACHING_DAYS = 6

# (category, keywords) checked in order; English and Russian type names
_TYPE_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("lecture", ("lecture", "лекция")),
    ("seminar", ("seminar", "семинар")),
    ("practical", ("practical lesson", "практическое занятие")),
    ("consultation", ("group consultation", "групповая консультация")),
    ("credit", ("credit", "зачет")),
    ("review", ("display of works", "показ работ")),
]


def week_start(day: date) -> date:
    """Monday of the week containing day."""
    return day - timedelta(days=day.weekday())


def current_week_start(now: Optional[datetime] = None) -> date:
    """
    Monday of the current week in Moscow time.

    now may be naive (treated as UTC) or timezone-aware.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return week_start(now.astimezone(MOSCOW_TZ).date())


def week_dates(start: date) -> list[date]:
    """The six teaching days starting at start (expected to be a Monday)."""
    return [start + timedelta(days=i) for i in range(TEACHING_DAYS)]


def group_by_day(events: Iterable[ScheduleEventInstance], start: date) -> dict[date, list[ScheduleEventInstance]]:
    """
    Bucket events into the teaching days of the week beginning at start.

    Every day is present (possibly empty); events outside the week are dropped.
    """
    days: dict[date, list[ScheduleEventInstance]] = {d: [] for d in week_dates(start)}
    for event in events:
        if event.date in days:
            days[event.date].append(event)
    for bucket in days.values():
        bucket.sort(key=lambda e: e.start_time)
    return days


def format_week_range(start: date) -> str:
    """
    "Jan 1 - 6, 2024", or "Jan 29 - Feb 3, 2024" when the week spans two months.
    """
    end = start + timedelta(days=TEACHING_DAYS - 1)
    if (start.year, start.month) == (end.year, end.month):
        return f"{start:%b} {start.day} - {end.day}, {end.year}"
    return f"{start:%b} {start.day} - {end:%b} {end.day}, {end.year}"


def class_type_category(type_text: str) -> str:
    text = type_text.lower()
    for category, keywords in _TYPE_KEYWORDS:
        if any(k in text for k in keywords):
            return category
    return "other"
