"""
Recurring schedule-event expansion.

expand() turns one prototype event plus a recurrence rule into the concrete
dated instances that get stored:

    none      -> one instance at the anchor date
    weekly    -> anchor, anchor + 7d, ... while date <= end date
    biweekly  -> same with a 14 day step
    custom    -> every day in [anchor, end] whose weekday is selected

expand() is total: degenerate input yields an empty list, never an error.
Checking that the input makes sense is the caller's job (see validate_rule).
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterator, List

from gsomtimetable.model import RecurrenceRule, ScheduleEventInstance, ScheduleEventPrototype

logger = logging.getLogger(__name__)

NONE = "none"
WEEKLY = "weekly"
BIWEEKLY = "biweekly"
CUSTOM = "custom"

PATTERNS = (NONE, WEEKLY, BIWEEKLY, CUSTOM)

# Six-day teaching week, Sunday cannot be selected
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday")

_STEPS = {WEEKLY: 7, BIWEEKLY: 14}


def _weekday_name(day: date) -> str:
    # date.weekday(): Monday == 0 ... Sunday == 6
    index = day.weekday()
    return WEEKDAYS[index] if index < len(WEEKDAYS) else "sunday"


def _stepped_dates(start: date, end: date, step_days: int) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=step_days)


def _custom_dates(start: date, end: date, days: frozenset[str]) -> Iterator[date]:
    selected = {d.strip().lower() for d in days} & set(WEEKDAYS)
    if not selected:
        return
    for current in _stepped_dates(start, end, 1):
        if _weekday_name(current) in selected:
            yield current


def occurrence_dates(anchor: date, rule: RecurrenceRule) -> List[date]:
    """
    Dates the rule produces for a given anchor date, in ascending order.
    """
    pattern = (rule.pattern or NONE).strip().lower()

    if pattern == NONE:
        return [anchor]
    if rule.end_date is None:
        return []
    if pattern in _STEPS:
        return list(_stepped_dates(anchor, rule.end_date, _STEPS[pattern]))
    if pattern == CUSTOM:
        return list(_custom_dates(anchor, rule.end_date, rule.custom_days))
    return []


def _instance(prototype: ScheduleEventPrototype, day: date, rule: RecurrenceRule, recurring: bool) -> ScheduleEventInstance:
    return ScheduleEventInstance(
        title=prototype.title,
        type=prototype.type,
        start_time=prototype.start_time,
        end_time=prototype.end_time,
        date=day,
        teacher=prototype.teacher,
        room=prototype.room,
        address=prototype.address,
        is_recurring=recurring,
        recurrence_pattern=rule.pattern.strip().lower() if recurring else None,
        recurrence_end_date=rule.end_date if recurring else None,
    )


def expand(prototype: ScheduleEventPrototype, rule: RecurrenceRule) -> List[ScheduleEventInstance]:
    """
    Expand one prototype into its dated instances.

    Every recurring instance carries the pattern and end date itself, so a
    stored row is explicable without looking up any "parent" event.
    """
    dates = occurrence_dates(prototype.date, rule)
    recurring = (rule.pattern or NONE).strip().lower() != NONE
    instances = [_instance(prototype, day, rule, recurring) for day in dates]
    logger.debug("Expanded %r rule from %s into %d events", rule.pattern, prototype.date, len(instances))
    return instances


def validate_rule(prototype: ScheduleEventPrototype, rule: RecurrenceRule) -> List[str]:
    """
    Caller-side checks before expanding user input.

    Returns a list of problems; an empty list means the rule is usable.
    """
    problems: List[str] = []
    pattern = (rule.pattern or NONE).strip().lower()

    if pattern not in PATTERNS:
        problems.append(f"Unknown recurrence pattern: {rule.pattern!r}")
        return problems
    if pattern == NONE:
        return problems

    if rule.end_date is None:
        problems.append("Recurring events need an end date.")
    elif prototype.date > rule.end_date:
        problems.append("End date must not be before the event date.")

    if pattern == CUSTOM:
        selected = {d.strip().lower() for d in rule.custom_days}
        unknown = sorted(selected - set(WEEKDAYS))
        if unknown:
            problems.append(f"Unknown weekdays: {', '.join(unknown)}")
        if not selected & set(WEEKDAYS):
            problems.append("Select at least one day of the week.")

    return problems
