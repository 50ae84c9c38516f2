"""
Central data model definitions used across the project.

This module defines the canonical structure of the timetable values so that:
- the slug codec, the recurrence expander and the store share field names
- storage rows map 1:1 onto the schedule_events columns
- identities stay immutable and hashable
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, FrozenSet, Optional

BACHELOR = "bachelor"
MASTER = "master"

# Institutional suffix of every group storage key (e.g. "24.B01-vshm")
FULL_CODE_SUFFIX = "-vshm"


@dataclass(frozen=True)
class ProgramIdentity:
    """
    Degree / program / year / group a timetable belongs to.

    Purely descriptive: it addresses stored groups but is not stored itself.
    """

    degree: str
    program: str
    year: int
    group_code: str

    @property
    def year_prefix(self) -> str:
        return f"{self.year % 100:02d}"

    @property
    def full_code(self) -> str:
        from gsomtimetable.slugs import full_code

        return full_code(self.year, self.group_code)

    @property
    def slug(self) -> str:
        from gsomtimetable.slugs import encode_slug

        return encode_slug(self.program, self.year, self.group_code, self.degree)


@dataclass(frozen=True)
class Bilingual:
    """English / Russian text pair."""

    en: str
    ru: str

    def get(self, language: str) -> str:
        return self.ru if language == "ru" else self.en


@dataclass(frozen=True)
class ScheduleEventPrototype:
    """
    The single template row an administrator fills in before expansion.
    """

    title: Bilingual
    type: Bilingual
    start_time: str
    end_time: str
    date: date
    teacher: Optional[Bilingual] = None
    room: Optional[str] = None
    address: Optional[Bilingual] = None


@dataclass(frozen=True)
class RecurrenceRule:
    """
    pattern is one of: none, weekly, biweekly, custom.
    custom_days holds lowercase weekday names and is only read for "custom".
    """

    pattern: str = "none"
    end_date: Optional[date] = None
    custom_days: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class ScheduleEventInstance:
    """
    One concrete, dated class occurrence (one row in the schedule store).
    """

    title: Bilingual
    type: Bilingual
    start_time: str
    end_time: str
    date: date
    teacher: Optional[Bilingual] = None
    room: Optional[str] = None
    address: Optional[Bilingual] = None
    is_recurring: bool = False
    recurrence_pattern: Optional[str] = None
    recurrence_end_date: Optional[date] = None
    id: Optional[int] = None

    def to_row(self) -> dict[str, Any]:
        """Flatten into the JSON-friendly storage row."""
        return {
            "id": self.id,
            "title_en": self.title.en,
            "title_ru": self.title.ru,
            "type_en": self.type.en,
            "type_ru": self.type.ru,
            "teacher_en": self.teacher.en if self.teacher else None,
            "teacher_ru": self.teacher.ru if self.teacher else None,
            "room": self.room,
            "address_en": self.address.en if self.address else None,
            "address_ru": self.address.ru if self.address else None,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "date": self.date.isoformat(),
            "is_recurring": self.is_recurring,
            "recurrence_pattern": self.recurrence_pattern,
            "recurrence_end_date": self.recurrence_end_date.isoformat() if self.recurrence_end_date else None,
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ScheduleEventInstance":
        """
        Rebuild an instance from a storage row.

        Raises KeyError / ValueError for rows without the required fields.
        """
        end = row.get("recurrence_end_date")
        raw_id = row.get("id")
        return cls(
            title=Bilingual(row["title_en"], row["title_ru"]),
            type=Bilingual(row["type_en"], row["type_ru"]),
            start_time=row["start_time"],
            end_time=row["end_time"],
            date=date.fromisoformat(row["date"]),
            teacher=_optional_pair(row.get("teacher_en"), row.get("teacher_ru")),
            room=row.get("room") or None,
            address=_optional_pair(row.get("address_en"), row.get("address_ru")),
            is_recurring=bool(row.get("is_recurring", False)),
            recurrence_pattern=row.get("recurrence_pattern") or None,
            recurrence_end_date=date.fromisoformat(end) if end else None,
            id=int(raw_id) if raw_id is not None else None,
        )


def _optional_pair(en: Optional[str], ru: Optional[str]) -> Optional[Bilingual]:
    if not en and not ru:
        return None
    return Bilingual(en or "", ru or "")
