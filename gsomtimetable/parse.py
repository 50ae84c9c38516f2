"""
Parsing legacy schedule files (tab-separated text -> schedule events).

Before schedules were edited in the admin calendar they were published as
one text export per group and language:

    schedule-24-b01.txt       English
    ru-schedule-24-b01.txt    Russian

Each non-empty line holds ten tab-separated columns:

    academic group, date, start, end, name, discipline, type, address, room, teacher

Important rules:
- 1 line = 1 event, no recurrence
- an optional header line (mentioning "group") is skipped
- broken lines are skipped, never fatal
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

from gsomtimetable.model import Bilingual, ScheduleEventInstance
from gsomtimetable.slugs import split_full_code

logger = logging.getLogger(__name__)

COLUMNS = (
    "academic_group",
    "date",
    "start",
    "end",
    "name",
    "discipline",
    "type",
    "address",
    "room",
    "teacher",
)

_FILE_NAME_RE = re.compile(r"(ru-)?schedule-[0-9]{2}-[bm][0-9]{2}\.txt")


# ---------------------------------------------------------------------------
# File names
# ---------------------------------------------------------------------------


def is_valid_schedule_file_name(name: str) -> bool:
    """
    Only "[ru-]schedule-<yy>-<b|m><nn>.txt" is accepted (no paths, no other files).
    """
    return bool(_FILE_NAME_RE.fullmatch(name))


def schedule_file_name(year_prefix: str, group_code: str, language: str = "en") -> str:
    prefix = "ru-" if language == "ru" else ""
    return f"{prefix}schedule-{year_prefix}-{group_code.lower()}.txt"


def file_name_for_full_code(full_code: str, language: str = "en") -> str:
    """
    "24.B01-vshm" -> "schedule-24-b01.txt"
    """
    year_prefix, group_code = split_full_code(full_code)
    return schedule_file_name(year_prefix, group_code, language)


# ---------------------------------------------------------------------------
# Line parsing (CORE LOGIC)
# ---------------------------------------------------------------------------


def _unquote(value: str) -> str:
    value = value.strip()
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def _parse_date(raw: str) -> Optional[date]:
    """
    Accepts "M/D/YYYY[ time]", "DD-MM-YY[...]" and "DD.MM.YYYY[...]".
    """
    text = raw.strip()

    if "/" in text:
        try:
            return datetime.strptime(text.split(" ")[0], "%m/%d/%Y").date()
        except ValueError:
            return None

    for fmt, width in (("%d.%m.%Y", 10), ("%d-%m-%y", 8)):
        try:
            return datetime.strptime(text[:width], fmt).date()
        except ValueError:
            continue
    return None


def parse_schedule_line(line: str) -> Optional[Dict[str, str]]:
    """
    Parses exactly one line into one entry dict, or None if the line is unusable.
    """
    values = line.rstrip("\r\n").split("\t")

    # We need all ten columns, and group + date must be present
    if len(values) < len(COLUMNS):
        return None

    entry = {key: _unquote(value) for key, value in zip(COLUMNS, values)}
    if not entry["academic_group"] or not entry["date"]:
        return None

    day = _parse_date(entry["date"])
    if day is None:
        return None

    entry["date"] = day.isoformat()
    # "09:30:00" -> "09:30"
    entry["start"] = entry["start"][:5]
    entry["end"] = entry["end"][:5]
    return entry


def parse_schedule_data(data: str) -> List[Dict[str, str]]:
    """
    Parses a whole file content into entry dicts.
    """
    if not data or not data.strip():
        return []

    lines = [line for line in data.splitlines() if line.strip()]
    if not lines:
        return []

    start_index = 1 if "group" in lines[0].lower() else 0

    entries: List[Dict[str, str]] = []
    skipped = 0
    for line in lines[start_index:]:
        entry = parse_schedule_line(line)
        if entry is None:
            skipped += 1
            continue
        entries.append(entry)

    if skipped:
        logger.info("Skipped %d unusable schedule lines", skipped)
    return entries


# ---------------------------------------------------------------------------
# Entries -> events
# ---------------------------------------------------------------------------


def _entry_key(entry: Dict[str, str]) -> Tuple[str, str, str]:
    return entry["date"], entry["start"], entry["end"]


def _pair(en: str, ru: str) -> Optional[Bilingual]:
    if not en and not ru:
        return None
    return Bilingual(en or ru, ru or en)


def entries_to_instances(
    en_entries: List[Dict[str, str]],
    ru_entries: Optional[List[Dict[str, str]]] = None,
) -> Dict[str, List[ScheduleEventInstance]]:
    """
    Turn parsed entries into bilingual events grouped by academic group.

    Russian rows are matched to English rows by (date, start, end); events
    without a Russian counterpart reuse the English text.
    """
    ru_by_key: Dict[Tuple[str, str, str], Dict[str, str]] = {}
    for entry in ru_entries or []:
        ru_by_key.setdefault(_entry_key(entry), entry)

    out: Dict[str, List[ScheduleEventInstance]] = defaultdict(list)
    for en in en_entries:
        ru = ru_by_key.get(_entry_key(en), en)
        title_en = en["discipline"] or en["name"]
        title_ru = ru["discipline"] or ru["name"]

        out[en["academic_group"]].append(
            ScheduleEventInstance(
                title=Bilingual(title_en, title_ru or title_en),
                type=Bilingual(en["type"], ru["type"] or en["type"]),
                start_time=en["start"],
                end_time=en["end"],
                date=date.fromisoformat(en["date"]),
                teacher=_pair(en["teacher"], ru["teacher"]),
                room=en["room"] or None,
                address=_pair(en["address"], ru["address"]),
            )
        )

    return dict(out)
