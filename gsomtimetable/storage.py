"""
Persistent storage for expanded schedule events.

This module manages the file:

    data/processed/schedule_events.json

with the schema

    {"next_id": 7, "groups": {"24.B01-vshm": [row, row, ...]}}

Each row is ScheduleEventInstance.to_row(). Rows are grouped under the
canonical group full code; deleting a group removes all of its events.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Any, Iterable, Optional

from gsomtimetable.model import ScheduleEventInstance

logger = logging.getLogger(__name__)


def _default_store_path() -> Path:
    """
    Return the default path of schedule_events.json inside the package.

    Tests pass their own path instead.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data" / "processed" / "schedule_events.json"


def _resolve(path: str | Path | None) -> Path:
    return Path(path) if path is not None else _default_store_path()


def _read_store(store_path: Path) -> dict[str, Any]:
    """
    Load the raw store. A missing or corrupted file reads as an empty store.
    """
    empty: dict[str, Any] = {"next_id": 1, "groups": {}}
    if not store_path.exists():
        return empty

    try:
        data = json.loads(store_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.warning("Ignoring unreadable schedule store %s: %s", store_path, exc)
        return empty

    if not isinstance(data, dict) or not isinstance(data.get("groups"), dict):
        logger.warning("Ignoring schedule store with unexpected layout: %s", store_path)
        return empty

    groups = {str(k): v for k, v in data["groups"].items() if isinstance(v, list)}
    next_id = data.get("next_id")
    if not isinstance(next_id, int) or next_id < 1:
        ids = [r.get("id") for rows in groups.values() for r in rows if isinstance(r, dict)]
        next_id = 1 + max((i for i in ids if isinstance(i, int)), default=0)
    return {"next_id": next_id, "groups": groups}


def _write_store(store_path: Path, data: dict[str, Any]) -> None:
    store_path.parent.mkdir(parents=True, exist_ok=True)
    store_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def _rows_to_instances(rows: Iterable[Any]) -> list[ScheduleEventInstance]:
    out: list[ScheduleEventInstance] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        try:
            out.append(ScheduleEventInstance.from_row(row))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping malformed schedule row %r: %s", row.get("id"), exc)
    return out


def load_events(
    full_code: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
    path: str | Path | None = None,
) -> list[ScheduleEventInstance]:
    """
    Return the stored events of one group ordered by date and start time.

    start / end (inclusive) limit the result to a date range.
    """
    data = _read_store(_resolve(path))
    events = _rows_to_instances(data["groups"].get(full_code, []))

    if start is not None:
        events = [e for e in events if e.date >= start]
    if end is not None:
        events = [e for e in events if e.date <= end]

    events.sort(key=lambda e: (e.date, e.start_time))
    return events


def save_events(
    full_code: str,
    events: Iterable[ScheduleEventInstance],
    path: str | Path | None = None,
) -> list[ScheduleEventInstance]:
    """
    Append events to a group and return them with their assigned ids.
    """
    store_path = _resolve(path)
    data = _read_store(store_path)
    rows = data["groups"].setdefault(full_code, [])

    stored: list[ScheduleEventInstance] = []
    for event in events:
        event = replace(event, id=data["next_id"])
        data["next_id"] += 1
        rows.append(event.to_row())
        stored.append(event)

    _write_store(store_path, data)
    logger.info("Stored %d events for group %s", len(stored), full_code)
    return stored


def delete_event(event_id: int, path: str | Path | None = None) -> bool:
    """
    Delete a single event by id. Returns False if no such event exists.
    """
    store_path = _resolve(path)
    data = _read_store(store_path)

    for full_code, rows in data["groups"].items():
        kept = [r for r in rows if not (isinstance(r, dict) and r.get("id") == event_id)]
        if len(kept) != len(rows):
            data["groups"][full_code] = kept
            _write_store(store_path, data)
            logger.info("Deleted event %d from group %s", event_id, full_code)
            return True

    return False


def delete_group(full_code: str, path: str | Path | None = None) -> int:
    """
    Remove a group together with all of its events. Returns the number of removed events.
    """
    store_path = _resolve(path)
    data = _read_store(store_path)

    rows = data["groups"].pop(full_code, None)
    if rows is None:
        return 0

    _write_store(store_path, data)
    logger.info("Deleted group %s with %d events", full_code, len(rows))
    return len(rows)


def list_groups(path: str | Path | None = None) -> list[str]:
    """
    Sorted full codes of all groups present in the store.
    """
    return sorted(_read_store(_resolve(path))["groups"])
