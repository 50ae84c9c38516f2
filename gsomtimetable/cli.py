"""
CLI (Command Line Interface).

This module provides terminal commands for administrators and for testing, e.g.:

    gsomtimetable resolve bak-men-24-b01
    gsomtimetable slug --degree bachelor --program Management --year 2024 --group B01
    gsomtimetable add bak-men-24-b01 --title-en ... --date 2024-09-02 --repeat weekly --until 2024-12-23
    gsomtimetable show bak-men-24-b01 --week 2024-09-02
    gsomtimetable delete 42
    gsomtimetable import schedule-24-b01.txt --ru ru-schedule-24-b01.txt
    gsomtimetable fetch schedule-24-b01.txt

Note:
- All commands return a process exit code (0 = ok, 1 = user error)
- Unknown slugs are reported as "Timetable not found", never as a crash
"""

from __future__ import annotations

import argparse
import logging
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from gsomtimetable.errors import ScheduleFileError, SlugError
from gsomtimetable.fetch import download_schedule_file
from gsomtimetable.model import (
    Bilingual,
    ProgramIdentity,
    RecurrenceRule,
    ScheduleEventInstance,
    ScheduleEventPrototype,
)
from gsomtimetable.parse import entries_to_instances, parse_schedule_data
from gsomtimetable.recurrence import PATTERNS, expand, validate_rule
from gsomtimetable.slugs import (
    decode_slug,
    encode_slug,
    format_program_name,
    full_code,
    identity_for_full_code,
    split_full_code,
)
from gsomtimetable.storage import delete_event, delete_group, load_events, save_events
from gsomtimetable.week import class_type_category, current_week_start, format_week_range, group_by_day, week_start

logger = logging.getLogger(__name__)
console = Console()

_TYPE_STYLES = {
    "lecture": "bold red",
    "seminar": "red",
    "practical": "bright_red",
    "consultation": "yellow",
    "credit": "bold magenta",
    "review": "magenta",
    "other": "dim",
}


def _parse_date(value: Optional[str]) -> Optional[date]:
    """
    Parse YYYY-MM-DD. Returns None for empty or invalid input.
    """
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def _optional_pair(en: Optional[str], ru: Optional[str]) -> Optional[Bilingual]:
    en = (en or "").strip()
    ru = (ru or "").strip()
    if not en and not ru:
        return None
    return Bilingual(en or ru, ru or en)


def _resolve_or_report(slug: str) -> Optional[ProgramIdentity]:
    identity = decode_slug(slug)
    if identity is None:
        print(f"Timetable not found: {slug}")
    return identity


def _cmd_resolve(args: argparse.Namespace) -> int:
    """
    Print the identity behind a slug.
    """
    identity = _resolve_or_report(args.slug)
    if identity is None:
        return 1

    print(format_program_name(identity))
    print(f"degree:    {identity.degree}")
    print(f"program:   {identity.program}")
    print(f"year:      {identity.year}")
    print(f"group:     {identity.group_code}")
    print(f"full code: {identity.full_code}")
    return 0


def _cmd_slug(args: argparse.Namespace) -> int:
    """
    Build the slug for a degree / program / year / group selection.
    """
    try:
        slug = encode_slug(args.program, args.year, args.group, args.degree)
    except SlugError as exc:
        print(f"Error: {exc}")
        return 1

    print(slug)
    return 0


def _cmd_add(args: argparse.Namespace) -> int:
    """
    Create one event, expanded into all its recurrences, for the slug's group.
    """
    identity = _resolve_or_report(args.slug)
    if identity is None:
        return 1

    required = {
        "--title-en": args.title_en,
        "--title-ru": args.title_ru,
        "--type-en": args.type_en,
        "--type-ru": args.type_ru,
        "--start": args.start,
        "--end": args.end,
    }
    missing = [flag for flag, value in required.items() if not (value or "").strip()]
    if missing:
        print(f"Required fields are missing: {', '.join(missing)}")
        return 1

    anchor = _parse_date(args.date)
    if anchor is None:
        print(f"Invalid date: {args.date!r} (expected YYYY-MM-DD)")
        return 1

    until = None
    if args.until:
        until = _parse_date(args.until)
        if until is None:
            print(f"Invalid end date: {args.until!r} (expected YYYY-MM-DD)")
            return 1

    days = frozenset(d.strip().lower() for d in (args.days or "").split(",") if d.strip())

    prototype = ScheduleEventPrototype(
        title=Bilingual(args.title_en.strip(), args.title_ru.strip()),
        type=Bilingual(args.type_en.strip(), args.type_ru.strip()),
        start_time=args.start.strip(),
        end_time=args.end.strip(),
        date=anchor,
        teacher=_optional_pair(args.teacher_en, args.teacher_ru),
        room=(args.room or "").strip() or None,
        address=_optional_pair(args.address_en, args.address_ru),
    )
    rule = RecurrenceRule(pattern=args.repeat, end_date=until, custom_days=days)

    problems = validate_rule(prototype, rule)
    if problems:
        for problem in problems:
            print(problem)
        return 1

    events = expand(prototype, rule)
    stored = save_events(identity.full_code, events, path=args.store)
    print(f"Created {len(stored)} events for {identity.full_code}")
    return 0


def _render_week(identity: ProgramIdentity, start: date, language: str, store: Optional[Path]) -> None:
    """
    Print one teaching week as a rich table per day.
    """
    days = group_by_day(load_events(identity.full_code, path=store), start)

    console.print(f"[bold]{format_program_name(identity)}[/bold]")
    console.print(format_week_range(start))

    for day, events in days.items():
        table = Table(title=day.strftime("%A, %d.%m.%Y"), box=box.SIMPLE, title_justify="left")
        table.add_column("ID", justify="right")
        table.add_column("Time")
        table.add_column("Type")
        table.add_column("Class")
        table.add_column("Room")
        table.add_column("Teacher")

        if not events:
            table.add_row("", "", "", "[dim]no classes[/dim]", "", "")

        for ev in events:
            type_text = ev.type.get(language)
            style = _TYPE_STYLES[class_type_category(type_text)]
            teacher = ev.teacher.get(language).split(",")[0] if ev.teacher else ""
            room = ev.room or ""
            if ev.address:
                room = f"{room}, {ev.address.get(language)}" if room else ev.address.get(language)
            table.add_row(
                str(ev.id if ev.id is not None else ""),
                f"{ev.start_time[:5]}-{ev.end_time[:5]}",
                f"[{style}]{type_text}[/{style}]",
                ev.title.get(language),
                room,
                teacher,
            )

        console.print(table)


def _cmd_show(args: argparse.Namespace) -> int:
    """
    Show the weekly timetable of a group (current week by default).
    """
    identity = _resolve_or_report(args.slug)
    if identity is None:
        return 1

    if args.week:
        day = _parse_date(args.week)
        if day is None:
            print(f"Invalid date: {args.week!r} (expected YYYY-MM-DD)")
            return 1
        start = week_start(day)
    else:
        start = current_week_start()

    _render_week(identity, start, args.lang, args.store)
    return 0


def _cmd_delete(args: argparse.Namespace) -> int:
    """
    Delete one stored event by id.
    """
    if delete_event(args.event_id, path=args.store):
        print(f"Deleted event {args.event_id}")
        return 0
    print(f"Event not found: {args.event_id}")
    return 1


def _read_text(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Cannot read {path}: {exc}")
        return None


def _canonical_groups(by_group: Dict[str, List[ScheduleEventInstance]]) -> Dict[str, List[ScheduleEventInstance]]:
    """
    Merge raw academic group texts ("24.b01-vshm", " 24.B01-VSHM") under their
    canonical full code. Groups that are not full codes are reported and dropped.
    """
    out: Dict[str, List[ScheduleEventInstance]] = {}
    for raw, events in by_group.items():
        try:
            code = full_code(*split_full_code(raw))
        except SlugError:
            print(f"Skipped {len(events)} events: unknown group {raw!r}")
            continue
        out.setdefault(code, []).extend(events)
    return out


def _cmd_import(args: argparse.Namespace) -> int:
    """
    Import legacy tab-separated schedule files into the store.

    A group's stored events are replaced, so importing the same file again
    does not duplicate rows.
    """
    en_text = _read_text(Path(args.file))
    if en_text is None:
        return 1

    ru_entries = None
    if args.ru:
        ru_text = _read_text(Path(args.ru))
        if ru_text is None:
            return 1
        ru_entries = parse_schedule_data(ru_text)

    by_group = _canonical_groups(entries_to_instances(parse_schedule_data(en_text), ru_entries))
    if not by_group:
        print("No schedule entries found.")
        return 0

    for group_code, events in sorted(by_group.items()):
        removed = delete_group(group_code, path=args.store)
        stored = save_events(group_code, events, path=args.store)
        logger.info("Replaced %d events of %s with %d imported", removed, group_code, len(stored))
        try:
            url = f"/{identity_for_full_code(group_code).slug}"
        except SlugError:
            url = "(no slug for this group)"
        print(f"Imported {len(stored)} events for {group_code} -> {url}")

    return 0


def _cmd_fetch(args: argparse.Namespace) -> int:
    """
    Download a legacy schedule file into the local cache.
    """
    try:
        path = download_schedule_file(
            args.file_name,
            out_dir=Path(args.out_dir) if args.out_dir else None,
            base=args.base_url,
            refresh=args.refresh,
        )
    except ScheduleFileError as exc:
        print(f"Error: {exc}")
        return 1

    print(f"Saved: {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="gsomtimetable", description="GSOM timetable CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--store", type=Path, default=None, help="Path of the schedule events JSON store")
    sub = parser.add_subparsers(dest="command", required=True)

    p_resolve = sub.add_parser("resolve", help="Show which group a slug points to")
    p_resolve.add_argument("slug", type=str, help="Slug (e.g. bak-men-24-b01)")

    p_slug = sub.add_parser("slug", help="Build the slug of a group")
    p_slug.add_argument("--degree", required=True, help="bachelor or master")
    p_slug.add_argument("--program", required=True, help="Program name (e.g. Management)")
    p_slug.add_argument("--year", required=True, help="Intake year (e.g. 2024)")
    p_slug.add_argument("--group", required=True, help="Group code or full code (e.g. B01, 24.B01-vshm)")

    p_add = sub.add_parser("add", help="Add a (recurring) class to a group")
    p_add.add_argument("slug", type=str, help="Slug of the group")
    p_add.add_argument("--title-en", default="")
    p_add.add_argument("--title-ru", default="")
    p_add.add_argument("--type-en", default="")
    p_add.add_argument("--type-ru", default="")
    p_add.add_argument("--teacher-en")
    p_add.add_argument("--teacher-ru")
    p_add.add_argument("--room")
    p_add.add_argument("--address-en")
    p_add.add_argument("--address-ru")
    p_add.add_argument("--date", required=True, help="First occurrence (YYYY-MM-DD)")
    p_add.add_argument("--start", default="", help="Start time (HH:MM)")
    p_add.add_argument("--end", default="", help="End time (HH:MM)")
    p_add.add_argument("--repeat", choices=PATTERNS, default="none", help="Recurrence pattern")
    p_add.add_argument("--until", help="Last possible date of the recurrence (YYYY-MM-DD)")
    p_add.add_argument("--days", help="Comma separated weekdays for --repeat custom (e.g. monday,wednesday)")

    p_show = sub.add_parser("show", help="Show one week of a group's timetable")
    p_show.add_argument("slug", type=str, help="Slug of the group")
    p_show.add_argument("--week", help="Any date inside the week to show (default: current week)")
    p_show.add_argument("--lang", choices=("en", "ru"), default="en")

    p_delete = sub.add_parser("delete", help="Delete one event by id")
    p_delete.add_argument("event_id", type=int)

    p_import = sub.add_parser("import", help="Import a legacy schedule text file")
    p_import.add_argument("file", type=str, help="English schedule file")
    p_import.add_argument("--ru", help="Matching Russian schedule file")

    p_fetch = sub.add_parser("fetch", help="Download a legacy schedule file")
    p_fetch.add_argument("file_name", type=str, help="e.g. schedule-24-b01.txt")
    p_fetch.add_argument("--base-url", help="Base URL the files are published under")
    p_fetch.add_argument("--out-dir", help="Download directory (default: package data/raw)")
    p_fetch.add_argument("--refresh", action="store_true", help="Re-download even if cached")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    handlers = {
        "resolve": _cmd_resolve,
        "slug": _cmd_slug,
        "add": _cmd_add,
        "show": _cmd_show,
        "delete": _cmd_delete,
        "import": _cmd_import,
        "fetch": _cmd_fetch,
    }
    handler = handlers.get(args.command)
    if handler is None:
        raise SystemExit(2)
    raise SystemExit(handler(args))
