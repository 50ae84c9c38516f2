"""
Slug codec.

Maps URL path segments like

    bak-men-24-b01

onto a ProgramIdentity and back. The slug has exactly four hyphen-separated
parts: degree abbreviation, program abbreviation, 2-digit intake year and the
lowercase group code.

Rules:
- program and degree abbreviations come from the closed tables below
- encoding an unknown program or degree raises, it never falls back to a
  placeholder code
- decoding never raises: decode_slug() returns None for anything it cannot
  map, so routing code can send the visitor to the not-found page
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Union

from gsomtimetable.errors import SlugFormatError, UnknownProgramOrDegreeError
from gsomtimetable.model import BACHELOR, FULL_CODE_SUFFIX, MASTER, ProgramIdentity

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Abbreviation tables
# ---------------------------------------------------------------------------

PROGRAM_CODES: dict[str, str] = {
    "Management": "men",
    "International Management": "mmen",
    "Public Administration": "gmu",
    "Business Analytics and Big Data": "babd",
    "Smart City Management": "scm",
    "Corporate Finance": "cfin",
}
PROGRAM_NAMES: dict[str, str] = {code: name for name, code in PROGRAM_CODES.items()}

DEGREE_CODES: dict[str, str] = {BACHELOR: "bak", MASTER: "mag"}
DEGREE_NAMES: dict[str, str] = {code: name for name, code in DEGREE_CODES.items()}

DEGREE_TITLES: dict[str, str] = {BACHELOR: "Bachelor's", MASTER: "Master's"}

# Group number ranges per program, as assigned by the school office
_BACHELOR_GROUPS: list[tuple[int, int, str]] = [
    (1, 8, "Management"),
    (9, 10, "Public Administration"),
    (11, 12, "International Management"),
]
_MASTER_GROUPS: dict[int, str] = {
    1: "Management",
    2: "Corporate Finance",
    3: "Smart City Management",
    4: "Business Analytics and Big Data",
}

_GROUP_RE = re.compile(r"[A-Za-z][0-9]{2}")
_YEAR_RE = re.compile(r"[0-9]+")
_FULL_CODE_RE = re.compile(r"([0-9]{2})\.([A-Za-z][0-9]{2})" + re.escape(FULL_CODE_SUFFIX), re.IGNORECASE)


# ---------------------------------------------------------------------------
# Table lookups
# ---------------------------------------------------------------------------


def program_code(program: str) -> str:
    """
    Return the slug abbreviation of a program.

    Accepts the full program name or an abbreviation that is already valid.
    """
    name = program.strip()
    if name in PROGRAM_CODES:
        return PROGRAM_CODES[name]
    if name.lower() in PROGRAM_NAMES:
        return name.lower()
    raise UnknownProgramOrDegreeError(f"Unknown program: {program!r}")


def degree_code(degree: str) -> str:
    """
    Return "bak" / "mag" for a degree given as "bachelor", "Master's", "mag", ...
    """
    key = degree.strip().lower()
    if key.endswith("'s"):
        key = key[:-2]
    if key in DEGREE_CODES:
        return DEGREE_CODES[key]
    if key in DEGREE_NAMES:
        return key
    raise UnknownProgramOrDegreeError(f"Unknown degree: {degree!r}")


def _year_prefix(year: Union[int, str]) -> str:
    text = str(year).strip()
    if not _YEAR_RE.fullmatch(text):
        raise SlugFormatError(f"Invalid year: {year!r}")
    if len(text) == 2:
        return text
    value = int(text)
    if not 2000 <= value <= 2099:
        raise SlugFormatError(f"Year out of range 2000-2099: {year!r}")
    return f"{value % 100:02d}"


def _group_code(group: str) -> str:
    """Extract the bare uppercase group code from "B01", "b01" or "24.B01-vshm"."""
    text = group.strip()
    match = _FULL_CODE_RE.fullmatch(text)
    if match:
        return match.group(2).upper()
    if not _GROUP_RE.fullmatch(text):
        raise SlugFormatError(f"Invalid group code: {group!r}")
    return text.upper()


# ---------------------------------------------------------------------------
# Full codes
# ---------------------------------------------------------------------------


def full_code(year: Union[int, str], group: str) -> str:
    """
    Canonical group storage key, e.g. full_code(2024, "b01") -> "24.B01-vshm".
    """
    return f"{_year_prefix(year)}.{_group_code(group)}{FULL_CODE_SUFFIX}"


def split_full_code(code: str) -> tuple[str, str]:
    """
    "24.B01-vshm" -> ("24", "B01"). Raises SlugFormatError otherwise.
    """
    match = _FULL_CODE_RE.fullmatch(code.strip())
    if not match:
        raise SlugFormatError(f"Invalid group full code: {code!r}")
    return match.group(1), match.group(2).upper()


# ---------------------------------------------------------------------------
# Encode / decode
# ---------------------------------------------------------------------------


def encode_slug(program: str, year: Union[int, str], group: str, degree: str) -> str:
    """
    Build the URL slug for a timetable.

    group may be the bare code ("B01") or the full code ("24.B01-vshm").
    Raises UnknownProgramOrDegreeError / SlugFormatError.
    """
    slug = f"{degree_code(degree)}-{program_code(program)}-{_year_prefix(year)}-{_group_code(group).lower()}"
    logger.debug("Generated slug %s", slug)
    return slug


def parse_slug(slug: str) -> ProgramIdentity:
    """
    Strict slug parser. Raises SlugFormatError or UnknownProgramOrDegreeError.
    """
    parts = slug.strip().lower().split("-")
    if len(parts) != 4:
        raise SlugFormatError(f"Expected 4 slug parts, got {len(parts)}: {slug!r}")

    degree_part, program_part, year_part, group_part = parts

    program = PROGRAM_NAMES.get(program_part)
    if program is None:
        raise UnknownProgramOrDegreeError(f"Unknown program abbreviation: {program_part!r}")

    # Legacy slugs do not always carry a precise degree: only "mag" means master
    degree = MASTER if degree_part == DEGREE_CODES[MASTER] else BACHELOR

    if len(year_part) == 2 and _YEAR_RE.fullmatch(year_part):
        year = 2000 + int(year_part)
    elif len(year_part) == 4 and _YEAR_RE.fullmatch(year_part) and year_part.startswith("20"):
        year = int(year_part)
    else:
        raise SlugFormatError(f"Invalid year part: {year_part!r}")

    if not _GROUP_RE.fullmatch(group_part):
        raise SlugFormatError(f"Invalid group part: {group_part!r}")

    identity = ProgramIdentity(degree=degree, program=program, year=year, group_code=group_part.upper())
    logger.debug("Parsed slug %s -> %s", slug, identity)
    return identity


def decode_slug(slug: str) -> Optional[ProgramIdentity]:
    """
    Resolve a slug to its identity, or None when it does not name a timetable.
    """
    try:
        return parse_slug(slug)
    except (SlugFormatError, UnknownProgramOrDegreeError) as exc:
        logger.debug("Slug %r not resolved: %s", slug, exc)
        return None


# ---------------------------------------------------------------------------
# Display helpers & group inference
# ---------------------------------------------------------------------------


def format_program_name(identity: ProgramIdentity) -> str:
    """
    "Bachelor's in Management - 2024 - Group B01"
    """
    title = DEGREE_TITLES.get(identity.degree, identity.degree)
    return f"{title} in {identity.program} - {identity.year} - Group {identity.group_code}"


def degree_for_group(group: str) -> str:
    """Groups starting with "M" belong to master programs, all others to bachelor."""
    return MASTER if _group_code(group).startswith("M") else BACHELOR


def program_for_group(group: str) -> str:
    """
    Program a group number is assigned to (b01-b08 -> Management, ...).

    Raises UnknownProgramOrDegreeError for numbers outside the assignment.
    """
    code = _group_code(group)
    number = int(code[1:])

    if code.startswith("B"):
        for low, high, program in _BACHELOR_GROUPS:
            if low <= number <= high:
                return program
    elif code.startswith("M") and number in _MASTER_GROUPS:
        return _MASTER_GROUPS[number]

    raise UnknownProgramOrDegreeError(f"No program assigned to group {code}")


def identity_for_group(year: Union[int, str], group: str) -> ProgramIdentity:
    """
    Build the identity of a group from its intake year and code alone.
    """
    return ProgramIdentity(
        degree=degree_for_group(group),
        program=program_for_group(group),
        year=2000 + int(_year_prefix(year)),
        group_code=_group_code(group),
    )


def identity_for_full_code(code: str) -> ProgramIdentity:
    """
    "24.B01-vshm" -> identity of that group.
    """
    year_prefix, group = split_full_code(code)
    return identity_for_group(year_prefix, group)
