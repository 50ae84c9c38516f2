"""
Exceptions raised by the timetable core.

Slug errors are ValueErrors so callers that only care about "bad input"
can catch them generically.
"""

from __future__ import annotations


class TimetableError(Exception):
    """Base class for all errors raised by gsomtimetable."""


class SlugError(TimetableError, ValueError):
    """A slug or identity could not be mapped."""


class SlugFormatError(SlugError):
    """Slug does not have the shape <degree>-<program>-<yy>-<group>."""


class UnknownProgramOrDegreeError(SlugError):
    """Program or degree is not part of the abbreviation tables."""


class ScheduleFileError(TimetableError):
    """A legacy schedule file name is invalid or the file could not be fetched."""
