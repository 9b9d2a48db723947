"""
helpline.engine.dates — Calendar stepping
==========================================

Pure date arithmetic used to lay out dashboard chart buckets.  Both
functions return a new instant and never mutate their input; time of day
and tzinfo are carried through unchanged.
"""

from __future__ import annotations

import calendar
import enum
from datetime import datetime, timedelta

__all__ = ["Granularity", "UnsupportedGranularity", "advance", "round_up"]


class Granularity(enum.StrEnum):
    """Supported bucket widths."""
    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"
    YEARS = "years"


class UnsupportedGranularity(ValueError):
    """Raised when a time unit string is not a :class:`Granularity`."""

    def __init__(self, unit: str) -> None:
        super().__init__(f"Unsupported time unit: {unit!r}")
        self.unit = unit


def _granularity(unit: str) -> Granularity:
    try:
        return Granularity(unit)
    except ValueError:
        raise UnsupportedGranularity(unit) from None


def _add_months(instant: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the target month's length."""
    index = instant.month - 1 + months
    year = instant.year + index // 12
    month = index % 12 + 1
    day = min(instant.day, calendar.monthrange(year, month)[1])
    return instant.replace(year=year, month=month, day=day)


def round_up(unit: str, instant: datetime) -> datetime:
    """Round *instant* forward to the next natural boundary for *unit*.

    - ``days``: unchanged.
    - ``weeks``: the next Monday (unchanged on a Monday).
    - ``months``: the 1st of the next month (unchanged on the 1st).
    - ``years``: January 1 of the next year (unchanged on January 1).

    Raises :class:`UnsupportedGranularity` for any other *unit*.
    """
    granularity = _granularity(unit)
    if granularity is Granularity.WEEKS:
        # weekday(): Monday == 0
        return instant + timedelta(days=(7 - instant.weekday()) % 7)
    if granularity is Granularity.MONTHS and instant.day != 1:
        return _add_months(instant.replace(day=1), 1)
    if granularity is Granularity.YEARS and (instant.month, instant.day) != (1, 1):
        return instant.replace(year=instant.year + 1, month=1, day=1)
    return instant


def advance(unit: str, instant: datetime) -> datetime:
    """Move *instant* forward by exactly one *unit*.

    Month and year steps follow the calendar: a day that doesn't exist in
    the target month is clamped to its last day (Jan 31 → Feb 28/29,
    Feb 29 → Feb 28 of the following year).

    Raises :class:`UnsupportedGranularity` for any other *unit*.
    """
    granularity = _granularity(unit)
    if granularity is Granularity.DAYS:
        return instant + timedelta(days=1)
    if granularity is Granularity.WEEKS:
        return instant + timedelta(days=7)
    if granularity is Granularity.MONTHS:
        return _add_months(instant, 1)
    return _add_months(instant, 12)
