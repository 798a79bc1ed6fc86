"""Per-day calendar with leave cost.

Each day of a range is tagged weekend / holiday / workday. Taking a
weekend or holiday off costs nothing; every other day costs one leave day.
"""

from __future__ import annotations

import datetime
from collections.abc import Iterable, Sequence
from typing import NamedTuple

from anasa.errors import InvalidRangeError, InvalidYearError
from anasa.holidays import Holiday

# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


class DateRange(NamedTuple):
    """Inclusive range of calendar days."""

    start_date: datetime.date
    end_date: datetime.date

    @classmethod
    def between(cls, start_date: datetime.date, end_date: datetime.date) -> DateRange:
        """Validated constructor; raises :class:`InvalidRangeError` if reversed."""
        if end_date < start_date:
            msg = f"Range ends ({end_date.isoformat()}) before it starts ({start_date.isoformat()})"
            raise InvalidRangeError(msg)
        return cls(start_date, end_date)

    @property
    def num_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def includes(self, date: datetime.date) -> bool:
        return self.start_date <= date <= self.end_date


class DayInfo(NamedTuple):
    """One calendar day and what it costs to take it off."""

    date: datetime.date
    cost: int  # 0 = already free, 1 = workday
    is_holiday: bool
    is_weekend: bool
    holiday_name: str | None = None


class CalendarStats(NamedTuple):
    total_days: int
    weekend_days: int
    holiday_days: int  # holidays falling on a weekday
    workdays: int
    free_days: int


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


def year_range(year: int) -> DateRange:
    """January 1 through December 31 of *year*."""
    if not datetime.MINYEAR <= year <= datetime.MAXYEAR:
        msg = f"Year {year} is outside the supported range {datetime.MINYEAR}-{datetime.MAXYEAR}"
        raise InvalidYearError(msg)
    return DateRange(datetime.date(year, 1, 1), datetime.date(year, 12, 31))


def is_weekend(date: datetime.date) -> bool:
    return date.weekday() >= 5


def generate_calendar(date_range: DateRange, holidays: Iterable[Holiday]) -> list[DayInfo]:
    """Return one :class:`DayInfo` per day of *date_range*, in order.

    When several holidays share a date, the first one in *holidays* names
    the day.
    """
    start, end = date_range
    if end < start:
        msg = f"Range ends ({end.isoformat()}) before it starts ({start.isoformat()})"
        raise InvalidRangeError(msg)

    by_date: dict[datetime.date, Holiday] = {}
    for h in holidays:
        by_date.setdefault(h.date, h)

    days: list[DayInfo] = []
    for offset in range((end - start).days + 1):
        d = start + datetime.timedelta(days=offset)
        weekend = is_weekend(d)
        holiday = by_date.get(d)
        days.append(
            DayInfo(
                date=d,
                cost=0 if weekend or holiday is not None else 1,
                is_holiday=holiday is not None,
                is_weekend=weekend,
                holiday_name=holiday.localized_name if holiday is not None else None,
            )
        )
    return days


def calendar_stats(days: Sequence[DayInfo]) -> CalendarStats:
    """Count weekends, weekday holidays and workdays in *days*."""
    weekend_days = sum(1 for d in days if d.is_weekend)
    holiday_days = sum(1 for d in days if d.is_holiday and not d.is_weekend)
    workdays = sum(1 for d in days if d.cost == 1)
    return CalendarStats(
        total_days=len(days),
        weekend_days=weekend_days,
        holiday_days=holiday_days,
        workdays=workdays,
        free_days=weekend_days + holiday_days,
    )
