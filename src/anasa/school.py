"""Greek public-school calendar.

Used in parent mode to show how much of a leave window overlaps the days
children are off school anyway.
"""

from __future__ import annotations

import datetime
from typing import NamedTuple

from anasa.days import DateRange
from anasa.easter import calculate_orthodox_easter
from anasa.plan import ranges_overlap


class SchoolBreak(NamedTuple):
    id: str
    name: str
    localized_name: str
    start_date: datetime.date
    end_date: datetime.date

    @property
    def range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)


class SchoolHoliday(NamedTuple):
    date: datetime.date
    name: str
    localized_name: str


class SchoolOverlap(NamedTuple):
    total_overlap_days: int
    breaks: list[tuple[SchoolBreak, int]]
    holidays: list[SchoolHoliday]


def school_breaks(year: int) -> list[SchoolBreak]:
    """Christmas and Easter breaks starting in *year*.

    The Christmas break runs Dec 24 - Jan 7 and so ends in the next year.
    The Easter break runs from Palm Sunday to Thomas Sunday.
    """
    easter = calculate_orthodox_easter(year)
    week = datetime.timedelta(days=7)
    return [
        SchoolBreak(
            "christmas",
            "Christmas Break",
            "Διακοπές Χριστουγέννων",
            datetime.date(year, 12, 24),
            datetime.date(year + 1, 1, 7),
        ),
        SchoolBreak("easter", "Easter Break", "Διακοπές Πάσχα", easter - week, easter + week),
    ]


def school_holidays(year: int) -> list[SchoolHoliday]:
    """Single days schools are closed in *year*, sorted by date."""
    easter = calculate_orthodox_easter(year)
    return sorted(
        [
            SchoolHoliday(datetime.date(year, 1, 30), "Three Hierarchs", "Τριών Ιεραρχών"),
            SchoolHoliday(easter - datetime.timedelta(days=48), "Clean Monday", "Καθαρά Δευτέρα"),
            SchoolHoliday(datetime.date(year, 3, 25), "Independence Day", "25η Μαρτίου"),
            SchoolHoliday(datetime.date(year, 5, 1), "Labour Day", "Πρωτομαγιά"),
            SchoolHoliday(easter + datetime.timedelta(days=50), "Holy Spirit Monday", "Αγίου Πνεύματος"),
            SchoolHoliday(datetime.date(year, 10, 28), "Ohi Day", "Ημέρα του Όχι"),
            SchoolHoliday(datetime.date(year, 11, 17), "Polytechnic Uprising", "17 Νοεμβρίου"),
        ]
    )


def school_overlap(date_range: DateRange, year: int) -> SchoolOverlap:
    """How many days of *date_range* children are off school.

    Single-day closures inside a break are counted once, as part of the
    break. The previous year's Christmas break is included because it
    spills into January.
    """
    breaks = school_breaks(year - 1)[:1] + school_breaks(year)
    total = 0
    overlapping: list[tuple[SchoolBreak, int]] = []

    for brk in breaks:
        if not ranges_overlap(date_range, brk.range):
            continue
        start = max(date_range.start_date, brk.start_date)
        end = min(date_range.end_date, brk.end_date)
        days = (end - start).days + 1
        total += days
        overlapping.append((brk, days))

    singles: list[SchoolHoliday] = []
    for h in school_holidays(year):
        if not date_range.includes(h.date):
            continue
        if any(brk.range.includes(h.date) for brk in breaks):
            continue
        singles.append(h)
        total += 1

    return SchoolOverlap(total, overlapping, singles)
