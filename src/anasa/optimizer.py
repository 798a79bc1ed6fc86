"""Leave optimizer.

Finds the windows of consecutive days that give the most time off per
leave day spent, by bridging weekends and holidays.

For every workday the search opens a window there and extends it one day
at a time until the leave budget runs out. Every prefix that also ends on
a workday is a candidate: starting or ending on a day that is already free
never helps, since dropping that day keeps the same leave cost. Candidates
are ranked by efficiency (total days / leave days) and picked greedily so
that no two returned windows overlap.
"""

from __future__ import annotations

import calendar
import datetime
import logging
from collections.abc import Iterable, Sequence
from typing import NamedTuple

from anasa.days import (
    CalendarStats,
    DateRange,
    DayInfo,
    calendar_stats,
    generate_calendar,
    year_range,
)
from anasa.errors import InvalidRangeError, ParseError
from anasa.holidays import Holiday
from anasa.labels import efficiency_label

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


class OptimizationResult(NamedTuple):
    """A leave window and what it costs ("opportunity")."""

    range: DateRange
    total_days: int
    leave_days_required: int
    free_days: int
    efficiency: float
    efficiency_label: str
    days: list[DayInfo]


class _Candidate(NamedTuple):
    start: int
    end: int
    leave_days: int
    efficiency: float


def make_opportunity(days: Sequence[DayInfo], language: str = "el") -> OptimizationResult:
    """Build an :class:`OptimizationResult` covering exactly *days*.

    A window without any leave day has no finite efficiency; it is
    reported with ``efficiency == total_days``.
    """
    if not days:
        msg = "Cannot build a leave window from an empty day list"
        raise InvalidRangeError(msg)
    total = len(days)
    leave = sum(d.cost for d in days)
    return OptimizationResult(
        range=DateRange(days[0].date, days[-1].date),
        total_days=total,
        leave_days_required=leave,
        free_days=total - leave,
        efficiency=total / leave if leave else float(total),
        efficiency_label=efficiency_label(leave, total, language),
        days=list(days),
    )


# ---------------------------------------------------------------------------
# Optimizer
# ---------------------------------------------------------------------------


class LeaveOptimizer:
    """Sliding-window search for the most efficient leave windows of a year.

    Parameters
    ----------
    year : int
        Year to search.
    leave_budget : int
        Maximum leave days a single window may consume.
    holidays : iterable of Holiday
        Holidays of *year*, typically from :func:`anasa.holidays.build_holidays`.
    start_from_today : bool
        Only consider days from *today* onwards.
    today : datetime.date, optional
        The current date; read from the system clock when omitted.
    """

    def __init__(
        self,
        year: int,
        leave_budget: int,
        holidays: Iterable[Holiday],
        start_from_today: bool = False,
        *,
        today: datetime.date | None = None,
        language: str = "el",
    ):
        self.year = year
        self.leave_budget = leave_budget
        self.holidays = list(holidays)
        self.language = language

        full_year = year_range(year)
        self.start_date = full_year.start_date
        self.end_date = full_year.end_date
        if start_from_today:
            if today is None:
                today = datetime.date.today()
            self.start_date = max(today, full_year.start_date)

        self.year_days: list[DayInfo] = generate_calendar(full_year, self.holidays)
        if self.start_date > self.end_date:
            # The whole year is already in the past.
            self.days: list[DayInfo] = []
        else:
            offset = (self.start_date - full_year.start_date).days
            self.days = self.year_days[offset:]

    @property
    def stats(self) -> CalendarStats:
        """Statistics for the searched range."""
        return calendar_stats(self.days)

    @property
    def full_year_stats(self) -> CalendarStats:
        """Statistics for the whole year, regardless of the start date."""
        return calendar_stats(self.year_days)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def _candidates(self) -> list[_Candidate]:
        days = self.days
        budget = self.leave_budget
        n = len(days)
        found: list[_Candidate] = []

        for i in range(n):
            if days[i].cost != 1:
                continue
            used = 0
            for j in range(i, n):
                used += days[j].cost
                if used > budget:
                    break
                if days[j].cost == 1:
                    found.append(_Candidate(i, j, used, (j - i + 1) / used))

        return found

    def find_opportunities(self, max_results: int = 3) -> list[OptimizationResult]:
        """Best non-overlapping windows, most efficient first.

        Ties are broken by the earlier start date. ``max_results <= 0``
        returns every non-overlapping window the greedy pass selects.
        """
        if self.leave_budget <= 0 or not self.days:
            return []

        candidates = self._candidates()
        # Stable sort: among equal efficiency and start, shorter windows
        # (generated first) win.
        candidates.sort(key=lambda c: (-c.efficiency, c.start))
        logger.debug(
            "%d candidate windows for budget %d in %d days",
            len(candidates),
            self.leave_budget,
            len(self.days),
        )

        chosen: list[_Candidate] = []
        for cand in candidates:
            if any(cand.start <= c.end and c.start <= cand.end for c in chosen):
                continue
            chosen.append(cand)
            if 0 < max_results <= len(chosen):
                break

        return [
            make_opportunity(self.days[c.start : c.end + 1], self.language) for c in chosen
        ]

    def best_opportunity(self) -> OptimizationResult | None:
        """The single most efficient window, if any."""
        results = self.find_opportunities(max_results=1)
        return results[0] if results else None


def find_opportunities(
    year: int,
    leave_day_budget: int,
    holidays: Iterable[Holiday],
    max_results: int = 3,
    start_from_today: bool = False,
    *,
    today: datetime.date | None = None,
    language: str = "el",
) -> list[OptimizationResult]:
    """Rank the leave windows of *year* that fit in *leave_day_budget*.

    See :class:`LeaveOptimizer` for the parameters.
    """
    optimizer = LeaveOptimizer(
        year,
        leave_day_budget,
        holidays,
        start_from_today,
        today=today,
        language=language,
    )
    return optimizer.find_opportunities(max_results)


# ---------------------------------------------------------------------------
# Custom periods
# ---------------------------------------------------------------------------


def create_custom_period(
    start_date: datetime.date,
    end_date: datetime.date,
    holidays: Iterable[Holiday],
    language: str = "el",
) -> OptimizationResult:
    """Cost out a user-chosen leave period."""
    days = generate_calendar(DateRange.between(start_date, end_date), holidays)
    return make_opportunity(days, language)


def parse_custom_period(
    start: str,
    end: str,
    year: int,
    today: datetime.date | None = None,
) -> DateRange:
    """Validate a user-entered ``YYYY-MM-DD`` period for *year*.

    The period must not start before *today* and must lie within *year*.
    """
    if not start or not end:
        msg = "Both a start and an end date are required"
        raise ParseError(msg)
    try:
        start_date = datetime.date.fromisoformat(start.strip())
        end_date = datetime.date.fromisoformat(end.strip())
    except ValueError:
        msg = f"Invalid date in period {start!r} -> {end!r}. Use YYYY-MM-DD."
        raise ParseError(msg) from None

    period = DateRange.between(start_date, end_date)

    if today is None:
        today = datetime.date.today()
    if start_date < today:
        msg = f"Period must not start in the past (starts {start_date.isoformat()})"
        raise InvalidRangeError(msg)

    bounds = year_range(year)
    if not (bounds.includes(start_date) and bounds.includes(end_date)):
        msg = f"Period must lie within {year}"
        raise InvalidRangeError(msg)

    return period


# ---------------------------------------------------------------------------
# Pretty-printing
# ---------------------------------------------------------------------------


def format_date_range(date_range: DateRange) -> str:
    start, end = date_range
    if start == end:
        return start.strftime("%a, %b %d")
    return f"{start.strftime('%a, %b %d')} -> {end.strftime('%a, %b %d')}"


def format_opportunities(results: Sequence[OptimizationResult], title: str = "Top opportunities") -> str:
    """Return a human-readable list of leave windows."""
    lines: list[str] = []
    w = 64

    lines.append("")
    lines.append("=" * w)
    lines.append(f"  {title}")
    lines.append("=" * w)

    if not results:
        lines.append("  No leave windows fit the budget.")
        return "\n".join(lines)

    for i, r in enumerate(results, 1):
        n = r.total_days
        lines.append(f"  {i:>2}. {format_date_range(r.range)}  ({n} day{'s' if n != 1 else ''})")
        lines.append(
            f"      {r.leave_days_required} leave + {r.free_days} free"
            f"  |  {r.efficiency:.2f}x  |  {r.efficiency_label}"
        )
        names = [d.holiday_name for d in r.days if d.holiday_name]
        if names:
            lines.append(f"      Holidays: {', '.join(names)}")
        lines.append("")

    return "\n".join(lines)


def format_calendar_view(results: Sequence[OptimizationResult], holidays: Iterable[Holiday], year: int) -> str:
    """Month-by-month calendar marking leave (L) and holidays (H)."""
    leave_set: set[datetime.date] = set()
    for r in results:
        leave_set.update(d.date for d in r.days if d.cost == 1)
    holiday_set = {h.date for h in holidays if h.date.year == year}

    active_months = {d.month for d in leave_set if d.year == year}
    if not active_months:
        return ""

    lines: list[str] = [
        "",
        f"  Calendar View {year}",
        "  Legend: L=Leave  H=Holiday",
        "",
    ]

    cal = calendar.Calendar(firstweekday=0)

    for month in sorted(active_months):
        lines.append(f"  {calendar.month_name[month]} {year}")
        lines.append("  Mo  Tu  We  Th  Fr  Sa  Su")

        row = ""
        for day_num, weekday in cal.itermonthdays2(year, month):
            if day_num == 0:
                row += "    "
            else:
                d = datetime.date(year, month, day_num)
                if d in leave_set:
                    cell = f" {day_num:>2}L"
                elif d in holiday_set:
                    cell = f" {day_num:>2}H"
                else:
                    cell = f"  {day_num:>2}"
                row += cell

            if weekday == 6:
                lines.append(row)
                row = ""

        if row.strip():
            lines.append(row)
        lines.append("")

    return "\n".join(lines)
