from __future__ import annotations

import datetime

import pytest

from anasa.compare import compare_years
from anasa.days import DateRange
from anasa.errors import InvalidYearError
from anasa.school import school_breaks, school_holidays, school_overlap


def _range(start: datetime.date, end: datetime.date) -> DateRange:
    return DateRange(start, end)


class TestSchoolCalendar:
    def test_breaks_2026(self) -> None:
        christmas, easter = school_breaks(2026)
        assert christmas.range == _range(datetime.date(2026, 12, 24), datetime.date(2027, 1, 7))
        # Palm Sunday to Thomas Sunday around Easter Apr 12
        assert easter.range == _range(datetime.date(2026, 4, 5), datetime.date(2026, 4, 19))

    def test_holidays_sorted(self) -> None:
        days = school_holidays(2026)
        assert len(days) == 7
        assert [d.date for d in days] == sorted(d.date for d in days)
        assert days[0].date == datetime.date(2026, 1, 30)
        assert days[1].name == "Clean Monday"


class TestSchoolOverlap:
    def test_easter_break(self) -> None:
        overlap = school_overlap(_range(datetime.date(2026, 4, 9), datetime.date(2026, 4, 14)), 2026)
        assert overlap.total_overlap_days == 6
        assert [(b.id, n) for b, n in overlap.breaks] == [("easter", 6)]
        assert overlap.holidays == []

    def test_previous_christmas_break(self) -> None:
        overlap = school_overlap(_range(datetime.date(2026, 1, 2), datetime.date(2026, 1, 9)), 2026)
        assert [(b.id, n) for b, n in overlap.breaks] == [("christmas", 6)]
        assert overlap.total_overlap_days == 6

    def test_single_day_closure(self) -> None:
        overlap = school_overlap(_range(datetime.date(2026, 10, 27), datetime.date(2026, 10, 29)), 2026)
        assert overlap.breaks == []
        assert [h.name for h in overlap.holidays] == ["Ohi Day"]
        assert overlap.total_overlap_days == 1

    def test_no_overlap(self) -> None:
        overlap = school_overlap(_range(datetime.date(2026, 7, 6), datetime.date(2026, 7, 10)), 2026)
        assert overlap.total_overlap_days == 0


class TestCompareYears:
    def test_one_row_per_holiday(self) -> None:
        rows = compare_years([2025, 2026])
        names = [r.name for r in rows]
        assert len(names) == 13
        assert "Holy Spirit Monday" in names
        easter = next(r for r in rows if r.name == "Easter Sunday")
        assert easter.dates == {2025: datetime.date(2025, 4, 20), 2026: datetime.date(2026, 4, 12)}

    def test_weekend_years(self) -> None:
        rows = {r.name: r for r in compare_years([2025, 2026])}
        assert rows["Assumption of Mary"].weekend_years() == [2026]
        assert rows["Easter Sunday"].weekend_years() == [2025, 2026]
        assert rows["Epiphany"].weekend_years() == []

    def test_without_holy_spirit(self) -> None:
        names = [r.name for r in compare_years([2026], include_holy_spirit=False)]
        assert "Holy Spirit Monday" not in names

    def test_unsupported_year(self) -> None:
        with pytest.raises(InvalidYearError):
            compare_years([2026, 0])
