"""Compare where the official holidays fall across several years."""

from __future__ import annotations

import datetime
from collections.abc import Sequence
from typing import NamedTuple

from anasa.days import is_weekend
from anasa.holidays import fixed_holidays, movable_holidays


class HolidayComparison(NamedTuple):
    name: str
    localized_name: str
    dates: dict[int, datetime.date]

    def weekend_years(self) -> list[int]:
        """Years in which this holiday is lost to a weekend."""
        return [y for y, d in sorted(self.dates.items()) if is_weekend(d)]


def compare_years(years: Sequence[int], include_holy_spirit: bool = True) -> list[HolidayComparison]:
    """One row per official holiday with its date in each of *years*.

    Rows follow the holiday order of the first year.
    """
    rows: dict[str, HolidayComparison] = {}
    for year in years:
        for h in fixed_holidays(year) + movable_holidays(year, include_holy_spirit):
            row = rows.setdefault(h.name, HolidayComparison(h.name, h.localized_name, {}))
            row.dates[year] = h.date
    return list(rows.values())
