"""Orthodox Easter date calculation.

Every movable Greek holiday is an offset from Orthodox Easter Sunday, so
this is the anchor for the whole holiday calendar.
"""

from __future__ import annotations

import datetime

from anasa.errors import InvalidYearError


def julian_gregorian_offset(year: int) -> int:
    """Days the Julian calendar lags the Gregorian one in *year*.

    13 for 1900-2099, 14 for 2100-2199; it grows by one every century
    except those divisible by 400.
    """
    century = year // 100
    return century - century // 4 - 2


def calculate_orthodox_easter(year: int) -> datetime.date:
    """Return the Gregorian date of Orthodox Easter Sunday in *year*.

    Uses the Meeus/Jones/Butcher algorithm on the Julian calendar, then
    shifts the result by :func:`julian_gregorian_offset`.
    """
    if not datetime.MINYEAR <= year <= datetime.MAXYEAR:
        msg = f"Year {year} is outside the supported range {datetime.MINYEAR}-{datetime.MAXYEAR}"
        raise InvalidYearError(msg)

    a = year % 4
    b = year % 7
    c = year % 19
    d = (19 * c + 15) % 30
    e = (2 * a + 4 * b - d + 34) % 7
    month = (d + e + 114) // 31  # 3 = March, 4 = April
    day = (d + e + 114) % 31 + 1

    julian = datetime.date(year, month, day)
    try:
        return julian + datetime.timedelta(days=julian_gregorian_offset(year))
    except OverflowError:
        msg = f"Easter of year {year} cannot be represented"
        raise InvalidYearError(msg) from None
