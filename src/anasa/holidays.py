"""Greek public holidays and user-supplied custom holidays.

The calendar for a year is the union of three sources:

* fixed holidays that repeat on the same month/day every year,
* movable holidays at a fixed offset from Orthodox Easter Sunday,
* custom holidays supplied by the user (patron-saint feasts, company days).

Custom holidays come in four kinds, one ``NamedTuple`` each, and are
resolved against the target year by :func:`resolve_custom_holiday`.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Iterable, Mapping
from typing import NamedTuple, Union

from anasa.easter import calculate_orthodox_easter
from anasa.errors import InvalidYearError, ParseError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


class Holiday(NamedTuple):
    """A non-working day recognised for one specific year."""

    date: datetime.date
    name: str
    localized_name: str
    is_movable: bool = False
    is_custom: bool = False


class OneTimeHoliday(NamedTuple):
    """A custom holiday bound to one exact ``YYYY-MM-DD`` date."""

    name: str
    date: str


class RecurringHoliday(NamedTuple):
    """A custom holiday on the same ``MM-DD`` every year."""

    name: str
    month_day: str


class MovableHoliday(NamedTuple):
    """A custom holiday at a fixed day offset from Orthodox Easter."""

    name: str
    easter_offset: int | str


class ConditionalHoliday(NamedTuple):
    """A ``MM-DD`` feast that moves to Bright Monday when it would fall on
    or before Easter Sunday (e.g. Saint George, April 23).
    """

    name: str
    month_day: str


CustomHoliday = Union[OneTimeHoliday, RecurringHoliday, MovableHoliday, ConditionalHoliday]

# ---------------------------------------------------------------------------
# Official calendar
# ---------------------------------------------------------------------------

# (month, day, English name, Greek name)
FIXED_HOLIDAYS: list[tuple[int, int, str, str]] = [
    (1, 1, "New Year's Day", "Πρωτοχρονιά"),
    (1, 6, "Epiphany", "Θεοφάνια"),
    (3, 25, "Independence Day", "Εικοστή Πέμπτη Μαρτίου"),
    (5, 1, "Labour Day", "Πρωτομαγιά"),
    (8, 15, "Assumption of Mary", "Κοίμηση της Θεοτόκου"),
    (10, 28, "Ohi Day", "Επέτειος του Όχι"),
    (12, 25, "Christmas Day", "Χριστούγεννα"),
    (12, 26, "Glorifying Mother of God", "Σύναξη της Θεοτόκου"),
]

# (offset from Easter Sunday, English name, Greek name)
MOVABLE_HOLIDAYS: list[tuple[int, str, str]] = [
    (-48, "Clean Monday", "Καθαρά Δευτέρα"),
    (-2, "Good Friday", "Μεγάλη Παρασκευή"),
    (0, "Easter Sunday", "Κυριακή του Πάσχα"),
    (1, "Easter Monday", "Δευτέρα του Πάσχα"),
    (50, "Holy Spirit Monday", "Αγίου Πνεύματος"),
]

HOLY_SPIRIT_OFFSET = 50
BRIGHT_MONDAY_OFFSET = 1


def fixed_holidays(year: int) -> list[Holiday]:
    """Fixed-date Greek public holidays for *year*."""
    if not datetime.MINYEAR <= year <= datetime.MAXYEAR:
        msg = f"Year {year} is outside the supported range {datetime.MINYEAR}-{datetime.MAXYEAR}"
        raise InvalidYearError(msg)
    return [
        Holiday(datetime.date(year, month, day), name, greek)
        for month, day, name, greek in FIXED_HOLIDAYS
    ]


def movable_holidays(
    year: int,
    include_holy_spirit: bool = True,
    easter: datetime.date | None = None,
) -> list[Holiday]:
    """Easter-dependent Greek public holidays for *year*.

    Holy Spirit Monday is not a public holiday for every employer, so it
    can be left out with *include_holy_spirit*.
    """
    if easter is None:
        easter = calculate_orthodox_easter(year)
    return [
        Holiday(easter + datetime.timedelta(days=offset), name, greek, is_movable=True)
        for offset, name, greek in MOVABLE_HOLIDAYS
        if include_holy_spirit or offset != HOLY_SPIRIT_OFFSET
    ]


# ---------------------------------------------------------------------------
# Custom holidays
# ---------------------------------------------------------------------------


def _parse_month_day(value: str, year: int, name: str) -> datetime.date:
    """Turn a ``MM-DD`` string into a date in *year*."""
    parts = str(value).strip().split("-")
    if len(parts) != 2:
        msg = f"Invalid date {value!r} for custom holiday {name!r}. Use MM-DD."
        raise ParseError(msg)
    try:
        month, day = int(parts[0]), int(parts[1])
    except ValueError:
        msg = f"Invalid date {value!r} for custom holiday {name!r}. Use MM-DD."
        raise ParseError(msg) from None
    try:
        return datetime.date(year, month, day)
    except ValueError as exc:
        msg = f"Invalid date {value!r} for custom holiday {name!r} in {year}: {exc}"
        raise ParseError(msg) from None


def _parse_iso_date(value: str, name: str) -> datetime.date:
    try:
        return datetime.date.fromisoformat(str(value).strip())
    except ValueError:
        msg = f"Invalid date {value!r} for custom holiday {name!r}. Use YYYY-MM-DD."
        raise ParseError(msg) from None


def _parse_offset(value: int | str, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        msg = f"Invalid Easter offset {value!r} for custom holiday {name!r}."
        raise ParseError(msg) from None


def resolve_custom_holiday(
    spec: CustomHoliday,
    year: int,
    easter: datetime.date,
) -> Holiday | None:
    """Return the :class:`Holiday` *spec* produces in *year*, if any.

    One-time holidays only exist in the year of their stored date, so they
    resolve to ``None`` for every other year.
    """
    if isinstance(spec, OneTimeHoliday):
        d = _parse_iso_date(spec.date, spec.name)
        if d.year != year:
            return None
        return Holiday(d, spec.name, spec.name, is_custom=True)

    if isinstance(spec, RecurringHoliday):
        d = _parse_month_day(spec.month_day, year, spec.name)
        return Holiday(d, spec.name, spec.name, is_custom=True)

    if isinstance(spec, MovableHoliday):
        offset = _parse_offset(spec.easter_offset, spec.name)
        d = easter + datetime.timedelta(days=offset)
        return Holiday(d, spec.name, spec.name, is_movable=True, is_custom=True)

    if isinstance(spec, ConditionalHoliday):
        fixed = _parse_month_day(spec.month_day, year, spec.name)
        if fixed <= easter:
            d = easter + datetime.timedelta(days=BRIGHT_MONDAY_OFFSET)
            logger.debug("%s moves from %s to Bright Monday %s", spec.name, fixed, d)
            return Holiday(d, spec.name, spec.name, is_movable=True, is_custom=True)
        return Holiday(fixed, spec.name, spec.name, is_custom=True)

    msg = f"Unknown custom holiday type {type(spec).__name__}"
    raise TypeError(msg)


_KINDS: dict[str, type] = {
    "one-time": OneTimeHoliday,
    "recurring": RecurringHoliday,
    "movable": MovableHoliday,
    "conditional": ConditionalHoliday,
}

_KIND_NAMES: dict[type, str] = {cls: kind for kind, cls in _KINDS.items()}


def parse_custom_holiday(data: Mapping[str, object]) -> CustomHoliday:
    """Build a custom holiday spec from its JSON form.

    Expected shape: ``{"kind": "recurring", "name": ..., "month_day": ...}``
    where the remaining keys are the fields of the matching spec type.
    """
    if not isinstance(data, Mapping):
        msg = f"Custom holiday must be an object, got {data!r}"
        raise ParseError(msg)
    kind = data.get("kind")
    cls = _KINDS.get(str(kind))
    if cls is None:
        supported = ", ".join(sorted(_KINDS))
        msg = f"Unknown custom holiday kind {kind!r}. Supported: {supported}"
        raise ParseError(msg)
    try:
        spec = cls(**{field: data[field] for field in cls._fields})
    except KeyError as exc:
        msg = f"Custom holiday of kind {kind!r} is missing field {exc.args[0]!r}"
        raise ParseError(msg) from None
    if not isinstance(spec.name, str):
        msg = f"Custom holiday name must be a string, got {spec.name!r}"
        raise ParseError(msg)
    return spec


def custom_holiday_to_dict(spec: CustomHoliday) -> dict[str, object]:
    """Inverse of :func:`parse_custom_holiday`."""
    return {"kind": _KIND_NAMES[type(spec)], **spec._asdict()}


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------


def build_holidays(
    year: int,
    include_holy_spirit: bool = True,
    custom_holidays: Iterable[CustomHoliday] = (),
) -> list[Holiday]:
    """Return every holiday of *year*, sorted by date.

    Same-date holidays are all kept; the sort is stable so official
    holidays precede custom ones falling on the same day.
    """
    easter = calculate_orthodox_easter(year)
    holidays = fixed_holidays(year) + movable_holidays(year, include_holy_spirit, easter)

    for spec in custom_holidays:
        if not spec.name.strip():
            continue
        resolved = resolve_custom_holiday(spec, year, easter)
        if resolved is not None:
            holidays.append(resolved)

    return sorted(holidays, key=lambda h: h.date)


def holiday_for(date: datetime.date, holidays: Iterable[Holiday]) -> Holiday | None:
    """First holiday in *holidays* falling on *date*, or ``None``."""
    for h in holidays:
        if h.date == date:
            return h
    return None
