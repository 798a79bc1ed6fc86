"""JSON persistence for settings and the annual plan.

The core never touches storage itself; the CLI loads a :class:`Settings`
and an :class:`~anasa.plan.AnnualPlan` from a :class:`PlannerStore` at
start-up and saves them back after every change.
"""

from __future__ import annotations

import datetime
import json
import logging
import os
import pathlib
from collections.abc import Sequence
from typing import NamedTuple

from anasa.days import DateRange, DayInfo
from anasa.errors import ParseError
from anasa.holidays import CustomHoliday, custom_holiday_to_dict, parse_custom_holiday
from anasa.plan import AnnualPlan, SavedOpportunity

logger = logging.getLogger(__name__)

STATE_ENV_VAR = "ANASA_STATE"
DEFAULT_STATE_FILE = "~/.anasa.json"
DEFAULT_LEAVE_DAYS = 25


def default_state_path() -> pathlib.Path:
    return pathlib.Path(os.environ.get(STATE_ENV_VAR, DEFAULT_STATE_FILE)).expanduser()


class Settings(NamedTuple):
    """User preferences that survive between runs."""

    year: int
    total_leave_days: int = DEFAULT_LEAVE_DAYS
    include_holy_spirit: bool = True
    parent_mode: bool = False
    start_from_today: bool = True
    custom_holidays: Sequence[CustomHoliday] = ()


# ---------------------------------------------------------------------------
# (De)serialisation
# ---------------------------------------------------------------------------


def _day_to_dict(day: DayInfo) -> dict[str, object]:
    return {**day._asdict(), "date": day.date.isoformat()}


def _day_from_dict(data: dict[str, object]) -> DayInfo:
    return DayInfo(
        date=datetime.date.fromisoformat(str(data["date"])),
        cost=int(data["cost"]),  # type: ignore[arg-type]
        is_holiday=bool(data["is_holiday"]),
        is_weekend=bool(data["is_weekend"]),
        holiday_name=data.get("holiday_name"),  # type: ignore[arg-type]
    )


def saved_to_dict(item: SavedOpportunity) -> dict[str, object]:
    return {
        "id": item.id,
        "start_date": item.range.start_date.isoformat(),
        "end_date": item.range.end_date.isoformat(),
        "total_days": item.total_days,
        "leave_days_required": item.leave_days_required,
        "free_days": item.free_days,
        "efficiency": item.efficiency,
        "efficiency_label": item.efficiency_label,
        "days": [_day_to_dict(d) for d in item.days],
        "added_at": item.added_at.isoformat(),
        "is_custom": item.is_custom,
        "label": item.label,
    }


def saved_from_dict(data: dict[str, object]) -> SavedOpportunity:
    try:
        return SavedOpportunity(
            id=str(data["id"]),
            range=DateRange(
                datetime.date.fromisoformat(str(data["start_date"])),
                datetime.date.fromisoformat(str(data["end_date"])),
            ),
            total_days=int(data["total_days"]),  # type: ignore[arg-type]
            leave_days_required=int(data["leave_days_required"]),  # type: ignore[arg-type]
            free_days=int(data["free_days"]),  # type: ignore[arg-type]
            efficiency=float(data["efficiency"]),  # type: ignore[arg-type]
            efficiency_label=str(data["efficiency_label"]),
            days=[_day_from_dict(d) for d in data.get("days", [])],  # type: ignore[union-attr]
            added_at=datetime.datetime.fromisoformat(str(data["added_at"])),
            is_custom=bool(data.get("is_custom", False)),
            label=str(data.get("label", "")),
        )
    except (KeyError, TypeError, ValueError) as exc:
        msg = f"Invalid saved plan entry: {exc}"
        raise ParseError(msg) from None


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class PlannerStore:
    """Reads and writes a single JSON state file."""

    def __init__(self, path: str | os.PathLike[str] | None = None):
        self.path = pathlib.Path(path) if path is not None else default_state_path()

    def _read(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            msg = f"Invalid JSON in state file {self.path}: {exc}"
            raise ParseError(msg) from None
        if not isinstance(data, dict):
            msg = f"State file {self.path} must contain a JSON object"
            raise ParseError(msg)
        return data

    def load(self, year: int | None = None) -> tuple[Settings, AnnualPlan]:
        """Return the stored settings and plan.

        Missing files give defaults. A plan saved for a different year than
        *year* (default: the stored or current year) is not restored.
        """
        data = self._read()
        try:
            stored_year = int(data.get("year", datetime.date.today().year))  # type: ignore[arg-type]
            target_year = year if year is not None else stored_year
            settings = Settings(
                year=target_year,
                total_leave_days=int(data.get("total_leave_days", DEFAULT_LEAVE_DAYS)),  # type: ignore[arg-type]
                include_holy_spirit=bool(data.get("include_holy_spirit", True)),
                parent_mode=bool(data.get("parent_mode", False)),
                start_from_today=bool(data.get("start_from_today", True)),
                custom_holidays=[parse_custom_holiday(c) for c in data.get("custom_holidays", [])],  # type: ignore[union-attr]
            )
        except ParseError:
            raise
        except (TypeError, ValueError, AttributeError) as exc:
            msg = f"Invalid settings in state file {self.path}: {exc}"
            raise ParseError(msg) from None

        plan = AnnualPlan(settings.total_leave_days)
        raw_plan = data.get("plan", {})
        if not isinstance(raw_plan, dict):
            msg = f"Invalid plan in state file {self.path}: expected an object"
            raise ParseError(msg)
        if raw_plan.get("year") == target_year:
            opportunities = raw_plan.get("opportunities", [])
            if not isinstance(opportunities, list):
                msg = f"Invalid plan in state file {self.path}: opportunities must be a list"
                raise ParseError(msg)
            for raw in opportunities:
                plan.add_saved(saved_from_dict(raw))
        elif raw_plan:
            logger.info("Ignoring plan stored for %s (loading %s)", raw_plan.get("year"), target_year)

        logger.debug("Loaded %d plan entries from %s", len(plan), self.path)
        return settings, plan

    def save(self, settings: Settings, plan: AnnualPlan) -> None:
        data = {
            "year": settings.year,
            "total_leave_days": settings.total_leave_days,
            "include_holy_spirit": settings.include_holy_spirit,
            "parent_mode": settings.parent_mode,
            "start_from_today": settings.start_from_today,
            "custom_holidays": [custom_holiday_to_dict(c) for c in settings.custom_holidays],
            "plan": {
                "year": settings.year,
                "opportunities": [saved_to_dict(item) for item in plan.items],
                "updated_at": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            },
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.debug("Saved %d plan entries to %s", len(plan), self.path)
