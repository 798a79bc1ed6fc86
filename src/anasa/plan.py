"""Annual leave plan.

Holds the windows the user has accepted for the year and guards against
accepting two overlapping ones by accident. An overlapping add does not
touch the plan: it raises :class:`~anasa.errors.ConflictDetected` and
parks the candidate until the caller forces or dismisses it.
"""

from __future__ import annotations

import datetime
import logging
import uuid
from collections.abc import Iterable, Iterator
from typing import NamedTuple

from anasa.days import DateRange, DayInfo
from anasa.errors import ConflictDetected, PlannerError
from anasa.optimizer import OptimizationResult

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


class SavedOpportunity(NamedTuple):
    """A leave window accepted into the annual plan."""

    id: str
    range: DateRange
    total_days: int
    leave_days_required: int
    free_days: int
    efficiency: float
    efficiency_label: str
    days: list[DayInfo]
    added_at: datetime.datetime
    is_custom: bool = False
    label: str = ""

    @classmethod
    def from_result(
        cls,
        result: OptimizationResult,
        is_custom: bool = False,
        label: str = "",
        *,
        now: datetime.datetime | None = None,
    ) -> SavedOpportunity:
        return cls(
            id=uuid.uuid4().hex,
            range=result.range,
            total_days=result.total_days,
            leave_days_required=result.leave_days_required,
            free_days=result.free_days,
            efficiency=result.efficiency,
            efficiency_label=result.efficiency_label,
            days=list(result.days),
            added_at=now or datetime.datetime.now(datetime.timezone.utc),
            is_custom=is_custom,
            label=label,
        )


class ConflictWarning(NamedTuple):
    """A candidate waiting on the user after a conflicting add."""

    conflict_with: SavedOpportunity
    pending: OptimizationResult
    is_custom: bool = False
    label: str = ""


def ranges_overlap(a: DateRange, b: DateRange) -> bool:
    """True if the inclusive ranges *a* and *b* share at least one day."""
    return a.start_date <= b.end_date and b.start_date <= a.end_date


# ---------------------------------------------------------------------------
# Plan
# ---------------------------------------------------------------------------


class AnnualPlan:
    """The user's accepted leave windows for one year.

    All mutations go through the methods below. A plan has a single
    writer; it takes no lock, so share one across threads only behind
    the caller's own synchronisation.
    """

    def __init__(self, total_leave_days: int = 0, items: Iterable[SavedOpportunity] = ()):
        self.total_leave_days = total_leave_days
        self._items: list[SavedOpportunity] = list(items)
        self._pending: ConflictWarning | None = None

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def items(self) -> list[SavedOpportunity]:
        return list(self._items)

    @property
    def conflict_warning(self) -> ConflictWarning | None:
        """The candidate awaiting :meth:`force_add_to_plan`, if any."""
        return self._pending

    @property
    def total_plan_days(self) -> int:
        """Leave days consumed by every window in the plan."""
        return sum(item.leave_days_required for item in self._items)

    @property
    def remaining_leave_days(self) -> int:
        """Entitlement left after the plan; negative when over-committed."""
        return self.total_leave_days - self.total_plan_days

    @property
    def is_over_budget(self) -> bool:
        return self.remaining_leave_days < 0

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[SavedOpportunity]:
        return iter(self.items)

    def is_in_plan(self, candidate: OptimizationResult | SavedOpportunity) -> bool:
        """True if a saved window has exactly the candidate's date range."""
        return any(item.range == candidate.range for item in self._items)

    def find_conflict(self, candidate: OptimizationResult | SavedOpportunity) -> SavedOpportunity | None:
        """First saved window overlapping *candidate*, or ``None``."""
        for item in self._items:
            if ranges_overlap(item.range, candidate.range):
                return item
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _append(self, candidate: OptimizationResult, is_custom: bool, label: str) -> SavedOpportunity:
        saved = SavedOpportunity.from_result(candidate, is_custom=is_custom, label=label)
        self._items.append(saved)
        self._pending = None
        logger.info(
            "Added %s -> %s (%d leave days) to plan",
            saved.range.start_date,
            saved.range.end_date,
            saved.leave_days_required,
        )
        return saved

    def _add_checked(self, candidate: OptimizationResult, is_custom: bool, label: str) -> SavedOpportunity | None:
        if self.is_in_plan(candidate):
            logger.debug("%s -> %s already in plan", *candidate.range)
            return None
        conflict = self.find_conflict(candidate)
        if conflict is not None:
            self._pending = ConflictWarning(conflict, candidate, is_custom, label)
            raise ConflictDetected(conflict, candidate)
        return self._append(candidate, is_custom, label)

    def add_to_plan(self, candidate: OptimizationResult) -> SavedOpportunity | None:
        """Accept *candidate* into the plan.

        Returns the new entry, or ``None`` if the same range is already
        planned. Raises :class:`ConflictDetected` when it overlaps another
        entry; the plan is left unchanged and the candidate is kept pending.
        """
        return self._add_checked(candidate, is_custom=False, label="")

    def add_custom_period(self, period: OptimizationResult, label: str = "") -> SavedOpportunity | None:
        """Like :meth:`add_to_plan`, for a period the user picked by hand."""
        return self._add_checked(period, is_custom=True, label=(label or "").strip())

    def force_add_to_plan(self) -> SavedOpportunity:
        """Add the pending candidate despite its conflict."""
        if self._pending is None:
            msg = "No conflicting period is pending"
            raise PlannerError(msg)
        pending = self._pending
        logger.warning(
            "Adding %s -> %s despite overlap with %s -> %s",
            *pending.pending.range,
            *pending.conflict_with.range,
        )
        return self._append(pending.pending, pending.is_custom, pending.label)

    def dismiss_conflict_warning(self) -> None:
        """Drop the pending candidate without touching the plan."""
        self._pending = None

    def add_saved(self, item: SavedOpportunity) -> None:
        """Restore an already-saved entry without any checks."""
        self._items.append(item)

    def remove_from_plan(self, item_id: str) -> None:
        """Remove the entry with *item_id*; unknown ids are ignored."""
        self._items = [item for item in self._items if item.id != item_id]

    def clear_plan(self) -> None:
        self._items = []
