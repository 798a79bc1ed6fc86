"""Exception types raised by the leave planner."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from anasa.optimizer import OptimizationResult
    from anasa.plan import SavedOpportunity


class PlannerError(Exception):
    """Base class for every error raised by ``anasa``."""


class InvalidRangeError(PlannerError, ValueError):
    """A date range ends before it starts, or falls outside its year."""


class InvalidYearError(PlannerError, ValueError):
    """A year cannot be represented by :mod:`datetime`."""


class ParseError(PlannerError, ValueError):
    """A custom holiday, custom period or stored value could not be parsed."""


class ConflictDetected(PlannerError):
    """A candidate window overlaps a period already in the annual plan.

    Not a failure: the plan keeps the candidate pending until the caller
    either forces the add or dismisses the warning.
    """

    def __init__(self, conflict_with: SavedOpportunity, pending: OptimizationResult) -> None:
        self.conflict_with = conflict_with
        self.pending = pending
        start = conflict_with.range.start_date.isoformat()
        end = conflict_with.range.end_date.isoformat()
        super().__init__(f"Period overlaps an existing plan entry ({start} -> {end})")
