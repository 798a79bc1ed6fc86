from __future__ import annotations

import datetime

import pytest

from anasa.days import DateRange
from anasa.errors import ConflictDetected, PlannerError
from anasa.optimizer import OptimizationResult, create_custom_period
from anasa.plan import AnnualPlan, SavedOpportunity, ranges_overlap


def _period(start: tuple[int, int], end: tuple[int, int]) -> OptimizationResult:
    return create_custom_period(datetime.date(2026, *start), datetime.date(2026, *end), [])


def _plan_with(*periods: OptimizationResult, total: int = 25) -> AnnualPlan:
    plan = AnnualPlan(total)
    for p in periods:
        plan.add_to_plan(p)
    return plan


class TestRangesOverlap:
    def test_shared_edge_day(self) -> None:
        a = DateRange(datetime.date(2026, 1, 5), datetime.date(2026, 1, 9))
        b = DateRange(datetime.date(2026, 1, 9), datetime.date(2026, 1, 12))
        assert ranges_overlap(a, b)
        assert ranges_overlap(b, a)

    def test_adjacent_ranges(self) -> None:
        a = DateRange(datetime.date(2026, 1, 5), datetime.date(2026, 1, 9))
        b = DateRange(datetime.date(2026, 1, 10), datetime.date(2026, 1, 12))
        assert not ranges_overlap(a, b)
        assert not ranges_overlap(b, a)


class TestAddToPlan:
    def test_adds_and_tracks_budget(self) -> None:
        plan = AnnualPlan(10)
        saved = plan.add_to_plan(_period((1, 5), (1, 9)))
        assert saved is not None
        assert len(plan) == 1
        assert saved.leave_days_required == 5
        assert saved.is_custom is False
        assert plan.total_plan_days == 5
        assert plan.remaining_leave_days == 5

    def test_same_range_is_noop(self) -> None:
        plan = _plan_with(_period((1, 5), (1, 9)))
        assert plan.add_to_plan(_period((1, 5), (1, 9))) is None
        assert len(plan) == 1
        assert plan.conflict_warning is None

    def test_is_in_plan(self) -> None:
        plan = _plan_with(_period((1, 5), (1, 9)))
        assert plan.is_in_plan(_period((1, 5), (1, 9)))
        assert not plan.is_in_plan(_period((1, 5), (1, 8)))

    def test_ids_are_unique(self) -> None:
        plan = _plan_with(_period((1, 5), (1, 9)), _period((2, 2), (2, 6)))
        ids = [item.id for item in plan]
        assert len(set(ids)) == 2

    def test_over_budget_goes_negative(self) -> None:
        plan = _plan_with(_period((1, 5), (1, 9)), _period((2, 2), (2, 6)), total=8)
        assert plan.remaining_leave_days == -2
        assert plan.is_over_budget


class TestConflicts:
    def test_overlap_raises_and_leaves_plan_unchanged(self) -> None:
        plan = _plan_with(_period((1, 7), (1, 11)))
        candidate = _period((1, 5), (1, 9))
        with pytest.raises(ConflictDetected) as excinfo:
            plan.add_to_plan(candidate)
        assert excinfo.value.conflict_with.range == _period((1, 7), (1, 11)).range
        assert excinfo.value.pending == candidate
        assert len(plan) == 1
        warning = plan.conflict_warning
        assert warning is not None
        assert warning.pending == candidate

    def test_force_add(self) -> None:
        plan = _plan_with(_period((1, 7), (1, 11)))
        with pytest.raises(ConflictDetected):
            plan.add_to_plan(_period((1, 5), (1, 9)))
        saved = plan.force_add_to_plan()
        assert saved.range.start_date == datetime.date(2026, 1, 5)
        assert len(plan) == 2
        assert plan.conflict_warning is None

    def test_force_keeps_custom_label(self) -> None:
        plan = _plan_with(_period((1, 7), (1, 11)))
        with pytest.raises(ConflictDetected):
            plan.add_custom_period(_period((1, 5), (1, 9)), label="Ski trip")
        saved = plan.force_add_to_plan()
        assert saved.is_custom
        assert saved.label == "Ski trip"

    def test_dismiss(self) -> None:
        plan = _plan_with(_period((1, 7), (1, 11)))
        with pytest.raises(ConflictDetected):
            plan.add_to_plan(_period((1, 5), (1, 9)))
        plan.dismiss_conflict_warning()
        assert plan.conflict_warning is None
        assert len(plan) == 1

    def test_force_without_pending(self) -> None:
        with pytest.raises(PlannerError):
            AnnualPlan(10).force_add_to_plan()

    def test_conflict_is_a_planner_error(self) -> None:
        assert issubclass(ConflictDetected, PlannerError)


class TestCustomPeriods:
    def test_label_is_stripped(self) -> None:
        plan = AnnualPlan(10)
        saved = plan.add_custom_period(_period((3, 2), (3, 6)), label="  Easter visit  ")
        assert saved is not None
        assert saved.label == "Easter visit"
        assert saved.is_custom

    def test_blank_label(self) -> None:
        saved = AnnualPlan(10).add_custom_period(_period((3, 2), (3, 6)), label="   ")
        assert saved is not None
        assert saved.label == ""


class TestRemoveAndClear:
    def test_remove(self) -> None:
        plan = _plan_with(_period((1, 5), (1, 9)), _period((2, 2), (2, 6)))
        first = plan.items[0]
        plan.remove_from_plan(first.id)
        assert len(plan) == 1
        assert first not in plan.items

    def test_remove_unknown_id(self) -> None:
        plan = _plan_with(_period((1, 5), (1, 9)))
        plan.remove_from_plan("does-not-exist")
        assert len(plan) == 1

    def test_clear(self) -> None:
        plan = _plan_with(_period((1, 5), (1, 9)), total=10)
        plan.clear_plan()
        assert len(plan) == 0
        assert plan.remaining_leave_days == 10

    def test_clear_keeps_pending_conflict(self) -> None:
        plan = _plan_with(_period((1, 7), (1, 11)))
        with pytest.raises(ConflictDetected):
            plan.add_to_plan(_period((1, 5), (1, 9)))
        plan.clear_plan()
        assert plan.conflict_warning is not None

    def test_iteration_is_a_snapshot(self) -> None:
        plan = _plan_with(_period((1, 5), (1, 9)), _period((2, 2), (2, 6)))
        for item in plan:
            assert isinstance(item, SavedOpportunity)
            plan.remove_from_plan(item.id)
        assert len(plan) == 0


class TestSavedOpportunity:
    def test_from_result(self) -> None:
        result = _period((1, 5), (1, 9))
        now = datetime.datetime(2026, 1, 2, 9, 30, tzinfo=datetime.timezone.utc)
        saved = SavedOpportunity.from_result(result, is_custom=True, label="x", now=now)
        assert saved.range == result.range
        assert saved.days == result.days
        assert saved.added_at == now
        assert len(saved.id) == 32

    def test_restore_skips_checks(self) -> None:
        a = SavedOpportunity.from_result(_period((1, 5), (1, 9)))
        b = SavedOpportunity.from_result(_period((1, 7), (1, 11)))
        plan = AnnualPlan(10, [a])
        plan.add_saved(b)
        assert len(plan) == 2
