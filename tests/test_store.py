from __future__ import annotations

import datetime
import json
import pathlib

import pytest

from anasa.errors import ParseError
from anasa.holidays import ConditionalHoliday, MovableHoliday, OneTimeHoliday, RecurringHoliday, build_holidays
from anasa.optimizer import create_custom_period, find_opportunities
from anasa.plan import AnnualPlan
from anasa.store import DEFAULT_LEAVE_DAYS, STATE_ENV_VAR, PlannerStore, Settings, default_state_path


def _plan_2026() -> AnnualPlan:
    hols = build_holidays(2026)
    plan = AnnualPlan(20)
    plan.add_to_plan(find_opportunities(2026, 3, hols, max_results=1)[0])
    plan.add_custom_period(
        create_custom_period(datetime.date(2026, 7, 6), datetime.date(2026, 7, 10), hols),
        label="Island",
    )
    return plan


class TestPlannerStore:
    def test_missing_file_gives_defaults(self, tmp_path: pathlib.Path) -> None:
        settings, plan = PlannerStore(tmp_path / "none.json").load(2026)
        assert settings == Settings(2026, custom_holidays=[])
        assert settings.total_leave_days == DEFAULT_LEAVE_DAYS
        assert len(plan) == 0
        assert plan.total_leave_days == DEFAULT_LEAVE_DAYS

    def test_round_trip(self, tmp_path: pathlib.Path) -> None:
        store = PlannerStore(tmp_path / "state.json")
        settings = Settings(
            2026,
            total_leave_days=20,
            include_holy_spirit=False,
            parent_mode=True,
            start_from_today=False,
            custom_holidays=[
                OneTimeHoliday("Company day", "2026-07-03"),
                RecurringHoliday("Local feast", "10-03"),
                MovableHoliday("Zoodochos Pigi", 5),
                ConditionalHoliday("Saint George", "04-23"),
            ],
        )
        plan = _plan_2026()
        store.save(settings, plan)

        loaded_settings, loaded_plan = store.load(2026)
        assert loaded_settings == settings
        assert loaded_plan.items == plan.items
        assert loaded_plan.total_leave_days == 20
        assert loaded_plan.remaining_leave_days == plan.remaining_leave_days
        assert loaded_plan.items[1].label == "Island"
        assert loaded_plan.items[1].is_custom

    def test_loads_stored_year_by_default(self, tmp_path: pathlib.Path) -> None:
        store = PlannerStore(tmp_path / "state.json")
        store.save(Settings(2026), _plan_2026())
        settings, plan = store.load()
        assert settings.year == 2026
        assert len(plan) == 2

    def test_plan_for_other_year_is_ignored(self, tmp_path: pathlib.Path) -> None:
        store = PlannerStore(tmp_path / "state.json")
        store.save(Settings(2026, total_leave_days=20), _plan_2026())
        settings, plan = store.load(2027)
        assert settings.year == 2027
        assert settings.total_leave_days == 20
        assert len(plan) == 0

    def test_writes_plan_metadata(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "nested" / "state.json"
        PlannerStore(path).save(Settings(2026), _plan_2026())
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["plan"]["year"] == 2026
        assert len(data["plan"]["opportunities"]) == 2
        assert "updated_at" in data["plan"]

    def test_invalid_json(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "state.json"
        path.write_text("{broken", encoding="utf-8")
        with pytest.raises(ParseError):
            PlannerStore(path).load(2026)

    def test_not_an_object(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "state.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ParseError):
            PlannerStore(path).load(2026)

    def test_bad_plan_entry(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "state.json"
        path.write_text(
            json.dumps({"year": 2026, "plan": {"year": 2026, "opportunities": [{"id": "x"}]}}),
            encoding="utf-8",
        )
        with pytest.raises(ParseError):
            PlannerStore(path).load(2026)

    def test_bad_custom_holiday(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "state.json"
        path.write_text(json.dumps({"custom_holidays": [{"kind": "weekly", "name": "x"}]}), encoding="utf-8")
        with pytest.raises(ParseError):
            PlannerStore(path).load(2026)

    @pytest.mark.parametrize(
        "payload",
        [
            {"year": "abc"},
            {"total_leave_days": "lots"},
            {"total_leave_days": {"n": 3}},
            {"custom_holidays": ["oops"]},
            {"custom_holidays": 7},
            {"custom_holidays": [{"kind": "recurring", "name": 5, "month_day": "10-03"}]},
            {"plan": ["not", "an", "object"]},
            {"year": 2026, "plan": {"year": 2026, "opportunities": 3}},
        ],
    )
    def test_wrong_typed_values(self, tmp_path: pathlib.Path, payload: dict) -> None:
        path = tmp_path / "state.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        with pytest.raises(ParseError):
            PlannerStore(path).load(2026)


class TestDefaultStatePath:
    def test_env_var(self, tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(STATE_ENV_VAR, str(tmp_path / "custom.json"))
        assert default_state_path() == tmp_path / "custom.json"
        assert PlannerStore().path == tmp_path / "custom.json"

    def test_home_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(STATE_ENV_VAR, raising=False)
        assert default_state_path() == pathlib.Path("~/.anasa.json").expanduser()
