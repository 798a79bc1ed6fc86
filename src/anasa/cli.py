"""Typer CLI for the Greek leave optimizer."""

from __future__ import annotations

import datetime
import json
import logging
import sys

import typer

from anasa.compare import compare_years
from anasa.easter import calculate_orthodox_easter
from anasa.errors import ConflictDetected, PlannerError
from anasa.holidays import (
    ConditionalHoliday,
    CustomHoliday,
    Holiday,
    MovableHoliday,
    OneTimeHoliday,
    RecurringHoliday,
    build_holidays,
)
from anasa.labels import LANGUAGES
from anasa.optimizer import (
    LeaveOptimizer,
    OptimizationResult,
    create_custom_period,
    format_calendar_view,
    format_date_range,
    format_opportunities,
    parse_custom_period,
)
from anasa.plan import AnnualPlan, SavedOpportunity
from anasa.school import school_overlap
from anasa.store import PlannerStore, Settings

app = typer.Typer(
    name="anasa",
    help="Greek leave optimizer: bridge weekends and public holidays "
    "to get the most days off out of your annual leave.",
    add_completion=False,
)
plan_app = typer.Typer(help="Manage your annual leave plan.", add_completion=False)
app.add_typer(plan_app, name="plan")

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"

logger = logging.getLogger(__name__)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _current_year() -> int:
    return datetime.date.today().year


def _parse_date(value: str) -> datetime.date:
    """Parse a YYYY-MM-DD date string."""
    try:
        return datetime.date.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"Invalid date format {value!r}. Use YYYY-MM-DD.") from None


def _split_named(value: str, what: str) -> tuple[str, str]:
    """Split ``NAME:VALUE`` on its last colon."""
    name, sep, rest = value.rpartition(":")
    if not sep or not name.strip() or not rest.strip():
        raise typer.BadParameter(f"Invalid {what} {value!r}. Use NAME:VALUE.")
    return name.strip(), rest.strip()


def _extra_holidays(
    holiday: list[str] | None,
    movable: list[str] | None,
    saint: list[str] | None,
) -> list[CustomHoliday]:
    specs: list[CustomHoliday] = []
    for h in holiday or []:
        # YYYY-MM-DD is a one-off day, MM-DD repeats every year
        if h.count("-") == 2:
            specs.append(OneTimeHoliday("Custom holiday", h))
        else:
            specs.append(RecurringHoliday("Custom holiday", h))
    for m in movable or []:
        specs.append(MovableHoliday(*_split_named(m, "movable holiday")))
    for s in saint or []:
        specs.append(ConditionalHoliday(*_split_named(s, "patron saint feast")))
    return specs


def _fail(exc: Exception) -> typer.Exit:
    typer.echo(f"Error: {exc}", err=True)
    return typer.Exit(code=1)


def _load(state: str | None, year: int | None) -> tuple[PlannerStore, Settings, AnnualPlan]:
    store = PlannerStore(state)
    try:
        settings, plan = store.load(year if year is not None else _current_year())
    except PlannerError as exc:
        raise _fail(exc) from None
    return store, settings, plan


def _holidays_for(settings: Settings, extra: list[CustomHoliday], holy_spirit: bool | None) -> list[Holiday]:
    include = settings.include_holy_spirit if holy_spirit is None else holy_spirit
    return build_holidays(settings.year, include, [*settings.custom_holidays, *extra])


def _result_to_dict(result: OptimizationResult | SavedOpportunity) -> dict[str, object]:
    data: dict[str, object] = {
        "start_date": result.range.start_date.isoformat(),
        "end_date": result.range.end_date.isoformat(),
        "total_days": result.total_days,
        "leave_days_required": result.leave_days_required,
        "free_days": result.free_days,
        "efficiency": round(result.efficiency, 4),
        "efficiency_label": result.efficiency_label,
        "leave_dates": [d.date.isoformat() for d in result.days if d.cost == 1],
        "holidays": [d.holiday_name for d in result.days if d.holiday_name],
    }
    if isinstance(result, SavedOpportunity):
        data["id"] = result.id
        data["is_custom"] = result.is_custom
        data["label"] = result.label
        data["added_at"] = result.added_at.isoformat()
    return data


_today_option = typer.Option(
    None,
    "--today",
    help="Override today's date (YYYY-MM-DD).",
)
_state_option = typer.Option(
    None,
    "--state",
    help="Path to the JSON state file. Defaults to $ANASA_STATE or ~/.anasa.json.",
)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def holidays(
    year: int = typer.Option(
        None,
        "--year",
        "-y",
        help="Year to list holidays for. Defaults to the current year.",
    ),
    holy_spirit: bool | None = typer.Option(
        None,
        "--holy-spirit/--no-holy-spirit",
        help="Count Holy Spirit Monday as a holiday.",
    ),
    state: str | None = _state_option,
) -> None:
    """List Greek public holidays plus your custom holidays."""
    _store, settings, _plan = _load(state, year)
    try:
        all_holidays = _holidays_for(settings, [], holy_spirit)
    except PlannerError as exc:
        raise _fail(exc) from None

    easter = calculate_orthodox_easter(settings.year)
    typer.echo(f"  Greek public holidays {settings.year}")
    typer.echo(f"  Orthodox Easter: {easter.strftime('%a, %b %d')}")
    typer.echo()
    for h in all_holidays:
        marker = " (custom)" if h.is_custom else ""
        weekend = "  [weekend]" if h.date.weekday() >= 5 else ""
        typer.echo(f"    {h.date.strftime('%a, %b %d'):>12}  {h.name}{marker}{weekend}")


@app.command()
def optimize(
    year: int = typer.Option(
        None,
        "--year",
        "-y",
        help="Target year. Defaults to the current year.",
    ),
    budget: int = typer.Option(
        None,
        "--budget",
        "-b",
        help="Leave days per window. Defaults to the leave left in your plan.",
    ),
    max_results: int = typer.Option(
        3,
        "--max-results",
        "-n",
        help="Number of suggestions (0 = as many as fit).",
        min=0,
    ),
    from_today: bool | None = typer.Option(
        None,
        "--from-today/--full-year",
        help="Only suggest windows from today onwards.",
    ),
    today: str | None = _today_option,
    holy_spirit: bool | None = typer.Option(
        None,
        "--holy-spirit/--no-holy-spirit",
        help="Count Holy Spirit Monday as a holiday.",
    ),
    holiday: list[str] | None = typer.Option(  # noqa: B008
        None,
        "--holiday",
        "-H",
        help="Extra holiday, YYYY-MM-DD (one-off) or MM-DD (yearly). Repeatable.",
    ),
    movable: list[str] | None = typer.Option(  # noqa: B008
        None,
        "--movable",
        help="Extra Easter-relative holiday, NAME:OFFSET. Repeatable.",
    ),
    saint: list[str] | None = typer.Option(  # noqa: B008
        None,
        "--saint",
        help="Patron saint feast, NAME:MM-DD; moves to Bright Monday if on or before Easter. Repeatable.",
    ),
    parent: bool | None = typer.Option(
        None,
        "--parent/--no-parent",
        help="Show overlap with school breaks.",
    ),
    calendar: bool = typer.Option(
        False,
        "--calendar/--no-calendar",
        help="Show month-by-month calendar view.",
    ),
    lang: str = typer.Option("el", "--lang", help=f"Label language ({', '.join(LANGUAGES)})."),
    output_json: bool = typer.Option(
        False,
        "--json",
        help="Output results as JSON.",
    ),
    state: str | None = _state_option,
) -> None:
    """Suggest the most efficient leave windows for the year."""
    if lang not in LANGUAGES:
        typer.echo(f"Error: Invalid language {lang!r}. Choose from: {', '.join(LANGUAGES)}", err=True)
        raise typer.Exit(code=1)

    _store, settings, plan = _load(state, year)
    resolved_budget = budget if budget is not None else max(plan.remaining_leave_days, 0)
    start_from_today = settings.start_from_today if from_today is None else from_today
    parent_mode = settings.parent_mode if parent is None else parent

    try:
        all_holidays = _holidays_for(settings, _extra_holidays(holiday, movable, saint), holy_spirit)
        optimizer = LeaveOptimizer(
            settings.year,
            resolved_budget,
            all_holidays,
            start_from_today,
            today=_parse_date(today) if today else None,
            language=lang,
        )
        results = optimizer.find_opportunities(max_results)
    except PlannerError as exc:
        raise _fail(exc) from None

    if output_json:
        output = {
            "year": settings.year,
            "budget": resolved_budget,
            "start_date": optimizer.start_date.isoformat(),
            "stats": optimizer.stats._asdict(),
            "opportunities": [
                {
                    **_result_to_dict(r),
                    "in_plan": plan.is_in_plan(r),
                    **(
                        {"school_overlap_days": school_overlap(r.range, settings.year).total_overlap_days}
                        if parent_mode
                        else {}
                    ),
                }
                for r in results
            ],
        }
        json.dump(output, sys.stdout, indent=2, ensure_ascii=False)
        typer.echo()
        return

    stats = optimizer.stats
    w = 64
    typer.echo("=" * w)
    typer.echo("  GREEK LEAVE OPTIMIZER")
    typer.echo("=" * w)
    typer.echo(f"  Year:              {settings.year}")
    typer.echo(f"  Leave budget:      {resolved_budget} days")
    typer.echo(f"  From:              {optimizer.start_date.isoformat()}")
    typer.echo(f"  Workdays:          {stats.workdays} of {stats.total_days}")
    typer.echo(f"  Weekday holidays:  {stats.holiday_days}")

    typer.echo(format_opportunities(results))
    for i, r in enumerate(results, 1):
        notes: list[str] = []
        if plan.is_in_plan(r):
            notes.append("already in plan")
        if parent_mode:
            overlap = school_overlap(r.range, settings.year)
            notes.append(f"{overlap.total_overlap_days} school-free days")
        if notes:
            typer.echo(f"  #{i}: {', '.join(notes)}")
    if calendar:
        typer.echo(format_calendar_view(results, all_holidays, settings.year))


@app.command()
def compare(
    years: list[int] = typer.Argument(..., help="Years to compare."),  # noqa: B008
    holy_spirit: bool = typer.Option(
        True,
        "--holy-spirit/--no-holy-spirit",
        help="Include Holy Spirit Monday.",
    ),
) -> None:
    """Show where each public holiday falls across several years."""
    try:
        rows = compare_years(years, holy_spirit)
    except PlannerError as exc:
        raise _fail(exc) from None

    header = "  " + f"{'Holiday':<28}" + "".join(f"{y:>14}" for y in years)
    typer.echo(header)
    typer.echo("  " + "-" * (len(header) - 2))
    for row in rows:
        cells = ""
        for y in years:
            d = row.dates[y]
            mark = "*" if y in row.weekend_years() else " "
            cells += f"{d.strftime('%a %d %b') + mark:>14}"
        typer.echo(f"  {row.name:<28}{cells}")
    typer.echo()
    typer.echo("  * falls on a weekend")


# ---------------------------------------------------------------------------
# Plan commands
# ---------------------------------------------------------------------------


def _add_with_conflict_handling(
    plan: AnnualPlan,
    result: OptimizationResult,
    force: bool,
    custom: bool = False,
    label: str = "",
) -> SavedOpportunity | None:
    try:
        if custom:
            return plan.add_custom_period(result, label)
        return plan.add_to_plan(result)
    except ConflictDetected as exc:
        if not force:
            plan.dismiss_conflict_warning()
            typer.echo(f"Error: {exc}. Use --force to add it anyway.", err=True)
            raise typer.Exit(code=1) from None
        return plan.force_add_to_plan()


def _report_added(saved: SavedOpportunity | None, plan: AnnualPlan) -> None:
    if saved is None:
        typer.echo("  Already in plan.")
        return
    typer.echo(f"  Added {format_date_range(saved.range)} ({saved.leave_days_required} leave days)")
    typer.echo(f"  Remaining leave days: {plan.remaining_leave_days}")
    if plan.is_over_budget:
        typer.echo("  Warning: the plan uses more leave than you have.", err=True)


@plan_app.command("add")
def plan_add(
    rank: int = typer.Argument(1, help="Which suggestion to add (1 = best).", min=1),
    year: int = typer.Option(None, "--year", "-y", help="Target year."),
    budget: int = typer.Option(None, "--budget", "-b", help="Leave days per window."),
    from_today: bool | None = typer.Option(None, "--from-today/--full-year"),
    today: str | None = _today_option,
    force: bool = typer.Option(False, "--force", help="Add even if it overlaps the plan."),
    state: str | None = _state_option,
) -> None:
    """Add one of the optimizer's suggestions to the plan."""
    store, settings, plan = _load(state, year)
    resolved_budget = budget if budget is not None else max(plan.remaining_leave_days, 0)
    start_from_today = settings.start_from_today if from_today is None else from_today

    try:
        results = LeaveOptimizer(
            settings.year,
            resolved_budget,
            _holidays_for(settings, [], None),
            start_from_today,
            today=_parse_date(today) if today else None,
        ).find_opportunities(rank)
    except PlannerError as exc:
        raise _fail(exc) from None

    if len(results) < rank:
        typer.echo(f"Error: Only {len(results)} suggestion(s) available.", err=True)
        raise typer.Exit(code=1)

    saved = _add_with_conflict_handling(plan, results[rank - 1], force)
    store.save(settings, plan)
    _report_added(saved, plan)


@plan_app.command("custom")
def plan_custom(
    start: str = typer.Argument(..., help="First day of leave (YYYY-MM-DD)."),
    end: str = typer.Argument(..., help="Last day of leave (YYYY-MM-DD)."),
    label: str = typer.Option("", "--label", "-l", help="A note for this period."),
    year: int = typer.Option(None, "--year", "-y", help="Target year."),
    today: str | None = _today_option,
    force: bool = typer.Option(False, "--force", help="Add even if it overlaps the plan."),
    state: str | None = _state_option,
) -> None:
    """Add a period of your own choosing to the plan."""
    store, settings, plan = _load(state, year)
    try:
        period = parse_custom_period(start, end, settings.year, _parse_date(today) if today else None)
        result = create_custom_period(*period, _holidays_for(settings, [], None))
    except PlannerError as exc:
        raise _fail(exc) from None

    saved = _add_with_conflict_handling(plan, result, force, custom=True, label=label)
    store.save(settings, plan)
    _report_added(saved, plan)


@plan_app.command("list")
def plan_list(
    year: int = typer.Option(None, "--year", "-y", help="Target year."),
    output_json: bool = typer.Option(False, "--json", help="Output the plan as JSON."),
    state: str | None = _state_option,
) -> None:
    """Show the annual plan."""
    _store, settings, plan = _load(state, year)

    if output_json:
        output = {
            "year": settings.year,
            "total_leave_days": plan.total_leave_days,
            "planned_leave_days": plan.total_plan_days,
            "remaining_leave_days": plan.remaining_leave_days,
            "opportunities": [_result_to_dict(item) for item in plan.items],
        }
        json.dump(output, sys.stdout, indent=2, ensure_ascii=False)
        typer.echo()
        return

    typer.echo(f"  Annual plan {settings.year}")
    typer.echo()
    if not len(plan):
        typer.echo("  (empty)")
    for item in sorted(plan.items, key=lambda i: i.range.start_date):
        label = f"  {item.label}" if item.label else ""
        typer.echo(
            f"  {item.id[:8]}  {format_date_range(item.range)}  "
            f"{item.leave_days_required} leave / {item.total_days} days{label}"
        )
    typer.echo()
    typer.echo(f"  Planned leave days:   {plan.total_plan_days} of {plan.total_leave_days}")
    typer.echo(f"  Remaining leave days: {plan.remaining_leave_days}")
    if plan.is_over_budget:
        typer.echo("  Warning: the plan uses more leave than you have.")


@plan_app.command("remove")
def plan_remove(
    item_id: str = typer.Argument(..., help="Entry id (or a unique prefix)."),
    year: int = typer.Option(None, "--year", "-y", help="Target year."),
    state: str | None = _state_option,
) -> None:
    """Remove an entry from the plan."""
    store, settings, plan = _load(state, year)
    matches = [item.id for item in plan.items if item.id.startswith(item_id)]
    if len(matches) > 1:
        typer.echo(f"Error: Id prefix {item_id!r} is ambiguous.", err=True)
        raise typer.Exit(code=1)
    for match in matches:
        plan.remove_from_plan(match)
    store.save(settings, plan)
    typer.echo(f"  Removed {len(matches)} entr{'y' if len(matches) == 1 else 'ies'}.")


@plan_app.command("clear")
def plan_clear(
    year: int = typer.Option(None, "--year", "-y", help="Target year."),
    state: str | None = _state_option,
) -> None:
    """Remove every entry from the plan."""
    store, settings, plan = _load(state, year)
    plan.clear_plan()
    store.save(settings, plan)
    typer.echo("  Plan cleared.")


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@app.command("settings")
def settings_command(
    year: int = typer.Option(None, "--year", "-y", help="Year the plan belongs to."),
    leave_days: int = typer.Option(None, "--leave-days", help="Annual leave entitlement.", min=0),
    holy_spirit: bool | None = typer.Option(None, "--holy-spirit/--no-holy-spirit"),
    parent: bool | None = typer.Option(None, "--parent/--no-parent"),
    from_today: bool | None = typer.Option(None, "--from-today/--full-year"),
    once: list[str] | None = typer.Option(  # noqa: B008
        None, "--once", help="Add a one-off holiday, NAME:YYYY-MM-DD. Repeatable."
    ),
    recurring: list[str] | None = typer.Option(  # noqa: B008
        None, "--recurring", help="Add a yearly holiday, NAME:MM-DD. Repeatable."
    ),
    movable: list[str] | None = typer.Option(  # noqa: B008
        None, "--movable", help="Add an Easter-relative holiday, NAME:OFFSET. Repeatable."
    ),
    saint: list[str] | None = typer.Option(  # noqa: B008
        None, "--saint", help="Add a patron saint feast, NAME:MM-DD. Repeatable."
    ),
    clear_holidays: bool = typer.Option(False, "--clear-holidays", help="Remove all custom holidays."),
    state: str | None = _state_option,
) -> None:
    """Show or change stored preferences."""
    store, current, plan = _load(state, year)

    custom: list[CustomHoliday] = [] if clear_holidays else list(current.custom_holidays)
    custom += [OneTimeHoliday(*_split_named(v, "holiday")) for v in once or []]
    custom += [RecurringHoliday(*_split_named(v, "holiday")) for v in recurring or []]
    custom += [MovableHoliday(*_split_named(v, "holiday")) for v in movable or []]
    custom += [ConditionalHoliday(*_split_named(v, "holiday")) for v in saint or []]

    updated = current._replace(
        total_leave_days=current.total_leave_days if leave_days is None else leave_days,
        include_holy_spirit=current.include_holy_spirit if holy_spirit is None else holy_spirit,
        parent_mode=current.parent_mode if parent is None else parent,
        start_from_today=current.start_from_today if from_today is None else from_today,
        custom_holidays=custom,
    )
    try:
        # Validate custom holidays before persisting them.
        build_holidays(updated.year, updated.include_holy_spirit, updated.custom_holidays)
    except PlannerError as exc:
        raise _fail(exc) from None

    plan.total_leave_days = updated.total_leave_days
    if updated != current:
        store.save(updated, plan)

    typer.echo(f"  Year:                {updated.year}")
    typer.echo(f"  Annual leave days:   {updated.total_leave_days}")
    typer.echo(f"  Holy Spirit Monday:  {'yes' if updated.include_holy_spirit else 'no'}")
    typer.echo(f"  Parent mode:         {'on' if updated.parent_mode else 'off'}")
    typer.echo(f"  From today:          {'on' if updated.start_from_today else 'off'}")
    typer.echo(f"  Custom holidays:     {len(updated.custom_holidays)}")
    for spec in updated.custom_holidays:
        typer.echo(f"    {type(spec).__name__:<20} {spec.name}: {spec[1]}")


def main() -> None:
    """Entry point for the CLI."""
    app()
