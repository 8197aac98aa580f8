"""CLI interface using Typer."""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from bodyline.config import get_settings, reload_settings
from bodyline.data.log_loader import LogLoader, load_snapshot, save_snapshot
from bodyline.tracking.models import Snapshot

app = typer.Typer(
    help="Weight projections, goal analytics and logging streaks",
    no_args_is_help=True,
)
console = Console()

config_app = typer.Typer(help="Show or create the config file")
app.add_typer(config_app, name="config")


# ============================================================================
# Helpers
# ============================================================================


def output_json(response: dict, file=None) -> None:
    """Output JSON response to stdout or file."""
    json_str = json.dumps(response, indent=2)
    if file:
        file.write(json_str)
    else:
        print(json_str)


def configure_logging(level: str) -> None:
    """Send log records to the console through Rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def use_json(json_output: bool) -> bool:
    """JSON when --json is given or the config defaults to it."""
    return json_output or get_settings().defaults.output_format == "json"


def parse_today(today_str: Optional[str]) -> date:
    """Parse --today, defaulting to the system date."""
    if today_str is None:
        return date.today()
    try:
        return date.fromisoformat(today_str)
    except ValueError:
        console.print(f"[red]Invalid date '{today_str}' (expected YYYY-MM-DD)[/red]")
        raise typer.Exit(1)


def fail(command: str, message: str, json_output: bool, style: str = "red") -> NoReturn:
    """Report a failure and exit with status 1."""
    if json_output:
        output_json({"success": False, "command": command, "errors": [message]})
    else:
        console.print(f"[{style}]{message}[/{style}]")
    raise typer.Exit(1)


def open_snapshot(path: Path, command: str, json_output: bool) -> Snapshot:
    """Load a snapshot file, exiting with a friendly message on failure."""
    try:
        return load_snapshot(path)
    except FileNotFoundError:
        fail(command, f"File not found: {path}", json_output)
    except ValueError as e:
        fail(command, str(e), json_output)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    config_path: Optional[Path] = typer.Option(
        None, "--config", help="Path to config.yaml (default: ~/.bodyline/config.yaml)"
    ),
) -> None:
    """Weight projections, goal analytics and logging streaks."""
    settings = reload_settings(config_path)
    configure_logging("DEBUG" if verbose else settings.logging.level)


# ============================================================================
# TDEE
# ============================================================================


@app.command()
def tdee(
    snapshot_path: Path = typer.Argument(..., help="Snapshot file (YAML or JSON)"),
    today_str: Optional[str] = typer.Option(None, "--today", help="Reference date (YYYY-MM-DD)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show BMR and TDEE for the latest weight."""
    from bodyline.profiles.body_calc import (
        ACTIVITY_DESCRIPTIONS,
        baseline_tdee,
        calculate_age,
        calculate_bmr,
        estimate_basic_tdee,
    )
    from bodyline.tracking.series import latest_entry

    json_output = use_json(json_output)
    today = parse_today(today_str)
    snapshot = open_snapshot(snapshot_path, "tdee", json_output)

    latest = latest_entry(snapshot.weights)
    if latest is None:
        fail("tdee", "No weight entries found", json_output, style="yellow")

    profile = snapshot.profile
    bmr = None
    age = None
    if profile is not None:
        age = calculate_age(profile.birth_date, today)
        bmr = calculate_bmr(latest.weight, profile.height_cm, age, profile.biological_sex)
    tdee_value = baseline_tdee(latest.weight, profile, today)
    basic = estimate_basic_tdee(latest.weight)

    if json_output:
        output_json({
            "success": True,
            "command": "tdee",
            "data": {
                "weight_kg": latest.weight,
                "age": age,
                "bmr": round(bmr) if bmr is not None else None,
                "tdee": tdee_value,
                "basic_estimate": basic,
                "override": bool(profile and profile.tdee_override),
                "activity_level": profile.activity_level.value if profile else None,
            },
            "human_summary": f"TDEE: {tdee_value} kcal/day at {latest.weight:.1f} kg",
        })
        return

    console.print(f"Weight: {latest.weight:.1f} kg ({latest.date.isoformat()})")
    if profile is None:
        console.print("[yellow]No profile: using weight-only estimate[/yellow]")
    else:
        console.print(f"Age: {age}")
        level = profile.activity_level
        console.print(f"Activity: {level.value} ({ACTIVITY_DESCRIPTIONS[level]})")
        console.print(f"BMR (Mifflin-St Jeor): {bmr:.0f} kcal/day")
        if profile.tdee_override:
            console.print("[blue]Using manual TDEE override[/blue]")
    console.print(f"[bold]TDEE: {tdee_value} kcal/day[/bold]")
    console.print(f"[dim]Weight-only estimate: {basic} kcal/day[/dim]")


# ============================================================================
# Projection
# ============================================================================


@app.command()
def project(
    snapshot_path: Path = typer.Argument(..., help="Snapshot file (YAML or JSON)"),
    timeframe: Optional[str] = typer.Option(
        None, "--timeframe", "-t", help="4w, 8w, 12w, 6m or 1y"
    ),
    adherence: Optional[float] = typer.Option(
        None, "--adherence", "-a", min=0.0, max=1.0, help="Fraction of the plan followed"
    ),
    adaptive: Optional[bool] = typer.Option(
        None, "--adaptive/--fixed", help="Keep the deficit constant as TDEE changes"
    ),
    bands: Optional[bool] = typer.Option(
        None, "--bands/--no-bands", help="Include optimistic/pessimistic projections"
    ),
    target_deficit: Optional[float] = typer.Option(
        None,
        "--target-deficit",
        help="Daily deficit to hold in adaptive mode (kcal); ignored with --fixed",
    ),
    every: int = typer.Option(7, "--every", min=1, help="Show every Nth day"),
    today_str: Optional[str] = typer.Option(None, "--today", help="Reference date (YYYY-MM-DD)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Project weight forward from recent intake."""
    from bodyline.tracking.projection import timeframe_label
    from bodyline.tracking.report import build_projection_report, format_projection_report

    settings = get_settings().projection
    json_output = use_json(json_output)
    today = parse_today(today_str)
    snapshot = open_snapshot(snapshot_path, "project", json_output)

    report = build_projection_report(
        snapshot,
        today=today,
        timeframe=timeframe or settings.timeframe,
        adherence=adherence if adherence is not None else settings.adherence,
        adaptive_mode=adaptive if adaptive is not None else settings.adaptive_mode,
        show_confidence_bands=bands if bands is not None else settings.show_confidence_bands,
        target_deficit=target_deficit,
        optimistic_factor=settings.optimistic_factor,
        pessimistic_factor=settings.pessimistic_factor,
        calorie_window_days=settings.calorie_window_days,
    )

    if report is None:
        fail(
            "project",
            "Not enough data: need at least 2 weight entries and recent calorie logs",
            json_output,
            style="yellow",
        )

    if json_output:
        output_json({
            "success": True,
            "command": "project",
            "data": report.to_dict(),
            "human_summary": (
                f"Projected {report.final_weight:.1f} kg in {report.projection_days} days"
            ),
        })
        return

    console.print(format_projection_report(report))
    console.print()

    has_bands = report.points[0].optimistic_weight is not None
    has_composition = any(p.lean_mass_estimate is not None for p in report.points)

    table = Table(title=f"Projection over {timeframe_label(timeframe or settings.timeframe)}")
    table.add_column("Date", style="cyan")
    table.add_column("Weight", justify="right")
    if has_bands:
        table.add_column("Range", justify="right", style="dim")
    table.add_column("TDEE", justify="right")
    table.add_column("Intake", justify="right")
    if has_composition:
        table.add_column("Lean", justify="right", style="green")
        table.add_column("Fat", justify="right", style="yellow")
    table.add_column("", style="magenta")

    last_index = len(report.points) - 1
    for i, point in enumerate(report.points):
        if i % every and i != last_index and not point.is_milestone:
            continue
        row = [point.date.isoformat(), f"{point.projected_weight:.1f}"]
        if has_bands:
            low, high = sorted((point.pessimistic_weight, point.optimistic_weight))
            row.append(f"{low:.1f}-{high:.1f}")
        row += [str(point.tdee), str(point.target_intake)]
        if has_composition:
            row.append(
                f"{point.lean_mass_estimate:+.2f}" if point.lean_mass_estimate is not None else ""
            )
            row.append(
                f"{point.fat_mass_estimate:+.2f}" if point.fat_mass_estimate is not None else ""
            )
        row.append(point.milestone_label or "")
        table.add_row(*row)

    console.print(table)


@app.command()
def goal(
    snapshot_path: Path = typer.Argument(..., help="Snapshot file (YAML or JSON)"),
    deficit: Optional[float] = typer.Option(
        None, "--deficit", help="Daily deficit to assume (default: TDEE minus recent intake)"
    ),
    today_str: Optional[str] = typer.Option(None, "--today", help="Reference date (YYYY-MM-DD)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Estimate time to goal and compare progress with the plan."""
    from bodyline.profiles.body_calc import baseline_tdee
    from bodyline.tracking.analytics import (
        calculate_target_weight_today,
        estimate_time_to_goal,
    )
    from bodyline.tracking.models import ProgressStatus
    from bodyline.tracking.series import (
        average_daily_calories,
        first_entry,
        latest_entry,
        progress_to_goal,
    )

    settings = get_settings().projection
    json_output = use_json(json_output)
    today = parse_today(today_str)
    snapshot = open_snapshot(snapshot_path, "goal", json_output)

    first = first_entry(snapshot.weights)
    latest = latest_entry(snapshot.weights)
    if first is None or latest is None:
        fail("goal", "No weight entries found", json_output, style="yellow")

    if deficit is None:
        avg = average_daily_calories(snapshot.calories, today, settings.calorie_window_days)
        if avg is None:
            fail("goal", "No recent calorie logs to derive a deficit from", json_output, style="yellow")
        deficit = baseline_tdee(latest.weight, snapshot.profile, today) - avg

    eta = estimate_time_to_goal(latest.weight, snapshot.goal_weight, deficit, today=today)
    progress = calculate_target_weight_today(
        first, snapshot.goal_weight, latest.weight, deficit, today=today
    )
    percent = None
    if snapshot.goal_weight is not None:
        percent = progress_to_goal(latest.weight, snapshot.goal_weight, first.weight)

    if json_output:
        output_json({
            "success": True,
            "command": "goal",
            "data": {
                "current_weight": latest.weight,
                "goal_weight": snapshot.goal_weight,
                "daily_deficit": round(deficit),
                "percent_complete": round(percent, 1) if percent is not None else None,
                "time_to_goal": eta.to_dict() if eta else None,
                "progress": progress.to_dict(),
            },
            "human_summary": f"Status: {progress.status.value}",
        })
        return

    if progress.status == ProgressStatus.NO_GOAL:
        console.print("[yellow]No goal weight set[/yellow]")
        return

    console.print(
        f"Current: {latest.weight:.1f} kg  Goal: {snapshot.goal_weight:.1f} kg  "
        f"({percent:.0f}% of the way from {first.weight:.1f} kg)"
    )
    if eta:
        console.print(
            f"[green]Goal in {eta.days} days (~{eta.weeks} weeks), "
            f"around {eta.target_date.isoformat()}[/green]"
        )
    else:
        console.print("[yellow]Goal not reachable at this deficit[/yellow]")

    style = {
        ProgressStatus.AHEAD: "green",
        ProgressStatus.ON_TRACK: "blue",
        ProgressStatus.BEHIND: "yellow",
    }.get(progress.status, "white")
    console.print(
        f"[{style}]{progress.status.value.replace('_', ' ').title()}[/{style}]: "
        f"{progress.difference:+.1f} kg vs target {progress.target_weight} kg "
        f"after {progress.days_elapsed} days"
    )


@app.command()
def trajectory(
    snapshot_path: Path = typer.Argument(..., help="Snapshot file (YAML or JSON)"),
    deficit: float = typer.Option(500, "--deficit", help="Planned daily deficit (kcal)"),
    days: int = typer.Option(84, "--days", "-d", min=0, help="Days past today to include"),
    every: int = typer.Option(7, "--every", min=1, help="Show every Nth day"),
    today_str: Optional[str] = typer.Option(None, "--today", help="Reference date (YYYY-MM-DD)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the straight-line plan from the first weigh-in to the goal."""
    from bodyline.tracking.analytics import generate_target_trajectory

    json_output = use_json(json_output)
    today = parse_today(today_str)
    snapshot = open_snapshot(snapshot_path, "trajectory", json_output)

    points = generate_target_trajectory(
        snapshot.weights, snapshot.goal_weight, deficit, days, today=today
    )
    if not points:
        fail("trajectory", "Need a goal weight and at least one weight entry", json_output, style="yellow")

    if json_output:
        output_json({
            "success": True,
            "command": "trajectory",
            "data": {
                "points": [
                    {"date": p.date.isoformat(), "target_weight": p.target_weight}
                    for p in points
                ]
            },
            "human_summary": f"{len(points)} days from {points[0].date} to {points[-1].date}",
        })
        return

    table = Table(title=f"Target trajectory ({deficit:.0f} kcal/day)")
    table.add_column("Date", style="cyan")
    table.add_column("Target", justify="right")
    for i, point in enumerate(points):
        if i % every and i != len(points) - 1:
            continue
        table.add_row(point.date.isoformat(), f"{point.target_weight:.1f}")
    console.print(table)


# ============================================================================
# Streaks
# ============================================================================


@app.command()
def streak(
    snapshot_path: Path = typer.Argument(..., help="Snapshot file (YAML or JSON)"),
    source: str = typer.Option(
        "any", "--source", "-s", help="Which logs count: weights, calories or any"
    ),
    max_days: Optional[int] = typer.Option(None, "--max-days", min=1, help="Days to look back"),
    today_str: Optional[str] = typer.Option(None, "--today", help="Reference date (YYYY-MM-DD)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the current logging streak (one missed day is forgiven)."""
    from bodyline.tracking.series import logged_dates
    from bodyline.tracking.streaks import calculate_streak_with_grace

    settings = get_settings().streak
    json_output = use_json(json_output)
    today = parse_today(today_str)
    snapshot = open_snapshot(snapshot_path, "streak", json_output)

    sources = {
        "weights": (snapshot.weights,),
        "calories": (snapshot.calories,),
        "any": (snapshot.weights, snapshot.calories),
    }
    if source not in sources:
        fail("streak", f"Unknown source '{source}'. Use weights, calories or any", json_output)

    result = calculate_streak_with_grace(
        logged_dates(*sources[source]),
        today=today,
        max_days=max_days or settings.max_days,
        display_days=settings.display_days,
    )

    if json_output:
        output_json({
            "success": True,
            "command": "streak",
            "data": result.to_dict(),
            "human_summary": f"{result.count} day streak",
        })
        return

    console.print(f"[bold]{result.count}[/bold] day streak")
    if result.grace_day_used:
        console.print("[blue]Streak saved: one grace day used[/blue]")

    marks = []
    for day in reversed(result.recent_days):
        if day.logged:
            marks.append("[green]●[/green]")
        elif day.is_grace_day:
            marks.append("[blue]◐[/blue]")
        else:
            marks.append("[dim]○[/dim]")
    console.print(" ".join(marks))


# ============================================================================
# Import
# ============================================================================


@app.command("import-csv")
def import_csv(
    weights_csv: Path = typer.Argument(..., help="CSV with date,weight columns"),
    calories_csv: Optional[Path] = typer.Argument(None, help="CSV with date,calories columns"),
    output: Path = typer.Option(..., "--output", "-o", help="Snapshot YAML to write"),
    goal_weight: Optional[float] = typer.Option(None, "--goal-weight", help="Goal weight (kg)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Convert CSV exports into a snapshot file."""
    json_output = use_json(json_output)
    loader = LogLoader()
    try:
        weights = loader.load_weights_csv(weights_csv)
        calories = loader.load_calories_csv(calories_csv) if calories_csv else []
    except FileNotFoundError as e:
        fail("import-csv", f"File not found: {e.filename}", json_output)
    except ValueError as e:
        fail("import-csv", str(e), json_output)

    snapshot = Snapshot(
        weights=tuple(weights),
        calories=tuple(calories),
        goal_weight=goal_weight,
    )
    save_snapshot(snapshot, output)

    if json_output:
        output_json({
            "success": True,
            "command": "import-csv",
            "data": {
                "weights": len(weights),
                "calories": len(calories),
                "skipped": loader.skipped,
                "output": str(output),
            },
            "human_summary": f"Imported {len(weights)} weights and {len(calories)} calorie logs",
        })
    else:
        console.print(
            f"[green]Imported[/green] {len(weights)} weight entries and "
            f"{len(calories)} calorie logs to {output}"
        )
        if loader.skipped:
            console.print(f"[yellow]Skipped {loader.skipped} incomplete rows[/yellow]")


# ============================================================================
# Config
# ============================================================================


@config_app.command("show")
def config_show(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the active settings."""
    json_output = use_json(json_output)
    data = get_settings().to_dict()
    if json_output:
        output_json({"success": True, "command": "config show", "data": data})
        return

    table = Table(title="Settings")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for section, values in data.items():
        for key, value in values.items():
            table.add_row(f"{section}.{key}", str(value))
    console.print(table)


@config_app.command("init")
def config_init(
    path: Optional[Path] = typer.Option(None, "--path", help="Where to write config.yaml"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write a config file with default settings."""
    from bodyline.config.settings import Settings, default_config_path

    target = path or default_config_path()
    if target.exists() and not force:
        console.print(f"[yellow]{target} already exists (use --force to overwrite)[/yellow]")
        raise typer.Exit(1)

    Settings().save(target)
    console.print(f"[green]Wrote default settings to {target}[/green]")


if __name__ == "__main__":
    app()
