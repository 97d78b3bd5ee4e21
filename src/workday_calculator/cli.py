"""Command-line interface for the workday calculator."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

import typer

from .attendance import load_log
from .calculator import WorkdayCalculator
from .config import EngineSettings, load_preferences, save_preferences
from .db import SqliteStore
from .errors import ConfigurationIncomplete, ReminderNotScheduled
from .models import RULE_IDS
from .paths import get_db_path, resolve_export_path
from .reporting import ReportPrinter
from .timemath import clock_minutes, format_24, parse_clock

logger = logging.getLogger(__name__)

app = typer.Typer(help="Workday exit-time calculator and attendance log.")
break_app = typer.Typer(help="Start, end and list today's breaks.")
app.add_typer(break_app, name="break")


@dataclass(slots=True)
class CliContext:
    db_path: Path

    def store(self) -> SqliteStore:
        return SqliteStore(self.db_path)

    def calculator(self, settings: Optional[EngineSettings] = None) -> WorkdayCalculator:
        return WorkdayCalculator(self.store(), alert=_echo_alert, settings=settings)


@app.callback(no_args_is_help=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs."),
    db_path: Optional[Path] = typer.Option(
        None,
        "--db",
        path_type=Path,
        help="Location of the workday SQLite database.",
    ),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    ctx.obj = CliContext(db_path=db_path or get_db_path())


@app.command()
def configure(
    ctx: typer.Context,
    clock_in: Optional[str] = typer.Option(None, "--clock-in", help="Clock-in time (HH:MM)."),
    work_hours: Optional[int] = typer.Option(None, "--work-hours", min=0),
    work_minutes: Optional[int] = typer.Option(None, "--work-minutes", min=0),
    break_hours: Optional[int] = typer.Option(None, "--break-hours", min=0),
    break_minutes: Optional[int] = typer.Option(None, "--break-minutes", min=0),
    presence_hours: Optional[int] = typer.Option(None, "--presence-hours", min=0),
    presence_minutes: Optional[int] = typer.Option(None, "--presence-minutes", min=0),
) -> None:
    """Update clock-in time and required durations."""
    calculator = ctx.obj.calculator()
    config = calculator.load_config()
    if clock_in is not None:
        parsed = parse_clock(clock_in)
        if parsed is None:
            raise typer.BadParameter("expected HH:MM", param_hint="--clock-in")
        config.clock_in = parsed
    config.required_work_duration = _merge(
        config.required_work_duration, work_hours, work_minutes
    )
    config.standard_break_duration = _merge(
        config.standard_break_duration, break_hours, break_minutes
    )
    config.required_presence_duration = _merge(
        config.required_presence_duration, presence_hours, presence_minutes
    )
    calculator.save_config(config)
    typer.echo(
        "Clock-in {clock}, work {work}m, standard break {brk}m, presence {presence}m".format(
            clock=format_24(config.clock_in) if config.clock_in is not None else "--:--",
            work=config.required_work_duration,
            brk=config.standard_break_duration,
            presence=config.required_presence_duration,
        )
    )


@app.command("clock-in")
def clock_in_command(
    ctx: typer.Context,
    time: Optional[str] = typer.Option(
        None, "--time", help="Clock-in time (HH:MM). Defaults to now."
    ),
) -> None:
    """Record the clock-in time and show today's exit times."""
    calculator = ctx.obj.calculator()
    if time is None:
        calculator.set_clock_in_now()
    else:
        parsed = parse_clock(time)
        if parsed is None:
            raise typer.BadParameter("expected HH:MM", param_hint="--time")
        calculator.set_clock_in(parsed)
    _show_results(ctx.obj, calculator)


@app.command()
def status(ctx: typer.Context) -> None:
    """Recalculate exit times, log today and print the results."""
    _show_results(ctx.obj, ctx.obj.calculator())


@break_app.command("start")
def break_start(ctx: typer.Context) -> None:
    """Start a break now."""
    calculator = ctx.obj.calculator()
    if calculator.start_break():
        typer.echo(f"Break started at {format_24(clock_minutes(calculator.now()))}.")
    else:
        typer.echo("A break is already running.")


@break_app.command("end")
def break_end(ctx: typer.Context) -> None:
    """End the running break."""
    calculator = ctx.obj.calculator()
    if calculator.end_break():
        now = calculator.now()
        total = calculator.break_tracker(now).total_break_minutes(clock_minutes(now))
        typer.echo(f"Break ended. Total break today: {total} minutes.")
    else:
        typer.echo("No break is running.")


@break_app.command("list")
def break_list(ctx: typer.Context) -> None:
    """List today's breaks."""
    calculator = ctx.obj.calculator()
    preferences = load_preferences(calculator.store)
    now = calculator.now()
    printer = ReportPrinter(use_24_hour=preferences.show_24_hour)
    printer.print_breaks(calculator.break_sessions(now), clock_minutes(now))


@app.command()
def watch(
    ctx: typer.Context,
    remind: List[str] = typer.Option(
        [],
        "--remind",
        help="Alert 15 minutes before this rule's exit time (A or B). Repeatable.",
    ),
    ticks: int = typer.Option(
        0, "--ticks", min=0, help="Stop after this many one-second ticks (0 runs until Ctrl-C)."
    ),
) -> None:
    """Show live progress and fire exit reminders until interrupted."""
    settings = EngineSettings()
    calculator = ctx.obj.calculator(settings)
    preferences = load_preferences(calculator.store)

    for rule_id in (item.upper() for item in remind):
        if rule_id not in RULE_IDS:
            raise typer.BadParameter("rule must be A or B", param_hint="--remind")
        if not preferences.exit_reminders:
            typer.echo(f"Exit reminders are disabled; not scheduling Rule {rule_id}.")
            continue
        try:
            entry = calculator.schedule_reminder(rule_id)
        except ReminderNotScheduled as exc:
            typer.secho(str(exc), fg=typer.colors.YELLOW, err=True)
            raise typer.Exit(code=1) from exc
        typer.echo(f"Reminder for Rule {rule_id} at {format_24(entry.fire_at_minute)}.")

    stop_event = threading.Event()
    time_format = "%H:%M:%S" if preferences.show_seconds else "%H:%M"
    last_slow: Optional[datetime] = None
    count = 0
    try:
        while not stop_event.is_set():
            now = datetime.now()
            live = calculator.tick_fast(now)
            if last_slow is None or now - last_slow >= settings.slow_tick:
                calculator.tick_slow(now)
                last_slow = now
            progress = (
                "clock-in not set"
                if live.progress_percent is None
                else f"{round(live.progress_percent)}% {live.status}"
            )
            suffix = f" | on break {live.break_elapsed}m" if live.on_break else ""
            typer.echo(f"{now.strftime(time_format)} | {progress}{suffix}")
            count += 1
            if ticks and count >= ticks:
                break
            stop_event.wait(settings.fast_tick.total_seconds())
    except KeyboardInterrupt:
        logger.info("Watch interrupted.")


@app.command()
def stats(ctx: typer.Context) -> None:
    """Print the weekly chart, averages and recent history."""
    store = ctx.obj.store()
    preferences = load_preferences(store)
    ReportPrinter(use_24_hour=preferences.show_24_hour).print_analytics(
        load_log(store), date.today()
    )


@app.command()
def export(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", path_type=Path, help="Destination JSON file or directory."
    ),
) -> None:
    """Write settings, history and today's breaks to a JSON file."""
    calculator = ctx.obj.calculator()
    now = calculator.now()
    target = resolve_export_path(now.date(), output)
    target.write_text(json.dumps(calculator.export_data(now), indent=2), encoding="utf-8")
    typer.echo(f"Data exported to {target}")


@app.command("clear-history")
def clear_history(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Delete every logged day."""
    if not yes:
        typer.confirm("Are you sure you want to clear all history?", abort=True)
    ctx.obj.calculator().clear_history()
    typer.echo("History cleared.")


@app.command()
def reset(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Forget settings, history and theme."""
    if not yes:
        typer.confirm(
            "Are you sure you want to reset all settings? This cannot be undone.", abort=True
        )
    ctx.obj.calculator().reset_all()
    typer.echo("All settings reset.")


@app.command()
def prefs(
    ctx: typer.Context,
    show_24_hour: Optional[bool] = typer.Option(None, "--show-24-hour/--show-12-hour"),
    show_seconds: Optional[bool] = typer.Option(None, "--show-seconds/--hide-seconds"),
    break_reminders: Optional[bool] = typer.Option(
        None, "--break-reminders/--no-break-reminders"
    ),
    exit_reminders: Optional[bool] = typer.Option(None, "--exit-reminders/--no-exit-reminders"),
    overtime_alerts: Optional[bool] = typer.Option(
        None, "--overtime-alerts/--no-overtime-alerts"
    ),
    theme: Optional[str] = typer.Option(None, "--theme", help="dark or light"),
) -> None:
    """Show or change display preferences."""
    store = ctx.obj.store()
    preferences = load_preferences(store)
    changes = {
        "show_24_hour": show_24_hour,
        "show_seconds": show_seconds,
        "break_reminders": break_reminders,
        "exit_reminders": exit_reminders,
        "overtime_alerts": overtime_alerts,
        "theme": theme,
    }
    changed = False
    for name, value in changes.items():
        if value is not None:
            setattr(preferences, name, value)
            changed = True
    if changed:
        save_preferences(store, preferences)
    for key, value in sorted(preferences.to_values().items()):
        typer.echo(f"{key}: {value}")


def _show_results(context: CliContext, calculator: WorkdayCalculator) -> None:
    preferences = load_preferences(context.store())
    printer = ReportPrinter(use_24_hour=preferences.show_24_hour)
    now = calculator.now()
    try:
        result = calculator.calculate_results(now)
    except ConfigurationIncomplete:
        typer.secho(
            "Please set your clock-in time first (workday clock-in).",
            fg=typer.colors.YELLOW,
            err=True,
        )
        raise typer.Exit(code=1) from None
    printer.print_results(result)
    printer.print_live_status(calculator.live_status(now))


def _merge(current: int, hours: Optional[int], minutes: Optional[int]) -> int:
    if hours is None and minutes is None:
        return current
    current_hours, current_minutes = divmod(current, 60)
    return (current_hours if hours is None else hours) * 60 + (
        current_minutes if minutes is None else minutes
    )


def _echo_alert(title: str, message: str) -> None:
    typer.secho(f"{title}: {message}", fg=typer.colors.GREEN, bold=True)
