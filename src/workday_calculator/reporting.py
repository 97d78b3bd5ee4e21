"""Simple reporting utilities for CLI output."""

from __future__ import annotations

from datetime import date
from typing import Mapping, Optional

from .attendance import (
    average_efficiency,
    average_hours,
    most_recent,
    week_start,
    weekly_breakdown,
    weekly_total,
)
from .models import BreakSession, CalculationResult, DayLogEntry, LiveStatus, RuleResult
from .timemath import format_24, format_clock, format_duration

CHART_MAX_HOURS = 10.0
CHART_WIDTH = 30


class ReportPrinter:
    """Render human-readable results and analytics in the console."""

    def __init__(self, use_24_hour: bool = True) -> None:
        self.use_24_hour = use_24_hour

    def print_results(self, result: CalculationResult) -> None:
        config = result.config
        clock_in = format_24(config.clock_in) if config.clock_in is not None else "--:--"
        print(f"Clock-in: {clock_in}")
        print("-" * 40)
        self._print_rule(
            result.rule_a,
            f"In: {clock_in} + Work: {format_duration(config.required_work_duration)}"
            f" + Break: {format_duration(result.break_minutes)}",
        )
        self._print_rule(
            result.rule_b,
            f"In: {clock_in} + Presence: {format_duration(config.required_presence_duration)}",
        )
        print()
        print(f"Time worked:      {format_duration(result.worked_minutes)}")
        print(f"Break time:       {format_duration(result.break_minutes)}")
        print(f"Efficiency:       {result.efficiency_percent}%")
        print(f"Real exit time:   {self._clock(result.real_exit_time)}")
        print(f"Recommended exit: {self._clock(result.recommended_exit)}")

    def print_live_status(self, status: LiveStatus) -> None:
        if status.progress_percent is None:
            print("Progress: clock-in time not set")
        else:
            print(f"Progress: {round(status.progress_percent)}% ({status.status})")
        if status.on_break:
            print(f"On break for {format_duration(status.break_elapsed)}")

    def print_breaks(self, sessions: list[BreakSession], now: int) -> None:
        if not sessions:
            print("No breaks recorded today.")
            return
        for session in sessions:
            end = self._clock(session.end_time) if session.end_time is not None else "running"
            print(
                f"  {self._clock(session.start_time):>8} - {end:<8} "
                f"{format_duration(session.elapsed(now))}"
            )

    def print_analytics(self, logs: Mapping[str, DayLogEntry], today: date) -> None:
        start = week_start(today)
        print(f"Week of {start.isoformat()}")
        print("-" * 40)
        for label, _, hours in weekly_breakdown(logs, start):
            print(f"  {label} {render_bar(hours):<{CHART_WIDTH}} {hours:.1f}h")
        print()
        print(f"Total days logged:  {len(logs)}")
        print(f"Average hours/day:  {average_hours(logs):.1f}h")
        print(f"Average efficiency: {average_efficiency(logs):.0f}%")
        print(f"This week:          {weekly_total(logs, start):.1f}h")
        print()
        self.print_history(logs)

    def print_history(self, logs: Mapping[str, DayLogEntry], limit: int = 10) -> None:
        entries = most_recent(logs, limit)
        if not entries:
            print("No history available.")
            return
        print("Recent days:")
        for entry in entries:
            print(
                f"  {entry.date}  {format_duration(entry.attended_duration):>8}"
                f"  exit {self._clock(entry.real_exit_time)}  {entry.efficiency_percent}%"
            )

    def _print_rule(self, rule: RuleResult, calculation: str) -> None:
        badge = " [optimal]" if rule.is_optimal else ""
        label = "overtime" if rule.is_overtime else "remaining"
        print(f"Rule {rule.rule_id}: {self._clock(rule.end_time, with_24=True)}{badge}")
        print(f"  {calculation} = {format_24(rule.end_time)}")
        print(f"  {format_duration(rule.countdown)} {label}")

    def _clock(self, minutes: int, with_24: bool = False) -> str:
        text = format_clock(minutes, use_24_hour=self.use_24_hour)
        if with_24 and not self.use_24_hour:
            text = f"{text} ({format_24(minutes)})"
        return text


def render_bar(hours: float, max_hours: Optional[float] = None) -> str:
    scale = max_hours or CHART_MAX_HOURS
    filled = int(round(min(hours, scale) / scale * CHART_WIDTH))
    return "#" * filled
