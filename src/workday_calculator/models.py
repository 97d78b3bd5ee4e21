"""Domain models for workday calculations and attendance records."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Optional

from .timemath import format_24, format_duration, normalize, parse_clock, parse_duration, to_minutes

RULE_A = "A"
RULE_B = "B"
RULE_IDS = (RULE_A, RULE_B)

DEFAULT_WORK_MINUTES = 8 * 60 + 15
DEFAULT_BREAK_MINUTES = 45
DEFAULT_PRESENCE_MINUTES = 9 * 60


@dataclass(slots=True)
class WorkdayConfig:
    """Clock-in time plus the configured policy durations."""

    clock_in: Optional[int] = None
    required_work_duration: int = DEFAULT_WORK_MINUTES
    standard_break_duration: int = DEFAULT_BREAK_MINUTES
    required_presence_duration: int = DEFAULT_PRESENCE_MINUTES

    def __post_init__(self) -> None:
        if self.clock_in is not None:
            self.clock_in = normalize(self.clock_in)
        self.required_work_duration = max(0, self.required_work_duration)
        self.standard_break_duration = max(0, self.standard_break_duration)
        self.required_presence_duration = max(0, self.required_presence_duration)

    @property
    def is_configured(self) -> bool:
        return self.clock_in is not None

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "WorkdayConfig":
        return cls(
            clock_in=parse_clock(record.get("inTime")),
            required_work_duration=to_minutes(record.get("workH"), record.get("workM")),
            standard_break_duration=to_minutes(record.get("stdBreakH"), record.get("stdBreakM")),
            required_presence_duration=to_minutes(
                record.get("presenceH"), record.get("presenceM")
            ),
        )

    def to_record(self) -> dict[str, str]:
        work_h, work_m = divmod(self.required_work_duration, 60)
        break_h, break_m = divmod(self.standard_break_duration, 60)
        presence_h, presence_m = divmod(self.required_presence_duration, 60)
        return {
            "inTime": format_24(self.clock_in) if self.clock_in is not None else "",
            "workH": str(work_h),
            "workM": str(work_m),
            "stdBreakH": str(break_h),
            "stdBreakM": str(break_m),
            "presenceH": str(presence_h),
            "presenceM": str(presence_m),
        }


@dataclass(slots=True)
class BreakSession:
    """A single break; ``end_time`` stays ``None`` while the break is running."""

    start_time: int
    end_time: Optional[int] = None
    duration_minutes: int = 0

    @property
    def is_open(self) -> bool:
        return self.end_time is None

    def elapsed(self, now: int) -> int:
        if self.end_time is not None:
            return self.duration_minutes
        return max(0, now - self.start_time)

    def to_record(self) -> dict[str, Any]:
        return {
            "startTime": format_24(self.start_time),
            "endTime": format_24(self.end_time) if self.end_time is not None else None,
            "durationMinutes": self.duration_minutes,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "BreakSession":
        start = parse_clock(record.get("startTime"))
        if start is None:
            raise ValueError(f"Break session has no valid start time: {record!r}")
        raw_end = record.get("endTime")
        end = parse_clock(raw_end)
        if raw_end is not None and end is None:
            raise ValueError(f"Break session has an invalid end time: {record!r}")
        duration = record.get("durationMinutes")
        if end is None:
            duration = 0
        elif isinstance(duration, bool) or not isinstance(duration, int):
            duration = end - start
        return cls(start_time=start, end_time=end, duration_minutes=max(0, duration))


@dataclass(slots=True)
class RuleResult:
    rule_id: str
    end_time: int
    remaining: int
    is_optimal: bool

    @property
    def is_overtime(self) -> bool:
        return self.remaining < 0

    @property
    def countdown(self) -> int:
        """Magnitude of the remaining time or the overtime."""
        return abs(self.remaining)


@dataclass(slots=True)
class DayLogEntry:
    """Snapshot of one calendar day, replaced wholesale on every calculation."""

    date: str
    clock_in: int
    required_work_duration: int
    actual_break_duration: int
    attended_duration: int
    rule_a_exit: int
    rule_b_exit: int
    real_exit_time: int
    efficiency_percent: int
    break_sessions: list[BreakSession] = field(default_factory=list)

    @property
    def attended_hours(self) -> float:
        return self.attended_duration / 60.0

    def to_record(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "inTime": format_24(self.clock_in),
            "workHours": format_duration(self.required_work_duration),
            "breakTime": format_duration(self.actual_break_duration),
            "attendedTime": format_duration(self.attended_duration),
            "ruleAExit": format_24(self.rule_a_exit),
            "ruleBExit": format_24(self.rule_b_exit),
            "realExitTime": format_24(self.real_exit_time),
            "efficiency": self.efficiency_percent,
            "breakSessions": [session.to_record() for session in self.break_sessions],
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "DayLogEntry":
        clock_in = parse_clock(record.get("inTime"))
        if not record.get("date") or clock_in is None:
            raise ValueError(f"Incomplete log entry: {record!r}")
        rule_a = parse_clock(record.get("ruleAExit"))
        rule_b = parse_clock(record.get("ruleBExit"))
        real_exit = parse_clock(record.get("realExitTime"))
        efficiency = record.get("efficiency")
        return cls(
            date=str(record["date"]),
            clock_in=clock_in,
            required_work_duration=parse_duration(record.get("workHours")) or 0,
            actual_break_duration=parse_duration(record.get("breakTime")) or 0,
            attended_duration=parse_duration(record.get("attendedTime")) or 0,
            rule_a_exit=rule_a if rule_a is not None else clock_in,
            rule_b_exit=rule_b if rule_b is not None else clock_in,
            real_exit_time=real_exit if real_exit is not None else (
                rule_a if rule_a is not None else clock_in
            ),
            efficiency_percent=_stored_percent(efficiency),
            break_sessions=[
                BreakSession.from_record(item)
                for item in record.get("breakSessions") or []
                if isinstance(item, dict)
            ],
        )


def _stored_percent(value: Any) -> int:
    # json.loads accepts NaN and Infinity.
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return 0
    return int(value)


@dataclass(slots=True)
class ReminderEntry:
    rule_id: str
    fire_at_minute: int


@dataclass(slots=True)
class CalculationResult:
    """Everything a single recalculation produces for the host to render."""

    config: WorkdayConfig
    rule_a: RuleResult
    rule_b: RuleResult
    real_exit_time: int
    attended_minutes: int
    worked_minutes: int
    break_minutes: int
    efficiency_percent: int
    recommended_exit: int
    log_entry: DayLogEntry


@dataclass(slots=True)
class LiveStatus:
    progress_percent: Optional[float]
    status: Optional[str]
    on_break: bool
    break_elapsed: int
    fired_reminders: list[ReminderEntry] = field(default_factory=list)
