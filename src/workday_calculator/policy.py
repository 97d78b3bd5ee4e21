"""Exit-time rules and the metrics derived from them."""

from __future__ import annotations

from typing import Optional

from .config import EngineSettings
from .errors import ConfigurationIncomplete
from .models import RULE_A, RULE_B, RuleResult, WorkdayConfig
from .timemath import normalize, round_half_up

STATUS_NOT_STARTED = "Not Started"
STATUS_STARTED = "Started"
STATUS_IN_PROGRESS = "In Progress"
STATUS_ALMOST_DONE = "Almost Done"
STATUS_COMPLETED = "Completed"


class PolicyEngine:
    """Applies both leaving rules to a :class:`WorkdayConfig`.

    Rule A: clock-in + required work + actual break taken.
    Rule B: clock-in + required presence, whatever the break usage.

    Exit times returned by :meth:`rule_a`, :meth:`rule_b` and
    :meth:`real_exit_time` are raw minute offsets and may run past midnight;
    :class:`RuleResult` carries the normalized time of day. Anything that
    needs the clock-in raises :class:`ConfigurationIncomplete` when it is unset.
    """

    def __init__(self, config: WorkdayConfig, settings: Optional[EngineSettings] = None) -> None:
        self.config = config
        self.settings = settings or EngineSettings()

    @property
    def clock_in(self) -> int:
        if self.config.clock_in is None:
            raise ConfigurationIncomplete()
        return self.config.clock_in

    def rule_a(self, break_minutes: int) -> int:
        return self.clock_in + self.config.required_work_duration + break_minutes

    def rule_b(self) -> int:
        return self.clock_in + self.config.required_presence_duration

    def real_exit_time(self, break_minutes: int) -> int:
        # Standard break is informational only; the tracked total is what counts.
        return self.clock_in + self.config.required_work_duration + break_minutes

    def exit_time(self, rule_id: str, break_minutes: int) -> int:
        if rule_id == RULE_A:
            return self.rule_a(break_minutes)
        if rule_id == RULE_B:
            return self.rule_b()
        raise ValueError(f"Unknown rule: {rule_id!r}")

    @staticmethod
    def remaining(rule_end: int, now: int) -> int:
        return rule_end - now

    def is_optimal(self, remaining: int) -> bool:
        tolerance = self.settings.optimal_tolerance_minutes
        return -tolerance <= remaining <= tolerance

    def evaluate(self, rule_id: str, now: int, break_minutes: int) -> RuleResult:
        end = self.exit_time(rule_id, break_minutes)
        remaining = self.remaining(end, now)
        return RuleResult(
            rule_id=rule_id,
            end_time=normalize(end),
            remaining=remaining,
            is_optimal=self.is_optimal(remaining),
        )

    def attended(self, now: int) -> int:
        return max(0, now - self.clock_in)

    def efficiency(self, attended: int, break_minutes: int) -> int:
        required = self.config.required_work_duration
        if required <= 0:
            return 0
        percent = round_half_up(100 * max(0, attended - break_minutes) / required)
        return max(0, min(100, percent))

    def progress(self, now: int) -> float:
        elapsed = now - self.clock_in
        required = self.config.required_work_duration
        if required <= 0:
            return 100.0 if elapsed > 0 else 0.0
        return max(0.0, min(100.0, 100 * elapsed / required))

    def status(self, now: int) -> str:
        elapsed = now - self.clock_in
        progress = self.progress(now)
        if elapsed <= 0 or progress <= 0:
            return STATUS_NOT_STARTED
        if progress >= 100:
            return STATUS_COMPLETED
        if progress >= 75:
            return STATUS_ALMOST_DONE
        if progress >= 50:
            return STATUS_IN_PROGRESS
        return STATUS_STARTED
