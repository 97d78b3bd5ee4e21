"""Workday calculator: ties configuration, breaks, rules, log and reminders together."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from pydantic import ValidationError

from .attendance import load_log, save_log, upsert
from .breaks import BreakTracker
from .config import THEME_KEY, EngineSettings, SettingsRecord
from .db import LOG_KEY, SETTINGS_KEY, KeyValueStore, load_json, save_json
from .errors import ConfigurationIncomplete
from .models import (
    RULE_A,
    RULE_B,
    BreakSession,
    CalculationResult,
    DayLogEntry,
    LiveStatus,
    ReminderEntry,
    WorkdayConfig,
)
from .policy import PolicyEngine
from .reminders import AlertCallback, ReminderScheduler
from .timemath import clock_minutes, normalize

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class WorkdayCalculator:
    """Single-user engine over an injected key-value store.

    The calculator owns no timer. The host is expected to call
    :meth:`tick_fast` about once a second and :meth:`tick_slow` about once
    a minute, never re-entrantly.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        clock: Clock = datetime.now,
        alert: Optional[AlertCallback] = None,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        self.store = store
        self.settings = settings or EngineSettings()
        self._clock = clock
        self.reminders = ReminderScheduler(alert=alert, settings=self.settings)
        self._tracker: Optional[BreakTracker] = None

    def now(self) -> datetime:
        return self._clock()

    # Configuration -----------------------------------------------------

    def load_config(self) -> WorkdayConfig:
        raw = load_json(self.store, SETTINGS_KEY, {})
        if not isinstance(raw, dict):
            logger.warning("Stored settings are not a JSON object; using defaults.")
            raw = {}
        try:
            record = SettingsRecord.model_validate(raw)
        except ValidationError:
            logger.warning("Stored settings failed validation; using defaults.", exc_info=True)
            record = SettingsRecord()
        return record.to_config()

    def save_config(self, config: WorkdayConfig) -> None:
        save_json(self.store, SETTINGS_KEY, SettingsRecord.from_config(config).model_dump())
        logger.debug("Settings saved: %s", config)

    def set_clock_in(self, minutes: Optional[int]) -> WorkdayConfig:
        config = self.load_config()
        config.clock_in = None if minutes is None else normalize(minutes)
        self.save_config(config)
        return config

    def set_clock_in_now(self, now: Optional[datetime] = None) -> WorkdayConfig:
        return self.set_clock_in(clock_minutes(now or self.now()))

    # Breaks --------------------------------------------------------------

    def break_tracker(self, now: Optional[datetime] = None) -> BreakTracker:
        day = (now or self.now()).date().isoformat()
        if self._tracker is None:
            self._tracker = BreakTracker(self.store, day)
        elif self._tracker.day != day:
            self._tracker.switch_day(day)
        else:
            self._tracker.reload()
        return self._tracker

    def start_break(self, now: Optional[datetime] = None) -> bool:
        moment = now or self.now()
        return self.break_tracker(moment).start_break(clock_minutes(moment))

    def end_break(self, now: Optional[datetime] = None) -> bool:
        moment = now or self.now()
        return self.break_tracker(moment).end_break(clock_minutes(moment))

    def break_sessions(self, now: Optional[datetime] = None) -> list[BreakSession]:
        return self.break_tracker(now).sessions

    # Calculation ---------------------------------------------------------

    def calculate_results(self, now: Optional[datetime] = None) -> CalculationResult:
        """Recompute both rules and upsert today's log entry.

        Raises :class:`ConfigurationIncomplete` before touching the log when
        no clock-in time has been set.
        """
        moment = now or self.now()
        config = self.load_config()
        if not config.is_configured:
            logger.warning("Calculation skipped: clock-in time is not set.")
            raise ConfigurationIncomplete()

        minute = clock_minutes(moment)
        tracker = self.break_tracker(moment)
        break_minutes = tracker.total_break_minutes(minute)
        engine = PolicyEngine(config, self.settings)

        rule_a = engine.evaluate(RULE_A, minute, break_minutes)
        rule_b = engine.evaluate(RULE_B, minute, break_minutes)
        attended = engine.attended(minute)
        efficiency = engine.efficiency(attended, break_minutes)
        real_exit = normalize(engine.real_exit_time(break_minutes))
        recommended = normalize(min(engine.rule_a(break_minutes), engine.rule_b()))

        entry = DayLogEntry(
            date=moment.date().isoformat(),
            clock_in=engine.clock_in,
            required_work_duration=config.required_work_duration,
            actual_break_duration=break_minutes,
            attended_duration=attended,
            rule_a_exit=rule_a.end_time,
            rule_b_exit=rule_b.end_time,
            real_exit_time=real_exit,
            efficiency_percent=efficiency,
            break_sessions=tracker.sessions,
        )
        save_log(self.store, upsert(load_log(self.store), entry))
        logger.debug("Logged %s: A=%s B=%s", entry.date, rule_a, rule_b)

        return CalculationResult(
            config=config,
            rule_a=rule_a,
            rule_b=rule_b,
            real_exit_time=real_exit,
            attended_minutes=attended,
            worked_minutes=max(0, attended - break_minutes),
            break_minutes=break_minutes,
            efficiency_percent=efficiency,
            recommended_exit=recommended,
            log_entry=entry,
        )

    def live_status(self, now: Optional[datetime] = None) -> LiveStatus:
        moment = now or self.now()
        config = self.load_config()
        minute = clock_minutes(moment)
        tracker = self.break_tracker(moment)
        progress: Optional[float] = None
        status: Optional[str] = None
        if config.is_configured:
            engine = PolicyEngine(config, self.settings)
            progress = engine.progress(minute)
            status = engine.status(minute)
        return LiveStatus(
            progress_percent=progress,
            status=status,
            on_break=tracker.is_on_break,
            break_elapsed=tracker.current_break_minutes(minute),
        )

    # Reminders -----------------------------------------------------------

    def schedule_reminder(self, rule_id: str, now: Optional[datetime] = None) -> ReminderEntry:
        moment = now or self.now()
        config = self.load_config()
        exit_time: Optional[int] = None
        if config.is_configured:
            minute = clock_minutes(moment)
            break_minutes = self.break_tracker(moment).total_break_minutes(minute)
            exit_time = PolicyEngine(config, self.settings).exit_time(rule_id, break_minutes)
        return self.reminders.schedule(rule_id, exit_time)

    # Host ticks ----------------------------------------------------------

    def tick_fast(self, now: Optional[datetime] = None) -> LiveStatus:
        moment = now or self.now()
        status = self.live_status(moment)
        status.fired_reminders = self.reminders.tick(clock_minutes(moment))
        return status

    def tick_slow(self, now: Optional[datetime] = None) -> Optional[CalculationResult]:
        moment = now or self.now()
        if not self.load_config().is_configured:
            logger.debug("Periodic recalculation skipped; no clock-in time.")
            return None
        return self.calculate_results(moment)

    # Data management -----------------------------------------------------

    def export_data(self, now: Optional[datetime] = None) -> dict[str, Any]:
        moment = now or self.now()
        settings = load_json(self.store, SETTINGS_KEY, {})
        logs = load_json(self.store, LOG_KEY, {})
        return {
            "settings": settings if isinstance(settings, dict) else {},
            "logs": logs if isinstance(logs, dict) else {},
            "todayBreaks": [session.to_record() for session in self.break_sessions(moment)],
            "exportDate": moment.isoformat(),
        }

    def clear_history(self) -> None:
        self.store.delete(LOG_KEY)
        logger.info("Attendance history cleared.")

    def reset_all(self) -> None:
        for key in (SETTINGS_KEY, LOG_KEY, THEME_KEY):
            self.store.delete(key)
        self.reminders = ReminderScheduler(alert=self.reminders.alert, settings=self.settings)
        logger.info("Settings, history and theme reset.")
