"""One-shot reminders shortly before each rule's exit time."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .config import EngineSettings
from .errors import ReminderNotScheduled
from .models import ReminderEntry
from .timemath import format_24, normalize

logger = logging.getLogger(__name__)

AlertCallback = Callable[[str, str], None]

REMINDER_TITLE = "Work Reminder"


class ReminderScheduler:
    """Holds at most one pending reminder per rule.

    ``tick`` must be called at least once a minute; a reminder whose window
    passes between two ticks is dropped without firing.
    """

    def __init__(
        self,
        alert: Optional[AlertCallback] = None,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        self.alert = alert
        self.settings = settings or EngineSettings()
        self._pending: dict[str, ReminderEntry] = {}

    @property
    def pending(self) -> list[ReminderEntry]:
        return list(self._pending.values())

    def schedule(self, rule_id: str, exit_time: Optional[int]) -> ReminderEntry:
        if exit_time is None:
            raise ReminderNotScheduled(rule_id)
        entry = ReminderEntry(
            rule_id=rule_id,
            fire_at_minute=normalize(exit_time - self.settings.reminder_lead_minutes),
        )
        self._pending[rule_id] = entry
        logger.info("Reminder for Rule %s set for %s.", rule_id, format_24(entry.fire_at_minute))
        return entry

    def tick(self, now: float) -> list[ReminderEntry]:
        fired = [
            entry for entry in self._pending.values() if abs(now - entry.fire_at_minute) < 1
        ]
        for entry in fired:
            del self._pending[entry.rule_id]
            self._fire(entry)
        return fired

    def _fire(self, entry: ReminderEntry) -> None:
        lead = self.settings.reminder_lead_minutes
        message = f"{lead} minutes until Rule {entry.rule_id} exit time!"
        logger.info("Reminder fired: %s", message)
        if self.alert is not None:
            self.alert(REMINDER_TITLE, message)
