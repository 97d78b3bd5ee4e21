"""Exceptions raised by the workday engine."""

from __future__ import annotations


class WorkdayError(ValueError):
    """Base class for engine errors the host is expected to report."""


class ConfigurationIncomplete(WorkdayError):
    def __init__(self, message: str = "Clock-in time is required.") -> None:
        super().__init__(message)


class ReminderNotScheduled(WorkdayError):
    def __init__(self, rule_id: str) -> None:
        super().__init__(f"Cannot schedule a reminder for Rule {rule_id} without an exit time.")
        self.rule_id = rule_id
