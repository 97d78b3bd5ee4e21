"""Per-day attendance log and the analytics built on it."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Mapping

from .db import LOG_KEY, KeyValueStore, load_json, save_json
from .models import DayLogEntry

logger = logging.getLogger(__name__)

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

DayLogs = dict[str, DayLogEntry]


def load_log(store: KeyValueStore) -> DayLogs:
    """Read the ``log`` document; unreadable entries are dropped individually."""
    raw = load_json(store, LOG_KEY, {})
    if not isinstance(raw, dict):
        logger.warning("Attendance log is not a JSON object; treating it as empty.")
        return {}
    logs: DayLogs = {}
    for key, record in raw.items():
        if not isinstance(record, dict):
            continue
        try:
            entry = DayLogEntry.from_record({**record, "date": key})
        except (TypeError, ValueError):
            logger.warning("Skipping malformed log entry for %s.", key)
            continue
        logs[entry.date] = entry
    return logs


def save_log(store: KeyValueStore, logs: Mapping[str, DayLogEntry]) -> None:
    save_json(store, LOG_KEY, {day: entry.to_record() for day, entry in logs.items()})


def upsert(logs: Mapping[str, DayLogEntry], entry: DayLogEntry) -> DayLogs:
    """Return a copy of ``logs`` with ``entry`` replacing whatever its date held."""
    updated = dict(logs)
    updated[entry.date] = entry
    return updated


def week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


def weekly_breakdown(
    logs: Mapping[str, DayLogEntry], start: date
) -> list[tuple[str, date, float]]:
    rows = []
    for offset, label in enumerate(WEEKDAY_LABELS):
        day = start + timedelta(days=offset)
        entry = logs.get(day.isoformat())
        rows.append((label, day, entry.attended_hours if entry else 0.0))
    return rows


def weekly_total(logs: Mapping[str, DayLogEntry], start: date) -> float:
    """Attended hours over the seven days beginning at ``start``."""
    return sum(hours for _, _, hours in weekly_breakdown(logs, start))


def average_hours(logs: Mapping[str, DayLogEntry]) -> float:
    if not logs:
        return 0.0
    return sum(entry.attended_hours for entry in logs.values()) / len(logs)


def average_efficiency(logs: Mapping[str, DayLogEntry]) -> float:
    if not logs:
        return 0.0
    return sum(entry.efficiency_percent for entry in logs.values()) / len(logs)


def most_recent(logs: Mapping[str, DayLogEntry], n: int = 10) -> list[DayLogEntry]:
    ordered = sorted(logs.values(), key=lambda entry: entry.date, reverse=True)
    return ordered[: max(0, n)]
