"""Break session tracking for a single calendar day."""

from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from typing import Optional

from .db import KeyValueStore, break_sessions_key, load_json, save_json
from .models import BreakSession
from .timemath import format_24

logger = logging.getLogger(__name__)


class BreakState(str, Enum):
    IDLE = "idle"
    ON_BREAK = "on_break"


class BreakTracker:
    """Records break sessions for one day and persists them on every change.

    Only one session may be open at a time. Starting a break while one is
    running, or ending a break while idle, is ignored rather than treated as
    an error; both calls report whether anything changed.
    """

    def __init__(self, store: KeyValueStore, day: str) -> None:
        self._store = store
        self.day = day
        self._sessions = self._load(day)

    @property
    def sessions(self) -> list[BreakSession]:
        return [replace(session) for session in self._sessions]

    @property
    def open_session(self) -> Optional[BreakSession]:
        for session in self._sessions:
            if session.is_open:
                return session
        return None

    @property
    def state(self) -> BreakState:
        return BreakState.ON_BREAK if self.open_session else BreakState.IDLE

    @property
    def is_on_break(self) -> bool:
        return self.state is BreakState.ON_BREAK

    def switch_day(self, day: str) -> None:
        """Point the tracker at another date; its sessions start from storage."""
        if day == self.day:
            return
        logger.debug("Break tracker rolling over from %s to %s.", self.day, day)
        self.day = day
        self._sessions = self._load(day)

    def reload(self) -> None:
        """Re-read the day's sessions; another process may have changed them."""
        self._sessions = self._load(self.day)

    def start_break(self, now: int) -> bool:
        if self.is_on_break:
            logger.debug("Ignoring start_break at %s; a break is already running.", format_24(now))
            return False
        self._sessions.append(BreakSession(start_time=now))
        self._persist()
        logger.debug("Break started at %s.", format_24(now))
        return True

    def end_break(self, now: int) -> bool:
        current = self.open_session
        if current is None:
            logger.debug("Ignoring end_break at %s; no break is running.", format_24(now))
            return False
        current.end_time = now
        current.duration_minutes = max(0, now - current.start_time)
        self._persist()
        logger.debug(
            "Break ended at %s after %d minutes.", format_24(now), current.duration_minutes
        )
        return True

    def total_break_minutes(self, now: int) -> int:
        return sum(session.elapsed(now) for session in self._sessions)

    def current_break_minutes(self, now: int) -> int:
        current = self.open_session
        return current.elapsed(now) if current else 0

    def _persist(self) -> None:
        save_json(
            self._store,
            break_sessions_key(self.day),
            [session.to_record() for session in self._sessions],
        )

    def _load(self, day: str) -> list[BreakSession]:
        records = load_json(self._store, break_sessions_key(day), [])
        if not isinstance(records, list):
            logger.warning("Break sessions for %s are not a list; starting empty.", day)
            return []
        sessions: list[BreakSession] = []
        for record in records:
            if not isinstance(record, dict):
                continue
            try:
                session = BreakSession.from_record(record)
            except ValueError:
                logger.warning("Skipping malformed break session for %s: %r", day, record)
                continue
            if session.is_open and any(existing.is_open for existing in sessions):
                logger.warning("Dropping extra open break session for %s.", day)
                continue
            sessions.append(session)
        return sessions
