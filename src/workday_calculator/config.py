"""Configuration models and helpers for the workday calculator."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

from .db import KeyValueStore
from .models import WorkdayConfig


@dataclass(slots=True)
class EngineSettings:
    """Fixed policy constants and the tick cadence expected from the host."""

    optimal_tolerance: timedelta = timedelta(minutes=30)
    reminder_lead: timedelta = timedelta(minutes=15)
    fast_tick: timedelta = timedelta(seconds=1)
    slow_tick: timedelta = timedelta(seconds=60)

    @property
    def optimal_tolerance_minutes(self) -> int:
        return int(self.optimal_tolerance.total_seconds() // 60)

    @property
    def reminder_lead_minutes(self) -> int:
        return int(self.reminder_lead.total_seconds() // 60)

    @classmethod
    def from_minutes(
        cls,
        optimal_tolerance_minutes: float = 30.0,
        reminder_lead_minutes: float = 15.0,
        fast_tick_seconds: float = 1.0,
        slow_tick_seconds: float = 60.0,
    ) -> "EngineSettings":
        return cls(
            optimal_tolerance=timedelta(minutes=optimal_tolerance_minutes),
            reminder_lead=timedelta(minutes=reminder_lead_minutes),
            fast_tick=timedelta(seconds=fast_tick_seconds),
            slow_tick=timedelta(seconds=slow_tick_seconds),
        )


_NUMERIC_DEFAULTS = {
    "workH": "8",
    "workM": "15",
    "stdBreakH": "0",
    "stdBreakM": "45",
    "presenceH": "9",
    "presenceM": "0",
}


class SettingsRecord(BaseModel):
    """Persisted shape of the ``settings`` document; every field is a string."""

    inTime: str = ""
    workH: str = _NUMERIC_DEFAULTS["workH"]
    workM: str = _NUMERIC_DEFAULTS["workM"]
    stdBreakH: str = _NUMERIC_DEFAULTS["stdBreakH"]
    stdBreakM: str = _NUMERIC_DEFAULTS["stdBreakM"]
    presenceH: str = _NUMERIC_DEFAULTS["presenceH"]
    presenceM: str = _NUMERIC_DEFAULTS["presenceM"]

    model_config = ConfigDict(extra="ignore")

    @field_validator("inTime", mode="before")
    @classmethod
    def _clock_as_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator(*_NUMERIC_DEFAULTS, mode="before")
    @classmethod
    def _blank_means_default(cls, value: Any, info: ValidationInfo) -> str:
        if value is None or value == "":
            return _NUMERIC_DEFAULTS[info.field_name]
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    def to_config(self) -> WorkdayConfig:
        return WorkdayConfig.from_record(self.model_dump())

    @classmethod
    def from_config(cls, config: WorkdayConfig) -> "SettingsRecord":
        return cls(**config.to_record())


THEME_KEY = "theme"

_PREFERENCE_KEYS = {
    "show_24_hour": "show24Hour",
    "show_seconds": "showSeconds",
    "break_reminders": "breakReminders",
    "exit_reminders": "exitReminders",
    "overtime_alerts": "overtimeAlerts",
}


@dataclass(slots=True)
class UiPreferences:
    """Display flags; the engine never reads these, only the host does."""

    theme: str = "dark"
    show_24_hour: bool = True
    show_seconds: bool = False
    break_reminders: bool = True
    exit_reminders: bool = True
    overtime_alerts: bool = False

    @classmethod
    def from_values(cls, values: dict[str, Optional[str]]) -> "UiPreferences":
        defaults = cls()
        flags: dict[str, Any] = {}
        for attr, key in _PREFERENCE_KEYS.items():
            raw = values.get(key)
            flags[attr] = getattr(defaults, attr) if raw is None else raw.strip().lower() == "true"
        theme = values.get(THEME_KEY) or defaults.theme
        return cls(theme=theme, **flags)

    def to_values(self) -> dict[str, str]:
        values = {
            key: "true" if getattr(self, attr) else "false"
            for attr, key in _PREFERENCE_KEYS.items()
        }
        values[THEME_KEY] = self.theme
        return values

    @staticmethod
    def storage_keys() -> tuple[str, ...]:
        return (THEME_KEY, *_PREFERENCE_KEYS.values())


def load_preferences(store: KeyValueStore) -> UiPreferences:
    return UiPreferences.from_values({key: store.get(key) for key in UiPreferences.storage_keys()})


def save_preferences(store: KeyValueStore, preferences: UiPreferences) -> None:
    for key, value in preferences.to_values().items():
        store.set(key, value)
