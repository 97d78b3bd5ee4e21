import json

import pytest

from workday_calculator.config import UiPreferences, load_preferences, save_preferences
from workday_calculator.db import (
    MemoryStore,
    SqliteStore,
    break_sessions_key,
    database_connection,
    load_json,
    save_json,
)


@pytest.fixture(params=["sqlite", "memory"])
def any_store(request, tmp_path):
    if request.param == "sqlite":
        return SqliteStore(tmp_path / "workday.sqlite3")
    return MemoryStore()


class TestKeyValueStore:
    def test_get_set_delete(self, any_store):
        assert any_store.get("settings") is None
        any_store.set("settings", "{}")
        any_store.set("settings", '{"inTime": "09:00"}')
        assert any_store.get("settings") == '{"inTime": "09:00"}'
        any_store.delete("settings")
        assert any_store.get("settings") is None

    def test_delete_missing_key(self, any_store):
        any_store.delete("nothing-here")

    def test_break_days_are_separate_keys(self, any_store):
        any_store.set(break_sessions_key("2024-05-14"), "[1]")
        any_store.set(break_sessions_key("2024-05-15"), "[2]")
        assert break_sessions_key("2024-05-15") == "break-sessions-2024-05-15"
        assert any_store.get(break_sessions_key("2024-05-14")) == "[1]"
        assert any_store.get(break_sessions_key("2024-05-15")) == "[2]"


class TestSqlite:
    def test_survives_reopen(self, tmp_path):
        path = tmp_path / "workday.sqlite3"
        SqliteStore(path).set("theme", "light")
        assert SqliteStore(path).get("theme") == "light"

    def test_schema_created(self, tmp_path):
        with database_connection(tmp_path / "fresh.sqlite3") as conn:
            tables = {
                row["name"]
                for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
            }
        assert "kv_store" in tables


class TestJson:
    def test_round_trip(self):
        store = MemoryStore()
        save_json(store, "log", {"2024-05-15": {"efficiency": 90}})
        assert load_json(store, "log", {}) == {"2024-05-15": {"efficiency": 90}}

    def test_missing_and_corrupt(self):
        store = MemoryStore({"log": "{oops"})
        assert load_json(store, "log", {}) == {}
        assert load_json(store, "settings", None) is None


class TestPreferences:
    def test_defaults(self):
        prefs = load_preferences(MemoryStore())
        assert prefs == UiPreferences()
        assert prefs.show_24_hour and prefs.exit_reminders and not prefs.overtime_alerts

    def test_round_trip(self):
        store = MemoryStore()
        save_preferences(store, UiPreferences(theme="light", show_24_hour=False, show_seconds=True))
        assert store.get("show24Hour") == "false"
        assert json.loads(store.get("showSeconds")) is True
        prefs = load_preferences(store)
        assert prefs.theme == "light"
        assert not prefs.show_24_hour
        assert prefs.show_seconds
