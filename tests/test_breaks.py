import json

from workday_calculator.breaks import BreakState, BreakTracker
from workday_calculator.db import MemoryStore, break_sessions_key

DAY = "2024-05-15"


def make_tracker(store=None) -> BreakTracker:
    return BreakTracker(store or MemoryStore(), DAY)


class TestTransitions:
    def test_start_then_end(self):
        tracker = make_tracker()
        assert tracker.state is BreakState.IDLE
        assert tracker.start_break(600) is True
        assert tracker.state is BreakState.ON_BREAK
        assert tracker.end_break(630) is True
        assert tracker.state is BreakState.IDLE
        assert [s.duration_minutes for s in tracker.sessions] == [30]

    def test_second_start_is_a_no_op(self):
        tracker = make_tracker()
        tracker.start_break(600)
        before = tracker.sessions
        assert tracker.start_break(610) is False
        assert tracker.sessions == before
        assert sum(1 for s in tracker.sessions if s.is_open) == 1

    def test_end_while_idle_is_a_no_op(self):
        tracker = make_tracker()
        assert tracker.end_break(700) is False
        assert tracker.sessions == []

    def test_negative_duration_is_clamped(self):
        tracker = make_tracker()
        tracker.start_break(600)
        tracker.end_break(590)
        assert tracker.sessions[0].duration_minutes == 0


class TestTotals:
    def test_closed_total_ignores_query_time(self):
        tracker = make_tracker()
        tracker.start_break(600)
        tracker.end_break(630)
        for now in (630, 700, 1200):
            assert tracker.total_break_minutes(now) == 30

    def test_open_session_counts_up_to_now(self):
        tracker = make_tracker()
        tracker.start_break(600)
        tracker.end_break(615)
        tracker.start_break(720)
        assert tracker.total_break_minutes(740) == 35
        assert tracker.current_break_minutes(740) == 20

    def test_idle_has_no_current_break(self):
        assert make_tracker().current_break_minutes(800) == 0


class TestPersistence:
    def test_every_transition_is_written(self):
        store = MemoryStore()
        tracker = make_tracker(store)
        tracker.start_break(600)
        stored = json.loads(store.get(break_sessions_key(DAY)))
        assert stored == [{"startTime": "10:00", "endTime": None, "durationMinutes": 0}]
        tracker.end_break(630)
        stored = json.loads(store.get(break_sessions_key(DAY)))
        assert stored == [{"startTime": "10:00", "endTime": "10:30", "durationMinutes": 30}]

    def test_reload_restores_open_break(self):
        store = MemoryStore()
        make_tracker(store).start_break(600)
        reloaded = make_tracker(store)
        assert reloaded.is_on_break
        assert reloaded.total_break_minutes(625) == 25

    def test_new_day_starts_empty(self):
        store = MemoryStore()
        tracker = make_tracker(store)
        tracker.start_break(600)
        tracker.end_break(630)
        tracker.switch_day("2024-05-16")
        assert tracker.sessions == []
        assert tracker.total_break_minutes(700) == 0
        tracker.switch_day(DAY)
        assert tracker.total_break_minutes(700) == 30

    def test_malformed_storage_falls_back_to_empty(self):
        store = MemoryStore({break_sessions_key(DAY): "{not json"})
        assert make_tracker(store).sessions == []

    def test_bad_records_are_skipped(self):
        records = [
            {"startTime": "10:00", "endTime": "10:15", "durationMinutes": 15},
            {"startTime": "garbage"},
            "nope",
            {"startTime": "11:00", "endTime": None},
            {"startTime": "12:00", "endTime": None},
            {"startTime": "13:00", "endTime": "13:3O", "durationMinutes": 30},
        ]
        store = MemoryStore({break_sessions_key(DAY): json.dumps(records)})
        tracker = make_tracker(store)
        sessions = tracker.sessions
        assert [s.start_time for s in sessions] == [600, 660]
        assert sum(1 for s in sessions if s.is_open) == 1
        assert tracker.total_break_minutes(17 * 60) == 15 + (17 * 60 - 660)

    def test_stored_durations_are_clamped(self):
        records = [
            {"startTime": "10:00", "endTime": "10:15", "durationMinutes": -20},
            {"startTime": "11:00", "endTime": "11:10", "durationMinutes": True},
        ]
        store = MemoryStore({break_sessions_key(DAY): json.dumps(records)})
        assert [s.duration_minutes for s in make_tracker(store).sessions] == [0, 10]

    def test_reload_sees_changes_from_another_tracker(self):
        store = MemoryStore()
        watcher = make_tracker(store)
        make_tracker(store).start_break(720)
        assert not watcher.is_on_break
        watcher.reload()
        assert watcher.is_on_break
        assert watcher.total_break_minutes(750) == 30
