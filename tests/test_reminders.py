import pytest

from workday_calculator.config import EngineSettings
from workday_calculator.errors import ReminderNotScheduled
from workday_calculator.reminders import REMINDER_TITLE, ReminderScheduler


@pytest.fixture
def fired():
    return []


@pytest.fixture
def scheduler(fired):
    return ReminderScheduler(alert=lambda title, message: fired.append((title, message)))


class TestSchedule:
    def test_fires_lead_minutes_before_exit(self, scheduler):
        entry = scheduler.schedule("A", 17 * 60 + 45)
        assert entry.fire_at_minute == 17 * 60 + 30

    def test_replaces_previous_for_same_rule(self, scheduler):
        scheduler.schedule("A", 1000)
        scheduler.schedule("A", 1100)
        scheduler.schedule("B", 1050)
        assert sorted((e.rule_id, e.fire_at_minute) for e in scheduler.pending) == [
            ("A", 1085),
            ("B", 1035),
        ]

    def test_without_exit_time(self, scheduler):
        with pytest.raises(ReminderNotScheduled):
            scheduler.schedule("B", None)
        assert scheduler.pending == []

    def test_exit_past_midnight_is_normalized(self, scheduler):
        assert scheduler.schedule("A", 1440 + 10).fire_at_minute == 1435

    def test_lead_from_settings(self, fired):
        scheduler = ReminderScheduler(settings=EngineSettings.from_minutes(reminder_lead_minutes=5))
        assert scheduler.schedule("A", 600).fire_at_minute == 595


class TestTick:
    def test_fires_once_then_forgets(self, scheduler, fired):
        scheduler.schedule("A", 1065)
        assert scheduler.tick(1049) == []
        assert [e.rule_id for e in scheduler.tick(1050)] == ["A"]
        assert fired == [(REMINDER_TITLE, "15 minutes until Rule A exit time!")]
        assert scheduler.tick(1050) == []
        assert scheduler.pending == []

    def test_missed_window_never_fires(self, scheduler, fired):
        scheduler.schedule("B", 1080)
        scheduler.tick(1000)
        scheduler.tick(1070)
        assert fired == []
        assert len(scheduler.pending) == 1

    def test_both_rules_can_fire_together(self, scheduler, fired):
        scheduler.schedule("A", 1080)
        scheduler.schedule("B", 1080)
        assert {e.rule_id for e in scheduler.tick(1065)} == {"A", "B"}
        assert len(fired) == 2

    def test_no_callback(self):
        scheduler = ReminderScheduler()
        scheduler.schedule("A", 600)
        assert len(scheduler.tick(585)) == 1
