from datetime import datetime

import pytest

from workday_calculator.calculator import WorkdayCalculator
from workday_calculator.db import MemoryStore
from workday_calculator.models import WorkdayConfig


class FakeClock:
    """Callable clock the tests move by hand."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def set(self, hour: int, minute: int, second: int = 0) -> datetime:
        self.current = self.current.replace(hour=hour, minute=minute, second=second)
        return self.current


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def clock() -> FakeClock:
    # A Wednesday.
    return FakeClock(datetime(2024, 5, 15, 9, 0))


@pytest.fixture
def alerts() -> list:
    return []


@pytest.fixture
def calculator(store, clock, alerts) -> WorkdayCalculator:
    return WorkdayCalculator(store, clock=clock, alert=lambda title, msg: alerts.append((title, msg)))


@pytest.fixture
def configured(calculator) -> WorkdayCalculator:
    calculator.save_config(
        WorkdayConfig(
            clock_in=9 * 60,
            required_work_duration=8 * 60 + 15,
            standard_break_duration=45,
            required_presence_duration=9 * 60,
        )
    )
    return calculator
