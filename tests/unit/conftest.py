"""Pytest configuration and fixtures for unit tests."""

import itertools

import pytest

from ascetic_planner.domain.task import SectionId, Task
from ascetic_planner.services.focus_period import WeeklyFocusPeriod
from ascetic_planner.services.task_store import TaskStore
from ascetic_planner.services.trading_gate import TradingGate
from tests.unit.mocks import LOCK_MS, T0, FakeClock, InMemorySnapshotStore, RecordingCelebrator, RecordingNotifier


@pytest.fixture
def clock():
    return FakeClock(T0)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def celebrator():
    return RecordingCelebrator()


@pytest.fixture
def changes():
    """Collections handed to the store's change listener, in order."""
    return []


@pytest.fixture
def store(clock, notifier, celebrator, changes):
    """TaskStore with a 60s focus lock and predictable IDs."""
    counter = itertools.count(1)
    return TaskStore(
        clock=clock,
        notifier=notifier,
        celebrator=celebrator,
        lock_ms=LOCK_MS,
        on_change=changes.append,
        id_factory=lambda: f"id-{next(counter)}",
    )


@pytest.fixture
def gate(store, notifier):
    return TradingGate(store=store, notifier=notifier)


@pytest.fixture
def focus_period(clock, notifier):
    return WeeklyFocusPeriod(clock=clock, notifier=notifier)


@pytest.fixture
def remote():
    return InMemorySnapshotStore()


@pytest.fixture
def make_task():
    """Factory for task records with sensible defaults."""

    def _make(task_id: str = "t1", *, section: SectionId = SectionId.TODAY, **overrides) -> Task:
        data = {
            "id": task_id,
            "title": f"Task {task_id}",
            "section": section,
            "created_at": T0,
            "updated_at": T0,
            "last_title_edit_at": 0,
            "date_added_to_today": T0 if section == SectionId.TODAY else None,
        }
        data.update(overrides)
        return Task(**data)

    return _make
