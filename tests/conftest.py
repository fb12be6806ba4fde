from datetime import datetime, timedelta, timezone

import pytest

from src.todo import TodoLifecycleManager, TodoRepository


class FakeClock:
    """Manually advanced clock for lifecycle tests."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def repo(tmp_path):
    return TodoRepository(db_path=tmp_path / "todo.db")


@pytest.fixture
def manager(repo, clock):
    return TodoLifecycleManager(repo, clock=clock)
