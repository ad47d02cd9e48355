"""Shared pytest fixtures."""

from datetime import datetime, timedelta

import pytest
import structlog

from taskflow.workspace.controller import WorkspaceController


class FakeClock:
    """Manually advanced clock for deterministic timestamps."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any structlog configuration a test (e.g. a CLI run) installed."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def anchor():
    """Topic creation time used across tests."""
    return datetime(2024, 1, 1, 9, 30)


@pytest.fixture
def clock(anchor):
    """Clock frozen at the anchor."""
    return FakeClock(anchor)


@pytest.fixture
def controller(clock):
    """Controller over an empty workspace driven by the fake clock."""
    return WorkspaceController(clock=clock)
