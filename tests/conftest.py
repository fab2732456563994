"""Shared fixtures for poolwatch tests."""

import pytest

from poolwatch.threads import ThreadInfo, ThreadState


class FakeInspector:
    """ThreadInspector returning a fixed thread table."""

    def __init__(self, states=()):
        self.threads = [
            ThreadInfo(ident=i + 1, name=f"thread-{i + 1}", state=state)
            for i, state in enumerate(states)
        ]

    def snapshot(self):
        return list(self.threads)


class BrokenInspector:
    """ThreadInspector whose platform offers no enumeration."""

    def snapshot(self):
        raise FileNotFoundError("/proc/self/task")


@pytest.fixture
def busy_inspector():
    """4 runnable threads, 6 blocked or waiting."""
    return FakeInspector(
        [ThreadState.RUNNABLE] * 4
        + [ThreadState.BLOCKED] * 2
        + [ThreadState.WAITING] * 4
    )
