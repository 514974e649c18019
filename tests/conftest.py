"""Shared test fixtures for the flexidb test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from flexidb import DatabaseOptions, FlexiDB


class ManualTimer:
    """Timer handle that only fires when the test says so."""

    def __init__(self, clock: "ManualClock", delay: float, callback) -> None:
        self.clock = clock
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualClock:
    """Timer factory for deterministic scheduler tests.

    Pass the instance as ``start_timer``; call :meth:`fire_all` to run every
    timer that is still armed.
    """

    def __init__(self) -> None:
        self.timers: list[ManualTimer] = []

    def __call__(self, delay: float, callback) -> ManualTimer:
        timer = ManualTimer(self, delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def armed(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled]

    def fire_all(self) -> int:
        """Fire armed timers (once each).  Return how many fired."""
        due = self.armed
        for timer in due:
            timer.cancelled = True
            timer.callback()
        return len(due)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def options(tmp_path: Path) -> DatabaseOptions:
    """Options pointing the data directory into ``tmp_path``."""
    return DatabaseOptions(data_dir=str(tmp_path / "data"))


@pytest.fixture
def db(options: DatabaseOptions, clock: ManualClock):
    """An initialised database driven by the manual clock."""
    database = FlexiDB(options=options, start_timer=clock)
    database.init()
    yield database
    database.destroy()
