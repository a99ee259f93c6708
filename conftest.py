"""Pytest configuration — ensures the project root is importable."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent))


class TickingClock:
    """Deterministic clock: a fixed start instant, advanced one minute per reading."""

    def __init__(self, start: datetime, step: timedelta = timedelta(minutes=1)):
        self.start = start
        self.step = step
        self.readings = 0

    def __call__(self) -> datetime:
        value = self.start + self.step * self.readings
        self.readings += 1
        return value


@pytest.fixture
def clock() -> TickingClock:
    """Predictable timestamps; the registry tests never read the wall clock."""
    return TickingClock(datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc))
