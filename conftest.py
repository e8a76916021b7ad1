from datetime import datetime, timedelta

import pytest

from config import settings
from library import Library
from utils.ui_helpers import OUTPUT_MODE_ENV


class FakeClock:
    """Controllable stand-in for datetime.now."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 2, 10, 30))


@pytest.fixture
def lib(clock):
    # No simulated latency in tests
    return Library(delay=0, clock=clock)


@pytest.fixture(autouse=True)
def plain_output(monkeypatch):
    # --output sets an env var; keep it from leaking between tests
    monkeypatch.delenv(OUTPUT_MODE_ENV, raising=False)
    monkeypatch.setattr(settings, "operation_delay", 0)
