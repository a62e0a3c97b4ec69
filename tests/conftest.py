# tests/conftest.py

from __future__ import annotations

import pytest

from .fakes import FakeLoop, Recorder


@pytest.fixture()
def loop() -> FakeLoop:
    """
    Virtual clock for the poller timers.

    Timer-heavy scenarios (30s timeouts, one-second ticks) then run instantly
    and in a deterministic order.
    """
    return FakeLoop()


@pytest.fixture()
def recorder() -> Recorder:
    return Recorder()
