# src/pollwatch/core/timers.py

from __future__ import annotations

from dataclasses import dataclass

from .ports import TimerHandle


@dataclass(slots=True)
class TimerSet:
    """Handles owned by one poller run. Cancelled together on close/restart."""

    delay: TimerHandle | None = None
    timeout: TimerHandle | None = None
    tracking: TimerHandle | None = None

    def cancel(self, name: str) -> None:
        handle = getattr(self, name)
        if handle is None:
            return
        setattr(self, name, None)
        handle.cancel()

    def cancel_all(self) -> None:
        for name in ("delay", "timeout", "tracking"):
            self.cancel(name)
