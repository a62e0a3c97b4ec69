# src/pollwatch/core/models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar

if TYPE_CHECKING:
    from .cancellation import CancellationSignal

P = TypeVar("P")

DEFAULT_DELAY_SECONDS = 3.0
DEFAULT_TIMEOUT_SECONDS = 30.0


class PollerState(StrEnum):
    INACTIVE = "inactive"
    ACTIVE = "active"


class Channel(StrEnum):
    """
    Lifecycle channels a Poller publishes on.

    Handler signatures:
    - start(TrackingTime), second(TrackingTime)
    - success(payload), error(exc)
    - timeout(), close()
    """

    START = "start"
    SECOND = "second"
    SUCCESS = "success"
    ERROR = "error"
    TIMEOUT = "timeout"
    CLOSE = "close"

    @classmethod
    def parse(cls, raw: Channel | str) -> Channel:
        try:
            return cls(raw)
        except ValueError:
            known = ", ".join(c.value for c in cls)
            raise ValueError(f"Unknown channel {raw!r} (expected one of: {known})") from None


@dataclass(frozen=True, slots=True)
class TrackingTime:
    passed: int
    remaining: int | float


@dataclass(frozen=True, slots=True)
class TaskContext(Generic[P]):
    """
    What a single task invocation gets to see.

    - done(payload): report success; ignored once the run has ended
    - signal: read-only cancellation signal of the current run
    """

    done: Callable[[P], None]
    signal: CancellationSignal


@dataclass(frozen=True, slots=True)
class PollingOptions(Generic[P]):
    task: Callable[[TaskContext[P]], Any]
    delay: float = DEFAULT_DELAY_SECONDS
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if not callable(self.task):
            raise TypeError(f"task must be callable, got {type(self.task).__name__}")
        for name in ("delay", "timeout"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ValueError(f"{name} must be a positive number of seconds, got {value!r}")

    @property
    def timeout_in_seconds(self) -> int | float:
        t = float(self.timeout)
        return int(t) if t.is_integer() else t
