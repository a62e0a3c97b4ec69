# src/pollwatch/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) the Poller depends on.

The Poller only needs a tiny slice of an asyncio event loop. Depending on a
Protocol instead of asyncio.AbstractEventLoop keeps it swappable, which is what
lets the tests drive timers on a virtual clock.
"""

import asyncio
from typing import Any, Awaitable, Callable, Coroutine, Protocol, TypeVar

from .models import TaskContext

P_contra = TypeVar("P_contra", contravariant=True)


class PollingTask(Protocol[P_contra]):
    """User-supplied work performed once per attempt (sync or async)."""
    def __call__(self, ctx: TaskContext[P_contra], /) -> Awaitable[None] | None: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class TimerLoop(Protocol):
    """
    The subset of asyncio.AbstractEventLoop used for scheduling.

    A running asyncio loop satisfies it as-is.
    """

    def call_later(self, delay: float, callback: Callable[..., object], *args: Any) -> TimerHandle: ...

    def create_task(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]: ...
