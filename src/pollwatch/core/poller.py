# src/pollwatch/core/poller.py

from __future__ import annotations

"""
Poller.

Repeatedly invokes a task until it reports success, the overall timeout
elapses or the caller closes it. Three timers drive a run:
- delay: schedules the next attempt after the previous one settled
- timeout: fires once, `timeout` seconds after start
- tracking: one-second ticks published on the `second` channel

Everything runs on one event loop. There are no locks; instead every callback
and every resumption after the task re-checks that its run is still the
current, active one before doing anything visible.
"""

import asyncio
import functools
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, TypeVar

from .cancellation import CancellationSource
from .models import (
    DEFAULT_DELAY_SECONDS,
    DEFAULT_TIMEOUT_SECONDS,
    Channel,
    PollerState,
    PollingOptions,
    TaskContext,
    TrackingTime,
)
from .notifier import Handler, Notifier
from .ports import PollingTask, TimerLoop
from .timers import TimerSet

logger = logging.getLogger(__name__)

P = TypeVar("P")

TICK_SECONDS = 1.0


@dataclass(eq=False, slots=True)
class _Run:
    """State owned by a single start() .. close() cycle."""

    loop: TimerLoop
    source: CancellationSource = field(default_factory=CancellationSource)
    timers: TimerSet = field(default_factory=TimerSet)
    attempts: int = 0


class Poller(Generic[P]):
    """
    Polls `task` every `delay` seconds until it calls done(), `timeout` seconds
    pass or close() is called.

    Listener API: subscribe(channel, handler) returns an unsubscribe function
    (the `on` of event-emitter style APIs); remove_all_listeners() drops every
    subscription (a.k.a. removeAllEventListeners, Notifier.clear()).
    """

    def __init__(
            self,
            task: PollingTask[P],
            *,
            delay: float = DEFAULT_DELAY_SECONDS,
            timeout: float = DEFAULT_TIMEOUT_SECONDS,
            loop: TimerLoop | None = None,
    ) -> None:
        self._options: PollingOptions[P] = PollingOptions(task=task, delay=delay, timeout=timeout)
        self._timeout_in_seconds = self._options.timeout_in_seconds
        self._loop = loop

        self._notifier: Notifier[P] = Notifier()
        self._state = PollerState.INACTIVE
        self._run: _Run | None = None
        self._tracking = TrackingTime(passed=0, remaining=self._timeout_in_seconds)

        # Strong refs to in-flight attempts (asyncio only keeps weak ones).
        self._in_flight: set[asyncio.Task[Any]] = set()

    # ---- public surface ----

    @property
    def options(self) -> PollingOptions[P]:
        return self._options

    @property
    def notifier(self) -> Notifier[P]:
        return self._notifier

    @property
    def state(self) -> PollerState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is PollerState.ACTIVE

    @property
    def tracking_time(self) -> TrackingTime:
        return self._tracking

    def subscribe(self, channel: Channel | str, handler: Handler) -> Callable[[], None]:
        return self._notifier.subscribe(channel, handler)

    def remove_all_listeners(self) -> None:
        self._notifier.clear()

    def start(self) -> None:
        """
        Begin a new run (restarting cleanly if one is active).

        Publishes `start`, arms the timeout and tracking timers and invokes the
        task for the first attempt, all before returning. A coroutine returned by
        the task is awaited in a background asyncio task.
        Raises RuntimeError if no loop was injected and none is running.
        """
        loop = self._loop if self._loop is not None else asyncio.get_running_loop()

        previous = self._run
        if previous is not None and self._state is PollerState.ACTIVE:
            logger.info("Restarting active poller (attempts so far=%d)", previous.attempts)
            previous.source.abort()
            previous.timers.cancel_all()

        run = _Run(loop=loop)
        self._run = run
        self._state = PollerState.ACTIVE
        self._tracking = TrackingTime(passed=0, remaining=self._timeout_in_seconds)

        logger.info(
            "Polling started (delay=%ss timeout=%ss)",
            self._options.delay,
            self._options.timeout,
        )
        self._notifier.publish(Channel.START, self._tracking)

        # A start handler may already have closed or restarted us.
        if not self._is_current(run):
            return

        run.timers.timeout = loop.call_later(self._options.timeout, self._handle_timeout, run)
        run.timers.tracking = loop.call_later(TICK_SECONDS, self._tick, run)
        self._attempt(run)

    def close(self) -> None:
        if self._state is not PollerState.ACTIVE:
            return

        self._state = PollerState.INACTIVE
        run = self._run
        if run is not None:
            run.source.abort()
            run.timers.cancel_all()

        logger.info("Polling closed (attempts=%d)", run.attempts if run else 0)
        self._notifier.publish(Channel.CLOSE)

    def destroy(self) -> None:
        self.close()
        self._notifier.clear()

    # ---- run internals ----

    def _is_current(self, run: _Run) -> bool:
        return self._state is PollerState.ACTIVE and self._run is run

    def _on_delay_elapsed(self, run: _Run) -> None:
        run.timers.delay = None
        self._attempt(run)

    def _attempt(self, run: _Run) -> None:
        # close() may have happened between scheduling and now.
        if not self._is_current(run):
            return

        run.attempts += 1
        ctx: TaskContext[P] = TaskContext(
            done=functools.partial(self._handle_done, run),
            signal=run.source.signal,
        )

        try:
            result = self._options.task(ctx)
        except Exception as exc:
            self._handle_error(run, exc)
            self._schedule_next(run)
            return

        if not inspect.isawaitable(result):
            self._schedule_next(run)
            return

        pending = run.loop.create_task(self._settle(run, result))
        self._in_flight.add(pending)
        pending.add_done_callback(self._in_flight.discard)

    async def _settle(self, run: _Run, result: Awaitable[Any]) -> None:
        try:
            await result
        except Exception as exc:
            self._handle_error(run, exc)

        self._schedule_next(run)

    def _schedule_next(self, run: _Run) -> None:
        if self._is_current(run):
            run.timers.delay = run.loop.call_later(self._options.delay, self._on_delay_elapsed, run)

    def _handle_done(self, run: _Run, payload: P) -> None:
        if not self._is_current(run):
            logger.debug("Ignoring done() from a finished run")
            return

        logger.info("Polling succeeded after %d attempt(s)", run.attempts)
        self._notifier.publish(Channel.SUCCESS, payload)

        # A success handler may have restarted us; only close the run that succeeded.
        if self._is_current(run):
            self.close()

    def _handle_error(self, run: _Run, exc: Exception) -> None:
        if not self._is_current(run):
            logger.debug("Dropping failure from a finished run: %r", exc)
            return

        logger.warning("Polling attempt %d failed", run.attempts, exc_info=exc)
        self._notifier.publish(Channel.ERROR, exc)

    def _handle_timeout(self, run: _Run) -> None:
        run.timers.timeout = None
        if not self._is_current(run):
            return

        logger.info("Polling timed out after %ss (attempts=%d)", self._options.timeout, run.attempts)
        self._notifier.publish(Channel.TIMEOUT)

        if self._is_current(run):
            self.close()

    def _tick(self, run: _Run) -> None:
        run.timers.tracking = None
        if not self._is_current(run):
            return

        passed = self._tracking.passed + 1
        if passed > self._timeout_in_seconds:
            return

        self._tracking = TrackingTime(passed=passed, remaining=self._timeout_in_seconds - passed)
        self._notifier.publish(Channel.SECOND, self._tracking)

        # Handlers run synchronously above; re-check before re-arming.
        if self._is_current(run):
            run.timers.tracking = run.loop.call_later(TICK_SECONDS, self._tick, run)


def polling(
        task: PollingTask[P],
        *,
        delay: float = DEFAULT_DELAY_SECONDS,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        loop: TimerLoop | None = None,
) -> Poller[P]:
    """Convenience constructor mirroring Poller(...)."""
    return Poller(task, delay=delay, timeout=timeout, loop=loop)
