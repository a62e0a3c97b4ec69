# src/pollwatch/core/cancellation.py

from __future__ import annotations

"""
Cooperative cancellation.

A CancellationSource is created by the Poller for every run and aborted exactly
when the run closes. Tasks only ever see its read-only CancellationSignal: they
may check it, wait on it or register a listener, but cannot abort it.
"""

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)

Listener = Callable[[], object]


class CancellationSignal:
    def __init__(self) -> None:
        self._aborted = False
        self._listeners: list[Listener] = []
        self._event: asyncio.Event | None = None

    @property
    def aborted(self) -> bool:
        return self._aborted

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """
        Call `listener` once when the signal aborts.

        If the signal is already aborted the listener runs immediately.
        Returns a function removing the listener.
        """
        if self._aborted:
            self._call(listener)
            return lambda: None

        self._listeners.append(listener)

        def remove() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return remove

    async def wait(self) -> None:
        if self._aborted:
            return
        if self._event is None:
            self._event = asyncio.Event()
        await self._event.wait()

    def _fire(self) -> None:
        if self._aborted:
            return
        self._aborted = True

        if self._event is not None:
            self._event.set()

        listeners, self._listeners = self._listeners, []
        for listener in listeners:
            self._call(listener)

    @staticmethod
    def _call(listener: Listener) -> None:
        try:
            listener()
        except Exception:
            logger.exception("Cancellation listener %r failed", listener)


class CancellationSource:
    def __init__(self) -> None:
        self._signal = CancellationSignal()

    @property
    def signal(self) -> CancellationSignal:
        return self._signal

    @property
    def aborted(self) -> bool:
        return self._signal.aborted

    def abort(self) -> None:
        # Idempotent: listeners fire on the first call only.
        self._signal._fire()
