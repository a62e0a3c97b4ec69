# src/pollwatch/core/notifier.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from .models import Channel

logger = logging.getLogger(__name__)

P = TypeVar("P")

Handler = Callable[..., object]


@dataclass(eq=False, slots=True)
class _Subscription:
    channel: Channel
    handler: Handler


class Notifier(Generic[P]):
    """
    Minimal synchronous publish/subscribe over the fixed lifecycle channels.

    - handlers run in registration order
    - each publish dispatches over a snapshot of the handler list, so handlers may
      subscribe/unsubscribe (or clear) while being called
    - a failing handler is logged and skipped; dispatch goes on
    """

    def __init__(self) -> None:
        self._handlers: dict[Channel, list[_Subscription]] = {}

    def subscribe(self, channel: Channel | str, handler: Handler) -> Callable[[], None]:
        if not callable(handler):
            raise TypeError(f"handler must be callable, got {type(handler).__name__}")

        sub = _Subscription(channel=Channel.parse(channel), handler=handler)
        self._handlers.setdefault(sub.channel, []).append(sub)

        def unsubscribe() -> None:
            subs = self._handlers.get(sub.channel)
            if not subs:
                return
            # Identity match: the same function may be registered more than once.
            for i, existing in enumerate(subs):
                if existing is sub:
                    del subs[i]
                    break

        return unsubscribe

    def publish(self, channel: Channel | str, *args: object) -> None:
        ch = Channel.parse(channel)
        for sub in tuple(self._handlers.get(ch, ())):
            try:
                sub.handler(*args)
            except Exception:
                logger.exception("Handler %r failed on channel=%s", sub.handler, ch.value)

    def clear(self) -> None:
        self._handlers = {}

    def listener_count(self, channel: Channel | str | None = None) -> int:
        if channel is None:
            return sum(len(subs) for subs in self._handlers.values())
        return len(self._handlers.get(Channel.parse(channel), ()))
