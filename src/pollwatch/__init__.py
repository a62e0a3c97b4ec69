"""
pollwatch: poll an async task on a fixed cadence until it succeeds or times out.

    from pollwatch import Channel, polling

    poller = polling(check, delay=3.0, timeout=30.0)
    poller.subscribe(Channel.SUCCESS, on_success)
    poller.start()
"""

from .core.cancellation import CancellationSignal, CancellationSource
from .core.models import Channel, PollerState, PollingOptions, TaskContext, TrackingTime
from .core.notifier import Notifier
from .core.poller import Poller, polling

__all__ = [
    "CancellationSignal",
    "CancellationSource",
    "Channel",
    "Notifier",
    "Poller",
    "PollerState",
    "PollingOptions",
    "TaskContext",
    "TrackingTime",
    "polling",
]
