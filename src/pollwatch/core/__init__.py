"""
Polling core.

Components:
- models.py: value types (TrackingTime, PollingOptions, TaskContext) and enums
- ports.py: Protocols for the task and the event loop slice we schedule on
- notifier.py: synchronous publish/subscribe over lifecycle channels
- cancellation.py: per-run cancellation source and its read-only signal
- timers.py: the delay/timeout/tracking handles of one run
- poller.py: the state machine tying it all together
"""
