"""Tracing infrastructure for recording store lifecycle transitions.

Usage:
    from ownedstore.tracing import EventKind, InMemoryEventLog

    log = InMemoryEventLog()
    store = LocalStore(recorder=log)
    entry = store.create("value")
    store.remove(entry)
    [e.kind for e in log.for_entry(entry)]  # [CREATED, REMOVED]
"""

from ownedstore.tracing.memory import InMemoryEventLog
from ownedstore.tracing.models import EventKind, LifecycleEvent
from ownedstore.tracing.protocol import EventRecorder

__all__ = [
    "EventRecorder",
    "EventKind",
    "LifecycleEvent",
    "InMemoryEventLog",
]
