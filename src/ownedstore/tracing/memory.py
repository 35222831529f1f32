"""Bounded in-memory event log."""

from __future__ import annotations

import threading
from collections import deque

from ownedstore.core.identity import EntryId
from ownedstore.tracing.models import EventKind, LifecycleEvent


class InMemoryEventLog:
    """Keeps the most recent lifecycle events in memory.

    Args:
        max_events: Oldest events are evicted past this count (None = unbounded).
    """

    def __init__(self, max_events: int | None = 10_000):
        self._events: deque[LifecycleEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def record(self, event: LifecycleEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> list[LifecycleEvent]:
        """Copy of the retained events, oldest first."""
        with self._lock:
            return list(self._events)

    def of_kind(self, kind: EventKind) -> list[LifecycleEvent]:
        return [e for e in self.events if e.kind == kind]

    def for_entry(self, entry_id: EntryId) -> list[LifecycleEvent]:
        return [e for e in self.events if e.entry_id == entry_id]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
