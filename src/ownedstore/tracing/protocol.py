"""Protocols for lifecycle tracing.

These protocols define the interface for event sinks, allowing different
implementations (in-memory, log shipping, metrics).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ownedstore.tracing.models import LifecycleEvent


@runtime_checkable
class EventRecorder(Protocol):
    """Protocol for receiving store lifecycle events.

    Usage:
        log = InMemoryEventLog(max_events=1000)
        store = LocalStore(recorder=log)
        store.create("x")
        log.of_kind(EventKind.CREATED)

    Thread Safety:
        Stores call `record` from whichever thread performed the transition,
        after releasing the store lock. Exceptions raised by `record` are
        logged and do not affect the store. Implementations must be
        thread-safe.
    """

    def record(self, event: LifecycleEvent) -> None:
        """Receive one lifecycle event.

        Args:
            event: The transition that just happened.
        """
        ...
