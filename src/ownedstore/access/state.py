"""Per-entry shared/exclusive access state machine.

    FREE --borrow--> SHARED(1) --borrow--> SHARED(n+1)
    SHARED(n) --release--> SHARED(n-1) ... SHARED(0) == FREE
    FREE --borrow_mut--> EXCLUSIVE --release--> FREE

Any other transition is a conflict. The state object does no locking of its
own: every method must be called with the owning store's lock held, and the
condition variable is bound to that same lock so waiters release it while
blocked.
"""

from __future__ import annotations

import threading
from enum import Enum, auto

from ownedstore.core.errors import InvariantViolationError


class AccessMode(Enum):
    """Live accessor class for one entry."""

    FREE = auto()
    SHARED = auto()
    EXCLUSIVE = auto()


class AccessState:
    """Reader count, writer flag and waiting-writer count for one entry.

    Writers waiting to acquire block new readers (writer preference) so a
    stream of shared accessors cannot starve an exclusive request.

    Args:
        condition: Condition bound to the store lock, used for blocking waits.
    """

    __slots__ = ("_readers", "_writer", "_writers_waiting", "_condition")

    def __init__(self, condition: threading.Condition):
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0
        self._condition = condition

    @property
    def readers(self) -> int:
        """Number of live shared accessors."""
        return self._readers

    @property
    def write_locked(self) -> bool:
        """True while an exclusive accessor is live."""
        return self._writer

    @property
    def write_pending(self) -> int:
        """Number of threads waiting for exclusive access."""
        return self._writers_waiting

    @property
    def mode(self) -> AccessMode:
        if self._writer:
            return AccessMode.EXCLUSIVE
        if self._readers:
            return AccessMode.SHARED
        return AccessMode.FREE

    @property
    def is_free(self) -> bool:
        return not self._writer and self._readers == 0

    @property
    def condition(self) -> threading.Condition:
        return self._condition

    def can_share(self, *, honor_waiting_writers: bool = False) -> bool:
        """Check if a shared accessor may be granted now.

        Args:
            honor_waiting_writers: Refuse while writers are queued (blocking policy).
        """
        if self._writer:
            return False
        return not (honor_waiting_writers and self._writers_waiting)

    def can_exclude(self) -> bool:
        """Check if an exclusive accessor may be granted now."""
        return self.is_free

    def acquire_shared(self) -> None:
        if not self.can_share():
            raise InvariantViolationError("shared access granted while exclusively held")
        self._readers += 1

    def acquire_exclusive(self) -> None:
        if not self.can_exclude():
            raise InvariantViolationError("exclusive access granted while held")
        self._writer = True

    def release_shared(self) -> None:
        if self._readers == 0:
            raise InvariantViolationError(
                "Cannot release shared access: no readers holding the entry"
            )
        self._readers -= 1
        if self._readers == 0:
            self._condition.notify_all()

    def release_exclusive(self) -> None:
        if not self._writer:
            raise InvariantViolationError(
                "Cannot release exclusive access: no writer holding the entry"
            )
        self._writer = False
        self._condition.notify_all()

    def writer_waiting(self) -> None:
        self._writers_waiting += 1

    def writer_done_waiting(self) -> None:
        self._writers_waiting -= 1
        if self._writers_waiting == 0:
            self._condition.notify_all()

    def wake_all(self) -> None:
        """Wake every waiter, e.g. after the entry was removed or poisoned."""
        self._condition.notify_all()

    def __repr__(self) -> str:
        if self._writer:
            return f"AccessState(exclusive, pending_writers={self._writers_waiting})"
        if self._readers:
            return f"AccessState(shared={self._readers}, pending_writers={self._writers_waiting})"
        return f"AccessState(free, pending_writers={self._writers_waiting})"
