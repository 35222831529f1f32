"""Store protocol for swappable backends.

The store is the sole owner of every value it holds. Callers keep ids, never
references, and reach values through scoped accessors.

Usage:
    store = LocalStore()
    task_id = store.create(Task("Write docs"))
    with store.borrow(task_id) as task:
        print(task.value.title)
    task = store.remove(task_id)  # ownership moves back to the caller
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Protocol

from ownedstore.core.identity import EntryId
from ownedstore.core.types import Copy

if TYPE_CHECKING:
    from ownedstore.access import AccessMode, ExclusiveAccessor, SharedAccessor


class Store[T](Protocol):
    """Abstract ownership-safe store interface. Implementations hold the data."""

    def create(self, value: T) -> EntryId:
        """Take ownership of value and return its new, never-reused id."""
        ...

    def borrow(
        self, entry_id: EntryId, timeout: float | None = None
    ) -> AbstractContextManager[SharedAccessor[T]]:
        """Scoped shared access; many may be live at once."""
        ...

    def borrow_mut(
        self, entry_id: EntryId, timeout: float | None = None
    ) -> AbstractContextManager[ExclusiveAccessor[T]]:
        """Scoped exclusive access; only granted with no other accessor live."""
        ...

    def remove(self, entry_id: EntryId, timeout: float | None = None) -> T:
        """Retire the id for ever and hand the value back to the caller."""
        ...

    def update_in_place(
        self,
        entry_id: EntryId,
        mutator: Callable[[T], T | None],
        timeout: float | None = None,
    ) -> None:
        """Apply mutator under exclusive access; a non-None result replaces the value."""
        ...

    def read[R](
        self, entry_id: EntryId, reader: Callable[[T], R], timeout: float | None = None
    ) -> R:
        """Apply reader under shared access and return its result."""
        ...

    def get_copy(self, entry_id: EntryId, timeout: float | None = None) -> Copy[T]:
        """Deep copy of the value taken under shared access."""
        ...

    def ids(self) -> list[EntryId]:
        """Ids of all live entries, in creation order."""
        ...

    def state_of(self, entry_id: EntryId) -> AccessMode:
        """Current access class of an entry."""
        ...

    def is_poisoned(self, entry_id: EntryId) -> bool:
        """Check if the entry is quarantined after an aborted mutation."""
        ...

    def revalidate(self, entry_id: EntryId, check: Callable[[T], bool] | None = None) -> bool:
        """Lift quarantine if check accepts the value. Returns True when usable."""
        ...

    def close(self) -> None:
        """Release every live entry exactly once and reject further requests."""
        ...

    def __len__(self) -> int: ...

    def __contains__(self, entry_id: object) -> bool: ...
