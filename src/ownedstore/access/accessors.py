"""Scoped accessors: short-lived capabilities to read or mutate one entry.

Accessors are only handed out by a store's `borrow()` / `borrow_mut()` context
managers and are revoked when that scope ends, on every exit path. Any use of
a revoked accessor raises AccessorReleasedError instead of touching the value.

Usage:
    with store.borrow(task_id) as task:
        print(task.value.title)

    with store.borrow_mut(task_id) as task:
        task.value.done = True
        # or replace the whole value
        task.set(Task(title="renamed"))

    task.value  # AccessorReleasedError: scope has ended
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING

from ownedstore.core.errors import AccessorReleasedError, InvariantViolationError
from ownedstore.core.identity import EntryId
from ownedstore.core.types import Copy

if TYPE_CHECKING:
    from ownedstore.storage.models import Entry


class _Accessor[T]:
    """Common capability bookkeeping for shared and exclusive accessors.

    Captures the entry's generation at grant time; the store never relocates an
    entry with live accessors, so a mismatch is an internal defect.
    """

    __slots__ = ("_entry", "_generation", "_live")

    def __init__(self, entry: Entry[T]):
        self._entry = entry
        self._generation = entry.generation
        self._live = True

    @property
    def id(self) -> EntryId:
        """Id of the entry this accessor grants access to."""
        return self._entry.id

    @property
    def generation(self) -> int:
        """Entry generation captured when the accessor was granted."""
        return self._generation

    @property
    def is_live(self) -> bool:
        """True until the scope that obtained this accessor ends."""
        return self._live

    def _checked(self) -> Entry[T]:
        if not self._live:
            raise AccessorReleasedError(
                f"Accessor for entry {self._entry.id} used after its scope ended",
                self._entry.id,
            )
        if self._entry.generation != self._generation:
            raise InvariantViolationError(
                f"Entry {self._entry.id} relocated under a live accessor "
                f"(generation {self._generation} -> {self._entry.generation})",
                self._entry.id,
            )
        return self._entry

    def _revoke(self) -> None:
        self._live = False

    def get(self) -> T:
        """Return the stored value itself (not a copy).

        The reference is only valid inside the accessor's scope.
        """
        return self._checked().value

    def snapshot(self) -> Copy[T]:
        """Return a deep copy that stays valid after the scope ends."""
        return copy.deepcopy(self._checked().value)

    def __repr__(self) -> str:
        state = "live" if self._live else "released"
        return f"{type(self).__name__}(id={self._entry.id}, {state})"


class SharedAccessor[T](_Accessor[T]):
    """Read capability; any number may be live for one entry at once.

    Python cannot stop callers from mutating a mutable value reached through
    `get()`; mutations belong in `borrow_mut()` / `update_in_place()`.
    """

    __slots__ = ()

    @property
    def value(self) -> T:
        return self.get()


class ExclusiveAccessor[T](_Accessor[T]):
    """Read-write capability; at most one may be live for one entry.

    Tracks whether the value was handed out or replaced, so the store can
    quarantine the entry when the scope exits through an exception mid-mutation.
    """

    __slots__ = ("_touched",)

    def __init__(self, entry: Entry[T]):
        super().__init__(entry)
        self._touched = False

    @property
    def touched(self) -> bool:
        """True once the value was handed out or replaced in this scope."""
        return self._touched

    def get(self) -> T:
        entry = self._checked()
        self._touched = True
        return entry.value

    def set(self, value: T) -> None:
        """Replace the stored value. The previous value is dropped."""
        entry = self._checked()
        self._touched = True
        entry.value = value

    @property
    def value(self) -> T:
        return self.get()

    @value.setter
    def value(self, value: T) -> None:
        self.set(value)
