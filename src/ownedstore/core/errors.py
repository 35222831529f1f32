"""Error taxonomy surfaced by stores and accessors.

Every illegal request against a store (borrowing a removed id, removing twice,
exclusive access while shared) raises one of these instead of misbehaving.
Callers map NotFoundError and ConflictError to domain responses; PoisonedError
and InvariantViolationError must only ever surface as internal errors.

Usage:
    try:
        with store.borrow_mut(task_id) as task:
            task.value.done = True
    except NotFoundError:
        print("task not found")
    except ConflictError:
        print("retry later")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ownedstore.core.identity import EntryId


class RegistryError(Exception):
    """Base class for all store errors.

    Args:
        message: Human readable description.
        entry_id: Id the failed request was about, if any.
    """

    def __init__(self, message: str, entry_id: EntryId | None = None):
        super().__init__(message)
        self.entry_id = entry_id


class NotFoundError(RegistryError):
    """Raised when an id was never issued by the store or has been removed."""

    pass


class StoreClosedError(NotFoundError):
    """Raised for any request made after the store was torn down."""

    pass


class ConflictError(RegistryError):
    """Raised when the requested access class clashes with live accessors."""

    pass


class BorrowTimeoutError(ConflictError):
    """Raised when a blocking request gave up waiting for its access class."""

    pass


class AccessorReleasedError(ConflictError):
    """Raised when an accessor is used after the scope that obtained it ended."""

    pass


class OutOfCapacityError(RegistryError):
    """Raised when creating an entry would exceed the configured capacity."""

    pass


class PoisonedError(RegistryError):
    """Raised when an entry is quarantined after an aborted mutation.

    The entry stays quarantined until `revalidate()` clears it or it is removed.
    """

    pass


class InvariantViolationError(RegistryError):
    """Internal defect, such as generation counter overflow.

    Never caused by caller misuse; treat as fatal.
    """

    pass
