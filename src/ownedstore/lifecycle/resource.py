"""Single owned resource: the capacity-one case of a store.

`open` is create, `write` is update_in_place and `close` is remove, so
use-after-close and double-close are rejected by the same rules that protect
any store entry.

Usage:
    handle = OwnedResource[TextIO]()
    handle.open(open("app.log", "a"))
    handle.write(lambda f: f.write("started\\n"))
    handle.close().close()  # close() hands the file back; the caller closes it
    handle.write(...)       # NotFoundError: resource is closed

    # Scoped: a resource left open is finalized exactly once on exit
    with OwnedResource[TextIO](finalizer=lambda f: f.close()) as handle:
        handle.open(open("app.log", "a"))
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ownedstore.core.errors import NotFoundError, OutOfCapacityError
from ownedstore.core.identity import EntryId
from ownedstore.storage.local import LocalStore
from ownedstore.storage.models import AccessPolicy, StoreConfig

if TYPE_CHECKING:
    from ownedstore.tracing.protocol import EventRecorder


class OwnedResource[T]:
    """Holds at most one resource and owns it until `close()`.

    Args:
        policy: Conflict handling for concurrent users of the resource.
        timeout: Default wait for blocking requests (MULTI_THREADED only).
        recorder: Optional sink for lifecycle events.
        finalizer: Called on a resource still open when the holder is shut down.
    """

    def __init__(
        self,
        policy: AccessPolicy = AccessPolicy.SINGLE_THREADED,
        timeout: float | None = None,
        recorder: EventRecorder | None = None,
        finalizer: Callable[[T], None] | None = None,
    ):
        self._store: LocalStore[T] = LocalStore(
            StoreConfig(policy=policy, capacity=1, timeout=timeout),
            finalizer=finalizer,
            recorder=recorder,
        )
        self._current: EntryId | None = None

    @property
    def is_open(self) -> bool:
        return self._current is not None and self._current in self._store

    def _require_open(self) -> EntryId:
        if self._current is None:
            raise NotFoundError("Resource is not open")
        return self._current

    def open(self, resource: T) -> None:
        """Take ownership of resource.

        Raises:
            OutOfCapacityError: If a resource is already open.
        """
        try:
            self._current = self._store.create(resource)
        except OutOfCapacityError as e:
            raise OutOfCapacityError("Resource is already open", self._current) from e

    def write(self, mutator: Callable[[T], Any], timeout: float | None = None) -> None:
        """Use the resource exclusively.

        Unlike `LocalStore.update_in_place`, the mutator's return value is
        ignored (file `write()` returns a character count, not a new file).
        """

        def _apply(resource: T) -> None:
            mutator(resource)

        self._store.update_in_place(self._require_open(), _apply, timeout)

    def read[R](self, reader: Callable[[T], R], timeout: float | None = None) -> R:
        """Use the resource under shared access and return reader's result."""
        return self._store.read(self._require_open(), reader, timeout)

    def close(self, timeout: float | None = None) -> T:
        """Give up ownership and return the resource.

        Raises:
            NotFoundError: If the resource was never opened or is already closed.
        """
        return self._store.remove(self._require_open(), timeout)

    def shutdown(self) -> None:
        """Release the holder for good, finalizing a resource that is still open.

        Idempotent. Afterwards open, write, read and close raise NotFoundError.
        """
        self._store.close()

    def __enter__(self) -> OwnedResource[T]:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()
