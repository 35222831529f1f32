"""Local in-memory store implementation.

Arena plus indirection table: values live in a slot list, ids map to slots
through `_index`. Slots are recycled, ids are not, so a vacated slot can never
answer to its old id.

Usage:
    store = LocalStore()
    entry = store.create("Write docs")

    with store.borrow(entry) as reader:
        reader.value  # "Write docs"

    store.update_in_place(entry, lambda title: title.upper())
    store.remove(entry)  # "WRITE DOCS"
    store.remove(entry)  # NotFoundError, nothing is released twice

    # Blocking discipline for multi-threaded callers
    store = LocalStore(StoreConfig(policy=AccessPolicy.MULTI_THREADED, timeout=5.0))
"""

from __future__ import annotations

import itertools
import math
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from ownedstore.access.accessors import ExclusiveAccessor, SharedAccessor
from ownedstore.access.state import AccessMode, AccessState
from ownedstore.config.logging_config import get_logger
from ownedstore.core.errors import (
    BorrowTimeoutError,
    ConflictError,
    InvariantViolationError,
    NotFoundError,
    PoisonedError,
    StoreClosedError,
)
from ownedstore.core.identity import EntryId
from ownedstore.core.types import Copy
from ownedstore.storage.allocator import SlotAllocator
from ownedstore.storage.models import AccessPolicy, Entry, StoreConfig
from ownedstore.tracing.models import EventKind, LifecycleEvent

if TYPE_CHECKING:
    from ownedstore.config.settings import StoreSettings
    from ownedstore.tracing.protocol import EventRecorder

log = get_logger(__name__)

_store_tags = itertools.count(1)


class LocalStore[T]:
    """Ownership-safe in-process store.

    Structure:
        _slots[slot] = Entry (or None for a vacated slot)
        _index[serial] = slot

    One lock guards both structures and every entry's access state. User
    callbacks (mutators, readers, checks, finalizers) never run under it.

    Args:
        config: Policy, capacity, default timeout and generation limit.
        finalizer: Called once per entry still live when the store is closed.
        recorder: Optional sink for lifecycle events.
    """

    def __init__(
        self,
        config: StoreConfig | None = None,
        *,
        finalizer: Callable[[T], None] | None = None,
        recorder: EventRecorder | None = None,
    ):
        self._config = config or StoreConfig()
        self._tag = next(_store_tags)
        self._lock = threading.Lock()
        self._allocator = SlotAllocator(
            store=self._tag,
            capacity=self._config.capacity,
            max_generation=self._config.max_generation,
        )
        self._slots: list[Entry[T] | None] = []
        self._index: dict[int, int] = {}
        self._live_accessors = 0
        self._closed = False
        self._finalizer = finalizer
        self._recorder = recorder
        self._pending: list[LifecycleEvent] = []

    @classmethod
    def from_settings(
        cls,
        settings: StoreSettings | None = None,
        *,
        finalizer: Callable[[T], None] | None = None,
        recorder: EventRecorder | None = None,
    ) -> LocalStore[T]:
        """Build a store from environment-backed settings.

        Requires pydantic-settings: pip install ownedstore[config]

        Args:
            settings: Loaded settings; read from OWNEDSTORE_* variables when None.
            finalizer: See class docstring.
            recorder: See class docstring.
        """
        from ownedstore.config.settings import StoreSettings

        settings = settings or StoreSettings()
        return cls(settings.to_config(), finalizer=finalizer, recorder=recorder)

    @property
    def tag(self) -> int:
        """Tag stamped into every id this store issues."""
        return self._tag

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def closed(self) -> bool:
        return self._closed

    def _deliver(self) -> None:
        """Hand queued events to the recorder. Must be called without the lock.

        A failing recorder is logged and never changes store state.
        """
        if self._recorder is None:
            return
        with self._lock:
            events, self._pending = self._pending, []
        for event in events:
            try:
                self._recorder.record(event)
            except Exception:
                log.exception(
                    "Event recorder failed on %s for %s", event.kind.value, event.entry_id
                )

    # Internal helpers. All of them expect self._lock to be held.

    def _emit(self, kind: EventKind, entry_id: EntryId | None, **details: Any) -> None:
        if self._recorder is not None:
            self._pending.append(LifecycleEvent(kind, entry_id, time.time(), details))

    def _ensure_open(self) -> None:
        if self._closed:
            raise StoreClosedError(f"Store {self._tag} is closed")

    def _resolve(self, entry_id: EntryId) -> Entry[T]:
        """Map an id to its live entry through the indirection table."""
        if not isinstance(entry_id, EntryId):
            raise TypeError(f"Expected EntryId, got {type(entry_id).__name__}")
        if self._closed:
            raise StoreClosedError(f"Store {self._tag} is closed", entry_id)

        slot = self._index.get(entry_id.serial) if entry_id.belongs_to(self._tag) else None
        if slot is None:
            if self._allocator.was_issued(entry_id):
                raise NotFoundError(f"Entry {entry_id} was removed", entry_id)
            raise NotFoundError(f"Entry {entry_id} was never issued by this store", entry_id)

        entry = self._slots[slot]
        if entry is None or entry.id != entry_id:
            raise InvariantViolationError(
                f"Index points entry {entry_id} at slot {slot} holding another entry",
                entry_id,
            )
        return entry

    def _await(
        self,
        entry_id: EntryId,
        ready: Callable[[AccessState], bool],
        timeout: float | None,
        *,
        verb: str,
        exclusive: bool,
        allow_poisoned: bool = False,
    ) -> Entry[T]:
        """Resolve entry_id and wait until ready(state) holds, per policy.

        Re-resolves after every wake-up, so a waiter whose entry was removed
        (or whose store was closed) gets NotFoundError instead of a stale entry.
        """
        entry = self._resolve(entry_id)
        if not allow_poisoned and entry.poisoned:
            raise PoisonedError(f"Entry {entry_id} is quarantined", entry_id)
        if ready(entry.state):
            return entry

        if self._config.policy is AccessPolicy.SINGLE_THREADED:
            raise ConflictError(f"Cannot {verb} entry {entry_id}: {entry.state!r}", entry_id)

        if timeout is None:
            timeout = self._config.timeout
        forever = timeout is None or math.isinf(timeout)
        deadline = None if forever else time.monotonic() + timeout
        state = entry.state
        if exclusive:
            state.writer_waiting()
        try:
            while True:
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    raise BorrowTimeoutError(
                        f"Timed out after {timeout}s waiting to {verb} entry {entry_id}",
                        entry_id,
                    )
                state.condition.wait(remaining)
                entry = self._resolve(entry_id)
                if not allow_poisoned and entry.poisoned:
                    raise PoisonedError(f"Entry {entry_id} is quarantined", entry_id)
                if ready(entry.state):
                    return entry
        finally:
            if exclusive:
                state.writer_done_waiting()

    # Creation and removal

    def create(self, value: T) -> EntryId:
        """Take ownership of value and store it under a brand new id.

        Args:
            value: Payload to own. Callers should not keep mutating it afterwards.

        Returns:
            Newly issued EntryId (generation 0).

        Raises:
            OutOfCapacityError: If the configured capacity is reached.
            StoreClosedError: If the store was closed.
        """
        with self._lock:
            self._ensure_open()
            entry_id, slot = self._allocator.allocate()
            entry = Entry(
                id=entry_id,
                value=value,
                slot=slot,
                state=AccessState(threading.Condition(self._lock)),
            )
            if slot == len(self._slots):
                self._slots.append(entry)
            else:
                self._slots[slot] = entry
            self._index[entry_id.serial] = slot
            self._emit(EventKind.CREATED, entry_id, slot=slot)
        self._deliver()
        log.debug("Created entry %s in slot %d", entry_id, slot)
        return entry_id

    def remove(self, entry_id: EntryId, timeout: float | None = None) -> T:
        """Retire an id and hand its value back to the caller.

        Poisoned entries can be removed; that is how quarantine ends without
        revalidation. The finalizer is not called: the caller now owns the value.

        Args:
            entry_id: Entry to remove.
            timeout: Max wait for live accessors to drain (blocking policy only).

        Returns:
            The owned value.

        Raises:
            NotFoundError: If the id was never issued or is already removed.
            ConflictError: If accessors are live (BorrowTimeoutError when waiting ran out).
        """
        with self._lock:
            entry = self._await(
                entry_id,
                AccessState.can_exclude,
                timeout,
                verb="remove",
                exclusive=True,
                allow_poisoned=True,
            )
            del self._index[entry_id.serial]
            self._slots[entry.slot] = None
            self._allocator.deallocate(entry_id, entry.slot)
            entry.state.wake_all()
            self._emit(EventKind.REMOVED, entry_id, slot=entry.slot, poisoned=entry.poisoned)
        self._deliver()
        log.debug("Removed entry %s from slot %d", entry_id, entry.slot)
        return entry.value

    # Accessors

    def _acquire_shared(self, entry_id: EntryId, timeout: float | None) -> SharedAccessor[T]:
        blocking = self._config.policy is AccessPolicy.MULTI_THREADED
        with self._lock:
            entry = self._await(
                entry_id,
                lambda state: state.can_share(honor_waiting_writers=blocking),
                timeout,
                verb="borrow",
                exclusive=False,
            )
            entry.state.acquire_shared()
            self._live_accessors += 1
            self._emit(EventKind.BORROWED, entry_id, readers=entry.state.readers)
            accessor = SharedAccessor(entry)
        self._deliver()
        return accessor

    def _release_shared(self, accessor: SharedAccessor[T]) -> None:
        with self._lock:
            accessor._revoke()
            accessor._entry.state.release_shared()
            self._live_accessors -= 1
            self._emit(EventKind.RELEASED, accessor.id, mode=AccessMode.SHARED.name)
        self._deliver()

    def _acquire_exclusive(self, entry_id: EntryId, timeout: float | None) -> ExclusiveAccessor[T]:
        with self._lock:
            entry = self._await(
                entry_id,
                AccessState.can_exclude,
                timeout,
                verb="borrow_mut",
                exclusive=True,
            )
            entry.state.acquire_exclusive()
            self._live_accessors += 1
            self._emit(EventKind.BORROWED_MUT, entry_id)
            accessor = ExclusiveAccessor(entry)
        self._deliver()
        return accessor

    def _release_exclusive(
        self, accessor: ExclusiveAccessor[T], failure: BaseException | None
    ) -> None:
        entry = accessor._entry
        with self._lock:
            accessor._revoke()
            if failure is not None:
                entry.poisoned = True
            entry.state.release_exclusive()
            self._live_accessors -= 1
            if failure is not None:
                self._emit(EventKind.POISONED, entry.id, error=type(failure).__name__)
            self._emit(EventKind.RELEASED, entry.id, mode=AccessMode.EXCLUSIVE.name)
        self._deliver()
        if failure is not None:
            log.warning(
                "Entry %s quarantined: exclusive scope aborted mid-mutation by %s",
                entry.id,
                type(failure).__name__,
            )

    @contextmanager
    def borrow(
        self, entry_id: EntryId, timeout: float | None = None
    ) -> Iterator[SharedAccessor[T]]:
        """Shared access to one entry for the duration of a `with` block.

        Args:
            entry_id: Entry to read.
            timeout: Max wait for an exclusive holder to release (blocking policy only).
                None uses the store default; `math.inf` waits without limit.

        Yields:
            SharedAccessor revoked when the block exits.

        Raises:
            NotFoundError: If the id was never issued or is removed.
            ConflictError: If an exclusive accessor is live.
            PoisonedError: If the entry is quarantined.
        """
        accessor = self._acquire_shared(entry_id, timeout)
        try:
            yield accessor
        finally:
            self._release_shared(accessor)

    @contextmanager
    def borrow_mut(
        self, entry_id: EntryId, timeout: float | None = None
    ) -> Iterator[ExclusiveAccessor[T]]:
        """Exclusive access to one entry for the duration of a `with` block.

        If the block raises after the value was handed out or replaced, the
        entry is quarantined and the exception propagates.

        Args:
            entry_id: Entry to mutate.
            timeout: Max wait for live accessors to release (blocking policy only).

        Yields:
            ExclusiveAccessor revoked when the block exits.

        Raises:
            NotFoundError: If the id was never issued or is removed.
            ConflictError: If any accessor is live.
            PoisonedError: If the entry is quarantined.
        """
        accessor = self._acquire_exclusive(entry_id, timeout)
        failure: BaseException | None = None
        try:
            yield accessor
        except BaseException as exc:
            if accessor.touched:
                failure = exc
            raise
        finally:
            self._release_exclusive(accessor, failure)

    # Focused operations built on accessors

    def update_in_place(
        self,
        entry_id: EntryId,
        mutator: Callable[[T], T | None],
        timeout: float | None = None,
    ) -> None:
        """Mutate an entry without the caller ever holding the accessor.

        Args:
            entry_id: Entry to mutate.
            mutator: Receives the value; a non-None return replaces it, so
                immutable payloads can be updated too.
            timeout: See `borrow_mut`.
        """
        with self.borrow_mut(entry_id, timeout) as accessor:
            result = mutator(accessor.get())
            if result is not None:
                accessor.set(result)

    def read[R](
        self, entry_id: EntryId, reader: Callable[[T], R], timeout: float | None = None
    ) -> R:
        """Apply reader to an entry under shared access and return its result."""
        with self.borrow(entry_id, timeout) as accessor:
            return reader(accessor.get())

    def get_copy(self, entry_id: EntryId, timeout: float | None = None) -> Copy[T]:
        """Get a deep copy of an entry's value.

        Modifications to the copy never reach the store; write back through
        `update_in_place()` or `borrow_mut()`.
        """
        with self.borrow(entry_id, timeout) as accessor:
            return accessor.snapshot()

    def items_copy(self) -> list[tuple[EntryId, Copy[T]]]:
        """Deep copies of every live entry, in creation order.

        Entries removed while the listing runs are skipped.
        """
        result: list[tuple[EntryId, Copy[T]]] = []
        for entry_id in self.ids():
            try:
                result.append((entry_id, self.get_copy(entry_id)))
            except StoreClosedError:
                raise
            except NotFoundError:
                continue
        return result

    # Introspection

    def ids(self) -> list[EntryId]:
        """Ids of all live entries, in creation order."""
        with self._lock:
            self._ensure_open()
            return [EntryId(store=self._tag, serial=serial) for serial in sorted(self._index)]

    def state_of(self, entry_id: EntryId) -> AccessMode:
        """Current access class of an entry (FREE, SHARED or EXCLUSIVE)."""
        with self._lock:
            return self._resolve(entry_id).state.mode

    def generation_of(self, entry_id: EntryId) -> int:
        """Number of times an entry has been relocated."""
        with self._lock:
            return self._resolve(entry_id).generation

    def is_poisoned(self, entry_id: EntryId) -> bool:
        with self._lock:
            return self._resolve(entry_id).poisoned

    def revalidate(self, entry_id: EntryId, check: Callable[[T], bool] | None = None) -> bool:
        """Lift the quarantine of a poisoned entry.

        Args:
            entry_id: Entry to re-validate.
            check: Predicate over the value. None lifts quarantine unconditionally.

        Returns:
            True if the entry is usable afterwards, False if check rejected it.
        """
        with self._lock:
            entry = self._resolve(entry_id)
            if not entry.poisoned:
                return True
            value = entry.value

        # Quarantine keeps accessors away while check runs; only remove can interfere.
        accepted = True if check is None else bool(check(value))

        with self._lock:
            entry = self._resolve(entry_id)
            if not accepted:
                log.warning("Entry %s failed revalidation and stays quarantined", entry_id)
                return False
            entry.poisoned = False
            entry.state.wake_all()
            self._emit(EventKind.REVALIDATED, entry_id)
        self._deliver()
        log.debug("Entry %s revalidated", entry_id)
        return True

    # Storage reorganization and teardown

    def compact(self) -> int:
        """Pack live entries into the lowest slots and drop vacated ones.

        Ids are untouched; every relocated entry gets its generation bumped.

        Returns:
            Number of relocated entries.

        Raises:
            ConflictError: If any accessor is live anywhere in the store.
            InvariantViolationError: If a generation counter would overflow.
        """
        with self._lock:
            self._ensure_open()
            if self._live_accessors:
                raise ConflictError(f"Cannot compact with {self._live_accessors} live accessors")

            live = [entry for entry in self._slots if entry is not None]
            # Check every bump before moving anything so an overflow leaves storage intact.
            moves = [
                (new_slot, entry, self._allocator.next_generation(entry.id, entry.generation))
                for new_slot, entry in enumerate(live)
                if entry.slot != new_slot
            ]
            for new_slot, entry, generation in moves:
                self._emit(
                    EventKind.RELOCATED,
                    entry.id,
                    from_slot=entry.slot,
                    to_slot=new_slot,
                    generation=generation,
                )
                entry.slot = new_slot
                entry.generation = generation
                self._index[entry.id.serial] = new_slot
            self._slots = live
            self._allocator.reset_slots(len(live))
        self._deliver()
        log.debug("Compacted store %d: relocated %d entries", self._tag, len(moves))
        return len(moves)

    def close(self) -> None:
        """Tear the store down, releasing every live entry exactly once.

        Each remaining value is passed to the finalizer (if any). Finalizer
        failures do not stop the others; they are raised together afterwards.
        Closing an already closed store does nothing.

        Raises:
            ConflictError: If any accessor is still live.
            ExceptionGroup: If one or more finalizers raised.
        """
        with self._lock:
            if self._closed:
                log.debug("Store %d already closed", self._tag)
                return
            if self._live_accessors:
                raise ConflictError(f"Cannot close with {self._live_accessors} live accessors")
            entries = [entry for entry in self._slots if entry is not None]
            self._slots = []
            self._index.clear()
            self._closed = True
            for entry in entries:
                entry.state.wake_all()
            self._emit(EventKind.CLOSED, None, released=len(entries))
        self._deliver()
        log.debug("Closed store %d with %d live entries", self._tag, len(entries))

        if self._finalizer is None:
            return
        failures: list[Exception] = []
        finalized: list[EntryId] = []
        for entry in entries:
            try:
                self._finalizer(entry.value)
            except Exception as exc:
                log.error("Finalizer failed for entry %s: %s", entry.id, exc)
                failures.append(exc)
            else:
                finalized.append(entry.id)
        with self._lock:
            for entry_id in finalized:
                self._emit(EventKind.FINALIZED, entry_id)
        self._deliver()
        if failures:
            raise ExceptionGroup(f"{len(failures)} finalizers failed closing store", failures)

    def __enter__(self) -> LocalStore[T]:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __len__(self) -> int:
        with self._lock:
            return len(self._index)

    def __contains__(self, entry_id: object) -> bool:
        if not isinstance(entry_id, EntryId):
            return False
        with self._lock:
            return (
                not self._closed
                and entry_id.belongs_to(self._tag)
                and entry_id.serial in self._index
            )

    def __repr__(self) -> str:
        state = "closed" if self._closed else f"live={len(self._index)}"
        return (
            f"LocalStore(tag={self._tag}, {state}, slots={self._allocator.slot_count}, "
            f"policy={self._config.policy.name})"
        )
