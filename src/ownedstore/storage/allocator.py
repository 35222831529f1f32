"""Entry id and slot allocation service.

SlotAllocator is a stateful service that manages id issuance and slot reuse.
Ids and slots are deliberately decoupled: slots are recycled through a free
list, ids never are.
"""

from __future__ import annotations

from ownedstore.core.errors import InvariantViolationError, OutOfCapacityError
from ownedstore.core.identity import EntryId
from ownedstore.storage.models import DEFAULT_MAX_GENERATION


class SlotAllocator:
    """Issues monotonic entry ids and recycles storage slots.

    Maintains a free list of vacated slot indices so storage stays dense, while
    the serial counter only ever moves forward. A reclaimed slot therefore
    never answers to the id of its previous occupant.

    Args:
        store: Tag of the owning store, stamped into every issued id.
        capacity: Max live entries (None for unlimited).
        max_generation: Highest generation a relocated entry may reach.
    """

    def __init__(
        self,
        store: int = 0,
        capacity: int | None = None,
        max_generation: int = DEFAULT_MAX_GENERATION,
    ):
        self._store = store
        self._capacity = capacity
        self._max_generation = max_generation
        self._next_serial = 1
        self._slot_count = 0
        self._free_list: list[int] = []
        self._live = 0

    @property
    def live_count(self) -> int:
        """Number of issued ids not yet retired."""
        return self._live

    @property
    def slot_count(self) -> int:
        """Number of slots ever handed out (occupied plus free)."""
        return self._slot_count

    @property
    def free_count(self) -> int:
        """Number of vacated slots waiting for reuse."""
        return len(self._free_list)

    @property
    def next_serial(self) -> int:
        return self._next_serial

    def allocate(self) -> tuple[EntryId, int]:
        """Issue a fresh id and pick a slot for it.

        Prioritizes reusing vacated slots from the free list before growing
        storage. The id is always new.

        Returns:
            (entry_id, slot) pair.

        Raises:
            OutOfCapacityError: If the configured capacity is already in use.
        """
        if self._capacity is not None and self._live >= self._capacity:
            raise OutOfCapacityError(f"Store at capacity ({self._capacity} live entries)")

        entry_id = EntryId(store=self._store, serial=self._next_serial)
        self._next_serial += 1

        if self._free_list:
            slot = self._free_list.pop()
        else:
            slot = self._slot_count
            self._slot_count += 1
        self._live += 1
        return entry_id, slot

    def deallocate(self, entry_id: EntryId, slot: int) -> None:
        """Retire an id and return its slot to the free list.

        Args:
            entry_id: Id being retired. Its serial is never issued again.
            slot: Slot the entry occupied.

        Raises:
            InvariantViolationError: If the id came from a different store.
        """
        if not entry_id.belongs_to(self._store):
            raise InvariantViolationError(
                f"Cannot retire entry from store {entry_id.store} on store {self._store}",
                entry_id,
            )
        self._free_list.append(slot)
        self._live -= 1

    def was_issued(self, entry_id: EntryId) -> bool:
        """Check if this allocator ever handed out the given id.

        Args:
            entry_id: Id to check.

        Returns:
            True for live and retired ids of this store, False otherwise.
        """
        return entry_id.belongs_to(self._store) and 0 < entry_id.serial < self._next_serial

    def next_generation(self, entry_id: EntryId, generation: int) -> int:
        """Return the generation an entry gets after one more relocation.

        Raises:
            InvariantViolationError: If the counter would pass max_generation.
        """
        if generation >= self._max_generation:
            raise InvariantViolationError(
                f"Generation counter overflow for entry {entry_id} "
                f"(limit {self._max_generation})",
                entry_id,
            )
        return generation + 1

    def reset_slots(self, occupied: int) -> None:
        """Forget vacated slots after the store packed entries into [0, occupied).

        Args:
            occupied: Number of slots now in use, all contiguous from zero.
        """
        if occupied != self._live:
            raise InvariantViolationError(
                f"Compaction left {occupied} occupied slots for {self._live} live entries"
            )
        self._free_list.clear()
        self._slot_count = occupied
