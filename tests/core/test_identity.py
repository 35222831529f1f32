"""Tests for entry identity and slot allocation.

Critical Invariants:
- Ids are never reissued, even when slots are
- Retired ids stay recognizable as issued
- Store boundaries are enforced
- Capacity and generation limits are reported as typed errors
"""

import pytest

from ownedstore import EntryId, InvariantViolationError, OutOfCapacityError
from ownedstore.storage.allocator import SlotAllocator


@pytest.fixture
def allocator():
    """Create a SlotAllocator for store 1."""
    return SlotAllocator(store=1)


@pytest.fixture
def allocator_store2():
    """Create a SlotAllocator for store 2."""
    return SlotAllocator(store=2)


def test_entry_id_equality_and_hash():
    assert EntryId(store=1, serial=3) == EntryId(store=1, serial=3)
    assert EntryId(store=1, serial=3) != EntryId(store=2, serial=3)
    assert len({EntryId(1, 3), EntryId(1, 3), EntryId(1, 4)}) == 2
    assert str(EntryId(1, 3)) == "1:3"


def test_entry_id_is_immutable():
    entry = EntryId(store=1, serial=1)
    with pytest.raises(AttributeError):
        entry.serial = 2  # type: ignore[misc]


# Id reuse tests - critical for safety


def test_slot_reused_but_id_is_new(allocator):
    """CRITICAL: A recycled slot must come with a brand new id.

    Why: Reusing the id would let a stale handle alias the new occupant.
    """
    first, slot = allocator.allocate()
    allocator.deallocate(first, slot)

    second, reused_slot = allocator.allocate()
    assert reused_slot == slot, "Should reuse the vacated slot"
    assert second != first, "INVARIANT: ids are never reissued"
    assert second.serial == first.serial + 1


def test_serials_are_monotonic(allocator):
    serials = [allocator.allocate()[0].serial for _ in range(5)]
    assert serials == [1, 2, 3, 4, 5]


def test_was_issued_covers_live_and_retired_ids(allocator):
    entry, slot = allocator.allocate()
    assert allocator.was_issued(entry)
    allocator.deallocate(entry, slot)
    assert allocator.was_issued(entry), "Retired ids are still known as issued"
    assert not allocator.was_issued(EntryId(store=1, serial=99))
    assert not allocator.was_issued(EntryId(store=1, serial=0))


# Store boundary tests


def test_cannot_retire_id_from_other_store(allocator, allocator_store2):
    """CRITICAL: An id from store N cannot be retired by store M."""
    foreign, slot = allocator_store2.allocate()

    with pytest.raises(InvariantViolationError, match="Cannot retire entry from store"):
        allocator.deallocate(foreign, slot)


def test_foreign_id_was_never_issued(allocator, allocator_store2):
    foreign, _ = allocator_store2.allocate()
    assert not allocator.was_issued(foreign)


# Limits


def test_capacity_limit():
    allocator = SlotAllocator(store=1, capacity=2)
    a, slot_a = allocator.allocate()
    allocator.allocate()

    with pytest.raises(OutOfCapacityError):
        allocator.allocate()

    allocator.deallocate(a, slot_a)
    allocator.allocate()
    assert allocator.live_count == 2


def test_generation_overflow_is_fatal():
    allocator = SlotAllocator(store=1, max_generation=2)
    entry, _ = allocator.allocate()

    assert allocator.next_generation(entry, 0) == 1
    assert allocator.next_generation(entry, 1) == 2
    with pytest.raises(InvariantViolationError, match="overflow"):
        allocator.next_generation(entry, 2)


def test_reset_slots_requires_dense_packing(allocator):
    entries = [allocator.allocate() for _ in range(3)]
    allocator.deallocate(*entries[0])
    assert allocator.free_count == 1

    allocator.reset_slots(2)
    assert allocator.free_count == 0
    assert allocator.slot_count == 2

    with pytest.raises(InvariantViolationError):
        allocator.reset_slots(5)
