"""Property tests for the store's ownership discipline.

Critical Invariants:
- A removed id never succeeds again on any operation
- Live accessors per id are {one exclusive} or {zero or more shared}
- Ids are unique across the store's lifetime, whatever slots are reused
"""

import random
import threading
from contextlib import ExitStack

from hypothesis import given, settings
from hypothesis import strategies as st

from ownedstore import (
    AccessMode,
    AccessPolicy,
    ConflictError,
    LocalStore,
    NotFoundError,
    StoreConfig,
)

OPS = ("create", "borrow", "borrow_mut", "remove", "update", "compact")


@st.composite
def op_sequence(draw):
    """Random operation sequences addressing ids by creation order."""
    return draw(
        st.lists(
            st.tuples(st.sampled_from(OPS), st.integers(min_value=0, max_value=15)),
            max_size=60,
        )
    )


@given(ops=op_sequence())
def test_store_matches_model(ops):
    """PROPERTY: The store behaves like a dict whose keys are never reused."""
    store = LocalStore()
    issued = []
    model = {}

    for op, pick in ops:
        if op == "create":
            entry = store.create(len(issued))
            assert entry not in issued, "INVARIANT: ids are never reissued"
            issued.append(entry)
            model[entry] = len(issued) - 1
            continue
        if op == "compact":
            store.compact()
            continue
        if not issued:
            continue

        entry = issued[pick % len(issued)]
        try:
            if op == "borrow":
                with store.borrow(entry) as accessor:
                    assert accessor.value == model[entry]
            elif op == "borrow_mut":
                with store.borrow_mut(entry) as accessor:
                    accessor.set(accessor.value + 100)
                model[entry] += 100
            elif op == "update":
                store.update_in_place(entry, lambda value: value * 2)
                model[entry] *= 2
            elif op == "remove":
                assert store.remove(entry) == model.pop(entry)
        except NotFoundError:
            assert entry not in model, "Live entry reported as missing"
        else:
            assert op == "remove" or entry in model, "Removed entry answered a request"

    assert len(store) == len(model)
    assert store.ids() == sorted(model, key=lambda e: e.serial)


@given(ops=st.lists(st.sampled_from(("borrow", "borrow_mut", "release")), max_size=40))
def test_live_accessor_sets_never_mix(ops):
    """PROPERTY: Exclusive never coexists with anything, under any nesting."""
    store = LocalStore()
    entry = store.create("x")
    held = []

    with ExitStack() as stack:
        for op in ops:
            if op == "release":
                if held:
                    held.pop().close()
                continue

            inner = ExitStack()
            try:
                cm = store.borrow(entry) if op == "borrow" else store.borrow_mut(entry)
                accessor = inner.enter_context(cm)
            except ConflictError:
                inner.close()
                mode = store.state_of(entry)
                if op == "borrow":
                    assert mode == AccessMode.EXCLUSIVE
                else:
                    assert mode != AccessMode.FREE
                continue
            held.append(inner)
            stack.callback(inner.close)

            mode = store.state_of(entry)
            if op == "borrow_mut":
                assert mode == AccessMode.EXCLUSIVE
                assert len(held) == 1
            else:
                assert mode == AccessMode.SHARED
            assert accessor.is_live

    assert store.state_of(entry) == AccessMode.FREE
    assert store.remove(entry) == "x"


@given(n=st.integers(min_value=1, max_value=30), seed=st.integers(min_value=0, max_value=10**6))
def test_create_remove_create_never_reuses_ids(n, seed):
    rng = random.Random(seed)
    store = LocalStore()
    seen = set()
    live = []

    for _ in range(n):
        entry = store.create(None)
        assert entry not in seen
        seen.add(entry)
        live.append(entry)
        if live and rng.random() < 0.5:
            store.remove(live.pop(rng.randrange(len(live))))
        if rng.random() < 0.2:
            store.compact()

    assert set(store.ids()) == set(live)


@settings(max_examples=10, deadline=None)
@given(seed=st.integers(min_value=0, max_value=10**6))
def test_randomized_concurrent_acquisition_keeps_discipline(seed):
    """PROPERTY: Under real threads, observed accessor sets never mix."""
    store = LocalStore(StoreConfig(policy=AccessPolicy.MULTI_THREADED, timeout=10.0))
    entries = [store.create(0) for _ in range(3)]
    guard = threading.Lock()
    live = {entry: {"shared": 0, "exclusive": 0} for entry in entries}
    violations = []

    def _enter(entry, kind):
        with guard:
            live[entry][kind] += 1
            counts = live[entry]
            if counts["exclusive"] > 1 or (counts["exclusive"] and counts["shared"]):
                violations.append(dict(counts))

    def _leave(entry, kind):
        with guard:
            live[entry][kind] -= 1

    def _worker(worker_seed):
        rng = random.Random(worker_seed)
        for _ in range(30):
            entry = rng.choice(entries)
            if rng.random() < 0.4:
                with store.borrow_mut(entry) as accessor:
                    _enter(entry, "exclusive")
                    accessor.set(accessor.value + 1)
                    _leave(entry, "exclusive")
            else:
                with store.borrow(entry):
                    _enter(entry, "shared")
                    _leave(entry, "shared")

    threads = [threading.Thread(target=_worker, args=(seed + i,)) for i in range(6)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(30)

    assert violations == []
    assert all(store.state_of(entry) == AccessMode.FREE for entry in entries)
