"""ownedstore: ownership-safe resource registry.

Usage:
    from ownedstore import LocalStore, NotFoundError

    store = LocalStore()
    task_id = store.create("Write docs")

    with store.borrow(task_id) as task:
        print(task.value)

    store.update_in_place(task_id, str.upper)
    store.remove(task_id)  # "WRITE DOCS"

    try:
        store.remove(task_id)
    except NotFoundError:
        ...  # removed ids are never answered again
"""

__version__ = "0.1.0"

# Accessors
from ownedstore.access import (
    AccessMode,
    ExclusiveAccessor,
    SharedAccessor,
)

# Core primitives
from ownedstore.core import (
    AccessorReleasedError,
    BorrowTimeoutError,
    ConflictError,
    Copy,
    EntryId,
    InvariantViolationError,
    NotFoundError,
    OutOfCapacityError,
    PoisonedError,
    RegistryError,
    StoreClosedError,
)

# Lifecycle
from ownedstore.lifecycle import (
    ConflictRetryPolicy,
    OwnedResource,
    retry_on_conflict,
)

# Storage
from ownedstore.storage import (
    AccessPolicy,
    LocalStore,
    Store,
    StoreConfig,
)

# Tracing (optional)
from ownedstore.tracing import (
    EventKind,
    EventRecorder,
    InMemoryEventLog,
    LifecycleEvent,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "EntryId",
    "Copy",
    "RegistryError",
    "NotFoundError",
    "StoreClosedError",
    "ConflictError",
    "BorrowTimeoutError",
    "AccessorReleasedError",
    "OutOfCapacityError",
    "PoisonedError",
    "InvariantViolationError",
    # Storage
    "Store",
    "LocalStore",
    "StoreConfig",
    "AccessPolicy",
    # Access
    "AccessMode",
    "SharedAccessor",
    "ExclusiveAccessor",
    # Lifecycle
    "OwnedResource",
    "ConflictRetryPolicy",
    "retry_on_conflict",
    # Tracing
    "EventRecorder",
    "EventKind",
    "LifecycleEvent",
    "InMemoryEventLog",
]
