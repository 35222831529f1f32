"""Core primitives: identifiers, error taxonomy and type aliases.

Architecture Note:
    core/ holds stateless building blocks with no runtime state mutation.
    For stateful services, see storage/, access/ and lifecycle/.
"""

from ownedstore.core.errors import (
    AccessorReleasedError,
    BorrowTimeoutError,
    ConflictError,
    InvariantViolationError,
    NotFoundError,
    OutOfCapacityError,
    PoisonedError,
    RegistryError,
    StoreClosedError,
)
from ownedstore.core.identity import EntryId
from ownedstore.core.types import Copy

__all__ = [
    # Identity
    "EntryId",
    # Types
    "Copy",
    # Errors
    "RegistryError",
    "NotFoundError",
    "StoreClosedError",
    "ConflictError",
    "BorrowTimeoutError",
    "AccessorReleasedError",
    "OutOfCapacityError",
    "PoisonedError",
    "InvariantViolationError",
]
