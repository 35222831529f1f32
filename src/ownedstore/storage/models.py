"""Storage models and configuration.

Types for store configuration, access policies and the stored entry record.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from ownedstore.access.state import AccessState
from ownedstore.core.identity import EntryId

DEFAULT_MAX_GENERATION = 2**32 - 1


class AccessPolicy(Enum):
    """How a store reacts to a request that clashes with live accessors.

    Selected once at construction; a store never switches policy.
    """

    SINGLE_THREADED = auto()
    """Clashes are caller bugs: raise ConflictError immediately. Default."""

    MULTI_THREADED = auto()
    """Clashes block the calling thread until the access class is available."""


@dataclass
class StoreConfig:
    """Configuration for store behavior.

    Passed to the store at construction, or built from StoreSettings.
    """

    policy: AccessPolicy = AccessPolicy.SINGLE_THREADED
    """Conflict handling. Default: fail fast."""

    capacity: int | None = None
    """Max live entries. None = unlimited (default)."""

    timeout: float | None = None
    """Default wait in seconds for blocking requests. None = wait forever."""

    max_generation: int = DEFAULT_MAX_GENERATION
    """Highest generation an entry may reach before relocation is a fatal defect."""

    def __post_init__(self) -> None:
        if self.capacity is not None and self.capacity < 0:
            raise ValueError(f"capacity must be >= 0, got {self.capacity}")
        if self.timeout is not None and self.timeout < 0:
            raise ValueError(f"timeout must be >= 0, got {self.timeout}")
        if self.max_generation < 0:
            raise ValueError(f"max_generation must be >= 0, got {self.max_generation}")


@dataclass(slots=True)
class Entry[T]:
    """One stored value plus its identity and bookkeeping.

    Only the owning store touches these fields; callers see values through
    accessors.
    """

    id: EntryId
    value: T
    slot: int
    state: AccessState
    generation: int = 0
    poisoned: bool = False
