"""Data models for lifecycle tracing.

Events are plain records; recorders decide whether to keep, ship or drop them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ownedstore.core.identity import EntryId


class EventKind(Enum):
    """Lifecycle transitions a store reports."""

    CREATED = "created"
    BORROWED = "borrowed"
    BORROWED_MUT = "borrowed_mut"
    RELEASED = "released"
    REMOVED = "removed"
    POISONED = "poisoned"
    REVALIDATED = "revalidated"
    RELOCATED = "relocated"
    FINALIZED = "finalized"
    CLOSED = "closed"


@dataclass(frozen=True, slots=True)
class LifecycleEvent:
    """One lifecycle transition of one entry (or of the whole store).

    Attributes:
        kind: What happened.
        entry_id: Entry concerned, None for store-wide events such as CLOSED.
        timestamp: Unix timestamp when the transition happened.
        details: Optional extra facts (e.g. old/new slot on RELOCATED).

    Example:
        event = LifecycleEvent(
            kind=EventKind.RELOCATED,
            entry_id=EntryId(store=1, serial=7),
            timestamp=1704067200.0,
            details={"from_slot": 5, "to_slot": 2, "generation": 1},
        )
    """

    kind: EventKind
    entry_id: EntryId | None
    timestamp: float
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        result: dict[str, Any] = {
            "kind": self.kind.value,
            "timestamp": self.timestamp,
        }
        if self.entry_id is not None:
            result["entry"] = {"store": self.entry_id.store, "serial": self.entry_id.serial}
        if self.details:
            result["details"] = self.details
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LifecycleEvent:
        """Create from dictionary (for deserialization)."""
        entry = data.get("entry")
        return cls(
            kind=EventKind(data["kind"]),
            entry_id=EntryId(store=entry["store"], serial=entry["serial"]) if entry else None,
            timestamp=data["timestamp"],
            details=data.get("details", {}),
        )
