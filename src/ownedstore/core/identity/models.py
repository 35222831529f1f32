"""Entry identity models.

Usage:
    entry = EntryId(store=1, serial=42)
    entry.serial  # 42, never handed out again by the same store
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class EntryId:
    """Opaque identifier for one stored value.

    Serials are monotonic per store and never reused, so a retired id can never
    be answered by a newer entry. The store tag keeps ids from one store from
    resolving against another.
    """

    store: int = 0
    serial: int = 0

    def __hash__(self) -> int:
        return hash((self.store, self.serial))

    def __str__(self) -> str:
        return f"{self.store}:{self.serial}"

    def belongs_to(self, store: int) -> bool:
        """Check if this id was issued by the store with the given tag.

        Args:
            store: Tag of the store to compare against.

        Returns:
            True if the id carries that store tag, False otherwise.
        """
        return self.store == store
