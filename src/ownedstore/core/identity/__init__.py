"""Entry identity functionality: opaque, never-reused ids."""

from ownedstore.core.identity.models import EntryId

__all__ = [
    "EntryId",
]
