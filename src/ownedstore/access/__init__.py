"""Accessor layer: shared/exclusive discipline as scoped capabilities."""

from ownedstore.access.accessors import ExclusiveAccessor, SharedAccessor
from ownedstore.access.state import AccessMode, AccessState

__all__ = [
    "AccessMode",
    "AccessState",
    "SharedAccessor",
    "ExclusiveAccessor",
]
