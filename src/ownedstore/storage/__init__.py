"""Storage backends."""

from ownedstore.storage.allocator import SlotAllocator
from ownedstore.storage.local import LocalStore
from ownedstore.storage.models import AccessPolicy, StoreConfig
from ownedstore.storage.protocol import Store

__all__ = [
    "Store",
    "LocalStore",
    "SlotAllocator",
    "AccessPolicy",
    "StoreConfig",
]
