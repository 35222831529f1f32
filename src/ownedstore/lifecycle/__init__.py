"""Lifecycle helpers built on the store: single owned resources and conflict retry."""

from ownedstore.lifecycle.resource import OwnedResource
from ownedstore.lifecycle.retry import ConflictRetryPolicy, retry_on_conflict

__all__ = [
    "OwnedResource",
    "ConflictRetryPolicy",
    "retry_on_conflict",
]
