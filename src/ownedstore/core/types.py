"""Core type definitions for ownedstore."""

type Copy[T] = T
"""Type alias indicating a value is a copy detached from the store.

When you see `Copy[T]` in a return type, the returned value is a deep copy.
Mutations to this copy do NOT affect the stored entry. To persist changes,
go back through the store via `store.update_in_place()` or `store.borrow_mut()`.
"""
