"""Shared test fixtures."""

from dataclasses import dataclass

import pytest

from ownedstore import AccessPolicy, InMemoryEventLog, LocalStore, StoreConfig


@dataclass(slots=True)
class FixtureTask:
    title: str
    done: bool = False


@pytest.fixture
def store():
    """Fresh single-threaded store."""
    return LocalStore()


@pytest.fixture
def blocking_store():
    """Fresh multi-threaded store with a generous default timeout."""
    return LocalStore(StoreConfig(policy=AccessPolicy.MULTI_THREADED, timeout=5.0))


@pytest.fixture
def event_log():
    return InMemoryEventLog()


@pytest.fixture
def task_cls():
    return FixtureTask
