"""Tests for environment-backed settings and logging helpers."""

import logging

import pytest

from ownedstore import AccessPolicy, LocalStore
from ownedstore.config import configure_logging, get_logger
from ownedstore.config.settings import StoreSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("POLICY", "CAPACITY", "TIMEOUT", "MAX_GENERATION", "LOG_LEVEL"):
        monkeypatch.delenv(f"OWNEDSTORE_{name}", raising=False)


def test_defaults():
    config = StoreSettings().to_config()
    assert config.policy == AccessPolicy.SINGLE_THREADED
    assert config.capacity is None
    assert config.timeout is None


def test_loads_from_environment(monkeypatch):
    monkeypatch.setenv("OWNEDSTORE_POLICY", "multi_threaded")
    monkeypatch.setenv("OWNEDSTORE_CAPACITY", "3")
    monkeypatch.setenv("OWNEDSTORE_TIMEOUT", "0.5")

    config = StoreSettings().to_config()
    assert config.policy == AccessPolicy.MULTI_THREADED
    assert config.capacity == 3
    assert config.timeout == 0.5


def test_rejects_invalid_values():
    with pytest.raises(ValueError):
        StoreSettings(capacity=-1)
    with pytest.raises(ValueError):
        StoreSettings(policy="sometimes")


def test_store_from_settings():
    store = LocalStore.from_settings(StoreSettings(capacity=1, policy="multi_threaded"))
    assert store.config.capacity == 1
    assert store.config.policy == AccessPolicy.MULTI_THREADED


def test_lazy_settings_export():
    from ownedstore import config

    assert config.StoreSettings is StoreSettings


def test_configure_logging_attaches_single_handler():
    logger = logging.getLogger("ownedstore")
    before = len(logger.handlers)

    assert configure_logging("debug") == "DEBUG"
    configure_logging("INFO")
    StoreSettings(log_level="WARNING").apply_logging()

    added = [h for h in logger.handlers if getattr(h, "_ownedstore", False)]
    assert len(added) == 1
    assert len(logger.handlers) <= before + 1
    assert logger.level == logging.WARNING
    assert get_logger("ownedstore.storage.local").name == "ownedstore.storage.local"
