"""Configuration settings using Pydantic Settings.

Provides typed store configuration with environment variable support.

Usage:
    from ownedstore.config.settings import StoreSettings

    # Load from environment variables (OWNEDSTORE_*)
    settings = StoreSettings()

    # Or override with explicit values
    settings = StoreSettings(policy="multi_threaded", timeout=2.5)
    store = LocalStore(settings.to_config())
"""

from __future__ import annotations

from typing import Literal

try:
    from pydantic import Field
    from pydantic_settings import BaseSettings, SettingsConfigDict
except ImportError as e:
    raise ImportError(
        "pydantic-settings is required for config module. "
        "Install with: pip install ownedstore[config]"
    ) from e

from ownedstore.config.logging_config import configure_logging
from ownedstore.storage.models import DEFAULT_MAX_GENERATION, AccessPolicy, StoreConfig


class StoreSettings(BaseSettings):  # type: ignore[misc]
    """Configuration for LocalStore instances.

    Attributes:
        policy: Conflict handling, "single_threaded" (fail fast) or
            "multi_threaded" (block until available).
        capacity: Max live entries (None for unlimited).
        timeout: Default wait in seconds for blocking requests (None waits forever).
        max_generation: Relocation count after which an entry is a fatal defect.
        log_level: Level passed to configure_logging() by applications.

    Environment Variables:
        OWNEDSTORE_POLICY
        OWNEDSTORE_CAPACITY
        OWNEDSTORE_TIMEOUT
        OWNEDSTORE_MAX_GENERATION
        OWNEDSTORE_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="OWNEDSTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    policy: Literal["single_threaded", "multi_threaded"] = "single_threaded"
    capacity: int | None = Field(default=None, ge=0)
    timeout: float | None = Field(default=None, ge=0)
    max_generation: int = Field(default=DEFAULT_MAX_GENERATION, ge=0)
    log_level: str = "WARNING"

    def to_config(self) -> StoreConfig:
        """Convert to the plain StoreConfig a store is constructed with."""
        return StoreConfig(
            policy=AccessPolicy[self.policy.upper()],
            capacity=self.capacity,
            timeout=self.timeout,
            max_generation=self.max_generation,
        )

    def apply_logging(self) -> str | int:
        """Configure package logging at log_level. Returns the applied level."""
        return configure_logging(self.log_level)
