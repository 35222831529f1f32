"""Configuration: environment-backed settings and logging helpers.

Usage:
    from ownedstore.config import StoreSettings, configure_logging

    configure_logging("DEBUG")
    store = LocalStore.from_settings(StoreSettings(policy="multi_threaded"))

StoreSettings needs pydantic-settings (pip install ownedstore[config]) and is
imported lazily so the logging helpers work without it.
"""

from typing import TYPE_CHECKING, Any

from ownedstore.config.logging_config import configure_logging, get_logger

if TYPE_CHECKING:
    from ownedstore.config.settings import StoreSettings
else:
    # Import on first use to keep pydantic-settings optional
    def __getattr__(name: str) -> Any:
        if name == "StoreSettings":
            from ownedstore.config.settings import StoreSettings

            return StoreSettings
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "StoreSettings",
    "configure_logging",
    "get_logger",
]
