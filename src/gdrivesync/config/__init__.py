"""Settings and persisted state for gdrivesync."""

from __future__ import annotations

from .settings import (
    DEFAULT_CONFIG_PATH,
    AppConfig,
    AuthConfig,
    LoggingConfig,
    SyncConfig,
    auth_info_from_config,
    load_config,
    save_config,
)
from .state import SyncState, SyncStateStore

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "AppConfig",
    "AuthConfig",
    "LoggingConfig",
    "SyncConfig",
    "SyncState",
    "SyncStateStore",
    "auth_info_from_config",
    "load_config",
    "save_config",
]
