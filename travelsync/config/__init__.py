from __future__ import annotations

from .database import DatabaseConfig
from .reference import ReferenceConfig
from .runtime import RuntimeConfig
from .settings import AppConfig, Settings, load_config
from .sync import SyncConfig

__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "ReferenceConfig",
    "RuntimeConfig",
    "Settings",
    "SyncConfig",
    "load_config",
]
