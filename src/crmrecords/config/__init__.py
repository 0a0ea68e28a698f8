"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_int_env
from .errors import ConfigurationError
from .logging import configure_logging
from .reconciler import ReconcilerConfig, get_reconciler_config
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_storage_config,
)

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "ReconcilerConfig",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_database_uri",
    "get_reconciler_config",
    "get_storage_config",
    "optional_int_env",
]
