"""Application configuration helpers."""

from __future__ import annotations

from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .reconcile import DEFAULT_LOOKUP_PAGE_SIZE, ReconcileConfig, get_reconcile_config
from .snapshot_api import SnapshotApiConfig, get_snapshot_api_config
from .storage import (
    StorageConfig,
    get_database_uri,
    get_queue_dir,
    get_storage_config,
)

__all__ = [
    "DEFAULT_LOOKUP_PAGE_SIZE",
    "ConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "ReconcileConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "SnapshotApiConfig",
    "StorageConfig",
    "configure_logging",
    "get_database_uri",
    "get_queue_dir",
    "get_reconcile_config",
    "get_snapshot_api_config",
    "get_storage_config",
    "require_env_var",
    "require_env_vars",
]
