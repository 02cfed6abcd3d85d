"""Application configuration helpers."""

from __future__ import annotations

from streamfixup.common.logging import configure_logging

from .env import optional_int_env
from .errors import ConfigurationError
from .fixup import DEFAULT_BATCH_SIZE, FixupConfig, get_fixup_config, parse_ignore_fields
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_storage_config,
    get_table_prefix,
)

__all__ = [
    "DEFAULT_BATCH_SIZE",
    "ConfigurationError",
    "DatabaseConfig",
    "FixupConfig",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_fixup_config",
    "get_storage_config",
    "get_table_prefix",
    "optional_int_env",
    "parse_ignore_fields",
]
