"""SQLAlchemy adapter package for streamfixup."""

from __future__ import annotations

from .mappings import CatalogTables, build_tables, create_all_tables
from .repositories import SqlAlchemyProviderRepository, SqlAlchemyRowStore
from .unit_of_work import (
    SqlAlchemyFixupUnitOfWork,
    StartupError,
    configured_engine,
    configured_tables,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "CatalogTables",
    "SqlAlchemyFixupUnitOfWork",
    "SqlAlchemyProviderRepository",
    "SqlAlchemyRowStore",
    "StartupError",
    "build_tables",
    "configured_engine",
    "configured_tables",
    "create_all_tables",
    "is_started",
    "shutdown",
    "startup",
]
