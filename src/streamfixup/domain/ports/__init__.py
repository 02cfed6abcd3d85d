"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import OrderBy, ProviderRepository, Row, RowStore, SortDirection
from .unit_of_work import FixupRepositories, FixupUnitOfWork, RepositoryCollection, UnitOfWork

__all__ = [
    "FixupRepositories",
    "FixupUnitOfWork",
    "OrderBy",
    "ProviderRepository",
    "RepositoryCollection",
    "Row",
    "RowStore",
    "SortDirection",
    "UnitOfWork",
]
