"""SQLAlchemy-backed unit of work for stream reconciliation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from streamfixup.adapters.sqlalchemy.mappings import CatalogTables, build_tables, create_all_tables
from streamfixup.adapters.sqlalchemy.repositories import (
    SqlAlchemyProviderRepository,
    SqlAlchemyRowStore,
)
from streamfixup.config import get_database_config, get_table_prefix
from streamfixup.domain.ports import FixupRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None
    tables: CatalogTables | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call streamfixup.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory

    @property
    def catalog(self) -> CatalogTables:
        if self.tables is None:
            raise StartupError("SQLAlchemy adapter not initialised")
        return self.tables


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    table_prefix: str | None = None,
    create_tables: bool = False,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, table metadata, and session factory.

    ``create_tables`` is meant for local databases and tests; production schemas
    are managed by the ingestion side.
    """

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_engine(
        database_uri or get_database_config().uri,
        future=True,
    )
    tables = build_tables(get_table_prefix() if table_prefix is None else table_prefix)
    if create_tables:
        create_all_tables(resolved_engine, tables)

    _STATE.engine = resolved_engine
    _STATE.tables = tables
    log.debug("SQLAlchemy adapter started (streams table: %s)", tables.streams.name)


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def configured_tables() -> CatalogTables:
    """Return the catalog tables the adapter was started with."""

    return _STATE.catalog


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None
    _STATE.tables = None


class SqlAlchemyFixupUnitOfWork:
    """Unit of work managing one SQLAlchemy session for a reconciliation run."""

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self.tables = _STATE.catalog
        self._session: Session | None = None
        self._repositories: FixupRepositories | None = None

    def __enter__(self) -> SqlAlchemyFixupUnitOfWork:
        self.session = self.session_factory()
        store = SqlAlchemyRowStore(self.session, self.tables)
        self._repositories = FixupRepositories(
            rows=store,
            providers=SqlAlchemyProviderRepository(store),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self.session = None
        self._repositories = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> FixupRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


if TYPE_CHECKING:
    from streamfixup.domain.ports import FixupUnitOfWork

    _uow_check: FixupUnitOfWork = SqlAlchemyFixupUnitOfWork()
