from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from streamfixup.adapters.sqlalchemy import build_tables, create_all_tables
from streamfixup.adapters.sqlalchemy.mappings import CatalogTables  # noqa: TC001
from streamfixup.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyFixupUnitOfWork,
    shutdown,
    startup,
)
from streamfixup.config.storage import DEFAULT_TABLE_PREFIX

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def catalog_tables() -> CatalogTables:
    return build_tables(DEFAULT_TABLE_PREFIX)


@pytest.fixture
def sqlite_engine(catalog_tables: CatalogTables) -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    create_all_tables(engine, catalog_tables)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyFixupUnitOfWork]]:
    startup(engine=sqlite_engine, table_prefix=DEFAULT_TABLE_PREFIX, force=True)

    def factory() -> SqlAlchemyFixupUnitOfWork:
        return SqlAlchemyFixupUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()
