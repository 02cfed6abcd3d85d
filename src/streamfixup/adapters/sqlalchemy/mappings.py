"""SQLAlchemy table metadata for the stream catalog.

The schema is owned by the ingestion side; these declarations mirror the
columns the reconciliation engine reads and writes so the adapter can build
queries, and so local databases and tests can create the tables.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    SmallInteger,
    String,
    Table,
    func,
)

from streamfixup.config.storage import DEFAULT_TABLE_PREFIX
from streamfixup.domain.model import PROVIDERS_TABLE, STREAMS_TABLE

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

# SQLite only autoincrements INTEGER PRIMARY KEY columns.
IdColumnType = BigInteger().with_variant(Integer(), "sqlite")

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


@dataclass(frozen=True, slots=True)
class CatalogTables:
    """Tables of one catalog schema, addressable by their unprefixed name."""

    metadata: MetaData
    streams: Table
    providers: Table

    def by_name(self) -> dict[str, Table]:
        return {STREAMS_TABLE: self.streams, PROVIDERS_TABLE: self.providers}


def build_tables(prefix: str = DEFAULT_TABLE_PREFIX) -> CatalogTables:
    """Declare the catalog tables using ``prefix`` for their physical names."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    providers = Table(
        f"{prefix}{PROVIDERS_TABLE}",
        metadata,
        Column("id", IdColumnType, primary_key=True, autoincrement=True),
        Column("u_id", BigInteger, nullable=False),
        Column("sp_should_filter", Boolean, nullable=False, default=True),
        Column("sp_priority", Integer, nullable=False, default=99),
        Column("sp_name", String(256), nullable=False),
        Column("sp_type", SmallInteger, nullable=False, default=0),
        Column("sp_domain", String(256), nullable=False, default=""),
        Column("sp_last_synced", DateTime, nullable=True),
        Column("sp_added", DateTime, nullable=False, server_default=func.now()),
        Index(f"ix_{prefix}providers_uid", "u_id"),
    )

    streams = Table(
        f"{prefix}{STREAMS_TABLE}",
        metadata,
        Column("id", IdColumnType, primary_key=True, autoincrement=True),
        Column("u_id", BigInteger, nullable=False),
        Column("p_id", BigInteger, nullable=False, default=0),
        Column("s_type_id", SmallInteger, nullable=False, default=0),
        Column("s_active", Boolean, nullable=False, default=False),
        Column("s_channel", String(32), nullable=False, default="0"),
        Column("s_name", String(1024), nullable=False),
        Column("s_orig_name", String(1024), nullable=False),
        Column("s_stream_uri", String(2048), nullable=False, default=""),
        Column("s_tvg_id", String(1024), nullable=True),
        Column("s_tvg_group", String(1024), nullable=True),
        Column("s_tvg_logo", String(2048), nullable=True),
        Column("s_extras", String(2048), nullable=True),
        Column("s_created", DateTime, nullable=False, server_default=func.now()),
        Column("s_updated", DateTime, nullable=True, onupdate=func.now()),
        Index(f"ix_{prefix}streams_uid", "u_id"),
        Index(f"ix_{prefix}streams_pid", "p_id"),
    )

    return CatalogTables(metadata=metadata, streams=streams, providers=providers)


def create_all_tables(engine: Engine, tables: CatalogTables) -> None:
    log.debug("Creating catalog tables on %s", engine.url.render_as_string(hide_password=True))
    tables.metadata.create_all(engine, checkfirst=True)
