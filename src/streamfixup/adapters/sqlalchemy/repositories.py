"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import select, update

from streamfixup.domain.model import PROVIDERS_TABLE, Provider

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from sqlalchemy import CursorResult, Select, Table
    from sqlalchemy.orm import Session

    from streamfixup.adapters.sqlalchemy.mappings import CatalogTables
    from streamfixup.domain.ports import OrderBy, Row, RowStore


class SqlAlchemyRowStore:
    """Table-level select/update against the catalog tables of one session."""

    def __init__(self, session: Session, tables: CatalogTables) -> None:
        self.session = session
        self._tables = tables.by_name()

    def select_rows(
        self,
        table: str,
        columns: Sequence[str],
        where: Mapping[str, object],
        order_by: Sequence[OrderBy] = (),
    ) -> list[Row]:
        target = self._table(table)
        stmt: Select[Any] = (
            select(*(target.c[name] for name in columns)) if columns else select(target)
        )
        for name, value in where.items():
            stmt = stmt.where(target.c[name] == value)
        for term in order_by:
            column = target.c[term.column]
            if term.descending:
                # NULLs sort last regardless of backend
                stmt = stmt.order_by(column.is_(None), column.desc())
            else:
                stmt = stmt.order_by(column.asc())
        return [dict(row) for row in self.session.execute(stmt).mappings()]

    def update_row(
        self,
        table: str,
        where: Mapping[str, object],
        values: Mapping[str, object],
    ) -> int:
        if not values:
            raise ValueError("No data provided for update")
        if not where:
            raise ValueError("Refusing to update without a WHERE filter")
        target = self._table(table)
        stmt = update(target).values(dict(values))
        for name, value in where.items():
            stmt = stmt.where(target.c[name] == value)
        result = cast("CursorResult[Any]", self.session.execute(stmt))
        return result.rowcount

    def _table(self, name: str) -> Table:
        try:
            return self._tables[name]
        except KeyError:
            raise KeyError(f"Unknown table: {name}") from None


class SqlAlchemyProviderRepository:
    def __init__(self, store: RowStore) -> None:
        self.store = store

    def find(
        self,
        *,
        user_id: int | None = None,
        provider_id: int | None = None,
    ) -> list[Provider]:
        where: dict[str, object] = {}
        if user_id is not None:
            where["u_id"] = user_id
        if provider_id is not None:
            where["id"] = provider_id
        rows = self.store.select_rows(
            PROVIDERS_TABLE,
            ("id", "u_id", "sp_name", "sp_last_synced"),
            where,
        )
        return [Provider.model_validate(dict(row)) for row in rows]


if TYPE_CHECKING:
    from streamfixup.domain.ports import ProviderRepository

    _session_stub = cast("Session", object())
    _tables_stub = cast("CatalogTables", object())
    _store_check: RowStore = SqlAlchemyRowStore(_session_stub, _tables_stub)
    _provider_check: ProviderRepository = SqlAlchemyProviderRepository(_store_check)
