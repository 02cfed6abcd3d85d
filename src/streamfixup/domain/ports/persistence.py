"""Ports for reading and writing stream rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from streamfixup.domain.model import Provider

type Row = Mapping[str, object]
type SortDirection = Literal["ASC", "DESC"]


@dataclass(frozen=True, slots=True)
class OrderBy:
    """One ``ORDER BY`` term. Descending order always sorts NULLs last."""

    column: str
    direction: SortDirection = "ASC"

    @classmethod
    def desc(cls, column: str) -> OrderBy:
        return cls(column, "DESC")

    @property
    def descending(self) -> bool:
        return self.direction == "DESC"


@runtime_checkable
class RowStore(Protocol):
    """Thin table-level query abstraction over the relational store.

    ``where`` filters are column equality checks ANDed together.
    """

    def select_rows(
        self,
        table: str,
        columns: Sequence[str],
        where: Mapping[str, object],
        order_by: Sequence[OrderBy] = (),
    ) -> list[Row]: ...

    def update_row(
        self,
        table: str,
        where: Mapping[str, object],
        values: Mapping[str, object],
    ) -> int: ...


@runtime_checkable
class ProviderRepository(Protocol):
    """Lookup contract for provider subscriptions."""

    def find(
        self,
        *,
        user_id: int | None = None,
        provider_id: int | None = None,
    ) -> list[Provider]: ...
