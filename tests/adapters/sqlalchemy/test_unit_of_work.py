from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine, insert, inspect

from streamfixup.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyFixupUnitOfWork,
    StartupError,
    configured_engine,
    configured_tables,
    is_started,
    shutdown,
    startup,
)
from streamfixup.domain.model import STREAMS_TABLE
from tests.helpers.streams import make_stream_row

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def _read_name(row_id: int) -> object:
    with SqlAlchemyFixupUnitOfWork() as uow:
        (row,) = uow.repositories.rows.select_rows(STREAMS_TABLE, ("s_name",), {"id": row_id})
        return row["s_name"]


def test_unit_of_work_requires_startup() -> None:
    assert not is_started()
    with pytest.raises(StartupError):
        SqlAlchemyFixupUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b


def test_startup_applies_table_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STREAMFIXUP_TABLE_PREFIX", "iptv_")
    startup(engine=create_engine("sqlite+pysqlite:///:memory:", future=True), force=True)

    assert configured_tables().streams.name == "iptv_streams"

    startup(
        engine=create_engine("sqlite+pysqlite:///:memory:", future=True),
        table_prefix="",
        force=True,
    )
    assert configured_tables().streams.name == "streams"


def test_startup_can_create_tables(tmp_path: Path) -> None:
    database = tmp_path / "catalog.db"
    startup(database_uri=f"sqlite+pysqlite:///{database}", create_tables=True, force=True)

    engine = configured_engine()
    assert engine is not None
    assert configured_tables().streams.name in inspect(engine).get_table_names()


def test_unit_of_work_commits_updates(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, table_prefix="kptv_", force=True)

    with SqlAlchemyFixupUnitOfWork() as uow:
        uow.session.execute(insert(uow.tables.streams), [make_stream_row(1, "CNN")])
        uow.repositories.rows.update_row(STREAMS_TABLE, {"id": 1}, {"s_name": "CNN HD"})
        uow.commit()

    assert _read_name(1) == "CNN HD"


def test_unit_of_work_rolls_back_on_error(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, table_prefix="kptv_", force=True)

    with SqlAlchemyFixupUnitOfWork() as uow:
        uow.session.execute(insert(uow.tables.streams), [make_stream_row(1, "CNN")])
        uow.commit()

    with pytest.raises(RuntimeError), SqlAlchemyFixupUnitOfWork() as uow:
        uow.repositories.rows.update_row(STREAMS_TABLE, {"id": 1}, {"s_name": "Lost"})
        raise RuntimeError("boom")

    assert _read_name(1) == "CNN"


def test_repositories_are_unavailable_outside_the_context(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, table_prefix="kptv_", force=True)
    uow = SqlAlchemyFixupUnitOfWork()

    with pytest.raises(StartupError):
        _ = uow.repositories
