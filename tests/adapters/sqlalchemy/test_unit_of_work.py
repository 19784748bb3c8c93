from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError

from eddn_worker.adapters.sqlalchemy import unit_of_work
from eddn_worker.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    StartupError,
    is_started,
    session_factory,
    shutdown,
    startup,
)
from eddn_worker.domain.model import Faction

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_unit_of_work_requires_startup() -> None:
    with pytest.raises(StartupError):
        SqlAlchemyReconciliationUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert session_factory().kw["bind"] is engine_b
    assert is_started()


def test_repositories_require_an_open_unit_of_work(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    uow = SqlAlchemyReconciliationUnitOfWork()

    with pytest.raises(StartupError):
        _ = uow.repositories


def test_commit_persists_and_exception_rolls_back(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with SqlAlchemyReconciliationUnitOfWork() as uow:
        uow.repositories.factions.add(Faction(name="Mother Gaia"))
        uow.commit()

    with pytest.raises(RuntimeError), SqlAlchemyReconciliationUnitOfWork() as uow:
        uow.repositories.factions.add(Faction(name="Sol Workers' Party"))
        raise RuntimeError("abort")

    with SqlAlchemyReconciliationUnitOfWork() as uow:
        assert uow.repositories.factions.get_by_name("mother gaia") is not None
        assert uow.repositories.factions.get_by_name("sol workers' party") is None


def test_statement_timeout_is_ignored_on_sqlite(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with SqlAlchemyReconciliationUnitOfWork(statement_timeout=0.5) as uow:
        assert uow.repositories.systems.get_by_address(1) is None


def test_startup_serialises_writers_on_file_backed_sqlite(tmp_path: Path) -> None:
    engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'eddn.db'}", future=True)

    startup(engine=engine, force=True)
    startup(engine=engine, force=True)

    assert event.contains(engine, "begin", unit_of_work._begin_immediate)
    assert event.contains(engine, "connect", unit_of_work._disable_driver_transactions)


def test_startup_leaves_in_memory_sqlite_alone(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    assert not event.contains(sqlite_engine, "begin", unit_of_work._begin_immediate)


def test_second_unit_of_work_waits_for_the_first_on_file_backed_sqlite(tmp_path: Path) -> None:
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'eddn.db'}",
        future=True,
        connect_args={"timeout": 0.1},
    )
    startup(engine=engine, force=True)

    with SqlAlchemyReconciliationUnitOfWork() as first:
        assert first.repositories.factions.get_by_name("mother gaia") is None

        # a read is enough to hold the write lock until the first unit of work ends
        with SqlAlchemyReconciliationUnitOfWork() as second, pytest.raises(OperationalError):
            second.repositories.factions.get_by_name("mother gaia")

        first.repositories.factions.add(Faction(name="Mother Gaia"))
        first.commit()

    with SqlAlchemyReconciliationUnitOfWork() as third:
        assert third.repositories.factions.get_by_name("mother gaia") is not None
