from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from eddn_worker.adapters.sqlalchemy import start_mappers
from eddn_worker.adapters.sqlalchemy.migrations import upgrade_head
from eddn_worker.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    shutdown,
    startup,
)
from eddn_worker.app import build_coordinator
from eddn_worker.config import WorkerConfig
from tests.helpers.galaxy import at

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from eddn_worker.domain.coordinator import TransactionCoordinator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    # one shared connection, so every session sees the same in-memory database
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    start_mappers()
    upgrade_head(engine=engine)
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
) -> Iterator[Callable[[], SqlAlchemyReconciliationUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyReconciliationUnitOfWork:
        return SqlAlchemyReconciliationUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def worker_config() -> WorkerConfig:
    return WorkerConfig()


@pytest.fixture
def sqlite_coordinator(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReconciliationUnitOfWork],
    worker_config: WorkerConfig,
) -> TransactionCoordinator:
    """Coordinator on the in-memory database with the wall clock pinned one day after ``T0``."""

    return build_coordinator(
        config=worker_config,
        unit_of_work_factory=sqlite_unit_of_work,
        clock=lambda: at(24),
    )
