"""SQLAlchemy-backed unit of work for message reconciliation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker

from eddn_worker.adapters.sqlalchemy.mappings import start_mappers
from eddn_worker.adapters.sqlalchemy.migrations import upgrade_head
from eddn_worker.adapters.sqlalchemy.repositories import (
    SqlAlchemyFactionRepository,
    SqlAlchemySystemFactionHistoryRepository,
    SqlAlchemySystemHistoryRepository,
    SqlAlchemySystemRepository,
)
from eddn_worker.config import get_database_uri
from eddn_worker.domain.ports.unit_of_work import (
    ReconciliationRepositories,
    RepositoryCollection,
)

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Connection, Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

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
                "SQLAlchemy adapter not initialised. Call eddn_worker.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def _is_file_backed_sqlite(engine: Engine) -> bool:
    return engine.dialect.name == "sqlite" and engine.url.database not in (None, "", ":memory:")


def _disable_driver_transactions(dbapi_connection: Any, _connection_record: Any) -> None:
    dbapi_connection.isolation_level = None


def _begin_immediate(connection: Connection) -> None:
    connection.exec_driver_sql("BEGIN IMMEDIATE")


def _serialise_sqlite_writers(engine: Engine) -> None:
    """Take the SQLite write lock when a transaction begins.

    pysqlite defers ``BEGIN`` to the first write, so two connections could read
    the same open history row before either closes it. ``FOR UPDATE`` renders
    nothing on SQLite; ``BEGIN IMMEDIATE`` makes the second writer wait instead.
    """

    if not event.contains(engine, "connect", _disable_driver_transactions):
        event.listen(engine, "connect", _disable_driver_transactions)
    if not event.contains(engine, "begin", _begin_immediate):
        event.listen(engine, "begin", _begin_immediate)


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, schema, and session factory.

    Writers on a file-backed SQLite database are serialised per transaction;
    in-memory databases live on a single connection and are left alone.
    """

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_engine(database_uri or get_database_uri(), future=True)
    if _is_file_backed_sqlite(resolved_engine):
        _serialise_sqlite_writers(resolved_engine)
    start_mappers()
    upgrade_head(engine=resolved_engine)
    log.info("SQLAlchemy adapter started on %s", resolved_engine.url.render_as_string())

    _STATE.engine = resolved_engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def session_factory() -> sessionmaker[Session]:
    return _STATE.session_factory


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections."""

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def _begin(self, session: Session) -> None:
        _ = session

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._begin(self.session)
        self._repositories = self._build_repositories(self.session)
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
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
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


class SqlAlchemyReconciliationUnitOfWork(BaseSqlAlchemyUnitOfWork[ReconciliationRepositories]):
    """Unit of work for reconciling one message.

    On PostgreSQL ``statement_timeout`` bounds every statement of the
    transaction; other dialects ignore it.
    """

    def __init__(self, *, statement_timeout: float | None = None) -> None:
        super().__init__()
        self.statement_timeout = statement_timeout

    def _begin(self, session: Session) -> None:
        if self.statement_timeout is None:
            return
        if session.get_bind().dialect.name != "postgresql":
            return
        milliseconds = max(1, int(self.statement_timeout * 1000))
        session.execute(
            text("SELECT set_config('statement_timeout', :value, true)"),
            {"value": str(milliseconds)},
        )

    def _build_repositories(self, session: Session) -> ReconciliationRepositories:
        return ReconciliationRepositories(
            systems=SqlAlchemySystemRepository(session),
            factions=SqlAlchemyFactionRepository(session),
            system_histories=SqlAlchemySystemHistoryRepository(session),
            system_faction_histories=SqlAlchemySystemFactionHistoryRepository(session),
        )


if TYPE_CHECKING:
    from eddn_worker.domain.ports.unit_of_work import ReconciliationUnitOfWork

    _uow_check: ReconciliationUnitOfWork = SqlAlchemyReconciliationUnitOfWork()
