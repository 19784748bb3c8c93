"""SQLAlchemy adapter package for eddn-worker."""

from __future__ import annotations

from .audit import SqlAlchemyAuditSink
from .mappings import mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyFactionRepository,
    SqlAlchemySystemFactionHistoryRepository,
    SqlAlchemySystemHistoryRepository,
    SqlAlchemySystemRepository,
)
from .unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    StartupError,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyAuditSink",
    "SqlAlchemyFactionRepository",
    "SqlAlchemyReconciliationUnitOfWork",
    "SqlAlchemySystemFactionHistoryRepository",
    "SqlAlchemySystemHistoryRepository",
    "SqlAlchemySystemRepository",
    "StartupError",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
