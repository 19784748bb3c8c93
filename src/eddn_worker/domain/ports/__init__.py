"""Domain port definitions for adapters."""

from __future__ import annotations

from .audit import AuditSink
from .ingress import AllowList, EnvelopeDecoder, Ingress
from .persistence import (
    FactionRepository,
    Repository,
    SystemFactionHistoryRepository,
    SystemHistoryRepository,
    SystemRepository,
)
from .unit_of_work import (
    ReconciliationRepositories,
    ReconciliationUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AllowList",
    "AuditSink",
    "EnvelopeDecoder",
    "FactionRepository",
    "Ingress",
    "ReconciliationRepositories",
    "ReconciliationUnitOfWork",
    "Repository",
    "RepositoryCollection",
    "SystemFactionHistoryRepository",
    "SystemHistoryRepository",
    "SystemRepository",
    "UnitOfWork",
]
