from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from eddn_worker.adapters.sqlalchemy import SqlAlchemyAuditSink
from eddn_worker.domain.model import ProcessingRecord

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.engine import Engine

    from eddn_worker.adapters.sqlalchemy import SqlAlchemyReconciliationUnitOfWork


def test_audit_sink_commits_its_own_record(sqlite_engine: Engine) -> None:
    factory = sessionmaker(bind=sqlite_engine, expire_on_commit=False)
    sink = SqlAlchemyAuditSink(factory)

    sink.append(
        schema_ref="https://eddn.edcd.io/schemas/journal/1",
        header={"softwareName": "EDDiscovery"},
        message={"event": "FSDJump", "StarSystem": "Sol"},
        applied=False,
        notes=["System not updated."],
    )

    with factory() as session:
        (record,) = session.execute(select(ProcessingRecord)).scalars().all()
    assert record.header == {"softwareName": "EDDiscovery"}
    assert record.message["StarSystem"] == "Sol"
    assert record.notes == ["System not updated."]
    assert record.applied is False
    assert record.received_at.tzinfo is not None


def test_audit_sink_uses_the_adapter_session_factory(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReconciliationUnitOfWork],
    sqlite_engine: Engine,
) -> None:
    _ = sqlite_unit_of_work
    SqlAlchemyAuditSink().append(
        schema_ref="x", header={}, message={}, applied=True, notes=[]
    )

    with sessionmaker(bind=sqlite_engine)() as session:
        assert len(session.execute(select(ProcessingRecord)).scalars().all()) == 1
