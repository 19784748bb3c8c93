"""Port for the raw-message audit trail."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


@runtime_checkable
class AuditSink(Protocol):
    """Durable, append-only store of inbound messages.

    Appends are independent of the reconciliation unit of work: a record is
    written even when reconciliation rolled back.
    """

    def append(
        self,
        *,
        schema_ref: str,
        header: Mapping[str, object],
        message: Mapping[str, object],
        applied: bool,
        notes: Sequence[str],
    ) -> None: ...
