"""Ports at the edges of the worker: message delivery, decoding and software gating."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

    from eddn_worker.domain.model import Envelope, SystemSnapshot


@runtime_checkable
class Ingress(Protocol):
    """Pushes one decoded message to the coordinator.

    Back-pressure and redelivery are the ingress's responsibility.
    """

    def deliver(self, envelope: Mapping[str, object]) -> None: ...


@runtime_checkable
class AllowList(Protocol):
    def is_permitted(self, software_name: str, software_version: str) -> bool: ...


@runtime_checkable
class EnvelopeDecoder(Protocol):
    """Turns wire-format envelopes into domain values.

    Both methods raise ``EnvelopeValidationError`` carrying one reason per defect.
    """

    def decode(self, raw: Mapping[str, object]) -> Envelope: ...

    def to_snapshot(self, envelope: Envelope, *, now: datetime) -> SystemSnapshot: ...
