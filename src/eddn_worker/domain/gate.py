"""Admission checks run before a message is allowed near the database."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from eddn_worker.domain import notes

if TYPE_CHECKING:
    from eddn_worker.domain.model import Envelope
    from eddn_worker.domain.ports import AllowList

_LEADING_DECIMAL: Final = re.compile(r"^\s*([+-]?\d+(?:\.\d+)?)")


def parse_game_version(game_version: str | None) -> float | None:
    """Return the leading decimal of a version string (``"4.0.0.1904"`` -> ``4.0``)."""

    if not game_version:
        return None
    match = _LEADING_DECIMAL.match(game_version)
    if match is None:
        return None
    return float(match.group(1))


@dataclass(slots=True)
class MessageGate:
    """Accepts envelopes on the expected schema from current, trusted producers."""

    journal_schema: str
    minimum_game_version: float
    allow_list: AllowList

    def check(self, envelope: Envelope) -> list[str]:
        """Return the rejection reasons for ``envelope``; empty means accepted."""

        if envelope.schema_ref != self.journal_schema:
            return [notes.unexpected_schema(envelope.schema_ref)]

        version = parse_game_version(envelope.game_version)
        if version is None or version < self.minimum_game_version:
            return [notes.legacy_game_version(envelope.game_version or "")]

        if not self.allow_list.is_permitted(envelope.software_name, envelope.software_version):
            return [notes.disallowed_software(envelope.software_name, envelope.software_version)]

        return []
