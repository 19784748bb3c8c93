"""Failures that abort reconciliation of one message."""

from __future__ import annotations


class ReconciliationError(RuntimeError):
    """Base class for fatal, per-message reconciliation failures."""


class IntegrityViolation(ReconciliationError):  # noqa: N818
    """The message references state the caller guaranteed to have resolved."""


class ReconciliationTimeout(ReconciliationError, TimeoutError):  # noqa: N818
    """The unit of work ran past its time budget."""


class EnvelopeValidationError(ValueError):
    """The envelope cannot be parsed; ``reasons`` lists what is wrong with it."""

    def __init__(self, reasons: list[str]) -> None:
        super().__init__("; ".join(reasons))
        self.reasons = reasons
