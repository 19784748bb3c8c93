"""Thread-pool ingress feeding decoded envelopes to the coordinator."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Self

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from concurrent.futures import Future
    from types import TracebackType

    from eddn_worker.domain.coordinator import ProcessingOutcome

log = getLogger(__name__)

type MessageHandler = Callable[[Mapping[str, object]], ProcessingOutcome]


@dataclass(slots=True)
class IngressStats:
    delivered: int = 0
    applied: int = 0
    skipped: int = 0
    failed: int = 0


class ThreadPoolIngress:
    """Runs ``handler`` for each delivered envelope on a bounded pool of threads.

    ``deliver`` blocks once ``max_pending`` envelopes are queued, so a fast
    producer cannot outrun the database.
    """

    def __init__(
        self,
        handler: MessageHandler,
        *,
        max_workers: int = 4,
        max_pending: int | None = None,
    ) -> None:
        self._handler = handler
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="eddn-worker"
        )
        self._slots = threading.BoundedSemaphore(max_pending or max_workers * 4)
        self._lock = threading.Lock()
        self.stats = IngressStats()

    def deliver(self, envelope: Mapping[str, object]) -> None:
        self._slots.acquire()
        try:
            future = self._executor.submit(self._handler, envelope)
        except BaseException:
            self._slots.release()
            raise
        future.add_done_callback(self._completed)

    def _completed(self, future: Future[ProcessingOutcome]) -> None:
        self._slots.release()
        with self._lock:
            self.stats.delivered += 1
            exc = future.exception()
            if exc is not None:
                self.stats.failed += 1
                log.error("Message handler raised", exc_info=exc)
            elif future.result().applied:
                self.stats.applied += 1
            else:
                self.stats.skipped += 1

    def close(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close(wait=True)


if TYPE_CHECKING:
    from eddn_worker.domain.ports import Ingress

    def _ingress_check(ingress: ThreadPoolIngress) -> Ingress:
        return ingress
