from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from datetime import date
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any, TextIO

from dotenv import load_dotenv

from eddn_worker.adapters.eddn import download_archives, read_archive_folder
from eddn_worker.adapters.ingress import ThreadPoolIngress
from eddn_worker.app import build_coordinator
from eddn_worker.config import ConfigurationError, configure_logging, get_archive_config

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Sequence
    from types import FrameType

    from eddn_worker.config import ArchiveConfig
    from eddn_worker.domain.coordinator import TransactionCoordinator

log = logging.getLogger(__name__)

type CoordinatorFactory = Callable[..., TransactionCoordinator]


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Reconcile EDDN journal messages into system and faction histories"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ...)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    handle = subparsers.add_parser("handle", help="Process JSON envelopes, one per line")
    handle.add_argument(
        "source",
        type=str,
        help="Path to a JSON-lines file, or '-' to read standard input",
    )

    archive = subparsers.add_parser(
        "load-archive",
        help="Replay daily Journal.FSDJump archives in archival-replay mode",
    )
    archive.add_argument(
        "--folder",
        type=str,
        help="Folder of .jsonl.bz2 archives (defaults to ARCHIVE_FOLDER)",
    )
    archive.add_argument(
        "--url",
        type=str,
        help="Archive root URL to download from (defaults to DOWNLOAD_URL)",
    )
    archive.add_argument(
        "--start",
        type=str,
        help="First day to download, YYYY-MM-DD (defaults to DOWNLOAD_START_DATE)",
    )
    archive.add_argument(
        "--end",
        type=str,
        help="Last day to download, YYYY-MM-DD (defaults to DOWNLOAD_END_DATE)",
    )
    archive.add_argument(
        "--workers",
        type=int,
        help="Number of worker threads (defaults to WORKER_THREADS)",
    )

    return parser.parse_args(list(argv))


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid date (expected YYYY-MM-DD): {value}") from exc


def _read_envelopes(stream: TextIO) -> Iterator[dict[str, Any]]:
    for number, line in enumerate(stream, start=1):
        if not line.strip():
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError as exc:
            log.warning("Skipping line %d: invalid JSON (%s)", number, exc)
            continue
        if isinstance(record, dict):
            yield record
        else:
            log.warning("Skipping line %d: not a JSON object", number)


def handle_envelopes(
    envelopes: Iterable[dict[str, Any]], coordinator: TransactionCoordinator
) -> tuple[int, int]:
    """Process envelopes in order and return ``(processed, applied)``."""

    processed = 0
    applied = 0
    for envelope in envelopes:
        outcome = coordinator.handle(envelope)
        processed += 1
        applied += int(outcome.applied)
    return processed, applied


def _run_handle(
    args: argparse.Namespace, coordinator_factory: CoordinatorFactory, out: TextIO
) -> None:
    coordinator = coordinator_factory()
    if args.source == "-":
        processed, applied = handle_envelopes(_read_envelopes(sys.stdin), coordinator)
    else:
        with Path(args.source).expanduser().open(encoding="utf-8") as stream:
            processed, applied = handle_envelopes(_read_envelopes(stream), coordinator)
    out.write(f"processed={processed} applied={applied} skipped={processed - applied}\n")


def _archive_settings(args: argparse.Namespace, defaults: ArchiveConfig) -> ArchiveConfig:
    folder = Path(args.folder).expanduser() if args.folder else defaults.folder
    start = _parse_date(args.start) if args.start else defaults.start_date
    end = _parse_date(args.end) if args.end else defaults.end_date
    workers = args.workers if args.workers is not None else defaults.worker_threads
    if workers < 1:
        raise ValueError("--workers must be at least 1")
    if folder is None and (start is None or end is None):
        raise ValueError("Pass --folder, or both --start and --end to download archives")
    if start is not None and end is not None and start > end:
        raise ValueError("Archive start date must not be after the end date")
    return type(defaults)(
        folder=folder,
        download_url=args.url or defaults.download_url,
        start_date=start,
        end_date=end,
        worker_threads=workers,
    )


def _archive_records(settings: ArchiveConfig) -> Iterator[dict[str, Any]]:
    if settings.folder is not None:
        return read_archive_folder(settings.folder)
    assert settings.start_date is not None
    assert settings.end_date is not None
    return download_archives(settings.download_url, settings.start_date, settings.end_date)


def _run_load_archive(
    settings: ArchiveConfig, coordinator_factory: CoordinatorFactory, out: TextIO
) -> None:
    coordinator = coordinator_factory(load_archive=True)
    started = time.monotonic()
    with ThreadPoolIngress(coordinator.handle, max_workers=settings.worker_threads) as ingress:
        for count, envelope in enumerate(_archive_records(settings), start=1):
            ingress.deliver(envelope)
            if count % 1000 == 0:
                elapsed = time.monotonic() - started
                log.info(
                    "Queued %d messages in %.1fs (%.2f ms/message)",
                    count,
                    elapsed,
                    elapsed * 1000 / count,
                )
    stats = ingress.stats
    out.write(
        f"delivered={stats.delivered} applied={stats.applied} skipped={stats.skipped} "
        f"failed={stats.failed} seconds={time.monotonic() - started:.1f}\n"
    )


def main(
    argv: Sequence[str] | None = None,
    *,
    coordinator_factory: CoordinatorFactory = build_coordinator,
    out: TextIO | None = None,
) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    stdout = out or sys.stdout
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=getattr(logging, parsed_args.log_level.upper(), logging.INFO))
        archive_settings = (
            _archive_settings(parsed_args, get_archive_config())
            if parsed_args.command == "load-archive"
            else None
        )
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "handle":
            _run_handle(parsed_args, coordinator_factory, stdout)
        elif parsed_args.command == "load-archive" and archive_settings is not None:
            _run_load_archive(archive_settings, coordinator_factory, stdout)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except Exception:
        log.exception("Fatal error while processing messages")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console-script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
