"""Readers for the daily bz2-compressed JSONL archives of the EDDN journal feed."""

from __future__ import annotations

import bz2
import json
from contextlib import ExitStack
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final

import httpx
from httpx_retries import Retry, RetryTransport

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from datetime import date
    from pathlib import Path

log = getLogger(__name__)

CHUNK_SIZE: Final[int] = 64 * 1024
_DEFAULT_TIMEOUT_SECONDS: Final[float] = 60.0


def archive_file_name(day: date) -> str:
    return f"Journal.FSDJump-{day:%Y-%m-%d}.jsonl.bz2"


def archive_url(base_url: str, day: date) -> str:
    """``<base>/<YYYY-MM>/Journal.FSDJump-<YYYY-MM-DD>.jsonl.bz2``"""

    return f"{base_url.rstrip('/')}/{day:%Y-%m}/{archive_file_name(day)}"


def iterate_days(start: date, end: date) -> Iterator[date]:
    """Yield every day from ``start`` to ``end``, both inclusive."""

    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def decompress_chunks(chunks: Iterable[bytes]) -> Iterator[bytes]:
    """Decompress a possibly multi-stream bz2 byte stream incrementally."""

    decompressor = bz2.BZ2Decompressor()
    for chunk in chunks:
        data = chunk
        while data:
            if decompressor.eof:
                # a new stream follows the previous one
                decompressor = bz2.BZ2Decompressor()
            output = decompressor.decompress(data)
            if output:
                yield output
            data = decompressor.unused_data if decompressor.eof else b""


def split_lines(blocks: Iterable[bytes]) -> Iterator[str]:
    pending = b""
    for block in blocks:
        pending += block
        *lines, pending = pending.split(b"\n")
        for line in lines:
            if line.strip():
                yield line.decode("utf-8")
    if pending.strip():
        yield pending.decode("utf-8")


def parse_lines(lines: Iterable[str], *, source: str) -> Iterator[dict[str, Any]]:
    """Parse JSONL records, logging and skipping malformed lines."""

    for number, line in enumerate(lines, start=1):
        try:
            record = json.loads(line)
        except json.JSONDecodeError as exc:
            log.warning("Skipping malformed line %d of %s: %s", number, source, exc)
            continue
        if not isinstance(record, dict):
            log.warning("Skipping non-object line %d of %s", number, source)
            continue
        yield record


def _read_file(path: Path) -> Iterator[bytes]:
    with path.open("rb") as handle:
        while chunk := handle.read(CHUNK_SIZE):
            yield chunk


def read_archive_folder(folder: Path) -> Iterator[dict[str, Any]]:
    """Yield every envelope of every ``*.bz2`` file in ``folder``, files in name order."""

    for path in sorted(folder.iterdir(), key=lambda entry: entry.name):
        if not path.is_file() or path.suffix != ".bz2":
            continue
        log.info("Processing %s", path)
        try:
            yield from parse_lines(
                split_lines(decompress_chunks(_read_file(path))), source=str(path)
            )
        except OSError as exc:
            log.warning("Error reading archive %s: %s", path, exc)


def build_download_client(*, timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS) -> httpx.Client:
    retry = Retry(total=4, backoff_factor=0.5, status_forcelist=[429, 500, 502, 503, 504])
    return httpx.Client(
        transport=RetryTransport(retry=retry),
        timeout=timeout_seconds,
        follow_redirects=True,
    )


def download_archives(
    base_url: str,
    start: date,
    end: date,
    *,
    client: httpx.Client | None = None,
) -> Iterator[dict[str, Any]]:
    """Stream and decompress the archive of every day in ``[start, end]``.

    A day whose archive cannot be fetched is logged and skipped.
    """

    with ExitStack() as stack:
        http = client if client is not None else stack.enter_context(build_download_client())
        for day in iterate_days(start, end):
            url = archive_url(base_url, day)
            log.info("Download from %s", url)
            try:
                with http.stream("GET", url) as response:
                    response.raise_for_status()
                    lines = split_lines(decompress_chunks(response.iter_bytes(CHUNK_SIZE)))
                    yield from parse_lines(lines, source=url)
            except httpx.HTTPError as exc:
                log.warning("Error getting archive %s: %s", url, exc)
            except OSError as exc:
                log.warning("Error decompressing archive %s: %s", url, exc)
