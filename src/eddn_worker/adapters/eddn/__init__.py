"""EDDN journal adapter: envelope schema, software allow list, archive readers."""

from __future__ import annotations

from .archive import archive_url, download_archives, iterate_days, read_archive_folder
from .software import SoftwareAllowList
from .translator import JournalDecoder, check_jump_message, decode_envelope, to_system_snapshot

__all__ = [
    "JournalDecoder",
    "SoftwareAllowList",
    "archive_url",
    "check_jump_message",
    "decode_envelope",
    "download_archives",
    "iterate_days",
    "read_archive_folder",
    "to_system_snapshot",
]
