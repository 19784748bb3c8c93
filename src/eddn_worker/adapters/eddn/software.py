"""Producing-software allow/deny list backed by regexes and semver ranges."""

from __future__ import annotations

import re
from functools import cache
from logging import getLogger
from typing import TYPE_CHECKING

import nodesemver

from eddn_worker.config import ANY_VERSION

if TYPE_CHECKING:
    from eddn_worker.config import SoftwareGuard, SoftwareGuards

log = getLogger(__name__)


@cache
def _pattern(expression: str) -> re.Pattern[str]:
    return re.compile(expression)


def _name_matches(guard: SoftwareGuard, software_name: str) -> bool:
    return _pattern(guard.software_name).search(software_name) is not None


def version_satisfies(version: str, version_range: str) -> bool:
    """Loose semver check; an unparseable version never satisfies a range."""

    try:
        return bool(nodesemver.satisfies(version, version_range, loose=True))
    except (ValueError, TypeError):
        log.debug("Unparseable software version %r for range %r", version, version_range)
        return False


class SoftwareAllowList:
    """Decides whether messages from a given producer are trusted.

    A deny entry wins over any allow entry. A deny entry with ``allVersions``
    rejects the producer outright; otherwise it rejects only the versions in
    its range, unless that range is the ``0.0.0`` placeholder. Producers
    matching no allow entry are rejected.
    """

    def __init__(self, guards: SoftwareGuards) -> None:
        self._guards = guards

    def is_permitted(self, software_name: str, software_version: str) -> bool:
        for guard in self._guards.disallowed:
            if not _name_matches(guard, software_name):
                continue
            if guard.all_versions:
                return False
            if guard.software_version != ANY_VERSION and version_satisfies(
                software_version, guard.software_version
            ):
                return False

        return any(
            _name_matches(guard, software_name)
            and version_satisfies(software_version, guard.software_version)
            for guard in self._guards.allowed
        )
