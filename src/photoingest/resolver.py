"""
Destination name conflict resolution.

A resolved name must be free in every destination directory, together with
the names of the derived artifacts (DNG, extracted JPEG) that will be written
next to it. When a name is taken anywhere, an index is appended to the stem
("img.jpg" -> "img-1.jpg" -> "img-2.jpg" ...) and the scan repeats.

Existence checks go through a DestinationIndex so the scan can run against the
filesystem, against names already claimed earlier in the same run, or against
an in-memory listing in tests.

Destinations are assumed to be exclusively owned by the running import: a
directory modified concurrently by another process can still produce a
collision at copy time.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Sequence
from enum import Enum
from pathlib import Path
from typing import Protocol

from photoingest.naming import derived_name, indexed_name

logger = logging.getLogger(__name__)


class ScanStrategy(Enum):
    """How destinations are rescanned after the index is bumped."""

    # A conflict found only in the first destination is resolved there without
    # forcing another pass; a conflict in any later destination restarts the
    # scan from the first one.
    SHORT_CIRCUIT = "short-circuit"
    # Every bump rechecks all destinations.
    FULL_RESCAN = "full-rescan"


class DestinationIndex(Protocol):
    """Read-only existence query over destination directories."""

    def exists(self, destination: Path, name: str) -> bool: ...


class FilesystemIndex:
    """DestinationIndex backed by the live filesystem."""

    def exists(self, destination: Path, name: str) -> bool:
        # lexists: a dangling symlink still occupies the name
        return os.path.lexists(destination / name)


class ReservingIndex:
    """
    DestinationIndex that also treats names claimed earlier in this run as taken.

    All names are resolved before any file is copied, so without reservations
    two sources with the same rendered name would be given the same target.
    """

    def __init__(self, base: DestinationIndex | None = None) -> None:
        self.base = base or FilesystemIndex()
        self._reserved: set[tuple[Path, str]] = set()

    def exists(self, destination: Path, name: str) -> bool:
        return (destination, name) in self._reserved or self.base.exists(destination, name)

    def reserve(self, destinations: Iterable[Path], names: Iterable[str]) -> None:
        names = list(names)
        for destination in destinations:
            for name in names:
                self._reserved.add((destination, name))


def occupied_names(name: str, derived_suffixes: Sequence[str]) -> list[str]:
    """The resolved name plus every derived artifact name written beside it."""
    return [name, *(derived_name(name, suffix) for suffix in derived_suffixes)]


def _is_taken(
    index: DestinationIndex,
    destination: Path,
    name: str,
    derived_suffixes: Sequence[str],
) -> bool:
    for candidate in occupied_names(name, derived_suffixes):
        if index.exists(destination, candidate):
            logger.debug("Conflict found at %s", destination / candidate)
            return True
    return False


def resolve_conflicts(
    candidate: str,
    destinations: Sequence[Path],
    derived_suffixes: Sequence[str] = (),
    *,
    index: DestinationIndex | None = None,
    strategy: ScanStrategy = ScanStrategy.SHORT_CIRCUIT,
) -> str:
    """
    Find a name that is free in every destination.

    Args:
        candidate: Rendered name, e.g. "img_20100923_DSC_1234.NEF"
        destinations: Destination directories, primary first
        derived_suffixes: Extensions of derived artifacts that will be written
            beside the file (e.g. [".dng", ".jpg"]); empty for non-raw files
        index: Existence query (defaults to the filesystem)
        strategy: Rescan policy after each index bump

    Returns:
        ``candidate`` itself, or ``stem-N.ext`` with the smallest N reached by
        the scan. The output depends only on the index, never on file content.
    """
    index = index or FilesystemIndex()
    counter = 0
    name = candidate

    if strategy is ScanStrategy.FULL_RESCAN:
        while any(_is_taken(index, d, name, derived_suffixes) for d in destinations):
            counter += 1
            name = indexed_name(candidate, counter)
        return name

    while True:
        conflict = False
        for position, destination in enumerate(destinations):
            while _is_taken(index, destination, name, derived_suffixes):
                counter += 1
                name = indexed_name(candidate, counter)
                if position > 0:
                    conflict = True
        if not conflict:
            return name
