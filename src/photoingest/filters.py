"""
Source file selection.

Walks the source tree and keeps the files that should be imported:
regular files, not the history file, not already imported (incremental mode),
matching at least one include pattern and no exclude pattern.

Patterns are case-insensitive regular expressions searched anywhere in the
file's full path string.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from photoingest.history import HISTORY_FILENAME, HistoryStore, history_path
from photoingest.models import CandidateFile

logger = logging.getLogger(__name__)

RAW_EXTENSIONS: tuple[str, ...] = (
    "nef", "nrw",  # Nikon
    "crw", "cr2", "cr3",  # Canon
    "orf",  # Olympus
    "arw", "srf", "sr2",  # Sony
    "3fr",  # Hasselblad
    "bay",  # Casio
    "cap", "iiq", "eip",  # Phase One
    "dcs", "dcr", "drf", "k25", "kdc",  # Kodak
    "dng",  # Adobe, Leica, Pentax, Ricoh, Samsung
    "erf",  # Epson
    "fff",  # Imacon
    "mef",  # Mamiya
    "mos",  # Leaf
    "mrw",  # Minolta
    "ptx", "pef",  # Pentax
    "pxn",  # Logitech
    "r3d",  # Red
    "raf",  # Fuji
    "raw", "rw2",  # Panasonic
    "rw1",  # Leica
    "rwz",  # Rawzor
    "x3f",  # Sigma
)  # fmt: skip

_RAW_SUFFIXES = frozenset(f".{ext}" for ext in RAW_EXTENSIONS)

# Anything with an extension
DEFAULT_INCLUDE_PATTERNS: tuple[str, ...] = (r"\.[^./\\]+$",)
DEFAULT_EXCLUDE_PATTERNS: tuple[str, ...] = (rf"(^|[/\\]){re.escape(HISTORY_FILENAME)}$",)


def is_raw(name: str | Path) -> bool:
    """True if the file has a camera raw extension (DNG included)."""
    return Path(name).suffix.lower() in _RAW_SUFFIXES


def is_dng(name: str | Path) -> bool:
    return Path(name).suffix.lower() == ".dng"


def compile_patterns(patterns: Iterable[str]) -> tuple[re.Pattern[str], ...]:
    """Compile case-insensitive patterns. Raises re.error on a bad pattern."""
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


@dataclass(frozen=True)
class InclusionFilter:
    """Include/exclude pattern matcher over full path strings."""

    include: tuple[re.Pattern[str], ...]
    exclude: tuple[re.Pattern[str], ...]

    @classmethod
    def from_patterns(
        cls,
        include: Sequence[str] | None = None,
        exclude: Sequence[str] | None = None,
    ) -> InclusionFilter:
        """Build a filter; empty/None lists fall back to the defaults."""
        return cls(
            include=compile_patterns(include or DEFAULT_INCLUDE_PATTERNS),
            exclude=compile_patterns(exclude or DEFAULT_EXCLUDE_PATTERNS),
        )

    def matches(self, path: Path | str) -> bool:
        text = str(path)
        if not any(p.search(text) for p in self.include):
            return False
        return not any(p.search(text) for p in self.exclude)


def relative_key(path: Path, source_dir: Path) -> str:
    """History key for a file: its path relative to the source directory."""
    return os.path.relpath(path, source_dir)


def should_process(
    path: Path,
    source_dir: Path,
    history: HistoryStore,
    inclusion: InclusionFilter,
    incremental: bool,
) -> bool:
    """
    Decide whether a discovered file is eligible for import.

    Args:
        path: Absolute path of the discovered entry
        source_dir: Absolute source directory
        history: Previously imported paths
        inclusion: Include/exclude patterns
        incremental: Skip files already present in the history

    Returns:
        True if the file should be imported
    """
    if not path.is_file():
        return False

    if path == history_path(source_dir):
        return False

    if incremental and history.contains(relative_key(path, source_dir)):
        logger.debug("Ignoring previously processed file: %s", path)
        return False

    if not inclusion.matches(path):
        logger.debug("Not selected by include/exclude patterns: %s", path)
        return False

    return True


def scan_source(
    source_dir: Path,
    history: HistoryStore,
    inclusion: InclusionFilter,
    incremental: bool,
    *,
    skipped: list[Path] | None = None,
) -> list[CandidateFile]:
    """
    Walk ``source_dir`` recursively and return the eligible files.

    Directories and files are visited in sorted order so runs are repeatable.

    Args:
        skipped: When given, receives every file left out by the history or
            the include/exclude patterns (the history file itself excluded)
    """
    candidates: list[CandidateFile] = []
    own_history = history_path(source_dir)
    for root, dirs, files in os.walk(source_dir):
        dirs.sort()
        for filename in sorted(files):
            path = Path(root) / filename
            if should_process(path, source_dir, history, inclusion, incremental):
                candidates.append(CandidateFile(path=path, relative=relative_key(path, source_dir)))
            elif skipped is not None and path != own_history:
                skipped.append(path)

    logger.debug("Selected %d files under %s", len(candidates), source_dir)
    return candidates
