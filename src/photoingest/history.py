"""
Import history for incremental runs.

Each source directory carries a plain text file listing the paths (relative
to the source directory) of every file imported from it, one per line in
first-seen order:

    DCIM/100NIKON/DSC_0001.NEF
    DCIM/100NIKON/DSC_0002.NEF

The file is append-only: a run loads it once at start and appends the files
it processed at the end. It is never rewritten or pruned.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from photoingest.exceptions import HistoryError

logger = logging.getLogger(__name__)

HISTORY_FILENAME = "photoingest-history.txt"


def history_path(source_dir: Path) -> Path:
    """Location of the history file for a source directory."""
    return source_dir / HISTORY_FILENAME


class HistoryStore:
    """Set of previously imported relative paths backed by an append-only file."""

    def __init__(self, path: Path, entries: Iterable[str] = ()) -> None:
        self.path = path
        self.entries: set[str] = set(entries)

    @classmethod
    def load(cls, path: Path) -> HistoryStore:
        """
        Read a history file.

        A missing file is an empty history, not an error.

        Raises:
            HistoryError: If the file exists but cannot be read
        """
        try:
            with open(path, encoding="utf-8") as f:
                entries = [line.rstrip("\r\n") for line in f]
        except FileNotFoundError:
            logger.debug("No history file at %s", path)
            return cls(path)
        except (OSError, UnicodeDecodeError) as e:
            raise HistoryError(f"Unable to read history file {path}: {e}", history_file=path) from e

        store = cls(path, (e for e in entries if e))
        logger.debug("Loaded %d history entries from %s", len(store.entries), path)
        return store

    def contains(self, relative: str) -> bool:
        return relative in self.entries

    __contains__ = contains

    def __len__(self) -> int:
        return len(self.entries)

    def append(self, relative: str) -> None:
        """
        Append one entry to the file.

        Does not check for duplicates; callers test ``contains`` first.

        Raises:
            HistoryError: If the file cannot be written
        """
        self._write([relative])
        self.entries.add(relative)

    def append_many(self, relatives: Iterable[str]) -> int:
        """
        Append every entry not already recorded, in order, with one open.

        Returns:
            Number of lines written

        Raises:
            HistoryError: If the file cannot be written
        """
        new: list[str] = []
        seen = set(self.entries)
        for relative in relatives:
            if relative not in seen:
                new.append(relative)
                seen.add(relative)
        if new:
            self._write(new)
            self.entries.update(new)
        return len(new)

    def _write(self, lines: list[str]) -> None:
        try:
            # Line buffered: every entry reaches disk as soon as it is written
            with open(self.path, "a", encoding="utf-8", newline="\n", buffering=1) as f:
                for line in lines:
                    f.write(f"{line}\n")
        except OSError as e:
            raise HistoryError(
                f"Unable to open {self.path} for writing: {e}", history_file=self.path
            ) from e
