"""
Moving displaced files out of the way.

Files that would be overwritten (overwrite mode, re-derived artifacts) and raw
originals replaced by a DNG are never deleted outright. They go to the
desktop trash / recycle bin through send2trash, or to a plain directory when
one is configured with --trash-dir.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Protocol

from send2trash import send2trash

from photoingest.exceptions import TrashError

logger = logging.getLogger(__name__)


class Trash(Protocol):
    """Capability to discard a file recoverably."""

    def discard(self, path: Path) -> None: ...


class SystemTrash:
    """Platform trash (macOS Trash, Windows Recycle Bin, freedesktop trash)."""

    def discard(self, path: Path) -> None:
        logger.debug("Moving %s to trash", path)
        try:
            send2trash(path)
        except OSError as e:
            raise TrashError(f"Unable to move {path} to trash: {e}", target_path=path) from e


class DirectoryTrash:
    """Trash implemented as a plain directory; name clashes get a numeric suffix."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def _target_for(self, path: Path) -> Path:
        target = self.directory / path.name
        n = 1
        while target.exists():
            target = self.directory / f"{path.stem}.{n}{path.suffix}"
            n += 1
        return target

    def discard(self, path: Path) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            target = self._target_for(path)
            logger.debug("Moving %s to %s", path, target)
            shutil.move(str(path), str(target))
        except OSError as e:
            raise TrashError(
                f"Unable to move {path} to {self.directory}: {e}", target_path=path
            ) from e


def select_trash(trash_dir: Path | None = None) -> Trash:
    """Pick the trash implementation once at startup."""
    if trash_dir is not None:
        return DirectoryTrash(trash_dir)
    return SystemTrash()
