"""
Copying originals and derived artifacts into destination directories.

Handles:
- Moving an existing file at the target path to the trash before writing
- Creating sub-directories produced by the filename template
- Optional byte-for-byte verification of the written copy
"""

from __future__ import annotations

import filecmp
import logging
import os
import shutil
from pathlib import Path

from photoingest.exceptions import CopyError, VerificationError
from photoingest.trash import Trash

logger = logging.getLogger(__name__)


def verify_copy(source: Path, target: Path) -> bool:
    """True if ``target`` has exactly the same bytes as ``source``."""
    logger.debug("Verifying %s", target)
    try:
        return filecmp.cmp(source, target, shallow=False)
    except OSError as e:
        logger.debug("Verification could not read files: %s", e)
        return False


def clear_target(target: Path, trash: Trash) -> None:
    """
    Make ``target`` writable: trash an existing file, or create its parent dirs.

    Raises:
        TrashError: If an existing file cannot be moved to the trash
        CopyError: If the parent directory cannot be created
    """
    if os.path.lexists(target):
        trash.discard(target)
        return
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise CopyError(f"Unable to create directory {target.parent}: {e}", target_path=target) from e


def place_file(source: Path, target: Path, trash: Trash, *, verify: bool = False) -> None:
    """
    Copy ``source`` to ``target``, displacing any file already there.

    Args:
        source: File to copy
        target: Destination path (parent directories are created)
        trash: Where a displaced file goes
        verify: Compare the copy with the source afterwards

    Raises:
        TrashError: If an existing target cannot be moved to the trash
        CopyError: If the copy fails
        VerificationError: If the copy does not match the source
    """
    clear_target(target, trash)

    logger.debug("Copying %s to %s", source, target)
    try:
        shutil.copy2(source, target)
    except OSError as e:
        raise CopyError(
            f"Error copying file: {e}", source_path=source, target_path=target
        ) from e

    if verify and not verify_copy(source, target):
        raise VerificationError(
            f"Verification failed: {target}", source_path=source, target_path=target
        )
