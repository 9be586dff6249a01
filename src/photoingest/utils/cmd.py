"""Subprocess wrapper used for exiftool and the DNG converter.

Both tools are run with captured output. exiftool's ``-b`` mode writes
binary JPEG data to stdout, so the undecoded bytes are kept next to the
decoded text.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# Longest stderr excerpt carried in a CmdError message
STDERR_EXCERPT = 500


@dataclass
class CmdResult:
    """Captured outcome of a finished process."""

    argv: tuple[str, ...]
    stdout: str
    stderr: str
    exit_code: int
    raw_stdout: bytes = field(default=b"", repr=False)

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class CmdError(Exception):
    """A process exited with an unexpected code, timed out, or never started.

    ``exit_code`` is -1 when there is no real exit status (timeout or
    launch failure).
    """

    def __init__(
        self,
        *,
        argv: Sequence[str],
        exit_code: int,
        stdout: str | bytes = "",
        stderr: str | bytes = "",
    ) -> None:
        self.argv = tuple(argv)
        self.exit_code = exit_code
        self.stdout = _decode(stdout)
        self.stderr = _decode(stderr)

        text = f"{self.argv[0] if self.argv else '?'} exited with {exit_code}"
        if self.stderr.strip():
            text = f"{text}: {self.stderr.strip()[:STDERR_EXCERPT]}"
        super().__init__(text)


def _decode(data: str | bytes | None) -> str:
    if not data:
        return ""
    if isinstance(data, str):
        return data
    return data.decode("utf-8", errors="replace")


def run(
    argv: Sequence[str],
    *,
    timeout: float | int | None = None,
    ok_codes: Iterable[int] = (0,),
) -> CmdResult:
    """
    Execute ``argv`` without a shell and wait for it.

    Args:
        argv: Program followed by its arguments; items are stringified
        timeout: Seconds before the process is killed (None waits forever)
        ok_codes: Exit statuses that count as success

    Returns:
        CmdResult for an accepted exit status

    Raises:
        ValueError: If ``argv`` is empty
        CmdError: On an unaccepted exit status, a timeout, or an OSError
            while launching
    """
    if not argv:
        raise ValueError("argv cannot be empty")

    args = [str(part) for part in argv]
    logger.debug("exec: %s", " ".join(args))

    try:
        completed = subprocess.run(args, capture_output=True, timeout=timeout, check=False)
    except subprocess.TimeoutExpired as e:
        raise CmdError(
            argv=args, exit_code=-1, stdout=e.stdout or b"", stderr=f"timed out after {timeout}s"
        ) from e
    except OSError as e:
        raise CmdError(argv=args, exit_code=-1, stderr=str(e)) from e

    if completed.returncode not in tuple(ok_codes):
        raise CmdError(
            argv=args,
            exit_code=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )

    return CmdResult(
        argv=tuple(args),
        stdout=_decode(completed.stdout),
        stderr=_decode(completed.stderr),
        exit_code=completed.returncode,
        raw_stdout=completed.stdout or b"",
    )


def which(name: str) -> str | None:
    """Full path of an executable name or path, None when not runnable."""
    return shutil.which(name)
