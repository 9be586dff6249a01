"""
Metadata access for image files via the exiftool command line.

The pipeline needs three things from a file's metadata:
    - the original capture timestamp (EXIF DateTimeOriginal)
    - the creation timestamp (EXIF/QuickTime CreateDate)
    - the embedded full-size JPEG of a raw file (JpgFromRaw, else PreviewImage)

Everything is behind the MetadataSource protocol so the pipeline can be run
against a fake in tests and on machines without exiftool.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from photoingest.exceptions import ExifToolError
from photoingest.utils.cmd import CmdError, run

logger = logging.getLogger(__name__)

ORIGINAL_TAG = "DateTimeOriginal"
CREATED_TAG = "CreateDate"

# Tags holding an embedded JPEG, most complete first
PREVIEW_TAGS = ("JpgFromRaw", "PreviewImage")

EXIFTOOL_TIMEOUT = 60


@dataclass(frozen=True)
class CaptureTimestamps:
    """Timestamps read from a file's metadata; None when the tag is absent."""

    original: datetime | None = None
    created: datetime | None = None


class MetadataSource(Protocol):
    """Read-only metadata capability used by the pipeline."""

    def read_timestamps(self, path: Path) -> CaptureTimestamps: ...

    def extract_preview(self, path: Path) -> bytes | None: ...

    def copy_tags(self, source: Path, target: Path) -> None: ...


_EXIF_DT = re.compile(
    r"^(?P<y>\d{4}):(?P<m>\d{2}):(?P<d>\d{2})[ T]"
    r"(?P<H>\d{2}):(?P<M>\d{2}):(?P<S>\d{2})"
    r"(?:\.(?P<sub>\d+))?(?P<tz>Z|[+\-]\d{2}:?\d{2})?$"
)


def parse_exif_datetime(value: Any) -> datetime | None:
    """
    Parse an EXIF "YYYY:MM:DD HH:MM:SS" value into a naive datetime.

    Sub-seconds and zone offsets are accepted and dropped: names are built
    from the camera's wall-clock time. Zeroed placeholder dates are treated
    as missing.
    """
    if value is None:
        return None
    s = str(value).strip()
    if not s or s.startswith(("0000:00:00", "0001:01:01")):
        return None

    m = _EXIF_DT.match(s)
    if not m:
        return None
    try:
        return datetime(
            int(m["y"]), int(m["m"]), int(m["d"]), int(m["H"]), int(m["M"]), int(m["S"])
        )
    except ValueError:
        return None


class ExifToolMetadata:
    """MetadataSource backed by the exiftool executable."""

    def __init__(self, exiftool: str = "exiftool", *, timeout: float = EXIFTOOL_TIMEOUT) -> None:
        self.exiftool = exiftool
        self.timeout = timeout
        self._warned_missing = False

    def read_timestamps(self, path: Path) -> CaptureTimestamps:
        """
        Read capture/creation timestamps.

        Failures to run exiftool are logged and reported as "no timestamps",
        so naming falls back to the file modification time.
        """
        argv = [self.exiftool, "-j", f"-{ORIGINAL_TAG}", f"-{CREATED_TAG}", str(path)]
        try:
            result = run(argv, timeout=self.timeout)
        except CmdError as e:
            if e.exit_code == -1 and not self._warned_missing:
                logger.warning("exiftool unavailable (%s); using file modification times", e)
                self._warned_missing = True
            else:
                logger.warning("exiftool could not read %s: %s", path, e.stderr.strip())
            return CaptureTimestamps()

        try:
            records = json.loads(result.stdout or "[]")
        except json.JSONDecodeError:
            logger.warning("Unparseable exiftool output for %s", path)
            return CaptureTimestamps()

        tags: dict[str, Any] = records[0] if records else {}
        return CaptureTimestamps(
            original=parse_exif_datetime(tags.get(ORIGINAL_TAG)),
            created=parse_exif_datetime(tags.get(CREATED_TAG)),
        )

    def extract_preview(self, path: Path) -> bytes | None:
        """
        Return the largest embedded JPEG of a raw file, or None if it has none.

        Raises:
            ExifToolError: If exiftool fails
        """
        for tag in PREVIEW_TAGS:
            argv = [self.exiftool, "-b", f"-{tag}", str(path)]
            try:
                result = run(argv, timeout=self.timeout)
            except CmdError as e:
                raise ExifToolError(
                    f"Unable to read {tag} from {path}",
                    command=" ".join(e.argv),
                    return_code=e.exit_code,
                    stderr=e.stderr,
                ) from e
            if result.raw_stdout:
                logger.debug("Read %d bytes of %s from %s", len(result.raw_stdout), tag, path)
                return result.raw_stdout
        return None

    def copy_tags(self, source: Path, target: Path) -> None:
        """
        Copy EXIF tags from ``source`` onto ``target`` in place.

        Raises:
            ExifToolError: If exiftool fails
        """
        argv = [
            self.exiftool,
            "-overwrite_original",
            "-TagsFromFile",
            str(source),
            "-exif:all>exif:all",
            str(target),
        ]
        try:
            run(argv, timeout=self.timeout)
        except CmdError as e:
            raise ExifToolError(
                f"Unable to copy EXIF tags from {source} to {target}",
                command=" ".join(e.argv),
                return_code=e.exit_code,
                stderr=e.stderr,
            ) from e
