"""
Destination filename generation from capture timestamps.

A filename template is literal text interleaved with bracketed placeholders:

    img_[%yyyy][%MM][%dd]_[%FILE]   ->   img_20100923_DSC_1234

Supported placeholders:
    [%yyyy]  four digit year
    [%yy]    two digit year
    [%MM]    month (01-12)
    [%dd]    day of month (01-31)
    [%hh]    hour, 24-hour clock
    [%mm]    minute
    [%ss]    second
    [%FILE]  original filename without its extension

Brackets only delimit segments. A bracketed segment that is not one of the
placeholders above is emitted as its bare text, so "[%foo]" becomes "%foo".

The original extension is appended unchanged (case preserved). A template may
contain "/" to place files in sub-directories of each destination.
It may not start with "/" or climb out with "..", see template_problem().
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import datetime
from pathlib import Path, PurePath, PureWindowsPath

from photoingest.metadata import CaptureTimestamps

logger = logging.getLogger(__name__)

DEFAULT_FILE_PATTERN = "img_[%yyyy][%MM][%dd]_[%FILE]"

_SEGMENT_SPLIT = re.compile(r"[\[\]]")
_PATH_SEPARATORS = re.compile(r"[\\/]")


def two_digit_year(year: int) -> int:
    """Two digit year with the tool's historical bases.

    Years before 2000 are offset from 1900, later years from 2000.
    """
    return year - 1900 if year < 2000 else year - 2000


_DATE_TOKENS: dict[str, Callable[[datetime], str]] = {
    "%yyyy": lambda ts: f"{ts.year:04d}",
    "%yy": lambda ts: f"{two_digit_year(ts.year):02d}",
    "%MM": lambda ts: f"{ts.month:02d}",
    "%dd": lambda ts: f"{ts.day:02d}",
    "%hh": lambda ts: f"{ts.hour:02d}",
    "%mm": lambda ts: f"{ts.minute:02d}",
    "%ss": lambda ts: f"{ts.second:02d}",
}

FILE_TOKEN = "%FILE"


def render_filename(template: str, stem: str, timestamp: datetime) -> str:
    """
    Render a base filename (without extension) from a template.

    Pure function of its arguments.

    Args:
        template: Filename template, e.g. "img_[%yyyy][%MM][%dd]_[%FILE]"
        stem: Original filename without extension (substituted for [%FILE])
        timestamp: Resolved capture timestamp

    Returns:
        Rendered name, e.g. "img_20100923_DSC_1234"
    """
    parts: list[str] = []
    for segment in _SEGMENT_SPLIT.split(template):
        if segment == FILE_TOKEN:
            parts.append(stem)
        elif segment in _DATE_TOKENS:
            parts.append(_DATE_TOKENS[segment](timestamp))
        else:
            parts.append(segment)
    return "".join(parts)


def template_problem(template: str) -> str | None:
    """
    Reason ``template`` cannot name a file inside a destination, or None.

    Rendered names are joined onto each destination directory, so they must
    stay relative and may not climb out with "..". The check runs on the
    template with its brackets removed, which is what literal segments
    render to; placeholders never produce separators.

    Example:
        >>> template_problem("/tmp/[%FILE]")
        "must be relative to the destination (no leading '/' or drive)"
    """
    if not template.strip():
        return "must not be empty"
    bare = _SEGMENT_SPLIT.sub("", template)
    if bare.startswith(("/", "\\")) or PureWindowsPath(bare).drive:
        return "must be relative to the destination (no leading '/' or drive)"
    if ".." in _PATH_SEPARATORS.split(bare):
        return "must not contain '..' path components"
    return None


def build_filename(template: str, source: Path, timestamp: datetime) -> str:
    """Render the template for ``source`` and append its original extension."""
    return render_filename(template, source.stem, timestamp) + source.suffix


def resolve_timestamp(timestamps: CaptureTimestamps | None, path: Path) -> datetime:
    """
    Pick the date used for naming.

    Order: original capture time, then creation time, then the file's
    last-modified time (local time) from the filesystem.

    Args:
        timestamps: Values read from the file's metadata (None if unreadable)
        path: Source file, used for the modification-time fallback

    Returns:
        The resolved timestamp
    """
    if timestamps is not None:
        if timestamps.original is not None:
            return timestamps.original
        if timestamps.created is not None:
            logger.debug("No original capture time for %s, using creation time", path)
            return timestamps.created

    logger.debug("No EXIF date found for %s, using file modification time", path)
    return datetime.fromtimestamp(path.stat().st_mtime)


# =============================================================================
# Name manipulation helpers
# =============================================================================


def split_name(name: str) -> tuple[str, str, str]:
    """
    Split a (possibly nested) resolved name into directory, stem and extension.

    Example:
        >>> split_name("2010/09/img_DSC_1.NEF")
        ('2010/09', 'img_DSC_1', '.NEF')
    """
    p = PurePath(name)
    parent = str(p.parent)
    return ("" if parent == "." else parent), p.stem, p.suffix


def _join(directory: str, filename: str) -> str:
    return str(PurePath(directory, filename)) if directory else filename


def indexed_name(name: str, index: int) -> str:
    """
    Name with a disambiguating index appended to the stem.

    Index 0 means "no suffix" and returns the name unchanged.

    Example:
        >>> indexed_name("img.jpg", 2)
        'img-2.jpg'
    """
    if index == 0:
        return name
    directory, stem, ext = split_name(name)
    return _join(directory, f"{stem}-{index}{ext}")


def derived_name(name: str, suffix: str) -> str:
    """
    Name of a derived artifact: same directory and stem, new extension.

    Example:
        >>> derived_name("img_DSC_1.NEF", ".dng")
        'img_DSC_1.dng'
    """
    directory, stem, _ = split_name(name)
    return _join(directory, f"{stem}{suffix}")
