"""
Derived artifacts: DNG conversion and embedded JPEG extraction.

Both run once per source file against the copy in the primary destination;
the pipeline then replicates the result to the other destinations.

The DNG converter is an external executable driven by an option template.
Tokens in the template are replaced per file (case-insensitive):

    [%INPUT]        full path of the raw file being converted
    [%OUTPUT]       full path of the DNG to write
    [%OUTPUT_DIR]   directory of the DNG to write
    [%OUTPUT_FILE]  file name of the DNG to write

The template is split on whitespace before substitution, so paths containing
spaces stay single arguments.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from photoingest.exceptions import (
    ConversionError,
    DngConverterError,
    ExifToolError,
    PreconditionError,
    PreviewExtractionError,
)
from photoingest.filters import is_dng, is_raw
from photoingest.metadata import MetadataSource
from photoingest.utils.cmd import CmdError, run, which

logger = logging.getLogger(__name__)

DNG_SUFFIX = ".dng"
JPG_SUFFIX = ".jpg"

DEFAULT_DNG_OPTIONS = "-c -p2 -d [%OUTPUT_DIR] -o [%OUTPUT_FILE] [%INPUT]"
DEFAULT_CONVERTER_TIMEOUT = 600.0

# Standard Adobe DNG Converter install locations
PLATFORM_CONVERTERS: dict[str, str] = {
    "darwin": "/Applications/Adobe DNG Converter.app/Contents/MacOS/Adobe DNG Converter",
    "win32": r"C:\Program Files\Adobe\Adobe DNG Converter.exe",
}

# Searched on PATH when no platform install is found; must accept the default options
PATH_CONVERTER_NAMES = ("dngconverter",)

_TOKEN = re.compile(r"\[%(INPUT|OUTPUT|OUTPUT_DIR|OUTPUT_FILE)\]", re.IGNORECASE)


def should_convert(name: str | Path) -> bool:
    """Raw files that are not already DNG."""
    return is_raw(name) and not is_dng(name)


def derived_suffixes(name: str | Path, *, convert: bool, extract: bool) -> list[str]:
    """Extensions of the artifacts that will be written beside ``name``."""
    if not is_raw(name):
        return []
    suffixes: list[str] = []
    if convert:
        suffixes.append(DNG_SUFFIX)
    if extract:
        suffixes.append(JPG_SUFFIX)
    return suffixes


def build_converter_args(options: str, source: Path, output: Path) -> list[str]:
    """
    Expand the option template for one conversion.

    Example:
        >>> build_converter_args("-d [%OUTPUT_DIR] [%INPUT]", Path("/a/x.nef"), Path("/b/x.dng"))
        ['-d', '/b', '/a/x.nef']
    """
    values = {
        "INPUT": str(source),
        "OUTPUT": str(output),
        "OUTPUT_DIR": str(output.parent),
        "OUTPUT_FILE": output.name,
    }
    return [_TOKEN.sub(lambda m: values[m.group(1).upper()], opt) for opt in options.split()]


class Converter(Protocol):
    """Raw to DNG conversion capability."""

    def convert(self, source: Path, output: Path) -> None: ...


@dataclass(frozen=True)
class DngConverter:
    """External DNG converter invocation."""

    executable: str
    options: str = DEFAULT_DNG_OPTIONS
    timeout: float | None = DEFAULT_CONVERTER_TIMEOUT

    def command(self, source: Path, output: Path) -> list[str]:
        return [self.executable, *build_converter_args(self.options, source, output)]

    def convert(self, source: Path, output: Path) -> None:
        """
        Convert ``source`` to ``output``.

        Raises:
            DngConverterError: If the converter exits non-zero, times out, or
                writes no output file
        """
        argv = self.command(source, output)
        logger.debug("Invoking DNG converter: %s", " ".join(argv))
        try:
            run(argv, timeout=self.timeout)
        except CmdError as e:
            raise DngConverterError(
                f"Unable to invoke DNG converter: {' '.join(argv)}",
                command=" ".join(argv),
                return_code=e.exit_code,
                stdout=e.stdout,
                stderr=e.stderr,
            ) from e
        if not output.exists():
            raise DngConverterError(
                f"DNG converter reported success but did not write {output}",
                command=" ".join(argv),
                return_code=0,
            )


def locate_dng_converter(configured: str | None = None) -> str:
    """
    Find a usable converter executable.

    Order: configured path or name, then the platform's standard Adobe DNG
    Converter location, then the names in ``PATH_CONVERTER_NAMES`` on PATH.

    Raises:
        PreconditionError: If no executable converter is found
    """
    if configured:
        resolved = which(configured)
        if resolved is None and os.path.isfile(configured) and os.access(configured, os.X_OK):
            resolved = configured
        if resolved is None:
            raise PreconditionError(f"{configured} cannot be executed", path=configured)
        return resolved

    default = next(
        (path for prefix, path in PLATFORM_CONVERTERS.items() if sys.platform.startswith(prefix)),
        None,
    )
    if default is not None and os.path.isfile(default) and os.access(default, os.X_OK):
        return default

    for name in PATH_CONVERTER_NAMES:
        resolved = which(name)
        if resolved is not None:
            logger.debug("Found DNG converter %s on PATH", resolved)
            return resolved

    if default is not None:
        raise PreconditionError(f"{default} cannot be executed", path=default)
    raise PreconditionError(
        f"Unable to automatically determine DNG converter for platform {sys.platform}. "
        f"Specify one with --dng-converter or put one of {', '.join(PATH_CONVERTER_NAMES)} on PATH"
    )


def extract_preview(source: Path, output: Path, metadata: MetadataSource) -> None:
    """
    Write the embedded JPEG of raw file ``source`` to ``output``.

    EXIF tags are copied from the raw file onto the JPEG; a failure there is
    logged and the JPEG is kept.

    Raises:
        PreviewExtractionError: If there is no embedded JPEG or it cannot be written
    """
    logger.debug("Extracting embedded JPG from %s to %s", source, output)
    try:
        data = metadata.extract_preview(source)
    except ExifToolError as e:
        raise PreviewExtractionError(str(e), source_path=source, target_path=output) from e
    if not data:
        raise PreviewExtractionError(
            f"No embedded JPEG found in {source}", source_path=source, target_path=output
        )

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(data)
    except OSError as e:
        raise PreviewExtractionError(
            f"Unable to write {output}: {e}", source_path=source, target_path=output
        ) from e

    try:
        metadata.copy_tags(source, output)
    except ExifToolError as e:
        logger.warning("Extracted %s without EXIF tags: %s", output, e)


def convert_to_dng(source: Path, output: Path, converter: Converter) -> None:
    """
    Convert raw file ``source`` to ``output`` with ``converter``.

    Raises:
        ConversionError: If the converter fails
    """
    logger.debug("Converting %s to %s", source, output)
    try:
        converter.convert(source, output)
    except DngConverterError as e:
        detail = f": {e.stderr.strip()}" if e.stderr and e.stderr.strip() else ""
        raise ConversionError(
            f"{e.message} (exit code {e.return_code}){detail}",
            source_path=source,
            target_path=output,
        ) from e
