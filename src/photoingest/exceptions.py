"""
Errors raised by photoingest.

Two families matter to the import pipeline. ``PipelineError`` and its
subclasses describe a problem with one file at one destination; the
pipeline records them and moves on. Everything else that reaches the
command layer (bad configuration, missing directories, unusable history
file) aborts the run before or instead of touching files.

    PhotoIngestError
    ├── ConfigurationError      option or config-file value rejected
    ├── PreconditionError       source/destination/tool unusable
    ├── HistoryError            history file unreadable or unwritable
    ├── PipelineError           per-file failure, carries the stage
    │   ├── CopyError
    │   ├── VerificationError
    │   ├── ConversionError
    │   ├── PreviewExtractionError
    │   └── TrashError
    └── ExternalToolError       exiftool or converter process failed
        ├── ExifToolError
        └── DngConverterError
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


def _with(details: dict[str, Any] | None, **values: Any) -> dict[str, Any]:
    """Merge the non-empty ``values`` into ``details`` as log-friendly scalars."""
    merged = dict(details or {})
    for key, value in values.items():
        if value is None or value == "":
            continue
        merged[key] = str(value) if isinstance(value, Path) else value
    return merged


class PhotoIngestError(Exception):
    """Root of the photoingest error tree.

    Attributes:
        message: Text shown to the user
        details: Structured context for log records
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Fatal errors
# =============================================================================


class ConfigurationError(PhotoIngestError):
    """An option or config-file entry could not be used."""

    def __init__(
        self,
        message: str,
        *,
        config_file: Path | str | None = None,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            details=_with(details, config_file=str(config_file) if config_file else None, field=field),
        )
        self.config_file = config_file
        self.field = field


class PreconditionError(PhotoIngestError):
    """The run cannot start: a directory or external tool is unusable."""

    def __init__(
        self, message: str, *, path: Path | str | None = None, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message, details=_with(details, path=str(path) if path else None))
        self.path = path


class HistoryError(PhotoIngestError):
    """Reading or appending the import history failed."""

    def __init__(
        self,
        message: str,
        *,
        history_file: Path | str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message, details=_with(details, history_file=str(history_file) if history_file else None)
        )
        self.history_file = history_file


# =============================================================================
# Per-file errors
# =============================================================================


class PipelineError(PhotoIngestError):
    """One file failed at one stage; the batch continues.

    Subclasses fill in ``stage`` through ``default_stage`` so callers only
    pass the paths involved.
    """

    default_stage: str | None = None

    def __init__(
        self,
        message: str,
        *,
        stage: str | None = None,
        source_path: Path | str | None = None,
        target_path: Path | str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        stage = stage or self.default_stage
        super().__init__(
            message,
            details=_with(
                details,
                stage=stage,
                source_path=str(source_path) if source_path else None,
                target_path=str(target_path) if target_path else None,
            ),
        )
        self.stage = stage
        self.source_path = source_path
        self.target_path = target_path


class CopyError(PipelineError):
    default_stage = "copy"


class VerificationError(PipelineError):
    """Destination bytes differ from the source after copying."""

    default_stage = "verify"


class ConversionError(PipelineError):
    default_stage = "convert"


class PreviewExtractionError(PipelineError):
    default_stage = "preview"


class TrashError(PipelineError):
    """A file in the way could not be moved to the trash."""

    default_stage = "trash"


# =============================================================================
# Subprocess errors
# =============================================================================


class ExternalToolError(PhotoIngestError):
    """An external program exited badly or could not be started."""

    default_tool: str | None = None

    def __init__(
        self,
        message: str,
        *,
        tool: str | None = None,
        command: str | None = None,
        return_code: int | None = None,
        stdout: str | None = None,
        stderr: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        tool = tool or self.default_tool
        super().__init__(
            message,
            details=_with(
                details, tool=tool, command=command, return_code=return_code, stdout=stdout, stderr=stderr
            ),
        )
        self.tool = tool
        self.command = command
        self.return_code = return_code
        self.stdout = stdout
        self.stderr = stderr


class ExifToolError(ExternalToolError):
    default_tool = "exiftool"


class DngConverterError(ExternalToolError):
    default_tool = "dng-converter"
