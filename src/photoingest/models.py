"""Data models for photoingest."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class PipelineStage(Enum):
    """Stages that record per-file errors, in execution order."""

    COPY = "copy"
    PREVIEW = "preview"
    CONVERT = "convert"


@dataclass(frozen=True)
class CandidateFile:
    """A file discovered under the source directory."""

    path: Path  # Absolute path
    relative: str  # Path relative to the source directory (history key)


@dataclass
class PlannedFile:
    """
    A candidate together with its resolved destination name.

    ``resolved_name`` is relative to every destination directory and may
    contain sub-directories when the filename template does (e.g. "2010/09/x.jpg").
    It is computed once and reused for every destination and derived artifact.
    """

    candidate: CandidateFile
    resolved_name: str
    # Destinations where the original was copied (and verified when enabled)
    copied_to: list[Path] = field(default_factory=list)

    @property
    def source(self) -> Path:
        return self.candidate.path


@dataclass(frozen=True)
class FileError:
    """A recoverable per-file, per-destination failure."""

    stage: PipelineStage
    source: Path
    target: Path | None
    message: str

    def __str__(self) -> str:
        target = f" -> {self.target}" if self.target else ""
        return f"[{self.stage.value}] {self.source}{target}: {self.message}"


@dataclass
class RunResult:
    """Aggregate outcome of one import run."""

    processed: int = 0
    # Files left out by the history or the include/exclude patterns
    skipped: int = 0
    dry_run: bool = False
    errors: list[FileError] = field(default_factory=list)
    planned: list[PlannedFile] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def had_errors(self) -> bool:
        """True if at least one per-file error was recorded."""
        return bool(self.errors)

    @property
    def exit_code(self) -> int:
        return 1 if self.had_errors else 0

    def record(
        self,
        stage: PipelineStage,
        source: Path,
        target: Path | None,
        message: str,
    ) -> FileError:
        """Record an error and return it."""
        error = FileError(stage=stage, source=source, target=target, message=message)
        self.errors.append(error)
        return error
