"""
Import orchestration.

Coordinates all processing steps, each over the whole file list before the
next one starts:
1. Scan (source traversal + inclusion filter)
2. Naming (template rendering + conflict resolution)
3. Copy (every destination, trash-before-overwrite, optional verification)
4. Preview extraction (raw files, once from the primary destination, then replicated)
5. DNG conversion (raw files, once from the primary destination, then replicated)
6. History (append processed relative paths)

Per-file failures are recorded in the RunResult and never stop the batch.
Fatal errors (HistoryError, preconditions) propagate to the caller.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from photoingest.config import ImportRun
from photoingest.derive import (
    DNG_SUFFIX,
    JPG_SUFFIX,
    Converter,
    convert_to_dng,
    derived_suffixes,
    extract_preview,
    should_convert,
)
from photoingest.exceptions import ConfigurationError, PipelineError
from photoingest.fileops import clear_target, place_file
from photoingest.filters import is_raw, scan_source
from photoingest.history import HistoryStore
from photoingest.metadata import MetadataSource
from photoingest.models import CandidateFile, PipelineStage, PlannedFile, RunResult
from photoingest.naming import build_filename, derived_name, resolve_timestamp, template_problem
from photoingest.resolver import DestinationIndex, ReservingIndex, occupied_names, resolve_conflicts
from photoingest.trash import Trash
from photoingest.ui import (
    console,
    print_dry_run,
    print_import_plan,
    print_info,
    print_step,
    print_success,
)

logger = logging.getLogger(__name__)


class ImportPipeline:
    """
    One import run over a fixed configuration.

    External capabilities (metadata, trash, converter, destination index) are
    passed in so the pipeline can run against fakes.
    """

    def __init__(
        self,
        run: ImportRun,
        *,
        metadata: MetadataSource,
        trash: Trash,
        converter: Converter | None = None,
        index: DestinationIndex | None = None,
    ) -> None:
        if run.convert_dng and converter is None:
            raise ConfigurationError("DNG conversion is enabled but no converter was provided")
        problem = template_problem(run.file_pattern)
        if problem:
            raise ConfigurationError(
                f"File pattern {problem}: '{run.file_pattern}'", field="file_pattern"
            )
        self.run = run
        self.metadata = metadata
        self.trash = trash
        self.converter = converter
        self.index = ReservingIndex(index)
        self.result = RunResult(dry_run=run.dry_run)
        self.history = HistoryStore(run.history_file)

    # =========================================================================
    # Entry point
    # =========================================================================

    def execute(self) -> RunResult:
        """Run every stage and return the aggregate result."""
        started = time.monotonic()
        run = self.run

        stages: list[tuple[str, Callable[[list[PlannedFile]], None]]] = [
            ("Copying files", self.copy_originals),
        ]
        if run.extract_jpg:
            stages.append(("Extracting JPEGs from raw files", self.extract_previews))
        if run.convert_dng:
            stages.append(("Converting raw files to DNG", self.convert_raws))
        stages.append(("Writing processing history", self.write_history))
        total = len(stages) + 2

        print_step(1, total, "Scanning source")
        self.history = HistoryStore.load(run.history_file)
        skipped: list[Path] = []
        candidates = scan_source(
            run.source, self.history, run.inclusion_filter(), run.incremental, skipped=skipped
        )
        self.result.processed = len(candidates)
        self.result.skipped = len(skipped)
        print_info(f"Processing {len(candidates)} file{'s' if len(candidates) != 1 else ''}")
        if skipped:
            print_info(f"Skipping {len(skipped)} (already imported or not selected)")

        print_step(2, total, "Generating filenames")
        planned = self.plan_names(candidates)
        self.result.planned = planned
        if run.dry_run:
            print_import_plan(planned, run.destinations)

        for step, (title, stage) in enumerate(stages, start=3):
            print_step(step, total, title)
            stage(planned)

        self.result.duration_seconds = time.monotonic() - started
        return self.result

    # =========================================================================
    # Stages
    # =========================================================================

    def plan_names(self, candidates: list[CandidateFile]) -> list[PlannedFile]:
        """Compute the resolved name of every candidate before anything is copied."""
        run = self.run
        planned: list[PlannedFile] = []
        for candidate in candidates:
            timestamps = self.metadata.read_timestamps(candidate.path)
            timestamp = resolve_timestamp(timestamps, candidate.path)
            name = build_filename(run.file_pattern, candidate.path, timestamp)
            suffixes = derived_suffixes(
                candidate.path, convert=run.convert_dng, extract=run.extract_jpg
            )
            if not run.overwrite:
                name = resolve_conflicts(
                    name,
                    run.destinations,
                    suffixes,
                    index=self.index,
                    strategy=run.scan_strategy,
                )
                self.index.reserve(run.destinations, occupied_names(name, suffixes))
            logger.debug("%s -> %s", candidate.relative, name)
            planned.append(PlannedFile(candidate=candidate, resolved_name=name))
        return planned

    def copy_originals(self, planned: list[PlannedFile]) -> None:
        """Copy each source file to every destination under its resolved name."""
        run = self.run
        for item in planned:
            for dest in run.destinations:
                target = dest / item.resolved_name
                if run.dry_run:
                    self._report_displaced(target)
                    print_dry_run(f"Would copy {item.source} to {target}")
                    continue
                logger.debug("Copying %s to %s", item.source, target)
                try:
                    place_file(item.source, target, self.trash, verify=run.verify)
                except PipelineError as e:
                    self._fail(PipelineStage.COPY, item.source, target, e)
                    continue
                item.copied_to.append(dest)
            if not run.dry_run and len(item.copied_to) == len(run.destinations):
                print_success(f"{item.candidate.relative} -> {item.resolved_name}")

    def extract_previews(self, planned: list[PlannedFile]) -> None:
        """Extract the embedded JPEG of raw files once and replicate it."""
        for item in planned:
            if not is_raw(item.source):
                continue
            jpg_name = derived_name(item.resolved_name, JPG_SUFFIX)
            self._derive(
                item,
                jpg_name,
                PipelineStage.PREVIEW,
                lambda raw, out: extract_preview(raw, out, self.metadata),
                verb="extract JPEG from",
            )

    def convert_raws(self, planned: list[PlannedFile]) -> None:
        """Convert raw files to DNG once, replicate, then trash the raw copies."""
        run = self.run
        converter = self.converter
        if converter is None:
            raise ConfigurationError("DNG conversion is enabled but no converter was provided")
        for item in planned:
            if not should_convert(item.source):
                continue
            dng_name = derived_name(item.resolved_name, DNG_SUFFIX)
            converted = self._derive(
                item,
                dng_name,
                PipelineStage.CONVERT,
                lambda raw, out: convert_to_dng(raw, out, converter),
                verb="convert",
            )
            if run.keep_raw:
                continue
            for dest in converted:
                raw = dest / item.resolved_name
                if run.dry_run:
                    print_dry_run(f"Would move {raw} to trash")
                    continue
                try:
                    self.trash.discard(raw)
                except PipelineError as e:
                    self._fail(PipelineStage.CONVERT, item.source, raw, e)

    def write_history(self, planned: list[PlannedFile]) -> None:
        """Record every processed file so incremental runs skip it next time."""
        relatives = [item.candidate.relative for item in planned]
        if self.run.dry_run:
            new = [r for r in relatives if not self.history.contains(r)]
            print_dry_run(f"Would add {len(new)} entries to {self.run.history_file}")
            return
        written = self.history.append_many(relatives)
        logger.debug("Appended %d entries to %s", written, self.run.history_file)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _derive(
        self,
        item: PlannedFile,
        derived: str,
        stage: PipelineStage,
        produce: Callable[[Path, Path], None],
        *,
        verb: str,
    ) -> list[Path]:
        """
        Produce one derived artifact from the primary copy and replicate it.

        Returns:
            Destinations that now hold the derived artifact
        """
        run = self.run
        primary = run.primary
        raw = primary / item.resolved_name
        output = primary / derived

        if run.dry_run:
            self._report_displaced(output)
            print_dry_run(f"Would {verb} {raw} to {output}")
            for dest in run.replicas:
                self._report_displaced(dest / derived)
                print_dry_run(f"Would copy {output} to {dest / derived}")
            return list(run.destinations)

        if primary not in item.copied_to:
            logger.debug("Skipping %s for %s: not present in %s", stage.value, item.source, primary)
            return []

        logger.debug("Deriving %s from %s", output, raw)
        try:
            clear_target(output, self.trash)
            produce(raw, output)
        except PipelineError as e:
            self._fail(stage, item.source, output, e)
            return []

        done = [primary]
        for dest in run.replicas:
            if dest not in item.copied_to:
                continue
            target = dest / derived
            logger.debug("Copying %s to %s", output, target)
            try:
                place_file(output, target, self.trash, verify=run.verify)
            except PipelineError as e:
                self._fail(stage, item.source, target, e)
                continue
            done.append(dest)
        return done

    def _report_displaced(self, target: Path) -> None:
        if target.exists():
            print_dry_run(f"Would move existing {target} to trash")

    def _fail(self, stage: PipelineStage, source: Path, target: Path | None, error: Exception) -> None:
        logger.error("%s", self.result.record(stage, source, target, str(error)))


def run_import(
    run: ImportRun,
    *,
    metadata: MetadataSource,
    trash: Trash,
    converter: Converter | None = None,
    index: DestinationIndex | None = None,
) -> RunResult:
    """
    Import every eligible file of ``run.source`` into ``run.destinations``.

    Args:
        run: Validated run configuration
        metadata: Timestamp and preview source
        trash: Where displaced files go
        converter: DNG converter, required when ``run.convert_dng``
        index: Destination existence query (defaults to the filesystem)

    Returns:
        RunResult with per-file errors recorded

    Raises:
        HistoryError: If the history file cannot be read or written
        ConfigurationError: If conversion is enabled without a converter, or
            the file pattern would name files outside the destinations
    """
    if run.dry_run:
        console.print("[warning]Dry run: no files will be written, moved or trashed[/]")
    return ImportPipeline(
        run, metadata=metadata, trash=trash, converter=converter, index=index
    ).execute()
