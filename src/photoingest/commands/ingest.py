"""The ingest command: copy, rename and derive photos from one source."""

from __future__ import annotations

import logging

from pydantic import ValidationError as PydanticValidationError

from photoingest.config import (
    ImportRun,
    IngestOptions,
    build_import_run,
    load_config_file,
    validate_preconditions,
)
from photoingest.derive import DngConverter
from photoingest.env_settings import get_env_settings
from photoingest.exceptions import (
    ConfigurationError,
    HistoryError,
    PreconditionError,
)
from photoingest.logging_setup import setup_logging
from photoingest.metadata import ExifToolMetadata
from photoingest.trash import select_trash
from photoingest.ui import (
    fatal_error,
    print_error_summary,
    print_header,
    print_summary,
)
from photoingest.workflow import run_import

logger = logging.getLogger(__name__)

EXIT_FATAL = 2


def _make_converter(run: ImportRun) -> DngConverter | None:
    if not run.convert_dng:
        return None
    if not run.dng_converter:
        raise ConfigurationError(
            "DNG conversion is enabled but no converter was located", field="dng_converter"
        )
    return DngConverter(run.dng_converter, run.dng_options, run.converter_timeout)


def cmd_ingest(options: IngestOptions) -> int:
    """Run one import and return the exit code."""
    try:
        env = get_env_settings()
    except PydanticValidationError as e:
        fatal_error(f"Invalid PHOTOINGEST_* environment: {e}")
        return EXIT_FATAL

    log_file = options.log_file or env.log_file or None

    try:
        setup_logging(env.log_level, log_file, verbose=options.verbose)
        file_config = load_config_file(options.config_file)
        if file_config.log_file and not options.log_file:
            setup_logging(env.log_level, file_config.log_file, verbose=options.verbose)
        run = build_import_run(options, file_config, env)
        run = validate_preconditions(run)
        converter = _make_converter(run)
    except ConfigurationError as e:
        fatal_error(e.message, "Check the command-line options and config.yaml")
        return EXIT_FATAL
    except PreconditionError as e:
        fatal_error(e.message)
        return EXIT_FATAL

    print_header(run.source, run.destinations, dry_run=run.dry_run)
    logger.debug("Run configuration: %s", run)

    try:
        result = run_import(
            run,
            metadata=ExifToolMetadata(run.exiftool),
            trash=select_trash(run.trash_dir),
            converter=converter,
        )
    except HistoryError as e:
        fatal_error(e.message, "Check permissions on the source directory")
        return EXIT_FATAL

    print_error_summary(result.errors)
    print_summary(
        processed=result.processed,
        failed=len(result.errors),
        skipped=result.skipped,
        duration=result.duration_seconds,
        dry_run=result.dry_run,
    )
    return result.exit_code
