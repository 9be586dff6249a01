"""App factory, version callback and the ingest command definition."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from photoingest import __version__
from photoingest.ui import console

logger = logging.getLogger(__name__)


# =============================================================================
# Version Callback
# =============================================================================


def version_callback(value: bool) -> None:
    """Print name and version and exit."""
    if value:
        console.print(f"photoingest {__version__}")
        raise typer.Exit()


# =============================================================================
# App Factory
# =============================================================================


MAIN_EPILOG = """
[bold cyan]Filename template tokens:[/]
  [green][%yyyy][/] [green][%yy][/] [green][%MM][/] [green][%dd][/] [green][%hh][/] [green][%mm][/] [green][%ss][/]  capture time
  [green][%FILE][/]  original file name without extension
  A [green]/[/] in the template files images into sub-directories.

[bold cyan]Examples:[/]
  photoingest /media/card ~/Pictures/inbox /mnt/backup/photos
  photoingest --new --dng /media/card ~/Pictures/inbox
  photoingest --dry-run --file-pattern "[%yyyy]/[%MM]/[%FILE]" /media/card ~/Pictures
"""


def make_app() -> typer.Typer:
    """Create and configure the Typer application."""
    return typer.Typer(
        name="photoingest",
        help="Copy photos from a card or folder into one or more destinations, "
        "renamed by capture date, with optional DNG conversion and JPEG extraction.",
        epilog=MAIN_EPILOG,
        rich_markup_mode="rich",
        pretty_exceptions_enable=True,
        pretty_exceptions_show_locals=False,
        no_args_is_help=True,
        add_completion=False,
        context_settings={"help_option_names": ["-h", "--help"]},
    )


# =============================================================================
# Ingest Command
# =============================================================================


def register_ingest_command(app: typer.Typer) -> None:
    """Register the single ingest command on the app."""

    @app.command()
    def ingest(
        source: Annotated[
            Path,
            typer.Argument(help="Directory to import from (e.g. a mounted memory card)."),
        ],
        destinations: Annotated[
            list[Path],
            typer.Argument(help="One or more destination directories; the first is primary."),
        ],
        file_pattern: Annotated[
            str | None,
            typer.Option(
                "--file-pattern",
                help="Destination name template. Default: img_[%yyyy][%MM][%dd]_[%FILE]",
            ),
        ] = None,
        dng: Annotated[
            bool | None,
            typer.Option("--dng/--no-dng", help="Convert raw files to DNG."),
        ] = None,
        dng_converter: Annotated[
            str | None,
            typer.Option("--dng-converter", help="DNG converter executable."),
        ] = None,
        dng_options: Annotated[
            str | None,
            typer.Option(
                "--dng-options",
                help="Converter arguments with [%INPUT] [%OUTPUT] [%OUTPUT_DIR] [%OUTPUT_FILE].",
            ),
        ] = None,
        dng_keep_raw: Annotated[
            bool | None,
            typer.Option("--dng-keep-raw/--no-dng-keep-raw", help="Keep raw files after conversion."),
        ] = None,
        jpg_extract: Annotated[
            bool | None,
            typer.Option("--jpg-extract/--no-jpg-extract", help="Extract embedded JPEGs from raw files."),
        ] = None,
        include: Annotated[
            list[str] | None,
            typer.Option("--include", help="Only import paths matching this regex (repeatable)."),
        ] = None,
        exclude: Annotated[
            list[str] | None,
            typer.Option("--exclude", help="Skip paths matching this regex (repeatable)."),
        ] = None,
        new: Annotated[
            bool | None,
            typer.Option(
                "--new/--no-new",
                " /--all",
                help="Only import files not recorded in the source's history (--all: every file).",
            ),
        ] = None,
        overwrite: Annotated[
            bool | None,
            typer.Option("--overwrite/--no-overwrite", help="Replace existing files instead of renaming."),
        ] = None,
        verify: Annotated[
            bool | None,
            typer.Option("--verify/--no-verify", help="Compare every copy byte for byte."),
        ] = None,
        dry_run: Annotated[
            bool,
            typer.Option("--dry-run", "--test", help="Show what would happen without changing anything."),
        ] = False,
        verbose: Annotated[
            bool,
            typer.Option("--verbose", "-v", help="Enable debug logging."),
        ] = False,
        config: Annotated[
            Path | None,
            typer.Option("--config", help="Config file (default: user config dir)."),
        ] = None,
        trash_dir: Annotated[
            Path | None,
            typer.Option("--trash-dir", help="Move displaced files here instead of the system trash."),
        ] = None,
        converter_timeout: Annotated[
            float | None,
            typer.Option("--converter-timeout", min=1, help="Seconds before the DNG converter is killed."),
        ] = None,
        log_file: Annotated[
            Path | None,
            typer.Option("--log-file", help="Also write a debug log to this file."),
        ] = None,
        version: Annotated[
            bool,
            typer.Option(
                "--version",
                callback=version_callback,
                is_eager=True,
                help="Show version and exit.",
            ),
        ] = False,
    ) -> None:
        """Import photos from SOURCE into every DESTINATION."""
        from photoingest.commands.ingest import cmd_ingest
        from photoingest.config import IngestOptions

        options = IngestOptions(
            source=source,
            destinations=list(destinations),
            config_file=config,
            file_pattern=file_pattern,
            include=list(include or []),
            exclude=list(exclude or []),
            dng=dng,
            dng_converter=dng_converter,
            dng_options=dng_options,
            dng_keep_raw=dng_keep_raw,
            jpg_extract=jpg_extract,
            incremental=new,
            overwrite=overwrite,
            verify=verify,
            trash_dir=trash_dir,
            converter_timeout=converter_timeout,
            log_file=log_file,
            dry_run=dry_run,
            verbose=verbose,
        )
        raise typer.Exit(cmd_ingest(options))
