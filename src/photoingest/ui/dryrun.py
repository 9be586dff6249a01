"""Dry-run output: the import plan as a table."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from rich.markup import escape
from rich.table import Table

from photoingest.models import PlannedFile
from photoingest.ui.core import console


def print_import_plan(planned: Sequence[PlannedFile], destinations: Sequence[Path]) -> None:
    """Print source to destination name mapping for every planned file.

    Args:
        planned: Files with their resolved names
        destinations: Destination directories, primary first
    """
    if not planned:
        console.print("  [dim]Nothing to import[/]")
        return

    table = Table(
        title=f"Import plan ({len(destinations)} destination{'s' if len(destinations) != 1 else ''})",
        show_header=True,
        header_style="bold",
        title_style="bold",
    )
    table.add_column("Source", style="dim")
    table.add_column("Name", style="green")

    for item in planned:
        table.add_row(escape(item.candidate.relative), escape(item.resolved_name))

    console.print(table)
    console.print()
