"""Opening panel and closing summary of an import run."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule

from photoingest.ui.core import console


def print_header(source: Path, destinations: Sequence[Path], dry_run: bool = False) -> None:
    """Show where files come from and where they go, primary first."""
    lines = [f"[dim]from[/] [path]{escape(str(source))}[/]"]
    for index, dest in enumerate(destinations):
        role = "[primary]primary[/]" if index == 0 else "[dim]replica[/]"
        lines.append(f"[dim]to[/]   [path]{escape(str(dest))}[/] ({role})")
    if dry_run:
        lines.append("[warning]\\[DRY RUN] nothing will be written[/]")

    console.print(Panel("\n".join(lines), title="[title]Photo import[/]", border_style="blue", expand=False))
    console.print()


def print_summary(
    processed: int,
    failed: int,
    skipped: int = 0,
    duration: float | None = None,
    dry_run: bool = False,
) -> None:
    """
    Print the closing counts line.

    Args:
        processed: Files taken through the pipeline (or planned, in dry-run)
        failed: Per-file errors recorded
        skipped: Files left out by history or filters
        duration: Wall time in seconds
        dry_run: Report counts as planned
    """
    counts = [f"[success]{processed} {'planned' if dry_run else 'processed'}[/]"]
    if failed:
        counts.append(f"[error]{failed} failed[/]")
    if skipped:
        counts.append(f"[dim]{skipped} skipped[/]")

    line = f"[title]Summary:[/] {', '.join(counts)}"
    if duration is not None:
        line += f" [dim]({duration:.1f}s)[/]"

    console.print()
    console.print(Rule(style="dim"))
    console.print(line)
