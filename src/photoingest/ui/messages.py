"""One-line status output used while the pipeline runs.

Every helper escapes its text: file names and naming templates contain
square brackets that rich would otherwise read as markup.
"""

from __future__ import annotations

from rich.markup import escape

from photoingest.ui.core import console, err_console


def print_step(step_num: int, total_steps: int, title: str) -> None:
    """Stage heading, e.g. ``Step 3/6: Copying originals``."""
    console.print(f"[step]Step {step_num}/{total_steps}:[/] {escape(title)}")


def print_success(message: str) -> None:
    console.print(f"  [success]✓[/] {escape(message)}")


def print_info(message: str) -> None:
    console.print(f"  [info]→[/] {escape(message)}")


def print_dry_run(message: str) -> None:
    """
    Report an action that dry-run mode skipped.

    Example:
        >>> print_dry_run("Would copy DSC_0001.NEF to /backup/img_20100923_DSC_0001.NEF")
          [DRY RUN] Would copy DSC_0001.NEF to /backup/img_20100923_DSC_0001.NEF
    """
    console.print(f"  [warning]\\[DRY RUN][/] {escape(message)}")


def fatal_error(message: str, hint: str | None = None) -> None:
    """Report why the run stopped, on stderr, with an optional next step."""
    err_console.print()
    err_console.print(f"[error]Error:[/] {escape(message)}")
    if hint:
        err_console.print(f"[dim]Hint: {escape(hint)}[/]")
