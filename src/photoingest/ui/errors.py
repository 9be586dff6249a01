"""Per-file error summary printed at the end of a run."""

from __future__ import annotations

from collections.abc import Sequence

from rich.markup import escape
from rich.table import Table

from photoingest.models import FileError
from photoingest.ui.core import err_console


def print_error_summary(errors: Sequence[FileError], title: str = "Errors") -> None:
    """Print a table of recorded per-file errors.

    Args:
        errors: Errors recorded during the run
        title: Table title
    """
    if not errors:
        return

    table = Table(title=f"[error]{title} ({len(errors)})[/]", show_header=True, header_style="bold")
    table.add_column("Stage", style="yellow", no_wrap=True)
    table.add_column("File", style="cyan")
    table.add_column("Error")

    for error in errors:
        file_text = str(error.source)
        if error.target is not None:
            file_text += f"\n→ {error.target}"
        table.add_row(error.stage.value, escape(file_text), escape(error.message))

    err_console.print()
    err_console.print(table)
