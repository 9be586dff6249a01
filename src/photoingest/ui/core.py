"""Shared rich consoles.

Progress and plans go to ``console`` (stdout); fatal errors and the error
table go to ``err_console`` so they survive ``> log.txt`` redirection.
"""

from __future__ import annotations

from rich.console import Console
from rich.theme import Theme

PHOTOINGEST_THEME = Theme(
    {
        "info": "blue",
        "success": "green",
        "warning": "yellow",
        "error": "bold red",
        "step": "bold blue",
        "title": "bold",
        "dim": "dim",
        "path": "bright_blue",
        "primary": "bold green",
    }
)

console = Console(theme=PHOTOINGEST_THEME)
err_console = Console(theme=PHOTOINGEST_THEME, stderr=True)
