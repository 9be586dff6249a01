"""photoingest UI - Rich console output components.

Modules:
    core: Console instances and theme
    messages: Simple print helpers (step, success, error, warning, info)
    panels: Run header and summary
    dryrun: Import plan table shown in dry-run mode
    errors: Per-file error summary

Usage:
    from photoingest.ui import console, print_success, print_header
"""

from __future__ import annotations

from photoingest.ui.core import PHOTOINGEST_THEME, console, err_console
from photoingest.ui.dryrun import print_import_plan
from photoingest.ui.errors import print_error_summary
from photoingest.ui.messages import (
    fatal_error,
    print_dry_run,
    print_info,
    print_step,
    print_success,
)
from photoingest.ui.panels import print_header, print_summary

__all__ = [
    "PHOTOINGEST_THEME",
    "console",
    "err_console",
    "fatal_error",
    "print_dry_run",
    "print_error_summary",
    "print_header",
    "print_import_plan",
    "print_info",
    "print_step",
    "print_success",
    "print_summary",
]
