"""Command handlers invoked by the CLI.

Handlers take parsed options and return a process exit code:
0 = success, 1 = at least one per-file error, 2 = fatal (nothing imported).
"""

from __future__ import annotations

from photoingest.commands.ingest import EXIT_FATAL, cmd_ingest

__all__ = ["EXIT_FATAL", "cmd_ingest"]
