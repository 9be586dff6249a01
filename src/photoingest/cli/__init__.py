"""photoingest CLI built with Typer and Rich.

A single command: ``photoingest [OPTIONS] SOURCE DEST...``
"""

from __future__ import annotations

from photoingest.cli._app import make_app, register_ingest_command, version_callback

app = make_app()
register_ingest_command(app)


# =============================================================================
# Entry Point
# =============================================================================


def main() -> int:
    """Main entry point for the CLI."""
    try:
        app()
        return 0
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 0


__all__ = ["app", "main", "make_app", "register_ingest_command", "version_callback"]
