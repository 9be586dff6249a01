"""Tests for rich console output helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from photoingest.models import CandidateFile, FileError, PipelineStage, PlannedFile
from photoingest.ui import (
    fatal_error,
    print_dry_run,
    print_error_summary,
    print_import_plan,
    print_summary,
)


class TestMessages:
    def test_dry_run_prefix(self, capsys: pytest.CaptureFixture[str]) -> None:
        print_dry_run("Would copy a.jpg")
        assert "[DRY RUN] Would copy a.jpg" in capsys.readouterr().out

    def test_markup_in_message_is_literal(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Template text like [%FILE] is printed as-is."""
        print_dry_run("Would copy [bold]x[/bold]")
        assert "[bold]x[/bold]" in capsys.readouterr().out

    def test_fatal_error_goes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        fatal_error("Source missing", "Check the card is mounted")
        err = capsys.readouterr().err
        assert "Error: Source missing" in err
        assert "Hint: Check the card is mounted" in err


class TestPanels:
    def test_summary(self, capsys: pytest.CaptureFixture[str]) -> None:
        print_summary(5, 1, 2, duration=12.5)
        out = capsys.readouterr().out
        assert "5 processed" in out
        assert "1 failed" in out
        assert "2 skipped" in out
        assert "(12.5s)" in out

    def test_dry_run_summary(self, capsys: pytest.CaptureFixture[str]) -> None:
        print_summary(3, 0, dry_run=True)
        assert "3 planned" in capsys.readouterr().out


class TestTables:
    def test_import_plan(self, capsys: pytest.CaptureFixture[str]) -> None:
        planned = [
            PlannedFile(
                candidate=CandidateFile(path=Path("/card/a.NEF"), relative="a.NEF"),
                resolved_name="img_a.NEF",
            )
        ]
        print_import_plan(planned, [Path("/d1"), Path("/d2")])
        out = capsys.readouterr().out
        assert "img_a.NEF" in out
        assert "2 destinations" in out

    def test_empty_plan(self, capsys: pytest.CaptureFixture[str]) -> None:
        print_import_plan([], [Path("/d1")])
        assert "Nothing to import" in capsys.readouterr().out

    def test_error_summary(self, capsys: pytest.CaptureFixture[str]) -> None:
        errors = [FileError(PipelineStage.COPY, Path("/card/a.jpg"), Path("/d/a.jpg"), "disk full")]
        print_error_summary(errors)
        err = capsys.readouterr().err
        assert "disk full" in err
        assert "copy" in err

    def test_no_errors_prints_nothing(self, capsys: pytest.CaptureFixture[str]) -> None:
        print_error_summary([])
        assert capsys.readouterr().err == ""
