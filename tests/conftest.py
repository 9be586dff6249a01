"""Shared pytest fixtures and helpers for photoingest tests."""

from __future__ import annotations

import os
import shutil
from datetime import datetime
from pathlib import Path

import pytest

from photoingest.config import ImportRun
from photoingest.env_settings import clear_env_settings_cache
from photoingest.exceptions import DngConverterError, ExifToolError
from photoingest.metadata import CaptureTimestamps
from photoingest.utils.cmd import CmdResult

CAPTURE_TIME = datetime(2010, 9, 23, 14, 5, 9)
PREVIEW_BYTES = b"\xff\xd8\xff\xe0fake-jpeg\xff\xd9"


def make_cmd_result(
    stdout: str = "",
    stderr: str = "",
    exit_code: int = 0,
    argv: tuple[str, ...] = ("exiftool",),
    raw_stdout: bytes | None = None,
) -> CmdResult:
    """Create a CmdResult for mocking run() calls in tests.

    Args:
        stdout: Command stdout output.
        stderr: Command stderr output.
        exit_code: Command exit code.
        argv: Command arguments tuple.
        raw_stdout: Undecoded stdout (defaults to ``stdout`` encoded).

    Returns:
        CmdResult with the specified values.
    """
    return CmdResult(
        argv=argv,
        stdout=stdout,
        stderr=stderr,
        exit_code=exit_code,
        raw_stdout=stdout.encode() if raw_stdout is None else raw_stdout,
    )


# =============================================================================
# Fakes for external capabilities
# =============================================================================


class FakeMetadata:
    """MetadataSource returning fixed timestamps and a fixed preview."""

    def __init__(
        self,
        timestamps: dict[str, CaptureTimestamps] | None = None,
        default: datetime | None = CAPTURE_TIME,
        preview: bytes | None = PREVIEW_BYTES,
        fail_preview: bool = False,
    ) -> None:
        self.timestamps = timestamps or {}
        self.default = default
        self.preview = preview
        self.fail_preview = fail_preview
        self.read_calls: list[Path] = []
        self.preview_calls: list[Path] = []
        self.copy_tag_calls: list[tuple[Path, Path]] = []

    def read_timestamps(self, path: Path) -> CaptureTimestamps:
        self.read_calls.append(path)
        if path.name in self.timestamps:
            return self.timestamps[path.name]
        return CaptureTimestamps(original=self.default)

    def extract_preview(self, path: Path) -> bytes | None:
        self.preview_calls.append(path)
        if self.fail_preview:
            raise ExifToolError(f"Unable to read JpgFromRaw from {path}", return_code=1)
        return self.preview

    def copy_tags(self, source: Path, target: Path) -> None:
        self.copy_tag_calls.append((source, target))


class FakeConverter:
    """Converter writing a recognisable DNG next to the output path."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple[Path, Path]] = []

    def convert(self, source: Path, output: Path) -> None:
        self.calls.append((source, output))
        if self.fail:
            raise DngConverterError("Unable to invoke DNG converter", return_code=3, stderr="bad raw")
        output.write_bytes(b"DNG:" + source.read_bytes())


class RecordingTrash:
    """Trash that moves files into a directory and remembers what it took."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory
        self.discarded: list[Path] = []

    def discard(self, path: Path) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self.discarded.append(path)
        shutil.move(str(path), str(self.directory / f"{len(self.discarded)}-{path.name}"))


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep the user's config and PHOTOINGEST_* variables out of every test."""
    for key in list(os.environ):
        if key.startswith("PHOTOINGEST_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("PHOTOINGEST_CONFIG_DIR", str(tmp_path / "user-config"))
    clear_env_settings_cache()
    yield
    clear_env_settings_cache()


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """Source tree resembling a memory card."""
    source = tmp_path / "card"
    dcim = source / "DCIM" / "100NIKON"
    dcim.mkdir(parents=True)
    (dcim / "DSC_0001.NEF").write_bytes(b"raw-one")
    (dcim / "DSC_0002.JPG").write_bytes(b"jpeg-two")
    (source / "notes").write_bytes(b"no extension")
    return source


@pytest.fixture
def dest_dirs(tmp_path: Path) -> list[Path]:
    """Three empty destination directories."""
    dests = [tmp_path / "dest1", tmp_path / "dest2", tmp_path / "dest3"]
    for d in dests:
        d.mkdir()
    return dests


@pytest.fixture
def trash(tmp_path: Path) -> RecordingTrash:
    return RecordingTrash(tmp_path / "trash")


@pytest.fixture
def fake_metadata() -> FakeMetadata:
    return FakeMetadata()


@pytest.fixture
def fake_converter() -> FakeConverter:
    return FakeConverter()


def make_run(source: Path, destinations: list[Path], **overrides) -> ImportRun:
    """ImportRun with test-friendly defaults (no preview extraction, no DNG)."""
    values = {"extract_jpg": False}
    values.update(overrides)
    return ImportRun(source=source, destinations=tuple(destinations), **values)


def snapshot(*roots: Path) -> dict[str, bytes]:
    """Every file under ``roots`` mapped to its content."""
    files: dict[str, bytes] = {}
    for root in roots:
        for dirpath, _, filenames in os.walk(root):
            for name in filenames:
                path = Path(dirpath) / name
                files[str(path)] = path.read_bytes()
    return files
