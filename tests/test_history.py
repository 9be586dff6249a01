"""Tests for the append-only import history."""

from __future__ import annotations

from pathlib import Path

import pytest

from photoingest.exceptions import HistoryError
from photoingest.history import HISTORY_FILENAME, HistoryStore, history_path


class TestHistoryPath:
    def test_lives_in_source_dir(self, tmp_path: Path) -> None:
        assert history_path(tmp_path) == tmp_path / HISTORY_FILENAME
        assert HISTORY_FILENAME == "photoingest-history.txt"


class TestHistoryLoad:
    """Tests for HistoryStore.load()."""

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        """A source that was never imported has an empty history."""
        store = HistoryStore.load(tmp_path / HISTORY_FILENAME)
        assert len(store) == 0
        assert not store.contains("a.jpg")

    def test_reads_entries(self, tmp_path: Path) -> None:
        path = tmp_path / HISTORY_FILENAME
        path.write_text("DCIM/a.NEF\nDCIM/b.JPG\n\n", encoding="utf-8")

        store = HistoryStore.load(path)

        assert len(store) == 2
        assert "DCIM/a.NEF" in store
        assert store.contains("DCIM/b.JPG")

    def test_unicode_entries(self, tmp_path: Path) -> None:
        path = tmp_path / HISTORY_FILENAME
        path.write_text("Fotos/Grüße.jpg\n", encoding="utf-8")
        assert HistoryStore.load(path).contains("Fotos/Grüße.jpg")

    def test_unreadable_file_raises(self, tmp_path: Path) -> None:
        """A history path that cannot be read is a fatal error."""
        path = tmp_path / HISTORY_FILENAME
        path.mkdir()
        with pytest.raises(HistoryError):
            HistoryStore.load(path)

    def test_invalid_encoding_raises(self, tmp_path: Path) -> None:
        path = tmp_path / HISTORY_FILENAME
        path.write_bytes(b"\xff\xfe\xfa\n")
        with pytest.raises(HistoryError):
            HistoryStore.load(path)


class TestHistoryAppend:
    """Tests for append() and append_many()."""

    def test_append_creates_file(self, tmp_path: Path) -> None:
        path = tmp_path / HISTORY_FILENAME
        store = HistoryStore.load(path)

        store.append("a.jpg")

        assert path.read_text(encoding="utf-8") == "a.jpg\n"
        assert store.contains("a.jpg")

    def test_append_many_skips_known_entries(self, tmp_path: Path) -> None:
        """Entries already present are not written twice."""
        path = tmp_path / HISTORY_FILENAME
        path.write_text("a.jpg\n", encoding="utf-8")
        store = HistoryStore.load(path)

        written = store.append_many(["a.jpg", "b.jpg", "b.jpg", "c.jpg"])

        assert written == 2
        assert path.read_text(encoding="utf-8") == "a.jpg\nb.jpg\nc.jpg\n"

    def test_append_only_preserves_order(self, tmp_path: Path) -> None:
        path = tmp_path / HISTORY_FILENAME
        HistoryStore.load(path).append_many(["z.jpg", "a.jpg"])
        HistoryStore.load(path).append_many(["m.jpg", "a.jpg"])
        assert path.read_text(encoding="utf-8").splitlines() == ["z.jpg", "a.jpg", "m.jpg"]

    def test_append_many_nothing_new_leaves_file_alone(self, tmp_path: Path) -> None:
        path = tmp_path / HISTORY_FILENAME
        store = HistoryStore.load(path)
        assert store.append_many([]) == 0
        assert not path.exists()

    def test_unwritable_raises(self, tmp_path: Path) -> None:
        store = HistoryStore(tmp_path / "missing-dir" / HISTORY_FILENAME)
        with pytest.raises(HistoryError):
            store.append("a.jpg")
