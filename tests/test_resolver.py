"""Tests for destination name conflict resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from photoingest.resolver import (
    FilesystemIndex,
    ReservingIndex,
    ScanStrategy,
    occupied_names,
    resolve_conflicts,
)


class MemoryIndex:
    """DestinationIndex over an in-memory listing that records every lookup."""

    def __init__(self, listing: dict[Path, set[str]]) -> None:
        self.listing = listing
        self.lookups: list[tuple[Path, str]] = []

    def exists(self, destination: Path, name: str) -> bool:
        self.lookups.append((destination, name))
        return name in self.listing.get(destination, set())


D1 = Path("/d1")
D2 = Path("/d2")
D3 = Path("/d3")

BOTH = pytest.mark.parametrize("strategy", [ScanStrategy.SHORT_CIRCUIT, ScanStrategy.FULL_RESCAN])


class TestResolveConflicts:
    """Tests for resolve_conflicts()."""

    @BOTH
    def test_free_name_is_unchanged(self, strategy: ScanStrategy) -> None:
        index = MemoryIndex({})
        assert resolve_conflicts("img.jpg", [D1, D2], index=index, strategy=strategy) == "img.jpg"

    @BOTH
    def test_conflict_across_destinations(self, strategy: ScanStrategy) -> None:
        """img-1 is free in D1 but taken in D2, so the result is img-2."""
        index = MemoryIndex({D1: {"img-1.jpg"}, D2: {"img.jpg", "img-1.jpg"}})
        assert resolve_conflicts("img.jpg", [D1, D2], index=index, strategy=strategy) == "img-2.jpg"

    @BOTH
    def test_conflict_in_first_destination_only(self, strategy: ScanStrategy) -> None:
        index = MemoryIndex({D1: {"img.jpg", "img-1.jpg"}})
        assert resolve_conflicts("img.jpg", [D1, D2, D3], index=index, strategy=strategy) == "img-2.jpg"

    @BOTH
    def test_later_destination_forces_rescan_of_first(self, strategy: ScanStrategy) -> None:
        """A bump caused by D2 must be rechecked against D1."""
        index = MemoryIndex({D1: {"img-1.jpg"}, D2: {"img.jpg"}})
        assert resolve_conflicts("img.jpg", [D1, D2], index=index, strategy=strategy) == "img-2.jpg"

    @BOTH
    def test_derived_artifact_names_count_as_taken(self, strategy: ScanStrategy) -> None:
        """A raw file's name is bumped when its future DNG name exists."""
        index = MemoryIndex({D2: {"img.dng"}})
        result = resolve_conflicts(
            "img.NEF", [D1, D2], [".dng", ".jpg"], index=index, strategy=strategy
        )
        assert result == "img-1.NEF"

    @BOTH
    def test_nested_name(self, strategy: ScanStrategy) -> None:
        index = MemoryIndex({D1: {"2010/09/img.jpg"}})
        assert resolve_conflicts("2010/09/img.jpg", [D1], index=index, strategy=strategy) == "2010/09/img-1.jpg"

    def test_short_circuit_skips_rescan_for_first_destination_conflict(self) -> None:
        """A conflict resolved inside D1 does not restart the scan."""
        index = MemoryIndex({D1: {"img.jpg"}})
        resolve_conflicts("img.jpg", [D1, D2], index=index, strategy=ScanStrategy.SHORT_CIRCUIT)
        assert index.lookups == [(D1, "img.jpg"), (D1, "img-1.jpg"), (D2, "img-1.jpg")]

    def test_full_rescan_rechecks_every_destination(self) -> None:
        index = MemoryIndex({D1: {"img.jpg"}})
        resolve_conflicts("img.jpg", [D1, D2], index=index, strategy=ScanStrategy.FULL_RESCAN)
        assert index.lookups == [(D1, "img.jpg"), (D1, "img-1.jpg"), (D2, "img-1.jpg")]

    def test_result_free_everywhere(self) -> None:
        """The resolved name is absent from every destination."""
        listing = {D1: {"a.jpg", "a-2.jpg"}, D2: {"a-1.jpg", "a-3.jpg"}, D3: {"a-4.jpg"}}
        index = MemoryIndex(listing)
        result = resolve_conflicts("a.jpg", [D1, D2, D3], index=index)
        assert all(result not in names for names in listing.values())
        assert result == "a-5.jpg"


class TestFilesystemIndex:
    def test_checks_real_files(self, tmp_path: Path) -> None:
        (tmp_path / "img.jpg").write_bytes(b"x")
        assert resolve_conflicts("img.jpg", [tmp_path], index=FilesystemIndex()) == "img-1.jpg"

    def test_dangling_symlink_occupies_name(self, tmp_path: Path) -> None:
        (tmp_path / "img.jpg").symlink_to(tmp_path / "missing")
        assert FilesystemIndex().exists(tmp_path, "img.jpg")


class TestReservingIndex:
    """Names claimed earlier in a run are treated as taken."""

    def test_reserved_names_are_taken(self) -> None:
        index = ReservingIndex(MemoryIndex({}))
        index.reserve([D1, D2], occupied_names("img.NEF", [".dng"]))
        assert index.exists(D1, "img.NEF")
        assert index.exists(D2, "img.dng")
        assert not index.exists(D1, "other.NEF")

    def test_two_sources_with_same_name_get_distinct_results(self) -> None:
        index = ReservingIndex(MemoryIndex({}))
        first = resolve_conflicts("img.jpg", [D1, D2], index=index)
        index.reserve([D1, D2], [first])
        second = resolve_conflicts("img.jpg", [D1, D2], index=index)
        assert (first, second) == ("img.jpg", "img-1.jpg")

    def test_occupied_names(self) -> None:
        assert occupied_names("x/img.NEF", [".dng", ".jpg"]) == ["x/img.NEF", "x/img.dng", "x/img.jpg"]
