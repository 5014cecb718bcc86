"""Tests for content-addressed snapshot storage."""

from __future__ import annotations

from pathlib import Path

import pytest

from twig.core.models import Snapshot, snapshot_hash
from twig.core.records import RecordStore
from twig.core.snapshots import SnapshotStore
from twig.errors import NotFoundError


@pytest.fixture
def snapshots(tmp_path: Path):
    records = RecordStore(tmp_path / "snapshots", "snapshots")
    yield SnapshotStore(records)
    records.close()


class TestSnapshotHash:
    def test_same_name_and_content_same_hash(self) -> None:
        assert snapshot_hash("a.txt", b"1") == snapshot_hash("a.txt", b"1")

    def test_name_is_part_of_identity(self) -> None:
        assert snapshot_hash("a.txt", b"1") != snapshot_hash("b.txt", b"1")

    def test_content_is_part_of_identity(self) -> None:
        assert snapshot_hash("a.txt", b"1") != snapshot_hash("a.txt", b"2")


class TestSnapshotStore:
    """put/get and deduplication."""

    def test_put_is_deterministic_and_deduplicated(self, snapshots: SnapshotStore) -> None:
        first = snapshots.put("a.txt", b"hello")
        second = snapshots.put("a.txt", b"hello")
        assert first == second
        assert len(snapshots) == 1

    def test_get_returns_stored_bytes(self, snapshots: SnapshotStore) -> None:
        content = bytes(range(256))
        snapshot = snapshots.get_snapshot(snapshots.put("bin", content))
        assert snapshot == Snapshot.of("bin", content)
        assert snapshots.get(snapshot.hash) == content

    def test_empty_content(self, snapshots: SnapshotStore) -> None:
        assert snapshots.get(snapshots.put("empty", b"")) == b""

    def test_unknown_hash_raises(self, snapshots: SnapshotStore) -> None:
        with pytest.raises(NotFoundError):
            snapshots.get("0" * 40)
        assert not snapshots.contains("0" * 40)
