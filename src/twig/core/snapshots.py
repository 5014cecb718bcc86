"""Content-addressed snapshot storage.

Snapshots are stored once per (name, content) pair and never updated
or deleted.
"""

from __future__ import annotations

import logging

from twig.core.models import Snapshot
from twig.core.records import RecordStore
from twig.errors import NotFoundError, StorageError

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Immutable blob store for file contents."""

    def __init__(self, records: RecordStore) -> None:
        self._records = records

    def put(self, name: str, content: bytes) -> str:
        """Store a snapshot of ``name`` and return its hash.

        Idempotent: identical (name, content) always yields the same hash
        and is written at most once.
        """
        snapshot = Snapshot.of(name, content)
        if self._records.add(snapshot.hash, snapshot.to_dict()):
            logger.debug("Stored snapshot %s for %s", snapshot.hash[:8], name)
        return snapshot.hash

    def get_snapshot(self, snapshot_hash: str) -> Snapshot:
        record = self._records.get(snapshot_hash)
        if record is None:
            raise NotFoundError(f"No snapshot with hash {snapshot_hash}.", hash=snapshot_hash)
        try:
            return Snapshot.from_dict(record)
        except (KeyError, ValueError, TypeError) as e:
            raise StorageError(f"Invalid snapshot record {snapshot_hash}: {e}") from e

    def get(self, snapshot_hash: str) -> bytes:
        """Return the stored content for ``snapshot_hash``."""
        return self.get_snapshot(snapshot_hash).content

    def contains(self, snapshot_hash: str) -> bool:
        return snapshot_hash in self._records

    def __len__(self) -> int:
        return len(self._records)
