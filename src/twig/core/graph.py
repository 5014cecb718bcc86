"""Commit graph - immutable commits linked by parent and merge-parent ids.

The graph is append-only: a commit can only reference commits that
already exist, so it is acyclic by construction.

Usage:
    >>> graph = CommitGraph(records)
    >>> root = graph.create("initial commit", {})
    >>> child = graph.create("add a.txt", {"a.txt": snap}, parent_hash=root.hash)
    >>> [c.message for c in graph.ancestors(child)]
    ['add a.txt', 'initial commit']
"""

from __future__ import annotations

import hashlib
import json
import logging
import secrets
from collections.abc import Iterator
from datetime import UTC, datetime
from typing import Literal

from twig.core.models import Commit
from twig.core.records import RecordStore
from twig.errors import AmbiguousRefError, NotFoundError, StorageError

logger = logging.getLogger(__name__)

FULL_HASH_LENGTH = 40

IdStrategy = Literal["content", "random"]
PrefixResolution = Literal["strict", "first-match"]


class CommitGraph:
    """Storage and traversal of the commit DAG."""

    def __init__(
        self,
        records: RecordStore,
        id_strategy: IdStrategy = "content",
        prefix_resolution: PrefixResolution = "strict",
    ) -> None:
        """Initialize the graph over a commit record store.

        Args:
            records: Store holding one record per commit id.
            id_strategy: "content" derives ids from the commit's data only;
                "random" mixes in a random salt so identical commits differ.
            prefix_resolution: "strict" rejects abbreviated ids matching more
                than one commit; "first-match" returns the first one found.
        """
        self._records = records
        self.id_strategy = id_strategy
        self.prefix_resolution = prefix_resolution

    def _allocate_id(
        self,
        message: str,
        timestamp: datetime,
        snapshots: dict[str, str],
        parent_hash: str | None,
        merged_parent_hash: str | None,
    ) -> str:
        payload = json.dumps(
            {
                "parent_hash": parent_hash,
                "merged_parent_hash": merged_parent_hash,
                "message": message,
                "timestamp": timestamp.isoformat(),
                "snapshots": snapshots,
            },
            sort_keys=True,
        )
        digest = hashlib.sha1(b"commit\0" + payload.encode("utf-8"))
        if self.id_strategy == "random":
            digest.update(secrets.token_bytes(16))
        return digest.hexdigest()

    def create(
        self,
        message: str,
        snapshots: dict[str, str],
        parent_hash: str | None = None,
        merged_parent_hash: str | None = None,
        timestamp: datetime | None = None,
    ) -> Commit:
        """Allocate an id for a new commit and persist it.

        No semantic validation happens here; callers check preconditions.
        """
        timestamp = timestamp or datetime.now(UTC)
        commit_hash = self._allocate_id(
            message, timestamp, snapshots, parent_hash, merged_parent_hash
        )
        commit = Commit(
            hash=commit_hash,
            message=message,
            timestamp=timestamp,
            snapshots=dict(snapshots),
            parent_hash=parent_hash,
            merged_parent_hash=merged_parent_hash,
        )
        self._records.put(commit_hash, commit.to_dict())
        logger.debug(
            "Created commit %s (parent=%s, merged=%s, files=%d)",
            commit.short_hash(),
            parent_hash[:7] if parent_hash else None,
            merged_parent_hash[:7] if merged_parent_hash else None,
            len(snapshots),
        )
        return commit

    def get(self, commit_hash: str) -> Commit:
        record = self._records.get(commit_hash)
        if record is None:
            raise NotFoundError("No commit with that id exists.", commit=commit_hash)
        try:
            return Commit.from_dict(record)
        except (KeyError, ValueError, TypeError) as e:
            raise StorageError(f"Invalid commit record {commit_hash}: {e}") from e

    def contains(self, commit_hash: str) -> bool:
        return commit_hash in self._records

    def resolve_prefix(self, partial: str) -> str:
        """Resolve a full or abbreviated commit id to a full id.

        Raises:
            NotFoundError: If no commit matches.
            AmbiguousRefError: If several commits match and resolution is strict.
        """
        if partial and len(partial) >= FULL_HASH_LENGTH:
            if self.contains(partial):
                return partial
            raise NotFoundError("No commit with that id exists.", commit=partial)

        matches: list[str] = []
        if partial:
            for commit_hash in self._records.keys():
                if commit_hash.startswith(partial):
                    matches.append(commit_hash)
                    if self.prefix_resolution == "first-match":
                        break

        if not matches:
            raise NotFoundError("No commit with that id exists.", commit=partial)
        if len(matches) > 1:
            raise AmbiguousRefError(partial, matches)
        return matches[0]

    def ancestors(self, commit: Commit) -> Iterator[Commit]:
        """Yield ``commit`` and then its first-parent ancestors up to the root.

        Merge-parent edges are never followed.
        """
        current: Commit | None = commit
        while current is not None:
            yield current
            current = self.get(current.parent_hash) if current.parent_hash else None

    def all_commits(self) -> Iterator[Commit]:
        """Every commit ever made, in creation order."""
        for commit_hash in self._records.keys():
            yield self.get(commit_hash)

    def find_by_message(self, message: str) -> list[str]:
        """Ids of all commits whose message is exactly ``message``."""
        return [commit.hash for commit in self.all_commits() if commit.message == message]

    def __len__(self) -> int:
        return len(self._records)
