"""Staging area - the pending-change log applied at commit time.

Two disjoint sets over file names are kept in the staging store:

- staged for addition: ``add:<name>`` -> pending content
- staged for removal:  ``rm:<name>``  -> marker

A name is never in both sets at once.
"""

from __future__ import annotations

import base64
import logging

from twig.core.models import Commit, snapshot_hash
from twig.core.records import RecordStore
from twig.core.snapshots import SnapshotStore
from twig.core.worktree import WorkingTree
from twig.errors import InvalidOperationError, StorageError

logger = logging.getLogger(__name__)

ADD_PREFIX = "add:"
REMOVE_PREFIX = "rm:"


class StagingArea:
    """State machine over the two staging sets."""

    def __init__(
        self,
        records: RecordStore,
        snapshots: SnapshotStore,
        worktree: WorkingTree,
    ) -> None:
        self._records = records
        self._snapshots = snapshots
        self._worktree = worktree

    def stage_add(self, name: str, content: bytes, head_commit: Commit) -> None:
        """Stage ``content`` as the next version of ``name``.

        If the head commit already tracks identical content the file is up
        to date: any pending removal is cancelled and nothing is staged.
        """
        self._records.delete(REMOVE_PREFIX + name)
        if head_commit.snapshot_hash(name) == snapshot_hash(name, content):
            self._records.delete(ADD_PREFIX + name)
            logger.debug("%s matches head, nothing staged", name)
            return
        self._records.put(
            ADD_PREFIX + name,
            {"name": name, "content": base64.b64encode(content).decode("ascii")},
        )
        logger.debug("Staged %s for addition (%d bytes)", name, len(content))

    def stage_remove(self, name: str, head_commit: Commit) -> None:
        """Unstage ``name`` and, if the head tracks it, stage its removal.

        A tracked file is also deleted from the working tree.
        """
        staged = ADD_PREFIX + name in self._records
        tracked = head_commit.tracks(name)
        if not staged and not tracked:
            raise InvalidOperationError("No reason to remove the file.", file=name)

        self._records.delete(ADD_PREFIX + name)
        if tracked:
            self.mark_removed(name)
            self._worktree.delete(name)

    def mark_removed(self, name: str) -> None:
        """Add a removal marker for ``name`` without touching the working tree."""
        self._records.delete(ADD_PREFIX + name)
        self._records.put(REMOVE_PREFIX + name, {"name": name})
        logger.debug("Staged %s for removal", name)

    def additions(self) -> dict[str, bytes]:
        """Pending additions, name -> content, sorted by name."""
        staged: dict[str, bytes] = {}
        for key, record in self._records.items(ADD_PREFIX):
            try:
                staged[record["name"]] = base64.b64decode(record["content"])
            except (KeyError, ValueError) as e:
                raise StorageError(f"Invalid staging record {key}: {e}") from e
        return dict(sorted(staged.items()))

    def removals(self) -> list[str]:
        """Names staged for removal, sorted."""
        return sorted(key[len(REMOVE_PREFIX):] for key in self._records.keys(REMOVE_PREFIX))

    def is_staged(self, name: str) -> bool:
        return ADD_PREFIX + name in self._records or REMOVE_PREFIX + name in self._records

    def has_pending_changes(self) -> bool:
        return bool(self._records.keys(ADD_PREFIX) or self._records.keys(REMOVE_PREFIX))

    def flush(self, parent_snapshots: dict[str, str]) -> dict[str, str]:
        """Apply the staged changes to a copy of ``parent_snapshots``.

        Every addition is stored in the snapshot store; both sets are
        cleared afterwards. Called exactly once per commit.
        """
        snapshots = dict(parent_snapshots)
        additions = self.additions()
        removals = self.removals()
        for name, content in additions.items():
            snapshots[name] = self._snapshots.put(name, content)
        for name in removals:
            snapshots.pop(name, None)
        self.clear()
        logger.debug("Flushed staging area: +%d -%d", len(additions), len(removals))
        return snapshots

    def clear(self) -> None:
        """Drop every pending addition and removal marker."""
        self._records.clear()
