"""Checkout engine - restores files and reconciles the working tree.

Reconciliation switches the working tree from the current head commit to
a target commit. It is planned in full before anything is written:

    1. Guard: refuse if an untracked file (relative to the current head)
       is present in the working tree.
    2. Read every snapshot of the target commit.
    3. Apply: delete files tracked by head but absent from the target,
       drop staged additions (and their working copies), clear the staging
       area, write the target's files and move the head commit pointer.

Moving branch pointers is the caller's job.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from twig.core.graph import CommitGraph
from twig.core.models import Commit
from twig.core.refs import HeadPointer
from twig.core.snapshots import SnapshotStore
from twig.core.staging import StagingArea
from twig.core.worktree import WorkingTree
from twig.errors import NotFoundError, UntrackedFileConflictError

logger = logging.getLogger(__name__)


@dataclass
class ReconcilePlan:
    """Working tree changes needed to move from one commit to another."""

    target: Commit
    deletions: list[str] = field(default_factory=list)
    discarded: list[str] = field(default_factory=list)
    writes: dict[str, bytes] = field(default_factory=dict)


class CheckoutEngine:
    """Writes commit contents into the working tree."""

    def __init__(
        self,
        graph: CommitGraph,
        snapshots: SnapshotStore,
        staging: StagingArea,
        worktree: WorkingTree,
        head: HeadPointer,
    ) -> None:
        self._graph = graph
        self._snapshots = snapshots
        self._staging = staging
        self._worktree = worktree
        self._head = head

    def read_file(self, name: str, commit: Commit) -> bytes:
        """Content of ``name`` as tracked by ``commit``."""
        snapshot_hash = commit.snapshot_hash(name)
        if snapshot_hash is None:
            raise NotFoundError("File does not exist in that commit.", file=name)
        return self._snapshots.get(snapshot_hash)

    def checkout_file(self, name: str, commit: Commit) -> None:
        """Overwrite (or create) ``name`` with its version in ``commit``."""
        self._worktree.write(name, self.read_file(name, commit))
        logger.debug("Checked out %s from %s", name, commit.short_hash())

    def checkout_file_at(self, name: str, commit_ref: str) -> None:
        """Like checkout_file, resolving an abbreviated commit id first."""
        commit = self._graph.get(self._graph.resolve_prefix(commit_ref))
        self.checkout_file(name, commit)

    def untracked_files(self, head_commit: Commit) -> list[str]:
        """Working files that are neither staged nor tracked by ``head_commit``."""
        return [
            name
            for name in self._worktree.files()
            if not self._staging.is_staged(name) and not head_commit.tracks(name)
        ]

    def ensure_no_untracked(self, head_commit: Commit) -> None:
        untracked = self.untracked_files(head_commit)
        if untracked:
            raise UntrackedFileConflictError(untracked)

    def plan(self, target: Commit, current_head: Commit) -> ReconcilePlan:
        """Validate a switch to ``target`` and compute its changes.

        Raises:
            UntrackedFileConflictError: If an untracked file is in the way.
        """
        self.ensure_no_untracked(current_head)
        plan = ReconcilePlan(target=target)
        plan.deletions = sorted(
            name for name in current_head.snapshots if not target.tracks(name)
        )
        plan.discarded = list(self._staging.additions())
        plan.writes = {name: self._snapshots.get(h) for name, h in sorted(target.snapshots.items())}
        return plan

    def apply(self, plan: ReconcilePlan) -> None:
        for name in plan.deletions:
            self._worktree.delete(name)
        for name in plan.discarded:
            self._worktree.delete(name)
        self._staging.clear()
        for name, content in plan.writes.items():
            self._worktree.write(name, content)
        self._head.set_commit(plan.target.hash)
        logger.debug(
            "Reconciled working tree to %s (-%d, discarded %d, wrote %d)",
            plan.target.short_hash(),
            len(plan.deletions),
            len(plan.discarded),
            len(plan.writes),
        )

    def reconcile(self, target: Commit, current_head: Commit) -> None:
        """Make the working tree match ``target`` and move the head commit to it."""
        self.apply(self.plan(target, current_head))
