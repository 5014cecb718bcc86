"""Merge engine - split-point resolution and three-way file classification.

State machine:

    Validating -> ResolvingSplit -> FastForward            (terminal)
                                 -> Classifying -> Committing (terminal)

Validation failures raise before anything is touched. Classification
builds a complete plan (reading every blob it needs) before the working
tree or the staging area is modified.

Split-point strategies:
    first-parent   Collect the current branch's first-parent chain, then walk
                   the other branch's first-parent chain from its tip and
                   return the first commit (or merge parent) found in it,
                   falling back to the other branch's root. A shallow
                   heuristic, not a true lowest common ancestor.
    bidirectional  Collect all ancestors of both tips over parent and
                   merge-parent edges and pick the common ancestor with the
                   smallest total distance from the two tips.

A file absent at the split point but added on both sides keeps the head
version unless ``conflict_on_both_added`` is set.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from twig.core.branches import BranchRegistry
from twig.core.checkout import CheckoutEngine
from twig.core.graph import CommitGraph
from twig.core.models import Commit, MergeKind, MergeResult
from twig.core.refs import HeadPointer
from twig.core.snapshots import SnapshotStore
from twig.core.staging import StagingArea
from twig.core.worktree import WorkingTree
from twig.errors import InvalidOperationError, NotFoundError

logger = logging.getLogger(__name__)

SplitStrategy = Literal["first-parent", "bidirectional"]

CONFLICT_HEAD_MARKER = b"<<<<<<< HEAD\n"
CONFLICT_SEPARATOR = b"=======\n"
CONFLICT_END_MARKER = b">>>>>>>\n"


class MergeActionKind(Enum):
    """What the merge does to one file."""

    TAKE_OTHER = "take-other"
    REMOVE = "remove"
    CONFLICT = "conflict"


@dataclass
class MergeAction:
    name: str
    kind: MergeActionKind
    content: bytes = b""


@dataclass
class MergePlan:
    """Classified changes for a non-fast-forward merge."""

    split: Commit
    head: Commit
    other: Commit
    actions: list[MergeAction] = field(default_factory=list)

    @property
    def conflicts(self) -> list[str]:
        return [a.name for a in self.actions if a.kind is MergeActionKind.CONFLICT]


def conflict_block(head_content: bytes, other_content: bytes) -> bytes:
    """Literal conflict file combining both sides (a missing side is empty)."""
    return (
        CONFLICT_HEAD_MARKER
        + head_content
        + CONFLICT_SEPARATOR
        + other_content
        + CONFLICT_END_MARKER
    )


def _same(name: str, first: dict[str, str], second: dict[str, str]) -> bool:
    # Absent on both sides counts as the same version
    return first.get(name) == second.get(name)


class MergeEngine:
    """Merges another branch into the current branch."""

    def __init__(
        self,
        graph: CommitGraph,
        branches: BranchRegistry,
        snapshots: SnapshotStore,
        staging: StagingArea,
        checkout: CheckoutEngine,
        worktree: WorkingTree,
        head: HeadPointer,
        split_strategy: SplitStrategy = "first-parent",
        conflict_on_both_added: bool = False,
    ) -> None:
        self._graph = graph
        self._branches = branches
        self._snapshots = snapshots
        self._staging = staging
        self._checkout = checkout
        self._worktree = worktree
        self._head = head
        self.split_strategy = split_strategy
        self.conflict_on_both_added = conflict_on_both_added

    # =========================================================================
    # Split point
    # =========================================================================

    def find_split_point(self, current_tip: Commit, other_tip: Commit) -> Commit:
        if self.split_strategy == "bidirectional":
            split = self._nearest_common_ancestor(current_tip, other_tip)
        else:
            split = self._first_parent_split(current_tip, other_tip)
        logger.debug(
            "Split point of %s and %s is %s (%s)",
            current_tip.short_hash(),
            other_tip.short_hash(),
            split.short_hash(),
            self.split_strategy,
        )
        return split

    def _first_parent_split(self, current_tip: Commit, other_tip: Commit) -> Commit:
        current_chain = {commit.hash for commit in self._graph.ancestors(current_tip)}
        last = other_tip
        for commit in self._graph.ancestors(other_tip):
            if commit.hash in current_chain:
                return commit
            if commit.merged_parent_hash and commit.merged_parent_hash in current_chain:
                return self._graph.get(commit.merged_parent_hash)
            last = commit
        return last

    def _distances(self, tip: Commit) -> dict[str, int]:
        """Breadth-first distance from ``tip`` to every ancestor over both edges."""
        distances = {tip.hash: 0}
        queue = deque([tip])
        while queue:
            commit = queue.popleft()
            for parent in (commit.parent_hash, commit.merged_parent_hash):
                if parent and parent not in distances:
                    distances[parent] = distances[commit.hash] + 1
                    queue.append(self._graph.get(parent))
        return distances

    def _nearest_common_ancestor(self, current_tip: Commit, other_tip: Commit) -> Commit:
        from_current = self._distances(current_tip)
        from_other = self._distances(other_tip)
        common = from_current.keys() & from_other.keys()
        if not common:
            # Unrelated histories: behave like the first-parent fallback
            return self._first_parent_split(current_tip, other_tip)
        best = min(
            common,
            key=lambda h: (from_current[h] + from_other[h], from_current[h], h),
        )
        return self._graph.get(best)

    # =========================================================================
    # Classification
    # =========================================================================

    def classify(self, split: Commit, head: Commit, other: Commit) -> MergePlan:
        """Decide what happens to every file touched on either side."""
        plan = MergePlan(split=split, head=head, other=other)
        split_files, head_files, other_files = split.snapshots, head.snapshots, other.snapshots

        for name in sorted(split_files):
            if _same(name, split_files, head_files):
                if name not in other_files:
                    plan.actions.append(MergeAction(name, MergeActionKind.REMOVE))
                elif not _same(name, other_files, head_files):
                    plan.actions.append(self._take_other(name, other))
            elif not _same(name, split_files, other_files) and not _same(name, head_files, other_files):
                plan.actions.append(self._conflict(name, head, other))

        for name in sorted(other_files):
            if name in split_files:
                continue
            if name not in head_files:
                plan.actions.append(self._take_other(name, other))
            elif self.conflict_on_both_added and not _same(name, head_files, other_files):
                plan.actions.append(self._conflict(name, head, other))

        return plan

    def _take_other(self, name: str, other: Commit) -> MergeAction:
        return MergeAction(name, MergeActionKind.TAKE_OTHER, self._checkout.read_file(name, other))

    def _conflict(self, name: str, head: Commit, other: Commit) -> MergeAction:
        head_content = self._checkout.read_file(name, head) if head.tracks(name) else b""
        other_content = self._checkout.read_file(name, other) if other.tracks(name) else b""
        return MergeAction(
            name, MergeActionKind.CONFLICT, conflict_block(head_content, other_content)
        )

    # =========================================================================
    # Merge
    # =========================================================================

    def validate(self, other_branch: str) -> tuple[Commit, Commit]:
        """Check merge preconditions; returns (head commit, other tip)."""
        head_commit = self._graph.get(self._head.commit_hash)
        self._checkout.ensure_no_untracked(head_commit)
        if self._staging.has_pending_changes():
            raise InvalidOperationError("You have uncommitted changes.")
        if not self._branches.exists(other_branch):
            raise NotFoundError("A branch with that name does not exist.", branch=other_branch)
        if other_branch == self._head.branch_name:
            raise InvalidOperationError("Cannot merge a branch with itself.", branch=other_branch)
        other = self._graph.get(self._branches.get(other_branch).front_commit_hash)
        return head_commit, other

    def merge(self, other_branch: str) -> MergeResult:
        """Merge ``other_branch`` into the current branch.

        Returns:
            MergeResult describing a fast-forward or a new merge commit;
            conflicts are reported on the result, not raised.

        Raises:
            UntrackedFileConflictError, InvalidOperationError, NotFoundError
        """
        current_branch = self._head.branch_name
        head_commit, other = self.validate(other_branch)

        split = self.find_split_point(head_commit, other)
        if split.hash == other.hash:
            raise InvalidOperationError("Given branch is an ancestor of the current branch.")
        if split.hash == head_commit.hash:
            self._checkout.reconcile(other, head_commit)
            self._branches.move(current_branch, other.hash)
            logger.debug("Fast-forwarded %s to %s", current_branch, other.short_hash())
            return MergeResult(kind=MergeKind.FAST_FORWARD, commit_hash=other.hash)

        plan = self.classify(split, head_commit, other)
        commit = self._commit(plan, current_branch, other_branch)
        return MergeResult(kind=MergeKind.MERGED, commit_hash=commit.hash, conflicts=plan.conflicts)

    def _commit(self, plan: MergePlan, current_branch: str, other_branch: str) -> Commit:
        for action in plan.actions:
            if action.kind is MergeActionKind.REMOVE:
                self._worktree.delete(action.name)
                self._staging.mark_removed(action.name)
            else:
                self._worktree.write(action.name, action.content)
                self._staging.stage_add(action.name, action.content, plan.head)
            logger.debug("merge %s: %s", action.kind.value, action.name)

        snapshots = self._staging.flush(plan.head.snapshots)
        commit = self._graph.create(
            f"Merged {other_branch} into {current_branch}.",
            snapshots,
            parent_hash=plan.head.hash,
            merged_parent_hash=plan.other.hash,
        )
        self._branches.move(current_branch, commit.hash)
        self._head.set_commit(commit.hash)
        return commit
