"""Repository facade - one object owning every store of a twig repository.

All commands go through an explicit Repository instead of process-wide
state, so several repositories can be opened side by side (tests do this
a lot).

Usage:
    >>> with Repository.init(tmp_path) as repo:
    ...     (tmp_path / "a.txt").write_text("hello")
    ...     repo.add("a.txt")
    ...     repo.commit("add a.txt")
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from types import TracebackType

from twig.config import TwigConfig
from twig.core.branches import BranchRegistry
from twig.core.checkout import CheckoutEngine
from twig.core.graph import CommitGraph
from twig.core.merge import MergeEngine
from twig.core.models import Commit, MergeResult, StatusReport, snapshot_hash
from twig.core.records import RecordStore
from twig.core.refs import HeadPointer
from twig.core.snapshots import SnapshotStore
from twig.core.staging import StagingArea
from twig.core.worktree import WorkingTree
from twig.errors import (
    AlreadyExistsError,
    InvalidOperationError,
    NotFoundError,
    RepositoryNotFoundError,
)
from twig.paths import (
    BRANCHES_STORE,
    COMMITS_STORE,
    META_STORE,
    SNAPSHOTS_STORE,
    STAGING_STORE,
    ensure_twig_dir,
    find_repo_root,
    get_store_dir,
    get_twig_dir,
)

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class Repository:
    """A twig repository rooted at ``root``."""

    def __init__(self, root: Path, config: TwigConfig | None = None) -> None:
        self.root = Path(root).resolve()
        self.config = config or TwigConfig()

        self._stores = {
            store: RecordStore(get_store_dir(self.root, store), store)
            for store in (COMMITS_STORE, SNAPSHOTS_STORE, BRANCHES_STORE, STAGING_STORE, META_STORE)
        }

        self.worktree = WorkingTree(self.root, self.config.repository.ignore)
        self.snapshots = SnapshotStore(self._stores[SNAPSHOTS_STORE])
        self.graph = CommitGraph(
            self._stores[COMMITS_STORE],
            id_strategy=self.config.commits.id_strategy,
            prefix_resolution=self.config.commits.prefix_resolution,
        )
        self.branches = BranchRegistry(self._stores[BRANCHES_STORE])
        self.head = HeadPointer(self._stores[META_STORE])
        self.staging = StagingArea(self._stores[STAGING_STORE], self.snapshots, self.worktree)
        self.checkout = CheckoutEngine(
            self.graph, self.snapshots, self.staging, self.worktree, self.head
        )
        self.merger = MergeEngine(
            self.graph,
            self.branches,
            self.snapshots,
            self.staging,
            self.checkout,
            self.worktree,
            self.head,
            split_strategy=self.config.merge.split_strategy,
            conflict_on_both_added=self.config.merge.conflict_on_both_added,
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @classmethod
    def init(cls, root: Path | str = ".", config: TwigConfig | None = None) -> Repository:
        """Create a repository in ``root`` with a single root commit.

        Raises:
            AlreadyExistsError: If ``root`` already holds a .twig/ directory.
        """
        root = Path(root).resolve()
        if get_twig_dir(root).exists():
            raise AlreadyExistsError(
                "A twig repository already exists in the current directory.",
                root=str(root),
            )
        ensure_twig_dir(root)
        repo = cls(root, config)

        settings = repo.config.repository
        initial = repo.graph.create(settings.initial_message, {}, timestamp=EPOCH)
        repo.branches.create(settings.default_branch, initial.hash)
        repo.head.set_branch(settings.default_branch)
        repo.head.set_commit(initial.hash)
        logger.info("Initialized empty twig repository in %s", get_twig_dir(root))
        return repo

    @classmethod
    def open(cls, start: Path | str = ".", config: TwigConfig | None = None) -> Repository:
        """Open the repository containing ``start`` (searching parent directories).

        Raises:
            RepositoryNotFoundError: If no .twig/ directory is found.
        """
        root = find_repo_root(start)
        if root is None:
            raise RepositoryNotFoundError(
                "Not in an initialized twig directory.", start=str(Path(start).resolve())
            )
        return cls(root, config)

    def close(self) -> None:
        for store in self._stores.values():
            store.close()

    def __enter__(self) -> Repository:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # =========================================================================
    # Helpers
    # =========================================================================

    @property
    def current_branch(self) -> str:
        return self.head.branch_name

    def head_commit(self) -> Commit:
        return self.graph.get(self.head.commit_hash)

    # =========================================================================
    # Commands
    # =========================================================================

    def add(self, name: str) -> None:
        """Stage the working copy of ``name``."""
        content = self.worktree.read(name)
        self.staging.stage_add(name, content, self.head_commit())

    def commit(self, message: str, timestamp: datetime | None = None) -> Commit:
        """Record the staged changes as a child of the head commit."""
        if not self.staging.has_pending_changes():
            raise InvalidOperationError("No changes added to the commit.")
        if not message:
            raise InvalidOperationError("Please enter a commit message.")

        parent = self.head_commit()
        snapshots = self.staging.flush(parent.snapshots)
        commit = self.graph.create(message, snapshots, parent_hash=parent.hash, timestamp=timestamp)
        self.branches.move(self.current_branch, commit.hash)
        self.head.set_commit(commit.hash)
        logger.debug("Committed %s on %s", commit.short_hash(), self.current_branch)
        return commit

    def rm(self, name: str) -> None:
        self.staging.stage_remove(name, self.head_commit())

    def log(self) -> list[Commit]:
        """First-parent history from the head commit back to the root."""
        return list(self.graph.ancestors(self.head_commit()))

    def global_log(self) -> list[Commit]:
        """Every commit ever made, in creation order."""
        return list(self.graph.all_commits())

    def find(self, message: str) -> list[str]:
        matches = self.graph.find_by_message(message)
        if not matches:
            raise NotFoundError("Found no commit with that message.", query=message)
        return matches

    def status(self) -> StatusReport:
        head_commit = self.head_commit()
        additions = self.staging.additions()
        removals = self.staging.removals()
        working = set(self.worktree.files())

        modified: list[str] = []
        deleted: list[str] = []
        for name, content in additions.items():
            if name not in working:
                deleted.append(name)
            elif self.worktree.read(name) != content:
                modified.append(name)
        for name, tracked_hash in head_commit.snapshots.items():
            if name in additions or name in removals:
                continue
            if name not in working:
                deleted.append(name)
            elif snapshot_hash(name, self.worktree.read(name)) != tracked_hash:
                modified.append(name)

        return StatusReport(
            current_branch=self.current_branch,
            branches=self.branches.list(),
            staged=list(additions),
            removed=removals,
            modified=sorted(modified),
            deleted=sorted(deleted),
            untracked=self.checkout.untracked_files(head_commit),
        )

    def checkout_file(self, name: str, commit_ref: str | None = None) -> None:
        """Restore ``name`` from the head commit or from ``commit_ref``."""
        if commit_ref is None:
            self.checkout.checkout_file(name, self.head_commit())
        else:
            self.checkout.checkout_file_at(name, commit_ref)

    def checkout_branch(self, name: str) -> None:
        if not self.branches.exists(name):
            raise NotFoundError("No such branch exists.", branch=name)
        if name == self.current_branch:
            raise InvalidOperationError("No need to checkout the current branch.", branch=name)
        target = self.graph.get(self.branches.get(name).front_commit_hash)
        self.checkout.reconcile(target, self.head_commit())
        self.head.set_branch(name)
        logger.debug("Switched to branch %s", name)

    def branch(self, name: str) -> None:
        """Create ``name`` at the head commit without switching to it."""
        self.branches.create(name, self.head.commit_hash)

    def rm_branch(self, name: str) -> None:
        self.branches.delete(name, self.current_branch)

    def reset(self, commit_ref: str) -> Commit:
        """Move the working tree and the current branch to ``commit_ref``."""
        target = self.graph.get(self.graph.resolve_prefix(commit_ref))
        self.checkout.reconcile(target, self.head_commit())
        self.branches.move(self.current_branch, target.hash)
        return target

    def merge(self, branch: str) -> MergeResult:
        return self.merger.merge(branch)
