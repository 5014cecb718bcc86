"""Tests for the staging area state machine."""

from __future__ import annotations

from pathlib import Path

import pytest
from conftest import commit_file, write

from twig.core.repository import Repository
from twig.errors import InvalidOperationError, NotFoundError


class TestStageAdd:
    """Staging additions."""

    def test_add_new_file(self, repo: Repository) -> None:
        write(repo.root, "a.txt", "hello")
        repo.add("a.txt")
        assert repo.staging.additions() == {"a.txt": b"hello"}
        assert repo.staging.has_pending_changes()

    def test_add_missing_file(self, repo: Repository) -> None:
        with pytest.raises(NotFoundError, match="File does not exist."):
            repo.add("nope.txt")

    def test_add_overwrites_previous_staged_content(self, repo: Repository) -> None:
        write(repo.root, "a.txt", "one")
        repo.add("a.txt")
        write(repo.root, "a.txt", "two")
        repo.add("a.txt")
        assert repo.staging.additions() == {"a.txt": b"two"}

    def test_add_unchanged_tracked_file_stages_nothing(self, repo: Repository) -> None:
        commit_file(repo, "a.txt", "v1", "c1")
        repo.add("a.txt")
        assert not repo.staging.has_pending_changes()

    def test_add_reverted_file_unstages_it(self, repo: Repository) -> None:
        commit_file(repo, "a.txt", "v1", "c1")
        write(repo.root, "a.txt", "v2")
        repo.add("a.txt")
        write(repo.root, "a.txt", "v1")
        repo.add("a.txt")
        assert repo.staging.additions() == {}

    def test_add_cancels_pending_removal(self, repo: Repository) -> None:
        commit_file(repo, "a.txt", "v1", "c1")
        repo.rm("a.txt")
        write(repo.root, "a.txt", "v1")
        repo.add("a.txt")
        assert repo.staging.removals() == []
        assert not repo.staging.has_pending_changes()

    def test_staged_content_is_frozen(self, repo: Repository) -> None:
        write(repo.root, "a.txt", "staged")
        repo.add("a.txt")
        write(repo.root, "a.txt", "edited later")
        repo.commit("c1")
        assert repo.checkout.read_file("a.txt", repo.head_commit()) == b"staged"


class TestStageRemove:
    """Staging removals."""

    def test_rm_staged_untracked_file_only_unstages(self, repo: Repository) -> None:
        write(repo.root, "a.txt", "x")
        repo.add("a.txt")
        repo.rm("a.txt")
        assert repo.staging.additions() == {}
        assert repo.staging.removals() == []
        assert (repo.root / "a.txt").exists()

    def test_rm_tracked_file_stages_removal_and_deletes(self, repo: Repository) -> None:
        commit_file(repo, "a.txt", "x", "c1")
        repo.rm("a.txt")
        assert repo.staging.removals() == ["a.txt"]
        assert not (repo.root / "a.txt").exists()

    def test_rm_tracked_file_already_deleted(self, repo: Repository) -> None:
        commit_file(repo, "a.txt", "x", "c1")
        (repo.root / "a.txt").unlink()
        repo.rm("a.txt")
        assert repo.staging.removals() == ["a.txt"]

    def test_rm_unknown_file(self, repo: Repository) -> None:
        write(repo.root, "a.txt", "x")
        with pytest.raises(InvalidOperationError, match="No reason to remove the file."):
            repo.rm("a.txt")
        assert (repo.root / "a.txt").exists()

    def test_never_in_both_sets(self, repo: Repository) -> None:
        commit_file(repo, "a.txt", "v1", "c1")
        write(repo.root, "a.txt", "v2")
        repo.add("a.txt")
        repo.rm("a.txt")
        assert "a.txt" not in repo.staging.additions()
        assert repo.staging.removals() == ["a.txt"]


class TestFlush:
    def test_flush_applies_and_clears(self, repo: Repository, work_dir: Path) -> None:
        commit_file(repo, "keep.txt", "k", "c1")
        commit_file(repo, "gone.txt", "g", "c2")
        write(work_dir, "new.txt", "n")
        repo.add("new.txt")
        repo.rm("gone.txt")

        snapshots = repo.staging.flush(repo.head_commit().snapshots)

        assert sorted(snapshots) == ["keep.txt", "new.txt"]
        assert repo.snapshots.get(snapshots["new.txt"]) == b"n"
        assert not repo.staging.has_pending_changes()
