"""End-to-end tests of the Repository command surface."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest
from conftest import commit_file, read, write

from twig.config import RepositoryConfig, TwigConfig
from twig.core.repository import Repository
from twig.errors import (
    AlreadyExistsError,
    InvalidOperationError,
    NotFoundError,
    RepositoryNotFoundError,
    UsageError,
)
from twig.paths import get_twig_dir


class TestInitAndOpen:
    """Repository lifecycle."""

    def test_init_creates_initial_commit(self, repo: Repository) -> None:
        initial = repo.head_commit()
        assert initial.message == "initial commit"
        assert initial.timestamp == datetime(1970, 1, 1, tzinfo=UTC)
        assert initial.snapshots == {}
        assert initial.is_root
        assert repo.current_branch == "main"
        assert repo.branches.list() == ["main"]

    def test_init_twice_fails(self, repo: Repository, work_dir: Path) -> None:
        with pytest.raises(AlreadyExistsError, match="already exists in the current directory"):
            Repository.init(work_dir)

    def test_init_with_custom_branch(self, work_dir: Path) -> None:
        config = TwigConfig(repository=RepositoryConfig(default_branch="trunk", initial_message="root"))
        with Repository.init(work_dir, config) as repo:
            assert repo.current_branch == "trunk"
            assert repo.head_commit().message == "root"

    def test_open_from_subdirectory(self, repo: Repository, work_dir: Path) -> None:
        sub = work_dir / "nested" / "deeper"
        sub.mkdir(parents=True)
        with Repository.open(sub) as reopened:
            assert reopened.root == work_dir.resolve()
            assert reopened.head.commit_hash == repo.head.commit_hash

    def test_open_outside_repository(self, tmp_path: Path) -> None:
        with pytest.raises(RepositoryNotFoundError, match="Not in an initialized twig directory."):
            Repository.open(tmp_path)

    def test_two_repositories_side_by_side(self, tmp_path: Path) -> None:
        (tmp_path / "one").mkdir()
        (tmp_path / "two").mkdir()
        with Repository.init(tmp_path / "one") as one, Repository.init(tmp_path / "two") as two:
            commit_file(one, "a.txt", "1", "only in one")
            assert len(one.log()) == 2
            assert len(two.log()) == 1
            assert get_twig_dir(tmp_path / "two").is_dir()

    def test_state_survives_reopen(self, work_dir: Path) -> None:
        with Repository.init(work_dir) as repo:
            c1 = commit_file(repo, "a.txt", "1", "c1")
            write(work_dir, "b.txt", "2")
            repo.add("b.txt")
        with Repository.open(work_dir) as repo:
            assert repo.head.commit_hash == c1
            assert repo.staging.additions() == {"b.txt": b"2"}


class TestCommit:
    def test_nothing_staged(self, repo: Repository) -> None:
        with pytest.raises(InvalidOperationError, match="No changes added to the commit."):
            repo.commit("empty")

    def test_nothing_staged_is_checked_before_message(self, repo: Repository) -> None:
        with pytest.raises(InvalidOperationError, match="No changes added to the commit."):
            repo.commit("")

    def test_blank_message(self, repo: Repository) -> None:
        write(repo.root, "a.txt", "x")
        repo.add("a.txt")
        with pytest.raises(InvalidOperationError, match="Please enter a commit message."):
            repo.commit("")
        assert repo.staging.has_pending_changes()

    def test_commit_inherits_parent_snapshots(self, repo: Repository) -> None:
        commit_file(repo, "a.txt", "a", "c1")
        commit_file(repo, "b.txt", "b", "c2")
        assert sorted(repo.head_commit().snapshots) == ["a.txt", "b.txt"]

    def test_commit_moves_branch_and_head(self, repo: Repository) -> None:
        c1 = commit_file(repo, "a.txt", "a", "c1")
        assert repo.branches.get("main").front_commit_hash == c1
        assert repo.head.commit_hash == c1


class TestScenarios:
    """Whole workflows."""

    def test_restore_old_version_of_file(self, repo: Repository) -> None:
        c1 = commit_file(repo, "a.txt", "1", "c1")
        commit_file(repo, "a.txt", "2", "c2")
        repo.checkout_file("a.txt", c1)
        assert read(repo.root, "a.txt") == "1"

    def test_conflicting_branches(self, repo: Repository) -> None:
        commit_file(repo, "f", "base", "X")
        repo.branch("b1")
        commit_file(repo, "f", "main-v", "main change")
        repo.checkout_branch("b1")
        commit_file(repo, "f", "b1-v", "b1 change")
        repo.checkout_branch("main")

        result = repo.merge("b1")

        assert result.has_conflicts
        content = read(repo.root, "f")
        assert content.startswith("<<<<<<< HEAD\n")
        assert "main-v" in content and "b1-v" in content
        assert content.endswith(">>>>>>>\n")

    def test_remove_then_commit(self, repo: Repository) -> None:
        commit_file(repo, "f", "x", "add f")
        repo.rm("f")
        repo.commit("remove f")
        assert not repo.head_commit().tracks("f")
        assert not (repo.root / "f").exists()

    def test_ignored_file_cannot_be_added(self, repo: Repository) -> None:
        write(repo.root, ".env", "SECRET=1")
        with pytest.raises(UsageError, match="is ignored"):
            repo.add(".env")
        assert repo.status().is_clean

    def test_branch_switch_leaves_ignored_file_alone(self, repo: Repository) -> None:
        commit_file(repo, "a.txt", "a", "add a")
        repo.branch("other")
        write(repo.root, ".env", "SECRET=1")
        with pytest.raises(UsageError):
            repo.add(".env")
        repo.checkout_branch("other")
        commit_file(repo, "b.txt", "b", "add b")
        repo.checkout_branch("main")
        assert read(repo.root, ".env") == "SECRET=1"
        assert not (repo.root / "b.txt").exists()


class TestHistoryQueries:
    def test_log_newest_first(self, repo: Repository) -> None:
        commit_file(repo, "a.txt", "1", "c1")
        commit_file(repo, "a.txt", "2", "c2")
        assert [c.message for c in repo.log()] == ["c2", "c1", "initial commit"]

    def test_global_log_includes_other_branches(self, repo: Repository) -> None:
        repo.branch("side")
        repo.checkout_branch("side")
        commit_file(repo, "s.txt", "s", "side work")
        repo.checkout_branch("main")
        commit_file(repo, "m.txt", "m", "main work")
        messages = {c.message for c in repo.global_log()}
        assert messages == {"initial commit", "side work", "main work"}
        assert "side work" not in [c.message for c in repo.log()]

    def test_find(self, repo: Repository) -> None:
        c1 = commit_file(repo, "a.txt", "1", "same")
        c2 = commit_file(repo, "a.txt", "2", "same")
        assert repo.find("same") == [c1, c2]

    def test_find_nothing(self, repo: Repository) -> None:
        with pytest.raises(NotFoundError, match="Found no commit with that message.") as exc_info:
            repo.find("nope")
        assert exc_info.value.context == {"query": "nope"}


class TestStatus:
    def test_clean_repository(self, repo: Repository) -> None:
        report = repo.status()
        assert report.current_branch == "main"
        assert report.branches == ["main"]
        assert report.is_clean

    def test_all_sections(self, repo: Repository) -> None:
        commit_file(repo, "tracked-mod.txt", "v1", "c1")
        commit_file(repo, "tracked-del.txt", "v1", "c2")
        commit_file(repo, "to-remove.txt", "v1", "c3")
        repo.branch("feature")

        write(repo.root, "staged.txt", "new")
        repo.add("staged.txt")
        write(repo.root, "staged-then-edited.txt", "first")
        repo.add("staged-then-edited.txt")
        write(repo.root, "staged-then-edited.txt", "second")
        write(repo.root, "staged-then-deleted.txt", "gone soon")
        repo.add("staged-then-deleted.txt")
        (repo.root / "staged-then-deleted.txt").unlink()
        repo.rm("to-remove.txt")
        write(repo.root, "tracked-mod.txt", "v2")
        (repo.root / "tracked-del.txt").unlink()
        write(repo.root, "stray.txt", "?")

        report = repo.status()

        assert report.branches == ["feature", "main"]
        assert report.staged == ["staged-then-deleted.txt", "staged-then-edited.txt", "staged.txt"]
        assert report.removed == ["to-remove.txt"]
        assert report.modifications_not_staged == [
            "staged-then-deleted.txt (deleted)",
            "staged-then-edited.txt (modified)",
            "tracked-del.txt (deleted)",
            "tracked-mod.txt (modified)",
        ]
        assert report.untracked == ["stray.txt"]

    def test_file_removed_then_recreated_is_not_untracked(self, repo: Repository) -> None:
        commit_file(repo, "a.txt", "1", "c1")
        repo.rm("a.txt")
        write(repo.root, "a.txt", "back")
        report = repo.status()
        assert report.removed == ["a.txt"]
        assert report.untracked == []


class TestBranchCommands:
    def test_branch_does_not_switch(self, repo: Repository) -> None:
        repo.branch("feature")
        assert repo.current_branch == "main"
        assert repo.branches.get("feature").front_commit_hash == repo.head.commit_hash

    def test_branch_exists(self, repo: Repository) -> None:
        with pytest.raises(AlreadyExistsError, match="A branch with that name already exists."):
            repo.branch("main")

    def test_rm_branch_keeps_commits(self, repo: Repository) -> None:
        repo.branch("feature")
        repo.checkout_branch("feature")
        tip = commit_file(repo, "a.txt", "1", "feature work")
        repo.checkout_branch("main")
        repo.rm_branch("feature")
        assert not repo.branches.exists("feature")
        assert repo.graph.contains(tip)

    def test_rm_current_branch(self, repo: Repository) -> None:
        with pytest.raises(InvalidOperationError, match="Cannot remove the current branch."):
            repo.rm_branch("main")
