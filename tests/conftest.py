"""Shared fixtures for twig tests."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest

from twig.config import TwigConfig
from twig.core.repository import Repository


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep user-level config and TWIG_* variables out of every test."""
    monkeypatch.setenv("HOME", str(tmp_path_factory.mktemp("home")))
    for key in list(os.environ):
        if key.startswith("TWIG_"):
            monkeypatch.delenv(key)


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    """An empty working directory for a repository."""
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def repo(work_dir: Path) -> Iterator[Repository]:
    """A freshly initialized repository with default configuration."""
    with Repository.init(work_dir, TwigConfig()) as repository:
        yield repository


def write(root: Path, name: str, text: str) -> None:
    (root / name).write_text(text)


def read(root: Path, name: str) -> str:
    return (root / name).read_text()


def commit_file(repo: Repository, name: str, text: str, message: str) -> str:
    """Write, stage and commit one file; returns the new commit id."""
    write(repo.root, name, text)
    repo.add(name)
    return repo.commit(message).hash
