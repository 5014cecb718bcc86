"""Tests for .twig/ path helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from twig.paths import (
    STORES,
    ensure_twig_dir,
    find_repo_root,
    find_twig_dir,
    get_config_path,
    get_store_dir,
    get_twig_dir,
)


class TestPaths:
    def test_twig_dir(self, tmp_path: Path) -> None:
        assert get_twig_dir(tmp_path) == tmp_path.resolve() / ".twig"

    def test_store_dir(self, tmp_path: Path) -> None:
        assert get_store_dir(tmp_path, "commits") == tmp_path.resolve() / ".twig" / "commits"

    def test_unknown_store(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            get_store_dir(tmp_path, "objects")

    def test_config_path_at_root(self, tmp_path: Path) -> None:
        assert get_config_path(tmp_path) == tmp_path.resolve() / ".twigrc.toml"

    def test_ensure_creates_every_store(self, tmp_path: Path) -> None:
        twig_dir = ensure_twig_dir(tmp_path)
        assert sorted(p.name for p in twig_dir.iterdir()) == sorted(STORES)

    def test_find_walks_up(self, tmp_path: Path) -> None:
        ensure_twig_dir(tmp_path)
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_twig_dir(nested) == tmp_path.resolve() / ".twig"
        assert find_repo_root(nested) == tmp_path.resolve()

    def test_find_nothing(self, tmp_path: Path) -> None:
        assert find_twig_dir(tmp_path) is None
        assert find_repo_root(tmp_path) is None
