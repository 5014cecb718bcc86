"""Centralized path definitions for twig repository data.

All repository state is stored in the .twig/ directory at the root of
the working tree:

    .twig/
    ├── commits/        # Commit records keyed by commit id
    ├── snapshots/      # File snapshots keyed by content hash
    ├── branches/       # Branch records keyed by branch name
    ├── staging/        # Pending additions and removals
    └── meta/           # Current branch name and head commit id

The configuration file (.twigrc.toml) stays at the project root since
it's user-editable configuration.
"""

from __future__ import annotations

from pathlib import Path

# Directory containing all twig data
TWIG_DIR = ".twig"

# Keyed stores within .twig/
COMMITS_STORE = "commits"
SNAPSHOTS_STORE = "snapshots"
BRANCHES_STORE = "branches"
STAGING_STORE = "staging"
META_STORE = "meta"

STORES = (COMMITS_STORE, SNAPSHOTS_STORE, BRANCHES_STORE, STAGING_STORE, META_STORE)

# Config file stays at project root (user-editable)
CONFIG_FILE = ".twigrc.toml"


def get_twig_dir(root: Path | str = ".") -> Path:
    """Get the .twig directory path for a working tree root.

    Args:
        root: Working tree root (default: current directory)

    Returns:
        Path to the .twig directory
    """
    return Path(root).resolve() / TWIG_DIR


def get_store_dir(root: Path | str, store: str) -> Path:
    """Get the directory backing one keyed store.

    Args:
        root: Working tree root
        store: Store name, one of STORES

    Returns:
        Path to the store directory (.twig/<store>/)
    """
    if store not in STORES:
        raise ValueError(f"Unknown store: {store}")
    return get_twig_dir(root) / store


def get_config_path(root: Path | str = ".") -> Path:
    """Get the configuration file path.

    Note: Config file stays at project root for easy editing.
    """
    return Path(root).resolve() / CONFIG_FILE


def ensure_twig_dir(root: Path | str = ".") -> Path:
    """Ensure the .twig directory and its store directories exist."""
    twig_dir = get_twig_dir(root)
    twig_dir.mkdir(parents=True, exist_ok=True)
    for store in STORES:
        (twig_dir / store).mkdir(exist_ok=True)
    return twig_dir


def find_twig_dir(start: Path | str = ".") -> Path | None:
    """Find the nearest .twig directory walking up from start.

    Useful for commands run from subdirectories.

    Returns:
        Path to the nearest .twig directory, or None if not found
    """
    current = Path(start).resolve()

    while current != current.parent:
        twig_dir = current / TWIG_DIR
        if twig_dir.is_dir():
            return twig_dir
        current = current.parent

    # Check root directory
    twig_dir = current / TWIG_DIR
    if twig_dir.is_dir():
        return twig_dir

    return None


def find_repo_root(start: Path | str = ".") -> Path | None:
    """Find the working tree root that owns the nearest .twig directory."""
    twig_dir = find_twig_dir(start)
    return twig_dir.parent if twig_dir else None


__all__ = [
    "TWIG_DIR",
    "COMMITS_STORE",
    "SNAPSHOTS_STORE",
    "BRANCHES_STORE",
    "STAGING_STORE",
    "META_STORE",
    "STORES",
    "CONFIG_FILE",
    "get_twig_dir",
    "get_store_dir",
    "get_config_path",
    "ensure_twig_dir",
    "find_twig_dir",
    "find_repo_root",
]
