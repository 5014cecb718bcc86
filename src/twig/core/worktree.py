"""Working tree access.

twig tracks a flat tree: only regular files directly inside the
repository root. Sub-directories, the .twig/ directory and files matching
the configured ignore patterns are never listed, read or written.
"""

from __future__ import annotations

import fnmatch
import logging
from pathlib import Path

from twig.errors import NotFoundError, UsageError
from twig.paths import TWIG_DIR

logger = logging.getLogger(__name__)


class WorkingTree:
    """Reads and writes plain files in the repository root."""

    def __init__(self, root: Path, ignore: list[str] | None = None) -> None:
        self.root = Path(root).resolve()
        self.ignore = list(ignore or [])

    def _path(self, name: str) -> Path:
        if not name or name in (".", "..", TWIG_DIR) or "/" in name or "\\" in name:
            raise UsageError(f"'{name}' is not a file in the repository root.", file=name)
        return self.root / name

    def is_ignored(self, name: str) -> bool:
        return any(fnmatch.fnmatch(name, pattern) for pattern in self.ignore)

    def files(self) -> list[str]:
        """Names of all visible plain files, sorted."""
        return sorted(
            entry.name
            for entry in self.root.iterdir()
            if entry.is_file() and entry.name != TWIG_DIR and not self.is_ignored(entry.name)
        )

    def exists(self, name: str) -> bool:
        return self._path(name).is_file()

    def read(self, name: str) -> bytes:
        path = self._path(name)
        if self.is_ignored(name):
            raise UsageError(f"'{name}' is ignored by the repository configuration.", file=name)
        if not path.is_file():
            raise NotFoundError("File does not exist.", file=name)
        return path.read_bytes()

    def write(self, name: str, content: bytes) -> None:
        """Create or overwrite ``name`` with ``content``."""
        self._path(name).write_bytes(content)

    def delete(self, name: str) -> bool:
        """Delete ``name`` if it is a plain file. Returns True if removed."""
        path = self._path(name)
        if not path.is_file():
            return False
        path.unlink()
        logger.debug("Deleted working file %s", name)
        return True
