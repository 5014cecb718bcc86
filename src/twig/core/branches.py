"""Branch registry - named, mutable pointers into the commit graph."""

from __future__ import annotations

import logging

from twig.core.models import Branch
from twig.core.records import RecordStore
from twig.errors import AlreadyExistsError, InvalidOperationError, NotFoundError, StorageError

logger = logging.getLogger(__name__)


class BranchRegistry:
    """Create, look up, move and delete branches."""

    def __init__(self, records: RecordStore) -> None:
        self._records = records

    def create(self, name: str, front_hash: str) -> Branch:
        branch = Branch(name=name, front_commit_hash=front_hash)
        if not self._records.add(name, branch.to_dict()):
            raise AlreadyExistsError("A branch with that name already exists.", branch=name)
        logger.debug("Created branch %s at %s", name, front_hash[:7])
        return branch

    def get(self, name: str) -> Branch:
        record = self._records.get(name)
        if record is None:
            raise NotFoundError("A branch with that name does not exist.", branch=name)
        try:
            return Branch.from_dict(record)
        except (KeyError, TypeError) as e:
            raise StorageError(f"Invalid branch record {name}: {e}") from e

    def exists(self, name: str) -> bool:
        return name in self._records

    def move(self, name: str, new_hash: str) -> None:
        """Point ``name`` at ``new_hash`` unconditionally."""
        self._records.put(name, Branch(name=name, front_commit_hash=new_hash).to_dict())
        logger.debug("Moved branch %s to %s", name, new_hash[:7])

    def delete(self, name: str, current_branch: str) -> None:
        """Delete a branch pointer (the commits it pointed at are kept)."""
        if not self.exists(name):
            raise NotFoundError("A branch with that name does not exist.", branch=name)
        if name == current_branch:
            raise InvalidOperationError("Cannot remove the current branch.", branch=name)
        self._records.delete(name)
        logger.debug("Deleted branch %s", name)

    def list(self) -> list[str]:
        """Branch names in alphabetical order."""
        return sorted(self._records.keys())
