"""Data models for the twig object stores.

Defines the immutable Snapshot and Commit records, the mutable Branch
pointer, and the result types returned by status and merge.
"""

from __future__ import annotations

import base64
import hashlib
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


def snapshot_hash(name: str, content: bytes) -> str:
    """Content address of a file snapshot (same name + content => same hash)."""
    digest = hashlib.sha1()
    digest.update(b"blob\0")
    digest.update(name.encode("utf-8"))
    digest.update(b"\0")
    digest.update(content)
    return digest.hexdigest()


@dataclass(frozen=True)
class Snapshot:
    """An immutable, content-addressed record of one file's content."""

    name: str
    content: bytes
    hash: str

    @classmethod
    def of(cls, name: str, content: bytes) -> Snapshot:
        return cls(name=name, content=content, hash=snapshot_hash(name, content))

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "content": base64.b64encode(self.content).decode("ascii"),
            "hash": self.hash,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Snapshot:
        return cls(
            name=data["name"],
            content=base64.b64decode(data["content"]),
            hash=data["hash"],
        )


@dataclass(frozen=True)
class Commit:
    """An immutable node of the commit graph.

    ``parent_hash`` is the primary (first-parent) ancestry edge and
    ``merged_parent_hash`` the secondary edge, present only on merge commits.
    ``snapshots`` maps each tracked file name to its snapshot hash.
    """

    hash: str
    message: str
    timestamp: datetime
    snapshots: dict[str, str] = field(default_factory=dict)
    parent_hash: str | None = None
    merged_parent_hash: str | None = None

    @property
    def is_root(self) -> bool:
        return self.parent_hash is None

    @property
    def is_merge(self) -> bool:
        return self.merged_parent_hash is not None

    def short_hash(self, length: int = 7) -> str:
        """The first ``length`` characters of the commit id."""
        return self.hash[:length]

    def tracks(self, name: str) -> bool:
        """True if this commit tracks a file called ``name``."""
        return name in self.snapshots

    def snapshot_hash(self, name: str) -> str | None:
        return self.snapshots.get(name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "hash": self.hash,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "snapshots": dict(sorted(self.snapshots.items())),
            "parent_hash": self.parent_hash,
            "merged_parent_hash": self.merged_parent_hash,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Commit:
        timestamp = datetime.fromisoformat(data["timestamp"])
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=UTC)
        return cls(
            hash=data["hash"],
            message=data["message"],
            timestamp=timestamp,
            snapshots=dict(data.get("snapshots", {})),
            parent_hash=data.get("parent_hash"),
            merged_parent_hash=data.get("merged_parent_hash"),
        )


@dataclass
class Branch:
    """A named, movable pointer into the commit graph."""

    name: str
    front_commit_hash: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "front_commit_hash": self.front_commit_hash}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Branch:
        return cls(name=data["name"], front_commit_hash=data["front_commit_hash"])


@dataclass
class StatusReport:
    """Snapshot of branches, staging area and working tree for `twig status`."""

    current_branch: str
    branches: list[str] = field(default_factory=list)
    staged: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    untracked: list[str] = field(default_factory=list)

    @property
    def modifications_not_staged(self) -> list[str]:
        entries = [f"{name} (modified)" for name in self.modified]
        entries.extend(f"{name} (deleted)" for name in self.deleted)
        return sorted(entries)

    @property
    def is_clean(self) -> bool:
        return not (self.staged or self.removed or self.modified or self.deleted or self.untracked)

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_branch": self.current_branch,
            "branches": self.branches,
            "staged": self.staged,
            "removed": self.removed,
            "modifications_not_staged": self.modifications_not_staged,
            "untracked": self.untracked,
        }


class MergeKind(Enum):
    """How a merge terminated."""

    FAST_FORWARD = "fast-forward"
    MERGED = "merged"


@dataclass
class MergeResult:
    """Outcome of merging another branch into the current one."""

    kind: MergeKind
    commit_hash: str
    conflicts: list[str] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "commit_hash": self.commit_hash,
            "conflicts": self.conflicts,
        }
