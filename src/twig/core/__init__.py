"""twig core - object stores, commit graph and the command engines."""

from twig.core.models import (
    Branch,
    Commit,
    MergeKind,
    MergeResult,
    Snapshot,
    StatusReport,
)
from twig.core.repository import Repository

__all__ = [
    "Branch",
    "Commit",
    "MergeKind",
    "MergeResult",
    "Repository",
    "Snapshot",
    "StatusReport",
]
