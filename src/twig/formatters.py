"""Plain-text rendering of log entries and status reports."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from twig.core.models import Commit, StatusReport

LOG_SEPARATOR = "==="


def format_timestamp(timestamp: datetime) -> str:
    """Render a timestamp like ``Thu Jan 1 00:00:00 1970 +0000`` in local time."""
    local = timestamp.astimezone()
    return f"{local:%a %b} {local.day} {local:%H:%M:%S %Y %z}"


def format_log_entry(commit: Commit, short_hash_length: int = 7) -> str:
    """One log entry, terminated by a newline.

    Merge commits carry an extra ``Merge:`` line with the abbreviated ids
    of both parents.
    """
    lines = [LOG_SEPARATOR, f"commit {commit.hash}"]
    if commit.is_merge and commit.parent_hash and commit.merged_parent_hash:
        lines.append(
            f"Merge: {commit.parent_hash[:short_hash_length]} "
            f"{commit.merged_parent_hash[:short_hash_length]}"
        )
    lines.append(f"Date: {format_timestamp(commit.timestamp)}")
    lines.append(commit.message)
    return "\n".join(lines) + "\n"


def format_log(commits: Iterable[Commit], short_hash_length: int = 7) -> str:
    """Log entries separated by blank lines."""
    return "\n".join(format_log_entry(c, short_hash_length) for c in commits)


def _section(header: str, entries: Iterable[str]) -> str:
    return "\n".join([f"=== {header} ===", *entries]) + "\n"


def format_status(report: StatusReport) -> str:
    """The five status sections, each followed by a blank line."""
    branches = [
        f"*{name}" if name == report.current_branch else name for name in report.branches
    ]
    sections = [
        _section("Branches", branches),
        _section("Staged Files", report.staged),
        _section("Removed Files", report.removed),
        _section("Modifications Not Staged For Commit", report.modifications_not_staged),
        _section("Untracked Files", report.untracked),
    ]
    return "\n".join(sections)
