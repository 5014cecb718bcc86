"""Error handling framework for twig."""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class ExitCode(IntEnum):
    """twig CLI exit codes (used when strict exit codes are enabled)."""

    SUCCESS = 0
    USAGE_ERROR = 1  # Wrong operand shape
    NOT_FOUND = 2  # Missing commit/branch/file
    INVALID_OPERATION = 3  # Precondition violated
    CONFLICT = 4  # Untracked file in the way
    STORAGE_ERROR = 5  # Corrupt or unreadable .twig/ records
    CONFIG_ERROR = 6  # Configuration or repository location error


class TwigError(Exception):
    """Base exception for twig errors."""

    exit_code: ExitCode = ExitCode.INVALID_OPERATION

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for JSON output."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "exit_code": self.exit_code,
            **self.context,
        }


class UsageError(TwigError):
    """Wrong operand shape."""

    exit_code = ExitCode.USAGE_ERROR


class AlreadyExistsError(TwigError):
    """A branch or repository with that name already exists."""

    exit_code = ExitCode.INVALID_OPERATION


class NotFoundError(TwigError):
    """A commit, branch, snapshot or file does not exist."""

    exit_code = ExitCode.NOT_FOUND


class InvalidOperationError(TwigError):
    """A command precondition was violated."""

    exit_code = ExitCode.INVALID_OPERATION


class AmbiguousRefError(InvalidOperationError):
    """An abbreviated commit id matches more than one commit."""

    def __init__(self, prefix: str, matches: list[str]) -> None:
        super().__init__(
            f"Commit id prefix '{prefix}' is ambiguous ({len(matches)} matches).",
            prefix=prefix,
            matches=matches,
        )
        self.prefix = prefix
        self.matches = matches


class UntrackedFileConflictError(TwigError):
    """Reconciling the working tree would clobber an untracked file."""

    exit_code = ExitCode.CONFLICT

    def __init__(self, files: list[str]) -> None:
        super().__init__(
            "There is an untracked file in the way; delete it, or add and commit it first.",
            files=files,
        )
        self.files = files


class RepositoryNotFoundError(TwigError):
    """No .twig/ directory was found."""

    exit_code = ExitCode.CONFIG_ERROR


class StorageError(TwigError):
    """A persisted record could not be read or written."""

    exit_code = ExitCode.STORAGE_ERROR


class ConfigError(TwigError):
    """Configuration-related errors."""

    exit_code = ExitCode.CONFIG_ERROR
