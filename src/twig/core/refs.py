"""Head pointer - the current branch name and current head commit id."""

from __future__ import annotations

from twig.core.records import RecordStore
from twig.errors import StorageError

HEAD_BRANCH_KEY = "head-branch"
HEAD_COMMIT_KEY = "head-commit"


class HeadPointer:
    """The two single-value records describing what is checked out.

    At rest ``commit_hash`` equals the front commit of ``branch_name``;
    detached heads are not supported.
    """

    def __init__(self, records: RecordStore) -> None:
        self._records = records

    def _read(self, key: str) -> str:
        record = self._records.get(key)
        if record is None or "value" not in record:
            raise StorageError(f"Missing '{key}' record; the repository is incomplete.")
        return str(record["value"])

    @property
    def branch_name(self) -> str:
        return self._read(HEAD_BRANCH_KEY)

    @property
    def commit_hash(self) -> str:
        return self._read(HEAD_COMMIT_KEY)

    def set_branch(self, name: str) -> None:
        self._records.put(HEAD_BRANCH_KEY, {"value": name})

    def set_commit(self, commit_hash: str) -> None:
        self._records.put(HEAD_COMMIT_KEY, {"value": commit_hash})
