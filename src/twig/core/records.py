"""Keyed record storage for the .twig/ directory.

Each store (commits, snapshots, branches, staging, meta) is a diskcache
``Cache`` holding one JSON document per key. Documents carry an explicit
``format`` field so the encoding can evolve without guessing:

    {"format": 1, "hash": "...", "message": "...", ...}

Keys are sorted inside each document for deterministic output.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from diskcache import Cache

from twig.errors import StorageError

logger = logging.getLogger(__name__)

RECORD_FORMAT = 1


class RecordStore:
    """A persistent mapping of string keys to JSON records.

    Iteration order is insertion order, which makes ``keys()`` a stable
    "first encountered" order for lookups that scan the store.
    """

    def __init__(self, directory: Path, name: str) -> None:
        """Open (or create) the store backed by ``directory``.

        Args:
            directory: Directory holding the diskcache database.
            name: Store name used in error messages.
        """
        self.name = name
        self.directory = directory
        try:
            self._cache = Cache(str(directory))
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"Cannot open {name} store at {directory}: {e}", store=name) from e

    def _encode(self, record: dict[str, Any]) -> str:
        return json.dumps({"format": RECORD_FORMAT, **record}, sort_keys=True)

    def _decode(self, key: str, raw: Any) -> dict[str, Any]:
        try:
            data = json.loads(raw)
        except (TypeError, json.JSONDecodeError) as e:
            raise StorageError(f"Corrupt record '{key}' in {self.name} store: {e}", store=self.name) from e
        if not isinstance(data, dict) or data.get("format") != RECORD_FORMAT:
            found = data.get("format") if isinstance(data, dict) else None
            raise StorageError(
                f"Unsupported record format {found!r} for '{key}' in {self.name} store",
                store=self.name,
            )
        data.pop("format")
        return data

    def get(self, key: str) -> dict[str, Any] | None:
        """Return the record stored under ``key``, or None."""
        try:
            raw = self._cache.get(key)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot read '{key}' from {self.name} store: {e}", store=self.name) from e
        if raw is None:
            return None
        return self._decode(key, raw)

    def put(self, key: str, record: dict[str, Any]) -> None:
        """Store ``record`` under ``key``, replacing any previous record."""
        try:
            self._cache.set(key, self._encode(record))
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"Cannot write '{key}' to {self.name} store: {e}", store=self.name) from e

    def add(self, key: str, record: dict[str, Any]) -> bool:
        """Store ``record`` only if ``key`` is absent. Returns True if stored."""
        try:
            return bool(self._cache.add(key, self._encode(record)))
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"Cannot write '{key}' to {self.name} store: {e}", store=self.name) from e

    def delete(self, key: str) -> bool:
        """Delete ``key``. Returns True if it existed."""
        try:
            return bool(self._cache.delete(key))
        except sqlite3.Error as e:
            raise StorageError(f"Cannot delete '{key}' from {self.name} store: {e}", store=self.name) from e

    def __contains__(self, key: object) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    def keys(self, prefix: str = "") -> list[str]:
        """All keys in insertion order, optionally restricted to a prefix."""
        return [key for key in self._cache if isinstance(key, str) and key.startswith(prefix)]

    def items(self, prefix: str = "") -> Iterator[tuple[str, dict[str, Any]]]:
        for key in self.keys(prefix):
            record = self.get(key)
            if record is not None:
                yield key, record

    def clear(self, prefix: str = "") -> int:
        """Remove every key (with ``prefix``). Returns the number removed."""
        if not prefix:
            return int(self._cache.clear())
        removed = 0
        for key in self.keys(prefix):
            removed += self.delete(key)
        return removed

    @contextmanager
    def transact(self) -> Iterator[None]:
        """Group several writes into one database transaction."""
        with self._cache.transact():
            yield

    def close(self) -> None:
        self._cache.close()
        logger.debug("Closed %s store", self.name)


__all__ = ["RECORD_FORMAT", "RecordStore"]
