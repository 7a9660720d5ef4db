"""
Persistence adapters: synchronous key -> JSON value stores.

Components never touch a global cache; they receive an adapter and go through
``get`` / ``set`` / ``remove``. Values are anything ``json.dumps`` accepts and
come back as fresh copies, so callers can mutate what they read without
changing stored state.

Two implementations ship:
- InMemoryAdapter: bounded capacity, used by tests and embedding front ends
- JsonFileAdapter: one ``<key>.json`` file per key under a data directory

Usage:
    from pit_scout.storage.adapter import JsonFileAdapter, apply_writes

    store = JsonFileAdapter("data")
    apply_writes(store, {"match_data": matches, "quick_scores": REMOVE})
"""
from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..errors import StorageError

logger = logging.getLogger(__name__)

# Roughly what a browser grants a single origin
DEFAULT_CAPACITY_BYTES = 5 * 1024 * 1024

_VALID_KEY = re.compile(r"^[A-Za-z0-9_\-]+$")


class _Remove:
    def __repr__(self) -> str:
        return "REMOVE"


# Sentinel for apply_writes: delete the key instead of setting it
REMOVE = _Remove()


def _encode(key: str, value: Any) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as e:
        raise StorageError(f"Value for key '{key}' is not JSON serializable: {e}") from e


class PersistenceAdapter(ABC):
    """Synchronous key -> structured-value store."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``. Raises StorageError on failure."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``. Removing an absent key is not an error."""

    @abstractmethod
    def keys(self) -> List[str]:
        """All stored keys, sorted."""

    def size_of(self, key: str) -> int:
        """Serialized size of a stored value in bytes (0 when absent)."""
        value = self.get(key)
        if value is None:
            return 0
        return len(_encode(key, value).encode("utf-8"))


class InMemoryAdapter(PersistenceAdapter):
    """
    Dict-backed adapter with a capacity bound on the total serialized size.

    Parameters
    ----------
    capacity_bytes : int, optional
        Maximum total size of all serialized values. None disables the bound.
    initial : dict, optional
        Values to preload (subject to the same capacity check)
    """

    def __init__(
        self,
        capacity_bytes: Optional[int] = DEFAULT_CAPACITY_BYTES,
        initial: Optional[Dict[str, Any]] = None,
    ):
        self.capacity_bytes = capacity_bytes
        self._data: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        encoded = _encode(key, value)
        if self.capacity_bytes is not None:
            used = sum(len(v.encode("utf-8")) for k, v in self._data.items() if k != key)
            needed = used + len(encoded.encode("utf-8"))
            if needed > self.capacity_bytes:
                raise StorageError(
                    f"Storage capacity exceeded writing '{key}': "
                    f"{needed} bytes > {self.capacity_bytes} bytes"
                )
        self._data[key] = encoded

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self._data)

    def used_bytes(self) -> int:
        return sum(len(v.encode("utf-8")) for v in self._data.values())


class JsonFileAdapter(PersistenceAdapter):
    """
    Directory-backed adapter: ``{data_dir}/{key}.json`` per key.

    Writes go to a temporary file first and are renamed into place, so a
    failed write leaves the previous value intact.
    """

    def __init__(self, data_dir: Union[str, Path] = "data"):
        self.data_dir = Path(data_dir)

    def _path(self, key: str) -> Path:
        if not _VALID_KEY.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self.data_dir / f"{key}.json"

    def get(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read '{key}' from {path}: {e}") from e

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        encoded = _encode(key, value)
        tmp = path.with_suffix(".json.tmp")
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as f:
                f.write(encoded)
            tmp.replace(path)
        except OSError as e:
            raise StorageError(f"Failed to write '{key}' to {path}: {e}") from e

    def remove(self, key: str) -> None:
        path = self._path(key)
        try:
            if path.exists():
                path.unlink()
        except OSError as e:
            raise StorageError(f"Failed to remove '{key}': {e}") from e

    def keys(self) -> List[str]:
        if not self.data_dir.exists():
            return []
        return sorted(p.stem for p in self.data_dir.glob("*.json"))


def apply_writes(adapter: PersistenceAdapter, writes: Dict[str, Any]) -> None:
    """
    Apply several key writes as one unit.

    Values equal to REMOVE delete the key. Previous values are snapshotted; if
    any write fails, keys already written are restored before the
    StorageError propagates.
    """
    snapshot = {key: adapter.get(key) for key in writes}
    done: List[str] = []
    try:
        for key, value in writes.items():
            if value is REMOVE:
                adapter.remove(key)
            else:
                adapter.set(key, value)
            done.append(key)
    except StorageError:
        for key in reversed(done):
            previous = snapshot[key]
            try:
                if previous is None:
                    adapter.remove(key)
                else:
                    adapter.set(key, previous)
            except StorageError as restore_error:
                logger.error(f"Failed to restore '{key}' after a failed write: {restore_error}")
        raise
