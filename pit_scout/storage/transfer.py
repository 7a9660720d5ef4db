"""
Data transfer: full export, raw import and cached-data housekeeping.

Export is a dump of every persisted key as one JSON document. Importing a dump
is a raw key-by-key overwrite with no validation of the values; the structured
team import lives in pit_scout.profiles.identity.
"""
from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Union

from ..errors import StorageError, ValidationError
from . import keys as K
from .adapter import PersistenceAdapter, apply_writes, REMOVE

logger = logging.getLogger(__name__)


def export_dump(adapter: PersistenceAdapter) -> Dict[str, Any]:
    """Return {key: value} for every stored key."""
    return {key: adapter.get(key) for key in adapter.keys()}


def write_dump(adapter: PersistenceAdapter, path: Union[str, Path]) -> Path:
    """Write the full dump to ``path`` as indented JSON."""
    p = Path(path)
    data = export_dump(adapter)
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        with p.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
    except OSError as e:
        raise StorageError(f"Failed to write export to {p}: {e}") from e
    logger.info(f"Exported {len(data)} keys to {p}")
    return p


def read_dump(path: Union[str, Path]) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"No such file: {p}")
    with p.open("r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except ValueError as e:
            raise ValidationError(f"Import file {p} is not valid JSON: {e}") from e


def import_dump(adapter: PersistenceAdapter, data: Dict[str, Any]) -> List[str]:
    """
    Overwrite stored keys with the dump's values.

    Keys not present in the dump are left alone. Returns the imported keys.
    """
    if not isinstance(data, dict):
        raise ValidationError("Import dump must be a JSON object of key -> value")
    apply_writes(adapter, dict(data))
    logger.info(f"Imported {len(data)} keys")
    return sorted(data)


def format_bytes(num_bytes: int, decimals: int = 2) -> str:
    """
    Human-readable size.

    >>> format_bytes(0)
    '0 Bytes'
    >>> format_bytes(1536)
    '1.5 KB'
    """
    if num_bytes == 0:
        return "0 Bytes"
    k = 1024
    dm = max(decimals, 0)
    sizes = ["Bytes", "KB", "MB", "GB"]
    i = min(int(math.floor(math.log(num_bytes) / math.log(k))), len(sizes) - 1)
    value = f"{num_bytes / (k ** i):.{dm}f}"
    if "." in value:
        value = value.rstrip("0").rstrip(".")
    return f"{value} {sizes[i]}"


def list_cached_items(adapter: PersistenceAdapter) -> List[Dict[str, Any]]:
    """
    Cached data keys with sizes, excluding settings and team notes.
    """
    items = []
    for key in adapter.keys():
        if key in K.PRESERVED_KEYS or key.startswith(K.NOTES_PREFIX):
            continue
        size = adapter.size_of(key)
        items.append({"key": key, "bytes": size, "size": format_bytes(size)})
    return items


def clear_cached_data(adapter: PersistenceAdapter) -> List[str]:
    """Remove every key except app settings and the theme flag."""
    doomed = [key for key in adapter.keys() if key not in K.PRESERVED_KEYS]
    apply_writes(adapter, {key: REMOVE for key in doomed})
    logger.info(f"Cleared {len(doomed)} cached keys")
    return doomed


def delete_cached_item(adapter: PersistenceAdapter, key: str) -> None:
    adapter.remove(key)
