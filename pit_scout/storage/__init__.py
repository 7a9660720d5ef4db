"""
Storage layer: persistence adapters, the key schema and data transfer.
"""
from .adapter import (
    PersistenceAdapter,
    InMemoryAdapter,
    JsonFileAdapter,
    apply_writes,
    REMOVE,
)
from . import keys

__all__ = [
    "PersistenceAdapter",
    "InMemoryAdapter",
    "JsonFileAdapter",
    "apply_writes",
    "REMOVE",
    "keys",
]
