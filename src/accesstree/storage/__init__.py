"""Storage package for accesstree.

Provides the Store interface with YAML-file and in-memory implementations.
"""
from __future__ import annotations

from accesstree.storage.store import (
    InMemoryStore,
    PersistenceError,
    Store,
    StoreFormatError,
    YamlFileStore,
)

__all__ = [
    "InMemoryStore",
    "PersistenceError",
    "Store",
    "StoreFormatError",
    "YamlFileStore",
]
