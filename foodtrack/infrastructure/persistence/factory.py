"""Storage factory.

Backend selection driven by configuration:
- sqlite (default): durable single-file store at ``db_path``
- inmemory: transient store for tests and demos

Usage:
    from foodtrack.infrastructure.persistence.factory import create_persistent_store

    store = create_persistent_store(load_config())
"""

from __future__ import annotations

from foodtrack.config import TrackerConfig
from foodtrack.domain.ports import StorageBackend
from foodtrack.infrastructure.persistence.in_memory_backend import InMemoryStorageBackend
from foodtrack.infrastructure.persistence.sqlite_backend import SQLiteStorageBackend
from foodtrack.infrastructure.persistence.store import PersistentStore


def create_storage_backend(config: TrackerConfig) -> StorageBackend:
    """Backend named by ``config.storage_backend``."""
    if config.storage_backend == "inmemory":
        return InMemoryStorageBackend()
    return SQLiteStorageBackend(config.db_path)


def create_persistent_store(config: TrackerConfig) -> PersistentStore:
    """Persistent store over the configured backend."""
    return PersistentStore(create_storage_backend(config))
