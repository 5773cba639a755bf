"""In-memory storage backend.

Dictionary-based implementation of the StorageBackend port for tests and
ephemeral sessions. Data is lost on process exit.
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, Optional

from foodtrack.domain.ports import MEALS, SETTINGS
from foodtrack.domain.shared.errors import StorageUnavailable

SCHEMA_VERSION = 1


def _timestamp_of(record: dict[str, Any]) -> float:
    timestamp = record.get("timestamp")
    if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
        return 0.0
    return float(timestamp)


class InMemoryStorageBackend:
    """
    In-memory implementation of the StorageBackend port.

    Stores deep copies so callers cannot mutate stored records.

    Example:
        >>> backend = InMemoryStorageBackend()
        >>> await backend.open()
        >>> await backend.put("settings", "userSettings", {"dark_mode": True})
    """

    def __init__(self) -> None:
        """Initialize with empty, unopened storage."""
        self._collections: Dict[str, Dict[str, dict[str, Any]]] = {}
        self._schema_version = 0

    @property
    def schema_version(self) -> int:
        return self._schema_version

    def _collection(self, collection: str) -> Dict[str, dict[str, Any]]:
        if self._schema_version == 0:
            raise StorageUnavailable("Database not available", context={"collection": collection})
        try:
            return self._collections[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}") from None

    async def open(self) -> None:
        for name in (MEALS, SETTINGS):
            self._collections.setdefault(name, {})
        self._schema_version = SCHEMA_VERSION

    async def close(self) -> None:
        self._schema_version = 0

    async def put(self, collection: str, key: str, record: dict[str, Any]) -> None:
        self._collection(collection)[key] = deepcopy(record)

    async def get(self, collection: str, key: str) -> Optional[dict[str, Any]]:
        record = self._collection(collection).get(key)
        return deepcopy(record) if record is not None else None

    async def get_all(self, collection: str) -> list[dict[str, Any]]:
        records = [deepcopy(record) for record in self._collection(collection).values()]
        if collection == MEALS:
            records.sort(key=_timestamp_of, reverse=True)
        return records

    async def delete(self, collection: str, key: str) -> None:
        self._collection(collection).pop(key, None)

    async def clear(self, collection: str) -> None:
        self._collection(collection).clear()
