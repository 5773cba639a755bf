"""SQLite implementation of the local storage backend.

Storage design:
- Table ``meals``: id PRIMARY KEY, timestamp, record (JSON)
- Index ``idx_meals_timestamp`` on timestamp DESC (newest-first reads)
- Table ``settings``: key PRIMARY KEY, record (JSON)
- Schema version kept in ``PRAGMA user_version``; ``open()`` applies every
  migration above the stored version, in order

sqlite3 is blocking, so every statement runs on a single dedicated worker
thread; the event loop never blocks and statements never interleave.
"""

from __future__ import annotations

import asyncio
import json
import sqlite3
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Optional, Sequence, TypeVar, Union

import structlog

from foodtrack.domain.ports import MEALS, SETTINGS
from foodtrack.domain.shared.errors import StorageUnavailable

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Index i holds the statements that upgrade version i to i + 1.
MIGRATIONS: Sequence[Sequence[str]] = (
    (
        """
        CREATE TABLE IF NOT EXISTS meals (
            id TEXT PRIMARY KEY,
            timestamp REAL NOT NULL,
            record TEXT NOT NULL
        );
        """,
        "CREATE INDEX IF NOT EXISTS idx_meals_timestamp ON meals(timestamp DESC);",
        """
        CREATE TABLE IF NOT EXISTS settings (
            key TEXT PRIMARY KEY,
            record TEXT NOT NULL
        );
        """,
    ),
)

SCHEMA_VERSION = len(MIGRATIONS)

_KEY_COLUMNS = {MEALS: "id", SETTINGS: "key"}


class SQLiteStorageBackend:
    """
    Versioned SQLite store for meals and settings.

    Example:
        >>> backend = SQLiteStorageBackend(Path("~/.foodtrack/foodtrack.db").expanduser())
        >>> await backend.open()
        >>> await backend.put("meals", meal.id, meal.to_record())
    """

    def __init__(self, path: Union[str, Path]) -> None:
        """
        Initialize backend.

        Args:
            path: Database file (parent directories are created), or
                ":memory:" for a throwaway database
        """
        self.path = str(path)
        self._conn: Optional[sqlite3.Connection] = None
        self._schema_version = 0
        self._executor: Optional[ThreadPoolExecutor] = None

    @property
    def schema_version(self) -> int:
        return self._schema_version

    def _ensure_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="foodtrack-sqlite")
        return self._executor

    async def _run(self, operation: str, fn: Callable[[], T]) -> T:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self._ensure_executor(), fn)
        except StorageUnavailable:
            raise
        except (sqlite3.Error, OSError, ValueError) as e:
            raise StorageUnavailable(
                f"Storage operation failed: {e}",
                context={"operation": operation, "path": self.path, "original_error": type(e).__name__},
            ) from e

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageUnavailable("Database not available", context={"path": self.path})
        return self._conn

    # ------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------

    def _open_sync(self) -> int:
        if self._conn is None:
            if self.path != ":memory:":
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            self._conn = conn

        conn = self._conn
        current = conn.execute("PRAGMA user_version;").fetchone()[0]

        if current > SCHEMA_VERSION:
            raise StorageUnavailable(
                "Database was created by a newer version",
                context={"path": self.path, "found": current, "supported": SCHEMA_VERSION},
            )

        for version in range(current, SCHEMA_VERSION):
            with conn:
                for statement in MIGRATIONS[version]:
                    conn.execute(statement)
                conn.execute(f"PRAGMA user_version = {version + 1};")
            logger.info("Upgraded database schema", path=self.path, version=version + 1)

        return SCHEMA_VERSION

    async def open(self) -> None:
        self._schema_version = await self._run("open", self._open_sync)

    def _close_sync(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    async def close(self) -> None:
        if self._executor is None:
            return
        await self._run("close", self._close_sync)
        self._executor.shutdown(wait=False)
        self._executor = None
        self._schema_version = 0

    # ------------------------------------------------------------
    # Records
    # ------------------------------------------------------------

    @staticmethod
    def _key_column(collection: str) -> str:
        try:
            return _KEY_COLUMNS[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}") from None

    async def put(self, collection: str, key: str, record: dict[str, Any]) -> None:
        key_column = self._key_column(collection)
        payload = json.dumps(record)

        def _put() -> None:
            conn = self._connection()
            with conn:
                if collection == MEALS:
                    conn.execute(
                        "INSERT OR REPLACE INTO meals (id, timestamp, record) VALUES (?, ?, ?);",
                        (key, float(record.get("timestamp") or 0), payload),
                    )
                else:
                    conn.execute(
                        f"INSERT OR REPLACE INTO {collection} ({key_column}, record) VALUES (?, ?);",
                        (key, payload),
                    )

        await self._run("put", _put)

    async def get(self, collection: str, key: str) -> Optional[dict[str, Any]]:
        key_column = self._key_column(collection)

        def _get() -> Optional[str]:
            row = (
                self._connection()
                .execute(f"SELECT record FROM {collection} WHERE {key_column} = ?;", (key,))
                .fetchone()
            )
            return row["record"] if row else None

        raw = await self._run("get", _get)
        return self._decode(raw) if raw is not None else None

    async def get_all(self, collection: str) -> list[dict[str, Any]]:
        self._key_column(collection)
        order = " ORDER BY timestamp DESC" if collection == MEALS else ""

        def _get_all() -> list[str]:
            rows = self._connection().execute(f"SELECT record FROM {collection}{order};").fetchall()
            return [row["record"] for row in rows]

        raws = await self._run("get_all", _get_all)
        records = []
        for raw in raws:
            decoded = self._decode(raw)
            if decoded is not None:
                records.append(decoded)
        return records

    async def delete(self, collection: str, key: str) -> None:
        key_column = self._key_column(collection)

        def _delete() -> None:
            conn = self._connection()
            with conn:
                conn.execute(f"DELETE FROM {collection} WHERE {key_column} = ?;", (key,))

        await self._run("delete", _delete)

    async def clear(self, collection: str) -> None:
        self._key_column(collection)

        def _clear() -> None:
            conn = self._connection()
            with conn:
                conn.execute(f"DELETE FROM {collection};")

        await self._run("clear", _clear)

    @staticmethod
    def _decode(raw: str) -> Optional[dict[str, Any]]:
        try:
            value = json.loads(raw)
        except ValueError:
            logger.warning("Skipping undecodable stored record")
            return None
        return value if isinstance(value, dict) else None
