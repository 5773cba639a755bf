"""
Persistent store for meals and user settings.

Wraps a StorageBackend with validation and the failure policy:
- explicit saves validate first and propagate typed errors
- loads degrade to empty/default results when storage is unavailable
- best-effort operations (delete, update) log failures and carry on
"""

from __future__ import annotations

import asyncio
from typing import Any, List, Optional

import structlog

from foodtrack.domain.meal.models import DEFAULT_SETTINGS, Meal, Units, UserSettings
from foodtrack.domain.meal.validation import validate_ingredient, validate_meal, validate_settings
from foodtrack.domain.ports import MEALS, SETTINGS, StorageBackend
from foodtrack.domain.shared.errors import StorageUnavailable, ValidationError

logger = structlog.get_logger(__name__)

SETTINGS_KEY = "userSettings"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def repair_settings(record: Optional[dict[str, Any]]) -> UserSettings:
    """
    Build settings from a stored record, field by field.

    Each missing or wrongly typed field falls back to its default; the
    rest of the record is kept. The incidental storage ``key`` is dropped.
    """
    if not isinstance(record, dict):
        return DEFAULT_SETTINGS

    stored = {k: v for k, v in record.items() if k != "key"}
    defaults = DEFAULT_SETTINGS

    def target(name: str) -> float:
        value = stored.get(name)
        return value if _is_number(value) and value > 0 else getattr(defaults, name)

    dark_mode = stored.get("dark_mode")

    return UserSettings(
        daily_calories=target("daily_calories"),
        daily_protein=target("daily_protein"),
        daily_carbs=target("daily_carbs"),
        daily_fat=target("daily_fat"),
        units=Units.IMPERIAL if stored.get("units") == Units.IMPERIAL.value else Units.METRIC,
        dark_mode=dark_mode if isinstance(dark_mode, bool) else defaults.dark_mode,
    )


class PersistentStore:
    """
    Schema-versioned local store for meals and the settings singleton.

    Opening is lazy and memoized: concurrent first callers share one
    in-flight open. A failed open is forgotten so the next call retries.

    Example:
        >>> store = PersistentStore(SQLiteStorageBackend(tmp_path / "db.sqlite"))
        >>> await store.save_meal(meal)
        >>> meals = await store.load_meals()
    """

    def __init__(self, backend: StorageBackend) -> None:
        """Initialize store.

        Args:
            backend: Storage implementation (SQLite, in-memory)
        """
        self.backend = backend
        self._opened = False
        self._pending_open: Optional[asyncio.Task[None]] = None

    # ------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------

    async def open(self) -> None:
        """
        Open and upgrade the backend once.

        Raises:
            StorageUnavailable: If the backend cannot be opened
        """
        if self._opened:
            return

        if self._pending_open is None:
            self._pending_open = asyncio.ensure_future(self._open())

        pending = self._pending_open
        try:
            await asyncio.shield(pending)
        except Exception:
            if self._pending_open is pending:
                self._pending_open = None
            raise

    async def _open(self) -> None:
        try:
            await self.backend.open()
        except StorageUnavailable:
            logger.error("Failed to initialize database", backend=type(self.backend).__name__)
            raise
        except Exception as e:
            logger.error(
                "Failed to initialize database",
                backend=type(self.backend).__name__,
                error=str(e),
            )
            raise StorageUnavailable(
                f"Failed to initialize database: {e}",
                context={"original_error": type(e).__name__},
            ) from e

        self._opened = True
        logger.info(
            "Database initialized",
            backend=type(self.backend).__name__,
            schema_version=self.backend.schema_version,
        )

    async def close(self) -> None:
        """Close the backend; the next operation reopens it."""
        if self._opened:
            await self.backend.close()
        self._opened = False
        self._pending_open = None

    # ------------------------------------------------------------
    # Meals
    # ------------------------------------------------------------

    async def save_meal(self, meal: Meal) -> None:
        """
        Validate and upsert ``meal`` (full overwrite, last write wins).

        Raises:
            ValidationError: If the meal fails structural validation
            StorageUnavailable: If storage cannot be opened or written
        """
        if not validate_meal(meal):
            raise ValidationError(
                "Invalid meal data structure",
                context={"operation": "save_meal", "meal_id": getattr(meal, "id", None)},
            )

        record = meal.to_record()
        try:
            await self.open()
            await self.backend.put(MEALS, meal.id, record)
        except StorageUnavailable as e:
            e.context.setdefault("operation", "save_meal")
            e.context.setdefault("meal_id", meal.id)
            raise

        logger.info("Meal saved", meal_id=meal.id)

    async def load_meals(self) -> List[Meal]:
        """
        All valid stored meals, most recent first.

        Invalid records are filtered out and logged. Returns an empty list
        when storage is unavailable.
        """
        try:
            await self.open()
            records = await self.backend.get_all(MEALS)
        except StorageUnavailable as e:
            logger.warning("Database not available for loading meals", reason=e.message)
            return []

        meals: List[Meal] = []
        for record in records:
            if not validate_meal(record) or not all(
                validate_ingredient(ingredient) for ingredient in record["ingredients"]
            ):
                continue
            try:
                meals.append(Meal.model_validate(record))
            except ValueError:
                continue

        if len(meals) != len(records):
            logger.warning("Filtered out invalid meals", count=len(records) - len(meals))

        meals.sort(key=lambda meal: meal.timestamp, reverse=True)
        logger.debug("Loaded meals from database", count=len(meals))
        return meals

    async def delete_meal(self, meal_id: str) -> None:
        """Remove a meal; unknown ids and storage failures are logged only."""
        try:
            await self.open()
            await self.backend.delete(MEALS, meal_id)
        except StorageUnavailable as e:
            logger.error("Failed to delete meal", meal_id=meal_id, reason=e.message)
            return

        logger.info("Meal deleted", meal_id=meal_id)

    async def update_meal(self, meal: Meal) -> bool:
        """
        Best-effort overwrite of an existing meal.

        Returns:
            True if saved, False if validation or storage failed (logged)
        """
        try:
            await self.save_meal(meal)
        except (ValidationError, StorageUnavailable) as e:
            logger.error("Failed to update meal", meal_id=getattr(meal, "id", None), code=e.code)
            return False
        return True

    # ------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------

    async def save_settings(self, settings: UserSettings) -> None:
        """
        Validate and overwrite the settings singleton.

        Raises:
            ValidationError: If settings fail structural validation
            StorageUnavailable: If storage cannot be opened or written
        """
        if not validate_settings(settings):
            raise ValidationError(
                "Invalid settings data structure", context={"operation": "save_settings"}
            )

        record = {"key": SETTINGS_KEY, **settings.to_record()}
        try:
            await self.open()
            await self.backend.put(SETTINGS, SETTINGS_KEY, record)
        except StorageUnavailable as e:
            e.context.setdefault("operation", "save_settings")
            raise

        logger.info("Settings saved")

    async def load_settings(self) -> UserSettings:
        """
        Stored settings with per-field repair, or defaults.

        Never raises: storage failures return the defaults.
        """
        try:
            await self.open()
            record = await self.backend.get(SETTINGS, SETTINGS_KEY)
        except StorageUnavailable as e:
            logger.warning("Database not available, using default settings", reason=e.message)
            return DEFAULT_SETTINGS

        if record is None:
            return DEFAULT_SETTINGS

        return repair_settings(record)

    # ------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------

    async def clear_all(self) -> None:
        """
        Empty both collections.

        Raises:
            StorageUnavailable: If storage cannot be opened or cleared
        """
        await self.open()
        await self.backend.clear(MEALS)
        await self.backend.clear(SETTINGS)
        logger.info("All data cleared")
