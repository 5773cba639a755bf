"""
Shared fixtures for foodtrack tests.

Reference tables, sample ingredients/meals and storage backends reused
across unit and integration tests.
"""

from typing import Any, List

import pytest

from foodtrack.domain.meal.composer import compose
from foodtrack.domain.meal.models import Ingredient, Meal, UserSettings, Units
from foodtrack.domain.nutrition.aggregator import aggregate
from foodtrack.domain.nutrition.models import NutritionData, NutritionReferenceTable
from foodtrack.infrastructure.persistence.in_memory_backend import InMemoryStorageBackend
from foodtrack.infrastructure.persistence.sqlite_backend import SQLiteStorageBackend
from foodtrack.infrastructure.persistence.store import PersistentStore
from foodtrack.infrastructure.reference.store import FALLBACK_REFERENCE


# ═══════════════════════════════════════════════════════════
# REFERENCE DATA FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def reference_document() -> dict[str, Any]:
    """Reference document as served by the nutrition JSON endpoint."""
    return {
        "apple": {"calories": 52, "protein": 0.3, "carbs": 14, "fat": 0.2},
        "banana": {"calories": 89, "protein": 1.1, "carbs": 23, "fat": 0.3},
        "bread": {"calories": 265, "protein": 9, "carbs": 49, "fat": 3.2},
        "chicken breast": {"calories": 165, "protein": 31, "carbs": 0, "fat": 3.6},
        "rice": {"calories": 130, "protein": 2.7, "carbs": 28, "fat": 0.3},
        "broccoli": {"calories": 34, "protein": 2.8, "carbs": 7, "fat": 0.4},
        "salmon": {"calories": 208, "protein": 20, "carbs": 0, "fat": 13},
    }


@pytest.fixture
def reference_table() -> NutritionReferenceTable:
    """Fallback foods plus broccoli and salmon."""
    entries = dict(FALLBACK_REFERENCE)
    entries["broccoli"] = NutritionData(calories=34, protein=2.8, carbs=7, fat=0.4)
    entries["salmon"] = NutritionData(calories=208, protein=20, carbs=0, fat=13)
    return NutritionReferenceTable(entries)


# ═══════════════════════════════════════════════════════════
# DOMAIN MODEL FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def rice_and_chicken(reference_table: NutritionReferenceTable) -> List[Ingredient]:
    """Two ingredients at 50% each of a 300g meal."""
    return compose([("rice", 0.8), ("chicken breast", 0.6)], 300, reference_table)


@pytest.fixture
def sample_meal(rice_and_chicken: List[Ingredient]) -> Meal:
    """Valid meal built from rice and chicken."""
    return Meal(
        id="a1b2c3d4e5f60718293a4b5c6d7e8f90",
        timestamp=1718000000000,
        photo="data:image/jpeg;base64,AAAA",
        total_weight=300,
        ingredients=rice_and_chicken,
        nutrition=aggregate(rice_and_chicken),
        notes="Lunch",
    )


def make_meal(meal_id: str, timestamp: int, total_weight: float = 100) -> Meal:
    """Minimal valid meal with a single apple ingredient."""
    apple = Ingredient(
        id="ing_0123456789ab",
        name="apple",
        percentage=100.0,
        weight=int(total_weight),
        nutrition=FALLBACK_REFERENCE["apple"].scale_to_weight(total_weight),
    )
    return Meal(
        id=meal_id,
        timestamp=timestamp,
        total_weight=total_weight,
        ingredients=[apple],
        nutrition=aggregate([apple]),
    )


@pytest.fixture
def meal_factory():
    """Factory for minimal meals: ``meal_factory(id, timestamp)``."""
    return make_meal


@pytest.fixture
def custom_settings() -> UserSettings:
    """Non-default settings."""
    return UserSettings(
        daily_calories=1800,
        daily_protein=120,
        daily_carbs=200,
        daily_fat=60,
        units=Units.IMPERIAL,
        dark_mode=True,
    )


# ═══════════════════════════════════════════════════════════
# STORAGE FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def in_memory_store() -> PersistentStore:
    """Store over a fresh in-memory backend."""
    return PersistentStore(InMemoryStorageBackend())


@pytest.fixture
async def sqlite_store(tmp_path):
    """Store over a SQLite file in a temp directory (closed after the test)."""
    store = PersistentStore(SQLiteStorageBackend(tmp_path / "foodtrack.db"))
    yield store
    await store.close()
