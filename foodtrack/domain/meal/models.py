"""
Domain models for meals and user settings.

Ingredient weight and nutrition are always derived from the ingredient
percentage and the meal total weight; they are never authored directly.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from foodtrack.domain.nutrition.models import NutritionData


class Units(str, Enum):
    """Display unit system."""

    METRIC = "metric"
    IMPERIAL = "imperial"


class Ingredient(BaseModel):
    """
    Single ingredient of a meal.

    Attributes:
        id: Stable identifier within the meal
        name: Canonical food key (reference table key)
        percentage: Share of the meal total weight, 0-100
        weight: Derived weight in grams
        nutrition: Derived absolute nutrition (None when unknown)

    Example:
        >>> ingredient = Ingredient(
        ...     id="ing_0123456789ab",
        ...     name="apple",
        ...     percentage=100.0,
        ...     weight=200,
        ...     nutrition=NutritionData(calories=104, protein=0.6, carbs=28, fat=0.4),
        ... )
        >>> assert ingredient.weight == 200
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Ingredient identifier")
    name: str = Field(..., min_length=1, description="Canonical food name")
    percentage: float = Field(..., ge=0, le=100, description="Share of total weight")
    weight: int = Field(0, ge=0, description="Derived weight in grams")
    nutrition: Optional[NutritionData] = Field(None, description="Derived nutrition")


class Meal(BaseModel):
    """
    Persisted meal record.

    Attributes:
        id: Unique identifier
        timestamp: Creation instant, milliseconds since the Unix epoch
        photo: Opaque image reference (e.g. data URL)
        total_weight: Total weight in grams
        ingredients: Ordered ingredients
        nutrition: Aggregate of ingredient nutrition
        notes: Free text

    Example:
        >>> meal = Meal(
        ...     id="f3b0c4",
        ...     timestamp=1718000000000,
        ...     total_weight=200,
        ...     ingredients=[],
        ...     nutrition=NutritionData.zero(),
        ... )
        >>> assert meal.photo is None
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Meal identifier")
    timestamp: int = Field(..., ge=0, description="Epoch milliseconds")
    photo: Optional[str] = Field(None, description="Opaque image reference")
    total_weight: float = Field(..., gt=0, description="Total weight in grams")
    ingredients: List[Ingredient] = Field(default_factory=list, description="Ingredients")
    nutrition: NutritionData = Field(..., description="Aggregate nutrition")
    notes: Optional[str] = Field(None, description="User notes")

    def to_record(self) -> dict[str, Any]:
        """Convert to a JSON-compatible storage record."""
        return self.model_dump(mode="json")

    @staticmethod
    def now_timestamp() -> int:
        """Current instant in epoch milliseconds."""
        return int(time.time() * 1000)


class UserSettings(BaseModel):
    """
    Singleton user settings record.

    Daily targets are range-policed at the edit boundary, not here
    (calories 800-5000, protein 20-300, carbs 20-500, fat 10-200).

    Example:
        >>> settings = UserSettings()
        >>> assert settings.daily_calories == 2000
        >>> assert settings.units == Units.METRIC
    """

    model_config = ConfigDict(frozen=True)

    daily_calories: float = Field(2000, gt=0, description="Daily kcal target")
    daily_protein: float = Field(150, gt=0, description="Daily protein target in g")
    daily_carbs: float = Field(250, gt=0, description="Daily carbs target in g")
    daily_fat: float = Field(70, gt=0, description="Daily fat target in g")
    units: Units = Field(Units.METRIC, description="Unit system")
    dark_mode: bool = Field(False, description="Dark theme enabled")

    def to_record(self) -> dict[str, Any]:
        """Convert to a JSON-compatible storage record."""
        return self.model_dump(mode="json")


DEFAULT_SETTINGS = UserSettings()
