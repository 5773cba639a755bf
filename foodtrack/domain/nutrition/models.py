"""
Nutrition domain models.

Macro values either per 100g (reference table) or absolute (ingredient,
meal), plus the read-only reference table itself.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from foodtrack.domain.shared.rounding import round_to_int, round_to_tenth

REFERENCE_QUANTITY_G = 100.0


class NutritionData(BaseModel):
    """
    Macro nutrient values.

    Immutable value object. Used per 100g in the reference table and as
    absolute values on ingredients and meals.

    Attributes:
        calories: Energy in kcal (whole number on derived values)
        protein: Protein in grams
        carbs: Carbohydrates in grams
        fat: Total fat in grams

    Example:
        >>> apple = NutritionData(calories=52, protein=0.3, carbs=14, fat=0.2)
        >>> scaled = apple.scale_to_weight(200)
        >>> assert scaled.calories == 104
        >>> assert scaled.carbs == 28.0
    """

    model_config = ConfigDict(frozen=True)

    calories: float = Field(0, ge=0, description="Energy in kcal")
    protein: float = Field(0.0, ge=0, description="Protein in g")
    carbs: float = Field(0.0, ge=0, description="Carbohydrates in g")
    fat: float = Field(0.0, ge=0, description="Total fat in g")

    @field_validator("calories")
    @classmethod
    def whole_calories_as_int(cls, v: float) -> float:
        """Keep whole-number calories as int."""
        return int(v) if float(v).is_integer() else v

    @classmethod
    def zero(cls) -> NutritionData:
        """All-zero nutrition."""
        return cls(calories=0, protein=0, carbs=0, fat=0)

    def scale_to_weight(self, weight_g: float) -> NutritionData:
        """
        Scale per-100g values to an absolute weight.

        Calories are rounded to the nearest integer, macros to one decimal.

        Args:
            weight_g: Weight in grams (0 yields all-zero nutrition)

        Returns:
            New NutritionData for ``weight_g`` grams
        """
        if weight_g < 0:
            raise ValueError(f"Weight must not be negative: {weight_g}")

        factor = weight_g / REFERENCE_QUANTITY_G

        return NutritionData(
            calories=round_to_int(self.calories * factor),
            protein=round_to_tenth(self.protein * factor),
            carbs=round_to_tenth(self.carbs * factor),
            fat=round_to_tenth(self.fat * factor),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for storage/serialization."""
        return self.model_dump()


class NutritionReferenceTable(Mapping[str, NutritionData]):
    """
    Read-only mapping of canonical food name to per-100g nutrition.

    Lookups are case-insensitive. Never mutated after construction.

    Example:
        >>> table = NutritionReferenceTable(
        ...     {"Apple": NutritionData(calories=52, protein=0.3, carbs=14, fat=0.2)}
        ... )
        >>> assert "APPLE" in table
        >>> assert table["apple"].calories == 52
    """

    def __init__(
        self,
        entries: Mapping[str, NutritionData],
        is_fallback: bool = False,
    ) -> None:
        normalized = {self.normalize_key(name): value for name, value in entries.items()}
        self._entries: Mapping[str, NutritionData] = MappingProxyType(normalized)
        self.is_fallback = is_fallback

    @staticmethod
    def normalize_key(name: str) -> str:
        """Canonical lookup key."""
        return name.strip().lower()

    def __getitem__(self, name: str) -> NutritionData:
        return self._entries[self.normalize_key(name)]

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return self.normalize_key(name) in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, name: str) -> Optional[NutritionData]:
        """Per-100g values for ``name`` or None."""
        return self._entries.get(self.normalize_key(name))

    def __repr__(self) -> str:
        kind = "fallback" if self.is_fallback else "loaded"
        return f"NutritionReferenceTable({len(self)} foods, {kind})"
