"""
Shared value objects.

Immutable, validated identifiers for meals and ingredients.
"""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MealId(BaseModel):
    """
    Meal ID value object.

    Identifies persisted meal records.

    Example:
        >>> meal_id = MealId.generate()
        >>> assert len(meal_id.value) == 32
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., min_length=1, description="Meal identifier")

    @field_validator("value")
    @classmethod
    def not_empty(cls, v: str) -> str:
        """Ensure not empty or whitespace."""
        if not v.strip():
            raise ValueError("MealId cannot be empty or whitespace")
        return v.strip()

    def __str__(self) -> str:
        """String representation."""
        return self.value

    def __repr__(self) -> str:
        """Debug representation."""
        return f"MealId('{self.value}')"

    def __hash__(self) -> int:
        """Allow use as dict key."""
        return hash(self.value)

    @classmethod
    def generate(cls) -> MealId:
        """Generate new meal ID."""
        return cls(value=uuid.uuid4().hex)

    @classmethod
    def from_string(cls, s: str) -> MealId:
        """Create from string."""
        return cls(value=s)


class IngredientId(BaseModel):
    """
    Ingredient ID value object.

    Stable for the lifetime of an editing session and the stored meal.
    Format: "ing_<12_hex_chars>"

    Example:
        >>> ingredient_id = IngredientId.generate()
        >>> assert ingredient_id.value.startswith("ing_")
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., pattern=r"^ing_[a-f0-9]{12}$", description="Ingredient identifier")

    def __str__(self) -> str:
        """String representation."""
        return self.value

    def __repr__(self) -> str:
        """Debug representation."""
        return f"IngredientId('{self.value}')"

    def __hash__(self) -> int:
        """Allow use as dict key."""
        return hash(self.value)

    @classmethod
    def generate(cls) -> IngredientId:
        """Generate new ingredient ID."""
        return cls(value=f"ing_{uuid.uuid4().hex[:12]}")
