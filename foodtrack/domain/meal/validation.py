"""
Structural validation for meals, ingredients and settings.

Cheap shape checks applied before a record crosses into persistence and
after it comes back out. They accept either domain models or loosely
shaped mappings (e.g. records read from storage) and never raise.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel

from foodtrack.domain.meal.models import Units

PERCENTAGE_EPSILON = 0.1

# Float sums such as 33.3 * 3 land a hair outside 0.1 of 100.
_FLOAT_TOLERANCE = 1e-9

_VALID_UNITS = frozenset(unit.value for unit in Units)


def _as_mapping(candidate: Any) -> Optional[Mapping[str, Any]]:
    if isinstance(candidate, BaseModel):
        return candidate.model_dump()
    if isinstance(candidate, Mapping):
        return candidate
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _percentage_of(ingredient: Any) -> Any:
    if isinstance(ingredient, Mapping):
        return ingredient.get("percentage")
    return getattr(ingredient, "percentage", None)


def validate_meal(candidate: Any) -> bool:
    """
    True iff ``candidate`` looks like a storable meal.

    Requires a non-empty id, a numeric timestamp, an ingredient sequence
    and a nutrition object. Ingredient contents are not inspected.
    """
    meal = _as_mapping(candidate)
    if meal is None:
        return False

    meal_id = meal.get("id")
    if not isinstance(meal_id, str) or not meal_id.strip():
        return False

    if not _is_number(meal.get("timestamp")):
        return False

    if not isinstance(meal.get("ingredients"), (list, tuple)):
        return False

    return isinstance(meal.get("nutrition"), (Mapping, BaseModel))


def validate_ingredient(candidate: Any) -> bool:
    """True iff ``candidate`` has id, name, numeric percentage/weight and nutrition."""
    ingredient = _as_mapping(candidate)
    if ingredient is None:
        return False

    return bool(
        ingredient.get("id")
        and ingredient.get("name")
        and _is_number(ingredient.get("percentage"))
        and _is_number(ingredient.get("weight"))
        and isinstance(ingredient.get("nutrition"), (Mapping, BaseModel))
    )


def validate_percentages(ingredients: Optional[Iterable[Any]]) -> bool:
    """
    True iff ingredients are non-empty and percentages sum to 100 (within 0.1).

    Non-numeric percentages count as zero.

    Example:
        >>> validate_percentages([{"percentage": 60}, {"percentage": 40}])
        True
        >>> validate_percentages([{"percentage": 60}, {"percentage": 39}])
        False
    """
    if ingredients is None:
        return False

    items = list(ingredients)
    if not items:
        return False

    total = 0.0
    for ingredient in items:
        percentage = _percentage_of(ingredient)
        if _is_number(percentage):
            total += percentage

    return abs(total - 100.0) <= PERCENTAGE_EPSILON + _FLOAT_TOLERANCE


def validate_settings(candidate: Any) -> bool:
    """
    True iff all daily targets are numeric, units is known and dark_mode is bool.
    """
    settings = _as_mapping(candidate)
    if settings is None:
        return False

    targets = ("daily_calories", "daily_protein", "daily_carbs", "daily_fat")
    if not all(_is_number(settings.get(field)) for field in targets):
        return False

    units = settings.get("units")
    if isinstance(units, Units):
        units = units.value
    if not isinstance(units, str) or units not in _VALID_UNITS:
        return False

    return isinstance(settings.get("dark_mode"), bool)
