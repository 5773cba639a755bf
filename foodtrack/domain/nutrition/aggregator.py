"""
Nutrition aggregation.

Folds ingredient (or meal) nutrition into a single total, rounding macros
to one decimal after every addition so the total matches what the user
sees summed line by line.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

import structlog

from foodtrack.domain.nutrition.models import NutritionData
from foodtrack.domain.shared.rounding import round_to_int, round_to_tenth

logger = structlog.get_logger(__name__)


def _nutrition_of(item: Any) -> Optional[NutritionData]:
    """Extract nutrition from a model or a loosely shaped mapping."""
    if item is None:
        return None

    nutrition = item.get("nutrition") if isinstance(item, Mapping) else getattr(item, "nutrition", None)

    if nutrition is None:
        return None
    if isinstance(nutrition, NutritionData):
        return nutrition
    if isinstance(nutrition, Mapping):
        try:
            return NutritionData.model_validate(nutrition)
        except ValueError:
            return None
    return None


def aggregate(items: Iterable[Any]) -> NutritionData:
    """
    Sum nutrition over a sequence of ingredients.

    Calories accumulate as integers; protein, carbs and fat are rounded to
    one decimal after each addition. Items without nutrition contribute
    zero.

    Args:
        items: Ingredients (or anything exposing ``nutrition``)

    Returns:
        Aggregate NutritionData (all zero for empty input)

    Example:
        >>> total = aggregate([])
        >>> assert total == NutritionData.zero()
    """
    calories = 0
    protein = 0.0
    carbs = 0.0
    fat = 0.0

    for item in items:
        nutrition = _nutrition_of(item)
        if nutrition is None:
            logger.warning("Skipping item without nutrition in aggregation")
            continue

        calories += round_to_int(nutrition.calories)
        protein = round_to_tenth(protein + nutrition.protein)
        carbs = round_to_tenth(carbs + nutrition.carbs)
        fat = round_to_tenth(fat + nutrition.fat)

    return NutritionData(calories=calories, protein=protein, carbs=carbs, fat=fat)
