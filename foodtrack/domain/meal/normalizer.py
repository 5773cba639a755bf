"""Percentage normalizer for ingredient editing sessions.

Three operations, each returning a new ingredient list and leaving the
input untouched:

* ``on_weight_change``    keep percentages, re-derive weight and nutrition
* ``on_percentage_edit``  overwrite one percentage, no rebalancing of the
                          others; callers gate progress on the sum check
* ``on_remove``           drop one ingredient and split 100% equally
                          among the rest
"""

from __future__ import annotations

import math
from typing import List, Sequence

import structlog

from foodtrack.domain.meal.composer import derive_ingredient, ensure_total_weight
from foodtrack.domain.meal.models import Ingredient
from foodtrack.domain.nutrition.models import NutritionReferenceTable
from foodtrack.domain.shared.errors import ValidationError

logger = structlog.get_logger(__name__)


def _rederive(
    ingredients: Sequence[Ingredient],
    total_weight: float,
    table: NutritionReferenceTable,
) -> List[Ingredient]:
    return [derive_ingredient(ingredient, total_weight, table) for ingredient in ingredients]


def on_weight_change(
    ingredients: Sequence[Ingredient],
    new_total_weight: float,
    table: NutritionReferenceTable,
) -> List[Ingredient]:
    """Re-derive every ingredient against ``new_total_weight``."""
    new_total_weight = ensure_total_weight(new_total_weight)
    return _rederive(ingredients, new_total_weight, table)


def on_percentage_edit(
    ingredients: Sequence[Ingredient],
    ingredient_id: str,
    new_percentage: float,
    total_weight: float,
    table: NutritionReferenceTable,
) -> List[Ingredient]:
    """
    Overwrite the percentage of one ingredient.

    Other percentages are left as they are, so the sum may drift away
    from 100 until the user fixes it.

    Raises:
        ValidationError: If ``new_percentage`` is outside [0, 100]
    """
    if isinstance(new_percentage, bool) or not isinstance(new_percentage, (int, float)):
        raise ValidationError(
            "Percentage must be a number", context={"percentage": repr(new_percentage)}
        )
    if not math.isfinite(new_percentage) or not 0 <= new_percentage <= 100:
        raise ValidationError(
            "Percentage must be between 0 and 100",
            context={"ingredient_id": ingredient_id, "percentage": new_percentage},
        )

    total_weight = ensure_total_weight(total_weight)

    if not any(ingredient.id == ingredient_id for ingredient in ingredients):
        logger.warning("Percentage edit for unknown ingredient", ingredient_id=ingredient_id)
        return list(ingredients)

    edited = [
        ingredient.model_copy(update={"percentage": float(new_percentage)})
        if ingredient.id == ingredient_id
        else ingredient
        for ingredient in ingredients
    ]
    return _rederive(edited, total_weight, table)


def on_remove(
    ingredients: Sequence[Ingredient],
    ingredient_id: str,
    total_weight: float,
    table: NutritionReferenceTable,
) -> List[Ingredient]:
    """
    Remove one ingredient and redistribute percentages equally.

    Returns an empty list when the last ingredient is removed.
    """
    remaining = [ingredient for ingredient in ingredients if ingredient.id != ingredient_id]

    if len(remaining) == len(ingredients):
        logger.warning("Remove for unknown ingredient", ingredient_id=ingredient_id)
        return list(ingredients)

    if not remaining:
        return []

    total_weight = ensure_total_weight(total_weight)
    equal_percentage = 100 / len(remaining)

    redistributed = [
        ingredient.model_copy(update={"percentage": equal_percentage}) for ingredient in remaining
    ]
    return _rederive(redistributed, total_weight, table)
