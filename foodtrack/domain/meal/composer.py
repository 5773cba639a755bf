"""
Ingredient composition.

Turns classifier predictions and a target total weight into an initial,
equally distributed ingredient set:

* Drop predictions whose canonical name is absent from the reference table
* Give every survivor ``round(100 / N, 1)`` percent
* Derive weight ``round(total_weight * percentage / 100)`` in whole grams
* Derive nutrition by scaling the per-100g values by ``weight / 100``

Output order follows input order (confidence descending).
"""

from __future__ import annotations

import math
from typing import Any, List, Optional, Sequence, Tuple, Union

import structlog

from foodtrack.domain.meal.models import Ingredient
from foodtrack.domain.nutrition.models import NutritionReferenceTable
from foodtrack.domain.recognition.models import FoodPrediction
from foodtrack.domain.shared.errors import UnknownFoodError, ValidationError
from foodtrack.domain.shared.rounding import round_to_int, round_to_tenth
from foodtrack.domain.shared.value_objects import IngredientId

logger = structlog.get_logger(__name__)

PredictionLike = Union[FoodPrediction, Tuple[str, float]]


def _to_prediction(raw: PredictionLike) -> Optional[FoodPrediction]:
    if isinstance(raw, FoodPrediction):
        return raw
    try:
        name, confidence = raw
        return FoodPrediction(name=name, confidence=confidence)
    except (TypeError, ValueError):
        logger.warning("Skipping malformed prediction", prediction=repr(raw))
        return None


def derive_weight(total_weight: float, percentage: float) -> int:
    """Whole-gram weight for ``percentage`` of ``total_weight``."""
    return round_to_int(total_weight * percentage / 100)


def derive_ingredient(
    ingredient: Ingredient,
    total_weight: float,
    table: NutritionReferenceTable,
) -> Ingredient:
    """
    Recompute weight and nutrition of ``ingredient`` from its percentage.

    Raises:
        UnknownFoodError: If the name is missing from ``table``
    """
    reference = table.lookup(ingredient.name)
    if reference is None:
        raise UnknownFoodError(
            f"No nutrition reference for '{ingredient.name}'",
            context={"ingredient_id": ingredient.id, "name": ingredient.name},
        )

    weight = derive_weight(total_weight, ingredient.percentage)
    return ingredient.model_copy(
        update={"weight": weight, "nutrition": reference.scale_to_weight(weight)}
    )


def ensure_total_weight(total_weight: Any) -> float:
    """Validate a meal total weight, returning it as float."""
    if isinstance(total_weight, bool) or not isinstance(total_weight, (int, float)):
        raise ValidationError(
            "Total weight must be a number", context={"total_weight": repr(total_weight)}
        )
    if not math.isfinite(total_weight) or total_weight <= 0:
        raise ValidationError(
            "Please enter a valid total weight", context={"total_weight": total_weight}
        )
    return float(total_weight)


def compose(
    predictions: Sequence[PredictionLike],
    total_weight: float,
    table: NutritionReferenceTable,
) -> List[Ingredient]:
    """
    Build the initial ingredient set from predictions.

    Args:
        predictions: Canonical names with confidences, best first
        total_weight: Meal weight in grams (> 0)
        table: Loaded reference table

    Returns:
        Ingredients in prediction order; empty when no prediction is a
        known food (the caller reports "no recognized food")

    Raises:
        ValidationError: If ``total_weight`` is not positive

    Example:
        >>> ingredients = compose([("apple", 0.9)], 200, table)
        >>> assert ingredients[0].weight == 200
        >>> assert ingredients[0].nutrition.calories == 104
    """
    total_weight = ensure_total_weight(total_weight)

    parsed = [p for p in (_to_prediction(raw) for raw in predictions or []) if p is not None]
    known = [p for p in parsed if p.name in table]

    if len(known) < len(parsed):
        logger.info(
            "Dropped predictions missing from reference table",
            dropped=[p.name for p in parsed if p.name not in table],
        )

    if not known:
        logger.warning("No valid predictions found in reference table")
        return []

    percentage = round_to_tenth(100 / len(known))

    return [
        derive_ingredient(
            Ingredient(
                id=IngredientId.generate().value,
                name=table.normalize_key(prediction.name),
                percentage=percentage,
            ),
            total_weight,
            table,
        )
        for prediction in known
    ]
