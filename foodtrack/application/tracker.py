"""
Tracker context.

Explicit context object owning the reference store, the persistent store
and the classifier adapter for one session. Consumed by a presentation
layer: photo -> ingredients -> edits -> meal -> storage.

Design Pattern: Service Layer + Dependency Injection
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

import structlog

from foodtrack.application.timeouts import OperationTimedOut, race_with_timeout
from foodtrack.config import TrackerConfig
from foodtrack.domain.meal import normalizer
from foodtrack.domain.meal.composer import compose, derive_weight, ensure_total_weight
from foodtrack.domain.meal.models import DEFAULT_SETTINGS, Ingredient, Meal, UserSettings
from foodtrack.domain.meal.validation import validate_percentages
from foodtrack.domain.nutrition.aggregator import aggregate
from foodtrack.domain.nutrition.models import NutritionReferenceTable
from foodtrack.domain.ports import ImageClassifier
from foodtrack.domain.recognition.adapter import FoodClassifierAdapter
from foodtrack.domain.recognition.models import FoodPrediction
from foodtrack.domain.shared.errors import (
    ClassificationFailure,
    ClassificationTimeout,
    ValidationError,
    safe_async_call,
)
from foodtrack.domain.shared.value_objects import MealId
from foodtrack.infrastructure.persistence.factory import create_persistent_store
from foodtrack.infrastructure.persistence.store import PersistentStore
from foodtrack.infrastructure.reference.factory import create_reference_store
from foodtrack.infrastructure.reference.store import NutritionReferenceStore
from foodtrack.logging_config import configure_logging

logger = structlog.get_logger(__name__)

STARTUP_TIMEOUT_S = 3.0
CLASSIFICATION_TIMEOUT_S = 30.0


@dataclass(frozen=True)
class StartupSnapshot:
    """Data available when the UI finishes loading."""

    meals: List[Meal] = field(default_factory=list)
    settings: UserSettings = DEFAULT_SETTINGS
    timed_out: bool = False


class TrackerContext:
    """
    Session context for the meal-composition pipeline.

    Responsibilities:
    - Startup load of meals/settings bounded by a timeout
    - Photo classification bounded by a timeout
    - Ingredient composition and editing against the reference table
    - Meal building (sum gate + aggregation) and persistence

    Example:
        >>> tracker = TrackerContext.from_config(load_config(), classifier=model)
        >>> snapshot = await tracker.startup()
        >>> ingredients = await tracker.analyze_photo(image, total_weight=350)
        >>> if not ingredients:
        ...     print("No recognized food")
        >>> meal = await tracker.add_meal(ingredients, total_weight=350)
    """

    def __init__(
        self,
        reference_store: NutritionReferenceStore,
        store: PersistentStore,
        classifier: Optional[ImageClassifier] = None,
        adapter: Optional[FoodClassifierAdapter] = None,
        startup_timeout_s: float = STARTUP_TIMEOUT_S,
        classification_timeout_s: float = CLASSIFICATION_TIMEOUT_S,
    ) -> None:
        """
        Initialize context with dependencies.

        Args:
            reference_store: Lazily loaded nutrition reference
            store: Persistent store for meals and settings
            classifier: Opaque image classifier (needed for photo analysis)
            adapter: Label mapper (default matchers when omitted)
            startup_timeout_s: Bound on the startup data load
            classification_timeout_s: Bound on one classification
        """
        self.reference_store = reference_store
        self.store = store
        self.classifier = classifier
        self.adapter = adapter or FoodClassifierAdapter()
        self.startup_timeout_s = startup_timeout_s
        self.classification_timeout_s = classification_timeout_s

    @classmethod
    def from_config(
        cls,
        config: TrackerConfig,
        classifier: Optional[ImageClassifier] = None,
    ) -> TrackerContext:
        """Build a context from configuration, applying its log settings."""
        configure_logging(config.log_level, config.log_format)
        return cls(
            reference_store=create_reference_store(config),
            store=create_persistent_store(config),
            classifier=classifier,
            startup_timeout_s=config.startup_timeout_s,
            classification_timeout_s=config.classification_timeout_s,
        )

    async def reference(self) -> NutritionReferenceTable:
        """Loaded reference table (fallback on source failure)."""
        return await self.reference_store.load()

    # ------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------

    async def startup(self) -> StartupSnapshot:
        """
        Load meals, settings and the reference table within the timeout.

        On timeout returns empty meals and default settings; the loads keep
        running and their late results are ignored here.
        """

        async def _load_all() -> StartupSnapshot:
            _, meals, settings = await asyncio.gather(
                self.reference_store.load(),
                safe_async_call(self.store.load_meals, fallback=[], context="load_meals"),
                safe_async_call(
                    self.store.load_settings, fallback=DEFAULT_SETTINGS, context="load_settings"
                ),
            )
            return StartupSnapshot(meals=meals, settings=settings)

        try:
            snapshot = await race_with_timeout(_load_all(), self.startup_timeout_s, name="startup")
        except OperationTimedOut:
            logger.warning("Data loading timed out, using defaults")
            return StartupSnapshot(timed_out=True)

        logger.info("Startup data loaded", meals=len(snapshot.meals))
        return snapshot

    # ------------------------------------------------------------
    # Recognition
    # ------------------------------------------------------------

    async def recognize(self, image: Any) -> List[FoodPrediction]:
        """
        Classify ``image`` and map labels to canonical foods.

        Raises:
            ClassificationTimeout: Classifier did not answer in time
            ClassificationFailure: No classifier, or the classifier raised
        """
        if self.classifier is None:
            raise ClassificationFailure("No image classifier configured")

        try:
            raw = await race_with_timeout(
                self.classifier.classify(image),
                self.classification_timeout_s,
                name="classification",
            )
        except OperationTimedOut as e:
            raise ClassificationTimeout(
                "Image processing timed out. Please try again.",
                context={"timeout_s": e.timeout_s},
            ) from e
        except Exception as e:
            logger.warning("Image classification failed", error=str(e))
            raise ClassificationFailure(
                "Failed to analyze image",
                context={"original_error": type(e).__name__},
            ) from e

        if raw is None:
            raise ClassificationFailure("Classifier returned no predictions")

        return self.adapter.classify(raw)

    async def analyze_photo(self, image: Any, total_weight: float) -> List[Ingredient]:
        """
        Photo to initial ingredients.

        Returns an empty list when nothing recognized is a known food.
        """
        predictions = await self.recognize(image)
        if not predictions:
            logger.info("No food items detected")
            return []
        return await self.compose(predictions, total_weight)

    # ------------------------------------------------------------
    # Composition and editing
    # ------------------------------------------------------------

    async def compose(self, predictions: Sequence[Any], total_weight: float) -> List[Ingredient]:
        """Equal-split ingredients for ``predictions``."""
        return compose(predictions, total_weight, await self.reference())

    async def change_weight(
        self, ingredients: Sequence[Ingredient], new_total_weight: float
    ) -> List[Ingredient]:
        return normalizer.on_weight_change(ingredients, new_total_weight, await self.reference())

    async def edit_percentage(
        self,
        ingredients: Sequence[Ingredient],
        ingredient_id: str,
        new_percentage: float,
        total_weight: float,
    ) -> List[Ingredient]:
        return normalizer.on_percentage_edit(
            ingredients, ingredient_id, new_percentage, total_weight, await self.reference()
        )

    async def remove_ingredient(
        self,
        ingredients: Sequence[Ingredient],
        ingredient_id: str,
        total_weight: float,
    ) -> List[Ingredient]:
        return normalizer.on_remove(ingredients, ingredient_id, total_weight, await self.reference())

    # ------------------------------------------------------------
    # Meals
    # ------------------------------------------------------------

    def build_meal(
        self,
        ingredients: Sequence[Ingredient],
        total_weight: float,
        photo: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Meal:
        """
        Assemble a meal ready for saving.

        Ingredient weights must already be derived from ``total_weight``
        (``add_meal`` re-derives them first).

        Raises:
            ValidationError: No ingredients, percentages not summing to
                100, a non-positive total weight, or ingredient weights
                derived from another total weight
        """
        if not ingredients:
            raise ValidationError("Please add at least one ingredient")

        if not validate_percentages(ingredients):
            raise ValidationError(
                "Ingredient percentages must add up to 100%",
                context={"total": sum(i.percentage for i in ingredients)},
            )

        total_weight = ensure_total_weight(total_weight)

        stale = [
            ingredient.id
            for ingredient in ingredients
            if ingredient.weight != derive_weight(total_weight, ingredient.percentage)
        ]
        if stale:
            raise ValidationError(
                "Ingredient weights do not match the meal weight",
                context={"total_weight": total_weight, "ingredient_ids": stale},
            )

        return Meal(
            id=MealId.generate().value,
            timestamp=Meal.now_timestamp(),
            photo=photo or None,
            total_weight=total_weight,
            ingredients=list(ingredients),
            nutrition=aggregate(ingredients),
            notes=notes or None,
        )

    async def add_meal(
        self,
        ingredients: Sequence[Ingredient],
        total_weight: float,
        photo: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Meal:
        """
        Re-derive ingredients against ``total_weight``, then build and save a meal.

        Raises:
            ValidationError: See ``build_meal``
            UnknownFoodError: An ingredient is missing from the reference table
            StorageUnavailable: Meal could not be stored
        """
        if ingredients:
            ingredients = await self.change_weight(ingredients, total_weight)
        meal = self.build_meal(ingredients, total_weight, photo=photo, notes=notes)
        await self.store.save_meal(meal)
        return meal

    async def close(self) -> None:
        """Release the persistent store."""
        await self.store.close()
