"""
Food classifier adapter.

Maps free-text image classifier labels to canonical food names and
filters the classifier's ranked output down to food predictions.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Sequence

import structlog

from foodtrack.domain.recognition.matchers import LabelMatcher, default_matchers
from foodtrack.domain.recognition.models import ClassifierPrediction, FoodPrediction

logger = structlog.get_logger(__name__)

MIN_CONFIDENCE = 0.1
MAX_PREDICTIONS = 5


class FoodClassifierAdapter:
    """
    Resolve classifier labels to canonical foods.

    Pure: matchers hold only static data.

    Example:
        >>> adapter = FoodClassifierAdapter()
        >>> adapter.map("Cheeseburger")
        'beef'
        >>> adapter.map("laptop") is None
        True
    """

    def __init__(
        self,
        matchers: Optional[Sequence[LabelMatcher]] = None,
        min_confidence: float = MIN_CONFIDENCE,
        max_predictions: int = MAX_PREDICTIONS,
    ) -> None:
        """
        Initialize adapter.

        Args:
            matchers: Strategies in priority order (default exact,
                substring, keyword)
            min_confidence: Predictions at or below are discarded
            max_predictions: Keep at most this many, best first
        """
        self.matchers = list(matchers) if matchers is not None else default_matchers()
        self.min_confidence = min_confidence
        self.max_predictions = max_predictions

    def map(self, raw_label: str) -> Optional[str]:
        """
        Canonical food name for ``raw_label`` or None (not food).

        Args:
            raw_label: Classifier label, any case

        Returns:
            Canonical name from the first matcher that resolves it
        """
        if not isinstance(raw_label, str):
            return None

        label = raw_label.strip().lower()
        if not label:
            return None

        for matcher in self.matchers:
            canonical = matcher.match(label)
            if canonical:
                return canonical

        return None

    def classify(self, predictions: Iterable[Any]) -> List[FoodPrediction]:
        """
        Filter and map classifier output.

        Discards confidence <= 0.1, keeps the top 5 by confidence, maps each
        label and drops non-food results.

        Args:
            predictions: ClassifierPrediction objects or mappings with
                ``label`` and ``confidence``

        Returns:
            Food predictions, confidence descending (possibly empty)
        """
        parsed = [p for p in (self._parse(raw) for raw in predictions or []) if p is not None]

        candidates = sorted(
            (p for p in parsed if p.confidence > self.min_confidence),
            key=lambda p: p.confidence,
            reverse=True,
        )[: self.max_predictions]

        foods: List[FoodPrediction] = []
        for prediction in candidates:
            canonical = self.map(prediction.label)
            if canonical is None:
                logger.debug("Rejected non-food label", label=prediction.label)
                continue
            foods.append(FoodPrediction(name=canonical, confidence=prediction.confidence))

        logger.info(
            "Classified food predictions",
            received=len(parsed),
            kept=len(foods),
        )
        return foods

    @staticmethod
    def _parse(raw: Any) -> Optional[ClassifierPrediction]:
        if isinstance(raw, ClassifierPrediction):
            return raw
        if isinstance(raw, Mapping):
            try:
                return ClassifierPrediction.model_validate(raw)
            except ValueError:
                logger.warning("Skipping invalid classifier prediction", prediction=repr(raw))
        return None
