"""
Label matcher strategies.

Each matcher resolves a lower-cased classifier label to a canonical food
name or returns None. The adapter tries them in priority order:

1. ``ExactMatcher``     exact key in the curated label table
2. ``SubstringMatcher`` key contained in the label, or label in the key
3. ``KeywordMatcher``   generic food word, only for food-looking labels
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Protocol, Sequence, runtime_checkable

# Curated classifier label -> canonical food name. Insertion order is the
# substring matcher's priority order.
FOOD_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "banana": "banana",
        "orange": "orange",
        "apple": "apple",
        "strawberry": "strawberry",
        "broccoli": "broccoli",
        "carrot": "carrot",
        "mushroom": "mushroom",
        "bell pepper": "bell pepper",
        "tomato": "tomato",
        "cucumber": "cucumber",
        "pizza": "bread",
        "bagel": "bread",
        "pretzel": "bread",
        "hotdog": "beef",
        "hamburger": "beef",
        "cheeseburger": "beef",
        "meat loaf": "beef",
        "steak": "beef",
        "fried chicken": "chicken breast",
        "roast chicken": "chicken breast",
        "grilled salmon": "salmon",
        "tuna": "fish",
        "sushi": "fish",
        "french fries": "potato",
        "baked potato": "potato",
        "mashed potato": "potato",
        "spaghetti": "pasta",
        "ravioli": "pasta",
        "macaroni": "pasta",
        "fried rice": "rice",
        "risotto": "rice",
        "chocolate cake": "chocolate",
        "ice cream": "milk",
        "cheese": "cheese",
        "omelet": "egg",
        "scrambled eggs": "egg",
        "boiled egg": "egg",
        "salad": "lettuce",
        "soup": "broccoli",
        "sandwich": "bread",
        "burrito": "bread",
        "taco": "beef",
        "corn": "carrot",
        "peas": "broccoli",
        "beans": "nuts",
        "avocado": "avocado",
        "grapes": "grapes",
        "watermelon": "watermelon",
        "blueberry": "blueberry",
    }
)

FOOD_KEYWORDS: Sequence[str] = (
    "food",
    "fruit",
    "vegetable",
    "meat",
    "chicken",
    "beef",
    "fish",
    "bread",
    "rice",
    "potato",
    "egg",
    "cheese",
    "milk",
    "cake",
    "cookie",
    "pie",
    "dish",
    "meal",
    "cuisine",
    "plate",
    "bowl",
    "edible",
    "nutrition",
)

# Generic word -> canonical name, checked in order.
GENERIC_FOOD_WORDS: Mapping[str, str] = MappingProxyType(
    {
        "chicken": "chicken breast",
        "beef": "beef",
        "fish": "fish",
        "bread": "bread",
        "rice": "rice",
        "potato": "potato",
        "egg": "egg",
        "cheese": "cheese",
        "milk": "milk",
    }
)


@runtime_checkable
class LabelMatcher(Protocol):
    """Strategy resolving a normalized label to a canonical name."""

    def match(self, label: str) -> Optional[str]:
        """Canonical name or None when this strategy has no opinion."""
        ...


class ExactMatcher:
    """Exact lookup in the curated label table."""

    def __init__(self, labels: Mapping[str, str] = FOOD_LABELS) -> None:
        self.labels = labels

    def match(self, label: str) -> Optional[str]:
        return self.labels.get(label)


class SubstringMatcher:
    """
    Substring match in either direction against the label table keys.

    Example:
        >>> SubstringMatcher().match("granny smith apple")
        'apple'
        >>> SubstringMatcher().match("pea")
        'broccoli'
    """

    def __init__(self, labels: Mapping[str, str] = FOOD_LABELS) -> None:
        self.labels = labels

    def match(self, label: str) -> Optional[str]:
        for key, canonical in self.labels.items():
            if key in label or label in key:
                return canonical
        return None


class KeywordMatcher:
    """
    Extract a generic food word from labels that look food related.

    A label without any food keyword is not food; a food-looking label
    without a generic word is left unresolved.

    Example:
        >>> KeywordMatcher().match("chicken dish")
        'chicken breast'
        >>> KeywordMatcher().match("dining table") is None
        True
    """

    def __init__(
        self,
        keywords: Sequence[str] = FOOD_KEYWORDS,
        generic_words: Mapping[str, str] = GENERIC_FOOD_WORDS,
    ) -> None:
        self.keywords = keywords
        self.generic_words = generic_words

    def match(self, label: str) -> Optional[str]:
        if not any(keyword in label for keyword in self.keywords):
            return None

        for word, canonical in self.generic_words.items():
            if word in label:
                return canonical
        return None


def default_matchers() -> list[LabelMatcher]:
    """Matchers in priority order."""
    return [ExactMatcher(), SubstringMatcher(), KeywordMatcher()]
