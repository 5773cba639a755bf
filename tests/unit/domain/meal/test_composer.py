"""
Unit tests for ingredient composition.

Covers equal splitting, derived weight/nutrition and filtering of foods
missing from the reference table.
"""

import pytest

from foodtrack.domain.meal.composer import compose, derive_ingredient, derive_weight
from foodtrack.domain.meal.models import Ingredient
from foodtrack.domain.meal.validation import validate_percentages
from foodtrack.domain.nutrition.models import NutritionReferenceTable
from foodtrack.domain.recognition.models import FoodPrediction
from foodtrack.domain.shared.errors import UnknownFoodError, ValidationError
from foodtrack.domain.shared.rounding import round_to_int


class TestDeriveWeight:
    """Test weight derivation."""

    @pytest.mark.parametrize(
        "total,percentage,expected",
        [(300, 50, 150), (300, 33.3, 100), (250, 33.3, 83), (100, 12.5, 13), (0.5, 100, 1)],
    )
    def test_derive_weight(self, total: float, percentage: float, expected: int) -> None:
        """Test nearest whole gram, halves up."""
        assert derive_weight(total, percentage) == expected


class TestCompose:
    """Test compose()."""

    def test_single_prediction(self, reference_table: NutritionReferenceTable) -> None:
        """Test one food takes the whole meal."""
        ingredients = compose([("apple", 0.9)], 200, reference_table)

        assert len(ingredients) == 1
        apple = ingredients[0]
        assert apple.name == "apple"
        assert apple.percentage == 100.0
        assert apple.weight == 200
        assert apple.nutrition.calories == 104
        assert apple.nutrition.carbs == 28.0
        assert apple.id.startswith("ing_")

    def test_equal_split_two(self, reference_table: NutritionReferenceTable) -> None:
        """Test two foods at 50% each."""
        ingredients = compose([("rice", 0.8), ("chicken breast", 0.6)], 300, reference_table)

        assert [i.name for i in ingredients] == ["rice", "chicken breast"]
        assert [i.percentage for i in ingredients] == [50.0, 50.0]
        assert [i.weight for i in ingredients] == [150, 150]
        assert ingredients[0].nutrition.calories == 195
        assert ingredients[1].nutrition.calories == 248
        assert ingredients[1].nutrition.protein == 46.5

    def test_equal_split_three_rounds_to_tenth(self, reference_table: NutritionReferenceTable) -> None:
        """Test 100/3 becomes 33.3 and the set still validates."""
        ingredients = compose(
            [("apple", 0.7), ("banana", 0.5), ("bread", 0.3)], 300, reference_table
        )

        assert [i.percentage for i in ingredients] == [33.3, 33.3, 33.3]
        assert [i.weight for i in ingredients] == [100, 100, 100]
        assert validate_percentages(ingredients)

    @pytest.mark.parametrize("count", [1, 2, 3, 4, 5])
    def test_percentages_sum_to_hundred(
        self, reference_table: NutritionReferenceTable, count: int
    ) -> None:
        """Test one to five foods always pass the sum check."""
        names = ["apple", "banana", "bread", "rice", "salmon"][:count]

        ingredients = compose([(name, 0.5) for name in names], 350, reference_table)

        assert len(ingredients) == count
        assert validate_percentages(ingredients)

    def test_derived_values_consistent(self, reference_table: NutritionReferenceTable) -> None:
        """Test weight and nutrition follow percentage and reference values."""
        total_weight = 437
        ingredients = compose(
            [("apple", 0.9), ("banana", 0.8), ("bread", 0.7), ("rice", 0.6)],
            total_weight,
            reference_table,
        )

        for ingredient in ingredients:
            assert ingredient.weight == round_to_int(total_weight * ingredient.percentage / 100)
            reference = reference_table[ingredient.name]
            assert ingredient.nutrition == reference.scale_to_weight(ingredient.weight)

    def test_filters_unknown_foods(self, reference_table: NutritionReferenceTable) -> None:
        """Test foods missing from the table are dropped before splitting."""
        ingredients = compose(
            [("apple", 0.9), ("durian", 0.8), ("banana", 0.5)], 200, reference_table
        )

        assert [i.name for i in ingredients] == ["apple", "banana"]
        assert all(i.percentage == 50.0 for i in ingredients)

    def test_all_unknown_returns_empty(self, reference_table: NutritionReferenceTable) -> None:
        """Test no known foods yields an empty result."""
        assert compose([("durian", 0.9), ("laptop", 0.5)], 200, reference_table) == []

    def test_empty_predictions_returns_empty(self, reference_table: NutritionReferenceTable) -> None:
        """Test empty input."""
        assert compose([], 200, reference_table) == []

    def test_accepts_food_predictions(self, reference_table: NutritionReferenceTable) -> None:
        """Test FoodPrediction models and case-insensitive names."""
        ingredients = compose([FoodPrediction(name="Apple", confidence=0.9)], 100, reference_table)

        assert ingredients[0].name == "apple"

    def test_skips_malformed_predictions(self, reference_table: NutritionReferenceTable) -> None:
        """Test malformed entries are ignored."""
        ingredients = compose([("apple",), ("banana", 0.5)], 100, reference_table)  # type: ignore[list-item]

        assert [i.name for i in ingredients] == ["banana"]

    def test_unique_ids(self, reference_table: NutritionReferenceTable) -> None:
        """Test each ingredient gets its own id."""
        ingredients = compose(
            [("apple", 0.9), ("banana", 0.8), ("bread", 0.7)], 300, reference_table
        )
        assert len({i.id for i in ingredients}) == 3

    @pytest.mark.parametrize(
        "total_weight", [0, -50, "300", None, True, float("nan"), float("inf")]
    )
    def test_invalid_total_weight(
        self, reference_table: NutritionReferenceTable, total_weight: object
    ) -> None:
        """Test non-positive, non-finite or non-numeric weights are rejected."""
        with pytest.raises(ValidationError):
            compose([("apple", 0.9)], total_weight, reference_table)  # type: ignore[arg-type]


class TestDeriveIngredient:
    """Test derive_ingredient()."""

    def test_unknown_name_raises(self, reference_table: NutritionReferenceTable) -> None:
        """Test a name missing from the table is a typed error."""
        ingredient = Ingredient(id="ing_0123456789ab", name="durian", percentage=100)

        with pytest.raises(UnknownFoodError) as exc_info:
            derive_ingredient(ingredient, 200, reference_table)

        assert exc_info.value.context["name"] == "durian"

    def test_returns_new_instance(self, reference_table: NutritionReferenceTable) -> None:
        """Test the input ingredient is not modified."""
        ingredient = Ingredient(id="ing_0123456789ab", name="banana", percentage=100)

        derived = derive_ingredient(ingredient, 120, reference_table)

        assert ingredient.weight == 0
        assert ingredient.nutrition is None
        assert derived.weight == 120
        assert derived.nutrition.calories == 107
