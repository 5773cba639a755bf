"""Unit tests for the percentage normalizer."""

from typing import List

import pytest

from foodtrack.domain.meal import normalizer
from foodtrack.domain.meal.composer import compose
from foodtrack.domain.meal.models import Ingredient
from foodtrack.domain.meal.validation import validate_percentages
from foodtrack.domain.nutrition.models import NutritionReferenceTable
from foodtrack.domain.shared.errors import ValidationError


class TestOnWeightChange:
    """Test on_weight_change()."""

    def test_keeps_percentages(
        self, rice_and_chicken: List[Ingredient], reference_table: NutritionReferenceTable
    ) -> None:
        """Test new weight re-derives weight and nutrition only."""
        updated = normalizer.on_weight_change(rice_and_chicken, 500, reference_table)

        assert [i.percentage for i in updated] == [50.0, 50.0]
        assert [i.weight for i in updated] == [250, 250]
        assert updated[0].nutrition.calories == 325
        assert [i.id for i in updated] == [i.id for i in rice_and_chicken]

    def test_input_untouched(
        self, rice_and_chicken: List[Ingredient], reference_table: NutritionReferenceTable
    ) -> None:
        """Test the original list keeps its values."""
        normalizer.on_weight_change(rice_and_chicken, 500, reference_table)
        assert [i.weight for i in rice_and_chicken] == [150, 150]

    def test_invalid_weight(
        self, rice_and_chicken: List[Ingredient], reference_table: NutritionReferenceTable
    ) -> None:
        """Test non-positive weight is rejected."""
        with pytest.raises(ValidationError):
            normalizer.on_weight_change(rice_and_chicken, 0, reference_table)

    @pytest.mark.parametrize("total_weight", [float("nan"), float("inf")])
    def test_non_finite_weight(
        self,
        rice_and_chicken: List[Ingredient],
        reference_table: NutritionReferenceTable,
        total_weight: float,
    ) -> None:
        """Test NaN and infinite weights are rejected."""
        with pytest.raises(ValidationError):
            normalizer.on_weight_change(rice_and_chicken, total_weight, reference_table)


class TestOnPercentageEdit:
    """Test on_percentage_edit()."""

    def test_edits_only_target(
        self, rice_and_chicken: List[Ingredient], reference_table: NutritionReferenceTable
    ) -> None:
        """Test other percentages are not rebalanced."""
        rice_id = rice_and_chicken[0].id

        updated = normalizer.on_percentage_edit(rice_and_chicken, rice_id, 70, 300, reference_table)

        assert [i.percentage for i in updated] == [70.0, 50.0]
        assert [i.weight for i in updated] == [210, 150]
        assert updated[0].nutrition.calories == 273
        assert not validate_percentages(updated)

    def test_user_fixes_sum(
        self, rice_and_chicken: List[Ingredient], reference_table: NutritionReferenceTable
    ) -> None:
        """Test two edits bring the sum back to 100."""
        rice_id, chicken_id = (i.id for i in rice_and_chicken)

        updated = normalizer.on_percentage_edit(rice_and_chicken, rice_id, 70, 300, reference_table)
        updated = normalizer.on_percentage_edit(updated, chicken_id, 30, 300, reference_table)

        assert validate_percentages(updated)
        assert [i.weight for i in updated] == [210, 90]

    def test_unknown_id_unchanged(
        self, rice_and_chicken: List[Ingredient], reference_table: NutritionReferenceTable
    ) -> None:
        """Test editing a missing id leaves the list as is."""
        updated = normalizer.on_percentage_edit(
            rice_and_chicken, "ing_ffffffffffff", 70, 300, reference_table
        )
        assert updated == rice_and_chicken

    @pytest.mark.parametrize("percentage", [-1, 100.5, "50", None, float("nan"), float("inf")])
    def test_out_of_range_rejected(
        self,
        rice_and_chicken: List[Ingredient],
        reference_table: NutritionReferenceTable,
        percentage: object,
    ) -> None:
        """Test percentages outside [0, 100] are rejected."""
        with pytest.raises(ValidationError):
            normalizer.on_percentage_edit(
                rice_and_chicken, rice_and_chicken[0].id, percentage, 300, reference_table  # type: ignore[arg-type]
            )

    def test_zero_percentage(
        self, rice_and_chicken: List[Ingredient], reference_table: NutritionReferenceTable
    ) -> None:
        """Test 0% yields zero weight and nutrition."""
        updated = normalizer.on_percentage_edit(
            rice_and_chicken, rice_and_chicken[0].id, 0, 300, reference_table
        )
        assert updated[0].weight == 0
        assert updated[0].nutrition.calories == 0


class TestOnRemove:
    """Test on_remove()."""

    @pytest.fixture
    def three_foods(self, reference_table: NutritionReferenceTable) -> List[Ingredient]:
        """Apple, banana and bread at 33.3% of 300g."""
        return compose([("apple", 0.9), ("banana", 0.8), ("bread", 0.7)], 300, reference_table)

    def test_redistributes_equally(
        self, three_foods: List[Ingredient], reference_table: NutritionReferenceTable
    ) -> None:
        """Test remaining ingredients share 100% equally."""
        updated = normalizer.on_remove(three_foods, three_foods[1].id, 300, reference_table)

        assert [i.name for i in updated] == ["apple", "bread"]
        assert [i.percentage for i in updated] == [50.0, 50.0]
        assert [i.weight for i in updated] == [150, 150]
        assert validate_percentages(updated)

    def test_uneven_three_way_split(
        self, three_foods: List[Ingredient], reference_table: NutritionReferenceTable
    ) -> None:
        """Test 33.3/33.3/33.4 minus one gives two at 50.0."""
        uneven = normalizer.on_percentage_edit(
            three_foods, three_foods[2].id, 33.4, 300, reference_table
        )

        updated = normalizer.on_remove(uneven, uneven[0].id, 300, reference_table)

        assert len(updated) == 2
        assert [i.percentage for i in updated] == [50.0, 50.0]

    def test_redistribution_after_manual_edit(
        self, three_foods: List[Ingredient], reference_table: NutritionReferenceTable
    ) -> None:
        """Test removal resets prior manual edits."""
        edited = normalizer.on_percentage_edit(
            three_foods, three_foods[0].id, 80, 300, reference_table
        )

        updated = normalizer.on_remove(edited, three_foods[2].id, 300, reference_table)

        assert [i.percentage for i in updated] == [50.0, 50.0]

    def test_remove_from_four_sums_to_hundred(self, reference_table: NutritionReferenceTable) -> None:
        """Test uneven split still validates."""
        four = compose(
            [("apple", 0.9), ("banana", 0.8), ("bread", 0.7), ("rice", 0.6)], 400, reference_table
        )

        updated = normalizer.on_remove(four, four[0].id, 400, reference_table)

        assert len(updated) == 3
        assert validate_percentages(updated)

    def test_remove_last_returns_empty(self, reference_table: NutritionReferenceTable) -> None:
        """Test removing the only ingredient."""
        single = compose([("apple", 0.9)], 100, reference_table)
        assert normalizer.on_remove(single, single[0].id, 100, reference_table) == []

    def test_unknown_id_unchanged(
        self, three_foods: List[Ingredient], reference_table: NutritionReferenceTable
    ) -> None:
        """Test removing a missing id leaves the list as is."""
        updated = normalizer.on_remove(three_foods, "ing_ffffffffffff", 300, reference_table)
        assert updated == three_foods
