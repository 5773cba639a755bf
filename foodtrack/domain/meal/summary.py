"""Daily nutrition summaries over stored meals."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from typing import Dict, Iterable, List, Optional

from foodtrack.domain.meal.models import Meal, UserSettings
from foodtrack.domain.nutrition.aggregator import aggregate
from foodtrack.domain.nutrition.models import NutritionData


def meal_day(meal: Meal, tz: Optional[tzinfo] = None) -> date:
    """Calendar day of ``meal`` in ``tz`` (UTC by default)."""
    return datetime.fromtimestamp(meal.timestamp / 1000, tz=tz or timezone.utc).date()


def meals_on_day(meals: Iterable[Meal], day: date, tz: Optional[tzinfo] = None) -> List[Meal]:
    """Meals whose timestamp falls on ``day``."""
    return [meal for meal in meals if meal_day(meal, tz) == day]


def group_by_day(meals: Iterable[Meal], tz: Optional[tzinfo] = None) -> Dict[date, List[Meal]]:
    """Meals grouped by calendar day, most recent day first."""
    groups: Dict[date, List[Meal]] = {}
    for meal in meals:
        groups.setdefault(meal_day(meal, tz), []).append(meal)
    return dict(sorted(groups.items(), key=lambda item: item[0], reverse=True))


def daily_nutrition(meals: Iterable[Meal]) -> NutritionData:
    """Total nutrition over ``meals`` with the aggregator's rounding."""
    return aggregate(meals)


def progress_percentage(current: float, target: float) -> float:
    """Progress toward ``target`` in percent, capped at 100."""
    if target <= 0:
        return 0.0
    return min(current / target * 100, 100.0)


def remaining(current: float, target: float) -> float:
    """Amount left to reach ``target``, never negative."""
    return max(target - current, 0.0)


@dataclass(frozen=True)
class DailyProgress:
    """Totals for one day against the user's targets."""

    day: date
    totals: NutritionData
    targets: UserSettings
    meal_count: int

    @property
    def calories_progress(self) -> float:
        return progress_percentage(self.totals.calories, self.targets.daily_calories)

    @property
    def protein_progress(self) -> float:
        return progress_percentage(self.totals.protein, self.targets.daily_protein)

    @property
    def carbs_progress(self) -> float:
        return progress_percentage(self.totals.carbs, self.targets.daily_carbs)

    @property
    def fat_progress(self) -> float:
        return progress_percentage(self.totals.fat, self.targets.daily_fat)

    @property
    def calories_remaining(self) -> float:
        return remaining(self.totals.calories, self.targets.daily_calories)

    @classmethod
    def for_day(
        cls,
        meals: Iterable[Meal],
        settings: UserSettings,
        day: date,
        tz: Optional[tzinfo] = None,
    ) -> DailyProgress:
        todays = meals_on_day(meals, day, tz)
        return cls(day=day, totals=daily_nutrition(todays), targets=settings, meal_count=len(todays))
