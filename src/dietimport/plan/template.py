"""Diet templates: spreading imported meals over days and meal slots."""

from collections.abc import Sequence
from datetime import date, timedelta

from pydantic import BaseModel, ConfigDict, Field

from dietimport.logging_config import get_logger
from dietimport.plan.shopping_list import ShoppingListResult
from dietimport.schemas import MealType, ParsedDay, ParsedMeal, PlannedMeal

logger = get_logger(__name__)


class DietTemplate(BaseModel):
    """How many days a diet lasts and which meal slots each day has."""

    model_config = ConfigDict(frozen=True)

    duration: int = Field(ge=1, le=90)
    meal_types: tuple[MealType, ...] = Field(min_length=1)
    # Keyed by slot position: {"meal_0": "08:00", "meal_1": "11:00", ...}
    meal_times: dict[str, str] = Field(default_factory=dict)
    start_date: date | None = None

    def time_for_slot(self, index: int) -> str:
        return self.meal_times.get(f"meal_{index}", "")


class DietSummary(BaseModel):
    """Statistics for a templated diet."""

    total_days: int = 0
    total_meals: int = 0
    total_ingredients: int = 0
    days_without_meals: int = 0
    average_meals_per_day: float = 0.0
    shopping_list_size: int = 0
    categories_count: int = 0


def apply_template(meals: Sequence[ParsedMeal], template: DietTemplate) -> list[ParsedDay]:
    """
    Lay meals out over the template's days.

    Meals are taken in sheet order and cycled when the template has more
    slots than there are meals. Without any meals, every day is empty.
    """
    days: list[ParsedDay] = []
    meal_index = 0

    for day_index in range(template.duration):
        day_date = (
            template.start_date + timedelta(days=day_index) if template.start_date else None
        )

        planned: list[PlannedMeal] = []
        if meals:
            for slot, meal_type in enumerate(template.meal_types):
                planned.append(
                    PlannedMeal(
                        meal=meals[meal_index % len(meals)],
                        meal_type=meal_type,
                        time=template.time_for_slot(slot),
                    )
                )
                meal_index += 1

        days.append(ParsedDay(day_index=day_index, day_date=day_date, meals=tuple(planned)))

    logger.debug(
        f"Applied template: {template.duration} days x {len(template.meal_types)} meal types "
        f"from {len(meals)} meals"
    )
    return days


def summarize_diet(
    days: Sequence[ParsedDay],
    shopping: ShoppingListResult | None = None,
) -> DietSummary:
    """Count days, meals and ingredients of a templated diet."""
    total_meals = 0
    total_ingredients = 0
    days_without_meals = 0

    for day in days:
        if not day.meals:
            days_without_meals += 1
            continue
        total_meals += len(day.meals)
        total_ingredients += sum(len(planned.ingredients) for planned in day.meals)

    return DietSummary(
        total_days=len(days),
        total_meals=total_meals,
        total_ingredients=total_ingredients,
        days_without_meals=days_without_meals,
        average_meals_per_day=total_meals / len(days) if days else 0.0,
        shopping_list_size=len(shopping.flat_list) if shopping else 0,
        categories_count=shopping.categories_count if shopping else 0,
    )
