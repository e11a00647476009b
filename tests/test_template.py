"""Tests for diet templates and diet summaries."""

from datetime import date

import pytest
from pydantic import ValidationError

from dietimport.plan.shopping_list import ShoppingListAggregator
from dietimport.plan.template import DietSummary, DietTemplate, apply_template, summarize_diet
from dietimport.schemas import MealType, ParsedDay, ParsedMeal, PlannedMeal


@pytest.fixture
def meals():
    return [ParsedMeal(name="Owsianka"), ParsedMeal(name="Zupa"), ParsedMeal(name="Sałatka")]


@pytest.fixture
def template():
    return DietTemplate(
        duration=2,
        meal_types=(MealType.BREAKFAST, MealType.DINNER),
        meal_times={"meal_0": "08:00", "meal_1": "18:30"},
        start_date=date(2024, 1, 31),
    )


class TestDietTemplate:
    """Tests for template validation."""

    def test_duration_must_be_positive(self):
        """Test that a template needs at least one day."""
        with pytest.raises(ValidationError):
            DietTemplate(duration=0, meal_types=(MealType.LUNCH,))

    def test_meal_types_required(self):
        """Test that a template needs at least one meal slot."""
        with pytest.raises(ValidationError):
            DietTemplate(duration=3, meal_types=())

    def test_meal_types_from_strings(self):
        """Test that meal types accept their names."""
        template = DietTemplate(duration=1, meal_types=("BREAKFAST", "SNACK"))

        assert template.meal_types == (MealType.BREAKFAST, MealType.SNACK)

    def test_time_for_slot(self, template):
        """Test slot time lookup with a missing entry."""
        assert template.time_for_slot(1) == "18:30"
        assert template.time_for_slot(5) == ""


class TestApplyTemplate:
    """Tests for laying meals out over days."""

    def test_meals_cycled_in_order(self, meals, template):
        """Test that meals are taken in order and wrap around."""
        days = apply_template(meals, template)

        assert [[p.meal.name for p in day.meals] for day in days] == [
            ["Owsianka", "Zupa"],
            ["Sałatka", "Owsianka"],
        ]

    def test_meal_types_and_times(self, meals, template):
        """Test that slots carry their meal type and time."""
        day = apply_template(meals, template)[0]

        assert [(p.meal_type, p.time) for p in day.meals] == [
            (MealType.BREAKFAST, "08:00"),
            (MealType.DINNER, "18:30"),
        ]

    def test_dates_follow_start_date(self, meals, template):
        """Test consecutive dates across a month boundary."""
        days = apply_template(meals, template)

        assert [day.day_date for day in days] == [date(2024, 1, 31), date(2024, 2, 1)]
        assert [day.day_index for day in days] == [0, 1]

    def test_without_start_date(self, meals):
        """Test days without dates."""
        template = DietTemplate(duration=1, meal_types=(MealType.LUNCH,))

        day = apply_template(meals, template)[0]

        assert day.day_date is None
        assert day.meals[0].time == ""

    def test_no_meals(self, template):
        """Test that days stay empty when there is nothing to place."""
        days = apply_template([], template)

        assert len(days) == 2
        assert all(day.meals == () for day in days)


class TestSummarizeDiet:
    """Tests for diet summaries."""

    def test_summary(self, breakfast, dinner):
        """Test statistics for a templated diet."""
        template = DietTemplate(duration=2, meal_types=(MealType.BREAKFAST, MealType.DINNER))
        days = apply_template([breakfast, dinner], template)
        shopping = ShoppingListAggregator().aggregate(days)

        summary = summarize_diet(days, shopping)

        assert summary.total_days == 2
        assert summary.total_meals == 4
        assert summary.total_ingredients == 14
        assert summary.days_without_meals == 0
        assert summary.average_meals_per_day == 2.0
        assert summary.shopping_list_size == 5
        assert summary.categories_count == 2

    def test_days_without_meals(self, breakfast):
        """Test counting empty days."""
        planned = PlannedMeal(meal=breakfast, meal_type=MealType.LUNCH)
        days = [
            ParsedDay(day_index=0, meals=(planned,)),
            ParsedDay(day_index=1),
            ParsedDay(day_index=2),
        ]

        summary = summarize_diet(days)

        assert summary.days_without_meals == 2
        assert summary.total_meals == 1
        assert summary.shopping_list_size == 0

    def test_average_meals_per_day(self, breakfast):
        """Test the average over days."""
        planned = PlannedMeal(meal=breakfast, meal_type=MealType.LUNCH)
        days = [
            ParsedDay(day_index=0, meals=(planned, planned)),
            ParsedDay(day_index=1, meals=(planned,)),
        ]

        assert summarize_diet(days).average_meals_per_day == 1.5

    def test_empty_diet(self):
        """Test a diet without days."""
        assert summarize_diet([]) == DietSummary()
