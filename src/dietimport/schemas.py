"""Pydantic schemas for parsed diet sheet data."""

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ParsedProduct(BaseModel):
    """A single normalized ingredient occurrence."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    quantity: float = Field(default=1.0, gt=0)
    unit: str = "szt"
    original: str = ""
    has_custom_unit: bool = False
    category_id: str | None = None

    @field_validator("category_id", mode="before")
    @classmethod
    def blank_category_to_none(cls, v: Any) -> str | None:
        """Treat blank category ids as uncategorized."""
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    def with_category(self, category_id: str | None) -> "ParsedProduct":
        """Return a copy of this product with the given category attached."""
        return self.model_copy(update={"category_id": category_id})


class NutritionalValues(BaseModel):
    """Macro breakdown for one meal. Validated as a unit by the nutrition parser."""

    model_config = ConfigDict(frozen=True)

    calories: float | None = Field(default=None, ge=0, le=1000)
    protein: float | None = Field(default=None, ge=0, le=1000)
    fat: float | None = Field(default=None, ge=0, le=1000)
    carbs: float | None = Field(default=None, ge=0, le=1000)


class ParsedMeal(BaseModel):
    """One imported sheet row."""

    model_config = ConfigDict(frozen=True)

    name: str
    instructions: str = ""
    ingredients: tuple[ParsedProduct, ...] = ()
    nutrition: NutritionalValues | None = None


class MealType(str, Enum):
    """Meal slots a diet template can place meals into."""

    BREAKFAST = "BREAKFAST"
    SECOND_BREAKFAST = "SECOND_BREAKFAST"
    LUNCH = "LUNCH"
    SNACK = "SNACK"
    DINNER = "DINNER"


class PlannedMeal(BaseModel):
    """A parsed meal placed into a day slot."""

    model_config = ConfigDict(frozen=True)

    meal: ParsedMeal
    meal_type: MealType
    time: str = ""

    @property
    def ingredients(self) -> tuple[ParsedProduct, ...]:
        return self.meal.ingredients


class ParsedDay(BaseModel):
    """One day of a templated diet."""

    model_config = ConfigDict(frozen=True)

    day_index: int = Field(ge=0)
    day_date: date | None = None
    meals: tuple[PlannedMeal, ...] = ()
