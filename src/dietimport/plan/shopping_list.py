"""Shopping list aggregation from imported meals."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from rapidfuzz import fuzz

from dietimport.ingest.categorizer import ProductCategorizer, categorize_product
from dietimport.logging_config import get_logger
from dietimport.normalize.units import UnitDetector
from dietimport.schemas import ParsedDay, ParsedMeal, ParsedProduct, PlannedMeal

logger = get_logger(__name__)

MealSource = ParsedMeal | PlannedMeal | ParsedDay


def iter_products(meals: Iterable[MealSource]) -> Iterator[ParsedProduct]:
    """Yield every ingredient of the given meals, flattening days into their meals."""
    for item in meals:
        if isinstance(item, ParsedDay):
            for planned in item.meals:
                yield from planned.ingredients
        else:
            yield from item.ingredients


@dataclass
class CombinedTotal:
    """A quantity total merged across convertible units and similar names."""

    name: str
    unit: str
    quantity: float
    names: list[str] = field(default_factory=list)

    def display(self) -> str:
        return f"{self.name} {self.quantity:g} {self.unit}"


@dataclass
class ShoppingListResult:
    """Aggregated shopping list for a set of meals."""

    flat_list: list[str] = field(default_factory=list)
    by_category: dict[str, list[str]] = field(default_factory=dict)
    totals: dict[tuple[str, str], float] = field(default_factory=dict)

    @property
    def categories_count(self) -> int:
        return len(self.by_category)

    def base_unit_totals(
        self,
        detector: UnitDetector | None = None,
        similarity: float = 0.9,
    ) -> list[CombinedTotal]:
        """
        Merge the per-(name, unit) totals into combined quantities.

        Units with a base unit (g, ml) are converted to it first; other units
        are kept as they are. A total joins the first earlier entry with the
        same unit whose name has a rapidfuzz ratio of at least `similarity`
        (0..1). The display list is not affected.

        Args:
            detector: Unit tables used for conversion.
            similarity: Minimum name similarity for merging, 1.0 for exact names only.

        Returns:
            Combined totals in first-seen order.
        """
        detector = detector or UnitDetector()
        threshold = similarity * 100
        combined: list[CombinedTotal] = []

        for (name, unit), quantity in self.totals.items():
            normalized = detector.to_base_unit(quantity, unit)
            if normalized is not None:
                value, base_unit = normalized.value, normalized.unit
            else:
                value, base_unit = quantity, unit

            for entry in combined:
                if entry.unit == base_unit and fuzz.ratio(entry.name, name) >= threshold:
                    entry.quantity += value
                    if name not in entry.names:
                        entry.names.append(name)
                    break
            else:
                combined.append(CombinedTotal(name, base_unit, value, [name]))

        return combined

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "flat_list": self.flat_list,
            "by_category": self.by_category,
            "totals": [
                {"name": name, "unit": unit, "quantity": quantity}
                for (name, unit), quantity in self.totals.items()
            ],
        }


class ShoppingListAggregator:
    """
    Builds a shopping list from imported meals.

    The flat list holds distinct original ingredient texts sorted
    case-insensitively. Texts are grouped by category where one is known,
    and quantities are summed per (name, unit). Texts are not
    quantity-merged: "2 jabłka" and "3 jabłka" stay separate entries.
    """

    def __init__(self, categorizer: ProductCategorizer | None = None):
        # Optional: fills in categories for products imported without one
        self.categorizer = categorizer

    def aggregate(self, meals: Iterable[MealSource]) -> ShoppingListResult:
        seen: dict[str, None] = {}
        by_category: dict[str, list[str]] = {}
        totals: dict[tuple[str, str], float] = {}

        for product in iter_products(meals):
            original = product.original.strip()
            if not original:
                continue

            if product.category_id is None and self.categorizer is not None:
                product = categorize_product(self.categorizer, product)

            seen.setdefault(original, None)

            key = (product.name, product.unit)
            totals[key] = totals.get(key, 0.0) + product.quantity

            if product.category_id:
                items = by_category.setdefault(product.category_id, [])
                if original not in items:
                    items.append(original)

        flat_list = sorted(seen, key=lambda text: (text.casefold(), text))

        logger.debug(
            f"Aggregated shopping list: {len(flat_list)} items, {len(by_category)} categories"
        )

        return ShoppingListResult(flat_list=flat_list, by_category=by_category, totals=totals)
