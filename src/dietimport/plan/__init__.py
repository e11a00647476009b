"""Shopping lists and diet templates built from imported meals."""

from dietimport.plan.shopping_list import (
    CombinedTotal,
    ShoppingListAggregator,
    ShoppingListResult,
    iter_products,
)
from dietimport.plan.template import (
    DietSummary,
    DietTemplate,
    apply_template,
    summarize_diet,
)

__all__ = [
    "CombinedTotal",
    "DietSummary",
    "DietTemplate",
    "ShoppingListAggregator",
    "ShoppingListResult",
    "apply_template",
    "iter_products",
    "summarize_diet",
]
