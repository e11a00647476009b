"""Normalize free-typed ingredient and nutrition text into structured records."""

from dietimport.normalize.nutrition import NutritionParser
from dietimport.normalize.products import (
    ProductParser,
    clean_input,
    clean_product_name,
)
from dietimport.normalize.quantity import QuantityParser, parse_quantity
from dietimport.normalize.units import (
    NormalizedValue,
    ProductUnit,
    UnitDetectionResult,
    UnitDetector,
)

__all__ = [
    "NormalizedValue",
    "NutritionParser",
    "ProductParser",
    "ProductUnit",
    "QuantityParser",
    "UnitDetectionResult",
    "UnitDetector",
    "clean_input",
    "clean_product_name",
    "parse_quantity",
]
