"""Sheet import and product categorization."""

from dietimport.ingest.categorizer import (
    CategorizerError,
    HttpCategorizer,
    NullCategorizer,
    ProductCategorizer,
    categorize_product,
    get_categorizer,
)
from dietimport.ingest.sheet import (
    ImportResult,
    SheetImporter,
    SheetImportError,
    split_ingredients,
)

__all__ = [
    "CategorizerError",
    "HttpCategorizer",
    "ImportResult",
    "NullCategorizer",
    "ProductCategorizer",
    "SheetImportError",
    "SheetImporter",
    "categorize_product",
    "get_categorizer",
    "split_ingredients",
]
