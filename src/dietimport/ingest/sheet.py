"""Import of diet sheets (already-decoded grids of cells) into parsed meals."""

import asyncio
import re
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from dietimport.config import Settings, get_settings
from dietimport.ingest.categorizer import (
    NullCategorizer,
    ProductCategorizer,
    categorize_product,
)
from dietimport.logging_config import LoggingContext, get_logger
from dietimport.normalize.nutrition import NutritionParser
from dietimport.normalize.products import ProductParser
from dietimport.schemas import ParsedMeal

logger = get_logger(__name__)

Row = Sequence[Any]
Grid = Sequence[Row]

# Commas separate ingredients, except a decimal comma squeezed between digits ("2,5 kg")
_INGREDIENT_SEPARATOR_RE = re.compile(r"(?<!\d),|,(?!\d)")

# Column offsets relative to skip_columns
NAME_OFFSET = 0
INSTRUCTIONS_OFFSET = 1
INGREDIENTS_OFFSET = 2
NUTRITION_OFFSET = 3


class SheetImportError(Exception):
    """Raised when a grid cannot be imported at all."""


@dataclass
class ImportResult:
    """Result of importing one sheet."""

    import_id: str
    meals: list[ParsedMeal] = field(default_factory=list)
    rows_total: int = 0
    rows_skipped: int = 0

    @property
    def rows_imported(self) -> int:
        return len(self.meals)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "import_id": self.import_id,
            "rows_total": self.rows_total,
            "rows_imported": self.rows_imported,
            "rows_skipped": self.rows_skipped,
            "meals": [meal.model_dump(mode="json") for meal in self.meals],
        }


def split_ingredients(cell: str | None) -> list[str]:
    """Split an ingredients cell into trimmed, non-empty ingredient lines."""
    if not cell:
        return []
    return [part.strip() for part in _INGREDIENT_SEPARATOR_RE.split(cell) if part.strip()]


def _cell(row: Row, index: int) -> str:
    """Get a trimmed cell value, treating missing or empty cells as blank."""
    if index >= len(row):
        return ""
    value = row[index]
    if value is None:
        return ""
    return str(value).strip()


def _is_empty(row: Row) -> bool:
    return all(value is None or not str(value).strip() for value in row)


class SheetImporter:
    """
    Walks a grid of meal rows and emits ParsedMeal records.

    Layout: column `skip_columns` holds the meal name, followed by
    instructions, ingredients and nutrition. Columns before it (order
    numbers, notes) are ignored. Empty rows and rows without a name are
    skipped; per-cell problems never fail the import.
    """

    def __init__(
        self,
        product_parser: ProductParser | None = None,
        nutrition_parser: NutritionParser | None = None,
        categorizer: ProductCategorizer | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.product_parser = product_parser or ProductParser(settings=self.settings)
        self.nutrition_parser = nutrition_parser or NutritionParser(settings=self.settings)
        self.categorizer = categorizer or NullCategorizer()

    def import_grid(self, grid: Grid | None, skip_columns: int | None = None) -> list[ParsedMeal]:
        """Import a grid and return its meals in row order."""
        return self.import_sheet(grid, skip_columns).meals

    def import_sheet(self, grid: Grid | None, skip_columns: int | None = None) -> ImportResult:
        """
        Import a grid, keeping row counts alongside the meals.

        Args:
            grid: Rows of already-decoded cells. The first `header_rows` rows are skipped.
            skip_columns: Index of the name column. Invalid values fall back to the default.

        Returns:
            ImportResult with meals in row order.

        Raises:
            SheetImportError: If the grid is missing or is not a sequence of rows.
        """
        rows = self._validate_grid(grid)
        skip = self.settings.clamp_skip_columns(skip_columns)
        result = ImportResult(import_id=str(uuid.uuid4()))

        with LoggingContext(import_id=result.import_id):
            logger.debug(f"Importing {len(rows)} rows with skip_columns={skip}")

            for row_number, row in rows:
                result.rows_total += 1
                meal = self._parse_row(row_number, row, skip)
                if meal is None:
                    result.rows_skipped += 1
                else:
                    result.meals.append(meal)

            self._log_summary(result)

        return result

    async def import_grid_async(
        self,
        grid: Grid | None,
        skip_columns: int | None = None,
    ) -> list[ParsedMeal]:
        """
        Import a grid, parsing rows concurrently in worker threads.

        At most `import_max_concurrency` rows are in flight at once. Meals
        come back in row order regardless of completion order.
        """
        rows = self._validate_grid(grid)
        skip = self.settings.clamp_skip_columns(skip_columns)
        import_id = str(uuid.uuid4())
        semaphore = asyncio.Semaphore(max(1, self.settings.import_max_concurrency))

        async def parse_one(row_number: int, row: Row) -> ParsedMeal | None:
            async with semaphore:
                return await asyncio.to_thread(self._parse_row, row_number, row, skip)

        with LoggingContext(import_id=import_id):
            parsed = await asyncio.gather(*(parse_one(number, row) for number, row in rows))

            result = ImportResult(
                import_id=import_id,
                meals=[meal for meal in parsed if meal is not None],
                rows_total=len(parsed),
            )
            result.rows_skipped = result.rows_total - result.rows_imported
            self._log_summary(result)

        return result.meals

    def _validate_grid(self, grid: Grid | None) -> list[tuple[int, Row]]:
        """Check the grid shape and return numbered data rows (1-based sheet numbering)."""
        if grid is None:
            raise SheetImportError("Grid is missing")
        if isinstance(grid, (str, bytes)) or not isinstance(grid, Sequence):
            raise SheetImportError(f"Grid must be a sequence of rows, got {type(grid).__name__}")

        header_rows = max(0, self.settings.header_rows)
        rows: list[tuple[int, Row]] = []
        for index, row in enumerate(grid):
            if row is None:
                row = ()
            elif isinstance(row, (str, bytes)) or not isinstance(row, Sequence):
                raise SheetImportError(f"Row {index + 1} is not a sequence of cells")
            if index >= header_rows:
                rows.append((index + 1, row))
        return rows

    def _parse_row(self, row_number: int, row: Row, skip: int) -> ParsedMeal | None:
        with LoggingContext(sheet_row=row_number):
            if _is_empty(row):
                return None

            name = _cell(row, skip + NAME_OFFSET)
            if not name:
                return None

            ingredients = tuple(
                categorize_product(self.categorizer, self.product_parser.parse(line))
                for line in split_ingredients(_cell(row, skip + INGREDIENTS_OFFSET))
            )
            nutrition = self.nutrition_parser.parse(_cell(row, skip + NUTRITION_OFFSET) or None)

            return ParsedMeal(
                name=name,
                instructions=_cell(row, skip + INSTRUCTIONS_OFFSET),
                ingredients=ingredients,
                nutrition=nutrition,
            )

    @staticmethod
    def _log_summary(result: ImportResult) -> None:
        logger.info(
            f"Sheet import completed: {result.rows_imported}/{result.rows_total} rows imported, "
            f"{result.rows_skipped} skipped"
        )
