#!/usr/bin/env python
"""
Import a diet sheet exported as CSV and print meals and shopping list as JSON.

The CSV holds one meal per row: an order number (or other ignored columns),
then name, instructions, ingredients and nutrition. The first row is a header.

Run with: python scripts/import_diet.py dieta.csv --duration 7 --meal-types BREAKFAST,LUNCH,DINNER

Environment Variables:
    DIETIMPORT_HEADER_ROWS: Number of header rows to skip (default: 1)
    DIETIMPORT_CATEGORIZER_BASE_URL: Categorization service URL (optional)
    LOG_LEVEL: Log level (default: INFO)
"""

import argparse
import asyncio
import csv
import json
import os
import sys
from datetime import date

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from dietimport.config import get_settings
from dietimport.ingest.categorizer import HttpCategorizer, get_categorizer
from dietimport.ingest.sheet import SheetImporter, SheetImportError
from dietimport.logging_config import configure_logging, get_logger
from dietimport.plan.shopping_list import ShoppingListAggregator
from dietimport.plan.template import DietTemplate, apply_template, summarize_diet
from dietimport.schemas import MealType

logger = get_logger(__name__)


def read_grid(path: str, delimiter: str) -> list[list[str]]:
    """Read a CSV file into a grid of cells."""
    with open(path, encoding="utf-8-sig", newline="") as f:
        return [row for row in csv.reader(f, delimiter=delimiter)]


def build_template(args: argparse.Namespace) -> DietTemplate | None:
    """Build a diet template from command line options, if one was requested."""
    if not args.duration:
        return None

    meal_types = tuple(MealType(value.strip().upper()) for value in args.meal_types.split(","))
    times = [value.strip() for value in args.meal_times.split(",")] if args.meal_times else []

    return DietTemplate(
        duration=args.duration,
        meal_types=meal_types,
        meal_times={f"meal_{i}": time for i, time in enumerate(times)},
        start_date=date.fromisoformat(args.start_date) if args.start_date else None,
    )


def run(args: argparse.Namespace) -> dict:
    grid = read_grid(args.path, args.delimiter)
    categorizer = get_categorizer()
    importer = SheetImporter(categorizer=categorizer)

    try:
        if args.concurrent:
            meals = asyncio.run(importer.import_grid_async(grid, skip_columns=args.skip_columns))
        else:
            meals = importer.import_grid(grid, skip_columns=args.skip_columns)

        template = build_template(args)
        days = apply_template(meals, template) if template else []
        shopping = ShoppingListAggregator().aggregate(days or meals)
    finally:
        if isinstance(categorizer, HttpCategorizer):
            categorizer.close()

    output = {
        "meals": [meal.model_dump(mode="json") for meal in meals],
        "shopping_list": shopping.to_dict(),
    }
    if days:
        output["days"] = [day.model_dump(mode="json") for day in days]
        output["summary"] = summarize_diet(days, shopping).model_dump()
    return output


def main():
    parser = argparse.ArgumentParser(description="Import a diet sheet (CSV) into structured meals")
    parser.add_argument("path", help="CSV file with one meal per row")
    parser.add_argument("--skip-columns", "-s", type=int, default=None, help="Index of the meal name column")
    parser.add_argument("--delimiter", "-d", type=str, default=",", help="CSV delimiter")
    parser.add_argument("--concurrent", action="store_true", help="Parse rows concurrently")
    parser.add_argument("--duration", type=int, default=0, help="Diet length in days")
    parser.add_argument(
        "--meal-types",
        type=str,
        default="BREAKFAST,SECOND_BREAKFAST,LUNCH,SNACK,DINNER",
        help="Comma-separated meal types for each day",
    )
    parser.add_argument("--meal-times", type=str, default="", help="Comma-separated times, e.g. 08:00,13:00")
    parser.add_argument("--start-date", type=str, default=None, help="First day (YYYY-MM-DD)")
    parser.add_argument("--json-logs", action="store_true", help="Log in JSON format")

    args = parser.parse_args()

    configure_logging(log_level=get_settings().log_level, json_format=args.json_logs or None)

    try:
        output = run(args)
    except (OSError, ValueError, SheetImportError) as e:
        logger.error(f"Import failed: {e}")
        sys.exit(1)

    json.dump(output, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


if __name__ == "__main__":
    main()
