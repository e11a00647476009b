"""Parsing of compact nutrition cells ("350,15,7,60")."""

import re

from pydantic import ValidationError

from dietimport.config import Settings, get_settings
from dietimport.logging_config import get_logger
from dietimport.schemas import NutritionalValues

logger = get_logger(__name__)

FIELD_NAMES = ("calories", "protein", "fat", "carbs")

_VALUE_RE = re.compile(r"^\d+(?:[.,]\d+)?$")
_INTEGER_PART_RE = re.compile(r"^\s*\d+$")
_FRACTION_PART_RE = re.compile(r"^\d+\s*$")


def _can_merge(left: str, right: str) -> bool:
    """A comma between two bare digit runs may be a decimal comma."""
    return bool(_INTEGER_PART_RE.match(left) and _FRACTION_PART_RE.match(right))


def _segmentations(parts: list[str], merges: int, start: int = 0) -> list[list[str]]:
    """All ways to fold exactly `merges` decimal commas back into their numbers."""
    if start >= len(parts):
        return [[]] if merges == 0 else []

    results = [[parts[start], *rest] for rest in _segmentations(parts, merges, start + 1)]

    if merges > 0 and start + 1 < len(parts) and _can_merge(parts[start], parts[start + 1]):
        merged = f"{parts[start].strip()}.{parts[start + 1].strip()}"
        results.extend(
            [merged, *rest] for rest in _segmentations(parts, merges - 1, start + 2)
        )

    return results


def split_fields(text: str) -> list[str] | None:
    """
    Split a nutrition cell into exactly four fields.

    A semicolon, when present, is the only field separator. Otherwise a
    comma followed by whitespace always separates fields, and a comma
    squeezed between two digit runs may be a decimal comma. The split is
    accepted only when exactly one reading gives four fields.
    """
    if ";" in text:
        parts = text.split(";")
        return parts if len(parts) == len(FIELD_NAMES) else None

    parts = text.split(",")
    merges = len(parts) - len(FIELD_NAMES)
    if merges < 0:
        return None
    if merges == 0:
        return parts

    candidates = _segmentations(parts, merges)
    if len(candidates) != 1:
        return None
    return candidates[0]


class NutritionParser:
    """Parses calories, protein, fat and carbs from a single cell, all or nothing."""

    def __init__(self, settings: Settings | None = None):
        settings = settings or get_settings()
        self.min_value = settings.nutrition_min_value
        self.max_value = settings.nutrition_max_value

    def parse(self, text: str | None) -> NutritionalValues | None:
        if text is None:
            return None

        text = text.strip()
        if not text:
            return None

        fields = split_fields(text)
        if fields is None:
            logger.debug(f"Nutrition cell does not resolve to four fields: {text!r}")
            return None

        values: list[float] = []
        for field in fields:
            value = self.parse_value(field)
            if value is None:
                logger.debug(f"Invalid nutrition value {field!r} in {text!r}")
                return None
            values.append(value)

        try:
            return NutritionalValues(**dict(zip(FIELD_NAMES, values)))
        except ValidationError as e:
            logger.debug(f"Nutrition values rejected for {text!r}: {e}")
            return None

    def parse_value(self, field: str) -> float | None:
        """Parse one field and check it against the allowed range."""
        field = field.strip()
        if not _VALUE_RE.match(field):
            return None
        value = float(field.replace(",", "."))
        if not self.min_value <= value <= self.max_value:
            return None
        return value
