"""Parsing of free-typed ingredient lines into structured products."""

import math
import re
from dataclasses import dataclass

from dietimport.config import Settings, get_settings
from dietimport.logging_config import get_logger
from dietimport.normalize.quantity import QuantityParser
from dietimport.normalize.units import UnitDetector
from dietimport.schemas import ParsedProduct

logger = get_logger(__name__)


_BULLET_RE = re.compile(r"^[•\-]\s*")
_PARENTHESES_RE = re.compile(r"\s*\([^)]*\)")

_INTEGER_RE = re.compile(r"^\d+$")
_NUMBER_RE = re.compile(r"^\d+(?:[.,]\d+)?$")
_FRACTION_RE = re.compile(r"^\d+/\d+$")
# "500g", "2szt.", "1,5kg", "2-3łyżki"
_GLUED_RE = re.compile(r"^(\d+(?:[.,]\d+)?(?:-\d+(?:[.,]\d+)?)?|\d+/\d+)([^\W\d_]+\.?)$")


def clean_input(line: str) -> str:
    """Strip a leading bullet marker and collapse whitespace."""
    text = _BULLET_RE.sub("", line.strip())
    return " ".join(text.split())


def clean_product_name(name: str) -> str:
    """
    Normalize a product name for storage and matching.

    - Remove parenthetical notes, e.g. "jabłko (zielone)" -> "jabłko"
    - Collapse whitespace
    - Lowercase
    """
    name = _PARENTHESES_RE.sub("", name)
    return " ".join(name.split()).lower()


def tokenize(text: str) -> list[str]:
    """
    Split a cleaned line into tokens.

    Glued number-unit tokens are split ("500g" -> "500", "g"), while mixed
    numbers and spaced ranges are merged into single quantity tokens
    ("1 1/2", "2 - 3" -> "2-3").
    """
    raw = text.split()
    tokens: list[str] = []
    i = 0
    while i < len(raw):
        token = raw[i]
        following = raw[i + 1] if i + 1 < len(raw) else None

        if following and _INTEGER_RE.match(token) and _FRACTION_RE.match(following):
            tokens.append(f"{token} {following}")
            i += 2
            continue

        if (
            following == "-"
            and i + 2 < len(raw)
            and _NUMBER_RE.match(token)
            and _NUMBER_RE.match(raw[i + 2])
        ):
            tokens.append(f"{token}-{raw[i + 2]}")
            i += 3
            continue

        glued = _GLUED_RE.match(token)
        if glued:
            tokens.extend(glued.groups())
        else:
            tokens.append(token)
        i += 1

    return tokens


@dataclass
class QuantityInfo:
    """Where a quantity was found in a tokenized line."""

    quantity: float
    quantity_index: int
    candidate_index: int | None


class ProductParser:
    """
    Turns one ingredient line into a ParsedProduct.

    parse() never raises: malformed input yields a record with quantity 1.0
    and the default unit.
    """

    def __init__(
        self,
        quantity_parser: QuantityParser | None = None,
        unit_detector: UnitDetector | None = None,
        settings: Settings | None = None,
    ):
        self.quantity_parser = quantity_parser or QuantityParser()
        self.unit_detector = unit_detector or UnitDetector()
        self.settings = settings or get_settings()

    def parse(self, line: str | None) -> ParsedProduct:
        original = line if line is not None else ""
        cleaned = clean_input(original)

        try:
            return self._parse_cleaned(cleaned, original)
        except Exception as e:
            logger.debug(f"Falling back to defaults for ingredient {original!r}: {e}")
            return ParsedProduct(
                name=cleaned,
                quantity=1.0,
                unit=self.settings.default_unit,
                original=original,
                has_custom_unit=False,
            )

    def _parse_cleaned(self, cleaned: str, original: str) -> ParsedProduct:
        tokens = tokenize(cleaned)
        info = self.extract_quantity(tokens)

        if info is None:
            # No quantity anywhere: the whole line is the remaining text
            unit, name_tokens = self._unit_from_text(tokens)
            return ParsedProduct(
                name=clean_product_name(" ".join(name_tokens)),
                quantity=1.0,
                unit=unit,
                original=original,
            )

        without_quantity = [t for i, t in enumerate(tokens) if i != info.quantity_index]

        if info.candidate_index is None:
            unit, name_tokens = self._unit_from_text(without_quantity)
            has_custom_unit = False
        else:
            candidate = tokens[info.candidate_index]
            without_candidate = [
                t
                for i, t in enumerate(tokens)
                if i not in (info.quantity_index, info.candidate_index)
            ]
            detection = self.unit_detector.lookup(candidate)

            if detection.is_known:
                unit = detection.canonical_unit
                name_tokens = without_candidate
                has_custom_unit = False
            elif self.unit_detector.is_container_word(candidate):
                unit = candidate.lower().rstrip(".,;:!?")
                name_tokens = without_candidate
                has_custom_unit = self.settings.flag_container_units_as_custom
            else:
                # Not a unit after all: it belongs to the product name
                unit = self.settings.default_unit
                name_tokens = without_quantity
                has_custom_unit = False

        return ParsedProduct(
            name=clean_product_name(" ".join(name_tokens)),
            quantity=info.quantity,
            unit=unit,
            original=original,
            has_custom_unit=has_custom_unit,
        )

    def extract_quantity(self, tokens: list[str]) -> QuantityInfo | None:
        """
        Locate the quantity token and its candidate unit.

        The leading token is tried first, then the remaining tokens from the
        right. The candidate unit is the token right after the quantity, or
        the one before it when the quantity ends the line.
        """
        if not tokens:
            return None

        order = [0, *range(len(tokens) - 1, 0, -1)]
        for index in order:
            value = self.quantity_parser.parse(tokens[index])
            if value is None or not (0 < value < math.inf):
                continue

            if index + 1 < len(tokens):
                candidate_index: int | None = index + 1
            elif index > 0:
                candidate_index = index - 1
            else:
                candidate_index = None

            return QuantityInfo(value, index, candidate_index)

        return None

    def _unit_from_text(self, tokens: list[str]) -> tuple[str, list[str]]:
        """Look for a recognized unit embedded in the text and pull it out of the name."""
        detection = self.unit_detector.detect(" ".join(tokens))
        if not detection.is_known:
            return self.settings.default_unit, tokens

        i = tokens.index(detection.token)
        return detection.canonical_unit, tokens[:i] + tokens[i + 1 :]

