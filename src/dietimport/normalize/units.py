"""Unit detection and conversion utilities."""

import re
from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class ProductUnit:
    """A canonical measurement unit."""

    code: str
    label: str
    category: str  # "weight", "volume", "piece", "kitchen"
    base_unit: str | None = None
    factor: float | None = None


@dataclass(frozen=True)
class UnitDetectionResult:
    """Outcome of looking for a unit in a piece of text."""

    canonical_unit: str
    category: str
    is_known: bool
    token: str | None = None  # The token that matched, as written


@dataclass(frozen=True)
class NormalizedValue:
    """A quantity expressed in its base unit."""

    value: float
    unit: str


# =============================================================================
# Unit Tables
# =============================================================================

DEFAULT_UNITS: tuple[ProductUnit, ...] = (
    # Weight (base unit: g)
    ProductUnit("g", "gram", "weight", "g", 1.0),
    ProductUnit("dag", "dekagram", "weight", "g", 10.0),
    ProductUnit("kg", "kilogram", "weight", "g", 1000.0),
    # Volume (base unit: ml)
    ProductUnit("ml", "mililitr", "volume", "ml", 1.0),
    ProductUnit("l", "litr", "volume", "ml", 1000.0),
    # Pieces
    ProductUnit("szt", "sztuka", "piece"),
    # Kitchen measures
    ProductUnit("łyżka", "łyżka", "kitchen", "ml", 15.0),
    ProductUnit("łyżeczka", "łyżeczka", "kitchen", "ml", 5.0),
    ProductUnit("szklanka", "szklanka", "kitchen", "ml", 250.0),
    ProductUnit("garść", "garść", "kitchen", "g", 30.0),
)

DEFAULT_SYNONYMS: dict[str, tuple[str, ...]] = {
    "g": ("g", "gr", "gram", "gramy", "gramów", "grama"),
    "dag": ("dag", "dkg", "deko", "dekagram", "dekagramy", "dekagramów"),
    "kg": ("kg", "kilo", "kilogram", "kilogramy", "kilogramów"),
    "ml": ("ml", "mililitr", "mililitry", "mililitrów"),
    "l": ("l", "litr", "litry", "litrów", "litra"),
    "szt": ("szt", "sz", "sztuka", "sztuki", "sztuk", "sztukę"),
    "łyżka": ("łyżka", "łyżki", "łyżek", "łyżkę", "łyż"),
    "łyżeczka": ("łyżeczka", "łyżeczki", "łyżeczek", "łyżeczkę", "łyżecz"),
    "szklanka": ("szklanka", "szklanki", "szklanek", "szklankę", "szkl"),
    "garść": ("garść", "garści", "garstka", "garstki"),
}

# Container and serving words. They are not canonical units but are kept
# verbatim as the unit when they follow a quantity.
CONTAINER_WORD_RE = re.compile(
    r"^(opak\w*|op|porcj\w*|puszk\w*|puszek|słoi\w*|paczk\w*|paczek|kostk\w*|kostek"
    r"|plast\w*|butelk\w*|butelek|torebk\w*|torebek|ząb\w*|pęcz\w*|bochen\w*)$",
    re.IGNORECASE,
)

_TRAILING_PUNCTUATION = ".,;:!?"


def _normalize_token(token: str) -> str:
    return token.strip().lower().rstrip(_TRAILING_PUNCTUATION)


class UnitDetector:
    """
    Recognizes unit tokens and maps their written forms to canonical codes.

    The lookup tables are built once per instance and are read-only
    afterwards, so a detector can be shared between threads.
    """

    FALLBACK_UNIT = "szt"
    FALLBACK_CATEGORY = "piece"

    def __init__(
        self,
        units: tuple[ProductUnit, ...] = DEFAULT_UNITS,
        synonyms: dict[str, tuple[str, ...]] | None = None,
    ):
        self._units = MappingProxyType({unit.code: unit for unit in units})

        table: dict[str, str] = {_normalize_token(code): code for code in self._units}
        for code, forms in (synonyms or DEFAULT_SYNONYMS).items():
            if code not in self._units:
                raise ValueError(f"Synonyms given for unknown unit: {code}")
            for form in (code, *forms):
                table[_normalize_token(form)] = code
        self._synonyms = MappingProxyType(table)

    @property
    def units(self) -> MappingProxyType:
        return self._units

    def get_unit(self, code: str) -> ProductUnit | None:
        return self._units.get(code)

    def is_valid_unit(self, code: str) -> bool:
        return code in self._units

    def lookup(self, token: str | None) -> UnitDetectionResult:
        """Resolve a single token against the synonym table."""
        if token:
            code = self._synonyms.get(_normalize_token(token))
            if code is not None:
                return UnitDetectionResult(code, self._units[code].category, True, token)
        return UnitDetectionResult(self.FALLBACK_UNIT, self.FALLBACK_CATEGORY, False)

    def detect(self, text: str | None) -> UnitDetectionResult:
        """
        Find the first recognized unit among the whitespace tokens of text.

        Returns a result with is_known=False and the fallback unit when
        nothing matches.
        """
        if not text:
            return UnitDetectionResult(self.FALLBACK_UNIT, self.FALLBACK_CATEGORY, False)

        for token in text.split():
            result = self.lookup(token)
            if result.is_known:
                return result

        return UnitDetectionResult(self.FALLBACK_UNIT, self.FALLBACK_CATEGORY, False)

    @staticmethod
    def is_container_word(token: str | None) -> bool:
        """Check whether a token names a container or serving (opakowanie, porcja...)."""
        if not token:
            return False
        return CONTAINER_WORD_RE.match(_normalize_token(token)) is not None

    # =========================================================================
    # Conversion
    # =========================================================================

    def to_base_unit(self, value: float, code: str) -> NormalizedValue | None:
        """Convert a value to its base unit (g or ml), if the unit has one."""
        unit = self._units.get(code)
        if unit is None or unit.base_unit is None or unit.factor is None:
            return None
        return NormalizedValue(value * unit.factor, unit.base_unit)

    def can_combine(self, first: str, second: str) -> bool:
        """Check if quantities in two units can be summed."""
        unit_a = self._units.get(first)
        unit_b = self._units.get(second)
        if unit_a is None or unit_b is None:
            return False
        if first == second:
            return True
        if unit_a.base_unit is None or unit_b.base_unit is None:
            return False
        return unit_a.base_unit == unit_b.base_unit
