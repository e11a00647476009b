"""Quantity parsing for free-typed ingredient tokens."""

import re
from types import MappingProxyType

# Closed vocabulary of Polish number words accepted as quantities
FRACTION_WORDS: MappingProxyType[str, float] = MappingProxyType(
    {
        "ćwierć": 0.25,
        "pół": 0.5,
        "półtora": 1.5,
        "półtorej": 1.5,
        "jeden": 1.0,
        "jedna": 1.0,
        "jedno": 1.0,
        "dwa": 2.0,
        "dwie": 2.0,
        "trzy": 3.0,
        "cztery": 4.0,
        "pięć": 5.0,
    }
)

_NUMBER = r"\d+(?:[.,]\d+)?"

_NUMBER_RE = re.compile(rf"^{_NUMBER}$")
_RANGE_RE = re.compile(rf"^({_NUMBER})\s*-\s*({_NUMBER})$")
_MIXED_RE = re.compile(r"^(\d+)\s+(\d+)/(\d+)$")
_FRACTION_RE = re.compile(r"^(\d+)/(\d+)$")


def _to_float(value: str) -> float:
    return float(value.replace(",", "."))


class QuantityParser:
    """
    Extracts a numeric magnitude from a single text token.

    Handles formats like:
    - "2", "2.5", "2,5"
    - "pół", "półtorej", "dwie"
    - "1/2" and "1 1/2"
    - "2-3" (range, returns average)

    Anything else yields None. A None result means "no quantity in this
    token", never zero.
    """

    def __init__(self, fraction_words: dict[str, float] | None = None):
        self._words = MappingProxyType(dict(fraction_words or FRACTION_WORDS))

    def parse(self, token: str | None) -> float | None:
        if token is None:
            return None

        text = token.strip().lower()
        if not text:
            return None

        if text in self._words:
            return self._words[text]

        if _NUMBER_RE.match(text):
            return _to_float(text)

        range_match = _RANGE_RE.match(text)
        if range_match:
            low = _to_float(range_match.group(1))
            high = _to_float(range_match.group(2))
            return (low + high) / 2

        mixed_match = _MIXED_RE.match(text)
        if mixed_match:
            denominator = int(mixed_match.group(3))
            if denominator == 0:
                return None
            return int(mixed_match.group(1)) + int(mixed_match.group(2)) / denominator

        fraction_match = _FRACTION_RE.match(text)
        if fraction_match:
            denominator = int(fraction_match.group(2))
            if denominator == 0:
                return None
            return int(fraction_match.group(1)) / denominator

        return None


_default_parser = QuantityParser()


def parse_quantity(token: str | None) -> float | None:
    """Parse a quantity token with the default vocabulary."""
    return _default_parser.parse(token)
