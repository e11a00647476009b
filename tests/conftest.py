"""Pytest configuration and shared fixtures."""

from unittest.mock import MagicMock

import pytest

from dietimport.config import Settings
from dietimport.schemas import NutritionalValues, ParsedMeal, ParsedProduct

# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow running")


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def settings():
    """Settings with the documented defaults, independent of the environment."""
    return Settings(
        _env_file=None,
        default_skip_columns=1,
        max_skip_columns=3,
        header_rows=1,
        default_unit="szt",
        nutrition_min_value=0.0,
        nutrition_max_value=1000.0,
        flag_container_units_as_custom=False,
        import_max_concurrency=4,
        categorizer_base_url="",
    )


# =============================================================================
# Sheet Fixtures
# =============================================================================

HEADER = ["Lp.", "Nazwa", "Sposób przygotowania", "Składniki", "Wartości odżywcze"]


@pytest.fixture
def sample_grid():
    """A diet sheet with two meals, one empty row and one row without a name."""
    return [
        HEADER,
        [
            "1",
            "Owsianka z bananem",
            "Zagotuj mleko, dodaj płatki.",
            "50 g płatków owsianych, 200 ml mleka, 1 banan",
            "350,15,7,60",
        ],
        [],
        ["3", "   ", "Bez nazwy", "100 g ryżu", "100,2,1,20"],
        [
            "4",
            "Kurczak z ryżem",
            "Upiecz kurczaka.",
            "150 g piersi z kurczaka, 100 g ryżu, 2,5 łyżki oliwy",
            "500,40,10,55",
        ],
    ]


@pytest.fixture
def large_grid():
    """A diet sheet with many numbered meals."""
    rows = [HEADER]
    for i in range(1, 21):
        rows.append([str(i), f"Posiłek {i}", "", f"{i} g soli, 1 jajko", ""])
    return rows


# =============================================================================
# Collaborator Fixtures
# =============================================================================


@pytest.fixture
def mock_categorizer():
    """Categorizer that puts known products into fixed categories."""
    categories = {
        "mleka": "nabiał",
        "płatków owsianych": "zboża",
        "ryżu": "zboża",
        "banan": "owoce",
    }
    categorizer = MagicMock()
    categorizer.suggest_category.side_effect = lambda product: categories.get(product.name)
    return categorizer


# =============================================================================
# Parsed Data Fixtures
# =============================================================================


def make_product(original: str, name: str | None = None, quantity: float = 1.0,
                 unit: str = "szt", category_id: str | None = None) -> ParsedProduct:
    """Build a parsed product with the original text as default name."""
    return ParsedProduct(
        name=name if name is not None else original.lower(),
        quantity=quantity,
        unit=unit,
        original=original,
        category_id=category_id,
    )


@pytest.fixture
def breakfast():
    """A breakfast meal with categorized ingredients."""
    return ParsedMeal(
        name="Jajecznica",
        instructions="Usmaż jajka.",
        ingredients=(
            make_product("3 jajka", "jajka", 3, "szt", "nabiał"),
            make_product("10 g masła", "masła", 10, "g", "nabiał"),
            make_product("1 pomidor", "pomidor", 1, "szt", "warzywa"),
        ),
        nutrition=NutritionalValues(calories=320, protein=20, fat=24, carbs=5),
    )


@pytest.fixture
def dinner():
    """A dinner meal sharing some ingredients with breakfast."""
    return ParsedMeal(
        name="Sałatka",
        ingredients=(
            make_product("2 pomidory", "pomidory", 2, "szt", "warzywa"),
            make_product("1 pomidor", "pomidor", 1, "szt", "warzywa"),
            make_product("3 jajka", "jajka", 3, "szt", "nabiał"),
            make_product("1 łyżka oliwy", "oliwy", 1, "łyżka"),
        ),
    )
