import os
import sys
from decimal import Decimal

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from pricer.config.settings import Settings
from pricer.engine import Catalog, Multiplier, MultiplierType, Product, QuoteBuilder
from pricer.services.quote_session import QuoteSession


@pytest.fixture
def settings(tmp_path):
    return Settings(
        project_root=tmp_path,
        catalogs_dir=tmp_path / 'catalogs',
        exports_dir=tmp_path / 'exports',
        default_company_name="Fallback Co",
    )


@pytest.fixture
def builder(settings):
    return QuoteBuilder(settings)


@pytest.fixture
def deck():
    return Product(id="deck", name="Deck Board", unit_type="board", base_price=Decimal("100"), category="Lumber")


@pytest.fixture
def railing():
    return Product(id="rail", name="Railing", unit_type="ft", base_price=Decimal("25.50"), category="Lumber")


@pytest.fixture
def permit():
    return Product(id="permit", name="Permit Fee", base_price=Decimal("75"), category="Fees", is_discountable=False)


@pytest.fixture
def rush():
    return Multiplier(id="rush", name="Rush", type=MultiplierType.PERCENTAGE, value=Decimal("10"))


@pytest.fixture
def stain():
    return Multiplier(id="stain", name="Stain", type=MultiplierType.FIXED_PER_UNIT, value=Decimal("5"))


@pytest.fixture
def haul():
    return Multiplier(id="haul", name="Haul Away", type=MultiplierType.FIXED_PER_UNIT,
                      value=Decimal("3"), is_discountable=False)


@pytest.fixture
def catalog(deck, railing, permit, rush, stain, haul):
    return Catalog(
        id="cat-1",
        name="Decks",
        company_name="Acme Decks",
        products=[deck, railing, permit],
        multipliers=[rush, stain, haul],
    )


@pytest.fixture
def session(catalog, settings):
    return QuoteSession(catalog=catalog, settings=settings)
