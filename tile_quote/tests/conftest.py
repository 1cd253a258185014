"""
Shared pytest fixtures for the pricing engine test suite.

Every fixture builds an explicit ConfigurationProfile; no test reads a
profile file or environment settings unless it says so.
"""

import pytest

from tile_quote.models.schemas import QuotationDocument
from tile_quote.pricing.profile import ConfigurationProfile, load_profile


@pytest.fixture
def profile():
    """
    Built-in defaults.

    Kitchen wall 5600 / general floor 6500 / sitting room 6800 per carton,
    1.5 m² per carton everywhere, wastage 1.10, tax 7.5% (hidden by default).
    """
    return ConfigurationProfile()


@pytest.fixture
def sixty_only_profile():
    """Defaults, but the only size rule is 60x60 @ 6500."""
    return load_profile({"size_price_rules": [{"size": "60x60", "price": 6500}]})


@pytest.fixture
def kitchen_quote():
    """One kitchen wall line driven by area, plus cement and a discount."""
    return QuotationDocument.model_validate({
        "clientDetails": {"clientName": "Ade Bello", "projectName": "Lekki duplex"},
        "tiles": [{"category": "Kitchen Wall", "sqm": 95}],
        "materials": [{"item": "Cement", "quantity": 10, "unit": "bags"}],
        "workmanshipRate": 1700,
        "maintenance": 5000,
        "profitPercentage": 10,
        "adjustments": [{"description": "Discount", "amount": -5000}],
        "depositPercentage": 50,
    })
