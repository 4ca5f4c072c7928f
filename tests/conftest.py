import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from quote_tool.data.catalog import Catalog
from quote_tool.engine.models import Addon, BasePackage, ContractTerm, DetailOption


@pytest.fixture
def small_catalog():
    """Minimal catalog with one entry per price feature."""
    return Catalog(
        packages=[
            BasePackage(id="basic-website", name="Essential Website", price=399, setup_fee=1500, tier="essential"),
            BasePackage(id="professional-website", name="Professional Website", price=599, setup_fee=2500,
                        tier="professional"),
        ],
        addons=[
            Addon(id="ai-integration", name="KI-Integration", price=299),
            Addon(id="booking-system", name="Online Terminbuchung", price=199),
        ],
        detail_options=[
            DetailOption(attribute="company-size", id="small", label="1-5 Mitarbeiter", default=True),
            DetailOption(attribute="company-size", id="medium", label="6-20 Mitarbeiter", modifier=0.10),
            DetailOption(attribute="company-size", id="large", label="21-50 Mitarbeiter", modifier=0.20),
            DetailOption(attribute="locations", id="single", label="1 Standort", default=True),
            DetailOption(attribute="locations", id="few", label="2-3 Standorte", modifier=0.15),
            DetailOption(attribute="support", id="standard", label="Standard-Support", default=True),
            DetailOption(attribute="support", id="priority", label="Priority-Support", price=99),
        ],
        contract_terms=[
            ContractTerm(id="monthly", label="Monatlich", discount=0.0, months=1),
            ContractTerm(id="annual", label="Jährlich", discount=0.10, months=12),
        ],
    )


@pytest.fixture
def default_catalog():
    return Catalog.default()
