"""
Pytest configuration and shared fixtures for the swipe shop tests.
"""
import os
import sys
from typing import Callable, Generator, List, Optional

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), "src"))

# Load environment variables
from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env"))


# ============================================================================
# Helpers
# ============================================================================

class FakeClock:
    """Manually driven monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_product(product_id: str, sector: str, amount: str = "10.00"):
    from shop.models import Price, Product, ProductImage, ProductVariant
    return Product(
        id=product_id,
        sector=sector,
        title=f"Product {product_id}",
        description=f"Description of {product_id}",
        images=[ProductImage(url=f"https://img.example.com/{product_id}.jpg")],
        variants=[
            ProductVariant(
                id=f"gid://shopify/ProductVariant/{product_id}",
                price=Price(amount=amount),
            )
        ],
    )


# ============================================================================
# Fixtures: Test Data Factories
# ============================================================================

@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sample_products() -> list:
    """Nine products, three per sector, 10 EUR each."""
    return [
        make_product(f"{sector}-{i:03d}", sector)
        for sector in ("eyes", "lips", "skin")
        for i in range(1, 4)
    ]


@pytest.fixture
def settings_dict() -> dict:
    """Shop settings shaped like the front-end payload."""
    from config.constants import DEFAULT_SHOP_SETTINGS
    import copy
    return copy.deepcopy(DEFAULT_SHOP_SETTINGS)


@pytest.fixture
def shop_settings(settings_dict):
    from shop.models import ShopSettings
    return ShopSettings.model_validate(settings_dict)


@pytest.fixture
def ticket_ledger():
    from services.ticket_ledger import TicketLedger
    return TicketLedger()


@pytest.fixture
def round_config():
    from config.constants import RoundConfig
    return RoundConfig(
        COUNTDOWN_SECONDS=3,
        REJECT_COOLDOWN_SECONDS=0.5,
        KEEP_COOLDOWN_SECONDS=1.0,
        MAX_SECTOR_DRAWS=50,
        MAX_REPLAYS=2,
    )


@pytest.fixture
def make_engine(shop_settings, sample_products, ticket_ledger, round_config, fake_clock):
    """
    Factory for RoundEngine instances wired to in-memory fakes.

    Any keyword overrides the default collaborator.
    """
    import random
    from engines.round_engine import RoundEngine

    def _make(
        settings=None,
        products: Optional[List] = None,
        loader: Optional[Callable] = None,
        config=None,
        client_id: str = "client-1",
    ):
        settings = settings or shop_settings
        pool = sample_products if products is None else products
        return RoundEngine(
            client_id=client_id,
            settings_provider=lambda: settings,
            pool_loader=loader or (lambda sectors: list(pool)),
            tickets=ticket_ledger,
            config=config or round_config,
            clock=fake_clock,
            rng=random.Random(7),
        )

    return _make


# ============================================================================
# Fixtures: FastAPI Test Client
# ============================================================================

@pytest.fixture
def app(fake_clock):
    """FastAPI application with fresh in-memory services and a fake clock."""
    from api.app import create_app
    from api.routes.play import get_clock
    from services import reset_services

    reset_services()
    application = create_app()
    application.dependency_overrides[get_clock] = lambda: fake_clock
    yield application
    application.dependency_overrides.clear()
    reset_services()


@pytest.fixture
def client(app) -> Generator:
    """Synchronous HTTP client; runs the app lifespan."""
    from fastapi.testclient import TestClient
    with TestClient(app) as test_client:
        yield test_client


# ============================================================================
# Markers auto-use
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "slow: marks tests as slow")
