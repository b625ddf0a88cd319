"""
Mock product catalog.

Products are generated once at startup from a fixed seed and served
read-only afterwards. The generator is Mulberry32, so a given seed always
yields the same catalog across restarts.
"""

import threading
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from config.constants import (
    CATALOG_SEED,
    CURRENCY_CODE,
    IMAGE_URL_TEMPLATE,
    MIN_PRICE,
    PRICE_SPAN,
    SECTOR_COUNTS,
    SECTOR_DETAILS,
    SECTOR_ORDER,
    VARIANT_ID_TEMPLATE,
)
from core.logging import LoggerMixin
from shop.errors import UnknownVariant
from shop.models import Price, Product, ProductImage, ProductVariant, Sector


_MASK32 = 0xFFFFFFFF


def _imul(a: int, b: int) -> int:
    """32-bit integer multiply, unsigned result."""
    return (a * b) & _MASK32


def create_rng(seed: int) -> Callable[[], float]:
    """
    Mulberry32 generator returning floats in [0, 1).

    All intermediate values are kept as unsigned 32-bit integers.
    """
    state = seed & _MASK32

    def next_float() -> float:
        nonlocal state
        state = (state + 0x6D2B79F5) & _MASK32
        t = _imul(state ^ (state >> 15), 1 | state)
        t ^= (t + _imul(t ^ (t >> 7), 61 | t)) & _MASK32
        return ((t ^ (t >> 14)) & _MASK32) / 4294967296

    return next_float


def generate_products(seed: int = CATALOG_SEED) -> List[Product]:
    """
    Build the mock catalog.

    Sectors are generated in SECTOR_ORDER with a global running index,
    so ids run eyes-001..eyes-038, lips-039..lips-070, skin-071..skin-100
    with the default counts.
    """
    rng = create_rng(seed)
    products: List[Product] = []
    global_index = 1

    for sector_id in SECTOR_ORDER:
        detail = SECTOR_DETAILS[sector_id]

        for i in range(SECTOR_COUNTS[sector_id]):
            base = detail.bases[i % len(detail.bases)]
            adjective = detail.adjectives[int(rng() * len(detail.adjectives))]
            benefit = detail.benefits[int(rng() * len(detail.benefits))]
            product_id = f"{sector_id}-{global_index:03d}"
            amount = f"{MIN_PRICE + rng() * PRICE_SPAN:.2f}"

            products.append(Product(
                id=product_id,
                sector=sector_id,
                title=f"{base} {adjective}",
                description=f"{base} {adjective} pensato per {benefit}.",
                images=[ProductImage(url=IMAGE_URL_TEMPLATE.format(product_id=product_id))],
                variants=[
                    ProductVariant(
                        id=VARIANT_ID_TEMPLATE.format(product_id=product_id),
                        price=Price(amount=amount, currency_code=CURRENCY_CODE),
                    )
                ],
            ))
            global_index += 1

    return products


class MockCatalog(LoggerMixin):
    """
    Read-only catalog of generated products.

    Usage:
        catalog = MockCatalog(seed=2024)
        catalog.all()                      # every product
        catalog.filter(["eyes", "lips"])   # sector subset
        catalog.pool_for(tier_sectors)     # pool for a round
    """

    def __init__(self, seed: int = CATALOG_SEED):
        self.seed = seed
        self._products = tuple(generate_products(seed))
        self._by_variant: Dict[str, Product] = {p.variant_id: p for p in self._products}
        self.known_sectors = frozenset(p.sector for p in self._products)
        self.logger.info("Mock catalog generated", seed=seed, products=len(self._products))

    def __len__(self) -> int:
        return len(self._products)

    def all(self) -> List[Product]:
        return list(self._products)

    def filter(self, sector_ids: Iterable[Optional[str]]) -> List[Product]:
        """
        Products of the requested sectors.

        Unknown ids are ignored; when no known sector is requested the
        whole catalog is returned.
        """
        wanted = {s for s in sector_ids if isinstance(s, str) and s in self.known_sectors}
        if not wanted:
            return self.all()
        return [p for p in self._products if p.sector in wanted]

    def pool_for(self, sectors: Sequence[Sector]) -> List[Product]:
        """Round pool for a tier: its sectors' products, or everything if it has none."""
        if not sectors:
            return self.all()
        allowed = {sector.id for sector in sectors}
        return [p for p in self._products if p.sector in allowed]

    def find_variants(self, variant_ids: Iterable[str]) -> List[Product]:
        """
        Resolve checkout line items.

        Raises:
            UnknownVariant: Any id is not in the catalog
        """
        variant_ids = list(variant_ids)
        missing = [v for v in variant_ids if v not in self._by_variant]
        if missing:
            raise UnknownVariant(missing)
        return [self._by_variant[v] for v in variant_ids]


# Process-wide catalog, built on first use
_catalog: Optional[MockCatalog] = None
_catalog_lock = threading.Lock()


def get_catalog() -> MockCatalog:
    """Get the mock catalog singleton."""
    global _catalog
    if _catalog is None:
        with _catalog_lock:
            if _catalog is None:
                from config.settings import get_settings
                _catalog = MockCatalog(seed=get_settings().catalog_seed)
    return _catalog


def clear_catalog() -> None:
    """Drop the cached catalog. Useful for testing."""
    global _catalog
    _catalog = None
