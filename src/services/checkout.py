"""
Mock checkout.

Two flows, neither of which moves real money:
- Ticket payment: validates a mock card form before a round can start
- Cart checkout: turns the kept products into a demo redirect URL
"""

import uuid
from datetime import date
from typing import Iterable, List, Optional
from urllib.parse import urlencode

from config.constants import DECLINED_TEST_CARD
from core.logging import LoggerMixin
from services.catalog import MockCatalog
from shop.errors import EmptySelection, PaymentDeclined
from shop.models import PaymentForm, Product, Tier


class CheckoutService(LoggerMixin):
    """
    Usage:
        checkout = CheckoutService(catalog, base_url="https://checkout.example.com/demo")
        checkout.pay_ticket(tier, form)
        url = checkout.create_cart_url(["gid://shopify/ProductVariant/eyes-001"])
    """

    def __init__(self, catalog: MockCatalog, base_url: str):
        self._catalog = catalog
        self._base_url = base_url.rstrip("/")

    def pay_ticket(self, tier: Tier, form: PaymentForm, today: Optional[date] = None) -> str:
        """
        Charge the ticket fee against the mock gateway.

        Returns:
            A mock payment reference

        Raises:
            PaymentDeclined: Test decline card, or the card has expired
        """
        today = today or date.today()
        month, year = form.expiry_month_year
        if (year, month) < (today.year, today.month):
            raise PaymentDeclined("card expired")
        if form.card_number == DECLINED_TEST_CARD:
            self.logger.info("Mock payment declined", tier_id=tier.id)
            raise PaymentDeclined("card declined")

        reference = f"pay_{uuid.uuid4().hex[:16]}"
        self.logger.info(
            "Mock payment accepted",
            tier_id=tier.id,
            fee=tier.fee,
            card_last4=form.card_number[-4:],
            reference=reference,
        )
        return reference

    def create_cart_url(self, variant_ids: Iterable[str]) -> str:
        """
        Build a demo checkout URL for the selected line items.

        Raises:
            EmptySelection: No variant ids given
            UnknownVariant: Any id is not in the catalog
        """
        variant_ids = [v for v in variant_ids if v]
        if not variant_ids:
            raise EmptySelection("no products selected")

        products = self._catalog.find_variants(variant_ids)
        return self._build_url(products)

    def checkout_products(self, products: List[Product]) -> str:
        return self.create_cart_url(p.variant_id for p in products)

    def _build_url(self, products: List[Product]) -> str:
        total = round(sum(p.amount for p in products), 2)
        query = urlencode({
            "items": ",".join(p.id for p in products),
            "total": f"{total:.2f}",
            "ref": uuid.uuid4().hex[:12],
        })
        self.logger.info("Mock cart checkout created", items=len(products), total=total)
        return f"{self._base_url}/cart?{query}"


_checkout: Optional[CheckoutService] = None


def get_checkout_service() -> CheckoutService:
    """Get the checkout service singleton, bound to the catalog singleton."""
    global _checkout
    if _checkout is None:
        from config.settings import get_settings
        from services.catalog import get_catalog
        _checkout = CheckoutService(get_catalog(), base_url=get_settings().checkout_base_url)
    return _checkout


def clear_checkout_service() -> None:
    global _checkout
    _checkout = None
