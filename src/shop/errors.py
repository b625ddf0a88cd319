"""
Domain exceptions for the swipe shop.

Routes translate these into HTTP responses; nothing here is fatal to the
process and every failure is recoverable by a user-initiated retry.
"""

from typing import Optional


class ShopError(Exception):
    """Base class for all swipe shop errors."""
    pass


# =============================================================================
# Round
# =============================================================================

class RoundError(ShopError):
    """Raised when a round operation cannot be applied."""
    pass


class InvalidTransition(RoundError):
    """The requested operation is not allowed from the current stage."""

    def __init__(self, operation: str, stage: str):
        self.operation = operation
        self.stage = stage
        super().__init__(f"cannot {operation} while in stage '{stage}'")


class CooldownActive(RoundError):
    """A swipe arrived before the previous action's cooldown elapsed."""

    def __init__(self, retry_after: float):
        self.retry_after = max(0.0, retry_after)
        super().__init__(f"swipe cooldown active, retry in {self.retry_after:.2f}s")


class StaleProduct(RoundError):
    """The swiped product is no longer the one being presented."""

    def __init__(self, product_id: str, current_id: Optional[str]):
        self.product_id = product_id
        self.current_id = current_id
        super().__init__(f"product '{product_id}' is not the current card")


class UnknownTier(RoundError):

    def __init__(self, tier_id: str):
        self.tier_id = tier_id
        super().__init__(f"unknown tier '{tier_id}'")


class NoReplaysLeft(RoundError):
    pass


# =============================================================================
# Catalog / Settings
# =============================================================================

class CatalogUnavailable(ShopError):
    """The product pool could not be loaded."""
    pass


class InvalidSettings(ShopError):
    """A settings replacement failed validation; prior settings are kept."""
    pass


# =============================================================================
# Checkout
# =============================================================================

class CheckoutError(ShopError):
    """Base class for mock checkout failures."""
    pass


class PaymentDeclined(CheckoutError):
    pass


class EmptySelection(CheckoutError):
    pass


class UnknownVariant(CheckoutError):

    def __init__(self, variant_ids):
        self.variant_ids = list(variant_ids)
        super().__init__(f"unknown variant ids: {', '.join(self.variant_ids)}")
