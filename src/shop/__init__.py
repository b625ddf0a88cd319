"""
Swipe shop domain models.
"""

from shop.models import (
    Address,
    FinishReason,
    PaymentForm,
    Product,
    RoundStage,
    Sector,
    ShopSettings,
    SwipeAction,
    Tier,
)

__all__ = [
    "Address",
    "FinishReason",
    "PaymentForm",
    "Product",
    "RoundStage",
    "Sector",
    "ShopSettings",
    "SwipeAction",
    "Tier",
]
