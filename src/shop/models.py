"""
Pydantic models for the swipe shop.

Models cover:
- Shop settings (tiers and per-tier sector weighting)
- Mock catalog products
- API request/response schemas

JSON keys keep the camelCase names the front-end already speaks
(sectorsByTier, altText, currencyCode, variantIds, webUrl).
"""

import re
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.utils import parse_amount


# =============================================================================
# Enums
# =============================================================================

class RoundStage(str, Enum):
    """Stages of a single play session."""
    TICKET_SELECTION = "ticket-selection"
    CHECKOUT = "checkout"
    COUNTDOWN = "countdown"
    PLAYING = "playing"
    SUMMARY = "summary"
    ADDRESS = "address"


class SwipeAction(str, Enum):
    REJECT = "reject"
    KEEP = "keep"


class FinishReason(str, Enum):
    """Why a round reached the summary."""
    TIMEOUT = "timeout"      # Timer hit zero
    EXHAUSTED = "exhausted"  # No unshown products left
    MANUAL = "manual"        # User ended the round early
    ERROR = "error"          # Product pool could not be loaded


# =============================================================================
# Shop Settings
# =============================================================================

class Sector(BaseModel):
    """A product category with a relative display weight."""
    id: str = Field(..., min_length=1)
    label: str = ""
    weight: float = Field(default=0.0, description="Relative draw probability")
    handles: List[str] = Field(default_factory=list, description="Opaque catalog handles")


class Tier(BaseModel):
    """A priced session offering with a fixed play duration."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    label: str = ""
    fee: float = Field(..., ge=0, description="Ticket price (EUR)")
    secs: int = Field(..., ge=0, description="Round duration in seconds")
    spend_cap: Optional[float] = Field(
        default=None,
        alias="spendCap",
        ge=0,
        description="Budget for kept products; None means uncapped",
    )


class ShopSettings(BaseModel):
    """Tiers plus the sector list of each tier. Replaced wholesale on save."""
    model_config = ConfigDict(populate_by_name=True)

    tiers: List[Tier]
    sectors_by_tier: Dict[str, List[Sector]] = Field(..., alias="sectorsByTier")

    @model_validator(mode="after")
    def check_unique_tier_ids(self) -> "ShopSettings":
        seen = set()
        for tier in self.tiers:
            if tier.id in seen:
                raise ValueError(f"duplicate tier id: {tier.id}")
            seen.add(tier.id)
        return self

    def find_tier(self, tier_id: str) -> Optional[Tier]:
        for tier in self.tiers:
            if tier.id == tier_id:
                return tier
        return None

    def sectors_for(self, tier_id: str) -> List[Sector]:
        return list(self.sectors_by_tier.get(tier_id, []))


# =============================================================================
# Products
# =============================================================================

class ProductImage(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    url: str
    alt_text: Optional[str] = Field(default=None, alias="altText")


class Price(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    amount: str
    currency_code: str = Field(default="EUR", alias="currencyCode")


class ProductVariant(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    price: Price


class Product(BaseModel):
    """A mock catalog product. Immutable once generated."""
    model_config = ConfigDict(frozen=True)

    id: str
    sector: str
    title: str
    description: str = ""
    images: List[ProductImage] = Field(..., min_length=1)
    variants: List[ProductVariant] = Field(..., min_length=1)

    @property
    def variant_id(self) -> str:
        return self.variants[0].id

    @property
    def amount(self) -> float:
        """Price of the first variant, 0.0 when unparseable."""
        return parse_amount(self.variants[0].price.amount)


# =============================================================================
# Request Models
# =============================================================================

class CheckoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    variant_ids: List[str] = Field(default_factory=list, alias="variantIds")


class CheckoutResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    web_url: str = Field(..., alias="webUrl")


class StartSessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    client_id: str = Field(..., min_length=1, max_length=128, alias="clientId")


class SelectTierRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tier_id: str = Field(..., min_length=1, alias="tierId")


class SwipeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: SwipeAction
    product_id: Optional[str] = Field(
        default=None,
        alias="productId",
        description="Product the user swiped; rejected when it is no longer current",
    )


_EXPIRY_RE = re.compile(r"^(0[1-9]|1[0-2])/(\d{2})$")


class PaymentForm(BaseModel):
    """Mock card form submitted to buy a ticket."""
    model_config = ConfigDict(populate_by_name=True)

    holder: str = Field(..., min_length=1, max_length=100)
    card_number: str = Field(..., alias="cardNumber")
    expiry: str = Field(..., description="MM/YY")
    cvc: str = Field(..., pattern=r"^\d{3,4}$")

    @field_validator("card_number")
    @classmethod
    def check_card_number(cls, v: str) -> str:
        compact = v.replace(" ", "").replace("-", "")
        if not compact.isdigit() or not 12 <= len(compact) <= 19:
            raise ValueError("card number must contain 12 to 19 digits")
        return compact

    @field_validator("expiry")
    @classmethod
    def check_expiry_format(cls, v: str) -> str:
        v = v.strip()
        if not _EXPIRY_RE.match(v):
            raise ValueError("expiry must be formatted as MM/YY")
        return v

    @property
    def expiry_month_year(self) -> tuple:
        month, year = _EXPIRY_RE.match(self.expiry).groups()
        return int(month), 2000 + int(year)


class Address(BaseModel):
    """Shipping address captured after the summary."""
    model_config = ConfigDict(populate_by_name=True)

    full_name: str = Field(..., min_length=1, alias="fullName")
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    postal_code: str = Field(..., min_length=1, alias="postalCode")
    country: str = Field(default="IT", min_length=2, max_length=2)
