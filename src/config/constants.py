"""
Application constants and algorithm configuration.

These are values that don't change based on environment but may need
to be tuned or referenced across the codebase.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


# =============================================================================
# Round Configuration
# =============================================================================

@dataclass(frozen=True)
class RoundConfig:
    """Timing and rule knobs for a single swipe round."""

    # Lead-in ticks at 1 Hz before the pool is loaded
    COUNTDOWN_SECONDS: int = 3

    # Per-action input pause
    REJECT_COOLDOWN_SECONDS: float = 0.6
    KEEP_COOLDOWN_SECONDS: float = 1.2

    # Sector draws before a uniform fallback over all remaining products
    MAX_SECTOR_DRAWS: int = 50

    # Replays allowed from the summary screen
    MAX_REPLAYS: int = 2


DEFAULT_ROUND_CONFIG = RoundConfig()


# =============================================================================
# Mock Catalog
# =============================================================================

CATALOG_SEED = 2024
CURRENCY_CODE = "EUR"

# Generation order matters: ids carry a global running index
SECTOR_ORDER: Tuple[str, ...] = ("eyes", "lips", "skin")

SECTOR_COUNTS: Dict[str, int] = {
    "eyes": 38,
    "lips": 32,
    "skin": 30,
}

IMAGE_URL_TEMPLATE = "https://picsum.photos/seed/{product_id}/800/600"
VARIANT_ID_TEMPLATE = "gid://shopify/ProductVariant/{product_id}"

# Price range for generated products (EUR)
MIN_PRICE = 10.0
PRICE_SPAN = 30.0


@dataclass(frozen=True)
class SectorVocabulary:
    """Word lists used to compose product titles and descriptions."""

    bases: List[str] = field(default_factory=list)
    adjectives: List[str] = field(default_factory=list)
    benefits: List[str] = field(default_factory=list)


SECTOR_DETAILS: Dict[str, SectorVocabulary] = {
    "eyes": SectorVocabulary(
        bases=[
            "Mascara",
            "Eyeliner",
            "Palette Ombretti",
            "Primer Occhi",
            "Gel Sopracciglia",
            "Matita Sopracciglia",
            "Illuminante Occhi",
        ],
        adjectives=[
            "Mega Volume",
            "Allungante",
            "Ultra Black",
            "Starlight",
            "Feather",
            "Catwalk",
            "Velvet",
            "Galaxy",
        ],
        benefits=[
            "uno sguardo magnetico",
            "ciglia a ventaglio",
            "tratti definiti",
            "un finish a lunga tenuta",
            "uno smokey eye impeccabile",
            "un look naturale",
            "un tratto preciso",
        ],
    ),
    "lips": SectorVocabulary(
        bases=[
            "Rossetto",
            "Lip Gloss",
            "Lip Balm",
            "Tinta Labbra",
            "Matita Labbra",
            "Olio Labbra",
            "Plumper",
        ],
        adjectives=[
            "Satin",
            "Matte",
            "Brillante",
            "Velvet",
            "Cushion",
            "Luminous",
            "Sheer",
            "Crystal",
        ],
        benefits=[
            "labbra idratate",
            "un colore intenso",
            "definizione perfetta",
            "una brillantezza specchiata",
            "un volume immediato",
            "un comfort quotidiano",
            "un finish elegante",
        ],
    ),
    "skin": SectorVocabulary(
        bases=[
            "Fondotinta",
            "Primer Viso",
            "Correttore",
            "Illuminante",
            "Blush",
            "Bronzer",
            "Setting Spray",
            "Cipria",
        ],
        adjectives=[
            "Glow",
            "Soft Matte",
            "Perfecting",
            "Radiant",
            "Airbrush",
            "Lightweight",
            "Filter",
            "Serum",
        ],
        benefits=[
            "una base uniforme",
            "un incarnato luminoso",
            "pelle levigata",
            "una tenuta estrema",
            "un finish naturale",
            "un colorito sano",
            "un effetto seconda pelle",
        ],
    ),
}


# =============================================================================
# Default Shop Settings
# =============================================================================

DEFAULT_SHOP_SETTINGS: Dict[str, Any] = {
    "tiers": [
        {"id": "t30", "label": "30€", "fee": 30, "secs": 90},
        {"id": "t50", "label": "50€", "fee": 50, "secs": 120},
    ],
    "sectorsByTier": {
        "t30": [
            {"id": "eyes", "label": "Occhi", "weight": 40, "handles": ["occhi"]},
            {"id": "lips", "label": "Labbra", "weight": 35, "handles": ["labbra"]},
            {"id": "skin", "label": "Viso", "weight": 25, "handles": ["viso"]},
        ],
        "t50": [
            {"id": "eyes", "label": "Occhi", "weight": 30, "handles": ["occhi"]},
            {"id": "lips", "label": "Labbra", "weight": 30, "handles": ["labbra"]},
            {"id": "skin", "label": "Viso", "weight": 40, "handles": ["viso"]},
        ],
    },
}


# =============================================================================
# Mock Payment
# =============================================================================

# Card number the mock gateway always declines
DECLINED_TEST_CARD = "4000000000000002"
