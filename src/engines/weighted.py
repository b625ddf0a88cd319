"""
Weighted sector sampling.

Decides which sector the next card comes from: each sector is drawn with
probability weight / total, then a product is picked uniformly within it.

Zero total weight falls back to the first sector rather than a uniform
pick. Weights that are negative or non-finite count as zero, and a
zero-weight sector is never drawn while some other weight is positive.
"""

import math
import random
from typing import Dict, List, Optional, Sequence

from shop.models import Product, Sector


NO_SECTOR = ""


def normalize_weight(weight: float) -> float:
    """Clamp a configured weight to a usable, non-negative finite value."""
    try:
        value = float(weight)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value) or value <= 0:
        return 0.0
    return value


def draw_sector_id(
    sectors: Sequence[Sector],
    rng: Optional[random.Random] = None,
) -> str:
    """
    Draw one sector id proportionally to its weight.

    Args:
        sectors: Ordered sector list
        rng: Random source (module-level random when None)

    Returns:
        The drawn sector id, NO_SECTOR for an empty list, or the first
        id when the total weight is not positive.
    """
    if not sectors:
        return NO_SECTOR

    rng = rng or random
    weights = [normalize_weight(sector.weight) for sector in sectors]
    total = sum(weights)
    if total <= 0:
        return sectors[0].id

    remaining = rng.random() * total
    last_drawable = sectors[0].id
    for sector, weight in zip(sectors, weights):
        if weight == 0:
            continue
        last_drawable = sector.id
        remaining -= weight
        if remaining <= 0:
            return sector.id

    # Float drift can leave a sliver of remainder
    return last_drawable


def group_by_sector(products: Sequence[Product]) -> Dict[str, List[Product]]:
    grouped: Dict[str, List[Product]] = {}
    for product in products:
        grouped.setdefault(product.sector, []).append(product)
    return grouped


def pick_next_product(
    remaining: Sequence[Product],
    sectors: Sequence[Sector],
    rng: Optional[random.Random] = None,
    max_attempts: int = 50,
) -> Optional[Product]:
    """
    Category-then-item selection with bounded retry.

    Draws a sector, then a product uniformly among that sector's unshown
    products. A sector with nothing left is redrawn up to max_attempts
    times before falling back to a uniform pick over everything remaining.

    Args:
        remaining: Products not yet shown this round
        sectors: Sector weighting for the active tier
        rng: Random source
        max_attempts: Sector draws before the uniform fallback

    Returns:
        The next product, or None when nothing remains
    """
    if not remaining:
        return None

    rng = rng or random
    if not sectors:
        return rng.choice(remaining)

    by_sector = group_by_sector(remaining)
    for _ in range(max_attempts):
        candidates = by_sector.get(draw_sector_id(sectors, rng))
        if candidates:
            return rng.choice(candidates)

    return rng.choice(remaining)
