"""
Swipe round engines.

- draw_sector_id / pick_next_product: weighted sector sampling
- RoundEngine: per-tab round state machine
"""
from .weighted import NO_SECTOR, draw_sector_id, pick_next_product
from .round_engine import RoundEngine, RoundState, SwipeOutcome

__all__ = [
    'NO_SECTOR',
    'draw_sector_id',
    'pick_next_product',
    'RoundEngine',
    'RoundState',
    'SwipeOutcome',
]
