"""
Core Utility Functions.

Money parsing and formatting shared by the catalog, the round engine
and the checkout service.
"""

import math
from typing import Any


def parse_amount(value: Any) -> float:
    """
    Parse a price amount, returning 0.0 for anything that is not a finite number.

    Examples:
        >>> parse_amount("12.50")
        12.5
        >>> parse_amount("n/a")
        0.0
    """
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    return amount if math.isfinite(amount) else 0.0


def format_amount(value: float) -> str:
    """
    Format an amount with two decimals, Italian style.

    Examples:
        >>> format_amount(1234.5)
        '1.234,50'
        >>> format_amount(0)
        '0,00'
    """
    # 1,234.50 -> 1.234,50
    return f"{value:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")

