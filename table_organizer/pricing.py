"""
Money helpers.

All amounts are integer cents. Tips are whole percentages.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional


# Largest amount a SQLite INTEGER column can hold.
MAX_STORABLE_CENTS = 2 ** 63 - 1


def print_price(cents: int, symbol: str = "$") -> str:
    """
    Render cents as a currency string.
    
    >>> print_price(1234)
    '$12.34'
    >>> print_price(5)
    '$0.05'
    """
    sign = "-" if cents < 0 else ""
    units, rest = divmod(abs(cents), 100)
    return f"{sign}{symbol}{units}.{rest:02d}"


def apply_tip(cents: int, tip: int) -> int:
    """Add a tip percentage, rounding down to the cent."""
    return cents * (100 + tip) // 100


def clamp_tip(tip: int) -> int:
    return max(tip, 0)


def split_evenly(total: int, parts: int) -> tuple[int, int]:
    """
    Split total cents into equal integer shares.
    
    Returns (share, remainder). Zero parts means nobody pays:
    the share is 0 and the whole total is the remainder.
    """
    if parts <= 0:
        return 0, total
    return divmod(total, parts)


def parse_price(text: str) -> Optional[int]:
    """
    Parse a decimal amount ("12.34", "12,5", "3") into cents.
    
    Rounds half up to the nearest cent. Returns None if the text is
    not a finite number.
    """
    try:
        amount = Decimal(text.strip().replace(",", "."))
        if not amount.is_finite():
            return None
        # quantize raises InvalidOperation past the context precision
        cents = (amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None
    return int(cents)
