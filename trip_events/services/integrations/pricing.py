"""
Price extraction shared by all provider adapters.

Upstreams report prices as min/max ranges, lowest/average stats, or
coarse price levels. Each adapter reduces its structure to the three
optional amounts below and lets extract_price() pick the display string.
"""

import math
from typing import Any, Optional

from trip_events.models.events import PRICE_CHECK_WEBSITE

CURRENCY_SYMBOL = "$"


def _as_amount(value: Any) -> Optional[float]:
    """Coerce an upstream amount to a positive float, or None if unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    # Zero and negative amounts are placeholders upstream, not real prices
    if not math.isfinite(amount) or amount <= 0:
        return None
    return amount


def format_amount(amount: float) -> str:
    """Format a dollar amount: whole numbers without decimals, else two places."""
    if float(amount).is_integer():
        return f"{CURRENCY_SYMBOL}{int(amount)}"
    return f"{CURRENCY_SYMBOL}{amount:.2f}"


def extract_price(
    minimum: Any = None,
    maximum: Any = None,
    average: Any = None,
) -> str:
    """
    Build a display price from optional amounts.

    Precedence:
        min and max → "$20-$80"
        min only    → "From $15"
        avg only    → "Avg $30"
        otherwise   → "Check website"

    Never raises on missing or malformed data.
    """
    low = _as_amount(minimum)
    high = _as_amount(maximum)
    avg = _as_amount(average)

    if low is not None and high is not None:
        return f"{format_amount(low)}-{format_amount(high)}"
    if low is not None:
        return f"From {format_amount(low)}"
    if avg is not None:
        return f"Avg {format_amount(avg)}"
    return PRICE_CHECK_WEBSITE
