"""Money / rounding helpers.

Centralized so tax summaries, exports and API responses use identical
rounding and display semantics.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP


def round2(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_currency(amount: float, country: str | None = None) -> str:
    """Render an amount the way reports print it ($1,234.56; CLP has no cents)."""
    if country == "CL":
        whole = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return "$" + f"{whole:,.0f}".replace(",", ".")
    return f"${round2(amount):,.2f}"


def format_rate(rate: float) -> str:
    return f"{rate * 100:.0f}%"
