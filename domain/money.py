"""
Domain: Naira amount formatting (pure).
"""

from __future__ import annotations

from decimal import ROUND_HALF_EVEN, Decimal, localcontext

NAIRA_SIGN = "₦"

_THREE_PLACES = Decimal("0.001")


def group_thousands(amount: Decimal) -> str:
    """
    Format with thousands separators and at most three fraction digits.

    Trailing fractional zeros are dropped: 500000 -> "500,000",
    1250.50 -> "1,250.5". Amounts of any magnitude are formatted in full.
    """

    with localcontext() as ctx:
        # Integer digits plus three fraction digits must fit the precision
        ctx.prec = max(28, amount.adjusted() + 4)
        quantized = amount.quantize(_THREE_PLACES, rounding=ROUND_HALF_EVEN)
        text = f"{quantized:,.3f}"
    return text.rstrip("0").rstrip(".")


def format_naira(amount: Decimal) -> str:
    return f"{NAIRA_SIGN}{group_thousands(amount)}"


def parse_naira(text: str) -> Decimal:
    """Inverse of format_naira for values it produced."""

    return Decimal(text.strip().removeprefix(NAIRA_SIGN).replace(",", ""))
