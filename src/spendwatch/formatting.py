"""Money formatting for cards, charts and the CLI."""

from __future__ import annotations

INDIAN_GROUPING_SYMBOLS = {"₹", "Rs", "INR"}


def _group_indian(digits: str) -> str:
    """Group an integer string as 12,34,567 (last three, then pairs)."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_money(value: float, symbol: str = "₹", *, decimals: int = 0) -> str:
    """Render ``value`` with the currency symbol, grouping and sign.

    Rupee amounts use lakh/crore grouping; any other symbol uses thousands.
    """
    sign = "-" if value < 0 else ""
    text = f"{abs(value):.{decimals}f}"
    whole, _, fraction = text.partition(".")
    if symbol in INDIAN_GROUPING_SYMBOLS:
        whole = _group_indian(whole)
    else:
        whole = f"{int(whole):,}"
    body = f"{whole}.{fraction}" if fraction else whole
    return f"{sign}{symbol}{body}"
