"""Field parsers shared by the entry forms."""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation

from ..errors import ValidationError


def require_text(value: str | None, *, field: str, label: str) -> str:
    """Return the stripped value or raise when it is blank."""
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{label} is required", field=field)
    return text


def parse_positive_amount(value: str | None, *, field: str = "amount", label: str = "Amount") -> Decimal:
    """Parse a positive, finite decimal from user text.

    Amounts are stored as floats, so the value must also survive that
    conversion: ``1e400`` overflows to inf and ``1e-400`` underflows to 0.
    """
    text = require_text(value, field=field, label=label)
    try:
        amount = Decimal(text.replace(",", ""))
    except InvalidOperation:
        raise ValidationError(f"{label} must be a number", field=field) from None
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{label} must be greater than 0", field=field)
    stored = float(amount)
    if not math.isfinite(stored):
        raise ValidationError(f"{label} is too large", field=field)
    if stored <= 0:
        raise ValidationError(f"{label} must be greater than 0", field=field)
    return amount
