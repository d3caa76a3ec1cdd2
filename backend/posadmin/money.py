# Overview: Exact decimal helpers for currency amounts.

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """
    Normalize a price/amount to a 2-place Decimal.

    Floats are routed through str() so 0.1 becomes Decimal("0.10"),
    not its binary expansion.
    """
    if value is None:
        return Decimal("0.00")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, float):
        amount = Decimal(str(value))
    else:
        amount = Decimal(value)
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(unit_price, quantity: int) -> Decimal:
    return to_money(to_money(unit_price) * quantity)


def money_str(value) -> Optional[str]:
    """JSON representation: "350.00"."""
    if value is None:
        return None
    return format(to_money(value), "f")
