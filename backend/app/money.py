"""Fixed-point money helpers.

Amounts travel as ``Decimal`` with two places in the API and are stored as
integer cents in the database.
"""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Tuple

CENT = Decimal("0.01")


def to_cents(amount: Optional[Decimal]) -> int:
    if amount is None:
        return 0
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(cents: Optional[int]) -> Decimal:
    return (Decimal(int(cents or 0)) / 100).quantize(CENT)


def line_total_cents(quantity: int, unit_price_cents: int) -> int:
    return int(quantity) * int(unit_price_cents)


def offer_totals(lines: Iterable[Tuple[int, int]]) -> Tuple[list[int], int]:
    """Return the per-line totals and their sum for ``(quantity, unit_price_cents)`` pairs."""
    totals = [line_total_cents(q, u) for q, u in lines]
    return totals, sum(totals)


def format_money(amount: Decimal, currency: str) -> str:
    # 1234.5 -> "1,234.50 EUR"
    return f"{Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP):,.2f} {currency}"
