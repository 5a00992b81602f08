# orders/services/money.py

"""
MONEY HELPERS

Rules:
- All amounts are Decimal, 2dp, ROUND_HALF_UP
- Binary floats are converted through str() so no float error leaks in
- Equality between stored and derived totals uses POS_MONEY_EPSILON
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable

from django.conf import settings

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """
    Normalize to a 2dp Decimal.

    Raises ValueError for anything that is not a finite number.
    """
    if value is None or value == "":
        return ZERO

    if isinstance(value, bool):
        raise ValueError("money value must be numeric")

    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"money value must be numeric (got {value!r})") from exc

    if not amount.is_finite():
        raise ValueError(f"money value must be finite (got {value!r})")

    return amount.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def line_total(unit_price, quantity: int) -> Decimal:
    return to_money(Decimal(unit_price) * Decimal(int(quantity)))


def sum_money(values: Iterable) -> Decimal:
    total = ZERO
    for v in values:
        total += to_money(v)
    return to_money(total)


def money_epsilon() -> Decimal:
    return to_money(getattr(settings, "POS_MONEY_EPSILON", "0.01"))


def amounts_differ(a, b) -> bool:
    """
    True when |a - b| exceeds the configured tolerance.
    """
    return abs(to_money(a) - to_money(b)) > money_epsilon()


def to_money_exact(value) -> Decimal:
    """
    Like to_money, but refuses values that would need rounding (e.g. "19999.995").

    Tendered amounts are compared and stored as given; they are never rounded.
    """
    if value is None or value == "":
        raise ValueError("money value is required")

    amount = to_money(value)
    if Decimal(str(value)) != amount:
        raise ValueError(f"money value has more than 2 decimal places (got {value!r})")
    return amount


def order_totals(lines, tax=ZERO) -> tuple[Decimal, Decimal]:
    """
    (subtotal, total) re-derived from (unit_price, quantity) pairs.
    """
    subtotal = sum_money(line_total(price, qty) for price, qty in lines)
    return subtotal, subtotal + to_money(tax)
