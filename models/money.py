"""
Money helpers shared by models and the calculator.

All amounts are Decimal. Stored data may hold floats, integers or strings
(older exports wrote plain numbers, some spreadsheets use a comma decimal
separator), so every value entering the system goes through to_money().
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

ZERO = Decimal("0")
CENT = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """
    Parse a monetary value into a Decimal.

    Accepts Decimal, int, float and strings using either "." or "," as the
    decimal separator. Anything unparseable (None, "", "abc", NaN, infinity)
    becomes zero.

    Args:
        value: Raw value from a form field or stored record

    Returns:
        Decimal amount (full precision, not rounded)
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        return Decimal(value)
    else:
        text = str(value).strip().replace(",", ".")
        if not text:
            return ZERO
        try:
            amount = Decimal(text)
        except InvalidOperation:
            return ZERO

    if not amount.is_finite():
        return ZERO
    return amount


def round_money(value: Decimal) -> Decimal:
    """Round to cents, half-up. Use for presentation only."""
    return to_money(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value: Decimal, currency: str = "") -> str:
    """Format an amount with two decimals, optionally prefixed by a currency symbol."""
    text = f"{round_money(value):.2f}"
    return f"{currency} {text}" if currency else text
