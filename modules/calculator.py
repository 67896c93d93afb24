"""
Quote totals calculator.

Pure functions: no state, no I/O, safe to call on every keystroke.

Formula:
    products_subtotal = sum(sell_price * quantity) over product lines
    services_subtotal = sum(sell_price * quantity) over service lines
    subtotal          = products_subtotal + services_subtotal
    discount_amount   = fixed:   min(amount, subtotal)
                        percent: subtotal * amount / 100
    final_total       = subtotal - discount_amount

All arithmetic is Decimal at full precision. Round with round_money() only
when presenting a value.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Tuple

from models.money import ZERO, round_money, to_money, format_money
from models.quote import DiscountKind, DiscountSpec, LineItem, QuoteTotals

HUNDRED = Decimal("100")

__all__ = [
    "compute_subtotals",
    "compute_discount",
    "compute_final_total",
    "compute_totals",
    "to_money",
    "round_money",
    "format_money",
]


def compute_subtotals(items: Iterable[LineItem]) -> Tuple[Decimal, Decimal]:
    """
    Sum line totals, split by item kind.

    Args:
        items: Quote lines

    Returns:
        (products_subtotal, services_subtotal)
    """
    products_subtotal = ZERO
    services_subtotal = ZERO
    for line in items:
        if line.is_product:
            products_subtotal += line.line_total
        else:
            services_subtotal += line.line_total
    return products_subtotal, services_subtotal


def compute_discount(subtotal: Decimal, spec: DiscountSpec, clamp_percent: bool = True) -> Decimal:
    """
    Work out the discount amount for a subtotal.

    Fixed discounts are capped at the subtotal. Percent discounts are capped
    at 100% when clamp_percent is set; without it, a percentage above 100
    gives a discount larger than the subtotal (negative final total).

    Args:
        subtotal: Quote subtotal
        spec: Discount kind and amount (amount is never negative)
        clamp_percent: Cap percentages to the 0-100 range

    Returns:
        Discount amount
    """
    amount = spec.amount if spec.amount > ZERO else ZERO

    if spec.kind == DiscountKind.PERCENT:
        if clamp_percent and amount > HUNDRED:
            amount = HUNDRED
        return subtotal * amount / HUNDRED

    return min(amount, subtotal)


def compute_final_total(subtotal: Decimal, discount_amount: Decimal) -> Decimal:
    return subtotal - discount_amount


def compute_totals(
    items: Iterable[LineItem],
    spec: DiscountSpec,
    show_discount: bool = True,
    clamp_percent: bool = True,
) -> QuoteTotals:
    """
    Compute every derived total for a quote.

    Args:
        items: Quote lines
        spec: Discount to apply
        show_discount: When False the quote carries no discount
        clamp_percent: Cap percent discounts at 100%

    Returns:
        QuoteTotals
    """
    products_subtotal, services_subtotal = compute_subtotals(items)
    subtotal = products_subtotal + services_subtotal
    discount_amount = compute_discount(subtotal, spec, clamp_percent) if show_discount else ZERO

    return QuoteTotals(
        products_subtotal=products_subtotal,
        services_subtotal=services_subtotal,
        subtotal=subtotal,
        discount_amount=discount_amount,
        final_total=compute_final_total(subtotal, discount_amount),
    )
