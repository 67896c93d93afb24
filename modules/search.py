"""Filters for the saved-quote list and the catalog list."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, List, Optional

from models.catalog import CatalogItem, Product
from models.money import format_money, to_money
from models.quote import SavedQuote


def filter_quotes(
    quotes: Iterable[SavedQuote],
    name: str = "",
    date_text: str = "",
    value: str = "",
) -> List[SavedQuote]:
    """
    Filter saved quotes and sort them newest first.

    Args:
        quotes: Saved quotes
        name: Case-insensitive substring of the client name
        date_text: Substring of the creation date as YYYY-MM-DD or DD/MM/YYYY
        value: Substring of the final total formatted with two decimals

    Returns:
        Matching quotes, newest first
    """
    name = (name or "").strip().lower()
    date_text = (date_text or "").strip()
    value = (value or "").strip()

    matches = []
    for quote in quotes:
        if name and name not in quote.client.name.lower():
            continue
        if date_text:
            day = quote.created_at.date()
            if date_text not in day.isoformat() and date_text not in day.strftime("%d/%m/%Y"):
                continue
        if value and value not in format_money(quote.totals.final_total):
            continue
        matches.append(quote)

    return sorted(matches, key=lambda q: q.created_at, reverse=True)


def _in_range(amount: Decimal, low: Optional[str], high: Optional[str]) -> bool:
    # Blank bounds are open; to_money() turns junk into 0, so test emptiness first
    if low not in (None, "") and amount < to_money(low):
        return False
    if high not in (None, "") and amount > to_money(high):
        return False
    return True


def filter_catalog(
    items: Iterable[CatalogItem],
    search: str = "",
    min_cost: Optional[str] = None,
    max_cost: Optional[str] = None,
    min_sell: Optional[str] = None,
    max_sell: Optional[str] = None,
) -> List[CatalogItem]:
    """
    Filter catalog items by text and price ranges.

    search matches name, code or sector (case-insensitive). Cost bounds only
    apply to products; services have no cost price and are excluded when a
    cost bound is set.
    """
    search = (search or "").strip().lower()
    cost_bounded = min_cost not in (None, "") or max_cost not in (None, "")

    results = []
    for item in items:
        if search:
            haystack = [item.name.lower(), item.code.lower(), (item.sector or "").lower()]
            if not any(search in text for text in haystack):
                continue
        if cost_bounded:
            if not isinstance(item, Product) or not _in_range(item.cost_price, min_cost, max_cost):
                continue
        if not _in_range(item.sell_price, min_sell, max_sell):
            continue
        results.append(item)
    return results
