"""
Stock reconciliation for committed quotes.

Checks a quote's product quantities against stock on hand and works out the
stock levels after the quote is committed. Only Product lines are ever
considered; Service lines pass through untouched.

The reconciler never writes anything. validate() returns a StockDecision,
apply() and restore() return NEW stock mappings. The quote service persists
the new mapping together with the saved quote in a single store
transaction, so a quote is never saved with half its stock deducted.

Usage:
    reconciler = StockReconciler(StockOnEditPolicy.KEEP_DEDUCTED)
    levels = catalog_service.stock_levels()

    decision = reconciler.validate(draft.items, levels, allow_negative_stock=False)
    if decision.accepted:
        new_levels = reconciler.apply(draft.items, levels)
        # persist new_levels and the quote in one transaction

Note:
    apply() is not idempotent. Calling it twice for the same quote deducts
    twice; callers apply once per commit.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Dict, Iterable, List, Mapping

from models.quote import LineItem
from models.stock import Shortfall, StockDecision, StockOnEditPolicy
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)


def requested_quantities(items: Iterable[LineItem]) -> "OrderedDict[str, int]":
    """
    Total requested quantity per product id, in first-seen order.

    Service lines are skipped. A product appearing on several lines is summed.
    """
    totals: "OrderedDict[str, int]" = OrderedDict()
    for line in items:
        if not line.is_product:
            continue
        totals[line.item_id] = totals.get(line.item_id, 0) + line.quantity
    return totals


class StockReconciler:
    """
    Validates and applies stock deductions for quotes.

    Attributes:
        on_edit: Policy used by stock_after_edit()
    """

    def __init__(self, on_edit: StockOnEditPolicy = StockOnEditPolicy.KEEP_DEDUCTED):
        self.on_edit = on_edit

    def validate(
        self,
        items: Iterable[LineItem],
        stock_levels: Mapping[str, int],
        allow_negative_stock: bool,
    ) -> StockDecision:
        """
        Check product quantities against current stock.

        Args:
            items: Quote lines
            stock_levels: Current stock by product id (missing id = 0 available)
            allow_negative_stock: When True every quote is accepted

        Returns:
            Accepted, or Rejected with one Shortfall per offending product
        """
        items = list(items)
        if allow_negative_stock:
            return StockDecision.accept()

        names = {line.item_id: line.item.name for line in items}
        shortfalls: List[Shortfall] = []

        for product_id, requested in requested_quantities(items).items():
            available = stock_levels.get(product_id, 0)
            if requested > available:
                shortfalls.append(Shortfall(
                    product_id=product_id,
                    product_name=names.get(product_id, ""),
                    requested=requested,
                    available=available,
                ))

        if shortfalls:
            decision = StockDecision.reject(tuple(shortfalls))
            logger.info(f"Stock check rejected: {decision.reason}")
            return decision

        return StockDecision.accept()

    def apply(self, items: Iterable[LineItem], stock_levels: Mapping[str, int]) -> Dict[str, int]:
        """
        Deduct each product line's quantity from stock.

        Args:
            items: Quote lines
            stock_levels: Current stock by product id (not modified)

        Returns:
            New stock mapping
        """
        return self._adjust(items, stock_levels, sign=-1)

    def restore(self, items: Iterable[LineItem], stock_levels: Mapping[str, int]) -> Dict[str, int]:
        """Give each product line's quantity back to stock. Inverse of apply()."""
        return self._adjust(items, stock_levels, sign=1)

    def stock_after_edit(self, items: Iterable[LineItem], stock_levels: Mapping[str, int]) -> Dict[str, int]:
        """
        Stock levels after a saved quote is reopened for editing.

        KEEP_DEDUCTED returns the levels unchanged; RESTORE gives the quote's
        product quantities back.
        """
        if self.on_edit == StockOnEditPolicy.RESTORE:
            return self.restore(items, stock_levels)
        return dict(stock_levels)

    def _adjust(self, items: Iterable[LineItem], stock_levels: Mapping[str, int], sign: int) -> Dict[str, int]:
        updated = dict(stock_levels)
        for product_id, quantity in requested_quantities(items).items():
            if product_id not in updated:
                logger.warning(f"Product {product_id} is no longer in the catalog; stock not adjusted")
                continue
            updated[product_id] = updated[product_id] + sign * quantity
        return updated
