"""
Stock reconciliation models.

A StockDecision is the outcome of checking a candidate quote against the
stock on hand. It is returned, not raised: callers show the shortfalls and
let the user correct the quantities.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, Tuple

from core.exceptions import InsufficientStockError


class StockOnEditPolicy(Enum):
    """
    What happens to deducted stock when a saved quote is reopened for editing.

    KEEP_DEDUCTED:
        Stock stays deducted. Re-saving the edited quote deducts again, so an
        unchanged quote edited once is counted twice. This is how the
        application has always behaved.

    RESTORE:
        The saved quote's product quantities go back into stock when it is
        reopened, so the re-save leaves stock as if the quote was saved once.
    """

    KEEP_DEDUCTED = "keep"
    RESTORE = "restore"

    @classmethod
    def from_value(cls, value: str) -> "StockOnEditPolicy":
        """Parse a config value, falling back to KEEP_DEDUCTED."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.KEEP_DEDUCTED


@dataclass(frozen=True)
class Shortfall:
    """One product whose requested quantity exceeds what is available."""

    product_id: str
    product_name: str
    requested: int
    available: int

    @property
    def missing(self) -> int:
        return self.requested - self.available

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productId": self.product_id,
            "productName": self.product_name,
            "requested": self.requested,
            "available": self.available,
        }


@dataclass(frozen=True)
class StockDecision:
    """
    Accepted, or Rejected with a reason and one shortfall per offending product.

    Usage:
        decision = reconciler.validate(items, catalog.stock_levels(), allow_negative)
        if not decision.accepted:
            for s in decision.shortfalls:
                print(f"{s.product_name}: need {s.requested}, have {s.available}")
    """

    accepted: bool
    reason: str = ""
    shortfalls: Tuple[Shortfall, ...] = ()

    @classmethod
    def accept(cls) -> "StockDecision":
        return cls(accepted=True)

    @classmethod
    def reject(cls, shortfalls: Tuple[Shortfall, ...], reason: str = "") -> "StockDecision":
        if not reason:
            parts = [
                f"{s.product_name or s.product_id} (requested {s.requested}, available {s.available})"
                for s in shortfalls
            ]
            reason = "Insufficient stock: " + "; ".join(parts)
        return cls(accepted=False, reason=reason, shortfalls=tuple(shortfalls))

    @property
    def rejected(self) -> bool:
        return not self.accepted

    def raise_if_rejected(self) -> None:
        """Raise InsufficientStockError when this decision is a rejection."""
        if not self.accepted:
            raise InsufficientStockError(list(self.shortfalls), self.reason)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accepted": self.accepted,
            "reason": self.reason,
            "shortfalls": [s.to_dict() for s in self.shortfalls],
        }
