"""
Quote data models.

A quote moves through these shapes:
    QuoteDraft (mutable, autosaved) -> commit -> SavedQuote (frozen record)

Line items and totals are frozen. Totals are always derived by the
calculator from line items and a DiscountSpec; nothing sets them by hand.

Draft Lifecycle:
    DRAFTING -> VALIDATING -> DRAFTING   (stock rejected, user corrects)
    DRAFTING -> VALIDATING -> COMMITTED  (stock accepted, quote saved)

COMMITTED is terminal. Editing a saved quote creates a new draft.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum
from typing import Dict, Any, List, Optional, Tuple

from core.exceptions import DraftCommittedError, InvalidQuantityError
from models.catalog import CatalogItem, Product, catalog_item_from_dict
from models.client import Client
from models.money import ZERO, round_money, to_money
from models.stock import StockDecision


# =============================================================================
# LINE ITEMS AND DISCOUNTS
# =============================================================================

@dataclass(frozen=True)
class LineItem:
    """
    A (catalog item, quantity) pair within a quote.

    The catalog item is copied into the line, so a saved quote keeps the
    price it was made with even if the catalog changes later.

    Raises:
        InvalidQuantityError: If quantity is not an integer >= 1
    """

    item: CatalogItem
    quantity: int

    def __post_init__(self):
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity < 1:
            raise InvalidQuantityError(self.quantity)

    @property
    def item_id(self) -> str:
        return self.item.id

    @property
    def is_product(self) -> bool:
        return isinstance(self.item, Product)

    @property
    def line_total(self) -> Decimal:
        """Unit sell price times quantity."""
        return self.item.sell_price * self.quantity

    def with_quantity(self, quantity: int) -> "LineItem":
        return LineItem(item=self.item, quantity=quantity)

    def to_dict(self) -> Dict[str, Any]:
        return {"product": self.item.to_dict(), "quantity": self.quantity}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LineItem":
        return cls(
            item=catalog_item_from_dict(data.get("product", {})),
            quantity=parse_quantity(data.get("quantity")),
        )


def parse_quantity(value: Any) -> int:
    """
    Parse a quantity from form or JSON input.

    Whole-number floats and numeric strings are accepted ("3", 3.0).

    Raises:
        InvalidQuantityError: If the value is not a whole number >= 1
    """
    if isinstance(value, bool):
        raise InvalidQuantityError(value)
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidQuantityError(value)
    if not math.isfinite(number) or number < 1 or number != int(number):
        raise InvalidQuantityError(value)
    return int(number)


def coerce_quantity(value: Any) -> int:
    """Quantity edits never go below 1; junk input becomes 1."""
    try:
        quantity = int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return 1
    return max(1, quantity)


class DiscountKind(Enum):
    FIXED = "fixed"
    PERCENT = "percent"

    @classmethod
    def from_value(cls, value: Any) -> "DiscountKind":
        """Parse a stored value; anything unknown is a fixed discount."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.FIXED


@dataclass(frozen=True)
class DiscountSpec:
    """
    How much to take off the subtotal.

    amount is a currency value for FIXED and a percentage for PERCENT.
    Negative amounts are normalized to zero; use from_raw() for user input
    so non-numeric text also becomes zero instead of raising.
    """

    kind: DiscountKind = DiscountKind.FIXED
    amount: Decimal = ZERO

    def __post_init__(self):
        amount = to_money(self.amount)
        if amount < ZERO:
            amount = ZERO
        object.__setattr__(self, "amount", amount)

    @classmethod
    def from_raw(cls, kind: Any, amount: Any) -> "DiscountSpec":
        """Build from untrusted input (form text, stored draft)."""
        return cls(kind=DiscountKind.from_value(kind), amount=to_money(amount))

    @classmethod
    def none(cls) -> "DiscountSpec":
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return {"discount": str(self.amount), "discountType": self.kind.value}


@dataclass(frozen=True)
class QuoteTotals:
    """
    Derived totals for a quote.

    Values keep full Decimal precision; to_display_dict() rounds to cents.
    """

    products_subtotal: Decimal = ZERO
    services_subtotal: Decimal = ZERO
    subtotal: Decimal = ZERO
    discount_amount: Decimal = ZERO
    final_total: Decimal = ZERO

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productsSubtotal": str(self.products_subtotal),
            "servicesSubtotal": str(self.services_subtotal),
            "subtotal": str(self.subtotal),
            "discountAmount": str(self.discount_amount),
            "finalTotal": str(self.final_total),
        }

    def to_display_dict(self) -> Dict[str, Any]:
        """Totals rounded to two decimals for display."""
        return {key: f"{round_money(to_money(value)):.2f}" for key, value in self.to_dict().items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuoteTotals":
        return cls(
            products_subtotal=to_money(data.get("productsSubtotal")),
            services_subtotal=to_money(data.get("servicesSubtotal")),
            subtotal=to_money(data.get("subtotal")),
            discount_amount=to_money(data.get("discountAmount")),
            final_total=to_money(data.get("finalTotal")),
        )


# =============================================================================
# DRAFT
# =============================================================================

class DraftState(Enum):
    DRAFTING = "drafting"
    VALIDATING = "validating"
    COMMITTED = "committed"


def _parse_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except (TypeError, ValueError):
        return date.today()


@dataclass
class QuoteDraft:
    """
    An in-progress quote.

    Mutable so the quote service can edit it in place; every mutator refuses
    to touch a COMMITTED draft.

    Stored under the "quoteDraft" key with the field names older data files use:
        {"selectedClientId", "quoteItems", "notes", "discount",
         "discountType", "quoteDate"}
    """

    client_id: str = ""
    items: List[LineItem] = field(default_factory=list)
    notes: str = ""
    discount: DiscountSpec = field(default_factory=DiscountSpec)
    quote_date: date = field(default_factory=date.today)
    state: DraftState = DraftState.DRAFTING
    saved_quote_id: Optional[str] = None
    """Id of the SavedQuote once committed."""

    @property
    def is_committed(self) -> bool:
        return self.state == DraftState.COMMITTED

    @property
    def is_empty(self) -> bool:
        return not self.items and not self.client_id

    def ensure_editable(self) -> None:
        if self.is_committed:
            raise DraftCommittedError(self.saved_quote_id)

    def find_line(self, item_id: str) -> Optional[LineItem]:
        for line in self.items:
            if line.item_id == item_id:
                return line
        return None

    def put_line(self, line: LineItem) -> None:
        """Replace the line for the same item, or append a new one."""
        self.ensure_editable()
        for index, existing in enumerate(self.items):
            if existing.item_id == line.item_id:
                self.items[index] = line
                return
        self.items.append(line)

    def remove_line(self, item_id: str) -> bool:
        self.ensure_editable()
        before = len(self.items)
        self.items = [line for line in self.items if line.item_id != item_id]
        return len(self.items) != before

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "selectedClientId": self.client_id,
            "quoteItems": [line.to_dict() for line in self.items],
            "notes": self.notes,
            "quoteDate": self.quote_date.isoformat(),
            "state": self.state.value,
            "savedQuoteId": self.saved_quote_id,
        }
        data.update(self.discount.to_dict())
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuoteDraft":
        """
        Restore a draft from storage.

        Stored drafts are always reopened as DRAFTING; a draft is removed
        from storage when it is committed.
        """
        return cls(
            client_id=data.get("selectedClientId") or "",
            items=[LineItem.from_dict(line) for line in data.get("quoteItems") or []],
            notes=data.get("notes") or "",
            discount=DiscountSpec.from_raw(data.get("discountType"), data.get("discount")),
            quote_date=_parse_date(data.get("quoteDate")),
        )


# =============================================================================
# SAVED QUOTE
# =============================================================================

def _parse_datetime(value: Any) -> datetime:
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return datetime.now(timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class SavedQuote:
    """
    A committed quote. Totals are frozen at commit time.

    The client and line items are copies taken at commit time, matching what
    was printed or sent to the client.
    """

    id: str
    created_at: datetime
    client: Client
    items: Tuple[LineItem, ...]
    totals: QuoteTotals
    discount: DiscountSpec = field(default_factory=DiscountSpec)
    notes: str = ""

    @property
    def product_lines(self) -> Tuple[LineItem, ...]:
        return tuple(line for line in self.items if line.is_product)

    @property
    def service_lines(self) -> Tuple[LineItem, ...]:
        return tuple(line for line in self.items if not line.is_product)

    @classmethod
    def from_draft(
        cls,
        quote_id: str,
        draft: QuoteDraft,
        client: Client,
        totals: QuoteTotals,
    ) -> "SavedQuote":
        """Freeze a draft. created_at is the draft's quote date at midnight UTC."""
        return cls(
            id=quote_id,
            created_at=datetime.combine(draft.quote_date, time.min, tzinfo=timezone.utc),
            client=client,
            items=tuple(draft.items),
            totals=totals,
            discount=draft.discount,
            notes=draft.notes,
        )

    def to_draft(self) -> QuoteDraft:
        """Reload this quote as a new editable draft."""
        return QuoteDraft(
            client_id=self.client.id,
            items=list(self.items),
            notes=self.notes,
            discount=self.discount,
            quote_date=self.created_at.date(),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "createdAt": self.created_at.isoformat(),
            "client": self.client.to_dict(),
            "items": [line.to_dict() for line in self.items],
            "notes": self.notes,
        }
        data.update(self.totals.to_dict())
        data.update(self.discount.to_dict())
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SavedQuote":
        return cls(
            id=data.get("id", ""),
            created_at=_parse_datetime(data.get("createdAt")),
            client=Client.from_dict(data.get("client") or {}),
            items=tuple(LineItem.from_dict(line) for line in data.get("items") or []),
            totals=QuoteTotals.from_dict(data),
            discount=DiscountSpec.from_raw(data.get("discountType"), data.get("discount")),
            notes=data.get("notes") or "",
        )


# =============================================================================
# COMMIT RESULT
# =============================================================================

@dataclass(frozen=True)
class CommitResult:
    """
    Outcome of committing the current draft.

    Either committed (quote is set) or rejected by the stock check (decision
    carries the shortfalls and the draft stays editable).
    """

    committed: bool
    decision: StockDecision
    quote: Optional[SavedQuote] = None
    already_committed: bool = False
    """True when the draft had been committed before; nothing was deducted again."""

    @classmethod
    def create_committed(cls, quote: SavedQuote, already_committed: bool = False) -> "CommitResult":
        return cls(
            committed=True,
            decision=StockDecision.accept(),
            quote=quote,
            already_committed=already_committed,
        )

    @classmethod
    def create_rejected(cls, decision: StockDecision) -> "CommitResult":
        return cls(committed=False, decision=decision)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "committed": self.committed,
            "alreadyCommitted": self.already_committed,
            "stock": self.decision.to_dict(),
            "quote": self.quote.to_dict() if self.quote else None,
        }
