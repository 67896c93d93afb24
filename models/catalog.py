"""
Catalog data models.

The catalog holds two kinds of sellable items:
- Product: physical goods with a cost price and stock on hand
- Service: labour or other work, which never carries stock

They are separate frozen dataclasses rather than one record with a type
tag, so stock logic can only ever reach a Product. Code that accepts either
uses the CatalogItem union and checks isinstance(item, Product).

Stored records use camelCase keys:
    {"id", "type", "code", "name", "costPrice", "sellPrice", "stock",
     "sector", "image"}
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Dict, Any, Optional, Union

from models.money import ZERO, to_money


class ItemKind(Enum):
    """Discriminator written to the "type" field of stored records."""

    PRODUCT = "product"
    SERVICE = "service"


@dataclass(frozen=True)
class Product:
    """
    A physical product with stock on hand.

    Stock may be negative when quotes are allowed without stock.
    """

    id: str
    """Unique identifier (UUID string)."""

    code: str
    """Short product code shown on quotes."""

    name: str
    """Display name."""

    sell_price: Decimal
    """Unit price charged to the client."""

    cost_price: Decimal = ZERO
    """Unit cost paid by the business."""

    stock: int = 0
    """Units currently on hand."""

    sector: Optional[str] = None
    """Optional grouping (e.g. 'Electrical')."""

    image: Optional[str] = None
    """Optional image reference (data URL or path)."""

    kind = ItemKind.PRODUCT

    @property
    def unit_margin(self) -> Decimal:
        """Sell price minus cost price."""
        return self.sell_price - self.cost_price

    def with_stock(self, stock: int) -> "Product":
        """Return a copy with a new stock level."""
        return replace(self, stock=stock)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage and API responses."""
        return {
            "id": self.id,
            "type": self.kind.value,
            "code": self.code,
            "name": self.name,
            "costPrice": str(self.cost_price),
            "sellPrice": str(self.sell_price),
            "stock": self.stock,
            "sector": self.sector,
            "image": self.image,
        }


@dataclass(frozen=True)
class Service:
    """A service (labour, installation, ...). Services have no stock."""

    id: str
    code: str
    name: str
    sell_price: Decimal
    sector: Optional[str] = None
    image: Optional[str] = None

    kind = ItemKind.SERVICE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.kind.value,
            "code": self.code,
            "name": self.name,
            "sellPrice": str(self.sell_price),
            "sector": self.sector,
            "image": self.image,
        }


CatalogItem = Union[Product, Service]


def _parse_stock(value: Any) -> int:
    try:
        return int(float(str(value).replace(",", ".")))
    except (TypeError, ValueError, OverflowError):
        return 0


def catalog_item_from_dict(data: Dict[str, Any]) -> CatalogItem:
    """
    Create a Product or Service from a stored record.

    Records written before services existed have no "type" field; those are
    products. A missing id gets a fresh UUID (new items from the API).

    Args:
        data: Stored or submitted record with camelCase keys

    Returns:
        Product or Service
    """
    item_id = data.get("id") or str(uuid.uuid4())
    code = str(data.get("code", "") or "")
    name = str(data.get("name", "") or "")
    sell_price = to_money(data.get("sellPrice"))
    sector = data.get("sector") or None
    image = data.get("image") or None

    if data.get("type") == ItemKind.SERVICE.value:
        return Service(
            id=item_id,
            code=code,
            name=name,
            sell_price=sell_price,
            sector=sector,
            image=image,
        )

    return Product(
        id=item_id,
        code=code,
        name=name,
        sell_price=sell_price,
        cost_price=to_money(data.get("costPrice")),
        stock=_parse_stock(data.get("stock", 0)),
        sector=sector,
        image=image,
    )


def is_product(item: CatalogItem) -> bool:
    """Whether the item carries stock."""
    return isinstance(item, Product)
