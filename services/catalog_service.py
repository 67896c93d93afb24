"""
Catalog service: products and services stored under the "products" key.

Records are parsed into Product / Service on every read, so stored records
written by older versions (no "type" field, numeric prices) are migrated
transparently.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.exceptions import CatalogItemNotFoundError
from models.catalog import CatalogItem, Product, catalog_item_from_dict
from modules.search import filter_catalog
from services.storage import JsonStore, PRODUCTS
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)


class CatalogService:
    """CRUD and stock access for catalog items."""

    def __init__(self, store: JsonStore):
        self._store = store

    def list_items(self) -> List[CatalogItem]:
        return [catalog_item_from_dict(record) for record in self._store.get_list(PRODUCTS)]

    def products(self) -> List[Product]:
        return [item for item in self.list_items() if isinstance(item, Product)]

    def services(self) -> List[CatalogItem]:
        return [item for item in self.list_items() if not isinstance(item, Product)]

    def get(self, item_id: str) -> CatalogItem:
        """
        Find an item by id.

        Raises:
            CatalogItemNotFoundError: If no item has this id
        """
        for item in self.list_items():
            if item.id == item_id:
                return item
        raise CatalogItemNotFoundError(item_id)

    def find(self, item_id: str) -> Optional[CatalogItem]:
        try:
            return self.get(item_id)
        except CatalogItemNotFoundError:
            return None

    def filter(self, search: str = "", **price_bounds: Optional[str]) -> List[CatalogItem]:
        """Filter by text and price ranges (see modules.search.filter_catalog)."""
        return filter_catalog(self.list_items(), search, **price_bounds)

    def add(self, data: Dict[str, Any]) -> CatalogItem:
        """Add one item from a record; a fresh id is always assigned."""
        return self.add_many([data])[0]

    def add_many(self, records: Iterable[Dict[str, Any]]) -> List[CatalogItem]:
        """
        Add several items in one write (bulk import).

        Args:
            records: Item records with camelCase keys

        Returns:
            The created items
        """
        created = [
            catalog_item_from_dict({**record, "id": str(uuid.uuid4())})
            for record in records
        ]
        with self._store.transaction() as data:
            stored = data.get(PRODUCTS) or []
            stored.extend(item.to_dict() for item in created)
            data[PRODUCTS] = stored

        logger.info(f"Added {len(created)} catalog item(s)")
        return created

    def update(self, item_id: str, data: Dict[str, Any]) -> CatalogItem:
        """
        Change an item's fields. Keys left out of data keep their stored
        values, so a partial update never resets stock or cost. The id
        cannot change.

        Raises:
            CatalogItemNotFoundError: If no item has this id
        """
        with self._store.transaction() as stored_data:
            records = stored_data.get(PRODUCTS) or []
            for index, record in enumerate(records):
                if record.get("id") == item_id:
                    existing = catalog_item_from_dict(record).to_dict()
                    updated = catalog_item_from_dict({**existing, **data, "id": item_id})
                    records[index] = updated.to_dict()
                    break
            else:
                raise CatalogItemNotFoundError(item_id)
            stored_data[PRODUCTS] = records

        logger.info(f"Updated catalog item {item_id} ({updated.name})")
        return updated

    def delete(self, item_id: str) -> None:
        """
        Remove an item. Saved quotes keep their own copy of it.

        Raises:
            CatalogItemNotFoundError: If no item has this id
        """
        with self._store.transaction() as data:
            records = data.get(PRODUCTS) or []
            remaining = [r for r in records if r.get("id") != item_id]
            if len(remaining) == len(records):
                raise CatalogItemNotFoundError(item_id)
            data[PRODUCTS] = remaining

        logger.info(f"Deleted catalog item {item_id}")

    def stock_levels(self, records: Optional[List[Dict[str, Any]]] = None) -> Dict[str, int]:
        """
        Current stock by product id. Services are not included.

        Args:
            records: Raw records to read instead of the store (e.g. the
                staged copy inside a transaction)
        """
        items = self.list_items() if records is None else [catalog_item_from_dict(r) for r in records]
        return {item.id: item.stock for item in items if isinstance(item, Product)}

    def with_stock_levels(
        self,
        levels: Mapping[str, int],
        records: Optional[List[Dict[str, Any]]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Catalog records with new stock levels applied, for a store transaction.

        Items not in levels (services, untouched products) are unchanged.

        Args:
            levels: New stock by product id
            records: Raw records to update instead of the store contents

        Returns:
            Records ready to store under the "products" key
        """
        items = self.list_items() if records is None else [catalog_item_from_dict(r) for r in records]
        updated = []
        for item in items:
            if isinstance(item, Product) and item.id in levels and levels[item.id] != item.stock:
                item = replace(item, stock=levels[item.id])
            updated.append(item.to_dict())
        return updated
