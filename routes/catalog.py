"""
Catalog routes.

Handles:
- /api/catalog - List (with filters) and add products / services
- /api/catalog/<id> - Read, replace, delete one item
"""

from flask import Blueprint, request

from core.exceptions import QuoteDeskError
from logging_config import get_logger
from .common import json_body, sanitize_record, service


# Module logger
logger = get_logger(__name__)

catalog_bp = Blueprint("catalog", __name__, url_prefix="/api/catalog")

# Query parameter -> filter_catalog keyword
_PRICE_FILTERS = {
    "minCost": "min_cost",
    "maxCost": "max_cost",
    "minSell": "min_sell",
    "maxSell": "max_sell",
}


@catalog_bp.route("", methods=["GET"])
def list_items():
    """
    List catalog items.

    Query params: search, type (product|service), minCost, maxCost,
    minSell, maxSell.
    """
    bounds = {kw: request.args.get(arg) for arg, kw in _PRICE_FILTERS.items()}
    items = service("CATALOG_SERVICE").filter(request.args.get("search", ""), **bounds)

    kind = request.args.get("type")
    if kind:
        items = [item for item in items if item.kind.value == kind]

    return {"items": [item.to_dict() for item in items]}


@catalog_bp.route("", methods=["POST"])
def add_items():
    """Add one item (JSON object) or several (JSON object with an "items" list)."""
    data = json_body()
    catalog = service("CATALOG_SERVICE")

    if "items" in data:
        records = data["items"]
        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            raise QuoteDeskError("\"items\" must be a list of objects")
        created = catalog.add_many([sanitize_record(r) for r in records])
        logger.info(f"Bulk catalog import: {len(created)} item(s)")
        return {"items": [item.to_dict() for item in created]}, 201

    return catalog.add(sanitize_record(data)).to_dict(), 201


@catalog_bp.route("/<item_id>", methods=["GET"])
def get_item(item_id: str):
    return service("CATALOG_SERVICE").get(item_id).to_dict()


@catalog_bp.route("/<item_id>", methods=["PUT"])
def update_item(item_id: str):
    return service("CATALOG_SERVICE").update(item_id, sanitize_record(json_body())).to_dict()


@catalog_bp.route("/<item_id>", methods=["DELETE"])
def delete_item(item_id: str):
    service("CATALOG_SERVICE").delete(item_id)
    return "", 204
