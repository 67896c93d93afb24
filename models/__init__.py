"""
Data models for QuoteDesk.

This module contains dataclasses for:
- Product / Service: Catalog items (tagged variant, only products carry stock)
- Client: Quote recipients
- LineItem, DiscountSpec, QuoteTotals: Quote building blocks
- QuoteDraft: In-progress quote (mutable, autosaved)
- SavedQuote: Committed quote with frozen totals
- StockDecision, Shortfall: Result of a stock check
- QuoteSettings, CompanyInfo: User settings

Everything except QuoteDraft is frozen (immutable).
"""

from .catalog import Product, Service, CatalogItem, ItemKind, catalog_item_from_dict
from .client import Client
from .quote import (
    LineItem,
    DiscountKind,
    DiscountSpec,
    QuoteTotals,
    QuoteDraft,
    DraftState,
    SavedQuote,
    CommitResult,
)
from .stock import StockDecision, Shortfall, StockOnEditPolicy
from .settings import QuoteSettings, CompanyInfo

__all__ = [
    # Catalog models
    "Product",
    "Service",
    "CatalogItem",
    "ItemKind",
    "catalog_item_from_dict",
    # Client models
    "Client",
    # Quote models
    "LineItem",
    "DiscountKind",
    "DiscountSpec",
    "QuoteTotals",
    "QuoteDraft",
    "DraftState",
    "SavedQuote",
    "CommitResult",
    # Stock models
    "StockDecision",
    "Shortfall",
    "StockOnEditPolicy",
    # Settings models
    "QuoteSettings",
    "CompanyInfo",
]
