"""
Settings models.

QuoteSettings holds the business rules a user can toggle from the settings
screen. Defaults come from Config (and so from .env); the stored
"quoteSettings" record overrides them field by field.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Dict, Any, List

from models.stock import StockOnEditPolicy


@dataclass(frozen=True)
class QuoteSettings:
    """User-adjustable quoting rules."""

    show_discount: bool = True
    """When False, quotes carry no discount at all."""

    auto_save: bool = False
    """Autosave the draft after each change (debounced)."""

    allow_quote_without_stock: bool = True
    """When False, product quantities may not exceed stock on hand."""

    clamp_percent_discount: bool = True
    """Clamp percent discounts to 0-100 so totals never go negative."""

    stock_on_edit: StockOnEditPolicy = StockOnEditPolicy.KEEP_DEDUCTED
    """Whether reopening a saved quote gives its stock back."""

    default_notes: str = ""
    """Notes pre-filled on every new draft."""

    sectors: List[str] = field(default_factory=list)
    """Sector names offered when editing catalog items."""

    # Stored key for each field, matching what older data files contain
    _KEYS = {
        "show_discount": "showDiscount",
        "auto_save": "autoSave",
        "allow_quote_without_stock": "allowQuoteWithoutStock",
        "clamp_percent_discount": "clampPercentDiscount",
        "stock_on_edit": "stockOnEdit",
        "default_notes": "defaultNotes",
        "sectors": "sectors",
    }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "showDiscount": self.show_discount,
            "autoSave": self.auto_save,
            "allowQuoteWithoutStock": self.allow_quote_without_stock,
            "clampPercentDiscount": self.clamp_percent_discount,
            "stockOnEdit": self.stock_on_edit.value,
            "defaultNotes": self.default_notes,
            "sectors": list(self.sectors),
        }

    def merged_with(self, data: Dict[str, Any]) -> "QuoteSettings":
        """
        Return a copy with values from a stored or submitted record.

        Accepts both camelCase storage keys and snake_case field names.
        Unknown keys (presentation options such as fonts or themes kept by
        older data files) are ignored.
        """
        changes: Dict[str, Any] = {}
        for f in fields(self):
            key = self._KEYS[f.name]
            if key in data:
                changes[f.name] = data[key]
            elif f.name in data:
                changes[f.name] = data[f.name]

        if "stock_on_edit" in changes and not isinstance(changes["stock_on_edit"], StockOnEditPolicy):
            changes["stock_on_edit"] = StockOnEditPolicy.from_value(changes["stock_on_edit"])
        if "sectors" in changes:
            sectors = changes["sectors"] or []
            if not isinstance(sectors, (list, tuple, set)):
                sectors = [sectors]
            changes["sectors"] = sorted({str(s).strip() for s in sectors if str(s).strip()})
        if "default_notes" in changes:
            changes["default_notes"] = str(changes["default_notes"] or "")
        for name in ("show_discount", "auto_save", "allow_quote_without_stock", "clamp_percent_discount"):
            if name in changes:
                changes[name] = _to_bool(changes[name])

        return replace(self, **changes)


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


@dataclass(frozen=True)
class CompanyInfo:
    """The business issuing the quotes."""

    name: str = ""
    cnpj: str = ""
    address: str = ""
    city: str = ""
    zip_code: str = ""
    phone: str = ""
    email: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "cnpj": self.cnpj,
            "address": self.address,
            "city": self.city,
            "zipCode": self.zip_code,
            "phone": self.phone,
            "email": self.email,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompanyInfo":
        return cls(
            name=data.get("name", ""),
            cnpj=data.get("cnpj", ""),
            address=data.get("address", ""),
            city=data.get("city", ""),
            zip_code=data.get("zipCode", data.get("zip_code", "")),
            phone=data.get("phone", ""),
            email=data.get("email", ""),
        )
