"""
Settings service.

QuoteSettings = defaults from Config, overridden by the stored
"quoteSettings" record. Updates are merged into the stored record, so keys
this version does not know about (fonts, themes) survive a save.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from models.settings import CompanyInfo, QuoteSettings
from models.stock import StockOnEditPolicy
from services.storage import JsonStore, QUOTE_SETTINGS, COMPANY_INFO, LOGO
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)


def defaults_from_config(config: Any) -> QuoteSettings:
    """
    Build default settings from a Config class or Flask config mapping.

    Args:
        config: Object with attributes, or a mapping, holding ALLOW_NEGATIVE_STOCK etc.
    """
    def value(name: str, default: Any) -> Any:
        if isinstance(config, dict) or hasattr(config, "get"):
            return config.get(name, default)
        return getattr(config, name, default)

    return QuoteSettings(
        show_discount=bool(value("SHOW_DISCOUNT", True)),
        auto_save=bool(value("AUTOSAVE_ENABLED", False)),
        allow_quote_without_stock=bool(value("ALLOW_NEGATIVE_STOCK", True)),
        clamp_percent_discount=bool(value("CLAMP_PERCENT_DISCOUNT", True)),
        stock_on_edit=StockOnEditPolicy.from_value(value("STOCK_ON_EDIT_POLICY", "keep")),
        default_notes=str(value("DEFAULT_NOTES", "") or ""),
    )


class SettingsService:
    """Read and update quote settings, company info and logo."""

    def __init__(self, store: JsonStore, defaults: Optional[QuoteSettings] = None):
        self._store = store
        self._defaults = defaults or QuoteSettings()

    @property
    def defaults(self) -> QuoteSettings:
        return self._defaults

    def get(self) -> QuoteSettings:
        stored = self._store.get(QUOTE_SETTINGS) or {}
        if not isinstance(stored, dict):
            logger.warning("Stored quoteSettings is not an object; using defaults")
            return self._defaults
        return self._defaults.merged_with(stored)

    def update(self, changes: Dict[str, Any]) -> QuoteSettings:
        """
        Apply changes (camelCase or snake_case keys) and store the result.

        Returns:
            The effective settings after the update
        """
        settings = self.get().merged_with(changes)
        with self._store.transaction() as data:
            stored = data.get(QUOTE_SETTINGS)
            stored = stored if isinstance(stored, dict) else {}
            stored.update(settings.to_dict())
            data[QUOTE_SETTINGS] = stored

        logger.info(f"Settings updated: {sorted(changes.keys())}")
        return settings

    def add_sector(self, name: str) -> QuoteSettings:
        name = (name or "").strip()
        if not name:
            return self.get()
        return self.update({"sectors": self.get().sectors + [name]})

    def remove_sector(self, name: str) -> QuoteSettings:
        return self.update({"sectors": [s for s in self.get().sectors if s != name]})

    def get_company_info(self) -> CompanyInfo:
        stored = self._store.get(COMPANY_INFO) or {}
        return CompanyInfo.from_dict(stored if isinstance(stored, dict) else {})

    def set_company_info(self, data: Dict[str, Any]) -> CompanyInfo:
        info = CompanyInfo.from_dict(data)
        self._store.set(COMPANY_INFO, info.to_dict())
        logger.info(f"Company info updated ({info.name})")
        return info

    def get_logo(self) -> Optional[str]:
        return self._store.get(LOGO)

    def set_logo(self, data_url: Optional[str]) -> None:
        if data_url:
            self._store.set(LOGO, data_url)
        else:
            self._store.remove(LOGO)
