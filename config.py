"""
Configuration for QuoteDesk.

Values come from the environment, with a .env file loaded first. The quoting
rules below are DEFAULTS: once the user changes them on the settings screen,
the stored quoteSettings record wins.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file early so environment variables are available for Config class
# This must happen before the Config class is defined
load_dotenv(override=True)

# Base directory (where this file lives)
BASE_DIR = Path(__file__).resolve().parent


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Default configuration for the Flask application."""

    # Flask settings
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
    MAX_CONTENT_LENGTH = 8 * 1024 * 1024  # 8 MB (backups may embed a logo)
    JSON_SORT_KEYS = False
    ENVIRONMENT = os.environ.get("FLASK_ENV", "development")

    # Debug mode
    DEBUG = os.environ.get("FLASK_DEBUG", "1") == "1"

    # ==========================================================================
    # Storage
    # ==========================================================================
    # All data lives in one JSON document: DATA_DIR / DATA_FILE_NAME.
    # Set DATA_DIR to an empty string to keep data in memory only.
    # ==========================================================================
    DATA_DIR = os.environ.get("QUOTEDESK_DATA_DIR", str(BASE_DIR / "data"))
    DATA_FILE_NAME = os.environ.get("QUOTEDESK_DATA_FILE", "quote_desk.json")

    # ==========================================================================
    # Quoting rules (defaults for QuoteSettings)
    # ==========================================================================
    # ALLOW_NEGATIVE_STOCK: quotes may request more than the stock on hand
    #   Default: 1 (stock may go negative)
    #
    # CLAMP_PERCENT_DISCOUNT: cap percent discounts at 100%
    #   Default: 1. With 0, a 110% discount produces a negative total.
    #
    # STOCK_ON_EDIT_POLICY: reopening a saved quote for editing
    #   "keep"    - stock stays deducted; re-saving deducts again (default)
    #   "restore" - the quote's quantities go back into stock first
    # ==========================================================================
    ALLOW_NEGATIVE_STOCK = _env_flag("ALLOW_NEGATIVE_STOCK", "1")
    CLAMP_PERCENT_DISCOUNT = _env_flag("CLAMP_PERCENT_DISCOUNT", "1")
    STOCK_ON_EDIT_POLICY = os.environ.get("STOCK_ON_EDIT_POLICY", "keep")
    SHOW_DISCOUNT = _env_flag("SHOW_DISCOUNT", "1")
    DEFAULT_NOTES = os.environ.get("DEFAULT_NOTES", "")

    # Draft autosave (debounced)
    AUTOSAVE_ENABLED = _env_flag("AUTOSAVE_ENABLED", "0")
    AUTOSAVE_DELAY_SECONDS = float(os.environ.get("AUTOSAVE_DELAY_SECONDS", "1.0"))

    # Presentation
    CURRENCY_SYMBOL = os.environ.get("CURRENCY_SYMBOL", "R$")
    WHATSAPP_COUNTRY_CODE = os.environ.get("WHATSAPP_COUNTRY_CODE", "55")
    MAX_NOTES_LENGTH = 2000
    MAX_QUANTITY = 100000


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration. Data stays in memory unless DATA_DIR is overridden."""
    DEBUG = False
    TESTING = True
    DATA_DIR = ""
    AUTOSAVE_ENABLED = False
    AUTOSAVE_DELAY_SECONDS = 0.05
    ALLOW_NEGATIVE_STOCK = True
    CLAMP_PERCENT_DISCOUNT = True
    STOCK_ON_EDIT_POLICY = "keep"
    SHOW_DISCOUNT = True
    DEFAULT_NOTES = ""
