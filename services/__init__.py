"""
Services layer for QuoteDesk.

This module contains the business logic services:
- JsonStore: The data document (one JSON file, atomic transactions)
- CatalogService / ClientService: Registries
- SettingsService: Quote settings, company info, logo
- BackupService: Export / restore
- DraftAutosaver: Debounced draft persistence (timer thread)
- QuoteService: Current draft, commit, saved quotes

Thread Model:
    Main Thread (Flask)
    └── Autosave timer thread (one at a time, restarted on every edit)

All services share one JsonStore; its lock serializes writes.
"""

from .storage import JsonStore
from .catalog_service import CatalogService
from .client_service import ClientService
from .settings_service import SettingsService, defaults_from_config
from .backup_service import BackupService, backup_filename
from .draft_service import DraftAutosaver
from .quote_service import QuoteService

__all__ = [
    "JsonStore",
    "CatalogService",
    "ClientService",
    "SettingsService",
    "defaults_from_config",
    "BackupService",
    "backup_filename",
    "DraftAutosaver",
    "QuoteService",
]
