"""
Backup and restore of all application data.

A backup is the data document minus the draft:
    {"clients", "products", "savedQuotes", "quoteSettings", "companyInfo", "logo"}

Restore replaces only the sections present in the backup, all in one
transaction. Writing the backup to a file is the caller's concern.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from core.exceptions import BackupFormatError
from services.storage import (
    JsonStore,
    DATA_KEYS,
    CLIENTS,
    PRODUCTS,
    SAVED_QUOTES,
    QUOTE_SETTINGS,
    COMPANY_INFO,
)
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

_LIST_KEYS = (CLIENTS, PRODUCTS, SAVED_QUOTES)
_OBJECT_KEYS = (QUOTE_SETTINGS, COMPANY_INFO)


def backup_filename(today: Optional[date] = None) -> str:
    """Suggested download name, e.g. backup-local-2025-03-05.json."""
    return f"backup-local-{(today or date.today()).isoformat()}.json"


class BackupService:
    def __init__(self, store: JsonStore):
        self._store = store

    def export(self) -> Dict[str, Any]:
        """Copy of every data section (missing sections are null)."""
        snapshot = self._store.snapshot()
        return {key: snapshot.get(key) for key in DATA_KEYS}

    def restore(self, backup: Any) -> List[str]:
        """
        Replace stored sections with the ones in a backup.

        Args:
            backup: Parsed backup document

        Returns:
            Names of the restored sections

        Raises:
            BackupFormatError: If the backup is not an object or a section has
                the wrong type (nothing is restored in that case)
        """
        if not isinstance(backup, dict):
            raise BackupFormatError()

        sections = {key: backup[key] for key in DATA_KEYS if backup.get(key) is not None}
        for key, value in sections.items():
            if key in _LIST_KEYS and not isinstance(value, list):
                raise BackupFormatError(f"Backup section {key!r} must be a list")
            if key in _OBJECT_KEYS and not isinstance(value, dict):
                raise BackupFormatError(f"Backup section {key!r} must be an object")

        with self._store.transaction() as data:
            data.update(sections)

        restored = sorted(sections)
        logger.info(f"Backup restored: {restored}")
        return restored
