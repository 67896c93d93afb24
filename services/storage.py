"""
JSON key-value store.

All application data lives in one JSON document, one top-level key per
collection:

    clients       - list of client records
    products      - list of catalog items (products and services)
    savedQuotes   - list of committed quotes
    quoteDraft    - the autosaved draft (absent when there is none)
    quoteSettings - user settings
    companyInfo   - the business issuing quotes
    logo          - logo data URL

Atomicity:
    Every write goes through transaction(). The block edits a staged copy;
    on success the whole document is written to a temp file and moved over
    the data file with os.replace(), so readers see either all of the
    block's changes or none. Committing a quote (new quote + stock levels +
    draft removal) is one transaction.

Thread Safety:
    A re-entrant lock guards the in-memory document. The autosave timer
    thread and request handlers share one store.

Usage:
    store = JsonStore(Path("data/quote_desk.json"))

    with store.transaction() as data:
        data["products"] = updated_products
        data["savedQuotes"] = quotes + [new_quote]
"""

from __future__ import annotations

import copy
import json
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from core.exceptions import StorageError
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

# Keys
CLIENTS = "clients"
PRODUCTS = "products"
SAVED_QUOTES = "savedQuotes"
QUOTE_DRAFT = "quoteDraft"
QUOTE_SETTINGS = "quoteSettings"
COMPANY_INFO = "companyInfo"
LOGO = "logo"

DATA_KEYS = (CLIENTS, PRODUCTS, SAVED_QUOTES, QUOTE_SETTINGS, COMPANY_INFO, LOGO)


class JsonStore:
    """
    Key-value document persisted as a single JSON file.

    Attributes:
        path: Data file, or None for an in-memory store
    """

    def __init__(self, path: Optional[Path] = None):
        """
        Open the store, loading the data file if it exists.

        Args:
            path: Data file location; None keeps everything in memory

        Raises:
            StorageError: If the file exists but is not a JSON object
        """
        self.path = Path(path) if path else None
        self._lock = threading.RLock()
        self._data: Dict[str, Any] = self._load()

        if self.path:
            logger.info(f"JsonStore opened: {self.path} ({len(self._data)} keys)")
        else:
            logger.info("JsonStore opened in memory")

    def _load(self) -> Dict[str, Any]:
        if not self.path or not self.path.exists():
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError(f"Data file is not valid JSON: {e}", str(self.path)) from e
        except OSError as e:
            raise StorageError(f"Cannot read data file: {e}", str(self.path)) from e

        if not isinstance(data, dict):
            raise StorageError("Data file must contain a JSON object", str(self.path))
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        if not self.path:
            return

        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Cannot write data file: {e}", str(self.path)) from e

    @contextmanager
    def transaction(self) -> Iterator[Dict[str, Any]]:
        """
        Stage changes to the document and write them together.

        Yields:
            A private copy of the whole document; edit it in place

        Raises:
            StorageError: If the data file cannot be written (nothing changes)
        """
        with self._lock:
            staged = copy.deepcopy(self._data)
            yield staged
            self._write(staged)
            self._data = staged

    def get(self, key: str, default: Any = None) -> Any:
        """Get a copy of a stored value."""
        with self._lock:
            if key not in self._data:
                return default
            return copy.deepcopy(self._data[key])

    def get_list(self, key: str) -> List[Any]:
        """Get a stored list, or an empty list if missing or malformed."""
        value = self.get(key, [])
        return value if isinstance(value, list) else []

    def set(self, key: str, value: Any) -> None:
        with self.transaction() as data:
            data[key] = value

    def remove(self, key: str) -> bool:
        """Remove a key. Returns True if it existed."""
        with self._lock:
            if key not in self._data:
                return False
            with self.transaction() as data:
                data.pop(key, None)
            return True

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._data.keys())

    def snapshot(self) -> Dict[str, Any]:
        """Deep copy of the whole document."""
        with self._lock:
            return copy.deepcopy(self._data)
