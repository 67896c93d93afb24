"""
Core module for QuoteDesk.

Contains fundamental infrastructure components:
- exceptions: Custom exception hierarchy
"""

from .exceptions import (
    QuoteDeskError,
    StorageError,
    BackupFormatError,
    NotFoundError,
    CatalogItemNotFoundError,
    ClientNotFoundError,
    QuoteNotFoundError,
    QuoteValidationError,
    InvalidQuantityError,
    MissingClientError,
    EmptyQuoteError,
    DraftCommittedError,
    ClientPhoneMissingError,
    InsufficientStockError,
)

__all__ = [
    "QuoteDeskError",
    "StorageError",
    "BackupFormatError",
    "NotFoundError",
    "CatalogItemNotFoundError",
    "ClientNotFoundError",
    "QuoteNotFoundError",
    "QuoteValidationError",
    "InvalidQuantityError",
    "MissingClientError",
    "EmptyQuoteError",
    "DraftCommittedError",
    "ClientPhoneMissingError",
    "InsufficientStockError",
]
