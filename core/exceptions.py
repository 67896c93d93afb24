"""
Custom exceptions for QuoteDesk.

Exception Hierarchy:
    QuoteDeskError (base)
    ├── StorageError              - Data file unreadable or unwritable
    ├── BackupFormatError         - Backup payload has the wrong shape
    ├── NotFoundError             - Referenced record does not exist
    │   ├── CatalogItemNotFoundError
    │   ├── ClientNotFoundError
    │   └── QuoteNotFoundError
    ├── QuoteValidationError      - Draft cannot be changed or committed as asked
    │   ├── InvalidQuantityError
    │   ├── MissingClientError
    │   ├── EmptyQuoteError
    │   ├── DraftCommittedError
    │   └── ClientPhoneMissingError
    └── InsufficientStockError    - Product quantities exceed stock on hand

Usage:
    Stock checks return StockDecision values; InsufficientStockError exists for
    callers (the HTTP layer) that turn a rejection into an error response.
    Everything here is recoverable - the user corrects the input and retries.
"""

from typing import Optional, Dict, Any, List


class QuoteDeskError(Exception):
    """
    Base exception for all QuoteDesk errors.

    All custom exceptions inherit from this class, allowing callers to catch
    all application-specific errors with a single except clause if needed.
    """

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON error responses."""
        return {"error": self.message, "details": self.details}


# =============================================================================
# STORAGE ERRORS
# =============================================================================

class StorageError(QuoteDeskError):
    """
    The data file could not be read or written.

    Typical causes:
    - File was edited by hand and is no longer valid JSON
    - QUOTEDESK_DATA_DIR points to a read-only location
    """

    status_code = 500

    def __init__(self, message: str, path: Optional[str] = None):
        details = {}
        if path:
            details["path"] = path
        super().__init__(message, details)
        self.path = path


class BackupFormatError(QuoteDeskError):
    """A backup payload is not a JSON object or carries malformed sections."""

    def __init__(self, message: str = "Backup data must be a JSON object"):
        super().__init__(message, {"resolution": "Select a backup exported by QuoteDesk"})


# =============================================================================
# LOOKUP ERRORS
# =============================================================================

class NotFoundError(QuoteDeskError):
    """Base class for lookups of records that do not exist."""

    status_code = 404
    record_type = "record"

    def __init__(self, record_id: str):
        message = f"{self.record_type.capitalize()} not found: {record_id}"
        super().__init__(message, {"id": record_id})
        self.record_id = record_id


class CatalogItemNotFoundError(NotFoundError):
    record_type = "catalog item"


class ClientNotFoundError(NotFoundError):
    record_type = "client"


class QuoteNotFoundError(NotFoundError):
    record_type = "quote"


# =============================================================================
# QUOTE VALIDATION ERRORS
# =============================================================================

class QuoteValidationError(QuoteDeskError):
    """
    Base class for requests the current draft cannot satisfy.

    The UI should show the message and let the user correct the draft.
    """


class InvalidQuantityError(QuoteValidationError):
    """A line item quantity is not a whole number of at least 1."""

    def __init__(self, quantity: Any):
        super().__init__(
            f"Quantity must be a whole number of at least 1 (got {quantity!r})",
            {"quantity": quantity},
        )
        self.quantity = quantity


class MissingClientError(QuoteValidationError):
    def __init__(self, message: str = "Select a client before saving the quote"):
        super().__init__(message)


class EmptyQuoteError(QuoteValidationError):
    def __init__(self, message: str = "Add at least one item before saving the quote"):
        super().__init__(message)


class DraftCommittedError(QuoteValidationError):
    """
    The current draft has already been committed.

    Committed quotes are frozen. Start a new draft, or load the saved quote
    with edit_quote() to rework it.
    """

    status_code = 409

    def __init__(self, quote_id: Optional[str] = None):
        super().__init__(
            "This quote has already been saved; start a new draft to make changes",
            {"quote_id": quote_id} if quote_id else None,
        )
        self.quote_id = quote_id


class ClientPhoneMissingError(QuoteValidationError):
    def __init__(self, client_name: str):
        super().__init__(
            f"Client {client_name!r} has no phone number registered",
            {"client_name": client_name},
        )
        self.client_name = client_name


# =============================================================================
# STOCK ERRORS
# =============================================================================

class InsufficientStockError(QuoteDeskError):
    """
    Requested product quantities exceed the stock on hand.

    Raised only when a Rejected StockDecision is escalated. Each shortfall
    names the product with its requested and available quantities so the UI
    can point at the offending lines.
    """

    status_code = 409

    def __init__(self, shortfalls: List[Any], reason: str = ""):
        names = ", ".join(s.product_name or s.product_id for s in shortfalls)
        message = reason or f"Insufficient stock for: {names}"
        details = {
            "shortfalls": [s.to_dict() for s in shortfalls],
            "resolution": "Reduce the quantity or allow quotes without stock in settings",
        }
        super().__init__(message, details)
        self.shortfalls = list(shortfalls)
