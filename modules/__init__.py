"""Helper modules for the QuoteDesk application."""

__all__ = [
    "calculator",
    "search",
    "stock_reconciler",
    "whatsapp",
]
