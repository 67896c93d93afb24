"""
Quote service: the current draft, commits, and saved-quote history.

QuoteDesk is single-user, so the service holds exactly one current draft.
Every draft mutation goes through this service, which enforces the draft
state machine and schedules autosave.

Draft State Machine:
    DRAFTING --commit()--> VALIDATING --rejected--> DRAFTING
                                      --accepted--> COMMITTED (terminal)

    Mutating a COMMITTED draft raises DraftCommittedError. Calling commit()
    again on it returns the saved quote without deducting stock twice.

Commit Atomicity:
    The new saved quote, the updated stock levels and the removal of the
    stored draft are written in ONE store transaction. If the write fails,
    nothing is saved, no stock moves, and the draft returns to DRAFTING.

Concurrency:
    One writer. Commits are not serialized against each other beyond the
    store's lock; the stock check reads current levels immediately before
    the transaction.

Usage:
    service = QuoteService(store, catalog, clients, settings, autosaver)
    service.select_client(client.id)
    service.add_item(product.id, 3)
    service.set_discount("fixed", "5")
    result = service.commit()
    if not result.committed:
        show(result.decision.shortfalls)
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any, List, Optional

from core.exceptions import (
    CatalogItemNotFoundError,
    DraftCommittedError,
    EmptyQuoteError,
    MissingClientError,
    QuoteNotFoundError,
    StorageError,
)
from models.quote import (
    CommitResult,
    DiscountSpec,
    DraftState,
    LineItem,
    QuoteDraft,
    QuoteTotals,
    SavedQuote,
    coerce_quantity,
    parse_quantity,
)
from models.settings import QuoteSettings
from models.stock import StockDecision
from modules.calculator import compute_totals
from modules.search import filter_quotes
from modules.stock_reconciler import StockReconciler
from modules.whatsapp import build_whatsapp_url
from services.catalog_service import CatalogService
from services.client_service import ClientService
from services.draft_service import DraftAutosaver
from services.settings_service import SettingsService
from services.storage import JsonStore, PRODUCTS, SAVED_QUOTES, QUOTE_DRAFT
from logging_config import get_logger, get_quote_logger


# Module logger
logger = get_logger(__name__)


class QuoteService:
    """
    Builds, commits and manages quotes.

    Attributes:
        draft: The current draft (read-only property)
    """

    def __init__(
        self,
        store: JsonStore,
        catalog: CatalogService,
        clients: ClientService,
        settings: SettingsService,
        autosaver: Optional[DraftAutosaver] = None,
    ):
        self._store = store
        self._catalog = catalog
        self._clients = clients
        self._settings = settings
        self._autosaver = autosaver
        self._draft = self._blank_draft()

    @property
    def draft(self) -> QuoteDraft:
        return self._draft

    # =========================================================================
    # DRAFT LIFECYCLE
    # =========================================================================

    def _blank_draft(self) -> QuoteDraft:
        return QuoteDraft(notes=self._settings.get().default_notes, quote_date=date.today())

    def _reconciler(self, settings: QuoteSettings) -> StockReconciler:
        return StockReconciler(settings.stock_on_edit)

    def _touched(self) -> None:
        if self._autosaver and self._settings.get().auto_save:
            self._autosaver.schedule(self._draft)

    def new_draft(self) -> QuoteDraft:
        """Discard the current draft (and the stored one) and start fresh."""
        if self._autosaver:
            self._autosaver.clear()
        else:
            self._store.remove(QUOTE_DRAFT)
        self._draft = self._blank_draft()
        logger.debug("Started a new draft")
        return self._draft

    def load_draft(self) -> Optional[QuoteDraft]:
        """
        Replace the current draft with the stored one, if any.

        Returns:
            The loaded draft, or None if nothing is stored
        """
        if self._autosaver:
            stored = self._autosaver.load()
        else:
            data = self._store.get(QUOTE_DRAFT)
            stored = QuoteDraft.from_dict(data) if data else None

        if stored is None:
            return None

        self._draft = stored
        logger.info(f"Loaded stored draft ({len(stored.items)} items)")
        return stored

    def select_client(self, client_id: str) -> QuoteDraft:
        """
        Raises:
            ClientNotFoundError: If the client does not exist
            DraftCommittedError: If the draft is already committed
        """
        self._draft.ensure_editable()
        if client_id:
            self._clients.get(client_id)
        self._draft.client_id = client_id or ""
        self._touched()
        return self._draft

    def set_notes(self, notes: str) -> QuoteDraft:
        self._draft.ensure_editable()
        self._draft.notes = notes or ""
        self._touched()
        return self._draft

    def set_discount(self, kind: Any, amount: Any) -> QuoteDraft:
        """Set the discount from raw input; negative or non-numeric amounts become 0."""
        self._draft.ensure_editable()
        self._draft.discount = DiscountSpec.from_raw(kind, amount)
        self._touched()
        return self._draft

    def set_quote_date(self, value: date) -> QuoteDraft:
        self._draft.ensure_editable()
        self._draft.quote_date = value
        self._touched()
        return self._draft

    # =========================================================================
    # LINE ITEMS
    # =========================================================================

    def add_item(self, item_id: str, quantity: Any) -> StockDecision:
        """
        Add a catalog item, merging with an existing line for the same item.

        When quotes without stock are not allowed and the merged quantity of
        a product exceeds its stock, the draft is left unchanged.

        Args:
            item_id: Catalog item id
            quantity: Quantity to add (whole number >= 1)

        Returns:
            Accepted, or Rejected with the shortfall

        Raises:
            InvalidQuantityError: If quantity is not a whole number >= 1
            CatalogItemNotFoundError: If the item does not exist
            DraftCommittedError: If the draft is already committed
        """
        self._draft.ensure_editable()
        quantity = parse_quantity(quantity)
        item = self._catalog.get(item_id)

        existing = self._draft.find_line(item_id)
        candidate = LineItem(item=item, quantity=quantity + (existing.quantity if existing else 0))

        decision = self._check_line(candidate)
        if decision.accepted:
            self._draft.put_line(candidate)
            self._touched()
        return decision

    def update_quantity(self, item_id: str, quantity: Any) -> StockDecision:
        """
        Set a line's quantity. Values below 1 (or junk) become 1.

        Over-stock quantities (when not allowed) leave the line unchanged.

        Raises:
            CatalogItemNotFoundError: If the draft has no line for this item
            DraftCommittedError: If the draft is already committed
        """
        self._draft.ensure_editable()
        line = self._draft.find_line(item_id)
        if line is None:
            raise CatalogItemNotFoundError(item_id)

        candidate = line.with_quantity(coerce_quantity(quantity))
        decision = self._check_line(candidate)
        if decision.accepted:
            self._draft.put_line(candidate)
            self._touched()
        return decision

    def remove_item(self, item_id: str) -> bool:
        removed = self._draft.remove_line(item_id)
        if removed:
            self._touched()
        return removed

    def _check_line(self, line: LineItem) -> StockDecision:
        settings = self._settings.get()
        return self._reconciler(settings).validate(
            [line],
            self._catalog.stock_levels(),
            settings.allow_quote_without_stock,
        )

    # =========================================================================
    # TOTALS AND COMMIT
    # =========================================================================

    def totals(self, draft: Optional[QuoteDraft] = None) -> QuoteTotals:
        """Totals for a draft (default: the current one) under current settings."""
        draft = draft or self._draft
        settings = self._settings.get()
        return compute_totals(
            draft.items,
            draft.discount,
            show_discount=settings.show_discount,
            clamp_percent=settings.clamp_percent_discount,
        )

    def check_stock(self) -> StockDecision:
        """Validate the whole current draft against current stock."""
        settings = self._settings.get()
        return self._reconciler(settings).validate(
            self._draft.items,
            self._catalog.stock_levels(),
            settings.allow_quote_without_stock,
        )

    def commit(self) -> CommitResult:
        """
        Commit the current draft as a saved quote and deduct stock.

        Returns:
            CommitResult - committed with the SavedQuote, or rejected with the
            stock decision (draft stays editable)

        Raises:
            MissingClientError: If no client is selected
            EmptyQuoteError: If the draft has no items
            ClientNotFoundError: If the selected client no longer exists
            StorageError: If the data file cannot be written
        """
        draft = self._draft

        if draft.is_committed:
            saved = self.find_quote(draft.saved_quote_id or "")
            if saved is None:
                raise DraftCommittedError(draft.saved_quote_id)
            return CommitResult.create_committed(saved, already_committed=True)

        if not draft.client_id:
            raise MissingClientError()
        if not draft.items:
            raise EmptyQuoteError()
        client = self._clients.get(draft.client_id)

        settings = self._settings.get()
        reconciler = self._reconciler(settings)

        draft.state = DraftState.VALIDATING
        decision = reconciler.validate(
            draft.items,
            self._catalog.stock_levels(),
            settings.allow_quote_without_stock,
        )
        if decision.rejected:
            draft.state = DraftState.DRAFTING
            return CommitResult.create_rejected(decision)

        quote = SavedQuote.from_draft(str(uuid.uuid4()), draft, client, self.totals(draft))
        quote_logger = get_quote_logger(quote.id)

        if self._autosaver:
            self._autosaver.cancel()

        try:
            with self._store.transaction() as data:
                records = data.get(PRODUCTS) or []
                new_levels = reconciler.apply(draft.items, self._catalog.stock_levels(records))
                data[PRODUCTS] = self._catalog.with_stock_levels(new_levels, records)
                data[SAVED_QUOTES] = (data.get(SAVED_QUOTES) or []) + [quote.to_dict()]
                data.pop(QUOTE_DRAFT, None)
        except StorageError:
            draft.state = DraftState.DRAFTING
            quote_logger.error("Quote commit failed; nothing was saved")
            raise

        draft.state = DraftState.COMMITTED
        draft.saved_quote_id = quote.id

        quote_logger.info(
            f"Quote committed for {client.name}: {len(quote.items)} lines, "
            f"total {quote.totals.final_total}"
        )
        return CommitResult.create_committed(quote)

    # =========================================================================
    # SAVED QUOTES
    # =========================================================================

    def saved_quotes(self) -> List[SavedQuote]:
        return [SavedQuote.from_dict(record) for record in self._store.get_list(SAVED_QUOTES)]

    def list_quotes(self, name: str = "", date_text: str = "", value: str = "") -> List[SavedQuote]:
        """Saved quotes matching the filters, newest first."""
        return filter_quotes(self.saved_quotes(), name, date_text, value)

    def find_quote(self, quote_id: str) -> Optional[SavedQuote]:
        for quote in self.saved_quotes():
            if quote.id == quote_id:
                return quote
        return None

    def get_quote(self, quote_id: str) -> SavedQuote:
        """
        Raises:
            QuoteNotFoundError: If no saved quote has this id
        """
        quote = self.find_quote(quote_id)
        if quote is None:
            raise QuoteNotFoundError(quote_id)
        return quote

    def delete_quote(self, quote_id: str) -> None:
        """
        Delete a saved quote. Its stock is not given back.

        Raises:
            QuoteNotFoundError: If no saved quote has this id
        """
        with self._store.transaction() as data:
            records = data.get(SAVED_QUOTES) or []
            remaining = [r for r in records if r.get("id") != quote_id]
            if len(remaining) == len(records):
                raise QuoteNotFoundError(quote_id)
            data[SAVED_QUOTES] = remaining

        get_quote_logger(quote_id).info("Quote deleted")

    def edit_quote(self, quote_id: str) -> QuoteDraft:
        """
        Reopen a saved quote as the current draft.

        The saved quote is removed from history. Whether its stock is given
        back depends on the stock_on_edit setting; quote removal and any
        stock change happen in one transaction.

        Raises:
            QuoteNotFoundError: If no saved quote has this id
        """
        settings = self._settings.get()
        reconciler = self._reconciler(settings)

        with self._store.transaction() as data:
            records = data.get(SAVED_QUOTES) or []
            match = next((r for r in records if r.get("id") == quote_id), None)
            if match is None:
                raise QuoteNotFoundError(quote_id)

            quote = SavedQuote.from_dict(match)
            data[SAVED_QUOTES] = [r for r in records if r.get("id") != quote_id]

            products = data.get(PRODUCTS) or []
            levels = reconciler.stock_after_edit(quote.items, self._catalog.stock_levels(products))
            data[PRODUCTS] = self._catalog.with_stock_levels(levels, products)

        self._draft = quote.to_draft()
        get_quote_logger(quote_id).info(
            f"Quote reopened for editing (stock on edit: {settings.stock_on_edit.value})"
        )
        self._touched()
        return self._draft

    def whatsapp_url(self, quote_id: str, currency: str = "R$", country_code: str = "55") -> str:
        """
        wa.me link that opens a chat with the quote's client.

        Raises:
            QuoteNotFoundError: If no saved quote has this id
            ClientPhoneMissingError: If the client has no usable phone
        """
        quote = self.get_quote(quote_id)
        return build_whatsapp_url(
            quote,
            company_name=self._settings.get_company_info().name,
            show_discount=self._settings.get().show_discount,
            currency=currency,
            country_code=country_code,
        )
