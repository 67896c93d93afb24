"""
Unit tests for the quote service.

Covers the draft lifecycle, the stock checks on add/update, commit
atomicity, saved quote history and the edit stock policy.
"""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from core.exceptions import (
    ClientPhoneMissingError,
    DraftCommittedError,
    EmptyQuoteError,
    InvalidQuantityError,
    MissingClientError,
    QuoteNotFoundError,
    StorageError,
    ClientNotFoundError,
)
from models.quote import DiscountKind, DraftState
from services.catalog_service import CatalogService
from services.client_service import ClientService
from services.quote_service import QuoteService
from services.settings_service import SettingsService
from services.storage import JsonStore, QUOTE_DRAFT, SAVED_QUOTES


# Fixtures

@pytest.fixture
def store():
    return JsonStore()


@pytest.fixture
def catalog(store):
    return CatalogService(store)


@pytest.fixture
def clients(store):
    return ClientService(store)


@pytest.fixture
def settings(store):
    return SettingsService(store)


@pytest.fixture
def cable(catalog):
    return catalog.add({"code": "CB", "name": "Cable", "sellPrice": "10", "stock": 5})


@pytest.fixture
def installation(catalog):
    return catalog.add({"type": "service", "code": "INST", "name": "Installation", "sellPrice": "50"})


@pytest.fixture
def maria(clients):
    return clients.add({"name": "Maria Silva", "phone": "(11) 98765-4321"})


@pytest.fixture
def service(store, catalog, clients, settings):
    return QuoteService(store, catalog, clients, settings)


@pytest.fixture
def strict_service(service, settings):
    """Quote service that refuses quotes beyond stock on hand."""
    settings.update({"allowQuoteWithoutStock": False})
    return service


@pytest.fixture
def filled_service(service, cable, installation, maria):
    """3 x Cable (10.00) + 1 x Installation (50.00) for Maria, 5.00 off."""
    service.select_client(maria.id)
    service.add_item(cable.id, 3)
    service.add_item(installation.id, 1)
    service.set_discount("fixed", "5")
    return service


class TestDraftEditing:
    """Test draft mutations."""

    def test_new_draft_uses_default_notes(self, service, settings):
        settings.update({"defaultNotes": "Valid for 7 days"})
        draft = service.new_draft()

        assert draft.notes == "Valid for 7 days"
        assert draft.quote_date == date.today()
        assert draft.items == []

    def test_new_draft_removes_stored_draft(self, service, store):
        store.set(QUOTE_DRAFT, {"quoteItems": []})
        service.new_draft()
        assert store.get(QUOTE_DRAFT) is None

    def test_select_unknown_client(self, service):
        with pytest.raises(ClientNotFoundError):
            service.select_client("nope")

    def test_add_item_merges_lines(self, service, cable):
        service.add_item(cable.id, 2)
        service.add_item(cable.id, "3")

        assert len(service.draft.items) == 1
        assert service.draft.items[0].quantity == 5

    def test_add_item_invalid_quantity(self, service, cable):
        with pytest.raises(InvalidQuantityError):
            service.add_item(cable.id, 0)
        assert service.draft.items == []

    def test_add_item_over_stock_allowed_by_default(self, service, cable):
        decision = service.add_item(cable.id, 10)
        assert decision.accepted
        assert service.draft.items[0].quantity == 10

    def test_add_item_over_stock_rejected_when_strict(self, strict_service, cable):
        strict_service.add_item(cable.id, 4)
        decision = strict_service.add_item(cable.id, 2)

        assert decision.rejected
        assert decision.shortfalls[0].requested == 6
        assert decision.shortfalls[0].available == 5
        assert strict_service.draft.items[0].quantity == 4

    def test_services_ignore_stock(self, strict_service, installation):
        assert strict_service.add_item(installation.id, 99).accepted

    def test_update_quantity_minimum_one(self, service, cable):
        service.add_item(cable.id, 3)
        service.update_quantity(cable.id, 0)
        assert service.draft.items[0].quantity == 1

        service.update_quantity(cable.id, "junk")
        assert service.draft.items[0].quantity == 1

    def test_update_quantity_over_stock_unchanged(self, strict_service, cable):
        strict_service.add_item(cable.id, 2)
        decision = strict_service.update_quantity(cable.id, 8)

        assert decision.rejected
        assert strict_service.draft.items[0].quantity == 2

    def test_remove_item(self, filled_service, cable):
        assert filled_service.remove_item(cable.id) is True
        assert filled_service.remove_item(cable.id) is False
        assert len(filled_service.draft.items) == 1

    def test_totals(self, filled_service):
        totals = filled_service.totals()
        assert totals.subtotal == Decimal("80")
        assert totals.final_total == Decimal("75")

    def test_totals_respect_settings(self, filled_service, settings):
        settings.update({"showDiscount": False})
        assert filled_service.totals().final_total == Decimal("80")

        settings.update({"showDiscount": True, "clampPercentDiscount": False})
        filled_service.set_discount("percent", "110")
        assert filled_service.totals().final_total == Decimal("-8")

    def test_autosave_scheduled_when_enabled(self, store, catalog, clients, settings, cable):
        autosaver = MagicMock()
        settings.update({"autoSave": True})
        service = QuoteService(store, catalog, clients, settings, autosaver)

        service.add_item(cable.id, 1)
        service.set_notes("Hello")

        assert autosaver.schedule.call_count == 2

    def test_autosave_not_scheduled_when_disabled(self, store, catalog, clients, settings, cable):
        autosaver = MagicMock()
        service = QuoteService(store, catalog, clients, settings, autosaver)
        service.add_item(cable.id, 1)
        autosaver.schedule.assert_not_called()


class TestCommit:
    """Test committing the draft."""

    def test_commit_requires_client(self, service, cable):
        service.add_item(cable.id, 1)
        with pytest.raises(MissingClientError):
            service.commit()

    def test_commit_requires_items(self, service, maria):
        service.select_client(maria.id)
        with pytest.raises(EmptyQuoteError):
            service.commit()

    def test_commit_saves_quote_and_deducts_stock(self, filled_service, catalog, cable, store):
        store.set(QUOTE_DRAFT, filled_service.draft.to_dict())

        result = filled_service.commit()

        assert result.committed
        assert not result.already_committed
        assert result.quote.totals.final_total == Decimal("75")
        assert result.quote.client.name == "Maria Silva"
        assert catalog.get(cable.id).stock == 2
        assert store.get(QUOTE_DRAFT) is None
        assert len(store.get(SAVED_QUOTES)) == 1
        assert filled_service.draft.state == DraftState.COMMITTED
        assert filled_service.draft.saved_quote_id == result.quote.id

    def test_commit_twice_deducts_once(self, filled_service, catalog, cable):
        first = filled_service.commit()
        second = filled_service.commit()

        assert second.committed
        assert second.already_committed
        assert second.quote.id == first.quote.id
        assert catalog.get(cable.id).stock == 2
        assert len(filled_service.saved_quotes()) == 1

    def test_committed_draft_cannot_change(self, filled_service, cable):
        filled_service.commit()
        with pytest.raises(DraftCommittedError):
            filled_service.add_item(cable.id, 1)
        with pytest.raises(DraftCommittedError):
            filled_service.set_notes("late")

    def test_commit_rejected_when_strict(self, filled_service, settings, catalog, cable):
        filled_service.update_quantity(cable.id, 5)
        catalog.update(cable.id, {"code": "CB", "name": "Cable", "sellPrice": "10", "stock": 1})
        settings.update({"allowQuoteWithoutStock": False})

        result = filled_service.commit()

        assert not result.committed
        assert result.decision.shortfalls[0].available == 1
        assert filled_service.draft.state == DraftState.DRAFTING
        assert catalog.get(cable.id).stock == 1
        assert filled_service.saved_quotes() == []

    def test_storage_failure_commits_nothing(self, filled_service, catalog, cable, store):
        with patch.object(store, "_write", side_effect=StorageError("disk full")):
            with pytest.raises(StorageError):
                filled_service.commit()

        assert filled_service.draft.state == DraftState.DRAFTING
        assert catalog.get(cable.id).stock == 5
        assert filled_service.saved_quotes() == []

    def test_commit_cancels_pending_autosave(self, store, catalog, clients, settings, cable, maria):
        autosaver = MagicMock()
        service = QuoteService(store, catalog, clients, settings, autosaver)
        service.select_client(maria.id)
        service.add_item(cable.id, 1)

        service.commit()
        autosaver.cancel.assert_called_once()


class TestSavedQuotes:
    """Test history, delete and edit."""

    def test_list_and_get(self, filled_service):
        quote = filled_service.commit().quote

        assert [q.id for q in filled_service.list_quotes(name="maria")] == [quote.id]
        assert filled_service.list_quotes(name="joão") == []
        assert filled_service.list_quotes(value="75.00")[0].id == quote.id
        assert filled_service.get_quote(quote.id) == quote

    def test_get_missing(self, service):
        with pytest.raises(QuoteNotFoundError):
            service.get_quote("nope")

    def test_delete_does_not_restore_stock(self, filled_service, catalog, cable):
        quote = filled_service.commit().quote
        filled_service.delete_quote(quote.id)

        assert filled_service.saved_quotes() == []
        assert catalog.get(cable.id).stock == 2
        with pytest.raises(QuoteNotFoundError):
            filled_service.delete_quote(quote.id)

    def test_edit_keeps_stock_deducted_by_default(self, filled_service, catalog, cable):
        quote = filled_service.commit().quote
        draft = filled_service.edit_quote(quote.id)

        assert draft.state == DraftState.DRAFTING
        assert draft.discount.kind == DiscountKind.FIXED
        assert len(draft.items) == 2
        assert filled_service.saved_quotes() == []
        assert catalog.get(cable.id).stock == 2

        # Re-saving deducts again under the keep policy
        filled_service.commit()
        assert catalog.get(cable.id).stock == -1

    def test_edit_restores_stock_under_restore_policy(self, filled_service, settings, catalog, cable):
        settings.update({"stockOnEdit": "restore"})
        quote = filled_service.commit().quote

        filled_service.edit_quote(quote.id)
        assert catalog.get(cable.id).stock == 5

        filled_service.commit()
        assert catalog.get(cable.id).stock == 2

    def test_edit_missing_quote(self, service):
        with pytest.raises(QuoteNotFoundError):
            service.edit_quote("nope")

    def test_whatsapp_url(self, filled_service, settings):
        settings.set_company_info({"name": "Acme Electric"})
        quote = filled_service.commit().quote

        url = filled_service.whatsapp_url(quote.id)
        assert url.startswith("https://wa.me/5511987654321?text=")
        assert "Acme%20Electric" in url

    def test_whatsapp_url_without_phone(self, service, clients, cable):
        client = clients.add({"name": "No Phone"})
        service.select_client(client.id)
        service.add_item(cable.id, 1)
        quote = service.commit().quote

        with pytest.raises(ClientPhoneMissingError):
            service.whatsapp_url(quote.id)


class TestStoredDraft:
    """Test loading the draft left by a previous session."""

    def test_load_draft(self, filled_service, store, catalog, clients, settings):
        store.set(QUOTE_DRAFT, filled_service.draft.to_dict())

        fresh = QuoteService(store, catalog, clients, settings)
        draft = fresh.load_draft()

        assert draft is fresh.draft
        assert len(draft.items) == 2
        assert fresh.totals().final_total == Decimal("75")

    def test_load_without_stored_draft(self, service):
        assert service.load_draft() is None
