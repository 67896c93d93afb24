"""
Unit tests for the data models.

Focus on parsing of stored records (legacy formats, bad values) and on the
invariants enforced at construction.
"""

from datetime import date
from decimal import Decimal

import pytest

from core.exceptions import DraftCommittedError, InvalidQuantityError
from models.catalog import ItemKind, Product, Service, catalog_item_from_dict
from models.client import Client, JURIDICAL
from models.quote import (
    CommitResult,
    DiscountKind,
    DiscountSpec,
    DraftState,
    LineItem,
    QuoteDraft,
    QuoteTotals,
    SavedQuote,
    coerce_quantity,
    parse_quantity,
)
from models.settings import CompanyInfo, QuoteSettings
from models.stock import StockDecision, StockOnEditPolicy


# Fixtures

@pytest.fixture
def product():
    return Product(id="p1", code="CB", name="Cable", sell_price=Decimal("10"), stock=5)


@pytest.fixture
def client():
    return Client(id="c1", name="Maria Silva", phone="(11) 98765-4321")


class TestCatalogItems:
    """Test catalog record parsing."""

    def test_legacy_record_without_type_is_product(self):
        """Records written before services existed have no type and numeric prices."""
        item = catalog_item_from_dict({
            "id": "p1", "code": "CB", "name": "Cable",
            "costPrice": 4.5, "sellPrice": 10, "stock": "7",
        })

        assert isinstance(item, Product)
        assert item.kind == ItemKind.PRODUCT
        assert item.sell_price == Decimal("10")
        assert item.cost_price == Decimal("4.5")
        assert item.stock == 7

    def test_service_record(self):
        item = catalog_item_from_dict({"id": "s1", "type": "service", "name": "Install", "sellPrice": "50,00"})

        assert isinstance(item, Service)
        assert item.sell_price == Decimal("50.00")
        assert not hasattr(item, "stock")

    def test_missing_id_gets_one(self):
        assert catalog_item_from_dict({"name": "New"}).id

    def test_bad_stock_is_zero(self):
        assert catalog_item_from_dict({"id": "p", "stock": "lots"}).stock == 0

    def test_to_dict_stores_prices_as_strings(self, product):
        data = product.to_dict()
        assert data["type"] == "product"
        assert data["sellPrice"] == "10"
        assert catalog_item_from_dict(data) == product

    def test_unit_margin(self):
        item = Product(id="p", code="", name="", sell_price=Decimal("10"), cost_price=Decimal("4"))
        assert item.unit_margin == Decimal("6")


class TestClient:
    """Test client records."""

    def test_tax_id_by_kind(self):
        person = Client(id="1", name="A", cpf="123")
        company = Client(id="2", name="B", kind=JURIDICAL, cnpj="456")
        assert person.tax_id == "123"
        assert company.tax_id == "456"

    def test_unknown_kind_falls_back_to_physical(self):
        assert Client.from_dict({"id": "1", "name": "A", "type": "alien"}).kind == "physical"

    def test_camel_case_keys(self, client):
        data = client.to_dict()
        assert "zipCode" in data and "stateRegistration" in data
        assert Client.from_dict(data) == client


class TestLineItem:
    """Test quantity rules."""

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True, "2"])
    def test_invalid_quantity_rejected(self, product, quantity):
        with pytest.raises(InvalidQuantityError):
            LineItem(product, quantity)

    def test_line_total(self, product):
        assert LineItem(product, 3).line_total == Decimal("30")

    @pytest.mark.parametrize("raw,expected", [("3", 3), (3.0, 3), (" 12 ", 12)])
    def test_parse_quantity(self, raw, expected):
        assert parse_quantity(raw) == expected

    @pytest.mark.parametrize("raw", ["0", "-2", "1.5", "abc", None, "inf", False])
    def test_parse_quantity_invalid(self, raw):
        with pytest.raises(InvalidQuantityError):
            parse_quantity(raw)

    @pytest.mark.parametrize("raw,expected", [("7", 7), (0, 1), ("-4", 1), ("abc", 1), (None, 1), ("inf", 1)])
    def test_coerce_quantity(self, raw, expected):
        assert coerce_quantity(raw) == expected


class TestDraft:
    """Test the editable draft."""

    def test_put_line_replaces_same_item(self, product):
        draft = QuoteDraft()
        draft.put_line(LineItem(product, 1))
        draft.put_line(LineItem(product, 4))

        assert len(draft.items) == 1
        assert draft.items[0].quantity == 4

    def test_committed_draft_is_frozen(self, product):
        draft = QuoteDraft(state=DraftState.COMMITTED, saved_quote_id="q1")

        with pytest.raises(DraftCommittedError) as exc_info:
            draft.put_line(LineItem(product, 1))
        assert exc_info.value.details == {"quote_id": "q1"}

        with pytest.raises(DraftCommittedError):
            draft.remove_line("p1")

    def test_stored_draft_reopens_as_drafting(self, product):
        draft = QuoteDraft(
            client_id="c1",
            items=[LineItem(product, 2)],
            notes="Valid for 7 days",
            discount=DiscountSpec(DiscountKind.PERCENT, Decimal("10")),
            quote_date=date(2025, 3, 5),
            state=DraftState.COMMITTED,
        )
        data = draft.to_dict()
        assert data["selectedClientId"] == "c1"
        assert data["discountType"] == "percent"

        restored = QuoteDraft.from_dict(data)
        assert restored.state == DraftState.DRAFTING
        assert restored.items == draft.items
        assert restored.discount == draft.discount
        assert restored.quote_date == date(2025, 3, 5)


class TestSavedQuote:
    """Test saved quote records."""

    def test_from_draft_and_back(self, product, client):
        draft = QuoteDraft(client_id="c1", items=[LineItem(product, 2)], quote_date=date(2025, 3, 5))
        totals = QuoteTotals(subtotal=Decimal("20"), final_total=Decimal("20"))

        quote = SavedQuote.from_draft("q1", draft, client, totals)
        assert quote.created_at.date() == date(2025, 3, 5)

        data = quote.to_dict()
        assert data["finalTotal"] == "20"
        assert data["client"]["name"] == "Maria Silva"

        loaded = SavedQuote.from_dict(data)
        assert loaded.totals.final_total == Decimal("20")
        assert loaded.product_lines == quote.items

        reopened = loaded.to_draft()
        assert reopened.client_id == "c1"
        assert reopened.state == DraftState.DRAFTING

    def test_commit_result_dict(self, product, client):
        quote = SavedQuote.from_draft("q1", QuoteDraft(items=[LineItem(product, 1)]), client, QuoteTotals())
        assert CommitResult.create_committed(quote).to_dict()["committed"] is True

        rejected = CommitResult.create_rejected(StockDecision.reject(()))
        assert rejected.to_dict()["quote"] is None
        assert rejected.to_dict()["stock"]["accepted"] is False


class TestSettings:
    """Test settings merging."""

    def test_defaults(self):
        settings = QuoteSettings()
        assert settings.allow_quote_without_stock is True
        assert settings.clamp_percent_discount is True
        assert settings.stock_on_edit == StockOnEditPolicy.KEEP_DEDUCTED

    def test_merge_camel_and_snake_keys(self):
        settings = QuoteSettings().merged_with({
            "allowQuoteWithoutStock": "false",
            "stock_on_edit": "restore",
            "sectors": ["Tools", "Electrical", "Tools", " "],
            "fontFamily": "serif",
        })
        assert settings.allow_quote_without_stock is False
        assert settings.stock_on_edit == StockOnEditPolicy.RESTORE
        assert settings.sectors == ["Electrical", "Tools"]

    def test_single_sector_string_is_not_split(self):
        settings = QuoteSettings().merged_with({"sectors": "Tools"})
        assert settings.sectors == ["Tools"]

    def test_company_info_keys(self):
        info = CompanyInfo.from_dict({"name": "Acme", "zipCode": "01000-000"})
        assert info.to_dict()["zipCode"] == "01000-000"
