"""
Unit tests for the saved quote and catalog filters.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from models.catalog import Product, Service
from models.client import Client
from models.quote import QuoteTotals, SavedQuote
from modules.search import filter_catalog, filter_quotes


# Fixtures

def make_quote(quote_id, client_name, day, total):
    return SavedQuote(
        id=quote_id,
        created_at=datetime(2025, 3, day, tzinfo=timezone.utc),
        client=Client(id=f"c-{quote_id}", name=client_name),
        items=(),
        totals=QuoteTotals(final_total=Decimal(total)),
    )


@pytest.fixture
def quotes():
    return [
        make_quote("q1", "Maria Silva", 1, "75"),
        make_quote("q2", "João Souza", 10, "1250.5"),
        make_quote("q3", "Mariana Costa", 5, "80"),
    ]


@pytest.fixture
def items():
    return [
        Product(id="p1", code="CB25", name="Cable", sell_price=Decimal("10"), cost_price=Decimal("4"), sector="Electrical"),
        Product(id="p2", code="BR", name="Breaker", sell_price=Decimal("25"), cost_price=Decimal("15")),
        Service(id="s1", code="INST", name="Installation", sell_price=Decimal("50"), sector="Electrical"),
    ]


class TestFilterQuotes:
    """Test saved quote filters."""

    def test_newest_first(self, quotes):
        assert [q.id for q in filter_quotes(quotes)] == ["q2", "q3", "q1"]

    def test_name_case_insensitive(self, quotes):
        assert [q.id for q in filter_quotes(quotes, name="MARIA")] == ["q3", "q1"]

    def test_date_iso_and_local_formats(self, quotes):
        assert [q.id for q in filter_quotes(quotes, date_text="2025-03-10")] == ["q2"]
        assert [q.id for q in filter_quotes(quotes, date_text="05/03/2025")] == ["q3"]

    def test_value_matches_two_decimals(self, quotes):
        assert [q.id for q in filter_quotes(quotes, value="1250.50")] == ["q2"]
        assert [q.id for q in filter_quotes(quotes, value="75.00")] == ["q1"]

    def test_filters_combine(self, quotes):
        assert filter_quotes(quotes, name="maria", value="1250") == []


class TestFilterCatalog:
    """Test catalog filters."""

    def test_text_matches_name_code_sector(self, items):
        assert [i.id for i in filter_catalog(items, "cb25")] == ["p1"]
        assert [i.id for i in filter_catalog(items, "electrical")] == ["p1", "s1"]

    def test_sell_price_range(self, items):
        assert [i.id for i in filter_catalog(items, min_sell="20")] == ["p2", "s1"]
        assert [i.id for i in filter_catalog(items, max_sell="20")] == ["p1"]

    def test_cost_range_excludes_services(self, items):
        assert [i.id for i in filter_catalog(items, max_cost="10")] == ["p1"]

    def test_blank_bounds_ignored(self, items):
        assert len(filter_catalog(items, min_sell="", max_cost=None)) == 3
