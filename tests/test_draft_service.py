"""
Unit tests for the debounced draft autosaver.

Timer-based tests use a short delay and wait on the store rather than
sleeping for a fixed time.
"""

import time
from decimal import Decimal
from unittest.mock import patch

import pytest

from core.exceptions import StorageError
from models.catalog import Product
from models.quote import LineItem, QuoteDraft
from services.draft_service import DraftAutosaver, STATUS_IDLE, STATUS_SAVED, STATUS_SAVING
from services.storage import JsonStore, QUOTE_DRAFT


# Fixtures

@pytest.fixture
def store():
    return JsonStore()


@pytest.fixture
def autosaver(store):
    saver = DraftAutosaver(store, delay_seconds=0.05)
    yield saver
    saver.cancel()


@pytest.fixture
def draft():
    cable = Product(id="p1", code="CB", name="Cable", sell_price=Decimal("10"), stock=5)
    return QuoteDraft(client_id="c1", items=[LineItem(cable, 2)], notes="first")


def wait_for(condition, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return False


class TestDraftAutosaver:
    """Test scheduling, flushing and loading."""

    def test_initial_status(self, autosaver):
        assert autosaver.status == STATUS_IDLE
        assert not autosaver.has_pending
        assert not autosaver.exists()

    def test_schedule_writes_after_delay(self, autosaver, store, draft):
        autosaver.schedule(draft)
        assert autosaver.status == STATUS_SAVING

        assert wait_for(lambda: store.get(QUOTE_DRAFT) is not None)
        assert wait_for(lambda: autosaver.status == STATUS_SAVED)
        assert store.get(QUOTE_DRAFT)["notes"] == "first"

    def test_burst_of_edits_writes_last_snapshot(self, store, draft):
        autosaver = DraftAutosaver(store, delay_seconds=0.2)

        with patch.object(store, "set", wraps=store.set) as set_spy:
            for note in ("a", "b", "c"):
                draft.notes = note
                autosaver.schedule(draft)

            assert wait_for(lambda: autosaver.status == STATUS_SAVED)

        set_spy.assert_called_once()
        assert store.get(QUOTE_DRAFT)["notes"] == "c"

    def test_snapshot_taken_at_schedule_time(self, autosaver, store, draft):
        autosaver.schedule(draft)
        draft.notes = "changed later"
        autosaver.flush()
        assert store.get(QUOTE_DRAFT)["notes"] == "first"

    def test_flush_without_pending(self, autosaver):
        assert autosaver.flush() is False

    def test_flush_failure_raises(self, autosaver, store, draft):
        autosaver.schedule(draft)
        with patch.object(store, "set", side_effect=StorageError("disk full")):
            with pytest.raises(StorageError):
                autosaver.flush()
        assert autosaver.status == STATUS_IDLE

    def test_cancel_drops_pending(self, autosaver, store, draft):
        autosaver.schedule(draft)
        autosaver.cancel()

        time.sleep(0.15)
        assert store.get(QUOTE_DRAFT) is None
        assert autosaver.status == STATUS_IDLE

    def test_clear_removes_stored(self, autosaver, store, draft):
        autosaver.schedule(draft)
        autosaver.flush()
        assert autosaver.exists()

        autosaver.clear()
        assert not autosaver.exists()

    def test_load(self, autosaver, draft):
        assert autosaver.load() is None
        autosaver.schedule(draft)
        autosaver.flush()

        loaded = autosaver.load()
        assert loaded.client_id == "c1"
        assert loaded.items == draft.items

    def test_load_unreadable_draft(self, autosaver, store):
        store.set(QUOTE_DRAFT, {"quoteItems": [{"product": {"id": "p1"}, "quantity": 0}]})
        assert autosaver.load() is None

    def test_shutdown_flushes(self, autosaver, store, draft):
        autosaver.delay_seconds = 60
        autosaver.schedule(draft)
        autosaver.shutdown()
        assert store.get(QUOTE_DRAFT) is not None
