"""
Debounced draft autosave.

Every change to the draft calls schedule(). The draft is written to the
store only after the user has been idle for delay_seconds: each schedule()
cancels the pending timer and starts a new one, so a burst of edits causes
one write.

Thread Model:
    Request thread - schedule(), cancel(), flush(), load()
    Timer thread   - named "Autosave", fires once per idle period and writes

The pending payload is a plain dict snapshot taken in schedule(), so the
timer thread never reads the live draft object.

Usage:
    autosaver = DraftAutosaver(store, delay_seconds=1.0)
    autosaver.schedule(draft)   # after every edit
    autosaver.status            # "saving" -> "saved"
    autosaver.shutdown()        # at exit: write anything pending
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Optional

from core.exceptions import QuoteDeskError, StorageError
from models.quote import QuoteDraft
from services.storage import JsonStore, QUOTE_DRAFT
from logging_config import get_logger, set_thread_name


# Module logger
logger = get_logger(__name__)

STATUS_IDLE = ""
STATUS_SAVING = "saving"
STATUS_SAVED = "saved"


class DraftAutosaver:
    """
    Writes the draft to the store after a quiet period.

    Attributes:
        delay_seconds: Idle time before a scheduled draft is written
    """

    def __init__(self, store: JsonStore, delay_seconds: float = 1.0):
        self._store = store
        self.delay_seconds = delay_seconds

        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[Dict[str, Any]] = None
        self._status = STATUS_IDLE

    @property
    def status(self) -> str:
        """"saving" while a write is pending, "saved" after it lands, else ""."""
        return self._status

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def schedule(self, draft: QuoteDraft) -> None:
        """Snapshot the draft and (re)start the debounce timer."""
        payload = draft.to_dict()
        with self._lock:
            self._cancel_timer()
            self._pending = payload
            self._status = STATUS_SAVING

            self._timer = threading.Timer(self.delay_seconds, self._on_timer)
            self._timer.name = "Autosave"
            self._timer.daemon = True
            self._timer.start()

        logger.debug(f"Draft autosave scheduled in {self.delay_seconds}s")

    def flush(self) -> bool:
        """
        Write the pending draft now.

        Returns:
            True if a draft was written, False if nothing was pending

        Raises:
            StorageError: If the store cannot be written
        """
        with self._lock:
            self._cancel_timer()
            payload = self._pending
            if payload is None:
                return False

            self._pending = None
            try:
                self._store.set(QUOTE_DRAFT, payload)
            except StorageError:
                self._status = STATUS_IDLE
                raise

            self._status = STATUS_SAVED

        logger.debug("Draft saved")
        return True

    def cancel(self) -> None:
        """Drop any pending write without touching the stored draft."""
        with self._lock:
            self._cancel_timer()
            self._pending = None
            self._status = STATUS_IDLE

    def clear(self) -> None:
        """Cancel pending writes and remove the stored draft."""
        self.cancel()
        self._store.remove(QUOTE_DRAFT)
        logger.debug("Stored draft cleared")

    def exists(self) -> bool:
        return self._store.get(QUOTE_DRAFT) is not None

    def load(self) -> Optional[QuoteDraft]:
        """
        Load the stored draft.

        Returns:
            The draft, or None if there is none or it cannot be parsed
        """
        data = self._store.get(QUOTE_DRAFT)
        if not data:
            return None
        try:
            return QuoteDraft.from_dict(data)
        except (QuoteDeskError, AttributeError, TypeError) as e:
            logger.warning(f"Stored draft is unreadable and was ignored: {e}")
            return None

    def shutdown(self) -> None:
        """Write anything pending. Call at application exit."""
        if self.flush():
            logger.info("Pending draft written on shutdown")

    def _on_timer(self) -> None:
        set_thread_name("Autosave")
        try:
            self.flush()
        except StorageError as e:
            # No caller to report to on the timer thread
            logger.error(f"Draft autosave failed: {e}")

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
