"""Persistence hooks for sequence documents.

Documents never write to storage directly. After each edit they pull a
coalescing trigger (SaveDebouncer); when its window elapses, the current
document state is handed to a Persistence implementation.

Example:
    >>> store = MemoryStore()
    >>> doc = SequenceDocument("ATG", persistence=store)
    >>> doc.insert_bases("A", 0)
    >>> doc.flush()
    >>> store.saved[doc.id]["sequence"]
    'AATG'
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)


# =============================================================================
# Interface
# =============================================================================


class Persistence(Protocol):
    """Best-effort sink for serialized document state."""

    def save(self, state: dict[str, Any]) -> None: ...


class MemoryStore:
    """Persistence implementation keeping the latest state per document.

    Attributes:
        saved: Latest state keyed by document id.
        save_count: Number of save calls received.
    """

    def __init__(self) -> None:
        self.saved: dict[str, dict[str, Any]] = {}
        self.save_count = 0
        self._lock = threading.Lock()

    def save(self, state: dict[str, Any]) -> None:
        with self._lock:
            self.saved[state["id"]] = state
            self.save_count += 1


# =============================================================================
# Coalescing Trigger
# =============================================================================


class SaveDebouncer:
    """Coalesce rapid save requests into at most one call per window.

    The first trigger() arms a timer; triggers arriving before it fires
    are absorbed. The callback reads state when it runs, so the single
    call reflects every edit made during the window.

    One instance is meant to live as long as its owner.

    Attributes:
        wait: Window length in seconds.
        call_count: Number of times the callback has run.
    """

    def __init__(self, callback: Callable[[], None], wait: float = 0.1) -> None:
        """Initialize the debouncer.

        Args:
            callback: Zero-argument function performing the save.
            wait: Window length in seconds.
        """
        self._callback = callback
        self.wait = wait
        self.call_count = 0
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        """True if a call is scheduled and has not run yet."""
        with self._lock:
            return self._timer is not None

    def trigger(self) -> None:
        """Request a call, coalescing with any already scheduled one."""
        with self._lock:
            if self._timer is not None:
                return
            self._generation += 1
            self._timer = threading.Timer(self.wait, self._fire, args=(self._generation,))
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> None:
        """Run a pending call immediately, if there is one."""
        with self._lock:
            timer, self._timer = self._timer, None
        if timer is None:
            return
        timer.cancel()
        self._run()

    def cancel(self) -> None:
        """Drop a pending call without running it."""
        with self._lock:
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    def _fire(self, generation: int) -> None:
        with self._lock:
            if self._timer is None or generation != self._generation:
                # Flushed or cancelled after the timer thread woke up
                return
            self._timer = None
        self._run()

    def _run(self) -> None:
        self.call_count += 1
        try:
            self._callback()
        except Exception:
            logger.exception("Debounced save failed")
