"""
Fired-occurrence ledger: remembers which reminder occurrences were already dispatched this session.
"""
import logging
import threading
from datetime import date
from typing import NamedTuple, Set

logger = logging.getLogger("reminder_ledger")


class OccurrenceKey(NamedTuple):
    """One firing opportunity: a task's window opening at a minute on a date."""

    task_id: str
    trigger_minute: int
    date: date


class FiredLedger:
    """In-memory set of fired occurrence keys. Never persisted."""

    def __init__(self):
        self._keys: Set[OccurrenceKey] = set()
        self._lock = threading.RLock()

    def has_fired(self, key: OccurrenceKey) -> bool:
        with self._lock:
            return key in self._keys

    def mark_fired(self, key: OccurrenceKey) -> bool:
        """Record the key. Returns False if it was already present."""
        with self._lock:
            if key in self._keys:
                return False
            self._keys.add(key)
        logger.debug("Marked fired: %s", key)
        return True

    def prune_before(self, cutoff: date) -> int:
        """Drop keys dated strictly before ``cutoff``; they can never match again."""
        with self._lock:
            stale = {k for k in self._keys if k.date < cutoff}
            self._keys -= stale
        if stale:
            logger.info("Pruned %d fired reminder key(s) older than %s", len(stale), cutoff)
        return len(stale)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._keys

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)
