"""Acceso al estado persistido: retencion, recuperacion por cuota y modo memoria."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import date, timedelta

from hidro_tool.model import PersistedState
from hidro_tool.storage import (
    MemoryStore,
    PersistentStore,
    StorageQuotaExceeded,
    StorageUnavailable,
)

logger = logging.getLogger(__name__)

RETENTION_DAYS = 30


def retention_cutoff(today: date, days: int = RETENTION_DAYS) -> str:
    return (today - timedelta(days=days)).isoformat()


def prune_ledgers(
    state: PersistedState,
    today: date,
    days: int = RETENTION_DAYS,
) -> PersistedState:
    """Drop ledgers whose day key sorts before ``today - days``.

    Day keys are ``YYYY-MM-DD`` strings, so lexical order is date order.
    """
    cutoff = retention_cutoff(today, days)
    kept = {day: ledger for day, ledger in state.ledgers.items() if day >= cutoff}
    if len(kept) == len(state.ledgers):
        return state
    logger.info("Retention sweep removed %d ledger(s)", len(state.ledgers) - len(kept))
    return replace(state, ledgers=kept)


class StateRepository:
    """Load/save gateway shared by the tracker and the session.

    ``lock`` must be held around every load-modify-save sequence.
    """

    def __init__(self, store: PersistentStore) -> None:
        self._store = store
        self._memory_only = False
        self.lock = threading.RLock()

    @property
    def memory_only(self) -> bool:
        return self._memory_only

    def load(self) -> PersistedState:
        try:
            return self._store.load()
        except StorageUnavailable as exc:
            self._fall_back_to_memory(exc, PersistedState())
            return PersistedState()

    def save(self, state: PersistedState, today: date) -> bool:
        """Persist ``state``.

        On quota errors the retention sweep runs once and the save is retried.
        When the store is unavailable the session continues in memory.

        Returns:
            True when the state reached the store.
        """
        try:
            self._store.save(state)
            return True
        except StorageQuotaExceeded:
            logger.warning("Storage limit reached. Clearing old data...")
        except StorageUnavailable as exc:
            self._fall_back_to_memory(exc, state)
            return False

        pruned = prune_ledgers(state, today)
        try:
            self._store.save(pruned)
            return True
        except StorageQuotaExceeded:
            logger.error("Failed to save even after cleanup")
            return False
        except StorageUnavailable as exc:
            self._fall_back_to_memory(exc, pruned)
            return False

    def _fall_back_to_memory(self, exc: Exception, state: PersistedState) -> None:
        if self._memory_only:
            return
        logger.warning("Storage not available - data not persisted: %s", exc)
        store = MemoryStore()
        store.save(state)
        self._store = store
        self._memory_only = True
