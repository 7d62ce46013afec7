from __future__ import annotations

from datetime import date, datetime

from dateutil import tz

from hidro_tool.model import DailyLedger, Goals, IntakeEntry, PersistedState
from hidro_tool.persistence import StateRepository, prune_ledgers, retention_cutoff
from hidro_tool.storage import (
    MemoryStore,
    StorageUnavailable,
    encode_state,
)

_TZ = tz.gettz("America/Argentina/Buenos_Aires")
_TODAY = date(2026, 10, 19)


def _ledger(day: str, amounts: list[int]) -> DailyLedger:
    entries = tuple(
        IntakeEntry(
            entry_id=f"{day}-{i}",
            amount_ml=amount,
            time_label="12:00",
            timestamp=datetime.fromisoformat(f"{day}T12:00:00").replace(tzinfo=_TZ),
        )
        for i, amount in enumerate(amounts)
    )
    return DailyLedger(day=day, entries=entries)


def _state_with_history() -> PersistedState:
    days = ["2026-08-01", "2026-09-18", "2026-09-19", "2026-10-19"]
    return PersistedState(
        goals=Goals(2450, 2000, 3400, 420, 1000),
        ledgers={day: _ledger(day, [250, 500, 750]) for day in days},
    )


class _BrokenStore:
    def load(self) -> PersistedState:
        raise StorageUnavailable("disk gone")

    def save(self, state: PersistedState) -> None:
        raise StorageUnavailable("disk gone")


def test_retention_cutoff() -> None:
    assert retention_cutoff(_TODAY) == "2026-09-19"


def test_prune_ledgers_keeps_cutoff_day() -> None:
    pruned = prune_ledgers(_state_with_history(), _TODAY)
    assert sorted(pruned.ledgers) == ["2026-09-19", "2026-10-19"]
    assert pruned.goals == _state_with_history().goals


def test_prune_ledgers_returns_same_state_when_nothing_old() -> None:
    state = PersistedState(ledgers={"2026-10-19": _ledger("2026-10-19", [100])})
    assert prune_ledgers(state, _TODAY) is state


def test_save_recovers_from_quota_by_pruning() -> None:
    state = _state_with_history()
    pruned = prune_ledgers(state, _TODAY)
    store = MemoryStore(max_bytes=len(encode_state(pruned).encode("utf-8")))
    repo = StateRepository(store)

    assert repo.save(state, _TODAY) is True
    assert sorted(store.load().ledgers) == ["2026-09-19", "2026-10-19"]
    assert not repo.memory_only


def test_save_reports_failure_when_still_over_quota() -> None:
    store = MemoryStore(max_bytes=10)
    repo = StateRepository(store)
    assert repo.save(_state_with_history(), _TODAY) is False
    assert store.load() == PersistedState()


def test_unavailable_store_switches_to_memory() -> None:
    repo = StateRepository(_BrokenStore())
    state = _state_with_history()

    assert repo.save(state, _TODAY) is False
    assert repo.memory_only
    assert repo.load() == state

    assert repo.save(PersistedState(), _TODAY) is True
    assert repo.load() == PersistedState()


def test_unavailable_load_returns_default() -> None:
    repo = StateRepository(_BrokenStore())
    assert repo.load() == PersistedState()
    assert repo.memory_only
