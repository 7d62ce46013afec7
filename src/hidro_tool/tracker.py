"""Registro diario de ingesta de agua contra el objetivo guardado."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import datetime

from dateutil import tz

from hidro_tool.model import DailyLedger, IntakeEntry, LedgerState, PersistedState
from hidro_tool.persistence import StateRepository
from hidro_tool.validation import ValidationError, validate_intake_amount

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def local_now() -> datetime:
    """Current local time, timezone-aware."""
    return datetime.now(tz=tz.tzlocal())


def newest_first(entries: Iterable[IntakeEntry]) -> list[IntakeEntry]:
    """Entries by timestamp, newest first; ties keep the later insertion first."""
    indexed = list(enumerate(entries))
    indexed.sort(key=lambda item: (item[1].timestamp, item[0]), reverse=True)
    return [entry for _, entry in indexed]


@dataclass(frozen=True)
class IntakeResult:
    """Outcome of a ledger operation.

    ``goal_reached`` is only true on the call that moves the total from
    below the goal to at or above it.
    """

    total_ml: int
    entry: IntakeEntry | None = None
    goal_reached: bool = False
    saved: bool = False
    error: ValidationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class TrackingStateMachine:
    """Owns today's intake ledger.

    "Today" is resolved from the clock on every access; there is no timer.
    State is read from and written back to the repository per call.
    """

    def __init__(self, repository: StateRepository, clock: Clock | None = None) -> None:
        self._repo = repository
        self._clock = clock or local_now
        self._active_day = self.today()

    def today(self) -> str:
        return self._clock().date().isoformat()

    def _sync_day(self, now: datetime | None = None) -> str:
        day = (now or self._clock()).date().isoformat()
        if day != self._active_day:
            logger.info("New day detected (%s -> %s)", self._active_day, day)
            self._active_day = day
        return day

    def on_resume(self) -> bool:
        """Handle the app becoming visible again. True if the day changed."""
        previous = self._active_day
        return self._sync_day() != previous

    def _today_ledger(
        self, state: PersistedState, now: datetime | None = None
    ) -> DailyLedger | None:
        return state.ledgers.get(self._sync_day(now))

    def today_ledger(self) -> DailyLedger | None:
        return self._today_ledger(self._repo.load())

    def ledger_state(self) -> LedgerState:
        if self.today_ledger() is None:
            return LedgerState.ABSENT
        return LedgerState.ACTIVE

    def goal_ml(self) -> int:
        goals = self._repo.load().goals
        return goals.water_ml if goals is not None else 0

    def get_total(self) -> int:
        ledger = self.today_ledger()
        return ledger.total_ml if ledger is not None else 0

    def display_entries(self) -> list[IntakeEntry]:
        """Today's entries newest first; ties keep the later insertion first."""
        ledger = self.today_ledger()
        return newest_first(ledger.entries) if ledger is not None else []

    def progress_percentage(self) -> float:
        goal = self.goal_ml()
        if goal <= 0:
            return 0.0
        return min(self.get_total() / goal * 100, 100.0)

    def add_intake(self, amount_ml: object) -> IntakeResult:
        """Append one entry to today's ledger, creating the ledger if absent.

        Not idempotent: every successful call appends a new entry.
        """
        checked = validate_intake_amount(amount_ml)
        now = self._clock()
        with self._repo.lock:
            state = self._repo.load()
            ledger = self._today_ledger(state, now)
            previous = ledger.total_ml if ledger is not None else 0
            if checked.error is not None:
                return IntakeResult(total_ml=previous, error=checked.error)

            entry = IntakeEntry(
                entry_id=uuid.uuid4().hex,
                amount_ml=int(checked.value or 0),
                time_label=now.strftime("%H:%M"),
                timestamp=now,
            )
            day = now.date().isoformat()
            entries = ledger.entries if ledger is not None else ()
            updated = DailyLedger(day=day, entries=(*entries, entry))
            new_state = replace(state, ledgers={**state.ledgers, day: updated})
            saved = self._repo.save(new_state, now.date())

        goal = state.goals.water_ml if state.goals is not None else 0
        total = updated.total_ml
        reached = goal > 0 and previous < goal <= total
        if reached:
            logger.info("Daily goal of %d ml reached", goal)
        return IntakeResult(
            total_ml=total, entry=entry, goal_reached=reached, saved=saved
        )

    def delete_intake(self, entry_id: str) -> IntakeResult:
        """Remove the entry with ``entry_id`` from today's ledger."""
        with self._repo.lock:
            state = self._repo.load()
            ledger = self._today_ledger(state)
            entries = ledger.entries if ledger is not None else ()
            for index, entry in enumerate(entries):
                if entry.entry_id == entry_id:
                    return self._remove(state, index)
        return IntakeResult(
            total_ml=sum(e.amount_ml for e in entries),
            error=ValidationError("entry_id", f"Unknown entry: {entry_id}"),
        )

    def delete_intake_at(self, index: int) -> IntakeResult:
        """Remove the entry at ``index`` in insertion (storage) order."""
        with self._repo.lock:
            state = self._repo.load()
            ledger = self._today_ledger(state)
            count = len(ledger.entries) if ledger is not None else 0
            if not 0 <= index < count:
                return IntakeResult(
                    total_ml=ledger.total_ml if ledger is not None else 0,
                    error=ValidationError("index", f"No entry at position {index}"),
                )
            return self._remove(state, index)

    def _remove(self, state: PersistedState, index: int) -> IntakeResult:
        ledger = state.ledgers[self._active_day]
        removed = ledger.entries[index]
        # Vaciar el registro no lo elimina: sigue activo con cero entradas.
        updated = replace(
            ledger, entries=ledger.entries[:index] + ledger.entries[index + 1 :]
        )
        new_state = replace(state, ledgers={**state.ledgers, ledger.day: updated})
        saved = self._repo.save(new_state, self._clock().date())
        return IntakeResult(total_ml=updated.total_ml, entry=removed, saved=saved)

    def reset_today(self) -> bool:
        """Drop today's ledger. Goals are left untouched."""
        with self._repo.lock:
            state = self._repo.load()
            day = self._sync_day()
            ledgers = {k: v for k, v in state.ledgers.items() if k != day}
            new_state = replace(state, ledgers=ledgers)
            return self._repo.save(new_state, self._clock().date())
