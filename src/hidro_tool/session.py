"""Controlador de sesion: une calculo, seguimiento, persistencia y avisos."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace

from hidro_tool.calculator import calculate_electrolytes, calculate_water
from hidro_tool.consistency import check_consistency
from hidro_tool.model import (
    Electrolytes,
    Goals,
    IntakeEntry,
    PersistedState,
    Profile,
    Recommendation,
)
from hidro_tool.notifications import NotificationCenter
from hidro_tool.persistence import StateRepository, prune_ledgers
from hidro_tool.recommendations import generate_recommendations
from hidro_tool.storage import PersistentStore
from hidro_tool.tracker import (
    Clock,
    IntakeResult,
    TrackingStateMachine,
    local_now,
    newest_first,
)
from hidro_tool.validation import ValidationError, parse_profile

logger = logging.getLogger(__name__)

GOAL_REACHED_MESSAGE = "Congratulations! You've reached your daily water goal!"
MEMORY_ONLY_MESSAGE = "Storage not available - data will not be saved."
SAVE_FAILED_MESSAGE = "Could not save your data. Storage limit reached."


@dataclass(frozen=True)
class CalculationResult:
    """Outcome of one calculate action."""

    profile: Profile | None = None
    water_ml: int = 0
    electrolytes: Electrolytes | None = None
    recommendations: list[Recommendation] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: dict[str, ValidationError] = field(default_factory=dict)
    saved: bool = False

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view for the presentation and report collaborators."""

    day: str
    profile: Profile | None
    goals: Goals | None
    recommendations: tuple[Recommendation, ...]
    warnings: tuple[str, ...]
    entries: tuple[IntakeEntry, ...]
    total_ml: int
    goal_ml: int
    progress_percentage: float
    memory_only: bool = False


class HydrationSession:
    """Single-session controller.

    Owns the notification registry and the tracker for the lifetime of the
    session; ``close`` tears both down.
    """

    def __init__(self, store: PersistentStore, clock: Clock | None = None) -> None:
        self._clock = clock or local_now
        self.repository = StateRepository(store)
        self.tracker = TrackingStateMachine(self.repository, self._clock)
        self.notifications = NotificationCenter()
        self._closed = False

    def __enter__(self) -> HydrationSession:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def close(self) -> None:
        self.notifications.clear()
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def calculate(self, form: Mapping[str, object]) -> CalculationResult:
        """Validate the form, compute goals and persist profile + goals.

        Validation errors are returned and nothing is saved. A successful
        calculation also runs the 30-day retention sweep.
        """
        parsed = parse_profile(form)
        if parsed.profile is None:
            for error in parsed.errors.values():
                self.notifications.show(error.message, "error")
            return CalculationResult(errors=parsed.errors)

        warnings = check_consistency(parsed.profile)
        for warning in warnings:
            self.notifications.show(warning, "warning")

        water_ml = calculate_water(parsed.profile)
        electrolytes = calculate_electrolytes(parsed.profile)
        recommendations = generate_recommendations(
            parsed.profile, water_ml, electrolytes
        )

        now = self._clock()
        profile = replace(parsed.profile, last_updated=now.isoformat())
        with self.repository.lock:
            state = self.repository.load()
            state = replace(
                state,
                profile=profile,
                goals=Goals.from_targets(water_ml, electrolytes),
            )
            saved = self.repository.save(prune_ledgers(state, now.date()), now.date())
        self._report_save(saved)

        logger.info("Calculated %d ml water goal", water_ml)
        self.notifications.show("Requirements calculated successfully!", "success")
        return CalculationResult(
            profile=profile,
            water_ml=water_ml,
            electrolytes=electrolytes,
            recommendations=recommendations,
            warnings=warnings,
            saved=saved,
        )

    def add_intake(self, amount_ml: object) -> IntakeResult:
        result = self.tracker.add_intake(amount_ml)
        if result.error is not None:
            self.notifications.show(result.error.message, "error")
            return result
        self._report_save(result.saved)
        amount = result.entry.amount_ml if result.entry is not None else 0
        self.notifications.show(f"Added {amount}ml to your intake", "success")
        if result.goal_reached:
            self.notifications.show(GOAL_REACHED_MESSAGE, "success")
        return result

    def delete_intake(self, entry_id: str) -> IntakeResult:
        return self._after_delete(self.tracker.delete_intake(entry_id))

    def delete_intake_at(self, index: int) -> IntakeResult:
        return self._after_delete(self.tracker.delete_intake_at(index))

    def _after_delete(self, result: IntakeResult) -> IntakeResult:
        if result.error is not None:
            self.notifications.show(result.error.message, "error")
            return result
        self._report_save(result.saved)
        self.notifications.show("Entry deleted", "info")
        return result

    def reset_today(self) -> bool:
        saved = self.tracker.reset_today()
        self._report_save(saved)
        self.notifications.show("Tracking reset successfully", "success")
        return saved

    def reset_all(self) -> bool:
        """Forget profile, goals and every ledger."""
        with self.repository.lock:
            saved = self.repository.save(PersistedState(), self._clock().date())
        self._report_save(saved)
        self.notifications.show("All data cleared", "success")
        return saved

    def on_resume(self) -> bool:
        return self.tracker.on_resume()

    def snapshot(self) -> SessionSnapshot:
        """Collect profile, goals, recommendations and today's progress."""
        with self.repository.lock:
            state = self.repository.load()
            day = self.tracker.today()
        ledger = state.ledgers.get(day)
        recommendations: list[Recommendation] = []
        warnings: list[str] = []
        if state.profile is not None and state.goals is not None:
            recommendations = generate_recommendations(
                state.profile, state.goals.water_ml, state.goals.electrolytes
            )
            warnings = check_consistency(state.profile)
        goal = state.goals.water_ml if state.goals is not None else 0
        entries = newest_first(ledger.entries) if ledger is not None else []
        total = sum(entry.amount_ml for entry in entries)
        progress = min(total / goal * 100, 100.0) if goal > 0 else 0.0
        return SessionSnapshot(
            day=day,
            profile=state.profile,
            goals=state.goals,
            recommendations=tuple(recommendations),
            warnings=tuple(warnings),
            entries=tuple(entries),
            total_ml=total,
            goal_ml=goal,
            progress_percentage=progress,
            memory_only=self.repository.memory_only,
        )

    def _report_save(self, saved: bool) -> None:
        if saved:
            return
        if self.repository.memory_only:
            self.notifications.show(MEMORY_ONLY_MESSAGE, "warning")
        else:
            self.notifications.show(SAVE_FAILED_MESSAGE, "error")
