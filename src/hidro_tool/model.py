"""Modelos tipados para perfil, objetivos diarios y registro de ingesta."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

GENDERS: tuple[str, ...] = ("male", "female")
ACTIVITY_LEVELS: tuple[str, ...] = (
    "sedentary",
    "light",
    "moderate",
    "active",
    "athlete",
)
EXERCISE_INTENSITIES: tuple[str, ...] = ("low", "medium", "high")
CLIMATES: tuple[str, ...] = ("cool", "moderate", "hot", "very-hot")
ALTITUDES: tuple[str, ...] = ("sea-level", "moderate", "high")

SEVERITY_INFO = "info"
SEVERITY_WARNING = "warning"


@dataclass(frozen=True)
class Profile:
    """Physiological and environmental inputs of the single active user.

    Categorical fields are plain strings; values outside the known tuples
    are accepted and resolve to neutral factors in the calculator.
    """

    weight_kg: float
    age: int
    gender: str = "male"
    activity_level: str = "sedentary"
    exercise_minutes: int = 0
    exercise_intensity: str = "medium"
    climate: str = "moderate"
    altitude: str = "sea-level"
    pregnant: bool = False
    breastfeeding: bool = False
    illness: bool = False
    kidney_disease: bool = False
    last_updated: str | None = None

    @property
    def condition_count(self) -> int:
        flags = (self.pregnant, self.breastfeeding, self.illness, self.kidney_disease)
        return sum(1 for flag in flags if flag)


@dataclass(frozen=True)
class Electrolytes:
    """Daily electrolyte targets in mg."""

    sodium: int
    potassium: int
    magnesium: int
    calcium: int


@dataclass(frozen=True)
class Goals:
    """Daily goals derived from one profile calculation."""

    water_ml: int
    sodium_mg: int
    potassium_mg: int
    magnesium_mg: int
    calcium_mg: int

    @classmethod
    def from_targets(cls, water_ml: int, electrolytes: Electrolytes) -> Goals:
        return cls(
            water_ml=water_ml,
            sodium_mg=electrolytes.sodium,
            potassium_mg=electrolytes.potassium,
            magnesium_mg=electrolytes.magnesium,
            calcium_mg=electrolytes.calcium,
        )

    @property
    def electrolytes(self) -> Electrolytes:
        return Electrolytes(
            sodium=self.sodium_mg,
            potassium=self.potassium_mg,
            magnesium=self.magnesium_mg,
            calcium=self.calcium_mg,
        )


@dataclass(frozen=True)
class Recommendation:
    """One guidance message (severity is ``info`` or ``warning``)."""

    severity: str
    text: str


@dataclass(frozen=True)
class IntakeEntry:
    """One fluid intake event. Immutable; removed only by deletion."""

    entry_id: str
    amount_ml: int
    time_label: str
    timestamp: datetime


@dataclass(frozen=True)
class DailyLedger:
    """Insertion-ordered intake entries of one local calendar day."""

    day: str
    entries: tuple[IntakeEntry, ...] = ()

    @property
    def total_ml(self) -> int:
        return sum(entry.amount_ml for entry in self.entries)


class LedgerState(Enum):
    """Lifecycle of a day ledger."""

    ABSENT = "absent"
    ACTIVE = "active"


@dataclass(frozen=True)
class PersistedState:
    """Everything the store keeps: profile, goals and day-keyed ledgers."""

    profile: Profile | None = None
    goals: Goals | None = None
    ledgers: dict[str, DailyLedger] = field(default_factory=dict)
