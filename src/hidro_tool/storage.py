"""Persistencia SQLite (clave/valor) para configuracion y estado de hidratacion."""

from __future__ import annotations

import json
import logging
import math
import sqlite3
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from dateutil import parser as date_parser
from dateutil import tz

from hidro_tool.model import DailyLedger, Goals, IntakeEntry, PersistedState, Profile
from hidro_tool.validation import as_bool

logger = logging.getLogger(__name__)

STATE_KEY = "hydration_data"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS app_config (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class StorageError(Exception):
    """Base error of the persistence layer."""


class StorageUnavailable(StorageError):
    """The store cannot be opened, read or written."""


class StorageQuotaExceeded(StorageError):
    """The serialized state does not fit in the store."""


class PersistentStore(Protocol):
    """Durable storage of the whole ``PersistedState``."""

    def load(self) -> PersistedState: ...

    def save(self, state: PersistedState) -> None: ...


@dataclass(frozen=True)
class AppConfig:
    """Configuracion persistida de la app."""

    export_dir: str
    weight_unit: str


class SQLiteStore:
    """Repositorio SQLite para la app."""

    def __init__(self, db_path: Path, *, max_bytes: int | None = None) -> None:
        """Create store and ensure schema exists.

        Raises:
            StorageUnavailable: If the database cannot be created or opened.
        """
        self._db_path = db_path
        self._max_bytes = max_bytes
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._init_schema()
        except (OSError, sqlite3.Error) as exc:
            raise StorageUnavailable(str(exc)) from exc

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    def _read_value(self, key: str) -> str | None:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT value FROM app_config WHERE key = ?", (key,)
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageUnavailable(str(exc)) from exc
        if row is None:
            return None
        return str(row["value"])

    def _write_values(self, payload: dict[str, str]) -> None:
        try:
            with self._connect() as conn:
                conn.executemany(
                    """
                    INSERT INTO app_config(key, value) VALUES(?, ?)
                    ON CONFLICT(key) DO UPDATE SET value=excluded.value
                    """,
                    payload.items(),
                )
                conn.commit()
        except sqlite3.OperationalError as exc:
            if "full" in str(exc).lower():
                raise StorageQuotaExceeded(str(exc)) from exc
            raise StorageUnavailable(str(exc)) from exc
        except sqlite3.Error as exc:
            raise StorageUnavailable(str(exc)) from exc

    def load(self) -> PersistedState:
        """Devuelve el estado guardado, o el estado por defecto si falta o esta roto."""
        return decode_state(self._read_value(STATE_KEY))

    def save(self, state: PersistedState) -> None:
        """Guarda el estado completo como JSON bajo una sola clave.

        Raises:
            StorageQuotaExceeded: If the payload exceeds ``max_bytes`` or the
                database is full.
            StorageUnavailable: On any other database failure.
        """
        text = encode_state(state)
        _check_quota(text, self._max_bytes)
        self._write_values({STATE_KEY: text})

    def load_config(self) -> AppConfig:
        """Devuelve configuracion guardada o defaults."""
        defaults = {"export_dir": "", "weight_unit": "kg"}
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    "SELECT key, value FROM app_config WHERE key != ?", (STATE_KEY,)
                ).fetchall()
        except sqlite3.Error as exc:
            raise StorageUnavailable(str(exc)) from exc
        values = {row["key"]: row["value"] for row in rows}
        merged = {**defaults, **values}
        unit = merged["weight_unit"] if merged["weight_unit"] in ("kg", "lbs") else "kg"
        return AppConfig(export_dir=merged["export_dir"], weight_unit=unit)

    def save_config(self, config: AppConfig) -> None:
        """Guarda la configuracion en tabla key/value."""
        self._write_values(
            {"export_dir": config.export_dir, "weight_unit": config.weight_unit}
        )


class MemoryStore:
    """In-memory store with the same contract; keeps the JSON text only."""

    def __init__(
        self, *, max_bytes: int | None = None, text: str | None = None
    ) -> None:
        self._max_bytes = max_bytes
        self._text = text

    def load(self) -> PersistedState:
        return decode_state(self._text)

    def save(self, state: PersistedState) -> None:
        text = encode_state(state)
        _check_quota(text, self._max_bytes)
        self._text = text


def _check_quota(text: str, max_bytes: int | None) -> None:
    if max_bytes is None:
        return
    size = len(text.encode("utf-8"))
    if size > max_bytes:
        raise StorageQuotaExceeded(f"{size} bytes > {max_bytes} bytes")


def encode_state(state: PersistedState) -> str:
    """Serialize state with the stable ``userProfile/dailyGoals/tracking`` shape."""
    return json.dumps(state_to_dict(state), ensure_ascii=True, sort_keys=False)


def decode_state(raw: str | None) -> PersistedState:
    """Parse stored JSON; missing or corrupt data yields the default state."""
    if raw is None:
        return PersistedState()
    try:
        parsed: Any = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Estado guardado ilegible; se usan valores por defecto")
        return PersistedState()
    if not isinstance(parsed, dict):
        logger.warning("Estado guardado con formato inesperado; se ignora")
        return PersistedState()
    return state_from_dict(parsed)


def state_to_dict(state: PersistedState) -> dict[str, Any]:
    return {
        "userProfile": _profile_to_dict(state.profile) if state.profile else {},
        "dailyGoals": _goals_to_dict(state.goals) if state.goals else {},
        "tracking": {
            day: {"waterIntake": [_entry_to_dict(e) for e in ledger.entries]}
            for day, ledger in sorted(state.ledgers.items())
        },
    }


def state_from_dict(data: dict[str, Any]) -> PersistedState:
    tracking = data.get("tracking")
    ledgers: dict[str, DailyLedger] = {}
    if isinstance(tracking, dict):
        for day, raw_ledger in tracking.items():
            ledger = _ledger_from_dict(str(day), raw_ledger)
            if ledger is not None:
                ledgers[ledger.day] = ledger
    return PersistedState(
        profile=_profile_from_dict(data.get("userProfile")),
        goals=_goals_from_dict(data.get("dailyGoals")),
        ledgers=ledgers,
    )


def _profile_to_dict(profile: Profile) -> dict[str, Any]:
    out: dict[str, Any] = {
        "weight": profile.weight_kg,
        "age": profile.age,
        "gender": profile.gender,
        "activityLevel": profile.activity_level,
        "exerciseDuration": profile.exercise_minutes,
        "exerciseIntensity": profile.exercise_intensity,
        "climate": profile.climate,
        "altitude": profile.altitude,
        "pregnant": profile.pregnant,
        "breastfeeding": profile.breastfeeding,
        "illness": profile.illness,
        "kidneyDisease": profile.kidney_disease,
    }
    if profile.last_updated is not None:
        out["lastUpdated"] = profile.last_updated
    return out


def _profile_from_dict(raw: object) -> Profile | None:
    if not isinstance(raw, dict) or not raw:
        return None
    try:
        weight = float(raw["weight"])
        age = int(float(str(raw["age"])))
    except (KeyError, TypeError, ValueError, OverflowError):
        logger.warning("Perfil guardado incompleto; se descarta")
        return None
    if not math.isfinite(weight) or weight <= 0:
        logger.warning("Peso guardado invalido (%r); se descarta el perfil", weight)
        return None
    last_updated = raw.get("lastUpdated")
    return Profile(
        weight_kg=weight,
        age=age,
        gender=str(raw.get("gender") or "male"),
        activity_level=str(raw.get("activityLevel") or "sedentary"),
        exercise_minutes=_int_or(raw.get("exerciseDuration"), 0),
        exercise_intensity=str(raw.get("exerciseIntensity") or "medium"),
        climate=str(raw.get("climate") or "moderate"),
        altitude=str(raw.get("altitude") or "sea-level"),
        pregnant=as_bool(raw.get("pregnant", False)),
        breastfeeding=as_bool(raw.get("breastfeeding", False)),
        illness=as_bool(raw.get("illness", False)),
        kidney_disease=as_bool(raw.get("kidneyDisease", False)),
        last_updated=str(last_updated) if last_updated is not None else None,
    )


def _goals_to_dict(goals: Goals) -> dict[str, int]:
    return {
        "water": goals.water_ml,
        "sodium": goals.sodium_mg,
        "potassium": goals.potassium_mg,
        "magnesium": goals.magnesium_mg,
        "calcium": goals.calcium_mg,
    }


def _goals_from_dict(raw: object) -> Goals | None:
    if not isinstance(raw, dict):
        return None
    water = _int_or(raw.get("water"), 0)
    if water <= 0:
        return None
    return Goals(
        water_ml=water,
        sodium_mg=_int_or(raw.get("sodium"), 0),
        potassium_mg=_int_or(raw.get("potassium"), 0),
        magnesium_mg=_int_or(raw.get("magnesium"), 0),
        calcium_mg=_int_or(raw.get("calcium"), 0),
    )


def _entry_to_dict(entry: IntakeEntry) -> dict[str, Any]:
    return {
        "id": entry.entry_id,
        "amount": entry.amount_ml,
        "time": entry.time_label,
        "timestamp": entry.timestamp.isoformat(),
    }


def legacy_entry_id(day: str, position: int, timestamp: str, amount: int) -> str:
    """Deterministic id for stored entries that predate entry ids.

    The same stored entry gets the same id on every load, so it can be
    deleted by the id a previous load handed out.
    """
    name = f"{day}/{position}/{timestamp}/{amount}"
    return uuid.uuid5(uuid.NAMESPACE_URL, name).hex


def _entry_from_dict(day: str, position: int, raw: object) -> IntakeEntry | None:
    if not isinstance(raw, dict):
        return None
    amount = _int_or(raw.get("amount"), 0)
    if amount <= 0:
        return None
    raw_timestamp = str(raw.get("timestamp"))
    try:
        timestamp = date_parser.isoparse(raw_timestamp)
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=tz.tzlocal())
    except (TypeError, ValueError):
        return None
    entry_id = raw.get("id")
    if not entry_id:
        entry_id = legacy_entry_id(day, position, raw_timestamp, amount)
    return IntakeEntry(
        entry_id=str(entry_id),
        amount_ml=amount,
        time_label=str(raw.get("time") or timestamp.strftime("%H:%M")),
        timestamp=timestamp,
    )


def _ledger_from_dict(day: str, raw: object) -> DailyLedger | None:
    if not isinstance(raw, dict):
        return None
    items = raw.get("waterIntake")
    if not isinstance(items, list):
        items = []
    entries = [_entry_from_dict(day, pos, item) for pos, item in enumerate(items)]
    return DailyLedger(day=day, entries=tuple(e for e in entries if e is not None))


def _int_or(value: object, default: int) -> int:
    """Whole number from stored JSON; non-numeric or non-finite gives ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(float(str(value)))
    except (ValueError, OverflowError):
        return default
