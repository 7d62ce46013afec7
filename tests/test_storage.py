from __future__ import annotations

import json
import sqlite3
from datetime import datetime
from pathlib import Path

import pytest
from dateutil import tz

from hidro_tool.model import DailyLedger, Goals, IntakeEntry, PersistedState, Profile
from hidro_tool.storage import (
    STATE_KEY,
    AppConfig,
    MemoryStore,
    SQLiteStore,
    StorageQuotaExceeded,
    StorageUnavailable,
    decode_state,
    encode_state,
)

_TZ = tz.gettz("America/Argentina/Buenos_Aires")
_LEGACY_ENTRY = {
    "amount": 250,
    "time": "09:00",
    "timestamp": "2026-10-19T12:00:00.000Z",
}


def _state() -> PersistedState:
    entry = IntakeEntry(
        entry_id="a1",
        amount_ml=250,
        time_label="08:30",
        timestamp=datetime(2026, 10, 19, 8, 30, 12, tzinfo=_TZ),
    )
    return PersistedState(
        profile=Profile(
            weight_kg=72.5,
            age=41,
            gender="female",
            activity_level="moderate",
            exercise_minutes=45,
            exercise_intensity="high",
            climate="hot",
            altitude="moderate",
            breastfeeding=True,
            last_updated="2026-10-19T08:00:00-03:00",
        ),
        goals=Goals(4321, 2900, 3100, 320, 1000),
        ledgers={
            "2026-10-18": DailyLedger(day="2026-10-18", entries=()),
            "2026-10-19": DailyLedger(day="2026-10-19", entries=(entry,)),
        },
    )


def test_sqlite_round_trip(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    assert store.load() == PersistedState()

    state = _state()
    store.save(state)
    assert store.load() == state

    reopened = SQLiteStore(tmp_path / "app.sqlite3")
    assert reopened.load() == state


def test_memory_round_trip() -> None:
    store = MemoryStore()
    store.save(_state())
    assert store.load() == _state()


def test_wire_shape_is_stable() -> None:
    payload = json.loads(encode_state(_state()))
    assert set(payload) == {"userProfile", "dailyGoals", "tracking"}
    assert payload["userProfile"]["activityLevel"] == "moderate"
    assert payload["userProfile"]["kidneyDisease"] is False
    assert payload["dailyGoals"] == {
        "water": 4321,
        "sodium": 2900,
        "potassium": 3100,
        "magnesium": 320,
        "calcium": 1000,
    }
    first = payload["tracking"]["2026-10-19"]["waterIntake"][0]
    assert first["amount"] == 250
    assert first["time"] == "08:30"


def test_default_state_encodes_empty_sections() -> None:
    payload = json.loads(encode_state(PersistedState()))
    assert payload == {"userProfile": {}, "dailyGoals": {}, "tracking": {}}


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        "[1, 2]",
        "null",
        '"text"',
        '{"userProfile": {}, "dailyGoals": {"water": 1e400}, "tracking": {}}',
        '{"dailyGoals": {"water": Infinity}}',
        '{"dailyGoals": {"water": NaN}}',
        '{"userProfile": {"weight": 70, "age": 1e400}}',
        '{"userProfile": {"weight": Infinity, "age": 30}}',
        '{"tracking": {"2026-10-19": {"waterIntake": [{"amount": 1e400}]}}}',
    ],
)
def test_corrupt_data_falls_back_to_default(raw: str) -> None:
    state = decode_state(raw)
    assert state.profile is None
    assert state.goals is None
    assert all(not ledger.entries for ledger in state.ledgers.values())


def test_corrupt_row_in_sqlite(tmp_path: Path) -> None:
    db = tmp_path / "app.sqlite3"
    store = SQLiteStore(db)
    with sqlite3.connect(db) as conn:
        conn.execute(
            "INSERT INTO app_config(key, value) VALUES(?, ?)", (STATE_KEY, "{oops")
        )
        conn.commit()
    assert store.load() == PersistedState()


def test_legacy_entries_without_id_are_loaded() -> None:
    raw = json.dumps(
        {
            "userProfile": {},
            "dailyGoals": {"water": 2450},
            "tracking": {
                "2026-10-19": {
                    "waterIntake": [
                        {
                            "amount": 250,
                            "time": "09:00",
                            "timestamp": "2026-10-19T12:00:00.000Z",
                        },
                        {
                            "amount": 500,
                            "time": "10:00",
                            "timestamp": "2026-10-19T10:00:00",
                        },
                        {"amount": "bad", "time": "11:00", "timestamp": "x"},
                    ]
                },
                "2026-10-18": "garbage",
            },
        }
    )
    state = decode_state(raw)
    assert state.profile is None
    assert state.goals is not None
    assert state.goals.water_ml == 2450
    assert list(state.ledgers) == ["2026-10-19"]
    entries = state.ledgers["2026-10-19"].entries
    assert [e.amount_ml for e in entries] == [250, 500]
    assert all(e.entry_id for e in entries)
    assert all(e.timestamp.tzinfo is not None for e in entries)


def test_incomplete_profile_is_dropped() -> None:
    state = decode_state(json.dumps({"userProfile": {"age": 30}}))
    assert state.profile is None


def test_sqlite_quota(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3", max_bytes=100)
    store.save(PersistedState())
    with pytest.raises(StorageQuotaExceeded):
        store.save(_state())
    assert store.load() == PersistedState()


def test_sqlite_unavailable_when_path_is_blocked(tmp_path: Path) -> None:
    blocker = tmp_path / "file.txt"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(StorageUnavailable):
        SQLiteStore(blocker / "app.sqlite3")


def test_store_config(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    assert store.load_config() == AppConfig(export_dir="", weight_unit="kg")
    store.save(_state())
    store.save_config(AppConfig(export_dir="/data/out", weight_unit="lbs"))
    assert store.load_config() == AppConfig(export_dir="/data/out", weight_unit="lbs")
    assert store.load() == _state()


def test_saving_default_state_keeps_config(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    store.save_config(AppConfig(export_dir="/x", weight_unit="kg"))
    store.save(_state())
    store.save(PersistedState())
    assert store.load() == PersistedState()
    assert store.load_config().export_dir == "/x"


def test_legacy_ids_are_stable_across_loads() -> None:
    raw = json.dumps(
        {
            "tracking": {
                "2026-10-19": {
                    "waterIntake": [dict(_LEGACY_ENTRY), dict(_LEGACY_ENTRY)]
                }
            }
        }
    )
    first = decode_state(raw).ledgers["2026-10-19"].entries
    second = decode_state(raw).ledgers["2026-10-19"].entries
    assert [e.entry_id for e in first] == [e.entry_id for e in second]
    assert first[0].entry_id != first[1].entry_id


def test_stored_flag_strings_are_parsed() -> None:
    raw = json.dumps(
        {
            "userProfile": {
                "weight": 70,
                "age": 30,
                "kidneyDisease": "false",
                "pregnant": "true",
                "illness": 0,
            }
        }
    )
    profile = decode_state(raw).profile
    assert profile is not None
    assert profile.kidney_disease is False
    assert profile.pregnant is True
    assert profile.illness is False
