"""Conversión de unidades de peso."""

from __future__ import annotations

KG_TO_LBS = 2.20462
LBS_TO_KG = 0.453592

WEIGHT_UNITS: tuple[str, ...] = ("kg", "lbs")


def kg_to_lbs(value: float) -> float:
    return value * KG_TO_LBS


def lbs_to_kg(value: float) -> float:
    return value * LBS_TO_KG


def to_kg(value: float, unit: str) -> float:
    """Normalize a weight to kilograms. Unknown units are taken as kg."""
    if unit == "lbs":
        return lbs_to_kg(value)
    return value
