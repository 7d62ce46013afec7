"""Cálculo de requerimientos diarios de agua y electrolitos."""

from __future__ import annotations

import math

from hidro_tool.model import Electrolytes, Goals, Profile

BASE_WATER_PER_KG = 35  # ml por kg
EXERCISE_WATER_PER_HOUR = 500  # ml por hora

MIN_WATER_ML = 1500
MAX_WATER_ML = 10000
DANGER_WATER_ML = 5000
KIDNEY_WATER_CAP_ML = 2000

SODIUM_DANGER_MG = 5000
POTASSIUM_DANGER_MG = 6000
MAGNESIUM_DANGER_MG = 700
CALCIUM_DANGER_MG = 2500
DANGER_MARGIN_MG = 100

_ACTIVITY_MULTIPLIERS: dict[str, float] = {
    "sedentary": 1.0,
    "light": 1.1,
    "moderate": 1.2,
    "active": 1.3,
    "athlete": 1.4,
}

_EXERCISE_WATER_MULTIPLIERS: dict[str, float] = {
    "low": 0.8,
    "medium": 1.0,
    "high": 1.3,
}

_CLIMATE_WATER_MULTIPLIERS: dict[str, float] = {
    "cool": 1.0,
    "moderate": 1.0,
    "hot": 1.2,
    "very-hot": 1.4,
}

_ALTITUDE_WATER_ML: dict[str, int] = {
    "sea-level": 0,
    "moderate": 500,
    "high": 1000,
}

_SWEAT_MULTIPLIERS: dict[str, float] = {
    "low": 0.5,
    "medium": 1.0,
    "high": 1.5,
}

_CLIMATE_ELECTROLYTE_MULTIPLIERS: dict[str, float] = {
    "cool": 1.0,
    "moderate": 1.0,
    "hot": 1.15,
    "very-hot": 1.3,
}

_PREGNANT_ML = 300
_BREASTFEEDING_ML = 700
_ILLNESS_ML = 1000


def round_half_up(value: float) -> int:
    """Round to nearest integer, halves away from zero for positive values."""
    return int(math.floor(value + 0.5))


def calculate_water(profile: Profile) -> int:
    """Daily water requirement in ml.

    Multipliers and addends are applied in a fixed order; the kidney-disease
    cap goes after every adjustment and the safety clamp after that.
    Unknown categorical values resolve to a neutral factor.

    Args:
        profile: User inputs (weight already in kg).

    Returns:
        Water requirement in ml, within [1500, 10000].
    """
    water = profile.weight_kg * BASE_WATER_PER_KG
    water *= _ACTIVITY_MULTIPLIERS.get(profile.activity_level, 1.0)

    exercise_hours = profile.exercise_minutes / 60
    water += (
        exercise_hours
        * EXERCISE_WATER_PER_HOUR
        * _EXERCISE_WATER_MULTIPLIERS.get(profile.exercise_intensity, 1.0)
    )

    water *= _CLIMATE_WATER_MULTIPLIERS.get(profile.climate, 1.0)
    water += _ALTITUDE_WATER_ML.get(profile.altitude, 0)

    if profile.pregnant:
        water += _PREGNANT_ML
    if profile.breastfeeding:
        water += _BREASTFEEDING_ML
    if profile.illness:
        water += _ILLNESS_ML
    if profile.kidney_disease:
        water = min(water, KIDNEY_WATER_CAP_ML)

    water = min(max(water, MIN_WATER_ML), MAX_WATER_ML)
    return round_half_up(water)


def calculate_electrolytes(profile: Profile) -> Electrolytes:
    """Daily electrolyte targets in mg, capped below danger thresholds.

    Args:
        profile: User inputs.

    Returns:
        Sodium, potassium, magnesium and calcium targets.
    """
    is_male = profile.gender == "male"
    sodium = 2000.0
    potassium = 3400.0 if is_male else 2600.0
    magnesium = 420.0 if is_male else 320.0
    calcium = 1200.0 if profile.age >= 65 else 1000.0

    exercise_hours = profile.exercise_minutes / 60
    sweat = _SWEAT_MULTIPLIERS.get(profile.exercise_intensity, 1.0)
    sodium += exercise_hours * 1000 * sweat
    potassium += exercise_hours * 200 * sweat

    # El clima escala el total de sodio y potasio, base incluida.
    climate = _CLIMATE_ELECTROLYTE_MULTIPLIERS.get(profile.climate, 1.0)
    sodium *= climate
    potassium *= climate

    sodium = min(sodium, SODIUM_DANGER_MG - DANGER_MARGIN_MG)
    potassium = min(potassium, POTASSIUM_DANGER_MG - DANGER_MARGIN_MG)
    magnesium = min(magnesium, MAGNESIUM_DANGER_MG - DANGER_MARGIN_MG)
    calcium = min(calcium, CALCIUM_DANGER_MG - DANGER_MARGIN_MG)

    return Electrolytes(
        sodium=round_half_up(sodium),
        potassium=round_half_up(potassium),
        magnesium=round_half_up(magnesium),
        calcium=round_half_up(calcium),
    )


def calculate_goals(profile: Profile) -> Goals:
    """Water plus electrolytes as one ``Goals`` record."""
    return Goals.from_targets(calculate_water(profile), calculate_electrolytes(profile))
