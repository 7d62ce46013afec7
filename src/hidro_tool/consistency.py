"""Chequeos de consistencia de los datos ingresados (solo advertencias)."""

from __future__ import annotations

from hidro_tool.model import Profile

SEDENTARY_MISMATCH = (
    'You selected "Sedentary" but indicated significant exercise. '
    "Consider selecting a higher activity level."
)
CHILD_SUPERVISION = (
    "High-intensity exercise for children under 12 should be supervised. "
    "Consult a pediatrician."
)
MULTIPLE_CONDITIONS = (
    "Multiple health conditions detected. Please consult your healthcare "
    "provider for personalized hydration guidance."
)


def check_consistency(profile: Profile) -> list[str]:
    """Return advisory warnings for contradictory or risky combinations.

    Every rule is evaluated; the result keeps rule order. Warnings never
    block the calculation.
    """
    warnings: list[str] = []
    if profile.activity_level == "sedentary" and profile.exercise_minutes > 60:
        warnings.append(SEDENTARY_MISMATCH)
    if profile.age < 12 and profile.exercise_intensity == "high":
        warnings.append(CHILD_SUPERVISION)
    if profile.condition_count >= 2:
        warnings.append(MULTIPLE_CONDITIONS)
    return warnings
