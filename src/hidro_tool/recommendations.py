"""Generación de recomendaciones de texto a partir de los objetivos."""

from __future__ import annotations

from hidro_tool.calculator import (
    DANGER_WATER_ML,
    KIDNEY_WATER_CAP_ML,
    round_half_up,
)
from hidro_tool.model import (
    SEVERITY_INFO,
    SEVERITY_WARNING,
    Electrolytes,
    Profile,
    Recommendation,
)

HIGH_SODIUM_MG = 3000
LONG_EXERCISE_MINUTES = 60
_HOT_CLIMATES = frozenset({"hot", "very-hot"})


def format_number(value: float) -> str:
    """Integer with thousands separators (``2450`` -> ``2,450``)."""
    return f"{round_half_up(value):,}"


def generate_recommendations(
    profile: Profile,
    water_ml: int,
    electrolytes: Electrolytes,
) -> list[Recommendation]:
    """Build the ordered guidance list for one calculation.

    Args:
        profile: User inputs.
        water_ml: Computed water requirement.
        electrolytes: Computed electrolyte targets.

    Returns:
        Recommendations in display order. The distribution tip is always
        first; potassium and magnesium food sources are always last.
    """
    out = [
        Recommendation(
            SEVERITY_INFO,
            f"Distribute your {format_number(water_ml)}ml throughout the day. "
            f"Aim for {round_half_up(water_ml / 8)}ml every 1-2 hours while awake.",
        )
    ]

    if water_ml >= DANGER_WATER_ML:
        out.append(
            Recommendation(
                SEVERITY_WARNING,
                "High water intake detected. Be mindful of electrolyte balance. "
                "Consider sports drinks or electrolyte supplements during "
                "intense exercise.",
            )
        )

    if profile.kidney_disease:
        out.append(
            Recommendation(
                SEVERITY_WARNING,
                "You indicated kidney disease. Water intake has been capped at "
                f"{KIDNEY_WATER_CAP_ML}ml. Please consult your healthcare "
                "provider for personalized guidance.",
            )
        )

    if profile.exercise_minutes > LONG_EXERCISE_MINUTES:
        out.append(
            Recommendation(
                SEVERITY_INFO,
                "For exercise longer than 60 minutes, consume 150-250ml of water "
                "every 15-20 minutes. Consider electrolyte drinks.",
            )
        )

    if profile.climate in _HOT_CLIMATES:
        out.append(
            Recommendation(
                SEVERITY_WARNING,
                "Hot climate detected. Monitor for signs of dehydration: dark "
                "urine, dizziness, fatigue. Increase intake if needed.",
            )
        )

    if electrolytes.sodium > HIGH_SODIUM_MG:
        out.append(
            Recommendation(
                SEVERITY_INFO,
                "High sodium requirement due to exercise/climate. Good sources: "
                "sports drinks, salted nuts, pickles, broth.",
            )
        )

    out.append(
        Recommendation(
            SEVERITY_INFO,
            "Potassium sources: bananas, sweet potatoes, spinach, avocado, beans. "
            f"Target: {format_number(electrolytes.potassium)}mg/day.",
        )
    )
    out.append(
        Recommendation(
            SEVERITY_INFO,
            "Magnesium sources: almonds, spinach, black beans, dark chocolate, "
            f"pumpkin seeds. Target: {electrolytes.magnesium}mg/day.",
        )
    )
    return out
