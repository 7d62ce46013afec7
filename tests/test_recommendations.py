from __future__ import annotations

from hidro_tool.model import Electrolytes, Profile
from hidro_tool.recommendations import format_number, generate_recommendations


def test_minimal_recommendations() -> None:
    recs = generate_recommendations(
        Profile(weight_kg=70, age=30),
        2450,
        Electrolytes(sodium=2000, potassium=3400, magnesium=420, calcium=1000),
    )
    assert [r.severity for r in recs] == ["info", "info", "info"]
    assert recs[0].text == (
        "Distribute your 2,450ml throughout the day. "
        "Aim for 306ml every 1-2 hours while awake."
    )
    assert recs[1].text.startswith("Potassium sources:")
    assert recs[1].text.endswith("Target: 3,400mg/day.")
    assert recs[2].text.startswith("Magnesium sources:")
    assert recs[2].text.endswith("Target: 420mg/day.")


def test_all_conditional_recommendations_in_fixed_order() -> None:
    profile = Profile(
        weight_kg=120,
        age=30,
        exercise_minutes=90,
        climate="hot",
        kidney_disease=True,
    )
    recs = generate_recommendations(
        profile,
        5000,
        Electrolytes(sodium=3500, potassium=4000, magnesium=420, calcium=1000),
    )
    assert [r.severity for r in recs] == [
        "info",
        "warning",
        "warning",
        "info",
        "warning",
        "info",
        "info",
        "info",
    ]
    assert recs[1].text.startswith("High water intake detected.")
    assert "capped at 2000ml" in recs[2].text
    assert recs[3].text.startswith("For exercise longer than 60 minutes")
    assert recs[4].text.startswith("Hot climate detected.")
    assert recs[5].text.startswith("High sodium requirement")


def test_thresholds_are_exclusive_where_expected() -> None:
    profile = Profile(weight_kg=70, age=30, exercise_minutes=60, climate="very-hot")
    recs = generate_recommendations(
        profile,
        4999,
        Electrolytes(sodium=3000, potassium=3400, magnesium=420, calcium=1000),
    )
    texts = [r.text for r in recs]
    assert not any(t.startswith("High water intake") for t in texts)
    assert not any(t.startswith("For exercise longer") for t in texts)
    assert not any(t.startswith("High sodium") for t in texts)
    assert any(t.startswith("Hot climate detected.") for t in texts)


def test_format_number() -> None:
    assert format_number(2450) == "2,450"
    assert format_number(999) == "999"
