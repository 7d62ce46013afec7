from __future__ import annotations

import pytest

from hidro_tool.units import kg_to_lbs, lbs_to_kg, to_kg
from hidro_tool.validation import (
    ValidationError,
    parse_profile,
    validate_age,
    validate_exercise_minutes,
    validate_intake_amount,
    validate_weight,
)


def _form(**overrides: object) -> dict[str, object]:
    form: dict[str, object] = {
        "weight": "70",
        "weight_unit": "kg",
        "age": "30",
        "gender": "male",
        "activity_level": "sedentary",
        "exercise_minutes": "",
        "exercise_intensity": "medium",
        "climate": "moderate",
        "altitude": "sea-level",
    }
    form.update(overrides)
    return form


def test_weight_limits_depend_on_unit() -> None:
    assert validate_weight("70", "kg").value == 70.0
    low = validate_weight("19", "kg")
    assert low.error is not None
    assert low.error.message == "Minimum value is 20"
    high = validate_weight("700", "lbs")
    assert high.error is not None
    assert high.error.message == "Maximum value is 661"
    assert validate_weight("650", "lbs").valid


def test_non_numeric_input() -> None:
    result = validate_age("abc")
    assert not result.valid
    assert isinstance(result.error, ValidationError)
    assert result.error.message == "Please enter a valid number"
    assert result.error.field == "age"


def test_exercise_blank_means_zero() -> None:
    assert validate_exercise_minutes("").value == 0
    assert validate_exercise_minutes(None).value == 0
    assert not validate_exercise_minutes("1441").valid


@pytest.mark.parametrize("amount", [0, -5, "", None, "abc", 0.4])
def test_intake_amount_rejects_non_positive(amount: object) -> None:
    result = validate_intake_amount(amount)
    assert result.error is not None
    assert result.error.message == "Please enter a valid amount"


def test_intake_amount_upper_bound() -> None:
    result = validate_intake_amount(5001)
    assert result.error is not None
    assert result.error.message == "Amount seems too large. Maximum 5000ml per entry"
    assert validate_intake_amount(5000).value == 5000
    assert validate_intake_amount("250").value == 250


def test_parse_profile_happy_path() -> None:
    result = parse_profile(_form(pregnant="on", illness=False))
    assert result.valid
    assert result.profile is not None
    assert result.profile.weight_kg == 70.0
    assert result.profile.exercise_minutes == 0
    assert result.profile.pregnant is True
    assert result.profile.illness is False
    assert result.profile.kidney_disease is False


def test_parse_profile_converts_pounds() -> None:
    result = parse_profile(_form(weight="154.3", weight_unit="lbs"))
    assert result.profile is not None
    assert result.profile.weight_kg == pytest.approx(69.989, abs=0.01)


def test_parse_profile_collects_every_error() -> None:
    result = parse_profile(_form(weight="5", age="200", gender="", climate=None))
    assert result.profile is None
    assert set(result.errors) == {"weight", "age", "gender", "climate"}
    assert result.errors["gender"].message == "Please select Gender"


def test_parse_profile_defaults_optional_choices() -> None:
    result = parse_profile(_form(exercise_intensity="", altitude=None))
    assert result.profile is not None
    assert result.profile.exercise_intensity == "medium"
    assert result.profile.altitude == "sea-level"


def test_unit_conversion() -> None:
    assert kg_to_lbs(100) == pytest.approx(220.462)
    assert lbs_to_kg(100) == pytest.approx(45.3592)
    assert to_kg(70, "kg") == 70
    assert to_kg(100, "lbs") == pytest.approx(45.3592)
