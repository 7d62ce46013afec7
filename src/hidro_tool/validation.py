"""Validación de formularios e ingestas; los errores se devuelven, no se lanzan."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import cast

from hidro_tool.model import Profile
from hidro_tool.units import to_kg

WEIGHT_LIMITS: dict[str, tuple[float, float]] = {
    "kg": (20, 300),
    "lbs": (44, 661),
}
AGE_LIMITS = (1, 120)
EXERCISE_LIMITS = (0, 1440)
MAX_INTAKE_ML = 5000

REQUIRED_CHOICES: dict[str, str] = {
    "gender": "Gender",
    "activity_level": "Activity Level",
    "climate": "Climate",
}

_FLAG_FIELDS = ("pregnant", "breastfeeding", "illness", "kidney_disease")


class ValidationError(ValueError):
    """Out-of-range or non-numeric user input."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


@dataclass(frozen=True)
class NumberResult:
    """Outcome of a numeric validation."""

    value: float | None = None
    error: ValidationError | None = None

    @property
    def valid(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ProfileResult:
    """Outcome of parsing a calculator form."""

    profile: Profile | None = None
    errors: dict[str, ValidationError] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return self.profile is not None and not self.errors


def _to_float(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _format_limit(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def validate_number(
    value: object,
    minimum: float,
    maximum: float,
    field: str = "value",
) -> NumberResult:
    """Check that ``value`` parses as a number within [minimum, maximum]."""
    number = _to_float(value)
    if number is None:
        return NumberResult(error=ValidationError(field, "Please enter a valid number"))
    if number < minimum:
        return NumberResult(
            error=ValidationError(field, f"Minimum value is {_format_limit(minimum)}")
        )
    if number > maximum:
        return NumberResult(
            error=ValidationError(field, f"Maximum value is {_format_limit(maximum)}")
        )
    return NumberResult(value=number)


def validate_weight(value: object, unit: str = "kg") -> NumberResult:
    minimum, maximum = WEIGHT_LIMITS.get(unit, WEIGHT_LIMITS["kg"])
    return validate_number(value, minimum, maximum, "weight")


def validate_age(value: object) -> NumberResult:
    return validate_number(value, *AGE_LIMITS, field="age")


def validate_exercise_minutes(value: object) -> NumberResult:
    """Blank exercise duration means no exercise."""
    if value is None or str(value).strip() == "":
        return NumberResult(value=0)
    return validate_number(value, *EXERCISE_LIMITS, field="exercise_minutes")


def validate_intake_amount(value: object) -> NumberResult:
    """Validate a single intake entry in ml (1..5000, whole numbers).

    Fractional input is truncated to whole ml before the range check.
    """
    number = _to_float(value)
    if number is None or int(number) <= 0:
        return NumberResult(
            error=ValidationError("amount_ml", "Please enter a valid amount")
        )
    amount = int(number)
    if amount > MAX_INTAKE_ML:
        return NumberResult(
            error=ValidationError(
                "amount_ml",
                f"Amount seems too large. Maximum {MAX_INTAKE_ML}ml per entry",
            )
        )
    return NumberResult(value=amount)


def as_bool(value: object) -> bool:
    """Interpret a checkbox or stored flag; "false" and "0" are False."""
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _text(form: Mapping[str, object], key: str, default: str = "") -> str:
    raw = form.get(key)
    if raw is None:
        return default
    text = str(raw).strip()
    return text or default


def parse_profile(form: Mapping[str, object]) -> ProfileResult:
    """Validate raw calculator form values and build a ``Profile``.

    Args:
        form: Field name -> raw value. Recognized keys are the ``Profile``
            field names plus ``weight`` and ``weight_unit`` (``kg``/``lbs``).

    Returns:
        A result holding either the profile (weight converted to kg) or the
        per-field validation errors.
    """
    errors: dict[str, ValidationError] = {}
    unit = _text(form, "weight_unit", "kg")

    weight = validate_weight(form.get("weight"), unit)
    if weight.error is not None:
        errors["weight"] = weight.error
    age = validate_age(form.get("age"))
    if age.error is not None:
        errors["age"] = age.error
    exercise = validate_exercise_minutes(form.get("exercise_minutes"))
    if exercise.error is not None:
        errors["exercise_minutes"] = exercise.error

    for key, label in REQUIRED_CHOICES.items():
        if not _text(form, key):
            errors[key] = ValidationError(key, f"Please select {label}")

    if errors:
        return ProfileResult(errors=errors)

    flags = {name: as_bool(form.get(name, False)) for name in _FLAG_FIELDS}
    profile = Profile(
        weight_kg=to_kg(cast(float, weight.value), unit),
        age=int(cast(float, age.value)),
        gender=_text(form, "gender"),
        activity_level=_text(form, "activity_level"),
        exercise_minutes=int(cast(float, exercise.value)),
        exercise_intensity=_text(form, "exercise_intensity", "medium"),
        climate=_text(form, "climate"),
        altitude=_text(form, "altitude", "sea-level"),
        **flags,
    )
    return ProfileResult(profile=profile)
