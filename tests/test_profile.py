from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.schemas import MedicalProfileIn
from services.profile import build_profile, calculate_bmi, has_profile


@pytest.mark.parametrize(
    ("weight", "height", "expected"),
    [
        (70, 175, 22.9),
        (90.5, 180, 27.9),
        (0, 175, None),
        (70, 0, None),
        (None, 175, None),
        (70, None, None),
    ],
)
def test_calculate_bmi(weight, height, expected) -> None:
    assert calculate_bmi(weight, height) == expected


def test_build_profile_uses_stored_field_names_and_adds_bmi() -> None:
    payload = MedicalProfileIn(
        age=42,
        gender="female",
        conditions=["Diabetes", " Diabetes ", "Asthma", ""],
        medications=["Metformin"],
        habit_smoking=True,
        activityLevel="moderate",
        weightKg=70,
        heightCm=175,
        sleepHoursPerNight=7.5,
    )

    bio_data = build_profile(payload)

    assert bio_data == {
        "age": 42,
        "gender": "female",
        "conditions": ["Diabetes", "Asthma"],
        "medications": ["Metformin"],
        "allergies": [],
        "habit_smoking": True,
        "habit_drinking": False,
        "activityLevel": "moderate",
        "weightKg": 70.0,
        "heightCm": 175.0,
        "sleepHoursPerNight": 7.5,
        "bmi": 22.9,
    }


@pytest.mark.parametrize(
    "overrides",
    [
        {"age": -1},
        {"gender": "unknown"},
        {"weightKg": 0},
        {"heightCm": -10},
        {"activityLevel": "extreme"},
    ],
)
def test_profile_validation_rejects_bad_input(overrides) -> None:
    payload = {"age": 30, "gender": "male", "weightKg": 80, "heightCm": 180}
    payload.update(overrides)

    with pytest.raises(ValidationError):
        MedicalProfileIn.model_validate(payload)


def test_has_profile() -> None:
    assert has_profile({"age": 30}) is True
    assert has_profile({}) is False
    assert has_profile(None) is False
