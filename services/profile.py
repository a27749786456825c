"""Medical profile handling."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from app.schemas import MedicalProfileIn


def calculate_bmi(weight_kg: Optional[float], height_cm: Optional[float]) -> Optional[float]:
    """Body-mass index rounded to one decimal, or ``None`` without usable inputs."""
    if weight_kg is None or height_cm is None:
        return None
    if weight_kg <= 0 or height_cm <= 0:
        return None
    height_m = height_cm / 100
    return round(weight_kg / (height_m * height_m), 1)


def build_profile(payload: MedicalProfileIn) -> Dict[str, Any]:
    """Return the bio-data record stored for ``payload``, with its BMI."""
    bio_data = payload.model_dump(mode="json", by_alias=True)
    bio_data["bmi"] = calculate_bmi(payload.weight_kg, payload.height_cm)
    return bio_data


def has_profile(bio_data: Optional[Mapping[str, Any]]) -> bool:
    return bool(bio_data)
