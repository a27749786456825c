"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.records import Metric


class Gender(str, Enum):
    male = "male"
    female = "female"
    other = "other"
    undisclosed = "prefer-not-to-say"


class ActivityLevel(str, Enum):
    sedentary = "sedentary"
    light = "light"
    moderate = "moderate"
    active = "active"
    very_active = "very-active"


class UserDocument(BaseModel):
    """Stored record for one user: profile plus one series per metric."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    date_of_joining: datetime = Field(alias="dateOfJoining")
    bio_data: Dict[str, Any] = Field(default_factory=dict, alias="bioData")
    bpm: Dict[str, Any] = Field(default_factory=dict, alias="BPM")
    spo2: Dict[str, Any] = Field(default_factory=dict, alias="SPO2")
    temperature: Dict[str, Any] = Field(default_factory=dict)

    def series(self, metric: Metric) -> Dict[str, Any]:
        return getattr(self, _SERIES_ATTRS[metric])


_SERIES_ATTRS = {Metric.bpm: "bpm", Metric.spo2: "spo2", Metric.temperature: "temperature"}


class UserCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None


class MedicalProfileIn(BaseModel):
    """Medical profile form payload; camelCase aliases match stored bio data."""

    model_config = ConfigDict(populate_by_name=True)

    age: int = Field(..., ge=0, le=130)
    gender: Gender
    conditions: List[str] = Field(default_factory=list)
    medications: List[str] = Field(default_factory=list)
    allergies: List[str] = Field(default_factory=list)
    # Stored bio data keeps these two keys in snake_case.
    habit_smoking: bool = False
    habit_drinking: bool = False
    activity_level: Optional[ActivityLevel] = Field(default=None, alias="activityLevel")
    weight_kg: float = Field(..., gt=0, alias="weightKg")
    height_cm: float = Field(..., gt=0, alias="heightCm")
    sleep_hours_per_night: Optional[float] = Field(
        default=None, ge=0, le=24, alias="sleepHoursPerNight"
    )

    @field_validator("conditions", "medications", "allergies")
    @classmethod
    def _dedupe(cls, values: List[str]) -> List[str]:
        seen: list[str] = []
        for value in values:
            candidate = value.strip()
            if candidate and candidate not in seen:
                seen.append(candidate)
        return seen


class ReadingIn(BaseModel):
    value: Any = Field(..., description="Bare number or single-key record wrapping one.")
    timestamp: Optional[datetime] = Field(
        default=None, description="Defaults to the time the request is handled."
    )


class ReadingOut(BaseModel):
    timestamp: datetime
    value: float


class MeasurementResponse(BaseModel):
    metric: Metric
    reading: ReadingOut


class SummaryOut(BaseModel):
    average: float
    minimum: float
    maximum: float


class AnalyticsResponse(BaseModel):
    metric: Metric
    window: str
    points: List[ReadingOut] = Field(default_factory=list)
    summary: SummaryOut
    skipped: int = Field(
        0, ge=0, description="Entries left out because they could not be parsed."
    )


class MetricOverview(BaseModel):
    latest: Optional[ReadingOut] = None
    recent: List[ReadingOut] = Field(default_factory=list)


class DashboardResponse(BaseModel):
    user_id: str
    has_profile: bool
    metrics: Dict[Metric, MetricOverview]


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)


class ChatResponse(BaseModel):
    reply: str
