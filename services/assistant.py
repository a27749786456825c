"""Prompt construction and the generative-model client for the health chat."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Protocol

from google import genai

from app.schemas import UserDocument
from models.records import Metric, Reading
from services.aggregator import TimeWindow, filter_and_sort
from settings import get_settings

logger = logging.getLogger(__name__)

_PREAMBLE = (
    "You are a helpful health assistant that provides information and advice "
    "based on the user's health data."
)

_GUIDELINES = (
    "Only provide health information and advice based on the user's data.",
    "Do not make definitive medical diagnoses.",
    "Encourage the user to consult with healthcare professionals for serious concerns.",
    "Be empathetic and supportive.",
    "Keep responses concise and easy to understand.",
    "If you don't have enough information, ask clarifying questions.",
    "Ignore all 0 health data readings.",
)

_SECTION_TITLES = {
    Metric.bpm: "BPM readings",
    Metric.spo2: "SPO2 readings",
    Metric.temperature: "Temperature readings",
}


class AssistantError(RuntimeError):
    """The generative model could not produce a reply."""


class Assistant(Protocol):
    def reply(self, system_prompt: str, message: str) -> str: ...


@dataclass
class HealthContext:
    readings: Dict[Metric, List[str]] = field(default_factory=dict)
    bio_data: Dict[str, Any] = field(default_factory=dict)


def _format_value(value: float) -> str:
    return f"{value:g}"


def format_reading(metric: Metric, reading: Reading) -> str:
    stamp = reading.timestamp.strftime("%Y-%m-%d %H:%M:%S UTC")
    return f"{stamp}: {_format_value(reading.value)}{metric.unit}"


def build_health_context(document: UserDocument, now: datetime) -> HealthContext:
    """Collect the last seven days of every metric plus the bio data."""
    context = HealthContext(bio_data=dict(document.bio_data))
    for metric in Metric:
        points = filter_and_sort(document.series(metric), TimeWindow.last_7_days, now, metric)
        context.readings[metric] = [format_reading(metric, point) for point in points]
    return context


def _format_bio_value(key: str, value: Any) -> str:
    if isinstance(value, (list, tuple)):
        items = ",\n  ".join(f'"{item}"' for item in value)
        return f"{key}: [\n  {items}\n]"
    if isinstance(value, bool):
        return f"{key}: {'true' if value else 'false'}"
    return f"{key}: {value}"


def format_bio_data(bio_data: Mapping[str, Any]) -> str:
    lines = [_format_bio_value(key, value) for key, value in bio_data.items()]
    return "\n".join(lines) or "No bio data available"


def build_system_prompt(context: HealthContext) -> str:
    sections = [_PREAMBLE, "", "User's health data for the past 7 days:", ""]
    for metric in Metric:
        lines = context.readings.get(metric) or []
        sections.append(f"{_SECTION_TITLES[metric]}:")
        sections.append("\n".join(lines) if lines else f"No {metric.label} data available")
        sections.append("")
    sections.append("Bio data:")
    sections.append(format_bio_data(context.bio_data))
    sections.append("")
    sections.append("Important guidelines:")
    sections.extend(f"{index}. {rule}" for index, rule in enumerate(_GUIDELINES, start=1))
    return "\n".join(sections)


class GeminiAssistant:
    """Sends the assembled prompt to a Gemini model through the Gen AI SDK."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-1.5-flash",
        client: Any = None,
    ) -> None:
        self._api_key = api_key
        self.model = model
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            if not self._api_key:
                raise AssistantError("GEMINI_API_KEY is not configured.")
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    def reply(self, system_prompt: str, message: str) -> str:
        client = self._get_client()
        contents = f"{system_prompt}\nUser: {message}"
        try:
            response = client.models.generate_content(model=self.model, contents=contents)
        except Exception as exc:  # noqa: BLE001
            logger.error("Assistant request failed", extra={"reason": str(exc)})
            raise AssistantError("Failed to generate a response. Please try again.") from exc

        text = str(getattr(response, "text", "") or "").strip()
        if not text:
            raise AssistantError("The assistant returned an empty response.")
        return text


@lru_cache
def build_default_assistant() -> GeminiAssistant:
    settings = get_settings()
    return GeminiAssistant(api_key=settings.gemini_api_key, model=settings.gemini_model)
