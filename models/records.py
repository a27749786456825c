"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping


class Metric(str, Enum):
    """Vital-sign series stored per user; values double as document field names."""

    bpm = "BPM"
    spo2 = "SPO2"
    temperature = "temperature"

    @property
    def unit(self) -> str:
        return _UNITS[self]

    @property
    def label(self) -> str:
        return _LABELS[self]


_UNITS = {Metric.bpm: " BPM", Metric.spo2: "%", Metric.temperature: "°C"}
_LABELS = {Metric.bpm: "BPM", Metric.spo2: "SPO2", Metric.temperature: "temperature"}


# Raw timestamp string -> bare scalar or single-key record wrapping a scalar.
Series = Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class Reading:
    """A single normalised observation."""

    timestamp: datetime
    value: float
