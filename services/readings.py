"""Boundary normalisation for raw series entries."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from numbers import Real
from typing import Any, List, Mapping, Optional

from models.records import Metric, Reading, Series

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SkippedEntry:
    """A series entry that could not be turned into a reading."""

    raw_timestamp: str
    reason: str


@dataclass
class ParsedSeries:
    readings: List[Reading] = field(default_factory=list)
    skipped: List[SkippedEntry] = field(default_factory=list)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 string into an aware UTC datetime.

    A trailing ``Z`` is accepted and naive values are taken to be UTC.
    """
    if not isinstance(value, str):
        raise ValueError("Timestamp must be a string.")
    candidate = value.strip()
    if not candidate:
        raise ValueError("Timestamp is empty.")

    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise ValueError("Invalid timestamp format") from exc

    return ensure_utc(parsed)


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def normalize_value(raw: Any) -> float:
    """Unwrap a bare scalar or a single-key record into a float."""
    if isinstance(raw, Mapping):
        if len(raw) != 1:
            raise ValueError("Wrapped reading must hold exactly one value.")
        (raw,) = raw.values()

    if isinstance(raw, bool):
        raise ValueError("Boolean is not a numeric reading.")
    if isinstance(raw, Real):
        try:
            value = float(raw)
        except OverflowError as exc:
            raise ValueError("Reading must be a finite number.") from exc
    elif isinstance(raw, str):
        try:
            value = float(raw.strip())
        except ValueError as exc:
            raise ValueError(f"Non-numeric reading {raw!r}.") from exc
    else:
        raise ValueError(f"Unsupported reading type {type(raw).__name__}.")

    if not math.isfinite(value):
        raise ValueError("Reading must be a finite number.")
    return value


def parse_series(series: Series, metric: Optional[Metric] = None) -> ParsedSeries:
    """Normalise every entry, skipping (and logging) the ones that do not parse."""
    parsed = ParsedSeries()
    metric_name = metric.value if metric is not None else None

    for raw_timestamp, raw_value in series.items():
        try:
            timestamp = parse_timestamp(raw_timestamp)
        except ValueError:
            reason = "invalid timestamp"
        else:
            try:
                value = normalize_value(raw_value)
            except ValueError:
                reason = "invalid value"
            else:
                parsed.readings.append(Reading(timestamp=timestamp, value=value))
                continue

        parsed.skipped.append(SkippedEntry(raw_timestamp=str(raw_timestamp), reason=reason))
        logger.warning(
            "Skipping series entry",
            extra={"metric": metric_name, "raw_timestamp": raw_timestamp, "reason": reason},
        )

    return parsed
