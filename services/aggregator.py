"""Windowing and summary statistics for vital-sign series."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, List, Optional, Union

from models.records import Metric, Reading, Series
from services.readings import ensure_utc, parse_series

logger = logging.getLogger(__name__)


class InvalidWindowError(ValueError):
    """Raised when a query names a window that does not exist."""


class TimeWindow(str, Enum):
    """Retention horizon relative to the reference instant."""

    last_24_hours = "last-24-hours"
    last_7_days = "last-7-days"
    last_30_days = "last-30-days"
    all_time = "all-time"

    @property
    def horizon(self) -> Optional[timedelta]:
        return _HORIZONS[self]

    @classmethod
    def parse(cls, value: Union[str, "TimeWindow"]) -> "TimeWindow":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            key = _ALIASES.get(key, key)
            try:
                return cls(key)
            except ValueError:
                pass
        raise InvalidWindowError(f"Unknown time window {value!r}.")


_HORIZONS = {
    TimeWindow.last_24_hours: timedelta(hours=24),
    TimeWindow.last_7_days: timedelta(days=7),
    TimeWindow.last_30_days: timedelta(days=30),
    TimeWindow.all_time: None,
}

# Short names sent by the dashboard range selector.
_ALIASES = {
    "24hours": TimeWindow.last_24_hours.value,
    "7days": TimeWindow.last_7_days.value,
    "30days": TimeWindow.last_30_days.value,
    "all": TimeWindow.all_time.value,
}


@dataclass(frozen=True)
class SummaryStats:
    average: float = 0.0
    minimum: float = 0.0
    maximum: float = 0.0


@dataclass
class AggregateResult:
    """Windowed points plus their summary, rebuilt on every query."""

    points: List[Reading] = field(default_factory=list)
    summary: SummaryStats = field(default_factory=SummaryStats)
    skipped: int = 0


def _select(readings: Iterable[Reading], window: TimeWindow, now: datetime) -> List[Reading]:
    horizon = window.horizon
    now = ensure_utc(now)
    if horizon is not None:
        readings = [reading for reading in readings if now - reading.timestamp <= horizon]
    # sorted() is stable, so equal instants keep their input order.
    return sorted(readings, key=lambda reading: reading.timestamp)


def filter_and_sort(
    series: Series,
    window: Union[str, TimeWindow],
    now: datetime,
    metric: Optional[Metric] = None,
) -> List[Reading]:
    """Return the readings inside ``window`` ending at ``now``, oldest first.

    Entries whose timestamp or value cannot be parsed are left out. The
    horizon is inclusive and readings dated after ``now`` are kept.
    """
    window = TimeWindow.parse(window)
    parsed = parse_series(series, metric)
    return _select(parsed.readings, window, now)


def summarize(points: Iterable[Reading]) -> SummaryStats:
    """Mean, minimum and maximum rounded to one decimal; zeros when empty."""
    values = [point.value for point in points]
    if not values:
        return SummaryStats()
    return SummaryStats(
        average=round(sum(values) / len(values), 1),
        minimum=round(min(values), 1),
        maximum=round(max(values), 1),
    )


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(
        self,
        series: Series,
        window: Union[str, TimeWindow],
        now: datetime,
        metric: Optional[Metric] = None,
    ) -> AggregateResult:
        window = TimeWindow.parse(window)
        parsed = parse_series(series, metric)
        points = _select(parsed.readings, window, now)
        result = AggregateResult(
            points=points,
            summary=summarize(points),
            skipped=len(parsed.skipped),
        )
        logger.debug(
            "Aggregated series",
            extra={
                "metric": metric.value if metric is not None else None,
                "window": window.value,
                "point_count": len(points),
                "skipped": result.skipped,
            },
        )
        return result
