"""Coordinates the document store, devices, aggregator and assistant."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, List, Optional, Union

from app.schemas import MedicalProfileIn, UserDocument
from datastore.mock_firestore import MockFirestoreCollection, build_default_collection
from models.records import Metric, Reading
from services.aggregator import AggregateResult, Aggregator, TimeWindow
from services.assistant import Assistant, build_default_assistant, build_health_context, build_system_prompt
from services.devices import DeviceClient, build_default_device_client
from services.profile import build_profile, has_profile
from services.readings import ensure_utc, normalize_value, parse_series

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _series_key(timestamp: datetime) -> str:
    # Millisecond precision with a Z suffix, matching browser-written keys.
    return timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _newest_first(document: UserDocument, metric: Metric, limit: int) -> List[Reading]:
    parsed = parse_series(document.series(metric), metric)
    readings = sorted(parsed.readings, key=lambda reading: reading.timestamp, reverse=True)
    return readings[:limit]


class HealthService:
    """Per-user vitals operations on top of the external collaborators."""

    def __init__(
        self,
        store: MockFirestoreCollection,
        aggregator: Aggregator,
        devices: DeviceClient,
        assistant: Assistant,
    ) -> None:
        self.store = store
        self.aggregator = aggregator
        self.devices = devices
        self.assistant = assistant

    def register_user(
        self,
        user_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> UserDocument:
        """Create an empty document for ``user_id`` if there is none yet."""
        document = UserDocument(
            user_id=user_id,
            name=name,
            email=email,
            date_of_joining=_utcnow(),
        )
        if self.store.create(document):
            logger.info("Registered user", extra={"user_id": user_id})
        return self.get_document(user_id)

    def get_document(self, user_id: str) -> UserDocument:
        document = self.store.get(user_id)
        if document is None:
            raise KeyError(f"User {user_id!r} not found.")
        return document

    def record_reading(
        self,
        user_id: str,
        metric: Metric,
        value: Any,
        at: Optional[datetime] = None,
    ) -> Reading:
        """Append one reading to ``metric``'s series; same-key writes replace."""
        timestamp = ensure_utc(at) if at is not None else _utcnow()
        # Keys keep millisecond precision, so the returned reading does too.
        timestamp = timestamp.replace(microsecond=timestamp.microsecond // 1000 * 1000)
        reading = Reading(timestamp=timestamp, value=normalize_value(value))
        self.store.set_field(user_id, f"{metric.value}.{_series_key(reading.timestamp)}", reading.value)
        logger.info("Recorded reading", extra={"user_id": user_id, "metric": metric.value})
        return reading

    def measure(self, user_id: str, metric: Metric, now: Optional[datetime] = None) -> Reading:
        """Take a reading from the device for ``metric`` and store it."""
        self.get_document(user_id)
        value = self.devices.fetch(metric)
        return self.record_reading(user_id, metric, value, at=now)

    def recent_readings(self, user_id: str, metric: Metric, limit: int = 5) -> List[Reading]:
        """Newest readings first, at most ``limit`` of them."""
        return _newest_first(self.get_document(user_id), metric, limit)

    def latest_reading(self, user_id: str, metric: Metric) -> Optional[Reading]:
        readings = self.recent_readings(user_id, metric, limit=1)
        return readings[0] if readings else None

    def dashboard(self, user_id: str, limit: int = 5) -> Dict[str, Any]:
        document = self.get_document(user_id)
        metrics: Dict[Metric, Dict[str, Any]] = {}
        for metric in Metric:
            recent = _newest_first(document, metric, limit)
            metrics[metric] = {"latest": recent[0] if recent else None, "recent": recent}
        return {
            "user_id": user_id,
            "has_profile": has_profile(document.bio_data),
            "metrics": metrics,
        }

    def analytics(
        self,
        user_id: str,
        metric: Metric,
        window: Union[str, TimeWindow],
        now: Optional[datetime] = None,
    ) -> AggregateResult:
        window = TimeWindow.parse(window)
        document = self.get_document(user_id)
        result = self.aggregator.aggregate(
            document.series(metric), window, now or _utcnow(), metric=metric
        )
        if result.skipped:
            logger.info(
                "Analytics excluded malformed entries",
                extra={
                    "user_id": user_id,
                    "metric": metric.value,
                    "window": window.value,
                    "skipped": result.skipped,
                },
            )
        return result

    def get_profile(self, user_id: str) -> Dict[str, Any]:
        return self.get_document(user_id).bio_data

    def update_profile(self, user_id: str, payload: MedicalProfileIn) -> Dict[str, Any]:
        """Replace the stored profile wholesale."""
        bio_data = build_profile(payload)
        self.store.set_field(user_id, "bioData", bio_data)
        logger.info("Updated medical profile", extra={"user_id": user_id})
        return bio_data

    def chat(self, user_id: str, message: str, now: Optional[datetime] = None) -> str:
        text = message.strip()
        if not text:
            raise ValueError("Message must not be empty.")
        document = self.get_document(user_id)
        context = build_health_context(document, now or _utcnow())
        return self.assistant.reply(build_system_prompt(context), text)


@lru_cache
def build_default_health_service() -> HealthService:
    """Factory that wires the service with the default collaborators."""
    return HealthService(
        store=build_default_collection(),
        aggregator=Aggregator(),
        devices=build_default_device_client(),
        assistant=build_default_assistant(),
    )
