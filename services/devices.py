"""HTTP client for the bedside devices that produce single readings."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Dict, Optional, Tuple

import httpx

from models.records import Metric
from services.readings import normalize_value
from settings import get_settings

logger = logging.getLogger(__name__)


class DeviceReadingError(RuntimeError):
    """The device could not be reached or returned something unusable."""


class DeviceClient:
    """Fetches one scalar reading per call from the configured device hosts."""

    def __init__(
        self,
        endpoints: Dict[Metric, Tuple[str, str]],
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._endpoints = dict(endpoints)
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def url_for(self, metric: Metric) -> str:
        base_url, path = self._endpoints[metric]
        return f"{base_url.rstrip('/')}{path}"

    def fetch(self, metric: Metric) -> float:
        url = self.url_for(metric)
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Device returned an error status",
                extra={"metric": metric.value, "status_code": exc.response.status_code},
            )
            raise DeviceReadingError(
                f"Device for {metric.value} responded with {exc.response.status_code}."
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "Device request failed",
                extra={"metric": metric.value, "reason": exc.__class__.__name__},
            )
            raise DeviceReadingError(f"Device for {metric.value} is unreachable.") from exc

        try:
            raw = response.json()
        except ValueError:
            raw = response.text

        try:
            return normalize_value(raw)
        except ValueError as exc:
            raise DeviceReadingError(
                f"Device for {metric.value} returned an unusable reading."
            ) from exc


@lru_cache
def build_default_device_client() -> DeviceClient:
    settings = get_settings()
    endpoints = {
        Metric.bpm: (settings.kiosk_url, "/bpm"),
        Metric.spo2: (settings.kiosk_url, "/spo2"),
        Metric.temperature: (settings.thermometer_url, "/ambient"),
    }
    return DeviceClient(endpoints=endpoints, timeout=settings.device_timeout)
