from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from services.aggregator import InvalidWindowError, TimeWindow


_COLLECTION_NAME_ENV = "VITALS_COLLECTION_NAME"
_PERSISTENCE_PATH_ENV = "VITALS_PERSISTENCE_PATH"
_KIOSK_URL_ENV = "DEVICE_KIOSK_URL"
_THERMOMETER_URL_ENV = "DEVICE_THERMOMETER_URL"
_DEVICE_TIMEOUT_ENV = "DEVICE_TIMEOUT_SECONDS"
_GEMINI_API_KEY_ENV = "GEMINI_API_KEY"
_GEMINI_MODEL_ENV = "GEMINI_MODEL"
_DEFAULT_WINDOW_ENV = "DEFAULT_WINDOW"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    collection_name: str
    persistence_path: Optional[str]
    kiosk_url: str
    thermometer_url: str
    device_timeout: float
    gemini_api_key: Optional[str]
    gemini_model: str
    default_window: str
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_window(default: str) -> str:
    value = os.getenv(_DEFAULT_WINDOW_ENV)
    if value is None:
        return default
    try:
        return TimeWindow.parse(value).value
    except InvalidWindowError:
        return default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        collection_name=_read_str_env(_COLLECTION_NAME_ENV, "users"),
        persistence_path=_read_optional_env(_PERSISTENCE_PATH_ENV, "./tmp/vitals_db.json"),
        kiosk_url=_read_str_env(_KIOSK_URL_ENV, "http://192.168.226.27:80").rstrip("/"),
        thermometer_url=_read_str_env(
            _THERMOMETER_URL_ENV, "http://192.168.226.238:80"
        ).rstrip("/"),
        device_timeout=_read_positive_float(_DEVICE_TIMEOUT_ENV, 10.0),
        gemini_api_key=_read_optional_env(_GEMINI_API_KEY_ENV, None),
        gemini_model=_read_str_env(_GEMINI_MODEL_ENV, "gemini-1.5-flash"),
        default_window=_read_window(TimeWindow.last_7_days.value),
        log_level=_read_log_level("INFO"),
    )
