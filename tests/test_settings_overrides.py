from __future__ import annotations

from typing import Iterable

from datastore.mock_firestore import build_default_collection
from models.records import Metric
from services.assistant import build_default_assistant
from services.devices import build_default_device_client
from services.health import build_default_health_service
from settings import get_settings


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


CACHES = (
    get_settings,
    build_default_collection,
    build_default_device_client,
    build_default_assistant,
    build_default_health_service,
)


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    db_path = tmp_path / "vitals.json"

    monkeypatch.setenv("VITALS_COLLECTION_NAME", "patients")
    monkeypatch.setenv("VITALS_PERSISTENCE_PATH", str(db_path))
    monkeypatch.setenv("DEVICE_KIOSK_URL", "http://kiosk:81")
    monkeypatch.setenv("DEVICE_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.setenv("GEMINI_MODEL", "gemini-2.0-flash")
    monkeypatch.setenv("DEFAULT_WINDOW", "last-30-days")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    _clear_caches(CACHES)

    settings = get_settings()
    service = build_default_health_service()

    try:
        assert settings.default_window == "last-30-days"
        assert settings.log_level == "DEBUG"
        assert settings.device_timeout == 2.5
        assert service.store.name == "patients"
        assert service.store.persistence_path == db_path
        assert service.assistant.model == "gemini-2.0-flash"
        assert service.devices.url_for(Metric.bpm) == "http://kiosk:81/bpm"
        assert service.devices._client.timeout.read == 2.5
    finally:
        service.devices.close()
        _clear_caches(CACHES)


def test_blank_and_invalid_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("VITALS_COLLECTION_NAME", "   ")
    monkeypatch.setenv("VITALS_PERSISTENCE_PATH", "")
    monkeypatch.setenv("DEVICE_TIMEOUT_SECONDS", "-3")
    monkeypatch.setenv("DEFAULT_WINDOW", "weekly")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    _clear_caches(CACHES)

    try:
        settings = get_settings()
        assert settings.collection_name == "users"
        assert settings.persistence_path is None
        assert settings.device_timeout == 10.0
        assert settings.default_window == "last-7-days"
        assert settings.gemini_api_key is None
    finally:
        _clear_caches(CACHES)


def test_default_window_short_name_is_normalised(monkeypatch) -> None:
    monkeypatch.setenv("DEFAULT_WINDOW", " 24HOURS ")
    _clear_caches(CACHES)

    try:
        assert get_settings().default_window == "last-24-hours"
    finally:
        _clear_caches(CACHES)
