"""Unit tests for the mock document store implementation."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from app.schemas import UserDocument
from datastore.mock_firestore import MockFirestoreCollection
from models.records import Metric


def _sample_document(user_id: str = "user-123") -> UserDocument:
    return UserDocument(
        user_id=user_id,
        name="Ada",
        email="ada@example.com",
        date_of_joining=datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
        bio_data={"age": 36},
        bpm={"2024-01-01T00:00:00Z": 72},
    )


def test_create_and_get_returns_independent_copies() -> None:
    collection = MockFirestoreCollection(name="users")
    original = _sample_document()

    assert collection.create(original) is True
    fetched = collection.get(original.user_id)

    assert fetched == original
    assert fetched is not original

    fetched.bpm["2024-01-02T00:00:00Z"] = 99
    fetched_again = collection.get(original.user_id)
    assert fetched_again is not None
    assert fetched_again.bpm == {"2024-01-01T00:00:00Z": 72}


def test_create_does_not_overwrite_existing_document() -> None:
    collection = MockFirestoreCollection(name="users")
    collection.create(_sample_document())

    replacement = _sample_document()
    replacement.name = "Someone else"

    assert collection.create(replacement) is False
    assert collection.get("user-123").name == "Ada"


def test_get_returns_none_when_missing() -> None:
    collection = MockFirestoreCollection(name="users")

    assert collection.get("missing-id") is None


def test_set_field_appends_series_entry_and_replaces_same_key() -> None:
    collection = MockFirestoreCollection(name="users")
    collection.create(_sample_document())

    collection.set_field("user-123", "SPO2.2024-01-02T00:00:00.000Z", 97)
    collection.set_field("user-123", "BPM.2024-01-01T00:00:00Z", 75)

    document = collection.get("user-123")
    assert document.series(Metric.spo2) == {"2024-01-02T00:00:00.000Z": 97}
    assert document.series(Metric.bpm) == {"2024-01-01T00:00:00Z": 75}


def test_set_field_replaces_bio_data_wholesale() -> None:
    collection = MockFirestoreCollection(name="users")
    collection.create(_sample_document())

    collection.set_field("user-123", "bioData", {"gender": "female"})

    assert collection.get("user-123").bio_data == {"gender": "female"}


@pytest.mark.parametrize("path", ["user_id", "bioData.age", "unknown.key", "dateOfJoining"])
def test_set_field_rejects_unknown_paths(path: str) -> None:
    collection = MockFirestoreCollection(name="users")
    collection.create(_sample_document())

    with pytest.raises(ValueError):
        collection.set_field("user-123", path, 1)


def test_set_field_for_missing_user_raises_key_error() -> None:
    collection = MockFirestoreCollection(name="users")

    with pytest.raises(KeyError):
        collection.set_field("ghost", "BPM.2024-01-01T00:00:00Z", 70)


def test_writes_persist_to_disk_and_reload(tmp_path) -> None:
    path = tmp_path / "vitals_db.json"
    collection = MockFirestoreCollection(name="users", persistence_path=path)
    collection.create(_sample_document())
    collection.set_field("user-123", "temperature.2024-01-01T08:00:00Z", 36.7)

    assert path.exists()
    payload = json.loads(path.read_text())
    assert payload["user-123"]["temperature"] == {"2024-01-01T08:00:00Z": 36.7}
    assert payload["user-123"]["bioData"] == {"age": 36}

    reloaded = MockFirestoreCollection(name="users", persistence_path=path)
    document = reloaded.get("user-123")
    assert document is not None
    assert document.temperature == {"2024-01-01T08:00:00Z": 36.7}
    assert document.date_of_joining == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_scan_returns_all_documents() -> None:
    collection = MockFirestoreCollection(name="users")
    collection.create(_sample_document("user-1"))
    collection.create(_sample_document("user-2"))

    scanned = sorted(collection.scan(), key=lambda document: document.user_id)

    assert [document.user_id for document in scanned] == ["user-1", "user-2"]
