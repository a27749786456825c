from __future__ import annotations
import json
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional

from app.schemas import UserDocument
from models.records import Metric
from settings import get_settings

_TOP_LEVEL_FIELDS = {"name", "email", "bioData"}
_SERIES_FIELDS = {metric.value for metric in Metric}


class MockFirestoreCollection:
    """User documents keyed by user id, with dotted-path field writes."""

    def __init__(self, name: str, persistence_path: Optional[Path] = None) -> None:
        self.name = name
        self._documents: Dict[str, Dict[str, Any]] = {}
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def create(self, document: UserDocument) -> bool:
        """Store ``document`` unless one already exists; return whether it was added."""
        with self._lock:
            if document.user_id in self._documents:
                return False
            self._documents[document.user_id] = document.model_dump(mode="json", by_alias=True)
            self._persist()
            return True

    def get(self, user_id: str) -> Optional[UserDocument]:
        with self._lock:
            payload = self._documents.get(user_id)
            if payload is None:
                return None
            return UserDocument.model_validate(payload)

    def set_field(self, user_id: str, path: str, value: Any) -> None:
        """Write one field: ``"bioData"`` replaces it, ``"BPM.<key>"`` sets one entry."""
        head, _, key = path.partition(".")
        if key:
            if head not in _SERIES_FIELDS:
                raise ValueError(f"Field {head!r} does not hold a series.")
        elif head not in _TOP_LEVEL_FIELDS:
            raise ValueError(f"Field {head!r} cannot be written.")

        with self._lock:
            payload = self._documents.get(user_id)
            if payload is None:
                raise KeyError(f"User {user_id!r} not found.")
            if key:
                payload.setdefault(head, {})[key] = json.loads(json.dumps(value))
            else:
                payload[head] = json.loads(json.dumps(value))
            self._persist()

    def scan(self) -> list[UserDocument]:
        """Return copies of all stored documents."""

        with self._lock:
            return [UserDocument.model_validate(payload) for payload in self._documents.values()]

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        self.persistence_path.write_text(
            json.dumps(self._documents, indent=2, sort_keys=True)
        )

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            data = {}

        for user_id, payload in data.items():
            self._documents[user_id] = UserDocument.model_validate(payload).model_dump(
                mode="json", by_alias=True
            )


@lru_cache
def build_default_collection(
    name: Optional[str] = None,
    path: Optional[str] = None,
) -> MockFirestoreCollection:
    settings = get_settings()
    collection_name = settings.collection_name if name is None else name
    collection_path = settings.persistence_path if path is None else path
    persistence = Path(collection_path) if collection_path else None
    return MockFirestoreCollection(name=collection_name, persistence_path=persistence)
