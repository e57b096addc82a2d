from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

from google.cloud import firestore

logger = logging.getLogger(__name__)


class FirestoreKeyValueStore:
    """Firestore-backed key-value store for production use."""

    COLLECTION_NAME = "brandos_state"

    def __init__(self, project_id: str | None = None) -> None:
        self._db = firestore.Client(project=project_id)
        self._collection = self._db.collection(self.COLLECTION_NAME)

    def get(self, key: str) -> Any | None:
        doc = self._collection.document(key).get()
        if not doc.exists:
            return None
        data = doc.to_dict() or {}
        raw = data.get("value")
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: Any) -> None:
        # Stored as JSON text so nested lists of turns/sections keep their exact shape.
        self._collection.document(key).set(
            {"value": json.dumps(value, default=str), "updated_at": datetime.utcnow()}
        )
        logger.debug("Stored key", extra={"key": key})

    def remove(self, key: str) -> None:
        self._collection.document(key).delete()
        logger.info("Removed key", extra={"key": key})


__all__ = ["FirestoreKeyValueStore"]
