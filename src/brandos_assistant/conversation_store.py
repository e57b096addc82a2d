from __future__ import annotations

import logging
import threading
from typing import Sequence

from .errors import ValidationError
from .models.conversation import ConversationTurn, Role
from .storage import KeyValueStore, StorageKeys

logger = logging.getLogger(__name__)


class ConversationStore:
    """Append-only, tenant-scoped conversation history."""

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv
        self._lock = threading.Lock()

    def read_all(self, tenant_id: str, *, channel: str | None = None) -> list[ConversationTurn]:
        raw = self._kv.get(StorageKeys.chats(tenant_id, channel)) or []
        return [ConversationTurn.model_validate(item) for item in raw]

    def append(self, tenant_id: str, turn: ConversationTurn, *, channel: str | None = None) -> list[ConversationTurn]:
        return self.extend(tenant_id, [turn], channel=channel)

    def extend(
        self,
        tenant_id: str,
        turns: Sequence[ConversationTurn],
        *,
        channel: str | None = None,
    ) -> list[ConversationTurn]:
        """Append ``turns`` in order with a single write."""
        key = StorageKeys.chats(tenant_id, channel)
        with self._lock:
            history = self.read_all(tenant_id, channel=channel)
            if not history and turns and turns[0].role is not Role.user:
                raise ValidationError("A conversation must start with a user turn")
            history.extend(turns)
            self._kv.set(key, [turn.model_dump(mode="json") for turn in history])

        logger.debug(
            "Appended conversation turns",
            extra={"tenant_id": tenant_id, "channel": channel, "added": len(turns), "total": len(history)},
        )
        return history

    def clear(self, tenant_id: str, *, channel: str | None = None) -> None:
        with self._lock:
            self._kv.remove(StorageKeys.chats(tenant_id, channel))
        logger.info("Cleared conversation", extra={"tenant_id": tenant_id, "channel": channel})


__all__ = ["ConversationStore"]
