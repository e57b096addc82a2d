from __future__ import annotations

import json
import threading
from typing import Any, Dict, Protocol
from urllib.parse import quote

from .errors import ValidationError

KEY_PREFIX = "brandos_"
CHANNEL_SEPARATOR = ":"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any | None:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class InMemoryKeyValueStore:
    """Process-local store. Values are kept as JSON text so callers never share mutable state."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: Any) -> None:
        raw = json.dumps(value, default=str)
        with self._lock:
            self._data[key] = raw

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)


def require_tenant(tenant_id: str) -> str:
    if not isinstance(tenant_id, str) or not tenant_id.strip():
        raise ValidationError("tenant_id is required")
    return tenant_id


class StorageKeys:
    """Tenant-scoped storage keys.

    Tenant ids and channels are percent-encoded, so neither can contain the
    channel separator or a path separator and two scopes never share a key.
    """

    @staticmethod
    def onboarding(tenant_id: str) -> str:
        return f"{KEY_PREFIX}onboarding_{_encode(require_tenant(tenant_id))}"

    @staticmethod
    def chats(tenant_id: str, channel: str | None = None) -> str:
        key = f"{KEY_PREFIX}chats_{_encode(require_tenant(tenant_id))}"
        return f"{key}{CHANNEL_SEPARATOR}{_encode(channel)}" if channel else key

    @staticmethod
    def site(tenant_id: str) -> str:
        return f"{KEY_PREFIX}site_{_encode(require_tenant(tenant_id))}"

    @staticmethod
    def pipeline(tenant_id: str) -> str:
        return f"{KEY_PREFIX}pipeline_{_encode(require_tenant(tenant_id))}"

    @staticmethod
    def workflow(tenant_id: str) -> str:
        return f"{KEY_PREFIX}workflow_{_encode(require_tenant(tenant_id))}"


def _encode(value: str) -> str:
    return quote(value, safe="")


__all__ = ["KeyValueStore", "InMemoryKeyValueStore", "StorageKeys", "require_tenant", "KEY_PREFIX"]
