from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Protocol

from .models.profile import TenantProfile
from .storage import KeyValueStore, StorageKeys, require_tenant


class ProfileRepository(Protocol):
    def get_profile(self, tenant_id: str) -> TenantProfile | None:
        ...


class StoredProfileRepository:
    """Onboarding drafts kept in the key-value store, merged field by field on every save."""

    def __init__(self, kv: KeyValueStore, *, fallback: ProfileRepository | None = None) -> None:
        self._kv = kv
        self._fallback = fallback

    def get_profile(self, tenant_id: str) -> TenantProfile | None:
        data = self._kv.get(StorageKeys.onboarding(tenant_id))
        if not data:
            return self._fallback.get_profile(tenant_id) if self._fallback else None
        return TenantProfile.model_validate(data)

    def save_draft(self, tenant_id: str, draft: Mapping[str, Any]) -> TenantProfile:
        key = StorageKeys.onboarding(tenant_id)
        existing = self._kv.get(key) or {}
        incoming = TenantProfile.model_validate(draft).model_dump(by_alias=True, exclude_unset=True, mode="json")
        merged = {**existing, **incoming, "updatedAt": datetime.utcnow().isoformat()}
        self._kv.set(key, merged)
        return TenantProfile.model_validate(merged)


class LocalProfileRepository:
    """Read-only profiles from ``<base_path>/<tenant_id>.json`` fixtures."""

    def __init__(self, *, base_path: Path) -> None:
        self._base_path = base_path

    def get_profile(self, tenant_id: str) -> TenantProfile | None:
        file_path = self._base_path / f"{require_tenant(tenant_id)}.json"
        if not file_path.exists():
            return None
        with file_path.open("r", encoding="utf-8") as fp:
            data = json.load(fp)
        return TenantProfile.model_validate(data)


__all__ = ["ProfileRepository", "StoredProfileRepository", "LocalProfileRepository"]
