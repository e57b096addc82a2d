from __future__ import annotations

import logging
import threading
from typing import Callable, TypeVar

from .models.site import SiteDocument
from .storage import KeyValueStore, StorageKeys

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SiteDocumentStore:
    """Tenant-scoped site documents. A tenant without a stored document gets a fresh one with only a home page."""

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv
        self._lock = threading.Lock()

    def get(self, tenant_id: str) -> SiteDocument:
        raw = self._kv.get(StorageKeys.site(tenant_id))
        if raw is None:
            return SiteDocument()
        return SiteDocument.model_validate(raw)

    def save(self, tenant_id: str, document: SiteDocument) -> None:
        with self._lock:
            self._write(tenant_id, document)

    def update(self, tenant_id: str, mutate: Callable[[SiteDocument], tuple[SiteDocument, T]]) -> tuple[SiteDocument, T]:
        """Read the current document, compute the next one and write it as one step.

        ``mutate`` receives the current document and returns ``(next_document, result)``.
        Nothing is written if it raises.
        """
        with self._lock:
            current = self.get(tenant_id)
            document, result = mutate(current)
            self._write(tenant_id, document)
        return document, result

    def reset(self, tenant_id: str) -> None:
        with self._lock:
            self._kv.remove(StorageKeys.site(tenant_id))

    def _write(self, tenant_id: str, document: SiteDocument) -> None:
        self._kv.set(StorageKeys.site(tenant_id), document.model_dump(mode="json", by_alias=True))
        logger.debug(
            "Stored site document",
            extra={"tenant_id": tenant_id, "pages": len(document.pages), "template": document.template_id.value},
        )


__all__ = ["SiteDocumentStore"]
