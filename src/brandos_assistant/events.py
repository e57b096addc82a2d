from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Any, Callable, Dict, List, Mapping

from .models.events import DomainEvent, EventType

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class EventBus:
    """In-process publish/subscribe for domain events.

    Presentation layers subscribe to re-render when a tenant's conversation or
    site document changes instead of polling the stores.
    """

    def __init__(self) -> None:
        self._handlers: Dict[EventType, List[EventHandler]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, event_type: EventType, handler: EventHandler) -> Callable[[], None]:
        with self._lock:
            self._handlers[event_type].append(handler)

        def unsubscribe() -> None:
            with self._lock:
                if handler in self._handlers[event_type]:
                    self._handlers[event_type].remove(handler)

        return unsubscribe

    def on_conversation_changed(self, handler: EventHandler) -> Callable[[], None]:
        return self.subscribe(EventType.conversation_changed, handler)

    def on_document_changed(self, handler: EventHandler) -> Callable[[], None]:
        return self.subscribe(EventType.document_changed, handler)

    def on_pipeline_changed(self, handler: EventHandler) -> Callable[[], None]:
        return self.subscribe(EventType.pipeline_changed, handler)

    def on_workflow_changed(self, handler: EventHandler) -> Callable[[], None]:
        return self.subscribe(EventType.workflow_changed, handler)

    def publish(
        self,
        event_type: EventType,
        tenant_id: str,
        payload: Mapping[str, Any] | None = None,
    ) -> DomainEvent:
        event = DomainEvent(type=event_type, tenant_id=tenant_id, payload=dict(payload or {}))
        with self._lock:
            handlers = list(self._handlers[event_type])

        for handler in handlers:
            try:
                handler(event)
            except Exception:
                # A broken subscriber must not block delivery to the others.
                logger.error(
                    "Event handler failed",
                    exc_info=True,
                    extra={"event_type": event_type.value, "tenant_id": tenant_id},
                )
        return event


__all__ = ["EventBus", "EventHandler"]
