from __future__ import annotations

import json
import logging
from typing import Any, Callable

from google.cloud import pubsub_v1

from .events import EventBus
from .models.events import DomainEvent, EventType

logger = logging.getLogger(__name__)


class PubSubEventPublisher:
    """Forwards domain events from the in-process bus to a Pub/Sub topic."""

    def __init__(self, project_id: str, topic_id: str, *, publisher: Any | None = None) -> None:
        self.project_id = project_id
        self.topic_id = topic_id
        self.publisher = publisher or pubsub_v1.PublisherClient()

    def publish_event(self, event: DomainEvent) -> str:
        """Publish a domain event.

        Args:
            event: Event to forward

        Returns:
            Message ID from Pub/Sub
        """
        topic_path = self.publisher.topic_path(self.project_id, self.topic_id)
        data = json.dumps(event.model_dump(mode="json")).encode("utf-8")
        attributes = {
            "tenant_id": event.tenant_id,
            "event_type": event.type.value,
        }

        future = self.publisher.publish(topic_path, data, **attributes)
        message_id = future.result()

        logger.info(
            "Published event to Pub/Sub",
            extra={
                "topic_id": self.topic_id,
                "message_id": message_id,
                "event_type": event.type.value,
            },
        )
        return message_id

    def attach(self, bus: EventBus) -> list[Callable[[], None]]:
        """Subscribe to every event type on ``bus``; returns the unsubscribe callables."""
        return [bus.subscribe(event_type, self.publish_event) for event_type in EventType]


__all__ = ["PubSubEventPublisher"]
