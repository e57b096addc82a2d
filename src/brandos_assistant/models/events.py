from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, Field


class EventType(str, Enum):
    conversation_changed = "CONVERSATION_CHANGED"
    document_changed = "DOCUMENT_CHANGED"
    pipeline_changed = "PIPELINE_CHANGED"
    workflow_changed = "WORKFLOW_CHANGED"


class DomainEvent(BaseModel):
    type: EventType
    tenant_id: str
    payload: Mapping[str, Any] = Field(default_factory=dict)
    occurred_at: datetime = Field(default_factory=datetime.utcnow)


__all__ = ["EventType", "DomainEvent"]
