from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Sequence

from pydantic import BaseModel, Field


class Role(str, Enum):
    user = "USER"
    assistant = "ASSISTANT"


class Citation(BaseModel):
    title: str
    uri: str


class ConversationTurn(BaseModel):
    role: Role
    content: str
    citations: Sequence[Citation] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @classmethod
    def user(cls, content: str) -> "ConversationTurn":
        return cls(role=Role.user, content=content)

    @classmethod
    def assistant(cls, content: str, citations: Sequence[Citation] = ()) -> "ConversationTurn":
        return cls(role=Role.assistant, content=content, citations=list(citations))


__all__ = ["Role", "Citation", "ConversationTurn"]
