from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

import pytest

from brandos_assistant.assistant import BrandAssistant
from brandos_assistant.conversation_store import ConversationStore
from brandos_assistant.events import EventBus
from brandos_assistant.models.llm import ModelMessage, ModelResponse, ModelTool
from brandos_assistant.models.profile import TenantProfile
from brandos_assistant.profile_repository import StoredProfileRepository
from brandos_assistant.site_store import SiteDocumentStore
from brandos_assistant.storage import InMemoryKeyValueStore

DATA_DIR = Path(__file__).resolve().parent.parent / "data" / "profiles"


class ScriptedModel:
    """Language model double that replays queued responses and records every request."""

    def __init__(self, responses: Sequence[Any] = ()) -> None:
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def generate(
        self,
        contents: Sequence[ModelMessage],
        *,
        system_instruction: str | None = None,
        temperature: float = 0.7,
        tools: Sequence[ModelTool] = (),
        response_format: str | None = None,
    ) -> ModelResponse:
        self.calls.append(
            {
                "contents": list(contents),
                "system_instruction": system_instruction,
                "temperature": temperature,
                "tools": list(tools),
                "response_format": response_format,
            }
        )
        if not self.responses:
            raise AssertionError("ScriptedModel received an unexpected call")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, str):
            return ModelResponse(text=item)
        return item


def load_profile(name: str) -> dict[str, Any]:
    return json.loads((DATA_DIR / f"{name}.json").read_text(encoding="utf-8"))


@pytest.fixture
def profile_data() -> dict[str, Any]:
    return load_profile("northwind")


@pytest.fixture
def profile(profile_data) -> TenantProfile:
    return TenantProfile.model_validate(profile_data)


@pytest.fixture
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def profiles(kv, profile_data) -> StoredProfileRepository:
    repository = StoredProfileRepository(kv)
    repository.save_draft("acme", profile_data)
    return repository


@pytest.fixture
def make_assistant(kv, profiles):
    def factory(model: ScriptedModel | None) -> BrandAssistant:
        return BrandAssistant(
            model=model,
            profiles=profiles,
            conversations=ConversationStore(kv),
            sites=SiteDocumentStore(kv),
            events=EventBus(),
        )

    return factory
