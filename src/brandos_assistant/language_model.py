from __future__ import annotations

import json
from typing import Any, Protocol, Sequence

from .errors import ParseError
from .models.llm import ModelMessage, ModelResponse, ModelTool


class LanguageModel(Protocol):
    """Provider-neutral contract used by the router, executors and generators."""

    def generate(
        self,
        contents: Sequence[ModelMessage],
        *,
        system_instruction: str | None = None,
        temperature: float = 0.7,
        tools: Sequence[ModelTool] = (),
        response_format: str | None = None,
    ) -> ModelResponse:
        ...


def user_message(text: str) -> ModelMessage:
    return ModelMessage(role="user", text=text)


def parse_json_text(text: str) -> Any:
    """Parse a JSON payload the model may have wrapped in a markdown code fence."""
    payload = text.strip()
    if payload.startswith("```json"):
        payload = payload[7:]
    if payload.startswith("```"):
        payload = payload[3:]
    if payload.endswith("```"):
        payload = payload[:-3]
    try:
        return json.loads(payload.strip())
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON response: {exc}") from exc


__all__ = ["LanguageModel", "user_message", "parse_json_text"]
