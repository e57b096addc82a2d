from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Protocol, Sequence

from .knowledge_context import search_context
from .language_model import LanguageModel
from .models.conversation import Citation, ConversationTurn, Role
from .models.llm import (
    FunctionResponse,
    FunctionTool,
    GroundingSource,
    ModelMessage,
    WebSearchTool,
)
from .prompts import BRAND_STRATEGIST_INSTRUCTION, INTERNAL_KNOWLEDGE_INSTRUCTION, MARKET_RESEARCH_INSTRUCTION

logger = logging.getLogger(__name__)

EMPTY_RESPONSE_TEXT = "I'm sorry, I couldn't generate a response."

SEARCH_INTERNAL_DOCUMENTS = FunctionTool(
    name="search_internal_documents",
    description="Search the company's internal brand documents: profile, mission, value propositions and offerings.",
    parameters={
        "type": "object",
        "properties": {
            "query": {"type": "string", "description": "What to look up in the internal documents."}
        },
        "required": ["query"],
    },
)


@dataclass
class ExecutionResult:
    text: str
    citations: list[Citation] = field(default_factory=list)


class StrategyExecutor(Protocol):
    def execute(
        self,
        *,
        history: Sequence[ConversationTurn],
        user_text: str,
        knowledge_context: str,
    ) -> ExecutionResult:
        ...


def to_model_history(history: Sequence[ConversationTurn], user_text: str) -> list[ModelMessage]:
    """Thread the stored turns plus the new user text into model messages.

    Leading assistant turns are dropped: the provider requires the conversation to start with the user.
    """
    turns = list(history)
    while turns and turns[0].role is Role.assistant:
        turns.pop(0)
    messages = [
        ModelMessage(role="user" if turn.role is Role.user else "model", text=turn.content)
        for turn in turns
    ]
    messages.append(ModelMessage(role="user", text=user_text))
    return messages


def extract_citations(sources: Iterable[GroundingSource]) -> list[Citation]:
    """Turn grounding sources into citations, dropping entries without a uri and repeated uris."""
    citations: list[Citation] = []
    seen: set[str] = set()
    for source in sources:
        uri = (source.uri or "").strip()
        if not uri or uri in seen:
            continue
        seen.add(uri)
        citations.append(Citation(title=(source.title or "").strip() or uri, uri=uri))
    return citations


class InternalKnowledgeExecutor:
    """Answers from the tenant's own brand documents through a simulated retrieval tool."""

    def __init__(self, model: LanguageModel, *, temperature: float = 0.4) -> None:
        self._model = model
        self._temperature = temperature

    def execute(
        self,
        *,
        history: Sequence[ConversationTurn],
        user_text: str,
        knowledge_context: str,
    ) -> ExecutionResult:
        contents = to_model_history(history, user_text)
        response = self._model.generate(
            contents,
            system_instruction=INTERNAL_KNOWLEDGE_INSTRUCTION,
            temperature=self._temperature,
            tools=[SEARCH_INTERNAL_DOCUMENTS],
        )

        calls = [call for call in response.function_calls if call.name == SEARCH_INTERNAL_DOCUMENTS.name]
        if not calls:
            return ExecutionResult(text=response.text or EMPTY_RESPONSE_TEXT)

        call = calls[0]
        query = str(call.args.get("query") or user_text)
        snippet = search_context(knowledge_context, query)
        logger.info(
            "Answered internal document search",
            extra={"query": query, "snippet_length": len(snippet)},
        )

        follow_up = [
            *contents,
            ModelMessage(role="model", function_call=call),
            ModelMessage(
                role="user",
                function_response=FunctionResponse(name=call.name, response={"content": snippet}),
            ),
        ]
        final = self._model.generate(
            follow_up,
            system_instruction=INTERNAL_KNOWLEDGE_INSTRUCTION,
            temperature=self._temperature,
            tools=[SEARCH_INTERNAL_DOCUMENTS],
        )
        return ExecutionResult(text=final.text or EMPTY_RESPONSE_TEXT)


class LiveSearchExecutor:
    """Answers with live web search grounding and returns the cited sources."""

    def __init__(self, model: LanguageModel, *, temperature: float = 0.5) -> None:
        self._model = model
        self._temperature = temperature

    def execute(
        self,
        *,
        history: Sequence[ConversationTurn],
        user_text: str,
        knowledge_context: str,
    ) -> ExecutionResult:
        response = self._model.generate(
            to_model_history(history, user_text),
            system_instruction=MARKET_RESEARCH_INSTRUCTION.format(context=knowledge_context),
            temperature=self._temperature,
            tools=[WebSearchTool()],
        )
        citations = extract_citations(response.grounding_sources)
        logger.info(
            "Answered with web search grounding",
            extra={"sources": len(response.grounding_sources), "citations": len(citations)},
        )
        return ExecutionResult(text=response.text or EMPTY_RESPONSE_TEXT, citations=citations)


class GeneralExecutor:
    def __init__(self, model: LanguageModel, *, temperature: float = 0.7) -> None:
        self._model = model
        self._temperature = temperature

    def execute(
        self,
        *,
        history: Sequence[ConversationTurn],
        user_text: str,
        knowledge_context: str,
    ) -> ExecutionResult:
        response = self._model.generate(
            to_model_history(history, user_text),
            system_instruction=BRAND_STRATEGIST_INSTRUCTION,
            temperature=self._temperature,
        )
        return ExecutionResult(text=response.text or EMPTY_RESPONSE_TEXT)


__all__ = [
    "EMPTY_RESPONSE_TEXT",
    "SEARCH_INTERNAL_DOCUMENTS",
    "ExecutionResult",
    "StrategyExecutor",
    "to_model_history",
    "extract_citations",
    "InternalKnowledgeExecutor",
    "LiveSearchExecutor",
    "GeneralExecutor",
]
