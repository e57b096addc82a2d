from __future__ import annotations

import logging
from typing import Any, Sequence

import vertexai
from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from vertexai.generative_models import (
    Content,
    FunctionDeclaration,
    GenerationConfig,
    GenerativeModel,
    Part,
    Tool,
    grounding,
)

from .errors import ConfigurationError, TransportError
from .models.llm import (
    FunctionCall,
    FunctionTool,
    GroundingSource,
    ModelMessage,
    ModelResponse,
    ModelTool,
    WebSearchTool,
)

logger = logging.getLogger(__name__)


class VertexAIAdapter:
    """Adapter for Vertex AI Gemini models."""

    def __init__(
        self,
        *,
        project_id: str | None,
        location: str = "us-central1",
        model_name: str = "gemini-1.5-pro",
        max_output_tokens: int = 8192,
    ) -> None:
        """Initialize Vertex AI adapter.

        Args:
            project_id: GCP project ID
            location: Vertex AI location
            model_name: Model name (e.g., "gemini-1.5-pro")
            max_output_tokens: Upper bound applied to every request

        Raises:
            ConfigurationError: when no project is configured
        """
        if not project_id:
            raise ConfigurationError("PROJECT_ID is not configured for Vertex AI")

        self.project_id = project_id
        self.location = location
        self.model_name = model_name
        self.max_output_tokens = max_output_tokens

        vertexai.init(project=project_id, location=location)

    def generate(
        self,
        contents: Sequence[ModelMessage],
        *,
        system_instruction: str | None = None,
        temperature: float = 0.7,
        tools: Sequence[ModelTool] = (),
        response_format: str | None = None,
    ) -> ModelResponse:
        """Generate a response using Vertex AI.

        Args:
            contents: Ordered conversation (user/model turns, function calls and results)
            system_instruction: System prompt for this call
            temperature: Sampling temperature (0.0 - 1.0)
            tools: Callable functions and/or web-search grounding to enable
            response_format: Optional response format ("json" for JSON mode)

        Returns:
            Provider-neutral response

        Raises:
            ConfigurationError: credentials are missing or rejected
            TransportError: the call failed
        """
        generation_config = GenerationConfig(
            temperature=temperature,
            max_output_tokens=self.max_output_tokens,
            response_mime_type="application/json" if response_format == "json" else None,
        )
        model = GenerativeModel(self.model_name, system_instruction=system_instruction)

        try:
            response = model.generate_content(
                [self._to_content(message) for message in contents],
                generation_config=generation_config,
                tools=self._to_tools(tools) or None,
            )
        except auth_exceptions.GoogleAuthError as exc:
            raise ConfigurationError(f"Vertex AI credentials unavailable: {exc}") from exc
        except google_exceptions.GoogleAPIError as exc:
            logger.warning(
                "Vertex AI request failed",
                exc_info=True,
                extra={"model": self.model_name, "error": str(exc)},
            )
            raise TransportError(str(exc)) from exc
        except (ConnectionError, TimeoutError) as exc:
            raise TransportError(str(exc)) from exc

        result = self._from_response(response)

        logger.info(
            "Generated content with Vertex AI",
            extra={
                "model": self.model_name,
                "temperature": temperature,
                "message_count": len(contents),
                "tool_count": len(tools),
                "output_length": len(result.text),
                "function_calls": [call.name for call in result.function_calls],
            },
        )
        return result

    def _to_content(self, message: ModelMessage) -> Content:
        if message.function_call is not None:
            part = Part.from_dict(
                {"function_call": {"name": message.function_call.name, "args": dict(message.function_call.args)}}
            )
        elif message.function_response is not None:
            part = Part.from_function_response(
                name=message.function_response.name,
                response=dict(message.function_response.response),
            )
        else:
            part = Part.from_text(message.text or "")
        return Content(role=message.role, parts=[part])

    def _to_tools(self, tools: Sequence[ModelTool]) -> list[Tool]:
        declarations = [
            FunctionDeclaration(name=tool.name, description=tool.description, parameters=dict(tool.parameters))
            for tool in tools
            if isinstance(tool, FunctionTool)
        ]
        converted: list[Tool] = []
        if declarations:
            converted.append(Tool(function_declarations=declarations))
        if any(isinstance(tool, WebSearchTool) for tool in tools):
            converted.append(Tool.from_google_search_retrieval(grounding.GoogleSearchRetrieval()))
        return converted

    def _from_response(self, response: Any) -> ModelResponse:
        candidates = list(getattr(response, "candidates", None) or [])
        if not candidates:
            return ModelResponse()
        candidate = candidates[0]

        function_calls = [
            FunctionCall(name=call.name, args=dict(call.args or {}))
            for call in (getattr(candidate, "function_calls", None) or [])
        ]

        try:
            text = candidate.text
        except (ValueError, AttributeError):
            # Raised when the candidate only carries a function call or was blocked.
            text = ""

        sources: list[GroundingSource] = []
        metadata = getattr(candidate, "grounding_metadata", None)
        for chunk in getattr(metadata, "grounding_chunks", None) or []:
            web = getattr(chunk, "web", None)
            if web is not None:
                sources.append(GroundingSource(title=getattr(web, "title", None), uri=getattr(web, "uri", None)))

        return ModelResponse(text=text or "", function_calls=function_calls, grounding_sources=sources)


def build_language_model(*, project_id: str | None, location: str, model_name: str) -> VertexAIAdapter | None:
    """Return a configured adapter, or ``None`` when Vertex AI is not configured."""
    try:
        return VertexAIAdapter(project_id=project_id, location=location, model_name=model_name)
    except ConfigurationError:
        logger.warning("Vertex AI is not configured; assistant will answer with a configuration notice")
        return None


__all__ = ["VertexAIAdapter", "build_language_model"]
