from __future__ import annotations

from typing import Any, Literal, Mapping, Sequence, Union

from pydantic import BaseModel, Field


class FunctionCall(BaseModel):
    name: str
    args: Mapping[str, Any] = Field(default_factory=dict)


class FunctionResponse(BaseModel):
    name: str
    response: Mapping[str, Any] = Field(default_factory=dict)


class ModelMessage(BaseModel):
    """One entry of the conversation sent to the model.

    Exactly one of ``text``, ``function_call`` or ``function_response`` is expected to be set.
    """

    role: Literal["user", "model"]
    text: str | None = None
    function_call: FunctionCall | None = None
    function_response: FunctionResponse | None = None


class FunctionTool(BaseModel):
    kind: Literal["function"] = "function"
    name: str
    description: str
    parameters: Mapping[str, Any] = Field(default_factory=dict)


class WebSearchTool(BaseModel):
    kind: Literal["web_search"] = "web_search"


ModelTool = Union[FunctionTool, WebSearchTool]


class GroundingSource(BaseModel):
    title: str | None = None
    uri: str | None = None


class ModelResponse(BaseModel):
    text: str = ""
    function_calls: Sequence[FunctionCall] = Field(default_factory=list)
    grounding_sources: Sequence[GroundingSource] = Field(default_factory=list)


__all__ = [
    "FunctionCall",
    "FunctionResponse",
    "ModelMessage",
    "FunctionTool",
    "WebSearchTool",
    "ModelTool",
    "GroundingSource",
    "ModelResponse",
]
