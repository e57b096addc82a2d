from types import SimpleNamespace

import pytest

from brandos_assistant.errors import ConfigurationError, ParseError
from brandos_assistant.language_model import parse_json_text
from brandos_assistant.vertex_ai_adapter import VertexAIAdapter, build_language_model


class FunctionOnlyCandidate:
    function_calls = [SimpleNamespace(name="search_internal_documents", args={"query": "pricing"})]
    grounding_metadata = None

    @property
    def text(self):
        raise ValueError("Cannot get the response text: the candidate contains a function call")


def _adapter():
    return VertexAIAdapter.__new__(VertexAIAdapter)


def test_missing_project_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        VertexAIAdapter(project_id=None)
    assert build_language_model(project_id="", location="us-central1", model_name="gemini-1.5-pro") is None


def test_function_call_candidate_has_empty_text():
    response = SimpleNamespace(candidates=[FunctionOnlyCandidate()])

    result = _adapter()._from_response(response)

    assert result.text == ""
    assert result.function_calls[0].name == "search_internal_documents"
    assert result.function_calls[0].args == {"query": "pricing"}


def test_grounding_chunks_become_sources():
    metadata = SimpleNamespace(
        grounding_chunks=[
            SimpleNamespace(web=SimpleNamespace(title="Forrester", uri="https://forrester.example/wave")),
            SimpleNamespace(web=None),
        ]
    )
    candidate = SimpleNamespace(text="Trends", function_calls=[], grounding_metadata=metadata)

    result = _adapter()._from_response(SimpleNamespace(candidates=[candidate]))

    assert result.text == "Trends"
    assert [(source.title, source.uri) for source in result.grounding_sources] == [
        ("Forrester", "https://forrester.example/wave")
    ]


def test_empty_candidates():
    assert _adapter()._from_response(SimpleNamespace(candidates=[])).text == ""


def test_parse_json_text_strips_fences():
    assert parse_json_text('```json\n[{"a": 1}]\n```') == [{"a": 1}]
    with pytest.raises(ParseError):
        parse_json_text("not json")
