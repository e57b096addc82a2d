"""Extraction of the action batch trailing an assistant reply.

The site-building agent is asked to end its reply with a JSON array of
actions. This module finds that array (the last top-level bracket span in the
text), validates it as a list of ``CommandAction`` and returns the remaining
prose as the conversational reply. It is kept apart from the interpreter so a
stricter structured-output contract can replace it without touching the fold.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field

import pydantic

from .errors import ParseError
from .models.actions import ACTION_LIST_ADAPTER, CommandAction

_FENCE_OPEN_RE = re.compile(r"```(?:json)?\s*$", re.IGNORECASE)
_FENCE_CLOSE_RE = re.compile(r"^\s*```")


@dataclass
class ActionBatch:
    reply: str
    actions: list[CommandAction] = field(default_factory=list)


def find_array_spans(text: str) -> tuple[list[tuple[int, int]], bool]:
    """Return the ``(start, end)`` spans of top-level ``[...]`` literals and whether one was left unclosed.

    Brackets inside JSON strings are ignored once an array has been opened.
    """
    spans: list[tuple[int, int]] = []
    depth = 0
    start = -1
    in_string = False
    escaped = False

    for index, char in enumerate(text):
        if depth == 0:
            if char == "[":
                depth = 1
                start = index
            continue
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                spans.append((start, index + 1))

    return spans, depth > 0


def extract_action_batch(text: str) -> ActionBatch:
    """Split model output into reply text and the trailing action batch.

    Text without any array is a purely conversational reply with zero actions.

    Raises:
        ParseError: the trailing array is unterminated, is not valid JSON, or
            contains an entry that is not a valid action.
    """
    text = text or ""
    spans, unclosed = find_array_spans(text)
    if unclosed:
        raise ParseError("Action array is not terminated")
    if not spans:
        return ActionBatch(reply=text.strip())

    start, end = spans[-1]
    try:
        payload = json.loads(text[start:end])
    except json.JSONDecodeError as exc:
        raise ParseError(f"Action array is not valid JSON: {exc}") from exc

    try:
        actions = ACTION_LIST_ADAPTER.validate_python(payload)
    except pydantic.ValidationError as exc:
        raise ParseError(f"Action array contains invalid actions: {exc.error_count()} error(s)") from exc

    before = _FENCE_OPEN_RE.sub("", text[:start].rstrip())
    after = _FENCE_CLOSE_RE.sub("", text[end:], count=1)
    reply = f"{before.rstrip()}\n{after.strip()}".strip()
    if not reply:
        reply = f"Updated the site with {len(actions)} action(s)."
    return ActionBatch(reply=reply, actions=list(actions))


__all__ = ["ActionBatch", "find_array_spans", "extract_action_batch"]
