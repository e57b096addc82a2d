from __future__ import annotations

import logging
from enum import Enum

from .errors import ConfigurationError, TransportError
from .language_model import LanguageModel, user_message
from .prompts import ROUTER_PROMPT

logger = logging.getLogger(__name__)


class IntentLabel(str, Enum):
    internal = "INTERNAL"
    market = "MARKET"
    general = "GENERAL"


class IntentRouter:
    """Picks the reasoning strategy for a single user request."""

    def __init__(self, model: LanguageModel, *, temperature: float = 0.0) -> None:
        self._model = model
        self._temperature = temperature

    def route(self, text: str) -> IntentLabel:
        try:
            response = self._model.generate(
                [user_message(ROUTER_PROMPT.format(text=text))],
                temperature=self._temperature,
            )
        except (TransportError, ConfigurationError) as exc:
            logger.warning("Intent classification failed, using GENERAL", extra={"error": str(exc)})
            return IntentLabel.general
        except Exception:
            logger.warning("Intent classifier raised unexpectedly, using GENERAL", exc_info=True)
            return IntentLabel.general

        label = parse_label(response.text)
        logger.info("Routed request", extra={"intent": label.value, "raw_label": response.text[:40]})
        return label


def parse_label(answer: str | None) -> IntentLabel:
    """Map the classifier's one-word answer to a label; anything unrecognised is GENERAL."""
    normalized = (answer or "").strip().upper()
    try:
        return IntentLabel(normalized)
    except ValueError:
        return IntentLabel.general


__all__ = ["IntentLabel", "IntentRouter", "parse_label"]
