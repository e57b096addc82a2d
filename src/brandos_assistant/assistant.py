from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, Mapping

from .action_parser import extract_action_batch
from .conversation_store import ConversationStore
from .errors import ConfigurationError, ConversationBusyError, ParseError, TransportError
from .events import EventBus
from .executors import (
    ExecutionResult,
    GeneralExecutor,
    InternalKnowledgeExecutor,
    LiveSearchExecutor,
    StrategyExecutor,
    to_model_history,
)
from .intent_router import IntentLabel, IntentRouter
from .interpreter import BatchResult, SiteCommandInterpreter
from .knowledge_context import build_context
from .language_model import LanguageModel
from .logging_config import set_tenant_id
from .models.conversation import Citation, ConversationTurn
from .models.events import EventType
from .models.site import Page, SiteDocument, TemplateId
from .profile_repository import ProfileRepository
from .prompts import site_builder_instruction
from .renderer import render_page
from .site_document import create_page, delete_page, remove_section
from .site_store import SiteDocumentStore
from .storage import require_tenant

logger = logging.getLogger(__name__)

CONFIGURATION_MESSAGE = (
    "The Brand Intelligence Engine is not configured. Set PROJECT_ID to connect Vertex AI and try again."
)
SERVICE_UNAVAILABLE_MESSAGE = (
    "The Brand Intelligence Engine is temporarily unavailable. Please try again in a moment."
)
SITE_BUILDER_CHANNEL = "site_builder"
DEFAULT_SITE_NAME = "Your Brand"


@dataclass
class AssistantReply:
    text: str
    intent: IntentLabel | None = None
    citations: list[Citation] = field(default_factory=list)
    error: str | None = None


@dataclass
class SiteBuildReply:
    text: str
    document: SiteDocument
    target_page_id: str
    preview: str
    applied: int = 0
    rejections: list[str] = field(default_factory=list)
    parse_error: str | None = None
    error: str | None = None


class TenantLocks:
    """One in-flight request per tenant conversation; other tenants never wait."""

    def __init__(self) -> None:
        # Only conversations with a request in flight are tracked.
        self._in_flight: set[tuple[str, str | None]] = set()
        self._guard = threading.Lock()

    @contextmanager
    def hold(self, tenant_id: str, channel: str | None = None) -> Iterator[None]:
        key = (tenant_id, channel)
        with self._guard:
            if key in self._in_flight:
                raise ConversationBusyError(tenant_id)
            self._in_flight.add(key)
        try:
            yield
        finally:
            with self._guard:
                self._in_flight.discard(key)

    def in_flight(self) -> int:
        with self._guard:
            return len(self._in_flight)


class BrandAssistant:
    """Entry point used by the UI layer: chat answers, site building and direct site edits."""

    def __init__(
        self,
        *,
        model: LanguageModel | None,
        profiles: ProfileRepository,
        conversations: ConversationStore,
        sites: SiteDocumentStore,
        events: EventBus | None = None,
        router: IntentRouter | None = None,
        executors: Mapping[IntentLabel, StrategyExecutor] | None = None,
        interpreter: SiteCommandInterpreter | None = None,
    ) -> None:
        self._model = model
        self._profiles = profiles
        self._conversations = conversations
        self._sites = sites
        self.events = events or EventBus()
        self._interpreter = interpreter or SiteCommandInterpreter()
        self._locks = TenantLocks()
        self._configuration_failed = False

        if model is not None:
            self._router = router or IntentRouter(model)
            self._executors = dict(
                executors
                or {
                    IntentLabel.internal: InternalKnowledgeExecutor(model),
                    IntentLabel.market: LiveSearchExecutor(model),
                    IntentLabel.general: GeneralExecutor(model),
                }
            )

    @property
    def configured(self) -> bool:
        return self._model is not None and not self._configuration_failed

    # -- chat -------------------------------------------------------------

    def respond(self, tenant_id: str, text: str) -> AssistantReply:
        require_tenant(tenant_id)
        set_tenant_id(tenant_id)
        if not self.configured:
            return AssistantReply(text=CONFIGURATION_MESSAGE, error="configuration")

        with self._locks.hold(tenant_id):
            history = self._conversations.read_all(tenant_id)
            context = build_context(self._profiles.get_profile(tenant_id))
            intent = self._router.route(text)

            result = self._execute(self._executors[intent], history=history, user_text=text, context=context)
            if isinstance(result, AssistantReply):
                result.intent = intent
                return result

            self._conversations.extend(
                tenant_id,
                [ConversationTurn.user(text), ConversationTurn.assistant(result.text, result.citations)],
            )

        self.events.publish(EventType.conversation_changed, tenant_id, {"intent": intent.value})
        logger.info(
            "Answered brand assistant request",
            extra={"tenant_id": tenant_id, "intent": intent.value, "citations": len(result.citations)},
        )
        return AssistantReply(text=result.text, intent=intent, citations=result.citations)

    def _execute(
        self,
        executor: StrategyExecutor,
        *,
        history: list[ConversationTurn],
        user_text: str,
        context: str,
    ) -> ExecutionResult | AssistantReply:
        try:
            return executor.execute(history=history, user_text=user_text, knowledge_context=context)
        except ConfigurationError:
            logger.error("Language model rejected configuration", exc_info=True)
            self._configuration_failed = True
            return AssistantReply(text=CONFIGURATION_MESSAGE, error="configuration")
        except TransportError:
            logger.warning("Language model call failed", exc_info=True)
            return AssistantReply(text=SERVICE_UNAVAILABLE_MESSAGE, error="unavailable")
        except Exception:
            logger.error("Strategy executor failed", exc_info=True)
            return AssistantReply(text=SERVICE_UNAVAILABLE_MESSAGE, error="unavailable")

    def get_history(self, tenant_id: str, *, channel: str | None = None) -> list[ConversationTurn]:
        return self._conversations.read_all(tenant_id, channel=channel)

    def clear_history(self, tenant_id: str, *, channel: str | None = None) -> None:
        self._conversations.clear(tenant_id, channel=channel)
        self.events.publish(EventType.conversation_changed, tenant_id, {"cleared": True, "channel": channel})

    # -- site building ----------------------------------------------------

    def build_site(self, tenant_id: str, text: str, *, target_page_id: str | None = None) -> SiteBuildReply:
        """Let the agent edit the tenant's site from a free-text request."""
        require_tenant(tenant_id)
        set_tenant_id(tenant_id)
        site_name = self._site_name(tenant_id)
        if not self.configured:
            return self._unchanged_site_reply(tenant_id, CONFIGURATION_MESSAGE, "configuration", target_page_id, site_name)

        with self._locks.hold(tenant_id, SITE_BUILDER_CHANNEL):
            history = self._conversations.read_all(tenant_id, channel=SITE_BUILDER_CHANNEL)
            snapshot = self._sites.get(tenant_id)
            context = build_context(self._profiles.get_profile(tenant_id))

            try:
                response = self._model.generate(
                    to_model_history(history, text),
                    system_instruction=site_builder_instruction(snapshot, context),
                    temperature=0.4,
                )
            except ConfigurationError:
                logger.error("Language model rejected configuration", exc_info=True)
                self._configuration_failed = True
                return self._unchanged_site_reply(
                    tenant_id, CONFIGURATION_MESSAGE, "configuration", target_page_id, site_name
                )
            except Exception:
                logger.warning("Site builder call failed", exc_info=True)
                return self._unchanged_site_reply(
                    tenant_id, SERVICE_UNAVAILABLE_MESSAGE, "unavailable", target_page_id, site_name
                )

            reply_text = response.text
            parse_error = None
            outcome: BatchResult | None = None
            try:
                batch = extract_action_batch(response.text)
                reply_text = batch.reply
                if batch.actions:
                    _, outcome = self._sites.update(
                        tenant_id, lambda current: self._apply_batch(current, batch.actions, target_page_id)
                    )
            except ParseError as exc:
                # Treat the whole output as conversation; the document stays as it was.
                logger.warning("Discarded unparsable action batch", extra={"tenant_id": tenant_id, "error": str(exc)})
                reply_text = response.text
                parse_error = str(exc)

            self._conversations.extend(
                tenant_id,
                [ConversationTurn.user(text), ConversationTurn.assistant(reply_text)],
                channel=SITE_BUILDER_CHANNEL,
            )

        self.events.publish(EventType.conversation_changed, tenant_id, {"channel": SITE_BUILDER_CHANNEL})

        if outcome is None:
            reply = self._unchanged_site_reply(tenant_id, reply_text, None, target_page_id, site_name)
            reply.parse_error = parse_error
            return reply

        if outcome.changed:
            self.events.publish(
                EventType.document_changed,
                tenant_id,
                {"target_page_id": outcome.target_page_id, "applied": outcome.applied},
            )
        return SiteBuildReply(
            text=reply_text,
            document=outcome.document,
            target_page_id=outcome.target_page_id,
            preview=self._preview(outcome.document, outcome.target_page_id, site_name),
            applied=outcome.applied,
            rejections=outcome.rejections,
        )

    def _apply_batch(self, current: SiteDocument, actions, target_page_id: str | None) -> tuple[SiteDocument, BatchResult]:
        outcome = self._interpreter.apply(current, actions, target_page_id)
        return outcome.document, outcome

    def _unchanged_site_reply(
        self,
        tenant_id: str,
        text: str,
        error: str | None,
        target_page_id: str | None,
        site_name: str,
    ) -> SiteBuildReply:
        document = self._sites.get(tenant_id)
        target = document.find_page(target_page_id) or document.home_page
        return SiteBuildReply(
            text=text,
            document=document,
            target_page_id=target.id,
            preview=self._preview(document, target.id, site_name),
            error=error,
        )

    # -- direct site edits ------------------------------------------------

    def get_site(self, tenant_id: str) -> SiteDocument:
        return self._sites.get(tenant_id)

    def create_page(self, tenant_id: str, name: str) -> Page:
        _, page = self._sites.update(tenant_id, lambda document: (document, create_page(document, name)))
        self.events.publish(EventType.document_changed, tenant_id, {"target_page_id": page.id})
        return page

    def delete_page(self, tenant_id: str, page_id: str) -> Page:
        _, page = self._sites.update(tenant_id, lambda document: (document, delete_page(document, page_id)))
        self.events.publish(EventType.document_changed, tenant_id, {"deleted_page_id": page_id})
        return page

    def remove_section(self, tenant_id: str, section_id: str) -> Page:
        _, page = self._sites.update(tenant_id, lambda document: (document, remove_section(document, section_id)))
        self.events.publish(EventType.document_changed, tenant_id, {"target_page_id": page.id})
        return page

    def set_template(self, tenant_id: str, template_id: TemplateId) -> SiteDocument:
        def mutate(document: SiteDocument) -> tuple[SiteDocument, None]:
            document.template_id = TemplateId(template_id)
            return document, None

        document, _ = self._sites.update(tenant_id, mutate)
        self.events.publish(EventType.document_changed, tenant_id, {"template_id": document.template_id.value})
        return document

    def render_preview(self, tenant_id: str, page_id: str | None = None) -> str:
        return render_page(self._sites.get(tenant_id), page_id, site_name=self._site_name(tenant_id))

    def _preview(self, document: SiteDocument, page_id: str, site_name: str) -> str:
        # The target may have been deleted by the batch; fall back to the home page.
        page = document.find_page(page_id) or document.home_page
        return render_page(document, page.id, site_name=site_name)

    def _site_name(self, tenant_id: str) -> str:
        profile = self._profiles.get_profile(tenant_id)
        return (profile.company_name if profile else None) or DEFAULT_SITE_NAME


__all__ = [
    "CONFIGURATION_MESSAGE",
    "SERVICE_UNAVAILABLE_MESSAGE",
    "SITE_BUILDER_CHANNEL",
    "AssistantReply",
    "SiteBuildReply",
    "TenantLocks",
    "BrandAssistant",
]
