from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timedelta
from typing import Any

import pydantic

from .errors import BrandAssistantError
from .events import EventBus
from .knowledge_context import build_context
from .language_model import LanguageModel, parse_json_text, user_message
from .models.events import EventType
from .models.pipeline import CHANNELS, AutomationChannel, AutomationWorkflow, ScheduledPost
from .profile_repository import ProfileRepository
from .prompts import PIPELINE_PROMPT, REPORT_PROMPT
from .storage import KeyValueStore, StorageKeys

logger = logging.getLogger(__name__)

REPORT_UNAVAILABLE = "Error synthesizing intelligence report."
REPORT_NOT_CONFIGURED = "AI Configuration Missing."


class ContentPipelineGenerator:
    """Synthesizes a week of scheduled social posts and an intelligence report from the tenant profile."""

    def __init__(
        self,
        *,
        model: LanguageModel | None,
        profiles: ProfileRepository,
        kv: KeyValueStore,
        events: EventBus | None = None,
        now=datetime.utcnow,
    ) -> None:
        self._model = model
        self._profiles = profiles
        self._kv = kv
        self._events = events or EventBus()
        self._now = now
        # Guards every read-modify-write of the stored schedule and workflow.
        self._lock = threading.Lock()

    def synthesize_pipeline(self, tenant_id: str) -> list[ScheduledPost]:
        posts = self._generate_posts(tenant_id)
        with self._lock:
            self._write_posts(tenant_id, posts)
        self._events.publish(EventType.pipeline_changed, tenant_id, {"posts": len(posts)})
        return posts

    def _generate_posts(self, tenant_id: str) -> list[ScheduledPost]:
        profile = self._profiles.get_profile(tenant_id)
        if self._model is None or profile is None:
            return self._static_fallback(tenant_id)

        prompt = PIPELINE_PROMPT.format(
            company=profile.company_name or "the organization",
            industry=profile.industry or "unspecified industry",
            mission=profile.mission or "not provided",
            voice=profile.brand_voice or "professional",
            channels=", ".join(CHANNELS),
        )
        try:
            response = self._model.generate([user_message(prompt)], temperature=0.8, response_format="json")
            generated = parse_json_text(response.text)
            return self._to_posts(generated)
        except (BrandAssistantError, pydantic.ValidationError, KeyError, AttributeError, TypeError, ValueError):
            logger.warning(
                "Falling back to static content pipeline",
                exc_info=True,
                extra={"tenant_id": tenant_id},
            )
            return self._static_fallback(tenant_id)

    def _to_posts(self, generated: Any) -> list[ScheduledPost]:
        if not isinstance(generated, list) or not generated:
            raise ValueError("Expected a non-empty list of posts")
        now = self._now()
        stamp = int(now.timestamp() * 1000)
        return [
            ScheduledPost(
                id=f"sp-ai-{stamp}-{index}",
                platform=item["platform"],
                title=item["title"],
                publish_at=now + timedelta(days=float(item.get("daysFromNow", 1))),
                content_summary=item.get("contentSummary", ""),
            )
            for index, item in enumerate(generated)
        ]

    def _static_fallback(self, tenant_id: str) -> list[ScheduledPost]:
        return [
            ScheduledPost(
                id=f"sp-fb-1-{tenant_id}",
                platform="LinkedIn",
                title="Strategic Vision",
                publish_at=self._now() + timedelta(days=1),
                content_summary="Establishing brand authority in the new ecosystem.",
            )
        ]

    def intelligence_report(self, tenant_id: str) -> str:
        if self._model is None:
            return REPORT_NOT_CONFIGURED
        profile = self._profiles.get_profile(tenant_id)
        company = (profile.company_name if profile else None) or "the organization"
        prompt = REPORT_PROMPT.format(company=company, context=build_context(profile))
        try:
            response = self._model.generate([user_message(prompt)])
        except BrandAssistantError:
            logger.warning("Intelligence report failed", exc_info=True, extra={"tenant_id": tenant_id})
            return REPORT_UNAVAILABLE
        return response.text or "Failed to generate."

    def activate_channels(self, tenant_id: str) -> AutomationWorkflow:
        """Bring every publishing channel from Pending to Active, then synthesize the pipeline.

        Each step is stored and published so a dashboard can follow the progress.
        """
        workflow = AutomationWorkflow(
            channels=[AutomationChannel(type=channel) for channel in CHANNELS],
            overall_progress=5,
        )
        self._save_workflow(tenant_id, workflow)

        for index, channel in enumerate(workflow.channels):
            channel.status = "Active"
            channel.last_action = "Synced with cloud context"
            workflow.overall_progress = min(100, 10 + (index + 1) * 15)
            self._save_workflow(tenant_id, workflow)

        logger.info(
            "Activated publishing channels",
            extra={"tenant_id": tenant_id, "channels": len(workflow.channels)},
        )
        self.synthesize_pipeline(tenant_id)
        return workflow

    def get_workflow(self, tenant_id: str) -> AutomationWorkflow | None:
        raw = self._kv.get(StorageKeys.workflow(tenant_id))
        return AutomationWorkflow.model_validate(raw) if raw else None

    def _save_workflow(self, tenant_id: str, workflow: AutomationWorkflow) -> None:
        with self._lock:
            self._kv.set(StorageKeys.workflow(tenant_id), workflow.model_dump(mode="json", by_alias=True))
        self._events.publish(
            EventType.workflow_changed,
            tenant_id,
            {"overall_progress": workflow.overall_progress},
        )

    def list_posts(self, tenant_id: str) -> list[ScheduledPost]:
        raw = self._kv.get(StorageKeys.pipeline(tenant_id)) or []
        return [ScheduledPost.model_validate(item) for item in raw]

    def create_post(self, tenant_id: str, post: dict[str, Any]) -> ScheduledPost:
        created = ScheduledPost.model_validate({**post, "id": f"sp-{uuid.uuid4().hex[:10]}"})
        with self._lock:
            self._write_posts(tenant_id, [created, *self.list_posts(tenant_id)])
        self._events.publish(EventType.pipeline_changed, tenant_id, {"created": created.id})
        return created

    def clear_schedule(self, tenant_id: str) -> None:
        with self._lock:
            self._kv.remove(StorageKeys.pipeline(tenant_id))
        self._events.publish(EventType.pipeline_changed, tenant_id, {"cleared": True})

    def _write_posts(self, tenant_id: str, posts: list[ScheduledPost]) -> None:
        self._kv.set(StorageKeys.pipeline(tenant_id), [post.model_dump(mode="json", by_alias=True) for post in posts])


__all__ = ["ContentPipelineGenerator", "REPORT_UNAVAILABLE", "REPORT_NOT_CONFIGURED"]
