from __future__ import annotations

import asyncio
import uuid
from typing import Any

import pydantic
from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, Field

from brandos_assistant.assistant import BrandAssistant
from brandos_assistant.content_pipeline import ContentPipelineGenerator
from brandos_assistant.conversation_store import ConversationStore
from brandos_assistant.errors import ConversationBusyError, ValidationError
from brandos_assistant.events import EventBus
from brandos_assistant.firestore_store import FirestoreKeyValueStore
from brandos_assistant.logging_config import set_trace_id, setup_logging
from brandos_assistant.models.conversation import Citation, ConversationTurn
from brandos_assistant.models.pipeline import AutomationWorkflow, ScheduledPost
from brandos_assistant.models.profile import TenantProfile
from brandos_assistant.models.site import Page, SiteDocument, TemplateId
from brandos_assistant.profile_repository import LocalProfileRepository, StoredProfileRepository
from brandos_assistant.pubsub_client import PubSubEventPublisher
from brandos_assistant.settings import Settings
from brandos_assistant.site_store import SiteDocumentStore
from brandos_assistant.storage import InMemoryKeyValueStore
from brandos_assistant.vertex_ai_adapter import build_language_model


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)


class ChatResponse(BaseModel):
    reply: str
    intent: str | None = None
    citations: list[Citation] = Field(default_factory=list)
    error: str | None = None


class SiteBuildRequest(BaseModel):
    message: str = Field(min_length=1)
    target_page_id: str | None = None


class SiteBuildResponse(BaseModel):
    reply: str
    document: SiteDocument
    target_page_id: str
    applied: int
    rejections: list[str]
    parse_error: str | None = None
    error: str | None = None


class CreatePageRequest(BaseModel):
    name: str


class SetTemplateRequest(BaseModel):
    template_id: TemplateId


# Environment configuration
settings = Settings.from_env()

# Setup logging
setup_logging(environment=settings.environment, project_id=settings.project_id)

# Use Firestore in production, in-memory for dev
if settings.storage_backend == "memory":
    kv_store = InMemoryKeyValueStore()
else:
    kv_store = FirestoreKeyValueStore(project_id=settings.project_id)

event_bus = EventBus()
if settings.project_id and settings.events_topic:
    PubSubEventPublisher(settings.project_id, settings.events_topic).attach(event_bus)

language_model = build_language_model(
    project_id=settings.project_id,
    location=settings.location,
    model_name=settings.model_name,
)
profiles = StoredProfileRepository(
    kv_store, fallback=LocalProfileRepository(base_path=settings.profile_data_dir)
)
assistant = BrandAssistant(
    model=language_model,
    profiles=profiles,
    conversations=ConversationStore(kv_store),
    sites=SiteDocumentStore(kv_store),
    events=event_bus,
)
pipeline = ContentPipelineGenerator(model=language_model, profiles=profiles, kv=kv_store, events=event_bus)

app = FastAPI(title="BrandOS Assistant API", version="0.1.0")


@app.middleware("http")
async def trace_requests(request: Request, call_next):
    header = request.headers.get("X-Cloud-Trace-Context", "")
    set_trace_id(header.split("/")[0] or str(uuid.uuid4()))
    return await call_next(request)


@app.exception_handler(ValidationError)
async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse({"detail": str(exc)}, status_code=400)


@app.exception_handler(pydantic.ValidationError)
async def handle_model_validation_error(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    errors = exc.errors(include_url=False, include_context=False)
    return JSONResponse({"detail": jsonable_encoder(errors)}, status_code=422)


@app.exception_handler(ConversationBusyError)
async def handle_busy(request: Request, exc: ConversationBusyError) -> JSONResponse:
    return JSONResponse({"detail": "A previous request for this conversation is still running"}, status_code=409)


@app.put("/v1/tenants/{tenant_id}/profile", response_model=TenantProfile)
async def save_profile(tenant_id: str, draft: dict[str, Any]) -> TenantProfile:
    return profiles.save_draft(tenant_id, draft)


@app.get("/v1/tenants/{tenant_id}/profile", response_model=TenantProfile)
async def get_profile(tenant_id: str) -> TenantProfile:
    return profiles.get_profile(tenant_id) or TenantProfile()


@app.post("/v1/tenants/{tenant_id}/chat", response_model=ChatResponse)
async def chat(tenant_id: str, request: ChatRequest) -> ChatResponse:
    reply = await asyncio.to_thread(assistant.respond, tenant_id, request.message)
    return ChatResponse(
        reply=reply.text,
        intent=reply.intent.value if reply.intent else None,
        citations=reply.citations,
        error=reply.error,
    )


@app.get("/v1/tenants/{tenant_id}/chat", response_model=list[ConversationTurn])
async def get_chat_history(tenant_id: str) -> list[ConversationTurn]:
    return assistant.get_history(tenant_id)


@app.delete("/v1/tenants/{tenant_id}/chat", status_code=204)
async def clear_chat_history(tenant_id: str) -> Response:
    assistant.clear_history(tenant_id)
    return Response(status_code=204)


@app.post("/v1/tenants/{tenant_id}/site:build", response_model=SiteBuildResponse)
async def build_site(tenant_id: str, request: SiteBuildRequest) -> SiteBuildResponse:
    reply = await asyncio.to_thread(
        assistant.build_site, tenant_id, request.message, target_page_id=request.target_page_id
    )
    return SiteBuildResponse(
        reply=reply.text,
        document=reply.document,
        target_page_id=reply.target_page_id,
        applied=reply.applied,
        rejections=reply.rejections,
        parse_error=reply.parse_error,
        error=reply.error,
    )


@app.get("/v1/tenants/{tenant_id}/site")
async def get_site(tenant_id: str) -> JSONResponse:
    return JSONResponse(assistant.get_site(tenant_id).model_dump(mode="json", by_alias=True))


@app.post("/v1/tenants/{tenant_id}/site/pages", response_model=Page, status_code=201)
async def create_page(tenant_id: str, request: CreatePageRequest) -> Page:
    return assistant.create_page(tenant_id, request.name)


@app.delete("/v1/tenants/{tenant_id}/site/pages/{page_id}", status_code=204)
async def delete_page(tenant_id: str, page_id: str) -> Response:
    assistant.delete_page(tenant_id, page_id)
    return Response(status_code=204)


@app.delete("/v1/tenants/{tenant_id}/site/sections/{section_id}", status_code=204)
async def remove_section(tenant_id: str, section_id: str) -> Response:
    assistant.remove_section(tenant_id, section_id)
    return Response(status_code=204)


@app.put("/v1/tenants/{tenant_id}/site/template")
async def set_template(tenant_id: str, request: SetTemplateRequest) -> JSONResponse:
    document = assistant.set_template(tenant_id, request.template_id)
    return JSONResponse(document.model_dump(mode="json", by_alias=True))


@app.get("/v1/tenants/{tenant_id}/site/preview", response_class=HTMLResponse)
async def preview_site(tenant_id: str, page_id: str | None = None) -> HTMLResponse:
    return HTMLResponse(assistant.render_preview(tenant_id, page_id))


@app.post("/v1/tenants/{tenant_id}/pipeline:synthesize", response_model=list[ScheduledPost])
async def synthesize_pipeline(tenant_id: str) -> list[ScheduledPost]:
    return await asyncio.to_thread(pipeline.synthesize_pipeline, tenant_id)


@app.post("/v1/tenants/{tenant_id}/channels:activate", response_model=AutomationWorkflow)
async def activate_channels(tenant_id: str) -> AutomationWorkflow:
    return await asyncio.to_thread(pipeline.activate_channels, tenant_id)


@app.get("/v1/tenants/{tenant_id}/workflow", response_model=AutomationWorkflow)
async def get_workflow(tenant_id: str) -> AutomationWorkflow:
    return pipeline.get_workflow(tenant_id) or AutomationWorkflow()


@app.get("/v1/tenants/{tenant_id}/pipeline", response_model=list[ScheduledPost])
async def list_pipeline(tenant_id: str) -> list[ScheduledPost]:
    return pipeline.list_posts(tenant_id)


@app.post("/v1/tenants/{tenant_id}/pipeline/posts", response_model=ScheduledPost, status_code=201)
async def create_post(tenant_id: str, post: dict[str, Any]) -> ScheduledPost:
    return pipeline.create_post(tenant_id, post)


@app.delete("/v1/tenants/{tenant_id}/pipeline", status_code=204)
async def clear_pipeline(tenant_id: str) -> Response:
    pipeline.clear_schedule(tenant_id)
    return Response(status_code=204)


@app.get("/v1/tenants/{tenant_id}/report")
async def intelligence_report(tenant_id: str) -> JSONResponse:
    report = await asyncio.to_thread(pipeline.intelligence_report, tenant_id)
    return JSONResponse({"report": report})


@app.get("/health")
async def healthcheck() -> JSONResponse:
    return JSONResponse({"status": "ok", "model_configured": assistant.configured})
