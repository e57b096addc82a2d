import pytest
from fastapi.testclient import TestClient

from brandos_assistant.content_pipeline import ContentPipelineGenerator
from services.api import main

from conftest import ScriptedModel

SITE_REPLY = 'Added a pricing page.\n[{"action": "CREATE_PAGE", "pageName": "Pricing"}, {"action": "ADD_WIDGET", "widgetType": "Pricing"}]'


@pytest.fixture
def client(monkeypatch, make_assistant, profiles, kv):
    def install(model=None):
        monkeypatch.setattr(main, "assistant", make_assistant(model))
        monkeypatch.setattr(main, "profiles", profiles)
        monkeypatch.setattr(main, "pipeline", ContentPipelineGenerator(model=model, profiles=profiles, kv=kv))
        return TestClient(main.app)

    return install


def test_health_reports_model_configuration(client):
    response = client().get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "model_configured": False}


def test_chat_round_trip(client):
    http = client(ScriptedModel(["GENERAL", "Hello from Northwind"]))

    response = http.post("/v1/tenants/acme/chat", json={"message": "hi"})
    history = http.get("/v1/tenants/acme/chat").json()

    assert response.status_code == 200
    assert response.json()["reply"] == "Hello from Northwind"
    assert response.json()["intent"] == "GENERAL"
    assert [turn["role"] for turn in history] == ["USER", "ASSISTANT"]

    assert http.delete("/v1/tenants/acme/chat").status_code == 204
    assert http.get("/v1/tenants/acme/chat").json() == []


def test_chat_without_model_returns_configuration_error(client):
    response = client().post("/v1/tenants/acme/chat", json={"message": "hi"})

    assert response.status_code == 200
    assert response.json()["error"] == "configuration"


def test_busy_conversation_maps_to_conflict(client):
    http = client(ScriptedModel())

    with main.assistant._locks.hold("acme"):
        response = http.post("/v1/tenants/acme/chat", json={"message": "hi"})

    assert response.status_code == 409


def test_site_build_and_preview(client):
    http = client(ScriptedModel([SITE_REPLY]))

    response = http.post("/v1/tenants/acme/site:build", json={"message": "Add pricing"})
    body = response.json()

    assert response.status_code == 200
    assert body["applied"] == 2
    paths = [page["path"] for page in body["document"]["pages"]]
    assert paths == ["/", "/pricing"]

    preview = http.get("/v1/tenants/acme/site/preview", params={"page_id": body["target_page_id"]})
    assert preview.status_code == 200
    assert "Pro Plan" in preview.text


def test_site_page_endpoints(client):
    http = client()

    created = http.post("/v1/tenants/acme/site/pages", json={"name": "Careers"})
    duplicate = http.post("/v1/tenants/acme/site/pages", json={"name": "careers"})
    template = http.put("/v1/tenants/acme/site/template", json={"template_id": "SaasLanding"})
    deleted = http.delete(f"/v1/tenants/acme/site/pages/{created.json()['id']}")
    missing = http.get("/v1/tenants/acme/site/preview", params={"page_id": "page-missing"})

    assert created.status_code == 201
    assert duplicate.status_code == 400
    assert template.json()["templateId"] == "SaasLanding"
    assert deleted.status_code == 204
    assert missing.status_code == 400
    assert [page["path"] for page in http.get("/v1/tenants/acme/site").json()["pages"]] == ["/"]


def test_pipeline_endpoints(client):
    http = client()

    synthesized = http.post("/v1/tenants/acme/pipeline:synthesize")
    listed = http.get("/v1/tenants/acme/pipeline")

    assert synthesized.status_code == 200
    assert listed.json()[0]["id"] == "sp-fb-1-acme"
    assert http.delete("/v1/tenants/acme/pipeline").status_code == 204
    assert http.get("/v1/tenants/acme/pipeline").json() == []


def test_profile_endpoints(client):
    http = client()

    saved = http.put("/v1/tenants/globex/profile", json={"companyName": "Globex"})
    fetched = http.get("/v1/tenants/globex/profile")

    assert saved.status_code == 200
    assert fetched.json()["companyName"] == "Globex"


def test_invalid_post_body_is_rejected_with_422(client):
    http = client()

    response = http.post("/v1/tenants/acme/pipeline/posts", json={"platform": "Fax", "title": "x"})

    assert response.status_code == 422
    assert {error["loc"][0] for error in response.json()["detail"]} >= {"platform"}
    assert http.get("/v1/tenants/acme/pipeline").json() == []


def test_invalid_profile_draft_is_rejected_with_422(client):
    response = client().put("/v1/tenants/globex/profile", json={"offerings": [{"type": "Product"}]})

    assert response.status_code == 422


def test_channel_activation_endpoints(client):
    http = client()

    activated = http.post("/v1/tenants/acme/channels:activate")
    workflow = http.get("/v1/tenants/acme/workflow").json()

    assert activated.status_code == 200
    assert workflow["overallProgress"] == 100
    assert {channel["status"] for channel in workflow["channels"]} == {"Active"}
    assert http.get("/v1/tenants/acme/pipeline").json()[0]["id"] == "sp-fb-1-acme"
