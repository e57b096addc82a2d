from types import SimpleNamespace

import pytest

from brandos_assistant import firestore_store
from brandos_assistant.conversation_store import ConversationStore
from brandos_assistant.errors import ValidationError
from brandos_assistant.models.conversation import ConversationTurn
from brandos_assistant.models.site import HeroSection, TemplateId
from brandos_assistant.profile_repository import LocalProfileRepository, StoredProfileRepository
from brandos_assistant.settings import Settings
from brandos_assistant.site_store import SiteDocumentStore
from brandos_assistant.storage import InMemoryKeyValueStore, StorageKeys

from conftest import DATA_DIR


def test_in_memory_store_returns_copies():
    kv = InMemoryKeyValueStore()
    value = {"pages": [1]}
    kv.set("k", value)

    value["pages"].append(2)
    fetched = kv.get("k")
    fetched["pages"].append(3)

    assert kv.get("k") == {"pages": [1]}
    kv.remove("k")
    assert kv.get("k") is None


def test_storage_keys_are_tenant_scoped():
    assert StorageKeys.chats("acme") == "brandos_chats_acme"
    assert StorageKeys.chats("acme", "site_builder") == "brandos_chats_acme:site_builder"
    assert StorageKeys.site("acme/pages") == "brandos_site_acme%2Fpages"
    assert StorageKeys.site("acme") != StorageKeys.site("globex")
    with pytest.raises(ValidationError):
        StorageKeys.site(" ")


def test_channel_history_never_leaks_into_lookalike_tenant():
    store = ConversationStore(InMemoryKeyValueStore())
    store.append("acme", ConversationTurn.user("secret site brief"), channel="site_builder")

    assert store.read_all("acme_site_builder") == []
    assert store.read_all("acme:site_builder") == []
    store.clear("acme_site_builder")
    assert len(store.read_all("acme", channel="site_builder")) == 1


def test_profile_drafts_merge_field_by_field():
    repository = StoredProfileRepository(InMemoryKeyValueStore())
    repository.save_draft("acme", {"companyName": "Acme", "industry": "Retail"})

    profile = repository.save_draft("acme", {"mission": "Sell everything"})

    assert profile.company_name == "Acme"
    assert profile.industry == "Retail"
    assert profile.mission == "Sell everything"
    assert repository.get_profile("globex") is None


def test_stored_profiles_fall_back_to_fixture_profiles():
    repository = StoredProfileRepository(InMemoryKeyValueStore(), fallback=LocalProfileRepository(base_path=DATA_DIR))

    assert repository.get_profile("northwind").company_name == "Northwind Analytics"
    repository.save_draft("northwind", {"companyName": "Northwind Labs"})
    assert repository.get_profile("northwind").company_name == "Northwind Labs"


def test_local_profile_repository_reads_fixtures():
    repository = LocalProfileRepository(base_path=DATA_DIR)

    profile = repository.get_profile("northwind")

    assert profile.company_name == "Northwind Analytics"
    assert profile.offerings[0].features == ["Live KPIs", "Anomaly alerts"]
    assert repository.get_profile("unknown") is None


def test_site_store_defaults_and_round_trips():
    store = SiteDocumentStore(InMemoryKeyValueStore())
    fresh = store.get("acme")
    assert [page.path for page in fresh.pages] == ["/"]

    fresh.template_id = TemplateId.saas_landing
    fresh.home_page.sections.append(HeroSection(attributes={"title": "Stored"}))
    store.save("acme", fresh)

    loaded = store.get("acme")
    assert loaded.template_id is TemplateId.saas_landing
    assert loaded.home_page.sections[0].attributes.title == "Stored"
    assert store.get("globex").home_page.sections == []


def test_site_store_update_writes_nothing_when_mutation_fails():
    store = SiteDocumentStore(InMemoryKeyValueStore())

    def mutate(document):
        document.template_id = TemplateId.modern_portfolio
        raise ValidationError("rejected")

    with pytest.raises(ValidationError):
        store.update("acme", mutate)

    assert store.get("acme").template_id is TemplateId.enterprise_base


def test_settings_from_env():
    settings = Settings.from_env(
        {"ENVIRONMENT": "prod", "PROJECT_ID": "brand-proj", "VERTEX_MODEL": "gemini-1.5-flash"}
    )

    assert settings.model_configured
    assert settings.storage_backend == "firestore"
    assert settings.model_name == "gemini-1.5-flash"
    assert not Settings.from_env({}).model_configured
    assert Settings.from_env({}).storage_backend == "memory"


class FakeSnapshot:
    def __init__(self, data):
        self._data = data
        self.exists = data is not None

    def to_dict(self):
        return self._data


class FakeDocument:
    def __init__(self, documents, key):
        self._documents = documents
        self._key = key

    def get(self):
        return FakeSnapshot(self._documents.get(self._key))

    def set(self, data):
        self._documents[self._key] = data

    def delete(self):
        self._documents.pop(self._key, None)


class FakeFirestoreClient:
    def __init__(self, project=None):
        self.project = project
        self.documents = {}

    def collection(self, name):
        return SimpleNamespace(document=lambda key: FakeDocument(self.documents, key))


def test_firestore_store_keeps_values_as_json(monkeypatch):
    monkeypatch.setattr(firestore_store.firestore, "Client", FakeFirestoreClient)
    store = firestore_store.FirestoreKeyValueStore(project_id="brand-proj")

    store.set("brandos_site_acme", {"templateId": "SaasLanding", "pages": []})

    assert store.get("brandos_site_acme") == {"templateId": "SaasLanding", "pages": []}
    store.remove("brandos_site_acme")
    assert store.get("brandos_site_acme") is None
