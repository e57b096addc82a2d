from brandos_assistant.knowledge_context import NO_CONTEXT_AVAILABLE, build_context, search_context
from brandos_assistant.models.profile import TenantProfile


def test_missing_profile_returns_sentinel():
    assert build_context(None) == NO_CONTEXT_AVAILABLE
    assert build_context(TenantProfile()) == NO_CONTEXT_AVAILABLE


def test_full_profile_lists_every_field_in_order(profile):
    context = build_context(profile)

    assert "Company: Northwind Analytics" in context
    assert "Industry: B2B SaaS" in context
    assert "Mission: Make every operations team data-literate." in context
    assert "- Setup in one day" in context
    assert "- Pulse (Product)" in context
    assert "  Features: Live KPIs, Anomaly alerts" in context
    assert "  Differentiator: Zero-config connectors" in context
    assert context.index("Company:") < context.index("Mission:") < context.index("Offerings:")
    assert build_context(profile) == context


def test_partial_profile_only_emits_populated_fields():
    context = build_context(TenantProfile(company_name="Solo Studio"))

    assert "Company: Solo Studio" in context
    assert "Mission" not in context
    assert "Offerings" not in context


def test_profile_accepts_onboarding_camel_case(profile_data):
    profile = TenantProfile.model_validate(profile_data)

    assert profile.company_name == "Northwind Analytics"
    assert profile.offerings[1].name == "Data Coaching"


def test_search_context_returns_matching_lines(profile):
    context = build_context(profile)

    snippet = search_context(context, "Tell me about Pulse")

    assert snippet == "- Pulse (Product)"


def test_search_context_without_match_returns_everything(profile):
    context = build_context(profile)

    assert search_context(context, "quantum") == context
    assert search_context(NO_CONTEXT_AVAILABLE, "pulse") == NO_CONTEXT_AVAILABLE
