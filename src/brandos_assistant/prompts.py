from __future__ import annotations

from .models.site import SECTION_TYPES, SiteDocument, TemplateId

BRAND_STRATEGIST_INSTRUCTION = (
    "You are an elite Brand Automation Strategist. You help enterprises manage their brand identity, "
    "assets, and social media strategy. Be professional, creative, and concise."
)

INTERNAL_KNOWLEDGE_INSTRUCTION = (
    f"{BRAND_STRATEGIST_INSTRUCTION} "
    "Questions about the company, its mission, offerings or positioning must be answered from the "
    "internal brand documents. Call the search_internal_documents tool to retrieve them before answering, "
    "and never invent facts that are not in the retrieved documents."
)

MARKET_RESEARCH_INSTRUCTION = (
    f"{BRAND_STRATEGIST_INSTRUCTION} "
    "Use live web search to answer questions about markets, competitors and current trends. "
    "Prefer recent sources and relate findings back to the company described below.\n\n{context}"
)

ROUTER_PROMPT = """Classify the user request into exactly one category.

INTERNAL: questions about our own company, brand, mission, products, services or positioning.
MARKET: questions needing current external information such as competitors, market trends, news or prices.
GENERAL: everything else, including small talk, writing help and generic marketing advice.

User request:
{text}

Respond with one word only: INTERNAL, MARKET or GENERAL."""

WIDGET_SCHEMA = {
    "Header": "siteName, links (list of strings), ctaText",
    "Hero": "title, subtitle, btn1Text, btn1Link, btn2Text",
    "Grid": "heading, items (list of {title, body})",
    "Pricing": "heading, plans (list of {name, price, period, ctaText, highlighted})",
    "Contact": "title, subtitle, btnText, email",
}

SITE_BUILDER_INSTRUCTION = """You are the BrandOS website-building agent. You edit the tenant's website by emitting actions.

Reply with a short explanation for the user, then end your reply with a single JSON array of actions.
If no change is needed, do not include any array.

Available actions:
- {{"action": "CREATE_PAGE", "pageName": "<name>"}}  (later ADD_WIDGET actions target this page)
- {{"action": "RESET_PAGE"}}  (removes every section of the target page)
- {{"action": "SET_TEMPLATE", "templateId": "<one of {templates}>"}}
- {{"action": "ADD_WIDGET", "widgetType": "<widget>", "attributes": {{...}}}}
- {{"action": "DELETE_PAGE", "pageName": "<name>"}}  (the home page cannot be deleted)
- {{"action": "REMOVE_WIDGET", "sectionId": "<section id>"}}

Widgets and their attributes:
{widgets}

Current site:
{site}

Brand context:
{context}"""


def site_builder_instruction(document: SiteDocument, context: str) -> str:
    widgets = "\n".join(f"- {name}: {WIDGET_SCHEMA[name]}" for name in SECTION_TYPES)
    return SITE_BUILDER_INSTRUCTION.format(
        templates=", ".join(template.value for template in TemplateId),
        widgets=widgets,
        site=describe_document(document),
        context=context,
    )


def describe_document(document: SiteDocument) -> str:
    lines = [f"Template: {document.template_id.value}"]
    for page in document.pages:
        sections = ", ".join(f"{section.type}#{section.id}" for section in page.sections) or "empty"
        lines.append(f"- {page.name} ({page.path}): {sections}")
    return "\n".join(lines)


PIPELINE_PROMPT = """Synthesize a 1-week strategic content pipeline for {company} ({industry}).
Mission: {mission}. Voice: {voice}.
Return exactly 4 posts as a JSON array of objects with the keys
"platform" (one of {channels}), "title", "contentSummary" and "daysFromNow" (integer 0-7)."""

REPORT_PROMPT = (
    'Generate a high-level "Enterprise Intelligence Report" for {company}. '
    "1. Summary, 2. Strategy, 3. Future Opportunities.\n\n{context}"
)


__all__ = [
    "BRAND_STRATEGIST_INSTRUCTION",
    "INTERNAL_KNOWLEDGE_INSTRUCTION",
    "MARKET_RESEARCH_INSTRUCTION",
    "ROUTER_PROMPT",
    "WIDGET_SCHEMA",
    "site_builder_instruction",
    "describe_document",
    "PIPELINE_PROMPT",
    "REPORT_PROMPT",
]
