"""HTML rendering of site documents for the live preview.

``render`` is a pure function of the template and the ordered sections: the
same input always yields the same markup. Every section is wrapped in an
element whose id is the section id, so a preview can address and replace a
single section after an action batch.
"""

from __future__ import annotations

import html
import logging
from typing import Any, Callable, Mapping, Sequence

from .errors import ValidationError
from .models.site import (
    ContactSection,
    GridSection,
    HeaderSection,
    HeroSection,
    PricingSection,
    SiteDocument,
    TemplateId,
)

logger = logging.getLogger(__name__)

h = html.escape

SAFE_LINK_PREFIXES = ("http://", "https://", "mailto:", "#", "/")

TEMPLATE_STYLES: Mapping[TemplateId, str] = {
    TemplateId.enterprise_base: "background: radial-gradient(circle at top right, #f8fafc, #ffffff); color: #0f172a;",
    TemplateId.modern_portfolio: "background: #0f172a; color: #ffffff;",
    TemplateId.saas_landing: "background: #ffffff; color: #1e293b; --primary: #4f46e5;",
}

TEMPLATE_LABELS: Mapping[TemplateId, str] = {
    TemplateId.enterprise_base: "Enterprise Base",
    TemplateId.modern_portfolio: "Modern Portfolio",
    TemplateId.saas_landing: "SaaS Landing",
}

BASE_CSS = """
body { font-family: 'Plus Jakarta Sans', sans-serif; margin: 0; padding: 0; min-height: 100vh; }
.section-wrapper { position: relative; border: 2px solid transparent; }
.section-wrapper:hover { border-color: #4f46e5; }
.empty-state { border: 4px dashed rgba(148, 163, 184, 0.3); border-radius: 3rem; margin: 4rem 2rem; padding: 8rem 2rem; text-align: center; color: #94a3b8; }
.unknown-component { border: 2px dashed #f59e0b; background: #fffbeb; color: #92400e; margin: 2rem; padding: 2rem; border-radius: 1.5rem; text-align: center; font-weight: 700; }
nav { padding: 1.5rem; display: flex; justify-content: space-between; align-items: center; border-bottom: 1px solid #f1f5f9; }
header.hero { padding: 6rem 3rem; text-align: center; max-width: 64rem; margin: 0 auto; }
section { padding: 6rem 3rem; }
.grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(16rem, 1fr)); gap: 2rem; max-width: 80rem; margin: 0 auto; }
.card { padding: 2.5rem; border-radius: 2.5rem; border: 1px solid #f1f5f9; }
.plan.highlighted { background: #4f46e5; color: #ffffff; }
.btn { display: inline-block; padding: 1rem 2rem; border-radius: 1rem; font-weight: 800; text-decoration: none; }
"""


def safe_href(link: str | None) -> str:
    """Return ``link`` when it uses an allowed scheme, else ``"#"``."""
    value = (link or "").strip()
    if value.lower().startswith(SAFE_LINK_PREFIXES):
        return value
    return "#"


def _render_header(section: HeaderSection, site_name: str) -> str:
    attrs = section.attributes
    links = "".join(f'<a href="#">{h(link)}</a>' for link in attrs.links)
    return (
        "<nav>"
        f'<div class="brand">{h(attrs.site_name or site_name)}</div>'
        f'<div class="links">{links}</div>'
        f'<button class="btn">{h(attrs.cta_text)}</button>'
        "</nav>"
    )


def _render_hero(section: HeroSection, site_name: str) -> str:
    attrs = section.attributes
    subtitle = attrs.subtitle or f"Next-generation brand scaling for {site_name}."
    buttons = f'<a class="btn primary" href="{h(safe_href(attrs.btn1_link))}">{h(attrs.btn1_text)}</a>'
    if attrs.btn2_text:
        buttons += f'<a class="btn secondary" href="#">{h(attrs.btn2_text)}</a>'
    return (
        '<header class="hero">'
        f'<h1 class="hero-title">{h(attrs.title)}</h1>'
        f'<p class="hero-subtitle">{h(subtitle)}</p>'
        f'<div class="actions">{buttons}</div>'
        "</header>"
    )


def _render_grid(section: GridSection, site_name: str) -> str:
    attrs = section.attributes
    heading = f"<h2>{h(attrs.heading)}</h2>" if attrs.heading else ""
    cards = "".join(
        f'<div class="card"><h3>{h(item.title)}</h3><p>{h(item.body)}</p></div>' for item in attrs.items
    )
    return f'<section class="features">{heading}<div class="grid">{cards}</div></section>'


def _render_pricing(section: PricingSection, site_name: str) -> str:
    attrs = section.attributes
    heading = f"<h2>{h(attrs.heading)}</h2>" if attrs.heading else ""
    plans = []
    for plan in attrs.plans:
        css = "card plan highlighted" if plan.highlighted else "card plan"
        period = f"<span>{h(plan.period)}</span>" if plan.period else ""
        plans.append(
            f'<div class="{css}">'
            f"<h3>{h(plan.name)}</h3>"
            f"<p class=\"price\">{h(plan.price)}{period}</p>"
            f'<button class="btn">{h(plan.cta_text or plan.name)}</button>'
            "</div>"
        )
    return f'<section class="pricing">{heading}<div class="grid">{"".join(plans)}</div></section>'


def _render_contact(section: ContactSection, site_name: str) -> str:
    attrs = section.attributes
    subtitle = f"<p>{h(attrs.subtitle)}</p>" if attrs.subtitle else ""
    href = f"mailto:{attrs.email}" if attrs.email else "#"
    return (
        '<section class="contact">'
        f"<h2>{h(attrs.title)}</h2>{subtitle}"
        f'<a class="btn" href="{h(safe_href(href))}">{h(attrs.btn_text)}</a>'
        "</section>"
    )


WIDGET_RENDERERS: Mapping[str, Callable[[Any, str], str]] = {
    "Header": _render_header,
    "Hero": _render_hero,
    "Grid": _render_grid,
    "Pricing": _render_pricing,
    "Contact": _render_contact,
}


def render_unknown(widget_type: str) -> str:
    return f'<div class="unknown-component">Unknown component: {h(str(widget_type))}</div>'


def render_section(section: Any, *, site_name: str = "Your Brand") -> str:
    """Render one section inside its addressable wrapper; never raises."""
    renderer = WIDGET_RENDERERS.get(section.type)
    if renderer is None:
        body = render_unknown(section.type)
    else:
        try:
            body = renderer(section, site_name)
        except Exception:
            logger.error(
                "Failed to render section",
                exc_info=True,
                extra={"section_id": section.id, "widget_type": section.type},
            )
            body = render_unknown(section.type)
    return (
        f'<div class="section-wrapper" id="{h(section.id)}" data-widget="{h(str(section.type))}">'
        f"{body}</div>"
    )


def render_empty_state(template_id: TemplateId, site_name: str) -> str:
    return (
        '<div class="empty-state">'
        f'<p class="template-name">{h(TEMPLATE_LABELS[template_id])}</p>'
        f"<p>Canvas initialized for {h(site_name)}. Add sections to build.</p>"
        "</div>"
    )


def render(template_id: TemplateId, sections: Sequence[Any], *, site_name: str = "Your Brand") -> str:
    """Render a complete HTML document for a template and its ordered sections."""
    template_id = TemplateId(template_id)
    if sections:
        body = "".join(render_section(section, site_name=site_name) for section in sections)
    else:
        body = render_empty_state(template_id, site_name)
    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head><meta charset="UTF-8">'
        f"<title>{h(site_name)}</title>"
        f"<style>{BASE_CSS}body {{ {TEMPLATE_STYLES[template_id]} }}</style>"
        "</head>"
        f'<body data-template="{h(template_id.value)}">'
        f'<div id="canvas-root"><div id="sections-container">{body}</div></div>'
        "</body></html>"
    )


def render_page(document: SiteDocument, page_id: str | None = None, *, site_name: str = "Your Brand") -> str:
    """Render one page of ``document``; the home page when ``page_id`` is omitted."""
    page = document.find_page(page_id) if page_id else document.home_page
    if page is None:
        raise ValidationError(f"Page {page_id} does not exist")
    return render(document.template_id, page.sections, site_name=site_name)


__all__ = [
    "TEMPLATE_STYLES",
    "safe_href",
    "WIDGET_RENDERERS",
    "render_unknown",
    "render_section",
    "render_empty_state",
    "render",
    "render_page",
]
