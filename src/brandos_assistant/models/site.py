from __future__ import annotations

import uuid
from enum import Enum
from typing import Annotated, Any, Literal, Mapping, Sequence, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, field_validator
from pydantic.alias_generators import to_camel

HOME_PATH = "/"
HOME_PAGE_ID = "page-home"


class TemplateId(str, Enum):
    enterprise_base = "EnterpriseBase"
    modern_portfolio = "ModernPortfolio"
    saas_landing = "SaasLanding"


class WidgetType(str, Enum):
    header = "Header"
    hero = "Hero"
    grid = "Grid"
    pricing = "Pricing"
    contact = "Contact"


def new_section_id() -> str:
    return f"sec-{uuid.uuid4().hex[:8]}"


def new_page_id() -> str:
    return f"page-{uuid.uuid4().hex[:8]}"


class WidgetAttributes(BaseModel):
    # Keys outside the widget schema are dropped here and never reach the renderer.
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, extra="ignore")


class HeaderAttributes(WidgetAttributes):
    site_name: str | None = None
    links: Sequence[str] = Field(default_factory=lambda: ["Features", "Case Studies", "Enterprise"])
    cta_text: str = "Get Started"


class HeroAttributes(WidgetAttributes):
    title: str = "Build the Intelligent Future."
    subtitle: str | None = None
    btn1_text: str = "Launch Dashboard"
    btn1_link: str = "#"
    btn2_text: str | None = "Documentation"


class GridItem(WidgetAttributes):
    title: str
    body: str = ""


class GridAttributes(WidgetAttributes):
    heading: str | None = None
    items: Sequence[GridItem] = Field(
        default_factory=lambda: [
            GridItem(title="Autonomous Agents", body="Automation that adapts to your corporate identity."),
            GridItem(title="RAG Storage", body="Every answer grounded in your own brand knowledge."),
            GridItem(title="Global Sync", body="One source of truth across every channel."),
        ]
    )

    @field_validator("items", mode="before")
    @classmethod
    def _coerce_plain_titles(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [{"title": item} if isinstance(item, str) else item for item in value]
        return value


class PricingPlan(WidgetAttributes):
    name: str
    price: str
    period: str | None = None
    cta_text: str | None = None
    highlighted: bool = False


class PricingAttributes(WidgetAttributes):
    heading: str | None = None
    plans: Sequence[PricingPlan] = Field(
        default_factory=lambda: [
            PricingPlan(name="Pro Plan", price="$199", period="/mo"),
            PricingPlan(name="Enterprise", price="Custom", highlighted=True),
        ]
    )


class ContactAttributes(WidgetAttributes):
    title: str = "Ready to Scale?"
    subtitle: str | None = None
    btn_text: str = "Get in Touch"
    email: str | None = None


class HeaderSection(BaseModel):
    id: str = Field(default_factory=new_section_id)
    type: Literal["Header"] = "Header"
    attributes: HeaderAttributes = Field(default_factory=HeaderAttributes)


class HeroSection(BaseModel):
    id: str = Field(default_factory=new_section_id)
    type: Literal["Hero"] = "Hero"
    attributes: HeroAttributes = Field(default_factory=HeroAttributes)


class GridSection(BaseModel):
    id: str = Field(default_factory=new_section_id)
    type: Literal["Grid"] = "Grid"
    attributes: GridAttributes = Field(default_factory=GridAttributes)


class PricingSection(BaseModel):
    id: str = Field(default_factory=new_section_id)
    type: Literal["Pricing"] = "Pricing"
    attributes: PricingAttributes = Field(default_factory=PricingAttributes)


class ContactSection(BaseModel):
    id: str = Field(default_factory=new_section_id)
    type: Literal["Contact"] = "Contact"
    attributes: ContactAttributes = Field(default_factory=ContactAttributes)


class UnknownSection(BaseModel):
    """Section whose widget type is outside the supported set; kept so it can render as a placeholder."""

    id: str = Field(default_factory=new_section_id)
    type: str
    attributes: dict[str, Any] = Field(default_factory=dict)


SECTION_TYPES: Mapping[str, type[BaseModel]] = {
    WidgetType.header.value: HeaderSection,
    WidgetType.hero.value: HeroSection,
    WidgetType.grid.value: GridSection,
    WidgetType.pricing.value: PricingSection,
    WidgetType.contact.value: ContactSection,
}

_UNKNOWN_TAG = "Unknown"


def _section_tag(value: Any) -> str:
    widget_type = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    if isinstance(value, UnknownSection) or widget_type not in SECTION_TYPES:
        return _UNKNOWN_TAG
    return widget_type


Section = Annotated[
    Union[
        Annotated[HeaderSection, Tag("Header")],
        Annotated[HeroSection, Tag("Hero")],
        Annotated[GridSection, Tag("Grid")],
        Annotated[PricingSection, Tag("Pricing")],
        Annotated[ContactSection, Tag("Contact")],
        Annotated[UnknownSection, Tag(_UNKNOWN_TAG)],
    ],
    Discriminator(_section_tag),
]


def make_section(widget_type: str, attributes: Mapping[str, Any] | None = None) -> Any:
    """Build a section for ``widget_type`` from a loosely typed attribute map.

    Raises pydantic.ValidationError when a known widget receives attributes of the wrong shape.
    """
    section_cls = SECTION_TYPES.get(widget_type)
    if section_cls is None:
        return UnknownSection(type=widget_type, attributes=dict(attributes or {}))
    return section_cls.model_validate({"type": widget_type, "attributes": dict(attributes or {})})


def page_path(name: str) -> str:
    """Derive a page path from its display name: ``"Our Services"`` -> ``"/our-services"``."""
    slug = "-".join(name.strip().lower().split())
    return f"/{slug}"


class Page(BaseModel):
    id: str = Field(default_factory=new_page_id)
    name: str
    path: str
    sections: list[Section] = Field(default_factory=list)

    @property
    def is_home(self) -> bool:
        return self.path == HOME_PATH


def _default_pages() -> list[Page]:
    return [Page(id=HOME_PAGE_ID, name="Home", path=HOME_PATH)]


class SiteDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    template_id: TemplateId = TemplateId.enterprise_base
    pages: list[Page] = Field(default_factory=_default_pages)

    @property
    def home_page(self) -> Page:
        return next(page for page in self.pages if page.is_home)

    def find_page(self, page_id: str | None) -> Page | None:
        if page_id is None:
            return None
        return next((page for page in self.pages if page.id == page_id), None)

    def find_page_by_path(self, path: str) -> Page | None:
        return next((page for page in self.pages if page.path == path), None)


__all__ = [
    "HOME_PATH",
    "HOME_PAGE_ID",
    "TemplateId",
    "WidgetType",
    "WidgetAttributes",
    "HeaderAttributes",
    "HeroAttributes",
    "GridItem",
    "GridAttributes",
    "PricingPlan",
    "PricingAttributes",
    "ContactAttributes",
    "HeaderSection",
    "HeroSection",
    "GridSection",
    "PricingSection",
    "ContactSection",
    "UnknownSection",
    "SECTION_TYPES",
    "Section",
    "make_section",
    "page_path",
    "Page",
    "SiteDocument",
]
