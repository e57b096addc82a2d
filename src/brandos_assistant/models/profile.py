from __future__ import annotations

from typing import Sequence

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Offering(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    name: str
    type: str | None = Field(default=None, description="Product or Service")
    description: str | None = None
    audience: str | None = None
    features: Sequence[str] = Field(default_factory=list)
    differentiator: str | None = None


class TenantProfile(BaseModel):
    """Onboarding profile of a tenant. Every field may still be missing while onboarding is in progress."""

    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=to_camel,
        json_schema_extra={
            "example": {
                "companyName": "Northwind Analytics",
                "industry": "B2B SaaS",
                "tagline": "Decisions at the speed of data",
                "mission": "Make every operations team data-literate.",
                "brandVoice": "Confident, precise, friendly",
                "valuePropositions": ["Setup in one day", "No data engineers required"],
                "offerings": [
                    {
                        "name": "Pulse",
                        "type": "Product",
                        "description": "Real-time operations dashboards",
                        "audience": "Operations leads",
                        "features": ["Live KPIs", "Anomaly alerts"],
                        "differentiator": "Zero-config connectors",
                    }
                ],
            }
        },
    )

    company_name: str | None = None
    industry: str | None = None
    tagline: str | None = None
    mission: str | None = None
    brand_voice: str | None = None
    value_propositions: Sequence[str] = Field(default_factory=list)
    offerings: Sequence[Offering] = Field(default_factory=list)


__all__ = ["Offering", "TenantProfile"]
