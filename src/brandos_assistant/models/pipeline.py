from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ChannelType = Literal["LinkedIn", "X", "Google Business", "YouTube", "Medium", "Shopify"]

CHANNELS: tuple[str, ...] = ("LinkedIn", "X", "Google Business", "YouTube", "Medium", "Shopify")


class AutomationChannel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    type: ChannelType
    status: Literal["Pending", "Active", "Error"] = "Pending"
    last_action: str | None = None


class AutomationWorkflow(BaseModel):
    """Activation progress of the tenant's publishing channels."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    channels: list[AutomationChannel] = Field(default_factory=list)
    overall_progress: int = 0


class ScheduledPost(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    id: str
    platform: ChannelType
    title: str
    publish_at: datetime
    status: Literal["Scheduled", "Published", "Draft"] = "Scheduled"
    content_summary: str = Field(default="")


__all__ = ["ChannelType", "CHANNELS", "AutomationChannel", "AutomationWorkflow", "ScheduledPost"]
