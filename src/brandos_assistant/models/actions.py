from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from .site import TemplateId


class _Action(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, extra="ignore")


class CreatePage(_Action):
    action: Literal["CREATE_PAGE"] = "CREATE_PAGE"
    page_name: str = Field(min_length=1)


class ResetPage(_Action):
    action: Literal["RESET_PAGE"] = "RESET_PAGE"


class SetTemplate(_Action):
    action: Literal["SET_TEMPLATE"] = "SET_TEMPLATE"
    template_id: TemplateId


class AddWidget(_Action):
    action: Literal["ADD_WIDGET"] = "ADD_WIDGET"
    widget_type: str = Field(min_length=1)
    attributes: dict[str, Any] = Field(default_factory=dict)


class DeletePage(_Action):
    action: Literal["DELETE_PAGE"] = "DELETE_PAGE"
    page_name: str = Field(min_length=1)


class RemoveWidget(_Action):
    action: Literal["REMOVE_WIDGET"] = "REMOVE_WIDGET"
    section_id: str = Field(min_length=1)


CommandAction = Annotated[
    Union[CreatePage, ResetPage, SetTemplate, AddWidget, DeletePage, RemoveWidget],
    Field(discriminator="action"),
]

ACTION_LIST_ADAPTER: TypeAdapter[list[CommandAction]] = TypeAdapter(list[CommandAction])


__all__ = [
    "CreatePage",
    "ResetPage",
    "SetTemplate",
    "AddWidget",
    "DeletePage",
    "RemoveWidget",
    "CommandAction",
    "ACTION_LIST_ADAPTER",
]
