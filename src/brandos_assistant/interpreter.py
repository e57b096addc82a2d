from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

import pydantic

from . import site_document
from .errors import ParseError, ValidationError
from .models.actions import AddWidget, CommandAction, CreatePage, DeletePage, RemoveWidget, ResetPage, SetTemplate
from .models.site import Page, SiteDocument, make_section

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    document: SiteDocument
    target_page_id: str
    applied: int = 0
    rejections: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.applied > 0


class SiteCommandInterpreter:
    """Applies an action batch to a site document, strictly in order.

    The input document is never mutated; the fold runs on a deep copy and only
    the final document and target page are returned. ``CREATE_PAGE`` moves the
    target so the widgets that follow land on the new page.
    """

    def apply(
        self,
        document: SiteDocument,
        actions: Sequence[CommandAction],
        target_page_id: str | None = None,
    ) -> BatchResult:
        # Widget attributes are validated up front so a bad entry aborts the
        # whole batch before anything is applied.
        sections = self._prepare_sections(actions)

        working = document.model_copy(deep=True)
        target = working.find_page(target_page_id) or working.home_page
        result = BatchResult(document=working, target_page_id=target.id)

        for index, action in enumerate(actions):
            try:
                self._apply_one(working, action, result, sections.get(index))
            except ValidationError as exc:
                result.rejections.append(f"{action.action}: {exc}")
                logger.info(
                    "Rejected site action",
                    extra={"action": action.action, "position": index, "reason": str(exc)},
                )
                continue
            result.applied += 1

        logger.info(
            "Applied action batch",
            extra={
                "actions": len(actions),
                "applied": result.applied,
                "rejected": len(result.rejections),
                "target_page_id": result.target_page_id,
            },
        )
        return result

    def _prepare_sections(self, actions: Sequence[CommandAction]) -> dict[int, Any]:
        sections: dict[int, Any] = {}
        for index, action in enumerate(actions):
            if not isinstance(action, AddWidget):
                continue
            try:
                sections[index] = make_section(action.widget_type, action.attributes)
            except pydantic.ValidationError as exc:
                raise ParseError(
                    f"Invalid attributes for {action.widget_type} widget at position {index}"
                ) from exc
        return sections

    def _apply_one(self, document: SiteDocument, action: CommandAction, result: BatchResult, section: Any) -> None:
        if isinstance(action, SetTemplate):
            document.template_id = action.template_id
            return

        if isinstance(action, CreatePage):
            path = site_document.path_for(action.page_name)
            existing = document.find_page_by_path(path)
            page = existing if existing is not None else site_document.create_page(document, action.page_name)
            result.target_page_id = page.id
            return

        if isinstance(action, ResetPage):
            page = document.find_page(result.target_page_id)
            if page is not None:
                page.sections.clear()
            return

        if isinstance(action, AddWidget):
            self._target(document, result).sections.append(section)
            return

        if isinstance(action, DeletePage):
            page = document.find_page_by_path(site_document.path_for(action.page_name)) or next(
                (page for page in document.pages if page.name.lower() == action.page_name.strip().lower()),
                None,
            )
            if page is None:
                raise ValidationError(f"Page {action.page_name} does not exist")
            site_document.delete_page(document, page.id)
            return

        if isinstance(action, RemoveWidget):
            site_document.remove_section(document, action.section_id)
            return

        raise ValidationError(f"Unsupported action {type(action).__name__}")

    def _target(self, document: SiteDocument, result: BatchResult) -> Page:
        page = document.find_page(result.target_page_id)
        if page is None:
            raise ValidationError("Target page no longer exists")
        return page


__all__ = ["BatchResult", "SiteCommandInterpreter"]
