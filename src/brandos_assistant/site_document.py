from __future__ import annotations

from .errors import ValidationError
from .models.site import HOME_PATH, Page, SiteDocument, TemplateId, page_path


def new_document(template_id: TemplateId = TemplateId.enterprise_base) -> SiteDocument:
    return SiteDocument(template_id=template_id)


def path_for(name: str) -> str:
    if not name or not name.strip():
        raise ValidationError("Page name must not be empty")
    return page_path(name)


def create_page(document: SiteDocument, name: str) -> Page:
    """Append a new empty page to ``document``.

    Raises:
        ValidationError: the name is blank or its path is already taken.
    """
    path = path_for(name)
    if document.find_page_by_path(path) is not None:
        raise ValidationError(f"A page with path {path} already exists")
    page = Page(name=name.strip(), path=path)
    document.pages.append(page)
    return page


def delete_page(document: SiteDocument, page_id: str) -> Page:
    """Remove a page from ``document``.

    Raises:
        ValidationError: the page does not exist or is the home page.
    """
    page = document.find_page(page_id)
    if page is None:
        raise ValidationError(f"Page {page_id} does not exist")
    if page.path == HOME_PATH:
        raise ValidationError("The home page cannot be deleted")
    document.pages.remove(page)
    return page


def remove_section(document: SiteDocument, section_id: str) -> Page:
    for page in document.pages:
        for section in page.sections:
            if section.id == section_id:
                page.sections.remove(section)
                return page
    raise ValidationError(f"Section {section_id} does not exist")


__all__ = ["new_document", "path_for", "create_page", "delete_page", "remove_section"]
