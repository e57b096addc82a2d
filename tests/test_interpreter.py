import pytest

from brandos_assistant import site_document
from brandos_assistant.errors import ParseError, ValidationError
from brandos_assistant.interpreter import SiteCommandInterpreter
from brandos_assistant.models.actions import (
    AddWidget,
    CreatePage,
    DeletePage,
    RemoveWidget,
    ResetPage,
    SetTemplate,
)
from brandos_assistant.models.site import HeroSection, SiteDocument, TemplateId, UnknownSection


def test_create_page_then_widgets_land_on_new_page():
    document = SiteDocument()
    actions = [
        CreatePage(page_name="Services"),
        AddWidget(widget_type="Hero", attributes={"title": "Welcome"}),
        AddWidget(widget_type="Grid"),
    ]

    result = SiteCommandInterpreter().apply(document, actions)

    pages = result.document.pages
    assert [page.path for page in pages] == ["/", "/services"]
    services = result.document.find_page_by_path("/services")
    assert result.target_page_id == services.id
    assert [section.type for section in services.sections] == ["Hero", "Grid"]
    assert services.sections[0].attributes.title == "Welcome"
    assert result.document.home_page.sections == []
    assert result.applied == 3
    assert result.rejections == []


def test_input_document_is_not_mutated():
    document = SiteDocument()
    before = document.model_dump()

    SiteCommandInterpreter().apply(
        document, [SetTemplate(template_id=TemplateId.saas_landing), AddWidget(widget_type="Hero")]
    )

    assert document.model_dump() == before


def test_create_page_is_idempotent_across_batches():
    interpreter = SiteCommandInterpreter()
    first = interpreter.apply(SiteDocument(), [CreatePage(page_name="Services"), AddWidget(widget_type="Hero")])

    second = interpreter.apply(
        first.document, [CreatePage(page_name="services"), AddWidget(widget_type="Contact")]
    )

    assert len(second.document.pages) == 2
    assert second.target_page_id == first.target_page_id
    page = second.document.find_page(second.target_page_id)
    assert [section.type for section in page.sections] == ["Hero", "Contact"]


def test_set_template_and_reset_page():
    document = SiteDocument()
    document.home_page.sections.append(HeroSection())

    result = SiteCommandInterpreter().apply(
        document, [SetTemplate(template_id=TemplateId.modern_portfolio), ResetPage(), AddWidget(widget_type="Grid")]
    )

    assert result.document.template_id is TemplateId.modern_portfolio
    assert [section.type for section in result.document.home_page.sections] == ["Grid"]


def test_explicit_target_page_is_used():
    document = SiteDocument()
    about = site_document.create_page(document, "About Us")

    result = SiteCommandInterpreter().apply(document, [AddWidget(widget_type="Contact")], target_page_id=about.id)

    assert result.document.find_page(about.id).sections[0].type == "Contact"
    assert result.document.home_page.sections == []


def test_unknown_target_falls_back_to_home():
    result = SiteCommandInterpreter().apply(SiteDocument(), [AddWidget(widget_type="Hero")], target_page_id="page-missing")

    assert result.target_page_id == result.document.home_page.id
    assert len(result.document.home_page.sections) == 1


def test_deleting_home_page_is_rejected_and_batch_continues():
    result = SiteCommandInterpreter().apply(
        SiteDocument(), [DeletePage(page_name="Home"), AddWidget(widget_type="Hero")]
    )

    assert result.applied == 1
    assert len(result.rejections) == 1
    assert result.rejections[0].startswith("DELETE_PAGE")
    assert "home page" in result.rejections[0]
    assert len(result.document.home_page.sections) == 1


def test_reset_after_deleting_target_is_noop_and_add_is_rejected():
    document = SiteDocument()
    document.home_page.sections.append(HeroSection())

    result = SiteCommandInterpreter().apply(
        document,
        [
            CreatePage(page_name="Pricing"),
            DeletePage(page_name="Pricing"),
            ResetPage(),
            AddWidget(widget_type="Pricing"),
        ],
    )

    assert [page.path for page in result.document.pages] == ["/"]
    assert len(result.document.home_page.sections) == 1
    assert result.applied == 3
    assert len(result.rejections) == 1


def test_malformed_widget_attributes_abort_whole_batch():
    document = SiteDocument()

    with pytest.raises(ParseError):
        SiteCommandInterpreter().apply(
            document,
            [
                SetTemplate(template_id=TemplateId.saas_landing),
                AddWidget(widget_type="Pricing", attributes={"plans": [{"price": "$5"}]}),
            ],
        )

    assert document.template_id is TemplateId.enterprise_base


def test_unknown_widget_is_kept_and_unknown_keys_are_dropped():
    result = SiteCommandInterpreter().apply(
        SiteDocument(),
        [
            AddWidget(widget_type="Carousel", attributes={"slides": 3}),
            AddWidget(widget_type="Hero", attributes={"title": "Hi", "onclick": "alert(1)"}),
        ],
    )

    carousel, hero = result.document.home_page.sections
    assert isinstance(carousel, UnknownSection)
    assert carousel.attributes == {"slides": 3}
    assert "onclick" not in hero.attributes.model_dump()


def test_remove_widget_action():
    document = SiteDocument()
    section = HeroSection()
    document.home_page.sections.append(section)

    result = SiteCommandInterpreter().apply(
        document, [RemoveWidget(section_id=section.id), RemoveWidget(section_id=section.id)]
    )

    assert result.document.home_page.sections == []
    assert result.applied == 1
    assert len(result.rejections) == 1


def test_document_round_trips_through_json_with_unknown_sections():
    result = SiteCommandInterpreter().apply(SiteDocument(), [AddWidget(widget_type="Carousel")])

    restored = SiteDocument.model_validate(result.document.model_dump(mode="json", by_alias=True))

    assert isinstance(restored.home_page.sections[0], UnknownSection)
    assert restored.home_page.sections[0].type == "Carousel"


def test_site_document_helpers_validate_names_and_paths():
    document = site_document.new_document()
    page = site_document.create_page(document, "  Our Services ")

    assert page.path == "/our-services"
    assert page.name == "Our Services"
    with pytest.raises(ValidationError):
        site_document.create_page(document, "our services")
    with pytest.raises(ValidationError):
        site_document.create_page(document, "   ")
    with pytest.raises(ValidationError):
        site_document.delete_page(document, document.home_page.id)
    with pytest.raises(ValidationError):
        site_document.remove_section(document, "sec-missing")

    assert site_document.delete_page(document, page.id) is page
    assert len(document.pages) == 1
