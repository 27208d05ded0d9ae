import pytest

try:
    from alisha_site.content_capture import (
        SurfaceFormatError,
        extract_draft,
        parse_editable_surface,
        plain_text,
    )
except ModuleNotFoundError:  # pragma: no cover - fallback for direct alisha_site/ cwd test runs
    from content_capture import (
        SurfaceFormatError,
        extract_draft,
        parse_editable_surface,
        plain_text,
    )

ORIGINS = ("http://localhost:3001",)


def surface(*sections):
    return parse_editable_surface(list(sections))


def test_empty_surface_produces_empty_draft():
    assert extract_draft("home", []) == {}
    assert extract_draft("home", parse_editable_surface(None)) == {}


def test_empty_values_mean_not_edited():
    draft = extract_draft(
        "home",
        surface({"section": "home-hero", "fields": [
            {"field": "home-hero-title", "value": "   "},
            {"field": "home-hero-company-name", "value": None},
        ]}),
    )
    assert draft == {}


def test_text_values_are_reduced_to_plain_text():
    draft = extract_draft(
        "home",
        surface({"section": "home-hero", "fields": [
            {"field": "primary-button", "value": "  <b>Free</b> &amp; fast <script>x()</script> "},
        ]}),
    )
    assert draft == {"hero": {"primaryButton": "Free & fast x()"}}
    assert plain_text(42) == "42"
    assert plain_text(True) == ""


def test_image_values_drop_known_asset_origin():
    draft = extract_draft(
        "about",
        surface({"section": "about-content", "fields": [
            {"field": "about-image", "value": "http://localhost:3001/uploads/a.jpg", "type": "image"},
        ]}),
        asset_origins=ORIGINS,
    )
    assert draft == {"content": {"image": "/uploads/a.jpg"}}


def test_header_pages_write_into_header_section():
    draft = extract_draft(
        "services",
        surface({"section": "servicesContent", "fields": [
            {"field": "services-title", "value": "Our Services"},
        ]}),
    )
    assert draft == {"header": {"title": "Our Services"}}


def test_nested_working_values_are_seeded_into_touched_sections():
    working = {
        "faq": {
            "title": "FAQs",
            "questions": [{"question": "Q1", "answer": "A1"}],
        },
        "statistics": {"items": [{"label": "Clients"}]},
    }
    draft = extract_draft(
        "home",
        surface({"section": "home-faq", "fields": [{"field": "title", "value": "New FAQs"}]}),
        working_content=working,
    )

    assert draft == {
        "faq": {
            "title": "New FAQs",
            "questions": [{"question": "Q1", "answer": "A1"}],
        }
    }
    draft["faq"]["questions"].append({"question": "Q2"})
    assert len(working["faq"]["questions"]) == 1


def test_about_hero_title_field_is_stored_under_title():
    draft = extract_draft(
        "about",
        surface({"section": "about-hero", "fields": [{"field": "about-hero-title", "value": "Who We Are"}]}),
    )
    assert draft == {"hero": {"title": "Who We Are"}}


def test_surface_may_be_wrapped_in_sections_key():
    parsed = parse_editable_surface({"sections": [{"section": "hero", "fields": []}]})
    assert len(parsed) == 1
    assert parsed[0].raw_section == "hero"


@pytest.mark.parametrize(
    "payload",
    [
        "hero",
        [["hero"]],
        [{"section": 5, "fields": []}],
        [{"section": "hero", "fields": "title"}],
        [{"section": "hero", "fields": [{"value": "x"}]}],
        [{"section": "hero", "fields": [{"field": "title", "type": "video", "value": "x"}]}],
        [{"section": "hero", "fields": [{"field": "title", "value": {"nested": True}}]}],
    ],
)
def test_malformed_surfaces_are_rejected(payload):
    with pytest.raises(SurfaceFormatError):
        parse_editable_surface(payload)
