import pytest

try:
    from alisha_site.content_paths import (
        canonical_section,
        dash_to_camel,
        normalize_asset_url,
        normalize_field,
        normalize_identifier,
        route_section,
    )
except ModuleNotFoundError:  # pragma: no cover - fallback for direct alisha_site/ cwd test runs
    from content_paths import (
        canonical_section,
        dash_to_camel,
        normalize_asset_url,
        normalize_field,
        normalize_identifier,
        route_section,
    )

ORIGINS = ("http://localhost:3001",)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("read-more-button", "readMoreButton"),
        ("title", "title"),
        ("item-1", "item-1"),
        ("", ""),
    ],
)
def test_dash_to_camel(raw, expected):
    assert dash_to_camel(raw) == expected


def test_page_prefix_is_stripped_before_camel_casing():
    assert normalize_identifier("about-hero-title", "about") == "heroTitle"
    assert normalize_identifier("home-read-more-button", "home") == "readMoreButton"
    # Only the current page's prefix is removed.
    assert normalize_identifier("about-hero", "home") == "aboutHero"


def test_header_pages_route_content_aliases_to_header():
    for page in ("services", "products", "projects"):
        assert route_section(page, "hero") == "header"
        assert route_section(page, "content") == "header"
        assert route_section(page, f"{page}Content") == "header"
        assert route_section(page, "process") == "process"
    assert canonical_section("services", "services-content") == "header"
    assert canonical_section("services", "servicesContent") == "header"


def test_contact_sections_route_through_alias_table():
    assert canonical_section("contact", "contact-info") == "info"
    assert canonical_section("contact", "contact-info-details") == "info"
    assert canonical_section("contact", "contact-content") == "info"
    assert canonical_section("contact", "contact-hero") == "hero"
    assert canonical_section("contact", "contact-map") == "map"
    assert canonical_section("contact", "newsletter") == "newsletter"


def test_other_pages_pass_sections_through():
    assert canonical_section("home", "home-hero") == "hero"
    assert canonical_section("home", "faq") == "faq"
    assert canonical_section("home", "") == "content"


def test_about_hero_title_is_renamed():
    field = normalize_field("about", "about-hero", "about-hero-title", "About Us")
    assert (field.section, field.key, field.value) == ("hero", "title", "About Us")
    home = normalize_field("home", "home-hero", "home-hero-title", "Hi")
    assert (home.section, home.key) == ("hero", "title")
    other = normalize_field("contact", "contact-hero", "contact-hero-title", "Hi")
    assert (other.section, other.key) == ("hero", "heroTitle")


def test_asset_url_origin_is_stripped_only_for_known_origins():
    assert normalize_asset_url("http://localhost:3001/uploads/a.jpg", ORIGINS) == "/uploads/a.jpg"
    assert normalize_asset_url("HTTP://LOCALHOST:3001/uploads/a.jpg?v=2#top", ORIGINS) == "/uploads/a.jpg?v=2#top"
    assert normalize_asset_url("https://cdn.example.com/a.jpg", ORIGINS) == "https://cdn.example.com/a.jpg"
    assert normalize_asset_url("/uploads/a.jpg", ORIGINS) == "/uploads/a.jpg"
    assert normalize_asset_url("", ORIGINS) == ""
