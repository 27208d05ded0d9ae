import copy

try:
    from alisha_site.content_defaults import DEFAULT_PAGE_SECTIONS
    from alisha_site.content_merge import MergeTypeChange, merge_sections
except ModuleNotFoundError:  # pragma: no cover - fallback for direct alisha_site/ cwd test runs
    from content_defaults import DEFAULT_PAGE_SECTIONS
    from content_merge import MergeTypeChange, merge_sections


def stored_home():
    return {
        "hero": {"title": "Old", "companyName": "ACME"},
        "faq": {
            "title": "FAQs",
            "questions": [
                {"question": "Q1", "answer": "A1"},
                {"question": "Q2", "answer": "A2"},
            ],
        },
        "statistics": {"items": [{"label": "Clients", "number": "10"}]},
    }


def test_untouched_sections_and_keys_are_preserved():
    merged = merge_sections(stored_home(), {"hero": {"title": "New"}})

    assert merged["hero"] == {"title": "New", "companyName": "ACME"}
    assert merged["faq"] == stored_home()["faq"]
    assert merged["statistics"] == stored_home()["statistics"]


def test_merge_is_idempotent():
    stored = stored_home()
    draft = {"hero": {"title": "New"}, "faq": {"subtitle": "Help"}}

    once = merge_sections(stored, draft)
    twice = merge_sections(once, draft)

    assert once == twice


def test_merging_an_empty_draft_returns_an_equal_copy():
    stored = stored_home()
    merged = merge_sections(stored, {})
    assert merged == stored
    assert merged is not stored
    assert merged["faq"]["questions"] is not stored["faq"]["questions"]


def test_lists_are_replaced_wholesale():
    draft = {"faq": {"questions": [{"question": "Only", "answer": "One"}]}}

    merged = merge_sections(stored_home(), draft)

    assert merged["faq"]["questions"] == [{"question": "Only", "answer": "One"}]
    assert merged["faq"]["title"] == "FAQs"


def test_empty_list_clears_stored_list():
    merged = merge_sections(stored_home(), {"faq": {"questions": []}})
    assert merged["faq"]["questions"] == []


def test_nested_mappings_merge_recursively():
    stored = {"timeline": {"item1": {"date": "2020", "title": "Founded"}}}
    merged = merge_sections(stored, {"timeline": {"item1": {"title": "Started"}, "item2": {"title": "Grew"}}})
    assert merged == {
        "timeline": {
            "item1": {"date": "2020", "title": "Started"},
            "item2": {"title": "Grew"},
        }
    }


def test_inputs_are_not_mutated_and_results_share_no_state():
    stored = stored_home()
    draft = {"faq": {"questions": [{"question": "Q3", "answer": "A3"}]}, "quote": {"title": "Quote"}}
    stored_before = copy.deepcopy(stored)
    draft_before = copy.deepcopy(draft)

    merged = merge_sections(stored, draft)
    merged["faq"]["questions"][0]["answer"] = "changed"
    merged["hero"]["title"] = "changed"
    merged["quote"]["title"] = "changed"

    assert stored == stored_before
    assert draft == draft_before


def test_type_changes_let_the_draft_win_and_are_reported():
    diagnostics = []
    stored = {"about": {"features": ["A", "B"], "meta": {"x": 1}, "title": "T", "empty": None}}
    draft = {"about": {"features": "A, B", "meta": ["x"], "title": {"text": "T"}, "empty": "now set"}}

    merged = merge_sections(stored, draft, diagnostics)

    assert merged["about"] == draft["about"]
    assert diagnostics == [
        MergeTypeChange("about.features", "list", "scalar"),
        MergeTypeChange("about.meta", "section", "list"),
        MergeTypeChange("about.title", "scalar", "section"),
    ]


def test_non_mapping_inputs_are_treated_as_empty():
    assert merge_sections(None, {"hero": {"title": "x"}}) == {"hero": {"title": "x"}}
    assert merge_sections({"hero": {"title": "x"}}, None) == {"hero": {"title": "x"}}


def test_every_default_template_survives_an_empty_merge():
    for page_name, sections in DEFAULT_PAGE_SECTIONS.items():
        assert merge_sections(sections, {}) == sections, page_name
        assert merge_sections(sections, sections) == sections, page_name
