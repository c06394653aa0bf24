from __future__ import annotations

import pytest

from componentkb.search import SYNONYMS, expand, tokenize


def _expansion_pass(phrases, table):
    ordered: list[str] = []
    for phrase in phrases:
        for expanded in expand(phrase, table):
            if expanded not in ordered:
                ordered.append(expanded)
    return ordered


@pytest.mark.parametrize("query", ["input", "Dropdown menu", "modal", "nothing matches this", "", "   "])
def test_expansion_starts_with_query(query):
    expanded = expand(query)
    assert expanded[0] == query


def test_expansion_is_deduplicated():
    expanded = expand("input")
    assert len(expanded) == len(set(expanded))


def test_input_expands_to_text_field():
    expanded = expand("input")
    assert "Text field" in expanded
    assert "Text area" in expanded


def test_exact_group_comes_before_scanned_groups():
    expanded = expand("select")
    assert expanded[:3] == ["select", "Select", "dropdown"]


def test_partial_phrase_matches_group_by_substring():
    expanded = expand("dropdown menu")
    assert "Select" in expanded
    assert "Menu" in expanded


def test_lookup_ignores_case_and_surrounding_space():
    assert "Modal" in expand("  Dialog ")


def test_empty_query_returns_itself_only():
    assert expand("") == [""]
    assert expand("  ") == ["  "]


@pytest.mark.parametrize("key", sorted(SYNONYMS))
def test_expansion_stabilises_after_one_extra_pass(key):
    second = _expansion_pass(expand(key), SYNONYMS)
    third = _expansion_pass(second, SYNONYMS)
    assert set(third) == set(second)


def test_canonical_names_expand_back_to_their_family():
    expanded = set(expand("Mega menu"))
    assert {"Menu", "Breadcrumb", "Pagination", "navigation"} <= expanded
    assert "Site header" not in expanded


def test_form_does_not_pull_in_individual_controls():
    expanded = expand("form")
    assert "Complete forms" in expanded
    assert "Text field" not in expanded
    assert "Select" not in expanded


def test_synonym_table_is_read_only():
    with pytest.raises(TypeError):
        SYNONYMS["new"] = ("new",)  # type: ignore[index]


def test_tokenize_skips_short_tokens_and_duplicates():
    assert tokenize("A text Text field x") == ["text", "field"]
