from __future__ import annotations

from pathlib import Path

import pytest

from componentkb.models import GuidanceKind
from componentkb.retrieval import (
    CorpusSnapshot,
    ExampleFilters,
    GuidanceFilters,
    SearchFilters,
    SQLiteCorpusStore,
    StoreError,
)


@pytest.fixture
def store(tmp_path: Path, snapshot: CorpusSnapshot) -> SQLiteCorpusStore:
    sqlite_store = SQLiteCorpusStore(tmp_path / "kb.db")
    sqlite_store.load(snapshot)
    return sqlite_store


def _ids(records) -> set[int]:
    return {r.id for r in records}


def test_load_reports_and_replaces(tmp_path: Path, snapshot: CorpusSnapshot):
    sqlite_store = SQLiteCorpusStore(tmp_path / "nested" / "kb.db")
    assert sqlite_store.load(snapshot) == 5
    assert sqlite_store.load(snapshot) == 5
    assert sqlite_store.count() == 5


def test_full_text_matches_content_terms(store: SQLiteCorpusStore):
    assert _ids(store.fetch_candidates(["trigger"])) == {1}
    assert _ids(store.fetch_candidates(["entry"])) == {3, 4}


def test_title_name_and_tag_substrings_match(store: SQLiteCorpusStore):
    assert {1, 2} <= _ids(store.fetch_candidates(["butt"]))
    assert _ids(store.fetch_candidates(["accessib"])) == {3}


def test_operator_characters_are_literals(store: SQLiteCorpusStore):
    assert store.fetch_candidates(['"NEAR(" OR *']) == []


def test_filters_and_cap(store: SQLiteCorpusStore):
    assert _ids(store.fetch_candidates([], SearchFilters(category="forms"))) == {3, 4, 5}
    assert _ids(store.fetch_candidates(["form"], SearchFilters(requires_js=True))) == {5}
    assert len(store.fetch_candidates([], cap=2)) == 2


def test_records_carry_metadata_and_tags(store: SQLiteCorpusStore):
    (record,) = store.fetch_candidates(["select"], SearchFilters(complexity="moderate", tag="form"))
    assert record.component_name == "Select"
    assert record.tags == ("form",)
    assert record.requires_js is True


def test_identity_lookup_prefers_metadata_then_title(store: SQLiteCorpusStore):
    assert store.fetch_document_by_identity("text-field").id == 3
    assert store.fetch_document_by_identity("Text Field Code").id == 4
    assert store.fetch_document_by_identity("carousel") is None


def test_documents_keep_hierarchy(store: SQLiteCorpusStore):
    document = store.fetch_document_by_identity("textfieldcode")
    assert document.hierarchy == ("Forms", "Text field", "Usage", "Code")


def test_related_lookups(store: SQLiteCorpusStore):
    assert [e.id for e in store.fetch_code_examples(3)] == [10, 11]
    assert [t.tag for t in store.fetch_tags(3)] == ["form", "accessible"]
    guidance = store.fetch_guidance(3)
    assert len(guidance) == 6
    assert guidance[1].kind is GuidanceKind.DO
    assert store.fetch_component_metadata(5).requires_js is True
    assert store.fetch_component_metadata(4) is None
    assert [d.id for d in store.fetch_sibling_documents(3)] == [4]


def test_read_failure_raises_store_error(tmp_path: Path):
    db_path = tmp_path / "kb.db"
    sqlite_store = SQLiteCorpusStore(db_path)
    db_path.unlink()
    with pytest.raises(StoreError):
        sqlite_store.count()


def test_like_wildcards_in_queries_are_literals(store: SQLiteCorpusStore):
    assert store.fetch_candidates(["%"]) == []
    assert store.fetch_candidates(["b_tton"]) == []
    assert store.fetch_candidates([], SearchFilters(tag="f_rm")) == []
    assert store.search_code_examples("%") == []
    assert store.search_guidance("_") == []
    assert store.search_code_examples(None, ExampleFilters(component="T_xt")) == []


def test_example_search_matches_in_memory_ordering(store: SQLiteCorpusStore):
    matches = store.search_code_examples("ECL-")
    assert [m.example.id for m in matches] == [20, 10, 11]
    assert matches[0].example.is_complete is True
    assert matches[0].component == "Select"
    assert [m.example.id for m in store.search_code_examples(None, ExampleFilters(language="JS"))] == [21]
    assert [m.example.id for m in store.search_code_examples(None, ExampleFilters(component="text"))] == [10, 11]


def test_guidance_search_ranks_kinds_in_sql(store: SQLiteCorpusStore):
    matches = store.search_guidance(None)
    assert [m.component for m in matches[:3]] == ["Select", "Text field", "Select"]
    assert matches[2].entry.kind is GuidanceKind.CAVEAT
    labels = store.search_guidance("label")
    assert [m.entry.content for m in labels] == [
        "Keep option labels short",
        "Keep labels short",
        "Always pair with a label",
    ]
    dos = store.search_guidance(None, GuidanceFilters(kind=GuidanceKind.DO, component="text"), cap=2)
    assert [m.entry.priority for m in dos] == [5, 3]
