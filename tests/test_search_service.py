from __future__ import annotations

from dataclasses import replace

from componentkb.config import get_settings
from componentkb.models import GuidanceKind
from componentkb.results import ErrorCode, Failure, Success
from componentkb.retrieval import ExampleFilters, GuidanceFilters, InMemoryCorpusStore, SearchFilters, StoreError
from componentkb.services import SearchService, group_guidance


class _BrokenStore(InMemoryCorpusStore):
    def __init__(self, snapshot, broken: set[str]) -> None:
        super().__init__(snapshot)
        self._broken = broken

    def _check(self, name: str) -> None:
        if name in self._broken:
            raise StoreError(f"{name} unavailable")

    def fetch_candidates(self, queries, filters=None, *, cap=100):
        self._check("candidates")
        return super().fetch_candidates(queries, filters, cap=cap)

    def fetch_document_by_identity(self, key):
        self._check("identity")
        return super().fetch_document_by_identity(key)

    def fetch_tags(self, document_id):
        self._check("tags")
        return super().fetch_tags(document_id)

    def fetch_guidance(self, document_id):
        self._check("guidance")
        return super().fetch_guidance(document_id)

    def search_code_examples(self, query, filters=None, *, cap=100):
        self._check("examples")
        return super().search_code_examples(query, filters, cap=cap)

    def search_guidance(self, query, filters=None, *, cap=100):
        self._check("guidance search")
        return super().search_guidance(query, filters, cap=cap)


class _UntaggedStore(InMemoryCorpusStore):
    def fetch_candidates(self, queries, filters=None, *, cap=100):
        return [replace(r, tags=None) for r in super().fetch_candidates(queries, filters, cap=cap)]


def test_search_ranks_and_reports_expansions(memory_store):
    result = SearchService(memory_store).search_components("dropdown")
    assert isinstance(result, Success)
    assert result.data.results[0].title == "Select"
    assert result.data.expanded_queries[0] == "dropdown"
    assert "Select" in result.data.expanded_queries
    assert result.data.count == len(result.data.results)
    assert result.metadata.tool == "search_components"


def test_search_without_query_lists_alphabetically(memory_store):
    result = SearchService(memory_store).search_components(None)
    titles = [r.title for r in result.data.results]
    assert titles == sorted(titles)
    assert result.data.expanded_queries == ()


def test_search_limit_is_clamped(memory_store):
    service = SearchService(memory_store, default_limit=3, max_limit=4)
    assert service.search_components(None).data.count == 3
    assert service.search_components(None, limit=2).data.count == 2
    assert service.search_components(None, limit=50).data.count == 4
    assert service.search_components(None, limit=0).data.count == 3


def test_search_applies_filters(memory_store):
    result = SearchService(memory_store).search_components("form", filters=SearchFilters(requires_js=True))
    assert [r.id for r in result.data.results] == [5]
    assert result.data.results[0].requires_js is True


def test_search_store_failure_is_reported(snapshot):
    service = SearchService(_BrokenStore(snapshot, {"candidates"}))
    result = service.search_components("button")
    assert isinstance(result, Failure)
    assert result.code is ErrorCode.SEARCH_ERROR
    assert "Traceback" in result.errors[0].details


def test_from_settings_uses_configured_limits(memory_store):
    settings = get_settings({"search_default_limit": 1})
    assert SearchService.from_settings(memory_store, settings).search_components(None).data.count == 1


def test_details_collects_everything(memory_store):
    result = SearchService(memory_store).get_component_details("text-field")
    assert isinstance(result, Success)
    details = result.data
    assert details.document.id == 3
    assert details.metadata.complexity == "simple"
    assert [t.tag for t in details.tags] == ["form", "accessible"]
    assert [e.id for e in details.examples] == [10, 11]
    assert [d.id for d in details.related] == [4]
    assert result.notices == ()


def test_details_unknown_component(memory_store):
    result = SearchService(memory_store).get_component_details("carousel")
    assert isinstance(result, Failure)
    assert result.code is ErrorCode.NOT_FOUND
    assert "carousel" in result.errors[0].message


def test_details_partial_failure_becomes_notice(snapshot):
    result = SearchService(_BrokenStore(snapshot, {"tags"})).get_component_details("Text field")
    assert isinstance(result, Success)
    assert result.data.tags == ()
    assert [n.code for n in result.notices] == [ErrorCode.SEARCH_ERROR]
    assert "tags" in result.notices[0].message


def test_lookup_failure_is_search_error(snapshot):
    result = SearchService(_BrokenStore(snapshot, {"identity"})).get_component_details("Button")
    assert isinstance(result, Failure)
    assert result.code is ErrorCode.SEARCH_ERROR


def test_guidance_is_grouped_in_kind_order(memory_store):
    result = SearchService(memory_store).get_component_guidance("Text Field")
    groups = result.data.groups
    assert [g.kind for g in groups] == [
        GuidanceKind.WHEN_TO_USE,
        GuidanceKind.DO,
        GuidanceKind.DONT,
        GuidanceKind.NOTE,
    ]
    assert [e.priority for e in groups[1].entries] == [5, 3, 1]
    assert result.data.component == "Text field"


def test_guidance_failure_and_empty(snapshot, memory_store):
    failed = SearchService(_BrokenStore(snapshot, {"guidance"})).get_component_guidance("Text field")
    assert isinstance(failed, Failure)
    assert failed.code is ErrorCode.SEARCH_ERROR
    empty = SearchService(memory_store).get_component_guidance("Button")
    assert empty.data.groups == ()


def test_group_guidance_skips_empty_kinds():
    assert group_guidance([]) == ()


def test_search_tolerates_records_without_tags(snapshot):
    result = SearchService(_UntaggedStore(snapshot)).search_components("select")
    assert isinstance(result, Success)
    assert result.data.results[0].title == "Select"
    assert result.data.results[0].tags == ()


def test_example_search_returns_matches_with_context(memory_store):
    result = SearchService(memory_store).search_code_examples("ecl-", filters=ExampleFilters(language="html"))
    assert isinstance(result, Success)
    assert [m.example.id for m in result.data.results] == [20, 10, 11]
    assert result.data.count == 3
    assert result.data.filters.language == "html"
    assert result.metadata.tool == "search_code_examples"


def test_example_search_uses_its_own_default_limit(memory_store):
    service = SearchService(memory_store, example_limit=2, guidance_limit=4)
    assert service.search_code_examples(None).data.count == 2
    assert service.search_code_examples(None, limit=3).data.count == 3
    assert service.search_guidance(None).data.count == 4


def test_guidance_search_groups_by_component(memory_store):
    result = SearchService(memory_store).search_guidance("label")
    assert isinstance(result, Success)
    assert result.data.count == 3
    components = result.data.components
    assert [c.component for c in components] == ["Select", "Text field"]
    (do_group,) = components[1].groups
    assert do_group.kind is GuidanceKind.DO
    assert [e.priority for e in do_group.entries] == [5, 1]


def test_guidance_search_by_kind(memory_store):
    result = SearchService(memory_store).search_guidance(None, filters=GuidanceFilters(kind=GuidanceKind.CAVEAT))
    assert [m.entry.content for m in result.data.results] == ["Long option lists need a search field"]


def test_example_and_guidance_search_failures(snapshot):
    examples = SearchService(_BrokenStore(snapshot, {"examples"})).search_code_examples("ecl")
    assert isinstance(examples, Failure)
    assert examples.code is ErrorCode.SEARCH_ERROR
    guidance = SearchService(_BrokenStore(snapshot, {"guidance search"})).search_guidance("label")
    assert isinstance(guidance, Failure)
    assert "Guidance search failed" in guidance.errors[0].message
