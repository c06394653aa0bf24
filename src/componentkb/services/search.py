"""Search orchestration: expansion, candidate retrieval and ranking."""

from __future__ import annotations

import traceback
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence, TypeVar

from componentkb.config import Settings
from componentkb.metrics.observability import PipelineMetrics, TimedSection, get_logger
from componentkb.models import (
    CodeExample,
    ComponentMetadata,
    Document,
    ExampleMatch,
    GuidanceEntry,
    GuidanceKind,
    GuidanceMatch,
    RelevanceCandidate,
    Tag,
    normalize_component_name,
)
from componentkb.results import ErrorCode, ErrorDetail, Failure, Result, ResultMetadata, Success
from componentkb.retrieval.service import (
    DEFAULT_CANDIDATE_CAP,
    CandidateStore,
    ExampleFilters,
    GuidanceFilters,
    SearchFilters,
)
from componentkb.search.expander import expand
from componentkb.search.scoring import DEFAULT_WEIGHTS, ScoringWeights, rank_candidates

T = TypeVar("T")


@dataclass(frozen=True)
class SearchResult:
    id: int
    title: str | None
    component_name: str | None
    category: str | None
    tags: tuple[str, ...]
    url: str | None
    score: int
    complexity: str | None = None
    requires_js: bool = False

    @classmethod
    def from_candidate(cls, candidate: RelevanceCandidate) -> "SearchResult":
        record = candidate.record
        return cls(
            id=record.id,
            title=record.title,
            component_name=record.component_name,
            category=record.category,
            tags=tuple(record.tags or ()),
            url=record.url,
            score=candidate.score,
            complexity=record.complexity,
            requires_js=record.requires_js,
        )


@dataclass(frozen=True)
class SearchResults:
    results: tuple[SearchResult, ...]
    count: int
    query: str | None
    expanded_queries: tuple[str, ...]


@dataclass(frozen=True)
class GuidanceGroup:
    kind: GuidanceKind
    entries: tuple[GuidanceEntry, ...]


@dataclass(frozen=True)
class ComponentGuidance:
    component: str
    document_id: int
    groups: tuple[GuidanceGroup, ...]


@dataclass(frozen=True)
class ComponentDetails:
    document: Document
    metadata: ComponentMetadata | None
    tags: tuple[Tag, ...]
    guidance: tuple[GuidanceGroup, ...]
    examples: tuple[CodeExample, ...]
    related: tuple[Document, ...]


@dataclass(frozen=True)
class ExampleSearchResults:
    results: tuple[ExampleMatch, ...]
    count: int
    query: str | None
    filters: ExampleFilters


@dataclass(frozen=True)
class ComponentGuidanceMatches:
    component: str | None
    url: str | None
    component_type: str | None
    groups: tuple[GuidanceGroup, ...]


@dataclass(frozen=True)
class GuidanceSearchResults:
    results: tuple[GuidanceMatch, ...]
    components: tuple[ComponentGuidanceMatches, ...]
    count: int
    query: str | None
    filters: GuidanceFilters


def group_guidance(entries: Iterable[GuidanceEntry]) -> tuple[GuidanceGroup, ...]:
    """Group guidance by kind in canonical kind order, highest priority first."""

    ordered = sorted(entries, key=lambda e: (e.kind.rank, -e.priority))
    groups: list[GuidanceGroup] = []
    for kind in GuidanceKind:
        members = tuple(e for e in ordered if e.kind is kind)
        if members:
            groups.append(GuidanceGroup(kind=kind, entries=members))
    return tuple(groups)


def group_matches_by_component(matches: Iterable[GuidanceMatch]) -> tuple[ComponentGuidanceMatches, ...]:
    """Group guidance matches per component page, in order of first appearance."""

    pages: dict[int, list[GuidanceMatch]] = {}
    for match in matches:
        pages.setdefault(match.entry.document_id, []).append(match)
    return tuple(
        ComponentGuidanceMatches(
            component=members[0].component,
            url=members[0].url,
            component_type=members[0].component_type,
            groups=group_guidance(m.entry for m in members),
        )
        for members in pages.values()
    )


class SearchService:
    """Answers component searches and documentation lookups against a store."""

    def __init__(
        self,
        store: CandidateStore,
        *,
        weights: ScoringWeights = DEFAULT_WEIGHTS,
        default_limit: int = 20,
        max_limit: int = 100,
        candidate_cap: int = DEFAULT_CANDIDATE_CAP,
        example_limit: int = 20,
        guidance_limit: int = 30,
    ) -> None:
        self._store = store
        self._weights = weights
        self._default_limit = default_limit
        self._max_limit = max_limit
        self._candidate_cap = candidate_cap
        self._example_limit = example_limit
        self._guidance_limit = guidance_limit
        self._logger = get_logger("search")

    @classmethod
    def from_settings(cls, store: CandidateStore, settings: Settings) -> "SearchService":
        return cls(
            store,
            weights=ScoringWeights(max_tag_matches=settings.tag_match_cap),
            default_limit=settings.search_default_limit,
            max_limit=settings.search_max_limit,
            candidate_cap=settings.search_candidate_cap,
            example_limit=settings.example_search_limit,
            guidance_limit=settings.guidance_search_limit,
        )

    def _resolve_limit(self, limit: int | None, default: int | None = None) -> int:
        if limit is None or limit <= 0:
            return self._default_limit if default is None else default
        return min(limit, self._max_limit)

    @staticmethod
    def _failure(tool: str, timer: TimedSection, code: ErrorCode, message: str, details: str | None = None) -> Failure:
        PipelineMetrics.observe_failure(code.value)
        return Failure(
            errors=(ErrorDetail(code=code, message=message, details=details),),
            metadata=ResultMetadata(tool=tool, execution_time_ms=timer.elapsed_ms),
        )

    def search_components(
        self,
        query: str | None,
        *,
        filters: SearchFilters | None = None,
        limit: int | None = None,
    ) -> Result[SearchResults]:
        tool = "search_components"
        limit = self._resolve_limit(limit)
        expanded = expand(query) if query and query.strip() else []

        with TimedSection() as timer:
            try:
                records = self._store.fetch_candidates(expanded, filters, cap=self._candidate_cap)
                ranked = rank_candidates(records, query, expanded, limit=limit, weights=self._weights)
                results = tuple(SearchResult.from_candidate(candidate) for candidate in ranked)
            except Exception as exc:
                self._logger.error("search.failed", query=query, error=str(exc))
                return self._failure(tool, timer, ErrorCode.SEARCH_ERROR, f"Search failed: {exc}", traceback.format_exc())

        PipelineMetrics.observe_search(timer.elapsed, len(records), len(results))
        self._logger.info(
            "search.complete",
            query=query,
            expanded_count=len(expanded),
            candidate_count=len(records),
            result_count=len(results),
            duration_seconds=timer.elapsed,
        )
        return Success(
            data=SearchResults(results=results, count=len(results), query=query, expanded_queries=tuple(expanded)),
            metadata=ResultMetadata(tool=tool, execution_time_ms=timer.elapsed_ms),
        )

    def _lookup(self, name: str, tool: str, timer: TimedSection) -> Document | Failure:
        key = normalize_component_name(name)
        try:
            document = self._store.fetch_document_by_identity(key) if key else None
        except Exception as exc:
            self._logger.error("lookup.failed", component=name, error=str(exc))
            return self._failure(tool, timer, ErrorCode.SEARCH_ERROR, f"Lookup failed: {exc}", traceback.format_exc())
        if document is None:
            return self._failure(tool, timer, ErrorCode.NOT_FOUND, f'Component "{name}" not found')
        return document

    def _attempt(self, notices: list[ErrorDetail], what: str, read: Callable[[], T], default: T) -> T:
        try:
            return read()
        except Exception as exc:
            self._logger.warning("lookup.partial", part=what, error=str(exc))
            notices.append(ErrorDetail(code=ErrorCode.SEARCH_ERROR, message=f"Could not load {what}: {exc}"))
            return default

    def get_component_details(self, name: str) -> Result[ComponentDetails]:
        tool = "get_component_details"
        notices: list[ErrorDetail] = []
        with TimedSection() as timer:
            document = self._lookup(name, tool, timer)
            if isinstance(document, Failure):
                return document
            store = self._store
            metadata = self._attempt(notices, "component metadata", lambda: store.fetch_component_metadata(document.id), None)
            tags: Sequence[Tag] = self._attempt(notices, "tags", lambda: store.fetch_tags(document.id), ())
            guidance: Sequence[GuidanceEntry] = self._attempt(notices, "guidance", lambda: store.fetch_guidance(document.id), ())
            examples: Sequence[CodeExample] = self._attempt(
                notices, "code examples", lambda: store.fetch_code_examples(document.id), ()
            )
            related: Sequence[Document] = self._attempt(
                notices, "related pages", lambda: store.fetch_sibling_documents(document.id), ()
            )

        self._logger.info("details.complete", component=name, document_id=document.id, notices=len(notices))
        details = ComponentDetails(
            document=document,
            metadata=metadata,
            tags=tuple(tags),
            guidance=group_guidance(guidance),
            examples=tuple(examples),
            related=tuple(related),
        )
        return Success(
            data=details,
            metadata=ResultMetadata(tool=tool, execution_time_ms=timer.elapsed_ms),
            notices=tuple(notices),
        )

    def get_component_guidance(self, name: str) -> Result[ComponentGuidance]:
        tool = "get_component_guidance"
        with TimedSection() as timer:
            document = self._lookup(name, tool, timer)
            if isinstance(document, Failure):
                return document
            try:
                entries = self._store.fetch_guidance(document.id)
            except Exception as exc:
                self._logger.error("guidance.failed", component=name, error=str(exc))
                return self._failure(
                    tool, timer, ErrorCode.SEARCH_ERROR, f"Guidance lookup failed: {exc}", traceback.format_exc()
                )

        guidance = ComponentGuidance(component=document.title, document_id=document.id, groups=group_guidance(entries))
        return Success(data=guidance, metadata=ResultMetadata(tool=tool, execution_time_ms=timer.elapsed_ms))

    def search_code_examples(
        self,
        query: str | None,
        *,
        filters: ExampleFilters | None = None,
        limit: int | None = None,
    ) -> Result[ExampleSearchResults]:
        """Find code examples across components by code text and example attributes."""

        tool = "search_code_examples"
        filters = filters or ExampleFilters()
        limit = self._resolve_limit(limit, self._example_limit)
        with TimedSection() as timer:
            try:
                matches = tuple(self._store.search_code_examples(query, filters, cap=limit))
            except Exception as exc:
                self._logger.error("examples.failed", query=query, error=str(exc))
                return self._failure(
                    tool, timer, ErrorCode.SEARCH_ERROR, f"Example search failed: {exc}", traceback.format_exc()
                )

        PipelineMetrics.observe_lookup("examples", timer.elapsed, len(matches))
        self._logger.info("examples.complete", query=query, result_count=len(matches), duration_seconds=timer.elapsed)
        return Success(
            data=ExampleSearchResults(results=matches, count=len(matches), query=query, filters=filters),
            metadata=ResultMetadata(tool=tool, execution_time_ms=timer.elapsed_ms),
        )

    def search_guidance(
        self,
        query: str | None,
        *,
        filters: GuidanceFilters | None = None,
        limit: int | None = None,
    ) -> Result[GuidanceSearchResults]:
        """Find usage guidance across components; matches are also grouped per component."""

        tool = "search_guidance"
        filters = filters or GuidanceFilters()
        limit = self._resolve_limit(limit, self._guidance_limit)
        with TimedSection() as timer:
            try:
                matches = tuple(self._store.search_guidance(query, filters, cap=limit))
            except Exception as exc:
                self._logger.error("guidance_search.failed", query=query, error=str(exc))
                return self._failure(
                    tool, timer, ErrorCode.SEARCH_ERROR, f"Guidance search failed: {exc}", traceback.format_exc()
                )

        PipelineMetrics.observe_lookup("guidance", timer.elapsed, len(matches))
        self._logger.info(
            "guidance_search.complete", query=query, result_count=len(matches), duration_seconds=timer.elapsed
        )
        results = GuidanceSearchResults(
            results=matches,
            components=group_matches_by_component(matches),
            count=len(matches),
            query=query,
            filters=filters,
        )
        return Success(data=results, metadata=ResultMetadata(tool=tool, execution_time_ms=timer.elapsed_ms))


__all__ = [
    "ComponentDetails",
    "ComponentGuidance",
    "ComponentGuidanceMatches",
    "ExampleSearchResults",
    "GuidanceGroup",
    "GuidanceSearchResults",
    "SearchResult",
    "SearchResults",
    "SearchService",
    "group_guidance",
    "group_matches_by_component",
]
