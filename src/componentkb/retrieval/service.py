"""Candidate retrieval over an immutable corpus snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Protocol, Sequence

from componentkb.models import (
    CandidateRecord,
    CodeExample,
    ComponentMetadata,
    Document,
    ExampleMatch,
    GuidanceEntry,
    GuidanceKind,
    GuidanceMatch,
    Tag,
    normalize_component_name,
)
from componentkb.search.expander import tokenize

DEFAULT_CANDIDATE_CAP = 100


class StoreError(RuntimeError):
    """Raised when the corpus store cannot answer a read."""


@dataclass(frozen=True)
class SearchFilters:
    """Optional filters ANDed onto candidate retrieval."""

    category: str | None = None
    tag: str | None = None
    complexity: str | None = None
    requires_js: bool | None = None


@dataclass(frozen=True)
class ExampleFilters:
    """Filters for searching code examples across components."""

    component: str | None = None
    language: str | None = None
    complexity: str | None = None
    complete_only: bool = False
    interactive_only: bool = False


@dataclass(frozen=True)
class GuidanceFilters:
    """Filters for searching usage guidance across components."""

    kind: GuidanceKind | None = None
    component: str | None = None


# Guidance kinds listed first in cross-component guidance searches; the rest follow
GUIDANCE_SEARCH_PRECEDENCE = (
    GuidanceKind.WHEN_TO_USE,
    GuidanceKind.WHEN_NOT_TO_USE,
    GuidanceKind.CAVEAT,
    GuidanceKind.LIMITATION,
)


def guidance_search_rank(kind: GuidanceKind) -> int:
    if kind in GUIDANCE_SEARCH_PRECEDENCE:
        return GUIDANCE_SEARCH_PRECEDENCE.index(kind)
    return len(GUIDANCE_SEARCH_PRECEDENCE)


class CandidateStore(Protocol):
    """Read-only access to the documentation corpus."""

    def fetch_candidates(
        self,
        queries: Sequence[str],
        filters: SearchFilters | None = None,
        *,
        cap: int = DEFAULT_CANDIDATE_CAP,
    ) -> Sequence[CandidateRecord]:
        """Return unordered candidates matching any query; no relevance ordering."""

    def fetch_document_by_identity(self, key: str) -> Document | None:
        """Return the page whose component name or title normalizes to ``key``."""

    def fetch_component_metadata(self, document_id: int) -> ComponentMetadata | None:
        """Return component metadata for a page."""

    def fetch_code_examples(self, document_id: int) -> Sequence[CodeExample]:
        """Return the page's code examples ordered by position."""

    def fetch_guidance(self, document_id: int) -> Sequence[GuidanceEntry]:
        """Return the page's usage guidance."""

    def fetch_tags(self, document_id: int) -> Sequence[Tag]:
        """Return the page's tags."""

    def fetch_sibling_documents(self, document_id: int) -> Sequence[Document]:
        """Return other pages of the same component (shared hierarchy prefix)."""

    def search_code_examples(
        self,
        query: str | None,
        filters: ExampleFilters | None = None,
        *,
        cap: int = DEFAULT_CANDIDATE_CAP,
    ) -> Sequence[ExampleMatch]:
        """Return examples whose code contains ``query``.

        Complete examples come first, then component title, language and id.
        """

    def search_guidance(
        self,
        query: str | None,
        filters: GuidanceFilters | None = None,
        *,
        cap: int = DEFAULT_CANDIDATE_CAP,
    ) -> Sequence[GuidanceMatch]:
        """Return guidance whose text contains ``query``.

        Ordered by ``guidance_search_rank``, then component title, then
        descending priority.
        """

    def count(self) -> int:
        """Return the number of indexed pages."""


@dataclass(frozen=True)
class CorpusSnapshot:
    """Materialized corpus as produced by the ingestion pipeline."""

    documents: tuple[Document, ...] = ()
    components: tuple[ComponentMetadata, ...] = ()
    tags: tuple[Tag, ...] = ()
    examples: tuple[CodeExample, ...] = ()
    guidance: tuple[GuidanceEntry, ...] = ()
    _by_id: dict[int, Document] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._by_id.update({doc.id: doc for doc in self.documents})

    def document(self, document_id: int) -> Document | None:
        return self._by_id.get(document_id)

    def component(self, document_id: int) -> ComponentMetadata | None:
        for meta in self.components:
            if meta.document_id == document_id:
                return meta
        return None

    def tags_for(self, document_id: int) -> list[Tag]:
        return [t for t in self.tags if t.document_id == document_id]


def sibling_prefix(document: Document) -> tuple[str | None, ...]:
    return tuple(document.hierarchy[:3])


class InMemoryCorpusStore:
    """Candidate store answering reads from a ``CorpusSnapshot``."""

    def __init__(self, snapshot: CorpusSnapshot) -> None:
        self._snapshot = snapshot

    @property
    def snapshot(self) -> CorpusSnapshot:
        return self._snapshot

    def fetch_candidates(
        self,
        queries: Sequence[str],
        filters: SearchFilters | None = None,
        *,
        cap: int = DEFAULT_CANDIDATE_CAP,
    ) -> Sequence[CandidateRecord]:
        filters = filters or SearchFilters()
        phrases = [q.strip().lower() for q in queries if q and q.strip()]
        terms: list[str] = []
        for phrase in phrases:
            terms.extend(t for t in tokenize(phrase) if t not in terms)

        results: list[CandidateRecord] = []
        for doc in self._snapshot.documents:
            meta = self._snapshot.component(doc.id)
            tags = [t.tag for t in self._snapshot.tags_for(doc.id)]
            if not _passes_filters(doc, meta, tags, filters):
                continue
            if phrases and not _matches_any(doc, meta, tags, phrases, terms):
                continue
            results.append(_to_record(doc, meta, tags))
            if len(results) >= cap:
                break
        return results

    def fetch_document_by_identity(self, key: str) -> Document | None:
        key = normalize_component_name(key)
        if not key:
            return None
        for doc in self._snapshot.documents:
            meta = self._snapshot.component(doc.id)
            if meta is not None and normalize_component_name(meta.component_name) == key:
                return doc
        for doc in self._snapshot.documents:
            if normalize_component_name(doc.title) == key:
                return doc
        return None

    def fetch_component_metadata(self, document_id: int) -> ComponentMetadata | None:
        return self._snapshot.component(document_id)

    def fetch_code_examples(self, document_id: int) -> Sequence[CodeExample]:
        examples = [e for e in self._snapshot.examples if e.document_id == document_id]
        return sorted(examples, key=lambda e: e.position)

    def fetch_guidance(self, document_id: int) -> Sequence[GuidanceEntry]:
        return [g for g in self._snapshot.guidance if g.document_id == document_id]

    def fetch_tags(self, document_id: int) -> Sequence[Tag]:
        return self._snapshot.tags_for(document_id)

    def fetch_sibling_documents(self, document_id: int) -> Sequence[Document]:
        doc = self._snapshot.document(document_id)
        if doc is None or not any(doc.hierarchy[:3]):
            return []
        prefix = sibling_prefix(doc)
        return [d for d in self._snapshot.documents if d.id != doc.id and sibling_prefix(d) == prefix]

    def _page_context(
        self, document_id: int, component: str | None
    ) -> tuple[Document, ComponentMetadata | None] | None:
        doc = self._snapshot.document(document_id)
        if doc is None:
            return None
        meta = self._snapshot.component(document_id)
        if component and not _names_component(doc, meta, component):
            return None
        return doc, meta

    def search_code_examples(
        self,
        query: str | None,
        filters: ExampleFilters | None = None,
        *,
        cap: int = DEFAULT_CANDIDATE_CAP,
    ) -> Sequence[ExampleMatch]:
        filters = filters or ExampleFilters()
        needle = (query or "").strip().lower()
        matches: list[ExampleMatch] = []
        for example in self._snapshot.examples:
            if needle and needle not in example.code.lower():
                continue
            if filters.language and example.language.lower() != filters.language.lower():
                continue
            if filters.complexity and example.complexity != filters.complexity:
                continue
            if filters.complete_only and not example.is_complete:
                continue
            if filters.interactive_only and not example.is_interactive:
                continue
            context = self._page_context(example.document_id, filters.component)
            if context is None:
                continue
            doc, meta = context
            matches.append(
                ExampleMatch(
                    example=example,
                    component=doc.title,
                    url=doc.url,
                    component_type=meta.component_type if meta else None,
                )
            )
        matches.sort(key=lambda m: (not m.example.is_complete, m.component or "", m.example.language, m.example.id))
        return matches[:cap]

    def search_guidance(
        self,
        query: str | None,
        filters: GuidanceFilters | None = None,
        *,
        cap: int = DEFAULT_CANDIDATE_CAP,
    ) -> Sequence[GuidanceMatch]:
        filters = filters or GuidanceFilters()
        needle = (query or "").strip().lower()
        matches: list[GuidanceMatch] = []
        for entry in self._snapshot.guidance:
            if needle and needle not in entry.content.lower():
                continue
            if filters.kind is not None and entry.kind is not filters.kind:
                continue
            context = self._page_context(entry.document_id, filters.component)
            if context is None:
                continue
            doc, meta = context
            matches.append(
                GuidanceMatch(
                    entry=entry,
                    component=doc.title,
                    url=doc.url,
                    component_type=meta.component_type if meta else None,
                )
            )
        matches.sort(key=lambda m: (guidance_search_rank(m.entry.kind), m.component or "", -m.entry.priority))
        return matches[:cap]

    def count(self) -> int:
        return len(self._snapshot.documents)


def _passes_filters(
    doc: Document,
    meta: ComponentMetadata | None,
    tags: Iterable[str],
    filters: SearchFilters,
) -> bool:
    if filters.category and doc.category != filters.category:
        return False
    if filters.tag and not any(filters.tag.lower() in t.lower() for t in tags):
        return False
    if filters.complexity and (meta is None or meta.complexity != filters.complexity):
        return False
    if filters.requires_js is not None and (meta is None or meta.requires_js != filters.requires_js):
        return False
    return True


def _matches_any(
    doc: Document,
    meta: ComponentMetadata | None,
    tags: Sequence[str],
    phrases: Sequence[str],
    terms: Sequence[str],
) -> bool:
    title = (doc.title or "").lower()
    name = (meta.component_name if meta else "").lower()
    lowered_tags = [t.lower() for t in tags]
    for phrase in phrases:
        if phrase in title or (name and phrase in name):
            return True
        if any(phrase in t for t in lowered_tags):
            return True
    content_words = set(doc.content.lower().split())
    return any(term in content_words for term in terms)


def _names_component(doc: Document, meta: ComponentMetadata | None, component: str) -> bool:
    needle = component.lower()
    if needle in (doc.title or "").lower():
        return True
    return meta is not None and needle in meta.component_name.lower()


def _to_record(doc: Document, meta: ComponentMetadata | None, tags: Sequence[str]) -> CandidateRecord:
    return CandidateRecord(
        id=doc.id,
        title=doc.title,
        component_name=meta.component_name if meta else None,
        category=doc.category,
        tags=tuple(tags),
        url=doc.url,
        component_type=meta.component_type if meta else None,
        complexity=meta.complexity if meta else None,
        requires_js=meta.requires_js if meta else False,
        status=meta.status if meta else None,
    )
