from __future__ import annotations

import pytest

from componentkb.models import (
    CodeExample,
    ComponentMetadata,
    Document,
    GuidanceEntry,
    GuidanceKind,
    Tag,
    TagCategory,
)
from componentkb.retrieval import CorpusSnapshot, InMemoryCorpusStore


def _doc(doc_id: int, title: str, category: str, hierarchy: tuple, content: str = "") -> Document:
    return Document(
        id=doc_id,
        url=f"https://docs.example.org/{title.lower().replace(' ', '-')}/{doc_id}",
        title=title,
        category=category,
        hierarchy=hierarchy,
        content=content,
    )


def build_snapshot() -> CorpusSnapshot:
    documents = (
        _doc(1, "Button", "components", ("Components", "Button", "Usage", None), "Buttons trigger actions"),
        _doc(2, "Button group", "components", ("Components", "Button group", "Usage", None), "Grouped actions"),
        _doc(3, "Text field", "forms", ("Forms", "Text field", "Usage", None), "Single line text entry"),
        _doc(4, "Text field code", "forms", ("Forms", "Text field", "Usage", "Code"), "Markup for text entry"),
        _doc(5, "Select", "forms", ("Forms", "Select", "Usage", None), "Choose one option from a dropdown list"),
    )
    components = (
        ComponentMetadata(1, "Button", component_type="action", complexity="simple"),
        ComponentMetadata(2, "Button group", component_type="action", complexity="moderate"),
        ComponentMetadata(3, "Text field", component_type="form", complexity="simple"),
        ComponentMetadata(5, "Select", component_type="form", complexity="moderate", requires_js=True),
    )
    tags = (
        Tag(1, "action", TagCategory.INTERACTION),
        Tag(3, "form"),
        Tag(3, "accessible", TagCategory.ACCESSIBILITY),
        Tag(5, "form"),
    )
    examples = (
        CodeExample(11, 3, "html", '<input class="ecl-text-input">', position=1, variant="invalid"),
        CodeExample(10, 3, "html", '<div class="ecl-form-group"></div>', position=0, variant="default"),
        CodeExample(
            20,
            5,
            "html",
            '<select class="ecl-select" id="s1"></select>',
            variant="default",
            complexity="moderate",
            is_complete=True,
        ),
        CodeExample(21, 5, "js", "ECL.autoInit(); // select", position=1, complexity="moderate", is_interactive=True),
    )
    guidance = (
        GuidanceEntry(3, GuidanceKind.NOTE, "Supports all input types", priority=0),
        GuidanceEntry(3, GuidanceKind.DO, "Always pair with a label", priority=1),
        GuidanceEntry(3, GuidanceKind.DONT, "Do not rely on placeholder text", priority=2),
        GuidanceEntry(3, GuidanceKind.DO, "Keep labels short", priority=5),
        GuidanceEntry(3, GuidanceKind.WHEN_TO_USE, "Short free-text answers", priority=1),
        GuidanceEntry(3, GuidanceKind.DO, "Use helper text for formats", priority=3),
        GuidanceEntry(5, GuidanceKind.CAVEAT, "Long option lists need a search field", priority=1),
        GuidanceEntry(5, GuidanceKind.WHEN_TO_USE, "Choose one option from many", priority=2),
        GuidanceEntry(5, GuidanceKind.DO, "Keep option labels short", priority=0),
    )
    return CorpusSnapshot(
        documents=documents,
        components=components,
        tags=tags,
        examples=examples,
        guidance=guidance,
    )


@pytest.fixture
def snapshot() -> CorpusSnapshot:
    return build_snapshot()


@pytest.fixture
def memory_store(snapshot: CorpusSnapshot) -> InMemoryCorpusStore:
    return InMemoryCorpusStore(snapshot)
