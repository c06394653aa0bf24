"""Shared domain models used across search and validation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence


def normalize_component_name(name: str | None) -> str:
    """Return the fuzzy-matching key for a component name.

    Lower-cases the name and drops spaces and hyphens, so "Text Field",
    "text-field" and "textfield" share one key. Applying it twice yields the
    same key as applying it once.
    """

    if not name:
        return ""
    return "".join(ch for ch in name.lower() if ch not in " -\t\r\n")


@dataclass(frozen=True)
class ComponentIdentity:
    """Canonical component name plus its normalized lookup key."""

    name: str
    key: str

    @classmethod
    def from_name(cls, name: str) -> "ComponentIdentity":
        return cls(name=name, key=normalize_component_name(name))


@dataclass(frozen=True)
class Document:
    """An indexed documentation page."""

    id: int
    url: str
    title: str
    category: str | None = None
    hierarchy: tuple[str | None, str | None, str | None, str | None] = (None, None, None, None)
    content: str = ""
    raw_html: str = ""


@dataclass(frozen=True)
class ComponentMetadata:
    """Component attributes attached to a documentation page."""

    document_id: int
    component_name: str
    component_type: str | None = None
    complexity: str | None = None
    requires_js: bool = False
    status: str | None = None


@dataclass(frozen=True)
class CodeExample:
    """Code snippet taken from a documentation page."""

    id: int
    document_id: int
    language: str
    code: str
    position: int = 0
    variant: str | None = None
    use_case: str | None = None
    complexity: str | None = None
    is_complete: bool = False
    is_interactive: bool = False


class GuidanceKind(str, Enum):
    WHEN_TO_USE = "when-to-use"
    WHEN_NOT_TO_USE = "when-not-to-use"
    BEST_PRACTICE = "best-practice"
    DO = "do"
    DONT = "dont"
    CAVEAT = "caveat"
    LIMITATION = "limitation"
    NOTE = "note"

    @property
    def rank(self) -> int:
        return list(GuidanceKind).index(self)


@dataclass(frozen=True)
class GuidanceEntry:
    """Usage guidance sentence extracted from a page."""

    document_id: int
    kind: GuidanceKind
    content: str
    priority: int = 0


@dataclass(frozen=True)
class ExampleMatch:
    """Code example found by a cross-component search, with its page context."""

    example: CodeExample
    component: str | None
    url: str | None = None
    component_type: str | None = None


@dataclass(frozen=True)
class GuidanceMatch:
    """Guidance entry found by a cross-component search, with its page context."""

    entry: GuidanceEntry
    component: str | None
    url: str | None = None
    component_type: str | None = None


class TagCategory(str, Enum):
    FEATURE = "feature"
    ACCESSIBILITY = "accessibility"
    CATEGORY = "category"
    INTERACTION = "interaction"


@dataclass(frozen=True)
class Tag:
    document_id: int
    tag: str
    category: TagCategory = TagCategory.FEATURE


@dataclass(frozen=True)
class CandidateRecord:
    """Raw row returned by candidate retrieval, before scoring."""

    id: int
    title: str | None
    component_name: str | None = None
    category: str | None = None
    tags: Sequence[str] = field(default_factory=tuple)
    url: str | None = None
    component_type: str | None = None
    complexity: str | None = None
    requires_js: bool = False
    status: str | None = None


@dataclass(frozen=True)
class RelevanceCandidate:
    """Candidate with its relevance score; only exists during a search call."""

    record: CandidateRecord
    score: int


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class ValidationIssue:
    """Single problem found in a markup fragment."""

    severity: Severity
    message: str
    category: str
    fix: str | None = None
    line: int | None = None
    selector: str | None = None
    wcag: str | None = None
    rule_id: str | None = None
