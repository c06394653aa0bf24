"""Parsed markup fragments and the tree queries the checks rely on."""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Iterator

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

DOCUMENT_NAME = "[document]"


class FragmentParseError(ValueError):
    """Raised when a markup fragment cannot be turned into a tree."""


@dataclass(frozen=True)
class Fragment:
    """Raw fragment text together with its parsed tree."""

    source: str
    soup: BeautifulSoup

    def select(self, selector: str) -> list[Tag]:
        return list(self.soup.select(selector))

    def select_one(self, selector: str) -> Tag | None:
        return self.soup.select_one(selector)

    def elements(self) -> Iterator[Tag]:
        return iter(self.soup.find_all(True))

    @cached_property
    def _line_offsets(self) -> list[int]:
        offsets = [0]
        for line in self.source.splitlines(keepends=True):
            offsets.append(offsets[-1] + len(line))
        return offsets

    def start_tag_source(self, tag: Tag) -> str:
        """Return the start tag exactly as written in the fragment."""

        line = getattr(tag, "sourceline", None)
        column = getattr(tag, "sourcepos", None)
        if line is None or column is None or line - 1 >= len(self._line_offsets):
            return ""
        start = self._line_offsets[line - 1] + column
        end = self.source.find(">", start)
        if end < 0:
            return self.source[start:]
        return self.source[start : end + 1]


def parse_fragment(html: str) -> Fragment:
    """Parse ``html`` with the stdlib-backed BeautifulSoup parser."""

    if not isinstance(html, str):
        raise FragmentParseError(f"Expected markup text, got {type(html).__name__}")
    if not html.strip():
        raise FragmentParseError("Markup fragment is empty")
    try:
        soup = BeautifulSoup(html, "html.parser")
    except ParserRejectedMarkup as exc:
        raise FragmentParseError(f"Markup could not be parsed: {exc}") from exc
    if soup.find(True) is None:
        raise FragmentParseError("Markup fragment contains no elements")
    return Fragment(source=html, soup=soup)


def ancestors(tag: Tag) -> list[Tag]:
    return [p for p in tag.parents if isinstance(p, Tag) and p.name != DOCUMENT_NAME]


def depth(tag: Tag) -> int:
    return len(ancestors(tag))


def parent_element(tag: Tag) -> Tag | None:
    parent = tag.parent
    if parent is None or parent.name == DOCUMENT_NAME:
        return None
    return parent


def matches(tag: Tag | None, selector: str) -> bool:
    return tag is not None and tag.css.match(selector)


def has_ancestor(tag: Tag, selector: str) -> bool:
    return any(p.css.match(selector) for p in ancestors(tag))


def closest(tag: Tag, selector: str) -> Tag | None:
    """Nearest element matching ``selector``, starting with ``tag`` itself."""

    if tag.css.match(selector):
        return tag
    for parent in ancestors(tag):
        if parent.css.match(selector):
            return parent
    return None


def class_tokens(tag: Tag) -> list[str]:
    value = tag.get("class") or []
    if isinstance(value, str):
        return value.split()
    return list(value)


def attr(tag: Tag, name: str) -> str | None:
    value = tag.get(name)
    if isinstance(value, list):
        return " ".join(value)
    return value


def child_elements(tag: Tag) -> list[Tag]:
    return [c for c in tag.children if isinstance(c, Tag)]


def describe(tag: Tag) -> str:
    """Short selector-like label used in issue references."""

    element_id = attr(tag, "id")
    if element_id:
        return f"#{element_id}"
    classes = class_tokens(tag)
    if classes:
        return f"{tag.name}.{classes[0]}"
    return tag.name
