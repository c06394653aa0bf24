"""Synonym-based query expansion."""

from __future__ import annotations

from typing import Iterable, Mapping

from componentkb.search.synonyms import SYNONYMS


def expand(query: str, table: Mapping[str, Iterable[str]] = SYNONYMS) -> list[str]:
    """Return the query followed by every synonym phrase it should also match.

    The original query is always the first element, unmodified. An exact hit
    on the trimmed, lower-cased query contributes its group first; then every
    key that is contained in the query, or contains it, contributes its group.
    Duplicates (exact string equality) are dropped, first occurrence wins.
    """

    expanded: list[str] = [query]
    seen: set[str] = {query}

    def _add(phrases: Iterable[str]) -> None:
        for phrase in phrases:
            if phrase not in seen:
                seen.add(phrase)
                expanded.append(phrase)

    key = query.strip().lower()
    if not key:
        return expanded

    exact = table.get(key)
    if exact is not None:
        _add(exact)

    for candidate_key, phrases in table.items():
        if candidate_key in key or key in candidate_key:
            _add(phrases)
    return expanded


def tokenize(text: str, *, min_length: int = 2) -> list[str]:
    """Lower-case whitespace tokens of at least ``min_length`` characters, deduplicated."""

    tokens: list[str] = []
    for token in text.lower().split():
        if len(token) >= min_length and token not in tokens:
            tokens.append(token)
    return tokens


__all__ = ["expand", "tokenize"]
