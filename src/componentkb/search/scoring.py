"""Relevance scoring and ranking of retrieved component candidates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from componentkb.models import CandidateRecord, RelevanceCandidate
from componentkb.search.expander import tokenize


@dataclass(frozen=True)
class ScoringWeights:
    """Hand-authored weights for the relevance function."""

    exact: int = 1000
    prefix: int = 800
    substring: int = 600
    token: int = 100
    exact_word: int = 50
    word_prefix: int = 25
    full_coverage: int = 200
    category: int = 10
    tag: int = 5
    max_tag_matches: int | None = 4


DEFAULT_WEIGHTS = ScoringWeights()


def _phrase_bonus(phrase: str, fields: Sequence[str], weights: ScoringWeights) -> int:
    if any(field == phrase for field in fields):
        return weights.exact
    if any(field.startswith(phrase) or phrase.startswith(field) for field in fields):
        return weights.prefix
    if any(phrase in field or field in phrase for field in fields):
        return weights.substring
    return 0


def _word_bonus(token: str, words: Sequence[str], weights: ScoringWeights) -> int:
    if token in words:
        return weights.exact_word
    if any(word.startswith(token) for word in words):
        return weights.word_prefix
    return 0


def score_candidate(
    record: CandidateRecord,
    original_query: str,
    expanded_queries: Iterable[str],
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> int:
    """Score one candidate against the original query and its expansions."""

    title = (record.title or "").lower()
    name = (record.component_name or "").lower()
    # Empty fields would prefix-match every phrase
    fields = [f for f in (title, name) if f]
    title_words = title.split()
    name_words = name.split()

    # Phrase bonuses apply once per expansion; case variants are not merged
    candidates = list(expanded_queries)
    if original_query not in candidates:
        candidates.insert(0, original_query)
    phrases = [p.strip().lower() for p in candidates if p and p.strip()]

    score = 0
    for phrase in phrases:
        score += _phrase_bonus(phrase, fields, weights)

    tokens: list[str] = []
    for phrase in phrases:
        for token in tokenize(phrase):
            if token not in tokens:
                tokens.append(token)

    matched = 0
    for token in tokens:
        if token not in title and token not in name:
            continue
        matched += 1
        score += weights.token
        score += _word_bonus(token, title_words, weights)
        score += _word_bonus(token, name_words, weights)

    original_tokens = tokenize(original_query or "")
    if original_tokens and matched >= len(original_tokens):
        score += weights.full_coverage

    category = (record.category or "").lower()
    if category and any(p in category for p in [*phrases, *tokens]):
        score += weights.category

    tag_hits = 0
    for tag in record.tags or ():
        tag_lower = (tag or "").lower()
        if tag_lower and any(t in tag_lower for t in [*phrases, *tokens]):
            tag_hits += 1
    if weights.max_tag_matches is not None:
        tag_hits = min(tag_hits, weights.max_tag_matches)
    score += tag_hits * weights.tag
    return score


def rank_candidates(
    records: Iterable[CandidateRecord],
    original_query: str | None,
    expanded_queries: Sequence[str] = (),
    *,
    limit: int = 20,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> list[RelevanceCandidate]:
    """Score, order and truncate candidates.

    Higher scores come first; equal scores fall back to the title in plain
    ascending string order, so the output does not depend on retrieval order.
    Without a query nothing is scored and titles alone decide the order.
    """

    if not original_query or not original_query.strip():
        ranked = [RelevanceCandidate(record=r, score=0) for r in records]
        ranked.sort(key=lambda c: c.record.title or "")
    else:
        ranked = [
            RelevanceCandidate(record=r, score=score_candidate(r, original_query, expanded_queries, weights))
            for r in records
        ]
        ranked.sort(key=lambda c: (-c.score, c.record.title or ""))
    return ranked[: max(0, limit)]


__all__ = ["DEFAULT_WEIGHTS", "ScoringWeights", "rank_candidates", "score_candidate"]
