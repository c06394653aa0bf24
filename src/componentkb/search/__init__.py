"""Query expansion and relevance ranking."""

from .expander import expand, tokenize
from .scoring import DEFAULT_WEIGHTS, ScoringWeights, rank_candidates, score_candidate
from .synonyms import SYNONYMS

__all__ = [
    "DEFAULT_WEIGHTS",
    "SYNONYMS",
    "ScoringWeights",
    "expand",
    "rank_candidates",
    "score_candidate",
    "tokenize",
]
