"""Retrieval components."""

from .service import (
    DEFAULT_CANDIDATE_CAP,
    GUIDANCE_SEARCH_PRECEDENCE,
    CandidateStore,
    CorpusSnapshot,
    ExampleFilters,
    GuidanceFilters,
    InMemoryCorpusStore,
    SearchFilters,
    StoreError,
    guidance_search_rank,
)
from .sqlite_store import SQLiteCorpusStore

__all__ = [
    "DEFAULT_CANDIDATE_CAP",
    "GUIDANCE_SEARCH_PRECEDENCE",
    "CandidateStore",
    "CorpusSnapshot",
    "ExampleFilters",
    "GuidanceFilters",
    "InMemoryCorpusStore",
    "SQLiteCorpusStore",
    "SearchFilters",
    "StoreError",
    "guidance_search_rank",
]
