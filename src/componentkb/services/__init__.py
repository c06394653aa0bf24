"""Request-level services returning result envelopes."""

from .search import (
    ComponentDetails,
    ComponentGuidance,
    ComponentGuidanceMatches,
    ExampleSearchResults,
    GuidanceGroup,
    GuidanceSearchResults,
    SearchResult,
    SearchResults,
    SearchService,
    group_guidance,
    group_matches_by_component,
)
from .validation import Suggestion, ValidationReport, ValidationService, contextual_suggestions

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
    "Suggestion",
    "ValidationReport",
    "ValidationService",
    "contextual_suggestions",
    "group_guidance",
    "group_matches_by_component",
]
