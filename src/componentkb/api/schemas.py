"""Pydantic models for the componentkb API."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field

from componentkb.config import get_settings
from componentkb.models import GuidanceKind


class MetadataModel(BaseModel):
    tool: str
    execution_time_ms: float
    source: str
    version: str


class NoticeModel(BaseModel):
    code: str
    message: str
    details: Optional[str] = None


class SearchRequest(BaseModel):
    query: Optional[str] = Field(default=None, description="Free-text component query; omit to list by title")
    limit: Optional[int] = Field(
        default=None,
        ge=1,
        le=get_settings().search_max_limit,
        description="Maximum number of ranked results",
    )
    category: Optional[str] = Field(default=None, description="Restrict to one documentation category")
    tag: Optional[str] = Field(default=None, description="Restrict to components with a matching tag")
    complexity: Optional[str] = Field(default=None, description="Restrict to one complexity level")
    requires_js: Optional[bool] = Field(default=None, description="Restrict by JavaScript requirement")


class SearchResultModel(BaseModel):
    id: int
    title: Optional[str]
    component_name: Optional[str] = None
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    url: Optional[str] = None
    score: int
    complexity: Optional[str] = None
    requires_js: bool = False


class SearchResponse(BaseModel):
    query: Optional[str]
    expanded_queries: List[str]
    count: int
    results: List[SearchResultModel]
    metadata: MetadataModel


class ExampleSearchRequest(BaseModel):
    query: Optional[str] = Field(default=None, description="Text the example code must contain")
    component: Optional[str] = Field(default=None, description="Restrict to components whose name contains this")
    language: Optional[str] = Field(default=None, description="Restrict to one language, e.g. html")
    complexity: Optional[str] = Field(default=None, description="Restrict to one complexity level")
    complete_only: bool = False
    interactive_only: bool = False
    limit: Optional[int] = Field(default=None, ge=1, le=get_settings().search_max_limit)


class GuidanceSearchRequest(BaseModel):
    query: Optional[str] = Field(default=None, description="Text the guidance must contain")
    kind: Optional[GuidanceKind] = Field(default=None, description="Restrict to one guidance kind")
    component: Optional[str] = Field(default=None, description="Restrict to components whose name contains this")
    limit: Optional[int] = Field(default=None, ge=1, le=get_settings().search_max_limit)


class ValidateRequest(BaseModel):
    component: str = Field(..., min_length=1, description="Component name, e.g. 'Text Field'")
    html: str = Field(..., min_length=1, description="Markup fragment to validate")


class IssueModel(BaseModel):
    severity: str
    message: str
    category: str
    fix: Optional[str] = None
    line: Optional[int] = None
    selector: Optional[str] = None
    wcag: Optional[str] = None
    rule_id: Optional[str] = None


class SuggestionModel(BaseModel):
    type: str
    message: str


class TroubleshootingAdviceModel(BaseModel):
    symptom: str
    cause: str
    fix: str
    priority: str


class TroubleshootingModel(BaseModel):
    total_issues: int
    critical_issues: int
    advice: List[TroubleshootingAdviceModel]
    quick_fixes: List[TroubleshootingAdviceModel]


class ValidationResponse(BaseModel):
    component: str
    rule_key: str
    is_valid: bool
    score: int = Field(..., ge=0, le=100)
    errors: List[IssueModel]
    warnings: List[IssueModel]
    suggestions: List[SuggestionModel]
    troubleshooting: TroubleshootingModel
    checks_performed: List[str]
    notices: List[NoticeModel] = Field(default_factory=list)
    metadata: MetadataModel


class EnvelopeResponse(BaseModel):
    """Generic success envelope for documentation lookups."""

    success: bool = True
    data: Any
    notices: List[NoticeModel] = Field(default_factory=list)
    metadata: MetadataModel


class ErrorResponse(BaseModel):
    success: bool = False
    errors: List[NoticeModel]
    metadata: MetadataModel
    correlation_id: Optional[str] = None
