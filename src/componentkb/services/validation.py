"""Validation orchestration producing scored reports."""

from __future__ import annotations

import traceback
from dataclasses import dataclass
from typing import Sequence

from componentkb.config import Settings
from componentkb.metrics.observability import PipelineMetrics, TimedSection, get_logger
from componentkb.models import GuidanceEntry, GuidanceKind, ValidationIssue, normalize_component_name
from componentkb.results import ErrorCode, ErrorDetail, Failure, Result, ResultMetadata, Success
from componentkb.retrieval.service import CandidateStore
from componentkb.validation.engine import validate
from componentkb.validation.quality import TroubleshootingReport, quality_score, troubleshoot
from componentkb.validation.structure import DEFAULT_MAX_DEPTH
from componentkb.validation.tree import FragmentParseError

TOOL = "validate_component"
SUGGESTIONS_PER_KIND = 2


@dataclass(frozen=True)
class Suggestion:
    type: str
    message: str


@dataclass(frozen=True)
class ValidationReport:
    component: str
    rule_key: str
    is_valid: bool
    score: int
    errors: tuple[ValidationIssue, ...]
    warnings: tuple[ValidationIssue, ...]
    suggestions: tuple[Suggestion, ...]
    troubleshooting: TroubleshootingReport
    checks_performed: tuple[str, ...]


def contextual_suggestions(guidance: Sequence[GuidanceEntry]) -> list[Suggestion]:
    """Turn the top do/dont guidance of a component into best-practice hints."""

    suggestions: list[Suggestion] = []
    for kind, prefix in ((GuidanceKind.DO, "Best practices"), (GuidanceKind.DONT, "Avoid")):
        entries = sorted((g for g in guidance if g.kind is kind), key=lambda g: -g.priority)
        if entries:
            top = "; ".join(g.content for g in entries[:SUGGESTIONS_PER_KIND])
            suggestions.append(Suggestion(type="best_practice", message=f"{prefix}: {top}"))
    return suggestions


class ValidationService:
    """Validates markup fragments and enriches reports with component guidance."""

    def __init__(
        self,
        store: CandidateStore | None = None,
        *,
        max_nesting_depth: int = DEFAULT_MAX_DEPTH,
        max_fragment_bytes: int | None = None,
    ) -> None:
        self._store = store
        self._max_nesting_depth = max_nesting_depth
        self._max_fragment_bytes = max_fragment_bytes
        self._logger = get_logger("validation")

    @classmethod
    def from_settings(cls, settings: Settings, store: CandidateStore | None = None) -> "ValidationService":
        return cls(
            store,
            max_nesting_depth=settings.max_nesting_depth,
            max_fragment_bytes=settings.max_fragment_bytes,
        )

    def _failure(self, timer: TimedSection, message: str, details: str | None = None) -> Failure:
        PipelineMetrics.observe_failure(ErrorCode.VALIDATION_ERROR.value)
        return Failure(
            errors=(ErrorDetail(code=ErrorCode.VALIDATION_ERROR, message=message, details=details),),
            metadata=ResultMetadata(tool=TOOL, execution_time_ms=timer.elapsed_ms),
        )

    def _guidance(self, component: str, notices: list[ErrorDetail]) -> Sequence[GuidanceEntry]:
        if self._store is None:
            return ()
        try:
            document = self._store.fetch_document_by_identity(normalize_component_name(component))
            if document is None:
                return ()
            return self._store.fetch_guidance(document.id)
        except Exception as exc:
            self._logger.warning("validation.guidance_failed", component=component, error=str(exc))
            notices.append(ErrorDetail(code=ErrorCode.SEARCH_ERROR, message=f"Could not load guidance: {exc}"))
            return ()

    def validate_component(self, component: str, html: str) -> Result[ValidationReport]:
        notices: list[ErrorDetail] = []
        with TimedSection() as timer:
            if (
                self._max_fragment_bytes is not None
                and isinstance(html, str)
                and len(html.encode("utf-8")) > self._max_fragment_bytes
            ):
                self._logger.warning("validation.failed", component=component, error="fragment too large")
                return self._failure(timer, f"Markup fragment exceeds {self._max_fragment_bytes} bytes")
            try:
                outcome = validate(component, html, max_nesting_depth=self._max_nesting_depth)
            except FragmentParseError as exc:
                self._logger.warning("validation.failed", component=component, error=str(exc))
                return self._failure(timer, str(exc))
            except Exception as exc:
                self._logger.error("validation.failed", component=component, error=str(exc))
                return self._failure(timer, f"Validation failed: {exc}", traceback.format_exc())

            for failure in outcome.check_failures:
                self._logger.warning("validation.check_failed", component=component, check=failure.check, error=failure.error)
                notices.append(
                    ErrorDetail(
                        code=ErrorCode.VALIDATION_ERROR,
                        message=f"Check {failure.check} could not run",
                        details=failure.error,
                    )
                )
            if not outcome.rules_found:
                notices.append(
                    ErrorDetail(
                        code=ErrorCode.COMPONENT_NOT_FOUND,
                        message=f'No structural rules for component "{component}"; generic checks only',
                    )
                )

            score = quality_score(outcome.errors, outcome.warnings)
            report = ValidationReport(
                component=component,
                rule_key=outcome.rule_key,
                is_valid=outcome.is_valid,
                score=score,
                errors=outcome.errors,
                warnings=outcome.warnings,
                suggestions=tuple(contextual_suggestions(self._guidance(component, notices))),
                troubleshooting=troubleshoot(outcome.errors, outcome.warnings),
                checks_performed=outcome.checks_performed,
            )

        PipelineMetrics.observe_validation(
            timer.elapsed,
            (issue.severity.value for issue in (*report.errors, *report.warnings)),
            score,
        )
        self._logger.info(
            "validation.complete",
            component=component,
            rule_key=outcome.rule_key,
            error_count=len(report.errors),
            warning_count=len(report.warnings),
            score=score,
            duration_seconds=timer.elapsed,
        )
        return Success(
            data=report,
            metadata=ResultMetadata(tool=TOOL, execution_time_ms=timer.elapsed_ms),
            notices=tuple(notices),
        )


__all__ = ["Suggestion", "ValidationReport", "ValidationService", "contextual_suggestions"]
