"""Observability helpers for componentkb."""

from __future__ import annotations

import logging
import time
from contextvars import ContextVar
from typing import Callable, Iterable

import structlog
from prometheus_client import Counter, Histogram

_logger_configured = False
_correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="-")


def configure_logging(level: int | str = logging.INFO) -> None:
    global _logger_configured  # noqa: PLW0603 - module-level guard
    if _logger_configured:
        return
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(level=level, format="%(message)s")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _logger_configured = True


def bind_correlation_id(correlation_id: str) -> None:
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    structlog.contextvars.clear_contextvars()
    _correlation_id_var.set("-")


def get_correlation_id() -> str:
    return _correlation_id_var.get()


def get_logger(name: str = "componentkb") -> structlog.BoundLogger:
    configure_logging()
    return structlog.get_logger(name)


class PipelineMetrics:
    """Prometheus metrics for the search and validation pipelines."""

    search_latency = Histogram(
        "componentkb_search_duration_seconds",
        "Time spent answering a component search.",
        buckets=(0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.5),
    )
    candidate_count = Histogram(
        "componentkb_search_candidate_count",
        "Candidates returned by retrieval before ranking.",
        buckets=(0, 1, 5, 10, 25, 50, 100),
    )
    result_count = Histogram(
        "componentkb_search_result_count",
        "Ranked results returned to the caller.",
        buckets=(0, 1, 3, 5, 10, 20, 50),
    )
    lookup_latency = Histogram(
        "componentkb_lookup_duration_seconds",
        "Time spent answering example and guidance searches.",
        ["kind"],
        buckets=(0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.5),
    )
    lookup_results = Histogram(
        "componentkb_lookup_result_count",
        "Items returned by example and guidance searches.",
        ["kind"],
        buckets=(0, 1, 5, 10, 20, 50, 100),
    )
    validation_latency = Histogram(
        "componentkb_validation_duration_seconds",
        "Time spent validating a markup fragment.",
        buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
    )
    validation_issues = Counter(
        "componentkb_validation_issues_total",
        "Validation issues reported, by severity.",
        ["severity"],
    )
    quality_score = Histogram(
        "componentkb_validation_quality_score",
        "Quality score of validated fragments.",
        buckets=(0, 25, 50, 65, 80, 90, 100),
    )
    failures = Counter(
        "componentkb_operation_failures_total",
        "Operations that returned a failure envelope, by error code.",
        ["code"],
    )

    @classmethod
    def observe_search(cls, duration_seconds: float, candidate_count: int, result_count: int) -> None:
        cls.search_latency.observe(duration_seconds)
        cls.candidate_count.observe(candidate_count)
        cls.result_count.observe(result_count)

    @classmethod
    def observe_lookup(cls, kind: str, duration_seconds: float, result_count: int) -> None:
        cls.lookup_latency.labels(kind=kind).observe(duration_seconds)
        cls.lookup_results.labels(kind=kind).observe(result_count)

    @classmethod
    def observe_validation(
        cls,
        duration_seconds: float,
        severities: Iterable[str],
        score: int,
    ) -> None:
        cls.validation_latency.observe(duration_seconds)
        for severity in severities:
            cls.validation_issues.labels(severity=severity).inc()
        cls.quality_score.observe(score)

    @classmethod
    def observe_failure(cls, code: str) -> None:
        cls.failures.labels(code=code).inc()


class TimedSection:
    """Context manager capturing elapsed time for metrics."""

    def __init__(self, callback: Callable[[float], None] | None = None) -> None:
        self._callback = callback
        self._start = 0.0
        self.elapsed = 0.0

    def __enter__(self) -> "TimedSection":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: D401
        self.elapsed = time.perf_counter() - self._start
        if self._callback is not None:
            self._callback(self.elapsed)

    @property
    def elapsed_ms(self) -> float:
        if self.elapsed:
            return self.elapsed * 1000
        return (time.perf_counter() - self._start) * 1000


__all__ = [
    "PipelineMetrics",
    "TimedSection",
    "bind_correlation_id",
    "clear_correlation_id",
    "configure_logging",
    "get_correlation_id",
    "get_logger",
]
