"""Collecting validation issues into error and warning lists."""

from __future__ import annotations

from dataclasses import dataclass, field

from componentkb.models import Severity, ValidationIssue


@dataclass
class IssueCollector:
    """Append-only sink shared by every check of one validation pass."""

    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    def add(self, issue: ValidationIssue) -> None:
        if issue.severity is Severity.ERROR:
            self.errors.append(issue)
        else:
            self.warnings.append(issue)

    def error(self, message: str, category: str, **kwargs) -> None:
        self.add(ValidationIssue(severity=Severity.ERROR, message=message, category=category, **kwargs))

    def warning(self, message: str, category: str, **kwargs) -> None:
        self.add(ValidationIssue(severity=Severity.WARNING, message=message, category=category, **kwargs))

    def info(self, message: str, category: str, **kwargs) -> None:
        self.add(ValidationIssue(severity=Severity.INFO, message=message, category=category, **kwargs))

    @property
    def issues(self) -> list[ValidationIssue]:
        return [*self.errors, *self.warnings]
