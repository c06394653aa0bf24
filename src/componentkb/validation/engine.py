"""Validation pass over one markup fragment."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from componentkb.models import ValidationIssue
from componentkb.validation.accessibility import check_accessibility
from componentkb.validation.diagnostics import run_pattern_checks
from componentkb.validation.forms import check_form_structure
from componentkb.validation.issues import IssueCollector
from componentkb.validation.rules import FORM_COMPONENTS, has_rules, resolve_rule_key
from componentkb.validation.structure import (
    DEFAULT_MAX_DEPTH,
    check_attributes,
    check_hierarchy,
    check_nesting_depth,
    check_parent_child_pairs,
)
from componentkb.validation.tree import Fragment, parse_fragment

LOGGER = logging.getLogger(__name__)

Check = Callable[[Fragment, IssueCollector], None]


@dataclass(frozen=True)
class CheckFailure:
    check: str
    error: str


@dataclass(frozen=True)
class ValidationOutcome:
    errors: tuple[ValidationIssue, ...]
    warnings: tuple[ValidationIssue, ...]
    rule_key: str
    rules_found: bool
    checks_performed: tuple[str, ...] = ()
    check_failures: tuple[CheckFailure, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _structural_checks(rule_key: str, max_depth: int) -> list[tuple[str, Check]]:
    checks: list[tuple[str, Check]] = [
        ("hierarchy", lambda f, c: check_hierarchy(f, rule_key, c)),
        ("attributes", lambda f, c: check_attributes(f, rule_key, c)),
        ("parent_child", check_parent_child_pairs),
        ("nesting_depth", lambda f, c: check_nesting_depth(f, rule_key, c, max_depth=max_depth)),
    ]
    if rule_key in FORM_COMPONENTS:
        checks.append(("form_structure", lambda f, c: check_form_structure(f, rule_key, c)))
    return checks


def _run(name: str, check: Check, fragment: Fragment, issues: IssueCollector, failures: list[CheckFailure]) -> bool:
    # A failing check must not hide the results of the others
    try:
        check(fragment, issues)
    except Exception as exc:  # noqa: BLE001
        LOGGER.warning("Validation check %s failed", name, exc_info=True)
        failures.append(CheckFailure(check=name, error=f"{type(exc).__name__}: {exc}"))
        return False
    return True


def validate(
    component_name: str,
    html: str,
    *,
    max_nesting_depth: int = DEFAULT_MAX_DEPTH,
) -> ValidationOutcome:
    """Run every check against ``html`` for the named component.

    Raises ``FragmentParseError`` when the fragment cannot be parsed; any other
    check failure is recorded in ``check_failures`` while the remaining checks
    still run.
    """

    fragment = parse_fragment(html)
    rule_key = resolve_rule_key(component_name)
    rules_found = has_rules(rule_key)

    structural = IssueCollector()
    patterns = IssueCollector()
    direct = IssueCollector()
    failures: list[CheckFailure] = []
    performed: list[str] = []

    for name, check in _structural_checks(rule_key, max_nesting_depth):
        if _run(name, check, fragment, structural, failures):
            performed.append(name)
    if _run("patterns", lambda f, c: run_pattern_checks(f, rule_key, c), fragment, patterns, failures):
        performed.append("patterns")
    if _run("accessibility", check_accessibility, fragment, direct, failures):
        performed.append("accessibility")

    # Line-specific direct findings replace the fragment-level pattern finding
    covered = {issue.rule_id for issue in direct.issues if issue.rule_id}
    errors = [*structural.errors, *(i for i in patterns.errors if i.rule_id not in covered), *direct.errors]
    warnings = [*structural.warnings, *(i for i in patterns.warnings if i.rule_id not in covered), *direct.warnings]

    return ValidationOutcome(
        errors=tuple(errors),
        warnings=tuple(warnings),
        rule_key=rule_key,
        rules_found=rules_found,
        checks_performed=tuple(performed),
        check_failures=tuple(failures),
    )
