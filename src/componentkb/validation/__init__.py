"""Structural and accessibility validation of component markup."""

from .diagnostics import DIAGNOSTIC_PATTERNS, WCAG_CRITERIA, DiagnosticPattern, TextPattern, TreeQuery
from .engine import CheckFailure, ValidationOutcome, validate
from .quality import Priority, TroubleshootingEntry, TroubleshootingReport, quality_score, troubleshoot
from .rules import COMPONENT_ALIASES, FORM_COMPONENTS, has_rules, resolve_rule_key
from .tree import Fragment, FragmentParseError, parse_fragment

__all__ = [
    "COMPONENT_ALIASES",
    "DIAGNOSTIC_PATTERNS",
    "FORM_COMPONENTS",
    "WCAG_CRITERIA",
    "CheckFailure",
    "DiagnosticPattern",
    "Fragment",
    "FragmentParseError",
    "Priority",
    "TextPattern",
    "TreeQuery",
    "TroubleshootingEntry",
    "TroubleshootingReport",
    "ValidationOutcome",
    "has_rules",
    "parse_fragment",
    "quality_score",
    "resolve_rule_key",
    "troubleshoot",
    "validate",
]
