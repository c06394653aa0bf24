from __future__ import annotations

from componentkb.models import Severity
from componentkb.validation.issues import IssueCollector
from componentkb.validation.structure import (
    check_attributes,
    check_hierarchy,
    check_nesting_depth,
    check_parent_child_pairs,
)
from componentkb.validation.tree import parse_fragment

ACCORDION = (
    '<div class="ecl-accordion" data-ecl-auto-init="Accordion">'
    '<div class="ecl-accordion__item">'
    '<h3 class="ecl-accordion__header">'
    '<button class="ecl-accordion__toggle" aria-expanded="yes">Toggle</button>'
    "</h3>"
    '<div class="ecl-accordion__content" id="c1">Body</div>'
    "</div></div>"
)


def _run(check, html: str, *args, **kwargs) -> IssueCollector:
    issues = IssueCollector()
    check(parse_fragment(html), *args, issues, **kwargs)
    return issues


def test_missing_required_element_is_error():
    issues = _run(check_hierarchy, '<div class="ecl-card"><div class="ecl-card__header">H</div></div>', "card")
    assert [e.message for e in issues.errors] == ["Missing required element: Card Body (.ecl-card__body)"]
    assert issues.errors[0].category == "structure"
    assert issues.warnings == []


def test_required_element_outside_parent_is_error():
    issues = _run(check_hierarchy, '<div class="ecl-card"></div>\n<div class="ecl-card__body">x</div>', "card")
    assert len(issues.errors) == 1
    assert "must be inside .ecl-card" in issues.errors[0].message
    assert issues.errors[0].line == 2


def test_optional_element_outside_parent_is_warning():
    html = '<div class="ecl-card"><div class="ecl-card__body"></div></div><div class="ecl-card__footer"></div>'
    issues = _run(check_hierarchy, html, "card")
    assert issues.errors == []
    assert [w.severity for w in issues.warnings] == [Severity.WARNING]


def test_unknown_component_has_no_structural_issues():
    issues = _run(check_hierarchy, "<div><p>Hello</p></div>", "nothing")
    assert issues.issues == []


def test_attribute_rules():
    issues = _run(check_attributes, ACCORDION, "accordion")
    assert [e.message for e in issues.errors] == [
        "Missing required attribute: aria-controls on .ecl-accordion__toggle"
    ]
    assert len(issues.warnings) == 1
    assert '"yes"' in issues.warnings[0].message


def test_parent_child_pairs_require_direct_parent():
    nested = _run(check_parent_child_pairs, '<div class="ecl-card"><div><div class="ecl-card__body">x</div></div></div>')
    assert [e.message for e in nested.errors] == ["Card body must be direct child of ecl-card"]
    direct = _run(check_parent_child_pairs, '<div class="ecl-card"><div class="ecl-card__body">x</div></div>')
    assert direct.errors == []


def test_nesting_depth_warning_is_configurable():
    html = "<div>" * 12 + '<div class="ecl-card"><div class="ecl-card__body">x</div></div>' + "</div>" * 12
    deep = _run(check_nesting_depth, html, "card", max_depth=10)
    assert len(deep.warnings) == 2
    assert {w.category for w in deep.warnings} == {"performance"}
    relaxed = _run(check_nesting_depth, html, "card", max_depth=20)
    assert relaxed.warnings == []
