"""Hierarchy, attribute, pairing and nesting checks driven by the rule tables."""

from __future__ import annotations

from componentkb.validation.issues import IssueCollector
from componentkb.validation.rules import ATTRIBUTE_RULES, HIERARCHY_RULES, PARENT_CHILD_RULES
from componentkb.validation.tree import Fragment, attr, depth, describe, has_ancestor, matches, parent_element

DEFAULT_MAX_DEPTH = 10


def _inside(tag, parent_selector: str) -> bool:
    return matches(parent_element(tag), parent_selector) or has_ancestor(tag, parent_selector)


def check_hierarchy(fragment: Fragment, rule_key: str, issues: IssueCollector) -> None:
    hierarchy = HIERARCHY_RULES.get(rule_key)
    if hierarchy is None:
        return

    for rule in hierarchy.required:
        elements = fragment.select(rule.selector)
        if not elements:
            issues.error(
                f"Missing required element: {rule.name} ({rule.selector})",
                "structure",
                fix=f"Add the required {rule.selector} element to the component structure",
                selector=rule.selector,
            )
            continue
        if not rule.parent:
            continue
        for element in elements:
            if not _inside(element, rule.parent):
                issues.error(
                    f"{rule.name} ({rule.selector}) must be inside {rule.parent}",
                    "structure",
                    fix=f"Ensure {rule.selector} is properly nested within {rule.parent}",
                    line=element.sourceline,
                    selector=rule.selector,
                )

    for rule in hierarchy.optional:
        if not rule.parent:
            continue
        for element in fragment.select(rule.selector):
            if not _inside(element, rule.parent):
                issues.warning(
                    f"{rule.name} ({rule.selector}) should be inside {rule.parent}",
                    "structure",
                    fix=f"For best practices, nest {rule.selector} within {rule.parent}",
                    line=element.sourceline,
                    selector=rule.selector,
                )


def check_attributes(fragment: Fragment, rule_key: str, issues: IssueCollector) -> None:
    for rule in ATTRIBUTE_RULES.get(rule_key, ()):
        # Missing elements are reported by the hierarchy check
        for element in fragment.select(rule.selector):
            value = attr(element, rule.attribute)
            if rule.required and not value:
                issues.error(
                    f"Missing required attribute: {rule.attribute} on {rule.selector}",
                    "attributes",
                    fix=f"Add {rule.attribute} attribute to {rule.selector}",
                    line=element.sourceline,
                    selector=rule.selector,
                )
            elif rule.allowed and value is not None and value not in rule.allowed:
                issues.warning(
                    f'Unexpected value "{value}" for {rule.attribute} on {rule.selector}',
                    "attributes",
                    fix=f"Expected one of: {', '.join(rule.allowed)}",
                    line=element.sourceline,
                    selector=rule.selector,
                )


def check_parent_child_pairs(fragment: Fragment, issues: IssueCollector) -> None:
    for rule in PARENT_CHILD_RULES:
        for element in fragment.select(rule.child):
            if not matches(parent_element(element), rule.parent):
                issues.error(
                    rule.message,
                    "structure",
                    fix=f"Ensure {rule.child} is a direct child of {rule.parent}",
                    line=element.sourceline,
                    selector=describe(element),
                )


def check_nesting_depth(
    fragment: Fragment,
    rule_key: str,
    issues: IssueCollector,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> None:
    hierarchy = HIERARCHY_RULES.get(rule_key)
    if hierarchy is None:
        return
    for rule in hierarchy.required:
        for element in fragment.select(rule.selector):
            levels = depth(element)
            if levels > max_depth:
                issues.warning(
                    f"Deep nesting detected in {rule.selector} ({levels} levels)",
                    "performance",
                    fix="Consider simplifying the DOM structure for better performance",
                    line=element.sourceline,
                    selector=rule.selector,
                )
