"""Accessibility checks run as explicit tree queries over the fragment."""

from __future__ import annotations

from typing import Iterator

from bs4 import Tag

from componentkb.validation.issues import IssueCollector
from componentkb.validation.tree import Fragment, attr, closest, describe

# Input types that never need a visible or programmatic label
LABEL_EXEMPT_INPUT_TYPES = frozenset({"hidden", "submit", "button", "reset", "image"})


def _has_accessible_name(tag: Tag) -> bool:
    return bool((attr(tag, "aria-label") or "").strip() or (attr(tag, "aria-labelledby") or "").strip())


def form_controls(fragment: Fragment) -> Iterator[Tag]:
    for tag in fragment.select("input, select, textarea"):
        if tag.name == "input" and (attr(tag, "type") or "text").lower() in LABEL_EXEMPT_INPUT_TYPES:
            continue
        yield tag


def is_labelled(fragment: Fragment, control: Tag) -> bool:
    """True when ``control`` has an accessible name or an associated label."""

    if _has_accessible_name(control):
        return True
    control_id = attr(control, "id")
    if control_id and any(attr(label, "for") == control_id for label in fragment.select("label[for]")):
        return True
    return closest(control, "label") is not None


def has_button_text(button: Tag) -> bool:
    return bool(button.get_text(strip=True)) or _has_accessible_name(button)


def check_images(fragment: Fragment, issues: IssueCollector) -> None:
    for image in fragment.select("img"):
        # alt="" marks a decorative image
        if image.get("alt") is None:
            issues.error(
                "Image missing alt attribute",
                "accessibility",
                fix='Add alt="description" or alt="" for decorative images',
                line=image.sourceline,
                selector=describe(image),
                wcag="1.1.1",
                rule_id="missing-alt-text",
            )


def check_heading_order(fragment: Fragment, issues: IssueCollector) -> None:
    headings = fragment.select("h1, h2, h3, h4, h5, h6")
    for previous, current in zip(headings, headings[1:]):
        before, after = int(previous.name[1]), int(current.name[1])
        if after - before > 1:
            issues.warning(
                f"Heading hierarchy skips from h{before} to h{after}",
                "accessibility",
                fix="Maintain sequential heading levels for screen readers",
                line=current.sourceline,
                selector=describe(current),
                wcag="2.4.6",
                rule_id="heading-order",
            )


def check_form_labels(fragment: Fragment, issues: IssueCollector) -> None:
    for control in form_controls(fragment):
        if not is_labelled(fragment, control):
            issues.error(
                "Form input missing label",
                "accessibility",
                fix="Add a <label> element with a matching for attribute or an aria-label attribute",
                line=control.sourceline,
                selector=describe(control),
                wcag="3.3.2",
                rule_id="input-without-label",
            )


def check_buttons(fragment: Fragment, issues: IssueCollector) -> None:
    for button in fragment.select("button"):
        if not has_button_text(button):
            issues.error(
                "Button has no accessible text",
                "accessibility",
                fix="Add visible text or aria-label attribute",
                line=button.sourceline,
                selector=describe(button),
                wcag="4.1.2",
                rule_id="missing-aria-label-button",
            )


def check_accessibility(fragment: Fragment, issues: IssueCollector) -> None:
    check_images(fragment, issues)
    check_heading_order(fragment, issues)
    check_form_labels(fragment, issues)
    check_buttons(fragment, issues)
