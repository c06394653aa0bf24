"""Generic anti-pattern and accessibility diagnostics.

Each entry of ``DIAGNOSTIC_PATTERNS`` carries the same data whatever its
matching primitive is: a ``TextPattern`` scans the raw fragment text, a
``TreeQuery`` selects offending elements from the parsed tree. A pattern
contributes at most one issue per fragment, located at its first hit.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, NamedTuple, Union

from bs4 import Tag

from componentkb.models import Severity, ValidationIssue
from componentkb.validation.accessibility import form_controls, has_button_text, is_labelled
from componentkb.validation.issues import IssueCollector
from componentkb.validation.tree import Fragment, attr, class_tokens, describe, has_ancestor


class PatternHit(NamedTuple):
    line: int | None
    selector: str | None


@dataclass(frozen=True)
class TextPattern:
    """Regular expression tested against the raw fragment text."""

    regex: re.Pattern[str]

    @classmethod
    def compile(cls, expression: str, flags: int = re.IGNORECASE) -> "TextPattern":
        return cls(re.compile(expression, flags))

    def first_hit(self, fragment: Fragment) -> PatternHit | None:
        match = self.regex.search(fragment.source)
        if match is None:
            return None
        return PatternHit(fragment.source.count("\n", 0, match.start()) + 1, None)


@dataclass(frozen=True)
class TreeQuery:
    """Callable returning the offending elements of a parsed fragment."""

    select: Callable[[Fragment], Iterable[Tag]]

    def first_hit(self, fragment: Fragment) -> PatternHit | None:
        for tag in self.select(fragment):
            return PatternHit(tag.sourceline, describe(tag))
        return None


Matcher = Union[TextPattern, TreeQuery]


@dataclass(frozen=True)
class DiagnosticPattern:
    id: str
    matcher: Matcher
    severity: Severity
    # None applies the pattern to every component
    components: frozenset[str] | None
    message: str
    fix: str
    category: str
    wcag: str | None = None
    example: str | None = None

    def applies_to(self, rule_key: str) -> bool:
        return self.components is None or rule_key in self.components


@dataclass(frozen=True)
class WcagCriterion:
    name: str
    level: str
    description: str


WCAG_CRITERIA: Mapping[str, WcagCriterion] = MappingProxyType(
    {
        "1.1.1": WcagCriterion("Non-text Content", "A", "All non-text content has a text alternative"),
        "1.3.1": WcagCriterion(
            "Info and Relationships",
            "A",
            "Information, structure, and relationships can be programmatically determined",
        ),
        "1.4.3": WcagCriterion(
            "Contrast (Minimum)",
            "AA",
            "Text has a contrast ratio of at least 4.5:1 against its background",
        ),
        "2.4.3": WcagCriterion(
            "Focus Order",
            "A",
            "Focusable components receive focus in an order that preserves meaning",
        ),
        "2.4.6": WcagCriterion("Headings and Labels", "AA", "Headings and labels describe topic or purpose"),
        "3.3.2": WcagCriterion(
            "Labels or Instructions",
            "A",
            "Labels or instructions are provided when content requires user input",
        ),
        "4.1.1": WcagCriterion(
            "Parsing",
            "A",
            "Elements have complete start and end tags, are nested correctly",
        ),
        "4.1.2": WcagCriterion("Name, Role, Value", "A", "UI components have accessible name and role"),
    }
)


_SINGLE_UNDERSCORE = re.compile(r"(?<!_)_(?!_)")
_BEM_MODIFIER_WITH_SINGLE_DASH = re.compile(
    r"^ecl-(?!u-)[a-z]+(?:__[a-z]+)?-(?:primary|secondary|tertiary|ghost|cta|inverted|dark|light|outline)$"
)
_UNPREFIXED_COMPONENT = re.compile(
    r"^(?!ecl-)(?:[a-z]+-button$"
    r"|(?:button|card|accordion|modal|checkbox|radio|select|text-input|form-label|help-block"
    r"|site-header|page-header|footer|link)(?:__|--))"
)
_AUTO_INIT_ROOTS = (
    "ecl-modal",
    "ecl-carousel",
    "ecl-accordion",
    "ecl-expandable",
    "ecl-dropdown",
    "ecl-datepicker",
    "ecl-file-upload",
)
_FOOTER_SCOPES = "footer, .ecl-footer, .ecl-site-footer"
_DARK_SCOPES = ".ecl-page-header--dark, .ecl-banner"
_INTERACTIVE = "a, button, input, select, textarea"


def _tokens_matching(pattern: re.Pattern[str]) -> Callable[[Fragment], Iterable[Tag]]:
    def select(fragment: Fragment) -> Iterable[Tag]:
        return (tag for tag in fragment.elements() if any(pattern.search(t) for t in class_tokens(tag)))

    return select


def _single_underscore_elements(fragment: Fragment) -> Iterable[Tag]:
    for tag in fragment.elements():
        if any(t.startswith("ecl-") and _SINGLE_UNDERSCORE.search(t) for t in class_tokens(tag)):
            yield tag


def _empty_buttons(fragment: Fragment) -> Iterable[Tag]:
    return (b for b in fragment.select("button") if not has_button_text(b))


def _unlabelled_controls(fragment: Fragment) -> Iterable[Tag]:
    return (c for c in form_controls(fragment) if not is_labelled(fragment, c))


def _placeholder_only(fragment: Fragment) -> Iterable[Tag]:
    for control in fragment.select("input[placeholder], textarea[placeholder]"):
        if not is_labelled(fragment, control):
            yield control


def _role_button_imitations(fragment: Fragment) -> Iterable[Tag]:
    return (t for t in fragment.select('[role="button"]') if t.name != "button")


def _missing_auto_init(fragment: Fragment) -> Iterable[Tag]:
    for tag in fragment.elements():
        if tag.get("data-ecl-auto-init") is None and any(t in _AUTO_INIT_ROOTS for t in class_tokens(tag)):
            yield tag


def _manual_init_without_id(fragment: Fragment) -> Iterable[Tag]:
    for tag in fragment.select(".ecl-modal, .ecl-carousel"):
        if tag.get("data-ecl-auto-init") is None and not attr(tag, "id"):
            yield tag


def _icons_without_size(fragment: Fragment) -> Iterable[Tag]:
    for icon in fragment.select("svg.ecl-icon"):
        if not any(t.startswith("ecl-icon--") for t in class_tokens(icon)):
            yield icon


def _icon_buttons_without_label(fragment: Fragment) -> Iterable[Tag]:
    for button in fragment.select("button.ecl-button"):
        if button.select_one(".ecl-icon") is not None and button.select_one(".ecl-button__label") is None:
            yield button


def _links_not_inverted(scopes: str, excluded: str | None = None) -> Callable[[Fragment], Iterable[Tag]]:
    def select(fragment: Fragment) -> Iterable[Tag]:
        for link in fragment.select("a.ecl-link"):
            if "ecl-link--inverted" in class_tokens(link):
                continue
            if excluded and has_ancestor(link, excluded):
                continue
            if has_ancestor(link, scopes):
                yield link

    return select


def _links_without_inverted(fragment: Fragment) -> Iterable[Tag]:
    return (a for a in fragment.select("a.ecl-link") if "ecl-link--inverted" not in class_tokens(a))


def _rows_outside_container(fragment: Fragment) -> Iterable[Tag]:
    return (row for row in fragment.select(".ecl-row") if not has_ancestor(row, ".ecl-container"))


def _columns_outside_row(fragment: Fragment) -> Iterable[Tag]:
    for tag in fragment.elements():
        if any(t.startswith("ecl-col-") for t in class_tokens(tag)) and not has_ancestor(tag, ".ecl-row"):
            yield tag


def _styled_heading_boxes(fragment: Fragment) -> Iterable[Tag]:
    for tag in fragment.select("div[class], span[class]"):
        if any("heading" in t for t in class_tokens(tag)):
            yield tag


def _extra_h1(fragment: Fragment) -> Iterable[Tag]:
    return fragment.select("h1")[1:]


def _title_only_names(fragment: Fragment) -> Iterable[Tag]:
    for tag in fragment.select(_INTERACTIVE):
        if tag.get("title") is None:
            continue
        if attr(tag, "aria-label") or attr(tag, "aria-labelledby") or tag.get_text(strip=True):
            continue
        if tag.name in ("input", "select", "textarea") and is_labelled(fragment, tag):
            continue
        yield tag


def _duplicate_ids(fragment: Fragment) -> Iterable[Tag]:
    tagged = [tag for tag in fragment.elements() if attr(tag, "id")]
    counts = Counter(attr(tag, "id") for tag in tagged)
    return (tag for tag in tagged if counts[attr(tag, "id")] > 1)


def _nested_links(fragment: Fragment) -> Iterable[Tag]:
    return (a for a in fragment.select("a") if has_ancestor(a, "a"))


def _pattern(
    id: str,
    matcher: Matcher,
    severity: Severity,
    components: Iterable[str] | None,
    message: str,
    fix: str,
    category: str,
    wcag: str | None = None,
    example: str | None = None,
) -> tuple[str, DiagnosticPattern]:
    scope = frozenset(components) if components is not None else None
    return id, DiagnosticPattern(id, matcher, severity, scope, message, fix, category, wcag, example)


DIAGNOSTIC_PATTERNS: Mapping[str, DiagnosticPattern] = MappingProxyType(
    dict(
        [
            # Accessibility
            _pattern(
                "missing-aria-label-button",
                TreeQuery(_empty_buttons),
                Severity.ERROR,
                {"button"},
                "Interactive buttons without visible text must have aria-label",
                'Add aria-label="descriptive text" attribute to the button',
                "accessibility",
                "4.1.2",
                '<button class="ecl-button" aria-label="Close dialog">...</button>',
            ),
            _pattern(
                "missing-alt-text",
                TextPattern.compile(r"<img\b(?![^>]*\balt\s*=)[^>]*>"),
                Severity.ERROR,
                None,
                "Images must have alt attribute for accessibility",
                'Add alt="description" or alt="" for decorative images',
                "accessibility",
                "1.1.1",
                '<img src="..." alt="European Commission logo" />',
            ),
            _pattern(
                "empty-heading",
                TextPattern.compile(r"<h([1-6])\b[^>]*>\s*</h\1\s*>"),
                Severity.ERROR,
                None,
                "Heading elements must contain text content",
                "Add descriptive text inside the heading element",
                "accessibility",
                "2.4.6",
                '<h2 class="ecl-u-type-heading-2">Section Title</h2>',
            ),
            _pattern(
                "incorrect-role",
                TreeQuery(_role_button_imitations),
                Severity.WARNING,
                {"button", "link"},
                'Use native <button> element instead of role="button"',
                "Replace with <button> element for better accessibility",
                "accessibility",
                "4.1.2",
                '<button class="ecl-button">Click me</button>',
            ),
            _pattern(
                "input-without-label",
                TreeQuery(_unlabelled_controls),
                Severity.ERROR,
                {"textfield", "textarea", "select", "completeforms"},
                "Input fields must be associated with a label",
                "Add <label> with for attribute or use aria-label",
                "accessibility",
                "3.3.2",
                '<label for="name">Name:</label><input id="name" type="text" />',
            ),
            _pattern(
                "placeholder-as-label",
                TreeQuery(_placeholder_only),
                Severity.ERROR,
                None,
                "Placeholder is not a substitute for label",
                "Add proper <label> element in addition to placeholder",
                "accessibility",
                "3.3.2",
                '<label for="email">Email:</label><input id="email" type="email" placeholder="you@example.com" />',
            ),
            _pattern(
                "title-as-label",
                TreeQuery(_title_only_names),
                Severity.WARNING,
                None,
                "Title attribute is not accessible, use aria-label instead",
                "Use aria-label for screen readers, title for tooltip only",
                "accessibility",
                "4.1.2",
                '<button aria-label="Close" title="Close dialog">X</button>',
            ),
            _pattern(
                "nested-links",
                TreeQuery(_nested_links),
                Severity.ERROR,
                None,
                "Links cannot be nested inside other links",
                "Restructure HTML to avoid nested links",
                "accessibility",
                "4.1.1",
                "Use separate links or buttons for complex interactions",
            ),
            _pattern(
                "div-as-button",
                TextPattern.compile(r"<(?:div|span)\b[^>]*\bonclick\s*="),
                Severity.ERROR,
                None,
                "Use <button> element for clickable elements, not div/span",
                "Replace with <button> element",
                "accessibility",
                "4.1.2",
                '<button class="ecl-button" type="button">Click</button>',
            ),
            _pattern(
                "tabindex-greater-than-zero",
                TextPattern.compile(r"\btabindex\s*=\s*[\"']?\s*[1-9]"),
                Severity.ERROR,
                None,
                "Avoid positive tabindex values, use 0 or -1",
                'Use tabindex="0" for focusable or tabindex="-1" for non-tabbable',
                "accessibility",
                "2.4.3",
                'tabindex="0" (adds to tab order) or tabindex="-1" (programmatic focus only)',
            ),
            _pattern(
                "duplicate-id",
                TreeQuery(_duplicate_ids),
                Severity.ERROR,
                None,
                "ID attributes must be unique within the page",
                "Ensure each ID is used only once",
                "accessibility",
                "4.1.1",
                'Use unique IDs: id="modal-1", id="modal-2"',
            ),
            _pattern(
                "multiple-h1",
                TreeQuery(_extra_h1),
                Severity.WARNING,
                None,
                "Page should typically have only one <h1> element",
                "Use <h2>-<h6> for subsequent headings",
                "semantics",
                "2.4.6",
                "One <h1> per page, then <h2>, <h3>, etc.",
            ),
            _pattern(
                "non-semantic-heading",
                TreeQuery(_styled_heading_boxes),
                Severity.WARNING,
                None,
                "Use semantic heading tags (<h1>-<h6>) instead of styled divs",
                "Replace with proper heading element",
                "semantics",
                "1.3.1",
                '<h2 class="ecl-u-type-heading-2">Heading</h2>',
            ),
            # Class naming conventions
            _pattern(
                "incorrect-bem-element",
                TreeQuery(_single_underscore_elements),
                Severity.WARNING,
                None,
                "ECL uses double underscore (__) for BEM elements, not single",
                "Change single underscore to double: ecl-component__element",
                "naming",
                example='class="ecl-button__icon" (not ecl-button_icon)',
            ),
            _pattern(
                "incorrect-bem-modifier",
                TreeQuery(_tokens_matching(_BEM_MODIFIER_WITH_SINGLE_DASH)),
                Severity.WARNING,
                None,
                "ECL uses double dash (--) for BEM modifiers",
                "Use double dash for modifiers: ecl-component--modifier",
                "naming",
                example='class="ecl-button--primary" (not ecl-button-primary)',
            ),
            _pattern(
                "missing-ecl-prefix",
                TreeQuery(_tokens_matching(_UNPREFIXED_COMPONENT)),
                Severity.ERROR,
                None,
                'ECL components must use "ecl-" prefix',
                'Add "ecl-" prefix to component classes',
                "naming",
                example='class="ecl-button" (not "button")',
            ),
            _pattern(
                "empty-class-attribute",
                TextPattern.compile(r"\bclass\s*=\s*\"\s*\""),
                Severity.WARNING,
                None,
                "Remove empty class attributes",
                'Delete class="" or add appropriate classes',
                "naming",
                example='Remove unnecessary class="" attributes',
            ),
            # Required attributes
            _pattern(
                "button-without-type",
                TreeQuery(lambda fragment: fragment.select("button:not([type])")),
                Severity.WARNING,
                {"button"},
                "Button should have explicit type attribute",
                'Add type="button", type="submit", or type="reset"',
                "attributes",
                example='<button type="button" class="ecl-button">Click</button>',
            ),
            _pattern(
                "button-without-label",
                TreeQuery(_icon_buttons_without_label),
                Severity.WARNING,
                {"button"},
                "Icon-only buttons should have ecl-button__label for screen readers",
                "Add <span class=\"ecl-button__label\" data-ecl-label>Text</span>",
                "attributes",
                example='<button class="ecl-button"><span class="ecl-button__label">Close</span>'
                '<svg class="ecl-icon">...</svg></button>',
            ),
            _pattern(
                "link-without-href",
                TreeQuery(lambda fragment: fragment.select("a.ecl-link:not([href])")),
                Severity.ERROR,
                {"link"},
                "Links must have href attribute",
                "Add href attribute or use <button> if not a navigation element",
                "attributes",
                example='<a href="/page" class="ecl-link">Link text</a>',
            ),
            _pattern(
                "form-without-method",
                TreeQuery(lambda fragment: fragment.select("form:not([method])")),
                Severity.WARNING,
                {"completeforms"},
                "Forms should have explicit method attribute",
                'Add method="get" or method="post"',
                "attributes",
                example='<form method="post" action="/submit">...</form>',
            ),
            _pattern(
                "icon-without-size",
                TreeQuery(_icons_without_size),
                Severity.WARNING,
                {"icon"},
                "ECL icons should include size modifier class",
                "Add size class like ecl-icon--s, ecl-icon--m, etc.",
                "attributes",
                example='<svg class="ecl-icon ecl-icon--m">...</svg>',
            ),
            # JavaScript initialization
            _pattern(
                "missing-data-ecl-auto-init",
                TreeQuery(_missing_auto_init),
                Severity.ERROR,
                {"modal", "carousel", "accordion", "expandable", "datepicker", "fileupload"},
                "Interactive ECL components require data-ecl-auto-init attribute",
                'Add data-ecl-auto-init="ComponentName" attribute',
                "initialization",
                example='<div class="ecl-modal" data-ecl-auto-init="Modal">...</div>',
            ),
            _pattern(
                "manual-init-without-id",
                TreeQuery(_manual_init_without_id),
                Severity.WARNING,
                {"modal", "carousel", "accordion"},
                "Manually initialized components should have unique ID",
                "Add id attribute for JavaScript initialization",
                "initialization",
                example='<div id="myModal" class="ecl-modal">...</div>',
            ),
            # Typography
            _pattern(
                "hardcoded-fonts",
                TextPattern.compile(r"font-family:\s*[\"']?(?:times|georgia|verdana|courier|helvetica|tahoma)"),
                Severity.ERROR,
                None,
                "Non-ECL fonts detected. ECL uses Arial as primary typeface",
                "Replace with Arial or use ECL typography utility classes",
                "typography",
                example='style="font-family: arial, sans-serif" or class="ecl-u-type-paragraph"',
            ),
            _pattern(
                "hardcoded-heading-style",
                TextPattern.compile(r"<h[1-6]\b[^>]*\bstyle\s*=\s*\"[^\"]*font-size"),
                Severity.WARNING,
                None,
                "Avoid inline styles on headings, use ECL typography utilities",
                "Use classes like ecl-u-type-heading-1, ecl-u-type-heading-2, etc.",
                "typography",
                example='<h2 class="ecl-u-type-heading-2">Heading</h2>',
            ),
            # Contrast
            _pattern(
                "footer-link-without-inverted",
                TreeQuery(_links_not_inverted(_FOOTER_SCOPES)),
                Severity.ERROR,
                None,
                "Footer links missing ecl-link--inverted class cause blue-on-blue contrast failure",
                "Add ecl-link--inverted class to all links in footer",
                "contrast",
                "1.4.3",
                '<footer><a href="#" class="ecl-link ecl-link--inverted">Link</a></footer>',
            ),
            _pattern(
                "link-in-dark-component-without-inverted",
                TreeQuery(_links_not_inverted(_DARK_SCOPES, excluded=_FOOTER_SCOPES)),
                Severity.ERROR,
                None,
                "Links on dark backgrounds must use ecl-link--inverted for proper contrast",
                "Add ecl-link--inverted class",
                "contrast",
                "1.4.3",
                '<a href="#" class="ecl-link ecl-link--inverted">Link on dark background</a>',
            ),
            _pattern(
                "standalone-link-without-inverted-on-dark",
                TreeQuery(_links_without_inverted),
                Severity.INFO,
                {"link"},
                "Verify link contrast: ecl-link default is blue (#3860ed) for light backgrounds",
                "If link is on dark background, add ecl-link--inverted class",
                "contrast",
                "1.4.3",
                'Light BG: <a class="ecl-link">Link</a> | Dark BG: <a class="ecl-link ecl-link--inverted">Link</a>',
            ),
            # Layout
            _pattern(
                "grid-without-container",
                TreeQuery(_rows_outside_container),
                Severity.WARNING,
                {"grid"},
                "Grid rows should be inside ecl-container",
                'Wrap rows in <div class="ecl-container">',
                "layout",
                example='<div class="ecl-container"><div class="ecl-row">...</div></div>',
            ),
            _pattern(
                "col-without-row",
                TreeQuery(_columns_outside_row),
                Severity.ERROR,
                {"grid"},
                "Grid columns must be inside ecl-row",
                'Wrap columns in <div class="ecl-row">',
                "layout",
                example='<div class="ecl-row"><div class="ecl-col-12">...</div></div>',
            ),
            # Inline styling
            _pattern(
                "inline-style-color",
                TextPattern.compile(r"style\s*=\s*\"[^\"]*color:\s*#[0-9a-f]{3,6}"),
                Severity.WARNING,
                None,
                "Avoid hardcoded colors, use ECL design tokens",
                "Use CSS variables like var(--ecl-color-primary)",
                "best_practice",
                example="Use ECL color utility classes or CSS variables",
            ),
            _pattern(
                "inline-style-spacing",
                TextPattern.compile(r"style\s*=\s*\"[^\"]*(?:margin|padding)(?:-[a-z]+)?:\s*\d+px"),
                Severity.WARNING,
                None,
                "Avoid hardcoded spacing, use ECL spacing utilities",
                "Use classes like ecl-u-mt-m, ecl-u-mb-l, etc.",
                "best_practice",
                example='<div class="ecl-u-mt-m ecl-u-mb-l">...</div>',
            ),
        ]
    )
)


def applicable_patterns(rule_key: str) -> list[DiagnosticPattern]:
    return [p for p in DIAGNOSTIC_PATTERNS.values() if p.applies_to(rule_key)]


def run_pattern_checks(
    fragment: Fragment,
    rule_key: str,
    issues: IssueCollector,
    patterns: Iterable[DiagnosticPattern] | None = None,
) -> None:
    for pattern in applicable_patterns(rule_key) if patterns is None else patterns:
        hit = pattern.matcher.first_hit(fragment)
        if hit is None:
            continue
        issues.add(
            ValidationIssue(
                severity=pattern.severity,
                message=pattern.message,
                category=pattern.category,
                fix=pattern.fix,
                line=hit.line,
                selector=hit.selector,
                wcag=pattern.wcag,
                rule_id=pattern.id,
            )
        )
