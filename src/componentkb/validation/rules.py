"""Per-component structural rule tables.

Rules are plain data keyed by the normalized component key (see
``componentkb.models.normalize_component_name``). Adding a component means
adding entries here; the checks in ``structure`` and ``forms`` stay generic.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from componentkb.models import normalize_component_name


@dataclass(frozen=True)
class ElementDescriptor:
    """One element a component's markup is expected to contain."""

    selector: str
    level: int
    name: str
    parent: str | None = None


@dataclass(frozen=True)
class HierarchyRule:
    required: tuple[ElementDescriptor, ...]
    optional: tuple[ElementDescriptor, ...] = ()


@dataclass(frozen=True)
class AttributeRule:
    """Attribute requirement on every element matching ``selector``.

    ``required`` means the attribute must be present; ``allowed`` restricts
    the value of a present attribute. With neither set the rule is
    informational only.
    """

    selector: str
    attribute: str
    required: bool = False
    allowed: tuple[str, ...] = ()


@dataclass(frozen=True)
class ParentChildRule:
    child: str
    parent: str
    message: str


HIERARCHY_RULES: Mapping[str, HierarchyRule] = MappingProxyType(
    {
        "siteheader": HierarchyRule(
            required=(
                ElementDescriptor(".ecl-site-header", 0, "Site Header Root"),
                ElementDescriptor(".ecl-site-header__header", 1, "Header Container", ".ecl-site-header"),
                ElementDescriptor(".ecl-site-header__container", 2, "Inner Container", ".ecl-site-header__header"),
            ),
            optional=(
                ElementDescriptor(".ecl-site-header__banner", 1, "Banner", ".ecl-site-header"),
                ElementDescriptor(".ecl-site-header__background", 0, "Background", ".ecl-site-header"),
            ),
        ),
        "sitefooter": HierarchyRule(
            required=(
                ElementDescriptor(".ecl-footer", 0, "Footer Root"),
                ElementDescriptor(".ecl-footer__container", 1, "Footer Container", ".ecl-footer"),
            ),
            optional=(ElementDescriptor(".ecl-footer__section", 2, "Footer Section", ".ecl-footer__container"),),
        ),
        "pageheader": HierarchyRule(
            required=(
                ElementDescriptor(".ecl-page-header", 0, "Page Header Root"),
                ElementDescriptor(".ecl-container", 1, "Container", ".ecl-page-header"),
                ElementDescriptor(".ecl-page-header__body", 2, "Body", ".ecl-container"),
            ),
        ),
        "card": HierarchyRule(
            required=(
                ElementDescriptor(".ecl-card", 0, "Card Root"),
                ElementDescriptor(".ecl-card__body", 1, "Card Body", ".ecl-card"),
            ),
            optional=(
                ElementDescriptor(".ecl-card__header", 1, "Card Header", ".ecl-card"),
                ElementDescriptor(".ecl-card__footer", 1, "Card Footer", ".ecl-card"),
                ElementDescriptor(".ecl-card__image", 1, "Card Image", ".ecl-card"),
            ),
        ),
        "accordion": HierarchyRule(
            required=(
                ElementDescriptor(".ecl-accordion", 0, "Accordion Root"),
                ElementDescriptor(".ecl-accordion__item", 1, "Accordion Item", ".ecl-accordion"),
                ElementDescriptor(".ecl-accordion__header", 2, "Item Header", ".ecl-accordion__item"),
                ElementDescriptor(".ecl-accordion__toggle", 3, "Toggle Button", ".ecl-accordion__header"),
                ElementDescriptor(".ecl-accordion__content", 2, "Item Content", ".ecl-accordion__item"),
            ),
        ),
        "modal": HierarchyRule(
            required=(
                ElementDescriptor(".ecl-modal", 0, "Modal Root"),
                ElementDescriptor(".ecl-modal__container", 1, "Modal Container", ".ecl-modal"),
                ElementDescriptor(".ecl-modal__content", 2, "Modal Content", ".ecl-modal__container"),
                ElementDescriptor(".ecl-modal__header", 3, "Modal Header", ".ecl-modal__content"),
                ElementDescriptor(".ecl-modal__body", 3, "Modal Body", ".ecl-modal__content"),
            ),
        ),
        "textfield": HierarchyRule(
            required=(
                ElementDescriptor(".ecl-form-group", 0, "Form Group"),
                ElementDescriptor("label.ecl-form-label", 1, "Label", ".ecl-form-group"),
                ElementDescriptor("input.ecl-text-input", 1, "Text Input", ".ecl-form-group"),
            ),
            optional=(ElementDescriptor(".ecl-help-block", 1, "Help Text", ".ecl-form-group"),),
        ),
    }
)

ATTRIBUTE_RULES: Mapping[str, tuple[AttributeRule, ...]] = MappingProxyType(
    {
        "siteheader": (AttributeRule(".ecl-site-header", "data-ecl-auto-init", allowed=("SiteHeader",)),),
        "accordion": (
            AttributeRule(".ecl-accordion", "data-ecl-auto-init", allowed=("Accordion",)),
            AttributeRule(".ecl-accordion__toggle", "aria-controls", required=True),
            AttributeRule(".ecl-accordion__toggle", "aria-expanded", allowed=("true", "false")),
            AttributeRule(".ecl-accordion__content", "id", required=True),
        ),
        "modal": (
            AttributeRule(".ecl-modal", "data-ecl-auto-init", allowed=("Modal",)),
            AttributeRule(".ecl-modal", "role", allowed=("dialog",)),
            AttributeRule(".ecl-modal", "aria-labelledby", required=True),
            AttributeRule(".ecl-modal__close", "data-ecl-modal-close", allowed=("true",)),
        ),
        "tabs": (
            AttributeRule(".ecl-tabs", "data-ecl-auto-init", allowed=("Tabs",)),
            AttributeRule('[role="tab"]', "aria-selected", allowed=("true", "false")),
            AttributeRule('[role="tab"]', "aria-controls", required=True),
            AttributeRule('[role="tabpanel"]', "id", required=True),
        ),
        "button": (AttributeRule(".ecl-button--icon-only", "aria-label", required=True),),
        "textfield": (
            AttributeRule("input.ecl-text-input", "id", required=True),
            AttributeRule(
                "input.ecl-text-input",
                "type",
                allowed=("text", "email", "number", "password", "search", "tel", "url"),
            ),
        ),
    }
)

PARENT_CHILD_RULES: tuple[ParentChildRule, ...] = (
    ParentChildRule(
        ".ecl-accordion__toggle",
        ".ecl-accordion__header",
        "Accordion toggle must be direct child of ecl-accordion__header",
    ),
    ParentChildRule(".ecl-card__body", ".ecl-card", "Card body must be direct child of ecl-card"),
    ParentChildRule(".ecl-button__icon", ".ecl-button__container", "Button icon must be inside ecl-button__container span"),
    ParentChildRule(
        ".ecl-button__label",
        ".ecl-button__container",
        "Button label must be inside ecl-button__container span",
    ),
)

# Alternative names users pass for components that have rule tables
COMPONENT_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "header": "siteheader",
        "footer": "sitefooter",
        "dropdown": "select",
        "selectbox": "select",
        "input": "textfield",
        "textinput": "textfield",
        "textbox": "textfield",
        "completeform": "completeforms",
        "form": "completeforms",
        "forms": "completeforms",
        "radiobutton": "radio",
        "radiogroup": "radio",
        "tab": "tabs",
        "dialog": "modal",
    }
)

FORM_COMPONENTS = frozenset({"textfield", "select", "textarea", "checkbox", "radio", "completeforms"})

# Components without structural tables that diagnostic patterns are scoped to
PATTERN_COMPONENTS = frozenset(
    {"link", "icon", "grid", "carousel", "expandable", "datepicker", "fileupload", "banner"}
)

_RULE_KEYS = frozenset({*HIERARCHY_RULES, *ATTRIBUTE_RULES, *FORM_COMPONENTS})
_KNOWN_KEYS = _RULE_KEYS | PATTERN_COMPONENTS


def resolve_rule_key(component_name: str) -> str:
    """Map a user-supplied component name onto the key used by the rule tables.

    Falls back to the plain normalized key when no table knows the component.
    """

    key = normalize_component_name(component_name)
    if key in _KNOWN_KEYS:
        return key
    if key in COMPONENT_ALIASES:
        return COMPONENT_ALIASES[key]
    for variant in (key[:-1] if key.endswith("s") else None, f"{key}s"):
        if not variant:
            continue
        if variant in _KNOWN_KEYS:
            return variant
        if variant in COMPONENT_ALIASES:
            return COMPONENT_ALIASES[variant]
    return key


def has_rules(rule_key: str) -> bool:
    """True when hierarchy, attribute or form rules exist for the key."""

    return rule_key in _RULE_KEYS
