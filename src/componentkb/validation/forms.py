"""Form structure checks: labels, helper text order, select/checkbox/radio markup."""

from __future__ import annotations

import re
from typing import Callable, Mapping

from componentkb.validation.issues import IssueCollector
from componentkb.validation.tree import (
    Fragment,
    attr,
    child_elements,
    class_tokens,
    closest,
    describe,
    matches,
    parent_element,
)

TEXT_CONTROLS = "input.ecl-text-input, textarea.ecl-text-area, select.ecl-select"
_UTILITY_MARGIN = re.compile(r"^ecl-u-m[btlr]?-")


def _element_ref(tag) -> str:
    return f"#{attr(tag, 'id')}" if attr(tag, "id") else describe(tag)


def check_text_field(fragment: Fragment, issues: IssueCollector) -> None:
    for field in fragment.select("input.ecl-text-input"):
        if not attr(field, "placeholder"):
            issues.warning(
                "Text input missing placeholder attribute",
                "text_field_ux",
                fix='Add placeholder="Expected input format" for better UX',
                line=field.sourceline,
                selector=_element_ref(field),
            )
        if fragment.start_tag_source(field).count("\n") >= 3:
            issues.info(
                "Input element has multi-line attributes. ECL examples use single-line format.",
                "code_style",
                fix="Put all attributes on one line for consistency with ECL examples",
                line=field.sourceline,
                selector=_element_ref(field),
            )


def check_select(fragment: Fragment, issues: IssueCollector) -> None:
    for select in fragment.select("select.ecl-select"):
        container = closest(select, ".ecl-select__container")
        if container is None:
            issues.error(
                "Select element missing .ecl-select__container wrapper",
                "select_structure",
                fix='Wrap select in <div class="ecl-select__container ecl-select__container--m">...</div>',
                line=select.sourceline,
                selector=_element_ref(select),
            )
        scope = container if container is not None else parent_element(select)
        icon = scope.select_one(".ecl-select__icon") if scope is not None else None
        if icon is None:
            issues.error(
                "Select missing dropdown icon",
                "select_icon",
                fix='Add <div class="ecl-select__icon"><svg>...</svg></div> after select element',
                line=select.sourceline,
                selector=".ecl-select__container",
            )
        elif icon.select_one("button") is not None:
            issues.error(
                "Select icon should be SVG only, not wrapped in a button",
                "select_icon_structure",
                fix='Remove button wrapper, use just <svg class="ecl-icon ecl-icon--xs ecl-icon--rotate-180">...</svg>',
                line=icon.sourceline,
                selector=".ecl-select__icon",
            )


def check_textarea(fragment: Fragment, issues: IssueCollector) -> None:
    for textarea in fragment.select("textarea.ecl-text-area"):
        ref = _element_ref(textarea)
        if not attr(textarea, "placeholder"):
            issues.warning(
                "Textarea missing placeholder attribute",
                "textarea_ux",
                fix='Add placeholder="Your message..." for better UX',
                line=textarea.sourceline,
                selector=ref,
            )
        if not attr(textarea, "rows"):
            issues.warning(
                "Textarea missing rows attribute",
                "textarea_structure",
                fix='Add rows="6" attribute for proper sizing',
                line=textarea.sourceline,
                selector=ref,
            )
        if fragment.start_tag_source(textarea).rstrip().endswith("/>"):
            issues.error(
                "Textarea should not be self-closing (needs closing tag)",
                "textarea_syntax",
                fix="Use <textarea>...</textarea> not <textarea />",
                line=textarea.sourceline,
                selector=ref,
            )


def check_checkbox(fragment: Fragment, issues: IssueCollector) -> None:
    for checkbox in fragment.select(".ecl-checkbox"):
        line = checkbox.sourceline
        label = checkbox.select_one("label.ecl-checkbox__label")
        box = label.select_one(".ecl-checkbox__box") if label is not None else None
        if checkbox.select_one("input.ecl-checkbox__input") is None:
            issues.error("Checkbox missing input element", "checkbox_structure", line=line, selector=".ecl-checkbox")
        if label is None:
            issues.error("Checkbox missing label element", "checkbox_structure", line=line, selector=".ecl-checkbox")
        if box is None:
            issues.error(
                "Checkbox label missing .ecl-checkbox__box span",
                "checkbox_structure",
                fix='Add <span class="ecl-checkbox__box"><svg>...</svg></span> inside label',
                line=line,
                selector=".ecl-checkbox__label",
            )
        elif box.select_one(".ecl-checkbox__icon") is None:
            issues.error(
                "Checkbox missing check icon SVG",
                "checkbox_icon",
                fix='Add <svg class="ecl-icon ecl-icon--s ecl-checkbox__icon"><use xlink:href="icons.svg#check"></use></svg>',
                line=box.sourceline,
                selector=".ecl-checkbox__box",
            )

    for fieldset in fragment.select("fieldset"):
        if len(fieldset.select(".ecl-checkbox")) == 1 and fieldset.select_one("legend") is None:
            issues.warning(
                "Single checkbox should NOT be wrapped in fieldset. Fieldsets are for checkbox groups only.",
                "checkbox_fieldset",
                fix="Remove fieldset wrapper for single checkbox",
                line=fieldset.sourceline,
                selector="fieldset",
            )


def check_radio(fragment: Fragment, issues: IssueCollector) -> None:
    for radio in fragment.select(".ecl-radio"):
        if closest(radio, "fieldset") is None:
            issues.error(
                "Radio buttons must be wrapped in a fieldset",
                "radio_structure",
                fix='Wrap radio group in <fieldset class="ecl-form-group"><legend>...</legend>...</fieldset>',
                line=radio.sourceline,
                selector=".ecl-radio",
            )


def check_complete_form(fragment: Fragment, issues: IssueCollector) -> None:
    for form in fragment.select("form"):
        if form.select_one(".ecl-form-group") is None:
            issues.warning(
                "Form contains no .ecl-form-group elements",
                "form_structure",
                line=form.sourceline,
                selector="form",
            )
        if form.select_one('button[type="submit"], input[type="submit"]') is None:
            issues.warning(
                "Form missing submit button",
                "form_structure",
                fix='Add submit button: <button type="submit" class="ecl-button ecl-button--primary">...</button>',
                line=form.sourceline,
                selector="form",
            )


def check_form_tag_classes(fragment: Fragment, issues: IssueCollector) -> None:
    form = fragment.select_one("form.ecl-form")
    if form is not None:
        issues.error(
            'Form element should NOT have class="ecl-form". This class does not exist in ECL CSS.',
            "form_structure",
            fix='Remove class="ecl-form" from the <form> tag',
            line=form.sourceline,
            selector="form",
        )


def check_form_group_spacing(fragment: Fragment, issues: IssueCollector) -> None:
    spaced = [
        group
        for group in fragment.select(".ecl-form-group")
        if any(_UTILITY_MARGIN.match(t) for t in class_tokens(group))
    ]
    if spaced:
        issues.warning(
            f"Found {len(spaced)} .ecl-form-group elements with utility margin classes. "
            "ECL provides proper spacing by default.",
            "form_spacing",
            fix="Remove ecl-u-mb-*, ecl-u-mt-*, etc. classes from .ecl-form-group elements",
            line=spaced[0].sourceline,
            selector=".ecl-form-group",
        )


def _contains_or_is(tag, selector: str) -> bool:
    return matches(tag, selector) or tag.select_one(selector) is not None


def check_helper_text_position(fragment: Fragment, issues: IssueCollector) -> None:
    """Helper text must sit between the label and the control."""

    for group in fragment.select(".ecl-form-group"):
        help_block = group.select_one(".ecl-help-block")
        if group.select_one("label.ecl-form-label") is None or help_block is None:
            continue
        if group.select_one(TEXT_CONTROLS) is None:
            continue

        label_index = help_index = input_index = -1
        for index, child in enumerate(child_elements(group)):
            if _contains_or_is(child, "label.ecl-form-label"):
                label_index = index
            if _contains_or_is(child, ".ecl-help-block"):
                help_index = index
            if "ecl-select__container" in class_tokens(child) or _contains_or_is(child, TEXT_CONTROLS):
                input_index = index

        if min(label_index, help_index, input_index) < 0:
            continue
        if help_index > input_index:
            issues.error(
                "Helper text (.ecl-help-block) MUST come between label and input, not after the input. "
                "This is CRITICAL for ECL styling.",
                "helper_text_position",
                fix="Move .ecl-help-block to be after the label but before the input element",
                line=help_block.sourceline,
                selector=".ecl-help-block",
            )
        elif help_index < label_index:
            issues.error(
                "Helper text (.ecl-help-block) should come AFTER the label",
                "helper_text_position",
                fix="Move .ecl-help-block to be after the label element",
                line=help_block.sourceline,
                selector=".ecl-help-block",
            )


def check_label_structure(fragment: Fragment, issues: IssueCollector) -> None:
    for label in fragment.select("label.ecl-form-label"):
        if not attr(label, "for"):
            issues.error(
                'Form label is missing "for" attribute',
                "label_attributes",
                fix='Add for="input-id" attribute to the label',
                line=label.sourceline,
                selector="label",
            )
        if not attr(label, "id"):
            issues.warning(
                'Form label is missing "id" attribute (needed for proper ARIA relationships)',
                "label_attributes",
                fix='Add id="input-id-label" attribute to the label',
                line=label.sourceline,
                selector="label",
            )
        if "\n" in label.decode_contents() and label.select_one(".ecl-form-label__required") is not None:
            issues.warning(
                "Label should be single-line with inline required indicator (no newlines)",
                "label_format",
                fix="Put label text and required indicator on same line: "
                '<label>Name<span class="ecl-form-label__required">*</span></label>',
                line=label.sourceline,
                selector="label",
            )


def check_required_indicators(fragment: Fragment, issues: IssueCollector) -> None:
    for label in fragment.select("label.ecl-form-label--required"):
        issues.warning(
            'Using class="ecl-form-label--required" on label. Should use <span class="ecl-form-label__required"> instead.',
            "required_indicator",
            fix='Use: <label>Name<span class="ecl-form-label__required" role="note" aria-label="required">*</span></label>',
            line=label.sourceline,
            selector="label",
        )

    for marker in fragment.select(".ecl-form-label__required"):
        if attr(marker, "role") != "note":
            issues.warning(
                'Required indicator missing role="note" attribute',
                "required_indicator",
                fix='Add role="note" to the span',
                line=marker.sourceline,
                selector=".ecl-form-label__required",
            )
        if attr(marker, "aria-label") != "required":
            issues.warning(
                'Required indicator missing aria-label="required" attribute',
                "required_indicator",
                fix='Add aria-label="required" to the span',
                line=marker.sourceline,
                selector=".ecl-form-label__required",
            )


def check_aria_attributes(fragment: Fragment, issues: IssueCollector) -> None:
    for control in fragment.select(TEXT_CONTROLS):
        group = closest(control, ".ecl-form-group, fieldset")
        if group is None or group.select_one(".ecl-help-block") is None:
            continue
        if not attr(control, "aria-describedby"):
            control_id = attr(control, "id") or "input-id"
            issues.warning(
                "Input has helper text but missing aria-describedby attribute",
                "aria_attributes",
                fix=f'Add aria-describedby="{control_id}-helper" to the input and id="{control_id}-helper" '
                "to the help block",
                line=control.sourceline,
                selector=_element_ref(control),
            )

    for control in fragment.select(
        "input[required][aria-required], textarea[required][aria-required], select[required][aria-required]"
    ):
        issues.warning(
            'Input has both required and aria-required attributes. HTML5 "required" is sufficient.',
            "aria_redundant",
            fix='Remove aria-required="true" attribute (keep "required")',
            line=control.sourceline,
            selector=_element_ref(control),
        )


COMPONENT_FORM_CHECKS: Mapping[str, Callable[[Fragment, IssueCollector], None]] = {
    "textfield": check_text_field,
    "select": check_select,
    "textarea": check_textarea,
    "checkbox": check_checkbox,
    "radio": check_radio,
    "completeforms": check_complete_form,
}

UNIVERSAL_FORM_CHECKS: tuple[Callable[[Fragment, IssueCollector], None], ...] = (
    check_form_tag_classes,
    check_form_group_spacing,
    check_helper_text_position,
    check_label_structure,
    check_required_indicators,
    check_aria_attributes,
)


def check_form_structure(fragment: Fragment, rule_key: str, issues: IssueCollector) -> None:
    component_check = COMPONENT_FORM_CHECKS.get(rule_key)
    if component_check is not None:
        component_check(fragment, issues)
    for check in UNIVERSAL_FORM_CHECKS:
        check(fragment, issues)
