from __future__ import annotations

from componentkb.models import Severity
from componentkb.validation import forms
from componentkb.validation.issues import IssueCollector
from componentkb.validation.tree import parse_fragment

CLEAN_TEXT_FIELD = (
    '<div class="ecl-form-group">'
    '<label class="ecl-form-label" for="name" id="name-label">Name</label>'
    '<div class="ecl-help-block" id="name-helper">Your full name</div>'
    '<input type="text" id="name" class="ecl-text-input ecl-text-input--m" '
    'aria-describedby="name-helper" placeholder="Jane Doe">'
    "</div>"
)

HELPER_AFTER_INPUT = (
    '<div class="ecl-form-group">'
    '<label class="ecl-form-label" for="name" id="name-label">Name</label>'
    '<input type="text" id="name" class="ecl-text-input" aria-describedby="name-helper" placeholder="Jane">'
    '<div class="ecl-help-block" id="name-helper">Your full name</div>'
    "</div>"
)

SINGLE_CHECKBOX = (
    "<fieldset>"
    '<div class="ecl-checkbox">'
    '<input type="checkbox" id="c1" class="ecl-checkbox__input">'
    '<label class="ecl-checkbox__label" for="c1">'
    '<span class="ecl-checkbox__box">'
    '<svg class="ecl-icon ecl-icon--s ecl-checkbox__icon" focusable="false" aria-hidden="true">'
    '<use xlink:href="icons.svg#check"></use></svg>'
    "</span>"
    '<span class="ecl-checkbox__text">Accept</span>'
    "</label></div></fieldset>"
)


def _check(check, html: str) -> IssueCollector:
    issues = IssueCollector()
    check(parse_fragment(html), issues)
    return issues


def _categories(issues) -> list[str]:
    return [issue.category for issue in issues]


def test_clean_text_field_passes_all_form_checks():
    issues = IssueCollector()
    forms.check_form_structure(parse_fragment(CLEAN_TEXT_FIELD), "textfield", issues)
    assert issues.issues == []


def test_text_field_placeholder_and_multiline_style():
    issues = _check(forms.check_text_field, '<input class="ecl-text-input"\n  id="a"\n  type="text"\n  name="a">')
    assert _categories(issues.warnings) == ["text_field_ux", "code_style"]
    assert issues.warnings[1].severity is Severity.INFO


def test_select_without_container_or_icon():
    html = '<div class="ecl-form-group"><select class="ecl-select" id="s1"><option>BE</option></select></div>'
    issues = _check(forms.check_select, html)
    assert _categories(issues.errors) == ["select_structure", "select_icon"]


def test_select_icon_must_not_wrap_a_button():
    html = (
        '<div class="ecl-select__container ecl-select__container--m">'
        '<select class="ecl-select" id="s1"></select>'
        '<div class="ecl-select__icon"><button type="button"><svg class="ecl-icon"></svg></button></div>'
        "</div>"
    )
    assert _categories(_check(forms.check_select, html).errors) == ["select_icon_structure"]
    well_formed = html.replace("<button type=\"button\">", "").replace("</button>", "")
    assert _check(forms.check_select, well_formed).errors == []


def test_textarea_checks():
    issues = _check(forms.check_textarea, '<textarea class="ecl-text-area" id="t"></textarea>')
    assert _categories(issues.warnings) == ["textarea_ux", "textarea_structure"]
    closed = _check(forms.check_textarea, '<textarea class="ecl-text-area" id="t" rows="4" placeholder="x" />')
    assert _categories(closed.errors) == ["textarea_syntax"]


def test_single_checkbox_in_fieldset_is_warning():
    issues = _check(forms.check_checkbox, SINGLE_CHECKBOX)
    assert issues.errors == []
    assert _categories(issues.warnings) == ["checkbox_fieldset"]


def test_checkbox_without_box_or_icon():
    no_box = (
        '<div class="ecl-checkbox"><input type="checkbox" id="c" class="ecl-checkbox__input">'
        '<label class="ecl-checkbox__label" for="c">Accept</label></div>'
    )
    assert _categories(_check(forms.check_checkbox, no_box).errors) == ["checkbox_structure"]
    no_icon = SINGLE_CHECKBOX.replace('class="ecl-icon ecl-icon--s ecl-checkbox__icon"', 'class="ecl-icon"')
    assert _categories(_check(forms.check_checkbox, no_icon).errors) == ["checkbox_icon"]


def test_radio_needs_fieldset():
    html = '<div class="ecl-radio"><input type="radio" id="r" class="ecl-radio__input"></div>'
    assert _categories(_check(forms.check_radio, html).errors) == ["radio_structure"]
    assert _check(forms.check_radio, f"<fieldset><legend>Pick</legend>{html}</fieldset>").errors == []


def test_complete_form_structure():
    issues = _check(forms.check_complete_form, '<form><input type="text"></form>')
    assert _categories(issues.warnings) == ["form_structure", "form_structure"]


def test_form_tag_must_not_use_ecl_form_class():
    issues = _check(forms.check_form_tag_classes, '<form class="ecl-form"></form>')
    assert _categories(issues.errors) == ["form_structure"]


def test_utility_margins_on_groups_are_reported_once():
    html = '<div class="ecl-form-group ecl-u-mb-m"></div><div class="ecl-form-group ecl-u-mt-l"></div>'
    issues = _check(forms.check_form_group_spacing, html)
    assert len(issues.warnings) == 1
    assert issues.warnings[0].message.startswith("Found 2 ")


def test_helper_text_after_input_is_critical_error():
    issues = _check(forms.check_helper_text_position, HELPER_AFTER_INPUT)
    assert _categories(issues.errors) == ["helper_text_position"]
    assert _check(forms.check_helper_text_position, CLEAN_TEXT_FIELD).errors == []


def test_helper_text_before_label_is_error():
    html = (
        '<div class="ecl-form-group">'
        '<div class="ecl-help-block">Help</div>'
        '<label class="ecl-form-label" for="x">X</label>'
        '<input class="ecl-text-input" id="x">'
        "</div>"
    )
    issues = _check(forms.check_helper_text_position, html)
    assert [e.message for e in issues.errors] == ["Helper text (.ecl-help-block) should come AFTER the label"]


def test_label_attributes():
    issues = _check(forms.check_label_structure, '<label class="ecl-form-label">Name</label>')
    assert _categories(issues.errors) == ["label_attributes"]
    assert _categories(issues.warnings) == ["label_attributes"]


def test_required_indicator_markup():
    html = (
        '<label class="ecl-form-label ecl-form-label--required" for="x" id="x-label">'
        'Name<span class="ecl-form-label__required">*</span></label>'
    )
    issues = _check(forms.check_required_indicators, html)
    assert _categories(issues.warnings) == ["required_indicator"] * 3


def test_aria_attributes():
    missing = (
        '<div class="ecl-form-group"><div class="ecl-help-block">Help</div>'
        '<input class="ecl-text-input" id="x"></div>'
    )
    issues = _check(forms.check_aria_attributes, missing)
    assert _categories(issues.warnings) == ["aria_attributes"]
    assert 'aria-describedby="x-helper"' in issues.warnings[0].fix
    redundant = _check(forms.check_aria_attributes, '<input id="y" required aria-required="true">')
    assert _categories(redundant.warnings) == ["aria_redundant"]
