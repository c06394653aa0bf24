from __future__ import annotations

import pytest

from componentkb.validation.accessibility import (
    check_buttons,
    check_form_labels,
    check_heading_order,
    check_images,
    is_labelled,
)
from componentkb.validation.issues import IssueCollector
from componentkb.validation.tree import parse_fragment


def _check(check, html: str) -> IssueCollector:
    issues = IssueCollector()
    check(parse_fragment(html), issues)
    return issues


def test_images_need_alt_but_may_be_decorative():
    issues = _check(check_images, '<img src="a.png">\n<img src="b.png" alt="">')
    assert len(issues.errors) == 1
    error = issues.errors[0]
    assert (error.rule_id, error.wcag, error.line) == ("missing-alt-text", "1.1.1", 1)


def test_heading_levels_may_not_skip():
    skipped = _check(check_heading_order, "<h1>A</h1><h3>B</h3>")
    assert [w.rule_id for w in skipped.warnings] == ["heading-order"]
    assert "h1 to h3" in skipped.warnings[0].message
    assert _check(check_heading_order, "<h1>A</h1><h2>B</h2><h3>C</h3><h2>D</h2>").warnings == []
    assert _check(check_heading_order, "<h3>A</h3><h1>B</h1>").warnings == []


@pytest.mark.parametrize(
    "html",
    [
        '<label for="a">A</label><input id="a">',
        '<label>A <input type="text"></label>',
        '<input aria-label="Search">',
        '<span id="l">Name</span><textarea aria-labelledby="l"></textarea>',
        '<input type="hidden" name="token">',
        '<input type="submit" value="Send">',
    ],
)
def test_labelled_or_exempt_controls(html):
    assert _check(check_form_labels, html).errors == []


def test_unlabelled_controls_are_errors():
    issues = _check(check_form_labels, '<input id="a"><select id="b"></select><label for="zzz">X</label>')
    assert [e.rule_id for e in issues.errors] == ["input-without-label", "input-without-label"]
    assert [e.selector for e in issues.errors] == ["#a", "#b"]


def test_blank_aria_label_does_not_count():
    fragment = parse_fragment('<input aria-label="  ">')
    assert not is_labelled(fragment, fragment.select_one("input"))


def test_buttons_need_accessible_text():
    issues = _check(check_buttons, '<button><svg class="ecl-icon"></svg></button><button>Send</button>')
    assert [e.rule_id for e in issues.errors] == ["missing-aria-label-button"]
    assert _check(check_buttons, '<button aria-label="Close"><svg></svg></button>').errors == []
