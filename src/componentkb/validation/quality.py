"""Quality score and symptom-oriented troubleshooting advice."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from componentkb.models import ValidationIssue

ERROR_PENALTY = 15
WARNING_PENALTY = 5


def quality_score(errors: Sequence[ValidationIssue], warnings: Sequence[ValidationIssue]) -> int:
    """100 minus 15 per error and 5 per warning, floored at zero."""

    return max(0, 100 - ERROR_PENALTY * len(errors) - WARNING_PENALTY * len(warnings))


class Priority(str, Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.CRITICAL: 0, Priority.HIGH: 1, Priority.MEDIUM: 2}


@dataclass(frozen=True)
class TroubleshootingEntry:
    symptom: str
    cause: str
    fix: str
    priority: Priority
    keys: frozenset[str]


@dataclass(frozen=True)
class TroubleshootingReport:
    total_issues: int
    critical_issues: int
    advice: tuple[TroubleshootingEntry, ...]
    quick_fixes: tuple[TroubleshootingEntry, ...]


TROUBLESHOOTING_TABLE: tuple[TroubleshootingEntry, ...] = (
    TroubleshootingEntry(
        symptom="Labels floating above inputs with huge gaps",
        cause="Helper text is positioned AFTER the input instead of BEFORE",
        fix="Move .ecl-help-block to be between label and input",
        priority=Priority.CRITICAL,
        keys=frozenset({"helper_text_position"}),
    ),
    TroubleshootingEntry(
        symptom="Excessive spacing between form fields",
        cause="Extra utility margin classes on .ecl-form-group",
        fix="Remove ecl-u-mb-*, ecl-u-mt-* classes from form groups",
        priority=Priority.HIGH,
        keys=frozenset({"form_spacing"}),
    ),
    TroubleshootingEntry(
        symptom="Select dropdown icon is interactive or looks wrong",
        cause="Icon wrapped in button element",
        fix='Use just SVG: <div class="ecl-select__icon"><svg>...</svg></div>',
        priority=Priority.HIGH,
        keys=frozenset({"select_icon_structure"}),
    ),
    TroubleshootingEntry(
        symptom="Select renders as a plain browser dropdown without the ECL arrow",
        cause="Missing .ecl-select__container wrapper or .ecl-select__icon",
        fix="Wrap the select in .ecl-select__container and add the .ecl-select__icon SVG after it",
        priority=Priority.HIGH,
        keys=frozenset({"select_structure", "select_icon"}),
    ),
    TroubleshootingEntry(
        symptom="Checkboxes without visible boxes",
        cause="Missing .ecl-checkbox__box or SVG icon sprite not loading",
        fix="Verify checkbox structure and SVG sprite path",
        priority=Priority.HIGH,
        keys=frozenset({"checkbox_icon", "checkbox_structure"}),
    ),
    TroubleshootingEntry(
        symptom="Radio options are announced without their group question",
        cause="Radio buttons are not wrapped in a fieldset with a legend",
        fix='Wrap radio group in <fieldset class="ecl-form-group"><legend>...</legend>...</fieldset>',
        priority=Priority.HIGH,
        keys=frozenset({"radio_structure"}),
    ),
    TroubleshootingEntry(
        symptom="Links are invisible or hard to read on dark backgrounds",
        cause="Default blue ecl-link used on a dark footer, banner or page header",
        fix="Add ecl-link--inverted to links on dark backgrounds",
        priority=Priority.HIGH,
        keys=frozenset({"contrast"}),
    ),
    TroubleshootingEntry(
        symptom="Interactive component does nothing when clicked",
        cause="Component root lacks data-ecl-auto-init so ECL JavaScript never initializes it",
        fix='Add data-ecl-auto-init="ComponentName" and call ECL.autoInit() after the page loads',
        priority=Priority.HIGH,
        keys=frozenset({"initialization"}),
    ),
    TroubleshootingEntry(
        symptom="Required indicators (*) not styled properly",
        cause="Missing .ecl-form-label__required class or using wrong class on label",
        fix='Use <span class="ecl-form-label__required" role="note" aria-label="required">*</span>',
        priority=Priority.MEDIUM,
        keys=frozenset({"required_indicator"}),
    ),
    TroubleshootingEntry(
        symptom="Clicking a label does not focus its field",
        cause='Label missing "for" attribute pointing at the control id',
        fix='Add for="input-id" to the label and a matching id to the control',
        priority=Priority.MEDIUM,
        keys=frozenset({"label_attributes"}),
    ),
)


def troubleshoot(
    errors: Sequence[ValidationIssue],
    warnings: Sequence[ValidationIssue],
    table: Sequence[TroubleshootingEntry] = TROUBLESHOOTING_TABLE,
) -> TroubleshootingReport:
    """Map issue categories onto symptom/cause/fix advice, most urgent first."""

    categories = {issue.category for issue in (*errors, *warnings)}
    advice = sorted(
        (entry for entry in table if entry.keys & categories),
        key=lambda entry: entry.priority.rank,
    )
    quick_fixes = [entry for entry in advice if entry.priority in (Priority.CRITICAL, Priority.HIGH)]
    return TroubleshootingReport(
        total_issues=len(errors) + len(warnings),
        critical_issues=len(errors),
        advice=tuple(advice),
        quick_fixes=tuple(quick_fixes),
    )
