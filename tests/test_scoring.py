from __future__ import annotations

from componentkb.models import CandidateRecord
from componentkb.search import DEFAULT_WEIGHTS, ScoringWeights, expand, rank_candidates, score_candidate


def _record(record_id: int, title: str | None, name: str | None = None, **kwargs) -> CandidateRecord:
    return CandidateRecord(id=record_id, title=title, component_name=name if name is not None else title, **kwargs)


def test_exact_beats_prefix_beats_substring():
    exact = score_candidate(_record(1, "Button"), "button", ())
    prefix = score_candidate(_record(2, "Button group"), "button", ())
    substring = score_candidate(_record(3, "Icon button"), "button", ())
    assert (exact, prefix, substring) == (1400, 1200, 1000)
    assert exact >= prefix >= substring


def test_expansion_awards_exact_bonus_for_synonym():
    record = _record(1, "Text field", "Text field")
    without_expansion = score_candidate(record, "input", ())
    with_expansion = score_candidate(record, "input", expand("input"))
    assert without_expansion == 0
    assert with_expansion - without_expansion >= DEFAULT_WEIGHTS.exact


def test_bonuses_accumulate_across_expansions():
    record = _record(1, "Select", "Select")
    single = score_candidate(record, "select", ())
    both = score_candidate(record, "select", ["dropdown select"])
    assert both > single


def test_each_expansion_earns_its_own_phrase_bonus():
    record = _record(1, "Text field", "Text field")
    original_only = score_candidate(record, "text field", ["text field"])
    with_variant = score_candidate(record, "text field", ["text field", "Text field"])
    assert original_only == 1600
    # the canonical variant adds a second exact bonus; tokens are shared
    assert with_variant == 2600


def test_full_expansion_of_text_field_accumulates_exact_bonuses():
    record = _record(1, "Text field", "Text field")
    expanded = expand("text field")
    assert expanded[:2] == ["text field", "Text field"]
    single = score_candidate(record, "text field", ())
    assert score_candidate(record, "text field", expanded) - single >= DEFAULT_WEIGHTS.exact


def test_full_coverage_requires_every_original_token():
    record = _record(1, "Text field", "Text field")
    covered = score_candidate(record, "text field", ())
    partial = score_candidate(record, "text widget", ())
    # exact 1000 + 2 tokens * (100 + 50 + 50) + coverage 200
    assert covered == 1600
    # one matched token, no phrase bonus and no coverage
    assert partial == 200


def test_category_and_tag_bonuses():
    plain = _record(1, "Select")
    tagged = _record(2, "Select", category="select controls", tags=("select-box", "single select"))
    assert score_candidate(tagged, "select", ()) - score_candidate(plain, "select", ()) == 10 + 2 * 5


def test_tag_bonus_is_capped():
    tags = tuple(f"form {i}" for i in range(10))
    record = _record(1, "Zzz", "Zzz", tags=tags)
    assert score_candidate(record, "form", ()) == 4 * DEFAULT_WEIGHTS.tag
    uncapped = ScoringWeights(max_tag_matches=None)
    assert score_candidate(record, "form", (), uncapped) == 10 * DEFAULT_WEIGHTS.tag


def test_missing_title_scores_as_empty():
    record = CandidateRecord(id=1, title=None, component_name=None)
    assert score_candidate(record, "button", ()) == 0


def test_ties_break_by_title_regardless_of_input_order():
    records = [_record(1, "Beta card", "x"), _record(2, "Alpha card", "x"), _record(3, "Gamma card", "x")]
    forward = rank_candidates(records, "card", ())
    backward = rank_candidates(list(reversed(records)), "card", ())
    assert [c.record.title for c in forward] == ["Alpha card", "Beta card", "Gamma card"]
    assert [c.record.id for c in forward] == [c.record.id for c in backward]


def test_ranking_orders_by_score_then_truncates():
    records = [_record(1, "Icon button"), _record(2, "Button"), _record(3, "Button group"), _record(4, "Card")]
    ranked = rank_candidates(records, "button", expand("button"), limit=2)
    assert [c.record.title for c in ranked] == ["Button", "Button group"]
    assert ranked[0].score > ranked[1].score


def test_no_query_sorts_alphabetically_without_scoring():
    records = [_record(1, "Select"), _record(2, "Accordion"), _record(3, None)]
    ranked = rank_candidates(records, None)
    assert [c.record.id for c in ranked] == [3, 2, 1]
    assert {c.score for c in ranked} == {0}
