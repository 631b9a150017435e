from __future__ import annotations

import itertools

import pytest

from pte_core.scoring import (
    score_reading_fill_in_blanks,
    score_reading_mcq_multiple,
    score_reading_mcq_single,
    score_reading_reorder_paragraphs,
)
from pte_core.types import (
    FillBlanksPayload,
    MCQMultiplePayload,
    MCQSinglePayload,
    ReorderParagraphsPayload,
    Section,
)


def _multi(selected, correct):
    return score_reading_mcq_multiple(MCQMultiplePayload(list(selected), list(correct)))


def test_single_choice_ignores_case_and_whitespace():
    padded = score_reading_mcq_single(MCQSinglePayload("  A ", "A"))
    lower = score_reading_mcq_single(MCQSinglePayload("a", "A"))
    assert padded == lower
    assert padded.accuracy == 1.0
    assert padded.score >= 80
    assert padded.section is Section.READING


def test_single_choice_miss_and_empty():
    miss = score_reading_mcq_single(MCQSinglePayload("B", "A"))
    assert miss.accuracy == 0.0 and miss.score <= 20
    assert "does not match" in miss.rationale

    empty = score_reading_mcq_single(MCQSinglePayload("", ""))
    assert empty.accuracy == 1.0, "two empty answers normalize equal"


def test_multi_choice_exact_set_is_full_credit():
    res = _multi(["A", "B"], ["b", "a"])
    assert res.accuracy == 1.0
    assert res.score == 90


def test_multi_choice_penalty_wipes_out_over_selection():
    res = _multi(["A", "C", "D"], ["A", "B"])
    assert res.accuracy == 0.0
    assert res.meta["tp"] == 1 and res.meta["fp"] == 2 and res.meta["correctCount"] == 2
    assert "TP=1" in res.rationale and "FP=2" in res.rationale


def test_multi_choice_select_everything_scores_zero():
    options = ["A", "B", "C", "D", "E"]
    res = _multi(options, ["A", "B"])
    assert res.accuracy == 0.0


def test_multi_choice_partial_credit_scenario():
    res = _multi(["A", "C"], ["A", "C", "E"])
    assert res.accuracy == pytest.approx(2 / 3)
    assert res.score == 60


def test_multi_choice_deduplicates_selections():
    res = _multi(["A", "a ", "A"], ["A", "B"])
    assert res.meta["tp"] == 1 and res.meta["fp"] == 0
    assert res.accuracy == pytest.approx(0.5)


@pytest.mark.parametrize(
    "selected,correct",
    [
        ([], []),
        ([], ["A"]),
        (["A"], []),
        (["X", "Y"], ["A", "B"]),
        (["A", "B", "C"], ["A"]),
    ],
)
def test_multi_choice_accuracy_stays_in_unit_interval(selected, correct):
    res = _multi(selected, correct)
    assert 0.0 <= res.accuracy <= 1.0
    assert 0 <= res.score <= 90
    assert res.rationale


def test_multi_choice_bounds_over_all_small_subsets():
    universe = ["A", "B", "C", "D"]
    subsets = [list(c) for r in range(len(universe) + 1) for c in itertools.combinations(universe, r)]
    for sel in subsets:
        for cor in subsets:
            acc = _multi(sel, cor).accuracy
            assert 0.0 <= acc <= 1.0, (sel, cor, acc)


def test_fill_blanks_counts_normalized_matches():
    res = score_reading_fill_in_blanks(
        FillBlanksPayload(
            answers={"0": "Résumé", "1": "wrong", 2: "  CAT "},
            correct={0: "resume", 1: "right", "2": "cat"},
        )
    )
    assert res.accuracy == pytest.approx(2 / 3)
    assert res.meta["total"] == 3 and res.meta["correct"] == 2
    assert res.meta["wrong"] == [{"key": "1", "user": "wrong", "expected": "right"}]
    assert res.rationale == "Filled correctly 2/3 blanks."


def test_fill_blanks_missing_answers_and_empty_key():
    res = score_reading_fill_in_blanks(FillBlanksPayload(answers={}, correct={"0": "a", "1": "b"}))
    assert res.accuracy == 0.0
    assert len(res.meta["wrong"]) == 2

    none = score_reading_fill_in_blanks(FillBlanksPayload())
    assert none.accuracy == 0.0 and none.meta["total"] == 1


def test_reorder_identical_and_reversed():
    ref = [3, 1, 4, 2]
    same = score_reading_reorder_paragraphs(ReorderParagraphsPayload(list(ref), list(ref)))
    assert same.accuracy == 1.0 and same.meta["pairs"] == 6

    rev = score_reading_reorder_paragraphs(ReorderParagraphsPayload(list(reversed(ref)), list(ref)))
    assert rev.accuracy == 0.0
    assert rev.meta["correctPairs"] == 0


def test_reorder_single_and_empty():
    one = score_reading_reorder_paragraphs(ReorderParagraphsPayload([2], [1, 2, 3]))
    assert one.accuracy == 1.0
    assert "trivially" in one.rationale

    nothing = score_reading_reorder_paragraphs(ReorderParagraphsPayload([], [1, 2]))
    assert nothing.accuracy == 0.0

    disjoint = score_reading_reorder_paragraphs(ReorderParagraphsPayload([7, 8], [1, 2]))
    assert disjoint.accuracy == 0.0 and disjoint.meta["common"] == 0


def test_reorder_ignores_unknown_and_repeated_paragraphs():
    res = score_reading_reorder_paragraphs(ReorderParagraphsPayload([1, 9, 3, 2, 1], [1, 2, 3]))
    # common order 1,3,2 -> pairs (1,3) ok, (1,2) ok, (3,2) wrong
    assert res.meta["common"] == 3
    assert res.meta["pairs"] == 3 and res.meta["correctPairs"] == 2
    assert res.accuracy == pytest.approx(2 / 3)
    assert "2/3" in res.rationale


def test_scorers_tolerate_none_fields_on_dataclasses():
    multi = score_reading_mcq_multiple(MCQMultiplePayload(None, None))  # type: ignore[arg-type]
    assert multi.accuracy == 0.0
    assert multi.meta["tp"] == 0 and multi.meta["fp"] == 0 and multi.meta["correctCount"] == 0

    partial = score_reading_mcq_multiple(MCQMultiplePayload(None, ["A"]))  # type: ignore[arg-type]
    assert partial.accuracy == 0.0 and partial.meta["correctCount"] == 1

    picked = score_reading_mcq_multiple(MCQMultiplePayload(["A"], None))  # type: ignore[arg-type]
    assert picked.accuracy == 0.0 and picked.meta["fp"] == 1

    assert score_reading_mcq_single(MCQSinglePayload(None, "A")).accuracy == 0.0  # type: ignore[arg-type]
    assert score_reading_fill_in_blanks(FillBlanksPayload(None, None)).accuracy == 0.0  # type: ignore[arg-type]
    assert score_reading_reorder_paragraphs(ReorderParagraphsPayload(None, None)).accuracy == 0.0  # type: ignore[arg-type]
