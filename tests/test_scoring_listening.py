from __future__ import annotations

import pytest

from pte_core.scoring import (
    UnsupportedTaskError,
    score_item,
    score_listening_write_from_dictation,
    supported_tasks,
)
from pte_core.types import MCQSinglePayload, Section, WriteFromDictationPayload


def _wfd(target: str, user: str):
    return score_listening_write_from_dictation(WriteFromDictationPayload(target, user))


def test_dictation_identical_text_is_perfect():
    res = _wfd("The cat sat on the mat.", "the cat sat on the mat")
    assert res.wer == 0.0
    assert res.accuracy == 1.0
    assert res.score == 90
    assert res.section is Section.LISTENING


def test_dictation_disjoint_single_token():
    res = _wfd("cat", "dog")
    assert res.wer == 1.0
    assert res.accuracy == 0.0
    assert res.score == 0


def test_dictation_one_substitution_scenario():
    res = _wfd("the cat sat", "the cat sit")
    assert res.meta["edits"] == 1 and res.meta["refLen"] == 3
    assert res.wer == pytest.approx(1 / 3)
    assert res.accuracy == pytest.approx(2 / 3)
    assert res.score == 60
    assert res.subscores["wer"] == 60
    assert "WER=0.333" in res.rationale


def test_dictation_empty_target_is_maximal_error():
    res = _wfd("", "anything at all")
    assert res.wer == 1.0
    assert res.accuracy == 0.0


def test_dictation_extra_words_floor_accuracy_at_zero():
    res = _wfd("hello", "hello there general kenobi")
    assert res.wer == pytest.approx(3.0)
    assert res.accuracy == 0.0
    assert res.subscores["wer"] == 0


def test_score_item_accepts_camel_case_mappings_and_aliases():
    res = score_item("READING_MCQ_MULTIPLE", {"selectedOptions": ["A", "C"], "correctOptions": ["A", "C", "E"]})
    assert res.score == 60

    res = score_item("write_from_dictation", {"targetText": "the cat sat", "userText": "the cat sit"})
    assert res.accuracy == pytest.approx(2 / 3)

    res = score_item("reorder-paragraphs", {"user_order": [1, 2], "correct_order": [1, 2]})
    assert res.accuracy == 1.0


def test_score_item_passes_payload_objects_through():
    res = score_item("READING_MCQ_SINGLE", MCQSinglePayload("b", "B"))
    assert res.accuracy == 1.0


def test_score_item_malformed_payload_degrades():
    res = score_item("READING_FILL_IN_BLANKS", {"answers": "not a map", "correct": None})
    assert res.accuracy == 0.0
    res = score_item("LISTENING_WFD", None)
    assert res.wer == 1.0


def test_score_item_unknown_task():
    with pytest.raises(UnsupportedTaskError):
        score_item("SPEAKING_READ_ALOUD", {})
    assert "LISTENING_WFD" in supported_tasks()
