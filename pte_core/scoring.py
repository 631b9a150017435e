from __future__ import annotations
from typing import Any, Callable, Dict, List, Mapping, Tuple

from .edit_distance import levenshtein
from .normalize import normalize_answer, tokenize_words
from .results import build_result
from .types import (
    FillBlanksPayload,
    MCQMultiplePayload,
    MCQSinglePayload,
    ReorderParagraphsPayload,
    ScoringResult,
    Section,
    WriteFromDictationPayload,
)

PROVIDER = "deterministic"


class UnsupportedTaskError(ValueError):
    """Raised by score_item for a task id no scorer handles."""


def score_reading_mcq_single(p: MCQSinglePayload) -> ScoringResult:
    hit = normalize_answer(p.selected_option) == normalize_answer(p.correct_option)
    rationale = (
        "Selected option matches the correct answer."
        if hit else
        "Selected option does not match the correct answer."
    )
    return build_result(
        Section.READING,
        1.0 if hit else 0.0,
        rationale,
        {"provider": PROVIDER, "task": "READING_MCQ_SINGLE"},
    )


def score_reading_mcq_multiple(p: MCQMultiplePayload) -> ScoringResult:
    """
    Partial credit with penalty: accuracy = clamp(0, 1, (TP - FP) / |Correct|).
    Selecting everything scores 0 whenever wrong picks match right ones.
    """
    sel = {normalize_answer(s) for s in (p.selected_options or [])}
    cor = {normalize_answer(c) for c in (p.correct_options or [])}
    tp = len(sel & cor)
    fp = len(sel - cor)
    denom = max(1, len(cor))
    acc = min(1.0, max(0.0, (tp - fp) / denom))
    rationale = (
        f"Partial credit: TP={tp}, FP={fp}, Correct={len(cor)}; "
        f"accuracy=max(0,(TP-FP)/|Correct|)={acc:.3f}"
    )
    return build_result(
        Section.READING,
        acc,
        rationale,
        {"provider": PROVIDER, "task": "READING_MCQ_MULTIPLE", "tp": tp, "fp": fp, "correctCount": len(cor)},
    )


def score_reading_fill_in_blanks(p: FillBlanksPayload) -> ScoringResult:
    correct_map = {str(k): v for k, v in (p.correct or {}).items()}
    answers = {str(k): v for k, v in (p.answers or {}).items()}
    total = max(1, len(correct_map))
    right = 0
    wrong: List[Dict[str, Any]] = []
    for key, expected in correct_map.items():
        user = answers.get(key)
        if normalize_answer(user) == normalize_answer(expected):
            right += 1
        else:
            wrong.append({"key": key, "user": user, "expected": expected})
    return build_result(
        Section.READING,
        right / total,
        f"Filled correctly {right}/{total} blanks.",
        {"provider": PROVIDER, "task": "READING_FILL_IN_BLANKS", "total": total, "correct": right, "wrong": wrong},
    )


def _common_in_user_order(user: List[Any], pos: Mapping[Any, int]) -> List[Any]:
    seen = set()
    out: List[Any] = []
    for pid in user:
        if pid in pos and pid not in seen:
            seen.add(pid); out.append(pid)
    return out


def score_reading_reorder_paragraphs(p: ReorderParagraphsPayload) -> ScoringResult:
    """Pairwise order agreement over paragraphs present in both orders."""
    pos: Dict[Any, int] = {}
    for i, pid in enumerate(p.correct_order or []):
        pos.setdefault(pid, i)
    common = _common_in_user_order(list(p.user_order or []), pos)
    n = len(common)
    meta: Dict[str, Any] = {"provider": PROVIDER, "task": "READING_REORDER", "common": n}

    if n <= 1:
        meta.update(pairs=0, correctPairs=0)
        rationale = "Single paragraph is trivially correct." if n == 1 else "No paragraphs provided."
        return build_result(Section.READING, 1.0 if n == 1 else 0.0, rationale, meta)

    agree = 0
    pairs = 0
    for i in range(n):
        for j in range(i + 1, n):
            pairs += 1
            if pos[common[i]] < pos[common[j]]:
                agree += 1
    meta.update(pairs=pairs, correctPairs=agree)
    return build_result(
        Section.READING,
        agree / pairs,
        f"Pairwise order accuracy: {agree}/{pairs} correctly ordered pairs.",
        meta,
    )


def score_listening_write_from_dictation(p: WriteFromDictationPayload) -> ScoringResult:
    ref = tokenize_words(p.target_text)
    hyp = tokenize_words(p.user_text)
    edits = levenshtein(ref, hyp)
    wer = edits / len(ref) if ref else 1.0
    acc = max(0.0, 1.0 - wer)
    return build_result(
        Section.LISTENING,
        acc,
        f"WER={wer:.3f}; accuracy={acc:.3f} (after normalization, higher is better).",
        {"provider": PROVIDER, "task": "LISTENING_WFD", "refLen": len(ref), "hypLen": len(hyp), "edits": edits},
        wer=wer,
    )


_SCORERS: Dict[str, Tuple[Callable[[Any], ScoringResult], type]] = {
    "READING_MCQ_SINGLE": (score_reading_mcq_single, MCQSinglePayload),
    "READING_MCQ_MULTIPLE": (score_reading_mcq_multiple, MCQMultiplePayload),
    "READING_FILL_IN_BLANKS": (score_reading_fill_in_blanks, FillBlanksPayload),
    "READING_REORDER": (score_reading_reorder_paragraphs, ReorderParagraphsPayload),
    "LISTENING_WFD": (score_listening_write_from_dictation, WriteFromDictationPayload),
}

_ALIASES: Dict[str, str] = {
    "MULTIPLE_CHOICE_SINGLE": "READING_MCQ_SINGLE",
    "MULTIPLE_CHOICE_MULTIPLE": "READING_MCQ_MULTIPLE",
    "FILL_IN_BLANKS": "READING_FILL_IN_BLANKS",
    "READING_WRITING_FILL_BLANKS": "READING_FILL_IN_BLANKS",
    "REORDER_PARAGRAPHS": "READING_REORDER",
    "WRITE_FROM_DICTATION": "LISTENING_WFD",
}


def supported_tasks() -> List[str]:
    return list(_SCORERS)


def resolve_task(task: str) -> str:
    t = str(task or "").strip().upper().replace("-", "_")
    t = _ALIASES.get(t, t)
    if t not in _SCORERS:
        raise UnsupportedTaskError(f"unsupported task: {task!r}")
    return t


def score_item(task: str, payload: Any) -> ScoringResult:
    """
    Dispatch a payload to its scorer.
    payload may be the matching dataclass or a mapping (camelCase or snake_case keys).
    """
    fn, payload_cls = _SCORERS[resolve_task(task)]
    if isinstance(payload, payload_cls):
        return fn(payload)
    if isinstance(payload, Mapping):
        return fn(payload_cls.from_dict(payload))
    return fn(payload_cls.from_dict({}))
