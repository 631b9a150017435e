"""Maps raw accuracy / word-error-rate onto the 0-90 band scale."""
from __future__ import annotations
import math
from typing import Any, Dict, Mapping, Optional

from .types import ScoringResult, Section

BAND_MAX: int = 90
_EMPTY_RATIONALE = "Deterministic score; no rationale supplied."


def _to_float(x: Any) -> Optional[float]:
    try:
        xf = float(x)
    except (TypeError, ValueError):
        return None
    if math.isnan(xf):
        return None
    return xf


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def clamp01(x: Any) -> float:
    xf = _to_float(x)
    if xf is None: return 0.0
    if xf < 0.0: return 0.0
    if xf > 1.0: return 1.0
    return xf


def clamp_to_90(value: Any) -> int:
    v = _to_float(value)
    if v is None: return 0
    if v <= 0: return 0
    if v >= BAND_MAX: return BAND_MAX
    return max(0, min(BAND_MAX, _round_half_up(v)))


def accuracy_to_90(accuracy: Any) -> int:
    return clamp_to_90(clamp01(accuracy) * BAND_MAX)


def wer_to_90(wer: Any) -> int:
    # lower is better; anything at or above 1.0 bottoms out
    w = _to_float(wer)
    if w is None:
        return 0
    return clamp_to_90(max(0.0, 1.0 - max(0.0, w)) * BAND_MAX)


_BANDS: tuple[tuple[int, str], ...] = (
    (84, "Expert (84-90)"),
    (75, "Very Good (75-83)"),
    (65, "Good (65-74)"),
    (50, "Competent (50-64)"),
    (30, "Modest (30-49)"),
    (10, "Limited (10-29)"),
)
_LOWEST_BAND = "Extremely Limited (1-9)"

_OVERALL_FEEDBACK: tuple[tuple[int, str], ...] = (
    (84, "Expert user - Your English is highly proficient"),
    (75, "Very good user - Good command of English with few errors"),
    (65, "Competent user - Generally effective command of English"),
    (50, "Modest user - Partial command of English with frequent mistakes"),
)
_SKILL_FEEDBACK: tuple[tuple[int, str], ...] = (
    (84, "Excellent performance with only minor errors"),
    (75, "Strong performance with good accuracy"),
    (65, "Good performance with some errors"),
    (50, "Partial performance with frequent errors"),
)


def band_descriptor(score: Any) -> str:
    s = clamp_to_90(score)
    for floor_, label in _BANDS:
        if s >= floor_:
            return label
    return _LOWEST_BAND


def score_feedback(score: Any, overall: bool = False) -> str:
    """One-line feedback for a 0-90 score; overall=True uses the user-level wording."""
    s = clamp_to_90(score)
    table = _OVERALL_FEEDBACK if overall else _SKILL_FEEDBACK
    for floor_, text in table:
        if s >= floor_:
            return text
    return "Limited user - Basic understanding of English" if overall else "Limited performance with many errors"


def build_result(
    section: Section,
    accuracy: Any,
    rationale: str,
    meta: Optional[Mapping[str, Any]] = None,
    wer: Any = None,
) -> ScoringResult:
    acc = clamp01(accuracy)
    score = accuracy_to_90(acc)
    subscores: Dict[str, int] = {"accuracy": score, "correctness": score}

    wer_val: Optional[float] = None
    if wer is not None:
        w = _to_float(wer)
        wer_val = max(0.0, w) if w is not None else 1.0
        subscores["wer"] = wer_to_90(wer_val)

    m: Dict[str, Any] = dict(meta or {})
    m.setdefault("provider", "deterministic")

    text = rationale.strip() if isinstance(rationale, str) else ""
    return ScoringResult(
        section=Section(section),
        accuracy=acc,
        score=score,
        rationale=text or _EMPTY_RATIONALE,
        meta=m,
        wer=wer_val,
        subscores=subscores,
        band=band_descriptor(score),
        feedback=score_feedback(score),
    )
