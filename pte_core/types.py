from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class Section(str, Enum):
    READING = "READING"
    LISTENING = "LISTENING"
    SPEAKING = "SPEAKING"
    WRITING = "WRITING"


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for k in keys:
        if k in data and data[k] is not None:
            return data[k]
    return default


def _as_list(v: Any) -> List[Any]:
    if v is None:
        return []
    if isinstance(v, (list, tuple, set, frozenset)):
        return list(v)
    return [v]


def _as_map(v: Any) -> Dict[str, Any]:
    if not isinstance(v, Mapping):
        return {}
    return {str(k): val for k, val in v.items()}


def _as_text(v: Any) -> str:
    return "" if v is None else str(v)


@dataclass
class MCQSinglePayload:
    selected_option: str = ""
    correct_option: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MCQSinglePayload":
        return cls(
            selected_option=_as_text(_pick(data, "selectedOption", "selected_option")),
            correct_option=_as_text(_pick(data, "correctOption", "correct_option")),
        )


@dataclass
class MCQMultiplePayload:
    selected_options: List[str] = field(default_factory=list)
    correct_options: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MCQMultiplePayload":
        return cls(
            selected_options=_as_list(_pick(data, "selectedOptions", "selected_options")),
            correct_options=_as_list(_pick(data, "correctOptions", "correct_options")),
        )


@dataclass
class FillBlanksPayload:
    # blank index -> text; int and str keys are treated alike
    answers: Dict[str, str] = field(default_factory=dict)
    correct: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FillBlanksPayload":
        return cls(
            answers=_as_map(_pick(data, "answers", "userAnswers", "user_answers")),
            correct=_as_map(_pick(data, "correct", "correctAnswers", "correct_answers")),
        )


@dataclass
class ReorderParagraphsPayload:
    user_order: List[int] = field(default_factory=list)
    correct_order: List[int] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ReorderParagraphsPayload":
        return cls(
            user_order=_as_list(_pick(data, "userOrder", "user_order")),
            correct_order=_as_list(_pick(data, "correctOrder", "correct_order")),
        )


@dataclass
class WriteFromDictationPayload:
    target_text: str = ""
    user_text: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WriteFromDictationPayload":
        return cls(
            target_text=_as_text(_pick(data, "targetText", "target_text")),
            user_text=_as_text(_pick(data, "userText", "user_text")),
        )


@dataclass(frozen=True)
class ScoringResult:
    section: Section
    accuracy: float
    score: int
    rationale: str
    meta: Dict[str, Any] = field(default_factory=dict)
    wer: Optional[float] = None
    subscores: Dict[str, int] = field(default_factory=dict)
    band: str = ""
    feedback: str = ""

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "section": self.section.value,
            "accuracy": self.accuracy,
            "score": self.score,
            "rationale": self.rationale,
            "subscores": dict(self.subscores),
            "band": self.band,
            "feedback": self.feedback,
            "meta": dict(self.meta),
        }
        if self.wer is not None:
            out["wer"] = self.wer
        return out


@dataclass(frozen=True)
class TimingResult:
    """
    One resolved timer. Exactly one shape is populated:
      - prep_ms + answer_ms (speaking)
      - answer_ms (writing, self-timed listening item)
      - section_ms (reading, other listening, unknown section)
    fallback/warning mark a resolution that did not hit a configured entry.
    """
    section: str
    question_type: Optional[str] = None
    prep_ms: Optional[int] = None
    answer_ms: Optional[int] = None
    section_ms: Optional[int] = None
    fallback: bool = False
    warning: Optional[str] = None

    @property
    def is_section_timer(self) -> bool:
        return self.section_ms is not None

    @property
    def duration_ms(self) -> int:
        """Countdown length for the item: answer window, else the section budget."""
        if self.answer_ms is not None:
            return int(self.answer_ms)
        return int(self.section_ms or 0)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"section": self.section, "type": self.question_type}
        if self.section_ms is not None:
            out["sectionMs"] = self.section_ms
        else:
            if self.prep_ms is not None:
                out["prepMs"] = self.prep_ms
            out["answerMs"] = self.answer_ms
        out["fallback"] = self.fallback
        if self.warning:
            out["warning"] = self.warning
        return out
