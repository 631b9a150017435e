"""
Single source of truth for exam timing across sections.

Defaults can be overridden through JSON (see config.load_timing_overrides_raw):

    {
      "speaking":  {"read_aloud": {"prepMs": 34000, "answerMs": 42000}},
      "writing":   {"summarize_written_text": {"answerMs": 540000}},
      "reading":   {"sectionMs": 1740000},
      "listening": {"sectionMs": 2400000, "summarize_spoken_text": {"answerMs": 540000}}
    }

The override is parsed into the same shape as the defaults with every field
optional, then merged field by field: present fields win, absent ones keep
the default.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from . import config as cfg
from .types import TimingResult

log = logging.getLogger(__name__)


def ms_seconds(n: float) -> int:
    return int(round(n * 1000))


def ms_minutes(n: float) -> int:
    return int(round(n * 60 * 1000))


SECTIONS: tuple[str, ...] = ("speaking", "writing", "reading", "listening")

SPEAKING_FALLBACK_TYPE = "read_aloud"
WRITING_FALLBACK_TYPE = "write_essay"
UNKNOWN_SECTION_MS: int = ms_minutes(29)

READING_TYPES: frozenset[str] = frozenset({
    "reading_writing_fill_blanks",
    "multiple_choice_single",
    "multiple_choice_multiple",
    "reorder_paragraphs",
    "fill_in_blanks",
})
LISTENING_TYPES: frozenset[str] = frozenset({
    "summarize_spoken_text",
    "multiple_choice_single",
    "multiple_choice_multiple",
    "fill_in_blanks",
    "highlight_correct_summary",
    "select_missing_word",
    "highlight_incorrect_words",
    "write_from_dictation",
})


# ---- Snapshot types ----

@dataclass(frozen=True)
class SpeakingTiming:
    prep_ms: int
    answer_ms: int


@dataclass(frozen=True)
class ListeningTiming:
    section_ms: int
    items: Mapping[str, int]  # self-timed type -> answer_ms


@dataclass(frozen=True)
class TimingConfig:
    speaking: Mapping[str, SpeakingTiming]
    writing: Mapping[str, int]  # type -> answer_ms
    reading_section_ms: int
    listening: ListeningTiming


DEFAULT_TIMING = TimingConfig(
    speaking=MappingProxyType({
        "read_aloud": SpeakingTiming(ms_seconds(35), ms_seconds(40)),
        "repeat_sentence": SpeakingTiming(ms_seconds(1), ms_seconds(15)),  # post-audio prep
        "describe_image": SpeakingTiming(ms_seconds(25), ms_seconds(40)),
        "retell_lecture": SpeakingTiming(ms_seconds(10), ms_seconds(40)),
        "answer_short_question": SpeakingTiming(ms_seconds(3), ms_seconds(10)),
        "respond_to_a_situation": SpeakingTiming(ms_seconds(10), ms_seconds(40)),
        "summarize_group_discussion": SpeakingTiming(ms_seconds(10), ms_seconds(120)),
    }),
    writing=MappingProxyType({
        "summarize_written_text": ms_minutes(10),
        "write_essay": ms_minutes(20),
    }),
    reading_section_ms=ms_minutes(30),
    listening=ListeningTiming(
        section_ms=ms_minutes(43),
        items=MappingProxyType({"summarize_spoken_text": ms_minutes(10)}),
    ),
)


# ---- Override schema (all optional) ----

class _Patch(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ItemTimingPatch(_Patch):
    prep_ms: Optional[int] = Field(None, alias="prepMs", ge=0)
    answer_ms: Optional[int] = Field(None, alias="answerMs", ge=0)


class SectionTimingPatch(_Patch):
    section_ms: Optional[int] = Field(None, alias="sectionMs", ge=0)


class ListeningPatch(SectionTimingPatch):
    items: Dict[str, ItemTimingPatch] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _lift_inline_items(cls, data: Any) -> Any:
        # per-type entries may sit beside sectionMs instead of under "items"
        if not isinstance(data, dict):
            return data
        out: Dict[str, Any] = {}
        nested = data.get("items")
        items: Dict[str, Any] = dict(nested) if isinstance(nested, dict) else {}
        for k, v in data.items():
            if k == "items":
                continue
            if isinstance(v, dict):
                items[k] = v
            else:
                out[k] = v
        out["items"] = items
        return out


class TimingOverrides(_Patch):
    speaking: Dict[str, ItemTimingPatch] = Field(default_factory=dict)
    writing: Dict[str, ItemTimingPatch] = Field(default_factory=dict)
    reading: Optional[SectionTimingPatch] = None
    listening: Optional[ListeningPatch] = None


def _key(s: Any) -> str:
    return str(s or "").strip().lower()


def _merge_speaking(base: Mapping[str, SpeakingTiming], patch: Dict[str, ItemTimingPatch]) -> Mapping[str, SpeakingTiming]:
    out: Dict[str, SpeakingTiming] = dict(base)
    for raw_key, p in patch.items():
        k = _key(raw_key)
        cur = out.get(k)
        if cur is None:
            if p.answer_ms is None:
                log.warning("timing override for new speaking type %r lacks answerMs; skipped", k)
                continue
            cur = SpeakingTiming(prep_ms=0, answer_ms=p.answer_ms)
        if p.prep_ms is not None:
            cur = replace(cur, prep_ms=p.prep_ms)
        if p.answer_ms is not None:
            cur = replace(cur, answer_ms=p.answer_ms)
        out[k] = cur
    return MappingProxyType(out)


def _merge_answers(base: Mapping[str, int], patch: Dict[str, ItemTimingPatch], label: str) -> Mapping[str, int]:
    out: Dict[str, int] = dict(base)
    for raw_key, p in patch.items():
        k = _key(raw_key)
        if p.answer_ms is None:
            if k not in out:
                log.warning("timing override for new %s type %r lacks answerMs; skipped", label, k)
            continue
        out[k] = p.answer_ms
    return MappingProxyType(out)


def merge_timing(base: TimingConfig, overrides: Optional[TimingOverrides]) -> TimingConfig:
    if overrides is None:
        return base
    reading_ms = base.reading_section_ms
    if overrides.reading is not None and overrides.reading.section_ms is not None:
        reading_ms = overrides.reading.section_ms
    listening = base.listening
    if overrides.listening is not None:
        lp = overrides.listening
        listening = ListeningTiming(
            section_ms=lp.section_ms if lp.section_ms is not None else listening.section_ms,
            items=_merge_answers(listening.items, lp.items, "listening"),
        )
    return TimingConfig(
        speaking=_merge_speaking(base.speaking, overrides.speaking),
        writing=_merge_answers(base.writing, overrides.writing, "writing"),
        reading_section_ms=reading_ms,
        listening=listening,
    )


def parse_overrides(raw: Optional[str]) -> Optional[TimingOverrides]:
    """Parse override JSON; a bad payload is logged and ignored."""
    if raw is None or not raw.strip():
        return None
    try:
        return TimingOverrides.model_validate(json.loads(raw))
    except json.JSONDecodeError as e:
        log.warning("[timing] Failed to parse timing overrides JSON; using defaults: %s", e)
    except ValidationError as e:
        log.warning("[timing] Timing overrides do not match schema; using defaults: %s", e)
    return None


def load_timing_config() -> TimingConfig:
    try:
        raw = cfg.load_timing_overrides_raw()
    except (OSError, UnicodeDecodeError) as e:
        log.warning("[timing] Could not read timing overrides file; using defaults: %s", e)
        raw = None
    overrides = parse_overrides(raw)
    if overrides is not None:
        log.debug("[timing] applying overrides: %s", overrides.model_dump(exclude_none=True))
    return merge_timing(DEFAULT_TIMING, overrides)


TIMING: TimingConfig = load_timing_config()
OVERRIDES_ACTIVE: bool = TIMING is not DEFAULT_TIMING


def _fallback(section: str, qtype: Optional[str], msg: str, **fields: Any) -> TimingResult:
    if cfg.LOG_FALLBACKS:
        log.warning("[timing] %s", msg)
    return TimingResult(section=section, question_type=qtype, fallback=True, warning=msg, **fields)


def timing_for(section: Any, question_type: Any = None, *, config: Optional[TimingConfig] = None) -> TimingResult:
    """
    Resolve countdown budgets for an item.
      speaking  -> prep_ms + answer_ms
      writing   -> answer_ms
      reading   -> section_ms
      listening -> answer_ms for a self-timed type, else section_ms
    Never raises: unknown types/sections fall back and are flagged.
    """
    t = config or TIMING
    sec = _key(section)
    key = _key(question_type) or None

    if sec == "speaking":
        hit = t.speaking.get(key) if key else None
        if hit is not None:
            return TimingResult(section=sec, question_type=key, prep_ms=hit.prep_ms, answer_ms=hit.answer_ms)
        f = t.speaking.get(SPEAKING_FALLBACK_TYPE) or DEFAULT_TIMING.speaking[SPEAKING_FALLBACK_TYPE]
        return _fallback(
            sec, key or SPEAKING_FALLBACK_TYPE,
            f"Unknown speaking type {question_type!r}; falling back to {SPEAKING_FALLBACK_TYPE} defaults.",
            prep_ms=f.prep_ms, answer_ms=f.answer_ms,
        )

    if sec == "writing":
        hit_ms = t.writing.get(key) if key else None
        if hit_ms is not None:
            return TimingResult(section=sec, question_type=key, answer_ms=hit_ms)
        f_ms = t.writing.get(WRITING_FALLBACK_TYPE, DEFAULT_TIMING.writing[WRITING_FALLBACK_TYPE])
        return _fallback(
            sec, key or WRITING_FALLBACK_TYPE,
            f"Unknown writing type {question_type!r}; falling back to {WRITING_FALLBACK_TYPE} defaults.",
            answer_ms=f_ms,
        )

    if sec == "reading":
        if key and key not in READING_TYPES:
            return _fallback(
                sec, key, f"Unknown reading type {question_type!r}; using the section budget.",
                section_ms=t.reading_section_ms,
            )
        return TimingResult(section=sec, question_type=key, section_ms=t.reading_section_ms)

    if sec == "listening":
        item_ms = t.listening.items.get(key) if key else None
        if item_ms is not None:
            return TimingResult(section=sec, question_type=key, answer_ms=item_ms)
        if key and key not in LISTENING_TYPES:
            return _fallback(
                sec, key, f"Unknown listening type {question_type!r}; using the section budget.",
                section_ms=t.listening.section_ms,
            )
        return TimingResult(section=sec, question_type=key, section_ms=t.listening.section_ms)

    return _fallback(
        "reading", None,
        f"Unknown section {section!r}; falling back to a short reading budget.",
        section_ms=UNKNOWN_SECTION_MS,
    )


def format_label(section: Any, question_type: Any = None, *, config: Optional[TimingConfig] = None) -> str:
    t = config or TIMING
    sec = _key(section)
    words = _key(question_type).replace("_", " ")
    if sec == "speaking":
        return f"Speaking · {words or 'item'}"
    if sec == "writing":
        return f"Writing · {words or 'item'}"
    if sec == "reading":
        return "Reading Section"
    if sec == "listening":
        if _key(question_type) in t.listening.items:
            return f"Listening · {words.title()}"
        return "Listening Section"
    return "PTE"
