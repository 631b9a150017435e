from __future__ import annotations
from fastapi import FastAPI, HTTPException, Body, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
import typing as t

# ---- Core imports ----
from pte_core.config import CORS_ORIGINS, DRIFT_TOLERANCE_MS
from pte_core.scoring import UnsupportedTaskError, score_item, supported_tasks
from pte_core.timing import OVERRIDES_ACTIVE, format_label, timing_for
from pte_core.clock import drift_ms, end_at_from, format_duration

app = FastAPI(title="PTE Scoring API")


@app.get("/")
def root():
    return {"status": "ok", "service": "pte-scoring-api"}


app.add_middleware(
    CORSMiddleware,
    allow_origins=list(CORS_ORIGINS),
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)

# ---- Schemas ----
class ScoreReq(BaseModel):
    task: str                                  # e.g. "READING_MCQ_MULTIPLE" | "write_from_dictation"
    payload: dict[str, t.Any] = Field(default_factory=dict)

class WindowReq(BaseModel):
    section: str
    type: str | None = None
    start_at: float                            # epoch ms, server-issued

class DriftReq(BaseModel):
    server_now: float
    client_now: float

# ---- Helpers ----
def _timing_payload(section: str, qtype: str | None) -> dict[str, t.Any]:
    res = timing_for(section, qtype)
    body = res.to_dict()
    body["label"] = format_label(res.section, res.question_type)
    display: dict[str, str] = {}
    if res.prep_ms is not None:
        display["prep"] = format_duration(res.prep_ms)
    if res.answer_ms is not None:
        display["answer"] = format_duration(res.answer_ms)
    if res.section_ms is not None:
        display["section"] = format_duration(res.section_ms)
    body["display"] = display
    return body

# ---- Health ----
@app.get("/health")
def health():
    return {
        "status": "ok",
        "tasks": supported_tasks(),
        "timing_overrides": OVERRIDES_ACTIVE,
    }

# ---- Scoring ----
@app.post("/score")
def score(req: ScoreReq = Body(...)):
    try:
        res = score_item(req.task, req.payload)
    except UnsupportedTaskError as e:
        raise HTTPException(422, str(e))
    return res.to_dict()

# ---- Timing ----
@app.get("/timing/{section}")
def timing(section: str, type: str | None = Query(None, description="Question type, e.g. read_aloud")):
    return _timing_payload(section, type)

@app.post("/timing/window")
def timing_window(req: WindowReq):
    res = timing_for(req.section, req.type)
    duration = res.duration_ms
    return {
        "section": res.section,
        "type": res.question_type,
        "start_at": req.start_at,
        "duration_ms": duration,
        "end_at": end_at_from(req.start_at, duration),
        "display": format_duration(duration),
        "fallback": res.fallback,
    }

@app.post("/clock/drift")
def clock_drift(req: DriftReq):
    d = drift_ms(req.server_now, req.client_now)
    return {
        "drift_ms": d,
        "client_ahead": d > 0,
        "within_tolerance": abs(d) <= DRIFT_TOLERANCE_MS,
        "tolerance_ms": DRIFT_TOLERANCE_MS,
    }
