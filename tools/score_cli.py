# tools/score_cli.py
from __future__ import annotations
import argparse, json, logging, pathlib, sys
from typing import Any, Dict, List, Optional

from pte_core.config import LOG_LEVEL, LOG_LEVELS
from pte_core.clock import format_duration
from pte_core.scoring import UnsupportedTaskError, score_item, supported_tasks
from pte_core.timing import format_label, timing_for


def _read_payload(raw: str) -> Dict[str, Any]:
    # "@path/to/file.json" reads from disk, "-" from stdin
    if raw == "-":
        text = sys.stdin.read()
    elif raw.startswith("@"):
        text = pathlib.Path(raw[1:]).read_text(encoding="utf-8")
    else:
        text = raw
    data = json.loads(text or "{}")
    if not isinstance(data, dict):
        raise ValueError("payload must be a JSON object")
    return data


def cmd_score(a: argparse.Namespace) -> int:
    try:
        payload = _read_payload(a.payload)
    except (OSError, ValueError) as e:
        print(f"bad payload: {e}", file=sys.stderr)
        return 2
    try:
        res = score_item(a.task, payload)
    except UnsupportedTaskError as e:
        print(f"{e}; supported: {', '.join(supported_tasks())}", file=sys.stderr)
        return 2
    print(json.dumps(res.to_dict(), indent=2, ensure_ascii=False))
    return 0


def cmd_timing(a: argparse.Namespace) -> int:
    res = timing_for(a.section, a.type)
    d = res.to_dict()
    d["label"] = format_label(res.section, res.question_type)
    d["display"] = format_duration(res.duration_ms)
    print(json.dumps(d, indent=2, ensure_ascii=False))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Deterministic PTE scoring and timing lookups")
    ap.add_argument("--log-level", default=LOG_LEVEL, type=str.upper, choices=LOG_LEVELS)
    sub = ap.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("score", help="score one payload")
    s.add_argument("task", help="task id or question type, e.g. READING_MCQ_MULTIPLE")
    s.add_argument("--payload", default="{}", help="JSON object, @file.json or - for stdin")
    s.set_defaults(fn=cmd_score)

    tm = sub.add_parser("timing", help="resolve timing for a section/type")
    tm.add_argument("section", choices=["speaking", "writing", "reading", "listening"])
    tm.add_argument("--type", default=None)
    tm.set_defaults(fn=cmd_timing)

    a = ap.parse_args(argv)
    logging.basicConfig(level=a.log_level, format="[%(levelname)s] %(message)s")
    return a.fn(a)


if __name__ == "__main__":
    sys.exit(main())
