"""Answer canonicalization shared by every deterministic scorer."""
from __future__ import annotations
import re
import unicodedata
from typing import Any, List

_WS_RX = re.compile(r"\s+")


def _map_char(ch: str) -> str:
    if ch == "'" or ch.isspace():
        return ch
    cat = unicodedata.category(ch)
    if cat[0] in ("L", "N"):
        return ch
    if cat[0] == "M":
        return ""  # combining mark left over from decomposition
    return " "


def normalize_answer(text: Any) -> str:
    """
    Lower-case, NFKD-decompose, drop combining marks, blank out everything
    else that is not a letter, digit, whitespace or apostrophe, then collapse
    whitespace. "Résumé!" and "resume" compare equal.
    """
    if text is None:
        return ""
    s = text if isinstance(text, str) else str(text)
    if not s:
        return ""
    s = unicodedata.normalize("NFKD", s.lower()).lower()
    s = "".join(_map_char(ch) for ch in s)
    return _WS_RX.sub(" ", s).strip()


def tokenize_words(text: Any) -> List[str]:
    norm = normalize_answer(text)
    if not norm:
        return []
    return [t for t in norm.split(" ") if t]
