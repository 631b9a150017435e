from __future__ import annotations
import os, pathlib


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return tuple(part.strip() for part in raw.split(",") if part.strip())


TIMING_OVERRIDES_PUBLIC_ENV: str = "PTE_TIMING_OVERRIDES_PUBLIC"
TIMING_OVERRIDES_ENV: str = "PTE_TIMING_OVERRIDES"
TIMING_OVERRIDES_FILE_ENV: str = "PTE_TIMING_OVERRIDES_FILE"

DRIFT_TOLERANCE_MS: int = 2000
CORS_ORIGINS: tuple[str, ...] = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
)
LOG_LEVEL: str = "INFO"
LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FALLBACKS: bool = True

# // env overrides for staging/ops; defaults remain conservative.
DRIFT_TOLERANCE_MS = _env_int("DRIFT_TOLERANCE_MS", DRIFT_TOLERANCE_MS)
CORS_ORIGINS = _env_list("CORS_ORIGINS", CORS_ORIGINS)
LOG_LEVEL = (os.getenv("LOG_LEVEL") or LOG_LEVEL).strip().upper()
if LOG_LEVEL not in LOG_LEVELS:
    LOG_LEVEL = "INFO"
LOG_FALLBACKS = _env_bool("LOG_TIMING_FALLBACKS", LOG_FALLBACKS)


def load_timing_overrides_raw() -> str | None:
    """
    Raw override JSON, read at call time.
    Inline env values win over the file; the public variable wins over the server one.
    """
    e = os.environ
    for name in (TIMING_OVERRIDES_PUBLIC_ENV, TIMING_OVERRIDES_ENV):
        raw = e.get(name)
        if raw and raw.strip():
            return raw
    path = e.get(TIMING_OVERRIDES_FILE_ENV)
    if not path:
        return None
    p = pathlib.Path(path)
    if not p.exists():
        return None
    return p.read_text(encoding="utf-8")
