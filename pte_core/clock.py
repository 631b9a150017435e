from __future__ import annotations
import math


def format_duration(duration_ms: float) -> str:
    """mm:ss, or hh:mm:ss from one hour up. Negative renders as zero; sub-second remainder is floored."""
    try:
        total = int(math.floor(float(duration_ms) / 1000))
    except (TypeError, ValueError, OverflowError):
        total = 0
    total = max(0, total)
    hours, rem = divmod(total, 3600)
    minutes, seconds = divmod(rem, 60)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


def end_at_from(start_at: float, duration_ms: float) -> float:
    return start_at + max(0, duration_ms)


def drift_ms(server_now: float, client_now: float) -> float:
    # advisory only: positive means the client clock is ahead of the server
    return client_now - server_now
