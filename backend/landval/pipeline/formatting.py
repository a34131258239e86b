# landval/pipeline/formatting.py

DEFAULT_NOMINAL_DURATION_SECONDS = 45.0
DEFAULT_PROGRESS_CAP = 0.95
MAX_DOTS = 3


def format_elapsed(seconds: float) -> str:
    """`65 -> "1m 5s"`; the minutes part is dropped when zero."""
    total = max(0, int(seconds))
    mins, secs = divmod(total, 60)
    return f"{mins}m {secs}s" if mins > 0 else f"{secs}s"


def progress_fraction(
    elapsed_seconds: float,
    nominal_seconds: float = DEFAULT_NOMINAL_DURATION_SECONDS,
    cap: float = DEFAULT_PROGRESS_CAP,
) -> float:
    if nominal_seconds <= 0:
        return cap
    return min(max(0.0, elapsed_seconds) / nominal_seconds, cap)


def estimated_remaining_seconds(
    elapsed_seconds: float,
    nominal_seconds: float = DEFAULT_NOMINAL_DURATION_SECONDS,
) -> int:
    return max(0, int(nominal_seconds - elapsed_seconds))


def render_dots(count: int) -> str:
    return "." * max(0, min(count, MAX_DOTS))
