"""Time formatting helpers shared by the GUI and the CLI."""

from __future__ import annotations


def _split(seconds: float) -> tuple[int, int, int]:
    total = int(max(0.0, seconds))
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    return h, m, s


def format_time(seconds: float) -> str:
    """Format seconds as mm:ss, or hh:mm:ss beyond one hour."""
    h, m, s = _split(seconds)
    if h > 0:
        return f"{h:02d}:{m:02d}:{s:02d}"
    return f"{m:02d}:{s:02d}"


def format_recording_time(seconds: float) -> str:
    """Running clock shown while capturing."""
    return format_time(seconds)


def format_duration(seconds: float) -> str:
    """Duration label with one decimal for sub-minute recordings."""
    if 0 < seconds < 60:
        return f"{seconds:.1f}s"
    return format_time(seconds)
