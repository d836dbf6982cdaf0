"""Debug tracing for the visualizer, switched on with ``VV_DEBUG=1``.

``dbg()`` writes ``[HH:MM:SS.mmm Origin] message`` lines to stderr, where
*Origin* is the class (or module) that called it.  ``timed()`` wraps a
block and reports how long it took.  Both are silent unless tracing is
enabled, either through the environment or :func:`set_enabled`.
"""

from __future__ import annotations

import os
import sys
import time
from contextlib import contextmanager

_enabled: bool | None = None


def set_enabled(flag: bool | None) -> None:
    """Force tracing on/off; ``None`` re-reads ``VV_DEBUG`` on next use."""
    global _enabled
    _enabled = flag


def enabled() -> bool:
    global _enabled
    if _enabled is None:
        _enabled = os.environ.get("VV_DEBUG", "").strip().lower() in ("1", "true")
    return _enabled


def _origin(depth: int) -> str:
    try:
        frame = sys._getframe(depth + 1)
    except ValueError:
        return "?"
    owner = frame.f_locals.get("self")
    if owner is not None:
        return type(owner).__name__
    owner = frame.f_locals.get("cls")
    if isinstance(owner, type):
        return owner.__name__
    return frame.f_globals.get("__name__", "?").rsplit(".", 1)[-1]


def _emit(origin: str, msg: str) -> None:
    now = time.time()
    stamp = time.strftime("%H:%M:%S", time.localtime(now))
    print(f"[{stamp}.{int(now % 1 * 1000):03d} {origin}] {msg}",
          file=sys.stderr, flush=True)


def dbg(msg: str) -> None:
    if enabled():
        _emit(_origin(1), msg)


@contextmanager
def timed(label: str):
    """Trace the wall time spent inside the ``with`` block."""
    if not enabled():
        yield
        return
    origin = _origin(2)
    t0 = time.perf_counter()
    try:
        yield
    finally:
        _emit(origin, f"{label}: {(time.perf_counter() - t0) * 1000:.1f} ms")
