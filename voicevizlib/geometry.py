"""Surface geometry, pixel/time mapping, and shared bar rectangle math."""

from __future__ import annotations

import math

import numpy as np

from .bars import bar_count
from .models import PlaybackState, SurfaceGeometry

MOBILE_BREAKPOINT = 768


def round_half_up(value: float) -> int:
    """Round to the nearest int, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def even_pixel_height(logical_height: float, device_pixel_ratio: float) -> int:
    """Device-pixel height truncated down to an even integer."""
    raw = max(0.0, logical_height * device_pixel_ratio)
    return int(raw / 2) * 2


def effective_bar_width(bar_width: float, gap: float, viewport_width: float,
                        breakpoint: int = MOBILE_BREAKPOINT) -> int:
    """Bar width with the narrow-viewport bump (+1px when gap > 0)."""
    bw = int(bar_width)
    if viewport_width < breakpoint and int(gap) > 0:
        bw += 1
    return bw


def compute_geometry(logical_width: float, logical_height: float,
                     device_pixel_ratio: float, *,
                     bar_width: float, gap: float,
                     viewport_width: float,
                     breakpoint: int = MOBILE_BREAKPOINT) -> SurfaceGeometry:
    """Build a fresh :class:`SurfaceGeometry` from a layout box and DPR."""
    dpr = device_pixel_ratio if device_pixel_ratio > 0 else 1.0
    return SurfaceGeometry(
        pixel_width=max(0, round_half_up(logical_width * dpr)),
        pixel_height=even_pixel_height(logical_height, dpr),
        bar_width=effective_bar_width(bar_width, gap, viewport_width, breakpoint),
        gap=max(0, int(gap)),
        device_pixel_ratio=dpr,
        logical_width=float(logical_width),
        logical_height=float(logical_height),
        viewport_width=float(viewport_width),
    )


# ---------------------------------------------------------------------------
# Pointer ↔ time
# ---------------------------------------------------------------------------

def x_to_time(x: float, surface_width: float, duration: float) -> float:
    """Map a horizontal offset to a playback time, clamped to [0, duration]."""
    if surface_width <= 0 or duration <= 0:
        return 0.0
    t = duration * (x / surface_width)
    return max(0.0, min(t, duration))


def seek_time(click_x: float, surface_width: float, duration: float) -> float:
    """Seek target for a click at *click_x*."""
    return x_to_time(click_x, surface_width, duration)


def hover_time(hover_x: float, surface_width: float, duration: float) -> float:
    """Time under the pointer at *hover_x*."""
    return x_to_time(hover_x, surface_width, duration)


def time_to_x(t: float, surface_width: float, duration: float) -> float:
    """Inverse of :func:`x_to_time` (0 when duration is 0)."""
    if duration <= 0:
        return 0.0
    return t / duration * surface_width


# ---------------------------------------------------------------------------
# Progress split
# ---------------------------------------------------------------------------

def bar_boundary_times(count: int, geometry: SurfaceGeometry,
                       duration: float) -> np.ndarray:
    """Time at the left edge of each bar: ``i * pitch / pixel_width * duration``."""
    if count <= 0 or geometry.pixel_width <= 0:
        return np.zeros(max(count, 0), dtype=np.float64)
    idx = np.arange(count, dtype=np.float64)
    return idx * geometry.pitch / geometry.pixel_width * duration


def played_mask(count: int, geometry: SurfaceGeometry,
                playback: PlaybackState) -> np.ndarray:
    """Boolean mask of bars considered played at ``playback.current_time``.

    A bar is played when its boundary time is ``<= current_time``.  Nothing
    is played while ``current_time`` is 0 or the duration is 0.
    """
    if count <= 0:
        return np.zeros(0, dtype=bool)
    if playback.duration <= 0 or playback.current_time <= 0:
        return np.zeros(count, dtype=bool)
    times = bar_boundary_times(count, geometry, playback.duration)
    return times <= playback.current_time


# ---------------------------------------------------------------------------
# Bar rectangles
# ---------------------------------------------------------------------------

def corner_radius(rounded: float, bar_width: int) -> float:
    """Corner rounding clamped to half the bar width."""
    return max(0.0, min(float(rounded), bar_width / 2.0))


def bar_rect(x: float, amplitude: float, geometry: SurfaceGeometry, *,
             min_height: float = 0.0) -> tuple[float, float, float, float]:
    """Rectangle ``(x, y, w, h)`` of a bar mirrored about the centre line.

    Height is ``amplitude * pixel_height / 2`` above and below the centre.
    """
    half = geometry.pixel_height / 2.0
    amp = max(0.0, min(float(amplitude), 1.0))
    h = max(amp * half * 2.0, min_height)
    h = min(h, float(geometry.pixel_height))
    return float(x), half - h / 2.0, float(geometry.bar_width), h


def static_bar_x(index: int, geometry: SurfaceGeometry) -> float:
    """Left edge of static bar *index*."""
    return float(index * geometry.pitch)


def live_span(geometry: SurfaceGeometry, fullscreen: bool = True) -> int:
    """Right edge of the live stream: the full width, or the centre."""
    if fullscreen:
        return geometry.pixel_width
    return geometry.pixel_width // 2


def live_capacity(geometry: SurfaceGeometry, fullscreen: bool = True) -> int:
    """Number of live slots that fit left of :func:`live_span`."""
    return bar_count(live_span(geometry, fullscreen), geometry.bar_width,
                     geometry.gap)


def live_slot_x(slot: int, capacity: int, geometry: SurfaceGeometry,
                fullscreen: bool = True) -> float:
    """Left edge of live slot *slot* (0 = leftmost).

    The last slot ends flush with :func:`live_span`.
    """
    right = live_span(geometry, fullscreen)
    return float(right - (capacity - slot) * geometry.pitch + geometry.gap)
