from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import numpy as np


class LiveState(Enum):
    """Live-stream renderer states."""
    IDLE = "idle"
    STREAMING = "streaming"
    PAUSED = "paused"


@dataclass(frozen=True)
class SurfaceGeometry:
    """Pixel geometry of the drawing surface.

    Rebuilt as a whole on every resize; never mutated in place.

    Attributes:
        pixel_width:        Device-pixel width, ``round(logical_width * dpr)``.
        pixel_height:       Device-pixel height, rounded down to an even int.
        bar_width:          Bar width in device pixels (mobile bump applied).
        gap:                Gap between bars in device pixels.
        device_pixel_ratio: Logical-to-device scale factor.
        logical_width:      Container layout width.
        logical_height:     Container layout height.
        viewport_width:     Host viewport width (drives the mobile heuristic).
    """
    pixel_width: int
    pixel_height: int
    bar_width: int
    gap: int
    device_pixel_ratio: float = 1.0
    logical_width: float = 0.0
    logical_height: float = 0.0
    viewport_width: float = 0.0

    @property
    def pitch(self) -> int:
        return self.bar_width + self.gap

    @property
    def slot_count(self) -> int:
        from .bars import bar_count
        return bar_count(self.pixel_width, self.bar_width, self.gap)

    @property
    def is_empty(self) -> bool:
        return self.pixel_width <= 0 or self.pixel_height <= 0


@dataclass(frozen=True)
class PlaybackState:
    """Playback clock snapshot supplied by the playback collaborator."""
    current_time: float = 0.0
    duration: float = 0.0

    @property
    def progress(self) -> float:
        if self.duration <= 0:
            return 0.0
        return max(0.0, min(self.current_time / self.duration, 1.0))


@dataclass
class LivePick:
    """One live bar slot.  Mutated in place by the ring."""
    amplitude: float = 0.0


@dataclass(frozen=True)
class ExtractionRequest:
    """Everything the Bar Extractor needs, frozen for hand-off to a worker."""
    generation: int
    samples: np.ndarray
    pixel_width: int
    pixel_height: int
    bar_width: int
    gap: int

    @classmethod
    def build(cls, generation: int, samples: np.ndarray,
              geometry: SurfaceGeometry) -> "ExtractionRequest":
        """Snapshot channel 0 of *samples* into a read-only copy bound to *geometry*."""
        from .bars import channel_zero
        data = np.array(channel_zero(samples), dtype=np.float64, copy=True)
        data.setflags(write=False)
        return cls(
            generation=generation,
            samples=data,
            pixel_width=geometry.pixel_width,
            pixel_height=geometry.pixel_height,
            bar_width=geometry.bar_width,
            gap=geometry.gap,
        )


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of one extraction.  ``bars`` is empty on failure."""
    generation: int
    bars: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.float64))
    pixel_width: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
