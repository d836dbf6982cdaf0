"""Bar renderers: live scrolling stream and static recording with progress split.

Both paint in device pixels onto the widget's backing surface (a QImage
sized to :class:`SurfaceGeometry`), sharing the same rounded, mirrored
bar geometry.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from PySide6.QtCore import QRectF, Qt
from PySide6.QtGui import QColor, QImage, QPainter

from voicevizlib.config import VisualizerOptions
from voicevizlib.geometry import (
    bar_rect, corner_radius, live_slot_x, played_mask, static_bar_x,
)
from voicevizlib.live import LiveStreamState
from voicevizlib.models import LiveState, PlaybackState, SurfaceGeometry

from ..log import dbg
from ..theme import to_qcolor

# Static bars never collapse below this height so silence reads as a line.
_STATIC_MIN_BAR_H = 1.0


@dataclass
class BarPaintCtx:
    """Colors, rounding and geometry for one paint pass."""
    geometry: SurfaceGeometry
    rounded: float
    background: QColor
    primary: QColor
    secondary: QColor
    fullscreen: bool = False

    @classmethod
    def from_options(cls, geometry: SurfaceGeometry,
                     options: VisualizerOptions) -> "BarPaintCtx":
        return cls(
            geometry=geometry,
            rounded=options.rounded,
            background=to_qcolor(options.background_color),
            primary=to_qcolor(options.main_bar_color),
            secondary=to_qcolor(options.secondary_bar_color),
            fullscreen=options.fullscreen,
        )


def new_surface(geometry: SurfaceGeometry) -> QImage | None:
    """Allocate a transparent backing image in device pixels."""
    if geometry.is_empty:
        return None
    image = QImage(geometry.pixel_width, geometry.pixel_height,
                   QImage.Format_ARGB32_Premultiplied)
    image.fill(Qt.transparent)
    return image


def clear_surface(painter: QPainter, ctx: BarPaintCtx):
    """Wipe the full surface, then fill it with the background color."""
    g = ctx.geometry
    painter.setCompositionMode(QPainter.CompositionMode_Source)
    painter.fillRect(0, 0, g.pixel_width, g.pixel_height, Qt.transparent)
    painter.setCompositionMode(QPainter.CompositionMode_SourceOver)
    if ctx.background.alpha() > 0:
        painter.fillRect(0, 0, g.pixel_width, g.pixel_height, ctx.background)


def paint_bar(painter: QPainter, rect: tuple[float, float, float, float],
              radius: float):
    """Draw one rounded bar with the painter's current brush."""
    x, y, w, h = rect
    if w <= 0 or h <= 0:
        return
    r = min(radius, h / 2.0)
    if r > 0:
        painter.drawRoundedRect(QRectF(x, y, w, h), r, r)
    else:
        painter.drawRect(QRectF(x, y, w, h))


class LiveBarRenderer:
    """Paints the scrolling live bar chart from a :class:`LiveStreamState`.

    The newest pick sits at the right edge in fullscreen mode and at the
    centre otherwise.
    """

    def paint(self, painter: QPainter, ctx: BarPaintCtx,
              live: LiveStreamState) -> bool:
        """Redraw the whole visible ring.  Returns False when nothing was drawn."""
        g = ctx.geometry
        if g.is_empty:
            return False
        ring = live.ring
        if live.state is LiveState.IDLE or ring is None:
            return False

        painter.setRenderHint(QPainter.Antialiasing, True)
        clear_surface(painter, ctx)

        if live.state is LiveState.STREAMING:
            mid = g.pixel_height // 2
            painter.fillRect(0, mid, g.pixel_width, 1, ctx.secondary)

        radius = corner_radius(ctx.rounded, g.bar_width)
        picks = ring.picks()
        capacity = len(picks)
        painter.setPen(Qt.NoPen)
        painter.setBrush(ctx.primary)
        last = capacity - 1
        for slot, pick in enumerate(picks):
            if pick is None or slot == last:
                continue
            x = live_slot_x(slot, capacity, g, ctx.fullscreen)
            rect = bar_rect(x, pick.amplitude, g)
            paint_bar(painter, rect, radius)

        current = picks[last] if capacity else None
        if current is not None:
            color = QColor(ctx.primary)
            if live.animate_current_pick:
                color.setAlphaF(color.alphaF() * live.emphasis)
            painter.setBrush(color)
            x = live_slot_x(last, capacity, g, ctx.fullscreen)
            rect = bar_rect(x, current.amplitude, g)
            paint_bar(painter, rect, radius)
        return True


class StaticBarRenderer:
    """Holds the extracted BarSequence and paints it with a progress split.

    Bars are tagged with the pixel width they were extracted for; a
    sequence that no longer matches the surface is never drawn.
    """

    def __init__(self):
        self._bars: np.ndarray = np.zeros(0, dtype=np.float64)
        self._bars_width: int = 0

    @property
    def bars(self) -> np.ndarray:
        return self._bars

    @property
    def has_bars(self) -> bool:
        return self._bars.size > 0

    def set_bars(self, bars: np.ndarray, pixel_width: int):
        self._bars = np.asarray(bars, dtype=np.float64)
        self._bars_width = int(pixel_width)

    def clear(self):
        self._bars = np.zeros(0, dtype=np.float64)
        self._bars_width = 0

    def matches(self, geometry: SurfaceGeometry) -> bool:
        return self._bars_width == geometry.pixel_width

    def paint(self, painter: QPainter, ctx: BarPaintCtx,
              playback: PlaybackState, *, cleared: bool = False,
              resizing: bool = False) -> bool:
        """Paint background plus bars.  Returns False when the pass was skipped."""
        if cleared:
            self.clear()
            return False
        if resizing:
            dbg("static paint skipped: resize in progress")
            return False
        g = ctx.geometry
        if g.is_empty:
            return False

        painter.setRenderHint(QPainter.Antialiasing, True)
        clear_surface(painter, ctx)
        if not self.has_bars:
            return True
        if not self.matches(g):
            dbg(f"static paint: bars for {self._bars_width}px, "
                f"surface is {g.pixel_width}px")
            return True

        count = len(self._bars)
        played = played_mask(count, g, playback)
        radius = corner_radius(ctx.rounded, g.bar_width)
        painter.setPen(Qt.NoPen)
        for is_played, color in ((True, ctx.primary), (False, ctx.secondary)):
            painter.setBrush(color)
            for i in np.nonzero(played == is_played)[0]:
                rect = bar_rect(static_bar_x(int(i), g), float(self._bars[i]), g,
                                min_height=_STATIC_MIN_BAR_H)
                paint_bar(painter, rect, radius)
        return True


def render_static_image(bars: np.ndarray, geometry: SurfaceGeometry,
                        playback: PlaybackState,
                        options: VisualizerOptions) -> QImage | None:
    """Paint *bars* onto a fresh surface image (used by the CLI)."""
    image = new_surface(geometry)
    if image is None:
        return None
    renderer = StaticBarRenderer()
    renderer.set_bars(bars, geometry.pixel_width)
    painter = QPainter(image)
    try:
        renderer.paint(painter, BarPaintCtx.from_options(geometry, options),
                       playback)
    finally:
        painter.end()
    return image
