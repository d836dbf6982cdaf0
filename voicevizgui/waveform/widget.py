"""Voice visualizer widget: live bars while recording, static bars afterwards."""

from __future__ import annotations

import numpy as np

from PySide6.QtCore import QEvent, QRectF, Qt, QTimer, Signal, Slot
from PySide6.QtGui import QColor, QFont, QPainter, QPen
from PySide6.QtWidgets import QWidget

from voicevizlib.config import VisualizerOptions
from voicevizlib.geometry import hover_time, live_capacity, seek_time, time_to_x
from voicevizlib.live import AmplitudeStream, LiveStreamState
from voicevizlib.models import ExtractionResult, LiveState, PlaybackState, SurfaceGeometry
from voicevizlib.utils import format_time

from ..log import dbg
from ..theme import COLORS, to_qcolor
from .compute import BarsComputeChannel
from .coordinator import ResizeCoordinator
from .renderer import (
    BarPaintCtx, LiveBarRenderer, StaticBarRenderer, clear_surface, new_surface,
)

# Labels flip to the left of their indicator within this many px of the edge.
_LABEL_FLIP_PX = 70


class VoiceVisualizerWidget(QWidget):
    """Draws the live recording stream and the recorded waveform.

    Collaborators feed it through :attr:`amplitude_stream` (capture),
    :meth:`set_recording` (decoded buffer) and :meth:`set_playback`
    (playback clock), and receive pointer results through the
    ``seek_requested`` / ``hover_time_changed`` signals.
    """

    seek_requested = Signal(float)       # seconds
    hover_time_changed = Signal(float)   # seconds
    processing_changed = Signal(bool)

    def __init__(self, options: VisualizerOptions | None = None, parent=None):
        super().__init__(parent)
        self._options = options or VisualizerOptions()
        self.amplitude_stream = AmplitudeStream()
        self._live = LiveStreamState(self._options.speed,
                                     self._options.animate_current_pick)
        self._live_renderer = LiveBarRenderer()
        self._static_renderer = StaticBarRenderer()
        self._channel = BarsComputeChannel(self)
        self._coordinator = ResizeCoordinator(
            self._layout_box, self._options, self._channel, parent=self)
        self._coordinator.geometry_changed.connect(self._on_geometry_changed)
        self._coordinator.bars_ready.connect(self._on_bars_ready)
        self._coordinator.resizing_changed.connect(self._on_resizing_changed)
        self._coordinator.processing_changed.connect(self._on_processing_changed)
        # Surface / recording state
        self._surface = None
        self._samples: np.ndarray | None = None
        self._playback = PlaybackState()
        self._cleared: bool = True
        self._external_processing: bool = False
        # Pointer
        self._hover_x: float = -1.0
        self._hovered: bool = False
        # Animation frames
        self._frame_timer = QTimer(self)
        self._frame_timer.setInterval(self._options.frame_interval_ms)
        self._frame_timer.timeout.connect(self._on_frame)
        self._screen_hooked = False
        self.setMinimumHeight(60)
        self.setMouseTracking(True)

    # ── Read-only state ────────────────────────────────────────────────────

    @property
    def options(self) -> VisualizerOptions:
        return self._options

    @property
    def geometry_info(self) -> SurfaceGeometry | None:
        return self._coordinator.geometry

    @property
    def live_state(self) -> LiveState:
        return self._live.state

    @property
    def live(self) -> LiveStreamState:
        return self._live

    @property
    def bars(self) -> np.ndarray:
        return self._static_renderer.bars

    @property
    def channel(self) -> BarsComputeChannel:
        return self._channel

    @property
    def coordinator(self) -> ResizeCoordinator:
        return self._coordinator

    @property
    def surface(self):
        return self._surface

    @property
    def is_cleared(self) -> bool:
        return self._cleared

    @property
    def is_processing(self) -> bool:
        return self._coordinator.processing or self._external_processing

    @property
    def has_recording(self) -> bool:
        return self._samples is not None

    @property
    def is_narrow(self) -> bool:
        g = self._coordinator.geometry
        return g is not None and g.viewport_width < self._options.mobile_breakpoint

    # ── Transport signals ──────────────────────────────────────────────────

    def start_recording(self):
        """Begin a live stream; discards any previous recording."""
        if self._live.state is not LiveState.IDLE:
            dbg(f"start ignored in {self._live.state.value}")
            return
        self._cleared = False
        self._samples = None
        self._static_renderer.clear()
        self._coordinator.set_recording(None)
        self.amplitude_stream.clear()
        self._live.start(self._live_capacity())
        self._live.force_next()
        self._frame_timer.start()

    def toggle_pause_resume(self):
        if not self._live.toggle_pause():
            dbg(f"pause/resume ignored in {self._live.state.value}")
        self._repaint_surface()

    def stop_recording(self):
        """End the live stream.  The recorded buffer arrives via set_recording."""
        self._frame_timer.stop()
        self._live.stop()
        self._repaint_surface()

    def clear(self):
        """Drop everything drawn; the widget returns to its cleared state."""
        self._frame_timer.stop()
        self._live.clear()
        self._cleared = True
        self._samples = None
        self._playback = PlaybackState()
        self._coordinator.set_recording(None)
        self._static_renderer.clear()
        self.amplitude_stream.clear()
        self._repaint_surface()

    # ── Collaborator inputs ────────────────────────────────────────────────

    def set_recording(self, samples: np.ndarray | None, duration: float | None = None):
        """A decoded recording became available (channel 0 samples)."""
        if samples is None or self._live.state is not LiveState.IDLE:
            return
        self._cleared = False
        if duration is not None:
            self._playback = PlaybackState(0.0, float(duration))
        if self._options.only_recording:
            self._samples = None
            self._static_renderer.clear()
            self._repaint_surface()
            return
        self._samples = np.asarray(samples)
        self._static_renderer.clear()
        self._repaint_surface()
        self._coordinator.set_recording(self._samples)

    def set_playback(self, current_time: float, duration: float):
        self.set_playback_state(PlaybackState(current_time, duration))

    def set_playback_state(self, playback: PlaybackState):
        if playback == self._playback:
            return
        self._playback = playback
        if self._live.state is LiveState.IDLE:
            self._repaint_surface()

    def set_processing(self, processing: bool):
        """Collaborator-side processing flag (e.g. decoding in progress)."""
        self._external_processing = processing
        self.processing_changed.emit(self.is_processing)
        self.update()

    def set_options(self, options: VisualizerOptions):
        self._options = options
        self._live.speed = options.speed
        self._live.animate_current_pick = options.animate_current_pick
        self._frame_timer.setInterval(options.frame_interval_ms)
        self._coordinator.set_options(options)
        self._live.set_capacity(self._live_capacity())
        self._repaint_surface()

    def shutdown(self):
        """Stop timers and wait for background extraction to finish."""
        self._frame_timer.stop()
        self._channel.shutdown()

    # ── Coordinator callbacks ──────────────────────────────────────────────

    @Slot(object)
    def _on_geometry_changed(self, geometry: SurfaceGeometry):
        self._surface = new_surface(geometry)
        self._live.set_capacity(self._live_capacity())
        self._live.force_next()
        self._repaint_surface()

    @Slot(object)
    def _on_bars_ready(self, result: ExtractionResult):
        if self._cleared or self._samples is None:
            return
        self._static_renderer.set_bars(result.bars, result.pixel_width)
        self._repaint_surface()

    @Slot(bool)
    def _on_resizing_changed(self, resizing: bool):
        self.update()

    @Slot(bool)
    def _on_processing_changed(self, processing: bool):
        self.processing_changed.emit(self.is_processing)
        if processing:
            self._repaint_surface()
        self.update()

    # ── Surface painting ───────────────────────────────────────────────────

    def _live_capacity(self) -> int:
        g = self._coordinator.geometry
        if g is None:
            return 0
        return live_capacity(g, self._options.fullscreen)

    def _paint_ctx(self) -> BarPaintCtx | None:
        g = self._coordinator.geometry
        if g is None or self._surface is None:
            return None
        return BarPaintCtx.from_options(g, self._options)

    def _repaint_surface(self):
        """Redraw the backing surface for the current mode."""
        ctx = self._paint_ctx()
        if ctx is None:
            return
        painter = QPainter(self._surface)
        try:
            if self._live.state is not LiveState.IDLE:
                self._live_renderer.paint(painter, ctx, self._live)
            elif self._options.only_recording or self._cleared:
                self._static_renderer.paint(painter, ctx, self._playback,
                                            cleared=True)
                clear_surface(painter, ctx)
            elif self.is_processing:
                clear_surface(painter, ctx)
            else:
                self._static_renderer.paint(painter, ctx, self._playback,
                                            resizing=self._coordinator.resizing)
        finally:
            painter.end()
        self.update()

    @Slot()
    def _on_frame(self):
        if not self._live.tick(self.amplitude_stream):
            return
        ctx = self._paint_ctx()
        if ctx is None:
            return
        painter = QPainter(self._surface)
        try:
            self._live_renderer.paint(painter, ctx, self._live)
        finally:
            painter.end()
        self.update()

    # ── Layout box ─────────────────────────────────────────────────────────

    def _layout_box(self):
        if not self.isVisible() and (self.width() <= 0 or self.height() <= 0):
            return None
        top = self.window()
        viewport = top.width() if top is not None else self.width()
        return (float(self.width()), float(self.height()),
                float(self.devicePixelRatioF()), float(viewport))

    # ── paintEvent ─────────────────────────────────────────────────────────

    def paintEvent(self, event):
        w = self.width()
        h = self.height()
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)

        if self._surface is not None and not self._coordinator.resizing:
            painter.drawImage(QRectF(0, 0, w, h), self._surface)

        main = to_qcolor(self._options.main_bar_color)
        if self.is_processing and self._options.processing_text_shown:
            painter.setPen(QPen(main))
            painter.drawText(self.rect(), Qt.AlignCenter, "Processing Audio...")
            painter.end()
            return

        if self._show_recorded_overlays():
            duration = self._playback.duration
            if self._options.progress_indicator_shown and duration > 0:
                x = time_to_x(self._playback.current_time, w, duration)
                self._draw_indicator(painter, x, h,
                                     format_time(self._playback.current_time),
                                     QColor(COLORS["indicator"]))
            if (self._options.hover_indicator_shown and self._hovered
                    and self._hover_x >= 0 and not self.is_narrow
                    and not self.is_processing):
                t = hover_time(self._hover_x, w, duration)
                self._draw_indicator(painter, self._hover_x, h, format_time(t),
                                     QColor(COLORS["hover"]))
        painter.end()

    def _show_recorded_overlays(self) -> bool:
        return (not self._options.only_recording
                and self._samples is not None
                and self._live.state is LiveState.IDLE
                and not self._coordinator.resizing)

    def _draw_indicator(self, painter: QPainter, x: float, h: int,
                        label: str, color: QColor):
        painter.setPen(QPen(color, 1))
        painter.drawLine(int(x), 0, int(x), h)
        painter.setFont(QFont("Consolas", 8))
        fm = painter.fontMetrics()
        tw = fm.horizontalAdvance(label)
        if self.width() - x < _LABEL_FLIP_PX:
            lx = x - 4 - tw
        else:
            lx = x + 4
        painter.drawText(int(lx), fm.ascent() + 2, label)

    # ── Qt event handlers ──────────────────────────────────────────────────

    def resizeEvent(self, event):
        self._coordinator.notify_resize()
        super().resizeEvent(event)

    def showEvent(self, event):
        super().showEvent(event)
        handle = self.window().windowHandle()
        if handle is not None and not self._screen_hooked:
            handle.screenChanged.connect(lambda _s: self._coordinator.notify_resize())
            self._screen_hooked = True
        if self._coordinator.geometry is None:
            self._coordinator.recompute()

    def changeEvent(self, event):
        dpr_change = getattr(QEvent, "DevicePixelRatioChange", None)
        if dpr_change is not None and event.type() == dpr_change:
            self._coordinator.notify_resize()
        super().changeEvent(event)

    def mouseMoveEvent(self, event):
        self._hover_x = float(event.position().x())
        self._hovered = True
        if self._show_recorded_overlays() and self._playback.duration > 0:
            self.hover_time_changed.emit(
                hover_time(self._hover_x, self.width(), self._playback.duration))
        self.update()

    def enterEvent(self, event):
        self._hovered = True
        super().enterEvent(event)

    def leaveEvent(self, event):
        self._hovered = False
        self._hover_x = -1.0
        self.update()
        super().leaveEvent(event)

    def mousePressEvent(self, event):
        if event.button() != Qt.LeftButton:
            return
        if not self._show_recorded_overlays() or self._playback.duration <= 0:
            return
        t = seek_time(event.position().x(), self.width(), self._playback.duration)
        self.seek_requested.emit(t)
