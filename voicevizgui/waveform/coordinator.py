"""Geometry/resize coordination: debounced recompute and re-extraction."""

from __future__ import annotations

from typing import Callable

import numpy as np

from PySide6.QtCore import QObject, Signal, Slot

from voicevizlib.config import VisualizerOptions
from voicevizlib.geometry import compute_geometry
from voicevizlib.models import ExtractionResult, SurfaceGeometry

from ..log import dbg
from .compute import BarsComputeChannel
from .debounce import Debouncer

# (logical_width, logical_height, device_pixel_ratio, viewport_width)
LayoutBox = tuple[float, float, float, float]


class ResizeCoordinator(QObject):
    """Keeps :class:`SurfaceGeometry` and extracted bars in step with the host.

    Resize signals are debounced; once the quiet period ends the layout
    box is re-read, a fresh geometry is built and, when a recording is
    loaded, a new extraction is submitted for it.  Between the first
    resize signal and the matching extraction result the coordinator
    reports ``resizing`` / ``processing`` so renderers hold off.

    Signals:
        geometry_changed(object): new SurfaceGeometry.
        resizing_changed(bool)
        processing_changed(bool)
        bars_ready(object):       ExtractionResult matching the current geometry.
    """

    geometry_changed = Signal(object)
    resizing_changed = Signal(bool)
    processing_changed = Signal(bool)
    bars_ready = Signal(object)

    def __init__(self, layout_source: Callable[[], LayoutBox | None],
                 options: VisualizerOptions, channel: BarsComputeChannel,
                 parent=None):
        super().__init__(parent)
        self._layout_source = layout_source
        self._options = options
        self._channel = channel
        self._geometry: SurfaceGeometry | None = None
        self._samples: np.ndarray | None = None
        self._resizing: bool = False
        self._processing: bool = False
        self._debouncer = Debouncer(options.resize_debounce_ms,
                                    self.recompute, parent=self)
        self._channel.result_ready.connect(self._on_result)

    # ── State ──────────────────────────────────────────────────────────────

    @property
    def geometry(self) -> SurfaceGeometry | None:
        return self._geometry

    @property
    def resizing(self) -> bool:
        return self._resizing

    @property
    def processing(self) -> bool:
        return self._processing

    @property
    def has_recording(self) -> bool:
        return self._samples is not None

    def set_options(self, options: VisualizerOptions):
        self._options = options
        self._debouncer.set_interval(options.resize_debounce_ms)
        self.recompute()

    # ── Inputs ─────────────────────────────────────────────────────────────

    def notify_resize(self):
        """A resize/DPR change happened; recompute after the quiet period."""
        if self._samples is not None:
            self._set_resizing(True)
            self._set_processing(True)
        self._debouncer.trigger()

    def set_recording(self, samples: np.ndarray | None):
        """Attach (or detach with None) the decoded recording and extract it."""
        self._samples = samples
        if samples is None:
            self._channel.invalidate()
            self._set_processing(False)
            return
        self._submit()

    # ── Recompute ──────────────────────────────────────────────────────────

    @Slot()
    def recompute(self):
        """Rebuild geometry from the current layout box (debounce target)."""
        box = self._layout_source()
        if box is None:
            dbg("recompute skipped: surface not mounted")
            self._set_resizing(False)
            return
        width, height, dpr, viewport = box
        opts = self._options
        geometry = compute_geometry(
            width, height, dpr,
            bar_width=opts.bar_width, gap=opts.gap,
            viewport_width=viewport, breakpoint=opts.mobile_breakpoint,
        )
        changed = geometry != self._geometry
        self._geometry = geometry
        self._set_resizing(False)
        if changed:
            dbg(f"geometry {geometry.pixel_width}x{geometry.pixel_height} "
                f"bar={geometry.bar_width} gap={geometry.gap} "
                f"dpr={geometry.device_pixel_ratio:g}")
            self.geometry_changed.emit(geometry)
        if self._samples is not None and (changed or self._processing):
            self._submit()
        elif self._samples is None:
            self._set_processing(False)

    def flush(self):
        """Run a pending debounced recompute immediately."""
        self._debouncer.flush()

    # ── Internal ───────────────────────────────────────────────────────────

    def _submit(self):
        geometry = self._geometry
        if geometry is None or geometry.is_empty or self._samples is None:
            return
        if self._options.only_recording:
            return
        self._set_processing(True)
        self._channel.submit(self._samples, geometry)

    @Slot(object)
    def _on_result(self, result: ExtractionResult):
        geometry = self._geometry
        if geometry is None or result.pixel_width != geometry.pixel_width:
            dbg(f"result #{result.generation} is for {result.pixel_width}px, "
                "waiting for a matching one")
            return
        self._set_processing(False)
        self.bars_ready.emit(result)

    def _set_resizing(self, value: bool):
        if value != self._resizing:
            self._resizing = value
            self.resizing_changed.emit(value)

    def _set_processing(self, value: bool):
        if value != self._processing:
            self._processing = value
            self.processing_changed.emit(value)
