"""Background bar extraction: QThread worker and last-submitted-wins channel."""

from __future__ import annotations

import logging

import numpy as np

from PySide6.QtCore import QObject, QThread, QTimer, Signal, Slot

from voicevizlib.bars import extract_for_request
from voicevizlib.generation import GenerationGate
from voicevizlib.models import ExtractionRequest, ExtractionResult, SurfaceGeometry

from ..log import dbg

log = logging.getLogger(__name__)


class ExtractionWorker(QThread):
    """Runs the Bar Extractor for one request off the main thread.

    The request carries its own read-only copy of the samples, so nothing
    is shared with the GUI thread while the scan runs.
    """

    result = Signal(object)  # ExtractionResult

    def __init__(self, request: ExtractionRequest, parent=None):
        super().__init__(parent)
        self._request = request

    @property
    def generation(self) -> int:
        return self._request.generation

    def run(self):
        req = self._request
        try:
            bars = extract_for_request(req)
            out = ExtractionResult(req.generation, bars, req.pixel_width)
        except Exception as e:
            log.exception("Bar extraction #%d failed", req.generation)
            out = ExtractionResult(req.generation, pixel_width=req.pixel_width,
                                   error=str(e))
        self.result.emit(out)


class BarsComputeChannel(QObject):
    """Submits extraction requests and delivers only the latest result.

    Every :meth:`submit` bumps a generation counter.  Results whose
    generation is older than the latest submission are dropped when they
    arrive, whatever order the workers finish in.  In-flight workers are
    never interrupted.

    Signals:
        result_ready(object): ExtractionResult for the current generation.
        busy_changed(bool):   True while the current generation is pending.
    """

    result_ready = Signal(object)
    busy_changed = Signal(bool)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._gate = GenerationGate()
        self._workers: dict[int, ExtractionWorker] = {}
        self._last_result: ExtractionResult | None = None
        self._pending: int | None = None
        self._available: bool = True

    # ── Public API ──────────────────────────────────────────────────────────

    def submit(self, samples: np.ndarray, geometry: SurfaceGeometry) -> int:
        """Queue an extraction of *samples* for *geometry*; returns its generation."""
        gen = self._gate.next()
        self._set_pending(gen)
        request = ExtractionRequest.build(gen, samples, geometry)
        if not self._available:
            dbg(f"channel unavailable, #{gen} resolves empty")
            empty = ExtractionResult(gen, pixel_width=geometry.pixel_width,
                                     error="compute channel unavailable")
            QTimer.singleShot(0, lambda: self._on_result(empty))
            return gen
        worker = ExtractionWorker(request)
        worker.result.connect(self._on_result)
        worker.finished.connect(self._reap_workers)
        self._workers[gen] = worker
        dbg(f"submit #{gen}: {len(request.samples)} samples, "
            f"{geometry.pixel_width}x{geometry.pixel_height}")
        worker.start()
        return gen

    def invalidate(self):
        """Supersede anything in flight and forget the last result."""
        self._gate.invalidate()
        self._last_result = None
        self._set_pending(None)

    def last_result(self) -> np.ndarray:
        """Bars of the most recent current result, or an empty array."""
        if self._last_result is None:
            return np.zeros(0, dtype=np.float64)
        return self._last_result.bars

    @property
    def latest_generation(self) -> int:
        return self._gate.latest

    @property
    def is_busy(self) -> bool:
        return self._pending is not None

    @property
    def available(self) -> bool:
        return self._available

    def set_available(self, available: bool):
        self._available = available

    def shutdown(self):
        """Stop accepting work and wait for running workers to finish."""
        self._available = False
        self.invalidate()
        for worker in list(self._workers.values()):
            worker.wait()
        self._workers.clear()

    # ── Internal ────────────────────────────────────────────────────────────

    def _set_pending(self, gen: int | None):
        was_busy = self._pending is not None
        self._pending = gen
        if was_busy != (gen is not None):
            self.busy_changed.emit(gen is not None)

    @Slot(object)
    def _on_result(self, result: ExtractionResult):
        if not self._gate.is_current(result.generation):
            dbg(f"dropping stale #{result.generation} "
                f"(latest #{self._gate.latest})")
            return
        if result.error:
            dbg(f"#{result.generation} failed: {result.error}")
        self._last_result = result
        self._set_pending(None)
        self.result_ready.emit(result)

    @Slot()
    def _reap_workers(self):
        for gen, worker in list(self._workers.items()):
            if worker.isFinished():
                del self._workers[gen]
                worker.deleteLater()
