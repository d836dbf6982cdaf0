"""Microphone capture controller using sounddevice."""

from __future__ import annotations

import threading
import time

import numpy as np
import sounddevice as sd

from PySide6.QtCore import QObject, QTimer, Signal, Slot

from voicevizlib.audio import block_peak
from voicevizlib.live import AmplitudeStream

from .log import dbg


class CaptureController(QObject):
    """Records mono audio and feeds block peaks into an :class:`AmplitudeStream`.

    Signals:
        started(): Input stream is open.
        stopped(object, int): Recording finished; (samples, samplerate).
        elapsed_changed(float): Recording clock in seconds (~10fps).
        error(str): Device errors.
    """

    started = Signal()
    stopped = Signal(object, int)
    elapsed_changed = Signal(float)
    error = Signal(str)

    def __init__(self, stream: AmplitudeStream, samplerate: int = 44100,
                 parent=None):
        super().__init__(parent)
        self._amplitudes = stream
        self._samplerate = int(samplerate)
        self._input: sd.InputStream | None = None
        self._blocks: list[np.ndarray] = []
        self._lock = threading.Lock()
        self._paused = False
        self._elapsed = 0.0
        self._resumed_at = 0.0

        self._timer = QTimer(self)
        self._timer.setInterval(100)
        self._timer.timeout.connect(self._on_timer)

    @property
    def is_recording(self) -> bool:
        return self._input is not None

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def samplerate(self) -> int:
        return self._samplerate

    def elapsed(self) -> float:
        if self._input is None or self._paused:
            return self._elapsed
        return self._elapsed + (time.monotonic() - self._resumed_at)

    def start(self):
        if self._input is not None:
            return
        with self._lock:
            self._blocks = []
        self._paused = False
        self._elapsed = 0.0

        blocks = self._blocks
        amplitudes = self._amplitudes
        lock = self._lock

        def callback(indata, frames, time_info, status):
            if status:
                dbg(f"input status: {status}")
            if self._paused:
                return
            block = indata[:, 0].copy()
            with lock:
                blocks.append(block)
            amplitudes.push(block_peak(block))

        try:
            self._input = sd.InputStream(
                samplerate=self._samplerate,
                channels=1,
                dtype="float32",
                callback=callback,
            )
            self._input.start()
        except Exception as e:
            self._input = None
            self.error.emit(str(e))
            return
        self._resumed_at = time.monotonic()
        self._timer.start()
        self.started.emit()

    def toggle_pause(self):
        if self._input is None:
            return
        if self._paused:
            self._resumed_at = time.monotonic()
            self._paused = False
        else:
            self._elapsed = self.elapsed()
            self._paused = True
        self.elapsed_changed.emit(self.elapsed())

    def stop(self):
        """Close the input stream and emit the recorded samples."""
        if self._input is None:
            return
        self._elapsed = self.elapsed()
        self._timer.stop()
        try:
            self._input.stop()
            self._input.close()
        except sd.PortAudioError as e:
            dbg(f"input close failed: {e}")
        self._input = None
        self._paused = False
        with self._lock:
            samples = (np.concatenate(self._blocks).astype(np.float64)
                       if self._blocks else np.zeros(0, dtype=np.float64))
            self._blocks = []
        self.stopped.emit(samples, self._samplerate)

    def discard(self):
        """Stop without emitting a recording."""
        if self._input is not None:
            self._timer.stop()
            try:
                self._input.stop()
                self._input.close()
            except sd.PortAudioError as e:
                dbg(f"input close failed: {e}")
            self._input = None
        self._paused = False
        self._elapsed = 0.0
        with self._lock:
            self._blocks = []

    @Slot()
    def _on_timer(self):
        self.elapsed_changed.emit(self.elapsed())
