"""Main application window for the VoiceViz demo."""

from __future__ import annotations

import logging
import os
import sys

from PySide6.QtCore import QThread, Qt, Signal, Slot
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QApplication,
    QFileDialog,
    QLabel,
    QMainWindow,
    QMessageBox,
    QStatusBar,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

from voicevizlib import __version__
from voicevizlib.audio import AUDIO_EXTENSIONS, load_recording
from voicevizlib.config import ConfigError, VisualizerOptions
from voicevizlib.utils import format_recording_time, format_time

from .capture import CaptureController
from .log import timed
from .playback import PlaybackController
from .settings import load_config
from .theme import COLORS, apply_dark_theme
from .waveform import VoiceVisualizerWidget

log = logging.getLogger(__name__)


class RecordingLoadWorker(QThread):
    """Decode an audio file off the UI thread.

    Emits ``loaded`` with ``(samples, samplerate)`` on success, or
    ``error`` with a message.
    """

    loaded = Signal(object, int)
    error = Signal(str)

    def __init__(self, filepath: str, parent=None):
        super().__init__(parent)
        self._filepath = filepath

    def run(self):
        try:
            samples, sr = load_recording(self._filepath)
            self.loaded.emit(samples, sr)
        except Exception as exc:
            self.error.emit(str(exc))


class VoiceVizWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("VoiceViz")

        screen = QApplication.primaryScreen()
        if screen:
            avail = screen.availableGeometry()
            w = min(900, avail.width() - 40)
            h = min(320, avail.height() - 40)
            self.resize(w, h)
            self.move(
                avail.x() + (avail.width() - w) // 2,
                avail.y() + (avail.height() - h) // 2,
            )
        else:
            self.resize(900, 320)

        self._options = _load_options()
        self._samples = None
        self._samplerate = 0
        self._load_worker: RecordingLoadWorker | None = None

        self._visualizer = VoiceVisualizerWidget(self._options)
        self._capture = CaptureController(self._visualizer.amplitude_stream,
                                          parent=self)
        self._playback = PlaybackController(self)

        self._init_ui()
        self._connect()
        self._update_actions()
        apply_dark_theme(self)

    # ── UI ─────────────────────────────────────────────────────────────────

    def _init_ui(self):
        toolbar = QToolBar("Transport")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        self._record_action = QAction("Record", self)
        self._record_action.setShortcut(QKeySequence("R"))
        self._pause_action = QAction("Pause", self)
        self._pause_action.setShortcut(QKeySequence("P"))
        self._stop_action = QAction("Stop", self)
        self._play_action = QAction("Play", self)
        self._play_action.setShortcut(QKeySequence(Qt.Key_Space))
        self._clear_action = QAction("Clear", self)
        self._open_action = QAction("Open...", self)
        self._open_action.setShortcut(QKeySequence.Open)
        for action in (self._record_action, self._pause_action,
                       self._stop_action, self._play_action,
                       self._clear_action):
            toolbar.addAction(action)
        toolbar.addSeparator()
        toolbar.addAction(self._open_action)

        central = QWidget()
        central.setObjectName("visualizerHost")
        layout = QVBoxLayout(central)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.addWidget(self._visualizer)
        self.setCentralWidget(central)

        status = QStatusBar()
        self._time_label = QLabel("00:00")
        self._hover_label = QLabel("")
        status.addWidget(self._time_label)
        status.addPermanentWidget(self._hover_label)
        self.setStatusBar(status)

    def _connect(self):
        self._record_action.triggered.connect(self._on_record)
        self._pause_action.triggered.connect(self._on_pause)
        self._stop_action.triggered.connect(self._on_stop)
        self._play_action.triggered.connect(self._on_play)
        self._clear_action.triggered.connect(self._on_clear)
        self._open_action.triggered.connect(self._on_open)

        self._capture.started.connect(self._visualizer.start_recording)
        self._capture.stopped.connect(self._on_captured)
        self._capture.elapsed_changed.connect(self._on_elapsed)
        self._capture.error.connect(self._on_device_error)

        self._playback.position_changed.connect(self._on_position)
        self._playback.finished.connect(self._update_actions)
        self._playback.error.connect(self._on_device_error)

        self._visualizer.seek_requested.connect(self._playback.seek)
        self._visualizer.hover_time_changed.connect(
            lambda t: self._hover_label.setText(format_time(t)))

    def _update_actions(self):
        recording = self._capture.is_recording
        has_audio = self._samples is not None and len(self._samples) > 0
        self._record_action.setEnabled(not recording)
        self._pause_action.setEnabled(recording)
        self._pause_action.setText("Resume" if self._capture.is_paused else "Pause")
        self._stop_action.setEnabled(recording or self._playback.is_playing)
        self._play_action.setEnabled(has_audio and not recording)
        self._play_action.setText("Pause" if self._playback.is_playing else "Play")
        self._clear_action.setEnabled(has_audio or recording)
        self._open_action.setEnabled(not recording)

    # ── Transport ──────────────────────────────────────────────────────────

    @Slot()
    def _on_record(self):
        self._playback.stop()
        self._set_recording(None, 0)
        self._visualizer.clear()
        self._capture.start()
        self._update_actions()

    @Slot()
    def _on_pause(self):
        self._capture.toggle_pause()
        self._visualizer.toggle_pause_resume()
        self._update_actions()

    @Slot()
    def _on_stop(self):
        if self._capture.is_recording:
            self._visualizer.stop_recording()
            self._visualizer.set_processing(True)
            self._capture.stop()
        else:
            self._playback.stop()
        self._update_actions()

    @Slot()
    def _on_play(self):
        if self._playback.is_playing:
            self._playback.pause()
        else:
            self._playback.play()
        self._update_actions()

    @Slot()
    def _on_clear(self):
        self._time_label.setStyleSheet("")
        self._capture.discard()
        self._playback.stop()
        self._set_recording(None, 0)
        self._visualizer.clear()
        self._time_label.setText("00:00")
        self._update_actions()

    @Slot()
    def _on_open(self):
        exts = " ".join(f"*{e}" for e in AUDIO_EXTENSIONS)
        path, _ = QFileDialog.getOpenFileName(
            self, "Open Recording", "", f"Audio files ({exts})")
        if not path:
            return
        self._playback.stop()
        self._visualizer.clear()
        self._visualizer.set_processing(True)
        worker = RecordingLoadWorker(path, self)
        worker.loaded.connect(self._on_captured)
        worker.error.connect(self._on_load_error)
        self._load_worker = worker
        worker.start()
        self.statusBar().showMessage(os.path.basename(path), 3000)

    # ── Collaborator callbacks ─────────────────────────────────────────────

    @Slot(object, int)
    def _on_captured(self, samples, samplerate: int):
        self._time_label.setStyleSheet("")
        self._visualizer.set_processing(False)
        self._set_recording(samples, samplerate)
        duration = len(samples) / samplerate if samplerate > 0 else 0.0
        self._visualizer.set_recording(samples, duration)
        self._time_label.setText(f"00:00 / {format_time(duration)}")
        self._update_actions()

    def _set_recording(self, samples, samplerate: int):
        self._samples = samples
        self._samplerate = samplerate
        self._playback.load(samples, samplerate if samplerate > 0 else 44100)

    @Slot(float)
    def _on_elapsed(self, seconds: float):
        self._time_label.setText(format_recording_time(seconds))
        self._time_label.setStyleSheet(f"color: {COLORS['recording']};")

    @Slot(float)
    def _on_position(self, seconds: float):
        duration = self._playback.duration
        self._visualizer.set_playback(seconds, duration)
        self._time_label.setText(f"{format_time(seconds)} / {format_time(duration)}")

    @Slot(str)
    def _on_device_error(self, message: str):
        log.warning("Audio device error: %s", message)
        self._update_actions()
        QMessageBox.warning(self, "Audio device", message)

    @Slot(str)
    def _on_load_error(self, message: str):
        self._visualizer.set_processing(False)
        QMessageBox.warning(self, "Open Recording", message)

    def closeEvent(self, event):
        self._capture.discard()
        self._playback.stop()
        if self._load_worker is not None:
            self._load_worker.wait()
        self._visualizer.shutdown()
        super().closeEvent(event)


def _load_options() -> VisualizerOptions:
    config = load_config()
    try:
        return VisualizerOptions.from_config(config)
    except ConfigError as e:
        log.warning("Falling back to default visualizer options: %s", e)
        return VisualizerOptions()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main():
    with timed("startup"):
        app = QApplication(sys.argv)
        app.setStyle("Fusion")
        app.setApplicationName("VoiceViz")
        app.setApplicationVersion(__version__)

        with timed("VoiceVizWindow created"):
            window = VoiceVizWindow()
        window.show()

    sys.exit(app.exec())
