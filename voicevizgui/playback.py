"""Audio playback controller using sounddevice."""

from __future__ import annotations

import numpy as np
import sounddevice as sd

from PySide6.QtCore import QObject, QTimer, Signal, Slot

from .log import dbg


class PlaybackController(QObject):
    """Plays a mono recording and reports the playback clock in seconds.

    Signals:
        position_changed(float): Emitted ~30fps with the current time.
        finished(): Emitted when playback reaches the end of the audio.
        error(str): Emitted on device errors.
    """

    position_changed = Signal(float)
    finished = Signal()
    error = Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._stream: sd.OutputStream | None = None
        self._start_sample: int = 0
        self._frame_count: list[int] = [0]
        self._samples: np.ndarray | None = None
        self._samplerate: int = 44100

        self._timer = QTimer(self)
        self._timer.setInterval(30)
        self._timer.timeout.connect(self._on_timer)

    @property
    def is_playing(self) -> bool:
        return self._stream is not None and self._stream.active

    @property
    def duration(self) -> float:
        if self._samples is None or self._samplerate <= 0:
            return 0.0
        return len(self._samples) / self._samplerate

    def load(self, samples: np.ndarray | None, samplerate: int):
        """Attach the recording to play; stops any running playback."""
        self.stop()
        self._samples = samples
        self._samplerate = int(samplerate)
        self._start_sample = 0
        self._frame_count = [0]

    def play(self, start_time: float | None = None):
        """Start playback from *start_time* seconds (default: current position)."""
        if self._samples is None or self._samples.size == 0:
            return
        start = self.current_sample() if start_time is None \
            else int(max(0.0, start_time) * self._samplerate)
        self.stop()

        if start >= len(self._samples):
            start = 0

        audio = self._samples.reshape(-1, 1).astype(np.float32, copy=False)
        self._start_sample = start
        self._frame_count = [0]
        play_data = audio[start:]

        frame_count = self._frame_count

        def callback(outdata, frames, time_info, status):
            pos = frame_count[0]
            end = pos + frames
            if end <= len(play_data):
                outdata[:] = play_data[pos:end]
                frame_count[0] = end
            else:
                remaining = len(play_data) - pos
                if remaining > 0:
                    outdata[:remaining] = play_data[pos:]
                outdata[remaining:] = 0
                frame_count[0] = len(play_data)
                raise sd.CallbackStop()

        try:
            self._stream = sd.OutputStream(
                samplerate=self._samplerate,
                channels=1,
                dtype="float32",
                callback=callback,
                finished_callback=self._on_finished_sd,
            )
            self._stream.start()
            self._timer.start()
        except Exception as e:
            self._stream = None
            self.error.emit(str(e))

    def pause(self):
        """Stop the stream but keep the position."""
        pos = self.current_sample()
        self.stop()
        self._start_sample = pos
        self._frame_count[0] = 0

    def stop(self):
        self._timer.stop()
        if self._stream is not None:
            try:
                self._stream.stop()
                self._stream.close()
            except sd.PortAudioError as e:
                dbg(f"stream close failed: {e}")
            self._stream = None

    def seek(self, seconds: float):
        """Move the play position; restarts the stream when playing."""
        was_playing = self.is_playing
        self.stop()
        self._start_sample = int(max(0.0, seconds) * self._samplerate)
        self._frame_count = [0]
        if was_playing:
            self.play(seconds)
        else:
            self.position_changed.emit(self.current_time())

    def current_sample(self) -> int:
        return self._start_sample + self._frame_count[0]

    def current_time(self) -> float:
        if self._samplerate <= 0:
            return 0.0
        return self.current_sample() / self._samplerate

    def _on_finished_sd(self):
        """Called by sounddevice from the audio thread when playback ends."""
        QTimer.singleShot(0, self._on_finished_main)

    @Slot()
    def _on_finished_main(self):
        self._timer.stop()
        if self._stream is None:
            return
        self._stream = None
        if self._samples is not None and self.current_sample() >= len(self._samples):
            self._start_sample = 0
            self._frame_count = [0]
            self.position_changed.emit(0.0)
            self.finished.emit()

    @Slot()
    def _on_timer(self):
        if self._stream is not None:
            self.position_changed.emit(self.current_time())
