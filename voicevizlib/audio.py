from __future__ import annotations

import numpy as np
import soundfile as sf

from .bars import channel_zero

AUDIO_EXTENSIONS = (".wav", ".flac", ".ogg", ".aif", ".aiff")


def load_recording(filepath: str) -> tuple[np.ndarray, int]:
    """Decode *filepath* and return ``(channel_0_samples, samplerate)``."""
    data, samplerate = sf.read(filepath, dtype="float64", always_2d=True)
    return channel_zero(data), int(samplerate)


def duration_seconds(samples: np.ndarray, samplerate: int) -> float:
    if samplerate <= 0:
        return 0.0
    return len(samples) / float(samplerate)


def block_peak(block: np.ndarray) -> float:
    """Peak |sample| of one capture block (channel 0), in [0, 1]."""
    mono = channel_zero(block)
    if mono.size == 0:
        return 0.0
    return float(min(np.max(np.abs(mono)), 1.0))
