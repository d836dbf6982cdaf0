"""Bar Extractor: reduce a sample buffer to peak-normalized bar heights."""

from __future__ import annotations

import numpy as np

from .models import ExtractionRequest


def bar_count(pixel_width: int, bar_width: int, gap: int) -> int:
    """Number of bars that fit *pixel_width* at the given pitch.

    ``floor(pixel_width / (bar_width + gap))``, at least 1 for a non-empty
    surface and 0 when the width is 0.
    """
    pitch = bar_width + gap
    if pixel_width <= 0 or pitch <= 0:
        return 0
    return max(1, int(pixel_width) // int(pitch))


def channel_zero(data: np.ndarray | None) -> np.ndarray:
    """Return channel 0 of a (samples,) or (samples, channels) array."""
    if data is None:
        return np.zeros(0, dtype=np.float64)
    arr = np.asarray(data)
    if arr.ndim == 0:
        return arr.reshape(1).astype(np.float64)
    if arr.ndim > 1:
        if arr.shape[1] == 0:
            return np.zeros(0, dtype=np.float64)
        arr = arr[:, 0]
    return np.ascontiguousarray(arr, dtype=np.float64)


def chunk_peaks(samples: np.ndarray, count: int) -> np.ndarray:
    """Maximum absolute sample value in each of *count* contiguous chunks.

    Chunk *i* spans ``[i*n//count, (i+1)*n//count)``.  When the buffer is
    shorter than *count* some chunks are empty and yield 0.
    """
    peaks = np.zeros(count, dtype=np.float64)
    n = len(samples)
    if count <= 0 or n == 0:
        return peaks
    mags = np.abs(np.nan_to_num(samples, nan=0.0, posinf=0.0, neginf=0.0))
    idx = np.arange(count, dtype=np.int64)
    starts = idx * n // count
    ends = (idx + 1) * n // count
    valid = ends > starts
    if not valid.any():
        return peaks
    # Consecutive chunks are contiguous, so reducing over the valid starts
    # alone covers exactly [start, end) for each non-empty chunk.
    peaks[valid] = np.maximum.reduceat(mags, starts[valid])
    return peaks


def extract_bars(samples: np.ndarray, pixel_width: int, pixel_height: int,
                 bar_width: int, gap: int) -> np.ndarray:
    """Map a sample buffer to a BarSequence sized to the drawing surface.

    Each bar is the peak ``|sample|`` of its chunk, normalized by the
    global maximum so the tallest bar is exactly 1.0.  An all-zero or
    empty buffer yields all-zero bars.  Amplitudes are independent of
    *pixel_height*; renderers scale them to half the surface height.
    """
    count = bar_count(pixel_width, bar_width, gap)
    if count == 0:
        return np.zeros(0, dtype=np.float64)
    peaks = chunk_peaks(channel_zero(samples), count)
    top = float(peaks.max()) if peaks.size else 0.0
    if top <= 0.0:
        return np.zeros(count, dtype=np.float64)
    return np.clip(peaks / top, 0.0, 1.0)


def extract_for_request(request: ExtractionRequest) -> np.ndarray:
    """Run :func:`extract_bars` with the parameters frozen in *request*."""
    return extract_bars(
        request.samples,
        request.pixel_width,
        request.pixel_height,
        request.bar_width,
        request.gap,
    )
