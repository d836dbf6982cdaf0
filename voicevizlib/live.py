"""Live-stream bookkeeping: amplitude stream, pick ring, throttled state machine."""

from __future__ import annotations

import threading
from collections import deque
from typing import Iterable

import numpy as np

from .models import LivePick, LiveState

_PULSE_STEPS = 6


def normalize_amplitude(value: float) -> float:
    """Map a signed source value to [0, 1] (absolute value, clipped)."""
    v = float(value)
    if not np.isfinite(v):
        return 0.0
    return min(abs(v), 1.0)


class AmplitudeStream:
    """Append-only amplitude feed written by the capture collaborator.

    Producers may run on an audio thread; readers only ever take the
    newest value not yet consumed.  The backlog is bounded.
    """

    def __init__(self, maxlen: int = 4096) -> None:
        self._values: deque[float] = deque(maxlen=maxlen)
        self._unconsumed = 0
        self._total = 0
        self._lock = threading.Lock()

    def push(self, value: float) -> None:
        """Append one sample (signed values are normalized)."""
        with self._lock:
            self._values.append(normalize_amplitude(value))
            self._unconsumed = min(self._unconsumed + 1, len(self._values))
            self._total += 1

    def extend(self, values: Iterable[float]) -> None:
        for v in values:
            self.push(v)

    def consume_latest(self) -> float | None:
        """Return the newest unconsumed value and mark the backlog read."""
        with self._lock:
            if self._unconsumed == 0:
                return None
            self._unconsumed = 0
            return self._values[-1]

    def clear(self) -> None:
        with self._lock:
            self._values.clear()
            self._unconsumed = 0
            self._total = 0

    @property
    def total(self) -> int:
        """Number of samples ever pushed since the last clear."""
        return self._total

    def __len__(self) -> int:
        return len(self._values)


class PickRing:
    """Fixed-capacity circular buffer of :class:`LivePick` slots.

    Slots are ordered left-to-right; the rightmost is the current pick.
    ``len(ring)`` always equals the capacity: pushing evicts the oldest
    slot and shifts the rest left by one.
    """

    def __init__(self, capacity: int) -> None:
        self._capacity = max(0, int(capacity))
        self._slots: list[LivePick | None] = [None] * self._capacity
        self._head = 0  # index of the leftmost slot

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return self._capacity

    def push(self, amplitude: float) -> LivePick | None:
        """Append a pick at the right edge, evicting the leftmost."""
        if self._capacity == 0:
            return None
        slot = self._slots[self._head]
        if slot is None:
            slot = LivePick()
            self._slots[self._head] = slot
        slot.amplitude = amplitude
        self._head = (self._head + 1) % self._capacity
        return slot

    def picks(self) -> list[LivePick | None]:
        """Slots left-to-right; ``None`` marks a slot never filled."""
        return self._slots[self._head:] + self._slots[:self._head]

    def amplitudes(self) -> np.ndarray:
        """Slot amplitudes left-to-right (unfilled slots read as 0)."""
        return np.array([p.amplitude if p is not None else 0.0
                         for p in self.picks()], dtype=np.float64)

    @property
    def current(self) -> LivePick | None:
        if self._capacity == 0:
            return None
        return self._slots[(self._head - 1) % self._capacity]

    def resize(self, capacity: int) -> None:
        """Change capacity keeping the newest picks right-aligned."""
        capacity = max(0, int(capacity))
        if capacity == self._capacity:
            return
        ordered = self.picks()
        if capacity < len(ordered):
            ordered = ordered[len(ordered) - capacity:]
        else:
            ordered = [None] * (capacity - len(ordered)) + ordered
        self._slots = ordered
        self._capacity = capacity
        self._head = 0

    def clear(self) -> None:
        self._slots = [None] * self._capacity
        self._head = 0


class LiveStreamState:
    """Per-tick state of the live-stream renderer.

    Owns the state machine (idle / streaming / paused), the frame-skip
    throttle and the pick ring.  :meth:`tick` is called once per
    animation frame and returns True when the surface must be redrawn.
    """

    def __init__(self, speed: int = 3, animate_current_pick: bool = True) -> None:
        self._speed = max(1, int(speed))
        self.animate_current_pick = animate_current_pick
        self._state = LiveState.IDLE
        self._counter = 0
        self._ring: PickRing | None = None
        self._capacity = 0
        self._pulse = 0
        self._accepted = 0

    # -- State machine ------------------------------------------------------

    @property
    def state(self) -> LiveState:
        return self._state

    @property
    def ring(self) -> PickRing | None:
        return self._ring

    @property
    def speed(self) -> int:
        return self._speed

    @speed.setter
    def speed(self, value: int) -> None:
        self._speed = max(1, int(value))

    @property
    def accepted_ticks(self) -> int:
        return self._accepted

    def start(self, capacity: int | None = None) -> bool:
        """Idle → Streaming.  Creates a fresh ring."""
        if self._state is not LiveState.IDLE:
            return False
        if capacity is not None:
            self._capacity = max(0, int(capacity))
        self._ring = PickRing(self._capacity)
        self._counter = 0
        self._pulse = 0
        self._accepted = 0
        self._state = LiveState.STREAMING
        return True

    def pause(self) -> bool:
        if self._state is not LiveState.STREAMING:
            return False
        self._state = LiveState.PAUSED
        return True

    def resume(self) -> bool:
        if self._state is not LiveState.PAUSED:
            return False
        self._state = LiveState.STREAMING
        return True

    def toggle_pause(self) -> bool:
        if self._state is LiveState.STREAMING:
            return self.pause()
        return self.resume()

    def stop(self) -> bool:
        """Any state → Idle.  Discards the ring."""
        changed = self._state is not LiveState.IDLE
        self._state = LiveState.IDLE
        self._ring = None
        self._counter = 0
        return changed

    clear = stop

    # -- Geometry -----------------------------------------------------------

    def set_capacity(self, capacity: int) -> None:
        """Resize the ring to the slot count of a new surface width."""
        self._capacity = max(0, int(capacity))
        if self._ring is not None:
            self._ring.resize(self._capacity)

    def force_next(self) -> None:
        """Make the next :meth:`tick` redraw regardless of the throttle."""
        self._counter = self._speed - 1

    # -- Ticking ------------------------------------------------------------

    def tick(self, stream: AmplitudeStream | None) -> bool:
        """Advance one animation frame.

        The counter increments on every call; only when it reaches
        ``speed`` is a pick appended (newest unconsumed amplitude, or 0)
        and True returned.
        """
        if self._state is not LiveState.STREAMING or self._ring is None:
            return False
        self._counter += 1
        if self._counter < self._speed:
            return False
        self._counter = 0
        value = stream.consume_latest() if stream is not None else None
        self._ring.push(value if value is not None else 0.0)
        self._pulse = (self._pulse + 1) % _PULSE_STEPS
        self._accepted += 1
        return True

    @property
    def emphasis(self) -> float:
        """Opacity for the current pick; cycles every accepted tick."""
        if not self.animate_current_pick:
            return 1.0
        # Triangle wave over _PULSE_STEPS between 0.45 and 1.0
        half = _PULSE_STEPS / 2.0
        phase = abs(self._pulse - half) / half
        return 0.45 + 0.55 * phase

    @property
    def has_data(self) -> bool:
        return self._ring is not None and self._ring.current is not None
