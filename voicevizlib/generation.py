"""Generation counter for last-submitted-wins result handling."""

from __future__ import annotations

import threading


class GenerationGate:
    """Hands out monotonically increasing request ids and judges staleness.

    A result is current only if its id equals the most recently issued
    one; anything older was superseded and must be dropped on arrival.
    """

    def __init__(self) -> None:
        self._latest = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            self._latest += 1
            return self._latest

    def invalidate(self) -> None:
        """Supersede whatever is in flight without issuing a new request."""
        self.next()

    @property
    def latest(self) -> int:
        return self._latest

    def is_current(self, generation: int) -> bool:
        return generation == self._latest
