"""Trailing-edge debounce on top of a single-shot QTimer."""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import QObject, QTimer, Signal


class Debouncer(QObject):
    """Collapses bursts of :meth:`trigger` calls into one trailing call.

    Each trigger restarts the quiet-period timer; *callback* (and the
    ``fired`` signal) run once the timer expires without a new trigger.
    The timer belongs to this object and dies with it.
    """

    fired = Signal()

    def __init__(self, interval_ms: int, callback: Callable[[], None] | None = None,
                 parent=None):
        super().__init__(parent)
        self._callback = callback
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(max(0, int(interval_ms)))
        self._timer.timeout.connect(self._fire)

    @property
    def interval(self) -> int:
        return self._timer.interval()

    def set_interval(self, interval_ms: int):
        self._timer.setInterval(max(0, int(interval_ms)))

    @property
    def pending(self) -> bool:
        return self._timer.isActive()

    def trigger(self):
        self._timer.start()

    def cancel(self):
        self._timer.stop()

    def flush(self):
        """Fire now if a call is pending."""
        if self._timer.isActive():
            self._timer.stop()
            self._fire()

    def _fire(self):
        if self._callback is not None:
            self._callback()
        self.fired.emit()
