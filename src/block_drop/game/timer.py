

from __future__ import annotations


class TickTimer:
    """Periodic timer fed with elapsed milliseconds by the caller's frame loop.

    Nothing runs on its own: ``pop_due`` reports whether a tick fell due. A
    stopped timer never reports ticks.
    """

    def __init__(self, interval_ms: float) -> None:
        self.interval_ms = float(interval_ms)
        self.running = False
        self._accum = 0.0

    def start(self) -> None:
        self._accum = 0.0
        self.running = True

    def stop(self) -> None:
        self.running = False
        self._accum = 0.0

    def set_interval(self, interval_ms: float) -> None:
        self.interval_ms = float(interval_ms)
        # carry over at most one period
        self._accum = min(self._accum, self.interval_ms)

    def pop_due(self, elapsed_ms: float = 0.0) -> bool:
        """Add ``elapsed_ms`` and consume at most one due tick."""
        if not self.running:
            return False
        self._accum += elapsed_ms
        if self._accum >= self.interval_ms:
            self._accum -= self.interval_ms
            return True
        return False
