"""Frame clock: turns wall-clock frame gaps into bounded simulation steps."""
from __future__ import annotations

import math

from config import MAX_FRAME_DELTA


class SimClock:
    """Monotonic simulated-time counter.

    A stalled frame (e.g. a backgrounded window) is clamped to
    ``max_delta`` so the simulation never tries to catch up in one jump.
    """

    def __init__(self, max_delta: float = MAX_FRAME_DELTA) -> None:
        self.max_delta = max_delta
        self.time: float = 0.0

    def frame_delta(self, elapsed: float) -> float:
        if isinstance(elapsed, bool) or not isinstance(elapsed, (int, float)):
            return 0.0
        if not math.isfinite(elapsed) or elapsed <= 0:
            return 0.0
        return min(float(elapsed), self.max_delta)

    def advance(self, delta: float) -> None:
        if delta > 0:
            self.time += delta
