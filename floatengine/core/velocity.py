from __future__ import annotations

from collections import deque
from typing import Optional, Tuple

HORIZON_MS = 100
MAX_SAMPLES = 20


class VelocityTracker:
    """
    Pointer velocity from recent samples.

    Least-squares slope over the samples inside a short horizon, so a single
    jittery sample does not dominate the release velocity.
    """

    def __init__(self, horizon_ms: int = HORIZON_MS):
        self.horizon_ms = horizon_ms
        self._samples: deque = deque(maxlen=MAX_SAMPLES)

    def clear(self):
        self._samples.clear()

    def __len__(self) -> int:
        return len(self._samples)

    def add_movement(self, t_ms: int, x: float, y: float) -> None:
        if self._samples and t_ms < self._samples[-1][0]:
            # out of order sample: start over from here
            self._samples.clear()
        self._samples.append((t_ms, float(x), float(y)))

    def compute(self, max_velocity: float | None = None) -> Optional[Tuple[float, float]]:
        """Velocity in px/s, or None when there is nothing to estimate from."""
        if len(self._samples) < 2:
            return None

        newest = self._samples[-1][0]
        window = [s for s in self._samples if newest - s[0] <= self.horizon_ms]
        if len(window) < 2:
            return 0.0, 0.0

        n = float(len(window))
        mean_t = sum(s[0] for s in window) / n
        var_t = sum((s[0] - mean_t) ** 2 for s in window)
        if var_t <= 0.0:
            # every sample at the same instant
            return 0.0, 0.0

        mean_x = sum(s[1] for s in window) / n
        mean_y = sum(s[2] for s in window) / n
        cov_x = sum((s[0] - mean_t) * (s[1] - mean_x) for s in window)
        cov_y = sum((s[0] - mean_t) * (s[2] - mean_y) for s in window)

        # px/ms -> px/s
        vx = cov_x / var_t * 1000.0
        vy = cov_y / var_t * 1000.0

        if max_velocity is not None:
            vx = max(-max_velocity, min(max_velocity, vx))
            vy = max(-max_velocity, min(max_velocity, vy))
        return vx, vy
