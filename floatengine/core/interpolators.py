from __future__ import annotations
import math


def capture_curve(t: float) -> float:
    """
    Touch-follow easing: quick sine rise with a small overshoot,
    then a parabola that settles at 1.0.
    """
    if t <= 0.4:
        # y=0.55sin(8.0564x-π/2)+0.55
        return 0.55 * math.sin(8.0564 * t - math.pi / 2) + 0.55
    # y=4(0.417x-0.341)^2-4(0.417-0.341)^2+1
    return 4 * (0.417 * t - 0.341) ** 2 - 4 * (0.417 - 0.341) ** 2 + 1


class OvershootInterpolator:
    """Flings forward past the end and comes back. Higher tension, bigger overshoot."""

    def __init__(self, tension: float = 2.0):
        self.tension = float(tension)

    def __call__(self, t: float) -> float:
        t -= 1.0
        return t * t * ((self.tension + 1.0) * t + self.tension) + 1.0
