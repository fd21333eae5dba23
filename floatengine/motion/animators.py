"""
Animators that drive a floater's anchor.

Each animator owns one or both axes and exposes the same contract:
tick(now_ms) -> Step. A Step carries the new value for each axis it owns
and whether the animator has finished.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from floatengine.core.config import CaptureTuning
from floatengine.core.interpolators import capture_curve
from floatengine.core.types import FloaterPhase, Rect, round_half_up

X = "x"
Y = "y"

# DynamicAnimation thresholds: value within 3/4 of a visible step,
# velocity scaled from that by 62.5 (1000 / 16 ms frame).
_VALUE_THRESHOLD_SCALE = 0.75
_VELOCITY_THRESHOLD_MULTIPLIER = 62.5
# DragForce unit friction
_UNIT_FRICTION = -4.2


@dataclass(frozen=True)
class Step:
    x: Optional[int] = None
    y: Optional[int] = None
    done: bool = False


def _axis_step(axis: str, value: int, done: bool) -> Step:
    if axis == X:
        return Step(x=value, done=done)
    return Step(y=value, done=done)


class CaptureAnimator:
    """
    Touch-follow. Pulls the anchor toward the finger, or toward the trash icon
    center while intersecting. Runs until stopped.
    """
    kind = "capture"
    axes = (X, Y)

    def __init__(self, tuning: CaptureTuning, anchor: Tuple[int, int], move_limit: Rect, size: Tuple[int, int]):
        self.capture_ms = tuning.capture_ms
        self.frame_ms = tuning.refresh_ms
        self.phase = FloaterPhase.NORMAL
        self.move_limit = move_limit
        self.size = size

        self._start_x, self._start_y = float(anchor[0]), float(anchor[1])
        # None: the curve is already complete, the anchor lands on the target
        self._start_ms: Optional[int] = None
        self.touch_x, self.touch_y = float(anchor[0]), float(anchor[1])
        self.center_x, self.center_y = 0.0, 0.0

    def update_touch(self, x: float, y: float) -> None:
        self.touch_x, self.touch_y = x, y

    def update_target_center(self, cx: float, cy: float) -> None:
        self.center_x, self.center_y = cx, cy

    def set_phase(self, phase: FloaterPhase, now_ms: int, anchor: Tuple[int, int]) -> bool:
        """Switch target mode; the curve restarts from the present anchor."""
        if phase == self.phase:
            return False
        self.phase = phase
        self._start_x, self._start_y = float(anchor[0]), float(anchor[1])
        self._start_ms = now_ms
        return True

    def target(self) -> Tuple[float, float]:
        w, h = self.size
        if self.phase == FloaterPhase.INTERSECTING:
            return self.center_x - w / 2.0, self.center_y - h / 2.0
        lim = self.move_limit
        tx = min(max(lim.left, int(self.touch_x)), lim.right)
        ty = min(max(lim.top, int(self.touch_y)), lim.bottom)
        return float(tx), float(ty)

    def rate(self, now_ms: int) -> float:
        if self._start_ms is None or self.capture_ms <= 0:
            return 1.0
        return min((now_ms - self._start_ms) / float(self.capture_ms), 1.0)

    def tick(self, now_ms: int) -> Step:
        if self.phase == FloaterPhase.FINISHING:
            return Step(done=True)
        s = capture_curve(self.rate(now_ms))
        tx, ty = self.target()
        x = int(self._start_x + (tx - self._start_x) * s)
        y = int(self._start_y + (ty - self._start_y) * s)
        return Step(x=x, y=y, done=False)

    def goal(self) -> Tuple[Optional[int], Optional[int]]:
        return None, None


class EdgeTween:
    """Fixed-duration tween of one axis through an easing curve."""
    kind = "edge"

    def __init__(
        self,
        axis: str,
        start: int,
        goal: int,
        start_ms: int,
        duration_ms: int,
        interpolator: Callable[[float], float],
        frame_ms: int = 17,
    ):
        self.axis = axis
        self.axes = (axis,)
        self.start = int(start)
        self.end = int(goal)
        self.start_ms = start_ms
        self.duration_ms = duration_ms
        self.interpolator = interpolator
        self.frame_ms = frame_ms

    def tick(self, now_ms: int) -> Step:
        if self.duration_ms <= 0:
            rate = 1.0
        else:
            rate = min(max((now_ms - self.start_ms) / float(self.duration_ms), 0.0), 1.0)
        if rate >= 1.0:
            return _axis_step(self.axis, self.end, True)
        value = int(self.start + (self.end - self.start) * self.interpolator(rate))
        return _axis_step(self.axis, value, False)

    def goal(self) -> Tuple[Optional[int], Optional[int]]:
        return (self.end, None) if self.axis == X else (None, self.end)


class SpringAnimator:
    """Damped harmonic spring toward a final position (closed-form per step)."""
    kind = "spring"

    def __init__(
        self,
        axis: str,
        start: float,
        velocity: float,
        final_position: float,
        damping_ratio: float,
        stiffness: float,
        start_ms: int,
        frame_ms: int = 10,
        min_visible_change: float = 1.0,
    ):
        self.axis = axis
        self.axes = (axis,)
        self.value = float(start)
        self.velocity = float(velocity)
        self.final_position = float(final_position)
        self.damping_ratio = float(damping_ratio)
        self.stiffness = float(stiffness)
        self.frame_ms = frame_ms
        self._last_ms = start_ms

        self.value_threshold = min_visible_change * _VALUE_THRESHOLD_SCALE
        self.velocity_threshold = self.value_threshold * _VELOCITY_THRESHOLD_MULTIPLIER

        self._natural = math.sqrt(self.stiffness)
        z = self.damping_ratio
        if z > 1.0:
            root = math.sqrt(z * z - 1.0)
            self._gamma_plus = -z * self._natural + self._natural * root
            self._gamma_minus = -z * self._natural - self._natural * root
        elif 0.0 <= z < 1.0:
            self._damped = self._natural * math.sqrt(1.0 - z * z)

    def _advance(self, dt_s: float) -> None:
        x0 = self.value - self.final_position
        v0 = self.velocity
        z = self.damping_ratio
        w = self._natural
        if z > 1.0:
            gm, gp = self._gamma_minus, self._gamma_plus
            coeff_a = x0 - (gm * x0 - v0) / (gm - gp)
            coeff_b = (gm * x0 - v0) / (gm - gp)
            disp = coeff_a * math.exp(gm * dt_s) + coeff_b * math.exp(gp * dt_s)
            vel = coeff_a * gm * math.exp(gm * dt_s) + coeff_b * gp * math.exp(gp * dt_s)
        elif z == 1.0:
            coeff_a = x0
            coeff_b = v0 + w * x0
            decay = math.exp(-w * dt_s)
            disp = (coeff_a + coeff_b * dt_s) * decay
            vel = (coeff_a + coeff_b * dt_s) * decay * -w + coeff_b * decay
        else:
            wd = self._damped
            cos_c = x0
            sin_c = (z * w * x0 + v0) / wd
            decay = math.exp(-z * w * dt_s)
            disp = decay * (cos_c * math.cos(wd * dt_s) + sin_c * math.sin(wd * dt_s))
            vel = disp * -w * z + decay * (-wd * cos_c * math.sin(wd * dt_s) + wd * sin_c * math.cos(wd * dt_s))
        self.value = disp + self.final_position
        self.velocity = vel

    def at_equilibrium(self) -> bool:
        return (
            abs(self.velocity) < self.velocity_threshold
            and abs(self.value - self.final_position) < self.value_threshold
        )

    def tick(self, now_ms: int) -> Step:
        dt = now_ms - self._last_ms
        if dt > 0:
            self._last_ms = now_ms
            self._advance(dt / 1000.0)
        if self.at_equilibrium():
            self.value = self.final_position
            self.velocity = 0.0
            return _axis_step(self.axis, round_half_up(self.value), True)
        return _axis_step(self.axis, round_half_up(self.value), False)

    def goal(self) -> Tuple[Optional[int], Optional[int]]:
        end = round_half_up(self.final_position)
        return (end, None) if self.axis == X else (None, end)


class FlingAnimator:
    """Velocity decays under friction; stops at a bound or when slow enough."""
    kind = "fling"

    def __init__(
        self,
        axis: str,
        start: float,
        velocity: float,
        friction: float,
        min_value: float,
        max_value: float,
        start_ms: int,
        frame_ms: int = 10,
        min_visible_change: float = 1.0,
    ):
        self.axis = axis
        self.axes = (axis,)
        self.min_value = float(min_value)
        self.max_value = float(max_value)
        self.value = min(max(float(start), self.min_value), self.max_value)
        self.velocity = float(velocity)
        self.friction = float(friction) * _UNIT_FRICTION
        self.frame_ms = frame_ms
        self._last_ms = start_ms
        self.velocity_threshold = min_visible_change * _VALUE_THRESHOLD_SCALE * _VELOCITY_THRESHOLD_MULTIPLIER

    def _advance(self, dt_s: float) -> None:
        v0 = self.velocity
        f = self.friction
        self.velocity = v0 * math.exp(dt_s * f)
        self.value = self.value - v0 / f + v0 / f * math.exp(f * dt_s)

    def tick(self, now_ms: int) -> Step:
        dt = now_ms - self._last_ms
        if dt > 0 and self.friction != 0.0:
            self._last_ms = now_ms
            self._advance(dt / 1000.0)
        self.value = min(max(self.value, self.min_value), self.max_value)
        done = (
            self.value <= self.min_value
            or self.value >= self.max_value
            or abs(self.velocity) < self.velocity_threshold
        )
        if done:
            self.velocity = 0.0
        return _axis_step(self.axis, round_half_up(self.value), done)

    def goal(self) -> Tuple[Optional[int], Optional[int]]:
        return None, None
