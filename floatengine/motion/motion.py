"""
Per-floater animation slots and the release planner.

A floater has one X slot and one Y slot. Starting an animator evicts whatever
held any of its axes, so at most one animator ever drives an axis.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from floatengine.core.config import EdgeTuning, PhysicsTuning
from floatengine.core.interpolators import OvershootInterpolator
from floatengine.core.types import MoveDirection, Rect
from floatengine.motion.animators import (
    X,
    Y,
    CaptureAnimator,
    EdgeTween,
    FlingAnimator,
    SpringAnimator,
)
from floatengine.motion.edge import goal_for, nearer

logger = logging.getLogger(__name__)


class FloaterMotion:
    def __init__(self):
        self._slots: Dict[str, object] = {X: None, Y: None}

    def start(self, animator) -> None:
        for axis in animator.axes:
            held = self._slots[axis]
            if held is not None and held is not animator:
                self._evict(held)
        for axis in animator.axes:
            self._slots[axis] = animator

    def _evict(self, animator) -> None:
        for axis, held in self._slots.items():
            if held is animator:
                self._slots[axis] = None

    def animators(self) -> List[object]:
        seen: List[object] = []
        for axis in (X, Y):
            a = self._slots[axis]
            if a is not None and a not in seen:
                seen.append(a)
        return seen

    def on_axis(self, axis: str):
        return self._slots[axis]

    @property
    def capture(self) -> Optional[CaptureAnimator]:
        for a in self.animators():
            if isinstance(a, CaptureAnimator):
                return a
        return None

    def cancel(self) -> None:
        self._slots = {X: None, Y: None}

    def cancel_release(self) -> None:
        """Stop edge/physics animators, keep touch-follow."""
        for a in self.animators():
            if not isinstance(a, CaptureAnimator):
                self._evict(a)

    def stop_capture(self) -> None:
        cap = self.capture
        if cap is not None:
            self._evict(cap)

    def is_active(self, kind: Optional[str] = None) -> bool:
        if kind is None:
            return bool(self.animators())
        return any(a.kind == kind for a in self.animators())

    def frame_interval_ms(self) -> Optional[int]:
        frames = [a.frame_ms for a in self.animators()]
        return min(frames) if frames else None

    def step(self, now_ms: int, anchor: Tuple[int, int]) -> Tuple[int, int]:
        x, y = anchor
        for a in self.animators():
            s = a.tick(now_ms)
            if s.x is not None:
                x = s.x
            if s.y is not None:
                y = s.y
            if s.done:
                self._evict(a)
        return x, y

    def goal(self, anchor: Tuple[int, int]) -> Tuple[int, int]:
        """Where the running animators will leave the anchor, where known."""
        x, y = anchor
        for a in self.animators():
            gx, gy = a.goal()
            if gx is not None:
                x = gx
            if gy is not None:
                y = gy
        return x, y


def plan_release(
    direction: MoveDirection,
    use_physics: bool,
    start: Tuple[int, int],
    anchor: Tuple[int, int],
    limit: Rect,
    velocity: Optional[Tuple[float, float]],
    max_fling_velocity: float,
    now_ms: int,
    edge: EdgeTuning,
    physics: PhysicsTuning,
) -> Tuple[Tuple[int, int], List[object]]:
    """
    Choose the animators that carry a released floater to rest.

    start is the touch-derived release position; anchor is where the floater
    is drawn right now. Returns the anchor to commit immediately and the
    animators to start.
    """
    sx, sy = start
    throw = max_fling_velocity / physics.throw_divisor
    vx = velocity[0] if velocity is not None else None
    gx, gy = goal_for(direction, sx, sy, limit, vx, throw)

    if use_physics and velocity is not None and direction != MoveDirection.NEAREST:
        return anchor, _physics(direction, gx, sy, anchor, limit, velocity, max_fling_velocity, now_ms, physics)

    interp = OvershootInterpolator(edge.overshoot_tension)
    if gx == sx:
        tween = EdgeTween(Y, sy, gy, now_ms, edge.duration_ms, interp, edge.frame_ms)
        return (sx, sy), [tween]
    tween = EdgeTween(X, sx, gx, now_ms, edge.duration_ms, interp, edge.frame_ms)
    return (sx, gy), [tween]


def _physics(
    direction: MoveDirection,
    goal_x: int,
    start_y: int,
    anchor: Tuple[int, int],
    limit: Rect,
    velocity: Tuple[float, float],
    max_fling_velocity: float,
    now_ms: int,
    physics: PhysicsTuning,
) -> List[object]:
    ax, ay = anchor
    vx, vy = velocity
    max_vx = max_fling_velocity / physics.x_velocity_divisor
    max_vy = max_fling_velocity / physics.y_velocity_divisor
    frame = physics.update_ms
    visible = physics.min_visible_change_px
    out: List[object] = []

    inside_x = limit.left < ax < limit.right
    if direction == MoveDirection.NONE and inside_x:
        fling_vx = min(max(vx, -max_vx), max_vx)
        out.append(FlingAnimator(X, ax, fling_vx, physics.fling_friction, limit.left, limit.right, now_ms, frame, visible))
    else:
        out.append(SpringAnimator(
            X, ax, vx, goal_x, physics.spring_x_damping, physics.spring_x_stiffness, now_ms, frame, visible,
        ))

    # pointer y grows downward, anchor y grows upward
    anchor_vy = -min(max(vy, -max_vy), max_vy)
    if limit.top < ay < limit.bottom:
        out.append(FlingAnimator(Y, ay, anchor_vy, physics.fling_friction, limit.top, limit.bottom, now_ms, frame, visible))
    else:
        goal_y = nearer(start_y, limit.top, limit.bottom)
        out.append(SpringAnimator(
            Y, ay, anchor_vy, goal_y, physics.spring_y_damping, physics.spring_y_stiffness, now_ms, frame, visible,
        ))
    logger.debug("physics release: %s", ", ".join(f"{a.kind}:{a.axis}" for a in out))
    return out
