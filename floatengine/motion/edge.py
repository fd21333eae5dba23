from __future__ import annotations

from typing import Optional, Tuple

from floatengine.core.types import MoveDirection, Rect


def nearer(value: float, low: int, high: int) -> int:
    """Closer of two bounds; the midpoint itself goes to low."""
    return high if value > (low + high) / 2.0 else low


def goal_for(
    direction: MoveDirection,
    start_x: int,
    start_y: int,
    position_limit: Rect,
    velocity_x: Optional[float] = None,
    throw_threshold: float = 0.0,
) -> Tuple[int, int]:
    """
    Resting anchor for a release at (start_x, start_y).

    Only NEAREST may move the Y axis; every other policy keeps start_y.
    The result is clamped to position_limit.
    """
    lim = position_limit
    goal_x, goal_y = start_x, start_y

    if direction == MoveDirection.THROWN:
        if velocity_x is not None and velocity_x > throw_threshold:
            goal_x = lim.right
        elif velocity_x is not None and velocity_x < -throw_threshold:
            goal_x = lim.left
        else:
            goal_x = nearer(start_x, lim.left, lim.right)
    elif direction == MoveDirection.LEFT:
        goal_x = lim.left
    elif direction == MoveDirection.RIGHT:
        goal_x = lim.right
    elif direction == MoveDirection.NONE:
        goal_x = start_x
    elif direction == MoveDirection.NEAREST:
        horizontal = min(start_x, lim.width - start_x)
        vertical = min(start_y, lim.height - start_y)
        if horizontal < vertical:
            goal_x = nearer(start_x, lim.left, lim.right)
        else:
            goal_y = nearer(start_y, lim.top, lim.bottom)
    else:
        goal_x = nearer(start_x, lim.left, lim.right)

    gx, gy = lim.clamp(goal_x, goal_y)
    return int(gx), int(gy)
