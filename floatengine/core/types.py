"""
floatengine: CORE CONTRACTS

Shared value types for every layer of the engine.

Coordinate spaces:
- raw:    top-left origin screen pixels, as delivered by the pointer source.
- local:  pixels relative to a floater's top-left corner.
- anchor: integer pixels, x from the left edge, y from the BOTTOM edge of the
          display. Floater positions and limit rects live in this space.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple


# ============================================================
# Geometry primitives
# ============================================================

Point = Tuple[int, int]


def round_half_up(v: float) -> int:
    return int(math.floor(v + 0.5))


def clamp(v, lo, hi):
    if v < lo:
        return lo
    if v > hi:
        return hi
    return v


@dataclass(frozen=True)
class Rect:
    left: int = 0
    top: int = 0
    right: int = 0
    bottom: int = 0

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @property
    def center(self) -> Tuple[float, float]:
        return (self.left + self.right) / 2.0, (self.top + self.bottom) / 2.0

    def is_empty(self) -> bool:
        return self.left >= self.right or self.top >= self.bottom

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.right and self.top <= y <= self.bottom

    def intersects(self, other: "Rect") -> bool:
        # strict overlap: touching edges do not count
        return (
            self.left < other.right and other.left < self.right
            and self.top < other.bottom and other.top < self.bottom
        )

    def clamp(self, x: float, y: float) -> Tuple[float, float]:
        return clamp(x, self.left, self.right), clamp(y, self.top, self.bottom)

    def pinned(self) -> "Rect":
        """Collapse an inverted rect onto its left/top edge."""
        right = self.right if self.right >= self.left else self.left
        bottom = self.bottom if self.bottom >= self.top else self.top
        if right == self.right and bottom == self.bottom:
            return self
        return Rect(self.left, self.top, right, bottom)


# ============================================================
# Enums
# ============================================================

class MoveDirection(str, Enum):
    DEFAULT = "DEFAULT"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    NONE = "NONE"
    NEAREST = "NEAREST"
    THROWN = "THROWN"

    @classmethod
    def _missing_(cls, value):
        # anything unrecognised behaves like DEFAULT
        if isinstance(value, str):
            for member in cls:
                if member.value == value.upper():
                    return member
        return cls.DEFAULT


class FloaterPhase(str, Enum):
    NORMAL = "NORMAL"
    INTERSECTING = "INTERSECTING"
    FINISHING = "FINISHING"


class PointerAction(str, Enum):
    DOWN = "DOWN"
    MOVE = "MOVE"
    UP = "UP"
    CANCEL = "CANCEL"


class DisplayMode(str, Enum):
    SHOW_ALWAYS = "SHOW_ALWAYS"
    HIDE_ALWAYS = "HIDE_ALWAYS"
    HIDE_FULLSCREEN = "HIDE_FULLSCREEN"


class Shape(str, Enum):
    CIRCLE = "CIRCLE"
    RECTANGLE = "RECTANGLE"

    @property
    def factor(self) -> float:
        return 1.0 if self is Shape.CIRCLE else 1.4142


class TrashPhase(str, Enum):
    HIDDEN = "HIDDEN"
    OPENING = "OPENING"
    OPEN = "OPEN"
    CLOSING = "CLOSING"
    FORCE_CLOSING = "FORCE_CLOSING"


class TrashAnimation(str, Enum):
    NONE = "NONE"
    OPEN = "OPEN"
    CLOSE = "CLOSE"
    FORCE_CLOSE = "FORCE_CLOSE"


# ============================================================
# Environment -> Engine
# ============================================================

@dataclass(frozen=True)
class PointerEvent:
    """
    A single pointer sample for one floater.

    down_time_ms identifies the gesture: every event of one gesture carries
    the timestamp of its DOWN.
    """
    action: PointerAction
    raw_x: float
    raw_y: float
    local_x: float
    local_y: float
    down_time_ms: int
    event_time_ms: int

    @property
    def is_release(self) -> bool:
        return self.action in (PointerAction.UP, PointerAction.CANCEL)
