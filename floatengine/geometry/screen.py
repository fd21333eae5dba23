"""
Display geometry shared by every floater on one display.

Tracks the display size, rotation, cutout safe insets and system-chrome
offsets, and derives the per-floater limit rects from them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from floatengine.core.config import DeviceProfile
from floatengine.core.types import Rect, round_half_up

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Limits:
    move: Rect       # clamp while the pointer is down
    position: Rect   # legal resting rect for the anchor


class ScreenGeometry:
    def __init__(
        self,
        device: DeviceProfile,
        width: int,
        height: int,
        real_width: Optional[int] = None,
        real_height: Optional[int] = None,
        rotation: int = 0,
    ) -> None:
        self.device = device
        self.width = int(width)
        self.height = int(height)
        self.real_width = int(real_width if real_width is not None else width)
        self.real_height = int(real_height if real_height is not None else height)
        self.rotation = rotation
        self.is_portrait = self.height >= self.width

        self.safe_insets = Rect()
        self.status_bar_height = device.status_bar_height
        self.nav_bar_v_offset = 0
        self.nav_bar_h_offset = 0
        self.touch_x_offset = 0
        self.touch_y_offset = 0

    # ---------------------- inputs ----------------------

    def update_display(
        self,
        width: int,
        height: int,
        real_width: Optional[int] = None,
        real_height: Optional[int] = None,
        rotation: Optional[int] = None,
    ) -> bool:
        """Apply a new display size. Returns True if anything changed."""
        new_real_w = int(real_width if real_width is not None else width)
        new_real_h = int(real_height if real_height is not None else height)
        new_rotation = self.rotation if rotation is None else rotation
        changed = (
            (self.width, self.height, self.real_width, self.real_height, self.rotation)
            != (int(width), int(height), new_real_w, new_real_h, new_rotation)
        )
        self.width = int(width)
        self.height = int(height)
        self.real_width = new_real_w
        self.real_height = new_real_h
        self.rotation = new_rotation
        return changed

    def set_safe_insets(self, insets: Optional[Rect]) -> None:
        self.safe_insets = insets if insets is not None else Rect()

    def update_system_layout(
        self,
        is_status_bar_hidden: bool,
        is_nav_bar_hidden: bool,
        is_portrait: bool,
        window_rect: Rect,
    ) -> None:
        self.is_portrait = is_portrait
        self._update_status_bar_height(is_status_bar_hidden, is_portrait)
        self._update_touch_x_offset(is_nav_bar_hidden, window_rect.left)
        # top cutout pushes touch coordinates down in portrait only
        self.touch_y_offset = self.safe_insets.top if is_portrait else 0
        self._update_nav_bar_offset(is_nav_bar_hidden, is_portrait, window_rect)
        logger.debug(
            "system layout: status=%d nav_v=%d nav_h=%d touch=(%d,%d)",
            self.status_bar_height, self.nav_bar_v_offset, self.nav_bar_h_offset,
            self.touch_x_offset, self.touch_y_offset,
        )

    def _update_status_bar_height(self, hidden: bool, is_portrait: bool) -> None:
        d = self.device
        if hidden:
            self.status_bar_height = 0
            return
        if self.safe_insets.top != 0:
            # the cutout already removed the status bar from the display height
            self.status_bar_height = 0 if is_portrait else d.status_bar_rotated_height
            return
        self.status_bar_height = d.status_bar_height if is_portrait else d.status_bar_rotated_height

    def _update_touch_x_offset(self, nav_hidden: bool, window_left: int) -> None:
        if self.safe_insets.bottom != 0:
            self.touch_x_offset = window_left
            return
        # navigation bar shown on the left side (reverse landscape)
        if not nav_hidden and window_left > 0:
            self.touch_x_offset = self.device.navigation_bar_rotated_height
        else:
            self.touch_x_offset = 0

    def _update_nav_bar_offset(self, nav_hidden: bool, is_portrait: bool, window_rect: Rect) -> None:
        d = self.device
        base = d.navigation_bar_height
        soft = d.has_soft_navigation_bar
        observed = max(0, self.real_height - window_rect.bottom) if window_rect.bottom else 0
        diff = base - observed

        if not nav_hidden:
            # autohide bars: trust the measurement only when it contradicts the baseline
            if (diff != 0 and base == 0) or (not soft and base != 0):
                self.nav_bar_v_offset = 0 if soft else -observed
            else:
                self.nav_bar_v_offset = 0
            self.nav_bar_h_offset = 0
            return

        if is_portrait:
            self.nav_bar_v_offset = 0 if (not soft and base != 0) else base
            self.nav_bar_h_offset = 0
            return

        # landscape: tablets keep the bar at the bottom, phones move it to the side
        if d.is_tablet:
            self.nav_bar_v_offset = base
            self.nav_bar_h_offset = 0
        else:
            self.nav_bar_v_offset = 0
            rotated = d.navigation_bar_rotated_height
            self.nav_bar_h_offset = 0 if (not soft and rotated != 0) else rotated

    # ---------------------- derived ----------------------

    def limits(self, w: int, h: int, over_margin: int = 0) -> Limits:
        move = Rect(
            -w,
            -h * 2,
            self.width + w + self.nav_bar_h_offset,
            self.height + h + self.nav_bar_v_offset,
        )
        position = Rect(
            -over_margin,
            0,
            self.width - w + over_margin + self.nav_bar_h_offset,
            self.height - self.status_bar_height - h + self.nav_bar_v_offset,
        ).pinned()
        return Limits(move=move, position=position)

    def anchor_from_touch(self, raw_x: float, raw_y: float, local_x: float, local_y: float, h: int) -> Tuple[int, int]:
        x = int(raw_x - local_x - self.touch_x_offset)
        y = int(self.height + self.nav_bar_v_offset - (raw_y - local_y + h - self.touch_y_offset))
        return x, y

    def raw_top_left(self, x: int, y: int, h: int) -> Tuple[int, int]:
        """Inverse of anchor_from_touch for a zero local offset."""
        return (
            x + self.touch_x_offset,
            self.height + self.nav_bar_v_offset - y - h + self.touch_y_offset,
        )


def remap(x: int, y: int, old: Rect, new: Rect) -> Tuple[int, int]:
    """Keep a resting anchor at the same relative spot when the limits change."""
    nx = round_half_up(x * new.width / old.width) if old.width else new.left
    ny = round_half_up(y * new.height / old.height) if old.height else new.top
    cx, cy = new.clamp(nx, ny)
    return int(cx), int(cy)
