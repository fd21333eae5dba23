"""
The trash target: a gradient strip along the bottom edge with an icon that
pops up while a floater is held, and swallows floaters dropped onto it.

Trash coordinates follow the floaters' anchor space. The icon sits in a slot
centered at the bottom of the screen; its translation is measured from that
slot with positive dy pointing down, so dy == slot height means fully hidden.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol, Tuple

from floatengine.core.config import TrashTuning
from floatengine.core.interpolators import OvershootInterpolator
from floatengine.core.looper import Handler, Looper
from floatengine.core.ports import Renderer
from floatengine.core.types import PointerAction, Rect, Shape, TrashAnimation, TrashPhase

logger = logging.getLogger(__name__)

SCALE = "scale"


class TrashListener(Protocol):
    def on_trash_animation_started(self, animation: TrashAnimation) -> None: ...
    def on_trash_animation_end(self, animation: TrashAnimation) -> None: ...


def _dispatch(trash: "TrashTarget", what) -> None:
    if what == SCALE:
        trash.on_scale_frame()
    else:
        trash.on_animation_frame(what)


class TrashTarget:
    def __init__(
        self,
        tuning: TrashTuning,
        density: float,
        screen_size: Tuple[int, int],
        looper: Looper,
        resolve: Callable[[int], Optional["TrashTarget"]],
        renderer: Renderer,
        listener: Optional[TrashListener] = None,
    ) -> None:
        self.tuning = tuning
        self.density = density
        self.looper = looper
        self.renderer = renderer
        self.listener = listener
        self.handler = Handler(looper, -1, resolve, _dispatch)
        self.enabled = True

        self.screen_w, self.screen_h = screen_size
        self.background_height = int(tuning.background_height_dp * density)
        icon = int(tuning.icon_size_dp * density)
        self.fixed_icon_size: Tuple[int, int] = (icon, icon)
        self.action_icon_size: Tuple[int, int] = (0, 0)
        self.action_padding: Tuple[int, int] = (0, 0)
        self.action_max_scale = 1.0
        self.action_scale = 1.0

        self.alpha = 0.0
        self.tx = 0.0
        self.ty = 0.0
        self.limit = Rect()
        self.sticky_range = 0.0

        # follow target: the active floater's position and size
        self.target_x = 0.0
        self.target_y = 0.0
        self.target_w = 0.0
        self.target_h = 0.0

        self.started = TrashAnimation.NONE
        self._first: set = set()
        self._start_ms = 0
        self._start_alpha = 0.0
        self._start_ty = 0.0

        self._scale_from = 1.0
        self._scale_to = 1.0
        self._scale_start_ms: Optional[int] = None
        self._scale_interp = OvershootInterpolator(tuning.icon_scale_tension)
        self._overshoot = OvershootInterpolator(tuning.overshoot_tension)

        self._update_limit()
        # start hidden below the slot
        self.ty = float(self.slot_size[1])

    # ---------------------- layout ----------------------

    def has_action_icon(self) -> bool:
        return self.action_icon_size[0] != 0 and self.action_icon_size[1] != 0

    @property
    def _icon_view(self) -> Tuple[int, int, int, int]:
        """(view_w, view_h, pad_h, pad_v) of the icon used for hit testing."""
        if self.has_action_icon():
            ph, pv = self.action_padding
            w, h = self.action_icon_size
            return w + 2 * ph, h + 2 * pv, ph, pv
        w, h = self.fixed_icon_size
        return w, h, 0, 0

    @property
    def slot_size(self) -> Tuple[int, int]:
        vw, vh, _, _ = self._icon_view
        fw, fh = self.fixed_icon_size
        return max(vw, fw), max(vh, fh)

    @property
    def slot_x(self) -> float:
        return (self.screen_w - self.slot_size[0]) / 2.0

    def _update_limit(self) -> None:
        d = self.density
        slot_h = self.slot_size[1]
        offset_x = self.tuning.move_limit_offset_x_dp * d
        self.limit = Rect(
            int(-offset_x),
            int((slot_h - self.background_height) / 2 - self.tuning.move_limit_top_offset_dp * d),
            int(offset_x),
            slot_h,
        )
        self.sticky_range = self.background_height * self.tuning.sticky_range

    def update_layout(self, screen_w: int, screen_h: int) -> None:
        self.screen_w, self.screen_h = screen_w, screen_h
        self._update_limit()

    def set_fixed_icon(self, width: int, height: int) -> None:
        self.fixed_icon_size = (int(width), int(height))
        self._update_limit()

    def set_action_icon(self, width: int, height: int) -> None:
        self.action_icon_size = (int(width), int(height))
        self._update_limit()

    def set_target_size(self, width: float, height: float, shape: Shape) -> None:
        """Size the enlarged action icon so it covers the held floater."""
        self.target_w, self.target_h = float(width), float(height)
        if not self.has_action_icon():
            return
        bw, bh = self.action_icon_size
        self.action_max_scale = max(width / bw * shape.factor, height / bh * shape.factor)
        ph = max(int((self.action_max_scale - 1.0) * bw / 2 + 0.5), 0)
        pv = max(int((self.action_max_scale - 1.0) * bh / 2 + 0.5), 0)
        if (ph, pv) != self.action_padding:
            self.action_padding = (ph, pv)
            self.renderer.trash_set_action_icon_padding(ph, pv)
            self._update_limit()

    # ---------------------- hit testing ----------------------

    def icon_box(self) -> Tuple[float, float, float, float]:
        """Content left x, content bottom y, content w, content h."""
        vw, vh, ph, pv = self._icon_view
        x = self.slot_x + self.tx + ph
        y = self.slot_size[1] - self.ty - pv - (vh - 2 * pv)
        return x, y, vw - 2 * ph, vh - 2 * pv

    def hit_rect(self) -> Rect:
        x, y, w, h = self.icon_box()
        d = self.density
        return Rect(
            int(x - self.tuning.capture_horizontal_dp * d),
            -max(self.background_height, self.slot_size[1]),
            int(x + w + self.tuning.capture_horizontal_dp * d),
            int(y + h + self.tuning.capture_vertical_dp * d),
        )

    def icon_center(self) -> Tuple[float, float]:
        x, y, w, h = self.icon_box()
        return x + w / 2, y + h / 2

    # ---------------------- state ----------------------

    @property
    def phase(self) -> TrashPhase:
        if self.started == TrashAnimation.FORCE_CLOSE:
            return TrashPhase.FORCE_CLOSING
        if self.started == TrashAnimation.CLOSE:
            return TrashPhase.CLOSING
        if self.started == TrashAnimation.OPEN:
            elapsed = self.looper.now_ms - self._start_ms
            if elapsed >= self.tuning.open_start_delay_ms + self.tuning.open_duration_ms:
                return TrashPhase.OPEN
            return TrashPhase.OPENING
        if self.handler.has(TrashAnimation.OPEN):
            return TrashPhase.OPENING
        return TrashPhase.HIDDEN

    def set_enabled(self, enabled: bool) -> None:
        if enabled == self.enabled:
            return
        self.enabled = enabled
        if not enabled:
            self.dismiss()

    def on_touch_floating_view(self, action: PointerAction, x: float, y: float, long_press_timeout_ms: int) -> None:
        if not self.enabled:
            return
        if action == PointerAction.DOWN:
            self.target_x, self.target_y = x, y
            self.handler.remove(TrashAnimation.CLOSE)
            self._send_first(TrashAnimation.OPEN, long_press_timeout_ms)
        elif action == PointerAction.MOVE:
            self.target_x, self.target_y = x, y
            if self.started != TrashAnimation.OPEN:
                self._send_first(TrashAnimation.OPEN, 0)
        else:
            self.handler.remove(TrashAnimation.OPEN)
            self._send_first(TrashAnimation.CLOSE, 0)

    def _send_first(self, animation: TrashAnimation, delay_ms: int) -> None:
        self.handler.remove(animation)
        self._first.add(animation)
        self.handler.send(animation, delay_ms)

    def dismiss(self) -> None:
        """Collapse whatever is running into an immediate, silent hide."""
        self.handler.remove(TrashAnimation.OPEN)
        self.handler.remove(TrashAnimation.CLOSE)
        self._first.clear()
        self._begin(TrashAnimation.FORCE_CLOSE)
        self._set_alpha(0.0)
        self._set_translation(self.tx, float(self.limit.bottom))
        self._end(TrashAnimation.FORCE_CLOSE)
        self._set_scale_immediately(False)

    def _begin(self, animation: TrashAnimation) -> None:
        self._start_ms = self.looper.now_ms
        self._start_alpha = self.alpha
        self._start_ty = self.ty
        self.started = animation
        logger.debug("trash %s started", animation.value)
        if self.listener is not None:
            self.listener.on_trash_animation_started(animation)

    def _end(self, animation: TrashAnimation) -> None:
        self.started = TrashAnimation.NONE
        logger.debug("trash %s ended", animation.value)
        if self.listener is not None:
            self.listener.on_trash_animation_end(animation)

    def on_animation_frame(self, animation: TrashAnimation) -> None:
        if not self.enabled:
            return
        if animation in self._first:
            self._first.discard(animation)
            self._begin(animation)
        elapsed = self.looper.now_ms - self._start_ms
        t = self.tuning

        if animation == TrashAnimation.OPEN:
            if self.alpha < 1.0:
                rate = min(elapsed / float(t.background_duration_ms), 1.0)
                self._set_alpha(min(self._start_alpha + rate, 1.0))
            if elapsed >= t.open_start_delay_ms:
                lim = self.limit
                position_x = (self.target_x + self.target_w) / (self.screen_w + self.target_w) * lim.width + lim.left
                y_rate = min(2 * (self.target_y + self.target_h) / (self.screen_h + self.target_h), 1.0)
                sticky = self.sticky_range * y_rate + lim.height - self.sticky_range
                time_rate = min((elapsed - t.open_start_delay_ms) / float(t.open_duration_ms), 1.0)
                position_y = lim.bottom - sticky * self._overshoot(time_rate)
                self._set_translation(position_x, position_y)
            self.handler.send(animation, t.refresh_ms)
            return

        alpha_rate = min(elapsed / float(t.background_duration_ms), 1.0)
        self._set_alpha(max(self._start_alpha - alpha_rate, 0.0))
        move_rate = min(elapsed / float(t.close_duration_ms), 1.0)
        if alpha_rate < 1.0 or move_rate < 1.0:
            self._set_translation(self.tx, self._start_ty + self.limit.height * move_rate)
            self.handler.send(animation, t.refresh_ms)
        else:
            self._set_translation(self.tx, float(self.limit.bottom))
            self._end(TrashAnimation.CLOSE)

    def _set_alpha(self, alpha: float) -> None:
        if alpha != self.alpha:
            self.alpha = alpha
            self.renderer.trash_set_alpha(alpha)

    def _set_translation(self, dx: float, dy: float) -> None:
        if (dx, dy) != (self.tx, self.ty):
            self.tx, self.ty = dx, dy
            self.renderer.trash_set_icon_translation(dx, dy)

    # ---------------------- action icon scale ----------------------

    def set_scale_icon(self, entering: bool) -> None:
        if not self.has_action_icon():
            return
        self._scale_from = self.action_scale
        self._scale_to = self.action_max_scale if entering else 1.0
        self._scale_start_ms = self.looper.now_ms
        self.handler.remove(SCALE)
        self.handler.send(SCALE, 0)

    def _set_scale_immediately(self, entering: bool) -> None:
        self.handler.remove(SCALE)
        self._scale_start_ms = None
        self._apply_scale(self.action_max_scale if entering else 1.0)

    def on_scale_frame(self) -> None:
        if self._scale_start_ms is None:
            return
        rate = min((self.looper.now_ms - self._scale_start_ms) / float(self.tuning.icon_scale_duration_ms), 1.0)
        if rate >= 1.0:
            self._scale_start_ms = None
            self._apply_scale(self._scale_to)
            return
        self._apply_scale(self._scale_from + (self._scale_to - self._scale_from) * self._scale_interp(rate))
        self.handler.send(SCALE, self.tuning.refresh_ms)

    def _apply_scale(self, scale: float) -> None:
        if scale != self.action_scale:
            self.action_scale = scale
            self.renderer.trash_set_action_icon_scale(scale)

    def cancel(self) -> None:
        self.handler.remove()
