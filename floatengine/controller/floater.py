from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple

from floatengine.core.config import DeviceProfile, FloaterOptions, Preset
from floatengine.core.looper import Handler, Looper
from floatengine.core.ports import FloatingViewListener, Renderer
from floatengine.core.types import FloaterPhase, MoveDirection, PointerEvent, Rect
from floatengine.geometry.screen import Limits, ScreenGeometry, remap
from floatengine.interpreter.gesture import LONG_PRESS, GestureInterpreter
from floatengine.motion.animators import CaptureAnimator
from floatengine.motion.edge import goal_for
from floatengine.motion.motion import FloaterMotion, plan_release

logger = logging.getLogger(__name__)

FRAME = "frame"


def _dispatch(floater: "Floater", what) -> None:
    if what == FRAME:
        floater.on_frame()
    elif what == LONG_PRESS:
        floater.gesture.on_long_press_timeout()


class Floater:
    """
    One draggable icon.

    Owns its gesture interpreter and its animation slots, and runs its own
    frame loop through the shared looper. Positions are anchor space.
    """

    def __init__(
        self,
        floater_id: int,
        options: FloaterOptions,
        preset: Preset,
        geometry: ScreenGeometry,
        looper: Looper,
        resolve: Callable[[int], Optional["Floater"]],
        renderer: Renderer,
        listener: FloatingViewListener,
    ) -> None:
        self.id = floater_id
        self.options = options
        self.preset = preset
        self.geometry = geometry
        self.looper = looper
        self.renderer = renderer
        self.listener = listener

        self.handler = Handler(looper, floater_id, resolve, _dispatch)
        self.gesture = GestureInterpreter(self, self.handler, preset.gesture, geometry.device)
        self.motion = FloaterMotion()

        self.width = 0
        self.height = 0
        self.measured = False
        self.limits: Optional[Limits] = None
        self.x = 0
        self.y = 0
        self.touch_x = 0
        self.touch_y = 0
        self.scale = preset.gesture.scale_normal
        self.phase = FloaterPhase.NORMAL
        self.visible = True
        self.draggable = False
        self.initial_running = False
        self.rotation = geometry.rotation
        self.children = options.children

    @property
    def device(self) -> DeviceProfile:
        return self.geometry.device

    @property
    def anchor(self) -> Tuple[int, int]:
        return self.x, self.y

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def drawing_rect(self) -> Rect:
        """Touch-derived rect used for the trash hit test."""
        return Rect(self.touch_x, self.touch_y, self.touch_x + self.width, self.touch_y + self.height)

    def resting_anchor(self) -> Tuple[int, int]:
        return self.motion.goal(self.anchor)

    # ---------------------- measurement / layout ----------------------

    def on_measure(self, width: int, height: int) -> None:
        if self.options.size is not None:
            width, height = self.options.size
        width, height = max(0, int(width)), max(0, int(height))
        if self.measured and (width, height) == self.size:
            return
        self.width, self.height = width, height
        self.renderer.add_floater(self.id, width, height)
        if not self.measured:
            self.measured = True
            self._place_initial()
        else:
            self.update_layout(rotated=False)

    def _place_initial(self) -> None:
        g = self.geometry
        self.limits = g.limits(self.width, self.height, self.options.over_margin)
        if self.options.initial_anchor is not None:
            init = self.options.initial_anchor
        else:
            init = (0, g.height - g.status_bar_height - self.height)
        init = (int(init[0]), int(init[1]))
        self.rotation = g.rotation
        self.draggable = True
        self.touch_x, self.touch_y = init

        if self.options.move_direction == MoveDirection.NONE:
            cx, cy = self.limits.position.clamp(*init)
            self._commit(int(cx), int(cy))
            logger.debug("floater %d placed at %s", self.id, self.anchor)
            return

        self._commit(*init)
        self.initial_running = True
        self.move_to_edge(self.options.animate_initial_move, start=init)
        logger.debug("floater %d initial move from %s animated=%s", self.id, init, self.options.animate_initial_move)

    def update_layout(self, rotated: bool) -> None:
        """Recompute limits after a display or size change and re-seat the anchor."""
        if not self.measured:
            return
        old = self.limits.position if self.limits is not None else Rect()
        self.motion.cancel_release()
        self.limits = self.geometry.limits(self.width, self.height, self.options.over_margin)
        cap = self.motion.capture
        if cap is not None:
            cap.move_limit = self.limits.move
            cap.size = self.size

        if self.options.animate_initial_move and rotated:
            self.initial_running = False

        if self.initial_running and not rotated:
            cx, cy = self.limits.position.clamp(self.x, self.y)
            self.move_to_edge(True, start=(int(cx), int(cy)))
        elif self.gesture.move_accepted:
            self.move_to_edge(False, start=(self.touch_x, self.touch_y))
        else:
            # proportional spot first, then back onto the edge the policy wants
            self.move_to_edge(False, start=remap(self.x, self.y, old, self.limits.position))
        self.rotation = self.geometry.rotation

    # ---------------------- motion ----------------------

    def move_to_edge(
        self,
        animated: bool,
        start: Optional[Tuple[int, int]] = None,
        velocity: Optional[Tuple[float, float]] = None,
    ) -> None:
        if self.limits is None:
            return
        start = start if start is not None else self.anchor
        lim = self.limits.position
        if not animated:
            throw = self.device.max_fling_velocity / self.preset.physics.throw_divisor
            vx = velocity[0] if velocity is not None else None
            gx, gy = goal_for(self.options.move_direction, start[0], start[1], lim, vx, throw)
            self.motion.cancel_release()
            self._commit(gx, gy)
            self.initial_running = False
            return

        now = self.looper.now_ms
        immediate, animators = plan_release(
            self.options.move_direction,
            self.options.use_physics,
            start,
            self.anchor,
            lim,
            velocity,
            self.device.max_fling_velocity,
            now,
            self.preset.edge,
            self.preset.physics,
        )
        self._commit(*immediate)
        for a in animators:
            self.motion.start(a)
        self._schedule_frame(0)

    def _schedule_frame(self, delay_ms: int) -> None:
        self.handler.remove(FRAME)
        self.handler.send(FRAME, delay_ms)

    def on_frame(self) -> None:
        if not self.motion.is_active():
            return
        x, y = self.motion.step(self.looper.now_ms, self.anchor)
        self._commit(x, y)
        interval = self.motion.frame_interval_ms()
        if interval is not None:
            self.handler.send(FRAME, interval)
        elif self.initial_running:
            self.initial_running = False
            logger.debug("floater %d initial move done at %s", self.id, self.anchor)

    def _commit(self, x: int, y: int) -> None:
        if (x, y) == (self.x, self.y):
            return
        self.x, self.y = int(x), int(y)
        self.renderer.set_position(self.id, self.x, self.y)

    def _set_scale(self, scale: float) -> None:
        if scale == self.scale:
            return
        self.scale = scale
        self.renderer.set_scale(self.id, scale)

    # ---------------------- gesture sink ----------------------

    def accepts_touch(self) -> bool:
        return self.measured and self.visible and self.draggable and not self.initial_running

    def handle(self, event: PointerEvent) -> bool:
        return self.gesture.handle(event)

    def _update_touch(self, event: PointerEvent) -> Tuple[int, int]:
        self.touch_x, self.touch_y = self.geometry.anchor_from_touch(
            event.raw_x, event.raw_y, self.gesture.local_x, self.gesture.local_y, self.height,
        )
        return self.touch_x, self.touch_y

    def on_press(self, event: PointerEvent) -> None:
        self.motion.cancel()
        self._set_scale(self.preset.gesture.scale_pressed)
        capture = CaptureAnimator(self.preset.capture, self.anchor, self.limits.move, self.size)
        capture.phase = self.phase
        capture.update_touch(*self._update_touch(event))
        self.motion.start(capture)
        self._schedule_frame(0)

    def on_drag(self, event: PointerEvent) -> None:
        cap = self.motion.capture
        touch = self._update_touch(event)
        if cap is not None:
            cap.update_touch(*touch)

    def on_release(self, event: PointerEvent, moved: bool, velocity: Optional[Tuple[float, float]]) -> None:
        self._update_touch(event)
        self.motion.stop_capture()
        self._set_scale(self.preset.gesture.scale_normal)
        if moved:
            self.move_to_edge(True, start=(self.touch_x, self.touch_y), velocity=velocity)

    def on_click(self, child_index: int) -> None:
        self.listener.on_click(self.id, child_index)

    def on_long_click(self, child_index: int) -> None:
        self.listener.on_long_click(self.id, child_index)

    # ---------------------- controller-facing state ----------------------

    def set_intersecting(self, cx: float, cy: float) -> None:
        self.phase = FloaterPhase.INTERSECTING
        cap = self.motion.capture
        if cap is not None:
            cap.set_phase(FloaterPhase.INTERSECTING, self.looper.now_ms, self.anchor)
            cap.update_target_center(cx, cy)

    def set_normal(self) -> None:
        self.phase = FloaterPhase.NORMAL
        cap = self.motion.capture
        if cap is not None:
            cap.set_phase(FloaterPhase.NORMAL, self.looper.now_ms, self.anchor)
            cap.update_touch(self.touch_x, self.touch_y)

    def set_finishing(self) -> None:
        self.phase = FloaterPhase.FINISHING
        self.motion.cancel()
        self.handler.remove(FRAME)
        self.set_visible(False)

    def _abandon_gesture(self) -> None:
        if not self.gesture.in_gesture:
            return
        moved = self.gesture.move_accepted
        self.gesture.invalidate()
        self.motion.stop_capture()
        self._set_scale(self.preset.gesture.scale_normal)
        if moved:
            self.move_to_edge(False, start=(self.touch_x, self.touch_y))

    def set_visible(self, visible: bool) -> None:
        if not visible:
            self._abandon_gesture()
        if visible == self.visible:
            return
        self.visible = visible
        self.renderer.set_visibility(self.id, visible)

    def set_draggable(self, draggable: bool) -> None:
        if not draggable:
            self._abandon_gesture()
        self.draggable = draggable

    def cancel(self) -> None:
        """Drop every pending message and animation; used on removal."""
        self.gesture.invalidate()
        self.motion.cancel()
        self.handler.remove()
