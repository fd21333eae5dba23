from __future__ import annotations

import itertools
import logging
from typing import Dict, List, Optional, Tuple

from floatengine.controller.floater import Floater
from floatengine.controller.trash import TrashTarget
from floatengine.core.config import BARE_DEVICE, DEFAULT_PRESET, DeviceProfile, FloaterOptions, Preset
from floatengine.core.looper import Looper
from floatengine.core.ports import FloatingViewListener, Haptics, NullHaptics, NullListener, Renderer
from floatengine.core.types import (
    DisplayMode,
    FloaterPhase,
    PointerAction,
    PointerEvent,
    Rect,
    TrashAnimation,
)
from floatengine.geometry.screen import ScreenGeometry

logger = logging.getLogger(__name__)


class FloatingManager:
    """
    Owns every floater on one display plus the trash target.

    Floaters live in an arena keyed by integer id; scheduled messages carry
    only the id and are dropped once the id no longer resolves. All entry
    points first run the looper up to the event time, handle the input, then
    flush anything posted for that same instant.
    """

    def __init__(
        self,
        renderer: Renderer,
        listener: Optional[FloatingViewListener] = None,
        haptics: Optional[Haptics] = None,
        device: DeviceProfile = BARE_DEVICE,
        preset: Preset = DEFAULT_PRESET,
        display_size: Tuple[int, int] = (1080, 1920),
        real_size: Optional[Tuple[int, int]] = None,
        rotation: int = 0,
        now_ms: int = 0,
    ) -> None:
        self.renderer = renderer
        self.listener = listener if listener is not None else NullListener()
        self.haptics = haptics if haptics is not None else NullHaptics()
        self.device = device
        self.preset = preset

        self.looper = Looper(now_ms)
        real_w, real_h = real_size if real_size is not None else (None, None)
        self.geometry = ScreenGeometry(device, display_size[0], display_size[1], real_w, real_h, rotation)
        self.trash = TrashTarget(
            preset.trash,
            device.density,
            display_size,
            self.looper,
            self._resolve_trash,
            renderer,
            listener=self,
        )

        self.floaters: Dict[int, Floater] = {}
        self._ids = itertools.count(1)
        self.active_id: Optional[int] = None
        self.display_mode = DisplayMode.SHOW_ALWAYS
        self.attached = True
        # set on DOWN, cleared on release; guards against a MOVE arriving
        # right after a rotation with no DOWN behind it
        self._move_accept = False
        self._last_layout: Optional[tuple] = None

    # ---------------------- arena ----------------------

    def _resolve(self, floater_id: int) -> Optional[Floater]:
        return self.floaters.get(floater_id)

    def _resolve_trash(self, _owner_id: int) -> Optional[TrashTarget]:
        return self.trash if self.attached else None

    def floater(self, floater_id: int) -> Optional[Floater]:
        return self.floaters.get(floater_id)

    def ids(self) -> List[int]:
        return list(self.floaters)

    @property
    def active(self) -> Optional[Floater]:
        return self.floaters.get(self.active_id) if self.active_id is not None else None

    def add_floater(self, options: Optional[FloaterOptions] = None) -> int:
        options = options if options is not None else FloaterOptions()
        floater_id = next(self._ids)
        f = Floater(
            floater_id,
            options,
            self.preset,
            self.geometry,
            self.looper,
            self._resolve,
            self.renderer,
            self.listener,
        )
        self.floaters[floater_id] = f
        if self.active_id is None:
            self.active_id = floater_id
        if self.display_mode == DisplayMode.HIDE_ALWAYS:
            f.set_visible(False)
        logger.info("floater %d added (%s)", floater_id, options.move_direction.value)
        if options.size is not None:
            self.on_measure(floater_id, *options.size)
        return floater_id

    def remove_floater(self, floater_id: int) -> None:
        f = self.floaters.pop(floater_id, None)
        if f is None:
            logger.debug("remove for unknown floater %d", floater_id)
            return
        f.cancel()
        self.renderer.remove_floater(floater_id)
        logger.info("floater %d removed", floater_id)
        if self.active_id == floater_id:
            self.active_id = None
        if not self.floaters:
            logger.info("all floaters finished")
            self.listener.on_finish_all()

    def remove_all(self) -> None:
        for floater_id in list(self.floaters):
            f = self.floaters.pop(floater_id)
            f.cancel()
            self.renderer.remove_floater(floater_id)
        self.active_id = None
        self._move_accept = False
        self.trash.cancel()
        logger.info("all floaters removed")

    # ---------------------- environment -> engine ----------------------

    def tick(self, now_ms: int) -> int:
        return self.looper.tick(now_ms)

    def on_measure(self, floater_id: int, width: int, height: int) -> None:
        f = self.floaters.get(floater_id)
        if f is None:
            logger.debug("measure for unknown floater %d", floater_id)
            return
        f.on_measure(width, height)
        self.trash.set_target_size(f.width, f.height, f.options.shape)
        self.looper.tick(self.looper.now_ms)

    def on_pointer(self, floater_id: int, event: PointerEvent) -> bool:
        """Feed one pointer sample. Returns True if the floater consumed it."""
        self.looper.tick(event.event_time_ms)
        if not self.attached:
            logger.debug("pointer for floater %d while detached", floater_id)
            return False
        f = self.floaters.get(floater_id)
        if f is None:
            logger.debug("pointer for unknown floater %d", floater_id)
            return False
        consumed = f.handle(event)
        if consumed:
            self._on_touch(f, event)
        self.looper.tick(event.event_time_ms)
        return consumed

    def _on_touch(self, f: Floater, event: PointerEvent) -> None:
        action = event.action
        if action != PointerAction.DOWN and not self._move_accept:
            return

        state = f.phase
        self.active_id = f.id

        if action == PointerAction.DOWN:
            self._move_accept = True
            self.trash.set_target_size(f.width, f.height, f.options.shape)
        elif action == PointerAction.MOVE:
            intersecting = self.trash.enabled and f.drawing_rect().intersects(self.trash.hit_rect())
            was_intersecting = state == FloaterPhase.INTERSECTING
            if intersecting:
                cx, cy = self.trash.icon_center()
                f.set_intersecting(int(cx), int(cy))
            if intersecting and not was_intersecting:
                logger.debug("floater %d entered trash", f.id)
                self.haptics.vibrate(self.preset.trash.vibrate_ms)
                self.trash.set_scale_icon(True)
            elif not intersecting and was_intersecting:
                logger.debug("floater %d left trash", f.id)
                f.set_normal()
                self.trash.set_scale_icon(False)
        else:
            if state == FloaterPhase.INTERSECTING:
                f.set_finishing()
                self.trash.set_scale_icon(False)
            self._move_accept = False

        if state == FloaterPhase.INTERSECTING:
            rect = f.drawing_rect()
            tx, ty = rect.left, rect.top
        else:
            tx, ty = f.anchor
        self.trash.on_touch_floating_view(action, tx, ty, self.device.long_press_timeout_ms)

        if event.is_release:
            finishing = f.phase == FloaterPhase.FINISHING
            rx, ry = f.resting_anchor()
            self.listener.on_touch_finished(f.id, finishing, rx, ry)

    def on_layout_changed(
        self,
        window_rect: Rect,
        is_status_bar_hidden: bool,
        is_nav_bar_hidden: bool,
        is_portrait: bool,
        rotation: int,
        safe_insets: Optional[Rect] = None,
        display_size: Optional[Tuple[int, int]] = None,
        real_size: Optional[Tuple[int, int]] = None,
    ) -> None:
        g = self.geometry
        before = self._geometry_key()
        if safe_insets is not None:
            g.set_safe_insets(safe_insets)
        width, height = display_size if display_size is not None else (g.width, g.height)
        if real_size is not None:
            real_w, real_h = real_size
        elif display_size is not None:
            real_w, real_h = width, height
        else:
            real_w, real_h = g.real_width, g.real_height
        g.update_display(width, height, real_w, real_h, rotation)
        g.update_system_layout(is_status_bar_hidden, is_nav_bar_hidden, is_portrait, window_rect)
        self._last_layout = (window_rect, is_status_bar_hidden, is_nav_bar_hidden, is_portrait, rotation)

        if self._geometry_key() != before:
            logger.debug("geometry changed: %dx%d rot=%d", g.width, g.height, g.rotation)
            self.trash.update_layout(g.width, g.height)
            for f in list(self.floaters.values()):
                f.update_layout(rotated=f.rotation != g.rotation)

        self._on_screen_changed(is_status_bar_hidden)
        self.looper.tick(self.looper.now_ms)

    def _geometry_key(self) -> tuple:
        g = self.geometry
        return (
            g.width, g.height, g.real_width, g.real_height, g.rotation,
            g.status_bar_height, g.nav_bar_v_offset, g.nav_bar_h_offset,
            g.touch_x_offset, g.touch_y_offset, g.safe_insets,
        )

    def _on_screen_changed(self, is_fullscreen: bool) -> None:
        if self.display_mode != DisplayMode.HIDE_FULLSCREEN:
            return
        self._move_accept = False
        target = self.active
        state = target.phase if target is not None else FloaterPhase.NORMAL
        if state == FloaterPhase.NORMAL:
            for f in list(self.floaters.values()):
                f.set_visible(not is_fullscreen)
            self.trash.dismiss()
        elif state == FloaterPhase.INTERSECTING:
            target.set_finishing()
            self.trash.dismiss()

    def set_safe_insets(self, insets: Optional[Rect]) -> None:
        """New cutout insets; re-applies the last layout if there was one."""
        if self._last_layout is None:
            self.geometry.set_safe_insets(insets)
            return
        self.on_layout_changed(*self._last_layout, safe_insets=insets if insets is not None else Rect())

    def on_attach(self) -> None:
        if self.attached:
            return
        self.attached = True
        # the renderer lost everything; push the current state again
        for f in self.floaters.values():
            if not f.measured:
                continue
            self.renderer.add_floater(f.id, f.width, f.height)
            self.renderer.set_position(f.id, f.x, f.y)
            self.renderer.set_scale(f.id, f.scale)
            self.renderer.set_visibility(f.id, f.visible)
        self.renderer.trash_set_alpha(self.trash.alpha)
        self.renderer.trash_set_icon_translation(self.trash.tx, self.trash.ty)
        logger.info("attached with %d floaters", len(self.floaters))

    def on_detach(self) -> None:
        if not self.attached:
            return
        self.attached = False
        self._move_accept = False
        for f in self.floaters.values():
            f.cancel()
            f.set_draggable(True)
        self.trash.cancel()
        logger.info("detached")

    # ---------------------- settings ----------------------

    def set_display_mode(self, mode: DisplayMode) -> None:
        self.display_mode = DisplayMode(mode)
        if self.display_mode == DisplayMode.HIDE_ALWAYS:
            for f in self.floaters.values():
                f.set_visible(False)
            self.trash.dismiss()
        else:
            for f in self.floaters.values():
                f.set_visible(True)
        self.looper.tick(self.looper.now_ms)

    def set_trash_enabled(self, enabled: bool) -> None:
        self.trash.set_enabled(enabled)
        self.looper.tick(self.looper.now_ms)

    def is_trash_enabled(self) -> bool:
        return self.trash.enabled

    def set_fixed_trash_icon(self, width: int, height: int) -> None:
        self.trash.set_fixed_icon(width, height)

    def set_action_trash_icon(self, width: int, height: int) -> None:
        self.trash.set_action_icon(width, height)
        target = self.active
        if target is not None and target.measured:
            self.trash.set_target_size(target.width, target.height, target.options.shape)

    # ---------------------- trash listener ----------------------

    def on_trash_animation_started(self, animation: TrashAnimation) -> None:
        if animation in (TrashAnimation.CLOSE, TrashAnimation.FORCE_CLOSE):
            for f in self.floaters.values():
                f.set_draggable(False)

    def on_trash_animation_end(self, animation: TrashAnimation) -> None:
        target = self.active
        if target is not None and target.phase == FloaterPhase.FINISHING:
            self.remove_floater(target.id)
        for f in self.floaters.values():
            f.set_draggable(True)

    # ---------------------- queries ----------------------

    def floater_at(self, raw_x: float, raw_y: float) -> Optional[int]:
        """Topmost visible floater under a raw screen point."""
        for floater_id in reversed(list(self.floaters)):
            f = self.floaters[floater_id]
            if not (f.measured and f.visible):
                continue
            left, top = self.geometry.raw_top_left(f.x, f.y, f.height)
            if left <= raw_x < left + f.width and top <= raw_y < top + f.height:
                return floater_id
        return None

    def local_point(self, floater_id: int, raw_x: float, raw_y: float) -> Optional[Tuple[float, float]]:
        f = self.floaters.get(floater_id)
        if f is None:
            return None
        left, top = self.geometry.raw_top_left(f.x, f.y, f.height)
        return raw_x - left, raw_y - top
