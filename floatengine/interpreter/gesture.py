from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Protocol, Tuple

from floatengine.core.config import DeviceProfile, GestureTuning
from floatengine.core.looper import Handler
from floatengine.core.types import PointerAction, PointerEvent
from floatengine.core.velocity import VelocityTracker

logger = logging.getLogger(__name__)

LONG_PRESS = "long_press"


class GestureState(str, Enum):
    IDLE = "IDLE"
    DOWN = "DOWN"
    LONG_PRESSED = "LONG_PRESSED"
    MOVE_ACCEPTED = "MOVE_ACCEPTED"


class GestureSink(Protocol):
    """What the interpreter drives. Implemented by Floater."""

    children: int

    def accepts_touch(self) -> bool: ...
    def on_press(self, event: PointerEvent) -> None: ...
    def on_drag(self, event: PointerEvent) -> None: ...
    def on_release(self, event: PointerEvent, moved: bool, velocity: Optional[Tuple[float, float]]) -> None: ...
    def on_click(self, child_index: int) -> None: ...
    def on_long_click(self, child_index: int) -> None: ...


class GestureInterpreter:
    """
    Per-floater pointer state machine.

    IDLE -> DOWN -> (LONG_PRESSED | MOVE_ACCEPTED) -> IDLE

    handle() returns True when the event should also reach the controller.
    A move still inside the slop is swallowed; so is anything gated out.
    """

    def __init__(self, sink: GestureSink, timers: Handler, tuning: GestureTuning, device: DeviceProfile) -> None:
        self.sink = sink
        self.timers = timers
        self.tuning = tuning
        self.device = device

        self.state: GestureState = GestureState.IDLE
        self.down_time_ms: int | None = None
        self.down_x = 0.0
        self.down_y = 0.0
        self.local_x = 0.0
        self.local_y = 0.0
        self.velocity = VelocityTracker()

    @property
    def slop_px(self) -> float:
        return self.tuning.move_threshold_dp * self.device.density

    @property
    def long_press_ms(self) -> int:
        return int(self.device.long_press_timeout_ms * self.tuning.long_press_factor)

    @property
    def move_accepted(self) -> bool:
        return self.state == GestureState.MOVE_ACCEPTED

    @property
    def in_gesture(self) -> bool:
        return self.state != GestureState.IDLE

    def handle(self, event: PointerEvent) -> bool:
        if not self.sink.accepts_touch():
            logger.debug("touch gated: %s dt=%d", event.action.value, event.down_time_ms)
            return False

        if event.action == PointerAction.DOWN:
            self._on_down(event)
            return True

        if event.down_time_ms != self.down_time_ms:
            logger.debug("stale gesture: %d != %s", event.down_time_ms, self.down_time_ms)
            return False

        if event.action == PointerAction.MOVE:
            return self._on_move(event)
        self._on_up(event)
        return True

    def _on_down(self, event: PointerEvent) -> None:
        self.down_time_ms = event.down_time_ms
        self.down_x, self.down_y = event.raw_x, event.raw_y
        self.local_x, self.local_y = event.local_x, event.local_y
        self.state = GestureState.DOWN

        self.velocity.clear()
        self.velocity.add_movement(event.event_time_ms, event.raw_x, event.raw_y)

        self.timers.remove(LONG_PRESS)
        self.timers.send(LONG_PRESS, self.long_press_ms)
        self.sink.on_press(event)

    def _on_move(self, event: PointerEvent) -> bool:
        self.velocity.add_movement(event.event_time_ms, event.raw_x, event.raw_y)
        if not self.move_accepted:
            slop = self.slop_px
            if abs(event.raw_x - self.down_x) < slop and abs(event.raw_y - self.down_y) < slop:
                return False
            self.state = GestureState.MOVE_ACCEPTED
            self.timers.remove(LONG_PRESS)
        self.sink.on_drag(event)
        return True

    def _on_up(self, event: PointerEvent) -> None:
        self.timers.remove(LONG_PRESS)
        was_long = self.state == GestureState.LONG_PRESSED
        moved = self.move_accepted
        self.velocity.add_movement(event.event_time_ms, event.raw_x, event.raw_y)
        velocity = self.velocity.compute(self.device.max_fling_velocity) if moved else None
        self.state = GestureState.IDLE

        self.sink.on_release(event, moved, velocity)
        if not moved and not was_long:
            for i in range(self.sink.children):
                self.sink.on_click(i)

    def on_long_press_timeout(self) -> None:
        if self.state != GestureState.DOWN:
            return
        self.state = GestureState.LONG_PRESSED
        for i in range(self.sink.children):
            self.sink.on_long_click(i)

    def invalidate(self) -> None:
        """Forget the gesture in flight; its remaining events become stale."""
        self.timers.remove(LONG_PRESS)
        self.state = GestureState.IDLE
        self.down_time_ms = None
        self.velocity.clear()
