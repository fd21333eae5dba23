from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from evdev import InputDevice, ecodes as e

from floatengine.core.types import PointerAction, PointerEvent

logger = logging.getLogger(__name__)


def monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


@dataclass(frozen=True)
class TouchSample:
    action: PointerAction
    x: float
    y: float
    t_ms: int


class TouchTranslator:
    """
    Single-pointer evdev stream -> DOWN/MOVE/UP samples in screen pixels.

    State accumulates between SYN_REPORTs; each report yields at most one
    sample. Multi-touch slot codes are read for slot 0 only.
    """

    def __init__(self, x_range: Tuple[int, int], y_range: Tuple[int, int], screen_size: Tuple[int, int]):
        self.x_range = x_range
        self.y_range = y_range
        self.screen_w, self.screen_h = screen_size

        self._raw_x = x_range[0]
        self._raw_y = y_range[0]
        self._touching = False
        self._reported_touching = False
        self._moved = False
        self._slot = 0

    def _scale(self, value: int, rng: Tuple[int, int], size: int) -> float:
        lo, hi = rng
        if hi <= lo:
            return 0.0
        return (value - lo) / float(hi - lo) * (size - 1)

    @property
    def position(self) -> Tuple[float, float]:
        return (
            self._scale(self._raw_x, self.x_range, self.screen_w),
            self._scale(self._raw_y, self.y_range, self.screen_h),
        )

    def feed(self, event, t_ms: int) -> Optional[TouchSample]:
        if event.type == e.EV_KEY and event.code == e.BTN_TOUCH:
            self._touching = event.value != 0
            return None
        if event.type == e.EV_ABS:
            if event.code == e.ABS_MT_SLOT:
                self._slot = event.value
            elif event.code in (e.ABS_X, e.ABS_MT_POSITION_X) and self._slot == 0:
                self._moved |= event.value != self._raw_x
                self._raw_x = event.value
            elif event.code in (e.ABS_Y, e.ABS_MT_POSITION_Y) and self._slot == 0:
                self._moved |= event.value != self._raw_y
                self._raw_y = event.value
            return None
        if event.type == e.EV_SYN and event.code == e.SYN_REPORT:
            return self._report(t_ms)
        return None

    def _report(self, t_ms: int) -> Optional[TouchSample]:
        x, y = self.position
        moved, self._moved = self._moved, False
        if self._touching and not self._reported_touching:
            self._reported_touching = True
            return TouchSample(PointerAction.DOWN, x, y, t_ms)
        if not self._touching and self._reported_touching:
            self._reported_touching = False
            return TouchSample(PointerAction.UP, x, y, t_ms)
        if self._touching and moved:
            return TouchSample(PointerAction.MOVE, x, y, t_ms)
        return None


class EvdevTouchSource:
    """
    Reads a touchscreen and routes its samples to the floater under the finger.
    """

    def __init__(self, manager, device: InputDevice, clock: Callable[[], int] = monotonic_ms):
        self.manager = manager
        self.device = device
        self.clock = clock

        ax = device.absinfo(e.ABS_X)
        ay = device.absinfo(e.ABS_Y)
        g = manager.geometry
        self.translator = TouchTranslator((ax.min, ax.max), (ay.min, ay.max), (g.width, g.height))

        self._target: Optional[int] = None
        self._down_ms = 0

    @classmethod
    def open(cls, manager, path: str) -> "EvdevTouchSource":
        dev = InputDevice(path)
        logger.info("touch source %s (%s)", path, dev.name)
        return cls(manager, dev)

    def route(self, sample: TouchSample) -> bool:
        m = self.manager
        if sample.action == PointerAction.DOWN:
            self._target = m.floater_at(sample.x, sample.y)
            self._down_ms = sample.t_ms
            if self._target is None:
                return False
        if self._target is None:
            return False

        local = m.local_point(self._target, sample.x, sample.y)
        if local is None:
            self._target = None
            return False
        event = PointerEvent(
            action=sample.action,
            raw_x=sample.x,
            raw_y=sample.y,
            local_x=local[0],
            local_y=local[1],
            down_time_ms=self._down_ms,
            event_time_ms=sample.t_ms,
        )
        consumed = m.on_pointer(self._target, event)
        if event.is_release:
            self._target = None
        return consumed

    def poll(self) -> int:
        """Drain pending device events without blocking. Returns samples routed."""
        routed = 0
        try:
            for ev in self.device.read():
                sample = self.translator.feed(ev, self.clock())
                if sample is not None:
                    self.route(sample)
                    routed += 1
        except BlockingIOError:
            pass
        return routed

    def run(self, frame_s: float = 0.016) -> None:
        try:
            while True:
                self.poll()
                self.manager.tick(self.clock())
                time.sleep(frame_s)  # ~60Hz loop
        except KeyboardInterrupt:
            logger.info("touch source stopped")
        finally:
            self.device.close()
