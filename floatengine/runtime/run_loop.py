from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from floatengine.controller.manager import FloatingManager
from floatengine.core.config import PHONE, FloaterOptions
from floatengine.core.types import PointerAction, PointerEvent
from floatengine.render.recorder import RecordingRenderer
from floatengine.render.snapshot import save_snapshot
from floatengine.runtime.profile import active_preset

logger = logging.getLogger(__name__)


class LoggingListener:
    """Consumer that just reports what happened."""

    def __init__(self):
        self.finished = False

    def on_click(self, floater_id: int, child_index: int) -> None:
        logger.info("click floater=%d child=%d", floater_id, child_index)

    def on_long_click(self, floater_id: int, child_index: int) -> None:
        logger.info("long click floater=%d child=%d", floater_id, child_index)

    def on_touch_finished(self, floater_id: int, is_finishing: bool, x: int, y: int) -> None:
        logger.info("touch finished floater=%d finishing=%s rest=(%d,%d)", floater_id, is_finishing, x, y)

    def on_finish_all(self) -> None:
        logger.info("all floaters gone")
        self.finished = True


@dataclass
class FakeSource:
    """
    Deterministic scripted finger.

    Each stroke is (begin_ms, length_ms, aim): press the floater's center at
    begin, slide toward the aim point, lift at begin + length. "edge" aims at
    the right half of the screen, "trash" at the trash icon.
    """
    manager: FloatingManager
    floater_id: int
    start_ms: int
    strokes: Tuple[Tuple[int, int, str], ...] = ((1000, 600, "edge"), (2500, 1200, "trash"))

    _index: int = 0
    _down_ms: Optional[int] = None
    _from: Tuple[float, float] = (0.0, 0.0)
    _local: Tuple[float, float] = (0.0, 0.0)

    def _aim(self, kind: str) -> Tuple[float, float]:
        g = self.manager.geometry
        if kind == "trash":
            cx, cy = self.manager.trash.icon_center()
            # anchor space -> raw
            return cx, g.height + g.nav_bar_v_offset - cy + g.touch_y_offset
        return g.width * 0.7, g.height * 0.45

    def event(self, t_ms: int) -> Optional[PointerEvent]:
        if self._index >= len(self.strokes):
            return None
        begin, length, kind = self.strokes[self._index]
        dt = t_ms - self.start_ms
        if dt < begin:
            return None

        f = self.manager.floater(self.floater_id)
        if f is None:
            self._index = len(self.strokes)
            return None

        if self._down_ms is None:
            g = self.manager.geometry
            left, top = g.raw_top_left(f.x, f.y, f.height)
            self._local = (f.width / 2.0, f.height / 2.0)
            self._from = (left + self._local[0], top + self._local[1])
            self._down_ms = t_ms
            return self._make(PointerAction.DOWN, self._from, t_ms)

        rate = min((dt - begin) / float(length), 1.0)
        ax, ay = self._aim(kind)
        fx, fy = self._from
        point = (fx + (ax - fx) * rate, fy + (ay - fy) * rate)
        if rate < 1.0:
            return self._make(PointerAction.MOVE, point, t_ms)

        ev = self._make(PointerAction.UP, point, t_ms)
        self._index += 1
        self._down_ms = None
        return ev

    def _make(self, action: PointerAction, point: Tuple[float, float], t_ms: int) -> PointerEvent:
        lx, ly = self._local
        return PointerEvent(
            action=action,
            raw_x=point[0],
            raw_y=point[1],
            local_x=lx,
            local_y=ly,
            down_time_ms=self._down_ms if self._down_ms is not None else t_ms,
            event_time_ms=t_ms,
        )


@dataclass
class DemoResult:
    renderer: RecordingRenderer
    listener: LoggingListener
    snapshots: List[Path] = field(default_factory=list)


def run(
    duration_ms: int = 5000,
    frame_ms: int = 16,
    snapshot_dir: Optional[str] = None,
    snapshot_every_ms: int = 500,
    realtime: bool = False,
) -> DemoResult:
    renderer = RecordingRenderer()
    listener = LoggingListener()
    manager = FloatingManager(
        renderer,
        listener,
        device=PHONE,
        preset=active_preset(),
        display_size=(1080, 2208),
        real_size=(1080, 2340),
    )
    fid = manager.add_floater(FloaterOptions(size=(168, 168)))
    manager.set_action_trash_icon(168, 168)

    src = FakeSource(manager=manager, floater_id=fid, start_ms=0)
    result = DemoResult(renderer=renderer, listener=listener)
    out_dir = Path(snapshot_dir) if snapshot_dir else None
    if out_dir is not None:
        out_dir.mkdir(parents=True, exist_ok=True)

    logger.info("demo loop (FAKE SOURCE) for %d ms", duration_ms)
    t = 0
    try:
        while t <= duration_ms and not listener.finished:
            ev = src.event(t)
            if ev is not None:
                manager.on_pointer(fid, ev)
            manager.tick(t)

            if out_dir is not None and t % snapshot_every_ms < frame_ms:
                path = out_dir / f"frame_{t:05d}.png"
                save_snapshot(manager, renderer, path)
                result.snapshots.append(path)

            t += frame_ms
            if realtime:
                time.sleep(frame_ms / 1000.0)  # ~60Hz loop
    except KeyboardInterrupt:
        logger.info("demo interrupted")
    return result


if __name__ == "__main__":
    run()
