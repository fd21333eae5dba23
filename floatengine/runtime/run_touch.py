from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Tuple

from floatengine.controller.manager import FloatingManager
from floatengine.core.config import PHONE, FloaterOptions
from floatengine.render.recorder import RecordingRenderer
from floatengine.render.snapshot import save_snapshot
from floatengine.runtime.profile import active_preset
from floatengine.runtime.run_loop import LoggingListener
from floatengine.sensor.evdev_touch import EvdevTouchSource, monotonic_ms

logger = logging.getLogger(__name__)

DEFAULT_DEVICE = "/dev/input/event0"


def parse_size(text: str) -> Tuple[int, int]:
    """'1080x2208' -> (1080, 2208)."""
    w, _, h = text.lower().partition("x")
    size = (int(w), int(h))
    if size[0] <= 0 or size[1] <= 0:
        raise ValueError(f"bad display size: {text!r}")
    return size


def build(
    now_ms: int,
    display_size: Tuple[int, int] = (1080, 2208),
    floaters: int = 1,
    icon_px: int = 168,
) -> Tuple[FloatingManager, RecordingRenderer, LoggingListener]:
    renderer = RecordingRenderer()
    listener = LoggingListener()
    manager = FloatingManager(
        renderer,
        listener,
        device=PHONE,
        preset=active_preset(),
        display_size=display_size,
        now_ms=now_ms,
    )
    for i in range(floaters):
        anchor = (0, max(0, display_size[1] // 2 - i * icon_px * 2))
        manager.add_floater(FloaterOptions(size=(icon_px, icon_px), initial_anchor=anchor))
    manager.set_action_trash_icon(icon_px, icon_px)
    return manager, renderer, listener


def main(device_path: Optional[str] = None) -> None:
    log_level = os.getenv("FLOATENGINE_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=log_level, format="%(levelname)s %(name)s %(message)s")

    path = device_path or os.getenv("FLOATENGINE_TOUCH_DEVICE", DEFAULT_DEVICE)
    size = parse_size(os.getenv("FLOATENGINE_DISPLAY", "1080x2208"))
    count = int(os.getenv("FLOATENGINE_FLOATERS", "1"))

    manager, renderer, listener = build(monotonic_ms(), size, count)
    src = EvdevTouchSource.open(manager, path)
    logger.info("touch runtime on %s (%dx%d, %d floaters). Ctrl+C to quit.", path, size[0], size[1], count)
    try:
        src.run()
    finally:
        snapshot_dir = os.getenv("FLOATENGINE_SNAPSHOT_DIR")
        if snapshot_dir:
            out = Path(snapshot_dir)
            out.mkdir(parents=True, exist_ok=True)
            save_snapshot(manager, renderer, out / "touch_last.png")
            logger.info("saved last frame to %s", out / "touch_last.png")


if __name__ == "__main__":
    main()
