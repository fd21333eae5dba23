from __future__ import annotations

import logging
import os

from floatengine.runtime.run_loop import run


def main() -> None:
    """Run the scripted demo: one drag to the edge, then a drop on the trash."""
    log_level = os.getenv("FLOATENGINE_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=log_level, format="%(levelname)s %(name)s %(message)s")

    result = run(
        snapshot_dir=os.getenv("FLOATENGINE_SNAPSHOT_DIR") or None,
        realtime=os.getenv("FLOATENGINE_REALTIME") == "1",
    )
    print(f"floatengine demo: {len(result.renderer.calls)} renderer calls, "
          f"finished={result.listener.finished}, snapshots={len(result.snapshots)}")


if __name__ == "__main__":
    main()
