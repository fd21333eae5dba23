from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


@dataclass(order=True)
class Message:
    when_ms: int
    seq: int
    handler: "Handler" = field(compare=False)
    what: Any = field(compare=False)


class Looper:
    """
    Single-threaded cooperative scheduler.

    Everything that would be a delayed UI-thread message (animation frames,
    long-press timers) is queued here and dispatched from tick(now_ms).
    A tick runs each due message once; frames that were missed are not
    replayed, animations read the clock instead.
    """

    def __init__(self, now_ms: int = 0):
        self.now_ms = now_ms
        self._queue: list[Message] = []
        self._seq = itertools.count()

    def enqueue(self, handler: "Handler", what, when_ms: int) -> None:
        heapq.heappush(self._queue, Message(when_ms=when_ms, seq=next(self._seq), handler=handler, what=what))

    def remove(self, handler: "Handler", what=None) -> None:
        before = len(self._queue)
        self._queue = [
            m for m in self._queue
            if not (m.handler is handler and (what is None or m.what == what))
        ]
        if len(self._queue) != before:
            heapq.heapify(self._queue)

    def has(self, handler: "Handler", what) -> bool:
        return any(m.handler is handler and m.what == what for m in self._queue)

    def next_due_ms(self) -> Optional[int]:
        return self._queue[0].when_ms if self._queue else None

    def __len__(self) -> int:
        return len(self._queue)

    def clear(self) -> None:
        self._queue.clear()

    def tick(self, now_ms: int) -> int:
        """Advance the clock and dispatch everything due. Returns messages run."""
        if now_ms > self.now_ms:
            self.now_ms = now_ms
        ran = 0
        while self._queue and self._queue[0].when_ms <= self.now_ms:
            msg = heapq.heappop(self._queue)
            msg.handler.dispatch(msg)
            ran += 1
        return ran


class Handler:
    """
    Posts messages on behalf of one owner, referenced by id only.

    The owner is looked up again at dispatch time; if it is gone the message
    is dropped together with every pending message of the same kind.
    """

    def __init__(
        self,
        looper: Looper,
        owner_id: int,
        resolve: Callable[[int], Any],
        callback: Callable[[Any, Any], None],
    ):
        self.looper = looper
        self.owner_id = owner_id
        self._resolve = resolve
        self._callback = callback

    def send(self, what, delay_ms: int = 0) -> None:
        self.looper.enqueue(self, what, self.looper.now_ms + max(0, int(delay_ms)))

    def send_at(self, what, when_ms: int) -> None:
        self.looper.enqueue(self, what, int(when_ms))

    def remove(self, what=None) -> None:
        self.looper.remove(self, what)

    def has(self, what) -> bool:
        return self.looper.has(self, what)

    def dispatch(self, msg: Message) -> None:
        owner = self._resolve(self.owner_id)
        if owner is None:
            logger.debug("dropping %s for missing owner %s", msg.what, self.owner_id)
            self.looper.remove(self, msg.what)
            return
        self._callback(owner, msg.what)
