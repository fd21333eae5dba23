from types import SimpleNamespace

import pytest

evdev = pytest.importorskip("evdev")
from evdev import InputEvent, ecodes as e  # noqa: E402

from floatengine.controller.manager import FloatingManager  # noqa: E402
from floatengine.core.config import BARE_DEVICE, FloaterOptions  # noqa: E402
from floatengine.core.types import PointerAction  # noqa: E402
from floatengine.render.recorder import RecordingRenderer  # noqa: E402
from floatengine.sensor.evdev_touch import EvdevTouchSource, TouchTranslator  # noqa: E402

# device ranges of 2^n units over 2^n + 1 pixels scale exactly
W, H = 1025, 2049


def key(code, value):
    return InputEvent(0, 0, e.EV_KEY, code, value)


def abs_(code, value):
    return InputEvent(0, 0, e.EV_ABS, code, value)


def syn():
    return InputEvent(0, 0, e.EV_SYN, e.SYN_REPORT, 0)


def feed_all(tr, events, t_ms=0):
    out = [tr.feed(ev, t_ms) for ev in events]
    return [s for s in out if s is not None]


def translator():
    # one device unit per pixel keeps the numbers readable
    return TouchTranslator((0, 1024), (0, 2048), (W, H))


def test_press_move_lift():
    tr = translator()
    (down,) = feed_all(tr, [key(e.BTN_TOUCH, 1), abs_(e.ABS_X, 50), abs_(e.ABS_Y, 50), syn()], 10)
    assert (down.action, down.x, down.y, down.t_ms) == (PointerAction.DOWN, 50, 50, 10)

    assert feed_all(tr, [syn()]) == []

    (move,) = feed_all(tr, [abs_(e.ABS_X, 250), abs_(e.ABS_Y, 550), syn()])
    assert (move.action, move.x, move.y) == (PointerAction.MOVE, 250, 550)

    (up,) = feed_all(tr, [key(e.BTN_TOUCH, 0), syn()])
    assert (up.action, up.x, up.y) == (PointerAction.UP, 250, 550)


def test_other_slots_are_ignored():
    tr = translator()
    feed_all(tr, [key(e.BTN_TOUCH, 1), abs_(e.ABS_MT_POSITION_X, 10), abs_(e.ABS_MT_POSITION_Y, 10), syn()])
    samples = feed_all(tr, [abs_(e.ABS_MT_SLOT, 1), abs_(e.ABS_MT_POSITION_X, 700), syn()])
    assert samples == []
    assert tr.position == (10, 10)


def test_degenerate_range_maps_to_zero():
    tr = TouchTranslator((5, 5), (0, 2048), (W, H))
    (down,) = feed_all(tr, [key(e.BTN_TOUCH, 1), abs_(e.ABS_X, 5), syn()])
    assert down.x == 0.0


class FakeDevice:
    def __init__(self):
        self.batches = []
        self.closed = False

    def absinfo(self, code):
        return SimpleNamespace(min=0, max=W - 1 if code == e.ABS_X else H - 1)

    def read(self):
        if not self.batches:
            raise BlockingIOError
        return iter(self.batches.pop(0))

    def close(self):
        self.closed = True


class Consumer:
    def __init__(self):
        self.finished = []

    def on_click(self, floater_id, child_index):
        pass

    def on_long_click(self, floater_id, child_index):
        pass

    def on_touch_finished(self, floater_id, is_finishing, x, y):
        self.finished.append((floater_id, is_finishing, x, y))

    def on_finish_all(self):
        pass


def make_source():
    consumer = Consumer()
    m = FloatingManager(RecordingRenderer(), consumer, device=BARE_DEVICE, display_size=(W, H))
    fid = m.add_floater(FloaterOptions(size=(100, 100)))
    m.tick(1000)
    clock = [2000]
    dev = FakeDevice()
    src = EvdevTouchSource(m, dev, clock=lambda: clock[0])
    return src, dev, clock, m, fid, consumer


def test_source_routes_a_drag_to_the_floater_under_the_finger():
    src, dev, clock, m, fid, consumer = make_source()

    dev.batches.append([key(e.BTN_TOUCH, 1), abs_(e.ABS_X, 50), abs_(e.ABS_Y, 50), syn()])
    assert src.poll() == 1

    clock[0] = 2050
    dev.batches.append([abs_(e.ABS_X, 250), abs_(e.ABS_Y, 550), syn()])
    src.poll()

    clock[0] = 2100
    dev.batches.append([key(e.BTN_TOUCH, 0), syn()])
    src.poll()

    assert consumer.finished == [(fid, False, 0, 1449)]
    m.tick(3000)
    assert m.floater(fid).anchor == (0, 1449)


def test_press_outside_floaters_goes_nowhere():
    src, dev, clock, m, fid, consumer = make_source()
    dev.batches.append([key(e.BTN_TOUCH, 1), abs_(e.ABS_X, 500), abs_(e.ABS_Y, 500), syn()])
    dev.batches.append([abs_(e.ABS_X, 50), abs_(e.ABS_Y, 50), syn()])
    dev.batches.append([key(e.BTN_TOUCH, 0), syn()])
    for _ in range(3):
        src.poll()
    assert consumer.finished == []
    assert m.floater(fid).anchor == (0, 1949)


def test_poll_with_nothing_pending():
    src, dev, clock, m, fid, consumer = make_source()
    assert src.poll() == 0
